"""
Player model with position catalog and typed attribute categories.

A Player is the canonical squad record. The match engine never mutates it;
it works on ``match_copy()`` instances that carry the in-match condition and
rating.
"""

import copy
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from .errors import MissingDataError


class Position(Enum):
    """
    Complete position catalog.

    Families used by the engine:
    - forward-like: ST, CF, RW, LW
    - defender-like: CB, LB, RB
    - central forward: ST, CF
    - wide forward: RW, LW
    - central midfield: CM, CDM, CAM
    """
    GK = "GK"
    LB = "LB"
    CB = "CB"
    RB = "RB"
    LWB = "LWB"
    RWB = "RWB"
    CDM = "CDM"
    CM = "CM"
    CAM = "CAM"
    LM = "LM"
    RM = "RM"
    LW = "LW"
    RW = "RW"
    ST = "ST"
    CF = "CF"


FORWARD_LIKE = frozenset({Position.ST, Position.CF, Position.RW, Position.LW})
DEFENDER_LIKE = frozenset({Position.CB, Position.LB, Position.RB})
CENTRAL_FORWARD = frozenset({Position.ST, Position.CF})
WIDE_FORWARD = frozenset({Position.RW, Position.LW})
CENTRAL_MIDFIELD = frozenset({Position.CM, Position.CDM, Position.CAM})


def position_family(position: Position) -> frozenset:
    """Return the substitution family of a position (empty if it has none)."""
    if position in FORWARD_LIKE:
        return FORWARD_LIKE
    if position in DEFENDER_LIKE:
        return DEFENDER_LIKE
    return frozenset()


class AttributeCategory(Enum):
    """Attribute groups a player record is split into."""
    TECHNICAL = "technical"
    MENTAL = "mental"
    PHYSICAL = "physical"
    GOALKEEPER = "goalkeeper"


@dataclass
class TechnicalAttributes:
    """Ball skills, 0-100."""
    finishing: float = 50.0
    shot_power: float = 50.0
    short_passing: float = 50.0
    dribbling: float = 50.0
    tackling: float = 50.0
    marking: float = 50.0
    heading: float = 50.0


@dataclass
class MentalAttributes:
    """Decision making and temperament, 0-100."""
    vision: float = 50.0
    aggression: float = 50.0
    composure: float = 50.0
    work_rate: float = 50.0
    positioning: float = 50.0


@dataclass
class PhysicalAttributes:
    """Athletic profile, 0-100."""
    pace: float = 50.0
    acceleration: float = 50.0
    agility: float = 50.0
    balance: float = 50.0
    strength: float = 50.0
    jumping: float = 50.0
    stamina: float = 50.0


@dataclass
class GoalkeeperAttributes:
    """Shot stopping skills, 0-100."""
    reflexes: float = 20.0
    handling: float = 20.0
    positioning: float = 20.0


# JSON keys are camelCase in club files
_JSON_ALIASES = {
    'shotPower': 'shot_power',
    'shortPassing': 'short_passing',
    'workRate': 'work_rate',
}

# Mean attribute profiles used when generating squads
_PROFILES: Dict[Position, Dict[str, float]] = {
    Position.GK: {"finishing": 20, "short_passing": 55, "dribbling": 25, "tackling": 25,
                  "vision": 50, "composure": 65, "pace": 45, "strength": 70,
                  "jumping": 70, "reflexes": 78, "handling": 75, "gk_positioning": 75},
    Position.CB: {"finishing": 30, "short_passing": 65, "dribbling": 45, "tackling": 80,
                  "marking": 80, "heading": 78, "positioning": 76, "pace": 60,
                  "strength": 80, "jumping": 75},
    Position.LB: {"finishing": 40, "short_passing": 70, "dribbling": 62, "tackling": 74,
                  "marking": 72, "positioning": 70, "pace": 78, "acceleration": 76,
                  "stamina": 78},
    Position.RB: {"finishing": 40, "short_passing": 70, "dribbling": 62, "tackling": 74,
                  "marking": 72, "positioning": 70, "pace": 78, "acceleration": 76,
                  "stamina": 78},
    Position.CDM: {"finishing": 50, "short_passing": 78, "tackling": 76, "marking": 72,
                   "vision": 70, "positioning": 74, "work_rate": 78, "strength": 74,
                   "stamina": 78},
    Position.CM: {"finishing": 62, "short_passing": 82, "dribbling": 70, "tackling": 62,
                  "vision": 78, "work_rate": 76, "composure": 70, "stamina": 78},
    Position.CAM: {"finishing": 74, "shot_power": 72, "short_passing": 82, "dribbling": 78,
                   "vision": 82, "composure": 72, "agility": 76},
    Position.LW: {"finishing": 72, "short_passing": 72, "dribbling": 80, "pace": 84,
                  "acceleration": 84, "agility": 80, "balance": 76},
    Position.RW: {"finishing": 72, "short_passing": 72, "dribbling": 80, "pace": 84,
                  "acceleration": 84, "agility": 80, "balance": 76},
    Position.ST: {"finishing": 84, "shot_power": 80, "dribbling": 72, "heading": 74,
                  "aggression": 70, "composure": 74, "pace": 78, "strength": 76},
}


def _normalise_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {_JSON_ALIASES.get(key, key): value for key, value in raw.items()}


def _category_from_dict(cls, raw: Optional[Mapping[str, Any]]):
    names = {f.name for f in fields(cls)}
    values = {k: float(v) for k, v in _normalise_keys(raw or {}).items() if k in names}
    return cls(**values)


class Player:
    """
    Football player record.

    The first entry of ``positions`` is the primary position. ``condition``
    and ``match_rating`` only change on match copies.
    """

    def __init__(self,
                 player_id: str,
                 name: str,
                 positions: List[Position],
                 technical: Optional[TechnicalAttributes] = None,
                 mental: Optional[MentalAttributes] = None,
                 physical: Optional[PhysicalAttributes] = None,
                 goalkeeper: Optional[GoalkeeperAttributes] = None,
                 height: float = 180.0,
                 current_rating: float = 70.0,
                 current_form: float = 7.0,
                 fitness: float = 100.0,
                 injured: bool = False,
                 suspended: bool = False):
        """
        Initialize player record.

        Args:
            player_id: Unique identifier
            name: Player name
            positions: Positions the player can fill, primary first
            technical: Technical attributes (defaults if None)
            mental: Mental attributes (defaults if None)
            physical: Physical attributes (defaults if None)
            goalkeeper: Goalkeeping attributes (defaults if None)
            height: Height in centimetres
            current_rating: Overall ability used for selection
            current_form: Recent form, roughly 1-10
            fitness: Pre-match fitness, 0-100
            injured: Unavailable through injury
            suspended: Unavailable through suspension
        """
        if not positions:
            raise MissingDataError(f"Player {name} has no positions")
        self.player_id = player_id
        self.name = name
        self.positions = list(positions)
        self.technical = technical or TechnicalAttributes()
        self.mental = mental or MentalAttributes()
        self.physical = physical or PhysicalAttributes()
        self.goalkeeper = goalkeeper or GoalkeeperAttributes()
        self.height = height
        self.current_rating = current_rating
        self.current_form = current_form
        self.fitness = fitness
        self.injured = injured
        self.suspended = suspended

        # Match state
        self.condition = 100.0
        self.match_rating = 6.0

    def __repr__(self) -> str:
        return f"Player({self.name!r}, {self.primary_position.value}, rating={self.current_rating:.0f})"

    @property
    def primary_position(self) -> Position:
        return self.positions[0]

    @property
    def available(self) -> bool:
        """True if the player can be picked for a match."""
        return not self.injured and not self.suspended

    def plays(self, position: Position) -> bool:
        return position in self.positions

    def category(self, category: AttributeCategory):
        """Return the attribute block for a category."""
        return getattr(self, category.value)

    def match_copy(self, rating: float = 6.0) -> 'Player':
        """
        Return a simulation-local copy starting at the player's fitness.

        Args:
            rating: Starting match rating for the copy

        Returns:
            Player: deep copy safe to mutate during a match
        """
        clone = copy.deepcopy(self)
        clone.condition = max(0.0, min(100.0, self.fitness))
        clone.match_rating = rating
        return clone

    def adjust_rating(self, delta: float) -> None:
        """Shift match rating, clamped to [1, 10]."""
        self.match_rating = max(1.0, min(10.0, self.match_rating + delta))

    def drain(self, amount: float) -> None:
        """Reduce condition, never below zero."""
        self.condition = max(0.0, self.condition - amount)

    def fatigue_rate(self, base: float) -> float:
        """
        Condition lost per minute of play.

        Stamina 50 drains at ``base``; every stamina point above or below
        that shifts the rate by 1%.
        """
        return base * (1.5 - self.physical.stamina / 100.0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Player':
        """
        Build a player from a club-file record.

        Raises:
            MissingDataError: if id, name or positions are missing/unknown
        """
        for key in ('id', 'name', 'positions'):
            if not data.get(key):
                raise MissingDataError(f"Player record is missing '{key}': {data.get('name', '?')}")
        try:
            positions = [Position(p) for p in data['positions']]
        except ValueError as exc:
            raise MissingDataError(f"Player {data['name']} has an unknown position: {exc}") from exc

        attributes = data.get('attributes') or {}
        physical_raw = dict(data.get('physical') or {})
        height = float(physical_raw.pop('height', data.get('height', 180.0)))
        goalkeeper_raw = data.get('goalkeeper') or data.get('goalkeeping')

        return cls(
            player_id=str(data['id']),
            name=data['name'],
            positions=positions,
            technical=_category_from_dict(TechnicalAttributes, data.get('technical')),
            mental=_category_from_dict(MentalAttributes, data.get('mental')),
            physical=_category_from_dict(PhysicalAttributes, physical_raw),
            goalkeeper=_category_from_dict(GoalkeeperAttributes, goalkeeper_raw),
            height=height,
            current_rating=float(attributes.get('currentRating', data.get('current_rating', 70.0))),
            current_form=float(data.get('currentForm', data.get('current_form', 7.0))),
            fitness=float(data.get('fitness', 100.0)),
            injured=bool(data.get('injured', False)),
            suspended=bool(data.get('suspended', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        physical = asdict(self.physical)
        physical['height'] = self.height
        return {
            'id': self.player_id,
            'name': self.name,
            'positions': [p.value for p in self.positions],
            'attributes': {'currentRating': self.current_rating},
            'technical': asdict(self.technical),
            'mental': asdict(self.mental),
            'physical': physical,
            'goalkeeper': asdict(self.goalkeeper),
            'current_form': self.current_form,
            'fitness': self.fitness,
            'injured': self.injured,
            'suspended': self.suspended,
        }

    @classmethod
    def generate(cls, player_id: str, name: str, position: Position, rng,
                 base_skill: float = 70.0) -> 'Player':
        """
        Generate a realistic player for a position.

        Attributes are drawn from a normal distribution around the position
        profile shifted by ``base_skill - 70`` and clipped to 1-99.

        Args:
            player_id: Unique identifier
            name: Player name
            position: Primary position
            rng: RandomSource used for the draws
            base_skill: Overall quality level of the squad
        """
        variance = 8.0
        shift = base_skill - 70.0
        profile = _PROFILES.get(position) or _PROFILES[Position.CM]

        def draw(attribute: str, default: float = 55.0) -> float:
            mean = profile.get(attribute, default) + shift
            return float(np.clip(rng.normal(mean, variance), 1, 99))

        technical = TechnicalAttributes(**{f.name: draw(f.name) for f in fields(TechnicalAttributes)})
        mental = MentalAttributes(**{f.name: draw(f.name, 60.0) for f in fields(MentalAttributes)})
        physical = PhysicalAttributes(**{f.name: draw(f.name, 65.0) for f in fields(PhysicalAttributes)})
        goalkeeper = GoalkeeperAttributes(
            reflexes=draw('reflexes', 20.0),
            handling=draw('handling', 20.0),
            positioning=draw('gk_positioning', 20.0),
        )

        base_height = {Position.GK: 189, Position.CB: 187, Position.ST: 183}.get(position, 179)
        height = float(np.clip(rng.normal(base_height, 5.0), 165, 205))
        rating = float(np.clip(rng.normal(base_skill, 4.0), 40, 99))

        return cls(player_id, name, [position], technical, mental, physical, goalkeeper,
                   height=round(height), current_rating=round(rating, 1),
                   current_form=round(float(np.clip(rng.normal(7.0, 1.0), 1, 10)), 1))
