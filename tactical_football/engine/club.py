"""
Club and squad records at the input boundary.

Clubs are read-only input to the simulation. They can be loaded from the JSON
club files (``load_club``) or generated for demos and tests
(``generate_club``).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from .errors import MissingDataError
from .player import Player, Position
from .randomness import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class ClubTactics:
    """Club's default tactical identity."""
    default_formation: str = "4-4-2"
    mentality: str = "balanced"
    play_style: Dict[str, float] = field(default_factory=dict)

    def style(self, key: str, default: float = 50.0) -> float:
        return float(self.play_style.get(key, default))


@dataclass
class Squad:
    """Registered players of a club."""
    current_players: List[Player] = field(default_factory=list)

    @property
    def average_rating(self) -> float:
        if not self.current_players:
            return 0.0
        return float(np.mean([p.current_rating for p in self.current_players]))

    def available(self) -> List[Player]:
        """Players that are neither injured nor suspended."""
        return [p for p in self.current_players if p.available]

    def __len__(self) -> int:
        return len(self.current_players)


@dataclass
class Club:
    """Football club input record."""
    club_id: str
    name: str
    squad: Squad
    tactics: ClubTactics = field(default_factory=ClubTactics)
    stadium: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Club':
        """
        Build a club from the JSON club-file shape.

        Args:
            data: mapping with name, squad.current_players, stadium, tactics

        Raises:
            MissingDataError: naming the first missing field
        """
        if not data.get('name'):
            raise MissingDataError("Club record is missing 'name'")
        squad_raw = data.get('squad')
        if not squad_raw or 'current_players' not in squad_raw:
            raise MissingDataError(f"Club {data['name']} is missing 'squad.current_players'")
        players = [Player.from_dict(p) for p in squad_raw['current_players']]
        if not players:
            raise MissingDataError(f"Club {data['name']} has an empty squad")

        tactics_raw = data.get('tactics') or {}
        tactics = ClubTactics(
            default_formation=tactics_raw.get('default_formation', "4-4-2"),
            mentality=tactics_raw.get('mentality', "balanced"),
            play_style=dict(tactics_raw.get('play_style') or {}),
        )
        club_id = data.get('id') or data.get('club_id') or data['name'].lower().replace(' ', '_')
        return cls(str(club_id), data['name'], Squad(players), tactics, data.get('stadium', ""))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.club_id,
            'name': self.name,
            'stadium': self.stadium,
            'squad': {
                'average_rating': round(self.squad.average_rating, 1),
                'current_players': [p.to_dict() for p in self.squad.current_players],
            },
            'tactics': {
                'default_formation': self.tactics.default_formation,
                'mentality': self.tactics.mentality,
                'play_style': dict(self.tactics.play_style),
            },
        }


def load_club(path: Union[str, Path]) -> Club:
    """Load and validate a club JSON file."""
    path = Path(path)
    with open(path, encoding='utf-8') as handle:
        data = json.load(handle)
    club = Club.from_dict(data)
    logger.debug("Loaded %s (%d players) from %s", club.name, len(club.squad), path)
    return club


# 18-man squad: starting shape plus cover for every line
SQUAD_TEMPLATE = [
    Position.GK, Position.GK,
    Position.CB, Position.CB, Position.CB,
    Position.LB, Position.RB,
    Position.CDM, Position.CM, Position.CM, Position.CM, Position.CAM,
    Position.LM, Position.RM,
    Position.LW, Position.RW,
    Position.ST, Position.ST,
]

# Secondary positions a generated player can also cover
SECONDARY_POSITIONS = {
    Position.LB: [Position.LWB],
    Position.RB: [Position.RWB],
    Position.CDM: [Position.CM],
    Position.CM: [Position.CDM],
    Position.CAM: [Position.CM],
    Position.LM: [Position.LW],
    Position.RM: [Position.RW],
    Position.LW: [Position.LM],
    Position.RW: [Position.RM],
    Position.ST: [Position.CF],
}


def generate_club(name: str,
                  rng: Optional[RandomSource] = None,
                  base_skill: float = 70.0,
                  formation: str = "4-4-2",
                  play_style: Optional[Dict[str, float]] = None) -> Club:
    """
    Generate a club with a random 18-man squad.

    Args:
        name: Club name
        rng: Random source (fresh unseeded source if None)
        base_skill: Mean player quality
        formation: Default formation stored in the club tactics
        play_style: Optional play-style numbers (possession, pressing, ...)

    Returns:
        Club: fully populated club record
    """
    rng = rng or RandomSource()
    prefix = ''.join(word[0] for word in name.split()).upper() or "X"
    players = []
    for number, position in enumerate(SQUAD_TEMPLATE, start=1):
        player = Player.generate(f"{prefix}{number:02d}", f"{name} #{number}", position, rng, base_skill)
        player.positions.extend(SECONDARY_POSITIONS.get(position, []))
        players.append(player)

    style = {'possession': 50, 'pressing': 50, 'width': 50, 'tempo': 50, 'defensive_line': 50}
    style.update(play_style or {})
    return Club(name.lower().replace(' ', '_'), name, Squad(players),
                ClubTactics(formation, "balanced", style), f"{name} Stadium")
