"""
Team model for one side of a match: lineup, bench and strategy.

Implements the substitution bookkeeping that keeps the lineup at eleven and
stops substituted players from coming back on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .club import Club
from .errors import MissingDataError, SimulationError
from .player import Player, Position

LINEUP_SIZE = 11


class Side(Enum):
    """Which side of the fixture a team is."""
    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> 'Side':
        return Side.AWAY if self is Side.HOME else Side.HOME


@dataclass
class Strategy:
    """
    Team tactical strategy chosen before kickoff.

    Defines the high-level approach:
    - approach and mentality ("attacking", "balanced", "counter", ...)
    - tempo, pressing and defensive line
    - width and build-up preferences
    """
    approach: str = "balanced"
    mentality: str = "standard"
    tempo: str = "medium"
    pressing: str = "medium"
    defensive_line: str = "medium"
    width: str = "balanced"
    build_up: str = "short_passing"
    reasoning: List[str] = field(default_factory=list)


@dataclass
class LineupSlot:
    """One formation slot and the player filling it."""
    position: Position
    player: Player


class Lineup:
    """
    Ordered formation slots.

    Duplicate positions (two CBs, two STs) are allowed, so slots are kept in
    a list rather than keyed by position.
    """

    def __init__(self, slots: Iterable[Tuple[Position, Player]] = ()):
        self.slots: List[LineupSlot] = [LineupSlot(pos, player) for pos, player in slots]

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[LineupSlot]:
        return iter(self.slots)

    def __contains__(self, player: Player) -> bool:
        return any(slot.player is player for slot in self.slots)

    def players(self) -> List[Player]:
        return [slot.player for slot in self.slots]

    def goalkeeper(self) -> Optional[Player]:
        """Player in the GK slot, if any."""
        for slot in self.slots:
            if slot.position is Position.GK:
                return slot.player
        return None

    def position_of(self, player: Player) -> Position:
        for slot in self.slots:
            if slot.player is player:
                return slot.position
        raise SimulationError(f"{player.name} is not in the lineup")

    def at(self, positions: Iterable[Position]) -> List[Player]:
        """Players whose slot is one of ``positions``."""
        wanted = set(positions)
        return [slot.player for slot in self.slots if slot.position in wanted]

    def outfield(self) -> List[Player]:
        return [slot.player for slot in self.slots if slot.position is not Position.GK]

    def replace(self, player_out: Player, player_in: Player) -> Position:
        """Put ``player_in`` in the slot of ``player_out`` and return that slot's position."""
        for slot in self.slots:
            if slot.player is player_out:
                slot.player = player_in
                return slot.position
        raise SimulationError(f"{player_out.name} is not in the lineup")


class Team:
    """
    Football team as it takes part in one match.

    Manages:
    - 11 match copies of the starting players in formation slots
    - the bench of eligible substitutes
    - substitution counters, cap and history
    """

    def __init__(self,
                 club: Club,
                 side: Side,
                 lineup: Lineup,
                 bench: Sequence[Player],
                 formation: str = "4-4-2",
                 strategy: Optional[Strategy] = None,
                 max_subs: int = 5):
        """
        Initialize a match side.

        Args:
            club: Club record the side belongs to
            side: HOME or AWAY
            lineup: Starting slots (match copies)
            bench: Eligible substitutes (match copies)
            formation: Formation label
            strategy: Pre-match strategy (default if None)
            max_subs: Substitution cap

        Raises:
            MissingDataError: if the lineup is not eleven or has no goalkeeper
        """
        if len(lineup) != LINEUP_SIZE:
            raise MissingDataError(
                f"{club.name} lineup has {len(lineup)} players, {LINEUP_SIZE} required")
        if lineup.goalkeeper() is None:
            raise MissingDataError(f"{club.name} lineup has no goalkeeper")

        self.club = club
        self.side = side
        self.lineup = lineup
        self.bench: List[Player] = list(bench)
        self.formation = formation
        self.strategy = strategy or Strategy()
        self.max_subs = max_subs

        # Substitution bookkeeping
        self.subs_used = 0
        self.last_sub_minute: Optional[int] = None
        self.substituted_off: List[Player] = []
        self.appeared: Set[str] = {p.player_id for p in lineup.players()}

    @classmethod
    def from_selection(cls,
                       club: Club,
                       side: Side,
                       selection: Sequence[Tuple[Position, Player]],
                       formation: str = "4-4-2",
                       strategy: Optional[Strategy] = None,
                       max_subs: int = 5,
                       starting_rating: float = 6.0) -> 'Team':
        """
        Build a match side from a squad selection.

        Starters and the bench are match copies; the bench holds every
        available squad player not picked to start.
        """
        starter_ids = {player.player_id for _, player in selection}
        lineup = Lineup((pos, player.match_copy(starting_rating)) for pos, player in selection)
        bench = [p.match_copy(starting_rating) for p in club.squad.available()
                 if p.player_id not in starter_ids]
        return cls(club, side, lineup, bench, formation, strategy, max_subs)

    @property
    def name(self) -> str:
        return self.club.name

    @property
    def players(self) -> List[Player]:
        return self.lineup.players()

    def can_substitute(self) -> bool:
        return self.subs_used < self.max_subs

    def apply_substitution(self, player_out: Player, player_in: Player,
                           minute: int, rating: float = 6.5) -> Position:
        """
        Swap a bench player for an on-field player.

        The incoming player starts with full condition and ``rating``; the
        outgoing player leaves for good.

        Raises:
            SimulationError: if the cap is reached or either player is not
                where the swap requires
        """
        if not self.can_substitute():
            raise SimulationError(f"{self.name} have used all {self.max_subs} substitutions")
        if player_in not in self.bench:
            raise SimulationError(f"{player_in.name} is not on the {self.name} bench")
        if any(p.player_id == player_in.player_id for p in self.substituted_off):
            raise SimulationError(f"{player_in.name} has already been substituted off")

        position = self.lineup.replace(player_out, player_in)
        self.bench.remove(player_in)
        player_in.condition = 100.0
        player_in.match_rating = rating

        self.substituted_off.append(player_out)
        self.appeared.add(player_in.player_id)
        self.subs_used += 1
        self.last_sub_minute = minute
        return position

    def all_participants(self) -> List[Player]:
        """Everyone who played: current lineup plus substituted players."""
        return self.players + self.substituted_off
