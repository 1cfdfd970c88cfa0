"""
Live match state and the side-indexed statistics it carries.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict

from .tactics import TacticalState
from .team import Side, Team


@dataclass
class TeamStats:
    """Per-side match statistics."""
    possession: int = 0  # minutes in possession
    shots: int = 0
    shots_on_target: int = 0
    xg: float = 0.0
    corners: int = 0
    fouls: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    passes_attempted: int = 0
    passes_completed: int = 0
    interceptions: int = 0
    dribbles_won: int = 0
    tackles_won: int = 0

    def get_pass_accuracy(self) -> float:
        """Calculate pass completion percentage."""
        if self.passes_attempted == 0:
            return 0.0
        return (self.passes_completed / self.passes_attempted) * 100.0

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data['xg'] = round(self.xg, 2)
        return data


@dataclass
class MatchState:
    """Current state of the football match."""
    teams: Dict[Side, Team]
    tactics: TacticalState = field(default_factory=TacticalState)
    minute: int = 0
    half: int = 1
    injury_time: int = 0
    score: Dict[Side, int] = field(default_factory=lambda: {Side.HOME: 0, Side.AWAY: 0})
    stats: Dict[Side, TeamStats] = field(default_factory=lambda: {Side.HOME: TeamStats(), Side.AWAY: TeamStats()})

    def score_diff(self, side: Side) -> int:
        """Goal difference from ``side``'s point of view."""
        return self.score[side] - self.score[side.opponent]

    def possession_pct(self, side: Side) -> float:
        """Share of possession minutes, 50.0 before any minute is played."""
        total = self.stats[Side.HOME].possession + self.stats[Side.AWAY].possession
        if total == 0:
            return 50.0
        return self.stats[side].possession / total * 100.0

    def team(self, side: Side) -> Team:
        return self.teams[side]

    def scoreline(self) -> Dict[str, int]:
        return {'home': self.score[Side.HOME], 'away': self.score[Side.AWAY]}

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Statistics of both sides including possession percentage."""
        result = {}
        for side in Side:
            data = self.stats[side].to_dict()
            data['possession_pct'] = round(self.possession_pct(side), 1)
            data['pass_accuracy'] = round(self.stats[side].get_pass_accuracy(), 1)
            result[side.value] = data
        return result
