"""
Immutable match events and coach decisions.

Events carry structured payloads only (names, numbers, message keys); turning
them into display text is left to the consumer.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .player import Player
from .tactics import Tactic
from .team import Side


class EventType(Enum):
    """Event vocabulary of the match stream."""
    KICK_OFF = "KICK_OFF"
    GOAL = "GOAL"
    SAVE = "SAVE"
    MISS = "MISS"
    PASS = "PASS"
    DRIBBLE = "DRIBBLE"
    DEFENSE = "DEFENSE"
    INTERCEPT = "INTERCEPT"
    FOUL = "FOUL"
    YELLOW_CARD = "YELLOW_CARD"
    RED_CARD = "RED_CARD"
    COMMENTARY = "COMMENTARY"
    SUBSTITUTION = "SUBSTITUTION"
    STATS_UPDATE = "STATS_UPDATE"
    HALF_TIME = "HALF_TIME"
    FULL_TIME = "FULL_TIME"


class CoachMessage(Enum):
    """Touchline message keys produced by the in-match coach."""
    WINNING_TIGHT = "winning_tight"
    LOSING_TIGHT = "losing_tight"
    LOSING_BADLY = "losing_badly"
    WASTEFUL = "wasteful"
    UNDER_PRESSURE = "under_pressure"
    NEED_THE_BALL = "need_the_ball"
    DRAWING_BORING = "drawing_boring"
    WINNING_COMFORTABLE = "winning_comfortable"


@dataclass(frozen=True)
class MatchEvent:
    """One entry of the event stream."""
    type: EventType
    minute: int
    side: Optional[Side] = None
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'payload', MappingProxyType(dict(self.payload)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'minute': self.minute,
            'side': self.side.value if self.side else None,
            'payload': dict(self.payload),
        }


@dataclass(frozen=True)
class Substitution:
    """Requested swap of an on-field player for a bench player."""
    player_out: Player
    player_in: Player
    reason: str
    detail: float = 0.0


@dataclass(frozen=True)
class Decision:
    """What the in-match coach wants to do this minute."""
    tactic_change: Optional[Tactic] = None
    substitution: Optional[Substitution] = None
    message: Optional[CoachMessage] = None

    @property
    def is_empty(self) -> bool:
        return self.tactic_change is None and self.substitution is None and self.message is None


NO_DECISION = Decision()
