"""
Tactical state: the active preset per side and its probability modifiers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .team import Side

logger = logging.getLogger(__name__)


class Tactic(Enum):
    """In-match tactical presets."""
    ALL_OUT_ATTACK = "ALL_OUT_ATTACK"
    PARK_THE_BUS = "PARK_THE_BUS"
    COUNTER_ATTACK = "COUNTER_ATTACK"
    HIGH_PRESS = "HIGH_PRESS"
    POSSESSION = "POSSESSION"
    BALANCED = "BALANCED"


@dataclass(frozen=True)
class TacticalModifier:
    """Multipliers a tactic applies to attack, defense and tempo."""
    attack: float = 1.0
    defense: float = 1.0
    tempo: float = 1.0


TACTIC_MODIFIERS: Dict[Tactic, TacticalModifier] = {
    Tactic.ALL_OUT_ATTACK: TacticalModifier(1.5, 0.5, 1.5),
    Tactic.PARK_THE_BUS: TacticalModifier(0.3, 2.0, 0.5),
    Tactic.HIGH_PRESS: TacticalModifier(1.2, 0.8, 1.3),
    Tactic.COUNTER_ATTACK: TacticalModifier(1.1, 1.2, 1.2),
    Tactic.POSSESSION: TacticalModifier(1.0, 1.1, 0.8),
    Tactic.BALANCED: TacticalModifier(1.0, 1.0, 1.0),
}


class TacticalState:
    """
    Active tactic for both sides with change history.

    Exactly one tactic is active per side. ``change`` is a no-op when the
    requested tactic is already active.
    """

    def __init__(self, home: Tactic = Tactic.BALANCED, away: Tactic = Tactic.BALANCED):
        self._active: Dict[Side, Tactic] = {Side.HOME: home, Side.AWAY: away}
        self.history: List[Tuple[int, Side, Tactic]] = []

    def active(self, side: Side) -> Tactic:
        return self._active[side]

    def modifier(self, side: Side) -> TacticalModifier:
        return TACTIC_MODIFIERS[self._active[side]]

    def change(self, side: Side, tactic: Tactic, minute: int) -> bool:
        """
        Switch a side's tactic.

        Returns:
            bool: True if the tactic actually changed
        """
        if self._active[side] is tactic:
            return False
        logger.info("%d' %s tactic %s -> %s", minute, side.value,
                    self._active[side].value, tactic.value)
        self._active[side] = tactic
        self.history.append((minute, side, tactic))
        return True

    def last_change(self, side: Side) -> Optional[int]:
        """Minute of the side's most recent change, if any."""
        for minute, changed_side, _ in reversed(self.history):
            if changed_side is side:
                return minute
        return None
