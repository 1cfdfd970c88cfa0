"""
Reactive in-match coach.

Reads the live match state every minute and decides on tactic changes,
touchline messages and substitutions, throttled so it never flip-flops.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .config import DEFAULT_CONFIG, MatchConfig
from .events import CoachMessage, Decision, NO_DECISION
from .randomness import RandomSource
from .state import MatchState
from .substitutions import SubstitutionEngine
from .tactics import Tactic
from .team import Side

logger = logging.getLogger(__name__)


class TacticalAI(ABC):
    """
    Port the match clock consults once per side and minute.

    A failing evaluation is logged by the clock and that minute's decision
    is skipped; the match carries on.
    """

    @abstractmethod
    def evaluate(self, state: MatchState, side: Side) -> Decision:
        """Decision for ``side`` at ``state.minute``."""


class InMatchAI(TacticalAI):
    """
    Rule-based touchline coach.

    Throttle: a side is analysed only when at least 8 minutes passed since its
    last message, or 3 minutes once crunch time (85') starts. Before minute 80
    an extra random gate lets only ~30% of eligible evaluations through.

    Rules, first match wins:
    1. 80'+ leading by one: PARK_THE_BUS
    2. 80'+ trailing by one: ALL_OUT_ATTACK
    3. 80'+ trailing by two or more: message only
    4. xG above 1.2 without a goal: message only
    5. possession below 35%: COUNTER_ATTACK (coin flip) when not losing,
       HIGH_PRESS when losing
    6. possession above 65% and level: ALL_OUT_ATTACK
    7. leading by two or more: POSSESSION
    """

    def __init__(self,
                 rng: RandomSource,
                 config: MatchConfig = DEFAULT_CONFIG,
                 substitutions: Optional[SubstitutionEngine] = None):
        self.rng = rng
        self.config = config.coach
        self.substitutions = substitutions or SubstitutionEngine(config.substitutions)
        self.last_talk: Dict[Side, int] = {Side.HOME: 0, Side.AWAY: 0}

    def evaluate(self, state: MatchState, side: Side) -> Decision:
        """
        Decide what ``side`` should do at the current minute.

        Args:
            state: Live match state
            side: Side being coached

        Returns:
            Decision: possibly empty tactic change, substitution and message
        """
        tactic, message = None, None
        if self._may_talk(state.minute, side):
            tactic, message = self.analyse(state, side)
            if message is not None:
                self.last_talk[side] = state.minute

        substitution = self.substitutions.evaluate(state.team(side), state.minute)

        if tactic is None and message is None and substitution is None:
            return NO_DECISION
        logger.debug("%d' %s coach: tactic=%s message=%s sub=%s", state.minute, side.value,
                     tactic.value if tactic else None, message.value if message else None,
                     substitution.player_in.name if substitution else None)
        return Decision(tactic, substitution, message)

    def _may_talk(self, minute: int, side: Side) -> bool:
        since = minute - self.last_talk[side]
        crunch = minute >= self.config.crunch_minute and since >= self.config.crunch_interval
        return since >= self.config.talk_interval or crunch

    def analyse(self, state: MatchState, side: Side):
        """
        Apply the tactical rules.

        Returns:
            Tuple of (Tactic or None, CoachMessage or None)
        """
        cfg = self.config
        minute = state.minute
        if minute < cfg.late_game_minute and self.rng.random() <= cfg.evaluation_gate:
            return None, None

        diff = state.score_diff(side)
        if minute >= cfg.late_game_minute:
            if diff == 1:
                return Tactic.PARK_THE_BUS, CoachMessage.WINNING_TIGHT
            if diff == -1:
                return Tactic.ALL_OUT_ATTACK, CoachMessage.LOSING_TIGHT
            if diff <= -2:
                return None, CoachMessage.LOSING_BADLY
            return None, None

        if state.stats[side].xg > cfg.wasteful_xg and state.score[side] == 0:
            return None, CoachMessage.WASTEFUL

        possession = state.possession_pct(side)
        if possession < cfg.low_possession:
            if diff < 0:
                return Tactic.HIGH_PRESS, CoachMessage.NEED_THE_BALL
            if self.rng.chance(cfg.counter_switch_chance):
                return Tactic.COUNTER_ATTACK, CoachMessage.UNDER_PRESSURE
        elif possession > cfg.high_possession and diff == 0:
            return Tactic.ALL_OUT_ATTACK, CoachMessage.DRAWING_BORING

        if diff >= 2:
            return Tactic.POSSESSION, CoachMessage.WINNING_COMFORTABLE
        return None, None
