"""
Substitution engine.

Decides whether a side should make a change and who comes on. The engine only
proposes; the match clock applies the swap through ``Team.apply_substitution``.
"""

import logging
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, SubstitutionConfig
from .errors import PositionalGapError
from .events import Substitution
from .player import Player, position_family
from .team import Team

logger = logging.getLogger(__name__)

REASON_EXHAUSTED = "exhausted"
REASON_TACTICAL = "tactical"


class SubstitutionEngine:
    """
    Substitution decision rules.

    Gates (all required):
    - minute >= earliest_minute (50)
    - substitutions used below the cap
    - at least ``min_gap`` minutes since the side's previous change

    Triggers, in order:
    1. the most exhausted on-field player below the exhaustion threshold
    2. after minute 70, the lowest-rated on-field player below 6.0
    """

    def __init__(self, config: SubstitutionConfig = DEFAULT_CONFIG.substitutions):
        self.config = config

    def gates_open(self, team: Team, minute: int) -> bool:
        if minute < self.config.earliest_minute:
            return False
        if not team.can_substitute():
            return False
        if team.last_sub_minute is not None and minute - team.last_sub_minute < self.config.min_gap:
            return False
        return True

    def evaluate(self, team: Team, minute: int) -> Optional[Substitution]:
        """
        Propose a substitution for ``team`` at ``minute``.

        Returns:
            Substitution or None when no gate/trigger/replacement allows one
        """
        if not self.gates_open(team, minute):
            return None

        players = team.players
        exhausted = [p for p in players if p.condition < self.config.exhaustion_threshold]
        if exhausted:
            tired = min(exhausted, key=lambda p: p.condition)
            replacement = self._replacement_or_none(tired, team.bench)
            if replacement is not None:
                return Substitution(tired, replacement, REASON_EXHAUSTED, round(tired.condition))

        if minute > self.config.tactical_minute:
            worst = min(players, key=lambda p: p.match_rating)
            if worst.match_rating < self.config.poor_rating_threshold:
                replacement = self._replacement_or_none(worst, team.bench)
                if replacement is not None:
                    return Substitution(worst, replacement, REASON_TACTICAL, round(worst.match_rating, 1))

        return None

    def find_replacement(self, player_out: Player, bench: Sequence[Player]) -> Player:
        """
        Best bench player to replace ``player_out``.

        Same primary position first, then the position family; highest
        ``current_rating`` wins within a group.

        Raises:
            PositionalGapError: if nobody on the bench can cover the position
        """
        role = player_out.primary_position
        same_position = [p for p in bench if p.plays(role)]
        if same_position:
            return max(same_position, key=lambda p: p.current_rating)

        family = position_family(role)
        if family:
            similar: List[Player] = [p for p in bench if any(pos in family for pos in p.positions)]
            if similar:
                return max(similar, key=lambda p: p.current_rating)

        raise PositionalGapError(player_out.name, role.value)

    def _replacement_or_none(self, player_out: Player, bench: Sequence[Player]) -> Optional[Player]:
        try:
            return self.find_replacement(player_out, bench)
        except PositionalGapError as exc:
            logger.info("Substitution skipped: %s", exc)
            return None
