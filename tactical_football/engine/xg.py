"""
Expected Goals (xG) calculation for football simulation.

Maps the shot quality produced by the duel resolver onto a per-attempt goal
expectation.
"""

import numpy as np

from .config import DEFAULT_CONFIG, ShotConfig


class ExpectedGoalsModel:
    """
    Linear xG model on shot quality.

    Each attempt contributes ``shot_quality / 300`` capped at 0.8, and never
    a negative amount, so cumulative xG is non-decreasing.
    """

    def __init__(self, config: ShotConfig = DEFAULT_CONFIG.shots):
        """Initialize xG model with the configured cap and divisor."""
        self.divisor = config.xg_divisor
        self.max_xg = config.max_xg_per_shot

    def expected_goal(self, shot_quality: float) -> float:
        """
        Calculate expected goal contribution of a shot.

        Args:
            shot_quality: Quality score from the duel resolver

        Returns:
            float: xG value between 0.0 and 0.8
        """
        return float(np.clip(shot_quality / self.divisor, 0.0, self.max_xg))

    def is_good_shot_opportunity(self, xg_value: float) -> bool:
        """
        Determine if a shot represents a good scoring opportunity.

        Args:
            xg_value: Expected goal value

        Returns:
            bool: True if xG > 0.1 (reasonable chance)
        """
        return xg_value > 0.1
