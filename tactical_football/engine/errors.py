"""
Exception types raised by the simulation core.
"""


class SimulationError(Exception):
    """Base class for every error raised by the match engine."""


class MissingDataError(SimulationError):
    """Input data is incomplete (e.g. a lineup without a goalkeeper)."""


class PositionalGapError(SimulationError):
    """No eligible bench player can cover the departing player's position."""

    def __init__(self, player_name: str, position: str):
        super().__init__(f"No bench replacement for {player_name} ({position})")
        self.player_name = player_name
        self.position = position
