"""
Tactical Football Simulation Package

A minute-by-minute football match simulator with a pre-match coach and a
reactive in-match coach AI.
"""

__version__ = "1.0.0"
__author__ = "Tactical Football Sim Team"

from .engine.match import MatchEngine, MatchResult
from .scripts.run_sim import simulate_matches

__all__ = ["MatchEngine", "MatchResult", "simulate_matches"]
