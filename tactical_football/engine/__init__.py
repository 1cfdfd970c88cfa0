"""
Football simulation engine components.

This module contains the core simulation engine including:
- Player records, positions and club data loading
- Attribute evaluation, action selection and duel resolution
- Tactical presets and team bookkeeping
- Pre-match and in-match coach AI
- Expected goals calculation
- Main match simulation engine
"""

from .club import Club, generate_club, load_club
from .coach import CoachAI, MatchContext, Preparation
from .config import DEFAULT_CONFIG, MatchConfig
from .errors import MissingDataError, PositionalGapError, SimulationError
from .events import CoachMessage, Decision, EventType, MatchEvent, Substitution
from .in_match_ai import InMatchAI, TacticalAI
from .match import MatchEngine, MatchResult
from .player import Player, Position
from .randomness import RandomSource
from .state import MatchState, TeamStats
from .substitutions import SubstitutionEngine
from .tactics import Tactic, TacticalState
from .team import Side, Team
from .xg import ExpectedGoalsModel

__all__ = [
    'Club', 'generate_club', 'load_club',
    'CoachAI', 'MatchContext', 'Preparation',
    'DEFAULT_CONFIG', 'MatchConfig',
    'MissingDataError', 'PositionalGapError', 'SimulationError',
    'CoachMessage', 'Decision', 'EventType', 'MatchEvent', 'Substitution',
    'InMatchAI', 'TacticalAI',
    'MatchEngine', 'MatchResult',
    'Player', 'Position',
    'RandomSource',
    'MatchState', 'TeamStats',
    'SubstitutionEngine',
    'Tactic', 'TacticalState',
    'Side', 'Team',
    'ExpectedGoalsModel',
]
