"""
Event logging system for football match simulation.
Provides PM4Py-compatible event logs for process mining analysis.
"""

from .event_logger import LoggedEvent, MatchEventLogger

__all__ = ['LoggedEvent', 'MatchEventLogger']
