"""
Match event logging system for process mining analysis.

Flattens the engine's event stream into PM4Py-compatible rows and exports
them to CSV and XES.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd
import pm4py

from ..engine.events import EventType, MatchEvent

logger = logging.getLogger(__name__)

SHOT_ACTIVITIES = (EventType.GOAL.value, EventType.SAVE.value, EventType.MISS.value)

# Activities that belong to a possession and can start a new chain
CHAIN_ACTIVITIES = {
    EventType.PASS.value, EventType.DRIBBLE.value, EventType.DEFENSE.value,
    EventType.INTERCEPT.value, EventType.GOAL.value, EventType.SAVE.value,
    EventType.MISS.value,
}

RESTART_ACTIVITIES = {EventType.KICK_OFF.value, EventType.HALF_TIME.value}


@dataclass
class LoggedEvent:
    """
    Single match event as a flat log row.

    Conforms to PM4Py event log schema with football-specific extensions.
    """
    # PM4Py required fields
    timestamp: datetime
    case_id: str  # match_id
    activity: str  # event type

    # Football-specific context
    match_id: str
    team_id: str
    player_name: str
    minute: int

    # Performance metrics
    xg_value: float = 0.0
    is_counter: bool = False
    success: bool = True

    # Sequence tracking
    possession_chain_id: str = ""
    sequence_number: int = 0

    # Score after the event
    home_score: int = 0
    away_score: int = 0


class MatchEventLogger:
    """
    Event logger for one simulated match.

    Captures every emitted event with a synthetic timestamp (kickoff plus the
    match minute plus one second per event inside that minute), so timestamps
    are strictly increasing.
    """

    def __init__(self, match_id: str, kickoff: Optional[datetime] = None):
        """
        Initialize event logger for a match.

        Args:
            match_id: Unique identifier for the match
            kickoff: Wall-clock kickoff time (now if None)
        """
        self.match_id = match_id
        self.kickoff = kickoff or datetime.now()
        self.events: List[LoggedEvent] = []
        self.current_possession_chain = f"{match_id}_start"
        self._chain_team: Optional[str] = None
        self.sequence_counter = 0
        self._minute = -1
        self._in_minute = 0
        self._score = {'home': 0, 'away': 0}

    def log_event(self, event: MatchEvent, team_id: str = "match") -> LoggedEvent:
        """
        Record one engine event.

        Args:
            event: Event emitted by the match engine
            team_id: Club id of the acting side ("match" for neutral events)

        Returns:
            LoggedEvent: the stored row
        """
        if event.minute != self._minute:
            self._minute = event.minute
            self._in_minute = 0
        timestamp = self.kickoff + timedelta(minutes=event.minute, seconds=self._in_minute)
        self._in_minute += 1

        score = event.get('score')
        if score:
            self._score = {'home': score['home'], 'away': score['away']}

        activity = event.type.value
        self._update_possession_chain(activity, team_id)

        row = LoggedEvent(
            timestamp=timestamp,
            case_id=self.match_id,
            activity=activity,
            match_id=self.match_id,
            team_id=team_id,
            player_name=event.get('player') or ('coach' if event.side else 'referee'),
            minute=event.minute,
            xg_value=float(event.get('xg', 0.0)),
            is_counter=bool(event.get('counter', False)),
            success=event.type not in (EventType.MISS, EventType.INTERCEPT, EventType.SAVE),
            possession_chain_id=self.current_possession_chain,
            sequence_number=self.sequence_counter,
            home_score=self._score['home'],
            away_score=self._score['away'],
        )
        self.events.append(row)
        self.sequence_counter += 1
        return row

    def _update_possession_chain(self, activity: str, team_id: str) -> None:
        """Start a new chain on restarts and whenever the acting team changes."""
        if activity in RESTART_ACTIVITIES:
            self.current_possession_chain = f"{self.match_id}_{team_id}_{len(self.events)}"
            self._chain_team = None
        elif activity in CHAIN_ACTIVITIES and team_id != self._chain_team:
            self.current_possession_chain = f"{self.match_id}_{team_id}_{len(self.events)}"
            self._chain_team = team_id

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame([asdict(event) for event in self.events])
        if not df.empty:
            df['case:concept:name'] = df['case_id']
            df['concept:name'] = df['activity']
            df['time:timestamp'] = pd.to_datetime(df['timestamp'])
        return df

    def export_to_csv(self, filepath: str) -> None:
        """
        Export event log to CSV format.

        Args:
            filepath: Output file path
        """
        if not self.events:
            logger.warning("No events to export")
            return

        df = self.to_dataframe()
        df.to_csv(filepath, index=False)
        logger.info("Event log exported to %s", filepath)
        self._validate_export(df)

    def export_to_xes(self, filepath: str) -> None:
        """
        Export event log to XES format using PM4Py.

        Args:
            filepath: Output file path (.xes)
        """
        if not self.events:
            logger.warning("No events to export")
            return

        event_log = pm4py.format_dataframe(
            self.to_dataframe(),
            case_id='case:concept:name',
            activity_key='concept:name',
            timestamp_key='time:timestamp'
        )
        pm4py.write_xes(event_log, filepath)
        logger.info("XES event log exported to %s", filepath)

    def _validate_export(self, df: pd.DataFrame) -> None:
        """Validate exported event log quality."""
        required_columns = ['timestamp', 'case_id', 'activity', 'team_id', 'player_name']
        missing_columns = [col for col in required_columns if col not in df.columns]
        if missing_columns:
            logger.warning("Missing required columns: %s", missing_columns)

        if not df['timestamp'].is_monotonic_increasing:
            logger.warning("Timestamps are not in chronological order")

        completeness = ((len(df) - df.isnull().sum().sum()) / (len(df) * len(df.columns))) * 100
        logger.debug("Event log completeness: %.1f%%", completeness)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the event log."""
        if not self.events:
            return {}

        df = self.to_dataframe()
        duration = int(df['minute'].max())
        chains = df[df['activity'].isin(CHAIN_ACTIVITIES)]

        return {
            'total_events': len(self.events),
            'unique_activities': df['activity'].nunique(),
            'match_duration_minutes': duration,
            'events_per_minute': len(self.events) / max(1, duration),
            'possession_chains': chains['possession_chain_id'].nunique(),
            'avg_chain_length': chains.groupby('possession_chain_id').size().mean() if len(chains) else 0.0,
            'shots_logged': int(df['activity'].isin(SHOT_ACTIVITIES).sum()),
            'passes_logged': int((df['activity'] == EventType.PASS.value).sum()),
            'goals_logged': int((df['activity'] == EventType.GOAL.value).sum()),
        }

    def analyze_tactical_patterns(self) -> Dict[str, float]:
        """
        Analyze tactical patterns in the event log.

        Returns:
            Dict with pattern frequencies and metrics
        """
        if not self.events:
            return {}

        df = self.to_dataframe()
        patterns = {}

        shots = df[df['activity'].isin(SHOT_ACTIVITIES)]
        if len(shots) > 0:
            goals = shots[shots['activity'] == EventType.GOAL.value]
            patterns['shot_conversion'] = len(goals) / len(shots)
            patterns['counter_shot_share'] = float(shots['is_counter'].mean())
            patterns['mean_xg_per_shot'] = float(shots['xg_value'].mean())
            if len(goals) > 0:
                patterns['late_goal_share'] = float((goals['minute'] >= 80).mean())

        passes = df[df['activity'] == EventType.PASS.value]
        intercepts = df[df['activity'] == EventType.INTERCEPT.value]
        if len(passes) + len(intercepts) > 0:
            patterns['pass_completion'] = len(passes) / (len(passes) + len(intercepts))

        duels = df[df['activity'].isin([EventType.DRIBBLE.value, EventType.DEFENSE.value])]
        if len(duels) > 0:
            patterns['dribble_success'] = float((duels['activity'] == EventType.DRIBBLE.value).mean())

        fouls = df[df['activity'] == EventType.FOUL.value]
        patterns['fouls_per_minute'] = len(fouls) / max(1, int(df['minute'].max()))

        return patterns
