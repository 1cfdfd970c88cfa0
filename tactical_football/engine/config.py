"""
Simulation tunables.

All probabilities, multipliers and thresholds used by the match clock, the
duel resolver, the substitution engine and the in-match coach live here.
Change values here (or build a custom MatchConfig) instead of editing the
engine code.
"""

from dataclasses import dataclass, field, replace
from typing import Tuple


@dataclass(frozen=True)
class ClockConfig:
    """Match clock and attack-chain probabilities."""
    half_length: int = 45
    full_length: int = 90
    injury_time_range: Tuple[int, int] = (2, 5)
    stamina_drain_per_minute: float = 0.6
    base_attack_chance: float = 0.30
    midfield_action_ceiling: float = 0.60
    foul_ceiling: float = 0.62
    yellow_card_chance: float = 0.20
    stats_interval: int = 10
    counter_attack_chance: float = 0.20
    max_counter_depth: int = 2
    counter_pass_bonus: float = 1.5


@dataclass(frozen=True)
class ShotConfig:
    """Shot, save and set-piece constants."""
    goal_margin: float = 10.0
    save_margin: float = 20.0
    max_xg_per_shot: float = 0.8
    xg_divisor: float = 300.0
    counter_pressure: float = 20.0
    open_play_max_pressure: float = 60.0
    form_factor_range: Tuple[float, float] = (0.9, 1.1)
    through_ball_multiplier: float = 1.1
    counter_multiplier: float = 1.3
    dribble_multiplier: float = 1.0
    long_shot_multiplier: float = 0.8
    header_multiplier: float = 0.9
    corner_aerial_chance: float = 0.35


@dataclass(frozen=True)
class RatingConfig:
    """Match-rating baselines and per-involvement deltas."""
    starting_rating: float = 6.0
    substitute_rating: float = 6.5
    goal: float = 1.5
    goal_conceded: float = -1.0
    save: float = 0.5
    pass_completed: float = 0.1
    pass_intercepted: float = -0.1
    interception: float = 0.2
    dribble_won: float = 0.2
    dribbled_past: float = -0.1
    tackle_won: float = 0.2
    shot_missed: float = -0.1
    foul: float = -0.1
    yellow_card: float = -0.3


@dataclass(frozen=True)
class SubstitutionConfig:
    """Substitution engine gates and triggers."""
    max_subs: int = 5
    earliest_minute: int = 50
    min_gap: int = 5
    exhaustion_threshold: float = 55.0
    tactical_minute: int = 70
    poor_rating_threshold: float = 6.0


@dataclass(frozen=True)
class CoachConfig:
    """In-match coach throttling and decision thresholds."""
    talk_interval: int = 8
    crunch_interval: int = 3
    crunch_minute: int = 85
    late_game_minute: int = 80
    evaluation_gate: float = 0.7
    wasteful_xg: float = 1.2
    low_possession: float = 35.0
    high_possession: float = 65.0
    counter_switch_chance: float = 0.5


@dataclass(frozen=True)
class MatchConfig:
    """Aggregate configuration handed to the match engine."""
    clock: ClockConfig = field(default_factory=ClockConfig)
    shots: ShotConfig = field(default_factory=ShotConfig)
    ratings: RatingConfig = field(default_factory=RatingConfig)
    substitutions: SubstitutionConfig = field(default_factory=SubstitutionConfig)
    coach: CoachConfig = field(default_factory=CoachConfig)

    def with_max_subs(self, max_subs: int) -> 'MatchConfig':
        """Return a copy with a different substitution cap."""
        return replace(self, substitutions=replace(self.substitutions, max_subs=max_subs))


DEFAULT_CONFIG = MatchConfig()
