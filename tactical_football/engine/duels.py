"""
Duel resolver.

Resolves the contested moments of an attack: shot against goalkeeper,
dribble against tackle, and aerial challenges at set pieces.
"""

from dataclasses import dataclass
from enum import Enum

from . import attributes
from .config import DEFAULT_CONFIG, ShotConfig
from .player import Player
from .randomness import RandomSource
from .xg import ExpectedGoalsModel


class ShotOutcome(Enum):
    GOAL = "GOAL"
    SAVE = "SAVE"
    MISS = "MISS"


@dataclass(frozen=True)
class ShotResult:
    """Outcome of one attempt on goal."""
    outcome: ShotOutcome
    shot_quality: float
    save_quality: float
    xg: float

    @property
    def on_target(self) -> bool:
        return self.outcome is not ShotOutcome.MISS


@dataclass(frozen=True)
class DuelResult:
    """Scores of a one-on-one contest."""
    attacker_score: float
    defender_score: float

    @property
    def attacker_wins(self) -> bool:
        # ties go to the defending contestant
        return self.attacker_score > self.defender_score


def shot_quality(shooter: Player, pressure: float, multiplier: float = 1.0) -> float:
    """
    Quality of a shot under defensive pressure.

    Args:
        shooter: Player taking the shot
        pressure: Defensive pressure, 0-100
        multiplier: Situational multiplier (through ball, counter, ...)
    """
    finishing = attributes.technical(shooter, 'finishing', pressure)
    power = attributes.technical(shooter, 'shot_power', pressure)
    balance = attributes.physical(shooter, 'balance', pressure)
    composure = attributes.mental(shooter, 'composure', pressure)
    return (finishing * 0.4 + power * 0.3 + balance * 0.1 + composure * 0.2) * multiplier


def base_save_quality(keeper: Player) -> float:
    """Goalkeeper save quality before the form factor."""
    gk = keeper.goalkeeper
    height_bonus = (keeper.height - 180) * 0.5
    jump = keeper.physical.jumping * 0.2
    return gk.reflexes * 0.45 + gk.positioning * 0.35 + gk.handling * 0.1 + height_bonus + jump


def save_quality(keeper: Player, rng: RandomSource, config: ShotConfig = DEFAULT_CONFIG.shots) -> float:
    """Save quality including a uniform form factor in [0.9, 1.1)."""
    low, high = config.form_factor_range
    return base_save_quality(keeper) * rng.uniform(low, high)


def judge_shot(shot: float, save: float, config: ShotConfig = DEFAULT_CONFIG.shots) -> ShotOutcome:
    """GOAL beats the save by more than the goal margin, SAVE is within the save margin."""
    if shot > save + config.goal_margin:
        return ShotOutcome.GOAL
    if shot > save - config.save_margin:
        return ShotOutcome.SAVE
    return ShotOutcome.MISS


def resolve_shot(shooter: Player,
                 keeper: Player,
                 pressure: float,
                 multiplier: float,
                 rng: RandomSource,
                 xg_model: ExpectedGoalsModel,
                 config: ShotConfig = DEFAULT_CONFIG.shots) -> ShotResult:
    """
    Resolve a shot against the goalkeeper.

    Returns:
        ShotResult: outcome, both quality scores and the xG contribution
    """
    quality = shot_quality(shooter, pressure, multiplier)
    save = save_quality(keeper, rng, config)
    return ShotResult(judge_shot(quality, save, config), quality, save, xg_model.expected_goal(quality))


def dribble_vs_tackle(attacker: Player, defender: Player) -> DuelResult:
    """One-on-one between a dribbler and a tackler."""
    attack = (attributes.technical(attacker, 'dribbling') * 0.4
              + attributes.physical(attacker, 'agility') * 0.3
              + attributes.physical(attacker, 'acceleration') * 0.2
              + attributes.physical(attacker, 'balance') * 0.1)
    defend = (attributes.technical(defender, 'tackling') * 0.4
              + attributes.physical(defender, 'strength') * 0.3
              + attributes.mental(defender, 'positioning') * 0.2
              + attributes.physical(defender, 'pace') * 0.1)
    return DuelResult(attack, defend)


def aerial_score(player: Player) -> float:
    return (player.height * 0.4
            + attributes.physical(player, 'jumping') * 0.3
            + attributes.physical(player, 'strength') * 0.2
            + attributes.technical(player, 'heading') * 0.1)


def aerial_duel(attacker: Player, defender: Player) -> DuelResult:
    """Header contest between two players."""
    return DuelResult(aerial_score(attacker), aerial_score(defender))
