"""
Action selector for the player on the ball.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from . import attributes
from .player import CENTRAL_FORWARD, CENTRAL_MIDFIELD, WIDE_FORWARD, Player, Position
from .randomness import RandomSource


class Action(Enum):
    """What the ball carrier attempts."""
    SHOOT = "SHOOT"
    PASS = "PASS"
    DRIBBLE = "DRIBBLE"


@dataclass(frozen=True)
class MoveContext:
    """Situation the ball carrier decides in."""
    position: Position
    score_diff: int
    minute: int


def action_scores(player: Player, context: MoveContext) -> Dict[Action, float]:
    """
    Weight of each action for this player and situation.

    Returns:
        Dict mapping each Action to a non-negative weight
    """
    finishing = attributes.technical(player, 'finishing')
    dribbling = attributes.technical(player, 'dribbling')
    vision = attributes.mental(player, 'vision')
    aggression = attributes.mental(player, 'aggression')
    work_rate = attributes.mental(player, 'work_rate')
    agility = attributes.physical(player, 'agility')
    acceleration = attributes.physical(player, 'acceleration')

    shot = finishing * 0.4 + aggression * 0.2
    if context.position in CENTRAL_FORWARD:
        shot += 30
    if context.position in WIDE_FORWARD:
        shot += 15
    # chasing the game late on
    if context.score_diff < 0 and context.minute > 80:
        shot *= 1.5

    pass_ = vision * 0.6 + work_rate * 0.3
    if context.position in CENTRAL_MIDFIELD:
        pass_ += 25

    dribble = dribbling * 0.5 + agility * 0.3 + acceleration * 0.2
    if context.position in WIDE_FORWARD:
        dribble += 20

    return {Action.SHOOT: shot, Action.PASS: pass_, Action.DRIBBLE: dribble}


def select_action(scores: Dict[Action, float], draw: float) -> Action:
    """
    Roulette-wheel selection with a single draw in [0, 1).

    SHOOT occupies the first interval, then PASS, then DRIBBLE.
    """
    total = scores[Action.SHOOT] + scores[Action.PASS] + scores[Action.DRIBBLE]
    roll = draw * total
    if roll < scores[Action.SHOOT]:
        return Action.SHOOT
    if roll < scores[Action.SHOOT] + scores[Action.PASS]:
        return Action.PASS
    return Action.DRIBBLE


def decide_next_move(player: Player, context: MoveContext, rng: RandomSource) -> Action:
    """Choose SHOOT, PASS or DRIBBLE for the ball carrier."""
    return select_action(action_scores(player, context), rng.random())
