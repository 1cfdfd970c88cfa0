"""
Test shot, dribble and aerial duel resolution.
"""

import pytest

from tactical_football.engine.duels import (
    ShotOutcome, aerial_duel, base_save_quality, dribble_vs_tackle, judge_shot, resolve_shot, save_quality,
    shot_quality,
)
from tactical_football.engine.player import Position
from tactical_football.engine.xg import ExpectedGoalsModel


@pytest.fixture
def striker(player_factory):
    return player_factory("st", Position.ST,
                          technical={'finishing': 90, 'shot_power': 85},
                          mental={'composure': 80},
                          physical={'balance': 70})


@pytest.fixture
def keeper(player_factory):
    return player_factory("gk", Position.GK,
                          goalkeeper={'reflexes': 60, 'positioning': 60, 'handling': 60},
                          physical={'jumping': 60}, height=180)


def test_striker_against_average_keeper_scores(striker, keeper, scripted):
    """Test the reference duel: clean striker finish beats an average keeper."""
    assert shot_quality(striker, 0, 1.0) == pytest.approx(84.5)
    assert base_save_quality(keeper) == pytest.approx(66.0)
    # a draw of 0.5 is a form factor of 1.0
    assert save_quality(keeper, scripted([0.5])) == pytest.approx(66.0)

    result = resolve_shot(striker, keeper, 0, 1.0, scripted([0.5]), ExpectedGoalsModel())

    assert result.outcome is ShotOutcome.GOAL
    assert result.on_target
    assert result.xg == pytest.approx(84.5 / 300)


def test_goal_requires_more_than_ten_point_margin():
    """Test the GOAL / SAVE / MISS bands."""
    assert judge_shot(70.1, 60.0) is ShotOutcome.GOAL
    assert judge_shot(70.0, 60.0) is ShotOutcome.SAVE
    assert judge_shot(40.1, 60.0) is ShotOutcome.SAVE
    assert judge_shot(40.0, 60.0) is ShotOutcome.MISS


def test_multiplier_scales_shot_quality(striker):
    """Test that situational multipliers scale the whole shot."""
    assert shot_quality(striker, 0, 1.3) == pytest.approx(84.5 * 1.3)
    assert shot_quality(striker, 0, 0.8) == pytest.approx(84.5 * 0.8)


def test_pressure_lowers_shot_quality(striker):
    """Test that closing the shooter down makes the shot worse."""
    assert shot_quality(striker, 60, 1.0) < shot_quality(striker, 0, 1.0)


def test_tie_goes_to_the_defender(player_factory):
    """Test that equal duel scores are won by the defending player."""
    attacker = player_factory("a", Position.CB)
    defender = player_factory("d", Position.CB)

    assert not aerial_duel(attacker, defender).attacker_wins
    assert not dribble_vs_tackle(attacker, defender).attacker_wins


def test_height_wins_headers(player_factory):
    """Test that a taller player wins an otherwise even aerial duel."""
    tall = player_factory("t", Position.ST, height=195)
    short = player_factory("s", Position.CB, height=175)

    assert aerial_duel(tall, short).attacker_wins
    assert not aerial_duel(short, tall).attacker_wins


def test_skilful_dribbler_beats_slow_tackler(player_factory):
    """Test the weighted dribble-versus-tackle contest."""
    dribbler = player_factory("w", Position.LW, technical={'dribbling': 90},
                              physical={'agility': 88, 'acceleration': 90, 'balance': 80})
    tackler = player_factory("b", Position.LB, technical={'tackling': 60},
                             physical={'strength': 60, 'pace': 55}, mental={'positioning': 55})

    assert dribble_vs_tackle(dribbler, tackler).attacker_wins


def test_xg_bounds():
    """Test that a single shot contributes between 0 and 0.8 xG."""
    model = ExpectedGoalsModel()

    assert model.expected_goal(0) == 0.0
    assert model.expected_goal(-20) == 0.0
    assert model.expected_goal(150) == pytest.approx(0.5)
    assert model.expected_goal(1000) == 0.8
    assert model.is_good_shot_opportunity(0.2)
    assert not model.is_good_shot_opportunity(0.05)
