"""
Test attribute evaluation under fatigue and pressure.
"""

import pytest

from tactical_football.engine import attributes
from tactical_football.engine.player import AttributeCategory, Position


def test_no_fatigue_penalty_above_threshold():
    """Test that condition 50 and above leaves attributes untouched."""
    assert attributes.fatigue_penalty(100) == 1.0
    assert attributes.fatigue_penalty(50) == 1.0


def test_fatigue_penalty_below_threshold():
    """Test the 0.5 + condition/100 penalty once condition drops below 50."""
    assert attributes.fatigue_penalty(49) == pytest.approx(0.99)
    assert attributes.fatigue_penalty(20) == pytest.approx(0.7)
    assert attributes.fatigue_penalty(0) == pytest.approx(0.5)


def test_tired_player_loses_physical_value(player_factory):
    """Test that fatigue scales every category."""
    player = player_factory("p1", Position.LW, physical={'pace': 80})
    player.condition = 40

    assert attributes.physical(player, 'pace') == pytest.approx(72.0)


def test_pressure_only_hits_technical_attributes(player_factory):
    """Test that pressure reduces technical but not mental attributes."""
    player = player_factory("p1", Position.ST, technical={'finishing': 80},
                            mental={'composure': 0, 'vision': 70})

    assert attributes.technical(player, 'finishing', pressure=100) == pytest.approx(30.0)
    assert attributes.mental(player, 'vision', pressure=100) == pytest.approx(70.0)


def test_composure_absorbs_pressure(player_factory):
    """Test that a fully composed player ignores pressure."""
    player = player_factory("p1", Position.ST, technical={'finishing': 80}, mental={'composure': 100})

    assert attributes.technical(player, 'finishing', pressure=100) == pytest.approx(80.0)


def test_effective_value_clamped(player_factory):
    """Test that results stay within [1, 100] for out-of-range input."""
    strong = player_factory("p1", Position.ST, technical={'finishing': 150})
    weak = player_factory("p2", Position.ST, technical={'finishing': 10}, mental={'composure': 0})

    assert attributes.effective(strong, AttributeCategory.TECHNICAL, 'finishing') == 100.0
    assert attributes.effective(weak, AttributeCategory.TECHNICAL, 'finishing', pressure=500) == 1.0
