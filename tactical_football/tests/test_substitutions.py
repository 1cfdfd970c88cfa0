"""
Test substitution gates, triggers and replacement search.
"""

import pytest

from tactical_football.engine.errors import PositionalGapError, SimulationError
from tactical_football.engine.player import Position
from tactical_football.engine.substitutions import SubstitutionEngine
from tactical_football.engine.team import Side


@pytest.fixture
def home_team(match_state):
    return match_state.team(Side.HOME)


def _slot_player(team, position):
    return team.lineup.at([position])[0]


def test_no_substitution_before_minute_fifty(home_team):
    """Test the earliest-minute gate."""
    _slot_player(home_team, Position.CB).condition = 30

    assert SubstitutionEngine().evaluate(home_team, 49) is None


def test_exhausted_player_replaced_by_same_position(home_team):
    """Test that the most tired player goes off for a like-for-like replacement."""
    centre_back = _slot_player(home_team, Position.CB)
    centre_back.condition = 40

    sub = SubstitutionEngine().evaluate(home_team, 60)

    assert sub is not None
    assert sub.player_out is centre_back
    assert sub.reason == "exhausted"
    assert sub.player_in.plays(Position.CB)
    assert sub.player_in in home_team.bench


def test_most_exhausted_player_chosen(home_team):
    """Test that the lowest condition below 55 is picked."""
    _slot_player(home_team, Position.ST).condition = 50
    centre_back = _slot_player(home_team, Position.CB)
    centre_back.condition = 45

    sub = SubstitutionEngine().evaluate(home_team, 60)

    assert sub.player_out is centre_back


def test_minimum_gap_between_substitutions(home_team):
    """Test that a side waits five minutes after its previous change."""
    _slot_player(home_team, Position.CB).condition = 40
    home_team.last_sub_minute = 57
    engine = SubstitutionEngine()

    assert engine.evaluate(home_team, 61) is None
    assert engine.evaluate(home_team, 62) is not None


def test_cap_closes_the_gate(home_team):
    """Test that no substitution is proposed once the cap is used."""
    _slot_player(home_team, Position.CB).condition = 40
    home_team.subs_used = home_team.max_subs

    assert SubstitutionEngine().evaluate(home_team, 60) is None


def test_tactical_substitution_after_seventy(home_team):
    """Test that a poor performer is replaced after minute 70 only."""
    striker = _slot_player(home_team, Position.ST)
    striker.match_rating = 5.2
    engine = SubstitutionEngine()

    assert engine.evaluate(home_team, 70) is None
    sub = engine.evaluate(home_team, 71)
    assert sub.player_out is striker
    assert sub.reason == "tactical"


def test_family_fallback(home_team, player_factory):
    """Test that a winger can replace a striker when no striker is left."""
    striker = _slot_player(home_team, Position.ST)
    winger = player_factory("w", Position.RW, current_rating=60)
    midfielder = player_factory("m", Position.CM, current_rating=90)
    home_team.bench = [midfielder, winger]

    assert SubstitutionEngine().find_replacement(striker, home_team.bench) is winger


def test_no_bench_player_in_family_means_no_substitution(home_team, player_factory):
    """Test that a positional gap yields no substitution."""
    striker = _slot_player(home_team, Position.ST)
    striker.condition = 30
    home_team.bench = [player_factory("gk2", Position.GK)]
    engine = SubstitutionEngine()

    with pytest.raises(PositionalGapError):
        engine.find_replacement(striker, home_team.bench)
    assert engine.evaluate(home_team, 60) is None


def test_midfielder_without_cover_stays_on(home_team, player_factory):
    """Test that midfield positions have no family fallback."""
    midfielder = _slot_player(home_team, Position.CM)
    home_team.bench = [player_factory("st2", Position.ST)]

    with pytest.raises(PositionalGapError):
        SubstitutionEngine().find_replacement(midfielder, home_team.bench)


def test_apply_substitution_bookkeeping(home_team):
    """Test that a swap keeps eleven players and retires the outgoing one."""
    centre_back = _slot_player(home_team, Position.CB)
    replacement = next(p for p in home_team.bench if p.plays(Position.CB))
    replacement.condition = 80

    position = home_team.apply_substitution(centre_back, replacement, 60)

    assert position is Position.CB
    assert len(home_team.lineup) == 11
    assert replacement in home_team.lineup
    assert centre_back not in home_team.lineup
    assert replacement not in home_team.bench
    assert replacement.condition == 100.0
    assert replacement.match_rating == 6.5
    assert home_team.subs_used == 1
    assert home_team.last_sub_minute == 60


def test_substituted_player_cannot_come_back(home_team):
    """Test that a player taken off can never re-enter."""
    centre_back = _slot_player(home_team, Position.CB)
    replacement = next(p for p in home_team.bench if p.plays(Position.CB))
    home_team.apply_substitution(centre_back, replacement, 60)

    with pytest.raises(SimulationError):
        home_team.apply_substitution(replacement, centre_back, 70)


def test_apply_substitution_over_cap_rejected(home_team):
    """Test that the team refuses swaps beyond the cap."""
    home_team.subs_used = home_team.max_subs
    striker = _slot_player(home_team, Position.ST)

    with pytest.raises(SimulationError):
        home_team.apply_substitution(striker, home_team.bench[0], 60)
