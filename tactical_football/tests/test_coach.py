"""
Test the pre-match coach: scouting, strategy, formation and selection.
"""

from collections import Counter

import pytest

from tactical_football.engine.club import generate_club
from tactical_football.engine.coach import (
    FORMATION_POSITIONS, CoachAI, MatchContext, OpponentAnalysis, SquadStatus,
)
from tactical_football.engine.player import Position
from tactical_football.engine.randomness import RandomSource
from tactical_football.engine.tactics import Tactic
from tactical_football.engine.team import Strategy


def _analysis(threat=70.0, solidity=70.0, vulnerable=(), pressing=50, formation="4-4-2"):
    return OpponentAnalysis(
        attacking_threat=threat, defensive_solidity=solidity, key_players=[],
        set_piece_danger='medium', vulnerable_areas=list(vulnerable), weak_positions=[],
        tactical_flaws=[], play_style={'formation': formation, 'pressing_intensity': pressing},
        form=7.0)


def _status(rating):
    return SquadStatus(total_players=18, average_rating=rating, average_fitness=100.0,
                       injuries=0, suspensions=0, form=7.0)


@pytest.fixture
def coach(clubs):
    return CoachAI(clubs[0], RandomSource(3))


def test_prepare_for_match_produces_a_full_lineup(clubs):
    """Test that the preparation names eleven distinct players with one keeper."""
    home, away = clubs
    preparation = CoachAI(home, RandomSource(3)).prepare_for_match(away, MatchContext(is_home=True))

    players = [player for _, player in preparation.lineup]
    positions = Counter(position for position, _ in preparation.lineup)

    assert preparation.formation in FORMATION_POSITIONS
    assert len(players) == 11
    assert len({p.player_id for p in players}) == 11
    assert positions[Position.GK] == 1
    assert len(preparation.player_roles) == 11
    assert preparation.analysis is not None
    assert preparation.initial_tactic in set(Tactic)


def test_much_stronger_opponent_means_counter_attack(coach):
    """Test the counter-attacking approach against a far stronger side."""
    strategy = coach.determine_strategy(_analysis(85, 85), _status(60), 'normal', True)

    assert strategy.approach == 'counter'
    assert strategy.defensive_line == 'low'
    assert CoachAI.initial_tactic(strategy) is Tactic.COUNTER_ATTACK


def test_even_match_at_home_presses(coach):
    """Test that home advantage in an even match means pressing high."""
    home = coach.determine_strategy(_analysis(70, 70), _status(72), 'normal', True)
    away = coach.determine_strategy(_analysis(70, 70), _status(72), 'normal', False)

    assert home.approach == 'attacking' and home.pressing == 'high'
    assert CoachAI.initial_tactic(home) is Tactic.HIGH_PRESS
    assert away.approach == 'balanced'
    assert CoachAI.initial_tactic(away) is Tactic.BALANCED


def test_weaknesses_shape_the_strategy(coach):
    """Test the width, tempo and build-up adjustments."""
    strategy = coach.determine_strategy(
        _analysis(70, 70, vulnerable=('flanks', 'pace_behind_defense'), pressing=80),
        _status(70), 'normal', False)

    assert strategy.width == 'wide'
    assert strategy.tempo == 'fast'
    assert strategy.build_up == 'direct'
    assert len(strategy.reasoning) == 4


def test_formation_counters_the_opponent(coach):
    """Test that the first candidate good against the opponent is picked."""
    attacking = Strategy(approach='attacking')
    defensive = Strategy(approach='defensive')

    assert coach.select_formation(attacking, _analysis(formation="4-4-2")) == "4-3-3"
    assert coach.select_formation(attacking, _analysis(formation="4-5-1")) == "4-2-3-1"
    assert coach.select_formation(defensive, _analysis(formation="4-4-2")) == "4-5-1"
    assert coach.select_formation(Strategy(), _analysis(formation="9-0-1")) == "4-2-3-1"


def test_injured_and_suspended_players_not_selected(clubs):
    """Test that unavailable players never start."""
    club = clubs[0]
    striker = next(p for p in club.squad.current_players if p.primary_position is Position.ST)
    striker.injured = True

    lineup = CoachAI(club, RandomSource(1)).select_starting_xi("4-4-2", Strategy())

    assert striker.player_id not in {p.player_id for _, p in lineup}
    assert len(lineup) == 11


def test_no_available_goalkeeper_leaves_slot_empty(clubs):
    """Test that the GK slot never falls back to an outfield player."""
    club = clubs[0]
    for player in club.squad.current_players:
        if player.plays(Position.GK):
            player.suspended = True

    lineup = CoachAI(club, RandomSource(1)).select_starting_xi("4-4-2", Strategy())

    assert Position.GK not in {position for position, _ in lineup}
    assert len(lineup) == 10


def test_analysis_of_generated_opponent(coach, clubs):
    """Test the scouting report on a generated squad."""
    report = coach.analyze_opponent(clubs[1])

    assert len(report.key_players) == 3
    ratings = [k['rating'] for k in report.key_players]
    assert ratings == sorted(ratings, reverse=True)
    assert report.set_piece_danger in ('high', 'medium')
    assert 1.0 <= report.form <= 10.0
    assert report.play_style['formation'] == clubs[1].tactics.default_formation


def test_match_importance():
    """Test the fixture importance levels."""
    assert CoachAI.evaluate_match_importance(MatchContext(competition='champions_league', round='final')) == 'crucial'
    assert CoachAI.evaluate_match_importance(MatchContext(matchday=34, league_position=2)) == 'important'
    assert CoachAI.evaluate_match_importance(MatchContext(derby=True)) == 'important'
    assert CoachAI.evaluate_match_importance(MatchContext()) == 'normal'


def test_high_pressing_opponent_flagged(coach):
    """Test the tactical flaw for sides that press very high."""
    opponent = generate_club("Pressers", RandomSource(9), play_style={'pressing': 80})

    assert 'vulnerable_to_long_balls' in coach.identify_tactical_flaws(opponent)


def test_match_memory_is_bounded(coach, clubs):
    """Test that only the last ten matches are remembered."""
    for number in range(12):
        coach.learn_from_match({'match': number}, clubs[1])

    assert len(coach.previous_matches) == 10
    assert coach.previous_matches[0] == {'match': 2}
    assert coach.opponent_profiles[clubs[1].club_id]['result'] == {'match': 11}
