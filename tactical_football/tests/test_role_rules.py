"""
Test lineup rules and constraints compliance.

Validates that lineups keep their shape and that substitutions follow the
safety constraints during simulation.
"""

from collections import Counter

from tactical_football.engine.config import DEFAULT_CONFIG
from tactical_football.engine.events import EventType
from tactical_football.engine.player import Position
from tactical_football.engine.team import Side


def test_lineups_keep_eleven_and_one_goalkeeper(played_engine):
    """Test that both lineups end the match with eleven players and one GK slot."""
    for team in (played_engine.home_team, played_engine.away_team):
        positions = Counter(slot.position for slot in team.lineup)
        assert len(team.lineup) == 11, f"{team.name} finished with {len(team.lineup)} players"
        assert positions[Position.GK] == 1, f"{team.name} has {positions[Position.GK]} goalkeeper slots"


def test_goalkeeper_slot_filled_by_goalkeeper(played_engine):
    """Test that substitutions never put an outfield player in goal."""
    for team in (played_engine.home_team, played_engine.away_team):
        keeper = team.lineup.goalkeeper()
        assert keeper.plays(Position.GK), f"{team.name} has {keeper.name} in goal"


def test_substitution_cap_respected(engine_factory):
    """Test that no side exceeds the substitution cap."""
    engine = engine_factory(seed=21, config=DEFAULT_CONFIG.with_max_subs(1))
    result = engine.simulate_match()

    per_side = Counter(e.side for e in result.events if e.type is EventType.SUBSTITUTION)
    for side in Side:
        assert per_side[side] <= 1, f"{side.value} made {per_side[side]} substitutions with a cap of 1"
        assert engine.state.team(side).subs_used <= 1


def test_substituted_players_never_return(played_engine):
    """Test that players taken off never act again."""
    events = played_engine.events
    for index, event in enumerate(events):
        if event.type is not EventType.SUBSTITUTION:
            continue
        gone = event.get('player_out')
        later = events[index + 1:]
        assert all(e.get('player') != gone and e.get('keeper') != gone for e in later), \
            f"{gone} appears after being substituted"


def test_substitution_events_match_team_state(played_engine):
    """Test that SUBSTITUTION events agree with the team bookkeeping."""
    for side in Side:
        team = played_engine.state.team(side)
        subs = [e for e in played_engine.events if e.type is EventType.SUBSTITUTION and e.side is side]
        assert len(subs) == team.subs_used
        assert {e.get('player_out') for e in subs} == {p.name for p in team.substituted_off}
        on_pitch = {p.name for p in team.players}
        assert all(e.get('player_out') not in on_pitch for e in subs)


def test_substitutions_after_minute_fifty(played_engine):
    """Test that no change happens before the second-half window."""
    subs = [e for e in played_engine.events if e.type is EventType.SUBSTITUTION]
    assert all(e.minute >= 50 for e in subs), "Substitution before minute 50"


def test_player_ratings_clamped(played_engine):
    """Test that every match rating stays within 1-10."""
    ratings = played_engine.result().player_ratings
    assert ratings, "No player ratings recorded"
    assert all(1.0 <= r <= 10.0 for r in ratings.values()), "Rating outside [1, 10]"
