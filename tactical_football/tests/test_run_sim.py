"""
Test the command line runner and the text renderer.
"""

import os

from tactical_football.engine.events import EventType, MatchEvent
from tactical_football.engine.team import Side
from tactical_football.scripts.run_sim import describe_event, main, simulate_matches


def test_describe_goal():
    """Test that a goal is rendered with scorer, side and score."""
    event = MatchEvent(EventType.GOAL, 23, Side.AWAY,
                       {'player': 'A. Striker', 'xg': 0.28, 'score': {'home': 0, 'away': 1}})

    line = describe_event(event, "Home FC", "Away FC")

    assert line.startswith(" 23'")
    assert "A. Striker" in line and "Away FC" in line and "0-1" in line


def test_describe_coach_message():
    """Test that message keys are turned into text only by the renderer."""
    event = MatchEvent(EventType.COMMENTARY, 86, Side.HOME,
                       {'kind': 'tactic_change', 'tactic': 'ALL_OUT_ATTACK', 'message': 'losing_tight'})

    line = describe_event(event, "Home FC", "Away FC")

    assert "ALL_OUT_ATTACK" in line
    assert "everybody forward" in line


def test_simulate_matches_writes_logs(tmp_path):
    """Test batch simulation with log export."""
    results = simulate_matches(n_matches=2, random_seed=30, out_dir=str(tmp_path), verbose=False)

    assert len(results) == 2
    for result in results:
        assert os.path.exists(result['log_files']['csv'])
        assert 'engine' not in result


def test_main_runs_quietly(tmp_path, capsys):
    """Test the CLI entry point end to end."""
    main(['--matches', '1', '--seed', '5', '--output-dir', str(tmp_path), '--quiet', '--max-subs', '3'])

    out = capsys.readouterr().out
    assert "Simulation completed successfully!" in out
    assert any(name.endswith('.csv') for name in os.listdir(tmp_path))
