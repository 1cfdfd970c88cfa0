"""
Main simulation script for running football matches.

Provides CLI interface, live text commentary and batch simulation
capabilities.
"""

import argparse
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ..engine.club import Club, generate_club, load_club
from ..engine.coach import CoachAI, MatchContext
from ..engine.config import DEFAULT_CONFIG, MatchConfig
from ..engine.errors import SimulationError
from ..engine.events import EventType, MatchEvent
from ..engine.match import MatchEngine
from ..engine.randomness import RandomSource

# Display text for the coach's message keys
COACH_LINES = {
    "winning_tight": "Hold on to this lead, keep it tight!",
    "losing_tight": "One goal in it, everybody forward!",
    "losing_badly": "Heads up, play for pride.",
    "wasteful": "We have the chances, finish them!",
    "under_pressure": "Sit deeper and hit them on the break.",
    "need_the_ball": "Win the ball back, press them!",
    "drawing_boring": "We have the ball, now hurt them!",
    "winning_comfortable": "Keep the ball, let them chase.",
}


def create_default_clubs(rng: RandomSource) -> Tuple[Club, Club]:
    """Create default home and away clubs for simulation."""
    home_club = generate_club("Home United", rng, base_skill=72,
                              play_style={'possession': 60, 'pressing': 65})
    away_club = generate_club("Away City", rng, base_skill=70, formation="4-3-3",
                              play_style={'pressing': 55, 'tempo': 75})
    return home_club, away_club


def describe_event(event: MatchEvent, home_name: str = "Home", away_name: str = "Away") -> str:
    """
    Render one event as a line of commentary.

    Args:
        event: Event from the match stream
        home_name: Display name of the home side
        away_name: Display name of the away side

    Returns:
        str: human-readable line prefixed with the minute
    """
    team = {"home": home_name, "away": away_name}.get(event.side.value if event.side else "", "")
    player = event.get("player", "")
    kind = event.type

    if kind is EventType.KICK_OFF:
        text = f"Kick-off: {home_name} ({event.get('home_formation')}) vs {away_name} ({event.get('away_formation')})"
    elif kind in (EventType.HALF_TIME, EventType.FULL_TIME):
        score = event.get("score", {})
        label = "Half-time" if kind is EventType.HALF_TIME else "Full-time"
        text = f"{label}: {home_name} {score.get('home', 0)}-{score.get('away', 0)} {away_name}"
    elif kind is EventType.GOAL:
        score = event.get("score", {})
        text = (f"GOAL! {player} scores for {team} (xG {event.get('xg', 0):.2f}) "
                f"{score.get('home', 0)}-{score.get('away', 0)}")
    elif kind is EventType.SAVE:
        text = f"Saved! {event.get('keeper')} denies {player}"
    elif kind is EventType.MISS:
        text = f"{player} ({team}) shoots wide"
    elif kind is EventType.PASS:
        prefix = "Counter-attack! " if event.get("counter") else ""
        text = f"{prefix}{player} finds {event.get('receiver')}"
    elif kind is EventType.INTERCEPT:
        text = f"{player} ({team}) intercepts the pass from {event.get('passer')}"
    elif kind is EventType.DRIBBLE:
        text = f"{player} ({team}) skips past {event.get('defender')}"
    elif kind is EventType.DEFENSE:
        action = "wins the header against" if event.get("kind") == "aerial" else "tackles"
        text = f"{player} ({team}) {action} {event.get('attacker')}"
    elif kind is EventType.FOUL:
        text = f"Foul by {player} ({team})"
    elif kind is EventType.YELLOW_CARD:
        text = f"Yellow card for {player} ({team})"
    elif kind is EventType.SUBSTITUTION:
        text = f"Substitution {team}: {player} replaces {event.get('player_out')} ({event.get('reason')})"
    elif kind is EventType.STATS_UPDATE:
        stats = event.get("stats", {})
        text = (f"Possession {stats.get('home', {}).get('possession_pct', 50):.0f}%-"
                f"{stats.get('away', {}).get('possession_pct', 50):.0f}%, "
                f"shots {stats.get('home', {}).get('shots', 0)}-{stats.get('away', {}).get('shots', 0)}")
    elif kind is EventType.COMMENTARY and event.get("kind") == "midfield":
        text = f"{player} ({team}) keeps the ball in midfield"
    elif kind is EventType.COMMENTARY:
        line = COACH_LINES.get(event.get("message"), "")
        if event.get("kind") == "tactic_change":
            text = f"{team} coach switches to {event.get('tactic')}. {line}".strip()
        else:
            text = f"{team} coach: {line}"
    else:
        text = kind.value

    return f"{event.minute:>3}' {text}"


def simulate_single_match(random_seed: Optional[int] = None,
                          verbose: bool = True,
                          home_club: Optional[Club] = None,
                          away_club: Optional[Club] = None,
                          config: MatchConfig = DEFAULT_CONFIG,
                          live: bool = False) -> Dict[str, Any]:
    """
    Simulate a single football match.

    Args:
        random_seed: Random seed for reproducibility
        verbose: Print detailed output
        home_club: Home club (generated if None)
        away_club: Away club (generated if None)
        config: Simulation tunables
        live: Print every event as it happens

    Returns:
        Dict containing match results and statistics
    """
    if verbose:
        print(f"Setting up match with seed: {random_seed}")

    rng = RandomSource(random_seed)
    if home_club is None or away_club is None:
        default_home, default_away = create_default_clubs(rng)
        home_club = home_club or default_home
        away_club = away_club or default_away

    # Pre-match preparation by both coaches
    home_preparation = CoachAI(home_club, rng).prepare_for_match(away_club, MatchContext(is_home=True))
    away_preparation = CoachAI(away_club, rng).prepare_for_match(home_club, MatchContext(is_home=False))

    engine = MatchEngine(home_club, away_club, home_preparation, away_preparation, config=config, rng=rng)

    start_time = time.time()
    for event in engine.play():
        if live:
            print(describe_event(event, home_club.name, away_club.name))
    simulation_time = time.time() - start_time

    match_result = engine.summary()
    if verbose:
        print(f"Simulation completed in {simulation_time:.2f} seconds")
        print_match_summary(match_result)

    return {
        **match_result,
        "simulation_time_seconds": simulation_time,
        "engine": engine  # For log export
    }


def simulate_matches(n_matches: int = 1,
                     random_seed: Optional[int] = None,
                     out_dir: str = "logs",
                     verbose: bool = True,
                     home_club: Optional[Club] = None,
                     away_club: Optional[Club] = None,
                     config: MatchConfig = DEFAULT_CONFIG,
                     live: bool = False) -> List[Dict[str, Any]]:
    """
    Simulate multiple football matches.

    Args:
        n_matches: Number of matches to simulate
        random_seed: Base random seed
        out_dir: Output directory for logs
        verbose: Print detailed output
        home_club: Home club for every match (generated if None)
        away_club: Away club for every match (generated if None)
        config: Simulation tunables
        live: Print every event as it happens

    Returns:
        List of match results
    """
    if verbose:
        print(f"Starting simulation of {n_matches} matches")
        print(f"Output directory: {out_dir}")

    # Create output directory
    os.makedirs(out_dir, exist_ok=True)

    results = []
    total_start_time = time.time()

    for i in range(n_matches):
        if verbose:
            print(f"\n--- Match {i+1}/{n_matches} ---")

        # Use different seed for each match if base seed provided
        match_seed = random_seed + i if random_seed is not None else None

        result = simulate_single_match(random_seed=match_seed, verbose=verbose,
                                       home_club=home_club, away_club=away_club,
                                       config=config, live=live)

        # Export logs
        try:
            csv_path, xes_path = result["engine"].export_logs(out_dir)
            result["log_files"] = {"csv": csv_path, "xes": xes_path}

            if verbose:
                print(f"Logs exported to: {csv_path}, {xes_path}")

        except OSError as e:
            print(f"Warning: Failed to export logs for match {i+1}: {e}")
            result["log_files"] = {"error": str(e)}

        # Remove engine from result to avoid serialization issues
        del result["engine"]
        results.append(result)

    total_time = time.time() - total_start_time

    if verbose:
        print(f"\n=== SIMULATION SUMMARY ===")
        print(f"Total matches: {n_matches}")
        print(f"Total time: {total_time:.2f} seconds")
        print(f"Average time per match: {total_time/max(1, n_matches):.2f} seconds")
        print_batch_summary(results)

    return results


def print_match_summary(result: Dict[str, Any]) -> None:
    """Print formatted match summary."""
    home, away = result['teams']['home'], result['teams']['away']
    print(f"\n=== MATCH SUMMARY ===")
    print(f"Final Score: {home} {result['final_score']['home']}-{result['final_score']['away']} {away}")
    print(f"Injury time: {result['injury_time']} min")

    table = pd.DataFrame({
        home: {
            'Possession %': round(result['possession']['home'], 1),
            'Shots': result['shots']['home'],
            'On target': result['shots_on_target']['home'],
            'xG': result['xg']['home'],
            'Corners': result['corners']['home'],
            'Fouls': result['fouls']['home'],
            'Yellow cards': result['yellow_cards']['home'],
            'Pass accuracy %': round(result['pass_accuracy']['home'], 1),
        },
        away: {
            'Possession %': round(result['possession']['away'], 1),
            'Shots': result['shots']['away'],
            'On target': result['shots_on_target']['away'],
            'xG': result['xg']['away'],
            'Corners': result['corners']['away'],
            'Fouls': result['fouls']['away'],
            'Yellow cards': result['yellow_cards']['away'],
            'Pass accuracy %': round(result['pass_accuracy']['away'], 1),
        },
    })
    print()
    print(table.to_string())

    if result.get('tactic_changes'):
        print(f"\nTactical changes:")
        for change in result['tactic_changes']:
            print(f"  {change['minute']}' {change['side']}: {change['tactic']}")

    ratings = sorted(result['player_ratings'].items(), key=lambda item: item[1], reverse=True)
    if ratings:
        print(f"\nBest rated: {ratings[0][0]} ({ratings[0][1]:.1f})")

    if 'event_log_stats' in result:
        stats = result['event_log_stats']
        print(f"\nEvent Log Stats:")
        print(f"  Total events: {stats.get('total_events', 0)}")
        print(f"  Events per minute: {stats.get('events_per_minute', 0):.1f}")
        print(f"  Possession chains: {stats.get('possession_chains', 0)}")


def print_batch_summary(results: List[Dict[str, Any]]) -> None:
    """Print summary statistics across multiple matches."""
    if not results:
        return

    df = pd.DataFrame([{
        'home_goals': r['final_score']['home'],
        'away_goals': r['final_score']['away'],
        'home_possession': r['possession']['home'],
        'home_xg': r['xg']['home'],
        'away_xg': r['xg']['away'],
    } for r in results])

    home_wins = int((df['home_goals'] > df['away_goals']).sum())
    away_wins = int((df['away_goals'] > df['home_goals']).sum())
    draws = len(df) - home_wins - away_wins

    print(f"\nResults Distribution:")
    print(f"  Home wins: {home_wins} ({home_wins/len(df)*100:.1f}%)")
    print(f"  Away wins: {away_wins} ({away_wins/len(df)*100:.1f}%)")
    print(f"  Draws: {draws} ({draws/len(df)*100:.1f}%)")

    print(f"\nAverages per match:")
    print(f"  Goals: {(df['home_goals'] + df['away_goals']).mean():.2f}")
    print(f"  Home possession: {df['home_possession'].mean():.1f}%")
    print(f"  Home xG: {df['home_xg'].mean():.2f}")
    print(f"  Away xG: {df['away_xg'].mean():.2f}")


def validate_simulation_output(results: List[Dict[str, Any]]) -> bool:
    """
    Validate simulation meets quality requirements.

    Returns:
        bool: True if all quality gates passed
    """
    print("\n=== QUALITY VALIDATION ===")

    passed_checks = 0
    total_checks = 5

    # Check 1: All matches completed
    if len(results) > 0 and all('final_score' in r for r in results):
        print("✓ All matches completed successfully")
        passed_checks += 1
    else:
        print("✗ Some matches failed to complete")

    # Check 2: Reasonable simulation time (< 2 minutes per match)
    avg_sim_time = sum(r.get('simulation_time_seconds', 0) for r in results) / max(1, len(results))
    if avg_sim_time < 120:
        print(f"✓ Average simulation time: {avg_sim_time:.2f}s (< 2 min requirement)")
        passed_checks += 1
    else:
        print(f"✗ Average simulation time: {avg_sim_time:.2f}s (> 2 min requirement)")

    # Check 3: Event logs generated
    logs_generated = sum(1 for r in results if 'log_files' in r and 'csv' in r['log_files'])
    if logs_generated == len(results):
        print(f"✓ Event logs generated for all {len(results)} matches")
        passed_checks += 1
    else:
        print(f"✗ Event logs missing for {len(results) - logs_generated} matches")

    # Check 4: Reasonable event counts
    if results and 'event_log_stats' in results[0]:
        avg_events = sum(r['event_log_stats'].get('total_events', 0) for r in results) / len(results)
        if 60 <= avg_events <= 600:
            print(f"✓ Average events per match: {avg_events:.0f} (reasonable range)")
            passed_checks += 1
        else:
            print(f"✗ Average events per match: {avg_events:.0f} (outside reasonable range)")
    else:
        print("✗ Event statistics not available")

    # Check 5: Score and xG bookkeeping
    consistent = all(r['xg']['home'] >= 0 and r['xg']['away'] >= 0
                     and r['shots_on_target']['home'] >= r['final_score']['home']
                     and r['shots_on_target']['away'] >= r['final_score']['away']
                     for r in results)
    if consistent:
        print("✓ Goals, shots on target and xG are consistent")
        passed_checks += 1
    else:
        print("✗ Goals exceed shots on target or xG is negative")

    # Overall result
    success_rate = passed_checks / total_checks
    print(f"\nValidation Result: {passed_checks}/{total_checks} checks passed ({success_rate*100:.1f}%)")

    if success_rate >= 0.8:
        print("✓ Quality requirements met")
        return True
    else:
        print("✗ Quality requirements not met")
        return False


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Tactical Football Match Simulation')
    parser.add_argument('--matches', type=int, default=1, help='Number of matches to simulate')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for reproducibility')
    parser.add_argument('--output-dir', type=str, default='logs', help='Output directory for logs')
    parser.add_argument('--home', type=str, help='Home club JSON file')
    parser.add_argument('--away', type=str, help='Away club JSON file')
    parser.add_argument('--max-subs', type=int, default=DEFAULT_CONFIG.substitutions.max_subs,
                        help='Substitutions allowed per side')
    parser.add_argument('--live', action='store_true', help='Print live commentary')
    parser.add_argument('--quiet', action='store_true', help='Suppress detailed output')
    parser.add_argument('--validate', action='store_true', help='Run quality validation')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    try:
        home_club = load_club(args.home) if args.home else None
        away_club = load_club(args.away) if args.away else None

        # Run simulation
        results = simulate_matches(
            n_matches=args.matches,
            random_seed=args.seed,
            out_dir=args.output_dir,
            verbose=not args.quiet,
            home_club=home_club,
            away_club=away_club,
            config=DEFAULT_CONFIG.with_max_subs(args.max_subs),
            live=args.live,
        )

        # Run validation if requested
        if args.validate:
            validation_passed = validate_simulation_output(results)
            if not validation_passed:
                sys.exit(1)

        print(f"\nSimulation completed successfully!")
        print(f"Logs saved to: {os.path.abspath(args.output_dir)}")

    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        sys.exit(1)
    except (SimulationError, OSError, ValueError) as e:
        print(f"Error during simulation: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
