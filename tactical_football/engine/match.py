"""
Main match engine for football simulation.

Runs a match minute by minute as a lazy event stream: possession, attack
chains, shots, fouls, fatigue, and the in-match coach reacting every minute.
"""

import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from ..logger.event_logger import MatchEventLogger
from . import attributes
from .club import Club
from .coach import CoachAI, Preparation
from .config import DEFAULT_CONFIG, MatchConfig
from .decisions import Action, MoveContext, decide_next_move
from .duels import ShotOutcome, aerial_duel, dribble_vs_tackle, resolve_shot
from .errors import SimulationError
from .events import Decision, EventType, MatchEvent
from .in_match_ai import InMatchAI, TacticalAI
from .player import Player, Position
from .randomness import RandomSource
from .state import MatchState, TeamStats
from .tactics import TacticalState
from .team import Side, Team
from .xg import ExpectedGoalsModel

logger = logging.getLogger(__name__)

CREATORS = (Position.CAM, Position.CM, Position.LW, Position.RW)
DEFENDERS = (Position.CB, Position.LB, Position.RB, Position.CDM)
FINISHERS = (Position.ST, Position.RW, Position.LW)
AERIAL_TARGETS = (Position.ST, Position.CF, Position.CB)
MIDFIELDERS = (Position.CDM, Position.CM, Position.CAM, Position.LM, Position.RM)


@dataclass
class SideResult:
    """Final figures of one side."""
    club: Club
    score: int
    stats: TeamStats


@dataclass
class MatchResult:
    """Everything extracted from a finished match."""
    match_id: str
    home: SideResult
    away: SideResult
    events: List[MatchEvent]
    player_ratings: Dict[str, float]
    date: datetime
    injury_time: int = 0
    tactic_history: List[Tuple[int, str, str]] = field(default_factory=list)

    @property
    def scoreline(self) -> str:
        return f"{self.home.club.name} {self.home.score}-{self.away.score} {self.away.club.name}"

    def side(self, side: Side) -> SideResult:
        return self.home if side is Side.HOME else self.away

    def stats_table(self) -> pd.DataFrame:
        """Statistics as a DataFrame, one row per stat and one column per side."""
        return pd.DataFrame({
            'home': self.home.stats.to_dict(),
            'away': self.away.stats.to_dict(),
        })

    def to_dict(self) -> Dict[str, Any]:
        """Generate comprehensive match summary."""
        home, away = self.home.stats, self.away.stats
        total_possession = max(1, home.possession + away.possession)
        return {
            "match_id": self.match_id,
            "date": self.date.isoformat(),
            "final_score": {"home": self.home.score, "away": self.away.score},
            "teams": {"home": self.home.club.name, "away": self.away.club.name},
            "possession": {
                "home": home.possession / total_possession * 100.0,
                "away": away.possession / total_possession * 100.0,
            },
            "shots": {"home": home.shots, "away": away.shots},
            "shots_on_target": {"home": home.shots_on_target, "away": away.shots_on_target},
            "xg": {"home": round(home.xg, 2), "away": round(away.xg, 2)},
            "corners": {"home": home.corners, "away": away.corners},
            "fouls": {"home": home.fouls, "away": away.fouls},
            "yellow_cards": {"home": home.yellow_cards, "away": away.yellow_cards},
            "pass_accuracy": {"home": home.get_pass_accuracy(), "away": away.get_pass_accuracy()},
            "injury_time": self.injury_time,
            "player_ratings": dict(self.player_ratings),
            "tactic_changes": [
                {"minute": minute, "side": side, "tactic": tactic}
                for minute, side, tactic in self.tactic_history
            ],
        }


class MatchEngine:
    """
    Minute-by-minute football match simulation engine.

    Implements:
    - KICK_OFF, 45 minutes, HALF_TIME, 45 minutes plus injury time, FULL_TIME
    - possession weighted by the lineups' passing
    - attack chains with bounded counter-attacks
    - shots, saves, corners and aerial duels
    - fatigue and match-rating drift
    - the tactical AI consulted for both sides every minute
    - event logs for process mining

    The event stream from ``play()`` can be consumed exactly once.
    """

    def __init__(self,
                 home_club: Club,
                 away_club: Club,
                 home_preparation: Optional[Preparation] = None,
                 away_preparation: Optional[Preparation] = None,
                 config: MatchConfig = DEFAULT_CONFIG,
                 rng: Optional[RandomSource] = None,
                 tactical_ai: Optional[TacticalAI] = None,
                 kickoff: Optional[datetime] = None,
                 match_id: Optional[str] = None):
        """
        Initialize match engine with two clubs.

        Args:
            home_club: Home club
            away_club: Away club
            home_preparation: Coach preparation (default selection if None)
            away_preparation: Coach preparation (default selection if None)
            config: Simulation tunables
            rng: Random source (unseeded if None)
            tactical_ai: In-match coach port (rule-based InMatchAI if None)
            kickoff: Wall-clock kickoff used for event timestamps
            match_id: Identifier used for logs

        Raises:
            MissingDataError: if a lineup is short or has no goalkeeper
        """
        self.config = config
        self.rng = rng or RandomSource()
        self.xg_model = ExpectedGoalsModel(config.shots)
        self.kickoff_time = kickoff or datetime.now()
        self.match_id = match_id or f"match_{self.kickoff_time.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"

        home_preparation = home_preparation or CoachAI(home_club, self.rng).default_preparation(is_home=True)
        away_preparation = away_preparation or CoachAI(away_club, self.rng).default_preparation(is_home=False)

        teams = {
            Side.HOME: self._build_team(home_club, Side.HOME, home_preparation),
            Side.AWAY: self._build_team(away_club, Side.AWAY, away_preparation),
        }
        tactics = TacticalState(home_preparation.initial_tactic, away_preparation.initial_tactic)
        self.state = MatchState(teams=teams, tactics=tactics)

        self.tactical_ai = tactical_ai or InMatchAI(self.rng, config)
        self.event_logger = MatchEventLogger(self.match_id, self.kickoff_time)
        self.events: List[MatchEvent] = []
        self._started = False
        self._finished = False

    def _build_team(self, club: Club, side: Side, preparation: Preparation) -> Team:
        return Team.from_selection(club, side, preparation.lineup,
                                   formation=preparation.formation,
                                   strategy=preparation.strategy,
                                   max_subs=self.config.substitutions.max_subs,
                                   starting_rating=self.config.ratings.starting_rating)

    @property
    def home_team(self) -> Team:
        return self.state.teams[Side.HOME]

    @property
    def away_team(self) -> Team:
        return self.state.teams[Side.AWAY]

    @property
    def finished(self) -> bool:
        return self._finished

    # Stream

    def play(self) -> Iterator[MatchEvent]:
        """
        Start the match and return its event stream.

        Raises:
            SimulationError: if the match was already started
        """
        if self._started:
            raise SimulationError(f"Match {self.match_id} has already been played")
        self._started = True
        return self._run()

    def simulate_match(self) -> MatchResult:
        """
        Simulate the complete match.

        Returns:
            MatchResult containing score, statistics, events and ratings
        """
        logger.info("Starting match: %s vs %s", self.home_team.name, self.away_team.name)
        for _ in self.play():
            pass
        return self.result()

    def _run(self) -> Iterator[MatchEvent]:
        state = self.state
        clock = self.config.clock

        state.injury_time = self.rng.randint(*clock.injury_time_range)
        yield self._emit(EventType.KICK_OFF, 0, None,
                         home=self.home_team.name, away=self.away_team.name,
                         home_formation=self.home_team.formation,
                         away_formation=self.away_team.formation,
                         score=state.scoreline())

        for minute in range(1, clock.half_length + 1):
            yield from self._simulate_minute(minute)

        yield self._emit(EventType.HALF_TIME, clock.half_length, None, score=state.scoreline())
        logger.info("Half-time: %s %d-%d %s", self.home_team.name, state.score[Side.HOME],
                    state.score[Side.AWAY], self.away_team.name)
        state.half = 2

        for minute in range(clock.half_length + 1, clock.full_length + state.injury_time + 1):
            yield from self._simulate_minute(minute)

        self._finished = True
        yield self._emit(EventType.FULL_TIME, state.minute, None,
                         score=state.scoreline(), stats=state.snapshot())
        logger.info("Full-time: %s %d-%d %s", self.home_team.name, state.score[Side.HOME],
                    state.score[Side.AWAY], self.away_team.name)

    def _emit(self, event_type: EventType, minute: int, side: Optional[Side], **payload) -> MatchEvent:
        event = MatchEvent(event_type, minute, side, payload)
        self.events.append(event)
        team_id = self.state.teams[side].club.club_id if side else "match"
        self.event_logger.log_event(event, team_id)
        return event

    def _simulate_minute(self, minute: int) -> Iterator[MatchEvent]:
        """Simulate single minute of the match."""
        state = self.state
        clock = self.config.clock
        state.minute = minute

        self._drain_stamina()

        side = self._possession_side()
        state.stats[side].possession += 1

        roll = self.rng.random()
        if roll < clock.base_attack_chance * state.tactics.modifier(side).tempo:
            yield from self._attack_chain(side)
        elif roll < clock.midfield_action_ceiling:
            player = self._pick(state.team(side), MIDFIELDERS)
            yield self._emit(EventType.COMMENTARY, minute, side, kind="midfield", player=player.name)
        elif roll < clock.foul_ceiling:
            yield from self._foul(side.opponent)

        if minute % clock.stats_interval == 0:
            yield self._emit(EventType.STATS_UPDATE, minute, None,
                             score=state.scoreline(), stats=state.snapshot())

        for coached in (Side.HOME, Side.AWAY):
            yield from self._consult_ai(coached)

    def _drain_stamina(self) -> None:
        base = self.config.clock.stamina_drain_per_minute
        for team in self.state.teams.values():
            for player in team.players:
                player.drain(player.fatigue_rate(base))

    def _possession_side(self) -> Side:
        weights = [sum(attributes.technical(p, 'short_passing') for p in self.state.team(side).players)
                   for side in (Side.HOME, Side.AWAY)]
        return (Side.HOME, Side.AWAY)[self.rng.roulette(weights)]

    def _pick(self, team: Team, positions: Iterable[Position]) -> Player:
        """Random player from the given slots, any outfield player if none."""
        candidates = team.lineup.at(positions) or team.lineup.outfield()
        return self.rng.choice(candidates)

    def _goalkeeper(self, team: Team) -> Player:
        return team.lineup.goalkeeper()

    # Attack chain

    def _attack_chain(self, side: Side) -> Iterator[MatchEvent]:
        """
        Resolve one attacking move.

        An intercepted pass can turn into a counter-attack for the other side;
        counters re-enter the loop at most ``max_counter_depth`` times.
        """
        state = self.state
        clock = self.config.clock
        ratings = self.config.ratings
        shots = self.config.shots
        minute = state.minute

        attacking = side
        is_counter = False
        depth = 0
        while True:
            defending = attacking.opponent
            att_team, def_team = state.team(attacking), state.team(defending)
            creator = self._pick(att_team, CREATORS)
            defender = self._pick(def_team, DEFENDERS)
            keeper = self._goalkeeper(def_team)

            if is_counter:
                action = Action.PASS
            else:
                context = MoveContext(att_team.lineup.position_of(creator), state.score_diff(attacking), minute)
                action = decide_next_move(creator, context, self.rng)

            if action is Action.PASS:
                bonus = clock.counter_pass_bonus if is_counter else 1.0
                pass_skill = ((attributes.technical(creator, 'short_passing') + attributes.mental(creator, 'vision'))
                              * bonus * state.tactics.modifier(attacking).attack * self.rng.random())
                intercept_skill = ((attributes.mental(defender, 'positioning') + attributes.technical(defender, 'marking'))
                                   * state.tactics.modifier(defending).defense * self.rng.random())
                state.stats[attacking].passes_attempted += 1

                if pass_skill > intercept_skill:
                    state.stats[attacking].passes_completed += 1
                    creator.adjust_rating(ratings.pass_completed)
                    shooter = self._pick(att_team, FINISHERS)
                    yield self._emit(EventType.PASS, minute, attacking, player=creator.name,
                                     receiver=shooter.name, counter=is_counter)
                    if is_counter:
                        yield from self._shot(attacking, shooter, keeper, shots.counter_multiplier, True, "counter")
                    else:
                        yield from self._shot(attacking, shooter, keeper, shots.through_ball_multiplier, False,
                                              "through_ball")
                    return

                creator.adjust_rating(ratings.pass_intercepted)
                defender.adjust_rating(ratings.interception)
                state.stats[defending].interceptions += 1
                yield self._emit(EventType.INTERCEPT, minute, defending, player=defender.name,
                                 passer=creator.name, counter=is_counter)
                if depth < clock.max_counter_depth and self.rng.chance(clock.counter_attack_chance):
                    depth += 1
                    attacking = defending
                    is_counter = True
                    continue
                return

            if action is Action.DRIBBLE:
                duel = dribble_vs_tackle(creator, defender)
                if duel.attacker_wins:
                    state.stats[attacking].dribbles_won += 1
                    creator.adjust_rating(ratings.dribble_won)
                    defender.adjust_rating(ratings.dribbled_past)
                    yield self._emit(EventType.DRIBBLE, minute, attacking, player=creator.name,
                                     defender=defender.name)
                    yield from self._shot(attacking, creator, keeper, shots.dribble_multiplier, False, "dribble")
                else:
                    state.stats[defending].tackles_won += 1
                    defender.adjust_rating(ratings.tackle_won)
                    yield self._emit(EventType.DEFENSE, minute, defending, player=defender.name,
                                     attacker=creator.name, kind="tackle")
                return

            yield from self._shot(attacking, creator, keeper, shots.long_shot_multiplier, False, "long_shot")
            return

    def _shot(self, side: Side, shooter: Player, keeper: Player, multiplier: float,
              is_counter: bool, kind: str, allow_corner: bool = True) -> Iterator[MatchEvent]:
        """Resolve a shot and update score, statistics and ratings."""
        state = self.state
        shots = self.config.shots
        ratings = self.config.ratings
        stats = state.stats[side]

        pressure = shots.counter_pressure if is_counter else self.rng.uniform(0.0, shots.open_play_max_pressure)
        result = resolve_shot(shooter, keeper, pressure, multiplier, self.rng, self.xg_model, shots)

        stats.shots += 1
        stats.xg += result.xg
        details = dict(player=shooter.name, keeper=keeper.name, kind=kind, counter=is_counter,
                       shot_quality=round(result.shot_quality, 1),
                       save_quality=round(result.save_quality, 1),
                       xg=round(result.xg, 3),
                       big_chance=self.xg_model.is_good_shot_opportunity(result.xg))

        if result.outcome is ShotOutcome.GOAL:
            stats.shots_on_target += 1
            state.score[side] += 1
            shooter.adjust_rating(ratings.goal)
            keeper.adjust_rating(ratings.goal_conceded)
            logger.debug("%d' GOAL %s (%s)", state.minute, shooter.name, state.team(side).name)
            yield self._emit(EventType.GOAL, state.minute, side, score=state.scoreline(), **details)
        elif result.outcome is ShotOutcome.SAVE:
            stats.shots_on_target += 1
            stats.corners += 1
            keeper.adjust_rating(ratings.save)
            yield self._emit(EventType.SAVE, state.minute, side, score=state.scoreline(), **details)
            if allow_corner:
                yield from self._corner(side)
        else:
            shooter.adjust_rating(ratings.shot_missed)
            yield self._emit(EventType.MISS, state.minute, side, score=state.scoreline(), **details)

    def _corner(self, side: Side) -> Iterator[MatchEvent]:
        """Corner after a save: maybe an aerial duel and a header."""
        if not self.rng.chance(self.config.shots.corner_aerial_chance):
            return
        state = self.state
        att_team, def_team = state.team(side), state.team(side.opponent)
        targets = att_team.lineup.at(AERIAL_TARGETS) or att_team.lineup.outfield()
        attacker = max(targets, key=lambda p: p.height)
        defender = self._pick(def_team, (Position.CB,))

        if aerial_duel(attacker, defender).attacker_wins:
            yield from self._shot(side, attacker, self._goalkeeper(def_team),
                                  self.config.shots.header_multiplier, False, "header", allow_corner=False)
        else:
            yield self._emit(EventType.DEFENSE, state.minute, side.opponent, player=defender.name,
                             attacker=attacker.name, kind="aerial")

    def _foul(self, side: Side) -> Iterator[MatchEvent]:
        """Foul committed by ``side``, sometimes punished with a yellow card."""
        state = self.state
        ratings = self.config.ratings
        offender = self.rng.choice(state.team(side).lineup.outfield())
        state.stats[side].fouls += 1
        offender.adjust_rating(ratings.foul)
        yield self._emit(EventType.FOUL, state.minute, side, player=offender.name)

        if self.rng.chance(self.config.clock.yellow_card_chance):
            state.stats[side].yellow_cards += 1
            offender.adjust_rating(ratings.yellow_card)
            yield self._emit(EventType.YELLOW_CARD, state.minute, side, player=offender.name)

    # Coach

    def _consult_ai(self, side: Side) -> Iterator[MatchEvent]:
        """Ask the tactical AI for a decision and apply it."""
        state = self.state
        try:
            decision = self.tactical_ai.evaluate(state, side)
        except Exception as exc:
            logger.warning("%d' %s coach decision skipped: %s", state.minute, side.value, exc)
            return
        yield from self._apply_decision(side, decision)

    def _apply_decision(self, side: Side, decision: Decision) -> Iterator[MatchEvent]:
        state = self.state
        minute = state.minute
        team = state.team(side)
        message = decision.message.value if decision.message else None

        if decision.tactic_change is not None and state.tactics.change(side, decision.tactic_change, minute):
            yield self._emit(EventType.COMMENTARY, minute, side, kind="tactic_change",
                             tactic=decision.tactic_change.value, message=message)
        elif message is not None:
            yield self._emit(EventType.COMMENTARY, minute, side, kind="coach_message", message=message)

        sub = decision.substitution
        if sub is None:
            return
        try:
            position = team.apply_substitution(sub.player_out, sub.player_in, minute,
                                               self.config.ratings.substitute_rating)
        except SimulationError as exc:
            logger.warning("%d' %s substitution rejected: %s", minute, team.name, exc)
            return
        logger.info("%d' %s substitution: %s on for %s (%s)", minute, team.name,
                    sub.player_in.name, sub.player_out.name, sub.reason)
        yield self._emit(EventType.SUBSTITUTION, minute, side, player=sub.player_in.name,
                         player_out=sub.player_out.name, position=position.value,
                         reason=sub.reason, detail=sub.detail, subs_used=team.subs_used)

    # Results

    def result(self) -> MatchResult:
        """
        Extract the result of a finished match.

        Raises:
            SimulationError: if the match has not finished yet
        """
        if not self._finished:
            raise SimulationError(f"Match {self.match_id} has not finished")
        state = self.state
        ratings = {}
        for team in (self.home_team, self.away_team):
            for player in team.all_participants():
                ratings[player.name] = round(player.match_rating, 2)
        return MatchResult(
            match_id=self.match_id,
            home=SideResult(self.home_team.club, state.score[Side.HOME], state.stats[Side.HOME]),
            away=SideResult(self.away_team.club, state.score[Side.AWAY], state.stats[Side.AWAY]),
            events=list(self.events),
            player_ratings=ratings,
            date=self.kickoff_time,
            injury_time=state.injury_time,
            tactic_history=[(minute, side.value, tactic.value) for minute, side, tactic in state.tactics.history],
        )

    def summary(self) -> Dict[str, Any]:
        """Match summary plus event-log statistics."""
        summary = self.result().to_dict()
        summary["event_log_stats"] = self.event_logger.get_summary_stats()
        summary["tactical_patterns"] = self.event_logger.analyze_tactical_patterns()
        return summary

    def export_logs(self, output_dir: str = "logs") -> Tuple[str, str]:
        """
        Export match logs to CSV and XES formats.

        Returns:
            Tuple of (csv_path, xes_path)
        """
        os.makedirs(output_dir, exist_ok=True)
        csv_path = os.path.join(output_dir, f"{self.match_id}.csv")
        xes_path = os.path.join(output_dir, f"{self.match_id}.xes")

        self.event_logger.export_to_csv(csv_path)
        self.event_logger.export_to_xes(xes_path)

        return csv_path, xes_path
