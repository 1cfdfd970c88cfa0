"""
Pre-match coach.

Scouts the opponent, assesses the own squad and produces a Preparation:
strategy, formation, starting eleven, player roles, match instructions and
the tactic the side kicks off with.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .club import Club
from .player import Player, Position
from .randomness import RandomSource
from .tactics import Tactic
from .team import Strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormationProfile:
    """Knowledge-base entry for one formation."""
    attacking: int
    defensive: int
    good_against: Tuple[str, ...]
    weak_against: Tuple[str, ...]
    strengths: Tuple[str, ...]


FORMATIONS: Dict[str, FormationProfile] = {
    "4-3-3": FormationProfile(9, 6, ("4-4-2", "3-5-2"), ("5-4-1", "4-5-1"),
                              ("wide_play", "high_press", "wing_dominance")),
    "4-2-3-1": FormationProfile(8, 7, ("4-3-3", "4-5-1"), ("3-5-2", "4-4-2"),
                                ("central_control", "counter_attack", "flexibility")),
    "4-4-2": FormationProfile(7, 7, ("4-3-3", "3-4-3"), ("4-2-3-1", "3-5-2"),
                              ("balance", "compactness", "simplicity")),
    "4-1-4-1": FormationProfile(7, 8, ("4-2-3-1", "4-3-3"), ("4-4-2",),
                                ("defensive_stability", "midfield_numbers")),
    "5-4-1": FormationProfile(5, 9, ("4-3-3", "3-5-2"), ("4-4-2",),
                              ("defensive_solidity", "wide_coverage")),
    "4-5-1": FormationProfile(6, 8, ("4-4-2", "4-2-3-1"), ("3-5-2",),
                              ("midfield_control", "counter", "compactness")),
    "3-5-2": FormationProfile(8, 7, ("4-4-2", "4-5-1"), ("4-3-3",),
                              ("wing_backs", "central_overload", "width")),
    "3-4-3": FormationProfile(9, 5, ("4-4-2", "5-4-1"), ("4-3-3", "3-5-2"),
                              ("attacking_width", "pressing", "forward_numbers")),
}

P = Position
FORMATION_POSITIONS: Dict[str, Tuple[Position, ...]] = {
    "4-3-3": (P.GK, P.LB, P.CB, P.CB, P.RB, P.CDM, P.CM, P.CM, P.LW, P.ST, P.RW),
    "4-2-3-1": (P.GK, P.LB, P.CB, P.CB, P.RB, P.CDM, P.CDM, P.LW, P.CAM, P.RW, P.ST),
    "4-4-2": (P.GK, P.LB, P.CB, P.CB, P.RB, P.LM, P.CM, P.CM, P.RM, P.ST, P.ST),
    "4-1-4-1": (P.GK, P.LB, P.CB, P.CB, P.RB, P.CDM, P.LM, P.CM, P.CM, P.RM, P.ST),
    "4-5-1": (P.GK, P.LB, P.CB, P.CB, P.RB, P.LM, P.CDM, P.CM, P.CM, P.RM, P.ST),
    "5-4-1": (P.GK, P.LWB, P.CB, P.CB, P.CB, P.RWB, P.CM, P.CM, P.CM, P.CM, P.ST),
    "3-5-2": (P.GK, P.CB, P.CB, P.CB, P.LWB, P.CDM, P.CM, P.CM, P.RWB, P.ST, P.ST),
    "3-4-3": (P.GK, P.CB, P.CB, P.CB, P.LM, P.CM, P.CM, P.RM, P.LW, P.ST, P.RW),
}

FORMATION_CANDIDATES = {
    "attacking": ("4-3-3", "4-2-3-1", "3-4-3"),
    "counter": ("4-5-1", "5-4-1", "4-4-2"),
    "defensive": ("5-4-1", "4-5-1", "4-1-4-1"),
}
DEFAULT_CANDIDATES = ("4-2-3-1", "4-4-2", "4-1-4-1")

# Lines a slot can fall back to when nobody plays the exact position
COVER_GROUPS = (
    frozenset({P.CB, P.LB, P.RB, P.LWB, P.RWB}),
    frozenset({P.CDM, P.CM, P.CAM, P.LM, P.RM}),
    frozenset({P.ST, P.CF, P.LW, P.RW}),
)

ROLE_NAMES = {
    P.GK: "goalkeeper",
    P.LB: "full_back", P.RB: "full_back",
    P.CB: "central_defender",
    P.LWB: "wing_back", P.RWB: "wing_back",
    P.CDM: "defensive_midfielder",
    P.CM: "central_midfielder",
    P.CAM: "attacking_midfielder",
    P.LM: "wide_midfielder", P.RM: "wide_midfielder",
    P.LW: "winger", P.RW: "winger",
    P.ST: "striker", P.CF: "striker",
}

MEMORY_SIZE = 10


@dataclass
class MatchContext:
    """Fixture facts the coach takes into account."""
    is_home: bool = True
    competition: str = "league"
    round: Optional[str] = None
    matchday: int = 1
    league_position: Optional[int] = None
    derby: bool = False


@dataclass
class OpponentAnalysis:
    """Scouting report on the next opponent."""
    attacking_threat: float
    defensive_solidity: float
    key_players: List[Dict[str, Any]]
    set_piece_danger: str
    vulnerable_areas: List[str]
    weak_positions: List[str]
    tactical_flaws: List[str]
    play_style: Dict[str, Any]
    form: float


@dataclass
class SquadStatus:
    """Own squad availability and shape."""
    total_players: int
    average_rating: float
    average_fitness: float
    injuries: int
    suspensions: int
    form: float


@dataclass
class PlayerRole:
    """Role and individual instructions for one lineup slot."""
    position: Position
    player: Player
    role: str
    instructions: List[str] = field(default_factory=list)


@dataclass
class Preparation:
    """Everything the coach hands to the match engine at kickoff."""
    strategy: Strategy
    formation: str
    lineup: List[Tuple[Position, Player]]
    player_roles: List[PlayerRole]
    instructions: Dict[str, Dict[str, str]]
    analysis: Optional[OpponentAnalysis] = None
    importance: str = "normal"
    initial_tactic: Tactic = Tactic.BALANCED


def _mean(values: Sequence[float], default: float) -> float:
    return float(np.mean(values)) if len(values) else default


class CoachAI:
    """
    Strategic pre-match coach for one club.

    Implements the preparation pipeline:
    1. opponent analysis
    2. squad assessment
    3. match importance
    4. strategy
    5. formation
    6. starting eleven
    7. roles and instructions
    8. initial tactic
    """

    def __init__(self, club: Club, rng: Optional[RandomSource] = None):
        self.club = club
        self.rng = rng or RandomSource()
        self.previous_matches: Deque[Dict[str, Any]] = deque(maxlen=MEMORY_SIZE)
        self.opponent_profiles: Dict[str, Dict[str, Any]] = {}

    def prepare_for_match(self, opponent: Club, context: Optional[MatchContext] = None) -> Preparation:
        """
        Build the full match preparation against ``opponent``.

        Args:
            opponent: Club we are facing
            context: Fixture facts (home game in the league if None)

        Returns:
            Preparation: strategy, formation, lineup, roles and initial tactic
        """
        context = context or MatchContext()
        logger.debug("%s coach analysing %s", self.club.name, opponent.name)

        analysis = self.analyze_opponent(opponent)
        squad_status = self.assess_squad_condition()
        importance = self.evaluate_match_importance(context)
        strategy = self.determine_strategy(analysis, squad_status, importance, context.is_home)
        formation = self.select_formation(strategy, analysis)
        lineup = self.select_starting_xi(formation, strategy)

        return Preparation(
            strategy=strategy,
            formation=formation,
            lineup=lineup,
            player_roles=self.assign_player_roles(lineup, strategy),
            instructions=self.prepare_match_instructions(strategy),
            analysis=analysis,
            importance=importance,
            initial_tactic=self.initial_tactic(strategy),
        )

    def default_preparation(self, is_home: bool = True) -> Preparation:
        """Balanced strategy in the club's default formation, no scouting."""
        strategy = Strategy(reasoning=["Default selection"])
        formation = self.club.tactics.default_formation
        if formation not in FORMATION_POSITIONS:
            formation = "4-4-2"
        lineup = self.select_starting_xi(formation, strategy)
        return Preparation(strategy, formation, lineup,
                           self.assign_player_roles(lineup, strategy),
                           self.prepare_match_instructions(strategy))

    # Opponent analysis

    def analyze_opponent(self, opponent: Club) -> OpponentAnalysis:
        squad = opponent.squad.current_players
        tactics = opponent.tactics
        return OpponentAnalysis(
            attacking_threat=self.calculate_attack_threat(squad),
            defensive_solidity=self.calculate_defensive_solidity(squad),
            key_players=self.identify_key_players(squad),
            set_piece_danger=self.analyze_set_pieces(squad),
            vulnerable_areas=self.find_vulnerable_areas(squad),
            weak_positions=self.find_weak_positions(squad),
            tactical_flaws=self.identify_tactical_flaws(opponent),
            play_style={
                'formation': tactics.default_formation,
                'mentality': tactics.mentality,
                'possession': tactics.style('possession'),
                'pressing_intensity': tactics.style('pressing'),
                'attacking_width': tactics.style('width'),
                'build_up_style': 'direct' if tactics.style('tempo') > 70 else 'short_passing',
            },
            form=self.calculate_recent_form(opponent),
        )

    @staticmethod
    def calculate_attack_threat(squad: Sequence[Player]) -> float:
        """Mean of (finishing + pace) / 2 over attacking players, 50 if none."""
        forward_ish = {P.ST, P.CF, P.LW, P.RW, P.CAM}
        attackers = [p for p in squad if forward_ish.intersection(p.positions)]
        return round(_mean([(p.technical.finishing + p.physical.pace) / 2 for p in attackers], 50.0))

    @staticmethod
    def calculate_defensive_solidity(squad: Sequence[Player]) -> float:
        """Mean of (marking + tackling) / 2 over defensive players, 50 if none."""
        defensive = {P.GK, P.CB, P.LB, P.RB, P.CDM}
        defenders = [p for p in squad if defensive.intersection(p.positions)]
        return round(_mean([(p.technical.marking + p.technical.tackling) / 2 for p in defenders], 50.0))

    @staticmethod
    def identify_key_players(squad: Sequence[Player]) -> List[Dict[str, Any]]:
        ranked = sorted(squad, key=lambda p: p.current_rating, reverse=True)[:3]
        return [{'name': p.name, 'rating': p.current_rating,
                 'positions': [pos.value for pos in p.positions], 'threat': 'high'}
                for p in ranked]

    @staticmethod
    def analyze_set_pieces(squad: Sequence[Player]) -> str:
        tall_players = [p for p in squad if p.height > 185]
        return 'high' if len(tall_players) >= 4 else 'medium'

    @staticmethod
    def find_vulnerable_areas(squad: Sequence[Player]) -> List[str]:
        areas = []
        full_backs = [p for p in squad if p.plays(P.LB) or p.plays(P.RB)]
        if _mean([p.current_rating for p in full_backs], 0.0) < 70:
            areas.append('flanks')

        centre_backs = [p for p in squad if p.plays(P.CB)]
        if _mean([p.height for p in centre_backs], 180.0) < 185:
            areas.append('aerial_duels')
        if _mean([p.physical.pace for p in centre_backs], 70.0) < 70:
            areas.append('pace_behind_defense')
        return areas

    @staticmethod
    def find_weak_positions(squad: Sequence[Player]) -> List[str]:
        weak = []
        for position in (P.GK, P.LB, P.CB, P.RB, P.CDM, P.CM, P.CAM, P.LW, P.RW, P.ST):
            players = [p for p in squad if p.plays(position)]
            if not players or _mean([p.current_rating for p in players], 0.0) < 68:
                weak.append(position.value)
        return weak

    @staticmethod
    def identify_tactical_flaws(opponent: Club) -> List[str]:
        flaws = []
        tactics = opponent.tactics
        if tactics.style('defensive_line') > 70:
            centre_backs = [p for p in opponent.squad.current_players if p.plays(P.CB)]
            if _mean([p.physical.pace for p in centre_backs], 70.0) < 70:
                flaws.append('high_line_slow_defenders')
        if tactics.style('pressing') > 75:
            flaws.append('vulnerable_to_long_balls')
        return flaws

    def calculate_recent_form(self, opponent: Club) -> float:
        base_form = opponent.squad.average_rating / 10
        return max(1.0, min(10.0, base_form + self.rng.uniform(-1.0, 1.0)))

    # Own squad and fixture

    def assess_squad_condition(self) -> SquadStatus:
        squad = self.club.squad.current_players
        return SquadStatus(
            total_players=len(squad),
            average_rating=self.club.squad.average_rating,
            average_fitness=_mean([p.fitness for p in squad], 100.0),
            injuries=sum(1 for p in squad if p.injured),
            suspensions=sum(1 for p in squad if p.suspended),
            form=_mean([p.current_form for p in squad], 7.0),
        )

    @staticmethod
    def evaluate_match_importance(context: MatchContext) -> str:
        if context.competition == 'champions_league' and context.round == 'final':
            return 'crucial'
        if context.matchday > 30 and context.league_position is not None and context.league_position <= 4:
            return 'important'
        if context.derby:
            return 'important'
        return 'normal'

    # Strategy and shape

    def determine_strategy(self, analysis: OpponentAnalysis, squad_status: SquadStatus,
                           importance: str, home_advantage: bool) -> Strategy:
        """
        Pick approach, mentality, tempo, pressing, line and width.

        Strength difference bands: below -10 counter-attack, within 10 press
        at home or stay balanced away, above 10 dominate.
        """
        their_strength = (analysis.attacking_threat + analysis.defensive_solidity) / 2
        strength_diff = squad_status.average_rating - their_strength
        strategy = Strategy()

        if strength_diff < -10:
            strategy.approach = 'counter'
            strategy.mentality = 'defensive'
            strategy.defensive_line = 'low'
            strategy.pressing = 'low'
            strategy.reasoning.append('Opponent significantly stronger - counter-attack')
        elif abs(strength_diff) <= 10:
            if home_advantage:
                strategy.approach = 'attacking'
                strategy.mentality = 'attacking'
                strategy.pressing = 'high'
                strategy.reasoning.append('Home advantage - press high')
            else:
                strategy.reasoning.append('Equal teams - balanced approach')
        else:
            strategy.approach = 'attacking'
            strategy.mentality = 'attacking'
            strategy.tempo = 'fast'
            strategy.pressing = 'high'
            strategy.defensive_line = 'high'
            strategy.width = 'wide'
            strategy.reasoning.append('We are stronger - dominate possession')

        if 'flanks' in analysis.vulnerable_areas:
            strategy.width = 'wide'
            strategy.reasoning.append('Exploit weak flanks')
        if 'pace_behind_defense' in analysis.vulnerable_areas:
            strategy.tempo = 'fast'
            strategy.reasoning.append('Exploit pace in behind')
        if analysis.play_style.get('pressing_intensity', 50) > 75:
            strategy.build_up = 'direct'
            strategy.reasoning.append('Bypass their press with direct play')

        logger.debug("%s strategy (%s match): %s", self.club.name, importance, strategy.reasoning)
        return strategy

    def select_formation(self, strategy: Strategy, analysis: OpponentAnalysis) -> str:
        """First candidate for the approach that counters the opponent's shape."""
        opponent_formation = analysis.play_style.get('formation')
        candidates = FORMATION_CANDIDATES.get(strategy.approach, DEFAULT_CANDIDATES)
        good_choices = [f for f in candidates if opponent_formation in FORMATIONS[f].good_against]
        formation = good_choices[0] if good_choices else candidates[0]
        logger.info("%s selected %s (opponent plays %s)", self.club.name, formation, opponent_formation)
        return formation

    def select_starting_xi(self, formation: str, strategy: Strategy) -> List[Tuple[Position, Player]]:
        """
        Best available player for every formation slot.

        Outfield slots fall back to the same line, then to any remaining
        outfield player. The GK slot never falls back, so a squad without an
        available keeper yields a lineup without one.
        """
        available = self.club.squad.available()
        used = set()
        lineup = []
        for position in FORMATION_POSITIONS.get(formation, FORMATION_POSITIONS["4-4-2"]):
            candidates = [p for p in available if p.player_id not in used and p.plays(position)]
            if not candidates and position is not P.GK:
                group = next((g for g in COVER_GROUPS if position in g), frozenset())
                candidates = [p for p in available
                              if p.player_id not in used and group.intersection(p.positions)]
                if not candidates:
                    candidates = [p for p in available
                                  if p.player_id not in used and p.primary_position is not P.GK]
            ranked = self.rank_players_for_position(candidates, position, strategy)
            if ranked:
                lineup.append((position, ranked[0]))
                used.add(ranked[0].player_id)
        return lineup

    @staticmethod
    def rank_players_for_position(candidates: Sequence[Player], position: Position,
                                  strategy: Strategy) -> List[Player]:
        """Order candidates by rating + form x2 + fitness/10 plus tactical-fit bonuses."""
        def score(player: Player) -> float:
            value = player.current_rating + player.current_form * 2 + player.fitness / 10
            if strategy.approach == 'attacking' and position in (P.ST, P.LW, P.RW, P.CAM):
                value += player.technical.finishing * 0.1 + player.physical.pace * 0.1
            if strategy.pressing == 'high':
                value += player.physical.stamina * 0.1 + player.mental.work_rate * 0.1
            return value

        return sorted(candidates, key=score, reverse=True)

    # Roles and instructions

    def assign_player_roles(self, lineup: Sequence[Tuple[Position, Player]],
                            strategy: Strategy) -> List[PlayerRole]:
        return [PlayerRole(position, player, ROLE_NAMES.get(position, 'midfielder'),
                           self.role_instructions(position, strategy))
                for position, player in lineup]

    @staticmethod
    def role_instructions(position: Position, strategy: Strategy) -> List[str]:
        instructions = []
        if strategy.pressing == 'high':
            instructions.append('press_more')
        if strategy.width == 'wide' and position in (P.LW, P.RW, P.LM, P.RM):
            instructions.append('stay_wide')
        if strategy.mentality == 'attacking' and position in (P.ST, P.CAM):
            instructions.append('shoot_more')
        return instructions

    @staticmethod
    def prepare_match_instructions(strategy: Strategy) -> Dict[str, Dict[str, str]]:
        attacking = strategy.mentality == 'attacking'
        return {
            'general': {
                'tempo': strategy.tempo,
                'width': strategy.width,
                'passing_style': strategy.build_up,
                'creativity': 'high' if attacking else 'medium',
            },
            'attacking': {
                'run_type': 'run_at_defense' if strategy.approach == 'attacking' else 'mixed',
                'crossing': 'cross_often' if strategy.width == 'wide' else 'mixed',
                'shooting': 'shoot_more' if attacking else 'work_into_box',
            },
            'defending': {
                'defensive_line': strategy.defensive_line,
                'pressing_intensity': strategy.pressing,
                'tackling': 'normal',
            },
        }

    @staticmethod
    def initial_tactic(strategy: Strategy) -> Tactic:
        """Tactic the side starts the match with."""
        if strategy.approach == 'counter':
            return Tactic.COUNTER_ATTACK
        if strategy.approach == 'attacking' and strategy.pressing == 'high':
            return Tactic.HIGH_PRESS
        return Tactic.BALANCED

    # Memory

    def learn_from_match(self, result: Dict[str, Any], opponent: Optional[Club] = None) -> None:
        """
        Remember a finished match.

        Only the last ten results are kept; the opponent profile map keeps
        the latest meeting per opponent.
        """
        self.previous_matches.append(result)
        if opponent is not None:
            self.opponent_profiles[opponent.club_id] = {
                'last_played': datetime.now(),
                'result': result,
                'tactics_used': opponent.tactics.default_formation,
            }
        logger.debug("%s coach remembers %d matches", self.club.name, len(self.previous_matches))
