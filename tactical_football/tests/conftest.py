"""
Shared fixtures for the simulation tests.
"""

from datetime import datetime

import pytest

from tactical_football.engine.club import generate_club
from tactical_football.engine.coach import CoachAI
from tactical_football.engine.match import MatchEngine
from tactical_football.engine.player import (
    GoalkeeperAttributes, MentalAttributes, PhysicalAttributes, Player, Position, TechnicalAttributes,
)
from tactical_football.engine.randomness import RandomSource
from tactical_football.engine.state import MatchState
from tactical_football.engine.tactics import TacticalState
from tactical_football.engine.team import Side, Team

KICKOFF = datetime(2024, 8, 17, 15, 0, 0)


class ScriptedRandom(RandomSource):
    """RandomSource that replays fixed draws, then a constant default."""

    def __init__(self, values=(), default=0.5):
        super().__init__(0)
        self.values = list(values)
        self.default = default

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.default


def make_player(player_id, position, technical=None, mental=None, physical=None,
                goalkeeper=None, height=180.0, current_rating=70.0, **kwargs):
    """Player with explicit attribute overrides."""
    return Player(
        player_id, f"Player {player_id}", [position],
        TechnicalAttributes(**(technical or {})),
        MentalAttributes(**(mental or {})),
        PhysicalAttributes(**(physical or {})),
        GoalkeeperAttributes(**(goalkeeper or {})),
        height=height, current_rating=current_rating, **kwargs)


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def clubs():
    rng = RandomSource(7)
    return generate_club("Home United", rng, base_skill=72), generate_club("Away City", rng, base_skill=70)


def build_team(club, side, max_subs=5):
    preparation = CoachAI(club, RandomSource(1)).default_preparation(is_home=side is Side.HOME)
    return Team.from_selection(club, side, preparation.lineup, preparation.formation,
                               preparation.strategy, max_subs=max_subs)


@pytest.fixture
def match_state(clubs):
    home, away = clubs
    teams = {Side.HOME: build_team(home, Side.HOME), Side.AWAY: build_team(away, Side.AWAY)}
    return MatchState(teams=teams, tactics=TacticalState())


def new_engine(seed=11, **kwargs):
    """Engine between two freshly generated clubs, fully determined by ``seed``."""
    club_rng = RandomSource(seed)
    home = generate_club("Home United", club_rng, base_skill=72)
    away = generate_club("Away City", club_rng, base_skill=70)
    return MatchEngine(home, away, rng=RandomSource(seed), kickoff=KICKOFF,
                       match_id=f"test_match_{seed}", **kwargs)


@pytest.fixture
def played_engine():
    engine = new_engine()
    engine.simulate_match()
    return engine


@pytest.fixture(scope="module")
def exported_csv(tmp_path_factory):
    """CSV event log of one fully simulated match."""
    engine = new_engine(seed=5)
    engine.simulate_match()
    csv_path, _ = engine.export_logs(str(tmp_path_factory.mktemp("logs")))
    return csv_path


@pytest.fixture
def engine_factory():
    return new_engine


@pytest.fixture
def player_factory():
    return make_player


@pytest.fixture
def team_factory():
    return build_team
