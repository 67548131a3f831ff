"""Shared database fixtures backed by a throwaway SQLite file."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from league_rankings.db import create_db_engine, create_session_factory, ensure_schema
from league_rankings.models import Game, Player, Season, Team, TeamRosterEntry

SEASON_2023 = datetime(2023, 1, 1)
SEASON_2024 = datetime(2024, 1, 1)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'league.db'}"


@pytest.fixture
def engine(db_url: str):
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def seeded_league(session_factory):
    """Two seasons, five rostered players, one unplayed game and one empty team."""
    with session_factory() as session:
        session.add_all(
            [
                Season(id="s-2023", name="Fall 2023", date_start=SEASON_2023),
                Season(id="s-2024", name="Fall 2024", date_start=SEASON_2024),
            ]
        )
        session.add_all(
            [
                Player(id=f"p{index}", first_name="Player", last_name=str(index))
                for index in range(1, 7)
            ]
        )
        session.add_all(
            [
                Team(id="t1", name="Comets", season_id="s-2023"),
                Team(id="t2", name="Rockets", season_id="s-2023"),
                Team(id="t3", name="Owls", season_id="s-2024"),
                Team(id="t4", name="Foxes", season_id="s-2024"),
                Team(id="t5", name="Empty", season_id="s-2024"),
            ]
        )
        session.flush()
        session.add_all(
            [
                TeamRosterEntry(team_id="t1", player_id="p2", position=1),
                TeamRosterEntry(team_id="t1", player_id="p1", position=0),
                TeamRosterEntry(team_id="t2", player_id="p3", position=0),
                TeamRosterEntry(team_id="t2", player_id="p4", position=1),
                TeamRosterEntry(team_id="t3", player_id="p1", position=0),
                TeamRosterEntry(team_id="t3", player_id="p3", position=1),
                TeamRosterEntry(team_id="t4", player_id="p2", position=0),
                TeamRosterEntry(team_id="t4", player_id="p4", position=1),
                TeamRosterEntry(team_id="t4", player_id="p5", position=2),
            ]
        )
        session.add_all(
            [
                Game(
                    id="g1",
                    season_id="s-2023",
                    home_team_id="t1",
                    away_team_id="t2",
                    home_score=21,
                    away_score=15,
                    scheduled_at=datetime(2023, 3, 1, 18, 0),
                    game_type="regular",
                ),
                Game(
                    id="g2",
                    season_id="s-2023",
                    home_team_id="t2",
                    away_team_id="t1",
                    home_score=10,
                    away_score=12,
                    scheduled_at=datetime(2023, 3, 8, 18, 0),
                    game_type="regular",
                ),
                Game(
                    id="g3",
                    season_id="s-2023",
                    home_team_id="t1",
                    away_team_id="t2",
                    home_score=28,
                    away_score=30,
                    scheduled_at=datetime(2023, 4, 1, 18, 0),
                    game_type="playoff",
                ),
                Game(
                    id="g4",
                    season_id="s-2024",
                    home_team_id="t3",
                    away_team_id="t4",
                    home_score=14,
                    away_score=20,
                    scheduled_at=datetime(2024, 3, 1, 18, 0),
                    game_type="regular",
                ),
                Game(
                    id="g5",
                    season_id="s-2024",
                    home_team_id="t3",
                    away_team_id="t4",
                    home_score=11,
                    away_score=9,
                    scheduled_at=datetime(2024, 3, 8, 18, 0),
                    game_type="regular",
                ),
                Game(
                    id="g6",
                    season_id="s-2024",
                    home_team_id="t3",
                    away_team_id="t4",
                    home_score=None,
                    away_score=None,
                    scheduled_at=datetime(2024, 3, 15, 18, 0),
                    game_type="regular",
                ),
            ]
        )
        session.commit()
