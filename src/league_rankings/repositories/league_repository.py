"""Bulk read of the league tables into an immutable :class:`LeagueData` graph."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from league_rankings.domain.common import GameRecord, GameType, LeagueData, SeasonRecord
from league_rankings.domain.rounds import order_seasons
from league_rankings.models import Game, Player, Season, Team, TeamRosterEntry

logger = logging.getLogger(__name__)


def fetch_seasons(session: Session) -> list[SeasonRecord]:
    rows = session.execute(select(Season.id, Season.name, Season.date_start)).all()
    return [
        SeasonRecord(season_id=row.id, name=row.name, date_start=row.date_start)
        for row in rows
    ]


def fetch_games(session: Session, season_ids: list[str]) -> list[GameRecord]:
    if not season_ids:
        return []

    statement = (
        select(
            Game.id,
            Game.season_id,
            Game.home_team_id,
            Game.away_team_id,
            Game.home_score,
            Game.away_score,
            Game.scheduled_at,
            Game.game_type,
        )
        .where(Game.season_id.in_(season_ids))
        .order_by(Game.scheduled_at.asc(), Game.id.asc())
    )
    return [
        GameRecord(
            game_id=row.id,
            home_team_id=row.home_team_id,
            away_team_id=row.away_team_id,
            home_score=row.home_score,
            away_score=row.away_score,
            scheduled_at=row.scheduled_at,
            season_id=row.season_id,
            game_type=GameType(row.game_type),
        )
        for row in session.execute(statement)
    ]


def fetch_rosters(session: Session) -> dict[str, tuple[str, ...]]:
    """Team id to ordered player ids; teams without players map to an empty roster."""
    rosters: dict[str, list[str]] = {team_id: [] for team_id in session.scalars(select(Team.id))}

    statement = select(TeamRosterEntry.team_id, TeamRosterEntry.player_id).order_by(
        TeamRosterEntry.team_id.asc(),
        TeamRosterEntry.position.asc(),
        TeamRosterEntry.id.asc(),
    )
    for row in session.execute(statement):
        rosters.setdefault(row.team_id, []).append(row.player_id)

    return {team_id: tuple(player_ids) for team_id, player_ids in rosters.items()}


def fetch_player_names(session: Session) -> dict[str, str]:
    rows = session.execute(select(Player.id, Player.first_name, Player.last_name)).all()
    return {row.id: f"{row.first_name} {row.last_name}".strip() for row in rows}


def load_league_data(session: Session, *, season_depth: int = 0) -> LeagueData:
    """Resolve seasons, games, rosters and player names in one pass."""
    seasons = order_seasons(fetch_seasons(session), season_depth)
    games = fetch_games(session, [season.season_id for season in seasons])
    rosters = fetch_rosters(session)
    player_names = fetch_player_names(session)

    logger.info(
        "loaded league data seasons=%d games=%d teams=%d players=%d",
        len(seasons),
        len(games),
        len(rosters),
        len(player_names),
    )
    return LeagueData(
        seasons=seasons,
        games=tuple(games),
        rosters=rosters,
        player_names=player_names,
    )


__all__ = [
    "fetch_games",
    "fetch_player_names",
    "fetch_rosters",
    "fetch_seasons",
    "load_league_data",
]
