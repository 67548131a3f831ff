"""Persistence for published rankings and calculated-round markers."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from league_rankings.domain.common import CalculatedRound
from league_rankings.domain.export import PlayerRanking
from league_rankings.domain.ratings.ledger import PlayerSeasonStats
from league_rankings.models import PlayerRankingRow, RankingCalculatedRound


def _row_to_ranking(row: PlayerRankingRow) -> PlayerRanking:
    return PlayerRanking(
        player_id=row.player_id,
        player_name=row.player_name,
        rating=float(row.rating),
        sigma=None if row.sigma is None else float(row.sigma),
        rank=int(row.rank),
        total_games=int(row.total_games),
        total_seasons=int(row.total_seasons),
        last_season_id=row.last_season_id,
        last_game_time=row.last_game_time,
        rounds_since_last_game=int(row.rounds_since_last_game),
        per_season_stats={
            str(season_id): PlayerSeasonStats.from_dict(stats)
            for season_id, stats in (row.per_season_stats or {}).items()
        },
    )


def load_player_rankings(session: Session, system_name: str) -> list[PlayerRanking]:
    statement = (
        select(PlayerRankingRow)
        .where(PlayerRankingRow.system_name == system_name)
        .order_by(PlayerRankingRow.rank.asc(), PlayerRankingRow.player_id.asc())
    )
    return [_row_to_ranking(row) for row in session.scalars(statement)]


def fetch_top_rankings(session: Session, system_name: str, *, limit: int = 20) -> list[PlayerRanking]:
    if limit <= 0:
        raise ValueError("limit must be greater than 0")
    statement = (
        select(PlayerRankingRow)
        .where(PlayerRankingRow.system_name == system_name)
        .order_by(PlayerRankingRow.rank.asc(), PlayerRankingRow.player_id.asc())
        .limit(limit)
    )
    return [_row_to_ranking(row) for row in session.scalars(statement)]


def replace_player_rankings(
    session: Session,
    system_name: str,
    rankings: Sequence[PlayerRanking],
    *,
    calculation_id: str,
) -> None:
    """Swap the whole leaderboard for one system; caller owns the transaction."""
    session.execute(delete(PlayerRankingRow).where(PlayerRankingRow.system_name == system_name))
    if not rankings:
        return

    payload = []
    for ranking in rankings:
        row = ranking.to_dict()
        payload.append(
            {
                "system_name": system_name,
                "player_id": ranking.player_id,
                "player_name": ranking.player_name,
                "rating": ranking.rating,
                "sigma": ranking.sigma,
                "rank": ranking.rank,
                "total_games": ranking.total_games,
                "total_seasons": ranking.total_seasons,
                "last_season_id": ranking.last_season_id,
                "last_game_time": ranking.last_game_time,
                "rounds_since_last_game": ranking.rounds_since_last_game,
                "per_season_stats": row["per_season_stats"],
                "calculation_id": calculation_id,
            }
        )
    session.execute(insert(PlayerRankingRow), payload)


def load_calculated_round_ids(session: Session, system_name: str) -> set[str]:
    statement = select(RankingCalculatedRound.round_id).where(
        RankingCalculatedRound.system_name == system_name
    )
    return set(session.scalars(statement))


def clear_calculated_rounds(session: Session, system_name: str) -> None:
    session.execute(
        delete(RankingCalculatedRound).where(RankingCalculatedRound.system_name == system_name)
    )


def insert_calculated_rounds(
    session: Session,
    system_name: str,
    rounds: Sequence[CalculatedRound],
) -> None:
    if not rounds:
        return
    payload = [
        {
            "system_name": system_name,
            "round_id": round_.round_id,
            "round_start_time": round_.round_start_time,
            "season_id": round_.season_id,
            "game_count": round_.game_count,
            "calculated_at": round_.calculated_at,
            "calculation_id": round_.calculation_id,
            "game_ids": list(round_.game_ids),
        }
        for round_ in rounds
    ]
    session.execute(insert(RankingCalculatedRound), payload)


__all__ = [
    "clear_calculated_rounds",
    "fetch_top_rankings",
    "insert_calculated_rounds",
    "load_calculated_round_ids",
    "load_player_rankings",
    "replace_player_rankings",
]
