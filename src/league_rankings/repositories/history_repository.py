"""Persistence for per-round leaderboard snapshots."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from league_rankings.domain.history import RoundSnapshot, RoundStanding, player_history
from league_rankings.models import RankingHistoryRow


def _row_to_snapshot(row: RankingHistoryRow) -> RoundSnapshot:
    return RoundSnapshot(
        round_id=row.round_id,
        season_id=row.season_id,
        round_start_time=row.round_start_time,
        calculation_id=row.calculation_id,
        calculated_at=row.calculated_at,
        game_ids=tuple(str(game_id) for game_id in row.game_ids or ()),
        standings=tuple(RoundStanding.from_dict(item) for item in row.standings or ()),
    )


def insert_round_history(
    session: Session,
    system_name: str,
    snapshots: Sequence[RoundSnapshot],
) -> None:
    """Append snapshots; caller owns the transaction."""
    if not snapshots:
        return
    payload = [
        {
            "system_name": system_name,
            "round_id": snapshot.round_id,
            "season_id": snapshot.season_id,
            "round_start_time": snapshot.round_start_time,
            "calculation_id": snapshot.calculation_id,
            "calculated_at": snapshot.calculated_at,
            "game_ids": list(snapshot.game_ids),
            "avg_rating": snapshot.avg_rating,
            "active_player_count": snapshot.active_player_count,
            "standings": [standing.to_dict() for standing in snapshot.standings],
        }
        for snapshot in snapshots
    ]
    session.execute(insert(RankingHistoryRow), payload)


def clear_round_history(session: Session, system_name: str) -> None:
    session.execute(delete(RankingHistoryRow).where(RankingHistoryRow.system_name == system_name))


def load_round_history(session: Session, system_name: str) -> list[RoundSnapshot]:
    statement = (
        select(RankingHistoryRow)
        .where(RankingHistoryRow.system_name == system_name)
        .order_by(RankingHistoryRow.round_start_time.asc(), RankingHistoryRow.round_id.asc())
    )
    return [_row_to_snapshot(row) for row in session.scalars(statement)]


def fetch_player_history(
    session: Session,
    system_name: str,
    player_id: str,
    *,
    limit: int | None = None,
) -> list[tuple[RoundSnapshot, RoundStanding]]:
    """Most recent rounds last; ``limit`` keeps only the newest entries."""
    if limit is not None and limit <= 0:
        raise ValueError("limit must be greater than 0")
    history = player_history(load_round_history(session, system_name), player_id)
    if limit is not None:
        history = history[-limit:]
    return history


__all__ = [
    "clear_round_history",
    "fetch_player_history",
    "insert_round_history",
    "load_round_history",
]
