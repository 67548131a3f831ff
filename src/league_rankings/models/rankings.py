"""Tables written by ranking calculations."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, Float, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from league_rankings.models.base import Base, JSONType


class PlayerRankingRow(Base):
    """Published leaderboard row for one player within one ranking system."""

    __tablename__ = "player_rankings"
    __table_args__ = (
        UniqueConstraint("system_name", "player_id", name="uq_player_rankings_system_player"),
        Index("idx_player_rankings_system_rank", "system_name", "rank"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    system_name: Mapped[str] = mapped_column(String(128), nullable=False)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False)
    player_name: Mapped[str] = mapped_column(String(256), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    sigma: Mapped[float | None] = mapped_column(Float, nullable=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    total_games: Mapped[int] = mapped_column(Integer, nullable=False)
    total_seasons: Mapped[int] = mapped_column(Integer, nullable=False)
    last_season_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_game_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    rounds_since_last_game: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    per_season_stats: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    calculation_id: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class RankingCalculation(Base):
    """Audit and progress record for one calculation run."""

    __tablename__ = "ranking_calculations"
    __table_args__ = (Index("idx_ranking_calculations_status", "status"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    system_name: Mapped[str] = mapped_column(String(128), nullable=False)
    run_type: Mapped[str] = mapped_column(
        Enum("full", "incremental", name="ranking_run_type", native_enum=False),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        Enum(
            "pending",
            "running",
            "completed",
            "failed",
            name="ranking_calculation_status",
            native_enum=False,
        ),
        nullable=False,
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    progress: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    parameters: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    error: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    triggered_by: Mapped[str | None] = mapped_column(String(128), nullable=True)


class RankingCalculatedRound(Base):
    """Marker that one round has been folded into a system's rankings."""

    __tablename__ = "ranking_calculated_rounds"
    __table_args__ = (
        UniqueConstraint("system_name", "round_id", name="uq_ranking_calculated_rounds_system_round"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    system_name: Mapped[str] = mapped_column(String(128), nullable=False)
    round_id: Mapped[str] = mapped_column(String(32), nullable=False)
    round_start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    season_id: Mapped[str] = mapped_column(String(64), nullable=False)
    game_count: Mapped[int] = mapped_column(Integer, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    calculation_id: Mapped[str] = mapped_column(String(32), nullable=False)
    game_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False)


class RankingHistoryRow(Base):
    """Leaderboard snapshot taken right after one calculated round."""

    __tablename__ = "ranking_history"
    __table_args__ = (
        UniqueConstraint("system_name", "round_id", name="uq_ranking_history_system_round"),
        Index("idx_ranking_history_system_start", "system_name", "round_start_time"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    system_name: Mapped[str] = mapped_column(String(128), nullable=False)
    round_id: Mapped[str] = mapped_column(String(32), nullable=False)
    season_id: Mapped[str] = mapped_column(String(64), nullable=False)
    round_start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    calculation_id: Mapped[str] = mapped_column(String(32), nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    game_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    avg_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    active_player_count: Mapped[int] = mapped_column(Integer, nullable=False)
    standings: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False)


__all__ = ["PlayerRankingRow", "RankingCalculatedRound", "RankingCalculation", "RankingHistoryRow"]
