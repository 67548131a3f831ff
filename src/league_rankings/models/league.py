"""League tables the ranking engine reads: seasons, teams, rosters, players, games."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from league_rankings.models.base import Base


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    date_start: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    season_id: Mapped[str | None] = mapped_column(ForeignKey("seasons.id"), nullable=True)


class TeamRosterEntry(Base):
    """One player on one team's roster; ``position`` keeps roster order stable."""

    __tablename__ = "team_roster_entries"
    __table_args__ = (
        UniqueConstraint("team_id", "player_id", name="uq_team_roster_team_player"),
        Index("idx_team_roster_team_position", "team_id", "position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Game(Base):
    """Scheduled game; team references are unchecked so malformed rows can be reported."""

    __tablename__ = "games"
    __table_args__ = (
        Index("idx_games_season_scheduled", "season_id", "scheduled_at"),
        Index("idx_games_scheduled", "scheduled_at", "id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    season_id: Mapped[str] = mapped_column(ForeignKey("seasons.id"), nullable=False)
    home_team_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    away_team_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    home_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    game_type: Mapped[str] = mapped_column(
        Enum(
            "regular",
            "playoff",
            name="game_type",
            native_enum=False,
        ),
        nullable=False,
        default="regular",
    )


__all__ = ["Game", "Player", "Season", "Team", "TeamRosterEntry"]
