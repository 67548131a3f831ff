"""Shared value types for the player ranking engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from league_rankings.domain.errors import MissingDataError


class GameType(str, Enum):
    """Kind of scheduled game."""

    REGULAR = "regular"
    PLAYOFF = "playoff"


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how timestamps are stored."""
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass(frozen=True)
class SeasonRecord:
    """Season metadata; ``season_order`` is 0 for the most recent season."""

    season_id: str
    name: str
    date_start: datetime
    season_order: int = 0


@dataclass(frozen=True)
class GameRecord:
    """Canonical game payload consumed by rating calculators."""

    game_id: str
    home_team_id: str | None
    away_team_id: str | None
    home_score: int | None
    away_score: int | None
    scheduled_at: datetime
    season_id: str
    game_type: GameType = GameType.REGULAR
    season_order: int = 0
    round_id: str = ""

    @property
    def is_playoff(self) -> bool:
        return self.game_type == GameType.PLAYOFF

    @property
    def point_differential(self) -> int:
        """Home score minus away score; only valid for completed games."""
        if self.home_score is None or self.away_score is None:
            raise ValueError(f"game_id={self.game_id} has no final score")
        return self.home_score - self.away_score


@dataclass
class Round:
    """All games sharing one scheduled start time."""

    round_id: str
    start_time: datetime
    season_id: str
    games: list[GameRecord] = field(default_factory=list)
    calculated: bool = False
    calculated_at: datetime | None = None

    @property
    def game_count(self) -> int:
        return len(self.games)


@dataclass(frozen=True)
class CalculatedRound:
    """Persisted marker that one round has been folded into the rankings."""

    round_id: str
    round_start_time: datetime
    season_id: str
    game_count: int
    calculated_at: datetime
    calculation_id: str
    game_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class LeagueData:
    """Fully resolved league graph: everything a calculation reads, addressed by id."""

    seasons: tuple[SeasonRecord, ...]
    games: tuple[GameRecord, ...]
    rosters: Mapping[str, tuple[str, ...]]
    player_names: Mapping[str, str]

    def roster(self, team_id: str) -> tuple[str, ...]:
        try:
            return self.rosters[team_id]
        except KeyError as exc:
            raise MissingDataError(f"team_id={team_id} is not present in league data") from exc

    def player_name(self, player_id: str) -> str:
        try:
            return self.player_names[player_id]
        except KeyError as exc:
            raise MissingDataError(f"player_id={player_id} is not present in league data") from exc

    def season(self, season_id: str) -> SeasonRecord:
        for season in self.seasons:
            if season.season_id == season_id:
                return season
        raise MissingDataError(f"season_id={season_id} is not present in league data")


__all__ = [
    "CalculatedRound",
    "GameRecord",
    "GameType",
    "LeagueData",
    "Round",
    "SeasonRecord",
    "utc_now",
]
