"""Per-player rating state owned by a single calculation run."""

from __future__ import annotations

from collections.abc import Callable, ItemsView, Iterator, ValuesView
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RatingPoint:
    """Read-only view of one player's rating used for team strength."""

    mu: float
    sigma: float | None = None


@dataclass
class PlayerSeasonStats:
    """Counted activity for one player within one season."""

    season_id: str
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    point_differential: int = 0
    end_of_season_rating: float = 0.0
    team_games: dict[str, int] = field(default_factory=dict)

    @property
    def average_point_differential(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.point_differential / self.games_played

    def to_dict(self) -> dict[str, Any]:
        return {
            "season_id": self.season_id,
            "games_played": self.games_played,
            "wins": self.wins,
            "losses": self.losses,
            "point_differential": self.point_differential,
            "end_of_season_rating": self.end_of_season_rating,
            "team_games": dict(self.team_games),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> PlayerSeasonStats:
        return cls(
            season_id=str(payload["season_id"]),
            games_played=int(payload.get("games_played", 0)),
            wins=int(payload.get("wins", 0)),
            losses=int(payload.get("losses", 0)),
            point_differential=int(payload.get("point_differential", 0)),
            end_of_season_rating=float(payload.get("end_of_season_rating", 0.0)),
            team_games={str(key): int(value) for key, value in payload.get("team_games", {}).items()},
        )


@dataclass
class PlayerRatingState:
    """Mutable skill estimate for one player."""

    player_id: str
    player_name: str
    mu: float
    sigma: float | None = None
    total_games: int = 0
    total_seasons: int = 0
    seasons_played: set[str] = field(default_factory=set)
    last_season_id: str | None = None
    last_game_time: datetime | None = None
    rounds_since_last_game: int = 0
    season_stats: dict[str, PlayerSeasonStats] = field(default_factory=dict)

    @property
    def rating(self) -> float:
        return self.mu

    def rating_point(self) -> RatingPoint:
        return RatingPoint(mu=self.mu, sigma=self.sigma)

    def record_season(self, season_id: str) -> PlayerSeasonStats:
        """Track participation in a season, returning its stats bucket."""
        if season_id not in self.seasons_played:
            self.seasons_played.add(season_id)
            self.total_seasons += 1
        self.last_season_id = season_id

        stats = self.season_stats.get(season_id)
        if stats is None:
            stats = PlayerSeasonStats(season_id=season_id, end_of_season_rating=self.mu)
            self.season_stats[season_id] = stats
        return stats


class Ledger:
    """Mapping from player id to :class:`PlayerRatingState`."""

    def __init__(self, states: dict[str, PlayerRatingState] | None = None) -> None:
        self._states: dict[str, PlayerRatingState] = dict(states or {})

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __getitem__(self, player_id: str) -> PlayerRatingState:
        return self._states[player_id]

    def get(self, player_id: str) -> PlayerRatingState | None:
        return self._states.get(player_id)

    def values(self) -> ValuesView[PlayerRatingState]:
        return self._states.values()

    def items(self) -> ItemsView[str, PlayerRatingState]:
        return self._states.items()

    def add(self, state: PlayerRatingState) -> None:
        if state.player_id in self._states:
            raise ValueError(f"player_id={state.player_id} is already tracked")
        self._states[state.player_id] = state

    def get_or_create(
        self,
        player_id: str,
        factory: Callable[[], PlayerRatingState],
    ) -> PlayerRatingState:
        existing = self._states.get(player_id)
        if existing is not None:
            return existing
        state = factory()
        self._states[player_id] = state
        return state

    def rating_point(self, player_id: str) -> RatingPoint | None:
        """Live lookup; reflects every update applied so far."""
        state = self._states.get(player_id)
        if state is None:
            return None
        return state.rating_point()

    def snapshot(self) -> dict[str, RatingPoint]:
        """Frozen copy of all current ratings."""
        return {player_id: state.rating_point() for player_id, state in self._states.items()}


__all__ = ["Ledger", "PlayerRatingState", "PlayerSeasonStats", "RatingPoint"]
