"""Convert a finished ledger into ranked leaderboard rows and back."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from league_rankings.domain.ratings.ledger import Ledger, PlayerRatingState, PlayerSeasonStats


@dataclass(frozen=True)
class PlayerRanking:
    """Published leaderboard row; also the snapshot incremental runs resume from."""

    player_id: str
    player_name: str
    rating: float
    sigma: float | None
    rank: int
    total_games: int
    total_seasons: int
    last_season_id: str | None
    last_game_time: datetime | None
    rounds_since_last_game: int
    per_season_stats: dict[str, PlayerSeasonStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "rating": self.rating,
            "sigma": self.sigma,
            "rank": self.rank,
            "total_games": self.total_games,
            "total_seasons": self.total_seasons,
            "last_season_id": self.last_season_id,
            "last_game_time": None if self.last_game_time is None else self.last_game_time.isoformat(),
            "rounds_since_last_game": self.rounds_since_last_game,
            "per_season_stats": {
                season_id: stats.to_dict() for season_id, stats in self.per_season_stats.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> PlayerRanking:
        last_game_time = payload.get("last_game_time")
        sigma = payload.get("sigma")
        return cls(
            player_id=str(payload["player_id"]),
            player_name=str(payload.get("player_name", "")),
            rating=float(payload["rating"]),
            sigma=None if sigma is None else float(sigma),
            rank=int(payload.get("rank", 0)),
            total_games=int(payload.get("total_games", 0)),
            total_seasons=int(payload.get("total_seasons", 0)),
            last_season_id=payload.get("last_season_id"),
            last_game_time=None if last_game_time is None else datetime.fromisoformat(str(last_game_time)),
            rounds_since_last_game=int(payload.get("rounds_since_last_game", 0)),
            per_season_stats={
                str(season_id): PlayerSeasonStats.from_dict(stats)
                for season_id, stats in (payload.get("per_season_stats") or {}).items()
            },
        )


def _copy_stats(stats: dict[str, PlayerSeasonStats]) -> dict[str, PlayerSeasonStats]:
    return {season_id: PlayerSeasonStats.from_dict(item.to_dict()) for season_id, item in stats.items()}


def ordered_states(ledger: Ledger) -> list[PlayerRatingState]:
    """Rating descending, then player id."""
    return sorted(ledger.values(), key=lambda state: (-state.mu, state.player_id))


def competition_ranks(ratings: Iterable[float], precision: int = 2) -> list[int]:
    """Ranks for ratings already sorted descending; equal values at ``precision`` share a rank."""
    ranks: list[int] = []
    previous_key: float | None = None
    current_rank = 0
    for position, rating in enumerate(ratings, start=1):
        rank_key = round(rating, precision)
        if rank_key != previous_key:
            current_rank = position
            previous_key = rank_key
        ranks.append(current_rank)
    return ranks


def rank_ledger(ledger: Ledger, precision: int = 2) -> list[PlayerRanking]:
    """Order by rating descending then player id; ties at ``precision`` decimals share a rank."""
    ordered = ordered_states(ledger)
    ranks = competition_ranks((state.mu for state in ordered), precision)

    rankings: list[PlayerRanking] = []
    for state, current_rank in zip(ordered, ranks):
        rankings.append(
            PlayerRanking(
                player_id=state.player_id,
                player_name=state.player_name,
                rating=state.mu,
                sigma=state.sigma,
                rank=current_rank,
                total_games=state.total_games,
                total_seasons=state.total_seasons,
                last_season_id=state.last_season_id,
                last_game_time=state.last_game_time,
                rounds_since_last_game=state.rounds_since_last_game,
                per_season_stats=_copy_stats(state.season_stats),
            )
        )
    return rankings


def ranking_to_state(ranking: PlayerRanking) -> PlayerRatingState:
    season_stats = _copy_stats(ranking.per_season_stats)
    return PlayerRatingState(
        player_id=ranking.player_id,
        player_name=ranking.player_name,
        mu=ranking.rating,
        sigma=ranking.sigma,
        total_games=ranking.total_games,
        total_seasons=ranking.total_seasons,
        seasons_played=set(season_stats),
        last_season_id=ranking.last_season_id,
        last_game_time=ranking.last_game_time,
        rounds_since_last_game=ranking.rounds_since_last_game,
        season_stats=season_stats,
    )


def serialize_ledger(ledger: Ledger, precision: int = 2) -> list[dict[str, Any]]:
    return [ranking.to_dict() for ranking in rank_ledger(ledger, precision=precision)]


def deserialize_ledger(payload: Iterable[dict[str, Any]]) -> Ledger:
    ledger = Ledger()
    for item in payload:
        ledger.add(ranking_to_state(PlayerRanking.from_dict(item)))
    return ledger


__all__ = [
    "PlayerRanking",
    "competition_ranks",
    "deserialize_ledger",
    "ordered_states",
    "rank_ledger",
    "ranking_to_state",
    "serialize_ledger",
]
