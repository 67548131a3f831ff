"""Game enrichment and round grouping."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import UTC, datetime

from league_rankings.domain.common import GameRecord, Round, SeasonRecord


def round_key(start_time: datetime) -> str:
    """Round id for a start time: UTC epoch milliseconds as a string.

    Naive datetimes are treated as UTC.
    """
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=UTC)
    return str(round(start_time.timestamp() * 1000))


def order_seasons(seasons: Iterable[SeasonRecord], season_depth: int = 0) -> tuple[SeasonRecord, ...]:
    """Sort seasons newest first, assign ``season_order``, and apply the depth limit."""
    if season_depth < 0:
        raise ValueError("season_depth must be >= 0")

    ordered = sorted(seasons, key=lambda season: (season.date_start, season.season_id), reverse=True)
    if season_depth > 0:
        ordered = ordered[:season_depth]
    return tuple(replace(season, season_order=index) for index, season in enumerate(ordered))


def prepare_games(
    games: Iterable[GameRecord],
    seasons: Sequence[SeasonRecord],
) -> list[GameRecord]:
    """Attach ``season_order`` and ``round_id`` and sort games chronologically.

    ``seasons`` must already be ordered by :func:`order_seasons`; games from
    seasons outside that list are dropped.
    """
    order_by_season = {season.season_id: season.season_order for season in seasons}

    prepared = [
        replace(
            game,
            season_order=order_by_season[game.season_id],
            round_id=round_key(game.scheduled_at),
        )
        for game in games
        if game.season_id in order_by_season
    ]
    prepared.sort(key=lambda game: (game.scheduled_at, game.game_id))
    return prepared


def is_completed(game: GameRecord) -> bool:
    """Both team references and both scores are present."""
    return (
        game.home_team_id is not None
        and game.away_team_id is not None
        and game.home_score is not None
        and game.away_score is not None
    )


def split_completed_games(games: Iterable[GameRecord]) -> tuple[list[GameRecord], list[GameRecord]]:
    """Partition into (completed, incomplete); unplayed games never form a round."""
    completed: list[GameRecord] = []
    incomplete: list[GameRecord] = []
    for game in games:
        if is_completed(game):
            completed.append(game)
        else:
            incomplete.append(game)
    return completed, incomplete


def group_games_into_rounds(games: Iterable[GameRecord]) -> list[Round]:
    """Group games sharing an identical start time, oldest round first."""
    rounds: dict[str, Round] = {}
    for game in games:
        key = game.round_id or round_key(game.scheduled_at)
        existing = rounds.get(key)
        if existing is None:
            existing = Round(round_id=key, start_time=game.scheduled_at, season_id=game.season_id)
            rounds[key] = existing
        existing.games.append(game)

    return sorted(rounds.values(), key=lambda item: item.start_time)


def format_round_info(round_: Round) -> str:
    return (
        f"season={round_.season_id} start={round_.start_time.isoformat()} "
        f"games={round_.game_count}"
    )


__all__ = [
    "format_round_info",
    "group_games_into_rounds",
    "is_completed",
    "order_seasons",
    "prepare_games",
    "round_key",
    "split_completed_games",
]
