"""Unit tests for game enrichment and round grouping."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from league_rankings.domain.common import GameRecord, SeasonRecord
from league_rankings.domain.rounds import (
    format_round_info,
    group_games_into_rounds,
    order_seasons,
    prepare_games,
    round_key,
)


def _season(season_id: str, year: int) -> SeasonRecord:
    return SeasonRecord(season_id=season_id, name=f"Season {year}", date_start=datetime(year, 1, 1))


def _game(game_id: str, scheduled_at: datetime, season_id: str = "s-2024") -> GameRecord:
    return GameRecord(
        game_id=game_id,
        home_team_id="t1",
        away_team_id="t2",
        home_score=10,
        away_score=8,
        scheduled_at=scheduled_at,
        season_id=season_id,
    )


def test_round_key_is_epoch_milliseconds() -> None:
    assert round_key(datetime(2024, 1, 1)) == "1704067200000"


def test_round_key_treats_naive_times_as_utc() -> None:
    naive = datetime(2024, 3, 1, 18, 30)
    aware = datetime(2024, 3, 1, 18, 30, tzinfo=UTC)
    assert round_key(naive) == round_key(aware)


def test_order_seasons_sorts_newest_first_and_assigns_order() -> None:
    ordered = order_seasons([_season("s-2022", 2022), _season("s-2024", 2024), _season("s-2023", 2023)])

    assert [season.season_id for season in ordered] == ["s-2024", "s-2023", "s-2022"]
    assert [season.season_order for season in ordered] == [0, 1, 2]


def test_order_seasons_applies_depth_limit() -> None:
    ordered = order_seasons(
        [_season("s-2022", 2022), _season("s-2024", 2024), _season("s-2023", 2023)],
        season_depth=2,
    )
    assert [season.season_id for season in ordered] == ["s-2024", "s-2023"]


def test_order_seasons_rejects_negative_depth() -> None:
    with pytest.raises(ValueError, match="season_depth"):
        order_seasons([_season("s-2024", 2024)], season_depth=-1)


def test_prepare_games_drops_games_outside_depth_and_sorts() -> None:
    seasons = order_seasons([_season("s-2023", 2023), _season("s-2024", 2024)], season_depth=1)
    games = [
        _game("g-late", datetime(2024, 3, 8, 18, 0)),
        _game("g-old", datetime(2023, 3, 1, 18, 0), season_id="s-2023"),
        _game("g-b", datetime(2024, 3, 1, 18, 0)),
        _game("g-a", datetime(2024, 3, 1, 18, 0)),
    ]

    prepared = prepare_games(games, seasons)

    assert [game.game_id for game in prepared] == ["g-a", "g-b", "g-late"]
    assert all(game.season_order == 0 for game in prepared)
    assert prepared[0].round_id == round_key(datetime(2024, 3, 1, 18, 0))


def test_prepare_games_assigns_season_order_for_older_seasons() -> None:
    seasons = order_seasons([_season("s-2023", 2023), _season("s-2024", 2024)])
    prepared = prepare_games([_game("g-old", datetime(2023, 3, 1), season_id="s-2023")], seasons)
    assert prepared[0].season_order == 1


def test_group_games_into_rounds_groups_identical_timestamps() -> None:
    seasons = order_seasons([_season("s-2024", 2024)])
    prepared = prepare_games(
        [
            _game("g3", datetime(2024, 3, 8, 18, 0)),
            _game("g1", datetime(2024, 3, 1, 18, 0)),
            _game("g2", datetime(2024, 3, 1, 18, 0)),
            _game("g4", datetime(2024, 3, 1, 18, 1)),
        ],
        seasons,
    )

    rounds = group_games_into_rounds(prepared)

    assert [[game.game_id for game in round_.games] for round_ in rounds] == [
        ["g1", "g2"],
        ["g4"],
        ["g3"],
    ]
    assert [round_.start_time for round_ in rounds] == sorted(round_.start_time for round_ in rounds)
    assert sum(round_.game_count for round_ in rounds) == len(prepared)
    assert all(not round_.calculated for round_ in rounds)


def test_group_games_into_rounds_empty() -> None:
    assert group_games_into_rounds([]) == []


def test_format_round_info_mentions_season_and_game_count() -> None:
    seasons = order_seasons([_season("s-2024", 2024)])
    rounds = group_games_into_rounds(prepare_games([_game("g1", datetime(2024, 3, 1, 18, 0))], seasons))

    info = format_round_info(rounds[0])
    assert "season=s-2024" in info
    assert "games=1" in info
