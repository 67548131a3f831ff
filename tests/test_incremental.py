"""Incremental runs must agree with a full recomputation."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from league_rankings.domain.common import GameRecord, GameType, LeagueData, SeasonRecord
from league_rankings.domain.engine import (
    build_rounds,
    run_full_calculation,
    run_incremental_calculation,
)
from league_rankings.domain.export import PlayerRanking
from league_rankings.domain.incremental import (
    filter_uncalculated_rounds,
    resolve_incremental,
    seed_ledger,
)
from league_rankings.domain.protocol import RunType
from league_rankings.domain.ratings.decay import DecayParameters
from league_rankings.domain.ratings.elo.calculator import EloParameters, PlayerEloCalculator
from league_rankings.domain.ratings.elo.config import EloSystemConfig
from league_rankings.domain.ratings.ledger import PlayerSeasonStats
from league_rankings.domain.ratings.trueskill.calculator import (
    PlayerTrueSkillCalculator,
    TrueSkillParameters,
)
from league_rankings.domain.ratings.trueskill.config import TrueSkillSystemConfig

SEASONS = (
    SeasonRecord(season_id="s-2023", name="2023", date_start=datetime(2023, 1, 1)),
    SeasonRecord(season_id="s-2024", name="2024", date_start=datetime(2024, 1, 1)),
)
ROSTERS = {
    "t1": ("p1", "p2"),
    "t2": ("p3", "p4"),
    "t3": ("p1", "p3", "p5"),
    "t4": ("p2", "p4", "p6"),
}
NAMES = {f"p{index}": f"Player {index}" for index in range(1, 7)}


def _games() -> tuple[GameRecord, ...]:
    start_2023 = datetime(2023, 3, 1, 18, 0)
    start_2024 = datetime(2024, 3, 1, 18, 0)
    fixtures = [
        ("g01", "t1", "t2", start_2023, 21, 15, GameType.REGULAR, "s-2023"),
        ("g02", "t2", "t1", start_2023 + timedelta(days=7), 18, 12, GameType.REGULAR, "s-2023"),
        ("g03", "t1", "t2", start_2023 + timedelta(days=30), 30, 28, GameType.PLAYOFF, "s-2023"),
        ("g04", "t3", "t4", start_2024, 11, 14, GameType.REGULAR, "s-2024"),
        ("g05", "t1", "t2", start_2024 + timedelta(days=7), 9, 7, GameType.REGULAR, "s-2024"),
        ("g06", "t4", "t3", start_2024 + timedelta(days=7), 20, 25, GameType.REGULAR, "s-2024"),
        ("g07", "t3", "t4", start_2024 + timedelta(days=14), 17, 3, GameType.PLAYOFF, "s-2024"),
    ]
    return tuple(
        GameRecord(
            game_id=game_id,
            home_team_id=home,
            away_team_id=away,
            home_score=home_score,
            away_score=away_score,
            scheduled_at=scheduled_at,
            season_id=season_id,
            game_type=game_type,
        )
        for game_id, home, away, scheduled_at, home_score, away_score, game_type, season_id in fixtures
    )


def _league(games: tuple[GameRecord, ...]) -> LeagueData:
    return LeagueData(seasons=SEASONS, games=games, rosters=ROSTERS, player_names=NAMES)


def _elo_config(*, simultaneous_rounds: bool = True) -> EloSystemConfig:
    return EloSystemConfig(
        name="elo_test",
        description=None,
        file_path=Path("elo_test.toml"),
        season_depth=0,
        decay=DecayParameters(),
        simultaneous_rounds=simultaneous_rounds,
        rank_precision=2,
        parameters=EloParameters(),
    )


def _trueskill_config() -> TrueSkillSystemConfig:
    return TrueSkillSystemConfig(
        name="trueskill_test",
        description=None,
        file_path=Path("trueskill_test.toml"),
        season_depth=0,
        decay=DecayParameters(sigma_growth=25.0),
        simultaneous_rounds=True,
        rank_precision=2,
        parameters=TrueSkillParameters(),
    )


def _assert_same_rankings(left: list[PlayerRanking], right: list[PlayerRanking]) -> None:
    assert [ranking.player_id for ranking in left] == [ranking.player_id for ranking in right]
    for expected, actual in zip(left, right):
        assert actual.rating == pytest.approx(expected.rating, abs=1e-9)
        if expected.sigma is None:
            assert actual.sigma is None
        else:
            assert actual.sigma == pytest.approx(expected.sigma, abs=1e-9)
        assert actual.rank == expected.rank
        assert actual.total_games == expected.total_games
        assert actual.total_seasons == expected.total_seasons
        assert actual.last_season_id == expected.last_season_id
        assert actual.last_game_time == expected.last_game_time
        assert actual.rounds_since_last_game == expected.rounds_since_last_game
        assert actual.per_season_stats.keys() == expected.per_season_stats.keys()
        for season_id, stats in expected.per_season_stats.items():
            other = actual.per_season_stats[season_id]
            assert other.games_played == stats.games_played
            assert other.wins == stats.wins
            assert other.point_differential == stats.point_differential
            assert other.end_of_season_rating == pytest.approx(stats.end_of_season_rating, abs=1e-9)


@pytest.mark.parametrize("split", [1, 3, 5])
@pytest.mark.parametrize("simultaneous_rounds", [True, False])
def test_full_then_incremental_matches_single_full_run(split: int, simultaneous_rounds: bool) -> None:
    games = _games()
    config = _elo_config(simultaneous_rounds=simultaneous_rounds)
    rounds = build_rounds(_league(games))
    early_ids = {game.game_id for round_ in rounds[:split] for game in round_.games}

    reference = run_full_calculation(_league(games), config, PlayerEloCalculator(config.parameters))

    first = run_full_calculation(
        _league(tuple(game for game in games if game.game_id in early_ids)),
        config,
        PlayerEloCalculator(config.parameters),
    )
    exported = [PlayerRanking.from_dict(ranking.to_dict()) for ranking in first.rankings]
    continued = run_incremental_calculation(
        _league(games),
        config,
        PlayerEloCalculator(config.parameters),
        calculated_round_ids={round_.round_id for round_ in first.calculated_rounds},
        prior_rankings=exported,
    )

    assert continued.state.run_type == RunType.INCREMENTAL
    assert not continued.replaces_all_rounds
    assert len(continued.calculated_rounds) == len(rounds) - split
    _assert_same_rankings(reference.rankings, continued.rankings)


def test_trueskill_incremental_matches_full_run() -> None:
    games = _games()
    config = _trueskill_config()
    rounds = build_rounds(_league(games))
    early_ids = {game.game_id for round_ in rounds[:2] for game in round_.games}

    reference = run_full_calculation(_league(games), config, PlayerTrueSkillCalculator(config.parameters))
    first = run_full_calculation(
        _league(tuple(game for game in games if game.game_id in early_ids)),
        config,
        PlayerTrueSkillCalculator(config.parameters),
    )
    continued = run_incremental_calculation(
        _league(games),
        config,
        PlayerTrueSkillCalculator(config.parameters),
        calculated_round_ids={round_.round_id for round_ in first.calculated_rounds},
        prior_rankings=first.rankings,
    )

    _assert_same_rankings(reference.rankings, continued.rankings)


def test_calculated_rounds_are_never_replayed() -> None:
    games = _games()
    config = _elo_config()
    full = run_full_calculation(_league(games), config, PlayerEloCalculator(config.parameters))

    again = run_incremental_calculation(
        _league(games),
        config,
        PlayerEloCalculator(config.parameters),
        calculated_round_ids={round_.round_id for round_ in full.calculated_rounds},
        prior_rankings=full.rankings,
    )

    assert again.calculated_rounds == []
    _assert_same_rankings(full.rankings, again.rankings)


def test_without_prior_rankings_incremental_is_a_full_run() -> None:
    games = _games()
    config = _elo_config()
    full = run_full_calculation(_league(games), config, PlayerEloCalculator(config.parameters))

    incremental = run_incremental_calculation(
        _league(games),
        config,
        PlayerEloCalculator(config.parameters),
        calculated_round_ids={round_.round_id for round_ in full.calculated_rounds},
        prior_rankings=[],
    )

    assert len(incremental.calculated_rounds) == len(full.calculated_rounds)
    assert incremental.replaces_all_rounds
    assert full.replaces_all_rounds
    _assert_same_rankings(full.rankings, incremental.rankings)


def test_resolve_incremental_filters_and_seeds() -> None:
    rounds = build_rounds(_league(_games()))
    prior = [
        PlayerRanking(
            player_id="p1",
            player_name="Player 1",
            rating=1234.5,
            sigma=None,
            rank=1,
            total_games=3,
            total_seasons=1,
            last_season_id="s-2023",
            last_game_time=datetime(2023, 3, 31, 18, 0),
            rounds_since_last_game=2,
        )
    ]

    plan = resolve_incremental(rounds, {rounds[0].round_id, rounds[1].round_id}, prior)

    assert [round_.round_id for round_ in plan.rounds] == [round_.round_id for round_ in rounds[2:]]
    assert plan.skipped_round_ids == (rounds[0].round_id, rounds[1].round_id)
    assert plan.seeded_players == 1
    assert not plan.is_full_run
    assert plan.ledger["p1"].mu == 1234.5
    assert plan.ledger["p1"].rounds_since_last_game == 2


def test_filter_uncalculated_rounds_keeps_order() -> None:
    rounds = build_rounds(_league(_games()))
    kept = filter_uncalculated_rounds(rounds, {rounds[1].round_id})
    assert kept == [rounds[0], *rounds[2:]]


def test_seed_ledger_preserves_every_field() -> None:
    ranking = PlayerRanking(
        player_id="p1",
        player_name="Player 1",
        rating=1250.25,
        sigma=88.5,
        rank=1,
        total_games=7,
        total_seasons=2,
        last_season_id="s-2024",
        last_game_time=datetime(2024, 3, 15, 18, 0),
        rounds_since_last_game=1,
        per_season_stats={
            "s-2023": PlayerSeasonStats(season_id="s-2023", games_played=3, wins=2, losses=1),
            "s-2024": PlayerSeasonStats(season_id="s-2024", games_played=4, team_games={"t3": 4}),
        },
    )

    state = seed_ledger([ranking])["p1"]

    assert state.mu == 1250.25
    assert state.sigma == 88.5
    assert state.total_games == 7
    assert state.total_seasons == 2
    assert state.seasons_played == {"s-2023", "s-2024"}
    assert state.last_season_id == "s-2024"
    assert state.last_game_time == datetime(2024, 3, 15, 18, 0)
    assert state.season_stats["s-2024"].team_games == {"t3": 4}
    assert state.season_stats["s-2024"] is not ranking.per_season_stats["s-2024"]


def test_seed_ledger_rejects_duplicate_players() -> None:
    ranking = PlayerRanking(
        player_id="p1",
        player_name="Player 1",
        rating=1200.0,
        sigma=None,
        rank=1,
        total_games=0,
        total_seasons=0,
        last_season_id=None,
        last_game_time=None,
        rounds_since_last_game=0,
    )
    with pytest.raises(ValueError, match="already tracked"):
        seed_ledger([ranking, replace(ranking, rank=2)])
