"""Tests for leaderboard ranking and ledger serialization."""

from __future__ import annotations

import json
from collections.abc import ItemsView, ValuesView
from datetime import datetime

from league_rankings.domain.export import (
    PlayerRanking,
    deserialize_ledger,
    rank_ledger,
    ranking_to_state,
    serialize_ledger,
)
from league_rankings.domain.ratings.ledger import Ledger, PlayerRatingState, PlayerSeasonStats


def _state(player_id: str, mu: float, **kwargs) -> PlayerRatingState:
    return PlayerRatingState(player_id=player_id, player_name=f"Player {player_id}", mu=mu, **kwargs)


def _ledger(*states: PlayerRatingState) -> Ledger:
    ledger = Ledger()
    for state in states:
        ledger.add(state)
    return ledger


def test_rank_ledger_orders_by_rating_then_player_id() -> None:
    rankings = rank_ledger(_ledger(_state("b", 1210.0), _state("c", 1250.0), _state("a", 1210.0)))

    assert [ranking.player_id for ranking in rankings] == ["c", "a", "b"]
    assert [ranking.rank for ranking in rankings] == [1, 2, 2]


def test_rank_ledger_uses_competition_ranking_at_precision() -> None:
    rankings = rank_ledger(
        _ledger(
            _state("a", 1300.001),
            _state("b", 1300.004),
            _state("c", 1290.0),
            _state("d", 1280.0),
        ),
        precision=2,
    )

    assert [ranking.player_id for ranking in rankings] == ["b", "a", "c", "d"]
    assert [ranking.rank for ranking in rankings] == [1, 1, 3, 4]


def test_rank_ledger_empty() -> None:
    assert rank_ledger(Ledger()) == []


def test_ranking_dict_round_trip_is_json_safe() -> None:
    ranking = PlayerRanking(
        player_id="p1",
        player_name="Pat One",
        rating=1234.56789,
        sigma=77.25,
        rank=3,
        total_games=12,
        total_seasons=2,
        last_season_id="s-2024",
        last_game_time=datetime(2024, 3, 15, 18, 0),
        rounds_since_last_game=4,
        per_season_stats={
            "s-2024": PlayerSeasonStats(
                season_id="s-2024",
                games_played=5,
                wins=3,
                losses=2,
                point_differential=17,
                end_of_season_rating=1234.5,
                team_games={"t3": 5},
            )
        },
    )

    restored = PlayerRanking.from_dict(json.loads(json.dumps(ranking.to_dict())))

    assert restored == ranking


def test_serialize_then_deserialize_restores_ledger() -> None:
    original = _ledger(
        _state(
            "p1",
            1234.5,
            sigma=80.0,
            total_games=4,
            total_seasons=1,
            seasons_played={"s-2024"},
            last_season_id="s-2024",
            last_game_time=datetime(2024, 3, 8, 18, 0),
            rounds_since_last_game=2,
            season_stats={"s-2024": PlayerSeasonStats(season_id="s-2024", games_played=4, wins=4)},
        ),
        _state("p2", 1190.0, sigma=120.0),
    )

    restored = deserialize_ledger(json.loads(json.dumps(serialize_ledger(original))))

    assert set(restored) == {"p1", "p2"}
    for player_id in ("p1", "p2"):
        assert restored[player_id] == original[player_id]


def test_ranking_to_state_uses_rating_as_mu() -> None:
    ranking = rank_ledger(_ledger(_state("p1", 1222.0)))[0]
    state = ranking_to_state(ranking)
    assert state.mu == 1222.0
    assert state.player_name == "Player p1"


def test_ledger_views_are_live_mapping_views() -> None:
    ledger = _ledger(_state("a", 1210.0))
    values = ledger.values()
    items = ledger.items()

    ledger.add(_state("b", 1190.0))

    assert isinstance(values, ValuesView)
    assert isinstance(items, ItemsView)
    assert [state.player_id for state in values] == ["a", "b"]
    assert [player_id for player_id, _ in items] == ["a", "b"]
