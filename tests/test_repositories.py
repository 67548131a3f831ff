"""Repository tests against a SQLite database."""

from __future__ import annotations

from datetime import datetime

import pytest

from league_rankings.domain.common import CalculatedRound, GameType
from league_rankings.domain.errors import ConcurrencyConflict
from league_rankings.domain.export import PlayerRanking
from league_rankings.domain.history import RoundSnapshot, RoundStanding
from league_rankings.domain.protocol import CalculationStatus, RunType
from league_rankings.domain.ratings.ledger import PlayerSeasonStats
from league_rankings.domain.state import CalculationState
from league_rankings.repositories.calculation_repository import (
    create_calculation_state,
    ensure_no_active_calculation,
    fetch_recent_calculations,
    get_calculation_state,
    save_calculation_state,
)
from league_rankings.repositories.history_repository import (
    clear_round_history,
    fetch_player_history,
    insert_round_history,
    load_round_history,
)
from league_rankings.repositories.league_repository import load_league_data
from league_rankings.repositories.rankings_repository import (
    clear_calculated_rounds,
    fetch_top_rankings,
    insert_calculated_rounds,
    load_calculated_round_ids,
    load_player_rankings,
    replace_player_rankings,
)


def _ranking(player_id: str, rating: float, rank: int) -> PlayerRanking:
    return PlayerRanking(
        player_id=player_id,
        player_name=f"Player {player_id}",
        rating=rating,
        sigma=90.0,
        rank=rank,
        total_games=3,
        total_seasons=1,
        last_season_id="s-2024",
        last_game_time=datetime(2024, 3, 8, 18, 0),
        rounds_since_last_game=1,
        per_season_stats={
            "s-2024": PlayerSeasonStats(season_id="s-2024", games_played=3, wins=2, losses=1, team_games={"t3": 3})
        },
    )


@pytest.mark.usefixtures("seeded_league")
def test_load_league_data_resolves_everything(session_factory) -> None:
    with session_factory() as session:
        league = load_league_data(session)

    assert [season.season_id for season in league.seasons] == ["s-2024", "s-2023"]
    assert [game.game_id for game in league.games] == ["g1", "g2", "g3", "g4", "g5", "g6"]
    assert league.games[2].game_type == GameType.PLAYOFF
    assert league.games[5].home_score is None
    assert league.roster("t1") == ("p1", "p2")
    assert league.roster("t4") == ("p2", "p4", "p5")
    assert league.roster("t5") == ()
    assert league.player_name("p3") == "Player 3"


@pytest.mark.usefixtures("seeded_league")
def test_load_league_data_applies_season_depth(session_factory) -> None:
    with session_factory() as session:
        league = load_league_data(session, season_depth=1)

    assert [season.season_id for season in league.seasons] == ["s-2024"]
    assert {game.season_id for game in league.games} == {"s-2024"}


def test_rankings_replace_and_load(session_factory) -> None:
    with session_factory() as session:
        replace_player_rankings(
            session,
            "elo_default",
            [_ranking("p1", 1250.0, 1), _ranking("p2", 1190.0, 2)],
            calculation_id="calc-1",
        )
        session.commit()

    with session_factory() as session:
        replace_player_rankings(session, "elo_default", [_ranking("p3", 1210.0, 1)], calculation_id="calc-2")
        replace_player_rankings(session, "trueskill_default", [_ranking("p9", 1300.0, 1)], calculation_id="calc-3")
        session.commit()

    with session_factory() as session:
        loaded = load_player_rankings(session, "elo_default")
        top = fetch_top_rankings(session, "trueskill_default", limit=5)

    assert loaded == [_ranking("p3", 1210.0, 1)]
    assert [ranking.player_id for ranking in top] == ["p9"]


def test_fetch_top_rankings_limits_rows(session_factory) -> None:
    with session_factory() as session:
        replace_player_rankings(
            session,
            "elo_default",
            [_ranking(f"p{index}", 1300.0 - index, index) for index in range(1, 6)],
            calculation_id="calc-1",
        )
        session.commit()
        top = fetch_top_rankings(session, "elo_default", limit=2)

    assert [ranking.rank for ranking in top] == [1, 2]
    with pytest.raises(ValueError, match="limit"):
        fetch_top_rankings(session, "elo_default", limit=0)


def test_calculated_rounds_insert_load_and_clear(session_factory) -> None:
    rounds = [
        CalculatedRound(
            round_id="1677693600000",
            round_start_time=datetime(2023, 3, 1, 18, 0),
            season_id="s-2023",
            game_count=1,
            calculated_at=datetime(2024, 5, 1, 12, 0),
            calculation_id="calc-1",
            game_ids=("g1",),
        )
    ]
    with session_factory() as session:
        insert_calculated_rounds(session, "elo_default", rounds)
        session.commit()
        assert load_calculated_round_ids(session, "elo_default") == {"1677693600000"}
        assert load_calculated_round_ids(session, "trueskill_default") == set()

        clear_calculated_rounds(session, "elo_default")
        session.commit()
        assert load_calculated_round_ids(session, "elo_default") == set()


def test_calculation_state_round_trip(session_factory) -> None:
    state = CalculationState(
        run_type=RunType.FULL,
        system_name="elo_default",
        parameters={"k_factor": 36.0},
        triggered_by="tests",
    )
    with session_factory() as session:
        create_calculation_state(session, state)
        session.commit()

    state.mark_running()
    state.update_progress(total_rounds=4, rounds_processed=2, percent_complete=45)
    with session_factory() as session:
        save_calculation_state(session, state)
        session.commit()

    with session_factory() as session:
        loaded = get_calculation_state(session, state.calculation_id)
        recent = fetch_recent_calculations(session)

    assert loaded == state
    assert [item.calculation_id for item in recent] == [state.calculation_id]


def test_missing_calculation_state_returns_none(session_factory) -> None:
    with session_factory() as session:
        assert get_calculation_state(session, "missing") is None


def test_active_calculation_blocks_new_ones(session_factory) -> None:
    running = CalculationState(run_type=RunType.FULL, system_name="elo_default")
    running.mark_running()
    with session_factory() as session:
        save_calculation_state(session, running)
        session.commit()

        with pytest.raises(ConcurrencyConflict, match="already running"):
            ensure_no_active_calculation(session)
        with pytest.raises(ConcurrencyConflict):
            create_calculation_state(session, CalculationState(run_type=RunType.INCREMENTAL))

    running.mark_completed()
    with session_factory() as session:
        save_calculation_state(session, running)
        session.commit()
        ensure_no_active_calculation(session)
        assert get_calculation_state(session, running.calculation_id).status == CalculationStatus.COMPLETED


def _history_snapshot(round_id: str, round_start_time: datetime, *standings: RoundStanding) -> RoundSnapshot:
    return RoundSnapshot(
        round_id=round_id,
        season_id="s-2024",
        round_start_time=round_start_time,
        calculation_id="calc-1",
        calculated_at=datetime(2024, 5, 1, 12, 0),
        game_ids=("g1", "g2"),
        standings=standings,
    )


def _history_standing(player_id: str, rating: float, previous_rating: float | None) -> RoundStanding:
    return RoundStanding(
        player_id=player_id,
        player_name=f"Player {player_id}",
        rating=rating,
        sigma=None,
        previous_rating=previous_rating,
        rank=1,
        total_games=2,
        is_active=True,
    )


def test_round_history_insert_load_and_clear(session_factory) -> None:
    later = _history_snapshot(
        "1709920800000",
        datetime(2024, 3, 8, 18, 0),
        _history_standing("p1", 1230.0, 1218.0),
    )
    earlier = _history_snapshot(
        "1709316000000",
        datetime(2024, 3, 1, 18, 0),
        _history_standing("p1", 1218.0, None),
        _history_standing("p2", 1182.0, None),
    )
    with session_factory() as session:
        insert_round_history(session, "elo_default", [later, earlier])
        session.commit()

        assert load_round_history(session, "elo_default") == [earlier, later]
        assert load_round_history(session, "trueskill_default") == []

        entries = fetch_player_history(session, "elo_default", "p1")
        assert [standing.change for _, standing in entries] == [None, 12.0]
        newest = fetch_player_history(session, "elo_default", "p1", limit=1)
        assert [snapshot.round_id for snapshot, _ in newest] == ["1709920800000"]
        with pytest.raises(ValueError, match="limit"):
            fetch_player_history(session, "elo_default", "p1", limit=0)

        clear_round_history(session, "elo_default")
        session.commit()
        assert load_round_history(session, "elo_default") == []
