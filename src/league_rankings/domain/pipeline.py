"""Persisted ranking pipeline: load, compute, publish."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from league_rankings.domain.common import utc_now
from league_rankings.domain.config_base import BaseSystemConfig
from league_rankings.domain.engine import (
    new_calculation_state,
    run_full_calculation,
    run_incremental_calculation,
)
from league_rankings.domain.processor import CalculationResult, StopCheck
from league_rankings.domain.protocol import CalculationStatus, RunType
from league_rankings.domain.ratings.registry import RatingSystemDescriptor
from league_rankings.domain.state import CalculationState
from league_rankings.repositories.calculation_repository import (
    create_calculation_state,
    save_calculation_state,
)
from league_rankings.repositories.history_repository import (
    clear_round_history,
    insert_round_history,
)
from league_rankings.repositories.league_repository import load_league_data
from league_rankings.repositories.rankings_repository import (
    clear_calculated_rounds,
    insert_calculated_rounds,
    load_calculated_round_ids,
    load_player_rankings,
    replace_player_rankings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationSummary:
    """Outcome for one persisted ranking calculation."""

    calculation_id: str
    algorithm: str
    system_name: str
    config_file: str
    run_type: str
    status: str
    players_ranked: int
    rounds_calculated: int
    games_rated: int
    skipped_games: int


class ProgressWriter:
    """Persist progress snapshots, each in its own short session."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def __call__(self, state: CalculationState) -> None:
        with self.session_factory() as session:
            save_calculation_state(session, state)
            session.commit()


def deadline_check(timeout_seconds: float | None) -> StopCheck | None:
    if timeout_seconds is None:
        return None
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be greater than 0")
    deadline = time.monotonic() + timeout_seconds

    def should_stop() -> bool:
        return time.monotonic() >= deadline

    return should_stop


def calculate_player_rankings(
    *,
    session_factory,
    descriptor: RatingSystemDescriptor,
    system_config: BaseSystemConfig,
    run_type: RunType = RunType.FULL,
    triggered_by: str | None = None,
    timeout_seconds: float | None = None,
    progress_every: int = 1,
    echo: Callable[[str], None] | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> CalculationSummary:
    """Run one calculation end to end and publish its rankings atomically."""
    should_stop = deadline_check(timeout_seconds)
    state = new_calculation_state(system_config, run_type, triggered_by=triggered_by)

    with session_factory() as session:
        try:
            create_calculation_state(session, state)
            session.commit()
        except Exception:
            session.rollback()
            raise

    if echo is not None:
        echo(
            f"started calculation_id={state.calculation_id} "
            f"algorithm={descriptor.algorithm} "
            f"system={system_config.name} "
            f"run_type={run_type.value}"
        )

    try:
        result = _compute(
            session_factory=session_factory,
            descriptor=descriptor,
            system_config=system_config,
            state=state,
            should_stop=should_stop,
            progress_every=progress_every,
            clock=clock,
        )
        _publish(session_factory, system_config=system_config, result=result)
    except Exception as exc:
        failed_state = _failed_state(state, exc, clock=clock)
        _persist_failure(session_factory, failed_state)
        if echo is not None:
            echo(
                f"failed calculation_id={state.calculation_id} "
                f"system={system_config.name} "
                f"error={type(exc).__name__}: {exc}"
            )
        raise

    summary = CalculationSummary(
        calculation_id=result.state.calculation_id,
        algorithm=descriptor.algorithm,
        system_name=system_config.name,
        config_file=system_config.file_path.name,
        run_type=run_type.value,
        status=result.state.status.value,
        players_ranked=len(result.rankings),
        rounds_calculated=len(result.calculated_rounds),
        games_rated=sum(round_.game_count for round_ in result.calculated_rounds),
        skipped_games=len(result.skipped_games),
    )
    if echo is not None:
        echo(
            "completed "
            f"calculation_id={summary.calculation_id} "
            f"config={summary.config_file} "
            f"algorithm={summary.algorithm} "
            f"system={summary.system_name} "
            f"run_type={summary.run_type} "
            f"players={summary.players_ranked} "
            f"rounds={summary.rounds_calculated} "
            f"games={summary.games_rated} "
            f"skipped_games={summary.skipped_games}"
        )
    return summary


def _compute(
    *,
    session_factory,
    descriptor: RatingSystemDescriptor,
    system_config: BaseSystemConfig,
    state: CalculationState,
    should_stop: StopCheck | None,
    progress_every: int,
    clock: Callable[[], datetime],
) -> CalculationResult:
    calculated_round_ids: set[str] = set()
    prior_rankings = []

    with session_factory() as session:
        league = load_league_data(session, season_depth=system_config.season_depth)
        if state.run_type == RunType.INCREMENTAL:
            calculated_round_ids = load_calculated_round_ids(session, system_config.name)
            prior_rankings = load_player_rankings(session, system_config.name)

    calculator = descriptor.create_calculator(system_config)
    progress_sink = ProgressWriter(session_factory)

    if state.run_type == RunType.INCREMENTAL:
        return run_incremental_calculation(
            league,
            system_config,
            calculator,
            calculated_round_ids=calculated_round_ids,
            prior_rankings=prior_rankings,
            state=state,
            progress_sink=progress_sink,
            progress_every=progress_every,
            should_stop=should_stop,
            clock=clock,
        )
    return run_full_calculation(
        league,
        system_config,
        calculator,
        state=state,
        progress_sink=progress_sink,
        progress_every=progress_every,
        should_stop=should_stop,
        clock=clock,
    )


def _publish(session_factory, *, system_config: BaseSystemConfig, result: CalculationResult) -> None:
    """Write rankings, round markers, history and the completed state in one transaction."""
    with session_factory() as session:
        try:
            if result.replaces_all_rounds:
                clear_calculated_rounds(session, system_config.name)
                clear_round_history(session, system_config.name)
            replace_player_rankings(
                session,
                system_config.name,
                result.rankings,
                calculation_id=result.state.calculation_id,
            )
            insert_calculated_rounds(session, system_config.name, result.calculated_rounds)
            insert_round_history(session, system_config.name, result.history)
            save_calculation_state(session, result.state)
            session.commit()
        except Exception:
            session.rollback()
            raise
    logger.info(
        "published calculation_id=%s system=%s players=%d rounds=%d",
        result.state.calculation_id,
        system_config.name,
        len(result.rankings),
        len(result.calculated_rounds),
    )


def _failed_state(
    state: CalculationState,
    exc: Exception,
    *,
    clock: Callable[[], datetime],
) -> CalculationState:
    if state.status == CalculationStatus.FAILED:
        return state
    if state.status == CalculationStatus.COMPLETED:
        # Publish failed after export completed the in-memory state.
        payload = state.to_dict()
        payload["status"] = CalculationStatus.RUNNING.value
        payload["completed_at"] = None
        state = CalculationState.from_dict(payload)
    state.mark_failed(exc, failed_at=clock())
    return state


def _persist_failure(session_factory, state: CalculationState) -> None:
    with session_factory() as session:
        try:
            save_calculation_state(session, state)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception(
                "calculation_id=%s could not record failed state",
                state.calculation_id,
            )


__all__ = [
    "CalculationSummary",
    "ProgressWriter",
    "calculate_player_rankings",
    "deadline_check",
]
