"""Persistence for calculation-state records."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from league_rankings.domain.errors import ConcurrencyConflict
from league_rankings.domain.protocol import CalculationStatus, RunType
from league_rankings.domain.state import (
    CalculationErrorDetail,
    CalculationProgress,
    CalculationState,
)
from league_rankings.models import RankingCalculation

_ACTIVE_STATUSES = (CalculationStatus.PENDING.value, CalculationStatus.RUNNING.value)


def _row_to_state(row: RankingCalculation) -> CalculationState:
    return CalculationState(
        calculation_id=row.id,
        run_type=RunType(row.run_type),
        status=CalculationStatus(row.status),
        system_name=row.system_name,
        started_at=row.started_at,
        completed_at=row.completed_at,
        progress=CalculationProgress.from_dict(row.progress or {}),
        parameters=dict(row.parameters or {}),
        error=None if row.error is None else CalculationErrorDetail.from_dict(row.error),
        triggered_by=row.triggered_by,
    )


def _apply_state(row: RankingCalculation, state: CalculationState) -> None:
    row.system_name = state.system_name
    row.run_type = state.run_type.value
    row.status = state.status.value
    row.started_at = state.started_at
    row.completed_at = state.completed_at
    row.progress = state.progress.to_dict()
    row.parameters = dict(state.parameters)
    row.error = None if state.error is None else state.error.to_dict()
    row.triggered_by = state.triggered_by


def find_active_calculations(session: Session) -> list[CalculationState]:
    statement = (
        select(RankingCalculation)
        .where(RankingCalculation.status.in_(_ACTIVE_STATUSES))
        .order_by(RankingCalculation.started_at.asc())
    )
    return [_row_to_state(row) for row in session.scalars(statement)]


def ensure_no_active_calculation(session: Session) -> None:
    """Raise :class:`ConcurrencyConflict` while another run is pending or running."""
    active = find_active_calculations(session)
    if active:
        current = active[0]
        raise ConcurrencyConflict(
            f"calculation_id={current.calculation_id} system={current.system_name} "
            f"is already {current.status.value}"
        )


def save_calculation_state(session: Session, state: CalculationState) -> None:
    """Insert or update the row for ``state``; caller commits."""
    row = session.get(RankingCalculation, state.calculation_id)
    if row is None:
        row = RankingCalculation(id=state.calculation_id)
        session.add(row)
    _apply_state(row, state)
    session.flush()


def create_calculation_state(session: Session, state: CalculationState) -> None:
    ensure_no_active_calculation(session)
    save_calculation_state(session, state)


def get_calculation_state(session: Session, calculation_id: str) -> CalculationState | None:
    row = session.get(RankingCalculation, calculation_id)
    if row is None:
        return None
    return _row_to_state(row)


def fetch_recent_calculations(session: Session, *, limit: int = 10) -> list[CalculationState]:
    statement = (
        select(RankingCalculation)
        .order_by(RankingCalculation.started_at.desc())
        .limit(limit)
    )
    return [_row_to_state(row) for row in session.scalars(statement)]


__all__ = [
    "create_calculation_state",
    "ensure_no_active_calculation",
    "fetch_recent_calculations",
    "find_active_calculations",
    "get_calculation_state",
    "save_calculation_state",
]
