"""Calculation-state record used to monitor and audit ranking runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from league_rankings.domain.common import utc_now
from league_rankings.domain.protocol import CalculationStatus, RunType

MAX_PROCESSING_PERCENT = 90


@dataclass
class CalculationProgress:
    current_step: str = "pending"
    percent_complete: int = 0
    total_seasons: int = 0
    seasons_processed: int = 0
    total_rounds: int = 0
    rounds_processed: int = 0
    total_games: int = 0
    games_processed: int = 0
    skipped_games: int = 0
    current_season_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_step": self.current_step,
            "percent_complete": self.percent_complete,
            "total_seasons": self.total_seasons,
            "seasons_processed": self.seasons_processed,
            "total_rounds": self.total_rounds,
            "rounds_processed": self.rounds_processed,
            "total_games": self.total_games,
            "games_processed": self.games_processed,
            "skipped_games": self.skipped_games,
            "current_season_id": self.current_season_id,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CalculationProgress:
        return cls(
            current_step=str(payload.get("current_step", "pending")),
            percent_complete=int(payload.get("percent_complete", 0)),
            total_seasons=int(payload.get("total_seasons", 0)),
            seasons_processed=int(payload.get("seasons_processed", 0)),
            total_rounds=int(payload.get("total_rounds", 0)),
            rounds_processed=int(payload.get("rounds_processed", 0)),
            total_games=int(payload.get("total_games", 0)),
            games_processed=int(payload.get("games_processed", 0)),
            skipped_games=int(payload.get("skipped_games", 0)),
            current_season_id=payload.get("current_season_id"),
        )


@dataclass(frozen=True)
class CalculationErrorDetail:
    message: str
    error_type: str
    occurred_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "error_type": self.error_type,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CalculationErrorDetail:
        return cls(
            message=str(payload["message"]),
            error_type=str(payload["error_type"]),
            occurred_at=datetime.fromisoformat(str(payload["occurred_at"])),
        )


@dataclass
class CalculationState:
    """Lifecycle of one ranking run: ``pending -> running -> completed | failed``."""

    run_type: RunType
    system_name: str = ""
    calculation_id: str = field(default_factory=lambda: uuid4().hex)
    status: CalculationStatus = CalculationStatus.PENDING
    started_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None
    progress: CalculationProgress = field(default_factory=CalculationProgress)
    parameters: dict[str, Any] = field(default_factory=dict)
    error: CalculationErrorDetail | None = None
    triggered_by: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _require_open(self, action: str) -> None:
        if self.is_terminal:
            raise ValueError(
                f"calculation_id={self.calculation_id} cannot {action}: status is {self.status.value}"
            )

    def mark_running(self, current_step: str = "processing") -> None:
        self._require_open("start")
        self.status = CalculationStatus.RUNNING
        self.progress.current_step = current_step

    def update_progress(self, **changes: Any) -> None:
        """Update progress counters; percent is capped while not completed."""
        self._require_open("update progress")
        for key, value in changes.items():
            if not hasattr(self.progress, key):
                raise AttributeError(f"CalculationProgress has no field {key!r}")
            setattr(self.progress, key, value)
        self.progress.percent_complete = min(
            MAX_PROCESSING_PERCENT,
            max(0, int(self.progress.percent_complete)),
        )

    def mark_completed(self, *, completed_at: datetime | None = None) -> None:
        self._require_open("complete")
        self.status = CalculationStatus.COMPLETED
        self.completed_at = completed_at or utc_now()
        self.progress.current_step = "completed"
        self.progress.percent_complete = 100

    def mark_failed(self, exc: BaseException, *, failed_at: datetime | None = None) -> None:
        self._require_open("fail")
        occurred_at = failed_at or utc_now()
        self.status = CalculationStatus.FAILED
        self.completed_at = occurred_at
        self.progress.current_step = "failed"
        self.error = CalculationErrorDetail(
            message=str(exc),
            error_type=type(exc).__name__,
            occurred_at=occurred_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "calculation_id": self.calculation_id,
            "run_type": self.run_type.value,
            "status": self.status.value,
            "system_name": self.system_name,
            "started_at": self.started_at.isoformat(),
            "completed_at": None if self.completed_at is None else self.completed_at.isoformat(),
            "progress": self.progress.to_dict(),
            "parameters": dict(self.parameters),
            "error": None if self.error is None else self.error.to_dict(),
            "triggered_by": self.triggered_by,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CalculationState:
        completed_at = payload.get("completed_at")
        error = payload.get("error")
        return cls(
            calculation_id=str(payload["calculation_id"]),
            run_type=RunType(payload["run_type"]),
            status=CalculationStatus(payload["status"]),
            system_name=str(payload.get("system_name", "")),
            started_at=datetime.fromisoformat(str(payload["started_at"])),
            completed_at=None if completed_at is None else datetime.fromisoformat(str(completed_at)),
            progress=CalculationProgress.from_dict(payload.get("progress") or {}),
            parameters=dict(payload.get("parameters") or {}),
            error=None if error is None else CalculationErrorDetail.from_dict(error),
            triggered_by=payload.get("triggered_by"),
        )


__all__ = [
    "CalculationErrorDetail",
    "CalculationProgress",
    "CalculationState",
    "MAX_PROCESSING_PERCENT",
]
