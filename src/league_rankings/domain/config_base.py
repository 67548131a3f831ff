"""Shared config-loading utilities for ranking systems."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib

from league_rankings.domain.ratings.decay import DecayParameters, validate_decay_parameters


@dataclass(frozen=True)
class BaseSystemConfig:
    """Metadata and engine options shared across all ranking-system configs."""

    name: str
    description: str | None
    file_path: Path
    season_depth: int
    decay: DecayParameters
    simultaneous_rounds: bool
    rank_precision: int

    def as_config_json(self) -> dict[str, Any]:
        raise NotImplementedError

    def _system_config_json(self) -> dict[str, Any]:
        return {
            "season_depth": self.season_depth,
            "simultaneous_rounds": self.simultaneous_rounds,
            "rank_precision": self.rank_precision,
            "decay": self.decay.as_config_json(),
        }


@dataclass(frozen=True)
class SystemSection:
    name: str
    description: str | None
    season_depth: int
    simultaneous_rounds: bool
    rank_precision: int
    decay: DecayParameters


T = TypeVar("T", bound=BaseSystemConfig)


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "ranking",
) -> list[T]:
    """Load all TOML files in a directory with duplicate-name validation."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    systems: list[T] = []
    for file_path in config_files:
        with file_path.open("rb") as file:
            raw = tomllib.load(file)
        systems.append(parser(raw, file_path))

    names = [system.name for system in systems]
    if len(names) != len(set(names)):
        raise ValueError(
            f"Duplicate {duplicate_name_label} system names found in {config_dir}: {names}"
        )

    return systems


def parse_bool(value: Any, *, file_path: Path, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in ("true", "1", "yes", "on"):
            return True
        if normalized in ("false", "0", "no", "off"):
            return False
    raise ValueError(f"{file_path}: {key} must be a boolean")


def parse_system_section(raw: dict[str, Any], file_path: Path, *, baseline: float) -> SystemSection:
    """Parse ``[system]`` and ``[decay]``; decay baseline defaults to ``baseline``."""
    system_raw = raw.get("system", {})
    decay_raw = raw.get("decay", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    season_depth = int(system_raw.get("season_depth", 0))
    if season_depth < 0:
        raise ValueError(f"{file_path}: [system].season_depth must be >= 0")

    rank_precision = int(system_raw.get("rank_precision", 2))
    if rank_precision < 0:
        raise ValueError(f"{file_path}: [system].rank_precision must be >= 0")

    simultaneous_rounds = parse_bool(
        system_raw.get("simultaneous_rounds", True),
        file_path=file_path,
        key="[system].simultaneous_rounds",
    )

    decay = DecayParameters(
        baseline=float(decay_raw.get("baseline", baseline)),
        active_above_factor=float(decay_raw.get("active_above_factor", 0.998)),
        inactive_above_factor=float(decay_raw.get("inactive_above_factor", 0.992)),
        active_below_factor=float(decay_raw.get("active_below_factor", 0.992)),
        inactive_below_factor=float(decay_raw.get("inactive_below_factor", 0.998)),
        sigma_growth=float(decay_raw.get("sigma_growth", 10.0)),
        max_sigma=float(decay_raw.get("max_sigma", 200.0)),
    )
    validate_decay_parameters(decay, source=str(file_path))

    return SystemSection(
        name=name,
        description=description,
        season_depth=season_depth,
        simultaneous_rounds=simultaneous_rounds,
        rank_precision=rank_precision,
        decay=decay,
    )


__all__ = [
    "BaseSystemConfig",
    "SystemSection",
    "load_system_configs",
    "parse_bool",
    "parse_system_section",
]
