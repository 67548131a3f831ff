"""Load Elo ranking-system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from league_rankings.domain.config_base import (
    BaseSystemConfig,
    load_system_configs,
    parse_system_section,
)
from league_rankings.domain.ratings.elo.calculator import EloParameters


@dataclass(frozen=True)
class EloSystemConfig(BaseSystemConfig):
    """Configuration for one Elo ranking calculation."""

    parameters: EloParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "algorithm": "elo",
            "initial_rating": self.parameters.initial_rating,
            "k_factor": self.parameters.k_factor,
            "scale_factor": self.parameters.scale_factor,
            "season_decay_factor": self.parameters.season_decay_factor,
            "playoff_multiplier": self.parameters.playoff_multiplier,
            "default_team_strength": self.parameters.default_team_strength,
            **self._system_config_json(),
        }


def load_elo_system_configs(config_dir: Path) -> list[EloSystemConfig]:
    """Load and validate all Elo TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        parse_elo_system_config,
        duplicate_name_label="elo",
    )


def parse_elo_system_config(raw: dict[str, Any], file_path: Path) -> EloSystemConfig:
    elo_raw = raw.get("elo", {})

    initial_rating = float(elo_raw.get("initial_rating", 1200.0))
    parameters = EloParameters(
        initial_rating=initial_rating,
        k_factor=float(elo_raw.get("k_factor", 36.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
        season_decay_factor=float(elo_raw.get("season_decay_factor", 0.82)),
        playoff_multiplier=float(elo_raw.get("playoff_multiplier", 1.8)),
        default_team_strength=float(elo_raw.get("default_team_strength", initial_rating)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    system = parse_system_section(raw, file_path, baseline=parameters.initial_rating)

    return EloSystemConfig(
        name=system.name,
        description=system.description,
        file_path=file_path,
        season_depth=system.season_depth,
        decay=system.decay,
        simultaneous_rounds=system.simultaneous_rounds,
        rank_precision=system.rank_precision,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: EloParameters) -> None:
    if parameters.initial_rating <= 0.0:
        raise ValueError(f"{file_path}: [elo].initial_rating must be > 0")
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if parameters.season_decay_factor <= 0.0 or parameters.season_decay_factor > 1.0:
        raise ValueError(f"{file_path}: [elo].season_decay_factor must be in (0, 1]")
    if parameters.playoff_multiplier <= 0.0:
        raise ValueError(f"{file_path}: [elo].playoff_multiplier must be > 0")
    if parameters.default_team_strength <= 0.0:
        raise ValueError(f"{file_path}: [elo].default_team_strength must be > 0")


__all__ = ["EloSystemConfig", "load_elo_system_configs", "parse_elo_system_config"]
