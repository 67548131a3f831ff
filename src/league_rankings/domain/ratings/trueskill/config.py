"""Load TrueSkill-style ranking-system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from league_rankings.domain.config_base import (
    BaseSystemConfig,
    load_system_configs,
    parse_system_section,
)
from league_rankings.domain.ratings.trueskill.calculator import TrueSkillParameters


@dataclass(frozen=True)
class TrueSkillSystemConfig(BaseSystemConfig):
    """Configuration for one TrueSkill-style ranking calculation."""

    parameters: TrueSkillParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "algorithm": "trueskill",
            "initial_mu": self.parameters.initial_mu,
            "initial_sigma": self.parameters.initial_sigma,
            "beta": self.parameters.beta,
            "min_sigma": self.parameters.min_sigma,
            "base_rate": self.parameters.base_rate,
            "season_decay_factor": self.parameters.season_decay_factor,
            "playoff_multiplier": self.parameters.playoff_multiplier,
            "default_team_strength": self.parameters.default_team_strength,
            **self._system_config_json(),
        }


def load_trueskill_system_configs(config_dir: Path) -> list[TrueSkillSystemConfig]:
    """Load and validate all TrueSkill TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        parse_trueskill_system_config,
        duplicate_name_label="trueskill",
    )


def parse_trueskill_system_config(raw: dict[str, Any], file_path: Path) -> TrueSkillSystemConfig:
    trueskill_raw = raw.get("trueskill", {})

    initial_mu = float(trueskill_raw.get("initial_mu", 1200.0))
    initial_sigma = float(trueskill_raw.get("initial_sigma", 200.0))
    parameters = TrueSkillParameters(
        initial_mu=initial_mu,
        initial_sigma=initial_sigma,
        beta=float(trueskill_raw.get("beta", 200.0)),
        min_sigma=float(trueskill_raw.get("min_sigma", 50.0)),
        base_rate=float(trueskill_raw.get("base_rate", 36.0)),
        season_decay_factor=float(trueskill_raw.get("season_decay_factor", 0.82)),
        playoff_multiplier=float(trueskill_raw.get("playoff_multiplier", 1.8)),
        default_team_strength=float(trueskill_raw.get("default_team_strength", initial_mu)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    system = parse_system_section(raw, file_path, baseline=parameters.initial_mu)
    if system.decay.max_sigma < parameters.min_sigma:
        raise ValueError(f"{file_path}: [decay].max_sigma must be >= [trueskill].min_sigma")

    return TrueSkillSystemConfig(
        name=system.name,
        description=system.description,
        file_path=file_path,
        season_depth=system.season_depth,
        decay=system.decay,
        simultaneous_rounds=system.simultaneous_rounds,
        rank_precision=system.rank_precision,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: TrueSkillParameters) -> None:
    if parameters.initial_mu <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].initial_mu must be > 0")
    if parameters.initial_sigma <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].initial_sigma must be > 0")
    if parameters.beta <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].beta must be > 0")
    if parameters.min_sigma <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].min_sigma must be > 0")
    if parameters.min_sigma > parameters.initial_sigma:
        raise ValueError(f"{file_path}: [trueskill].min_sigma must be <= initial_sigma")
    if parameters.base_rate <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].base_rate must be > 0")
    if parameters.season_decay_factor <= 0.0 or parameters.season_decay_factor > 1.0:
        raise ValueError(f"{file_path}: [trueskill].season_decay_factor must be in (0, 1]")
    if parameters.playoff_multiplier <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].playoff_multiplier must be > 0")
    if parameters.default_team_strength <= 0.0:
        raise ValueError(f"{file_path}: [trueskill].default_team_strength must be > 0")


__all__ = [
    "TrueSkillSystemConfig",
    "load_trueskill_system_configs",
    "parse_trueskill_system_config",
]
