"""Registry of available ranking-system implementations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Type

from league_rankings.domain.config_base import BaseSystemConfig
from league_rankings.domain.protocol import RatingCalculator
from league_rankings.domain.ratings.elo.calculator import PlayerEloCalculator
from league_rankings.domain.ratings.elo.config import load_elo_system_configs
from league_rankings.domain.ratings.trueskill.calculator import PlayerTrueSkillCalculator
from league_rankings.domain.ratings.trueskill.config import load_trueskill_system_configs

ROOT_DIR = Path(__file__).resolve().parents[4]

LoadConfigsFn = Callable[[Path], list[BaseSystemConfig]]
CreateCalculatorFn = Callable[[BaseSystemConfig], RatingCalculator]


@dataclass(frozen=True)
class RatingSystemDescriptor:
    """Everything required to run one ranking algorithm."""

    algorithm: str
    config_dir: Path
    load_configs: LoadConfigsFn
    create_calculator: CreateCalculatorFn


_REGISTRY: dict[str, RatingSystemDescriptor] = {}


def register(descriptor: RatingSystemDescriptor) -> None:
    """Register one ranking-system descriptor."""
    key = descriptor.algorithm.lower()
    if key in _REGISTRY:
        raise ValueError(f"Duplicate rating descriptor registration for algorithm={key}")
    _REGISTRY[key] = descriptor


def get_all() -> list[RatingSystemDescriptor]:
    """Return all registered descriptors in deterministic order."""
    return [_REGISTRY[key] for key in sorted(_REGISTRY)]


def get(algorithm: str) -> RatingSystemDescriptor:
    key = algorithm.lower()
    try:
        return _REGISTRY[key]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(
            f"No rating descriptor registered for {algorithm}. Available: {available}"
        ) from exc


def _make_creator(calculator_class: Type[Any]) -> CreateCalculatorFn:
    def creator(config: BaseSystemConfig) -> RatingCalculator:
        return calculator_class(params=getattr(config, "parameters"))

    return creator


# (algorithm, config_subdir, load_configs, calculator_class)
_SYSTEMS: list[tuple[str, str, LoadConfigsFn, Type[Any]]] = [
    ("elo", "elo", load_elo_system_configs, PlayerEloCalculator),
    ("trueskill", "trueskill", load_trueskill_system_configs, PlayerTrueSkillCalculator),
]


def _register_defaults() -> None:
    if _REGISTRY:
        return
    for algorithm, config_subdir, load_configs, calculator_class in _SYSTEMS:
        register(
            RatingSystemDescriptor(
                algorithm=algorithm,
                config_dir=ROOT_DIR / "configs" / "ratings" / config_subdir,
                load_configs=load_configs,
                create_calculator=_make_creator(calculator_class),
            )
        )


_register_defaults()

__all__ = [
    "ROOT_DIR",
    "RatingSystemDescriptor",
    "get",
    "get_all",
    "register",
]
