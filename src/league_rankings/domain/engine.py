"""Pure entry points for full and incremental ranking calculations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from league_rankings.domain.common import GameRecord, LeagueData, Round, utc_now
from league_rankings.domain.config_base import BaseSystemConfig
from league_rankings.domain.export import PlayerRanking
from league_rankings.domain.incremental import resolve_incremental
from league_rankings.domain.processor import (
    CalculationResult,
    ProgressSink,
    RoundProcessor,
    StopCheck,
)
from league_rankings.domain.protocol import RatingCalculator, RunType
from league_rankings.domain.ratings.ledger import Ledger
from league_rankings.domain.rounds import (
    group_games_into_rounds,
    order_seasons,
    prepare_games,
    split_completed_games,
)
from league_rankings.domain.state import CalculationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundSchedule:
    rounds: list[Round]
    incomplete_games: list[GameRecord]


def build_schedule(league: LeagueData, season_depth: int = 0) -> RoundSchedule:
    """Order seasons, enrich games and group the completed ones into rounds.

    Unscored or unscheduled games are kept aside so they neither decay
    anyone nor mark a round as calculated before they are played.
    """
    seasons = order_seasons(league.seasons, season_depth)
    games = prepare_games(league.games, seasons)
    completed, incomplete = split_completed_games(games)
    rounds = group_games_into_rounds(completed)
    logger.info(
        "loaded seasons=%d games=%d incomplete=%d rounds=%d season_depth=%d",
        len(seasons),
        len(games),
        len(incomplete),
        len(rounds),
        season_depth,
    )
    return RoundSchedule(rounds=rounds, incomplete_games=incomplete)


def build_rounds(league: LeagueData, season_depth: int = 0) -> list[Round]:
    return build_schedule(league, season_depth).rounds


def new_calculation_state(
    system_config: BaseSystemConfig,
    run_type: RunType,
    *,
    triggered_by: str | None = None,
) -> CalculationState:
    return CalculationState(
        run_type=run_type,
        system_name=system_config.name,
        parameters=system_config.as_config_json(),
        triggered_by=triggered_by,
    )


def run_full_calculation(
    league: LeagueData,
    system_config: BaseSystemConfig,
    calculator: RatingCalculator,
    *,
    state: CalculationState | None = None,
    progress_sink: ProgressSink | None = None,
    progress_every: int = 1,
    should_stop: StopCheck | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> CalculationResult:
    """Recompute every player's rating from an empty ledger."""
    state = state or new_calculation_state(system_config, RunType.FULL)
    schedule = build_schedule(league, system_config.season_depth)
    return _run(
        league,
        system_config,
        calculator,
        state=state,
        ledger=Ledger(),
        rounds=schedule.rounds,
        incomplete_games=schedule.incomplete_games,
        replaces_all_rounds=True,
        progress_sink=progress_sink,
        progress_every=progress_every,
        should_stop=should_stop,
        clock=clock,
    )


def run_incremental_calculation(
    league: LeagueData,
    system_config: BaseSystemConfig,
    calculator: RatingCalculator,
    *,
    calculated_round_ids: Collection[str],
    prior_rankings: Sequence[PlayerRanking],
    state: CalculationState | None = None,
    progress_sink: ProgressSink | None = None,
    progress_every: int = 1,
    should_stop: StopCheck | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> CalculationResult:
    """Continue from ``prior_rankings`` over rounds not yet calculated."""
    state = state or new_calculation_state(system_config, RunType.INCREMENTAL)
    schedule = build_schedule(league, system_config.season_depth)
    plan = resolve_incremental(schedule.rounds, calculated_round_ids, prior_rankings)
    return _run(
        league,
        system_config,
        calculator,
        state=state,
        ledger=plan.ledger,
        rounds=plan.rounds,
        incomplete_games=schedule.incomplete_games,
        replaces_all_rounds=plan.is_full_run,
        progress_sink=progress_sink,
        progress_every=progress_every,
        should_stop=should_stop,
        clock=clock,
    )


def _run(
    league: LeagueData,
    system_config: BaseSystemConfig,
    calculator: RatingCalculator,
    *,
    state: CalculationState,
    ledger: Ledger,
    rounds: Sequence[Round],
    incomplete_games: Sequence[GameRecord],
    replaces_all_rounds: bool,
    progress_sink: ProgressSink | None,
    progress_every: int,
    should_stop: StopCheck | None,
    clock: Callable[[], datetime],
) -> CalculationResult:
    processor = RoundProcessor(
        calculator,
        system_config.decay,
        league,
        state,
        ledger=ledger,
        simultaneous_rounds=system_config.simultaneous_rounds,
        rank_precision=system_config.rank_precision,
        progress_sink=progress_sink,
        progress_every=progress_every,
        should_stop=should_stop,
        clock=clock,
    )
    processor.exclude_games(incomplete_games)
    processor.process_rounds(rounds)
    result = processor.export()
    return replace(result, replaces_all_rounds=replaces_all_rounds)


__all__ = [
    "RoundSchedule",
    "build_rounds",
    "build_schedule",
    "new_calculation_state",
    "run_full_calculation",
    "run_incremental_calculation",
]
