"""Round-by-round driver that folds games into a ledger.

Lifecycle: ``LOADED -> PROCESSING -> EXPORTED``; any error moves the
processor to ``FAILED`` and marks the calculation state failed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from league_rankings.domain.common import CalculatedRound, GameRecord, LeagueData, Round, utc_now
from league_rankings.domain.errors import CalculationTimeout, ValidationError
from league_rankings.domain.export import PlayerRanking, rank_ledger
from league_rankings.domain.history import RoundSnapshot, build_round_snapshot
from league_rankings.domain.protocol import CalculationStatus, RatingCalculator, RunPhase
from league_rankings.domain.ratings.base import GameOutcome, RatingLookup, validate_game
from league_rankings.domain.ratings.decay import DecayParameters, apply_round_decay
from league_rankings.domain.ratings.ledger import Ledger
from league_rankings.domain.rounds import format_round_info
from league_rankings.domain.state import MAX_PROCESSING_PERCENT, CalculationState

logger = logging.getLogger(__name__)

ProgressSink = Callable[[CalculationState], None]
StopCheck = Callable[[], bool]


@dataclass(frozen=True)
class SkippedGame:
    game_id: str
    round_id: str
    reason: str


@dataclass(frozen=True)
class CalculationResult:
    """Exported run output.

    ``replaces_all_rounds`` is set when every round was planned from an empty
    ledger, so previously stored round markers and history must be dropped.
    """

    state: CalculationState
    rankings: list[PlayerRanking]
    calculated_rounds: list[CalculatedRound]
    skipped_games: list[SkippedGame]
    ledger: Ledger
    history: list[RoundSnapshot] = field(default_factory=list)
    replaces_all_rounds: bool = False


class RoundProcessor:
    """Process rounds strictly in order against one ledger."""

    def __init__(
        self,
        calculator: RatingCalculator,
        decay: DecayParameters,
        league: LeagueData,
        state: CalculationState,
        *,
        ledger: Ledger | None = None,
        simultaneous_rounds: bool = True,
        rank_precision: int = 2,
        progress_sink: ProgressSink | None = None,
        progress_every: int = 1,
        should_stop: StopCheck | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if progress_every <= 0:
            raise ValueError("progress_every must be greater than 0")
        self.calculator = calculator
        self.decay = decay
        self.league = league
        self.state = state
        self.simultaneous_rounds = simultaneous_rounds
        self.rank_precision = rank_precision
        self.progress_sink = progress_sink
        self.progress_every = progress_every
        self.should_stop = should_stop
        self.clock = clock

        self._ledger: Ledger | None = ledger if ledger is not None else Ledger()
        self._phase = RunPhase.LOADED
        self._calculated_rounds: list[CalculatedRound] = []
        self._skipped_games: list[SkippedGame] = []
        self._history: list[RoundSnapshot] = []

    @property
    def phase(self) -> RunPhase:
        return self._phase

    @property
    def ledger(self) -> Ledger:
        """Live ledger; unavailable once exported."""
        return self._require_ledger()

    @property
    def calculated_rounds(self) -> list[CalculatedRound]:
        return list(self._calculated_rounds)

    @property
    def skipped_games(self) -> list[SkippedGame]:
        return list(self._skipped_games)

    @property
    def history(self) -> list[RoundSnapshot]:
        return list(self._history)

    def exclude_games(self, games: Sequence[GameRecord]) -> None:
        """Report games kept out of the round schedule, without rating them."""
        if self._phase not in (RunPhase.LOADED, RunPhase.PROCESSING):
            raise RuntimeError(f"cannot exclude games in phase {self._phase.value}")

        for game in games:
            try:
                validate_game(game)
            except ValidationError as exc:
                self._skip(game, exc)
            else:
                raise ValueError(f"game_id={game.game_id} is completed and belongs in a round")
        if games:
            self.state.update_progress(skipped_games=len(self._skipped_games))
            logger.info(
                "calculation_id=%s excluded incomplete games=%d",
                self.state.calculation_id,
                len(games),
            )

    def process_rounds(self, rounds: Sequence[Round], *, counted: bool = True) -> None:
        """Rate every game of every round, oldest first, then decay each round."""
        if self._phase not in (RunPhase.LOADED, RunPhase.PROCESSING):
            raise RuntimeError(f"cannot process rounds in phase {self._phase.value}")

        try:
            self._start(rounds)
            last_round_by_season = {round_.season_id: index for index, round_ in enumerate(rounds)}

            for index, round_ in enumerate(rounds):
                if self.should_stop is not None and self.should_stop():
                    raise CalculationTimeout(
                        f"calculation_id={self.state.calculation_id} cancelled before round "
                        f"{round_.round_id} ({index}/{len(rounds)} rounds processed)"
                    )
                games_rated = self._process_round(round_, counted=counted)

                seasons_processed = sum(
                    1 for last_index in last_round_by_season.values() if last_index <= index
                )
                self._record_progress(
                    round_,
                    games_rated=games_rated,
                    rounds_processed=index + 1,
                    total_rounds=len(rounds),
                    seasons_processed=seasons_processed,
                )
        except Exception as exc:
            self._fail(exc)
            raise

    def export(self) -> CalculationResult:
        """Complete the calculation and hand the ledger over; callable once."""
        if self._phase == RunPhase.EXPORTED or self._ledger is None:
            raise RuntimeError("ledger has already been exported")
        if self._phase == RunPhase.FAILED:
            raise RuntimeError("cannot export a failed calculation")

        ledger = self._ledger
        rankings = rank_ledger(ledger, precision=self.rank_precision)
        if self.state.status == CalculationStatus.PENDING:
            self.state.mark_running()
        self.state.mark_completed(completed_at=self.clock())

        self._ledger = None
        self._phase = RunPhase.EXPORTED
        logger.info(
            "calculation_id=%s exported players=%d rounds=%d skipped_games=%d",
            self.state.calculation_id,
            len(rankings),
            len(self._calculated_rounds),
            len(self._skipped_games),
        )
        return CalculationResult(
            state=self.state,
            rankings=rankings,
            calculated_rounds=list(self._calculated_rounds),
            skipped_games=list(self._skipped_games),
            ledger=ledger,
            history=list(self._history),
        )

    def _start(self, rounds: Sequence[Round]) -> None:
        if self.state.status == CalculationStatus.PENDING:
            self.state.mark_running()
        self._phase = RunPhase.PROCESSING

        progress = self.state.progress
        self.state.update_progress(
            current_step="processing",
            total_rounds=progress.total_rounds + len(rounds),
            total_games=progress.total_games + sum(round_.game_count for round_ in rounds),
            total_seasons=progress.total_seasons + len({round_.season_id for round_ in rounds}),
        )
        logger.info(
            "calculation_id=%s processing rounds=%d simultaneous=%s",
            self.state.calculation_id,
            len(rounds),
            self.simultaneous_rounds,
        )

    def _process_round(self, round_: Round, *, counted: bool) -> int:
        """Fold one round into the ledger; returns the number of rated games."""
        ledger = self._require_ledger()
        round_start = ledger.snapshot()

        if self.simultaneous_rounds:
            outcomes = [
                outcome
                for outcome in (self._evaluate(game, round_start.get) for game in round_.games)
                if outcome is not None
            ]
            for outcome in outcomes:
                self.calculator.apply_outcome(outcome, ledger, self.league.player_name, counted=counted)
        else:
            outcomes = []
            for game in round_.games:
                outcome = self._evaluate(game, ledger.rating_point)
                if outcome is None:
                    continue
                self.calculator.apply_outcome(outcome, ledger, self.league.player_name, counted=counted)
                outcomes.append(outcome)

        if not outcomes:
            # Left unmarked so a later run can rate the round once a game is valid.
            logger.info(
                "round=%s %s rated=0 left uncalculated",
                round_.round_id,
                format_round_info(round_),
            )
            return 0

        active_player_ids = {
            player_id
            for outcome in outcomes
            for player_id in (*outcome.home_roster, *outcome.away_roster)
        }
        apply_round_decay(ledger, active_player_ids, self.decay)

        game_ids = tuple(outcome.game.game_id for outcome in outcomes)
        round_.calculated = True
        round_.calculated_at = self.clock()
        self._calculated_rounds.append(
            CalculatedRound(
                round_id=round_.round_id,
                round_start_time=round_.start_time,
                season_id=round_.season_id,
                game_count=len(outcomes),
                calculated_at=round_.calculated_at,
                calculation_id=self.state.calculation_id,
                game_ids=game_ids,
            )
        )
        self._history.append(
            build_round_snapshot(
                round_,
                ledger,
                round_start,
                active_player_ids,
                game_ids=game_ids,
                calculation_id=self.state.calculation_id,
                calculated_at=round_.calculated_at,
                precision=self.rank_precision,
            )
        )
        logger.info(
            "round=%s %s rated=%d players=%d",
            round_.round_id,
            format_round_info(round_),
            len(outcomes),
            len(ledger),
        )
        return len(outcomes)

    def _evaluate(self, game: GameRecord, lookup: RatingLookup) -> GameOutcome | None:
        try:
            validate_game(game)
            home_roster = self.league.roster(game.home_team_id)
            away_roster = self.league.roster(game.away_team_id)
            return self.calculator.evaluate_game(game, home_roster, away_roster, lookup)
        except ValidationError as exc:
            logger.warning("skipping game round=%s %s", game.round_id, exc)
            self._skip(game, exc)
            return None

    def _skip(self, game: GameRecord, exc: ValidationError) -> None:
        self._skipped_games.append(
            SkippedGame(game_id=game.game_id, round_id=game.round_id, reason=exc.reason)
        )

    def _record_progress(
        self,
        round_: Round,
        *,
        games_rated: int,
        rounds_processed: int,
        total_rounds: int,
        seasons_processed: int,
    ) -> None:
        progress = self.state.progress
        self.state.update_progress(
            current_step=f"round {round_.round_id}",
            percent_complete=int(MAX_PROCESSING_PERCENT * rounds_processed / total_rounds),
            rounds_processed=progress.rounds_processed + 1,
            games_processed=progress.games_processed + games_rated,
            skipped_games=len(self._skipped_games),
            seasons_processed=seasons_processed,
            current_season_id=round_.season_id,
        )

        if self.progress_sink is None:
            return
        if rounds_processed % self.progress_every != 0 and rounds_processed != total_rounds:
            return
        try:
            self.progress_sink(self.state)
        except Exception:
            logger.exception(
                "calculation_id=%s progress update failed at round=%s",
                self.state.calculation_id,
                round_.round_id,
            )

    def _fail(self, exc: Exception) -> None:
        self._phase = RunPhase.FAILED
        if not self.state.is_terminal:
            self.state.mark_failed(exc, failed_at=self.clock())
        logger.error(
            "calculation_id=%s failed: %s: %s",
            self.state.calculation_id,
            type(exc).__name__,
            exc,
        )

    def _require_ledger(self) -> Ledger:
        if self._ledger is None:
            raise RuntimeError("ledger has already been exported")
        return self._ledger


__all__ = ["CalculationResult", "ProgressSink", "RoundProcessor", "SkippedGame", "StopCheck"]
