"""Shared two-team update rule for player-level rating calculators.

Every rostered player on a side receives the identical delta for a game:
there is no box score in the domain, so team outcome is the only signal.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from league_rankings.domain.common import GameRecord
from league_rankings.domain.errors import ValidationError
from league_rankings.domain.ratings.ledger import Ledger, PlayerRatingState, RatingPoint

RatingLookup = Callable[[str], RatingPoint | None]
PlayerNameLookup = Callable[[str], str]


@dataclass(frozen=True)
class GameOutcome:
    """Evaluated (but not yet applied) rating change for one game."""

    game: GameRecord
    home_team_id: str
    away_team_id: str
    home_roster: tuple[str, ...]
    away_roster: tuple[str, ...]
    home_strength: float
    away_strength: float
    home_expected: float
    home_actual: float
    learning_rate: float
    home_delta: float

    @property
    def away_expected(self) -> float:
        return 1.0 - self.home_expected

    @property
    def away_actual(self) -> float:
        return 1.0 - self.home_actual

    @property
    def away_delta(self) -> float:
        return -self.home_delta


@dataclass(frozen=True)
class PlayerRatingEvent:
    player_id: str
    team_id: str
    opponent_team_id: str
    game_id: str
    round_id: str
    event_time: datetime
    won: bool
    actual_score: float
    expected_score: float
    pre_mu: float
    mu_delta: float
    post_mu: float
    pre_sigma: float | None
    post_sigma: float | None
    learning_rate: float
    counted: bool


def validate_game(game: GameRecord) -> tuple[str, str]:
    """Return the home and away team ids, or raise :class:`ValidationError`."""
    if game.home_team_id is None or game.away_team_id is None:
        raise ValidationError(game.game_id, "missing team reference")
    if game.home_score is None or game.away_score is None:
        raise ValidationError(game.game_id, "missing score")
    if game.home_team_id == game.away_team_id:
        raise ValidationError(game.game_id, f"identical teams ({game.home_team_id})")
    if game.home_score == game.away_score:
        raise ValidationError(game.game_id, f"tied score {game.home_score}-{game.away_score}")
    return game.home_team_id, game.away_team_id


def validate_rosters(game: GameRecord, home_roster: Sequence[str], away_roster: Sequence[str]) -> None:
    shared = set(home_roster) & set(away_roster)
    if shared:
        raise ValidationError(
            game.game_id,
            f"players rostered on both teams: {sorted(shared)}",
        )


class RoundRatingCalculator:
    """Base calculator; subclasses supply the win-probability model."""

    def __init__(
        self,
        *,
        initial_rating: float,
        base_rate: float,
        season_decay_factor: float,
        playoff_multiplier: float,
        default_team_strength: float,
    ) -> None:
        self.initial_rating = initial_rating
        self.base_rate = base_rate
        self.season_decay_factor = season_decay_factor
        self.playoff_multiplier = playoff_multiplier
        self.default_team_strength = default_team_strength

    def expected_home_score(
        self,
        *,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        home_strength: float,
        away_strength: float,
        lookup: RatingLookup,
    ) -> float:
        raise NotImplementedError

    def initial_sigma(self) -> float | None:
        return None

    def updated_sigma(self, sigma: float | None, expected_score: float) -> float | None:
        return sigma

    def team_strength(self, roster: Sequence[str], lookup: RatingLookup) -> float:
        """Mean mu over rated roster members, or the default strength."""
        rated = [point.mu for point in (lookup(player_id) for player_id in roster) if point is not None]
        if not rated:
            return self.default_team_strength
        return sum(rated) / float(len(rated))

    def season_weight(self, season_order: int) -> float:
        return self.season_decay_factor**season_order

    def playoff_weight(self, game: GameRecord) -> float:
        return self.playoff_multiplier if game.is_playoff else 1.0

    def learning_rate(self, game: GameRecord) -> float:
        return self.base_rate * self.season_weight(game.season_order) * self.playoff_weight(game)

    def new_player_state(self, player_id: str, player_name: str) -> PlayerRatingState:
        return PlayerRatingState(
            player_id=player_id,
            player_name=player_name,
            mu=self.initial_rating,
            sigma=self.initial_sigma(),
        )

    def evaluate_game(
        self,
        game: GameRecord,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        lookup: RatingLookup,
    ) -> GameOutcome:
        home_team_id, away_team_id = validate_game(game)
        validate_rosters(game, home_roster, away_roster)

        home_strength = self.team_strength(home_roster, lookup)
        away_strength = self.team_strength(away_roster, lookup)
        home_expected = self.expected_home_score(
            home_roster=home_roster,
            away_roster=away_roster,
            home_strength=home_strength,
            away_strength=away_strength,
            lookup=lookup,
        )
        home_actual = 1.0 if game.point_differential > 0 else 0.0
        learning_rate = self.learning_rate(game)

        return GameOutcome(
            game=game,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            home_roster=tuple(home_roster),
            away_roster=tuple(away_roster),
            home_strength=home_strength,
            away_strength=away_strength,
            home_expected=home_expected,
            home_actual=home_actual,
            learning_rate=learning_rate,
            home_delta=learning_rate * (home_actual - home_expected),
        )

    def apply_outcome(
        self,
        outcome: GameOutcome,
        ledger: Ledger,
        player_name: PlayerNameLookup,
        *,
        counted: bool = True,
    ) -> list[PlayerRatingEvent]:
        game = outcome.game
        events = self._apply_side(
            outcome,
            ledger,
            player_name,
            roster=outcome.home_roster,
            team_id=outcome.home_team_id,
            opponent_team_id=outcome.away_team_id,
            actual=outcome.home_actual,
            expected=outcome.home_expected,
            delta=outcome.home_delta,
            point_differential=game.point_differential,
            counted=counted,
        )
        events.extend(
            self._apply_side(
                outcome,
                ledger,
                player_name,
                roster=outcome.away_roster,
                team_id=outcome.away_team_id,
                opponent_team_id=outcome.home_team_id,
                actual=outcome.away_actual,
                expected=outcome.away_expected,
                delta=outcome.away_delta,
                point_differential=-game.point_differential,
                counted=counted,
            )
        )
        return events

    def process_game(
        self,
        game: GameRecord,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        ledger: Ledger,
        player_name: PlayerNameLookup,
        *,
        counted: bool = True,
    ) -> list[PlayerRatingEvent]:
        """Evaluate against the live ledger and apply immediately."""
        outcome = self.evaluate_game(game, home_roster, away_roster, ledger.rating_point)
        return self.apply_outcome(outcome, ledger, player_name, counted=counted)

    def _apply_side(
        self,
        outcome: GameOutcome,
        ledger: Ledger,
        player_name: PlayerNameLookup,
        *,
        roster: tuple[str, ...],
        team_id: str,
        opponent_team_id: str,
        actual: float,
        expected: float,
        delta: float,
        point_differential: int,
        counted: bool,
    ) -> list[PlayerRatingEvent]:
        game = outcome.game
        won = actual == 1.0
        events: list[PlayerRatingEvent] = []

        for player_id in roster:
            state = ledger.get_or_create(
                player_id,
                lambda player_id=player_id: self.new_player_state(player_id, player_name(player_id)),
            )
            pre_mu = state.mu
            pre_sigma = state.sigma

            state.mu = pre_mu + delta
            state.sigma = self.updated_sigma(pre_sigma, expected)
            state.last_game_time = game.scheduled_at

            stats = state.record_season(game.season_id)
            if counted:
                state.total_games += 1
                stats.games_played += 1
                stats.wins += int(won)
                stats.losses += int(not won)
                stats.point_differential += point_differential
                stats.team_games[team_id] = stats.team_games.get(team_id, 0) + 1
            stats.end_of_season_rating = state.mu

            events.append(
                PlayerRatingEvent(
                    player_id=player_id,
                    team_id=team_id,
                    opponent_team_id=opponent_team_id,
                    game_id=game.game_id,
                    round_id=game.round_id,
                    event_time=game.scheduled_at,
                    won=won,
                    actual_score=actual,
                    expected_score=expected,
                    pre_mu=pre_mu,
                    mu_delta=delta,
                    post_mu=state.mu,
                    pre_sigma=pre_sigma,
                    post_sigma=state.sigma,
                    learning_rate=outcome.learning_rate,
                    counted=counted,
                )
            )

        return events


__all__ = [
    "GameOutcome",
    "PlayerNameLookup",
    "PlayerRatingEvent",
    "RatingLookup",
    "RoundRatingCalculator",
    "validate_game",
    "validate_rosters",
]
