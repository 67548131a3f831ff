"""Plan an incremental run: seed from prior rankings and keep only new rounds."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass

from league_rankings.domain.common import Round
from league_rankings.domain.export import PlayerRanking, ranking_to_state
from league_rankings.domain.ratings.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncrementalPlan:
    ledger: Ledger
    rounds: list[Round]
    skipped_round_ids: tuple[str, ...]
    seeded_players: int

    @property
    def is_full_run(self) -> bool:
        return self.seeded_players == 0 and not self.skipped_round_ids


def seed_ledger(prior_rankings: Iterable[PlayerRanking]) -> Ledger:
    """Rebuild ledger state exactly as it was exported."""
    ledger = Ledger()
    for ranking in prior_rankings:
        ledger.add(ranking_to_state(ranking))
    return ledger


def filter_uncalculated_rounds(
    rounds: Sequence[Round],
    calculated_round_ids: Collection[str],
) -> list[Round]:
    return [round_ for round_ in rounds if round_.round_id not in calculated_round_ids]


def resolve_incremental(
    rounds: Sequence[Round],
    calculated_round_ids: Collection[str],
    prior_rankings: Sequence[PlayerRanking],
) -> IncrementalPlan:
    """Build the ledger and round list an incremental run should process.

    Rounds already in ``calculated_round_ids`` are never replayed. Without
    prior rankings there is nothing to continue from, so every round is
    planned against an empty ledger.
    """
    if not prior_rankings:
        if calculated_round_ids:
            logger.warning(
                "no prior rankings found; ignoring %d calculated rounds and planning a full run",
                len(calculated_round_ids),
            )
        return IncrementalPlan(
            ledger=Ledger(),
            rounds=list(rounds),
            skipped_round_ids=(),
            seeded_players=0,
        )

    ledger = seed_ledger(prior_rankings)
    planned = filter_uncalculated_rounds(rounds, calculated_round_ids)
    planned_ids = {round_.round_id for round_ in planned}
    skipped = tuple(round_.round_id for round_ in rounds if round_.round_id not in planned_ids)

    logger.info(
        "incremental plan seeded_players=%d new_rounds=%d already_calculated=%d",
        len(ledger),
        len(planned),
        len(skipped),
    )
    return IncrementalPlan(
        ledger=ledger,
        rounds=planned,
        skipped_round_ids=skipped,
        seeded_players=len(ledger),
    )


__all__ = [
    "IncrementalPlan",
    "filter_uncalculated_rounds",
    "resolve_incremental",
    "seed_ledger",
]
