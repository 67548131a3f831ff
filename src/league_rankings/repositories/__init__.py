"""Database repository helpers."""

from league_rankings.repositories.calculation_repository import (
    create_calculation_state,
    ensure_no_active_calculation,
    fetch_recent_calculations,
    find_active_calculations,
    get_calculation_state,
    save_calculation_state,
)
from league_rankings.repositories.history_repository import (
    clear_round_history,
    fetch_player_history,
    insert_round_history,
    load_round_history,
)
from league_rankings.repositories.league_repository import load_league_data
from league_rankings.repositories.rankings_repository import (
    clear_calculated_rounds,
    fetch_top_rankings,
    insert_calculated_rounds,
    load_calculated_round_ids,
    load_player_rankings,
    replace_player_rankings,
)

__all__ = [
    "clear_calculated_rounds",
    "clear_round_history",
    "create_calculation_state",
    "ensure_no_active_calculation",
    "fetch_player_history",
    "fetch_recent_calculations",
    "fetch_top_rankings",
    "find_active_calculations",
    "get_calculation_state",
    "insert_calculated_rounds",
    "insert_round_history",
    "load_calculated_round_ids",
    "load_league_data",
    "load_player_rankings",
    "load_round_history",
    "replace_player_rankings",
    "save_calculation_state",
]
