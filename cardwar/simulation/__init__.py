"""
Batch simulation of War games and statistics over the results.
"""

from cardwar.simulation.runner import GameSummary, simulate_game, simulate_games
from cardwar.simulation.statistics import (
    ConfidenceInterval,
    SimulationReport,
    format_report,
    plot_round_histogram,
    summaries_to_frame,
    summarize,
)

__all__ = [
    "GameSummary",
    "simulate_game",
    "simulate_games",
    "ConfidenceInterval",
    "SimulationReport",
    "format_report",
    "plot_round_histogram",
    "summaries_to_frame",
    "summarize",
]
