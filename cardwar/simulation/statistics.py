"""
Statistics over batches of simulated War games.

This module aggregates `GameSummary` values into a `SimulationReport`: who
won, how games ended, the distribution of game lengths (with a confidence
interval for the mean) and a histogram of round counts. Reports can be exported
as a pandas DataFrame or plotted with matplotlib.
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import scipy.stats as stats

from cardwar.simulation.runner import GameSummary


@dataclass
class ConfidenceInterval:
    """
    Represents a confidence interval with lower and upper bounds.

    Attributes:
        lower: The lower bound of the confidence interval
        upper: The upper bound of the confidence interval
        confidence: The confidence level (e.g., 0.95 for 95% confidence)
    """

    lower: float
    upper: float
    confidence: float

    def contains(self, value: float) -> bool:
        """Check if the interval contains a value."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, float]:
        """Convert to a dictionary."""
        return {"lower": self.lower, "upper": self.upper, "confidence": self.confidence}


@dataclass
class SimulationReport:
    """
    Aggregate results of a simulation batch.

    Attributes:
        games: Number of games summarized
        wins: Games won, by player name
        endings: Games per ending reason
        rounds_mean: Mean rounds per game
        rounds_median: Median rounds per game
        rounds_p90: 90th percentile of rounds per game
        rounds_p99: 99th percentile of rounds per game
        rounds_min: Shortest game
        rounds_max: Longest game
        rounds_ci: Confidence interval for the mean rounds
        wars_mean: Mean wars per game
        flips_mean: Mean face-up flips per game
        histogram: (bin start, bin end, count) for the round counts
    """

    games: int
    wins: Dict[str, int]
    endings: Dict[str, int]
    rounds_mean: float
    rounds_median: float
    rounds_p90: float
    rounds_p99: float
    rounds_min: int
    rounds_max: int
    rounds_ci: ConfidenceInterval
    wars_mean: float
    flips_mean: float
    histogram: List[Tuple[float, float, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games": self.games,
            "wins": dict(self.wins),
            "endings": dict(self.endings),
            "rounds": {
                "mean": self.rounds_mean,
                "median": self.rounds_median,
                "p90": self.rounds_p90,
                "p99": self.rounds_p99,
                "min": self.rounds_min,
                "max": self.rounds_max,
                "confidenceInterval": self.rounds_ci.to_dict(),
            },
            "warsMean": self.wars_mean,
            "flipsMean": self.flips_mean,
            "histogram": [
                {"start": start, "end": end, "count": count}
                for start, end, count in self.histogram
            ],
        }


def calculate_confidence_interval(
    values: Sequence[float], confidence: float = 0.95
) -> ConfidenceInterval:
    """
    Calculate a confidence interval for the mean of a set of values.

    Args:
        values: The values to calculate the confidence interval for
        confidence: The confidence level (e.g., 0.95 for 95% confidence)

    Returns:
        A ConfidenceInterval object (zero width for fewer than two values or
        identical values)
    """
    mean = float(np.mean(values))
    if len(values) < 2 or np.ptp(values) == 0:
        return ConfidenceInterval(mean, mean, confidence)

    std_err = stats.sem(values)
    margin = std_err * stats.t.ppf((1 + confidence) / 2, len(values) - 1)
    return ConfidenceInterval(float(mean - margin), float(mean + margin), confidence)


def summarize(
    summaries: Sequence[GameSummary], bins: int = 10, confidence: float = 0.95
) -> SimulationReport:
    """
    Aggregate per-game summaries.

    Args:
        summaries: At least one GameSummary
        bins: Number of histogram bins for the round counts
        confidence: Confidence level for the mean-rounds interval

    Returns:
        SimulationReport for the batch

    Raises:
        ValueError: If no summaries are given or bins is not positive
    """
    if not summaries:
        raise ValueError("summarize needs at least one game")
    if bins < 1:
        raise ValueError("bins must be at least 1")

    rounds = np.array([s.rounds for s in summaries], dtype=float)
    wars = np.array([s.wars for s in summaries], dtype=float)
    flips = np.array([s.flips for s in summaries], dtype=float)

    counts, edges = np.histogram(rounds, bins=bins)
    histogram = [
        (float(edges[i]), float(edges[i + 1]), int(counts[i])) for i in range(len(counts))
    ]

    return SimulationReport(
        games=len(summaries),
        wins=dict(Counter(s.winner for s in summaries if s.winner is not None)),
        endings=dict(Counter(s.reason for s in summaries)),
        rounds_mean=float(np.mean(rounds)),
        rounds_median=float(np.median(rounds)),
        rounds_p90=float(np.percentile(rounds, 90)),
        rounds_p99=float(np.percentile(rounds, 99)),
        rounds_min=int(rounds.min()),
        rounds_max=int(rounds.max()),
        rounds_ci=calculate_confidence_interval(rounds, confidence),
        wars_mean=float(np.mean(wars)),
        flips_mean=float(np.mean(flips)),
        histogram=histogram,
    )


def format_report(report: SimulationReport) -> List[str]:
    """Human-readable lines describing a report."""
    lines = [f"Games simulated: {report.games:,}"]
    for name, count in sorted(report.wins.items()):
        lines.append(f"{name} wins: {count:,} ({count / report.games:.2%})")
    for reason, count in sorted(report.endings.items()):
        lines.append(f"Ended by {reason}: {count:,}")
    ci = report.rounds_ci
    lines.append(
        f"Rounds: mean {report.rounds_mean:.1f} "
        f"({ci.confidence:.0%} CI {ci.lower:.1f}-{ci.upper:.1f}), "
        f"median {report.rounds_median:.1f}, p90 {report.rounds_p90:.1f}, "
        f"p99 {report.rounds_p99:.1f}, min {report.rounds_min}, max {report.rounds_max}"
    )
    lines.append(f"Wars per game: {report.wars_mean:.2f} | Flips per game: {report.flips_mean:.1f}")
    return lines


def summaries_to_frame(summaries: Sequence[GameSummary]) -> pd.DataFrame:
    """One row per game, columns seed, rounds, wars, flips, winner, reason."""
    return pd.DataFrame(
        [s.to_dict() for s in summaries],
        columns=["seed", "rounds", "wars", "flips", "winner", "reason"],
    )


def plot_round_histogram(report: SimulationReport, path: Union[str, Path]) -> Path:
    """
    Save a bar chart of the round-count histogram.

    Args:
        report: The report to plot
        path: Image file to write (format taken from the extension)

    Returns:
        The path written
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    starts = [start for start, _, _ in report.histogram]
    widths = [end - start for start, end, _ in report.histogram]
    counts = [count for _, _, count in report.histogram]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.bar(starts, counts, width=widths, align="edge", edgecolor="black")
    ax.axvline(report.rounds_mean, color="red", linestyle="--", label="Mean")
    ax.set_title(f"Game Length Distribution ({report.games:,} games)")
    ax.set_xlabel("Rounds")
    ax.set_ylabel("Games")
    ax.grid(True)
    ax.legend()
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path
