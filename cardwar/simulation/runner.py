"""
Batch simulation of seeded War games.

Every game gets its own seed (``"<seed>-<index>"``) and therefore its own RNG
stream, so games can be spread across worker processes without any
coordination and the batch result does not depend on the worker count.
"""

import logging
import multiprocessing
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from cardwar.trace.records import create_trace_meta
from cardwar.trace.writer import TraceWriter
from cardwar.war.events import GameEnded
from cardwar.war.game import run_game
from cardwar.war.hashing import StateHashMode
from cardwar.war.rules import WarRules, validate_war_rules
from cardwar.war.state import DEFAULT_PLAYER_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSummary:
    """
    Outcome of one simulated game.

    Attributes:
        seed: The game's seed
        rounds: Rounds played
        wars: Wars fought
        flips: Face-up cards drawn
        winner: Name of the winner, or None for a timeout or stalemate
        reason: ``win``, ``timeout`` or ``stalemate``
    """

    seed: str
    rounds: int
    wars: int
    flips: int
    winner: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def game_seeds(seed: str, games: int) -> List[str]:
    return [f"{seed}-{index}" for index in range(1, games + 1)]


def simulate_game(
    seed: str,
    rules: WarRules,
    player_names: Sequence[str],
    trace_dir: Optional[Union[str, Path]] = None,
    state_hash_mode: Union[StateHashMode, str] = StateHashMode.OFF,
) -> GameSummary:
    """Play one game without keeping its events, optionally tracing it to disk."""
    endings: List[GameEnded] = []
    writer_holder: List[TraceWriter] = []

    def on_game_start(state):
        if trace_dir is not None:
            meta = create_trace_meta(
                seed,
                state,
                cli_args={"command": "simulate"},
                state_hash_mode=state_hash_mode,
            )
            writer_holder.append(TraceWriter(Path(trace_dir) / f"{seed}.jsonl", meta))

    def on_round(result):
        endings.extend(e for e in result.events if isinstance(e, GameEnded))
        if writer_holder:
            writer_holder[0].record_round(result)

    result = run_game(
        seed,
        player_names=player_names,
        rules=rules,
        state_hash_mode=state_hash_mode,
        on_game_start=on_game_start,
        on_round=on_round,
        collect_events=False,
    )
    state = result.state
    ending = endings[-1]
    return GameSummary(
        seed=seed,
        rounds=state.round - 1,
        wars=state.stats.wars,
        flips=state.stats.flips,
        winner=state.players[state.winner].name if state.winner is not None else None,
        reason=ending.reason.value,
    )


def _simulate_batch(
    seeds: List[str],
    rules: WarRules,
    player_names: List[str],
    trace_dir: Optional[str],
    state_hash_mode: str,
) -> List[GameSummary]:
    return [
        simulate_game(seed, rules, player_names, trace_dir, state_hash_mode)
        for seed in seeds
    ]


def simulate_games(
    games: int,
    seed: str = "sim",
    rules: Any = None,
    player_names: Optional[Iterable[str]] = None,
    workers: int = 1,
    trace_dir: Optional[Union[str, Path]] = None,
    state_hash_mode: Union[StateHashMode, str] = StateHashMode.OFF,
) -> List[GameSummary]:
    """
    Simulate ``games`` independent games.

    Args:
        games: Number of games (at least 1)
        seed: Base seed; game ``i`` uses ``"<seed>-<i>"``
        rules: Rule overrides or a WarRules instance
        player_names: Two to four player names
        workers: Worker processes; 1 runs in-process, 0 uses every CPU
        trace_dir: Write one trace per game into this directory
        state_hash_mode: Hash mode for traced games

    Returns:
        One GameSummary per game, in seed order
    """
    if games < 1:
        raise ValueError("games must be at least 1")
    if workers < 0:
        raise ValueError("workers must be a non-negative integer")
    config = validate_war_rules(rules)
    names = list(player_names) if player_names is not None else list(DEFAULT_PLAYER_NAMES)
    mode = StateHashMode(state_hash_mode).value
    trace_dir = str(trace_dir) if trace_dir is not None else None
    seeds = game_seeds(seed, games)

    if workers == 0:
        workers = multiprocessing.cpu_count()
    workers = min(workers, games)

    logger.info("Simulating %d game(s) with seed %r on %d worker(s)", games, seed, workers)
    if workers == 1:
        return _simulate_batch(seeds, config, names, trace_dir, mode)

    # Contiguous batches keep the combined result in seed order
    per_worker, remainder = divmod(games, workers)
    batches = []
    start = 0
    for index in range(workers):
        size = per_worker + (1 if index < remainder else 0)
        batches.append(seeds[start : start + size])
        start += size

    with multiprocessing.Pool(processes=workers) as pool:
        batch_results = pool.starmap(
            _simulate_batch,
            [(batch, config, names, trace_dir, mode) for batch in batches],
        )
    return [summary for batch in batch_results for summary in batch]
