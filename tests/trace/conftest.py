"""
Fixtures for trace tests.
"""

import pytest

from cardwar.trace.records import create_trace_meta
from cardwar.trace.writer import TraceWriter
from cardwar.war.game import run_game


@pytest.fixture
def write_trace(tmp_path):
    """Play a seeded game and record it; returns the trace path."""

    def _write(seed="replay-seed", name="game.jsonl", max_rounds=60, state_hash_mode="off"):
        path = tmp_path / name
        writers = []
        run_game(
            seed,
            rules={"max_rounds": max_rounds},
            state_hash_mode=state_hash_mode,
            on_game_start=lambda state: writers.append(
                TraceWriter(path, create_trace_meta(seed, state, state_hash_mode=state_hash_mode))
            ),
            on_round=lambda result: writers[0].record_round(result),
            collect_events=False,
        )
        return path

    return _write
