"""
Viewing, replaying and verifying recorded traces.

A trace only stores the seed, players and rules of a game plus its events, so
replay re-simulates the game from the metadata. Verification compares the
re-simulated events with the recorded ones record by record.
"""

import json
import logging
import sys
import time
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from cardwar.adapters.playback import (
    DEFAULT_PLAYBACK_DELAY_MS,
    compute_playback_delay_ms,
    has_war_event,
)
from cardwar.adapters.renderer import (
    Verbosity,
    describe_event,
    player_name,
    render_round_events,
)
from cardwar.trace.reader import LoadedTrace, read_trace_file
from cardwar.trace.records import TraceEventRecord, TraceMeta, TraceVerificationError
from cardwar.war.events import GameEnded, GameEndReason, PileRecycled, RoundEvent, RoundStarted, TrickWon, WarStarted
from cardwar.war.game import create_game
from cardwar.war.hashing import StateHashMode
from cardwar.war.transitions import RoundResult, play_round

logger = logging.getLogger(__name__)

Output = Callable[[str], None]


class TraceFilter(str, Enum):
    """Which events `view_trace` lists."""

    ALL = "all"
    WARS = "wars"
    WINS = "wins"
    RECYCLES = "recycles"


@dataclass(frozen=True)
class TraceSummary:
    war_count: int
    recycle_count: int
    round_count: int
    ending: Optional[GameEnded] = None


def group_events_by_round(events: Sequence[TraceEventRecord]) -> Dict[int, List[RoundEvent]]:
    grouped: Dict[int, List[RoundEvent]] = OrderedDict()
    for record in events:
        grouped.setdefault(record.round, []).append(record.event)
    return grouped


def rounds_from_events(events: Sequence[TraceEventRecord]) -> List[int]:
    return sorted({record.round for record in events})


def summarize_trace(trace: LoadedTrace) -> TraceSummary:
    """Count wars and recycles, and find how the recorded game ended."""
    events = [record.event for record in trace.events]
    ending = None
    for event in reversed(events):
        if isinstance(event, GameEnded):
            ending = event
            break
    rounds = rounds_from_events(trace.events)
    return TraceSummary(
        war_count=sum(isinstance(event, WarStarted) for event in events),
        recycle_count=sum(isinstance(event, PileRecycled) for event in events),
        round_count=rounds[-1] if rounds else 0,
        ending=ending,
    )


def should_render_event(event: RoundEvent, only: TraceFilter) -> bool:
    if isinstance(event, GameEnded):
        return True
    if only == TraceFilter.ALL:
        return not isinstance(event, RoundStarted)
    if only == TraceFilter.WARS:
        return isinstance(event, WarStarted)
    if only == TraceFilter.WINS:
        return isinstance(event, TrickWon)
    if only == TraceFilter.RECYCLES:
        return isinstance(event, PileRecycled)
    return False


def generate_round_results(
    meta: TraceMeta, state_hash_mode: Union[StateHashMode, str, None] = None
) -> List[RoundResult]:
    """
    Re-simulate the game described by ``meta``, keeping every round's result.

    Args:
        meta: Trace metadata (seed, players, rules)
        state_hash_mode: Hash mode to play with; defaults to the mode the
            trace was recorded with

    Returns:
        One RoundResult per round, in order
    """
    if state_hash_mode is None:
        state_hash_mode = meta.state_hash_mode or StateHashMode.OFF
    state, rng = create_game(meta.seed, player_names=meta.players, rules=meta.rules)

    results = []
    while state.active:
        result = play_round(state, rng, state_hash_mode)
        results.append(result)
        state = result.state
    return results


def flatten_round_results(results: Sequence[RoundResult]) -> List[TraceEventRecord]:
    """Turn round results into event records, exactly as `TraceWriter` writes them."""
    return [
        TraceEventRecord(round=result.round_number, event=event)
        for result in results
        for event in result.events
    ]


def _record_json(record: TraceEventRecord) -> str:
    return json.dumps(record.to_dict(), ensure_ascii=False)


def verify_trace_events(
    trace: LoadedTrace,
    generated_rounds: Optional[Sequence[RoundResult]] = None,
    state_hash_mode: Union[StateHashMode, str, None] = None,
) -> int:
    """
    Check that re-simulating a trace reproduces its events exactly.

    Args:
        trace: The loaded trace
        generated_rounds: Pre-computed round results (re-simulated when omitted)
        state_hash_mode: Hash mode for re-simulation; defaults to the trace's

    Returns:
        Number of event records verified

    Raises:
        TraceVerificationError: On a length mismatch or the first differing record
    """
    if generated_rounds is None:
        generated_rounds = generate_round_results(trace.meta, state_hash_mode)
    generated = flatten_round_results(generated_rounds)

    if len(generated) != len(trace.events):
        raise TraceVerificationError(
            f"Trace verification failed: expected {len(trace.events)} events, "
            f"got {len(generated)}."
        )

    for index, (expected, actual) in enumerate(zip(trace.events, generated)):
        if expected.to_dict() != actual.to_dict():
            raise TraceVerificationError(
                f"Trace verification failed at event #{index + 1}: expected "
                f"{_record_json(expected)}, received {_record_json(actual)}.",
                index=index,
                expected=expected.to_dict(),
                actual=actual.to_dict(),
            )

    logger.info("Verified %d trace event(s) for seed %r", len(generated), trace.meta.seed)
    return len(generated)


def _ending_label(players: Sequence[str], ending: GameEnded) -> str:
    if ending.reason == GameEndReason.WIN and ending.winner is not None:
        return f"{player_name(players, ending.winner)} won"
    if ending.reason == GameEndReason.TIMEOUT:
        return "Timeout"
    return "Stalemate"


def view_trace(
    path: Union[str, Path],
    from_round: Optional[int] = None,
    to_round: Optional[int] = None,
    only: Union[TraceFilter, str] = TraceFilter.ALL,
    output: Output = print,
) -> LoadedTrace:
    """
    Print a summary of a trace file followed by its events, round by round.

    Args:
        path: Trace file
        from_round: First round to list (defaults to the first recorded)
        to_round: Last round to list (defaults to the last recorded)
        only: ``all``, ``wars``, ``wins`` or ``recycles``; game endings are
            always listed
        output: Line sink

    Returns:
        The loaded trace
    """
    only = TraceFilter(only)
    trace = read_trace_file(path)
    players = list(trace.meta.players)
    summary = summarize_trace(trace)
    rounds = rounds_from_events(trace.events)
    start = from_round if from_round is not None else (rounds[0] if rounds else 1)
    end = to_round if to_round is not None else (rounds[-1] if rounds else start)

    output(f"Trace: {path}")
    output(f"Seed: {trace.meta.seed}")
    output("Players: " + " vs ".join(players))
    output(
        f"Rounds recorded: {summary.round_count} | Wars: {summary.war_count} | "
        f"Recycles: {summary.recycle_count}"
    )
    if summary.ending is not None:
        output(f"Ending: {_ending_label(players, summary.ending)}")
    output("")
    label = f" (filter: {only.value})" if only != TraceFilter.ALL else ""
    output(f"Showing rounds {start} to {end}{label}")

    grouped = group_events_by_round(trace.events)
    for round_number in rounds:
        if round_number < start or round_number > end:
            continue
        output("")
        output(f"Round {round_number}")
        for event in grouped[round_number]:
            if should_render_event(event, only):
                for line in describe_event(event, players):
                    output(line)
    return trace


def wait_for_enter(message: str) -> None:
    """Block until Enter is pressed; returns immediately without a terminal."""
    if not sys.stdin.isatty():
        return
    try:
        input(message)
    except EOFError:
        pass


def replay_trace(
    path: Union[str, Path],
    from_round: Optional[int] = None,
    to_round: Optional[int] = None,
    verbosity: Union[Verbosity, str] = Verbosity.NORMAL,
    speed: Optional[float] = None,
    delay_ms: Optional[float] = None,
    pause_on_war: bool = False,
    verify: bool = False,
    output: Output = print,
    wait_for_continue: Callable[[str], None] = wait_for_enter,
    sleep: Callable[[float], None] = time.sleep,
) -> LoadedTrace:
    """
    Re-simulate a trace and render its rounds as if they were being played.

    Args:
        path: Trace file
        from_round: First round to render
        to_round: Last round to render
        verbosity: Renderer verbosity
        speed: Playback speed multiplier
        delay_ms: Base delay between rounds (50ms when omitted)
        pause_on_war: Wait for ``wait_for_continue`` after rounds with a war
        verify: Verify the trace before rendering
        output: Line sink
        wait_for_continue: Called with a prompt when pausing on a war
        sleep: Called with the delay in seconds between rounds

    Returns:
        The loaded trace

    Raises:
        TraceVerificationError: If ``verify`` is set and the trace diverges
    """
    trace = read_trace_file(path)
    state_hash_mode = trace.meta.state_hash_mode or StateHashMode.OFF
    round_results = generate_round_results(trace.meta, state_hash_mode)
    if verify:
        verify_trace_events(trace, round_results, state_hash_mode)
        output("Trace verification succeeded.")

    rounds = rounds_from_events(trace.events)
    start = from_round if from_round is not None else (rounds[0] if rounds else 1)
    end = to_round if to_round is not None else (rounds[-1] if rounds else start)
    grouped = group_events_by_round(trace.events)
    result_by_round = {result.round_number: result for result in round_results}
    if round_results:
        fallback_state = round_results[-1].state
    else:
        fallback_state, _ = create_game(
            trace.meta.seed, player_names=trace.meta.players, rules=trace.meta.rules
        )
    playback_delay_ms = compute_playback_delay_ms(speed, delay_ms, DEFAULT_PLAYBACK_DELAY_MS)

    output(f"Replaying trace for seed {trace.meta.seed}")
    output("Players: " + " vs ".join(trace.meta.players))
    details = f"Rounds {start}-{end}"
    if pause_on_war:
        details += " | pause on war"
    if speed and speed != 1:
        details += f" | speed x{speed}"
    if playback_delay_ms > 0:
        details += f" | {playback_delay_ms}ms delay"
    output(details)

    for round_number in rounds:
        if round_number < start or round_number > end:
            continue
        round_events = grouped[round_number]
        if round_number in result_by_round:
            state = result_by_round[round_number].state
        else:
            output(
                f"Warning: no RoundResult found for round {round_number}; "
                "using fallback final state for rendering."
            )
            state = fallback_state
        render_round_events(round_events, state, output, verbosity)
        if pause_on_war and has_war_event(round_events):
            wait_for_continue("War detected. Press Enter to continue...")
        if playback_delay_ms > 0:
            sleep(playback_delay_ms / 1000)

    output("Replay complete.")
    return trace
