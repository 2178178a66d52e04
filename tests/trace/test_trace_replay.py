"""
Tests for trace verification, viewing and replay.
"""

import json

import pytest

from cardwar.trace.reader import read_trace_file
from cardwar.trace.records import TraceVerificationError
from cardwar.trace.replay import (
    TraceFilter,
    flatten_round_results,
    generate_round_results,
    group_events_by_round,
    replay_trace,
    summarize_trace,
    verify_trace_events,
    view_trace,
)
from cardwar.war.events import GameEnded, StateHashed, WarStarted


def rewrite_line(path, index, update):
    lines = path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[index])
    update(record)
    lines[index] = json.dumps(record, ensure_ascii=False)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def war_rounds(trace):
    return [
        number
        for number, events in group_events_by_round(trace.events).items()
        if any(isinstance(event, WarStarted) for event in events)
    ]


class TestVerification:
    def test_recorded_trace_verifies(self, write_trace):
        trace = read_trace_file(write_trace())
        assert verify_trace_events(trace) == len(trace.events)

    def test_hash_mode_is_taken_from_meta(self, write_trace):
        trace = read_trace_file(write_trace(state_hash_mode="counts"))
        assert trace.meta.state_hash_mode == "counts"
        assert any(isinstance(record.event, StateHashed) for record in trace.events)
        assert verify_trace_events(trace) == len(trace.events)

    def test_overriding_hash_mode_fails(self, write_trace):
        trace = read_trace_file(write_trace(state_hash_mode="counts"))
        with pytest.raises(TraceVerificationError, match="expected"):
            verify_trace_events(trace, state_hash_mode="off")

    def test_tampered_event_is_reported(self, write_trace):
        path = write_trace()
        rewrite_line(path, 1, lambda record: record["event"].update(round=999))

        with pytest.raises(TraceVerificationError) as excinfo:
            verify_trace_events(read_trace_file(path))

        error = excinfo.value
        assert str(error).startswith("Trace verification failed at event #1: expected ")
        assert error.index == 0
        assert error.expected["event"]["round"] == 999
        assert error.actual["event"]["round"] == 1

    def test_missing_event_is_a_length_mismatch(self, write_trace):
        path = write_trace()
        lines = path.read_text(encoding="utf-8").splitlines()
        path.write_text("\n".join(lines[:-1]) + "\n", encoding="utf-8")
        trace = read_trace_file(path)

        with pytest.raises(TraceVerificationError) as excinfo:
            verify_trace_events(trace)
        assert str(excinfo.value) == (
            f"Trace verification failed: expected {len(trace.events)} events, "
            f"got {len(trace.events) + 1}."
        )
        assert excinfo.value.index is None

    def test_generated_rounds_match_recorded_events(self, write_trace):
        trace = read_trace_file(write_trace())
        generated = flatten_round_results(generate_round_results(trace.meta))
        assert [r.to_dict() for r in generated] == [r.to_dict() for r in trace.events]


class TestSummary:
    def test_summarize_trace(self, write_trace):
        trace = read_trace_file(write_trace(max_rounds=40))
        summary = summarize_trace(trace)

        assert summary.round_count == max(record.round for record in trace.events)
        assert summary.war_count == sum(
            isinstance(record.event, WarStarted) for record in trace.events
        )
        assert isinstance(summary.ending, GameEnded)


class TestViewTrace:
    def test_header(self, write_trace):
        path = write_trace(max_rounds=30)
        lines = []
        trace = view_trace(path, output=lines.append)
        summary = summarize_trace(trace)

        assert lines[0] == f"Trace: {path}"
        assert lines[1] == "Seed: replay-seed"
        assert lines[2] == "Players: Player 1 vs Player 2"
        assert lines[3] == (
            f"Rounds recorded: {summary.round_count} | Wars: {summary.war_count} | "
            f"Recycles: {summary.recycle_count}"
        )
        assert lines[4].startswith("Ending: ")
        assert lines[6] == f"Showing rounds 1 to {summary.round_count}"

    def test_round_range(self, write_trace):
        lines = []
        view_trace(write_trace(), from_round=2, to_round=3, output=lines.append)

        assert "Round 2" in lines
        assert "Round 3" in lines
        assert "Round 1" not in lines
        assert "Round 4" not in lines
        assert "Showing rounds 2 to 3" in lines

    def test_wins_filter(self, write_trace):
        lines = []
        view_trace(write_trace(), only=TraceFilter.WINS, output=lines.append)

        assert lines[6].endswith("(filter: wins)")
        assert any("wins the trick" in line for line in lines)
        assert not any(" played: " in line for line in lines)
        assert not any(line.startswith("WAR!") for line in lines)

    def test_wars_filter(self, write_trace):
        path = write_trace()
        lines = []
        trace = view_trace(path, only="wars", output=lines.append)

        war_lines = [line for line in lines if line.startswith("WAR! (level")]
        assert len(war_lines) == summarize_trace(trace).war_count
        assert not any("wins the trick" in line for line in lines)

    def test_game_end_always_listed(self, write_trace):
        lines = []
        view_trace(write_trace(max_rounds=5), only="recycles", output=lines.append)
        assert lines[-1] == "Game ended due to max rounds timeout."


class TestReplayTrace:
    def test_replay_renders_every_round(self, write_trace, mocker):
        path = write_trace(max_rounds=20)
        lines = []
        sleep = mocker.Mock()

        trace = replay_trace(path, output=lines.append, sleep=sleep)

        assert lines[0] == "Replaying trace for seed replay-seed"
        assert lines[1] == "Players: Player 1 vs Player 2"
        assert lines[2] == "Rounds 1-20 | 50ms delay"
        assert lines[-1] == "Replay complete."
        assert all(f"Round {n}" in lines for n in range(1, 21))
        assert sleep.call_count == 20
        sleep.assert_called_with(0.05)
        assert trace.meta.seed == "replay-seed"

    def test_speed_scales_delay(self, write_trace, mocker):
        lines = []
        sleep = mocker.Mock()
        replay_trace(write_trace(max_rounds=3), speed=2, output=lines.append, sleep=sleep)

        assert lines[2] == "Rounds 1-3 | speed x2 | 25ms delay"
        sleep.assert_called_with(0.025)

    def test_zero_delay_does_not_sleep(self, write_trace, mocker):
        sleep = mocker.Mock()
        lines = []
        replay_trace(write_trace(max_rounds=3), delay_ms=0, output=lines.append, sleep=sleep)

        assert lines[2] == "Rounds 1-3"
        sleep.assert_not_called()

    def test_verify_before_replay(self, write_trace):
        lines = []
        replay_trace(write_trace(), verify=True, delay_ms=0, output=lines.append)
        assert lines[0] == "Trace verification succeeded."

    def test_verify_failure_stops_replay(self, write_trace):
        path = write_trace()
        rewrite_line(path, 1, lambda record: record["event"].update(round=42))
        lines = []

        with pytest.raises(TraceVerificationError):
            replay_trace(path, verify=True, delay_ms=0, output=lines.append)
        assert lines == []

    def test_pause_on_war(self, write_trace):
        path = write_trace(max_rounds=100)
        prompts = []
        lines = []

        trace = replay_trace(
            path,
            delay_ms=0,
            pause_on_war=True,
            output=lines.append,
            wait_for_continue=prompts.append,
        )

        assert "pause on war" in lines[2]
        assert len(prompts) == len(war_rounds(trace))
        assert set(prompts) <= {"War detected. Press Enter to continue..."}

    def test_round_range(self, write_trace):
        lines = []
        replay_trace(write_trace(), from_round=5, to_round=6, delay_ms=0, output=lines.append)

        assert lines[2] == "Rounds 5-6"
        assert [line for line in lines if line.startswith("Round ")] == ["Round 5", "Round 6"]

    def test_low_verbosity(self, write_trace):
        lines = []
        replay_trace(
            write_trace(max_rounds=10), verbosity="low", delay_ms=0, output=lines.append
        )
        assert not any(line.startswith("Flip: ") for line in lines)
        assert any(line.startswith("Piles: ") for line in lines)
