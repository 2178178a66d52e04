"""
Tests for the command line interface.
"""

import json
import logging

import pytest

from cardwar import ENGINE_VERSION
from cardwar.cli import build_parser, configure_logging, main, rules_from_args
from cardwar.trace.reader import read_trace_file


@pytest.fixture(autouse=True)
def restore_package_logger():
    package_logger = logging.getLogger("cardwar")
    level, handlers = package_logger.level, list(package_logger.handlers)
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers


def test_rules_from_args():
    args = build_parser().parse_args(
        [
            "simulate",
            "--decks",
            "2",
            "--face-down",
            "0",
            "--collect-mode",
            "bottom-of-draw",
            "--no-shuffle-recycle",
            "--no-max-rounds",
            "--tie-resolution",
            "sudden-death",
        ]
    )
    assert rules_from_args(args) == {
        "num_decks": 2,
        "war_face_down_count": 0,
        "collect_mode": "bottom-of-draw",
        "shuffle_won_pile_on_recycle": False,
        "max_rounds": None,
        "tie_resolution": "sudden-death",
    }


def test_rules_default_to_no_overrides():
    assert rules_from_args(build_parser().parse_args(["simulate"])) == {}


def test_max_rounds_options_are_exclusive(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["simulate", "--max-rounds", "5", "--no-max-rounds"])


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert ENGINE_VERSION in capsys.readouterr().out


def test_simulate_report(capsys):
    assert main(["simulate", "--games", "3", "--seed", "cli", "--max-rounds", "50"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Games simulated: 3"
    assert "Ended by timeout: 3" in out


def test_simulate_json(capsys):
    assert main(["simulate", "--games", "2", "--max-rounds", "20", "--json"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["games"] == 2
    assert report["rounds"]["max"] == 20


def test_simulate_exports(tmp_path, capsys):
    csv_path = tmp_path / "games.csv"
    plot_path = tmp_path / "rounds.png"
    trace_dir = tmp_path / "traces"

    code = main(
        [
            "simulate",
            "--games",
            "2",
            "--seed",
            "export",
            "--max-rounds",
            "30",
            "--csv",
            str(csv_path),
            "--plot",
            str(plot_path),
            "--trace-dir",
            str(trace_dir),
        ]
    )

    assert code == 0
    assert csv_path.read_text().splitlines()[0] == "seed,rounds,wars,flips,winner,reason"
    assert plot_path.exists()
    assert sorted(p.name for p in trace_dir.iterdir()) == ["export-1.jsonl", "export-2.jsonl"]
    out = capsys.readouterr().out
    assert f"Per-game results written to {csv_path}" in out
    assert f"Histogram saved to {plot_path}" in out


def test_play_to_log_file_with_trace(tmp_path, capsys):
    log_path = tmp_path / "game.log"
    trace_path = tmp_path / "game.jsonl"

    code = main(
        [
            "play",
            "--seed",
            "cli-play",
            "--players",
            "Alice",
            "Bob",
            "--max-rounds",
            "8",
            "--log-file",
            str(log_path),
            "--trace",
            str(trace_path),
            "--snapshots",
            "--state-hash",
            "counts",
        ]
    )

    assert code == 0
    assert f"Trace written to {trace_path}" in capsys.readouterr().out
    log = log_path.read_text(encoding="utf-8")
    assert "Starting War (seed: cli-play)" in log
    assert "Players: Alice vs Bob" in log

    trace = read_trace_file(trace_path)
    assert trace.meta.seed == "cli-play"
    assert trace.meta.players == ("Alice", "Bob")
    assert trace.meta.state_hash_mode == "counts"
    assert trace.meta.cli_args["command"] == "play"
    assert trace.snapshots

    assert main(["trace", "replay", str(trace_path), "--verify", "--delay-ms", "0"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Trace verification succeeded."
    assert out[-1] == "Replay complete."

    assert main(["trace", "view", str(trace_path), "--from", "2", "--to", "3"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[1] == "Seed: cli-play"
    assert "Showing rounds 2 to 3" in out


def test_missing_trace_file(tmp_path, capsys):
    path = tmp_path / "nope.jsonl"
    assert main(["trace", "view", str(path)]) == 1
    assert capsys.readouterr().err.strip() == f"Error: Trace file not found at {path}"


def test_invalid_player_count(capsys):
    assert main(["simulate", "--games", "1", "--players", "Solo"]) == 1
    assert "between 2 and 4 players" in capsys.readouterr().err


def test_round_range_must_be_ordered(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["trace", "view", str(tmp_path / "t.jsonl"), "--from", "5", "--to", "2"])
    assert excinfo.value.code == 2
    assert "--from must be less than or equal to --to." in capsys.readouterr().err


class TestConfigureLogging:
    def test_verbosity_flags(self, monkeypatch):
        monkeypatch.delenv("CARDWAR_LOG_LEVEL", raising=False)
        monkeypatch.delenv("CARDWAR_DISABLE_LOGGING", raising=False)
        assert configure_logging(0) == logging.WARNING
        assert configure_logging(1) == logging.INFO
        assert configure_logging(2) == logging.DEBUG
        assert logging.getLogger("cardwar").level == logging.DEBUG

    def test_environment_level(self, monkeypatch):
        monkeypatch.setenv("CARDWAR_LOG_LEVEL", "info")
        monkeypatch.delenv("CARDWAR_DISABLE_LOGGING", raising=False)
        assert configure_logging(0) == logging.INFO

    def test_unknown_environment_level(self, monkeypatch):
        monkeypatch.setenv("CARDWAR_LOG_LEVEL", "chatty")
        monkeypatch.delenv("CARDWAR_DISABLE_LOGGING", raising=False)
        assert configure_logging(0) == logging.WARNING

    def test_disable_logging(self, monkeypatch):
        monkeypatch.setenv("CARDWAR_DISABLE_LOGGING", "1")
        assert configure_logging(2) == logging.ERROR

    def test_single_handler(self, monkeypatch):
        monkeypatch.delenv("CARDWAR_DISABLE_LOGGING", raising=False)
        configure_logging(0)
        configure_logging(0)
        assert len(logging.getLogger("cardwar").handlers) == 1
