"""
Command line interface for cardwar.

Subcommands:
    play            Watch a seeded game round by round
    simulate        Run many games and report statistics
    trace view      Summarize a recorded trace
    trace replay    Re-simulate and render a recorded trace
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from cardwar import ENGINE_VERSION
from cardwar.adapters.renderer import Verbosity
from cardwar.adapters.session import PlaySession
from cardwar.common.io_interface import ConsoleIOInterface, LoggingIOInterface
from cardwar.simulation.runner import simulate_games
from cardwar.simulation.statistics import (
    format_report,
    plot_round_histogram,
    summaries_to_frame,
    summarize,
)
from cardwar.trace.records import TraceVerificationError, create_trace_meta
from cardwar.trace.replay import TraceFilter, replay_trace, view_trace
from cardwar.trace.writer import TraceWriter
from cardwar.war.hashing import StateHashMode
from cardwar.war.rules import CollectMode, TieResolution

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbosity: int = 0) -> int:
    """
    Attach a stderr handler to the ``cardwar`` logger.

    The level is WARNING by default, INFO with ``-v`` and DEBUG with ``-vv``.
    ``CARDWAR_LOG_LEVEL`` overrides the default; ``CARDWAR_DISABLE_LOGGING``
    forces ERROR.

    Returns:
        The level that was set
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(os.environ.get("CARDWAR_LOG_LEVEL", "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if os.environ.get("CARDWAR_DISABLE_LOGGING", "").lower() in ("1", "true", "yes"):
        level = logging.ERROR

    package_logger = logging.getLogger("cardwar")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    return level


def positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"{value!r} must be a positive integer")
    return parsed


def non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be a non-negative integer")
    return parsed


def add_game_arguments(parser: argparse.ArgumentParser, default_seed: str) -> None:
    """Options shared by every command that starts games."""
    parser.add_argument("--seed", default=default_seed, help="Seed for the game RNG.")
    parser.add_argument(
        "--players",
        nargs="+",
        metavar="NAME",
        help="Player names (2 to 4). Defaults to 'Player 1' and 'Player 2'.",
    )
    parser.add_argument(
        "--state-hash",
        choices=[mode.value for mode in StateHashMode],
        default=StateHashMode.OFF.value,
        help="Append a state hash event to every round.",
    )

    rules = parser.add_argument_group("rules")
    rules.add_argument("--decks", type=positive_int, help="Number of decks (default 1).")
    rules.add_argument(
        "--face-down",
        type=non_negative_int,
        help="Face-down cards per player in a war (default 1).",
    )
    rules.add_argument(
        "--collect-mode",
        choices=[mode.value for mode in CollectMode],
        help="Where won cards go (default won-pile).",
    )
    rules.add_argument(
        "--no-shuffle-recycle",
        action="store_true",
        help="Do not shuffle the won pile when it becomes the draw pile.",
    )
    rounds = rules.add_mutually_exclusive_group()
    rounds.add_argument(
        "--max-rounds", type=positive_int, help="Round cap before a timeout (default 10000)."
    )
    rounds.add_argument(
        "--no-max-rounds", action="store_true", help="Play without a round cap."
    )
    rules.add_argument(
        "--tie-resolution",
        choices=[mode.value for mode in TieResolution],
        help="How ties are broken (default standard-war).",
    )


def rules_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Rule overrides for the options that were actually given."""
    overrides: Dict[str, Any] = {}
    if args.decks is not None:
        overrides["num_decks"] = args.decks
    if args.face_down is not None:
        overrides["war_face_down_count"] = args.face_down
    if args.collect_mode is not None:
        overrides["collect_mode"] = args.collect_mode
    if args.no_shuffle_recycle:
        overrides["shuffle_won_pile_on_recycle"] = False
    if args.no_max_rounds:
        overrides["max_rounds"] = None
    elif args.max_rounds is not None:
        overrides["max_rounds"] = args.max_rounds
    if args.tie_resolution is not None:
        overrides["tie_resolution"] = args.tie_resolution
    return overrides


def add_round_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--from", dest="from_round", type=positive_int, help="First round (inclusive)."
    )
    parser.add_argument(
        "--to", dest="to_round", type=positive_int, help="Last round (inclusive)."
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cardwar", description="Deterministic War card game engine."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {ENGINE_VERSION}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for INFO, -vv for DEBUG).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    play = commands.add_parser("play", help="Watch a game round by round.")
    add_game_arguments(play, default_seed="interactive")
    play.add_argument("--autoplay", action="store_true", help="Start with autoplay on.")
    play.add_argument(
        "--burst", type=positive_int, default=5, help="Rounds per autoplay step."
    )
    play.add_argument(
        "--verbosity",
        choices=[level.value for level in Verbosity],
        default=Verbosity.NORMAL.value,
        help="How much of each round to show.",
    )
    play.add_argument(
        "--delay-ms",
        type=non_negative_int,
        default=0,
        help="Delay between autoplayed rounds, in milliseconds.",
    )
    play.add_argument(
        "--pause-on-war", action="store_true", help="Stop autoplay when a war starts."
    )
    play.add_argument("--trace", metavar="PATH", help="Record the game to a trace file.")
    play.add_argument(
        "--snapshots", action="store_true", help="Include pile snapshots in the trace."
    )
    play.add_argument(
        "--top-cards",
        action="store_true",
        help="Include the top card of each pile in trace snapshots.",
    )
    play.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write output to a file and play unattended to the end.",
    )

    simulate = commands.add_parser("simulate", help="Simulate many games.")
    add_game_arguments(simulate, default_seed="sim")
    simulate.add_argument(
        "--games", type=positive_int, default=100, help="Number of games to simulate."
    )
    simulate.add_argument(
        "--workers",
        type=non_negative_int,
        default=1,
        help="Worker processes (0 uses every CPU).",
    )
    simulate.add_argument(
        "--bins", type=positive_int, default=10, help="Histogram bins for game length."
    )
    simulate.add_argument("--trace-dir", metavar="DIR", help="Write one trace per game.")
    simulate.add_argument("--csv", metavar="PATH", help="Export per-game results as CSV.")
    simulate.add_argument(
        "--plot", metavar="PATH", help="Save a histogram of game lengths."
    )
    simulate.add_argument(
        "--json", action="store_true", help="Print the report as JSON."
    )

    trace = commands.add_parser("trace", help="View and replay recorded games.")
    trace_commands = trace.add_subparsers(dest="trace_command", required=True)

    view = trace_commands.add_parser("view", help="Summarize a trace file.")
    view.add_argument("file", help="Trace file to read.")
    add_round_range_arguments(view)
    view.add_argument(
        "--only",
        choices=[f.value for f in TraceFilter],
        default=TraceFilter.ALL.value,
        help="Which events to list.",
    )

    replay = trace_commands.add_parser("replay", help="Replay a trace file.")
    replay.add_argument("file", help="Trace file to replay.")
    add_round_range_arguments(replay)
    replay.add_argument(
        "--verbosity",
        choices=[level.value for level in Verbosity],
        default=Verbosity.NORMAL.value,
        help="How much of each round to show.",
    )
    replay.add_argument(
        "--speed", type=float, default=1.0, help="Playback speed multiplier."
    )
    replay.add_argument(
        "--delay-ms",
        type=non_negative_int,
        help="Base delay between rounds, in milliseconds (default 50).",
    )
    replay.add_argument(
        "--pause-on-war", action="store_true", help="Wait for Enter after a war."
    )
    replay.add_argument(
        "--verify",
        action="store_true",
        help="Re-run the engine from the trace metadata and check every event.",
    )

    return parser


def cli_args_record(args: argparse.Namespace) -> Dict[str, Any]:
    """The parsed options, as stored in a trace's meta record."""
    return {key: value for key, value in vars(args).items() if value is not None}


def run_play(args: argparse.Namespace) -> int:
    writer: List[TraceWriter] = []

    def on_game_start(state):
        if args.trace:
            meta = create_trace_meta(
                args.seed,
                state,
                cli_args=cli_args_record(args),
                state_hash_mode=args.state_hash,
            )
            writer.append(
                TraceWriter(
                    args.trace,
                    meta,
                    include_snapshots=args.snapshots,
                    include_top_cards=args.top_cards,
                )
            )

    def on_round_complete(result):
        if writer:
            writer[0].record_round(result)

    io_interface = LoggingIOInterface(args.log_file) if args.log_file else ConsoleIOInterface()
    session = PlaySession(
        seed=args.seed,
        rules=rules_from_args(args),
        player_names=args.players,
        io_interface=io_interface,
        autoplay_burst=args.burst,
        start_autoplay=args.autoplay,
        verbosity=args.verbosity,
        delay_ms=args.delay_ms,
        pause_on_war=args.pause_on_war,
        state_hash_mode=args.state_hash,
        on_game_start=on_game_start,
        on_round_complete=on_round_complete,
    )
    asyncio.run(session.run())
    if args.trace:
        print(f"Trace written to {args.trace}")
    return 0


def run_simulate(args: argparse.Namespace) -> int:
    summaries = simulate_games(
        args.games,
        seed=args.seed,
        rules=rules_from_args(args),
        player_names=args.players,
        workers=args.workers,
        trace_dir=args.trace_dir,
        state_hash_mode=args.state_hash,
    )
    report = summarize(summaries, bins=args.bins)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        for line in format_report(report):
            print(line)

    if args.csv:
        summaries_to_frame(summaries).to_csv(args.csv, index=False)
        print(f"Per-game results written to {args.csv}")
    if args.plot:
        plot_round_histogram(report, args.plot)
        print(f"Histogram saved to {args.plot}")
    if args.trace_dir:
        print(f"Traces written to {args.trace_dir}")
    return 0


def run_trace(args: argparse.Namespace) -> int:
    if args.trace_command == "view":
        view_trace(args.file, args.from_round, args.to_round, only=args.only)
    else:
        replay_trace(
            args.file,
            from_round=args.from_round,
            to_round=args.to_round,
            verbosity=args.verbosity,
            speed=args.speed,
            delay_ms=args.delay_ms,
            pause_on_war=args.pause_on_war,
            verify=args.verify,
        )
    return 0


COMMANDS = {"play": run_play, "simulate": run_simulate, "trace": run_trace}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if (
        getattr(args, "from_round", None) is not None
        and getattr(args, "to_round", None) is not None
        and args.from_round > args.to_round
    ):
        parser.error("--from must be less than or equal to --to.")

    try:
        return COMMANDS[args.command](args)
    except (ValueError, FileNotFoundError, TraceVerificationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
