"""
Interactive terminal session for watching a game of War.

The session drives the pure round engine one round at a time and renders each
round through the renderer. Input is read through an `IOInterface`; blocking
reads run in a worker thread via `AsyncIOInterfaceWrapper` so the event loop
stays free while waiting for the user.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

from cardwar.adapters.playback import has_war_event
from cardwar.adapters.renderer import (
    Verbosity,
    render_help,
    render_intro,
    render_round_events,
    render_stats,
)
from cardwar.common.io_interface import (
    AsyncIOInterfaceWrapper,
    ConsoleIOInterface,
    IOInterface,
)
from cardwar.war.game import create_game
from cardwar.war.hashing import StateHashMode
from cardwar.war.state import GameState
from cardwar.war.transitions import RoundResult, play_round

logger = logging.getLogger(__name__)


class PromptAction(Enum):
    """Actions available at the session prompt."""

    NEXT = "next"
    AUTOPLAY = "autoplay"
    STATS = "stats"
    QUIT = "quit"
    HELP = "help"


_ACTION_KEYS = {
    "": PromptAction.NEXT,
    "a": PromptAction.AUTOPLAY,
    "s": PromptAction.STATS,
    "q": PromptAction.QUIT,
    "?": PromptAction.HELP,
}


def parse_action(value: str) -> PromptAction:
    """Map a line of user input to an action; anything unknown asks for help."""
    return _ACTION_KEYS.get((value or "").strip().lower(), PromptAction.HELP)


class PlaySession:
    """
    A single interactive game.

    Args:
        seed: Seed of the game
        rules: Rule overrides or a WarRules instance
        player_names: Two to four player names
        io_interface: Where output goes and input comes from
        autoplay_burst: Rounds played per autoplay step
        start_autoplay: Begin with autoplay on
        verbosity: Renderer verbosity
        delay_ms: Pause between autoplayed rounds
        pause_on_war: Switch autoplay off after a round with a war
        state_hash_mode: Hash mode passed to every round
        on_game_start: Called once with the initial state
        on_round_complete: Called with every RoundResult
    """

    def __init__(
        self,
        seed: str = "interactive",
        rules: Any = None,
        player_names: Optional[Iterable[str]] = None,
        io_interface: Optional[IOInterface] = None,
        autoplay_burst: int = 5,
        start_autoplay: bool = False,
        verbosity: Union[Verbosity, str] = Verbosity.NORMAL,
        delay_ms: int = 0,
        pause_on_war: bool = False,
        state_hash_mode: Union[StateHashMode, str] = StateHashMode.OFF,
        on_game_start: Optional[Callable[[GameState], None]] = None,
        on_round_complete: Optional[Callable[[RoundResult], None]] = None,
    ):
        if autoplay_burst < 1:
            raise ValueError("autoplay_burst must be at least 1")
        self.seed = seed
        self.io_interface = io_interface or ConsoleIOInterface()
        self.autoplay_burst = autoplay_burst
        self.autoplay = start_autoplay
        self.verbosity = Verbosity(verbosity)
        self.delay_ms = delay_ms
        self.pause_on_war = pause_on_war
        self.state_hash_mode = StateHashMode(state_hash_mode)
        self.on_game_start = on_game_start
        self.on_round_complete = on_round_complete

        self.state, self.rng = create_game(seed, player_names=player_names, rules=rules)
        self.rounds_played = 0

    def output(self, message: str) -> None:
        self.io_interface.output(message)

    def prompt_text(self) -> str:
        return (
            "Press Enter for next round | a: toggle autoplay "
            f"({'on' if self.autoplay else 'off'}) | s: stats | q: quit | ?: help "
        )

    def play_next_round(self) -> RoundResult:
        """Play and render one round."""
        result = play_round(self.state, self.rng, self.state_hash_mode)
        render_round_events(result.events, result.state, self.output, self.verbosity)
        if self.on_round_complete is not None:
            self.on_round_complete(result)
        self.state = result.state
        self.rounds_played += 1
        return result

    async def autoplay_burst_rounds(self) -> None:
        """Play up to ``autoplay_burst`` rounds, stopping early on a war if asked."""
        for _ in range(self.autoplay_burst):
            if not self.state.active:
                return
            result = self.play_next_round()
            if self.pause_on_war and has_war_event(result.events):
                self.autoplay = False
                self.output("Autoplay paused due to war. Press Enter to continue.")
                return
            if self.delay_ms > 0:
                await asyncio.sleep(self.delay_ms / 1000)

    async def run(self) -> GameState:
        """
        Run the session until the game ends or the user quits.

        Returns:
            The state the session stopped at
        """
        if self.on_game_start is not None:
            self.on_game_start(self.state)

        render_intro(self.seed, self.state, self.output, self.autoplay)
        if self.autoplay:
            self.output("Autoplay enabled.")

        async with AsyncIOInterfaceWrapper(self.io_interface) as reader:
            while self.state.active:
                if self.autoplay:
                    await self.autoplay_burst_rounds()
                    if not self.state.active:
                        break

                action = parse_action(await reader.input(self.prompt_text()))
                if action == PromptAction.QUIT:
                    self.output("Quitting game. Thanks for playing!")
                    logger.info(
                        "Session %r quit after %d round(s)", self.seed, self.rounds_played
                    )
                    return self.state
                if action == PromptAction.HELP:
                    render_help(self.autoplay, self.output)
                elif action == PromptAction.STATS:
                    render_stats(self.state, self.output)
                elif action == PromptAction.AUTOPLAY:
                    self.autoplay = not self.autoplay
                    self.output(f"Autoplay {'enabled' if self.autoplay else 'disabled'}.")
                else:
                    self.play_next_round()

        render_stats(self.state, self.output)
        logger.info("Session %r finished after %d round(s)", self.seed, self.rounds_played)
        return self.state


async def play_interactive_game(**options) -> GameState:
    """Create a `PlaySession` with ``options`` and run it."""
    return await PlaySession(**options).run()
