"""
Game driver for War.

`create_game` builds the RNG, the shuffled deck and the initial state from a
seed; `run_game` then plays rounds until the game is over. Both are
deterministic: the same seed, players and rules always produce the same state
and events.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from cardwar.common.deck import create_deck, shuffle_deck
from cardwar.common.rng import RNG, create_seeded_rng
from cardwar.war.events import RoundEvent
from cardwar.war.hashing import StateHashMode
from cardwar.war.rules import validate_war_rules
from cardwar.war.state import GameState, create_game_state
from cardwar.war.transitions import RoundResult, play_round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameRunResult:
    """
    Final outcome of a complete game.

    Attributes:
        seed: The seed the game was played with
        state: The final (inactive) state
        events: Every event of the game, in order; empty when not collected
    """

    seed: str
    state: GameState
    events: Tuple[RoundEvent, ...] = ()


def create_game(
    seed: str,
    player_names: Optional[Iterable[str]] = None,
    rules: Any = None,
) -> Tuple[GameState, RNG]:
    """
    Set up a new game.

    The deck is shuffled with the same RNG that is returned, so the caller's
    round-by-round play continues the very stream that produced the deal.

    Args:
        seed: Seed for the game's RNG
        player_names: Two to four player names
        rules: Rule overrides or a WarRules instance

    Returns:
        Tuple of (initial state, rng)
    """
    rng = create_seeded_rng(seed)
    config = validate_war_rules(rules)
    deck = shuffle_deck(create_deck(config.num_decks), rng)
    state = create_game_state(player_names=player_names, deck=deck, rules=config)
    return state, rng


def run_game(
    seed: str,
    player_names: Optional[Iterable[str]] = None,
    rules: Any = None,
    state_hash_mode: Union[StateHashMode, str] = StateHashMode.OFF,
    on_game_start: Optional[Callable[[GameState], None]] = None,
    on_round: Optional[Callable[[RoundResult], None]] = None,
    collect_events: bool = True,
) -> GameRunResult:
    """
    Play a whole game to completion.

    Args:
        seed: Seed for the game's RNG
        player_names: Two to four player names
        rules: Rule overrides or a WarRules instance
        state_hash_mode: Hash mode passed to every round
        on_game_start: Called once with the initial state
        on_round: Called with every RoundResult as it is produced
        collect_events: Accumulate all events in the result (disable for
            long games whose events are streamed through ``on_round``)

    Returns:
        GameRunResult with the final state and, optionally, every event
    """
    state, rng = create_game(seed, player_names=player_names, rules=rules)
    if on_game_start is not None:
        on_game_start(state)

    events: List[RoundEvent] = []
    while state.active:
        result = play_round(state, rng, state_hash_mode)
        if on_round is not None:
            on_round(result)
        if collect_events:
            events.extend(result.events)
        state = result.state

    logger.debug(
        "Game %r finished after %d round(s): winner=%s wars=%d flips=%d",
        seed,
        state.round - 1,
        state.winner,
        state.stats.wars,
        state.stats.flips,
    )
    return GameRunResult(seed=seed, state=state, events=tuple(events))
