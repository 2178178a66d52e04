"""
The War game engine.

This package provides immutable game state, the rule set, the round events and
the pure round transition, plus a driver that plays a seeded game to the end.
"""

from cardwar.war.rules import (
    CollectMode,
    TieResolution,
    WarRules,
    validate_war_rules,
)
from cardwar.war.state import (
    GameState,
    GameStats,
    PlayerState,
    TableCard,
    TableState,
    create_game_state,
)
from cardwar.war.events import (
    CardsPlaced,
    GameEnded,
    GameEndReason,
    PileRecycled,
    RoundEvent,
    RoundStarted,
    StateHashed,
    TrickWon,
    WarStarted,
)
from cardwar.war.hashing import StateHashMode, hash_state
from cardwar.war.transitions import RoundResult, StateTransitionEngine, play_round
from cardwar.war.game import GameRunResult, create_game, run_game

__all__ = [
    "CollectMode",
    "TieResolution",
    "WarRules",
    "validate_war_rules",
    "GameState",
    "GameStats",
    "PlayerState",
    "TableCard",
    "TableState",
    "create_game_state",
    "CardsPlaced",
    "GameEnded",
    "GameEndReason",
    "PileRecycled",
    "RoundEvent",
    "RoundStarted",
    "StateHashed",
    "TrickWon",
    "WarStarted",
    "StateHashMode",
    "hash_state",
    "RoundResult",
    "StateTransitionEngine",
    "play_round",
    "GameRunResult",
    "create_game",
    "run_game",
]
