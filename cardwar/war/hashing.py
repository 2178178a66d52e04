"""
Deterministic fingerprints of War game states.

The snapshot is a canonical JSON document (compact separators, non-ASCII suit
symbols kept verbatim) hashed with SHA-256. ``counts`` mode only looks at pile
sizes; ``full`` mode lists every card in pile order.
"""

import hashlib
import json
from enum import Enum
from typing import Any, Dict, Union

from cardwar.war.state import GameState


class StateHashMode(str, Enum):
    """Whether and how round results are fingerprinted."""

    OFF = "off"
    COUNTS = "counts"
    FULL = "full"


def canonical_state(state: GameState, mode: StateHashMode) -> Dict[str, Any]:
    """Build the JSON-serializable snapshot that `hash_state` digests."""
    if mode == StateHashMode.COUNTS:
        players = [
            {"id": index, "draw": len(player.draw_pile), "won": len(player.won_pile)}
            for index, player in enumerate(state.players)
        ]
    else:
        players = [
            {
                "id": index,
                "draw": [card.code for card in player.draw_pile],
                "won": [card.code for card in player.won_pile],
            }
            for index, player in enumerate(state.players)
        ]
    return {"round": state.round, "players": players}


def hash_state(state: GameState, mode: Union[StateHashMode, str]) -> str:
    """
    Return the hex SHA-256 digest of ``state`` in ``mode``.

    Args:
        state: The state to fingerprint
        mode: ``counts`` or ``full``

    Returns:
        64-character lowercase hex digest

    Raises:
        ValueError: If mode is ``off`` or not a known mode
    """
    mode = StateHashMode(mode)
    if mode == StateHashMode.OFF:
        raise ValueError("hash_state needs mode 'counts' or 'full'")
    snapshot = json.dumps(
        canonical_state(state, mode), separators=(",", ":"), ensure_ascii=False
    )
    return hashlib.sha256(snapshot.encode("utf-8")).hexdigest()
