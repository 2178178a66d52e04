"""
Record types of the line-delimited JSON trace format.

A trace file holds exactly one ``meta`` record followed by ``event`` records
and, optionally, ``snapshot`` records. Every record serializes to a JSON object
with camelCase keys and a ``type`` discriminant.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from cardwar import ENGINE_VERSION
from cardwar.common.card import Card
from cardwar.war.events import RoundEvent
from cardwar.war.hashing import StateHashMode
from cardwar.war.rules import WarRules
from cardwar.war.state import GameState

TRACE_VERSION = "1.0"


class TraceFormatError(ValueError):
    """Raised when a trace file cannot be parsed."""


class TraceVerificationError(Exception):
    """
    Raised when a re-simulated game diverges from a recorded trace.

    Attributes:
        index: Zero-based position of the first differing record (None when
            only the lengths differ)
        expected: The recorded record (wire form), if any
        actual: The re-simulated record (wire form), if any
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        expected: Optional[Dict[str, Any]] = None,
        actual: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.index = index
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class TraceMeta:
    """
    The header record of a trace.

    Attributes:
        seed: Seed of the recorded game
        rules: Rules the game was played with
        players: Player names, indexed by player id
        cli_args: Free-form options of the command that recorded the trace
        timestamp: ISO-8601 UTC time the trace was started
        version: Trace format version
        engine_version: Version of the engine that recorded the trace
        max_rounds: Round cap (mirrors ``rules.max_rounds``)
        state_hash_mode: Hash mode used for the recorded StateHashed events
    """

    seed: str
    rules: WarRules
    players: Tuple[str, ...]
    cli_args: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""
    version: str = TRACE_VERSION
    engine_version: str = ENGINE_VERSION
    max_rounds: Optional[int] = None
    state_hash_mode: Optional[str] = None

    type = "meta"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "version": self.version,
            "engineVersion": self.engine_version,
            "timestamp": self.timestamp,
            "seed": self.seed,
            "rules": self.rules.to_dict(),
            "cliArgs": dict(self.cli_args),
            "players": list(self.players),
        }
        if self.max_rounds is not None:
            data["maxRounds"] = self.max_rounds
        if self.state_hash_mode is not None:
            data["stateHashMode"] = self.state_hash_mode
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceMeta":
        return cls(
            seed=data["seed"],
            rules=WarRules.from_dict(data.get("rules") or {}),
            players=tuple(data["players"]),
            cli_args=dict(data.get("cliArgs") or {}),
            timestamp=data.get("timestamp", ""),
            version=data.get("version", TRACE_VERSION),
            engine_version=data.get("engineVersion", ""),
            max_rounds=data.get("maxRounds"),
            state_hash_mode=data.get("stateHashMode"),
        )


@dataclass(frozen=True)
class TraceEventRecord:
    """One round event, tagged with the round it belongs to."""

    round: int
    event: RoundEvent

    type = "event"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "round": self.round, "event": self.event.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceEventRecord":
        return cls(round=data["round"], event=RoundEvent.from_dict(data["event"]))


@dataclass(frozen=True)
class PileCount:
    player_id: int
    draw: int
    won: int

    def to_dict(self) -> Dict[str, Any]:
        return {"playerId": self.player_id, "draw": self.draw, "won": self.won}


@dataclass(frozen=True)
class TopCard:
    player_id: int
    pile: str
    card: Card

    def to_dict(self) -> Dict[str, Any]:
        return {"playerId": self.player_id, "pile": self.pile, "card": self.card.to_dict()}


@dataclass(frozen=True)
class TraceSnapshotRecord:
    """
    Pile sizes (and optionally the top card of each pile) after a round.

    Snapshots are informational; verification only compares event records.
    """

    round: int
    pile_counts: Tuple[PileCount, ...]
    top_cards: Optional[Tuple[TopCard, ...]] = None

    type = "snapshot"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "round": self.round,
            "pileCounts": [count.to_dict() for count in self.pile_counts],
        }
        if self.top_cards:
            data["topCards"] = [top.to_dict() for top in self.top_cards]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceSnapshotRecord":
        top_cards = data.get("topCards")
        return cls(
            round=data["round"],
            pile_counts=tuple(
                PileCount(player_id=c["playerId"], draw=c["draw"], won=c["won"])
                for c in data["pileCounts"]
            ),
            top_cards=(
                tuple(
                    TopCard(
                        player_id=t["playerId"],
                        pile=t["pile"],
                        card=Card.from_dict(t["card"]),
                    )
                    for t in top_cards
                )
                if top_cards
                else None
            ),
        )

    @classmethod
    def from_state(
        cls, round_number: int, state: GameState, include_top_cards: bool = False
    ) -> "TraceSnapshotRecord":
        """Build the snapshot of ``state`` for ``round_number``."""
        pile_counts = tuple(
            PileCount(player_id=index, draw=len(p.draw_pile), won=len(p.won_pile))
            for index, p in enumerate(state.players)
        )
        top_cards = None
        if include_top_cards:
            tops = []
            for index, player in enumerate(state.players):
                if player.draw_pile:
                    tops.append(TopCard(index, "draw", player.draw_pile[0]))
                if player.won_pile:
                    tops.append(TopCard(index, "won", player.won_pile[0]))
            top_cards = tuple(tops) or None
        return cls(round=round_number, pile_counts=pile_counts, top_cards=top_cards)


TraceRecord = Union[TraceMeta, TraceEventRecord, TraceSnapshotRecord]


def create_trace_meta(
    seed: str,
    state: GameState,
    cli_args: Optional[Dict[str, Any]] = None,
    timestamp: Optional[str] = None,
    state_hash_mode: Union[StateHashMode, str, None] = None,
) -> TraceMeta:
    """
    Build the meta record for a game about to be traced.

    Args:
        seed: Seed of the game
        state: Initial state (supplies the rules and player names)
        cli_args: Options of the recording command, stored verbatim
        timestamp: ISO-8601 timestamp; defaults to the current UTC time
        state_hash_mode: Hash mode the game's rounds are played with

    Returns:
        TraceMeta for the game
    """
    if timestamp is None:
        timestamp = (
            datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )
    if state_hash_mode is not None:
        state_hash_mode = StateHashMode(state_hash_mode).value
    return TraceMeta(
        seed=seed,
        rules=state.config,
        players=tuple(player.name for player in state.players),
        cli_args=dict(cli_args or {}),
        timestamp=timestamp,
        max_rounds=state.config.max_rounds,
        state_hash_mode=state_hash_mode,
    )


def parse_record(data: Dict[str, Any]) -> Optional[TraceRecord]:
    """
    Convert a decoded JSON line into a trace record.

    Returns None for record types this version does not know about.
    """
    record_type = data.get("type")
    if record_type == TraceMeta.type:
        return TraceMeta.from_dict(data)
    if record_type == TraceEventRecord.type:
        return TraceEventRecord.from_dict(data)
    if record_type == TraceSnapshotRecord.type:
        return TraceSnapshotRecord.from_dict(data)
    return None
