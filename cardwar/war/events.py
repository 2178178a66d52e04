"""
Round events for the War engine.

Every round produces an ordered, append-only list of events. Each event type is
its own frozen dataclass deriving from `RoundEvent`; the `type` class attribute
is the discriminant written to trace files.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from cardwar.war.state import TableCard


class GameEndReason(str, Enum):
    """Why a game stopped."""

    WIN = "win"
    TIMEOUT = "timeout"
    STALEMATE = "stalemate"


@dataclass(frozen=True)
class RoundEvent(ABC):
    """Base class for everything a round can report."""

    type: ClassVar[str] = ""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert the event to its camelCase wire form."""

    def to_json(self) -> str:
        """Convert the event to a JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundEvent":
        """Create an event of the right variant from its wire form."""
        try:
            event_cls = _EVENT_TYPES[data["type"]]
        except KeyError:
            raise ValueError(f"Unknown round event: {data.get('type')!r}") from None
        return event_cls._from_wire(data)

    @classmethod
    @abstractmethod
    def _from_wire(cls, data: Dict[str, Any]) -> "RoundEvent":
        """Build this variant from its wire form."""


@dataclass(frozen=True)
class RoundStarted(RoundEvent):
    type: ClassVar[str] = "RoundStarted"

    round: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "round": self.round}

    @classmethod
    def _from_wire(cls, data):
        return cls(round=data["round"])


@dataclass(frozen=True)
class CardsPlaced(RoundEvent):
    """All cards put on the table during the round, and who was dealt in."""

    type: ClassVar[str] = "CardsPlaced"

    cards: Tuple[TableCard, ...]
    participants: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "cards": [entry.to_dict() for entry in self.cards],
            "participants": list(self.participants),
        }

    @classmethod
    def _from_wire(cls, data):
        return cls(
            cards=tuple(TableCard.from_dict(entry) for entry in data["cards"]),
            participants=tuple(data["participants"]),
        )


@dataclass(frozen=True)
class WarStarted(RoundEvent):
    type: ClassVar[str] = "WarStarted"

    war_level: int
    participants: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "warLevel": self.war_level,
            "participants": list(self.participants),
        }

    @classmethod
    def _from_wire(cls, data):
        return cls(war_level=data["warLevel"], participants=tuple(data["participants"]))


@dataclass(frozen=True)
class PileRecycled(RoundEvent):
    """A player's won pile became their draw pile."""

    type: ClassVar[str] = "PileRecycled"

    player_id: int
    cards: int
    shuffled: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "playerId": self.player_id,
            "cards": self.cards,
            "shuffled": self.shuffled,
        }

    @classmethod
    def _from_wire(cls, data):
        return cls(
            player_id=data["playerId"], cards=data["cards"], shuffled=data["shuffled"]
        )


@dataclass(frozen=True)
class TrickWon(RoundEvent):
    type: ClassVar[str] = "TrickWon"

    winner: int
    collected: Tuple[TableCard, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "winner": self.winner,
            "collected": [entry.to_dict() for entry in self.collected],
        }

    @classmethod
    def _from_wire(cls, data):
        return cls(
            winner=data["winner"],
            collected=tuple(TableCard.from_dict(entry) for entry in data["collected"]),
        )


@dataclass(frozen=True)
class StateHashed(RoundEvent):
    """Fingerprint of the state at the end of a round."""

    type: ClassVar[str] = "StateHashed"

    round: int
    mode: str
    hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "round": self.round,
            "mode": self.mode,
            "hash": self.hash,
        }

    @classmethod
    def _from_wire(cls, data):
        return cls(round=data["round"], mode=data["mode"], hash=data["hash"])


@dataclass(frozen=True)
class GameEnded(RoundEvent):
    type: ClassVar[str] = "GameEnded"

    reason: GameEndReason
    winner: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "reason": GameEndReason(self.reason).value}
        if self.winner is not None:
            data["winner"] = self.winner
        return data

    @classmethod
    def _from_wire(cls, data):
        return cls(reason=GameEndReason(data["reason"]), winner=data.get("winner"))


_EVENT_TYPES: Dict[str, Type[RoundEvent]] = {
    event_cls.type: event_cls
    for event_cls in (
        RoundStarted,
        CardsPlaced,
        WarStarted,
        PileRecycled,
        TrickWon,
        StateHashed,
        GameEnded,
    )
}
