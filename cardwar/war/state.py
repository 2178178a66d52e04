"""
Immutable state models for the War card game.

This module provides dataclasses for representing the state of a War card game
in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from cardwar.common.card import Card
from cardwar.war.rules import WarRules, validate_war_rules

MIN_PLAYERS = 2
MAX_PLAYERS = 4
DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of a player's piles in War.

    Attributes:
        name: Display name of the player
        draw_pile: Cards to play, front first
        won_pile: Cards won and not yet recycled
    """

    name: str = "Player"
    draw_pile: Tuple[Card, ...] = ()
    won_pile: Tuple[Card, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "draw_pile", tuple(self.draw_pile))
        object.__setattr__(self, "won_pile", tuple(self.won_pile))

    @property
    def total_cards(self) -> int:
        """Number of cards the player still owns."""
        return len(self.draw_pile) + len(self.won_pile)

    @property
    def has_cards(self) -> bool:
        return self.total_cards > 0


@dataclass(frozen=True)
class TableCard:
    """
    A card placed on the table while a round is being resolved.

    Attributes:
        player_id: Index of the player who placed the card
        card: The card itself
        face_down: Whether the card was placed face down (war ante)
    """

    player_id: int
    card: Card
    face_down: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "card": self.card.to_dict(),
            "faceDown": self.face_down,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableCard":
        return cls(
            player_id=data["playerId"],
            card=Card.from_dict(data["card"]),
            face_down=data["faceDown"],
        )


@dataclass(frozen=True)
class TableState:
    """
    Cards currently on the table.

    Attributes:
        battle_cards: Every card placed this round, in placement order
        in_war: Whether the round escalated into a war
    """

    battle_cards: Tuple[TableCard, ...] = ()
    in_war: bool = False

    def __post_init__(self):
        object.__setattr__(self, "battle_cards", tuple(self.battle_cards))


@dataclass(frozen=True)
class GameStats:
    """Counters accumulated over the whole game."""

    wars: int = 0
    flips: int = 0


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of the War card game state.

    Attributes:
        players: Player piles, indexed by player id
        table: Cards on the table (only non-empty after a stalemate)
        round: Number of the next round to play, starting at 1
        active: False once the game has ended; a finished game never changes
        winner: Index of the winning player, if the game was won
        stats: Cumulative war and flip counters
        config: The validated rules in force
    """

    players: Tuple[PlayerState, ...] = ()
    table: TableState = field(default_factory=TableState)
    round: int = 1
    active: bool = True
    winner: Optional[int] = None
    stats: GameStats = field(default_factory=GameStats)
    config: WarRules = field(default_factory=WarRules)

    def __post_init__(self):
        object.__setattr__(self, "players", tuple(self.players))

    def players_with_cards(self) -> List[int]:
        """Indices of players that still own at least one card."""
        return [index for index, player in enumerate(self.players) if player.has_cards]

    def total_cards(self) -> int:
        """All cards in play: every pile plus anything left on the table."""
        return sum(player.total_cards for player in self.players) + len(
            self.table.battle_cards
        )

    def with_player(self, player_id: int, **changes) -> "GameState":
        """
        Return a copy of this state with one player's fields replaced.

        Args:
            player_id: Index of the player to change
            **changes: PlayerState fields to replace

        Returns:
            New game state
        """
        players = list(self.players)
        players[player_id] = replace(players[player_id], **changes)
        return replace(self, players=players)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for serialization.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "round": self.round,
            "active": self.active,
            "winner": self.winner,
            "stats": {"wars": self.stats.wars, "flips": self.stats.flips},
            "config": self.config.to_dict(),
            "table": {
                "battleCards": [entry.to_dict() for entry in self.table.battle_cards],
                "inWar": self.table.in_war,
            },
            "players": [
                {
                    "name": player.name,
                    "drawPile": [card.to_dict() for card in player.draw_pile],
                    "wonPile": [card.to_dict() for card in player.won_pile],
                }
                for player in self.players
            ],
        }


def deal_round_robin(deck: Sequence[Card], player_count: int) -> List[List[Card]]:
    """Deal ``deck[i]`` to player ``i % player_count``."""
    piles: List[List[Card]] = [[] for _ in range(player_count)]
    for index, card in enumerate(deck):
        piles[index % player_count].append(card)
    return piles


def create_game_state(
    player_names: Optional[Iterable[str]] = None,
    deck: Optional[Sequence[Card]] = None,
    rules: Any = None,
) -> GameState:
    """
    Create the initial state of a game.

    Args:
        player_names: Two to four display names (defaults to "Player 1", "Player 2")
        deck: Cards to deal round-robin; players start empty when omitted
        rules: Rule overrides (mapping) or a WarRules instance

    Returns:
        A fresh, active game state at round 1

    Raises:
        ValueError: If the player count or the rules are invalid
    """
    names = list(player_names) if player_names is not None else list(DEFAULT_PLAYER_NAMES)
    if not MIN_PLAYERS <= len(names) <= MAX_PLAYERS:
        raise ValueError(
            f"War needs between {MIN_PLAYERS} and {MAX_PLAYERS} players, got {len(names)}"
        )
    config = validate_war_rules(rules)
    piles = deal_round_robin(deck or [], len(names))

    return GameState(
        players=[PlayerState(name=name, draw_pile=pile) for name, pile in zip(names, piles)],
        table=TableState(),
        round=1,
        active=True,
        winner=None,
        stats=GameStats(),
        config=config,
    )
