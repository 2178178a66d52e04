"""
This module defines the `Suit`, `Rank`, and `Card` classes, which are used to represent playing cards.

- `Suit`: An enum representing the four suits of a standard deck of playing
cards. Declaration order is the order decks are built in: Spades, Hearts,
Diamonds, Clubs.

- `Rank`: An enum representing the thirteen ranks of a standard deck. Values are
the War comparison values, 2 through 14, with the Ace high.

- `Card`: An immutable playing card. Two cards are equal when they have the same
rank and suit; suit never takes part in ordering.

This module is part of the `cardwar` package.
"""

from enum import Enum, unique
from typing import Any, Dict


@unique
class Suit(Enum):
    """
    Enum for suits in a card deck.
    """

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


@unique
class Rank(Enum):
    """
    Enum for ranks in a card deck, valued for War (Ace is highest).
    """

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def rank_value(self) -> int:
        """The value of the rank, used for comparing cards."""
        return self.value

    @property
    def rank_str(self) -> str:
        """A short string representation of the rank."""
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE):
            return self.name[0]
        return str(self.value)

    def __str__(self) -> str:
        return self.rank_str


class Card:
    """
    Class representing a playing card.

    >>> card = Card(Suit.HEARTS, Rank.TWO)
    >>> print(card)
    2♥
    >>> Card(Suit.SPADES, Rank.ACE).code
    '14♠'
    """

    __slots__ = ("suit", "rank")

    def __init__(self, suit: Suit, rank: Rank):
        """
        Initialize a Card instance.

        :param suit: Suit of the card (one of the Suit enums)
        :param rank: Rank of the card (one of the Rank enums)
        """
        if not isinstance(suit, Suit):
            raise TypeError(f"Invalid suit: {suit}")
        if not isinstance(rank, Rank):
            raise TypeError(f"Invalid rank: {rank}")
        object.__setattr__(self, "suit", suit)
        object.__setattr__(self, "rank", rank)

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    def __reduce__(self):
        return (Card, (self.suit, self.rank))

    @classmethod
    def of(cls, rank: int, suit: str) -> "Card":
        """
        Build a card from its wire form: a numeric rank and a suit symbol.

        >>> Card.of(10, "♠")
        Card(Suit.SPADES, Rank.TEN)
        """
        try:
            return cls(Suit(suit), Rank(rank))
        except ValueError as exc:
            raise ValueError(f"Invalid card: rank={rank!r} suit={suit!r}") from exc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Create a card from its serialized dictionary."""
        return cls.of(data["rank"], data["suit"])

    def to_dict(self) -> Dict[str, Any]:
        """Convert the card to a dictionary for serialization."""
        return {"rank": self.rank.value, "suit": self.suit.value}

    @property
    def code(self) -> str:
        """Numeric rank followed by the suit symbol, as used in state hashes."""
        return f"{self.rank.value}{self.suit.value}"

    def __eq__(self, other):
        """
        Checks if this card is equal to another card.

        :param other: The other card to compare to.
        :return: True if the cards have the same rank and suit, False otherwise.
        """
        if isinstance(other, Card):
            return self.rank == other.rank and self.suit == other.suit
        return NotImplemented

    def __hash__(self):
        return hash((self.suit, self.rank))

    def __repr__(self) -> str:
        """
        Provide a machine-readable representation of the card.

        :return: A string representation of the card.
        """
        return f"Card(Suit.{self.suit.name}, Rank.{self.rank.name})"

    def __str__(self) -> str:
        """
        Provide a human-readable representation of the card.

        :return: A string representation of the card.
        """
        return f"{self.rank.rank_str}{self.suit.value}"
