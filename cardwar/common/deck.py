"""
This module builds and shuffles decks of cards for War.

A deck is a plain list of :class:`Card` values. Construction order is fixed
(deck copy, then suit, then ascending rank) and shuffling only ever draws from
the RNG it is handed, so the same seed always yields the same deal.

>>> deck = create_deck()
>>> len(deck)
52
>>> deck[0]
Card(Suit.SPADES, Rank.TWO)
"""

from typing import List, Sequence

from cardwar.common.card import Card, Rank, Suit
from cardwar.common.rng import RNG, create_seeded_rng

# Precompute a single standard deck in construction order
_default_deck = [Card(suit, rank) for suit in Suit for rank in Rank]


def create_deck(num_decks: int = 1) -> List[Card]:
    """
    Construct ``num_decks`` standard 52-card decks, unshuffled.

    :param num_decks: Number of deck copies to include (at least 1).
    :return: A new list of ``52 * num_decks`` cards.
    :raises ValueError: If ``num_decks`` is less than 1.

    >>> len(create_deck(2))
    104
    """
    if num_decks < 1:
        raise ValueError("numDecks must be at least 1")
    return _default_deck * num_decks


def shuffle_deck(cards: Sequence[Card], rng: RNG) -> List[Card]:
    """
    Return a shuffled copy of ``cards`` without modifying the input.

    Fisher-Yates from the last index down to 1, swapping position ``i`` with
    ``floor(rng() * (i + 1))``.

    :param cards: The cards to shuffle.
    :param rng: A callable returning floats in ``[0, 1)``.
    :return: A new list holding the same cards in shuffled order.
    """
    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def create_shuffled_deck(seed: str, num_decks: int = 1) -> List[Card]:
    """
    Build ``num_decks`` decks and shuffle them with a fresh RNG for ``seed``.

    >>> create_shuffled_deck("abc") == create_shuffled_deck("abc")
    True
    """
    rng = create_seeded_rng(seed)
    return shuffle_deck(create_deck(num_decks), rng)
