"""
Pytest configuration for the cardwar test suite.

This module provides fixtures for building cards and hand-crafted game states,
so scenarios can be written with short card codes such as ``"10♠ 5♦"``.
"""

from dataclasses import replace

import pytest

from cardwar.common.card import Card
from cardwar.common.rng import create_seeded_rng
from cardwar.war.state import PlayerState, create_game_state

FACE_RANKS = {"J": 11, "Q": 12, "K": 13, "A": 14}


def parse_card(code: str) -> Card:
    rank, suit = code[:-1], code[-1]
    return Card.of(FACE_RANKS.get(rank) or int(rank), suit)


@pytest.fixture
def cards():
    """Parse a space separated list of card codes."""

    def _cards(text):
        return [parse_card(code) for code in text.split()]

    return _cards


@pytest.fixture
def make_state(cards):
    """
    Build a state with explicit draw piles (and optional won piles).

    Draw piles are given as card-code strings, one per player.
    """

    def _make(*draw_piles, names=None, rules=None, won_piles=None):
        names = names or [f"P{index + 1}" for index in range(len(draw_piles))]
        won_piles = won_piles or [""] * len(draw_piles)
        state = create_game_state(player_names=names, rules=rules)
        players = [
            PlayerState(name=name, draw_pile=cards(draw), won_pile=cards(won))
            for name, draw, won in zip(names, draw_piles, won_piles)
        ]
        return replace(state, players=players)

    return _make


@pytest.fixture
def rng():
    return create_seeded_rng("test-rng")
