from dataclasses import replace

import pytest

from cardwar.war.hashing import StateHashMode, canonical_state, hash_state
from cardwar.war.state import create_game_state

COUNTS_GOLDEN = "60d7f5ddddf8056e8651e22c56eb1dd4f1f14bd3b23024ce912b15e045255410"
FULL_GOLDEN = "5f0e934240cf8a4d15ce7a632ef80168ac97a470981da58cf8b3b3b9b1102e5d"


@pytest.fixture
def four_card_state(cards):
    return create_game_state(player_names=["A", "B"], deck=cards("2♠ 3♦ 4♥ 5♣"))


def test_golden_hashes(four_card_state):
    assert hash_state(four_card_state, "counts") == COUNTS_GOLDEN
    assert hash_state(four_card_state, StateHashMode.FULL) == FULL_GOLDEN


def test_canonical_snapshots(four_card_state):
    assert canonical_state(four_card_state, StateHashMode.COUNTS) == {
        "round": 1,
        "players": [{"id": 0, "draw": 2, "won": 0}, {"id": 1, "draw": 2, "won": 0}],
    }
    assert canonical_state(four_card_state, StateHashMode.FULL) == {
        "round": 1,
        "players": [
            {"id": 0, "draw": ["2♠", "4♥"], "won": []},
            {"id": 1, "draw": ["3♦", "5♣"], "won": []},
        ],
    }


def test_hash_is_stable(four_card_state):
    assert hash_state(four_card_state, "counts") == hash_state(four_card_state, "counts")


def test_counts_ignore_card_identity(make_state):
    first = make_state("2♠ 3♠", "4♠")
    second = make_state("K♦ Q♦", "A♣")
    assert hash_state(first, "counts") == hash_state(second, "counts")
    assert hash_state(first, "full") != hash_state(second, "full")


def test_full_mode_is_order_sensitive(make_state):
    first = make_state("2♠ 3♠", "4♠")
    second = make_state("3♠ 2♠", "4♠")
    assert hash_state(first, "counts") == hash_state(second, "counts")
    assert hash_state(first, "full") != hash_state(second, "full")


def test_round_is_part_of_the_hash(four_card_state):
    later = replace(four_card_state, round=2)
    assert hash_state(later, "counts") != COUNTS_GOLDEN


def test_off_mode_is_rejected(four_card_state):
    with pytest.raises(ValueError):
        hash_state(four_card_state, "off")
    with pytest.raises(ValueError):
        hash_state(four_card_state, "bogus")
