import pickle

import pytest

from cardwar.common.card import Card, Rank, Suit


def test_card_initialization():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    assert card.suit == Suit.HEARTS
    assert card.rank == Rank.EIGHT


def test_card_repr():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    assert repr(card) == "Card(Suit.HEARTS, Rank.EIGHT)"


def test_card_str():
    assert str(Card(Suit.HEARTS, Rank.EIGHT)) == "8♥"
    assert str(Card(Suit.SPADES, Rank.TEN)) == "10♠"
    assert str(Card(Suit.CLUBS, Rank.ACE)) == "A♣"
    assert str(Card(Suit.DIAMONDS, Rank.QUEEN)) == "Q♦"


def test_card_code_uses_numeric_rank():
    assert Card(Suit.SPADES, Rank.ACE).code == "14♠"
    assert Card(Suit.HEARTS, Rank.TWO).code == "2♥"


def test_invalid_suit():
    with pytest.raises(TypeError):
        Card("Z", Rank.EIGHT)


def test_invalid_rank():
    with pytest.raises(TypeError):
        Card(Suit.HEARTS, 8)


def test_card_is_immutable():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    with pytest.raises(AttributeError):
        card.rank = Rank.NINE


def test_card_equality_and_hash():
    assert Card(Suit.HEARTS, Rank.EIGHT) == Card(Suit.HEARTS, Rank.EIGHT)
    assert Card(Suit.HEARTS, Rank.EIGHT) != Card(Suit.SPADES, Rank.EIGHT)
    assert len({Card(Suit.HEARTS, Rank.EIGHT), Card(Suit.HEARTS, Rank.EIGHT)}) == 1


def test_card_of_wire_form():
    assert Card.of(10, "♠") == Card(Suit.SPADES, Rank.TEN)
    with pytest.raises(ValueError):
        Card.of(1, "♠")
    with pytest.raises(ValueError):
        Card.of(10, "X")


def test_card_dict_round_trip():
    card = Card(Suit.DIAMONDS, Rank.KING)
    assert card.to_dict() == {"rank": 13, "suit": "♦"}
    assert Card.from_dict(card.to_dict()) == card


def test_card_pickles():
    card = Card(Suit.CLUBS, Rank.FIVE)
    assert pickle.loads(pickle.dumps(card)) == card


def test_rank_values_are_ace_high():
    assert [rank.rank_value for rank in Rank] == list(range(2, 15))
    assert Rank.ACE.rank_str == "A"
    assert Rank.TEN.rank_str == "10"
