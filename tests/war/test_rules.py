import pytest

from cardwar.war.rules import (
    DEFAULT_WAR_RULES,
    CollectMode,
    TieResolution,
    WarRules,
    validate_war_rules,
)


def test_defaults():
    rules = validate_war_rules()
    assert rules == DEFAULT_WAR_RULES
    assert rules.num_decks == 1
    assert rules.war_face_down_count == 1
    assert rules.collect_mode == CollectMode.WON_PILE
    assert rules.shuffle_won_pile_on_recycle is True
    assert rules.max_rounds == 10000
    assert rules.tie_resolution == TieResolution.STANDARD_WAR
    assert rules.ace_high is True


def test_overrides_merge_over_defaults():
    rules = validate_war_rules({"num_decks": 2, "collect_mode": "bottom-of-draw"})
    assert rules.num_decks == 2
    assert rules.collect_mode == CollectMode.BOTTOM_OF_DRAW
    assert rules.war_face_down_count == 1


def test_wire_names_are_accepted():
    rules = validate_war_rules({"warFaceDownCount": 3, "tieResolution": "sudden-death"})
    assert rules.war_face_down_count == 3
    assert rules.tie_resolution == TieResolution.SUDDEN_DEATH


def test_max_rounds_may_be_none():
    assert validate_war_rules({"max_rounds": None}).max_rounds is None


def test_zero_face_down_is_allowed():
    assert validate_war_rules({"war_face_down_count": 0}).war_face_down_count == 0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"num_decks": 0}, "numDecks must be an integer >= 1"),
        ({"num_decks": 1.5}, "numDecks must be an integer >= 1"),
        ({"num_decks": True}, "numDecks must be an integer >= 1"),
        ({"war_face_down_count": -1}, "warFaceDownCount must be a non-negative integer"),
        ({"max_rounds": 0}, "maxRounds must be an integer >= 1 when provided"),
        ({"collect_mode": "discard"}, 'collectMode must be "bottom-of-draw" or "won-pile"'),
        ({"tie_resolution": "coin-flip"}, 'tieResolution must be "standard-war" or "sudden-death"'),
        ({"shuffle_won_pile_on_recycle": "yes"}, "shuffleWonPileOnRecycle must be a boolean"),
        ({"unknown": 1}, "Unknown rule: unknown"),
    ],
)
def test_invalid_rules(overrides, message):
    with pytest.raises(ValueError) as excinfo:
        validate_war_rules(overrides)
    assert str(excinfo.value) == message


def test_rules_are_immutable():
    rules = validate_war_rules()
    with pytest.raises(AttributeError):
        rules.num_decks = 2


def test_to_dict_uses_wire_names():
    assert validate_war_rules({"max_rounds": 50}).to_dict() == {
        "numDecks": 1,
        "warFaceDownCount": 1,
        "collectMode": "won-pile",
        "shuffleWonPileOnRecycle": True,
        "maxRounds": 50,
        "tieResolution": "standard-war",
        "aceHigh": True,
    }


def test_from_dict_round_trip():
    rules = validate_war_rules({"collect_mode": "bottom-of-draw", "max_rounds": None})
    assert WarRules.from_dict(rules.to_dict()) == rules


def test_validating_rules_instance_returns_equal_rules():
    rules = validate_war_rules({"num_decks": 2})
    assert validate_war_rules(rules) == rules
