"""
Rule configuration for the War card game.

`WarRules` is an immutable value. It is only ever built through
`validate_war_rules`, which merges caller overrides over the defaults and fails
fast with a field-specific message on the first invalid value.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class CollectMode(str, Enum):
    """Where a trick's winner puts the collected cards."""

    BOTTOM_OF_DRAW = "bottom-of-draw"
    WON_PILE = "won-pile"


class TieResolution(str, Enum):
    """How tied face-up cards are broken."""

    STANDARD_WAR = "standard-war"
    SUDDEN_DEATH = "sudden-death"


@dataclass(frozen=True)
class WarRules:
    """
    Immutable rule set for a game of War.

    Attributes:
        num_decks: Number of 52-card decks shuffled together
        war_face_down_count: Face-down cards each participant antes per war
        collect_mode: Where won tricks are placed
        shuffle_won_pile_on_recycle: Shuffle the won pile when it becomes the draw pile
        max_rounds: Round cap after which the game times out (None for no cap)
        tie_resolution: Standard war or sudden death
        ace_high: Reserved; ranks always compare numerically with the Ace at 14
    """

    num_decks: int = 1
    war_face_down_count: int = 1
    collect_mode: CollectMode = CollectMode.WON_PILE
    shuffle_won_pile_on_recycle: bool = True
    max_rounds: Optional[int] = 10000
    tie_resolution: TieResolution = TieResolution.STANDARD_WAR
    ace_high: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the rules to the camelCase mapping used in trace files.

        Returns:
            Dictionary representation of the rules
        """
        data = {}
        for name, value in asdict(self).items():
            if isinstance(value, Enum):
                value = value.value
            data[_WIRE_NAMES[name]] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WarRules":
        """
        Build validated rules from a camelCase (or snake_case) mapping.

        Args:
            data: Rule values keyed by wire or attribute name

        Returns:
            Validated WarRules
        """
        return validate_war_rules(data)


_WIRE_NAMES = {
    "num_decks": "numDecks",
    "war_face_down_count": "warFaceDownCount",
    "collect_mode": "collectMode",
    "shuffle_won_pile_on_recycle": "shuffleWonPileOnRecycle",
    "max_rounds": "maxRounds",
    "tie_resolution": "tieResolution",
    "ace_high": "aceHigh",
}
_ATTRIBUTE_NAMES = {wire: name for name, wire in _WIRE_NAMES.items()}

DEFAULT_WAR_RULES = WarRules()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _normalize_keys(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(WarRules)}
    normalized = {}
    for key, value in overrides.items():
        name = _ATTRIBUTE_NAMES.get(key, key)
        if name not in known:
            raise ValueError(f"Unknown rule: {key}")
        normalized[name] = value
    return normalized


def validate_war_rules(
    overrides: Union[Mapping[str, Any], WarRules, None] = None
) -> WarRules:
    """
    Merge ``overrides`` over the default rules and validate the result.

    Keys may be attribute names (``num_decks``) or trace wire names
    (``numDecks``). Passing an existing WarRules re-validates it.

    Args:
        overrides: Partial rule values, a WarRules instance, or None

    Returns:
        A validated, immutable WarRules

    Raises:
        ValueError: If a rule is unknown, out of range, or of the wrong kind
    """
    if overrides is None:
        merged = asdict(DEFAULT_WAR_RULES)
    elif isinstance(overrides, WarRules):
        merged = asdict(overrides)
    else:
        merged = {**asdict(DEFAULT_WAR_RULES), **_normalize_keys(overrides)}

    if not _is_int(merged["num_decks"]) or merged["num_decks"] < 1:
        raise ValueError("numDecks must be an integer >= 1")

    if (
        not _is_int(merged["war_face_down_count"])
        or merged["war_face_down_count"] < 0
    ):
        raise ValueError("warFaceDownCount must be a non-negative integer")

    if merged["max_rounds"] is not None:
        if not _is_int(merged["max_rounds"]) or merged["max_rounds"] < 1:
            raise ValueError("maxRounds must be an integer >= 1 when provided")

    try:
        merged["collect_mode"] = CollectMode(merged["collect_mode"])
    except ValueError:
        raise ValueError('collectMode must be "bottom-of-draw" or "won-pile"') from None

    try:
        merged["tie_resolution"] = TieResolution(merged["tie_resolution"])
    except ValueError:
        raise ValueError(
            'tieResolution must be "standard-war" or "sudden-death"'
        ) from None

    if not isinstance(merged["shuffle_won_pile_on_recycle"], bool):
        raise ValueError("shuffleWonPileOnRecycle must be a boolean")

    if not isinstance(merged["ace_high"], bool):
        raise ValueError("aceHigh must be a boolean")

    return WarRules(**merged)
