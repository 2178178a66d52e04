"""
Text rendering of War rounds for the terminal.

All functions write plain lines through an ``output`` callable (``print`` by
default, or an IOInterface's ``output`` method), so they can be pointed at the
console, a log file or a test recorder alike.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from cardwar.common.card import Card
from cardwar.war.events import (
    CardsPlaced,
    GameEnded,
    GameEndReason,
    PileRecycled,
    RoundEvent,
    RoundStarted,
    StateHashed,
    TrickWon,
    WarStarted,
)
from cardwar.war.state import GameState, TableCard

Output = Callable[[str], None]

FACE_DOWN_CARD = "🂠"


class Verbosity(str, Enum):
    """How much of each round the renderer shows."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


def format_card(card: Card) -> str:
    """Short label of a card, e.g. ``Q♥`` or ``10♠``."""
    return f"{card.rank.rank_str}{card.suit.value}"


def format_table_card(entry: TableCard) -> str:
    """Label of a table card; face-down cards are hidden."""
    return FACE_DOWN_CARD if entry.face_down else format_card(entry.card)


def player_name(names: Sequence[str], player_id: int) -> str:
    if 0 <= player_id < len(names):
        return names[player_id]
    return f"Player {player_id + 1}"


def _names(state: GameState) -> List[str]:
    return [player.name for player in state.players]


class _Stage:
    """Cards placed during one step of a round: the initial flip or one war."""

    def __init__(self, participants: Sequence[int]):
        self.participants = list(participants)
        self.down: Dict[int, List[TableCard]] = {}
        self.up: Dict[int, TableCard] = {}

    def top_rank(self):
        if not self.up:
            return None
        return max((entry.card.rank for entry in self.up.values()), key=lambda r: r.rank_value)


def _split_stages(placed: CardsPlaced, wars: Sequence[WarStarted]) -> List[_Stage]:
    """
    Recover the flip and each war from the flat list of placed cards.

    Every active player flips exactly one card first; within each war the
    participants draw in order, so each participant's cards are contiguous.
    """
    cards = list(placed.cards)
    cursor = 0

    flip = _Stage(placed.participants)
    for player_id in flip.participants:
        if cursor < len(cards) and cards[cursor].player_id == player_id:
            flip.up[player_id] = cards[cursor]
            cursor += 1
    stages = [flip]

    for war in wars:
        stage = _Stage(war.participants)
        for player_id in stage.participants:
            while cursor < len(cards) and cards[cursor].player_id == player_id:
                entry = cards[cursor]
                cursor += 1
                if entry.face_down:
                    stage.down.setdefault(player_id, []).append(entry)
                else:
                    stage.up[player_id] = entry
        stages.append(stage)
    return stages


def _flip_line(names: Sequence[str], stages: List[_Stage], outcome: Optional[str]) -> str:
    flip = stages[0]
    entries = [
        f"{player_name(names, pid)}: {format_table_card(flip.up[pid])}"
        for pid in flip.participants
        if pid in flip.up
    ]
    separator = " vs " if len(flip.participants) == 2 else " | "
    line = "Flip: " + separator.join(entries)
    if len(stages) > 1:
        line += f" (tie on {flip.top_rank().rank_str})"
    elif outcome:
        line += f" => {outcome}"
    return line


def _war_lines(
    names: Sequence[str], stage: _Stage, is_last: bool, outcome: Optional[str]
) -> List[str]:
    lines = []
    if stage.down:
        downs = [
            f"{player_name(names, pid)}: " + " ".join(FACE_DOWN_CARD for _ in stage.down[pid])
            for pid in stage.participants
            if pid in stage.down
        ]
        lines.append("Down: " + "  ".join(downs))

    ups = [
        f"{player_name(names, pid)}: {format_table_card(stage.up[pid])}"
        for pid in stage.participants
        if pid in stage.up
    ]
    line = "Up: " + "  ".join(ups)
    if is_last and outcome:
        line += f"  => {outcome}"
    elif stage.up:
        line += f" (tie on {stage.top_rank().rank_str})"
    lines.append(line)
    return lines


def _table_line(names: Sequence[str], cards: Iterable[TableCard]) -> str:
    grouped: Dict[int, List[TableCard]] = {}
    for entry in cards:
        grouped.setdefault(entry.player_id, []).append(entry)
    parts = [
        f"{player_name(names, pid)}: " + ", ".join(format_table_card(e) for e in grouped[pid])
        for pid in sorted(grouped)
    ]
    return "Table: " + " | ".join(parts)


def piles_line(state: GameState) -> str:
    """One-line summary of every player's piles."""
    parts = [
        f"{player.name}: draw {len(player.draw_pile)}, won {len(player.won_pile)}, "
        f"total {player.total_cards}"
        for player in state.players
    ]
    return "Piles: " + " | ".join(parts)


def game_ended_line(names: Sequence[str], event: GameEnded) -> str:
    if event.reason == GameEndReason.WIN and event.winner is not None:
        return f"{player_name(names, event.winner)} wins the game!"
    if event.reason == GameEndReason.TIMEOUT:
        return "Game ended due to max rounds timeout."
    return "Game ended in a stalemate."


def recycle_line(names: Sequence[str], event: PileRecycled) -> str:
    action = "shuffled" if event.shuffled else "recycled"
    return f"{player_name(names, event.player_id)} {action} {event.cards} card(s) from the won pile."


def describe_event(event: RoundEvent, names: Sequence[str]) -> List[str]:
    """
    Render a single event without round context, as the trace viewer does.

    RoundStarted produces no lines; the viewer prints its own round headers.
    """
    if isinstance(event, PileRecycled):
        return [recycle_line(names, event)]
    if isinstance(event, WarStarted):
        return [f"WAR! (level {event.war_level})"]
    if isinstance(event, CardsPlaced):
        grouped: Dict[int, List[TableCard]] = {}
        for entry in event.cards:
            grouped.setdefault(entry.player_id, []).append(entry)
        return [
            f"{player_name(names, pid)} played: "
            + ", ".join(format_table_card(entry) for entry in grouped[pid])
            for pid in sorted(grouped)
        ]
    if isinstance(event, TrickWon):
        return [
            f"{player_name(names, event.winner)} wins the trick and collects "
            f"{len(event.collected)} card(s)."
        ]
    if isinstance(event, StateHashed):
        return [f"State hash ({event.mode}) [round {event.round}]: {event.hash}"]
    if isinstance(event, GameEnded):
        return [game_ended_line(names, event)]
    return []


def render_round_events(
    events: Iterable[RoundEvent],
    state: GameState,
    output: Output = print,
    verbosity=Verbosity.NORMAL,
) -> None:
    """
    Render one round.

    Args:
        events: The round's events, in order
        state: The state after the round (used for names and pile counts)
        output: Line sink
        verbosity: ``low`` shows the winner and piles; ``normal`` adds the
            flip and every war step; ``high`` adds the full table and the
            state hash
    """
    verbosity = Verbosity(verbosity)
    detailed = verbosity != Verbosity.LOW
    events = list(events)
    names = _names(state)

    placed = next((e for e in events if isinstance(e, CardsPlaced)), None)
    trick = next((e for e in events if isinstance(e, TrickWon)), None)
    wars = [e for e in events if isinstance(e, WarStarted)]
    stages = _split_stages(placed, wars) if placed is not None else []
    outcome = None
    if trick is not None:
        outcome = f"{player_name(names, trick.winner)} wins {len(trick.collected)} card(s)"

    flip_shown = False
    war_count = 0
    for event in events:
        if isinstance(event, RoundStarted):
            output("")
            output(f"Round {event.round}")
        elif isinstance(event, PileRecycled):
            if detailed:
                output(recycle_line(names, event))
        elif isinstance(event, WarStarted):
            war_count += 1
            if not detailed:
                continue
            if not stages:
                output(f"WAR! (level {event.war_level})")
                continue
            if not flip_shown:
                output(_flip_line(names, stages, outcome))
                flip_shown = True
            tie = stages[war_count - 1].top_rank()
            output(f"WAR! (level {event.war_level}, tie on {tie.rank_str})")
            for line in _war_lines(
                names, stages[war_count], war_count == len(stages) - 1, outcome
            ):
                output(line)
        elif isinstance(event, CardsPlaced):
            if detailed and not flip_shown:
                output(_flip_line(names, stages, outcome))
                flip_shown = True
        elif isinstance(event, TrickWon):
            if not detailed:
                output(f"{outcome}.")
            if verbosity == Verbosity.HIGH and placed is not None:
                output(_table_line(names, placed.cards))
            output(piles_line(state))
        elif isinstance(event, StateHashed):
            if verbosity == Verbosity.HIGH:
                output(f"State hash ({event.mode}) [round {event.round}]: {event.hash}")
        elif isinstance(event, GameEnded):
            output(game_ended_line(names, event))


def render_stats(state: GameState, output: Output = print) -> None:
    output("")
    output(f"Round: {state.round}")
    output(f"Wars: {state.stats.wars} | Flips: {state.stats.flips}")
    for player in state.players:
        output(
            f"{player.name}: draw pile {len(player.draw_pile)}, "
            f"won pile {len(player.won_pile)}, total {player.total_cards}"
        )


def render_help(autoplay: bool, output: Output = print) -> None:
    output("")
    output("Controls:")
    output("- Enter: play next round")
    output(f"- a: toggle autoplay ({'on' if autoplay else 'off'})")
    output("- s: show stats")
    output("- q: quit")
    output("- ?: help")


def render_intro(
    seed: str, state: GameState, output: Output = print, autoplay: bool = False
) -> None:
    output(f"Starting War (seed: {seed})")
    output("Players: " + " vs ".join(_names(state)))
    render_help(autoplay, output)
