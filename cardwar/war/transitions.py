"""
Round resolution for the War card game.

This module provides the pure transition from one game state to the next. A
round is resolved against a private working copy of the caller's state; the
caller receives a brand new `GameState` together with the ordered events that
describe what happened, and the state it passed in is never modified.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union

from cardwar.common.deck import shuffle_deck
from cardwar.common.rng import RNG
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
from cardwar.war.hashing import StateHashMode, hash_state
from cardwar.war.rules import CollectMode, TieResolution
from cardwar.war.state import GameState, GameStats, PlayerState, TableCard, TableState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundResult:
    """
    Outcome of a single call to `play_round`.

    Attributes:
        state: The game state after the round
        events: Events emitted by the round, in order
    """

    state: GameState
    events: Tuple[RoundEvent, ...] = ()

    @property
    def round_number(self) -> int:
        """Round the events belong to (the state's round when no round was started)."""
        for event in self.events:
            if isinstance(event, RoundStarted):
                return event.round
        return self.state.round


def highest_contenders(face_up: Sequence[TableCard]) -> List[int]:
    """
    Return the players whose face-up card has the highest rank.

    Suits never break ties; several players are returned when the top rank is
    shared, and an empty list when nobody produced a card.
    """
    if not face_up:
        return []
    top = max(entry.card.rank.rank_value for entry in face_up)
    return [entry.player_id for entry in face_up if entry.card.rank.rank_value == top]


class RoundResolver:
    """
    Mutable working copy of a game state, used for resolving exactly one round.

    The resolver copies every pile out of the source state, plays the round on
    those copies, and freezes the result into a new GameState at the end.
    """

    def __init__(self, state: GameState, rng: RNG, state_hash_mode: StateHashMode):
        self.config = state.config
        self.rng = rng
        self.state_hash_mode = state_hash_mode
        self.current_round = state.round

        self.names = [player.name for player in state.players]
        self.draw_piles = [list(player.draw_pile) for player in state.players]
        self.won_piles = [list(player.won_pile) for player in state.players]
        self.table: List[TableCard] = []
        self.in_war = False

        self.round = state.round
        self.active = state.active
        self.winner = state.winner
        self.wars = state.stats.wars
        self.flips = state.stats.flips

        self.events: List[RoundEvent] = []

    def total_cards(self, player_id: int) -> int:
        return len(self.draw_piles[player_id]) + len(self.won_piles[player_id])

    def players_with_cards(self) -> List[int]:
        return [pid for pid in range(len(self.names)) if self.total_cards(pid) > 0]

    def recycle_if_needed(self, player_id: int) -> None:
        """Turn the won pile into the draw pile when the draw pile is empty."""
        if self.draw_piles[player_id] or not self.won_piles[player_id]:
            return

        shuffled = self.config.shuffle_won_pile_on_recycle
        won = self.won_piles[player_id]
        self.draw_piles[player_id] = shuffle_deck(won, self.rng) if shuffled else list(won)
        self.won_piles[player_id] = []
        logger.debug(
            "Round %d: player %d recycled %d card(s)",
            self.current_round,
            player_id,
            len(self.draw_piles[player_id]),
        )
        self.events.append(
            PileRecycled(
                player_id=player_id,
                cards=len(self.draw_piles[player_id]),
                shuffled=shuffled,
            )
        )

    def draw_card(self, player_id: int, face_down: bool) -> Optional[TableCard]:
        """Move the player's next card to the table, or return None if they have none."""
        self.recycle_if_needed(player_id)
        if not self.draw_piles[player_id]:
            return None

        entry = TableCard(
            player_id=player_id,
            card=self.draw_piles[player_id].pop(0),
            face_down=face_down,
        )
        self.table.append(entry)
        if not face_down:
            self.flips += 1
        return entry

    def draw_war_package(self, player_id: int) -> Optional[TableCard]:
        """Ante the configured face-down cards, then flip one card face up."""
        if self.config.tie_resolution == TieResolution.STANDARD_WAR:
            for _ in range(self.config.war_face_down_count):
                self.draw_card(player_id, face_down=True)
        return self.draw_card(player_id, face_down=False)

    def collect(self, winner: int) -> Tuple[TableCard, ...]:
        """Award every table card to ``winner`` and clear the table."""
        collected = tuple(self.table)
        cards = [entry.card for entry in collected]
        if self.config.collect_mode == CollectMode.BOTTOM_OF_DRAW:
            self.draw_piles[winner].extend(cards)
        else:
            self.won_piles[winner].extend(cards)
        self.table = []
        self.in_war = False
        return collected

    def end_game(self, reason: GameEndReason, winner: Optional[int] = None) -> None:
        self.active = False
        self.winner = winner
        logger.debug(
            "Game ended in round %d: %s (winner=%s)",
            self.current_round,
            reason.value,
            winner,
        )
        self.events.append(GameEnded(reason=reason, winner=winner))

    def snapshot(self) -> GameState:
        """Freeze the working copy into a new GameState."""
        return GameState(
            players=[
                PlayerState(name=name, draw_pile=draw, won_pile=won)
                for name, draw, won in zip(self.names, self.draw_piles, self.won_piles)
            ],
            table=TableState(battle_cards=self.table, in_war=self.in_war),
            round=self.round,
            active=self.active,
            winner=self.winner,
            stats=GameStats(wars=self.wars, flips=self.flips),
            config=self.config,
        )

    def finish(self) -> RoundResult:
        """Append the state hash (when enabled) and return the round's result."""
        state = self.snapshot()
        if self.state_hash_mode != StateHashMode.OFF:
            tagged = replace(state, round=self.current_round)
            self.events.append(
                StateHashed(
                    round=self.current_round,
                    mode=self.state_hash_mode.value,
                    hash=hash_state(tagged, self.state_hash_mode),
                )
            )
        return RoundResult(state=state, events=tuple(self.events))

    def resolve(self) -> RoundResult:
        """Play the round: initial flip, any wars, award, and end-of-game checks."""
        self.events.append(RoundStarted(round=self.current_round))

        active_players = self.players_with_cards()
        if not active_players:
            self.round += 1
            self.end_game(GameEndReason.STALEMATE)
            return self.finish()
        if len(active_players) == 1:
            self.round += 1
            self.end_game(GameEndReason.WIN, winner=active_players[0])
            return self.finish()

        face_up = []
        for player_id in active_players:
            entry = self.draw_card(player_id, face_down=False)
            if entry is not None:
                face_up.append(entry)

        contenders = highest_contenders(face_up)
        war_level = 0
        while len(contenders) > 1:
            war_level += 1
            self.wars += 1
            self.in_war = True
            logger.debug(
                "Round %d: war level %d between players %s",
                self.current_round,
                war_level,
                contenders,
            )
            self.events.append(
                WarStarted(war_level=war_level, participants=tuple(contenders))
            )

            face_up = []
            for player_id in contenders:
                entry = self.draw_war_package(player_id)
                if entry is not None:
                    face_up.append(entry)
            contenders = highest_contenders(face_up)

        if not contenders:
            self.round += 1
            self.end_game(GameEndReason.STALEMATE)
            return self.finish()

        round_winner = contenders[0]
        placed = tuple(self.table)
        collected = self.collect(round_winner)
        self.events.append(
            CardsPlaced(cards=placed, participants=tuple(active_players))
        )
        self.events.append(TrickWon(winner=round_winner, collected=collected))

        self.round += 1
        remaining = self.players_with_cards()
        if len(remaining) == 1:
            self.end_game(GameEndReason.WIN, winner=remaining[0])
        elif not remaining:
            self.end_game(GameEndReason.STALEMATE)
        elif self.config.max_rounds is not None and self.round > self.config.max_rounds:
            self.end_game(GameEndReason.TIMEOUT)

        return self.finish()


class StateTransitionEngine:
    """
    Pure functions for state transitions in War.

    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def play_round(
        state: GameState,
        rng: RNG,
        state_hash_mode: Union[StateHashMode, str] = StateHashMode.OFF,
    ) -> RoundResult:
        """
        Resolve exactly one round.

        Args:
            state: Current game state (left untouched)
            rng: Random source used for recycle shuffles
            state_hash_mode: Append a StateHashed event when not ``off``

        Returns:
            RoundResult with the next state and the round's events
        """
        state_hash_mode = StateHashMode(state_hash_mode)

        if not state.active:
            return RoundResult(state=state, events=())

        max_rounds = state.config.max_rounds
        if max_rounds is not None and state.round > max_rounds:
            return RoundResult(
                state=replace(state, active=False),
                events=(GameEnded(reason=GameEndReason.TIMEOUT),),
            )

        return RoundResolver(state, rng, state_hash_mode).resolve()


play_round = StateTransitionEngine.play_round
