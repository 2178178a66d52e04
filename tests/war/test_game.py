"""
Tests for the game driver.
"""

import pytest

from cardwar.war.events import GameEnded, GameEndReason, RoundStarted, StateHashed
from cardwar.war.game import GameRunResult, create_game, run_game


def test_create_game_deals_shuffled_deck():
    state, rng = create_game("deal-seed", player_names=["A", "B", "C"])
    assert [player.total_cards for player in state.players] == [18, 17, 17]
    assert state.round == 1
    assert callable(rng)


def test_create_game_is_deterministic():
    first, _ = create_game("same-deal")
    second, _ = create_game("same-deal")
    assert first == second


def test_create_game_uses_deck_count():
    state, _ = create_game("two-decks", rules={"num_decks": 2})
    assert state.total_cards() == 104


def test_run_game_is_deterministic():
    first = run_game("deterministic-seed", rules={"max_rounds": 500})
    second = run_game("deterministic-seed", rules={"max_rounds": 500})
    assert isinstance(first, GameRunResult)
    assert first == second


def test_run_game_is_deterministic_with_four_players():
    names = ["P1", "P2", "P3", "P4"]
    first = run_game("four-player-determinism", player_names=names, rules={"max_rounds": 500})
    second = run_game("four-player-determinism", player_names=names, rules={"max_rounds": 500})
    assert first.state == second.state
    assert first.events == second.events


def test_run_game_ends_inactive_with_game_ended_event():
    result = run_game("ending-check", rules={"max_rounds": 300})
    assert result.state.active is False
    endings = [event for event in result.events if isinstance(event, GameEnded)]
    assert len(endings) == 1
    assert result.events[-1] == endings[0]


def test_max_rounds_timeout():
    result = run_game("timeout-check", rules={"max_rounds": 1})
    assert result.state.active is False
    assert result.events[-1] == GameEnded(reason=GameEndReason.TIMEOUT)
    assert result.state.round == 2


@pytest.mark.parametrize("seed", ["conserve-1", "conserve-2", "conserve-3"])
def test_cards_are_conserved_every_round(seed):
    def check(result):
        assert result.state.total_cards() == 52

    run_game(
        seed,
        player_names=["A", "B", "C"],
        rules={"max_rounds": 400},
        on_round=check,
        collect_events=False,
    )


def test_callbacks_and_collect_events_flag():
    started = []
    rounds = []
    result = run_game(
        "callbacks",
        rules={"max_rounds": 20},
        on_game_start=started.append,
        on_round=rounds.append,
        collect_events=False,
    )

    assert len(started) == 1
    assert started[0].round == 1
    assert result.events == ()
    assert len(rounds) == result.state.round - 1
    assert rounds[-1].state == result.state


def test_events_match_streamed_rounds():
    streamed = []
    result = run_game(
        "streamed",
        rules={"max_rounds": 50},
        state_hash_mode="counts",
        on_round=lambda r: streamed.extend(r.events),
    )
    assert tuple(streamed) == result.events
    round_numbers = [e.round for e in result.events if isinstance(e, RoundStarted)]
    assert round_numbers == list(range(1, len(round_numbers) + 1))


def test_different_seeds_play_different_games():
    first = run_game("game-a", rules={"max_rounds": 100})
    second = run_game("game-b", rules={"max_rounds": 100})
    assert first.events != second.events


def test_deal_is_pinned():
    state, _ = create_game("state-hash-seq")
    assert [str(card) for card in state.players[0].draw_pile[:3]] == ["6♦", "Q♥", "3♠"]
    assert [str(card) for card in state.players[1].draw_pile[:3]] == ["2♣", "A♥", "K♥"]


def test_state_hash_sequence_is_pinned():
    result = run_game("state-hash-seq", rules={"max_rounds": 3}, state_hash_mode="counts")
    hashes = [event.hash for event in result.events if isinstance(event, StateHashed)]
    assert hashes == [
        "57ec02600e8268ec691d98e80ce31e965441aae9d24e7b1c8401bcc4cedb4a4b",
        "27c3c4e21b2191093d993fb9f8243bb208ab9eef94b993a6218e856783a3a179",
        "bb197eaf3a81e498046def2e09665c10ff85f93c7bc9347c842550a0ef084561",
    ]
