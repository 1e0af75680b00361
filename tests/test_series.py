from __future__ import annotations

import pytest

from tripletriad.engine.actions import PlaceCardAction
from tripletriad.engine.errors import InvalidPhase
from tripletriad.engine.match import cards_in_play, scores
from tripletriad.engine.series import (
    coin_toss,
    cpu_turn,
    is_series_over,
    new_series,
    next_round,
    offer_decks,
    play,
    select_decks,
    series_winner,
)
from tripletriad.engine.types import PLAYER_A, PLAYER_B, RoundResult, RuleConfig
from tripletriad.paths import get_paths
from tripletriad.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _r(winner) -> RoundResult:
    return RoundResult(winner=winner, scores=(5, 5))


def test_series_end_conditions() -> None:
    assert not is_series_over([_r(PLAYER_A)])
    assert not is_series_over([_r(PLAYER_A), _r(PLAYER_B)])
    assert not is_series_over([_r(None), _r(PLAYER_B)])

    # two wins end the series without a third round
    assert is_series_over([_r(PLAYER_A), _r(PLAYER_A)])
    assert series_winner([_r(PLAYER_A), _r(PLAYER_A)]) == PLAYER_A

    assert is_series_over([_r(PLAYER_A), _r(PLAYER_B), _r(PLAYER_A)])
    assert series_winner([_r(PLAYER_A), _r(PLAYER_B), _r(PLAYER_A)]) == PLAYER_A

    # three rounds are the limit; equal wins means no champion
    assert is_series_over([_r(PLAYER_A), _r(None), _r(PLAYER_B)])
    assert series_winner([_r(PLAYER_A), _r(None), _r(PLAYER_B)]) is None
    assert series_winner([_r(None), _r(None), _r(PLAYER_B)]) == PLAYER_B


def test_select_decks_never_shares_cards() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(), seed=21)
    hand_a, hand_b = select_decks(series)

    assert len(hand_a) == 5 and len(hand_b) == 5
    assert not {c.id for c in hand_a} & {c.id for c in hand_b}
    assert sum(c.level for c in hand_a) == 30
    assert sum(c.level for c in hand_b) == 30
    assert series.phase == "coin_toss"


def test_select_decks_rejects_overlap() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(pvp_mode=True), seed=1)
    deck = [cards.get(i) for i in (1, 2, 3, 4, 5)]
    with pytest.raises(ValueError):
        select_decks(series, deck, deck)
    assert series.phase == "deck_select"


def test_pvp_players_choose_from_offers() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(pvp_mode=True), seed=4)
    options = offer_decks(series, count=5)
    assert len(options) == 5
    deck_a = options[2]

    a_ids = [c.id for c in deck_a]
    options_b = offer_decks(series, count=3, exclude_ids=a_ids)
    for deck in options_b:
        assert not set(a_ids) & {c.id for c in deck}

    select_decks(series, deck_a, options_b[0])
    assert series.hands is not None
    assert [c.id for c in series.hands[0]] == a_ids


def test_phase_order_is_enforced() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(), seed=2)

    with pytest.raises(InvalidPhase):
        coin_toss(series)
    with pytest.raises(InvalidPhase):
        next_round(series)
    with pytest.raises(InvalidPhase):
        play(series, PlaceCardAction(player=PLAYER_A, tile=0, hand_index=0))

    select_decks(series)
    with pytest.raises(InvalidPhase):
        select_decks(series)

    first = coin_toss(series)
    assert series.phase == "playing"
    assert series.round is not None
    assert series.round.current_player == first
    with pytest.raises(InvalidPhase):
        offer_decks(series)


def test_full_series_cpu_vs_cpu() -> None:
    cards = _load_cards()
    rules = RuleConfig(same_enabled=True, plus_enabled=True, cpu_difficulty="HIGH")
    series = new_series(cards, rules, seed=77)

    rounds = 0
    while series.phase != "series_over":
        assert series.round_number == rounds + 1
        select_decks(series)
        coin_toss(series)
        round_state = series.round
        assert round_state is not None
        while series.phase == "playing":
            res = cpu_turn(series)
            assert res.ok
            assert cards_in_play(round_state) == 10
            assert sum(scores(round_state)) == 10
        rounds += 1
        assert len(series.results) == rounds
        assert series.results[-1] == round_state.result
        if series.phase == "round_end":
            assert series.champion is None
            next_round(series)

    assert 2 <= len(series.results) <= 3
    assert series.champion == series_winner(series.results)
    assert series.event_log[-1]["type"] == "SERIES_ENDED"


def test_round_end_event_is_reported_to_caller() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(cpu_difficulty="MID"), seed=8)
    select_decks(series)
    coin_toss(series)

    last = None
    while series.phase == "playing":
        last = cpu_turn(series)
    assert last is not None
    kinds = [e["type"] for e in last.events]
    assert "ROUND_ENDED" in kinds
    assert series.phase in ("round_end", "series_over")


def test_select_decks_draws_a_around_fixed_b_hand() -> None:
    cards = _load_cards()
    for seed in range(40):
        series = new_series(cards, RuleConfig(pvp_mode=True), seed=seed)
        deck_b = offer_decks(series, count=1)[0]
        hand_a, hand_b = select_decks(series, deck_b=deck_b)

        assert [c.id for c in hand_b] == [c.id for c in deck_b]
        assert not {c.id for c in hand_a} & {c.id for c in hand_b}
        assert sum(c.level for c in hand_a) == 30
        assert series.phase == "coin_toss"


def test_bad_supplied_hand_is_rejected_before_drawing() -> None:
    cards = _load_cards()
    series = new_series(cards, RuleConfig(pvp_mode=True), seed=3)
    state_before = series.rng.getstate()
    with pytest.raises(ValueError):
        select_decks(series, deck_b=[cards.get(1)] * 5)
    assert series.rng.getstate() == state_before
    assert series.phase == "deck_select"
