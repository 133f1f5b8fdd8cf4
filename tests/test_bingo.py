"""
Bingo card, win detection and session flow.
"""

import pytest

from element_games.errors import InsufficientCatalogError
from element_games.games.bingo import (
    CARD_SIZE,
    BingoCard,
    BingoGoal,
    BingoMode,
    BingoSession,
    BingoSpeed,
    WinPattern,
    detect_wins,
    pattern_points,
)
from element_games.session import Completed, EndReason


@pytest.fixture
def card(elements, rng):
    return BingoCard.deal(elements, rng=rng)


@pytest.fixture
def session(catalog, sink, rng, clock):
    return BingoSession(catalog, sink, rng=rng, clock=clock)


def call_until_done(session):
    calls = 0
    while not session.is_completed:
        session.call_next()
        calls += 1
        assert calls <= len(session.catalog)
    return calls


class TestBingoCard:

    def test_deal_when_enough_elements_then_25_distinct(self, card):
        ids = card.element_ids
        assert len(ids) == 25
        assert len(set(ids)) == 25
        assert card.marked_count == 0

    def test_deal_when_too_few_elements_then_raises(self, elements, rng):
        with pytest.raises(InsufficientCatalogError) as exc:
            BingoCard.deal(elements[:24], rng=rng)
        assert exc.value.required == 25
        assert exc.value.available == 24

    def test_cells_when_dealt_then_positions_match_grid(self, card):
        cell = card.cell_at(2, 4)
        assert (cell.row, cell.col) == (2, 4)

    def test_mark_when_not_on_card_then_false(self, card):
        assert card.mark(999) is False
        assert card.marked_count == 0

    def test_mark_when_on_card_then_marked(self, card):
        element_id = card.cell_at(0, 0).element_id
        assert card.mark(element_id) is True
        assert card.has_element(element_id)
        assert card.find(element_id).marked


class TestDetectWins:

    def test_detect_wins_when_one_row_marked_then_only_that_row(self, card):
        for cell in card.cells[2]:
            card.mark(cell.element_id)
        assert detect_wins(card) == {WinPattern.ROW_3}

    def test_detect_wins_when_column_marked_then_column(self, card):
        for r in range(CARD_SIZE):
            card.mark(card.cell_at(r, 0).element_id)
        assert detect_wins(card) == {WinPattern.COLUMN_1}

    def test_detect_wins_when_diagonals_marked_then_both_diagonals(self, card):
        for i in range(CARD_SIZE):
            card.mark(card.cell_at(i, i).element_id)
            card.mark(card.cell_at(i, CARD_SIZE - 1 - i).element_id)
        assert detect_wins(card) == {WinPattern.DIAGONAL_DOWN, WinPattern.DIAGONAL_UP}

    def test_detect_wins_when_full_card_then_all_13_patterns(self, card):
        for element_id in card.element_ids:
            card.mark(element_id)
        wins = detect_wins(card)
        assert len(wins) == 13
        assert WinPattern.FULL_CARD in wins
        assert pattern_points(wins) == 1800

    def test_detect_wins_when_already_achieved_then_not_reported_again(self, card):
        for cell in card.cells[0]:
            card.mark(cell.element_id)
        first = detect_wins(card)
        assert detect_wins(card, first) == frozenset()

    def test_detect_wins_when_called_twice_on_same_grid_then_same_result(self, card):
        for i in range(CARD_SIZE):
            card.mark(card.cell_at(i, i).element_id)
        for cell in card.cells[4]:
            card.mark(cell.element_id)
        first = detect_wins(card)
        assert first == {WinPattern.DIAGONAL_DOWN, WinPattern.ROW_5}
        assert detect_wins(card) == first
        assert card.marked_count == 9

    def test_detect_wins_when_four_of_five_then_nothing(self, card):
        for cell in card.cells[0][:4]:
            card.mark(cell.element_id)
        assert detect_wins(card) == frozenset()

    def test_pattern_label_when_row_then_readable(self):
        assert WinPattern.ROW_3.label == "Row 3"
        assert WinPattern.DIAGONAL_UP.points == 150


class TestBingoSession:

    def test_manual_when_called_until_pattern_then_won(self, session, sink):
        session.start(BingoMode.MANUAL)
        call_until_done(session)
        state = session.state
        assert isinstance(state, Completed)
        assert state.reason is EndReason.WON
        assert len(state.patterns) >= 1
        summary = session.summary()
        assert summary.score == pattern_points(state.patterns)
        assert summary.total_count == 25
        assert summary.accuracy == session.card.marked_count / 25 * 100
        assert len(sink.answers) == session.card.marked_count
        assert all(correct for _, correct in sink.answers)

    def test_full_card_goal_when_played_out_then_every_pattern(self, session):
        session.start(BingoMode.MANUAL, goal=BingoGoal.FULL_CARD)
        call_until_done(session)
        assert session.state.reason is EndReason.WON
        assert WinPattern.FULL_CARD in session.achieved
        assert session.summary().score == 1800
        assert session.accuracy == 100.0

    def test_manual_mark_when_not_called_then_rejected(self, session):
        card = session.start(BingoMode.MANUAL)
        assert session.manual_mark(card.cell_at(0, 0).element_id) is False

    def test_manual_mark_when_called_then_accepted(self, session):
        session.start(BingoMode.MANUAL)
        called = session.call_next()
        if session.card.has_element(called.atomic_number):
            assert session.manual_mark(called.atomic_number) is True
        else:
            assert session.manual_mark(called.atomic_number) is False

    def test_auto_when_interval_passes_then_calls_next(self, session, clock):
        session.start(BingoMode.AUTO, BingoSpeed.FAST)
        clock.advance(1.0)
        session.tick()
        assert session.called == []
        clock.advance(0.5)
        session.tick()
        assert len(session.called) == 1

    def test_toggle_pause_when_paused_then_no_calls_and_clock_frozen(self, session, clock):
        session.start(BingoMode.AUTO, BingoSpeed.FAST)
        clock.advance(1.5)
        session.tick()
        assert session.toggle_pause() is True
        assert session.call_next() is None
        clock.advance(10.0)
        session.tick()
        assert len(session.called) == 1
        assert session.elapsed_seconds == 1.5

        assert session.toggle_pause() is False
        clock.advance(1.5)
        session.tick()
        assert len(session.called) == 2
        assert session.elapsed_seconds == 3.0

    def test_toggle_pause_when_not_started_then_ignored(self, session):
        assert session.toggle_pause() is False

    def test_exit_when_playing_then_timers_stopped(self, session, clock, sink):
        session.start(BingoMode.AUTO)
        summary = session.exit()
        assert summary.end_reason is EndReason.EXITED
        clock.advance(30.0)
        assert session.tick() == 0
        assert session.called == []
        assert len(sink.sessions) == 1

    def test_start_when_catalog_too_small_then_raises(self, small_catalog):
        with pytest.raises(InsufficientCatalogError):
            BingoSession(small_catalog).start()
