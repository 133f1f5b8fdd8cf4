import pytest

from element_games.catalog import ElementCatalog, Family
from element_games.errors import InsufficientCatalogError
from element_games.games.family_map import FamilyMapDifficulty, FamilyMapSession
from element_games.session import Completed, EndReason, Playing, Reviewing


def wrong_family(item):
    return next(f for f in Family if f is not item.correct_family)


@pytest.fixture
def session(catalog, sink, rng, clock):
    s = FamilyMapSession(catalog, sink, rng=rng, clock=clock)
    s.start(FamilyMapDifficulty.EASY)
    return s


class TestFamilyMapSession:

    def test_start_when_easy_then_ten_distinct_items(self, session):
        ids = [item.element.atomic_number for item in session.items]
        assert len(ids) == 10
        assert len(set(ids)) == 10

    def test_start_when_catalog_empty_then_raises(self):
        with pytest.raises(InsufficientCatalogError):
            FamilyMapSession(ElementCatalog([])).start()

    def test_classify_when_correct_then_feedback_then_advance(self, session, clock):
        item = session.current_item
        assert session.classify(item.correct_family) is True
        assert session.state == Reviewing(correct=True)
        assert session.classify(item.correct_family) is None

        clock.advance(1.0)
        session.tick()
        assert session.cursor == 0
        clock.advance(0.5)
        session.tick()
        assert session.cursor == 1
        assert session.state == Playing()

    def test_classify_when_wrong_then_incorrect_and_streak_reset(self, session, clock):
        session.classify(session.current_item.correct_family)
        clock.advance(1.5)
        session.tick()
        assert session.classify(wrong_family(session.current_item)) is False
        assert (session.correct_count, session.incorrect_count) == (1, 1)
        assert session.streak == 0

    def test_skip_when_playing_then_counted_as_miss_and_advanced(self, session):
        first = session.current_item
        assert session.skip() is True
        assert session.incorrect_count == 1
        assert session.cursor == 1
        assert first.classified and first.classified_as is None

    def test_full_run_when_all_correct_and_instant_then_1100(self, session, clock, sink):
        for _ in range(10):
            session.classify(session.current_item.correct_family)
            clock.advance(1.5)
            session.tick()
        assert session.state == Completed(reason=EndReason.FINISHED)
        summary = session.summary()
        assert summary.score == 1100
        assert summary.accuracy == 100.0
        assert summary.best_streak == 10
        assert len(sink.answers) == 10

    def test_accuracy_when_partly_played_then_over_all_items(self, session):
        session.skip()
        session.classify(session.current_item.correct_family)
        assert session.accuracy == 10.0

    def test_family_stats_when_classified_then_grouped_by_true_family(self, session):
        item = session.current_item
        session.classify(item.correct_family)
        assert session.family_stats() == {item.correct_family: (1, 1)}
