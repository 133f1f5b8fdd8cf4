import pytest

from element_games.config import GameSettings
from element_games.errors import InvalidConfigError
from element_games.games import SESSION_CLASSES, create_session
from element_games.games.quiz import QuizSession
from element_games.progress import ProgressTracker
from element_games.session import EndReason, GameType, Setup


class TestGameType:

    def test_every_game_type_when_registered_then_has_session_class(self):
        assert set(SESSION_CLASSES) == set(GameType)
        for game_type, cls in SESSION_CLASSES.items():
            assert cls.game_type is game_type

    def test_label_when_lightning_then_readable(self):
        assert GameType.LIGHTNING.label == "Lightning Challenge"
        assert GameType.FAMILY_MAP.estimated_minutes == 8


class TestSessionLifecycle:

    def test_create_session_when_string_type_then_matching_class(self, catalog, sink):
        session = create_session("quiz", catalog, sink)
        assert isinstance(session, QuizSession)
        assert session.sink is sink
        assert session.state == Setup()

    def test_exit_when_never_started_then_nothing_flushed(self, catalog, sink):
        session = create_session(GameType.PAIRS, catalog, sink)
        assert session.exit() is None
        assert session.finish() is None
        assert sink.sessions == []

    def test_finish_when_no_sink_then_still_summarizes(self, catalog, rng, clock):
        session = create_session(GameType.FLASHCARDS, catalog, rng=rng, clock=clock)
        session.start(deck_size=2)
        clock.advance(30.0)
        summary = session.exit()
        assert summary.end_reason is EndReason.EXITED
        assert summary.duration_seconds == 30
        assert summary.pace == 0.0

    def test_finish_when_tracker_is_sink_then_progress_recorded(self, catalog, rng, clock):
        tracker = ProgressTracker()
        session = create_session(GameType.FLASHCARDS, catalog, tracker, rng=rng, clock=clock)
        session.start(deck_size=2)
        session.mark_known()
        session.mark_known()
        assert len(tracker.sessions) == 1
        assert tracker.sessions[0].game_type is GameType.FLASHCARDS
        assert tracker.total_answers == 2

    def test_start_when_restarted_then_counters_reset(self, catalog, rng, clock):
        session = create_session(GameType.FLASHCARDS, catalog, rng=rng, clock=clock)
        session.start(deck_size=3)
        session.mark_known()
        session.start(deck_size=3)
        assert session.answered_count == 0
        assert session.history == []


class TestGameSettings:

    def test_from_env_when_empty_then_defaults(self):
        settings = GameSettings.from_env({})
        assert settings.data_path == "PeriodicTableJSON.json"
        assert settings.lightning_seconds == 60
        assert settings.is_production is False

    def test_from_env_when_prod_then_flag_set(self):
        settings = GameSettings.from_env({"STREAMLIT_ENV": "prod", "ELEMENT_GAMES_LOG_LEVEL": "debug"})
        assert settings.is_production is True
        assert settings.log_level_value == 10

    def test_from_env_when_seconds_not_integer_then_invalid_config(self):
        with pytest.raises(InvalidConfigError):
            GameSettings.from_env({"ELEMENT_GAMES_LIGHTNING_SECONDS": "soon"})

    def test_init_when_seconds_not_positive_then_invalid_config(self):
        with pytest.raises(InvalidConfigError):
            GameSettings(lightning_seconds=0)

    def test_init_when_unknown_log_level_then_invalid_config(self):
        with pytest.raises(InvalidConfigError):
            GameSettings(log_level="chatty")
