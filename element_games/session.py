"""
Shared game-session machinery.

Every mini-game follows the same life cycle:

    Setup -> (Countdown) -> Playing <-> Reviewing -> Completed

`GameSession` owns the counters, the attempt history, the elapsed-time
accumulator and the per-session `Scheduler`. Subclasses generate content in
`start()` and translate user events into `_register()` calls. Events that do
not make sense in the current state are ignored (logged at DEBUG) so the
host never has to guard them.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .catalog import ElementCatalog
from .scheduler import Clock, Scheduler

if TYPE_CHECKING:
    from .progress import ProgressSink

logger = logging.getLogger(__name__)


class GameType(str, Enum):
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"
    BINGO = "bingo"
    FAMILY_MAP = "family_map"
    PROPERTY_GUESS = "property_guess"
    PAIRS = "pairs"
    LIGHTNING = "lightning"

    @property
    def label(self) -> str:
        return _GAME_LABELS[self][0]

    @property
    def estimated_minutes(self) -> int:
        return _GAME_LABELS[self][1]


_GAME_LABELS = {
    GameType.FLASHCARDS: ("Flashcards", 10),
    GameType.QUIZ: ("Quiz", 5),
    GameType.BINGO: ("Bingo", 15),
    GameType.FAMILY_MAP: ("Family Map", 8),
    GameType.PROPERTY_GUESS: ("Guess the Property", 7),
    GameType.PAIRS: ("Pairs", 5),
    GameType.LIGHTNING: ("Lightning Challenge", 1),
}


class EndReason(str, Enum):
    FINISHED = "finished"
    WON = "won"
    TIME_UP = "time_up"
    EXHAUSTED = "exhausted"
    EXITED = "exited"


# =========================================================
# States
# =========================================================
@dataclass(frozen=True)
class Setup:
    pass


@dataclass(frozen=True)
class Countdown:
    remaining: int


@dataclass(frozen=True)
class Playing:
    pass


@dataclass(frozen=True)
class Reviewing:
    correct: bool


@dataclass(frozen=True)
class Completed:
    reason: EndReason
    patterns: Tuple = ()


GameState = Union[Setup, Countdown, Playing, Reviewing, Completed]


# =========================================================
# Records
# =========================================================
@dataclass(frozen=True)
class Attempt:
    index: int
    element_id: int
    correct: bool
    seconds: float
    points: int = 0


@dataclass(frozen=True)
class SessionSummary:
    game_type: GameType
    duration_seconds: int
    correct_count: int
    incorrect_count: int
    total_count: int
    score: int
    best_streak: int
    accuracy: float
    average_response_seconds: float
    pace: float  # answers per minute
    end_reason: Optional[EndReason]
    details: Mapping[str, object] = field(default_factory=dict)


# =========================================================
# Base session
# =========================================================
class GameSession:
    game_type: GameType

    def __init__(
        self,
        catalog: ElementCatalog,
        sink: Optional["ProgressSink"] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.catalog = catalog
        self.sink = sink
        self.rng = rng or random.Random()
        self.scheduler = scheduler or Scheduler(clock)
        self.clock: Clock = self.scheduler.clock
        self.state: GameState = Setup()
        self._summary: Optional[SessionSummary] = None
        self._reset_counters()

    # ---- state helpers
    @property
    def is_playing(self) -> bool:
        return isinstance(self.state, Playing)

    @property
    def is_reviewing(self) -> bool:
        return isinstance(self.state, Reviewing)

    @property
    def is_completed(self) -> bool:
        return isinstance(self.state, Completed)

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, (Countdown, Playing, Reviewing))

    @property
    def answered_count(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._stopped_at if self._stopped_at is not None else self.clock()
        paused = self._paused_total
        if self._paused_at is not None:
            paused += end - self._paused_at
        return max(0.0, end - self._started_at - paused)

    @property
    def accuracy(self) -> float:
        if self.answered_count == 0:
            return 0.0
        return self.correct_count / self.answered_count * 100

    @property
    def average_response_seconds(self) -> float:
        times = list(self._response_times())
        return sum(times) / len(times) if times else 0.0

    @property
    def pace(self) -> float:
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return 0.0
        return self.answered_count / elapsed * 60

    def tick(self) -> int:
        """Fire due timer events. Call this from the host's main loop."""
        if self.is_completed:
            return 0
        return self.scheduler.run_due()

    # ---- lifecycle
    def _reset_counters(self) -> None:
        self.cursor = 0
        self.correct_count = 0
        self.incorrect_count = 0
        self.streak = 0
        self.best_streak = 0
        self.total_score = 0
        self.history: List[Attempt] = []
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._paused_total = 0.0
        self._item_started_at: Optional[float] = None

    def _begin(self, state: Optional[GameState] = None) -> None:
        self.scheduler.cancel_all()
        self._reset_counters()
        self._summary = None
        self.state = state or Playing()
        if isinstance(self.state, Playing):
            self._start_clock()
        logger.info("%s session started", self.game_type.value)

    def _start_clock(self) -> None:
        now = self.clock()
        self._started_at = now
        self._item_started_at = now

    def _pause_clock(self) -> None:
        if self._paused_at is None and self._started_at is not None:
            self._paused_at = self.clock()

    def _resume_clock(self) -> None:
        if self._paused_at is not None:
            self._paused_total += self.clock() - self._paused_at
            self._paused_at = None

    def _mark_item_start(self) -> None:
        self._item_started_at = self.clock()

    def _latency(self) -> float:
        if self._item_started_at is None:
            return 0.0
        return max(0.0, self.clock() - self._item_started_at)

    def _ignore(self, event: str) -> None:
        logger.debug("%s: ignoring %s in state %s", self.game_type.value, event, type(self.state).__name__)
        return None

    # ---- counters
    def _register(self, index: int, element_id: int, correct: bool, seconds: float, points: int = 0) -> Attempt:
        attempt = Attempt(index=index, element_id=element_id, correct=correct, seconds=seconds, points=points)
        if correct:
            self.correct_count += 1
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.incorrect_count += 1
            self.streak = 0
        self.total_score += points
        self.history.append(attempt)
        logger.debug(
            "%s: item %d element %d correct=%s points=%d",
            self.game_type.value, index, element_id, correct, points,
        )
        return attempt

    def _revert(self, index: int) -> Optional[Attempt]:
        """Undo the counter contribution of the latest attempt at `index`."""
        for pos in range(len(self.history) - 1, -1, -1):
            prior = self.history[pos]
            if prior.index != index:
                continue
            if prior.correct:
                self.correct_count -= 1
            else:
                self.incorrect_count -= 1
            self.total_score -= prior.points
            del self.history[pos]
            self._replay_streaks()
            return prior
        return None

    def _replace(self, index: int, element_id: int, correct: bool, seconds: float, points: int = 0) -> Attempt:
        """Re-answer item `index`: drop its earlier attempt, then register the new one."""
        self._revert(index)
        attempt = self._register(index, element_id, correct, seconds, points)
        self._replay_streaks()
        return attempt

    def _replay_streaks(self) -> None:
        # Streaks follow item order, one (latest) attempt per item
        streak = best = 0
        for attempt in self._latest_attempts():
            streak = streak + 1 if attempt.correct else 0
            best = max(best, streak)
        self.streak = streak
        self.best_streak = best

    def _latest_attempts(self) -> List[Attempt]:
        latest: Dict[int, Attempt] = {}
        for a in self.history:
            latest[a.index] = a
        return [a for _, a in sorted(latest.items())]

    # ---- completion
    def finish(self, reason: EndReason = EndReason.FINISHED) -> Optional[SessionSummary]:
        if self.is_completed:
            return self._summary
        if isinstance(self.state, Setup):
            return self._ignore("finish")
        self.scheduler.cancel_all()
        self._resume_clock()
        self._stopped_at = self.clock()
        self.state = Completed(reason=reason, patterns=self._completion_patterns())
        self._summary = self.summary()
        logger.info(
            "%s session completed (%s): %d/%d correct, score=%d",
            self.game_type.value, reason.value, self.correct_count,
            self._summary.total_count, self._summary.score,
        )
        self._flush(self._summary)
        return self._summary

    def exit(self) -> Optional[SessionSummary]:
        """Leave mid-session: stop timers and flush partial progress."""
        if isinstance(self.state, Setup):
            self.scheduler.cancel_all()
            return None
        return self.finish(EndReason.EXITED)

    def summary(self) -> SessionSummary:
        if self._summary is not None:
            return self._summary
        reason = self.state.reason if isinstance(self.state, Completed) else None
        return SessionSummary(
            game_type=self.game_type,
            duration_seconds=int(self.elapsed_seconds),
            correct_count=self.correct_count,
            incorrect_count=self.incorrect_count,
            total_count=self._total_count(),
            score=self._score(),
            best_streak=self.best_streak,
            accuracy=self.accuracy,
            average_response_seconds=self.average_response_seconds,
            pace=self.pace,
            end_reason=reason,
            details=self._details(),
        )

    def _flush(self, summary: SessionSummary) -> None:
        if self.sink is None:
            return
        self.sink.record_session(
            summary.game_type,
            summary.duration_seconds,
            summary.correct_count,
            summary.total_count,
            summary.score,
        )
        for element_id, correct in self._final_answers():
            self.sink.record_answer(element_id, correct)

    # ---- hooks
    def _score(self) -> int:
        return self.total_score

    def _total_count(self) -> int:
        return self.answered_count

    def _details(self) -> Dict[str, object]:
        return {}

    def _completion_patterns(self) -> Tuple:
        return ()

    def _response_times(self) -> Iterable[float]:
        return (a.seconds for a in self.history)

    def _final_answers(self) -> List[Tuple[int, bool]]:
        return [(a.element_id, a.correct) for a in self._latest_attempts()]
