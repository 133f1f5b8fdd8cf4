from __future__ import annotations

import datetime as dt
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from .session import GameType

logger = logging.getLogger(__name__)


# =========================================================
# Sink interface consumed by sessions
# =========================================================
class ProgressSink(Protocol):
    def record_session(
        self,
        game_type: GameType,
        duration_seconds: int,
        correct_count: int,
        total_count: int,
        score: int,
    ) -> None: ...

    def record_answer(self, element_id: int, was_correct: bool) -> None: ...


class NullSink:
    """Discards everything; used when a session runs without persistence."""

    def record_session(self, game_type, duration_seconds, correct_count, total_count, score) -> None:
        return None

    def record_answer(self, element_id, was_correct) -> None:
        return None


# =========================================================
# Learning state per element
# =========================================================
class Mastery(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    IN_PROGRESS = "in_progress"
    MASTERED = "mastered"


REVIEW_INTERVAL_DAYS = {
    Mastery.NEW: 0,
    Mastery.LEARNING: 1,
    Mastery.IN_PROGRESS: 3,
    Mastery.MASTERED: 7,
}


@dataclass
class LearningState:
    seen: int = 0
    correct: int = 0
    incorrect: int = 0
    last_review: Optional[str] = None  # ISO date
    next_review: Optional[str] = None  # ISO date
    mastery: Mastery = Mastery.NEW

    @property
    def accuracy(self) -> float:
        total = self.correct + self.incorrect
        if total == 0:
            return 0.0
        return self.correct / total * 100

    def record_view(self, today: dt.date) -> None:
        self.seen += 1
        self.last_review = today.isoformat()

    def record_answer(self, was_correct: bool, today: dt.date) -> None:
        if was_correct:
            self.correct += 1
        else:
            self.incorrect += 1
        self._update_mastery()
        self.next_review = (today + dt.timedelta(days=REVIEW_INTERVAL_DAYS[self.mastery])).isoformat()

    def _update_mastery(self) -> None:
        pct = self.accuracy
        if self.correct >= 5 and pct >= 80:
            self.mastery = Mastery.MASTERED
        elif self.correct >= 3 and pct >= 60:
            self.mastery = Mastery.IN_PROGRESS
        elif self.seen > 0 or (self.correct + self.incorrect) > 0:
            self.mastery = Mastery.LEARNING


@dataclass(frozen=True)
class SessionRecord:
    game_type: GameType
    played_on: str
    duration_seconds: int
    correct_count: int
    total_count: int
    score: int

    @property
    def accuracy(self) -> float:
        if self.total_count <= 0:
            return 0.0
        return self.correct_count / self.total_count * 100


# =========================================================
# In-memory tracker (the app keeps it in st.session_state)
# =========================================================
@dataclass
class ProgressTracker:
    sessions: List[SessionRecord] = field(default_factory=list)
    elements: Dict[int, LearningState] = field(default_factory=dict)
    total_answers: int = 0
    total_correct: int = 0
    study_seconds: int = 0
    current_streak: int = 0
    best_streak: int = 0
    last_study_day: Optional[str] = None
    today: Callable[[], dt.date] = field(default=dt.date.today, repr=False, compare=False)

    # ---- sink interface
    def record_session(self, game_type, duration_seconds, correct_count, total_count, score) -> None:
        rec = SessionRecord(
            game_type=GameType(game_type),
            played_on=self.today().isoformat(),
            duration_seconds=int(duration_seconds),
            correct_count=int(correct_count),
            total_count=int(total_count),
            score=int(score),
        )
        self.sessions.append(rec)
        self.study_seconds += rec.duration_seconds
        self.touch_study_day()
        logger.info(
            "Recorded %s session: %d/%d correct, score=%d",
            rec.game_type.value, rec.correct_count, rec.total_count, rec.score,
        )

    def record_answer(self, element_id: int, was_correct: bool) -> None:
        state = self.elements.setdefault(int(element_id), LearningState())
        state.record_answer(bool(was_correct), self.today())
        self.total_answers += 1
        if was_correct:
            self.total_correct += 1

    # ---- extras
    def record_view(self, element_id: int) -> None:
        self.elements.setdefault(int(element_id), LearningState()).record_view(self.today())

    @property
    def accuracy(self) -> float:
        if self.total_answers == 0:
            return 0.0
        return self.total_correct / self.total_answers * 100

    @property
    def study_minutes(self) -> int:
        return self.study_seconds // 60

    def mastery_of(self, element_id: int) -> Mastery:
        state = self.elements.get(element_id)
        return state.mastery if state else Mastery.NEW

    def due_for_review(self, on: Optional[dt.date] = None) -> List[int]:
        day = (on or self.today()).isoformat()
        return sorted(
            eid for eid, s in self.elements.items()
            if s.next_review is not None and s.next_review <= day
        )

    def session_history(self, game_type: Optional[GameType] = None, limit: Optional[int] = None) -> List[SessionRecord]:
        out = [s for s in self.sessions if game_type is None or s.game_type == game_type]
        out = list(reversed(out))  # newest first
        return out[:limit] if limit is not None else out

    def stats_by_game(self) -> Dict[GameType, Tuple[int, float]]:
        stats: Dict[GameType, Tuple[int, float]] = {}
        for gt in GameType:
            recs = [s for s in self.sessions if s.game_type == gt]
            mean = sum(r.accuracy for r in recs) / len(recs) if recs else 0.0
            stats[gt] = (len(recs), mean)
        return stats

    def mastery_counts(self) -> Dict[Mastery, int]:
        counts = {m: 0 for m in Mastery}
        for s in self.elements.values():
            counts[s.mastery] += 1
        return counts

    def touch_study_day(self) -> None:
        today = self.today()
        if self.last_study_day is None:
            self.current_streak = 1
        else:
            gap = (today - dt.date.fromisoformat(self.last_study_day)).days
            if gap == 0:
                return
            self.current_streak = self.current_streak + 1 if gap == 1 else 1
        self.best_streak = max(self.best_streak, self.current_streak)
        self.last_study_day = today.isoformat()

    def reset(self) -> None:
        self.sessions.clear()
        self.elements.clear()
        self.total_answers = self.total_correct = self.study_seconds = 0
        self.current_streak = self.best_streak = 0
        self.last_study_day = None

    # ---- plain-dict round trip
    def to_dict(self) -> dict:
        return {
            "sessions": [dict(asdict(s), game_type=s.game_type.value) for s in self.sessions],
            "elements": {
                str(k): dict(asdict(v), mastery=v.mastery.value) for k, v in self.elements.items()
            },
            "total_answers": self.total_answers,
            "total_correct": self.total_correct,
            "study_seconds": self.study_seconds,
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
            "last_study_day": self.last_study_day,
        }

    @classmethod
    def from_dict(cls, data: dict, today: Callable[[], dt.date] = dt.date.today) -> "ProgressTracker":
        sessions = [
            SessionRecord(**dict(s, game_type=GameType(s["game_type"])))
            for s in data.get("sessions", [])
        ]
        elements = {
            int(k): LearningState(**dict(v, mastery=Mastery(v.get("mastery", "new"))))
            for k, v in data.get("elements", {}).items()
        }
        return cls(
            sessions=sessions,
            elements=elements,
            total_answers=int(data.get("total_answers", 0)),
            total_correct=int(data.get("total_correct", 0)),
            study_seconds=int(data.get("study_seconds", 0)),
            current_streak=int(data.get("current_streak", 0)),
            best_streak=int(data.get("best_streak", 0)),
            last_study_day=data.get("last_study_day"),
            today=today,
        )
