from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..catalog import ElementRecord
from ..errors import InsufficientCatalogError
from ..scoring import graded_score
from ..session import EndReason, GameSession, GameType, Playing, Reviewing

logger = logging.getLogger(__name__)

MIN_QUIZ_ELEMENTS = 4
DISTRACTOR_COUNT = 3
MAX_TRIES_PER_ELEMENT = 5


class QuizQuestionType(str, Enum):
    SYMBOL_FROM_NAME = "symbol_from_name"
    NAME_FROM_SYMBOL = "name_from_symbol"
    FAMILY_FROM_NAME = "family_from_name"
    STATE_FROM_NAME = "state_from_name"
    PERIOD_FROM_NAME = "period_from_name"
    GROUP_FROM_NAME = "group_from_name"
    ATOMIC_NUMBER_FROM_NAME = "atomic_number_from_name"
    NAME_FROM_ATOMIC_NUMBER = "name_from_atomic_number"


class QuizDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"

    @property
    def question_count(self) -> int:
        return {"easy": 10, "medium": 15, "hard": 20, "mixed": 15}[self.value]

    @property
    def multiplier(self) -> float:
        return {"easy": 1.0, "medium": 1.5, "hard": 2.0, "mixed": 1.3}[self.value]

    @property
    def question_types(self) -> Tuple[QuizQuestionType, ...]:
        T = QuizQuestionType
        if self is QuizDifficulty.EASY:
            return (T.SYMBOL_FROM_NAME, T.NAME_FROM_SYMBOL)
        if self is QuizDifficulty.MEDIUM:
            return (T.SYMBOL_FROM_NAME, T.NAME_FROM_SYMBOL, T.FAMILY_FROM_NAME, T.STATE_FROM_NAME)
        if self is QuizDifficulty.HARD:
            return (T.PERIOD_FROM_NAME, T.GROUP_FROM_NAME, T.ATOMIC_NUMBER_FROM_NAME, T.NAME_FROM_ATOMIC_NUMBER)
        return tuple(T)


@dataclass(frozen=True)
class QuizQuestion:
    prompt: str
    correct_answer: str
    options: Tuple[str, ...]
    question_type: QuizQuestionType
    element_id: int
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


# =========================================================
# Generator
# =========================================================
def _distractors(correct: str, values: Iterable[str], rng: random.Random) -> List[str]:
    # dict.fromkeys keeps first-seen order so a seeded rng gives stable output
    pool = [v for v in dict.fromkeys(values) if v != correct]
    return rng.sample(pool, min(DISTRACTOR_COUNT, len(pool)))


def _build(
    qtype: QuizQuestionType,
    element: ElementRecord,
    elements: Sequence[ElementRecord],
    rng: random.Random,
    locale: str,
) -> Optional[QuizQuestion]:
    name = element.localized_name(locale)
    others = [e for e in elements if e.atomic_number != element.atomic_number]
    T = QuizQuestionType

    if qtype is T.SYMBOL_FROM_NAME:
        prompt, answer, values = f"What is the symbol of {name}?", element.symbol, (e.symbol for e in others)
    elif qtype is T.NAME_FROM_SYMBOL:
        prompt = f"Which element has the symbol '{element.symbol}'?"
        answer, values = name, (e.localized_name(locale) for e in others)
    elif qtype is T.FAMILY_FROM_NAME:
        prompt = f"Which family does {name} belong to?"
        answer, values = element.family.label, (e.family.label for e in elements)
    elif qtype is T.STATE_FROM_NAME:
        prompt = f"What state is {name} in at 25°C?"
        answer, values = element.state.label, (e.state.label for e in elements)
    elif qtype is T.PERIOD_FROM_NAME:
        prompt = f"Which period of the periodic table is {name} in?"
        answer, values = str(element.period), (str(e.period) for e in elements)
    elif qtype is T.GROUP_FROM_NAME:
        if element.group is None:
            return None
        prompt = f"Which group of the periodic table is {name} in?"
        answer, values = str(element.group), (str(e.group) for e in elements if e.group is not None)
    elif qtype is T.ATOMIC_NUMBER_FROM_NAME:
        prompt = f"What is the atomic number of {name}?"
        answer, values = str(element.atomic_number), (str(e.atomic_number) for e in others)
    else:
        prompt = f"Which element has atomic number {element.atomic_number}?"
        answer, values = name, (e.localized_name(locale) for e in others)

    options = [answer] + _distractors(answer, values, rng)
    rng.shuffle(options)
    return QuizQuestion(
        prompt=prompt,
        correct_answer=answer,
        options=tuple(options),
        question_type=qtype,
        element_id=element.atomic_number,
    )


def generate_quiz_questions(
    elements: Sequence[ElementRecord],
    count: int,
    difficulty: QuizDifficulty = QuizDifficulty.MIXED,
    rng: Optional[random.Random] = None,
    locale: str = "en",
) -> List[QuizQuestion]:
    """
    Build up to `count` multiple-choice questions, one element per question.

    An element that cannot produce the drawn question type (group question
    for a lanthanide, say) stays available and is retried with another type,
    at most MAX_TRIES_PER_ELEMENT times.
    """
    rng = rng or random.Random()
    types = difficulty.question_types
    questions: List[QuizQuestion] = []
    used = set()
    tries: Dict[int, int] = {}

    while len(questions) < count:
        candidates = [
            e for e in elements
            if e.atomic_number not in used and tries.get(e.atomic_number, 0) < MAX_TRIES_PER_ELEMENT
        ]
        if not candidates:
            break
        element = rng.choice(candidates)
        qtype = rng.choice(types)
        tries[element.atomic_number] = tries.get(element.atomic_number, 0) + 1
        question = _build(qtype, element, elements, rng, locale)
        if question is not None:
            questions.append(question)
            used.add(element.atomic_number)

    if len(questions) < count:
        logger.warning("Only generated %d of %d %s quiz questions", len(questions), count, difficulty.value)
    rng.shuffle(questions)
    return questions


# =========================================================
# Session
# =========================================================
class QuizSession(GameSession):
    """Multiple-choice quiz; questions can be revisited and re-answered."""

    game_type = GameType.QUIZ

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.difficulty = QuizDifficulty.MIXED
        self.questions: List[QuizQuestion] = []
        self.answers: Dict[int, str] = {}
        self._first_times: Dict[int, float] = {}

    def start(
        self,
        difficulty: QuizDifficulty = QuizDifficulty.MIXED,
        count: Optional[int] = None,
        locale: str = "en",
    ) -> List[QuizQuestion]:
        elements = self.catalog.all_elements()
        if len(elements) < MIN_QUIZ_ELEMENTS:
            raise InsufficientCatalogError(MIN_QUIZ_ELEMENTS, len(elements), what="the quiz")
        self.difficulty = QuizDifficulty(difficulty)
        self.questions = generate_quiz_questions(
            elements,
            count or self.difficulty.question_count,
            self.difficulty,
            rng=self.rng,
            locale=locale,
        )
        self.answers = {}
        self._first_times = {}
        self._begin()
        return self.questions

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if not self.is_active or self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]

    @property
    def can_go_back(self) -> bool:
        return self.is_active and self.cursor > 0

    @property
    def progress(self) -> float:
        if not self.questions:
            return 0.0
        return self.cursor / len(self.questions)

    def select_answer(self, answer: str) -> Optional[bool]:
        question = self.current_question
        if question is None:
            return self._ignore("select_answer")

        index = self.cursor
        if index not in self._first_times:
            self._first_times[index] = self._latency()
        correct = answer == question.correct_answer
        self.answers[index] = answer
        self._replace(index, question.element_id, correct, self._first_times[index])
        self.state = Reviewing(correct=correct)
        return correct

    def next(self) -> bool:
        if not self.is_active or self.cursor not in self.answers:
            self._ignore("next")
            return False
        if self.cursor >= len(self.questions) - 1:
            self.finish(EndReason.FINISHED)
            return True
        self.cursor += 1
        self._show_current()
        return True

    def previous(self) -> bool:
        if not self.can_go_back:
            self._ignore("previous")
            return False
        self.cursor -= 1
        self._show_current()
        return True

    def _show_current(self) -> None:
        answer = self.answers.get(self.cursor)
        if answer is None:
            self.state = Playing()
        else:
            self.state = Reviewing(correct=answer == self.questions[self.cursor].correct_answer)
        self._mark_item_start()

    def is_option_correct(self, option: str) -> Optional[bool]:
        """Feedback for an option once the current question has been answered."""
        question = self.current_question
        if question is None or self.cursor not in self.answers:
            return None
        return option == question.correct_answer

    # ---- summary hooks
    def _score(self) -> int:
        return graded_score(
            self.correct_count,
            len(self.questions),
            self.average_response_seconds,
            self.difficulty.multiplier,
        )

    def _total_count(self) -> int:
        return len(self.questions)

    def _response_times(self) -> Iterable[float]:
        return self._first_times.values()

    def _details(self) -> Dict[str, object]:
        return {"difficulty": self.difficulty.value, "answered": len(self.answers)}
