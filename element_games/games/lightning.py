from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..catalog import ElementRecord, Family
from ..scheduler import ScheduledEvent
from ..scoring import lightning_points
from ..session import Countdown, EndReason, GameSession, GameType, Playing, Reviewing

logger = logging.getLogger(__name__)

TRUE = "True"
FALSE = "False"

GAME_SECONDS = 60
COUNTDOWN_FROM = 3
FEEDBACK_SECONDS = 0.5
DEFAULT_QUESTION_COUNT = 100

# Families offered as the wrong answer in "X is a <family>" prompts
FAMILY_DECOYS = (
    Family.ALKALI_METAL,
    Family.NONMETAL,
    Family.NOBLE_GAS,
    Family.HALOGEN,
    Family.TRANSITION_METAL,
)


class LightningQuestionType(str, Enum):
    SYMBOL_TRUE = "symbol_true"
    IS_METAL = "is_metal"
    IS_GAS = "is_gas"
    GROUP_NUMBER = "group_number"
    PERIOD_NUMBER = "period_number"
    SYMBOL_MATCH = "symbol_match"
    FAMILY_MATCH = "family_match"

    @property
    def base_points(self) -> int:
        return _BASE_POINTS[self]


_BASE_POINTS = {
    LightningQuestionType.SYMBOL_TRUE: 10,
    LightningQuestionType.IS_METAL: 15,
    LightningQuestionType.IS_GAS: 15,
    LightningQuestionType.GROUP_NUMBER: 20,
    LightningQuestionType.PERIOD_NUMBER: 20,
    LightningQuestionType.SYMBOL_MATCH: 10,
    LightningQuestionType.FAMILY_MATCH: 15,
}


@dataclass(frozen=True)
class LightningQuestion:
    prompt: str
    correct_answer: str
    question_type: LightningQuestionType
    element_id: int
    options: Optional[Tuple[str, ...]] = None  # None for true/false
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def base_points(self) -> int:
        return self.question_type.base_points

    @property
    def is_true_false(self) -> bool:
        return self.options is None

    @property
    def choices(self) -> Tuple[str, ...]:
        return (TRUE, FALSE) if self.options is None else self.options


# =========================================================
# Generator
# =========================================================
def _article(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" else "a"


def _verdict(flag: bool) -> str:
    return TRUE if flag else FALSE


def _symbol_choice(element: ElementRecord, elements: Sequence[ElementRecord], rng: random.Random, name: str) -> LightningQuestion:
    wrong = [e.symbol for e in elements if e.atomic_number != element.atomic_number]
    options = [element.symbol] + rng.sample(wrong, min(2, len(wrong)))
    rng.shuffle(options)
    return LightningQuestion(
        prompt=f"What is the symbol of {name}?",
        correct_answer=element.symbol,
        question_type=LightningQuestionType.SYMBOL_MATCH,
        element_id=element.atomic_number,
        options=tuple(options),
    )


def _build(
    qtype: LightningQuestionType,
    element: ElementRecord,
    elements: Sequence[ElementRecord],
    rng: random.Random,
    locale: str,
) -> LightningQuestion:
    name = element.localized_name(locale)
    T = LightningQuestionType

    if qtype is T.SYMBOL_MATCH or (qtype is T.GROUP_NUMBER and element.group is None):
        return _symbol_choice(element, elements, rng, name)

    if qtype is T.IS_METAL:
        prompt, truth = f"{name} is a metal", element.is_metal
    elif qtype is T.IS_GAS:
        prompt, truth = f"{name} is a gas at 25°C", element.state.value == "gas"
    elif qtype is T.SYMBOL_TRUE:
        wrong = [e.symbol for e in elements if e.symbol != element.symbol]
        truth = rng.random() < 0.5 or not wrong
        shown = element.symbol if truth else rng.choice(wrong)
        prompt = f"The symbol of {name} is '{shown}'"
    elif qtype is T.GROUP_NUMBER:
        truth = rng.random() < 0.5
        shown = element.group if truth else rng.choice([g for g in range(1, 19) if g != element.group])
        prompt = f"{name} is in group {shown}"
    elif qtype is T.PERIOD_NUMBER:
        truth = rng.random() < 0.5
        shown = element.period if truth else rng.choice([p for p in range(1, 8) if p != element.period])
        prompt = f"{name} is in period {shown}"
    else:
        truth = rng.random() < 0.5
        family = element.family if truth else rng.choice([f for f in FAMILY_DECOYS if f != element.family])
        label = family.short_label
        prompt = f"{name} is {_article(label)} {label}"

    return LightningQuestion(
        prompt=prompt,
        correct_answer=_verdict(truth),
        question_type=qtype,
        element_id=element.atomic_number,
    )


def generate_lightning_questions(
    elements: Sequence[ElementRecord],
    count: int = DEFAULT_QUESTION_COUNT,
    rng: Optional[random.Random] = None,
    locale: str = "en",
) -> List[LightningQuestion]:
    """Random element + random type per question; elements may repeat."""
    rng = rng or random.Random()
    if not elements:
        return []
    types = list(LightningQuestionType)
    questions = [_build(rng.choice(types), rng.choice(elements), elements, rng, locale) for _ in range(count)]
    rng.shuffle(questions)
    return questions


# =========================================================
# Session
# =========================================================
class LightningSession(GameSession):
    """
    Sixty-second challenge. `start()` enters a 3-2-1 countdown; every step of
    the countdown, the per-second game clock and the 0.5 s feedback pause are
    scheduler events fired by `tick()`.
    """

    game_type = GameType.LIGHTNING

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.questions: List[LightningQuestion] = []
        self.game_seconds = GAME_SECONDS
        self.time_remaining = GAME_SECONDS
        self._timer: Optional[ScheduledEvent] = None

    def start(
        self,
        seconds: int = GAME_SECONDS,
        questions: Optional[Sequence[LightningQuestion]] = None,
        countdown: int = COUNTDOWN_FROM,
        locale: str = "en",
    ) -> List[LightningQuestion]:
        if questions is None:
            questions = generate_lightning_questions(
                self.catalog.all_elements(), DEFAULT_QUESTION_COUNT, rng=self.rng, locale=locale
            )
        self.questions = list(questions)
        self.game_seconds = seconds
        self.time_remaining = seconds
        if countdown > 0:
            self._begin(Countdown(remaining=countdown))
            self._timer = self.scheduler.call_every(1.0, self._countdown_step, name="lightning-countdown")
        else:
            self._begin()
            self._start_playing()
        return self.questions

    def _countdown_step(self) -> None:
        if not isinstance(self.state, Countdown):
            return
        remaining = self.state.remaining - 1
        if remaining > 0:
            self.state = Countdown(remaining=remaining)
            return
        self.scheduler.cancel(self._timer)
        self._start_playing()

    def _start_playing(self) -> None:
        self.state = Playing()
        self._start_clock()
        self._timer = self.scheduler.call_every(1.0, self._second_elapsed, name="lightning-clock")
        logger.debug("lightning: clock running, %ds", self.game_seconds)

    def _second_elapsed(self) -> None:
        if self.time_remaining > 0:
            self.time_remaining -= 1
        if self.time_remaining <= 0:
            self.finish(EndReason.TIME_UP)

    @property
    def current_question(self) -> Optional[LightningQuestion]:
        if not self.is_playing or self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]

    def answer(self, answer: str) -> Optional[bool]:
        question = self.current_question
        if question is None:
            return self._ignore("answer")

        seconds = self._latency()
        correct = answer == question.correct_answer
        points = lightning_points(question.base_points, seconds, self.streak + 1) if correct else 0
        self._register(self.cursor, question.element_id, correct, seconds, points)
        self.state = Reviewing(correct=correct)
        self.scheduler.call_later(FEEDBACK_SECONDS, self._advance, name="lightning-feedback")
        return correct

    def _advance(self) -> None:
        if not self.is_reviewing:
            return
        if self.cursor >= len(self.questions) - 1:
            self.finish(EndReason.EXHAUSTED)
            return
        self.cursor += 1
        self.state = Playing()
        self._mark_item_start()

    @property
    def performance_level(self) -> str:
        c = self.correct_count
        if c >= 40:
            return "Impressive!"
        if c >= 30:
            return "Excellent!"
        if c >= 20:
            return "Very good!"
        if c >= 10:
            return "Good job!"
        return "Keep practicing!"

    def _details(self) -> Dict[str, object]:
        return {
            "time_remaining": self.time_remaining,
            "questions_seen": min(self.cursor + 1, len(self.questions)),
        }
