from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..catalog import ElementRecord
from ..errors import InsufficientCatalogError
from ..scoring import (
    DEFAULT_BANDS,
    AccuracyTier,
    ToleranceBands,
    accuracy_score,
    accuracy_tier,
    relative_error,
)
from ..session import EndReason, GameSession, GameType, Playing, Reviewing

logger = logging.getLogger(__name__)

# H, C, N, O, Na, Fe, Cu, Ag, Au
COMMON_ELEMENT_IDS = (1, 6, 7, 8, 11, 26, 29, 47, 79)


# =========================================================
# Property types
# =========================================================
@dataclass(frozen=True)
class PropertySpec:
    label: str
    unit: str
    attribute: str
    min_value: float
    max_value: float
    step: float
    description: str
    bands: ToleranceBands = DEFAULT_BANDS


class PropertyType(str, Enum):
    ATOMIC_MASS = "atomic_mass"
    MELTING_POINT = "melting_point"
    BOILING_POINT = "boiling_point"
    DENSITY = "density"
    ELECTRONEGATIVITY = "electronegativity"
    ATOMIC_RADIUS = "atomic_radius"
    IONIZATION_ENERGY = "ionization_energy"

    @property
    def spec(self) -> PropertySpec:
        return PROPERTY_SPECS[self]

    @property
    def label(self) -> str:
        return self.spec.label

    @property
    def unit(self) -> str:
        return self.spec.unit

    @property
    def min_value(self) -> float:
        return self.spec.min_value

    @property
    def max_value(self) -> float:
        return self.spec.max_value

    @property
    def step(self) -> float:
        return self.spec.step

    @property
    def fallback(self) -> float:
        return (self.spec.min_value + self.spec.max_value) / 2

    def accepts(self, value: float) -> bool:
        return self.spec.min_value <= value <= self.spec.max_value

    def value_of(self, element: ElementRecord) -> Optional[float]:
        return getattr(element, self.spec.attribute)


PROPERTY_SPECS: Dict[PropertyType, PropertySpec] = {
    PropertyType.ATOMIC_MASS: PropertySpec(
        "Atomic Mass", "u", "atomic_mass", 1.0, 300.0, 1.0,
        "Average mass of one atom of the element",
    ),
    PropertyType.MELTING_POINT: PropertySpec(
        "Melting Point", "°C", "melting_point_c", -300.0, 4000.0, 10.0,
        "Temperature at which the element melts",
    ),
    PropertyType.BOILING_POINT: PropertySpec(
        "Boiling Point", "°C", "boiling_point_c", -300.0, 6000.0, 10.0,
        "Temperature at which the element boils",
    ),
    PropertyType.DENSITY: PropertySpec(
        "Density", "g/cm³", "density", 0.0, 25.0, 0.1,
        "Mass per unit volume",
    ),
    PropertyType.ELECTRONEGATIVITY: PropertySpec(
        "Electronegativity", "", "electronegativity", 0.5, 4.0, 0.1,
        "Tendency to attract electrons (Pauling scale)",
    ),
    PropertyType.ATOMIC_RADIUS: PropertySpec(
        "Atomic Radius", "pm", "atomic_radius_pm", 30.0, 300.0, 5.0,
        "Distance from the nucleus to the outermost electron",
    ),
    PropertyType.IONIZATION_ENERGY: PropertySpec(
        "Ionization Energy", "kJ/mol", "ionization_energy", 300.0, 2500.0, 10.0,
        "Energy needed to remove one electron",
    ),
}


# =========================================================
# Scoring
# =========================================================
def percent_error(guess: float, truth: float, property_type: PropertyType) -> float:
    """Relative error, with the property's step as the smallest denominator."""
    return relative_error(guess, truth, floor=property_type.step)


@dataclass
class PropertyQuestion:
    element: ElementRecord
    property_type: PropertyType
    correct_value: float
    guess: Optional[float] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def for_element(cls, element: ElementRecord, property_type: PropertyType) -> "PropertyQuestion":
        value = property_type.value_of(element)
        return cls(
            element=element,
            property_type=property_type,
            correct_value=property_type.fallback if value is None else value,
        )

    @property
    def answered(self) -> bool:
        return self.guess is not None

    @property
    def error(self) -> Optional[float]:
        if self.guess is None:
            return None
        return percent_error(self.guess, self.correct_value, self.property_type)

    @property
    def score(self) -> int:
        return accuracy_score(self.error, self.property_type.spec.bands)

    @property
    def tier(self) -> AccuracyTier:
        return accuracy_tier(self.error, self.property_type.spec.bands)

    @property
    def prompt(self) -> str:
        unit = f" ({self.property_type.unit})" if self.property_type.unit else ""
        return f"What is the {self.property_type.label.lower()} of {self.element.name}{unit}?"


# =========================================================
# Session
# =========================================================
class PropertyDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def question_count(self) -> int:
        return {"easy": 5, "medium": 10, "hard": 15}[self.value]


def generate_property_questions(
    elements: Sequence[ElementRecord],
    difficulty: PropertyDifficulty,
    rng,
) -> List[PropertyQuestion]:
    pool = list(elements)
    if difficulty is PropertyDifficulty.EASY:
        common = [e for e in pool if e.atomic_number in COMMON_ELEMENT_IDS]
        pool = common or pool
    if not pool:
        raise InsufficientCatalogError(1, 0, what="property guessing")
    rng.shuffle(pool)
    # A property nobody in the catalog has would only ever ask for its fallback
    types = [t for t in PropertyType if any(t.value_of(e) is not None for e in pool)] or list(PropertyType)
    rng.shuffle(types)
    questions = []
    for i in range(difficulty.question_count):
        element = pool[i % len(pool)]
        rotated = types[i % len(types):] + types[:i % len(types)]
        property_type = next((t for t in rotated if t.value_of(element) is not None), rotated[0])
        questions.append(PropertyQuestion.for_element(element, property_type))
    return questions


class PropertyGuessSession(GameSession):
    game_type = GameType.PROPERTY_GUESS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.difficulty = PropertyDifficulty.EASY
        self.questions: List[PropertyQuestion] = []

    def start(self, difficulty: PropertyDifficulty = PropertyDifficulty.EASY) -> List[PropertyQuestion]:
        self.difficulty = PropertyDifficulty(difficulty)
        self.questions = generate_property_questions(self.catalog.all_elements(), self.difficulty, self.rng)
        self._begin()
        return self.questions

    @property
    def current_question(self) -> Optional[PropertyQuestion]:
        if not self.is_active or self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]

    def submit_guess(self, value: float) -> Optional[PropertyQuestion]:
        question = self.current_question
        if question is None or not self.is_playing:
            return self._ignore("submit_guess")
        if not question.property_type.accepts(value):
            logger.debug("property_guess: %s outside %s bounds", value, question.property_type.value)
            return None

        question.guess = float(value)
        tier = question.tier
        self._register(
            self.cursor,
            question.element.atomic_number,
            tier.counts_as_correct,
            self._latency(),
            question.score,
        )
        self.state = Reviewing(correct=tier.counts_as_correct)
        return question

    def next(self) -> bool:
        if not self.is_reviewing:
            self._ignore("next")
            return False
        if self.cursor >= len(self.questions) - 1:
            self.finish(EndReason.FINISHED)
            return True
        self.cursor += 1
        self.state = Playing()
        self._mark_item_start()
        return True

    # ---- stats
    def tier_counts(self) -> Dict[AccuracyTier, int]:
        counts = {t: 0 for t in AccuracyTier if t is not AccuracyTier.NONE}
        for q in self.questions:
            if q.answered:
                counts[q.tier] += 1
        return counts

    @property
    def average_error(self) -> float:
        errors = [q.error for q in self.questions if q.answered]
        return sum(errors) / len(errors) * 100 if errors else 0.0

    def _total_count(self) -> int:
        return len(self.questions)

    def _details(self) -> Dict[str, object]:
        return {
            "difficulty": self.difficulty.value,
            "tiers": {t.value: n for t, n in self.tier_counts().items()},
        }
