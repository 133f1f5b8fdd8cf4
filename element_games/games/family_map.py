from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..catalog import ElementRecord, Family
from ..errors import InsufficientCatalogError
from ..scoring import graded_score
from ..session import EndReason, GameSession, GameType, Playing, Reviewing

logger = logging.getLogger(__name__)

FEEDBACK_SECONDS = 1.5

FAMILY_HINTS = {
    Family.ALKALI_METAL: "Group 1: very reactive, one valence electron",
    Family.ALKALINE_EARTH_METAL: "Group 2: reactive, two valence electrons",
    Family.TRANSITION_METAL: "Groups 3-12: hard conductors with several oxidation states",
    Family.POST_TRANSITION_METAL: "Softer metals of the p-block",
    Family.LANTHANIDE: "Rare-earth elements of period 6",
    Family.ACTINIDE: "Radioactive elements of period 7",
    Family.METALLOID: "Between metals and nonmetals",
    Family.NONMETAL: "Poor conductors, often gases",
    Family.HALOGEN: "Group 17: form salts with metals",
    Family.NOBLE_GAS: "Group 18: full valence shell, barely reactive",
}


class FamilyMapDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def element_count(self) -> int:
        return {"easy": 10, "medium": 20, "hard": 30}[self.value]

    @property
    def multiplier(self) -> float:
        return {"easy": 1.0, "medium": 1.5, "hard": 2.0}[self.value]


@dataclass
class FamilyMapItem:
    element: ElementRecord
    classified: bool = False
    classified_as: Optional[Family] = None

    @property
    def correct_family(self) -> Family:
        return self.element.family

    @property
    def is_correct(self) -> bool:
        return self.classified_as == self.element.family


class FamilyMapSession(GameSession):
    """Classify each element into its family; skipping counts as a miss."""

    game_type = GameType.FAMILY_MAP

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.difficulty = FamilyMapDifficulty.EASY
        self.items: List[FamilyMapItem] = []

    def start(self, difficulty: FamilyMapDifficulty = FamilyMapDifficulty.EASY) -> List[FamilyMapItem]:
        elements = self.catalog.all_elements()
        if not elements:
            raise InsufficientCatalogError(1, 0, what="the family map")
        self.difficulty = FamilyMapDifficulty(difficulty)
        chosen = self.rng.sample(elements, min(self.difficulty.element_count, len(elements)))
        self.items = [FamilyMapItem(element=e) for e in chosen]
        self._begin()
        return self.items

    @property
    def current_item(self) -> Optional[FamilyMapItem]:
        if not self.is_active or self.cursor >= len(self.items):
            return None
        return self.items[self.cursor]

    @property
    def progress(self) -> float:
        if not self.items:
            return 0.0
        return self.cursor / len(self.items)

    def classify(self, family: Family) -> Optional[bool]:
        item = self.current_item
        if item is None or not self.is_playing:
            return self._ignore("classify")
        item.classified = True
        item.classified_as = Family(family)
        correct = item.is_correct
        self._register(self.cursor, item.element.atomic_number, correct, self._latency())
        self.state = Reviewing(correct=correct)
        self.scheduler.call_later(FEEDBACK_SECONDS, self._advance, name="family-feedback")
        return correct

    def skip(self) -> bool:
        item = self.current_item
        if item is None or not self.is_playing:
            self._ignore("skip")
            return False
        item.classified = True
        self._register(self.cursor, item.element.atomic_number, False, self._latency())
        self._advance()
        return True

    def _advance(self) -> None:
        if self.cursor >= len(self.items) - 1:
            self.finish(EndReason.FINISHED)
            return
        self.cursor += 1
        self.state = Playing()
        self._mark_item_start()

    def family_stats(self) -> Dict[Family, Tuple[int, int]]:
        """(correct, total) per true family of the classified elements."""
        stats: Dict[Family, Tuple[int, int]] = {}
        for item in self.items:
            if not item.classified:
                continue
            correct, total = stats.get(item.correct_family, (0, 0))
            stats[item.correct_family] = (correct + int(item.is_correct), total + 1)
        return stats

    @property
    def accuracy(self) -> float:
        if not self.items:
            return 0.0
        return self.correct_count / len(self.items) * 100

    def _score(self) -> int:
        return graded_score(
            self.correct_count,
            len(self.items),
            self.average_response_seconds,
            self.difficulty.multiplier,
        )

    def _total_count(self) -> int:
        return len(self.items)

    def _details(self) -> Dict[str, object]:
        return {
            "difficulty": self.difficulty.value,
            "families": {f.value: list(v) for f, v in self.family_stats().items()},
        }
