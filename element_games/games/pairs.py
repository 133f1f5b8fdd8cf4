from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..catalog import ElementRecord
from ..errors import InsufficientCatalogError
from ..scoring import pairs_score
from ..session import EndReason, GameSession, GameType, Playing, Reviewing

logger = logging.getLogger(__name__)

MATCH_RESOLVE_SECONDS = 0.5
MISMATCH_RESOLVE_SECONDS = 1.0


class PairsCardKind(str, Enum):
    SYMBOL = "symbol"
    ATOMIC_NUMBER = "atomic_number"


class PairsDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def pair_count(self) -> int:
        return {"easy": 6, "medium": 10, "hard": 15}[self.value]

    @property
    def grid_columns(self) -> int:
        return {"easy": 3, "medium": 4, "hard": 5}[self.value]

    @property
    def multiplier(self) -> float:
        return {"easy": 1.0, "medium": 1.5, "hard": 2.0}[self.value]


@dataclass
class PairsCard:
    element_id: int
    element_name: str
    kind: PairsCardKind
    text: str
    flipped: bool = False
    matched: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def matches(self, other: "PairsCard") -> bool:
        # Same element, opposite faces
        return self.element_id == other.element_id and self.kind != other.kind


def generate_pairs_deck(
    elements: Sequence[ElementRecord],
    pair_count: int,
    rng: Optional[random.Random] = None,
) -> List[PairsCard]:
    """One symbol card and one atomic-number card per element, shuffled."""
    if len(elements) < pair_count:
        raise InsufficientCatalogError(pair_count, len(elements), what="the pairs game")
    rng = rng or random.Random()
    cards: List[PairsCard] = []
    for e in rng.sample(list(elements), pair_count):
        cards.append(PairsCard(e.atomic_number, e.name, PairsCardKind.SYMBOL, e.symbol))
        cards.append(PairsCard(e.atomic_number, e.name, PairsCardKind.ATOMIC_NUMBER, str(e.atomic_number)))
    rng.shuffle(cards)
    return cards


class PairsSession(GameSession):
    """
    Memory game. Every second flip is a move: a match resolves after 0.5 s,
    a mismatch flips both cards back after 1.0 s. Flips are ignored while a
    move is resolving.
    """

    game_type = GameType.PAIRS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.difficulty = PairsDifficulty.EASY
        self.cards: List[PairsCard] = []
        self.face_up: List[int] = []
        self.matched_pairs = 0
        self.moves = 0

    def start(self, difficulty: PairsDifficulty = PairsDifficulty.EASY) -> List[PairsCard]:
        self.difficulty = PairsDifficulty(difficulty)
        self.cards = generate_pairs_deck(self.catalog.all_elements(), self.difficulty.pair_count, self.rng)
        self.face_up = []
        self.matched_pairs = 0
        self.moves = 0
        self._begin()
        return self.cards

    @property
    def total_pairs(self) -> int:
        return len(self.cards) // 2

    @property
    def is_resolving(self) -> bool:
        return self.is_reviewing

    @property
    def progress(self) -> float:
        if not self.total_pairs:
            return 0.0
        return self.matched_pairs / self.total_pairs

    @property
    def efficiency(self) -> float:
        if not self.moves or not self.total_pairs:
            return 0.0
        return min(self.total_pairs / self.moves * 100, 100.0)

    def flip(self, position: int) -> bool:
        if not self.is_playing or not 0 <= position < len(self.cards):
            self._ignore("flip")
            return False
        card = self.cards[position]
        if card.matched or position in self.face_up:
            self._ignore("flip")
            return False

        card.flipped = True
        self.face_up.append(position)
        if len(self.face_up) == 2:
            self._resolve_move()
        return True

    def _resolve_move(self) -> None:
        first, second = (self.cards[i] for i in self.face_up)
        self.moves += 1
        matched = first.matches(second)
        self._register(self.moves - 1, first.element_id, matched, self._latency())
        self.state = Reviewing(correct=matched)
        if matched:
            self.scheduler.call_later(MATCH_RESOLVE_SECONDS, self._settle_match, name="pairs-match")
        else:
            self.scheduler.call_later(MISMATCH_RESOLVE_SECONDS, self._settle_mismatch, name="pairs-mismatch")

    def _settle_match(self) -> None:
        for i in self.face_up:
            self.cards[i].matched = True
        self.face_up = []
        self.matched_pairs += 1
        if self.matched_pairs == self.total_pairs:
            self.finish(EndReason.FINISHED)
            return
        self.state = Playing()
        self._mark_item_start()

    def _settle_mismatch(self) -> None:
        for i in self.face_up:
            self.cards[i].flipped = False
        self.face_up = []
        self.state = Playing()
        self._mark_item_start()

    # ---- summary hooks
    def _score(self) -> int:
        return pairs_score(self.correct_count, self.moves, self.average_response_seconds, self.difficulty.multiplier)

    def _total_count(self) -> int:
        return self.total_pairs

    def _final_answers(self) -> List[Tuple[int, bool]]:
        # Matches count from the move, not from the 0.5 s settle
        seen = []
        for attempt in self.history:
            if attempt.correct and attempt.element_id not in seen:
                seen.append(attempt.element_id)
        return [(eid, True) for eid in seen]

    def _details(self) -> Dict[str, object]:
        return {"difficulty": self.difficulty.value, "moves": self.moves, "matched_pairs": self.matched_pairs}
