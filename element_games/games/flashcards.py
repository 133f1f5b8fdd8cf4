from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..catalog import ElementRecord
from ..errors import InsufficientCatalogError
from ..scoring import flashcard_score
from ..session import EndReason, GameSession, GameType

logger = logging.getLogger(__name__)

DEFAULT_DECK_SIZE = 10


@dataclass(frozen=True)
class Flashcard:
    element_id: int
    front: str
    back: str


def build_deck(elements: List[ElementRecord], reverse: bool = False, locale: str = "en") -> List[Flashcard]:
    """Name on the front and symbol on the back (or the other way round)."""
    deck = []
    for e in elements:
        name = e.localized_name(locale)
        front, back = (e.symbol, name) if reverse else (name, e.symbol)
        deck.append(Flashcard(element_id=e.atomic_number, front=front, back=back))
    return deck


class FlashcardSession(GameSession):
    game_type = GameType.FLASHCARDS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cards: List[Flashcard] = []
        self.marks: Dict[int, bool] = {}
        self.is_flipped = False

    def start(self, deck_size: int = DEFAULT_DECK_SIZE, reverse: bool = False, locale: str = "en") -> List[Flashcard]:
        elements = self.catalog.all_elements()
        if not elements:
            raise InsufficientCatalogError(1, 0, what="flashcards")
        chosen = self.rng.sample(elements, min(deck_size, len(elements)))
        self.cards = build_deck(chosen, reverse=reverse, locale=locale)
        self.marks = {}
        self.is_flipped = False
        self._begin()
        return self.cards

    @property
    def current_card(self) -> Optional[Flashcard]:
        if not self.is_playing or self.cursor >= len(self.cards):
            return None
        return self.cards[self.cursor]

    @property
    def can_go_back(self) -> bool:
        return self.is_playing and self.cursor > 0

    @property
    def progress(self) -> float:
        if not self.cards:
            return 0.0
        return self.cursor / len(self.cards)

    def flip(self) -> bool:
        if self.current_card is None:
            self._ignore("flip")
            return False
        self.is_flipped = not self.is_flipped
        return self.is_flipped

    def mark_known(self) -> bool:
        return self._mark(True)

    def mark_unknown(self) -> bool:
        return self._mark(False)

    def previous(self) -> bool:
        if not self.can_go_back:
            self._ignore("previous")
            return False
        self.cursor -= 1
        self.is_flipped = False
        self._mark_item_start()
        return True

    def _mark(self, known: bool) -> bool:
        card = self.current_card
        if card is None:
            self._ignore("mark")
            return False
        self.marks[self.cursor] = known
        self._replace(self.cursor, card.element_id, known, self._latency())

        if self.cursor >= len(self.cards) - 1:
            self.finish(EndReason.FINISHED)
        else:
            self.cursor += 1
            self.is_flipped = False
            self._mark_item_start()
        return True

    def _score(self) -> int:
        return flashcard_score(self.correct_count, self.answered_count, self.average_response_seconds)

    def _details(self) -> Dict[str, object]:
        return {"deck_size": len(self.cards)}
