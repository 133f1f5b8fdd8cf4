from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..catalog import ElementRecord
from ..errors import InsufficientCatalogError
from ..scheduler import ScheduledEvent
from ..session import Attempt, EndReason, GameSession, GameType

logger = logging.getLogger(__name__)

CARD_SIZE = 5
CARD_CELLS = CARD_SIZE * CARD_SIZE


# =========================================================
# Patterns
# =========================================================
class WinPattern(str, Enum):
    ROW_1 = "row_1"
    ROW_2 = "row_2"
    ROW_3 = "row_3"
    ROW_4 = "row_4"
    ROW_5 = "row_5"
    COLUMN_1 = "column_1"
    COLUMN_2 = "column_2"
    COLUMN_3 = "column_3"
    COLUMN_4 = "column_4"
    COLUMN_5 = "column_5"
    DIAGONAL_DOWN = "diagonal_down"  # top-left to bottom-right
    DIAGONAL_UP = "diagonal_up"  # top-right to bottom-left
    FULL_CARD = "full_card"

    @property
    def points(self) -> int:
        if self is WinPattern.FULL_CARD:
            return 500
        if self in (WinPattern.DIAGONAL_DOWN, WinPattern.DIAGONAL_UP):
            return 150
        return 100

    @property
    def label(self) -> str:
        if self is WinPattern.FULL_CARD:
            return "BINGO! (full card)"
        if self is WinPattern.DIAGONAL_DOWN:
            return "Diagonal \\"
        if self is WinPattern.DIAGONAL_UP:
            return "Diagonal /"
        kind, n = self.value.split("_")
        return f"{kind.capitalize()} {n}"


ROWS = (WinPattern.ROW_1, WinPattern.ROW_2, WinPattern.ROW_3, WinPattern.ROW_4, WinPattern.ROW_5)
COLUMNS = (WinPattern.COLUMN_1, WinPattern.COLUMN_2, WinPattern.COLUMN_3, WinPattern.COLUMN_4, WinPattern.COLUMN_5)


def pattern_points(patterns: Iterable[WinPattern]) -> int:
    return sum(p.points for p in patterns)


# =========================================================
# Card
# =========================================================
@dataclass
class BingoCell:
    element_id: int
    symbol: str
    name: str
    row: int
    col: int
    marked: bool = False
    called: bool = False


class BingoCard:
    """5x5 grid of distinct elements, row-major."""

    def __init__(self, cells: List[List[BingoCell]]):
        if len(cells) != CARD_SIZE or any(len(r) != CARD_SIZE for r in cells):
            raise ValueError("a bingo card is a 5x5 grid")
        self.cells = cells

    @classmethod
    def deal(cls, elements: Sequence[ElementRecord], rng: Optional[random.Random] = None) -> "BingoCard":
        if len(elements) < CARD_CELLS:
            raise InsufficientCatalogError(CARD_CELLS, len(elements), what="a bingo card")
        chosen = (rng or random.Random()).sample(list(elements), CARD_CELLS)
        grid = [
            [
                BingoCell(element_id=e.atomic_number, symbol=e.symbol, name=e.name, row=r, col=c)
                for c, e in enumerate(chosen[r * CARD_SIZE:(r + 1) * CARD_SIZE])
            ]
            for r in range(CARD_SIZE)
        ]
        return cls(grid)

    def all_cells(self) -> List[BingoCell]:
        return [cell for row in self.cells for cell in row]

    def cell_at(self, row: int, col: int) -> BingoCell:
        return self.cells[row][col]

    @property
    def element_ids(self) -> List[int]:
        return [c.element_id for c in self.all_cells()]

    @property
    def marked_count(self) -> int:
        return sum(1 for c in self.all_cells() if c.marked)

    def find(self, element_id: int) -> Optional[BingoCell]:
        for cell in self.all_cells():
            if cell.element_id == element_id:
                return cell
        return None

    def has_element(self, element_id: int) -> bool:
        return self.find(element_id) is not None

    def mark(self, element_id: int) -> bool:
        """Mark the cell holding `element_id`; False when it is not on the card."""
        cell = self.find(element_id)
        if cell is None:
            return False
        cell.marked = True
        cell.called = True
        return True


def detect_wins(card: BingoCard, already_achieved: Iterable[WinPattern] = ()) -> FrozenSet[WinPattern]:
    """Every pattern currently complete on `card`, minus `already_achieved`."""
    grid = card.cells
    found = set()
    for r in range(CARD_SIZE):
        if all(cell.marked for cell in grid[r]):
            found.add(ROWS[r])
    for c in range(CARD_SIZE):
        if all(grid[r][c].marked for r in range(CARD_SIZE)):
            found.add(COLUMNS[c])
    if all(grid[i][i].marked for i in range(CARD_SIZE)):
        found.add(WinPattern.DIAGONAL_DOWN)
    if all(grid[i][CARD_SIZE - 1 - i].marked for i in range(CARD_SIZE)):
        found.add(WinPattern.DIAGONAL_UP)
    if all(cell.marked for cell in card.all_cells()):
        found.add(WinPattern.FULL_CARD)
    return frozenset(found - set(already_achieved))


# =========================================================
# Session settings
# =========================================================
class BingoMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"

    @property
    def description(self) -> str:
        if self is BingoMode.AUTO:
            return "Elements are called automatically"
        return "You decide when to call the next one"


class BingoSpeed(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"

    @property
    def interval(self) -> float:
        return {"slow": 4.0, "normal": 2.5, "fast": 1.5}[self.value]


class BingoGoal(str, Enum):
    FIRST_PATTERN = "first_pattern"
    FULL_CARD = "full_card"


# =========================================================
# Session
# =========================================================
class BingoSession(GameSession):
    game_type = GameType.BINGO

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.card: Optional[BingoCard] = None
        self.mode = BingoMode.AUTO
        self.speed = BingoSpeed.NORMAL
        self.goal = BingoGoal.FIRST_PATTERN
        self.remaining: List[ElementRecord] = []
        self.called: List[ElementRecord] = []
        self.achieved: List[WinPattern] = []
        self.is_paused = False
        self._call_timer: Optional[ScheduledEvent] = None

    def start(
        self,
        mode: BingoMode = BingoMode.AUTO,
        speed: BingoSpeed = BingoSpeed.NORMAL,
        goal: BingoGoal = BingoGoal.FIRST_PATTERN,
    ) -> BingoCard:
        elements = self.catalog.all_elements()
        card = BingoCard.deal(elements, rng=self.rng)
        order = list(elements)
        self.rng.shuffle(order)

        self.mode, self.speed, self.goal = BingoMode(mode), BingoSpeed(speed), BingoGoal(goal)
        self._begin()
        self.card = card
        self.remaining = order
        self.called = []
        self.achieved = []
        self.is_paused = False
        if self.mode is BingoMode.AUTO:
            self._schedule_calls()
        return card

    @property
    def current_called(self) -> Optional[ElementRecord]:
        return self.called[-1] if self.called else None

    def was_called(self, element_id: int) -> bool:
        return any(e.atomic_number == element_id for e in self.called)

    # ---- events
    def call_next(self) -> Optional[ElementRecord]:
        if not self.is_playing or self.is_paused or not self.remaining:
            return self._ignore("call_next")

        element = self.remaining.pop(0)
        self.called.append(element)
        if self.card.mark(element.atomic_number):
            self._record_hit(element.atomic_number)
        else:
            logger.debug("bingo: %s called, not on card", element.symbol)

        self._check_wins()
        if self.is_playing and not self.remaining:
            self.finish(EndReason.EXHAUSTED)
        return element

    def manual_mark(self, element_id: int) -> bool:
        """Mark a cell by hand; only elements already called can be marked."""
        if not self.is_playing or self.card is None or not self.was_called(element_id):
            self._ignore("manual_mark")
            return False
        cell = self.card.find(element_id)
        if cell is None:
            return False
        if not cell.marked:
            self.card.mark(element_id)
            self._record_hit(element_id)
        self._check_wins()
        return True

    def toggle_pause(self) -> bool:
        if not self.is_playing:
            self._ignore("toggle_pause")
            return self.is_paused
        self.is_paused = not self.is_paused
        if self.is_paused:
            self._pause_clock()
            self.scheduler.cancel(self._call_timer)
            self._call_timer = None
        else:
            self._resume_clock()
            if self.mode is BingoMode.AUTO:
                self._schedule_calls()
        logger.debug("bingo: paused=%s", self.is_paused)
        return self.is_paused

    # ---- internals
    def _schedule_calls(self) -> None:
        self._call_timer = self.scheduler.call_every(self.speed.interval, self._auto_call, name="bingo-call")

    def _auto_call(self) -> None:
        if self.is_playing and not self.is_paused:
            self.call_next()

    def _record_hit(self, element_id: int) -> None:
        # A hit is a correct answer; bingo has no wrong answers or streaks.
        cell = self.card.find(element_id)
        index = cell.row * CARD_SIZE + cell.col
        self.correct_count += 1
        self.history.append(Attempt(index=index, element_id=element_id, correct=True, seconds=self._latency()))
        self._mark_item_start()

    def _check_wins(self) -> None:
        new = detect_wins(self.card, self.achieved)
        if not new:
            return
        self.achieved.extend(p for p in WinPattern if p in new)
        logger.info("bingo: new patterns %s", ", ".join(p.value for p in WinPattern if p in new))
        if self.goal is BingoGoal.FIRST_PATTERN or WinPattern.FULL_CARD in new:
            self.finish(EndReason.WON)

    # ---- summary hooks
    @property
    def accuracy(self) -> float:
        if self.card is None:
            return 0.0
        return self.card.marked_count / CARD_CELLS * 100

    def _score(self) -> int:
        return pattern_points(self.achieved)

    def _total_count(self) -> int:
        return CARD_CELLS

    def _completion_patterns(self) -> Tuple[WinPattern, ...]:
        return tuple(self.achieved)

    def _details(self) -> Dict[str, object]:
        return {
            "patterns": [p.value for p in self.achieved],
            "called": len(self.called),
            "mode": self.mode.value,
            "goal": self.goal.value,
        }
