"""
Scoring rules shared by the mini-games.

Every function here is pure: the sessions pass in counters and timings and
store whatever comes back. Keep the tier boundaries and point tables in this
module so every game reads the same numbers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# =========================================================
# Speed bonus (one formula for every per-item game)
# =========================================================
SPEED_TARGET_SECONDS = 10.0
SPEED_POINTS_PER_SECOND = 10


def speed_bonus(average_seconds: float) -> int:
    """Points for answering faster than the 10 s target; never negative."""
    if average_seconds < 0:
        average_seconds = 0.0
    return max(0, int((SPEED_TARGET_SECONDS - average_seconds) * SPEED_POINTS_PER_SECOND))


def accuracy_points(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(correct / total * 1000)


def graded_score(correct: int, total: int, average_seconds: float, multiplier: float) -> int:
    """Quiz and family-map score: accuracy plus speed, scaled by difficulty."""
    if total <= 0:
        return 0
    return int((accuracy_points(correct, total) + speed_bonus(average_seconds)) * multiplier)


def flashcard_score(known: int, total: int, average_seconds: float) -> int:
    if total <= 0:
        return 0
    return accuracy_points(known, total) + speed_bonus(average_seconds)


def pairs_score(pairs: int, moves: int, average_seconds: float, multiplier: float) -> int:
    if pairs <= 0:
        return 0
    efficiency = pairs / max(moves, pairs)
    return int((1000 + int(efficiency * 500) + speed_bonus(average_seconds)) * multiplier)


# =========================================================
# Lightning points
# =========================================================
def lightning_points(base_points: int, seconds_to_answer: float, streak: int) -> int:
    """Points for one correct lightning answer; `streak` includes this answer."""
    points = base_points
    if seconds_to_answer < 2.0:
        points += 10
    elif seconds_to_answer < 4.0:
        points += 5

    if streak >= 10:
        points = int(points * 2.0)
    elif streak >= 5:
        points = int(points * 1.5)
    return points


# =========================================================
# Numeric guesses (property game)
# =========================================================
FAIR_TOLERANCE = 0.50
NOT_GREAT_TOLERANCE = 0.75


class AccuracyTier(str, Enum):
    NONE = "none"
    EXCELLENT = "excellent"
    GOOD = "good"
    OK = "ok"
    FAIR = "fair"
    POOR = "poor"

    @property
    def counts_as_correct(self) -> bool:
        return self in (AccuracyTier.EXCELLENT, AccuracyTier.GOOD)


@dataclass(frozen=True)
class ToleranceBands:
    excellent: float = 0.05
    good: float = 0.15
    ok: float = 0.30


DEFAULT_BANDS = ToleranceBands()


def relative_error(guess: float, truth: float, floor: float = 0.0) -> float:
    """
    |guess - truth| relative to |truth|, with `floor` as the smallest
    denominator allowed. A truth of exactly zero with no floor is only an
    exact hit (0.0) or infinitely wrong.
    """
    denominator = max(abs(truth), floor)
    diff = abs(guess - truth)
    if denominator == 0:
        return 0.0 if diff == 0 else float("inf")
    return diff / denominator


def accuracy_score(error: Optional[float], bands: ToleranceBands = DEFAULT_BANDS) -> int:
    if error is None:
        return 0
    if error <= bands.excellent:
        return 100
    if error <= bands.good:
        return 80
    if error <= bands.ok:
        return 60
    if error <= FAIR_TOLERANCE:
        return 40
    if error <= NOT_GREAT_TOLERANCE:
        return 20
    return 10


def accuracy_tier(error: Optional[float], bands: ToleranceBands = DEFAULT_BANDS) -> AccuracyTier:
    if error is None:
        return AccuracyTier.NONE
    if error <= bands.excellent:
        return AccuracyTier.EXCELLENT
    if error <= bands.good:
        return AccuracyTier.GOOD
    if error <= bands.ok:
        return AccuracyTier.OK
    if error <= FAIR_TOLERANCE:
        return AccuracyTier.FAIR
    return AccuracyTier.POOR
