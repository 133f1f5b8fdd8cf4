from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class ScheduledEvent:
    """One pending timer event. `interval` is set for repeating events."""

    due: float
    callback: Callable[[], None]
    interval: Optional[float] = None
    name: str = ""
    seq: int = 0
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """
    Explicit timer queue owned by a single game session.

    Nothing runs in the background: the host calls `run_due()` (usually via
    `GameSession.tick()`) and every event whose due time has passed fires
    synchronously, in due-time order. A repeating event that fell behind
    fires once per missed interval, so a countdown never skips a step.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or time.monotonic
        self._events: List[ScheduledEvent] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return sum(1 for e in self._events if not e.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None], name: str = "") -> ScheduledEvent:
        event = ScheduledEvent(
            due=self.clock() + max(0.0, delay),
            callback=callback,
            name=name,
            seq=next(self._seq),
        )
        self._events.append(event)
        logger.debug("scheduled %s in %.2fs", name or "event", delay)
        return event

    def call_every(self, interval: float, callback: Callable[[], None], name: str = "") -> ScheduledEvent:
        if interval <= 0:
            raise ValueError("interval must be positive")
        event = ScheduledEvent(
            due=self.clock() + interval,
            callback=callback,
            interval=interval,
            name=name,
            seq=next(self._seq),
        )
        self._events.append(event)
        return event

    def cancel(self, event: Optional[ScheduledEvent]) -> None:
        if event is None:
            return
        event.cancelled = True
        self._events = [e for e in self._events if e is not event]

    def cancel_all(self) -> None:
        for e in self._events:
            e.cancelled = True
        self._events = []

    def run_due(self, now: Optional[float] = None) -> int:
        """Fire every event due at `now`; returns the number of callbacks run."""
        now = self.clock() if now is None else now
        fired = 0
        while True:
            due = [e for e in self._events if not e.cancelled and e.due <= now]
            if not due:
                break
            event = min(due, key=lambda e: (e.due, e.seq))
            if event.interval is None:
                self._events.remove(event)
            else:
                event.due += event.interval
            event.callback()
            fired += 1
        return fired
