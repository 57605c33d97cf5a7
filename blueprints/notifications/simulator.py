# blueprints/notifications/simulator.py
"""Simulated arrival of external notices (new material, deadline reminders, ...).

``ArrivalProcess`` fires every ``interval`` seconds and, with probability
``probability``, pushes one notification built from a catalog template. Time
and randomness are injected: production uses ``TimerScheduler`` and the
module ``random``; tests use ``ManualScheduler`` and a seeded
``random.Random`` so ticks are reproducible.
"""
from __future__ import annotations
import logging
import random
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence

from models import Notification, NotificationCategory
from .services import NotificationFeed

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationTemplate:
    category: NotificationCategory
    title: str
    message: str


DEFAULT_CATALOG: Sequence[NotificationTemplate] = (
    NotificationTemplate(NotificationCategory.DEADLINE, "Deadline approaching",
                         "An assignment is due within the next 24 hours"),
    NotificationTemplate(NotificationCategory.MATERIAL, "New course material",
                         "Lecture notes were posted for one of your courses"),
    NotificationTemplate(NotificationCategory.GRADE, "Grade released",
                         "Your instructor published new grades"),
    NotificationTemplate(NotificationCategory.ASSIGNMENT, "New assignment posted",
                         "A new assignment is available in one of your courses"),
)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class TimerScheduler:
    """Real wall-clock scheduler backed by daemon ``threading.Timer`` objects."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class _ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: nothing fires until ``advance`` moves time forward."""

    def __init__(self):
        self.now = 0.0
        self._timers: List[_ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._timers.remove(timer)
            self.now = timer.due
            timer.callback()
        self._timers = [t for t in self._timers if not t.cancelled]
        self.now = target


class ArrivalProcess:
    def __init__(
        self,
        feed: NotificationFeed,
        *,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        interval: float = 30.0,
        probability: float = 0.3,
        catalog: Sequence[NotificationTemplate] = DEFAULT_CATALOG,
        lock: Optional[threading.RLock] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if not 0.0 <= probability <= 1.0:
            raise ValueError("probability must be within [0, 1]")
        if not catalog:
            raise ValueError("catalog must not be empty")
        self.feed = feed
        self.interval = float(interval)
        self.probability = probability
        self.catalog = tuple(catalog)
        self._scheduler = scheduler or TimerScheduler()
        self._rng = rng or random.Random()
        self._lock = lock or threading.RLock()
        self._timer: Optional[TimerHandle] = None
        self._running = False
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._generation += 1
            self._schedule()
        log.info("notification arrivals started", extra={"event": "arrivals_started"})

    def stop(self) -> None:
        """Cancel the pending tick. Safe to call repeatedly; the feed is left as is."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        log.info("notification arrivals stopped", extra={"event": "arrivals_stopped"})

    def tick(self) -> Optional[Notification]:
        with self._lock:
            if self._rng.random() >= self.probability:
                return None
            template = self._rng.choice(self.catalog)
            return self.feed.notify(template.title, template.message, template.category)

    def _schedule(self) -> None:
        generation = self._generation
        self._timer = self._scheduler.call_later(self.interval, lambda: self._on_timer(generation))

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # a stop() or a stop()+start() may have raced with the timer firing
            if not self._running or generation != self._generation:
                return
            try:
                self.tick()
            finally:
                if self._running:
                    self._schedule()
