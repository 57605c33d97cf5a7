# blueprints/notifications/services.py
from __future__ import annotations
import logging
from collections import deque
from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterable, Optional, Tuple

from models import Notification, NotificationCategory
from blueprints.assignments.events import (
    AssignmentCreated, AssignmentGraded, AssignmentSubmitted, DomainEvent,
)

log = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


class NotificationFeed:
    """Newest-first, capacity-bounded notification list.

    Entries are frozen; only the ``read`` flag ever changes, by swapping in a
    copy. When the feed is full the oldest entry is dropped.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        initial: Iterable[Notification] = (),
        *,
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._items: deque = deque(maxlen=capacity)
        self._last_id = 0
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(self._tz))
        # initial entries come oldest first and keep their read state
        for n in initial:
            self._add(n)

    def items(self) -> Tuple[Notification, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def push(self, notification: Notification) -> Notification:
        """Add a new entry at the head. A pushed notification always starts unread."""
        if notification.read:
            notification = notification.model_copy(update={"read": False})
        return self._add(notification)

    def _add(self, notification: Notification) -> Notification:
        if any(n.id == notification.id for n in self._items):
            raise ValueError(f"duplicate notification id {notification.id}")
        evicted = self._items[-1] if len(self._items) == self.capacity else None
        self._items.appendleft(notification)
        self._last_id = max(self._last_id, notification.id)
        if evicted is not None:
            log.debug("notification evicted", extra={"event": "notification_evicted", "notification_id": evicted.id})
        return notification

    def notify(self, title: str, message: str, category: NotificationCategory) -> Notification:
        n = Notification(
            id=self._last_id + 1,
            title=title,
            message=message,
            category=NotificationCategory(category),
            created_at=self._clock(),
        )
        log.info("notification pushed", extra={"event": "notification_pushed", "notification_id": n.id})
        return self.push(n)

    def mark_read(self, notification_id: int) -> Optional[Notification]:
        # unknown ids are ignored: the entry may already have been evicted
        for idx, n in enumerate(tuple(self._items)):
            if n.id == notification_id:
                if not n.read:
                    n = n.model_copy(update={"read": True})
                    self._items[idx] = n
                return n
        return None

    def mark_all_read(self) -> None:
        for idx, n in enumerate(tuple(self._items)):
            if not n.read:
                self._items[idx] = n.model_copy(update={"read": True})

    def on_domain_event(self, event: DomainEvent) -> Optional[Notification]:
        if isinstance(event, AssignmentCreated):
            return self.notify("New assignment", f"{event.title} was added", NotificationCategory.ASSIGNMENT)
        if isinstance(event, AssignmentSubmitted):
            return self.notify("Assignment submitted", f"{event.title} was submitted", NotificationCategory.ASSIGNMENT)
        if isinstance(event, AssignmentGraded):
            return self.notify("Grade posted", f"{event.title} was graded: {event.grade}/100", NotificationCategory.GRADE)
        return None
