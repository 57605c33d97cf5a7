# blueprints/core/services.py
from __future__ import annotations
import logging
import random
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic_core import to_jsonable_python

from models import Assignment, Notification
from blueprints.assignments.events import ActivityEntry
from blueprints.assignments.filters import STATUS_ALL, filter_assignments, parse_status_filter
from blueprints.assignments.services import AssignmentStats, AssignmentStore
from blueprints.notifications.services import NotificationFeed
from blueprints.notifications.simulator import ArrivalProcess, Scheduler
from blueprints.validation.engine import ValidationResult, validate
from .filters import time_ago

log = logging.getLogger(__name__)


def resolve_tz(name: Optional[str]) -> tzinfo:
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        log.warning("unknown timezone, falling back to UTC", extra={"event": "tz_fallback"})
        return timezone.utc


@dataclass(frozen=True)
class DashboardSnapshot:
    assignments: Tuple[Assignment, ...]
    visible: Tuple[Assignment, ...]
    stats: AssignmentStats
    upcoming: Tuple[Assignment, ...]
    notifications: Tuple[Notification, ...]
    unread_count: int
    status_filter: str
    search_text: str
    activity: Tuple[ActivityEntry, ...]


class DashboardSession:
    """One user's dashboard: store, feed, arrival process and the current view settings.

    Every intent takes the session lock, so the arrival timer thread and
    request handlers never interleave inside an operation.
    """

    def __init__(
        self,
        store: AssignmentStore,
        feed: NotificationFeed,
        *,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        tick_seconds: float = 30.0,
        probability: float = 0.3,
        upcoming_limit: int = 5,
        activity_limit: int = 10,
        tz: tzinfo = timezone.utc,
    ):
        self._lock = threading.RLock()
        self.store = store
        self.feed = feed
        self.tz = tz
        self.upcoming_limit = upcoming_limit
        self.activity_limit = activity_limit
        self.arrivals = ArrivalProcess(
            feed, scheduler=scheduler, rng=rng,
            interval=tick_seconds, probability=probability, lock=self._lock,
        )
        self._status_filter = STATUS_ALL
        self._search_text = ""
        self._unsubscribe = store.subscribe(feed.on_domain_event)

    # ---------- intents ----------
    def create_assignment(self, data: Mapping[str, Any]) -> Assignment:
        with self._lock:
            return self.store.create(data)

    def update_assignment(self, assignment_id: int, data: Mapping[str, Any]) -> Assignment:
        with self._lock:
            return self.store.update(assignment_id, data)

    def submit_assignment(self, assignment_id: int, files: Sequence[Any], comments: Optional[str] = None) -> Assignment:
        with self._lock:
            return self.store.submit(assignment_id, files, comments)

    def grade_assignment(self, assignment_id: int, score: Any, feedback: Optional[str] = None) -> Assignment:
        with self._lock:
            return self.store.grade(assignment_id, score, feedback)

    def set_filter(self, status: Optional[str]) -> str:
        parsed = parse_status_filter(status)
        with self._lock:
            self._status_filter = parsed.value if parsed else STATUS_ALL
            return self._status_filter

    def set_search_text(self, text: Optional[str]) -> str:
        with self._lock:
            self._search_text = (text or "").strip()
            return self._search_text

    def mark_notification_read(self, notification_id: int) -> Optional[Notification]:
        with self._lock:
            return self.feed.mark_read(notification_id)

    def mark_all_notifications_read(self) -> None:
        with self._lock:
            self.feed.mark_all_read()

    def validate(self, schema_name: str, data: Any) -> ValidationResult:
        return validate(schema_name, data, tz=self.tz)

    # ---------- views ----------
    def visible_assignments(self, status: Optional[str] = None, search_text: Optional[str] = None) -> Tuple[Assignment, ...]:
        with self._lock:
            return filter_assignments(
                self.store.assignments(),
                self._status_filter if status is None else status,
                self._search_text if search_text is None else search_text,
            )

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            assignments = self.store.assignments()
            return DashboardSnapshot(
                assignments=assignments,
                visible=filter_assignments(assignments, self._status_filter, self._search_text),
                stats=self.store.stats(),
                upcoming=self.store.upcoming_deadlines(self.upcoming_limit),
                notifications=self.feed.items(),
                unread_count=self.feed.unread_count(),
                status_filter=self._status_filter,
                search_text=self._search_text,
                activity=self.store.recent_activity(self.activity_limit),
            )

    # ---------- background ----------
    def start_arrivals(self) -> None:
        self.arrivals.start()

    def stop_arrivals(self) -> None:
        self.arrivals.stop()

    def teardown(self) -> None:
        self.arrivals.stop()
        self._unsubscribe()


def build_session(config: Mapping[str, Any], *, scheduler: Optional[Scheduler] = None,
                  rng: Optional[random.Random] = None,
                  clock: Optional[Callable[[], datetime]] = None) -> DashboardSession:
    tz = resolve_tz(config.get("DASHBOARD_TIMEZONE"))
    clock = clock or (lambda: datetime.now(tz))
    courses, assignments, notifications = (), [], []
    if config.get("SEED_SAMPLE_DATA", True):
        from fixtures.demo_dashboard import COURSES, sample_assignments, sample_notifications
        now = clock()
        courses, assignments, notifications = COURSES, sample_assignments(now), sample_notifications(now)
    store = AssignmentStore(courses, assignments, tz=tz, clock=clock)
    feed = NotificationFeed(config.get("NOTIFICATION_CAPACITY", 10), notifications, tz=tz, clock=clock)
    return DashboardSession(
        store, feed,
        scheduler=scheduler,
        rng=rng,
        tick_seconds=config.get("NOTIFICATION_TICK_SECONDS", 30.0),
        probability=config.get("NOTIFICATION_PROBABILITY", 0.3),
        upcoming_limit=config.get("UPCOMING_DEADLINES_LIMIT", 5),
        tz=tz,
    )


# ---------- JSON ----------
def assignment_json(a: Assignment) -> Dict[str, Any]:
    return a.model_dump(mode="json")


def notification_json(n: Notification, now: Optional[datetime] = None) -> Dict[str, Any]:
    out = n.model_dump(mode="json")
    out["created_ago"] = time_ago(n.created_at, now)
    return out


def activity_json(entry: ActivityEntry) -> Dict[str, Any]:
    return {
        "kind": entry.kind,
        "label": entry.label,
        "assignment_id": entry.event.id,
        "occurred_at": to_jsonable_python(entry.occurred_at),
    }


def snapshot_json(s: DashboardSnapshot, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "assignments": [assignment_json(a) for a in s.assignments],
        "visible": [assignment_json(a) for a in s.visible],
        "stats": asdict(s.stats),
        "upcoming": [assignment_json(a) for a in s.upcoming],
        "notifications": [notification_json(n, now) for n in s.notifications],
        "unread_count": s.unread_count,
        "filter": {"status": s.status_filter, "search": s.search_text},
        "activity": [activity_json(e) for e in s.activity],
    }
