from __future__ import annotations
from datetime import datetime, timedelta, timezone
import pytest

from blueprints.assignments.events import (
    AssignmentCreated, AssignmentGraded, AssignmentSubmitted, AssignmentUpdated,
)
from blueprints.notifications.services import NotificationFeed
from blueprints.notifications.simulator import ArrivalProcess, ManualScheduler, NotificationTemplate
from fixtures.demo_dashboard import sample_notifications
from models import Notification, NotificationCategory

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class ScriptedRandom:
    """Stand-in RNG: random() replays ``values``, choice() always takes the first item."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)

    def choice(self, seq):
        return seq[0]


def _n(i: int, read: bool = False) -> Notification:
    return Notification(id=i, title=f"N{i}", message="m", category=NotificationCategory.MATERIAL,
                        created_at=NOW + timedelta(minutes=i), read=read)


@pytest.fixture()
def feed():
    return NotificationFeed(10, clock=lambda: NOW)


# ---------- feed ----------
def test_push_is_newest_first(feed):
    feed.push(_n(1))
    feed.push(_n(2))
    assert [n.id for n in feed.items()] == [2, 1]


def test_capacity_evicts_oldest(feed):
    for i in range(1, 16):
        feed.push(_n(i))
    assert len(feed) == 10
    assert [n.id for n in feed.items()] == list(range(15, 5, -1))


def test_duplicate_id_rejected(feed):
    feed.push(_n(1))
    with pytest.raises(ValueError):
        feed.push(_n(1))


def test_unread_tracking(feed):
    feed.push(_n(1))
    feed.mark_read(1)
    assert feed.unread_count() == 0
    # a pushed entry is new, whatever flag it was built with
    pushed = feed.push(_n(2, read=True))
    assert not pushed.read
    assert feed.unread_count() == 1
    feed.mark_all_read()
    assert feed.unread_count() == 0
    feed.notify("Hello", "world", NotificationCategory.GRADE)
    assert feed.unread_count() >= 1


def test_mark_read(feed):
    feed.push(_n(1))
    feed.push(_n(2))
    marked = feed.mark_read(1)
    assert marked.read is True
    assert [n.read for n in feed.items()] == [False, True]
    # unknown id: silently ignored
    assert feed.mark_read(99) is None
    assert feed.unread_count() == 1


def test_items_are_snapshots(feed):
    feed.push(_n(1))
    before = feed.items()
    feed.mark_all_read()
    assert before[0].read is False
    assert feed.items()[0].read is True


def test_notify_ids_keep_growing_after_eviction():
    feed = NotificationFeed(3, sample_notifications(NOW), clock=lambda: NOW)
    assert [n.id for n in feed.items()] == [4, 3, 2]
    n = feed.notify("T", "M", "deadline")
    assert n.id == 5 and n.category is NotificationCategory.DEADLINE
    assert n.created_at == NOW and n.read is False
    assert [x.id for x in feed.items()] == [5, 4, 3]


def test_domain_events_become_notifications(feed):
    feed.on_domain_event(AssignmentCreated(id=1, title="Essay"))
    feed.on_domain_event(AssignmentSubmitted(id=1, title="Essay"))
    feed.on_domain_event(AssignmentGraded(id=1, title="Essay", grade=92))
    assert feed.on_domain_event(AssignmentUpdated(id=1, title="Essay")) is None
    cats = [n.category for n in feed.items()]
    assert cats == [NotificationCategory.GRADE, NotificationCategory.ASSIGNMENT, NotificationCategory.ASSIGNMENT]
    assert "92/100" in feed.items()[0].message


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        NotificationFeed(0)


# ---------- simulated arrivals ----------
def test_tick_respects_probability(feed):
    proc = ArrivalProcess(feed, scheduler=ManualScheduler(), rng=ScriptedRandom([0.1, 0.5, 0.29, 0.3]),
                          interval=10, probability=0.3)
    results = [proc.tick() for _ in range(4)]
    assert [r is not None for r in results] == [True, False, True, False]
    assert len(feed) == 2
    assert feed.items()[0].category is NotificationCategory.DEADLINE


def test_start_runs_ticks_on_interval(feed):
    sched = ManualScheduler()
    proc = ArrivalProcess(feed, scheduler=sched, rng=ScriptedRandom([0.0] * 5), interval=30, probability=0.3)
    proc.start()
    assert proc.running
    sched.advance(29)
    assert len(feed) == 0
    sched.advance(1)
    assert len(feed) == 1
    sched.advance(60)
    assert len(feed) == 3
    assert sched.pending == 1


def test_stop_is_idempotent_and_keeps_feed(feed):
    sched = ManualScheduler()
    proc = ArrivalProcess(feed, scheduler=sched, rng=ScriptedRandom([0.0] * 10), interval=5, probability=1.0)
    proc.start()
    proc.start()  # second start does not double the timer
    assert sched.pending == 1
    sched.advance(10)
    assert len(feed) == 2
    proc.stop()
    proc.stop()
    assert not proc.running
    assert sched.pending == 0
    sched.advance(100)
    assert len(feed) == 2


def test_restart_after_stop(feed):
    sched = ManualScheduler()
    proc = ArrivalProcess(feed, scheduler=sched, rng=ScriptedRandom([0.0] * 10), interval=5, probability=1.0)
    proc.start()
    proc.stop()
    proc.start()
    sched.advance(5)
    assert len(feed) == 1


def test_timer_from_before_restart_is_ignored(feed):
    sched = ManualScheduler()
    proc = ArrivalProcess(feed, scheduler=sched, rng=ScriptedRandom([0.0] * 10), interval=5, probability=1.0)
    proc.start()
    stale = proc._timer.callback
    proc.stop()
    proc.start()
    # fired while stop()+start() held the lock
    stale()
    assert len(feed) == 0
    assert sched.pending == 1
    sched.advance(5)
    assert len(feed) == 1
    assert sched.pending == 1


def test_feed_never_exceeds_capacity_under_arrivals(feed):
    sched = ManualScheduler()
    catalog = (NotificationTemplate(NotificationCategory.MATERIAL, "Slides", "New slides"),)
    proc = ArrivalProcess(feed, scheduler=sched, rng=ScriptedRandom([0.0] * 50),
                          interval=1, probability=1.0, catalog=catalog)
    proc.start()
    sched.advance(50)
    proc.stop()
    assert len(feed) == 10
    assert feed.items()[0].id == 50


def test_bad_parameters():
    feed = NotificationFeed()
    with pytest.raises(ValueError):
        ArrivalProcess(feed, interval=0)
    with pytest.raises(ValueError):
        ArrivalProcess(feed, probability=1.5)
    with pytest.raises(ValueError):
        ArrivalProcess(feed, catalog=())


def test_initial_entries_keep_read_state():
    feed = NotificationFeed(10, [_n(1, read=True), _n(2)], clock=lambda: NOW)
    assert [n.read for n in feed.items()] == [False, True]
    assert feed.unread_count() == 1
