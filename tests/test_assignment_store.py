from __future__ import annotations
from datetime import datetime, timedelta, timezone
import pytest

from blueprints.assignments.events import (
    AssignmentCreated, AssignmentGraded, AssignmentSubmitted, AssignmentUpdated,
)
from blueprints.assignments.services import AssignmentStore
from errors import EmptySubmissionError, InvalidStateError, NotFoundError, ValidationError
from fixtures.demo_dashboard import COURSES, sample_assignments
from models import AssignmentStatus, FileMeta, Priority

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
PDF = {"name": "a.pdf", "size_bytes": 1000}


@pytest.fixture()
def store():
    return AssignmentStore(COURSES, sample_assignments(NOW), clock=lambda: NOW)


def _input(**over):
    data = {
        "title": "X",
        "course": "Web Development",
        "due_date": NOW + timedelta(days=7),
        "description": "a" * 20,
        "priority": "high",
    }
    data.update(over)
    return data


def test_create_assigns_next_id_and_pending(store):
    before = max(a.id for a in store.assignments())
    a = store.create(_input())
    assert a.id == before + 1
    assert a.status is AssignmentStatus.PENDING
    assert a.priority is Priority.HIGH
    assert a.grade is None and a.submitted_at is None and a.feedback is None
    b = store.create(_input(title="Y"))
    assert b.id > a.id
    assert store.get(b.id) == b


def test_create_rejects_invalid_input_without_mutation(store):
    n = len(store)
    with pytest.raises(ValidationError) as ei:
        store.create(_input(description="short"))
    assert "description" in ei.value.errors
    assert len(store) == n


def test_create_rejects_unknown_course(store):
    with pytest.raises(ValidationError) as ei:
        store.create(_input(course="Astrology"))
    assert ei.value.errors == {"course": "Unknown course"}


def test_store_without_catalog_accepts_any_course():
    s = AssignmentStore(clock=lambda: NOW)
    a = s.create(_input(course="Anything"))
    assert a.id == 1 and a.course == "Anything"


def test_update_replaces_editable_fields_only(store):
    graded = store.get(3)
    assert graded.status is AssignmentStatus.GRADED
    updated = store.update(3, _input(title="Renamed", course="Data Structures", priority="low"))
    assert updated.title == "Renamed"
    assert updated.priority is Priority.LOW
    assert updated.status is AssignmentStatus.GRADED
    assert updated.grade == graded.grade
    assert updated.submitted_at == graded.submitted_at
    # order of the collection is kept
    assert [a.id for a in store.assignments()] == [1, 2, 3, 4]


def test_update_unknown_id_and_invalid_input(store):
    with pytest.raises(NotFoundError):
        store.update(999, _input())
    original = store.get(1)
    with pytest.raises(ValidationError):
        store.update(1, _input(title=""))
    assert store.get(1) == original


def test_submit_requires_files(store):
    with pytest.raises(EmptySubmissionError):
        store.submit(1, [])
    assert store.get(1).status is AssignmentStatus.PENDING


def test_submit_pending_assignment(store):
    a = store.submit(1, [PDF], "see attached")
    assert a.status is AssignmentStatus.SUBMITTED
    assert a.submitted_at == NOW
    assert a.attachments == (FileMeta(name="a.pdf", size_bytes=1000),)
    assert a.comments == "see attached"


def test_submit_from_wrong_state_and_missing_id(store):
    with pytest.raises(InvalidStateError):
        store.submit(2, [PDF])
    with pytest.raises(InvalidStateError):
        store.submit(3, [PDF])
    with pytest.raises(NotFoundError):
        store.submit(42, [PDF])


def test_submit_rejects_bad_metadata_and_long_comment(store):
    with pytest.raises(ValidationError) as ei:
        store.submit(1, [{"name": "a.pdf", "size_bytes": -1}])
    assert "files" in ei.value.errors
    with pytest.raises(ValidationError) as ei:
        store.submit(1, [PDF], "c" * 301)
    assert "comments" in ei.value.errors
    assert store.get(1).status is AssignmentStatus.PENDING


def test_grade_only_from_submitted(store):
    with pytest.raises(InvalidStateError):
        store.grade(1, 80)
    with pytest.raises(InvalidStateError):
        store.grade(3, 80)
    assert store.get(1).grade is None
    assert store.get(3).grade == 92


def test_grade_rejects_out_of_range_score(store):
    with pytest.raises(ValidationError) as ei:
        store.grade(2, 101, "nice")
    assert set(ei.value.errors) == {"score"}
    assert store.get(2).status is AssignmentStatus.SUBMITTED


def test_full_lifecycle_example(store):
    a = store.create(_input())
    assert a.id == 5 and a.status is AssignmentStatus.PENDING
    s = store.submit(a.id, [PDF])
    assert s.status is AssignmentStatus.SUBMITTED and s.submitted_at is not None
    g = store.grade(a.id, 92, "Well done")
    assert g.status is AssignmentStatus.GRADED
    assert g.grade == 92 and g.feedback == "Well done"
    assert g.submitted_at == s.submitted_at


def test_stats_follow_mutations(store):
    st = store.stats()
    assert (st.total, st.pending, st.submitted, st.graded) == (4, 2, 1, 1)
    store.submit(1, [PDF])
    store.grade(2, 70)
    st = store.stats()
    assert (st.total, st.pending, st.submitted, st.graded) == (4, 1, 1, 2)


def test_upcoming_deadlines_sorted_with_id_tiebreak(store):
    due = NOW + timedelta(days=1)
    a = store.create(_input(title="Second", due_date=due))
    b = store.create(_input(title="Third", due_date=due))
    upcoming = store.upcoming_deadlines(3)
    assert [x.id for x in upcoming] == [a.id, b.id, 1]
    assert all(x.status is AssignmentStatus.PENDING for x in store.upcoming_deadlines())
    assert store.upcoming_deadlines(0) == ()
    with pytest.raises(ValueError):
        store.upcoming_deadlines(-1)


def test_events_are_emitted_after_mutations(store):
    seen = []
    store.subscribe(seen.append)
    a = store.create(_input())
    store.update(a.id, _input(title="X2"))
    store.submit(a.id, [PDF])
    store.grade(a.id, 88)
    assert seen == [
        AssignmentCreated(id=a.id, title="X"),
        AssignmentUpdated(id=a.id, title="X2"),
        AssignmentSubmitted(id=a.id, title="X2"),
        AssignmentGraded(id=a.id, title="X2", grade=88),
    ]


def test_failed_operations_emit_nothing(store):
    seen = []
    store.subscribe(seen.append)
    with pytest.raises(EmptySubmissionError):
        store.submit(1, [])
    with pytest.raises(InvalidStateError):
        store.grade(1, 50)
    assert seen == []
    assert store.recent_activity() == ()


def test_broken_listener_does_not_undo_mutation(store):
    def boom(event):
        raise RuntimeError("listener down")

    store.subscribe(boom)
    a = store.create(_input())
    assert store.get(a.id).status is AssignmentStatus.PENDING


def test_unsubscribe(store):
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    store.create(_input())
    assert seen == []


def test_recent_activity_newest_first(store):
    a = store.create(_input(title="Essay"))
    store.submit(a.id, [PDF])
    labels = [e.label for e in store.recent_activity()]
    assert labels == ["Essay submitted", "New assignment: Essay"]
    assert store.recent_activity(1)[0].kind == "AssignmentSubmitted"
    assert store.recent_activity(1)[0].occurred_at == NOW


def test_returned_entities_are_frozen(store):
    a = store.get(1)
    with pytest.raises(Exception):
        a.title = "hacked"
    assert store.get(1).title == "React Components Assignment"
