# blueprints/assignments/services.py
from __future__ import annotations
import logging
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from errors import EmptySubmissionError, InvalidStateError, NotFoundError, ValidationError
from models import Assignment, AssignmentStatus, Course
from blueprints.validation.engine import validate_or_raise
from .events import (
    ActivityEntry, AssignmentCreated, AssignmentGraded, AssignmentSubmitted,
    AssignmentUpdated, DomainEvent,
)

log = logging.getLogger(__name__)

Listener = Callable[[DomainEvent], Any]

# (current status, action) -> next status; anything missing is an illegal move
TRANSITIONS: Dict[Tuple[AssignmentStatus, str], AssignmentStatus] = {
    (AssignmentStatus.PENDING, "submit"): AssignmentStatus.SUBMITTED,
    (AssignmentStatus.SUBMITTED, "grade"): AssignmentStatus.GRADED,
}

EDITABLE_FIELDS = ("title", "course", "due_date", "description", "priority")


@dataclass(frozen=True)
class AssignmentStats:
    total: int
    pending: int
    submitted: int
    graded: int


def next_status(assignment: Assignment, action: str) -> AssignmentStatus:
    try:
        return TRANSITIONS[(assignment.status, action)]
    except KeyError:
        raise InvalidStateError(assignment.id, assignment.status.value, action) from None


class AssignmentStore:
    """In-memory assignment collection with the pending -> submitted -> graded lifecycle.

    Every public method either completes fully or raises one of the errors
    from ``errors`` and leaves the collection untouched. Returned assignments
    are frozen models, so callers cannot mutate store state through them.
    """

    def __init__(
        self,
        courses: Iterable[Course] = (),
        assignments: Iterable[Assignment] = (),
        *,
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
        activity_limit: int = 50,
    ):
        self._courses: Tuple[Course, ...] = tuple(courses)
        self._items: Dict[int, Assignment] = {}
        for a in assignments:
            if a.id in self._items:
                raise ValueError(f"duplicate assignment id {a.id}")
            self._items[a.id] = a
        self._last_id = max(self._items, default=0)
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._listeners: List[Listener] = []
        self._activity: deque = deque(maxlen=activity_limit)

    # ---------- reads ----------
    def courses(self) -> Tuple[Course, ...]:
        return self._courses

    def assignments(self) -> Tuple[Assignment, ...]:
        return tuple(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def get(self, assignment_id: int) -> Assignment:
        a = self._items.get(assignment_id)
        if a is None:
            raise NotFoundError(assignment_id)
        return a

    def stats(self) -> AssignmentStats:
        counts = Counter(a.status for a in self._items.values())
        return AssignmentStats(
            total=len(self._items),
            pending=counts[AssignmentStatus.PENDING],
            submitted=counts[AssignmentStatus.SUBMITTED],
            graded=counts[AssignmentStatus.GRADED],
        )

    def upcoming_deadlines(self, limit: Optional[int] = None) -> Tuple[Assignment, ...]:
        """Pending assignments, soonest due first; equal due dates keep id order."""
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        pending = [a for a in self._items.values() if a.status is AssignmentStatus.PENDING]
        pending.sort(key=lambda a: (a.due_date, a.id))
        return tuple(pending if limit is None else pending[:limit])

    def recent_activity(self, limit: Optional[int] = None) -> Tuple[ActivityEntry, ...]:
        entries = list(reversed(self._activity))
        return tuple(entries if limit is None else entries[:limit])

    # ---------- events ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def _emit(self, event: DomainEvent) -> None:
        self._activity.append(ActivityEntry(event=event, occurred_at=self._clock()))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # the mutation already happened; a broken subscriber must not undo it
                log.exception("assignment event listener failed", extra={"event": type(event).__name__})

    # ---------- writes ----------
    def _validated_fields(self, data: Mapping[str, Any], assignment_id: Optional[int] = None) -> Dict[str, Any]:
        value = validate_or_raise("assignment", data, tz=self._tz, assignment_id=assignment_id)
        if self._courses and value["course"] not in {c.name for c in self._courses}:
            raise ValidationError({"course": "Unknown course"}, assignment_id=assignment_id)
        return {name: value[name] for name in EDITABLE_FIELDS}

    def create(self, data: Mapping[str, Any]) -> Assignment:
        fields = self._validated_fields(data)
        assignment = Assignment(id=self._last_id + 1, status=AssignmentStatus.PENDING, **fields)
        self._last_id = assignment.id
        self._items[assignment.id] = assignment
        log.info("assignment created", extra={"event": "assignment_created", "assignment_id": assignment.id})
        self._emit(AssignmentCreated(id=assignment.id, title=assignment.title))
        return assignment

    def update(self, assignment_id: int, data: Mapping[str, Any]) -> Assignment:
        # editing is allowed in every status; lifecycle fields are never touched here
        current = self.get(assignment_id)
        fields = self._validated_fields(data, assignment_id)
        updated = current.replace(**fields)
        self._items[assignment_id] = updated
        log.info("assignment updated", extra={"event": "assignment_updated", "assignment_id": assignment_id})
        self._emit(AssignmentUpdated(id=updated.id, title=updated.title))
        return updated

    def submit(self, assignment_id: int, files: Sequence[Any], comments: Optional[str] = None) -> Assignment:
        current = self.get(assignment_id)
        status = next_status(current, "submit")
        if not files:
            raise EmptySubmissionError(assignment_id)
        value = validate_or_raise(
            "submission",
            {"assignment_id": assignment_id, "files": list(files), "comments": comments},
            tz=self._tz,
            assignment_id=assignment_id,
        )
        submitted = current.replace(
            status=status,
            submitted_at=self._clock(),
            attachments=tuple(value["files"]),
            comments=value["comments"],
        )
        self._items[assignment_id] = submitted
        log.info("assignment submitted", extra={
            "event": "assignment_submitted", "assignment_id": assignment_id, "files": len(submitted.attachments),
        })
        self._emit(AssignmentSubmitted(id=submitted.id, title=submitted.title))
        return submitted

    def grade(self, assignment_id: int, score: Any, feedback: Optional[str] = None) -> Assignment:
        current = self.get(assignment_id)
        status = next_status(current, "grade")
        value = validate_or_raise("grade", {"score": score, "feedback": feedback},
                                  tz=self._tz, assignment_id=assignment_id)
        graded = current.replace(status=status, grade=value["score"], feedback=value["feedback"])
        self._items[assignment_id] = graded
        log.info("assignment graded", extra={
            "event": "assignment_graded", "assignment_id": assignment_id, "grade": graded.grade,
        })
        self._emit(AssignmentGraded(id=graded.id, title=graded.title, grade=graded.grade))
        return graded
