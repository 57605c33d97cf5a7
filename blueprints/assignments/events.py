# blueprints/assignments/events.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class AssignmentCreated:
    id: int
    title: str

    def describe(self) -> str:
        return f"New assignment: {self.title}"


@dataclass(frozen=True)
class AssignmentUpdated:
    id: int
    title: str

    def describe(self) -> str:
        return f"{self.title} updated"


@dataclass(frozen=True)
class AssignmentSubmitted:
    id: int
    title: str

    def describe(self) -> str:
        return f"{self.title} submitted"


@dataclass(frozen=True)
class AssignmentGraded:
    id: int
    title: str
    grade: int

    def describe(self) -> str:
        return f"{self.title} graded"


DomainEvent = Union[AssignmentCreated, AssignmentUpdated, AssignmentSubmitted, AssignmentGraded]


@dataclass(frozen=True)
class ActivityEntry:
    """One line of the "Recent Activity" list."""

    event: DomainEvent
    occurred_at: datetime

    @property
    def label(self) -> str:
        return self.event.describe()

    @property
    def kind(self) -> str:
        return type(self.event).__name__
