from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    GRADED = "graded"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FileMeta(BaseModel):
    """Client-side description of an attached file. Contents never reach the core."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    size_bytes: int = Field(ge=0)
    content_type: Optional[str] = Field(None, max_length=255)


class Assignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    course: str
    due_date: datetime
    status: AssignmentStatus = AssignmentStatus.PENDING
    description: str
    priority: Priority = Priority.MEDIUM
    grade: Optional[int] = Field(None, ge=0, le=100)
    submitted_at: Optional[datetime] = None
    feedback: Optional[str] = None
    attachments: Tuple[FileMeta, ...] = ()
    comments: Optional[str] = None

    @model_validator(mode="after")
    def check_status_fields(self):
        if self.status is AssignmentStatus.PENDING:
            if self.grade is not None or self.feedback is not None:
                raise ValueError("pending assignment cannot carry a grade or feedback")
            if self.submitted_at is not None:
                raise ValueError("pending assignment cannot have submitted_at")
        elif self.status is AssignmentStatus.SUBMITTED:
            if self.submitted_at is None:
                raise ValueError("submitted assignment requires submitted_at")
            if self.grade is not None or self.feedback is not None:
                raise ValueError("submitted assignment cannot carry a grade or feedback")
        elif self.status is AssignmentStatus.GRADED:
            if self.submitted_at is None or self.grade is None:
                raise ValueError("graded assignment requires submitted_at and grade")
        return self

    def replace(self, **changes) -> "Assignment":
        """Return a validated copy with ``changes`` applied."""
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self).model_validate(data)
