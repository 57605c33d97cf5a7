# blueprints/validation/rules.py
"""Form rule tables.

Every form the dashboard accepts is described here as data: one ``FieldRule``
per input plus optional ``CrossFieldCheck`` rows. The engine in
``engine.py`` turns a table into a pydantic model; nothing in this module
evaluates input by itself.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BeforeValidator
from pydantic_core import PydanticCustomError

from models import FileMeta, Priority, Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

REQUIRED = object()


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


WholeNumber = Annotated[int, BeforeValidator(_reject_bool)]


@dataclass(frozen=True)
class FieldRule:
    field: str
    kind: Any = str
    label: Optional[str] = None
    required: bool = True
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    ge: Optional[int] = None
    le: Optional[int] = None
    pattern: Optional[str] = None
    default: Any = REQUIRED
    # overrides keyed by: required, min_length, max_length, pattern, choices, range, type
    messages: Mapping[str, str] = field(default_factory=dict)

    @property
    def display(self) -> str:
        return self.label or self.field.replace("_", " ").capitalize()


@dataclass(frozen=True)
class CrossFieldCheck:
    """Compares ``field`` against ``other``; a failure is reported on ``field``."""

    field: str
    other: str
    predicate: Callable[[Any, Any], bool]
    message: str


@dataclass(frozen=True)
class Schema:
    name: str
    rules: Tuple[FieldRule, ...]
    checks: Tuple[CrossFieldCheck, ...] = ()

    def rule(self, name: str) -> Optional[FieldRule]:
        for r in self.rules:
            if r.field == name:
                return r
        return None


ASSIGNMENT = Schema(
    name="assignment",
    rules=(
        FieldRule("title", min_length=1, max_length=100),
        FieldRule("course", min_length=1, messages={"required": "Select a course"}),
        FieldRule("due_date", kind=datetime, label="Due date",
                  messages={"type": "Due date must be a valid date and time"}),
        FieldRule("description", min_length=10, max_length=500),
        FieldRule("priority", kind=Priority, required=False, default=Priority.MEDIUM),
    ),
)

SUBMISSION = Schema(
    name="submission",
    rules=(
        FieldRule("assignment_id", kind=WholeNumber, label="Assignment"),
        FieldRule("comments", required=False, default=None, max_length=300),
        # an empty list passes here; submitting needs at least one file
        FieldRule("files", kind=List[FileMeta], required=False, default=(),
                  messages={"type": "Each file needs a name and a non-negative size"}),
    ),
)

LOGIN = Schema(
    name="login",
    rules=(
        FieldRule("email", pattern=EMAIL_PATTERN,
                  messages={"pattern": "Enter a valid email address"}),
        FieldRule("password", min_length=6),
    ),
)

SIGNUP = Schema(
    name="signup",
    rules=(
        FieldRule("first_name", min_length=1, label="First name"),
        FieldRule("last_name", min_length=1, label="Last name"),
        FieldRule("email", pattern=EMAIL_PATTERN,
                  messages={"pattern": "Enter a valid email address"}),
        FieldRule("password", min_length=6),
        FieldRule("confirm_password", min_length=1, label="Password confirmation"),
        FieldRule("role", kind=Role),
    ),
    checks=(
        CrossFieldCheck("confirm_password", "password",
                        lambda confirm, password: confirm == password,
                        "Passwords do not match"),
    ),
)

GRADE = Schema(
    name="grade",
    rules=(
        FieldRule("score", kind=WholeNumber, ge=0, le=100),
        FieldRule("feedback", required=False, default=None, max_length=1000),
    ),
)

SCHEMAS: Dict[str, Schema] = {s.name: s for s in (ASSIGNMENT, SUBMISSION, LOGIN, SIGNUP, GRADE)}
