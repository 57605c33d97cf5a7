# blueprints/assignments/filters.py
from __future__ import annotations
from typing import Iterable, Optional, Tuple, Union

from models import Assignment, AssignmentStatus

STATUS_ALL = "all"

StatusFilter = Union[str, AssignmentStatus, None]


def parse_status_filter(value: StatusFilter) -> Optional[AssignmentStatus]:
    """``None``/``""``/``"all"`` -> no status restriction; otherwise a known status or ``ValueError``."""
    if value is None or isinstance(value, AssignmentStatus):
        return value
    v = value.strip().lower()
    if not v or v == STATUS_ALL:
        return None
    try:
        return AssignmentStatus(v)
    except ValueError:
        raise ValueError(f"unknown status filter: {value!r}") from None


def _matches_text(a: Assignment, needle: str) -> bool:
    return (
        needle in a.title.casefold()
        or needle in a.course.casefold()
        or needle in a.description.casefold()
    )


def filter_assignments(
    assignments: Iterable[Assignment],
    status_filter: StatusFilter = STATUS_ALL,
    search_text: Optional[str] = "",
) -> Tuple[Assignment, ...]:
    """Single pass over ``assignments``; keeps their order."""
    status = parse_status_filter(status_filter)
    needle = (search_text or "").strip().casefold()
    return tuple(
        a for a in assignments
        if (status is None or a.status is status) and (not needle or _matches_text(a, needle))
    )
