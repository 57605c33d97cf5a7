from __future__ import annotations

from .assignment import Assignment, AssignmentStatus, FileMeta, Priority
from .course import Course
from .notification import Notification, NotificationCategory
from .user import Role

__all__ = [
    "Assignment",
    "AssignmentStatus",
    "Course",
    "FileMeta",
    "Notification",
    "NotificationCategory",
    "Priority",
    "Role",
]
