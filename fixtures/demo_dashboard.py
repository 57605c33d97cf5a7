# fixtures/demo_dashboard.py
"""Sample data a fresh dashboard session starts with.

Due dates are relative to ``now`` so the demo always has upcoming deadlines.
"""
from __future__ import annotations
from datetime import datetime, time, timedelta
from typing import List

from models import (
    Assignment, AssignmentStatus, Course, FileMeta, Notification,
    NotificationCategory, Priority,
)

COURSES = (
    Course(id=1, name="Web Development", instructor="Dr. Sarah Johnson", code="CS301"),
    Course(id=2, name="Database Systems", instructor="Prof. Michael Chen", code="CS302"),
    Course(id=3, name="Data Structures", instructor="Dr. Emily Davis", code="CS201"),
    Course(id=4, name="Operating Systems", instructor="Prof. Robert Wilson", code="CS401"),
    Course(id=5, name="Machine Learning", instructor="Dr. Priya Raman", code="CS450"),
)


def _at(now: datetime, days: int, hour: int = 23, minute: int = 59) -> datetime:
    day = (now + timedelta(days=days)).date()
    return datetime.combine(day, time(hour, minute), tzinfo=now.tzinfo)


def sample_assignments(now: datetime) -> List[Assignment]:
    return [
        Assignment(
            id=1,
            title="React Components Assignment",
            course="Web Development",
            due_date=_at(now, 5),
            status=AssignmentStatus.PENDING,
            description="Create a React component library with proper documentation",
            priority=Priority.HIGH,
        ),
        Assignment(
            id=2,
            title="Database Design Project",
            course="Database Systems",
            due_date=_at(now, 10),
            status=AssignmentStatus.SUBMITTED,
            description="Design and implement a normalized database schema",
            priority=Priority.MEDIUM,
            submitted_at=now - timedelta(days=1),
            attachments=(FileMeta(name="schema.sql", size_bytes=18_432, content_type="application/sql"),),
        ),
        Assignment(
            id=3,
            title="Algorithm Analysis Report",
            course="Data Structures",
            due_date=_at(now, -2),
            status=AssignmentStatus.GRADED,
            description="Analyze time complexity of sorting algorithms",
            priority=Priority.MEDIUM,
            grade=92,
            feedback="Clear complexity proofs; add benchmarks for nearly sorted input.",
            submitted_at=now - timedelta(days=4),
            attachments=(FileMeta(name="report.pdf", size_bytes=245_760, content_type="application/pdf"),),
        ),
        Assignment(
            id=4,
            title="Process Scheduler Simulation",
            course="Operating Systems",
            due_date=_at(now, 15),
            status=AssignmentStatus.PENDING,
            description="Simulate round-robin and priority scheduling and compare waiting times",
            priority=Priority.LOW,
        ),
    ]


def sample_notifications(now: datetime) -> List[Notification]:
    # oldest first, the feed keeps newest on top
    return [
        Notification(id=1, title="New assignment", message="React Components Assignment was added",
                     category=NotificationCategory.ASSIGNMENT, created_at=now - timedelta(days=3)),
        Notification(id=2, title="Assignment submitted", message="Database Design Project was submitted",
                     category=NotificationCategory.ASSIGNMENT, created_at=now - timedelta(days=1)),
        Notification(id=3, title="Grade posted", message="Algorithm Analysis Report was graded: 92/100",
                     category=NotificationCategory.GRADE, created_at=now - timedelta(hours=2)),
        Notification(id=4, title="Deadline approaching", message="React Components Assignment is due soon",
                     category=NotificationCategory.DEADLINE, created_at=now - timedelta(minutes=30)),
    ]
