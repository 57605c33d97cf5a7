from __future__ import annotations
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class NotificationCategory(str, Enum):
    ASSIGNMENT = "assignment"
    DEADLINE = "deadline"
    GRADE = "grade"
    MATERIAL = "material"


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    message: str
    category: NotificationCategory
    created_at: datetime
    read: bool = False
