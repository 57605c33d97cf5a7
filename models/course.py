from __future__ import annotations
from pydantic import BaseModel, ConfigDict


class Course(BaseModel):
    """Read-only reference data; assignments point at it by ``name``."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    instructor: str
    code: str
