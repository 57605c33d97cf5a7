from __future__ import annotations
from typing import Dict, Optional


class DashboardError(Exception):
    """Base for rejected dashboard operations. State is never changed when one is raised."""

    code = "dashboard_error"
    http_status = 400

    def __init__(self, message: str = "", *, assignment_id: Optional[int] = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.assignment_id = assignment_id

    def to_dict(self) -> dict:
        body = {"error": self.code, "detail": self.message}
        if self.assignment_id is not None:
            body["assignment_id"] = self.assignment_id
        return body


class ValidationError(DashboardError):
    code = "validation_error"
    http_status = 422

    def __init__(self, errors: Dict[str, str], *, assignment_id: Optional[int] = None):
        super().__init__("invalid input", assignment_id=assignment_id)
        self.errors = dict(errors)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["fields"] = dict(self.errors)
        return body


class NotFoundError(DashboardError):
    code = "not_found"
    http_status = 404

    def __init__(self, assignment_id: int):
        super().__init__(f"assignment {assignment_id} does not exist", assignment_id=assignment_id)


class InvalidStateError(DashboardError):
    code = "invalid_state"
    http_status = 409

    def __init__(self, assignment_id: int, status: str, action: str):
        super().__init__(f"cannot {action} an assignment that is {status}", assignment_id=assignment_id)
        self.status = status
        self.action = action


class EmptySubmissionError(DashboardError):
    code = "empty_submission"
    http_status = 400

    def __init__(self, assignment_id: int):
        super().__init__("at least one file is required to submit", assignment_id=assignment_id)
