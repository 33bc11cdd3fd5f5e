"""
Error taxonomy for the chain scheduler.

All of these are local validation failures that surface to the caller as
4xx responses. Chains that do not fit into the day are not errors; they are
dropped and reported on the plan instead.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for errors raised while preparing or building a plan."""

    status_code = 400
    error = "Scheduling error"

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.error, "details": self.details}


class InvalidWindow(SchedulingError):
    """Raised when the wake time is not strictly before the sleep time."""

    error = "Invalid window"


class InvalidParameter(SchedulingError):
    """Raised when a request parameter cannot be parsed or is out of range."""

    def __init__(self, field: str, details: Optional[str] = None):
        super().__init__(details or f"{field} is invalid")
        self.field = field
        self.error = f"Invalid {field}"


class Unauthorized(SchedulingError):
    """Raised by the session boundary when no valid caller identity is present."""

    status_code = 401
    error = "Unauthorized"

    def __init__(self, details: str = "A valid session is required"):
        super().__init__(details)

    def to_dict(self) -> dict:
        return {"error": self.error}
