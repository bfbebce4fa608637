"""Domain exceptions raised by services and mapped to HTTP responses by the error handler."""

from __future__ import annotations


class HabitflowError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500
    code = "server_error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class UnauthorizedError(HabitflowError):
    """Missing or invalid identity."""

    status_code = 401
    code = "unauthorized"


class BadRequestError(HabitflowError):
    """Request is well-formed but not allowed (self-follow, empty update)."""

    status_code = 400
    code = "bad_request"


class NotFoundError(HabitflowError):
    """Resource absent or not owned by the caller."""

    status_code = 404
    code = "not_found"


class ConflictError(HabitflowError):
    """Uniqueness rule violated."""

    status_code = 409
    code = "conflict"


class AlreadyCompletedError(ConflictError):
    """A completion already exists for this habit and period."""

    code = "already_completed"
