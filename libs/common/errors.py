"""Domain error taxonomy.

Service operations raise these before touching the store; the gateway's
exception handlers turn them into JSON responses. Each class carries the
HTTP status it maps to so routers never have to translate them by hand.
"""

from typing import ClassVar

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: ClassVar[int] = status.HTTP_400_BAD_REQUEST
    kind: ClassVar[str] = "Error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.detail!r})"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "NotFound"


class ValidationFailed(AppError):
    """Malformed input or a rule like "last member"."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "Validation"


class InvariantViolation(AppError):
    """The leadership-protection rule would be broken."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "InvariantViolation"


class Conflict(AppError):
    """A uniqueness rule was hit, usually by a lost race."""

    status_code = status.HTTP_409_CONFLICT
    kind = "Conflict"
