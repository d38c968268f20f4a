"""
Exam Builder Backend — Application Exception Hierarchy
========================================================

What:  Tagged exceptions for every failure a user operation can produce.
Why:   Each exception carries an explicit `kind`. The HTTP layer maps kinds
       to status codes through STATUS_BY_KIND and never inspects message
       text to decide how to respond.
How:   Services raise these; the handlers registered in main.py turn them
       into `{success: false, message}` envelopes.

Exception Hierarchy:
    ExamBuilderError (base)
    ├── InvalidInputError     → 400  malformed user identifier
    ├── MissingFieldsError    → 400  required create field absent
    ├── DuplicateEmailError   → 400  email taken at create time
    ├── EmailInUseError       → 400  email taken by another user at update time
    ├── NotFoundError         → 404  no row for the given id
    └── UnexpectedError       → 500  anything from persistence not classified above
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    MISSING_FIELDS = "missing_fields"
    DUPLICATE_EMAIL = "duplicate_email"
    EMAIL_IN_USE = "email_in_use"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.MISSING_FIELDS: 400,
    ErrorKind.DUPLICATE_EMAIL: 400,
    ErrorKind.EMAIL_IN_USE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNEXPECTED: 500,
}


class ExamBuilderError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        kind:     Taxonomy tag; decides the HTTP status.
        message:  User-facing description, safe to return in a response.
        context:  Extra debug info for logs.
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class InvalidInputError(ExamBuilderError):
    """Raised when a user id is not a positive integer."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str = "Invalid ID. Must be a positive integer",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MissingFieldsError(ExamBuilderError):
    """
    Raised by create when name, email or password is absent or blank.

    `fields` lists the missing ones in declaration order.
    """

    kind = ErrorKind.MISSING_FIELDS

    def __init__(self, fields=None, context: Optional[Dict[str, Any]] = None):
        self.fields = list(fields or [])
        ctx = context or {}
        ctx["missing_fields"] = self.fields
        super().__init__(message="Name, email and password are required", context=ctx)


class DuplicateEmailError(ExamBuilderError):
    """Raised by create when another user already holds the email."""

    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, email: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if email:
            ctx["email"] = email
        super().__init__(message="Email already registered", context=ctx)


class EmailInUseError(ExamBuilderError):
    """Raised by update when the new email belongs to a different user."""

    kind = ErrorKind.EMAIL_IN_USE

    def __init__(self, email: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if email:
            ctx["email"] = email
        super().__init__(message="Email already in use by another user", context=ctx)


class NotFoundError(ExamBuilderError):
    """
    Raised when no user exists for the given id.

    get_user returns None instead of raising; update and delete raise this.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "User",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UnexpectedError(ExamBuilderError):
    """
    Wraps a persistence failure the service could not classify.

    The handler returns `message` plus the original error text under
    `error`, so operators can see what went wrong without reading logs.
    """

    kind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str = "Unexpected error",
        original: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if original is not None:
            ctx["original_error"] = str(original)
            ctx["error_type"] = type(original).__name__
        super().__init__(message=message, context=ctx)

    @property
    def detail(self) -> str:
        return self.context.get("original_error", self.message)
