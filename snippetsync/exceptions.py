# snippetsync/exceptions.py
# Application error hierarchy; error_code is the discriminant clients switch on

from typing import Optional


class AppError(Exception):
    """Base application error with structured response."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class DatabaseError(AppError):
    """Database operation failed."""
    def __init__(self, message: str = "Database operation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=503,
            details=details
        )


class ValidationError(AppError):
    """Request validation failed."""
    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class UnauthorizedError(AppError):
    """Caller identity missing."""
    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=401,
        )


class ForbiddenError(AppError):
    """Caller is not allowed to touch the resource."""
    def __init__(self, message: str = "Access denied"):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            status_code=403,
        )


class RateLimitError(AppError):
    """Rate limit exceeded."""
    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Rate limit exceeded. Retry after {retry_after} seconds.",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            details={"retry_after": retry_after}
        )


class SnippetNotFoundError(AppError):
    """The referenced snippet does not exist."""
    def __init__(self, snippet_id: str):
        super().__init__(
            message="Snippet not found",
            error_code="SNIPPET_NOT_FOUND",
            status_code=404,
            details={"snippet_id": snippet_id}
        )
        self.snippet_id = snippet_id


class CodeNotFoundError(AppError):
    """Share code was never issued, has already been removed, or (with
    snippet_id) the snippet currently has no live code."""
    def __init__(self, code: Optional[str] = None, snippet_id: Optional[str] = None):
        super().__init__(
            message="Share code not found",
            error_code="CODE_NOT_FOUND",
            status_code=404,
            details={"snippet_id": snippet_id} if snippet_id else None,
        )
        self.code = code
        self.snippet_id = snippet_id


class CodeExpiredError(AppError):
    """Share code exists but its window has closed; the row is deleted on detection."""
    def __init__(self, code: str):
        super().__init__(
            message="Share code has expired, please generate a new one",
            error_code="CODE_EXPIRED",
            status_code=410,
        )
        self.code = code


class GenerationExhaustedError(AppError):
    """Every attempt to find a free share code collided."""
    def __init__(self, attempts: int):
        super().__init__(
            message=f"Failed to generate a unique share code after {attempts} attempts",
            error_code="GENERATION_EXHAUSTED",
            status_code=500,
            details={"attempts": attempts}
        )
        self.attempts = attempts


class DuplicateCodeError(Exception):
    """Insert rejected by the unique constraint on share_codes.code.

    Internal to the share-code subsystem: the service retries on it and
    never lets it reach a response.
    """

    def __init__(self, code: str):
        super().__init__(f"share code {code!r} already exists")
        self.code = code
