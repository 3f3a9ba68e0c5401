"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=400,
            detail="'first' must be in range 1..500",
            type="invalid-argument",
            extra={"argument": "first", "value": 0},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            403: "Forbidden",
            404: "Not Found",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class RequestError(AppException):
    """Client-caused error in the arguments of a call.

    Raised for out-of-range page sizes, unknown tag prefixes and cursors
    combined with other arguments. Surfaced per field in GraphQL responses.

    Example:
        raise RequestError(
            detail="'first' must be in range 1..500",
            extra={"argument": "first"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "invalid-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class InvalidCursorError(RequestError):
    """A continuation token could not be decoded.

    Covers corrupted base64/JSON, tokens minted by a different codec and
    stale tokens whose version or fields no longer match the query shape.
    """

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="invalid-cursor", extra=extra)


class RestrictedFieldError(AppException):
    """A field was requested that requires privileges the caller lacks."""

    def __init__(self, field: str) -> None:
        super().__init__(
            status_code=403,
            detail=f"'{field}' field is restricted",
            type="restricted-field",
            extra={"field": field},
        )


class StoreError(AppException):
    """The backing store failed while executing a batched query."""

    def __init__(
        self,
        detail: str,
        type: str = "store-error",
        status_code: int = 500,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail=detail,
            type=type,
            extra=extra,
        )


class StoreUnavailableError(StoreError):
    """No store connection could be obtained in time.

    Raised when the connection pool is exhausted. Clients may retry.
    """

    retryable = True

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(
            detail=detail,
            type="store-unavailable",
            status_code=503,
            extra=extra,
        )


class SchedulerError(AppException):
    """Internal error in the resolution scheduler."""

    def __init__(
        self,
        detail: str,
        type: str = "scheduler-error",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=500, detail=detail, type=type, extra=extra)


class SchedulerDeadlockError(SchedulerError):
    """A value can never resolve because no loader has work left to do.

    Attributes:
        unresolved: Mapping of loader identity (as text) to the keys whose
            deferred values were left pending.
    """

    def __init__(self, detail: str, unresolved: dict[str, list[Any]] | None = None) -> None:
        self.unresolved = unresolved or {}
        super().__init__(
            detail=detail,
            type="scheduler-deadlock",
            extra={"unresolved": {k: [repr(v) for v in vs] for k, vs in self.unresolved.items()}},
        )


class SchedulerPassLimitError(SchedulerError):
    """Resolution needed more scheduler passes than allowed."""

    def __init__(self, max_passes: int) -> None:
        self.max_passes = max_passes
        super().__init__(
            detail=f"Resolution exceeded {max_passes} scheduler passes",
            type="scheduler-pass-limit",
            extra={"max_passes": max_passes},
        )


__all__ = [
    "AppException",
    "InvalidCursorError",
    "RequestError",
    "RestrictedFieldError",
    "SchedulerDeadlockError",
    "SchedulerError",
    "SchedulerPassLimitError",
    "StoreError",
    "StoreUnavailableError",
]
