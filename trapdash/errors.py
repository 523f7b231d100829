"""
trapdash.errors — Console Error Taxonomy
==========================================

Every failure the console surfaces to an operator is one of these:

- :class:`ValidationError` — missing/invalid local input; never reaches
  the network.
- :class:`ApiError` — the control API answered with a non-2xx status.
- :class:`NetworkError` — the request never got an HTTP answer.
- :class:`PartialDataError` — one or more *required* parallel reads failed.
"""

from __future__ import annotations


class TrapdashError(Exception):
    """Base class for all console errors."""


class ValidationError(TrapdashError):
    """Required operator input is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ApiError(TrapdashError):
    """Non-2xx response from the admin API.

    ``str(err)`` carries both the status and the raw body so an operator
    can diagnose the failure from the message alone.
    """

    def __init__(self, status: int, body: str, operation: str | None = None) -> None:
        self.status = status
        self.body = body
        self.operation = operation
        prefix = f"{operation} failed: " if operation else ""
        super().__init__(f"{prefix}{status} {body}".rstrip())


class NetworkError(TrapdashError):
    """Transport-level failure (DNS, refused connection, timeout, ...)."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        prefix = f"{operation} failed: " if operation else ""
        super().__init__(f"{prefix}{message}")


class PartialDataError(TrapdashError):
    """Raised when required reads of a refresh cycle failed.

    ``failures`` maps the read name (``analytics``, ``events``, ``bans``)
    to the exception it raised.
    """

    def __init__(self, failures: dict[str, BaseException]) -> None:
        self.failures = failures
        detail = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"Failed to fetch {', '.join(failures)} ({detail})")
