"""Centralized internal error hierarchy.

These exceptions provide semantic categories for logging and retry logic.
Only raise these inside application/network boundaries; never surface raw
socket or JSON errors to retry code, wrap them instead.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transient network/IO issues (safe to retry).
  ParsingError         – Malformed persisted data or protocol lines.
  PersistenceError     – Enrollment file could not be written.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors.

    This includes connection refusals, timeouts and resets that may be
    retried when establishing the IRC link.
    """


class ParsingError(InternalError):
    """Exception raised when persisted or received data cannot be parsed."""


class PersistenceError(InternalError):
    """Exception raised when the enrollment file cannot be written."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "PersistenceError",
]
