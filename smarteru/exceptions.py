"""Exception hierarchy for the SmarterU client.

- SmarterUClientError: base class for everything raised by this package
- MissingValueError: a request cannot be built (API key or identifier absent)
- HttpError: the transport failed or returned a non-success status
- SmarterUError: the API reported ``Result = Failed``
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class SmarterUClientError(Exception):
    """Base exception for all SmarterU client errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class MissingValueError(SmarterUClientError, ValueError):
    """A value required to build the request was not supplied."""


class HttpError(SmarterUClientError):
    """The HTTP call to SmarterU failed before a usable response arrived.

    Attributes:
        status_code: HTTP status code, when the server answered at all.
        response_body: Raw response body if available.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, details)


class SmarterUError(SmarterUClientError):
    """The SmarterU API reported a fatal error.

    The message is the comma-separated ``"{ErrorID}: {ErrorMessage}"`` list
    taken from the response; the raw mapping is kept on ``errors``.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Mapping[str, str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.errors: Dict[str, str] = dict(errors or {})
        super().__init__(message, details)

    @classmethod
    def from_errors(cls, errors: Mapping[str, str]) -> "SmarterUError":
        message = ", ".join(f"{error_id}: {text}" for error_id, text in errors.items())
        return cls(message, errors)


__all__ = ["SmarterUClientError", "MissingValueError", "HttpError", "SmarterUError"]
