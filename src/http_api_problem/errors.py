"""Exception hierarchy for problem details construction and parsing."""

from __future__ import annotations

from typing import Any


class ProblemError(Exception):
    """Base error for everything raised by this package."""


class InvalidStatusCode(ProblemError, ValueError):
    """Raised when a value cannot be interpreted as an HTTP status code."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid HTTP status code {value!r}: expected an integer in [100, 599]")


class ProblemParseError(ProblemError, ValueError):
    """Raised when a document does not have the shape of a problem details object."""


class ReservedFieldError(ProblemError, KeyError):
    """Raised when an extension would shadow one of the standard RFC 7807 members."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"'{field}' is a reserved field name")

    def __str__(self) -> str:
        return str(self.args[0])


class ExtensionValueError(ProblemError, TypeError):
    """Raised when an extension value cannot be represented as JSON."""

    def __init__(self, key: str, value: Any) -> None:
        self.key = key
        message = f"Extension '{key}' holds a value of type {type(value).__name__} that is not JSON serializable"
        super().__init__(message)


__all__ = [
    "ExtensionValueError",
    "InvalidStatusCode",
    "ProblemError",
    "ProblemParseError",
    "ReservedFieldError",
]
