"""HTTP status code value type with reason phrase lookup.

Key Responsibilities:
    - Validate raw integers as HTTP status codes in the range 100-599
    - Provide standard reason phrases from a static, read-only table
    - Expose category predicates (informational, success, ...)

Collaborators:
    - Upstream: :mod:`http_api_problem.problem` and
      :mod:`http_api_problem.api_error` coerce every status through
      :meth:`StatusCode.from_value`
    - Downstream: None

Side Effects:
    - None; the reason phrase table is built once at import time

Thread Safety:
    - Thread-safe; ``StatusCode`` instances are frozen

Performance Characteristics:
    - O(1) construction and lookup
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from types import MappingProxyType
from typing import Any, Mapping

from .errors import InvalidStatusCode

# ==============================================================================
# REASON PHRASES
# ==============================================================================

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599

REASON_PHRASES: Mapping[int, str] = MappingProxyType(
    {
        100: "Continue",
        101: "Switching Protocols",
        102: "Processing",
        103: "Early Hints",
        200: "OK",
        201: "Created",
        202: "Accepted",
        203: "Non Authoritative Information",
        204: "No Content",
        205: "Reset Content",
        206: "Partial Content",
        207: "Multi-Status",
        208: "Already Reported",
        226: "IM Used",
        300: "Multiple Choices",
        301: "Moved Permanently",
        302: "Found",
        303: "See Other",
        304: "Not Modified",
        305: "Use Proxy",
        307: "Temporary Redirect",
        308: "Permanent Redirect",
        400: "Bad Request",
        401: "Unauthorized",
        402: "Payment Required",
        403: "Forbidden",
        404: "Not Found",
        405: "Method Not Allowed",
        406: "Not Acceptable",
        407: "Proxy Authentication Required",
        408: "Request Timeout",
        409: "Conflict",
        410: "Gone",
        411: "Length Required",
        412: "Precondition Failed",
        413: "Payload Too Large",
        414: "URI Too Long",
        415: "Unsupported Media Type",
        416: "Range Not Satisfiable",
        417: "Expectation Failed",
        418: "I'm a teapot",
        421: "Misdirected Request",
        422: "Unprocessable Entity",
        423: "Locked",
        424: "Failed Dependency",
        425: "Too Early",
        426: "Upgrade Required",
        428: "Precondition Required",
        429: "Too Many Requests",
        431: "Request Header Fields Too Large",
        451: "Unavailable For Legal Reasons",
        500: "Internal Server Error",
        501: "Not Implemented",
        502: "Bad Gateway",
        503: "Service Unavailable",
        504: "Gateway Timeout",
        505: "HTTP Version Not Supported",
        506: "Variant Also Negotiates",
        507: "Insufficient Storage",
        508: "Loop Detected",
        510: "Not Extended",
        511: "Network Authentication Required",
    }
)

# Phrases for codes that are valid but have no registered meaning, keyed by class.
_CLASS_FALLBACK_PHRASES: Mapping[int, str] = MappingProxyType(
    {
        1: "Unknown Informational Status",
        2: "Unknown Success Status",
        3: "Unknown Redirection Status",
        4: "Unknown Client Error",
        5: "Unknown Server Error",
    }
)


# ==============================================================================
# STATUS CODE
# ==============================================================================


@dataclass(frozen=True, slots=True, order=True)
class StatusCode:
    """An HTTP status code between 100 and 599.

    Unregistered codes inside the range are accepted; their reason phrase
    falls back to a generic phrase for the status class.

    Example:
        >>> StatusCode(404).reason_phrase()
        'Not Found'
        >>> str(StatusCode(499))
        '499 Unknown Client Error'
    """

    code: int

    def __post_init__(self) -> None:
        if isinstance(self.code, bool) or not isinstance(self.code, int):
            raise InvalidStatusCode(self.code)
        if not MIN_STATUS_CODE <= self.code <= MAX_STATUS_CODE:
            raise InvalidStatusCode(self.code)

    @classmethod
    def from_integer(cls, value: int) -> StatusCode:
        """Create a status code from an integer, failing outside 100-599."""
        return cls(value)

    @classmethod
    def from_value(cls, value: Any) -> StatusCode:
        """Coerce ``value`` into a :class:`StatusCode`.

        Args:
            value: A ``StatusCode``, ``int``, :class:`http.HTTPStatus` or a
                string of decimal digits.

        Returns:
            The corresponding status code.

        Raises:
            InvalidStatusCode: If ``value`` has another type or lies outside
                the valid range.
        """
        if isinstance(value, StatusCode):
            return value
        if isinstance(value, HTTPStatus):
            return cls(int(value))
        if isinstance(value, str):
            text = value.strip()
            if not text.isdigit():
                raise InvalidStatusCode(value)
            return cls(int(text))
        return cls(value)

    def reason_phrase(self) -> str:
        """Return the standard reason phrase, or the class fallback phrase."""
        phrase = REASON_PHRASES.get(self.code)
        if phrase is not None:
            return phrase
        return _CLASS_FALLBACK_PHRASES[self.code // 100]

    def is_registered(self) -> bool:
        return self.code in REASON_PHRASES

    def is_informational(self) -> bool:
        return 100 <= self.code < 200

    def is_success(self) -> bool:
        return 200 <= self.code < 300

    def is_redirection(self) -> bool:
        return 300 <= self.code < 400

    def is_client_error(self) -> bool:
        return 400 <= self.code < 500

    def is_server_error(self) -> bool:
        return 500 <= self.code < 600

    def __int__(self) -> int:
        return self.code

    def __index__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return f"{self.code} {self.reason_phrase()}"


__all__ = ["MAX_STATUS_CODE", "MIN_STATUS_CODE", "REASON_PHRASES", "StatusCode"]
