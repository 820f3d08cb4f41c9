"""HTTP API problem details (RFC 7807) for Python web services.

Example:
    >>> from http_api_problem import ProblemDetails
    >>> problem = ProblemDetails.with_title_and_type_from_status(404).set_detail("No such order")
    >>> problem.to_dict()["type"]
    'https://httpstatuses.com/404'

The FastAPI integration lives in :mod:`http_api_problem.gateway` and needs the
``fastapi`` extra.
"""

from .api_error import ApiError, IntoApiError, api_error
from .errors import (
    ExtensionValueError,
    InvalidStatusCode,
    ProblemError,
    ProblemParseError,
    ReservedFieldError,
)
from .problem import (
    ABOUT_BLANK,
    PROBLEM_JSON_MEDIA_TYPE,
    RESERVED_FIELDS,
    ProblemConvertible,
    ProblemDetails,
    into_problem_details,
)
from .status import REASON_PHRASES, StatusCode

__version__ = "0.1.0"

__all__ = [
    "ABOUT_BLANK",
    "PROBLEM_JSON_MEDIA_TYPE",
    "REASON_PHRASES",
    "RESERVED_FIELDS",
    "ApiError",
    "ExtensionValueError",
    "IntoApiError",
    "InvalidStatusCode",
    "ProblemConvertible",
    "ProblemDetails",
    "ProblemError",
    "ProblemParseError",
    "ReservedFieldError",
    "StatusCode",
    "api_error",
    "into_problem_details",
]
