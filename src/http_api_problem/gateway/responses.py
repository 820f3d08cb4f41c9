"""Starlette responses carrying ``application/problem+json`` bodies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette.responses import JSONResponse

from ..config.settings import get_settings
from ..problem import PROBLEM_JSON_MEDIA_TYPE, into_problem_details
from ..status import StatusCode


def create_problem_response(
    value: Any,
    *,
    fallback_status: StatusCode | int | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Create a JSON response for problem details.

    Args:
        value: A problem or anything :func:`into_problem_details` accepts.
        fallback_status: Status used when the problem carries none. Defaults
            to the configured ``fallback_status``.
        headers: Extra response headers.

    Returns:
        JSON response with the problem status and ``application/problem+json``
        media type.
    """
    problem = into_problem_details(value)
    if problem.status is not None:
        status = problem.status
    elif fallback_status is not None:
        status = StatusCode.from_value(fallback_status)
    else:
        status = StatusCode.from_value(get_settings().fallback_status)

    response_headers = dict(headers or {})
    retry_after = problem.get_extension("retry_after")
    if isinstance(retry_after, (int, float)) and not isinstance(retry_after, bool) and retry_after > 0:
        response_headers.setdefault("Retry-After", str(int(retry_after)))

    return JSONResponse(
        problem.to_dict(),
        status_code=status.code,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
        headers=response_headers or None,
    )


__all__ = ["create_problem_response"]
