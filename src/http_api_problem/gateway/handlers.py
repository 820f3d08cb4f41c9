"""FastAPI exception handlers that answer with problem details."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..api_error import ApiError
from ..problem import ProblemDetails
from ..utils.logging import get_logger
from .responses import create_problem_response

logger = get_logger(__name__)


def _log_problem(event: str, request: Request, problem: ProblemDetails) -> None:
    logger.error(
        event,
        method=request.method,
        path=request.url.path,
        problem=problem.to_dict(),
    )


def register_problem_handlers(app: FastAPI) -> FastAPI:
    """Install handlers translating errors into problem responses.

    Handles :class:`ApiError`, Starlette ``HTTPException`` and request
    validation errors. Returns ``app`` to allow chaining in factories.
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        problem = exc.to_problem_details()
        _log_problem("problem.response", request, problem)
        return create_problem_response(problem)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        problem = ProblemDetails.with_title_and_type_from_status(exc.status_code)
        if exc.detail and exc.detail != problem.title:
            problem.set_detail(str(exc.detail))
        _log_problem("problem.response", request, problem)
        return create_problem_response(problem, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        problem = (
            ProblemDetails.with_title_and_type_from_status(422)
            .set_detail("One or more parameters are invalid.")
            .set_extension("errors", jsonable_encoder(exc.errors()))
        )
        _log_problem("problem.response", request, problem)
        return create_problem_response(problem)

    return app


__all__ = ["register_problem_handlers"]
