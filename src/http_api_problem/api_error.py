"""Application error that carries a mandatory status and converts into a problem.

``ApiError`` is meant to be raised from request handlers in place of a
ready-made response. Unlike :class:`~http_api_problem.problem.ProblemDetails`
the status is mandatory, and the error may carry a chained source error and
server-side context, neither of which ever reaches a client.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import Any, Protocol, TypeVar, runtime_checkable

from .config.settings import get_settings
from .errors import ReservedFieldError
from .problem import RESERVED_FIELDS, ProblemDetails, describe_problem, normalize_extension_value
from .status import StatusCode
from .utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=type[BaseException])


class ApiError(Exception):
    """An error that should be returned from an HTTP API handler.

    The source error is stored as ``__cause__`` so tracebacks and other
    error-chain tooling see it, but it is never serialized.
    """

    def __init__(
        self,
        status: StatusCode | int | HTTPStatus,
        *,
        title: str | None = None,
        message: str | None = None,
        type_url: str | None = None,
        instance: str | None = None,
        fields: Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise the error.

        Args:
            status: Status code suggested for the response.
            title: Optional short summary for consumers.
            message: Human readable description; becomes the problem ``detail``.
            type_url: URL describing the error type.
            instance: URI reference identifying this occurrence.
            fields: Additional JSON members for the problem document.
            context: Server-side data for middleware; never serialized.

        Raises:
            InvalidStatusCode: If ``status`` is not a valid status code.
        """
        super().__init__()
        self.status = StatusCode.from_value(status)
        self.title = title
        self.message = message
        self.type_url = type_url
        self.instance = instance
        self.fields: dict[str, Any] = {}
        self.context: dict[str, Any] = dict(context or {})
        for key, value in (fields or {}).items():
            self.set_extension(key, value)

    # --------------------------------------------------------------------------
    # Conversions into ApiError
    # --------------------------------------------------------------------------

    @classmethod
    def from_os_error(cls, error: OSError) -> ApiError:
        return cls(HTTPStatus.INTERNAL_SERVER_ERROR, title="An IO error occurred").with_source(error)

    @classmethod
    def from_error(cls, error: BaseException) -> ApiError:
        """Convert an arbitrary exception into an :class:`ApiError`.

        ``ApiError`` instances are returned unchanged, objects implementing
        :class:`IntoApiError` convert themselves, ``OSError`` becomes an IO
        error and everything else a plain internal server error.
        """
        if isinstance(error, ApiError):
            return error
        if isinstance(error, IntoApiError):
            return error.into_api_error()
        if isinstance(error, OSError):
            return cls.from_os_error(error)
        return cls(HTTPStatus.INTERNAL_SERVER_ERROR).with_source(error)

    # --------------------------------------------------------------------------
    # Mutators
    # --------------------------------------------------------------------------

    def set_status(self, status: StatusCode | int | HTTPStatus) -> ApiError:
        self.status = StatusCode.from_value(status)
        return self

    def set_title(self, title: str) -> ApiError:
        self.title = title
        return self

    def set_message(self, message: str) -> ApiError:
        self.message = message
        return self

    set_detail = set_message

    def set_type_url(self, type_url: str) -> ApiError:
        self.type_url = type_url
        return self

    def set_instance(self, instance: str) -> ApiError:
        self.instance = instance
        return self

    def try_set_extension(self, key: str, value: Any) -> ApiError:
        """Add a field that becomes an extension member of the problem.

        Raises:
            ReservedFieldError: If ``key`` names a standard member.
            ExtensionValueError: If ``value`` cannot be represented as JSON.
        """
        if key in RESERVED_FIELDS:
            raise ReservedFieldError(key)
        self.fields[key] = normalize_extension_value(key, value)
        return self

    def set_extension(self, key: str, value: Any) -> ApiError:
        """Add a field; reserved names are ignored so the standard member wins."""
        try:
            return self.try_set_extension(key, value)
        except ReservedFieldError:
            if get_settings().log_reserved_collisions:
                logger.warning("api_error.field.reserved", key=key, status=self.status.code)
            return self

    add_field = set_extension
    try_add_field = try_set_extension

    def set_context(self, key: str, value: Any) -> ApiError:
        self.context[key] = value
        return self

    def with_source(self, source: BaseException) -> ApiError:
        """Attach the underlying error for diagnostics."""
        self.__cause__ = source
        return self

    # --------------------------------------------------------------------------
    # Accessors
    # --------------------------------------------------------------------------

    @property
    def source(self) -> BaseException | None:
        return self.__cause__

    def detail_message(self) -> str | None:
        """Return the message, falling back to the stringified source error."""
        if self.message is not None:
            return self.message
        if self.source is not None:
            return str(self.source) or None
        return None

    def to_problem_details(self) -> ProblemDetails:
        """Build the problem sent to clients; source and context are dropped."""
        return ProblemDetails(
            type_url=self.type_url,
            title=self.title,
            status=self.status,
            detail=self.detail_message(),
            instance=self.instance,
            extensions=dict(self.fields),
        )

    def __str__(self) -> str:
        return describe_problem(
            self.status, self.title, self.detail_message(), self.type_url, self.instance
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Like BaseException, the cause chain is not pickled.
        state = {key: value for key, value in self.__dict__.items() if key != "status"}
        return (type(self), (self.status.code,), state)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status.code}, title={self.title!r}, message={self.message!r})"


# ==============================================================================
# CONVERSION PROTOCOL
# ==============================================================================


@runtime_checkable
class IntoApiError(Protocol):
    """Objects, usually exceptions, that know which :class:`ApiError` they map to."""

    def into_api_error(self) -> ApiError: ...


def api_error(
    status: StatusCode | int | HTTPStatus,
    *,
    title: str | None = None,
    type_url: str | None = None,
) -> Callable[[E], E]:
    """Class decorator giving an exception type an ``into_api_error`` method.

    The exception text becomes the message and the exception itself the source.

    Example:
        >>> @api_error(404, title="Account missing")
        ... class AccountNotFound(LookupError):
        ...     pass
        >>> str(AccountNotFound("no account 42").into_api_error())
        '404 Not Found - Account missing - no account 42'
    """
    code = StatusCode.from_value(status)

    def decorate(cls: E) -> E:
        def into_api_error(self: BaseException) -> ApiError:
            error = ApiError(code, title=title, message=str(self) or None, type_url=type_url)
            return error.with_source(self)

        cls.into_api_error = into_api_error  # type: ignore[attr-defined]
        return cls

    return decorate


__all__ = ["ApiError", "IntoApiError", "api_error"]
