"""RFC 7807 problem details value with fluent mutators and JSON mapping.

Key Responsibilities:
    - Model the five standard problem members plus arbitrary extension members
    - Offer chainable mutators so problems can be assembled inline
    - Map problems to and from JSON documents, merging extensions at the top
      level and keeping the standard members authoritative

Collaborators:
    - Upstream: Application code, :class:`http_api_problem.api_error.ApiError`
      and the gateway response adapters
    - Downstream: :class:`http_api_problem.status.StatusCode` for status
      validation, settings for the status type URL template

Side Effects:
    - Emits a Structlog warning when an extension collides with a reserved
      member and is dropped

Thread Safety:
    - Not thread-safe while being mutated; safe to share once built

Performance Characteristics:
    - O(n) serialization in the number of extension members
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Protocol, runtime_checkable

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .config.settings import get_settings
from .errors import ExtensionValueError, InvalidStatusCode, ProblemParseError, ReservedFieldError
from .status import StatusCode
from .utils.logging import get_logger

logger = get_logger(__name__)

# ==============================================================================
# CONSTANTS
# ==============================================================================

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
ABOUT_BLANK = "about:blank"
RESERVED_FIELDS = frozenset({"type", "title", "status", "detail", "instance"})
_MODEL_FIELDS = frozenset({"type_url", "title", "status", "detail", "instance", "extensions"})


def status_type_url(status: StatusCode | int) -> str:
    """Return the problem type URL derived from ``status`` by the configured template."""
    return get_settings().type_url_template.format(code=int(status))


def describe_problem(
    status: StatusCode | None,
    title: str | None,
    detail: str | None,
    type_url: str | None,
    instance: str | None,
) -> str:
    """Render a one-line, human readable summary of a problem."""
    text = str(status) if status is not None else "<no status>"
    if title is not None and detail is not None:
        return f"{text} - {title} - {detail}"
    if title is not None:
        return f"{text} - {title}"
    if detail is not None:
        return f"{text} - {detail}"
    if type_url is not None:
        return f"{text} of type {type_url}"
    if instance is not None:
        return f"{text} on {instance}"
    return text


def normalize_extension_value(key: str, value: Any) -> Any:
    """Return ``value`` as plain JSON-compatible Python data."""
    try:
        return to_jsonable_python(value)
    except PydanticSerializationError as err:
        raise ExtensionValueError(key, value) from err


def _report_reserved(key: str) -> None:
    if get_settings().log_reserved_collisions:
        logger.warning("problem.extension.reserved", key=key)


def _raise_status_error(err: ValidationError) -> None:
    """Re-raise the ``InvalidStatusCode`` pydantic wrapped into ``err``, if any."""
    for item in err.errors():
        cause = item.get("ctx", {}).get("error")
        if isinstance(cause, InvalidStatusCode):
            raise cause from None


# ==============================================================================
# PROBLEM DETAILS
# ==============================================================================


class ProblemDetails(BaseModel):
    """Description of a problem that can be returned by an HTTP API.

    All standard members are optional. ``type_url`` is serialized as
    ``"type"`` and defaults to ``about:blank`` on the wire.

    Example:
        >>> problem = (
        ...     ProblemDetails.new(422)
        ...     .set_title("You do not have enough credit.")
        ...     .set_detail("Your current balance is 30, but that costs 50.")
        ... )
        >>> str(problem)
        '422 Unprocessable Entity - You do not have enough credit. - Your current balance is 30, but that costs 50.'
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type_url: str | None = None
    title: str | None = None
    status: StatusCode | None = None
    detail: str | None = None
    instance: str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    def __init__(self, /, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as err:
            _raise_status_error(err)
            raise

    @classmethod
    def model_validate(cls, obj: Any, *args: Any, **kwargs: Any) -> ProblemDetails:
        try:
            return super().model_validate(obj, *args, **kwargs)
        except ValidationError as err:
            _raise_status_error(err)
            raise

    @classmethod
    def model_validate_json(
        cls, json_data: str | bytes | bytearray, *args: Any, **kwargs: Any
    ) -> ProblemDetails:
        try:
            return super().model_validate_json(json_data, *args, **kwargs)
        except ValidationError as err:
            _raise_status_error(err)
            raise

    @model_validator(mode="before")
    @classmethod
    def accept_wire_document(cls, data: Any) -> Any:
        """Accept the JSON document shape produced by :meth:`to_dict`.

        Input naming only model fields is passed through unchanged; anything
        carrying ``type`` or unknown keys is read as a problem document.
        """
        if not isinstance(data, Mapping):
            return data
        if "type" not in data and set(data) <= _MODEL_FIELDS:
            return data
        type_url = data.get("type")
        return {
            "type_url": None if type_url == ABOUT_BLANK else type_url,
            "title": data.get("title"),
            "status": data.get("status"),
            "detail": data.get("detail"),
            "instance": data.get("instance"),
            "extensions": {key: value for key, value in data.items() if key not in RESERVED_FIELDS},
        }

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value: Any) -> StatusCode | None:
        if value is None:
            return None
        return StatusCode.from_value(value)

    @field_validator("extensions")
    @classmethod
    def apply_extension_policy(cls, value: dict[str, Any]) -> dict[str, Any]:
        """Drop reserved keys and normalise values, as :meth:`set_extension` does."""
        extensions: dict[str, Any] = {}
        for key, item in value.items():
            if key in RESERVED_FIELDS:
                _report_reserved(key)
                continue
            extensions[key] = normalize_extension_value(key, item)
        return extensions

    @model_serializer(mode="plain")
    def serialize_document(self) -> dict[str, Any]:
        return self.to_dict()

    # --------------------------------------------------------------------------
    # Construction
    # --------------------------------------------------------------------------

    @classmethod
    def new(cls, status: StatusCode | int | HTTPStatus) -> ProblemDetails:
        """Create a problem with only ``status`` set."""
        return cls(status=StatusCode.from_value(status))

    @classmethod
    def from_status(cls, status: StatusCode | int | HTTPStatus) -> ProblemDetails:
        return cls.new(status)

    @classmethod
    def empty(cls) -> ProblemDetails:
        return cls()

    @classmethod
    def with_title(cls, status: StatusCode | int | HTTPStatus) -> ProblemDetails:
        """Create a problem whose title is the reason phrase of ``status``."""
        code = StatusCode.from_value(status)
        return cls(status=code, title=code.reason_phrase())

    @classmethod
    def with_title_and_type_from_status(cls, status: StatusCode | int | HTTPStatus) -> ProblemDetails:
        """Create a problem with title and type URL derived from ``status``.

        Example:
            >>> problem = ProblemDetails.with_title_and_type_from_status(503)
            >>> problem.type_url, problem.title
            ('https://httpstatuses.com/503', 'Service Unavailable')
        """
        code = StatusCode.from_value(status)
        return cls(status=code, title=code.reason_phrase(), type_url=status_type_url(code))

    with_title_and_type = with_title_and_type_from_status

    # --------------------------------------------------------------------------
    # Mutators
    # --------------------------------------------------------------------------

    def set_type_url(self, type_url: str) -> ProblemDetails:
        self.type_url = type_url
        return self

    def set_status(self, status: StatusCode | int | HTTPStatus) -> ProblemDetails:
        """Set the status.

        Raises:
            InvalidStatusCode: If ``status`` is not a valid status code.
        """
        self.status = StatusCode.from_value(status)
        return self

    def set_title(self, title: str) -> ProblemDetails:
        self.title = title
        return self

    def set_detail(self, detail: str) -> ProblemDetails:
        self.detail = detail
        return self

    def set_instance(self, instance: str) -> ProblemDetails:
        self.instance = instance
        return self

    def try_set_extension(self, key: str, value: Any) -> ProblemDetails:
        """Add or replace an extension member.

        Raises:
            ReservedFieldError: If ``key`` names a standard member.
            ExtensionValueError: If ``value`` cannot be represented as JSON.
        """
        if key in RESERVED_FIELDS:
            raise ReservedFieldError(key)
        self.extensions[key] = normalize_extension_value(key, value)
        return self

    def set_extension(self, key: str, value: Any) -> ProblemDetails:
        """Add or replace an extension member.

        Keys naming a standard member are ignored; the standard member wins.

        Raises:
            ExtensionValueError: If ``value`` cannot be represented as JSON.
        """
        try:
            return self.try_set_extension(key, value)
        except ReservedFieldError:
            _report_reserved(key)
            return self

    def remove_extension(self, key: str) -> ProblemDetails:
        self.extensions.pop(key, None)
        return self

    # --------------------------------------------------------------------------
    # Accessors
    # --------------------------------------------------------------------------

    def get_extension(self, key: str, default: Any = None) -> Any:
        return self.extensions.get(key, default)

    def extension_keys(self) -> list[str]:
        return [key for key in self.extensions if key not in RESERVED_FIELDS]

    # --------------------------------------------------------------------------
    # Serialization
    # --------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON document for this problem.

        ``type`` is always present; other standard members are omitted when
        unset. Extension members are merged at the top level, skipping any
        key that names a standard member.
        """
        payload: dict[str, Any] = {
            "type": self.type_url if self.type_url is not None else ABOUT_BLANK
        }
        if self.title is not None:
            payload["title"] = self.title
        if self.status is not None:
            payload["status"] = self.status.code
        if self.detail is not None:
            payload["detail"] = self.detail
        if self.instance is not None:
            payload["instance"] = self.instance
        for key, value in self.extensions.items():
            if key not in RESERVED_FIELDS:
                payload[key] = value
        return payload

    def json_string(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def json_bytes(self) -> bytes:
        return self.json_string().encode("utf-8")

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> ProblemDetails:
        """Rebuild a problem from a JSON document.

        Args:
            document: Decoded JSON object.

        Returns:
            Problem whose extensions hold every non-standard member.

        Raises:
            InvalidStatusCode: If ``status`` is an integer outside 100-599.
            ProblemParseError: If the document has any other shape problem.
        """
        if not isinstance(document, Mapping):
            raise ProblemParseError(
                f"Expected a JSON object for problem details, got {type(document).__name__}"
            )

        raw_status = document.get("status")
        if raw_status is not None and (isinstance(raw_status, bool) or not isinstance(raw_status, int)):
            raise ProblemParseError(f"Problem 'status' must be an integer, got {raw_status!r}")
        status = StatusCode.from_integer(raw_status) if raw_status is not None else None

        type_url = document.get("type")
        fields = {
            "type_url": None if type_url == ABOUT_BLANK else type_url,
            "title": document.get("title"),
            "status": status,
            "detail": document.get("detail"),
            "instance": document.get("instance"),
            "extensions": {
                key: value for key, value in document.items() if key not in RESERVED_FIELDS
            },
        }
        try:
            return cls.model_validate(fields)
        except ValidationError as err:
            raise ProblemParseError(f"Invalid problem details document: {err}") from err

    @classmethod
    def from_json(cls, data: str | bytes | bytearray) -> ProblemDetails:
        """Parse a JSON text into a problem.

        Raises:
            InvalidStatusCode: If ``status`` is an integer outside 100-599.
            ProblemParseError: If ``data`` is not a JSON object of the right shape.
        """
        try:
            document = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            raise ProblemParseError(f"Malformed problem details JSON: {err}") from err
        return cls.from_dict(document)

    # --------------------------------------------------------------------------
    # Protocols
    # --------------------------------------------------------------------------

    def to_problem_details(self) -> ProblemDetails:
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProblemDetails):
            return NotImplemented
        return self.comparison_key() == other.comparison_key()

    def comparison_key(self) -> tuple[Any, ...]:
        return (
            self.type_url if self.type_url is not None else ABOUT_BLANK,
            self.title,
            self.status,
            self.detail,
            self.instance,
            {key: value for key, value in self.extensions.items() if key not in RESERVED_FIELDS},
        )

    def __str__(self) -> str:
        return describe_problem(self.status, self.title, self.detail, self.type_url, self.instance)


# ==============================================================================
# CONVERSION CAPABILITY
# ==============================================================================


@runtime_checkable
class ProblemConvertible(Protocol):
    """Anything that can describe itself as a :class:`ProblemDetails`."""

    def to_problem_details(self) -> ProblemDetails: ...


def into_problem_details(value: Any) -> ProblemDetails:
    """Convert ``value`` into a :class:`ProblemDetails`.

    Accepts problems, objects implementing ``to_problem_details()`` or
    ``into_api_error()``, and status codes given as ``StatusCode``, ``int``
    or :class:`http.HTTPStatus`. Status codes convert with only ``status`` set.

    Raises:
        InvalidStatusCode: If an integer status is out of range.
        TypeError: If ``value`` is not convertible.
    """
    if isinstance(value, ProblemConvertible):
        return value.to_problem_details()
    into_api_error = getattr(value, "into_api_error", None)
    if callable(into_api_error):
        return into_api_error().to_problem_details()
    if isinstance(value, (StatusCode, int)):
        return ProblemDetails.from_status(value)
    raise TypeError(f"Cannot convert {type(value).__name__} into ProblemDetails")


__all__ = [
    "ABOUT_BLANK",
    "PROBLEM_JSON_MEDIA_TYPE",
    "RESERVED_FIELDS",
    "ProblemConvertible",
    "ProblemDetails",
    "describe_problem",
    "into_problem_details",
    "normalize_extension_value",
    "status_type_url",
]
