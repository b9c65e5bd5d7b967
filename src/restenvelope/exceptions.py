"""Classified errors: exceptions that carry their own HTTP status.

A classified error exposes a numeric ``code``, a ``message`` and an ordered
list of ``error_fields`` (field name + message pairs). Anything else raised by
application code is a generic error and is described only by ``str(exc)``.

Classification is structural: any exception with the right attributes counts,
not only ``APIError``. The helpers below are what the envelope schemas use to
decide which branch an exception takes.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ErrorField:
    """A single field-level detail attached to a classified error."""

    field: str
    message: str


class ErrorFieldLike(Protocol):
    field: str
    message: str


@runtime_checkable
class ClassifiedError(Protocol):
    """Shape of an exception that carries a status code and field details."""

    code: int
    message: str
    error_fields: Sequence[ErrorFieldLike]


class APIError(Exception):
    """Raised by application code to return a specific status to the client.

    Example:
        raise APIError(
            422,
            "Validation failed",
            ErrorField("email", "email format is invalid"),
        )
    """

    def __init__(self, code: int, message: str, *error_fields: ErrorField) -> None:
        self.code = code
        self.message = message
        self.error_fields = list(error_fields)
        super().__init__(message)

    def __repr__(self) -> str:
        return f"APIError(code={self.code}, message={self.message!r}, error_fields={self.error_fields!r})"


def _is_field_detail(item: object) -> bool:
    return isinstance(getattr(item, "field", None), str) and isinstance(getattr(item, "message", None), str)


def _is_classified(exc: BaseException) -> bool:
    if not isinstance(exc, ClassifiedError):
        return False
    # bool is an int subclass; True is not a status code
    if not isinstance(exc.code, int) or isinstance(exc.code, bool):
        return False
    if not isinstance(exc.message, str):
        return False
    error_fields = exc.error_fields
    if not isinstance(error_fields, Sequence) or isinstance(error_fields, (str, bytes)):
        return False
    return all(_is_field_detail(item) for item in error_fields)


def parse(exc: BaseException | None) -> ClassifiedError | None:
    """Return the classified error behind ``exc``, or None for generic errors.

    Checks ``exc`` itself first, then follows explicit ``raise ... from ...``
    causes, so a classified error re-raised as the cause of another exception
    is still found.
    """
    seen: set[int] = set()
    current = exc
    while current is not None and id(current) not in seen:
        if _is_classified(current):
            return current  # type: ignore[return-value]
        seen.add(id(current))
        current = current.__cause__
    return None


def get_error_code(exc: BaseException | None) -> int:
    """Status code carried by ``exc``, or 0 when it is not classified."""
    classified = parse(exc)
    return classified.code if classified is not None else 0


def get_error_fields(exc: BaseException | None) -> list[ErrorFieldLike]:
    """Field details carried by ``exc``, in order. Empty for generic errors."""
    classified = parse(exc)
    if classified is None:
        return []
    return list(classified.error_fields)


def has_error_field(exc: BaseException | None, field: str) -> bool:
    return any(error_field.field == field for error_field in get_error_fields(exc))


def get_error_field_message(exc: BaseException | None, field: str) -> str:
    """Message of the first detail for ``field``, or "" if there is none."""
    for error_field in get_error_fields(exc):
        if error_field.field == field:
            return error_field.message
    return ""
