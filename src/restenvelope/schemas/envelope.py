"""Generic response envelope shared by every endpoint.

Serialized as {"code": 200, "error": {...}, "data": ...}. "code" is always
present; "error" and "data" are left out when unset, so clients must not
assume either key exists.
"""

from typing import Any, Self

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer

from restenvelope.config import settings
from restenvelope.exceptions import parse
from restenvelope.logging import get_logger
from restenvelope.schemas.error import ErrorDetail

logger = get_logger(__name__)


class Envelope[T](BaseModel):
    """Status code, optional error detail and optional payload of type ``T``.

    ``[T]`` is a Python 3.12 type parameter, so one class serves every payload::

        Envelope[UserResponse]().set_code(200).set_data(user)
        Envelope[UserResponse]().set_error_from_exception(exc)

    Every setter mutates the envelope in place and returns it. Nothing stops a
    later ``set_code``/``set_error`` from overriding what
    ``set_error_from_exception`` derived.
    """

    code: int = 0
    error: ErrorDetail | None = None
    data: T | None = None

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload: dict[str, Any] = handler(self)
        if self.error is None:
            payload.pop("error", None)
        if self.data is None:
            payload.pop("data", None)
        return payload

    def set_code(self, code: int) -> Self:
        self.code = code
        return self

    def set_data(self, data: T | None) -> Self:
        self.data = data
        return self

    def set_error(self, error: ErrorDetail | None) -> Self:
        """Attach a pre-built error detail, or clear it with None."""
        self.error = error
        return self

    def set_error_from_exception(self, exc: BaseException | None) -> Self:
        """Derive code and error detail from a raised exception.

        None leaves the envelope untouched, code included. Classified errors
        supply their own code; everything else gets the configured default
        (500 unless overridden). The error detail is rebuilt by
        ``ErrorDetail.parse_exception`` so message and field extraction stay
        in one place.
        """
        if exc is None:
            return self

        self.code = settings.default_error_code

        classified = parse(exc)
        if classified is not None:
            self.code = classified.code
            logger.debug(
                "classified_error_mapped",
                code=self.code,
                field_count=len(classified.error_fields),
            )
        else:
            logger.debug(
                "generic_error_mapped",
                code=self.code,
                error_type=type(exc).__name__,
            )

        self.error = ErrorDetail().parse_exception(exc)
        return self
