"""Error schemas embedded in every response envelope.

Serialized as {"message": "...", "error_fields": [{"field": "...", "message": "..."}]},
with "error_fields" omitted when there are no field-level errors.
"""

from typing import Any, Self

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer

from restenvelope.exceptions import parse


class FieldError(BaseModel):
    """A field that caused an error and why."""

    field: str
    message: str


class ErrorDetail(BaseModel):
    """Human-readable error message plus optional field-level errors.

    ``error_fields`` is always a list, so ``len(detail.error_fields)`` is safe
    without a None check. Setters return the same instance for chaining::

        ErrorDetail().set_message("Validation failed").add_error_fields(
            FieldError(field="email", message="email format is invalid"),
        )
    """

    message: str = ""
    error_fields: list[FieldError] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_empty_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload: dict[str, Any] = handler(self)
        if not self.error_fields:
            payload.pop("error_fields", None)
        return payload

    def set_message(self, message: str) -> Self:
        self.message = message
        return self

    def add_error_fields(self, *error_fields: FieldError) -> Self:
        """Append field errors after the existing ones, in call order."""
        self.error_fields.extend(error_fields)
        return self

    def parse_exception(self, exc: BaseException | None) -> Self:
        """Fill message and field errors from a raised exception.

        - None: nothing changes.
        - Classified error: message and field errors are taken from it, and
          the field list is rebuilt from scratch.
        - Anything else: message is ``str(exc)``, field errors are left alone.
        """
        if exc is None:
            return self

        classified = parse(exc)
        if classified is None:
            return self.set_message(str(exc))

        self.message = classified.message
        self.error_fields = [
            FieldError(field=error_field.field, message=error_field.message)
            for error_field in classified.error_fields
        ]
        return self
