"""
vincent.core.schema - Schema Descriptors
==========================================

A schema descriptor describes the shape of a payload and validates arbitrary
values against it. Vincent uses pydantic for this: anything a pydantic
``TypeAdapter`` accepts can be a schema.

    Declared as                      Validated value
    ───────────                      ───────────────
    class Result(TypedDict): ...     plain dict (equal to the input)
    class Result(BaseModel): ...     Result instance
    dict[str, bool], int, str ...    plain value
    (omitted)                        only ``None`` is accepted

Omitted schema slots default to ``Schema.absent()``: the value must be
absent. That is what makes ``succeed()`` with no arguments valid for a tool
without an ``execute_success_schema``, and ``succeed({"x": 1})`` invalid.

Usage:
    >>> from typing_extensions import TypedDict
    >>> class Approval(TypedDict):
    ...     approved: bool
    >>> schema = Schema.of(Approval)
    >>> schema.validate({"approved": True})
    {'approved': True}
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter


class Schema:
    """A validating shape descriptor backed by ``pydantic.TypeAdapter``.

    Attributes:
        annotation: The type the schema was built from (None for ``absent``).
    """

    __slots__ = ("annotation", "_adapter")

    def __init__(self, annotation: Any) -> None:
        self.annotation = annotation
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    @classmethod
    def of(cls, value: Any) -> "Schema":
        """Coerce a schema slot value into a ``Schema``.

        ``None`` means the slot was omitted and becomes ``Schema.absent()``;
        an existing ``Schema`` is returned as-is; anything else is treated
        as a type annotation.
        """
        if value is None:
            return cls.absent()
        if isinstance(value, Schema):
            return value
        return cls(value)

    @classmethod
    def absent(cls) -> "Schema":
        """A schema that only accepts ``None``."""
        return _ABSENT

    @classmethod
    def any(cls) -> "Schema":
        """A schema that accepts every value unchanged."""
        return _ANY

    @property
    def is_absent(self) -> bool:
        return self.annotation is None

    def validate(self, value: Any) -> Any:
        """Validate ``value`` strictly and return the typed value.

        Values are never coerced: ``"7"`` is not an ``int`` and ``"yes"`` is
        not a ``bool``. Plain dicts are still accepted for model and
        TypedDict shapes.

        Raises:
            pydantic.ValidationError: If the value does not match the shape.
        """
        return self._adapter.validate_python(value, strict=True)

    def dump(self, value: Any) -> Any:
        """Serialize a validated value to JSON-compatible python data."""
        return self._adapter.dump_python(value, mode="json")

    def __repr__(self) -> str:
        if self.is_absent:
            return "Schema.absent()"
        return f"Schema({getattr(self.annotation, '__name__', self.annotation)!r})"


_ABSENT = Schema(None)
_ANY = Schema(Any)
