"""
Tests for vincent.core.schema
===============================

Schema descriptors wrap pydantic TypeAdapter. These tests pin down the
pass-through behaviour for valid values and the "must be absent" default.
"""

import pytest
from pydantic import BaseModel, ValidationError
from typing_extensions import TypedDict

from vincent.core.schema import Schema


class Approval(TypedDict):
    approved: bool


class Receipt(BaseModel):
    tx_hash: str


class TestSchemaOf:
    """Tests for Schema.of() coercion."""

    def test_none_becomes_absent(self) -> None:
        assert Schema.of(None).is_absent

    def test_schema_returned_as_is(self) -> None:
        schema = Schema(int)
        assert Schema.of(schema) is schema

    def test_type_is_wrapped(self) -> None:
        schema = Schema.of(Approval)
        assert schema.annotation is Approval
        assert not schema.is_absent


class TestSchemaValidate:
    """Tests for Schema.validate()."""

    def test_typed_dict_passes_value_through(self) -> None:
        value = {"approved": True}
        assert Schema.of(Approval).validate(value) == value

    def test_base_model_returns_instance(self) -> None:
        validated = Schema.of(Receipt).validate({"tx_hash": "0x1"})
        assert isinstance(validated, Receipt)
        assert validated.tx_hash == "0x1"

    def test_invalid_value_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Schema.of(Approval).validate({"approved": "not-a-bool-at-all"})

    @pytest.mark.parametrize(
        "annotation, value",
        [
            (Approval, {"approved": "yes"}),
            (Approval, {"approved": 1}),
            (int, "7"),
            (int, 5.0),
            (str, 3),
            (Receipt, {"tx_hash": 12}),
        ],
    )
    def test_values_are_not_coerced(self, annotation, value) -> None:
        with pytest.raises(ValidationError):
            Schema.of(annotation).validate(value)

    def test_matching_value_comes_back_unchanged(self) -> None:
        validated = Schema.of(int).validate(5)
        assert validated == 5 and type(validated) is int

    def test_absent_accepts_only_none(self) -> None:
        absent = Schema.absent()
        assert absent.validate(None) is None
        with pytest.raises(ValidationError):
            absent.validate({"x": 1})

    def test_any_accepts_everything(self) -> None:
        value = {"anything": [1, 2, 3]}
        assert Schema.any().validate(value) == value

    def test_dump_is_json_compatible(self) -> None:
        schema = Schema.of(Receipt)
        assert schema.dump(Receipt(tx_hash="0x2")) == {"tx_hash": "0x2"}

    def test_repr(self) -> None:
        assert repr(Schema.absent()) == "Schema.absent()"
        assert "Approval" in repr(Schema.of(Approval))
