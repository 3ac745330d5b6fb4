import pytest

from priceloop.labs.nocode_connector.errors import ColumnTypeDecodeError, UnsupportedColumnType, UserError
from priceloop.labs.nocode_connector.libs.fields import FieldRole, FieldType
from priceloop.labs.nocode_connector.sources.nocode.nocode_types import (
    ColumnType,
    decode_column_type,
    map_column_type,
)


@pytest.mark.parametrize(
    "declared, expected",
    [
        ("number", (FieldRole.METRIC, FieldType.NUMBER)),
        ("string", (FieldRole.DIMENSION, FieldType.TEXT)),
        ("boolean", (FieldRole.DIMENSION, FieldType.BOOLEAN)),
        ("date", (FieldRole.DIMENSION, FieldType.YEAR_MONTH_DAY_SECOND)),
        ("null", (FieldRole.DIMENSION, FieldType.TEXT)),
    ],
)
def test_map_known_type_names(declared, expected):
    assert map_column_type(declared, "col") == expected


@pytest.mark.parametrize(
    "tagged, name",
    [
        ({"CtNumber": {}}, "number"),
        ({"CtString": {"maxLength": 10}}, "string"),
        ({"CtBoolean": None}, "boolean"),
        ({"CtDate": {}}, "date"),
        ({"CtNull": {}}, "null"),
    ],
)
def test_tagged_objects_decode_like_type_names(tagged, name):
    assert decode_column_type(tagged) is decode_column_type(name)
    assert map_column_type(tagged) == map_column_type(name)


def test_missing_type_information_is_text_dimension():
    assert decode_column_type(None) is ColumnType.NULL
    assert map_column_type(None) == (FieldRole.DIMENSION, FieldType.TEXT)


def test_decoded_enum_passes_through():
    assert decode_column_type(ColumnType.DATE) is ColumnType.DATE


def test_unknown_type_name_fails_with_column_name():
    with pytest.raises(UnsupportedColumnType) as exc_info:
        map_column_type("json", "payload")
    assert exc_info.value.column_name == "payload"
    assert exc_info.value.declared_type == "json"
    assert str(exc_info.value) == "Unexpected type for column 'payload': json"


def test_unknown_tag_fails():
    with pytest.raises(UnsupportedColumnType, match="CtJson"):
        map_column_type({"CtJson": {}}, "payload")


def test_type_names_are_case_sensitive():
    with pytest.raises(UnsupportedColumnType):
        map_column_type("Number", "price")


@pytest.mark.parametrize("raw", [42, ["number"], {}, {"CtNumber": {}, "CtString": {}}, True])
def test_unrecognized_shapes_are_decode_errors(raw):
    with pytest.raises(ColumnTypeDecodeError) as exc_info:
        decode_column_type(raw, "weird")
    assert "weird" in str(exc_info.value)


def test_type_errors_are_user_errors():
    assert issubclass(UnsupportedColumnType, UserError)
    assert issubclass(ColumnTypeDecodeError, UserError)


def test_mapping_is_deterministic():
    assert [map_column_type("date") for _ in range(3)] == [map_column_type("date")] * 3
