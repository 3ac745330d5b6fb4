"""
Column type handling for nocode tables.

The table endpoint reports each column's type in ``tpe``. Depending on the
API version this is either a bare name (``"number"``) or a single-key tagged
object (``{"CtNumber": {...}}``). Both are decoded into ``ColumnType`` first,
then mapped onto the host's field vocabulary.
"""

from enum import Enum
from typing import Any

from priceloop.labs.nocode_connector.errors import ColumnTypeDecodeError, UnsupportedColumnType
from priceloop.labs.nocode_connector.libs.fields import FieldRole, FieldType


class ColumnType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    NULL = "null"


_TAGS = {
    "CtNumber": ColumnType.NUMBER,
    "CtString": ColumnType.STRING,
    "CtBoolean": ColumnType.BOOLEAN,
    "CtDate": ColumnType.DATE,
    "CtNull": ColumnType.NULL,
}

_NAMES = {t.value: t for t in ColumnType}

# Only numbers are aggregable; everything else is a dimension.
_FIELD_TYPES = {
    ColumnType.NUMBER: (FieldRole.METRIC, FieldType.NUMBER),
    ColumnType.STRING: (FieldRole.DIMENSION, FieldType.TEXT),
    ColumnType.BOOLEAN: (FieldRole.DIMENSION, FieldType.BOOLEAN),
    ColumnType.DATE: (FieldRole.DIMENSION, FieldType.YEAR_MONTH_DAY_SECOND),
    ColumnType.NULL: (FieldRole.DIMENSION, FieldType.TEXT),
}


def decode_column_type(tpe: Any, column_name: str = "") -> ColumnType:
    """
    Normalize a wire ``tpe`` value into a ``ColumnType``.

    Args:
        tpe: A type name, a single-key tagged object, or None when the API has
            no type information for the column.
        column_name: Used in error messages.

    Raises:
        UnsupportedColumnType: The name or tag is well formed but unknown.
        ColumnTypeDecodeError: The value has neither accepted shape.
    """
    if isinstance(tpe, ColumnType):
        return tpe
    if tpe is None:
        return ColumnType.NULL
    if isinstance(tpe, str):
        if tpe not in _NAMES:
            raise UnsupportedColumnType(column_name, tpe)
        return _NAMES[tpe]
    if isinstance(tpe, dict) and len(tpe) == 1:
        (tag,) = tpe
        if tag not in _TAGS:
            raise UnsupportedColumnType(column_name, tag)
        return _TAGS[tag]
    raise ColumnTypeDecodeError(column_name, tpe)


def map_column_type(declared_type: Any, column_name: str = "") -> tuple[FieldRole, FieldType]:
    """Map a declared column type (wire value or ``ColumnType``) to ``(role, field type)``."""
    return _FIELD_TYPES[decode_column_type(declared_type, column_name)]
