"""
Field registry for the reporting host.

Mirrors the host's own field object model: fields are declared as
dimensions or metrics with an id, a display name and a scalar type, then a
subset can be selected by id and serialized into the schema descriptor the
host expects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from priceloop.labs.nocode_connector.errors import DebugError, UserError


class FieldRole(str, Enum):
    DIMENSION = "DIMENSION"
    METRIC = "METRIC"


class FieldType(str, Enum):
    NUMBER = "NUMBER"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    # precision to seconds: <year><month><day><hours><minutes><seconds>
    YEAR_MONTH_DAY_SECOND = "YEAR_MONTH_DAY_SECOND"


# Semantic type -> wire data type of the host's schema descriptor
_DATA_TYPES = {
    FieldType.NUMBER: "NUMBER",
    FieldType.TEXT: "STRING",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.YEAR_MONTH_DAY_SECOND: "STRING",
}


@dataclass(frozen=True)
class Field:
    id: str
    name: str
    role: FieldRole
    type: FieldType

    @property
    def is_date(self) -> bool:
        return self.type is FieldType.YEAR_MONTH_DAY_SECOND

    def to_schema(self) -> dict:
        """Serialize into a host schema descriptor entry."""
        return {
            "name": self.id,
            "label": self.name,
            "dataType": _DATA_TYPES[self.type],
            "semantics": {
                "conceptType": self.role.value,
                "semanticType": self.type.value,
            },
        }


class Fields:
    """Ordered collection of declared fields."""

    def __init__(self, fields: Iterable[Field] = ()) -> None:
        self._fields: dict[str, Field] = {}
        for field in fields:
            self._add(field)

    def _add(self, field: Field) -> Field:
        if field.id in self._fields:
            raise DebugError(f"Field id '{field.id}' declared twice")
        self._fields[field.id] = field
        return field

    def new_dimension(self, field_id: str, name: str, field_type: FieldType) -> Field:
        return self._add(Field(field_id, name, FieldRole.DIMENSION, field_type))

    def new_metric(self, field_id: str, name: str, field_type: FieldType) -> Field:
        return self._add(Field(field_id, name, FieldRole.METRIC, field_type))

    def new_field(self, field_id: str, name: str, role: FieldRole, field_type: FieldType) -> Field:
        if role is FieldRole.METRIC:
            return self.new_metric(field_id, name, field_type)
        return self.new_dimension(field_id, name, field_type)

    def for_ids(self, field_ids: Iterable[str]) -> "Fields":
        """
        Select fields by id, in the order the ids are given.

        Raises:
            UserError: If an id is not declared, which happens when the host
                holds a schema that no longer matches the table.
        """
        selected = []
        for field_id in field_ids:
            if field_id not in self._fields:
                raise UserError(
                    f"Field '{field_id}' does not exist in this table. "
                    "Refresh the data source fields and try again."
                )
            selected.append(self._fields[field_id])
        return Fields(selected)

    def as_list(self) -> list[Field]:
        return list(self._fields.values())

    def build(self) -> list[dict]:
        return [f.to_schema() for f in self._fields.values()]

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields
