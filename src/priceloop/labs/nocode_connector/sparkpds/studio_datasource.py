"""
Spark Python Data Source over a nocode table.

Lets Spark read a nocode table with the same schema discovery, pagination
and value conversion the reporting host gets::

    df = (spark.read.format("nocode_studio")
          .option("workspaceTable", "shop/prices")
          .option("access_token", token)
          .load())
"""

from collections import Counter
from typing import Iterator

from pyspark.sql.datasource import DataSource, DataSourceReader
from pyspark.sql.types import BooleanType, DataType, DoubleType, StringType, StructField, StructType

from priceloop.labs.nocode_connector.interface import StudioConnect
from priceloop.labs.nocode_connector.libs.fields import Field, FieldRole, FieldType
from priceloop.labs.nocode_connector.sources.nocode.nocode import NocodeStudioConnect

WORKSPACE_TABLE = "workspaceTable"

# Dates stay in the host's YYYYMMDDHHMMSS string form.
_SPARK_TYPES: dict[FieldType, DataType] = {
    FieldType.NUMBER: DoubleType(),
    FieldType.TEXT: StringType(),
    FieldType.BOOLEAN: BooleanType(),
    FieldType.YEAR_MONTH_DAY_SECOND: StringType(),
}


def fields_to_struct_type(fields: list[Field]) -> StructType:
    """
    Map host fields to a Spark schema, keyed by column name.

    Names shared by several columns get the field id appended, e.g. "price_2".
    """
    counts = Counter(f.name for f in fields)
    return StructType(
        [
            StructField(f.name if counts[f.name] == 1 else f"{f.name}_{f.id}", _SPARK_TYPES[f.type], nullable=True)
            for f in fields
        ]
    )


def _to_spark_value(field_type: FieldType, value):
    if value is None:
        return None
    if field_type is FieldType.NUMBER:
        return float(value)
    if field_type is FieldType.TEXT and not isinstance(value, str):
        return str(value)
    return value


def _field_from_descriptor(descriptor: dict) -> Field:
    semantics = descriptor["semantics"]
    return Field(
        descriptor["name"],
        descriptor["label"],
        FieldRole(semantics["conceptType"]),
        FieldType(semantics["semanticType"]),
    )


def _data_request(options: dict) -> dict:
    return {"configParams": {"workspaceTable": options[WORKSPACE_TABLE]}}


class StudioBatchReader(DataSourceReader):
    def __init__(self, options: dict[str, str], schema: StructType, connector: StudioConnect):
        self.options = options
        self.schema = schema
        self.connector = connector

    def read(self, partition) -> Iterator[tuple]:
        request = _data_request(self.options)
        fields = self.connector.get_schema(request)["schema"]
        request["fields"] = [{"name": f["name"]} for f in fields]
        result = self.connector.get_data(request)

        field_types = [FieldType(f["semantics"]["semanticType"]) for f in result["schema"]]
        for row in result["rows"]:
            yield tuple(_to_spark_value(t, v) for t, v in zip(field_types, row["values"]))


class StudioSource(DataSource):
    """
    Nocode DataSource implementation with lazy connector initialization.

    The connector holds an HTTP session, so it is created on first use
    instead of in ``__init__`` to keep the DataSource picklable.
    """

    connector_cls = NocodeStudioConnect

    def __init__(self, options):
        self.options = options
        self._connector = None

    @classmethod
    def name(cls):
        return "nocode_studio"

    def _get_connector(self) -> StudioConnect:
        if self._connector is None:
            self._connector = self.connector_cls(dict(self.options))
        return self._connector

    def schema(self):
        connector = self._get_connector()
        descriptors = connector.get_schema(_data_request(self.options))["schema"]
        return fields_to_struct_type([_field_from_descriptor(d) for d in descriptors])

    def reader(self, schema: StructType):
        return StudioBatchReader(self.options, schema, self._get_connector())
