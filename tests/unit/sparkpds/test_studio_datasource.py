from unittest.mock import MagicMock

import pytest

pytest.importorskip("pyspark.sql.datasource")

from pyspark.sql.types import BooleanType, DoubleType, StringType, StructField, StructType  # noqa: E402

from priceloop.labs.nocode_connector.libs.fields import Field, FieldRole, FieldType  # noqa: E402
from priceloop.labs.nocode_connector.sparkpds import (  # noqa: E402
    StudioSource,
    fields_to_struct_type,
    register,
)
from tests.unit.nocode_test_utils import make_connector  # noqa: E402


def _source(api, workspace_table="shop/items") -> StudioSource:
    source = StudioSource({"workspaceTable": workspace_table})
    source._connector = make_connector(api)
    return source


def test_fields_to_struct_type():
    fields = [
        Field("1", "price", FieldRole.METRIC, FieldType.NUMBER),
        Field("2", "sku", FieldRole.DIMENSION, FieldType.TEXT),
        Field("3", "active", FieldRole.DIMENSION, FieldType.BOOLEAN),
        Field("4", "updated", FieldRole.DIMENSION, FieldType.YEAR_MONTH_DAY_SECOND),
    ]

    assert fields_to_struct_type(fields) == StructType(
        [
            StructField("price", DoubleType(), True),
            StructField("sku", StringType(), True),
            StructField("active", BooleanType(), True),
            StructField("updated", StringType(), True),
        ]
    )


def test_duplicate_column_names_get_the_field_id():
    fields = [
        Field("1", "price", FieldRole.METRIC, FieldType.NUMBER),
        Field("2", "sku", FieldRole.DIMENSION, FieldType.TEXT),
        Field("3", "price", FieldRole.METRIC, FieldType.NUMBER),
    ]

    assert fields_to_struct_type(fields).names == ["price_1", "sku", "price_3"]


def test_source_name():
    assert StudioSource.name() == "nocode_studio"


def test_schema_from_remote_table(api):
    schema = _source(api).schema()
    assert [f.name for f in schema.fields] == ["id", "label", "ts"]
    assert isinstance(schema["id"].dataType, DoubleType)


def test_reader_yields_converted_tuples(api):
    source = _source(api)
    reader = source.reader(source.schema())

    rows = list(reader.read(None))

    assert rows == [
        (42.0, "hello", "20200102030405"),
        (7.0, "world", None),
        (None, None, "20210305070809"),
    ]


def test_connector_is_created_lazily():
    source = StudioSource({"workspaceTable": "shop/items", "access_token": "t"})
    assert source._connector is None


def test_register_wraps_connector_class_by_name(api):
    spark = MagicMock()

    registered = register(spark)

    spark.dataSource.register.assert_called_once_with(registered)
    assert issubclass(registered, StudioSource)
    assert registered.name() == "nocode_studio"
    source = registered({"workspaceTable": "shop/items", "access_token": "t", "host_name": "nocode.test"})
    assert source._get_connector().settings.host_name == "nocode.test"
