"""
Registry module for registering StudioSource with Spark's DataSource API.
"""

import importlib
from typing import Type

from pyspark.sql.datasource import DataSource

from priceloop.labs.nocode_connector.interface import StudioConnect
from priceloop.labs.nocode_connector.sources.nocode.nocode import NocodeStudioConnect
from priceloop.labs.nocode_connector.sparkpds.studio_datasource import StudioSource


def _get_class_fqn(cls: Type) -> str:
    """Get the fully qualified name of a class (module.ClassName)."""
    return f"{cls.__module__}.{cls.__name__}"


def _import_class(fqn: str) -> Type:
    """
    Dynamically import a class from its fully qualified name.

    Raises:
        ImportError: If the module cannot be imported.
        AttributeError: If the class doesn't exist in the module.
    """
    module_name, class_name = fqn.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


def register(
    spark,
    connector_cls: Type[StudioConnect] = NocodeStudioConnect,
) -> Type[DataSource]:
    """
    Register a StudioConnect implementation with Spark's DataSource API.

    The registered class only carries the connector's fully qualified name,
    so Spark executors import the connector themselves instead of unpickling
    one.

    Example:
        >>> register(spark)
        >>> df = spark.read.format("nocode_studio").option("workspaceTable", "shop/prices").load()
    """
    class_fqn = _get_class_fqn(connector_cls)

    class RegisterableStudioSource(StudioSource):
        """A StudioSource that imports its connector class by name."""

        def _get_connector(self) -> StudioConnect:
            if self._connector is None:
                self._connector = _import_class(class_fqn)(dict(self.options))
            return self._connector

    spark.dataSource.register(RegisterableStudioSource)
    return RegisterableStudioSource
