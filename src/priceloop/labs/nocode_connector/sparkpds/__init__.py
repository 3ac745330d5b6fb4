"""
Spark Python Data Source (PDS) module for the nocode connector.
"""

from priceloop.labs.nocode_connector.sparkpds.registry import register
from priceloop.labs.nocode_connector.sparkpds.studio_datasource import (
    StudioBatchReader,
    StudioSource,
    WORKSPACE_TABLE,
    fields_to_struct_type,
)

__all__ = [
    "register",
    "StudioSource",
    "StudioBatchReader",
    "WORKSPACE_TABLE",
    "fields_to_struct_type",
]
