"""
Error types raised by the connector.

The reporting host distinguishes two kinds of failures:

- ``UserError``: shown to the end user verbatim. Remote fetch failures,
  unsupported column types and bad configuration all land here, because the
  user is the one who has to fix them.
- ``DebugError``: developer facing, for internal invariant violations.
"""

from typing import Any


class ConnectorError(Exception):
    """Base class for all connector errors."""

    error_type = "DEBUG"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_host_error(self) -> dict:
        """Render the error in the shape the reporting host displays."""
        return {"errorType": self.error_type, "message": self.message}


class UserError(ConnectorError):
    error_type = "USER"


class DebugError(ConnectorError):
    error_type = "DEBUG"


class ConfigurationError(UserError):
    """Connector options or request parameters are malformed."""


class RemoteFetchError(UserError):
    """A request to the nocode API failed (transport, status or JSON body)."""

    def __init__(self, url: str, reason: Any) -> None:
        super().__init__(f'Error querying "{url}": {reason}')
        self.url = url
        self.reason = reason


class UnsupportedColumnType(UserError):
    """A column declares a type the host has no field type for."""

    def __init__(self, column_name: str, declared_type: Any) -> None:
        super().__init__(f"Unexpected type for column '{column_name}': {declared_type}")
        self.column_name = column_name
        self.declared_type = declared_type


class ColumnTypeDecodeError(UserError):
    """A column type arrived in a wire shape that is neither a string nor a tagged object."""

    def __init__(self, column_name: str, raw: Any) -> None:
        super().__init__(
            f"Cannot decode type of column '{column_name}': expected a type name "
            f"or a single-key object, got {raw!r}"
        )
        self.column_name = column_name
        self.raw = raw
