"""
Contracts between the connector, the reporting host and the authorization subsystem.

``StudioConnect`` is what a reporting host calls: it asks for the auth type,
a configuration form, a schema, and finally data. ``AuthorizationProvider``
is the collaborator that owns the bearer credential; the connector only ever
reads a token from it.
"""

from abc import ABC, abstractmethod


class AuthorizationProvider(ABC):
    """Owner of the bearer credential used for every authenticated request."""

    @abstractmethod
    def get_access_token(self) -> str:
        """Return a currently valid access token."""

    @abstractmethod
    def has_access(self) -> bool:
        """Whether a token can be produced without user interaction."""

    @abstractmethod
    def reset(self) -> None:
        """Forget any stored credential so the user has to authorize again."""


class StudioConnect(ABC):
    """Virtual data source interface expected by the reporting host."""

    def __init__(self, options: dict[str, str]) -> None:
        self.options = options

    @abstractmethod
    def get_auth_type(self) -> dict:
        """Describe how the host should authorize the user."""

    @abstractmethod
    def is_auth_valid(self) -> bool:
        """Whether the stored credential is usable."""

    @abstractmethod
    def reset_auth(self) -> None:
        """Drop the stored credential."""

    @abstractmethod
    def get_config(self) -> dict:
        """
        Build the configuration form shown to the user before connecting.

        Returns:
            A config descriptor with the selectable options.
        """

    @abstractmethod
    def get_schema(self, request: dict) -> dict:
        """
        Return the schema of the configured table.

        Args:
            request: Host request carrying ``configParams``.

        Returns:
            ``{"schema": [field descriptor, ...]}``
        """

    @abstractmethod
    def get_data(self, request: dict) -> dict:
        """
        Return all rows of the configured table for the requested fields.

        Args:
            request: Host request carrying ``configParams`` and ``fields``.

        Returns:
            ``{"schema": [...], "rows": [{"values": [...]}, ...]}``
        """
