"""
Connector options and host request models.

Options arrive from the host (or from Spark) as a flat ``Dict[str, str]``;
pydantic coerces and validates them so the rest of the connector works with
typed values. Validation failures are reported as ``ConfigurationError`` so
the user sees what is wrong with their setup.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from priceloop.labs.nocode_connector.errors import ConfigurationError

DEFAULT_HOST_NAME = "alpha.priceloop.ai"
DEFAULT_PAGE_SIZE = 500


class ConnectorOptions(BaseModel):
    """
    Connection settings for the nocode API.

    The remote host name used to be a process-wide constant; here it is an
    option so every URL is derived from the instance the connector was built
    for.

    Attributes:
        host_name: Nocode instance host, e.g. ``alpha.priceloop.ai``.
        api_version: Version segment of the API path.
        page_size: Rows requested per page when reading table data.
        timeout: HTTP timeout in seconds for each request.
        access_token: Pre-issued bearer token.
        refresh_token: OAuth refresh token, used together with ``client_id``.
        client_id: OAuth client id; loaded from ``app_config.json`` when absent.
    """

    model_config = ConfigDict(extra="allow")

    host_name: str = DEFAULT_HOST_NAME
    api_version: str = "v1.0"
    page_size: PositiveInt = DEFAULT_PAGE_SIZE
    timeout: float = Field(default=30.0, gt=0)
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    client_id: Optional[str] = None

    @field_validator("host_name")
    @classmethod
    def validate_host_name(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v or "/" in v or " " in v:
            raise ValueError(f"invalid host name: {v!r}")
        return v

    @property
    def api_base_url(self) -> str:
        return f"https://api.{self.host_name}/api/{self.api_version}"

    @property
    def app_config_url(self) -> str:
        return f"https://{self.host_name}/app_config.json"

    @property
    def token_url(self) -> str:
        return f"https://auth.{self.host_name}/oauth2/token"

    @property
    def authorization_url(self) -> str:
        return f"https://auth.{self.host_name}/login"

    @classmethod
    def from_options(cls, options: dict[str, str]) -> "ConnectorOptions":
        """Validate a raw option map, raising ``ConfigurationError`` on failure."""
        try:
            return cls.model_validate(options)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid connector options: {e}") from e


class AuthSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    client_id: str = Field(alias="clientId")
    api_scopes: str = Field(default="", alias="apiScopes")


class AppConfig(BaseModel):
    """Public bootstrap configuration served at ``https://{host}/app_config.json``."""

    model_config = ConfigDict(extra="ignore")

    auth: AuthSettings


class ConfigParams(BaseModel):
    """Values the user picked in the configuration form."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    workspace_table: str = Field(alias="workspaceTable")

    @field_validator("workspace_table")
    @classmethod
    def validate_workspace_table(cls, v: str) -> str:
        # Table names may contain "/", workspace names may not.
        workspace, sep, table = v.partition("/")
        if not sep or not workspace or not table:
            raise ValueError(f"expected 'workspace/table', got {v!r}")
        return v

    @property
    def workspace_name(self) -> str:
        return self.workspace_table.partition("/")[0]

    @property
    def table_name(self) -> str:
        return self.workspace_table.partition("/")[2]


class RequestedField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class DataRequest(BaseModel):
    """
    A schema or data request as sent by the reporting host.

    ``fields`` is only present on data requests and keeps the order the host
    asked for.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    config_params: ConfigParams = Field(alias="configParams")
    fields: list[RequestedField] = Field(default_factory=list)

    @property
    def field_ids(self) -> list[str]:
        return [f.name for f in self.fields]

    @classmethod
    def parse(cls, request: dict) -> "DataRequest":
        try:
            return cls.model_validate(request)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid request: {e}") from e
