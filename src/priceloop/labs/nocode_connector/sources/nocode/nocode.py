import logging
from typing import Optional

import requests

from priceloop.labs.nocode_connector.interface import AuthorizationProvider, StudioConnect
from priceloop.labs.nocode_connector.libs.auth import build_auth_provider
from priceloop.labs.nocode_connector.libs.config import ConnectorOptions, DataRequest
from priceloop.labs.nocode_connector.libs.fields import Field, Fields
from priceloop.labs.nocode_connector.sources.nocode.nocode_client import NocodeAPIClient
from priceloop.labs.nocode_connector.sources.nocode.nocode_types import map_column_type
from priceloop.labs.nocode_connector.sources.nocode.nocode_utils import extract_values

logger = logging.getLogger(__name__)


class NocodeStudioConnect(StudioConnect):
    def __init__(
        self,
        options: dict[str, str],
        client: Optional[NocodeAPIClient] = None,
        auth: Optional[AuthorizationProvider] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the connector from host options.

        Args:
            options: Raw connector options, validated into ``ConnectorOptions``.
            client: Pre-built API client. Built from the options when omitted.
            auth: Authorization provider. Chosen from the options when omitted.
            session: HTTP session shared by the client and the auth provider.
        """
        super().__init__(options)
        self.settings = ConnectorOptions.from_options(options)
        self.client = client or NocodeAPIClient(
            base_url=self.settings.api_base_url,
            session=session,
            timeout=self.settings.timeout,
        )
        if auth is None:
            auth = self.client.auth or build_auth_provider(self.settings, self.client, session=session)
        self.auth = auth
        self.client.auth = auth

    def get_auth_type(self) -> dict:
        return {"type": "OAUTH2"}

    def is_auth_valid(self) -> bool:
        return self.auth.has_access()

    def reset_auth(self) -> None:
        self.auth.reset()

    def list_workspace_tables(self) -> list[str]:
        """
        Returns every ``workspace/table`` pair visible to the user.
        """
        pairs = []
        for workspace_name in self.client.list_workspaces():
            workspace = self.client.get_workspace(workspace_name)
            name = workspace.get("name", workspace_name)
            if "/" in name:
                logger.warning("Skipping workspace %r: its name contains '/'", name)
                continue
            pairs.extend(f"{name}/{table['name']}" for table in workspace["tables"])
        return pairs

    def get_config(self) -> dict:
        options = [{"label": pair, "value": pair} for pair in self.list_workspace_tables()]
        return {
            "configParams": [
                {
                    "type": "INFO",
                    "name": "instructions",
                    "text": "Fill out the form to connect to your nocode data.",
                },
                {
                    "type": "SELECT_SINGLE",
                    "name": "workspaceTable",
                    "displayName": "Enter the name of the Table you want to connect to",
                    "helpText": "e.g. workspace/table",
                    "options": options,
                },
            ],
            "dateRangeRequired": False,
        }

    def build_fields(self, workspace_name: str, table_name: str) -> Fields:
        """
        Fetch the table's columns and declare one host field per column.

        Column ``i`` becomes field ``str(i + 1)``: key ``"0"`` of every data
        row is the internal row id, so column ids are shifted by one.
        """
        table = self.client.get_table(workspace_name, table_name)
        fields = Fields()
        for idx, column in enumerate(table["columns"]):
            column_name = column.get("name", "")
            role, field_type = map_column_type(column.get("tpe"), column_name)
            fields.new_field(str(idx + 1), column_name, role, field_type)
        logger.debug("Built %d fields for %s/%s", len(fields), workspace_name, table_name)
        return fields

    def fetch_all_rows(
        self, workspace_name: str, table_name: str, requested_fields: list[Field]
    ) -> list[list]:
        """
        Read every row of a table, page by page, until an empty page comes back.

        Page ``n`` is requested with ``offset = n * page_size`` and
        ``limit = page_size``. A failing page aborts the whole read.

        Returns:
            One value list per row, in remote row order and ``requested_fields`` order.
        """
        page_size = self.settings.page_size
        rows: list[list] = []
        page_index = 0

        while True:
            page = self.client.get_rows(workspace_name, table_name, page_index * page_size, page_size)
            logger.debug(
                "Fetched page %d of %s/%s: %d rows", page_index, workspace_name, table_name, len(page)
            )
            if not page:
                break
            rows.extend(extract_values(row, requested_fields) for row in page)
            page_index += 1

        logger.info("Read %d rows from %s/%s in %d pages", len(rows), workspace_name, table_name, page_index + 1)
        return rows

    def get_schema(self, request: dict) -> dict:
        params = DataRequest.parse(request).config_params
        fields = self.build_fields(params.workspace_name, params.table_name)
        return {"schema": fields.build()}

    def get_data(self, request: dict) -> dict:
        parsed = DataRequest.parse(request)
        params = parsed.config_params
        fields = self.build_fields(params.workspace_name, params.table_name)
        requested = fields.for_ids(parsed.field_ids)

        rows = self.fetch_all_rows(params.workspace_name, params.table_name, requested.as_list())
        return {
            "schema": requested.build(),
            "rows": [{"values": values} for values in rows],
        }
