"""
Nocode API Client.

Handles authorized HTTP requests and JSON decoding for the nocode
workspace/table API. This module separates API concerns from the connector
logic: every failure surfaces as a ``RemoteFetchError`` carrying the URL.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from priceloop.labs.nocode_connector.errors import RemoteFetchError
from priceloop.labs.nocode_connector.interface import AuthorizationProvider

logger = logging.getLogger(__name__)


class NocodeAPIClient:
    """
    HTTP client for the nocode API.

    No retries: a failing request is a configuration or connectivity problem
    the user has to act on, so it is reported straight away.
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthorizationProvider] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. "https://api.alpha.priceloop.ai/api/v1.0".
            auth: Provider of the bearer token. Required for authenticated calls.
            session: Optional requests.Session or compatible object. Used for
                connection pooling and for plugging in the simulated source.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self._session = session or requests.Session()

    def _auth_headers(self, url: str) -> dict:
        if self.auth is None:
            raise RemoteFetchError(url, "no authorization provider configured")
        return {"Authorization": f"Bearer {self.auth.get_access_token()}"}

    def fetch_json(self, url: str, *, require_auth: bool, params: Optional[dict] = None) -> Any:
        """
        GET ``url`` and return the decoded JSON body.

        Args:
            url: Absolute URL.
            require_auth: Attach the bearer token. Only the public bootstrap
                config is fetched without it.
            params: Optional query parameters.

        Raises:
            RemoteFetchError: On transport errors, non-2xx statuses and bodies
                that are not JSON.
        """
        display_url = _display_url(url, params)
        headers = self._auth_headers(display_url) if require_auth else None
        try:
            response = self._session.get(url, headers=headers, params=params, timeout=self.timeout)
            if not 200 <= response.status_code < 300:
                raise RemoteFetchError(display_url, f"HTTP {response.status_code}: {_error_detail(response)}")
            return response.json()
        except RemoteFetchError as e:
            logger.warning("Request failed: %s", e)
            raise
        except (requests.RequestException, ValueError) as e:
            logger.warning("Request to %s failed: %s", display_url, e)
            raise RemoteFetchError(display_url, e) from e

    def _api_url(self, *segments: str) -> str:
        return "/".join([self.base_url, *(quote(s, safe="") for s in segments)])

    def list_workspaces(self) -> list[str]:
        url = self._api_url("workspaces")
        body = self.fetch_json(url, require_auth=True)
        if not isinstance(body, list):
            raise RemoteFetchError(url, "expected a list of workspace names")
        return body

    def get_workspace(self, workspace_name: str) -> dict:
        url = self._api_url("workspaces", workspace_name)
        body = _require_objects(self.fetch_json(url, require_auth=True), "tables", url)
        if not all(isinstance(table.get("name"), str) for table in body["tables"]):
            raise RemoteFetchError(url, "every table entry needs a 'name'")
        return body

    def get_table(self, workspace_name: str, table_name: str) -> dict:
        url = self._api_url("workspaces", workspace_name, "tables", table_name)
        return _require_objects(self.fetch_json(url, require_auth=True), "columns", url)

    def get_rows(self, workspace_name: str, table_name: str, offset: int, limit: int) -> list[dict]:
        """Fetch one page of rows starting at row ``offset``."""
        url = self._api_url("workspaces", workspace_name, "tables", table_name, "data")
        params = {"offset": offset, "limit": limit}
        body = _require_objects(
            self.fetch_json(url, require_auth=True, params=params), "rows", _display_url(url, params)
        )
        return body["rows"]


def _display_url(url: str, params: Optional[dict]) -> str:
    if not params:
        return url
    query = "&".join(f"{k}={v}" for k, v in params.items())
    return f"{url}?{query}"


def _error_detail(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return getattr(response, "text", "") or "<empty body>"
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)


def _require_key(body: Any, key: str, url: str) -> dict:
    if not isinstance(body, dict) or not isinstance(body.get(key), list):
        raise RemoteFetchError(url, f"response has no '{key}' list")
    return body


def _require_objects(body: Any, key: str, url: str) -> dict:
    body = _require_key(body, key, url)
    if not all(isinstance(item, dict) for item in body[key]):
        raise RemoteFetchError(url, f"every entry of '{key}' must be an object")
    return body
