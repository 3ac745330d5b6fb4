"""Simulated nocode REST API.

Exposes ``get()`` and ``post()`` with the same call shape as
``requests.Session.get()`` / ``requests.Session.post()``: the caller passes
a full URL plus optional ``headers``, ``params``, ``data`` and ``timeout``,
and receives back a response object with ``.status_code``, ``.text``,
``.json()`` and ``.raise_for_status()``. A ``SimulatedNocodeAPI`` can
therefore be handed to ``NocodeAPIClient`` as its session.

Only the URL path is routed; the host part is ignored, so the same instance
serves ``https://{host}``, ``https://api.{host}`` and ``https://auth.{host}``.

Authentication
--------------
Every ``/api/...`` route requires ``Authorization: Bearer <token>`` where
``<token>`` is one of ``valid_tokens``; anything else gets a 401.
``/app_config.json`` is public. ``POST /oauth2/token`` accepts a
``refresh_token`` grant and hands out ``issued_access_token``.

Column types
------------
Columns are registered with plain type names. ``type_encoding`` selects how
the table endpoint serialises them: ``"name"`` returns the name as is
(``"number"``), ``"tagged"`` wraps it into a single-key object
(``{"CtNumber": {}}``), matching the two API generations.

Pagination
----------
``GET .../data`` takes ``offset`` (row offset, default 0) and ``limit``
(rows per page, default and maximum ``MAX_LIMIT``). Reading past the end
returns ``{"rows": []}``.

Route table
-----------
GET    /app_config.json                                   → public bootstrap config
POST   /oauth2/token                                      → access token
GET    /api/{v}/workspaces                                → list of workspace names
GET    /api/{v}/workspaces/{ws}                           → {name, tables: [{name}]}
GET    /api/{v}/workspaces/{ws}/tables/{table}            → {name, columns: [{name, tpe}]}
GET    /api/{v}/workspaces/{ws}/tables/{table}/data       → {rows: [...]}

Failures can be injected with ``inject_error()``; every request is recorded
in ``calls`` for assertions.
"""

from __future__ import annotations

import json as jsonlib
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import parse_qsl, unquote, urlsplit

import requests

from priceloop.labs.nocode_connector.libs.simulated_source.store import Store

MAX_LIMIT = 1000

_TAGS = {
    "number": "CtNumber",
    "string": "CtString",
    "boolean": "CtBoolean",
    "date": "CtDate",
    "null": "CtNull",
}


class Response:
    """Mimics a ``requests.Response``."""

    __slots__ = ("status_code", "_body", "url")

    def __init__(self, status_code: int, body, url: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.url = url

    @property
    def text(self) -> str:
        if isinstance(self._body, str):
            return self._body
        return jsonlib.dumps(self._body)

    def json(self):
        """Return the parsed JSON body; raises ``ValueError`` for raw text bodies."""
        if isinstance(self._body, str):
            return jsonlib.loads(self._body)
        return self._body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


# Pre-compiled route patterns
_ROUTE_APP_CONFIG = re.compile(r"^/app_config\.json$")
_ROUTE_TOKEN = re.compile(r"^/oauth2/token/?$")
_ROUTE_WORKSPACES = re.compile(r"^/api/[^/]+/workspaces/?$")
_ROUTE_WORKSPACE = re.compile(r"^/api/[^/]+/workspaces/(?P<ws>[^/]+)/?$")
_ROUTE_TABLE = re.compile(r"^/api/[^/]+/workspaces/(?P<ws>[^/]+)/tables/(?P<table>[^/]+)/?$")
_ROUTE_TABLE_DATA = re.compile(r"^/api/[^/]+/workspaces/(?P<ws>[^/]+)/tables/(?P<table>[^/]+)/data/?$")


class SimulatedNocodeAPI:
    """In-memory simulated nocode API.

    Usage mirrors a ``requests.Session``::

        api = SimulatedNocodeAPI(valid_tokens={"t"})
        api.store.register_table("shop", "prices", [{"name": "sku", "tpe": "string"}])
        resp = api.get("https://api.example.com/api/v1.0/workspaces",
                       headers={"Authorization": "Bearer t"})
        resp.json()  # ["shop"]
    """

    def __init__(
        self,
        valid_tokens: Optional[set[str]] = None,
        type_encoding: str = "name",
        client_id: str = "simulated-client",
        api_scopes: str = "nocode/api",
        issued_access_token: str = "simulated_access_token",
    ) -> None:
        if type_encoding not in ("name", "tagged"):
            raise ValueError(f"type_encoding must be 'name' or 'tagged', got {type_encoding!r}")
        self.store = Store()
        self.type_encoding = type_encoding
        self.client_id = client_id
        self.api_scopes = api_scopes
        self.issued_access_token = issued_access_token
        self.valid_tokens = set(valid_tokens or ()) | {issued_access_token}
        self.calls: list[dict] = []
        self._errors: list[tuple[int, Any, Optional[int]]] = []

    # ── test hooks ────────────────────────────────────────────────────

    def inject_error(self, status_code: int, body: Any = None, offset: Optional[int] = None) -> None:
        """
        Make the next matching request fail.

        With ``offset`` set, only a data request for that offset fails;
        otherwise the next request of any kind does.
        """
        self._errors.append((status_code, body if body is not None else {"error": "Injected failure"}, offset))

    def data_calls(self) -> list[dict]:
        return [c for c in self.calls if c["path"].endswith("/data")]

    def _take_error(self, path: str, params: dict) -> Optional[tuple[int, Any]]:
        for i, (status, body, offset) in enumerate(self._errors):
            if offset is None or (path.endswith("/data") and int(params.get("offset", 0)) == offset):
                del self._errors[i]
                return status, body
        return None

    # ── requests.Session surface ──────────────────────────────────────

    def get(self, url: str, *, headers: Optional[dict] = None, params: Optional[dict] = None, **_kwargs) -> Response:
        """Dispatch a GET request to the matching route handler."""
        path, query = self._split(url, params)
        self.calls.append({"method": "GET", "url": url, "path": path, "params": query, "headers": dict(headers or {})})

        err = self._take_error(path, query)
        if err:
            return Response(err[0], err[1], url)

        if _ROUTE_APP_CONFIG.match(path):
            body = {"auth": {"clientId": self.client_id, "apiScopes": self.api_scopes}}
            return Response(200, body, url)

        if path.startswith("/api/") and not self._authorized(headers):
            return Response(401, {"error": "Invalid or missing authentication token."}, url)

        _routes = [
            (_ROUTE_WORKSPACES, lambda g: self._handle_list_workspaces()),
            (_ROUTE_TABLE_DATA, lambda g: self._handle_get_data(g["ws"], g["table"], query)),
            (_ROUTE_TABLE, lambda g: self._handle_get_table(g["ws"], g["table"])),
            (_ROUTE_WORKSPACE, lambda g: self._handle_get_workspace(g["ws"])),
        ]
        for pattern, handler in _routes:
            m = pattern.match(path)
            if m:
                response = handler({k: unquote(v) for k, v in m.groupdict().items()})
                response.url = url
                return response

        return Response(404, {"error": f"No route matches GET {path}"}, url)

    def post(self, url: str, *, data: Optional[dict] = None, headers: Optional[dict] = None, **_kwargs) -> Response:
        """Dispatch a POST request to the matching route handler."""
        path, query = self._split(url, None)
        self.calls.append({"method": "POST", "url": url, "path": path, "params": dict(data or {}), "headers": dict(headers or {})})

        err = self._take_error(path, query)
        if err:
            return Response(err[0], err[1], url)

        if _ROUTE_TOKEN.match(path):
            return self._handle_token(dict(data or {}), url)
        return Response(404, {"error": f"No route matches POST {path}"}, url)

    # ── route handlers ────────────────────────────────────────────────

    def _handle_list_workspaces(self) -> Response:
        return Response(200, self.store.list_workspaces())

    def _handle_get_workspace(self, workspace: str) -> Response:
        try:
            tables = self.store.list_tables(workspace)
        except ValueError as e:
            return Response(404, {"error": str(e)})
        return Response(200, {"name": workspace, "tables": [{"name": t} for t in tables]})

    def _handle_get_table(self, workspace: str, table: str) -> Response:
        try:
            columns = self.store.get_columns(workspace, table)
        except ValueError as e:
            return Response(404, {"error": str(e)})
        return Response(200, {"name": table, "columns": [self._encode_column(c) for c in columns]})

    def _handle_get_data(self, workspace: str, table: str, params: dict) -> Response:
        try:
            offset = int(params.get("offset", 0))
            limit = int(params.get("limit", MAX_LIMIT))
        except ValueError:
            return Response(400, {"error": "offset and limit must be integers"})
        if offset < 0:
            return Response(400, {"error": "offset must be >= 0"})
        if not 1 <= limit <= MAX_LIMIT:
            return Response(400, {"error": f"limit must be between 1 and {MAX_LIMIT}"})
        try:
            rows = self.store.get_rows(workspace, table, offset, limit)
        except ValueError as e:
            return Response(404, {"error": str(e)})
        return Response(200, {"rows": rows})

    def _handle_token(self, data: dict, url: str) -> Response:
        if data.get("grant_type") != "refresh_token" or not data.get("refresh_token"):
            return Response(400, {"error": "invalid_grant"}, url)
        if data.get("client_id") != self.client_id or not data.get("client_secret"):
            return Response(400, {"error": "invalid_client"}, url)
        body = {
            "access_token": self.issued_access_token,
            "token_type": "Bearer",
            "expires_in": 3600,
        }
        return Response(200, body, url)

    # ── helpers ───────────────────────────────────────────────────────

    def _authorized(self, headers: Optional[dict]) -> bool:
        auth = (headers or {}).get("Authorization") or ""
        scheme, _, token = auth.partition(" ")
        return scheme == "Bearer" and token in self.valid_tokens

    def _encode_column(self, column: dict) -> dict:
        tpe = column.get("tpe")
        if self.type_encoding == "tagged" and isinstance(tpe, str) and tpe in _TAGS:
            tpe = {_TAGS[tpe]: {}}
        return {**column, "tpe": tpe}

    @staticmethod
    def _split(url: str, params: Optional[dict]) -> tuple[str, dict]:
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query))
        query.update({k: str(v) for k, v in (params or {}).items()})
        return parts.path, query

    # ── demo data ─────────────────────────────────────────────────────

    def seed_demo_data(self, rows: int = 1200) -> None:
        """Register a small pricing workspace with enough rows to span several pages."""
        self.store.register_table(
            "demo",
            "prices",
            [
                {"name": "sku", "tpe": "string"},
                {"name": "price", "tpe": "number"},
                {"name": "in_stock", "tpe": "boolean"},
                {"name": "updated_at", "tpe": "date"},
                {"name": "note", "tpe": "null"},
            ],
        )
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.store.insert_rows(
            "demo",
            "prices",
            [
                [
                    f"SKU-{i:05d}",
                    round(9.99 + i * 0.5, 2),
                    i % 3 != 0,
                    (start + timedelta(hours=i)).isoformat().replace("+00:00", "Z"),
                    None,
                ]
                for i in range(rows)
            ],
        )
        self.store.register_table("demo", "empty", [{"name": "label", "tpe": "string"}])


# ── module-level singleton ────────────────────────────────────────────

_api_instance: Optional[SimulatedNocodeAPI] = None


def get_api(access_token: str = "demo_token") -> SimulatedNocodeAPI:
    """Return the shared simulated API, creating and seeding it on first use."""
    global _api_instance  # pylint: disable=global-statement
    if _api_instance is None:
        _api_instance = SimulatedNocodeAPI(valid_tokens={access_token})
        _api_instance.seed_demo_data()
    else:
        _api_instance.valid_tokens.add(access_token)
    return _api_instance


def reset_api(access_token: str = "demo_token") -> SimulatedNocodeAPI:
    """Discard the shared simulated API and start over with fresh demo data."""
    global _api_instance  # pylint: disable=global-statement
    _api_instance = None
    return get_api(access_token)
