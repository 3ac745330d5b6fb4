"""In-memory data store backing the simulated nocode API.

Holds workspaces, their tables, each table's ordered column list, and the
table rows. Rows are stored the way the nocode API serves them: key ``"0"``
is the internal row id and key ``str(i + 1)`` holds the value of column ``i``.
"""

from __future__ import annotations

import threading
from typing import Any, Optional


class TableDef:  # pylint: disable=too-few-public-methods
    """Holds the definition and live data for a single table."""

    __slots__ = ("name", "columns", "_rows", "_next_id")

    def __init__(self, name: str, columns: list[dict]) -> None:
        self.name = name
        self.columns = columns
        self._rows: list[dict] = []
        self._next_id = 1


class Store:
    """Thread-safe in-memory store for all workspaces."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._workspaces: dict[str, dict[str, TableDef]] = {}

    # ── registration ──────────────────────────────────────────────────

    def register_workspace(self, name: str) -> None:
        with self._lock:
            self._workspaces.setdefault(name, {})

    def register_table(self, workspace: str, name: str, columns: list[dict]) -> None:
        """Register a table. ``columns`` are ``{"name", "tpe"}`` descriptors."""
        with self._lock:
            tables = self._workspaces.setdefault(workspace, {})
            tables[name] = TableDef(name, [dict(c) for c in columns])

    # ── introspection ─────────────────────────────────────────────────

    def list_workspaces(self) -> list[str]:
        with self._lock:
            return list(self._workspaces.keys())

    def list_tables(self, workspace: str) -> list[str]:
        with self._lock:
            return list(self._get_workspace(workspace).keys())

    def get_columns(self, workspace: str, table: str) -> list[dict]:
        with self._lock:
            return [dict(c) for c in self._get_table(workspace, table).columns]

    # ── rows ──────────────────────────────────────────────────────────

    def insert_rows(self, workspace: str, table: str, values: list[list[Any]]) -> list[dict]:
        """Append rows given as value lists in column order. Returns the stored rows."""
        with self._lock:
            tdef = self._get_table(workspace, table)
            inserted = []
            for row_values in values:
                if len(row_values) != len(tdef.columns):
                    raise ValueError(
                        f"Row has {len(row_values)} values, table '{table}' has {len(tdef.columns)} columns"
                    )
                row = {"0": tdef._next_id}
                row.update({str(i + 1): v for i, v in enumerate(row_values)})
                tdef._next_id += 1
                tdef._rows.append(row)
                inserted.append(dict(row))
            return inserted

    def get_rows(self, workspace: str, table: str, offset: int, limit: Optional[int]) -> list[dict]:
        with self._lock:
            rows = self._get_table(workspace, table)._rows
            end = None if limit is None else offset + limit
            return [dict(r) for r in rows[offset:end]]

    def count_rows(self, workspace: str, table: str) -> int:
        with self._lock:
            return len(self._get_table(workspace, table)._rows)

    # ── internals ─────────────────────────────────────────────────────

    def _get_workspace(self, workspace: str) -> dict[str, TableDef]:
        if workspace not in self._workspaces:
            raise ValueError(f"Workspace '{workspace}' not found")
        return self._workspaces[workspace]

    def _get_table(self, workspace: str, table: str) -> TableDef:
        tables = self._get_workspace(workspace)
        if table not in tables:
            raise ValueError(f"Table '{table}' not found in workspace '{workspace}'")
        return tables[table]
