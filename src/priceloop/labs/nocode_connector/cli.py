"""
Command line access to the nocode connector.

Usage:
    nocode-connector [options] <command> [args]

Examples:
    # List all workspace/table pairs
    nocode-connector --token $TOKEN tables

    # Print the schema of a table
    nocode-connector --token $TOKEN schema shop/prices

    # Dump the first rows of two fields
    nocode-connector --token $TOKEN data shop/prices --field 1 --field 3 --limit 20

    # Try everything against the in-memory demo API
    nocode-connector --simulated data demo/prices --limit 5
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from priceloop.labs.nocode_connector.errors import ConnectorError
from priceloop.labs.nocode_connector.libs.config import DEFAULT_HOST_NAME, DEFAULT_PAGE_SIZE
from priceloop.labs.nocode_connector.libs.simulated_source.api import get_api
from priceloop.labs.nocode_connector.sources.nocode.nocode import NocodeStudioConnect

TOKEN_ENV_VAR = "NOCODE_ACCESS_TOKEN"
SIMULATED_TOKEN = "demo_token"


def build_connector(args: argparse.Namespace) -> NocodeStudioConnect:
    """Create the connector described by the parsed arguments."""
    options = {"host_name": args.host, "page_size": str(args.page_size)}
    if args.simulated:
        options["access_token"] = SIMULATED_TOKEN
        return NocodeStudioConnect(options, session=get_api(SIMULATED_TOKEN))
    token = args.token or os.environ.get(TOKEN_ENV_VAR)
    if token:
        options["access_token"] = token
    return NocodeStudioConnect(options)


def call_tables(connector, args) -> dict[str, Any]:
    tables = connector.list_workspace_tables()
    return {"command": "tables", "tables": tables, "count": len(tables)}


def call_schema(connector, args) -> dict[str, Any]:
    schema = connector.get_schema({"configParams": {"workspaceTable": args.workspace_table}})
    return {"command": "schema", "table": args.workspace_table, "schema": schema["schema"]}


def call_data(connector, args) -> dict[str, Any]:
    request = {"configParams": {"workspaceTable": args.workspace_table}}
    field_ids = args.field
    if not field_ids:
        field_ids = [f["name"] for f in connector.get_schema(request)["schema"]]
    request["fields"] = [{"name": field_id} for field_id in field_ids]

    result = connector.get_data(request)
    rows = result["rows"]
    output = {
        "command": "data",
        "table": args.workspace_table,
        "schema": result["schema"],
        "row_count": len(rows),
    }
    if args.limit is not None:
        output["rows"] = rows[: args.limit]
        output["rows_limited"] = args.limit < len(rows)
    else:
        output["rows"] = rows
    return output


def _non_negative_int(value: str) -> int:
    limit = int(value)
    if limit < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {limit}")
    return limit


COMMANDS = {
    "tables": call_tables,
    "schema": call_schema,
    "data": call_data,
}


def format_text(result: dict[str, Any]) -> str:
    """Render a command result for humans."""
    lines = []
    if result["command"] == "tables":
        lines.extend(result["tables"])
        lines.append(f"({result['count']} tables)")
    else:
        for field in result["schema"]:
            semantics = field["semantics"]
            lines.append(
                f"{field['name']:>4}  {field['label']:<30} {semantics['conceptType']:<10} {semantics['semanticType']}"
            )
    if result["command"] == "data":
        lines.append("")
        for row in result["rows"]:
            lines.append("\t".join("" if v is None else str(v) for v in row["values"]))
        lines.append(f"({result['row_count']} rows)")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nocode-connector",
        description="Read nocode workspace tables the way the reporting connector does.",
    )
    parser.add_argument("--host", default=DEFAULT_HOST_NAME, help="nocode instance host name")
    parser.add_argument("--token", help=f"bearer token (default: ${TOKEN_ENV_VAR})")
    parser.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE, help="rows per page request")
    parser.add_argument("--simulated", action="store_true", help="use the in-memory demo API")
    parser.add_argument("--json", action="store_true", help="print JSON instead of text")
    parser.add_argument("-v", "--verbose", action="store_true", help="log requests")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("tables", help="list workspace/table pairs")

    schema_parser = subparsers.add_parser("schema", help="print the fields of a table")
    schema_parser.add_argument("workspace_table", metavar="WORKSPACE/TABLE")

    data_parser = subparsers.add_parser("data", help="read all rows of a table")
    data_parser.add_argument("workspace_table", metavar="WORKSPACE/TABLE")
    data_parser.add_argument("--field", action="append", help="field id to include (repeatable, default: all)")
    data_parser.add_argument("--limit", type=_non_negative_int, help="print at most this many rows")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        connector = build_connector(args)
        result = COMMANDS[args.command](connector, args)
    except ConnectorError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print(format_text(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
