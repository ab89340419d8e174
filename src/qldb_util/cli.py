"""
Command-line interface for qldb-util.

Provides CLI commands for ad-hoc ledger work:
- query: Execute a PartiQL statement with optional JSON parameters
- tables: List the ledger's active tables
- document-id: Look up a document id by field value
- history: Show every revision of a document
- encode: Print the Ion text produced for a JSON value (no ledger access)

Usage:
    qldb-util --ledger vehicle-registration query "SELECT * FROM Person WHERE GovId = ?" --param '"LEWISR261LL"'
    qldb-util tables
    qldb-util document-id Person GovId LEWISR261LL
    qldb-util history Person 8F0TPCmdNQ6JTRpiLj2TmW
    qldb-util encode '{"id": 1, "tags": ["a", "b"]}'

Environment Variables:
    QLDB_LEDGER: Default ledger name (overridden by --ledger)
    AWS_REGION, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY: Driver credentials
    QLDB_LOG_LEVEL, QLDB_LOG_FORMAT: Logging setup
"""

import argparse
import base64
import configparser
import json
import sys
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from qldb_util.config import LedgerSettings, configure_logging, load_config


def parse_json_argument(text: str) -> Any:
    """
    Parse a command-line value as JSON, falling back to the raw string.

    JSON numbers with a fractional part are parsed as ``Decimal`` so they
    reach the ledger without binary-float rounding.
    """
    try:
        return json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError:
        return text


def _json_default(value: Any) -> Any:
    """Render non-JSON scalars produced by the decoder."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def render_json(result: Any) -> str:
    """Render a decoded result as indented JSON."""
    return json.dumps(result, indent=2, ensure_ascii=False, default=_json_default)


def render_table(result: Any) -> str:
    """
    Render a decoded result as a plain-text table.

    Columns are the distinct top-level field names across all rows, in order
    of first appearance. Rows that are not structs are shown in a single
    ``value`` column.
    """
    from qldb_util.ion.decoder import distinct_field_names

    if result is None:
        return "(no rows)"
    rows = result if isinstance(result, list) else [result]
    columns = distinct_field_names(rows)
    if "value" not in columns and (not columns or any(not isinstance(row, dict) for row in rows)):
        columns.append("value")

    def cell(row: Any, column: str) -> str:
        if isinstance(row, dict):
            if column not in row:
                return ""
            value = row[column]
        elif column == "value":
            value = row
        else:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=_json_default)

    body = [[cell(row, column) for column in columns] for row in rows]
    widths = [max([len(column)] + [len(line[i]) for line in body]) for i, column in enumerate(columns)]
    lines = [
        "  ".join(column.ljust(width) for column, width in zip(columns, widths)),
        "  ".join("-" * width for width in widths),
    ]
    lines.extend("  ".join(value.ljust(width) for value, width in zip(line, widths)) for line in body)
    return "\n".join(line.rstrip() for line in lines)


def render_ion(result: Any) -> str:
    """Render a decoded result as pretty-printed Ion text."""
    from qldb_util.ion.decoder import pretty_print

    if result is None:
        return ""
    rows = result if isinstance(result, list) else [result]
    return pretty_print(rows)


_RENDERERS = {"json": render_json, "table": render_table, "ion": render_ion}


def _ledger(args: argparse.Namespace) -> tuple[str, LedgerSettings]:
    """Resolve the ledger name and settings for a command."""
    settings: LedgerSettings = args.settings
    ledger_name = args.ledger or settings.ledger_name
    if not ledger_name:
        raise ValueError("No ledger name given. Use --ledger or set QLDB_LEDGER.")
    return ledger_name, settings


def cmd_query(args: argparse.Namespace) -> int:
    """
    Execute a statement and print the decoded result.

    Returns:
        0 on success, 1 on error
    """
    from qldb_util.executor import execute_query

    try:
        ledger_name, settings = _ledger(args)
        parameters = [parse_json_argument(p) for p in (args.param or [])]
        result = execute_query(ledger_name, args.statement, parameters, settings=settings)
        print(_RENDERERS[args.format](result))
        return 0
    except Exception as e:
        print(f"Error executing query: {e}", file=sys.stderr)
        return 1


def cmd_tables(args: argparse.Namespace) -> int:
    """
    Print the ledger's active table names, one per line.

    Returns:
        0 on success, 1 on error
    """
    from qldb_util.documents import list_tables

    try:
        ledger_name, settings = _ledger(args)
        for name in list_tables(ledger_name, settings=settings):
            print(name)
        return 0
    except Exception as e:
        print(f"Error listing tables: {e}", file=sys.stderr)
        return 1


def cmd_document_id(args: argparse.Namespace) -> int:
    """
    Print the id of the document whose field matches the given value.

    Returns:
        0 on success, 1 on error (including no matching document)
    """
    from qldb_util.documents import get_document_id

    try:
        ledger_name, settings = _ledger(args)
        value = parse_json_argument(args.value)
        print(get_document_id(ledger_name, args.table, args.field, value, settings=settings))
        return 0
    except Exception as e:
        print(f"Error looking up document id: {e}", file=sys.stderr)
        return 1


def cmd_history(args: argparse.Namespace) -> int:
    """
    Print every revision of a document as JSON.

    Returns:
        0 on success, 1 on error
    """
    from qldb_util.documents import view_document_history

    try:
        ledger_name, settings = _ledger(args)
        result = view_document_history(
            ledger_name, args.table, args.document_id, settings=settings
        )
        print(render_json(result))
        return 0
    except Exception as e:
        print(f"Error reading document history: {e}", file=sys.stderr)
        return 1


def cmd_encode(args: argparse.Namespace) -> int:
    """
    Print the Ion text the encoder produces for a JSON value.

    Returns:
        0 on success, 1 on error
    """
    from qldb_util.ion.encoder import to_ion_parameter

    try:
        writer = to_ion_parameter(parse_json_argument(args.value))
        print(writer.get_text())
        return 0
    except Exception as e:
        print(f"Error encoding value: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="qldb-util",
        description="Query a QLDB ledger and convert results between Ion and JSON",
    )
    parser.add_argument("--config", help="Path to an INI config file (default: config/qldb.ini)")
    parser.add_argument("--ledger", "-l", help="Ledger name (default: QLDB_LEDGER env var)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # query command
    query_parser = subparsers.add_parser(
        "query",
        help="Execute a PartiQL statement",
        description="Execute a statement. Each --param binds one '?' placeholder, in order.",
    )
    query_parser.add_argument("statement", help="PartiQL statement text")
    query_parser.add_argument(
        "--param",
        "-p",
        action="append",
        help="Parameter value as JSON (repeatable). Non-JSON text is bound as a string.",
    )
    query_parser.add_argument(
        "--format",
        "-f",
        choices=sorted(_RENDERERS),
        default="json",
        help="Output format (default: json)",
    )
    query_parser.set_defaults(func=cmd_query)

    # tables command
    tables_parser = subparsers.add_parser("tables", help="List active tables")
    tables_parser.set_defaults(func=cmd_tables)

    # document-id command
    docid_parser = subparsers.add_parser(
        "document-id",
        help="Look up a document id by field value",
    )
    docid_parser.add_argument("table", help="Table name")
    docid_parser.add_argument("field", help="Field to match")
    docid_parser.add_argument("value", help="Value to match, as JSON or plain text")
    docid_parser.set_defaults(func=cmd_document_id)

    # history command
    history_parser = subparsers.add_parser("history", help="Show a document's revisions")
    history_parser.add_argument("table", help="Table name")
    history_parser.add_argument("document_id", help="Document id")
    history_parser.set_defaults(func=cmd_history)

    # encode command
    encode_parser = subparsers.add_parser(
        "encode",
        help="Print the Ion encoding of a JSON value",
    )
    encode_parser.add_argument("value", help="Value as JSON")
    encode_parser.set_defaults(func=cmd_encode)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        cfg = load_config(args.config)
        configure_logging(cfg.logging)
    except (FileNotFoundError, ValueError, configparser.Error) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    args.settings = cfg.ledger
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
