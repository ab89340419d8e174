"""Document-level helpers built on the query executor.

Each helper is a single statement against the ledger.  Table and field names
cannot be bound as parameters in PartiQL, so they are interpolated into the
statement text after being checked against :data:`_IDENTIFIER_RE`.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from qldb_util.config import LedgerSettings
from qldb_util.errors import NotFoundError, OperationContext
from qldb_util.executor import execute_query
from qldb_util.session import session_scope

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _require_identifier(kind: str, name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid {kind} name: {name!r}")
    return name


def list_tables(ledger_name: str, *, settings: LedgerSettings) -> list[str]:
    """Return the active table names of ``ledger_name``."""
    try:
        with session_scope(ledger_name, settings) as session:
            tables = session.list_tables()
    except Exception as exc:
        logger.error("Listing tables on ledger %r failed: %s", ledger_name, exc)
        raise
    logger.debug("Ledger %r has %d table(s)", ledger_name, len(tables))
    return tables


def get_document_id(
    ledger_name: str,
    table: str,
    field: str,
    value: Any,
    *,
    settings: LedgerSettings,
) -> str:
    """Return the document id of the row whose ``field`` equals ``value``.

    When several documents match, the first one returned by the ledger wins.

    Raises:
        ValueError: ``table`` or ``field`` is not a plain identifier.
        NotFoundError: No document matches.
    """
    table = _require_identifier("table", table)
    field = _require_identifier("field", field)
    statement = f"SELECT id FROM {table} AS t BY id WHERE t.{field} = ?"

    result = execute_query(ledger_name, statement, [value], settings=settings)
    rows = result if isinstance(result, list) else [result] if result is not None else []
    if not rows:
        error = NotFoundError(
            context=OperationContext(
                operation="documents.get_document_id",
                details=f"no document in {table} with {field} = {value!r}",
            )
        )
        logger.error("%s", error)
        raise error
    if len(rows) > 1:
        logger.warning(
            "%d documents in %s match %s = %r; using the first",
            len(rows),
            table,
            field,
            value,
        )
    return rows[0]["id"]


def view_document_history(
    ledger_name: str,
    table: str,
    document_id: str,
    *,
    settings: LedgerSettings,
) -> Any:
    """Return every committed revision of one document.

    Each revision is decoded as ``{"linha": <document>, "versao": <n>}``.
    """
    table = _require_identifier("table", table)
    statement = (
        "SELECT data AS linha, metadata.version AS versao "
        f"FROM history({table}) AS h WHERE h.metadata.id = ?"
    )
    return execute_query(ledger_name, statement, [document_id], settings=settings)
