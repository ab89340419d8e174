"""Parameterized statement execution.

:func:`execute_query` is the one entry point most callers need: it opens a
session, encodes parameters, runs the statement, decodes the result and
releases the session, in that order.

Parameters are only bound when the statement contains a ``?`` placeholder.
They are normalized first (see :func:`normalize_parameters`) so callers can
pass either one value or a list of values.
"""

from __future__ import annotations

import logging
from typing import Any

from qldb_util.config import LedgerSettings
from qldb_util.ion.decoder import decode_result
from qldb_util.ion.encoder import to_ion_parameter
from qldb_util.session import session_scope

logger = logging.getLogger(__name__)

PLACEHOLDER = "?"


def has_placeholder(statement: str) -> bool:
    """True when ``statement`` expects bound parameters."""
    return PLACEHOLDER in statement


def normalize_parameters(parameters: Any) -> list[Any]:
    """Turn ``parameters`` into an ordered list of statement parameters.

    Lists and tuples are taken element-wise in order; any other value
    (including ``None``, which binds an Ion null) becomes a one-element list.
    """
    if isinstance(parameters, (list, tuple)):
        return list(parameters)
    return [parameters]


def execute_query(
    ledger_name: str,
    statement: str,
    parameters: Any = (),
    *,
    settings: LedgerSettings,
) -> Any:
    """Execute ``statement`` against ``ledger_name`` and decode the result.

    Args:
        ledger_name: Target ledger.
        statement: PartiQL statement text.
        parameters: One value or a list/tuple of values for ``?``
            placeholders. Ignored when the statement has no placeholder.
        settings: Driver configuration.

    Returns:
        ``None`` for no rows, the decoded row for one row, otherwise a list
        of decoded rows.

    Raises:
        UnsupportedTypeError: A parameter has no Ion serialization rule.
        DecodeError: The result could not be decoded.
        Exception: Driver errors propagate unchanged.
    """
    try:
        with session_scope(ledger_name, settings) as session:
            if has_placeholder(statement):
                bound = [
                    to_ion_parameter(param).get_value()
                    for param in normalize_parameters(parameters)
                ]
                result = session.execute_statement(statement, *bound)
            else:
                result = session.execute_statement(statement)
            return decode_result(result)
    except Exception as exc:
        logger.error("Query on ledger %r failed: %s", ledger_name, exc)
        raise
