"""Ledger session primitives.

This module owns driver construction and release so the executor and the
document helpers can stay focused on statements and results.  A
:class:`LedgerSession` lives for exactly one call: :func:`session_scope`
opens it and guarantees it is closed on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from pyqldb.driver.qldb_driver import QldbDriver

from qldb_util.config import LedgerSettings

logger = logging.getLogger(__name__)


class LedgerSession:
    """A driver-backed session bound to one ledger.

    Args:
        driver: A ``QldbDriver`` (or anything with ``execute_lambda``,
            ``list_tables`` and ``close``).
        ledger_name: Ledger the driver points at, for logs.
    """

    def __init__(self, driver: Any, ledger_name: str) -> None:
        self._driver = driver
        self.ledger_name = ledger_name
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def execute_statement(self, statement: str, *parameters: Any) -> Iterable[Any]:
        """Run ``statement`` in its own transaction and return the result set.

        The driver buffers the cursor before the transaction commits, so the
        returned result set can be read after this call returns (once).
        """
        self._ensure_open()
        logger.debug(
            "Executing statement on %s with %d parameter(s): %s",
            self.ledger_name,
            len(parameters),
            statement,
        )
        return self._driver.execute_lambda(
            lambda executor: executor.execute_statement(statement, *parameters)
        )

    def list_tables(self) -> list[str]:
        """Return the names of the ledger's active tables."""
        self._ensure_open()
        return list(self._driver.list_tables())

    def close(self) -> None:
        """Release the driver. Calling this more than once is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._driver.close()
        logger.debug("Closed session on %s", self.ledger_name)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"Session on ledger {self.ledger_name!r} is closed")


def open_session(ledger_name: str, settings: LedgerSettings) -> LedgerSession:
    """Create a driver for ``ledger_name`` from explicit settings."""
    if not ledger_name or not ledger_name.strip():
        raise ValueError("open_session: ledger_name must be a non-empty string.")
    try:
        driver = QldbDriver(ledger_name, **settings.driver_kwargs())
    except Exception as exc:
        logger.error("Could not open session on ledger %r: %s", ledger_name, exc)
        raise
    return LedgerSession(driver, ledger_name)


@contextmanager
def session_scope(ledger_name: str, settings: LedgerSettings) -> Iterator[LedgerSession]:
    """Yield an open session with guaranteed cleanup semantics.

    Behavior:
        - Always closes the session in ``finally``, exactly once.
        - Exceptions from the block propagate unchanged.
    """
    session = open_session(ledger_name, settings)
    try:
        yield session
    finally:
        session.close()
