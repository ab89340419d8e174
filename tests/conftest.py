"""
Shared pytest fixtures for the qldb-util test suite.

This module provides fixtures that are automatically available to all test files:
- Explicit ledger settings
- A fake ledger driver patched in place of ``pyqldb``'s ``QldbDriver``
- Helpers that build realistic Ion result records from Ion text

No test ever contacts a real ledger. The fake driver records every statement
and parameter list it receives and counts ``close()`` calls so tests can
assert scoped-release behavior.
"""

from collections.abc import Iterator
from typing import Any

import pytest
from amazon.ion import simpleion

from qldb_util import session as session_module
from qldb_util.config import LedgerSettings

# ============================================================================
# ION HELPERS
# ============================================================================


def _parse_ion_records(text: str) -> list[Any]:
    """Parse Ion text into the typed values the driver would return."""
    return list(simpleion.loads(text, single_value=False))


# ============================================================================
# FAKE DRIVER
# ============================================================================


class FakeTransactionExecutor:
    """Stands in for the executor handed to ``execute_lambda`` callbacks."""

    def __init__(self, driver: "FakeDriver") -> None:
        self._driver = driver

    def execute_statement(self, statement: str, *parameters: Any) -> Iterator[Any]:
        self._driver.statements.append((statement, parameters))
        if self._driver.execute_error is not None:
            raise self._driver.execute_error
        return iter(self._driver.results)


class FakeDriver:
    """
    Minimal ``QldbDriver`` replacement.

    Attributes:
        ledger_name: Ledger name passed to the constructor.
        kwargs: Keyword arguments passed to the constructor.
        statements: ``(statement, parameters)`` tuples in execution order.
        results: Records returned by every statement.
        execute_error: Exception raised by every statement, if set.
        tables: Names returned by ``list_tables``.
        close_count: Number of ``close()`` calls.
    """

    def __init__(self) -> None:
        self.ledger_name: str | None = None
        self.kwargs: dict[str, Any] = {}
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.results: list[Any] = []
        self.execute_error: Exception | None = None
        self.tables: list[str] = []
        self.close_count = 0
        self.instances = 0

    def execute_lambda(self, query_lambda):
        return query_lambda(FakeTransactionExecutor(self))

    def list_tables(self) -> Iterator[str]:
        return iter(self.tables)

    def close(self) -> None:
        self.close_count += 1


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    """Explicit settings for a test ledger (no environment lookup)."""
    return LedgerSettings(ledger_name="test-ledger", region="us-east-1")


@pytest.fixture
def fake_driver(monkeypatch: pytest.MonkeyPatch) -> FakeDriver:
    """
    Patch ``QldbDriver`` in the session module with a single fake instance.

    Every session opened during the test shares this instance, so
    ``close_count`` totals releases across the whole test.
    """
    driver = FakeDriver()

    def factory(ledger_name: str, **kwargs: Any) -> FakeDriver:
        driver.ledger_name = ledger_name
        driver.kwargs = kwargs
        driver.instances += 1
        return driver

    monkeypatch.setattr(session_module, "QldbDriver", factory)
    return driver


@pytest.fixture
def ion_records():
    """Return a helper that parses Ion text into driver-style records."""
    return _parse_ion_records
