"""qldb-util: convenience layer over the QLDB driver and Ion.

Opens ledger sessions, executes parameterized PartiQL statements, and
converts values between Ion and plain JSON-like Python objects.

Public surface
--------------
- :func:`execute_query`         : run a statement, return decoded rows.
- :func:`list_tables`           : active table names of a ledger.
- :func:`get_document_id`       : document id by field value.
- :func:`view_document_history` : every revision of a document.
- :func:`load_config`           : settings from INI file + environment.

Ion conversion lives in :mod:`qldb_util.ion`; exceptions in
:mod:`qldb_util.errors`.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("qldb-util")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from qldb_util.config import LedgerSettings, load_config  # noqa: E402
from qldb_util.documents import (  # noqa: E402
    get_document_id,
    list_tables,
    view_document_history,
)
from qldb_util.executor import execute_query  # noqa: E402

__all__ = [
    "LedgerSettings",
    "__version__",
    "execute_query",
    "get_document_id",
    "list_tables",
    "load_config",
    "view_document_history",
]
