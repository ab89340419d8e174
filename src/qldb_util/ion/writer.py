"""Structured Ion writer handle.

Overview
--------
The encoder never builds Ion values directly; it drives a *writer* through a
small event-style protocol (``write_*``, ``step_in``, ``write_field_name``,
``step_out``).  :class:`IonWriter` is that protocol and
:class:`IonValueWriter` is the implementation used for statement
parameters.

:class:`IonValueWriter` accumulates the written values as native Python
objects (``dict``, ``list``, ``Decimal``, ``datetime`` ...).  The ledger
driver serializes native values to Ion itself, so :meth:`IonValueWriter.get_value`
is what gets bound to a statement.  :meth:`IonValueWriter.get_bytes` and
:meth:`IonValueWriter.get_text` render the same values through
``amazon.ion.simpleion`` for inspection and for the ``encode`` CLI command.

State rules
-----------
- Inside a struct every value must be preceded by exactly one
  :meth:`~IonValueWriter.write_field_name` call.
- :meth:`~IonValueWriter.write_field_name` is only valid inside a struct.
- :meth:`~IonValueWriter.step_out` must balance :meth:`~IonValueWriter.step_in`.
- Results can only be read once every container has been closed.

Violations raise :exc:`~qldb_util.errors.IonWriterStateError`.  A writer is
owned by a single encode call and is not thread-safe.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from amazon.ion import simpleion
from amazon.ion.core import IonType

from qldb_util.errors import IonWriterStateError

_CONTAINER_TYPES = (IonType.LIST, IonType.SEXP, IonType.STRUCT)


class IonWriter(Protocol):
    """The writer operations the encoder depends on."""

    def write_string(self, value: str) -> None: ...

    def write_bool(self, value: bool) -> None: ...

    def write_int(self, value: int) -> None: ...

    def write_float(self, value: float) -> None: ...

    def write_null(self) -> None: ...

    def write_timestamp(self, value: datetime) -> None: ...

    def write_decimal(self, value: Decimal) -> None: ...

    def write_field_name(self, name: str) -> None: ...

    def step_in(self, ion_type: IonType) -> None: ...

    def step_out(self) -> None: ...


class IonValueWriter:
    """Writer handle that collects written values as native Python objects.

    Example::

        writer = IonValueWriter()
        writer.step_in(IonType.STRUCT)
        writer.write_field_name("id")
        writer.write_int(7)
        writer.step_out()
        writer.get_value()   # {"id": 7}
    """

    def __init__(self) -> None:
        self._values: list[Any] = []
        self._stack: list[dict[str, Any] | list[Any]] = []
        self._field_name: str | None = None

    # ── Scalars ───────────────────────────────────────────────────────────────

    def write_string(self, value: str) -> None:
        self._emit(str(value))

    def write_bool(self, value: bool) -> None:
        self._emit(bool(value))

    def write_int(self, value: int) -> None:
        self._emit(int(value))

    def write_float(self, value: float) -> None:
        self._emit(float(value))

    def write_null(self) -> None:
        self._emit(None)

    def write_timestamp(self, value: datetime) -> None:
        if not isinstance(value, datetime):
            raise IonWriterStateError(
                f"write_timestamp expects a datetime, got {type(value).__name__}"
            )
        self._emit(value)

    def write_decimal(self, value: Decimal) -> None:
        self._emit(Decimal(value))

    # ── Containers ────────────────────────────────────────────────────────────

    def write_field_name(self, name: str) -> None:
        if not self._stack or not isinstance(self._stack[-1], dict):
            raise IonWriterStateError("write_field_name called outside of a struct")
        if self._field_name is not None:
            raise IonWriterStateError(
                f"field name {self._field_name!r} is still waiting for a value"
            )
        self._field_name = name

    def step_in(self, ion_type: IonType) -> None:
        if ion_type not in _CONTAINER_TYPES:
            raise IonWriterStateError(f"cannot step into non-container type {ion_type}")
        container: dict[str, Any] | list[Any] = {} if ion_type is IonType.STRUCT else []
        self._emit(container)
        self._stack.append(container)

    def step_out(self) -> None:
        if not self._stack:
            raise IonWriterStateError("step_out called with no open container")
        if self._field_name is not None:
            raise IonWriterStateError(
                f"cannot close struct while field {self._field_name!r} has no value"
            )
        self._stack.pop()

    @property
    def depth(self) -> int:
        """Number of containers currently open."""
        return len(self._stack)

    # ── Results ───────────────────────────────────────────────────────────────

    def get_values(self) -> list[Any]:
        """Return every top-level value written so far."""
        if self._stack:
            raise IonWriterStateError(
                f"{len(self._stack)} container(s) still open; call step_out first"
            )
        return list(self._values)

    def get_value(self) -> Any:
        """Return the single top-level value written to this handle."""
        values = self.get_values()
        if len(values) != 1:
            raise IonWriterStateError(
                f"expected exactly one top-level value, writer holds {len(values)}"
            )
        return values[0]

    def get_bytes(self) -> bytes:
        """Serialize the written values as an Ion binary stream."""
        return simpleion.dumps(self.get_values(), binary=True, sequence_as_stream=True)

    def get_text(self, indent: str | None = "  ") -> str:
        """Serialize the written values as Ion text, one top-level value each."""
        return simpleion.dumps(
            self.get_values(),
            binary=False,
            sequence_as_stream=True,
            omit_version_marker=True,
            indent=indent,
        )

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _emit(self, value: Any) -> None:
        """Place ``value`` at the current cursor position."""
        if not self._stack:
            if self._field_name is not None:
                raise IonWriterStateError("field name pending at top level")
            self._values.append(value)
            return

        parent = self._stack[-1]
        if isinstance(parent, dict):
            if self._field_name is None:
                raise IonWriterStateError("struct value written without a field name")
            parent[self._field_name] = value
            self._field_name = None
        else:
            parent.append(value)
