"""JSON-like value → Ion writer encoding.

:func:`encode_value` walks a Python value and drives an
:class:`~qldb_util.ion.writer.IonWriter` with one call per scalar and a
``step_in``/``step_out`` pair per container.  :func:`to_ion_parameter` wraps
that in a fresh :class:`~qldb_util.ion.writer.IonValueWriter`, which is what
the query executor binds as a statement parameter.

Type rules (checked in this order, first match wins):

==================  =====================================================
Python value        Writer call
==================  =====================================================
``None``            ``write_null()``
``bool``            ``write_bool()``  (before ``int``: bool is an int)
``int``             ``write_int()``
``float``           ``write_float()``
``Decimal``         ``write_decimal()``
``str``             ``write_string()``
``datetime``        ``write_timestamp()``
``date``            ``write_timestamp()`` at midnight UTC
``list``/``tuple``  ``step_in(LIST)`` … ``step_out()``
``Mapping``         ``step_in(STRUCT)`` … ``step_out()``
==================  =====================================================

Anything else raises :exc:`~qldb_util.errors.UnsupportedTypeError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, TypeVar

from amazon.ion.core import IonType

from qldb_util.errors import UnsupportedTypeError
from qldb_util.ion.writer import IonValueWriter, IonWriter

logger = logging.getLogger(__name__)

W = TypeVar("W", bound=IonWriter)


def encode_value(value: Any, writer: W) -> W:
    """Serialize ``value`` into ``writer`` and return the same writer.

    Struct fields are written in the mapping's own iteration order.

    Raises:
        UnsupportedTypeError: ``value`` (or something nested in it, including
            a non-string struct key) has no Ion serialization rule.
    """
    if value is None:
        writer.write_null()
    elif isinstance(value, bool):
        writer.write_bool(value)
    elif isinstance(value, int):
        writer.write_int(value)
    elif isinstance(value, float):
        writer.write_float(value)
    elif isinstance(value, Decimal):
        writer.write_decimal(value)
    elif isinstance(value, str):
        writer.write_string(value)
    elif isinstance(value, datetime):
        writer.write_timestamp(value)
    elif isinstance(value, date):
        writer.write_timestamp(datetime(value.year, value.month, value.day, tzinfo=UTC))
    elif isinstance(value, (list, tuple)):
        writer.step_in(IonType.LIST)
        for element in value:
            encode_value(element, writer)
        writer.step_out()
    elif isinstance(value, Mapping):
        writer.step_in(IonType.STRUCT)
        for key, field_value in value.items():
            if not isinstance(key, str):
                raise UnsupportedTypeError(type(key), where="struct field name")
            writer.write_field_name(key)
            encode_value(field_value, writer)
        writer.step_out()
    else:
        raise UnsupportedTypeError(type(value))
    return writer


def to_ion_parameter(value: Any) -> IonValueWriter:
    """Encode ``value`` into a new writer handle ready to bind to a statement."""
    try:
        return encode_value(value, IonValueWriter())
    except UnsupportedTypeError as exc:
        logger.error("Parameter encoding failed: %s", exc)
        raise
