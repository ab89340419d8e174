"""Ion result → JSON-like value decoding.

Overview
--------
The driver hands back records as typed Ion values (``IonPyDict``,
``IonPyList``, ``IonPyInt`` ...).  :func:`ion_to_python` walks those values
structurally, switching on each value's ``ion_type``, and produces plain
Python objects.  There is no intermediate text step, so field names that
overlap (``id`` / ``identity``), strings containing ``:`` and large numbers
all decode exactly.

Pretty-printed Ion text is still supported in both directions:
:func:`pretty_print` renders records for display and :func:`decode_text`
parses such text with the Ion reader (never by string substitution) and then
decodes it the same way.

Result shape
------------
:func:`decode_values` (and everything built on it) returns:

- ``None`` for zero records,
- the decoded record itself for exactly one record,
- a ``list`` of decoded records otherwise.

Type mapping
------------
::

    null / null.<type>  -> None
    bool                -> bool
    int                 -> int
    float               -> float
    decimal             -> decimal.Decimal
    timestamp           -> datetime.datetime (fraction truncated to microseconds)
    string, symbol      -> str
    blob, clob          -> bytes
    list, sexp          -> list
    struct              -> dict   (repeated field name: last value wins)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from amazon.ion import simpleion
from amazon.ion.core import IonType
from amazon.ion.exceptions import IonException
from amazon.ion.simple_types import IonPyNull

from qldb_util.errors import DecodeError, MalformedResultError

logger = logging.getLogger(__name__)


# ── Structural decoding ───────────────────────────────────────────────────────


def ion_to_python(value: Any) -> Any:
    """Convert one Ion value (or an already-native value) to a JSON-like value.

    Raises:
        DecodeError: The value has a type with no JSON-like counterpart.
    """
    if value is None or isinstance(value, IonPyNull):
        return None

    ion_type = getattr(value, "ion_type", None)
    if ion_type is None:
        return _native_to_python(value)

    if ion_type is IonType.NULL:
        return None
    if ion_type is IonType.BOOL:
        return bool(value)
    if ion_type is IonType.INT:
        return int(value)
    if ion_type is IonType.FLOAT:
        return float(value)
    if ion_type is IonType.DECIMAL:
        return Decimal(value)
    if ion_type is IonType.TIMESTAMP:
        return _plain_datetime(value)
    if ion_type is IonType.SYMBOL:
        return value.text
    if ion_type is IonType.STRING:
        return str(value)
    if ion_type in (IonType.BLOB, IonType.CLOB):
        return bytes(value)
    if ion_type in (IonType.LIST, IonType.SEXP):
        return [ion_to_python(element) for element in value]
    if ion_type is IonType.STRUCT:
        return {str(key): ion_to_python(field) for key, field in value.items()}

    raise DecodeError(f"Cannot decode Ion value of type {ion_type}")


def decode_values(values: Iterable[Any]) -> Any:
    """Decode a sequence of records into ``None``, one record, or a list."""
    decoded = [ion_to_python(value) for value in values]
    if not decoded:
        return None
    if len(decoded) == 1:
        return decoded[0]
    return decoded


def decode_result(result_set: Iterable[Any]) -> Any:
    """Consume a driver result set once and decode its records.

    Errors raised by the driver while iterating propagate unchanged.
    """
    records = list(result_set)
    logger.debug("Decoding %d record(s)", len(records))
    try:
        return decode_values(records)
    except DecodeError as exc:
        logger.error("Result decoding failed: %s", exc)
        raise


# ── Text rendering ────────────────────────────────────────────────────────────


def pretty_print(values: Iterable[Any], indent: str = "  ") -> str:
    """Render records as Ion text, one top-level value per record.

    Raises:
        DecodeError: The Ion text writer rejected a value.
    """
    try:
        return simpleion.dumps(
            list(values),
            binary=False,
            sequence_as_stream=True,
            omit_version_marker=True,
            indent=indent,
        )
    except (IonException, TypeError, ValueError) as exc:
        logger.error("Pretty-printing failed: %s", exc)
        raise DecodeError(f"Cannot render result as Ion text: {exc}") from exc


def decode_text(text: str) -> Any:
    """Decode pretty-printed Ion text (a stream of records).

    Whitespace-only input means "no rows" and returns ``None``.  Adjacent
    top-level values such as ``{a:1}{a:2}`` decode to a list.

    Raises:
        MalformedResultError: The text is not a valid Ion stream.
    """
    if not text or not text.strip():
        return None
    try:
        values = simpleion.loads(text, single_value=False)
    except (IonException, ValueError) as exc:
        logger.error("Ion text could not be parsed: %s", exc)
        raise MalformedResultError(f"Malformed Ion text: {exc}") from exc
    return decode_values(values)


# ── Field discovery ───────────────────────────────────────────────────────────


def distinct_field_names(records: Any, *, nested: bool = False) -> list[str]:
    """Return struct field names in order of first occurrence, without repeats.

    Args:
        records: A decoded result (``None``, one record, or a list of records).
        nested: Also collect names from structs nested inside records.
    """
    if records is None:
        return []
    if not isinstance(records, list):
        records = [records]

    seen: dict[str, None] = {}
    for record in records:
        _collect_field_names(record, seen, nested=nested)
    return list(seen)


def _collect_field_names(value: Any, seen: dict[str, None], *, nested: bool) -> None:
    if isinstance(value, Mapping):
        for key, field in value.items():
            seen.setdefault(key, None)
            if nested:
                _collect_field_names(field, seen, nested=nested)
    elif nested and isinstance(value, list):
        for element in value:
            _collect_field_names(element, seen, nested=nested)


# ── Internal helpers ──────────────────────────────────────────────────────────


def _plain_datetime(value: datetime) -> datetime:
    """Strip the Ion ``Timestamp`` subclass, keeping fields and offset.

    ``datetime`` stops at microseconds, so finer fractional seconds are
    truncated.
    """
    return datetime(
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        value.second,
        value.microsecond,
        tzinfo=value.tzinfo,
    )


def _native_to_python(value: Any) -> Any:
    """Decode values that are already plain Python objects."""
    if isinstance(value, (bool, int, float, str, bytes)):
        return value
    if isinstance(value, Decimal):
        return Decimal(value)
    if isinstance(value, datetime):
        return _plain_datetime(value)
    if isinstance(value, date):
        return value
    if isinstance(value, Mapping):
        return {str(key): ion_to_python(field) for key, field in value.items()}
    if isinstance(value, (list, tuple)):
        return [ion_to_python(element) for element in value]
    raise DecodeError(f"Cannot decode value of type {type(value).__name__}")
