"""Typed exceptions for the qldb-util package.

The hierarchy is intentionally small. Encoding, decoding and lookup failures
each get their own class so callers can tell them apart, while errors raised
by the ledger driver itself (``botocore``/``pyqldb`` exceptions) are never
wrapped: they reach the caller with their original identity.

Design intent:
    - Catch sites log and re-raise; nothing here is retried or swallowed.
    - "No rows" is a normal outcome for queries (decoded as ``None``) and only
      becomes :class:`NotFoundError` for helpers whose contract is to return
      exactly one thing.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class OperationContext:
    """Structured operation metadata carried by lookup exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"documents.get_document_id"``).
        details: Optional human-readable context for logs and debugging.
    """

    operation: str
    details: str | None = None


class QldbUtilError(RuntimeError):
    """Base exception for qldb-util failures."""


class UnsupportedTypeError(QldbUtilError, TypeError):
    """A value has no Ion serialization rule.

    Args:
        value_type: The offending runtime type.
        where: Optional description of where the value was found (for example
            ``"field name"``).
    """

    def __init__(self, value_type: type, *, where: str | None = None) -> None:
        message = f"Cannot convert to Ion for type: {value_type.__name__}"
        if where:
            message = f"{message} ({where})"
        super().__init__(message)
        self.value_type = value_type


class IonWriterStateError(QldbUtilError):
    """The structured writer was driven out of protocol order."""


class DecodeError(QldbUtilError):
    """A result set could not be read or rendered."""


class MalformedResultError(DecodeError):
    """Ion text could not be parsed back into values."""


class NotFoundError(QldbUtilError, LookupError):
    """A lookup-by-field query returned no rows.

    Args:
        context: Structured operation metadata.
    """

    def __init__(self, *, context: OperationContext) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
