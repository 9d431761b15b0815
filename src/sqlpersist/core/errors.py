"""
Structured error types for sqlpersist.

Every failure the library surfaces is a ``SqlPersistError`` subclass that
carries a category, a context (the SQL text, the operation, the entity
being materialized) and, when wrapping a driver failure, the original
exception as ``cause``.

Manifesto:
    - **Typed Error Hierarchy:** One type per way a caller can get it wrong
    - **Driver errors never leak raw:** They arrive wrapped in PersistenceError
    - **Rich Context:** Errors carry the statement text for logging
    - **Error Chaining:** The original exception is kept as ``__cause__``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       SqlPersistError                            │
        │              (category, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  InvalidArgumentError   NullValueError    IllegalStateError      │
        │  (ARGUMENT, ValueError) (ARGUMENT)        (STATE, RuntimeError)  │
        │                                                │                 │
        │                                          SequenceError           │
        │                                                                  │
        │  WrongStatementKindError   NoResultError   NonUniqueResultError  │
        │  (STATEMENT)               (RESULT)        (RESULT)              │
        │                                                                  │
        │  PersistenceError          UnsupportedOperationError             │
        │  (DATABASE / MAPPING)      (UNSUPPORTED, NotImplementedError)    │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Wrapping a driver failure:

    >>> try:
    ...     raise sqlite3.OperationalError("no such table: ACCOUNT")
    ... except sqlite3.OperationalError as e:
    ...     raise PersistenceError("Statement failed", cause=e)
    Traceback (most recent call last):
    ...
    PersistenceError: Statement failed

    Adding context:

    >>> error = NoResultError("Query returned no results")
    >>> error.with_context(sql="SELECT * FROM ACCOUNT")
    NoResultError('Query returned no results', category=RESULT)

Guardrails:
    ❌ DON'T: Raise a bare driver exception out of a manager
    ✅ DO: Wrap it in PersistenceError with cause=

    ❌ DON'T: Raise over the original error when a rollback fails
    ✅ DO: Log the rollback failure and re-raise the original

Tags:
    error-handling, exception-hierarchy, error-context, sqlpersist
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and logging."""

    ARGUMENT = "ARGUMENT"         # Bad caller input (index, text, None)
    STATE = "STATE"               # Call made out of state-machine order
    STATEMENT = "STATEMENT"       # Read used for write or vice versa
    RESULT = "RESULT"             # Zero rows, or too many rows
    DATABASE = "DATABASE"         # Driver / connection failure
    MAPPING = "MAPPING"           # Entity materialization failure
    CONFIG = "CONFIG"             # Missing or invalid configuration
    UNSUPPORTED = "UNSUPPORTED"   # Intentionally unimplemented feature
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        sql: Statement text that was being executed
        operation: Library operation in progress (``persist``, ``commit``...)
        entity: Name of the entity type being materialized
        metadata: Additional key-value pairs
    """

    sql: str | None = None
    operation: str | None = None
    entity: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["sql", "operation", "entity"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SqlPersistError(Exception):
    """
    Base exception for all sqlpersist errors.

    Subclasses set ``default_category``; callers may override it per
    instance. When ``cause`` is given it is also chained as ``__cause__``
    so tracebacks show the driver error underneath.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlPersistError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NoResultError("No results").with_context(sql=str(statement))
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CALLER ERRORS
# =============================================================================


class InvalidArgumentError(SqlPersistError, ValueError):
    """Malformed statement text or parameter index."""

    default_category = ErrorCategory.ARGUMENT


class NullValueError(SqlPersistError, ValueError):
    """A required input (statement, parameter value, data source) was None."""

    default_category = ErrorCategory.ARGUMENT


class IllegalStateError(SqlPersistError, RuntimeError):
    """An operation was invoked out of the required state-machine order."""

    default_category = ErrorCategory.STATE


class SequenceError(IllegalStateError):
    """A result accessor was called before a successful ``execute()``."""


class WrongStatementKindError(SqlPersistError):
    """A read statement was used where a write was expected, or vice versa."""

    default_category = ErrorCategory.STATEMENT


# =============================================================================
# RESULT ERRORS
# =============================================================================


class NoResultError(SqlPersistError):
    """A read query produced zero rows."""

    default_category = ErrorCategory.RESULT


class NonUniqueResultError(SqlPersistError):
    """A single-result query produced more than one row."""

    default_category = ErrorCategory.RESULT


# =============================================================================
# DRIVER / MAPPING ERRORS
# =============================================================================


class PersistenceError(SqlPersistError):
    """
    Wraps a lower-level driver failure or an entity-materialization failure.

    The original exception is available as ``cause`` (and ``__cause__``).
    """

    default_category = ErrorCategory.DATABASE


class UnsupportedOperationError(SqlPersistError, NotImplementedError):
    """Feature intentionally not implemented."""

    default_category = ErrorCategory.UNSUPPORTED


def wrap_driver_error(
    exc: BaseException,
    *,
    operation: str,
    sql: str | None = None,
) -> PersistenceError:
    """Build the ``PersistenceError`` raised for a driver-level failure."""
    return PersistenceError(
        f"{operation} failed: {exc}",
        context=ErrorContext(sql=sql, operation=operation),
        cause=exc,
    )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SqlPersistError",
    "InvalidArgumentError",
    "NullValueError",
    "IllegalStateError",
    "SequenceError",
    "WrongStatementKindError",
    "NoResultError",
    "NonUniqueResultError",
    "PersistenceError",
    "UnsupportedOperationError",
    "wrap_driver_error",
]
