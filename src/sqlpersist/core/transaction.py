"""
Write-side API: ``TransactionManager``.

Manifesto:
    A transaction either fully commits or is fully discarded. The manager
    owns at most one live connection between ``begin()`` and
    ``commit()``/``rollback()``; any driver failure in between rolls back
    best-effort, discards the connection and surfaces the original error
    wrapped in ``PersistenceError``.

Architecture:
    ::

                     begin()
            ┌──────┐ ───────────────► ┌────────┐
            │ IDLE │                  │ ACTIVE │ ◄─┐ persist(stmt)
            └──────┘ ◄─────────────── └────────┘ ──┘ (records row count,
                ▲     commit()  (needs ≥1 write)       generated id)
                │     rollback()
                │     driver failure (auto-rollback)
                └─────────────────────────────────

    Every public operation checks its source state first and raises
    ``IllegalStateError`` without touching the connection when it is wrong.

Examples:
    >>> manager = factory.create_transaction_manager()
    >>> manager.begin()
    >>> insert = SqlStatement("INSERT INTO ACCOUNT(NAME) VALUES(?)")
    >>> account_id = manager.persist(insert.set_parameter(1, "CASH"))
    >>> manager.commit()
    >>> manager.get_row_count()
    1

    As a context manager (rolls back if the block raises):

    >>> with manager.transaction() as tx:
    ...     tx.persist(insert.clear_parameters().set_parameter(1, "EXPENSE"))

Guardrails:
    ❌ DON'T: Expect cumulative row counts; only the last persist() is kept
    ✅ DO: Read get_row_count() after each persist() you care about

    ❌ DON'T: Share a manager between threads
    ✅ DO: Create one manager per unit of work; the data source is shared

Tags:
    transaction, commit, rollback, state-machine, sqlpersist
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import closing, contextmanager
from dataclasses import dataclass
from enum import Enum

from .errors import (
    ErrorContext,
    IllegalStateError,
    NullValueError,
    SqlPersistError,
    WrongStatementKindError,
    wrap_driver_error,
)
from .logging import get_logger
from .protocols import Connection, Cursor, DataSource
from .statement import READ_KEYWORD, SqlStatement, bind_parameters

logger = get_logger(__name__)


class TransactionState(str, Enum):
    """Lifecycle state of a ``TransactionManager``."""

    IDLE = "idle"       # No connection held
    ACTIVE = "active"   # Connection open, autocommit disabled


@dataclass
class _Session:
    connection: Connection
    wrote: bool = False


def _write_result(cursor: Cursor, statement: SqlStatement) -> tuple[int, int]:
    """Affected row count and the key generated by an INSERT/REPLACE (0 if none).

    A write that returns rows (``INSERT ... RETURNING ID``) yields its key in
    the first column; otherwise the driver's ``lastrowid`` is used.
    """
    rowcount = cursor.rowcount
    row_count = rowcount if rowcount is not None and rowcount > 0 else 0
    if not statement.returns_generated_key:
        return row_count, 0

    if cursor.description is not None:
        returned = cursor.fetchall()
        row_count = max(row_count, len(returned))
        if not returned or returned[0][0] is None:
            return row_count, 0
        return row_count, int(returned[0][0])

    if row_count < 1:
        return row_count, 0
    key = getattr(cursor, "lastrowid", None)
    return row_count, int(key) if key else 0


class TransactionManager:
    """Drives begin → persist* → commit over a single connection."""

    def __init__(self, data_source: DataSource):
        if data_source is None:
            raise NullValueError("Data source cannot be None.")
        self._data_source = data_source
        self._state = TransactionState.IDLE
        self._session: _Session | None = None
        self._row_count = 0
        self._generated_id = 0

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def generated_id(self) -> int:
        """Id returned by the most recent ``persist()`` (0 if none)."""
        return self._generated_id

    def is_active(self) -> bool:
        return self._state is TransactionState.ACTIVE

    def get_row_count(self) -> int:
        """Rows affected by the most recent ``persist()``."""
        return self._row_count

    def begin(self) -> None:
        if self._state is TransactionState.ACTIVE or self._session is not None:
            raise IllegalStateError("Transaction already active.")

        try:
            conn = self._data_source.get_connection()
        except SqlPersistError:
            raise
        except Exception as e:
            raise wrap_driver_error(e, operation="begin") from e

        try:
            conn.set_autocommit(False)
        except Exception as e:
            self._release(conn, operation="begin")
            raise wrap_driver_error(e, operation="begin") from e

        self._session = _Session(connection=conn)
        self._row_count = 0
        self._generated_id = 0
        self._state = TransactionState.ACTIVE
        logger.debug("transaction_begun", manager_id=id(self))

    def persist(self, statement: SqlStatement) -> int:
        """Execute one write statement; returns the generated id or 0."""
        session = self._require_active("persist")
        if statement is None:
            raise NullValueError("Statement cannot be None.")

        sql = statement.sql
        if statement.is_query:
            raise WrongStatementKindError(
                f"Incorrect query type: {READ_KEYWORD} statements cannot be persisted.",
                context=ErrorContext(sql=sql, operation="persist"),
            )

        params = bind_parameters(statement)
        try:
            with closing(session.connection.cursor()) as cursor:
                cursor.execute(sql, params)
                row_count, generated = _write_result(cursor, statement)
        except Exception as e:
            self._abort("persist")
            raise wrap_driver_error(e, operation="persist", sql=sql) from e

        self._row_count = row_count
        self._generated_id = generated
        session.wrote = True
        logger.debug(
            "statement_persisted",
            manager_id=id(self),
            sql=sql,
            row_count=row_count,
            generated_id=generated,
        )
        return generated

    def commit(self) -> None:
        session = self._require_active("commit")
        if not session.wrote:
            raise IllegalStateError("Nothing to commit.")

        conn = session.connection
        try:
            conn.commit()
            conn.set_autocommit(True)
            conn.close()
        except Exception as e:
            self._abort("commit")
            raise wrap_driver_error(e, operation="commit") from e
        finally:
            self._session = None
            self._state = TransactionState.IDLE

        logger.debug("transaction_committed", manager_id=id(self), row_count=self._row_count)

    def rollback(self) -> None:
        """Discard every write since ``begin()`` and release the connection."""
        session = self._require_active("rollback")
        self._session = None
        self._state = TransactionState.IDLE

        conn = session.connection
        try:
            conn.rollback()
            conn.set_autocommit(True)
        except Exception as e:
            raise wrap_driver_error(e, operation="rollback") from e
        finally:
            self._release(conn, operation="rollback")

        logger.debug("transaction_rolled_back", manager_id=id(self), reason="requested")

    @contextmanager
    def transaction(self) -> Iterator[TransactionManager]:
        """``begin()`` on entry, ``commit()`` on exit, roll back if the block raises."""
        self.begin()
        try:
            yield self
        except BaseException:
            if self.is_active():
                self._abort("transaction")
            raise
        self.commit()

    # -- internals ---------------------------------------------------------

    def _require_active(self, operation: str) -> _Session:
        if self._state is not TransactionState.ACTIVE or self._session is None:
            raise IllegalStateError(
                "No active transaction.",
                context=ErrorContext(operation=operation),
            )
        return self._session

    def _abort(self, operation: str) -> None:
        """Best-effort rollback after a failure; never raises."""
        session = self._session
        self._session = None
        self._state = TransactionState.IDLE
        if session is None:
            return

        conn = session.connection
        try:
            conn.rollback()
            conn.set_autocommit(True)
        except Exception:
            logger.error("rollback_failed", manager_id=id(self), operation=operation, exc_info=True)
        else:
            logger.debug("transaction_rolled_back", manager_id=id(self), reason=operation)
        finally:
            self._release(conn, operation=operation)

    def _release(self, conn: Connection, *, operation: str) -> None:
        try:
            conn.close()
        except Exception:
            logger.error(
                "connection_close_failed", manager_id=id(self), operation=operation, exc_info=True
            )

    def __repr__(self) -> str:
        return f"TransactionManager(state={self._state.value}, row_count={self._row_count})"


__all__ = [
    "TransactionState",
    "TransactionManager",
]
