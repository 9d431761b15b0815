"""
Read-side API: ``QueryManager`` and ``Query``.

Manifesto:
    A query borrows a connection for exactly one ``execute()`` and gives
    it back on every exit path. Results are buffered on the ``Query``
    so they can be materialized after the connection is gone.

Architecture:
    ::

        QueryManager(data_source)
            │ create_query(statement, entity=None)
            ▼
        Query ── execute() ──► [connection ─► cursor ─► rows] (all closed)
            │                      │
            │                      ▼
            │              list[dict[LABEL, value]]  (buffered)
            ├── get_single_result() ─► raw value | materialize(entity, row)
            └── get_result_list()   ─► tuple(materialize(entity, row) ...)

Examples:
    >>> statement = SqlStatement("SELECT * FROM ACCOUNT WHERE ID = ?")
    >>> statement.set_parameter(1, account_id)
    >>> account = manager.create_query(statement, Account).execute().get_single_result()

    >>> count = manager.create_query(SqlStatement("SELECT COUNT(*) FROM ACCOUNT"))
    >>> count.execute().get_single_result()
    2

Guardrails:
    ❌ DON'T: Share one Query between threads
    ✅ DO: Create a Query per call; the manager is a cheap factory

Tags:
    query, select, result-set, materialization, sqlpersist
"""

from __future__ import annotations

from contextlib import closing
from typing import Any

from .errors import (
    ErrorContext,
    NonUniqueResultError,
    NoResultError,
    NullValueError,
    SequenceError,
    SqlPersistError,
    UnsupportedOperationError,
    WrongStatementKindError,
    wrap_driver_error,
)
from .logging import get_logger
from .materializer import materialize
from .protocols import Cursor, DataSource
from .statement import READ_KEYWORD, SqlStatement, bind_parameters

logger = get_logger(__name__)


def _buffer_rows(cursor: Cursor, sql: str) -> list[dict[str, Any]]:
    """Drain ``cursor`` into row dicts keyed by upper-cased column label."""
    first = cursor.fetchone()
    if first is None:
        raise NoResultError(
            "Query returned no results.",
            context=ErrorContext(sql=sql, operation="execute"),
        )

    labels = [str(column[0]).upper() for column in cursor.description or ()]
    rows = [dict(zip(labels, first))]
    rows.extend(dict(zip(labels, row)) for row in cursor.fetchall())
    return rows


class Query:
    """
    A single SELECT statement bound to a data source.

    ``entity`` is optional: without it only ``get_single_result()`` is
    available and it returns the first column's raw value.
    """

    def __init__(
        self,
        data_source: DataSource,
        statement: SqlStatement,
        entity: Any = None,
    ):
        if data_source is None:
            raise NullValueError("Data source cannot be None.")
        if statement is None:
            raise NullValueError("Statement cannot be None.")
        self._data_source = data_source
        self._statement = statement
        self._entity = entity
        self._result: list[dict[str, Any]] | None = None

    @property
    def statement(self) -> SqlStatement:
        return self._statement

    @property
    def entity(self) -> Any:
        return self._entity

    def execute(self) -> Query:
        """Run the SELECT and buffer every row; returns ``self`` for chaining."""
        sql = self._statement.sql
        if not self._statement.is_query:
            raise WrongStatementKindError(
                f"Incorrect query type: expected a {READ_KEYWORD} statement.",
                context=ErrorContext(sql=sql, operation="execute"),
            )

        self._result = None
        params = bind_parameters(self._statement)
        try:
            with closing(self._data_source.get_connection()) as conn:
                with closing(conn.cursor()) as cursor:
                    cursor.execute(sql, params)
                    rows = _buffer_rows(cursor, sql)
        except SqlPersistError:
            raise
        except Exception as e:
            raise wrap_driver_error(e, operation="execute", sql=sql) from e

        self._result = rows
        logger.debug("query_executed", sql=sql, rows=len(rows))
        return self

    def get_single_result(self) -> Any:
        rows = self._require_result("get_single_result")
        if len(rows) > 1:
            raise NonUniqueResultError(
                f"Query returned {len(rows)} results, expected one.",
                context=ErrorContext(sql=self._statement.sql, operation="get_single_result"),
            )

        row = rows[0]
        if self._entity is None:
            return next(iter(row.values()))
        return materialize(self._entity, row)

    def get_result_list(self) -> tuple[Any, ...]:
        """Materialize every buffered row, in result-set order."""
        rows = self._require_result("get_result_list")
        if self._entity is None:
            raise UnsupportedOperationError(
                "get_result_list() requires an entity type or row decoder.",
                context=ErrorContext(sql=self._statement.sql, operation="get_result_list"),
            )
        return tuple(materialize(self._entity, row) for row in rows)

    def _require_result(self, operation: str) -> list[dict[str, Any]]:
        if self._result is None:
            raise SequenceError(
                f"{operation}() called before a successful execute().",
                context=ErrorContext(sql=self._statement.sql, operation=operation),
            )
        return self._result

    def __repr__(self) -> str:
        return f"Query({self._statement.sql!r}, entity={self._entity!r})"


class QueryManager:
    """Creates independent ``Query`` objects over one data source."""

    def __init__(self, data_source: DataSource):
        if data_source is None:
            raise NullValueError("Data source cannot be None.")
        self._data_source = data_source

    def create_query(self, statement: SqlStatement, entity: Any = None) -> Query:
        if statement is None:
            raise NullValueError("Statement cannot be None.")
        return Query(self._data_source, statement, entity)


__all__ = [
    "Query",
    "QueryManager",
]
