"""Parameterized SQL statements.

A ``SqlStatement`` is SQL text (fixed at construction) plus a mapping of
1-based parameter index → bound value. The text is handed to the driver
verbatim; the library only binds parameters.

Examples:
    >>> statement = SqlStatement("INSERT INTO ACCOUNT(NAME) VALUES(?)")
    >>> statement.set_parameter(1, "CASH").get_parameters()
    mappingproxy({1: 'CASH'})
    >>> bind_parameters(statement)
    ('CASH',)

Tags:
    sql, statement, parameters, binding, sqlpersist
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .errors import InvalidArgumentError, NullValueError

READ_KEYWORD = "SELECT"
_GENERATED_KEY_KEYWORDS = ("INSERT", "REPLACE")


def _validate_sql(sql: object) -> str:
    if sql is None:
        raise NullValueError("SQL text cannot be None.")
    if isinstance(sql, SqlBuilder):
        sql = sql.sql
    if not isinstance(sql, str):
        raise InvalidArgumentError(f"SQL text must be a str or SqlBuilder, got {type(sql).__name__}.")
    if not sql.strip():
        raise InvalidArgumentError("SQL text must be non-empty.")
    return sql


@dataclass(frozen=True)
class SqlBuilder:
    """Immutable holder of validated SQL text.

    Accepted wherever a ``SqlStatement`` takes its text; ``str(builder)``
    yields the SQL.
    """

    sql: str

    def __post_init__(self) -> None:
        _validate_sql(self.sql)

    def __str__(self) -> str:
        return self.sql


class SqlStatement:
    """SQL text plus positional bind values.

    The parameter map persists across executions until
    ``clear_parameters()`` is called.
    """

    def __init__(self, sql: str | SqlBuilder):
        self._sql = _validate_sql(sql)
        self._params: dict[int, Any] = {}

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def is_query(self) -> bool:
        """True if the trimmed, case-insensitive text begins with ``SELECT``."""
        return self._sql.lstrip().upper().startswith(READ_KEYWORD)

    @property
    def returns_generated_key(self) -> bool:
        return self._sql.lstrip().upper().startswith(_GENERATED_KEY_KEYWORDS)

    def set_parameter(self, index: int, value: Any) -> SqlStatement:
        """Bind ``value`` to the 1-based placeholder ``index``."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentError(f"Parameter index must be an int, got {index!r}.")
        if index < 1:
            raise InvalidArgumentError("Parameter index starts at 1.")
        if value is None:
            raise NullValueError(f"Value for parameter {index} is None.")
        self._params[index] = value
        return self

    def get_parameters(self) -> MappingProxyType[int, Any]:
        """Read-only snapshot of the bound parameters."""
        return MappingProxyType(dict(self._params))

    def clear_parameters(self) -> SqlStatement:
        self._params = {}
        return self

    def __str__(self) -> str:
        return self._sql

    def __repr__(self) -> str:
        return f"SqlStatement({self._sql!r}, params={self._params!r})"


def bind_parameters(statement: SqlStatement) -> tuple[Any, ...]:
    """Return the bound values as a positional tuple ordered by index.

    Every index from 1 to the highest bound index must have a value.
    """
    params = statement.get_parameters()
    if not params:
        return ()
    missing = [i for i in range(1, max(params) + 1) if i not in params]
    if missing:
        raise InvalidArgumentError(
            f"No value bound for parameter(s) {missing} of {statement.sql!r}."
        )
    return tuple(params[i] for i in sorted(params))


__all__ = [
    "READ_KEYWORD",
    "SqlBuilder",
    "SqlStatement",
    "bind_parameters",
]
