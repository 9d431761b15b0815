"""
Protocol definitions for sqlpersist.

The managers never import a driver. They depend on three structural
contracts (``DataSource`` → ``Connection`` → ``Cursor``) plus the
``EntityFactory`` contract that caller-defined entity types opt into.

Manifesto:
    Protocols define contracts without inheritance. They enable:
    - **Decoupling:** Managers depend on shape, not on sqlite3 or psycopg
    - **Testability:** A ``MagicMock`` data source drives every failure path
    - **Opt-in entities:** Any class with a ``from_row`` factory is a target

Architecture:
    ::

        protocols.py
        ├── Cursor          — DB-API 2.0 cursor subset
        ├── Connection      — cursor(), commit/rollback/close, set_autocommit
        ├── DataSource      — get_connection() (pooled or not)
        ├── RowDecoder      — Callable[[Row], T]
        └── EntityFactory   — class exposing from_row(row) -> instance

Guardrails:
    ❌ DON'T: Call driver-specific APIs from the managers
    ✅ DO: Put driver quirks in an adapter (see datasource.py)

Tags:
    protocol, connection, cursor, data-source, entity-factory, sqlpersist
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

Row = Mapping[str, Any]
"""One result row: upper-cased column label → driver-native value."""

RowDecoder = Callable[[Row], T]
"""Caller-supplied conversion from a Row to a typed object."""

ENTITY_FACTORY_METHOD = "from_row"


@runtime_checkable
class Cursor(Protocol):
    """The DB-API 2.0 cursor surface the managers rely on."""

    description: Sequence[Sequence[Any]] | None
    rowcount: int

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        ...

    def fetchone(self) -> Sequence[Any] | None:
        ...

    def fetchall(self) -> list[Sequence[Any]]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Connection(Protocol):
    """
    A single live database connection.

    ``close()`` releases the connection: for a pooled data source this
    returns it to the pool rather than closing the socket.
    """

    def cursor(self) -> Cursor:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def close(self) -> None:
        ...

    def set_autocommit(self, enabled: bool) -> None:
        ...


@runtime_checkable
class DataSource(Protocol):
    """Hands out connections. Thread safety is the implementation's concern."""

    def get_connection(self) -> Connection:
        ...


@runtime_checkable
class EntityFactory(Protocol[T_co]):
    """A type that can build itself from one result row."""

    @classmethod
    def from_row(cls, row: Row) -> T_co:
        ...


__all__ = [
    "Row",
    "RowDecoder",
    "ENTITY_FACTORY_METHOD",
    "Cursor",
    "Connection",
    "DataSource",
    "EntityFactory",
]
