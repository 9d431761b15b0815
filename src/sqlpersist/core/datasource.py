"""Data sources, where the managers get their connections.

``create_data_source()`` is the usual entry point: it builds a SQLAlchemy
engine for the URL and hands out pooled raw DB-API connections wrapped
in ``DbapiConnection``. Closing one returns it to the pool.

Supported URLs are whatever SQLAlchemy supports; for example:

==============================================  ==========================
URL                                             Backend
==============================================  ==========================
``sqlite:///path/to/file.db``                   SQLite file
``postgresql+psycopg://user:pw@host:port/db``   PostgreSQL
==============================================  ==========================

In-memory SQLite (``sqlite://``, ``:memory:``) is refused: its pool shares
one connection per thread, so two transactions would share one session.

Statement text is passed to the driver verbatim, so placeholders must use
the driver's paramstyle (``?`` for sqlite3, ``%s`` for psycopg).

Usage::

    from sqlpersist.core.datasource import create_data_source

    data_source = create_data_source("sqlite:///data/app.db")
    conn = data_source.get_connection()
    try:
        ...
    finally:
        conn.close()

``DbapiDataSource`` is the unpooled alternative: it calls a connect
function on every acquisition::

    DbapiDataSource(functools.partial(sqlite3.connect, "app.db"))
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from .errors import ErrorCategory, InvalidArgumentError, NullValueError
from .logging import get_logger
from .protocols import Cursor
from .settings import DEFAULT_DATABASE_URL

logger = get_logger(__name__)


class DbapiConnection:
    """Adapter: DB-API 2.0 connection → ``Connection`` protocol.

    DB-API has no portable autocommit switch; ``set_autocommit`` maps it to
    ``isolation_level`` for sqlite3 and to the ``autocommit`` attribute for
    drivers that have one (psycopg, psycopg2, mysqlclient...).
    """

    def __init__(self, dbapi_connection: Any, *, driver_connection: Any = None) -> None:
        self._conn = dbapi_connection
        self._driver = driver_connection if driver_connection is not None else dbapi_connection

    # -- Connection protocol -----------------------------------------------

    def cursor(self) -> Cursor:
        return self._conn.cursor()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def set_autocommit(self, enabled: bool) -> None:
        if isinstance(self._driver, sqlite3.Connection):
            self._driver.isolation_level = None if enabled else "DEFERRED"
        else:
            self._driver.autocommit = enabled

    # -- convenience -------------------------------------------------------

    @property
    def raw(self) -> Any:
        """The wrapped DB-API connection (a pool proxy for pooled sources)."""
        return self._conn

    def __repr__(self) -> str:
        return f"DbapiConnection({self._conn!r})"


class EngineDataSource:
    """Pooled data source backed by a SQLAlchemy ``Engine``."""

    def __init__(self, engine: Engine) -> None:
        if engine is None:
            raise NullValueError("Engine cannot be None.")
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_connection(self) -> DbapiConnection:
        raw = self._engine.raw_connection()
        return DbapiConnection(raw, driver_connection=raw.driver_connection)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()

    def __repr__(self) -> str:
        return f"EngineDataSource({self._engine.url!r})"


class DbapiDataSource:
    """Unpooled data source: one fresh DB-API connection per acquisition."""

    def __init__(self, connect: Callable[[], Any]) -> None:
        if connect is None:
            raise NullValueError("Connect function cannot be None.")
        self._connect = connect

    def get_connection(self) -> DbapiConnection:
        return DbapiConnection(self._connect())


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return False
    database = parsed.database or ""
    return database in ("", ":memory:") or parsed.query.get("mode") == "memory"


def create_data_source(
    url: str = DEFAULT_DATABASE_URL,
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> EngineDataSource:
    """Create a pooled data source for ``url``.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql+psycopg://…``, etc.)
    echo:
        If ``True``, SQLAlchemy logs every statement.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url is None:
        raise NullValueError("Database URL cannot be None.")
    if _is_memory_sqlite(url):
        # The pool hands every checkout on a thread the same connection.
        raise InvalidArgumentError(
            f"In-memory SQLite ({url!r}) cannot isolate transactions; use a database file.",
            category=ErrorCategory.CONFIG,
        )

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        logger.debug("data_source_created", backend="sqlite", url=url)
        return EngineDataSource(engine)

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout

    engine = create_engine(url, echo=echo, **pool_kwargs, **kwargs)
    logger.debug("data_source_created", backend=engine.dialect.name, url=engine.url.render_as_string())
    return EngineDataSource(engine)


__all__ = [
    "DbapiConnection",
    "EngineDataSource",
    "DbapiDataSource",
    "create_data_source",
]
