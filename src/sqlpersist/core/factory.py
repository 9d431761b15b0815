"""Factory for all the manager classes.

One ``PersistenceManagerFactory`` binds one data source; every manager it
creates shares that data source but keeps its own state.

Usage::

    factory = PersistenceManagerFactory.from_settings()
    tx = factory.create_transaction_manager()
    queries = factory.create_query_manager()
"""

from __future__ import annotations

from typing import NoReturn

from .datasource import create_data_source
from .errors import NullValueError, UnsupportedOperationError
from .protocols import DataSource
from .query import QueryManager
from .settings import PersistSettings, get_settings
from .transaction import TransactionManager


class PersistenceManagerFactory:
    """Creates query and transaction managers over a single data source."""

    def __init__(self, data_source: DataSource):
        if data_source is None:
            raise NullValueError("Data source cannot be None.")
        self._data_source = data_source

    @classmethod
    def from_settings(cls, settings: PersistSettings | None = None) -> PersistenceManagerFactory:
        """Build a factory over a pooled data source described by ``settings``."""
        settings = settings or get_settings()
        return cls(
            create_data_source(
                settings.database_url,
                echo=settings.echo,
                pool_size=settings.pool_size,
                max_overflow=settings.max_overflow,
                pool_timeout=settings.pool_timeout,
            )
        )

    @property
    def data_source(self) -> DataSource:
        return self._data_source

    def create_query_manager(self) -> QueryManager:
        return QueryManager(self._data_source)

    def create_transaction_manager(self) -> TransactionManager:
        return TransactionManager(self._data_source)

    def create_callable_manager(self) -> NoReturn:
        """Stored procedures are not supported."""
        raise UnsupportedOperationError("Stored-procedure managers are not implemented.")


__all__ = [
    "PersistenceManagerFactory",
]
