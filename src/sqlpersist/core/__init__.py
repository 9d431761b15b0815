"""
Core API for sqlpersist.

Usage:
    from sqlpersist.core import (
        PersistenceManagerFactory,
        SqlStatement,
        create_data_source,
    )

    factory = PersistenceManagerFactory(create_data_source("sqlite:///app.db"))

    tx = factory.create_transaction_manager()
    with tx.transaction():
        tx.persist(SqlStatement("INSERT INTO ACCOUNT(NAME) VALUES(?)").set_parameter(1, "CASH"))

    query = factory.create_query_manager().create_query(
        SqlStatement("SELECT * FROM ACCOUNT"), Account
    )
    accounts = query.execute().get_result_list()
"""

from .datasource import DbapiConnection, DbapiDataSource, EngineDataSource, create_data_source
from .errors import (
    ErrorCategory,
    ErrorContext,
    IllegalStateError,
    InvalidArgumentError,
    NonUniqueResultError,
    NoResultError,
    NullValueError,
    PersistenceError,
    SequenceError,
    SqlPersistError,
    UnsupportedOperationError,
    WrongStatementKindError,
)
from .factory import PersistenceManagerFactory
from .logging import configure_logging, get_logger
from .materializer import materialize, resolve_decoder
from .protocols import Connection, Cursor, DataSource, EntityFactory, Row, RowDecoder
from .query import Query, QueryManager
from .settings import PersistSettings, clear_settings_cache, get_settings
from .statement import SqlBuilder, SqlStatement, bind_parameters
from .transaction import TransactionManager, TransactionState

__all__ = [
    # Statements
    "SqlBuilder",
    "SqlStatement",
    "bind_parameters",
    # Managers
    "PersistenceManagerFactory",
    "QueryManager",
    "Query",
    "TransactionManager",
    "TransactionState",
    # Materialization
    "materialize",
    "resolve_decoder",
    # Protocols
    "Connection",
    "Cursor",
    "DataSource",
    "EntityFactory",
    "Row",
    "RowDecoder",
    # Data sources
    "DbapiConnection",
    "DbapiDataSource",
    "EngineDataSource",
    "create_data_source",
    # Errors
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
    # Settings / logging
    "PersistSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
    "get_logger",
]
