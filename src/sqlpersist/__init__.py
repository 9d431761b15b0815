"""
sqlpersist - Transactions and queries over a DB-API data source.

A thin layer over a database driver:
- sqlpersist.core.statement: SqlStatement / SqlBuilder (positional parameters)
- sqlpersist.core.query: QueryManager / Query (SELECT + materialization)
- sqlpersist.core.transaction: TransactionManager (begin/persist/commit)
- sqlpersist.core.factory: PersistenceManagerFactory
"""

__version__ = "0.1.0"

from sqlpersist.core import *  # noqa
