
"""Storage module initialization.

Owns the shared SQLite connection, the schema of the credential store,
tenant registry and linked profiles, and the unit-of-work used by
multi-record writes.
"""

from .sqlite_base import (
    get_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection,
    sqlite_transaction,
    in_sqlite_transaction,
)
from .sqlite_store_base import SQLiteStoreBase

__all__ = [
    "get_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection",
    "sqlite_transaction",
    "in_sqlite_transaction",
    "SQLiteStoreBase",
]
