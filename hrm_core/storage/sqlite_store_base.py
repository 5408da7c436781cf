# hrm_core/storage/sqlite_store_base.py
import sqlite3
import logging
from datetime import datetime
from typing import List, Optional

from .sqlite_base import get_sqlite_db_connection, in_sqlite_transaction

logger = logging.getLogger(__name__)


def parse_timestamp(value) -> Optional[datetime]:
    """SQLite stores timestamps as ISO strings; tolerate None and datetime values."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class SQLiteStoreBase:
    """Query helpers shared by the SQLite-backed stores."""

    async def initialize(self) -> None:
        """Ensure the database and tables exist."""
        await get_sqlite_db_connection()
        logger.info(f"{type(self).__name__} initialized.")

    async def teardown(self) -> None:
        """Connection is managed globally so no action needed."""
        logger.info(f"{type(self).__name__} teardown (connection managed globally).")

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query with error handling and transaction management.

        Inside sqlite_transaction() the commit is left to the enclosing
        unit of work, and errors propagate so that it can roll back.

        Raises:
            sqlite3.Error: If query execution fails
        """
        conn = await get_sqlite_db_connection()
        cursor = conn.cursor()
        own_commit = commit and not in_sqlite_transaction()
        try:
            logger.debug(f"Executing SQL: {query.strip()} with params: {params}")
            cursor.execute(query, params)
            if own_commit:
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query.strip()}': {e}", exc_info=True)
            if own_commit:
                conn.rollback()
            raise
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return a single row."""
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Execute a query and return all matching rows."""
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()
