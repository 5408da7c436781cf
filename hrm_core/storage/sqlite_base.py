# hrm_core/storage/sqlite_base.py
import asyncio
import sqlite3
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import AsyncIterator, Optional

from ..settings import settings

logger = logging.getLogger(__name__)

# Global connection instance to ensure single connection per application lifecycle
_db_connection: Optional[sqlite3.Connection] = None

# Serialises units of work on the shared connection
_transaction_lock: Optional[asyncio.Lock] = None

# True while the current task is inside sqlite_transaction(); stores skip their own commits
_in_transaction: ContextVar[bool] = ContextVar("hrm_sqlite_in_transaction", default=False)


async def get_sqlite_db_connection() -> sqlite3.Connection:
    """
    Get or create a SQLite database connection with proper initialization.

    Uses a singleton pattern to maintain a single connection throughout
    the application lifecycle. Ensures the database directory exists
    and initializes the schema on first connection.

    Returns:
        sqlite3.Connection: The database connection instance

    Raises:
        sqlite3.Error: If database connection fails
    """
    global _db_connection
    if _db_connection is None:
        try:
            db_path = Path(settings.sqlite_db_path).resolve()
            db_path.parent.mkdir(parents=True, exist_ok=True)

            logger.info(f"Attempting to connect to SQLite DB at: {db_path}")

            # Enable thread-safe access for async/FastAPI compatibility
            _db_connection = sqlite3.connect(str(db_path), check_same_thread=False)
            _db_connection.row_factory = sqlite3.Row
            _db_connection.execute("PRAGMA foreign_keys = ON")

            logger.info(f"Successfully connected to SQLite DB: {db_path}")

            await init_sqlite_db(_db_connection)
        except sqlite3.Error as e:
            logger.error(
                f"Error connecting to SQLite database at {settings.sqlite_db_path}: {e}",
                exc_info=True
            )
            _db_connection = None
            raise
    return _db_connection


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """
    Initialize the SQLite database schema by creating all required tables.

    Creates the credential store, the tenant registry and the linked
    employee profile table. Uses IF NOT EXISTS to safely handle repeated
    initialization calls.

    Args:
        conn: Optional database connection. If None, uses the global connection.
    """
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    # Tenant registry
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS tenants (
        tenant_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        company TEXT NOT NULL,
        email TEXT NOT NULL,
        phone TEXT,
        address TEXT,
        industry TEXT,
        plan TEXT NOT NULL DEFAULT 'Basic',
        status TEXT NOT NULL DEFAULT 'Active',
        admin_account_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'tenants' table exists.")

    # Credential store. tenant_id is NULL for superadmins and pending registrations.
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS accounts (
        account_id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        name TEXT NOT NULL,
        role TEXT NOT NULL,
        tenant_id TEXT,
        is_approved INTEGER NOT NULL DEFAULT 0,
        is_active INTEGER NOT NULL DEFAULT 1,
        company TEXT,
        phone TEXT,
        address TEXT,
        industry TEXT,
        last_login TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    ''')
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_accounts_tenant_id ON accounts (tenant_id)")
    logger.info("Ensured 'accounts' table exists.")

    # Operational employee record linked to an account
    cursor.execute('''
    CREATE TABLE IF NOT EXISTS employee_profiles (
        profile_id TEXT PRIMARY KEY,
        account_id TEXT NOT NULL UNIQUE,
        tenant_id TEXT NOT NULL,
        name TEXT NOT NULL,
        department TEXT,
        position TEXT,
        status TEXT NOT NULL DEFAULT 'Active',
        join_date TEXT
    )
    ''')
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_employee_profiles_tenant_id ON employee_profiles (tenant_id)")
    logger.info("Ensured 'employee_profiles' table exists.")

    db_conn.commit()
    logger.info("SQLite database schema initialized/verified.")


def in_sqlite_transaction() -> bool:
    """Whether the calling task is inside an open unit of work."""
    return _in_transaction.get()


@asynccontextmanager
async def sqlite_transaction() -> AsyncIterator[sqlite3.Connection]:
    """
    Run a group of store writes as one atomic unit.

    Store writes issued inside the block do not commit on their own; the
    block commits once on success and rolls back on any exception,
    cancellation included. Nested use joins the outer unit.
    """
    global _transaction_lock
    conn = await get_sqlite_db_connection()

    if _in_transaction.get():
        yield conn
        return

    if _transaction_lock is None:
        _transaction_lock = asyncio.Lock()

    async with _transaction_lock:
        token = _in_transaction.set(True)
        try:
            yield conn
            conn.commit()
        except BaseException:
            logger.warning("Rolling back SQLite transaction.")
            conn.rollback()
            raise
        finally:
            _in_transaction.reset(token)


async def close_sqlite_db_connection():
    """
    Properly close the global SQLite database connection.

    Should be called during application shutdown to ensure
    proper cleanup of database resources.
    """
    global _db_connection, _transaction_lock
    if _db_connection is not None:
        logger.info("Closing SQLite DB connection.")
        _db_connection.close()
        _db_connection = None
        _transaction_lock = None
        logger.info("SQLite DB connection closed.")
