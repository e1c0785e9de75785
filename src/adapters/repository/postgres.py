"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Atomicity:
----------
Every state transition is a single guarded statement, so concurrent
requests for the same account never need explicit locks:

1. **Registration**: ``INSERT ... ON CONFLICT (email) DO NOTHING``. The
   UNIQUE constraint on email decides which of two racing inserts wins.

2. **Code replacement**: ``UPDATE ... WHERE is_verified = FALSE``. Racing
   replacements are last writer wins; a verified account is never given a
   new code.

3. **Verification**: ``UPDATE ... WHERE verification_token_hash = %s AND
   is_verified = FALSE RETURNING``. Only the first request carrying the
   outstanding code gets a row back.
"""

import logging
import uuid
from datetime import date, datetime
from pathlib import Path

from psycopg_pool import ConnectionPool

from src.domain.account import Account

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    account_id, name, email, date_of_birth, password_hash, is_verified,
    verification_token_hash, verification_token_expires_at, created_at, updated_at
"""


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create_account(
        self,
        *,
        name: str,
        email: str,
        date_of_birth: date,
        password_hash: str,
        token_hash: str,
        token_expires_at: datetime,
    ) -> Account | None:
        """
        Atomically create an unverified account with an outstanding code.

        Returns:
            The created Account, or None if the email is already registered
        """
        sql = f"""
            INSERT INTO accounts (
                account_id, name, email, date_of_birth, password_hash, is_verified,
                verification_token_hash, verification_token_expires_at, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, FALSE, %s, %s, NOW(), NOW())
            ON CONFLICT (email) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    uuid.uuid4(),
                    name,
                    email,
                    date_of_birth,
                    password_hash,
                    token_hash,
                    token_expires_at,
                ),
            )
            row = cursor.fetchone()
            conn.commit()

        return self._map_row(row) if row is not None else None

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by normalized email, or None."""
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return self._map_row(row) if row is not None else None

    def get_by_id(self, account_id: str) -> Account | None:
        """Fetch an account by identifier, or None."""
        try:
            key = uuid.UUID(account_id)
        except ValueError:
            return None

        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (key,))
            row = cursor.fetchone()
        return self._map_row(row) if row is not None else None

    def replace_verification_token(
        self, account_id: str, token_hash: str, expires_at: datetime
    ) -> bool:
        """
        Overwrite the outstanding verification code of an unverified account.

        Returns:
            True if the code was stored, False if the account is missing
            or already verified
        """
        sql = """
            UPDATE accounts
            SET verification_token_hash = %s,
                verification_token_expires_at = %s,
                updated_at = NOW()
            WHERE account_id = %s AND is_verified = FALSE
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (token_hash, expires_at, uuid.UUID(account_id)))
            conn.commit()
            return cursor.rowcount == 1

    def mark_verified(self, account_id: str, token_hash: str) -> Account | None:
        """
        Flip an account to verified and clear its verification code.

        Returns:
            The updated Account, or None if the code is no longer outstanding
        """
        sql = f"""
            UPDATE accounts
            SET is_verified = TRUE,
                verification_token_hash = NULL,
                verification_token_expires_at = NULL,
                updated_at = NOW()
            WHERE account_id = %s
              AND verification_token_hash = %s
              AND is_verified = FALSE
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (uuid.UUID(account_id), token_hash))
            row = cursor.fetchone()
            conn.commit()
        return self._map_row(row) if row is not None else None

    def _map_row(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=str(row[0]),
            name=row[1],
            email=row[2],
            date_of_birth=row[3],
            password_hash=row[4],
            is_verified=row[5],
            verification_token_hash=row[6],
            verification_token_expires_at=row[7],
            created_at=row[8],
            updated_at=row[9],
        )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Apply the ``migrations/*.sql`` files at the repository root, by filename.

    The files are re-run on every startup and must be idempotent.
    """
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
