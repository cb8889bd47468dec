"""Summary: SQLite storage implementation for InboxHub.

Importance: Provides a local-first integration store the inbox aggregator reads credentials from.
Alternatives: Use a document store or an ORM-backed database.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from inboxhub.models import IntegrationCredential, Provider, User


class IntegrationStoreError(RuntimeError):
    """Summary: Raised when the integration store cannot be read or written.

    Importance: Lets callers tell a fatal storage outage apart from provider failures.
    Alternatives: Let sqlite3 errors escape unwrapped.
    """


@dataclass(frozen=True)
class StoredUser:
    """Summary: User record with database identifier.

    Importance: Integrations are keyed by this identifier.
    Alternatives: Key integrations by email address.
    """

    id: int
    display_name: str
    email: str


@dataclass(frozen=True)
class StoredIntegration:
    """Summary: Integration record without secrets.

    Importance: Lets API and CLI views list connections without exposing tokens.
    Alternatives: Return full credentials and redact at the edge.
    """

    provider: Provider
    expires_at: str | None
    has_refresh_token: bool
    created_at: str
    updated_at: str


class SqliteStore:
    """Summary: SQLite-backed storage for users and integration credentials.

    Importance: Enables local-first persistence with minimal dependencies.
    Alternatives: Use Postgres and SQLAlchemy from day one.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)

    def initialize(self) -> None:
        """Summary: Create tables if they do not exist.

        Importance: Ensures the database is ready before the first inbox request.
        Alternatives: Run migrations using a dedicated migration tool.
        """

        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    display_name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS integrations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    provider TEXT NOT NULL,
                    access_token TEXT NOT NULL,
                    refresh_token TEXT,
                    expires_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(user_id, provider)
                )
                """
            )
            connection.commit()

    def ensure_user(self, user: User) -> int:
        """Summary: Ensure a user exists and return their ID.

        Importance: Provides a stable owner for integrations.
        Alternatives: Accept opaque user IDs from an identity provider.
        """

        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                "INSERT OR IGNORE INTO users (display_name, email) VALUES (?, ?)",
                (user.display_name, user.email),
            )
            cursor.execute("SELECT id FROM users WHERE email = ?", (user.email,))
            row = cursor.fetchone()
            connection.commit()
        return int(row[0])

    def get_user(self, user_id: int) -> StoredUser | None:
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                "SELECT id, display_name, email FROM users WHERE id = ?",
                (user_id,),
            )
            row = cursor.fetchone()
        if not row:
            return None
        return StoredUser(id=row[0], display_name=row[1], email=row[2])

    def upsert_integration(self, credential: IntegrationCredential) -> None:
        """Summary: Store credentials for a provider, replacing any existing pair.

        Importance: Keeps at most one credential per user and provider.
        Alternatives: Append rows and read the newest one.
        """

        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                """
                INSERT INTO integrations (
                    user_id, provider, access_token, refresh_token, expires_at,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, provider) DO UPDATE SET
                    access_token = excluded.access_token,
                    refresh_token = excluded.refresh_token,
                    expires_at = excluded.expires_at,
                    updated_at = excluded.updated_at
                """,
                (
                    credential.user_id,
                    credential.provider.value,
                    credential.access_token,
                    credential.refresh_token,
                    credential.expires_at,
                    now,
                    now,
                ),
            )
            connection.commit()

    def delete_integration(self, user_id: int, provider: Provider) -> bool:
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                "DELETE FROM integrations WHERE user_id = ? AND provider = ?",
                (user_id, provider.value),
            )
            connection.commit()
            return cursor.rowcount > 0

    def find_all_for_user(self, user_id: int) -> list[IntegrationCredential]:
        """Summary: Load every connected credential for a user.

        Importance: The aggregator's single read to decide which providers to query.
        Alternatives: Query each provider's credential separately.
        """

        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                """
                SELECT provider, access_token, refresh_token, expires_at
                FROM integrations
                WHERE user_id = ?
                ORDER BY id
                """,
                (user_id,),
            )
            rows = cursor.fetchall()
        return [
            IntegrationCredential(
                user_id=user_id,
                provider=Provider(row[0]),
                access_token=row[1],
                refresh_token=row[2],
                expires_at=row[3],
            )
            for row in rows
        ]

    def list_integrations(self, user_id: int) -> list[StoredIntegration]:
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                """
                SELECT provider, expires_at, refresh_token IS NOT NULL, created_at, updated_at
                FROM integrations
                WHERE user_id = ?
                ORDER BY provider
                """,
                (user_id,),
            )
            rows = cursor.fetchall()
        return [
            StoredIntegration(
                provider=Provider(row[0]),
                expires_at=row[1],
                has_refresh_token=bool(row[2]),
                created_at=row[3],
                updated_at=row[4],
            )
            for row in rows
        ]

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Summary: Context manager for SQLite connections.

        Importance: Closes connections cleanly and wraps driver errors in IntegrationStoreError.
        Alternatives: Keep a single long-lived connection.
        """

        try:
            connection = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise IntegrationStoreError(f"Cannot open integration store: {exc}") from exc
        try:
            yield connection
        except sqlite3.Error as exc:
            raise IntegrationStoreError(f"Integration store query failed: {exc}") from exc
        finally:
            connection.close()