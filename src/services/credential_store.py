"""Local persistence for the single OpenAI API key."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from config import CREDENTIAL_KEY, DB_PATH  # module global; tests monkeypatch it
from utils.file_utils import ensure_directory_exists

LOGGER = logging.getLogger("testme.credentials")


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _connect() -> sqlite3.Connection:
    ensure_directory_exists(Path(DB_PATH).parent)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS credentials (
            key        TEXT PRIMARY KEY,
            value      TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    return conn


class CredentialStore:
    """Reads and writes one credential under a fixed key."""

    def __init__(self, key: str = CREDENTIAL_KEY) -> None:
        self._key = key

    def load(self) -> str | None:
        """Return the persisted credential, or None when nothing is stored."""
        conn = _connect()
        try:
            row = conn.execute("SELECT value FROM credentials WHERE key = ?", (self._key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        value = str(row["value"] or "")
        return value or None

    def submit(self, candidate: str | None) -> str:
        """
        Validate and persist a credential.

        Args:
            candidate: Raw text typed by the user.

        Returns:
            The stored (trimmed) credential.

        Raises:
            ValueError: If the candidate is empty or whitespace only.
        """
        value = (candidate or "").strip()
        if not value:
            raise ValueError("Please enter a valid API key")
        conn = _connect()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO credentials(key, value, updated_at) VALUES(?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                    (self._key, value, _now_iso()),
                )
        finally:
            conn.close()
        LOGGER.info("Stored credential %s", self._key)
        return value

    def clear(self) -> None:
        conn = _connect()
        try:
            with conn:
                conn.execute("DELETE FROM credentials WHERE key = ?", (self._key,))
        finally:
            conn.close()
        LOGGER.info("Cleared credential %s", self._key)
