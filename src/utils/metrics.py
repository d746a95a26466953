"""Lightweight operation metrics logger backed by SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from config import DB_PATH  # module global; tests monkeypatch it
from utils.file_utils import ensure_directory_exists

LOGGER = logging.getLogger("testme.metrics")


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _connect() -> sqlite3.Connection:
    ensure_directory_exists(Path(DB_PATH).parent)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS operation_metrics (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            operation  TEXT NOT NULL,
            elapsed_s  REAL NOT NULL,
            succeeded  INTEGER NOT NULL DEFAULT 1,
            meta_json  TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL
        )
        """
    )
    return conn


def log_metric(operation: str, elapsed_s: float, succeeded: bool = True, **meta: Any) -> None:
    """Persist a single operation metric row.

    Never raises; metric failures must not interrupt the quiz flow.

    Args:
        operation: "generate" or "grade".
        elapsed_s: Wall-clock seconds the operation took.
        succeeded: Whether the remote batch completed.
        **meta: Arbitrary key-value pairs stored as JSON (e.g. questions=5).
    """
    try:
        meta_json = json.dumps(meta, ensure_ascii=False, default=str)
        conn = _connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO operation_metrics (operation, elapsed_s, succeeded, meta_json, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (operation, round(elapsed_s, 3), 1 if succeeded else 0, meta_json, _now_iso()),
                )
        finally:
            conn.close()
    except Exception:  # noqa: BLE001
        LOGGER.warning("Could not record metric %s", operation, exc_info=True)


def get_recent_metrics(limit: int = 50) -> list[dict[str, Any]]:
    """Return the most recent *limit* metric rows, newest first.

    Returns an empty list on any error.
    """
    try:
        conn = _connect()
        try:
            rows = conn.execute(
                """
                SELECT id, operation, elapsed_s, succeeded, meta_json, created_at
                FROM operation_metrics
                ORDER BY id DESC
                LIMIT ?
                """,
                (max(1, limit),),
            ).fetchall()
        finally:
            conn.close()
        out: list[dict[str, Any]] = []
        for row in rows:
            item = dict(row)
            item["succeeded"] = bool(item["succeeded"])
            try:
                item["meta"] = json.loads(item.pop("meta_json") or "{}")
            except Exception:  # noqa: BLE001
                item["meta"] = {}
            out.append(item)
        return out
    except Exception:  # noqa: BLE001
        return []


def get_metrics_summary() -> dict[str, Any]:
    """Return per-operation averages, counts and failure totals for the sidebar.

    Returns empty dict on any error.
    """
    try:
        conn = _connect()
        try:
            rows = conn.execute(
                """
                SELECT
                    operation,
                    COUNT(*)                                   AS total,
                    SUM(CASE WHEN succeeded = 0 THEN 1 ELSE 0 END) AS failed,
                    AVG(elapsed_s)                             AS avg_s,
                    MIN(elapsed_s)                             AS min_s,
                    MAX(elapsed_s)                             AS max_s,
                    MAX(created_at)                            AS last_at
                FROM operation_metrics
                GROUP BY operation
                ORDER BY total DESC
                """
            ).fetchall()
        finally:
            conn.close()
        return {
            row["operation"]: {
                "total": row["total"],
                "failed": row["failed"] or 0,
                "avg_s": round(row["avg_s"], 2),
                "min_s": round(row["min_s"], 2),
                "max_s": round(row["max_s"], 2),
                "last_at": row["last_at"],
            }
            for row in rows
        }
    except Exception:  # noqa: BLE001
        return {}
