"""SQLite repository for evaluation run metadata (eval_run)."""

from __future__ import annotations

import sqlite3
from typing import Optional


class EvalRunRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    def insert_run(
        self,
        run_id: str,
        created_at: str,
        as_of: str,
        engine_version: str,
        profile: str,
        obligation_count: int,
        emitted_count: int,
        notification_count: int,
    ) -> None:
        self._conn.execute(
            """
            INSERT INTO eval_run (
                run_id,
                created_at,
                as_of,
                engine_version,
                profile,
                obligation_count,
                emitted_count,
                notification_count
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                run_id,
                created_at,
                as_of,
                engine_version,
                profile,
                obligation_count,
                emitted_count,
                notification_count,
            ),
        )

    def latest_run(self) -> Optional[dict[str, object]]:
        row = self._conn.execute(
            """
            SELECT run_id, created_at, as_of, engine_version, profile,
                   obligation_count, emitted_count, notification_count
            FROM eval_run
            ORDER BY created_at DESC
            LIMIT 1
            """
        ).fetchone()
        if row is None:
            return None
        return dict(row)
