"""SQLite repository for the bounded notification list.

Responsibilities:
  - Load the stored list in display order and replace it atomically within the caller's transaction.
  - Mark a record read (the caller-side acknowledgment).
Must not:
  - Decide emission or retention; the engine returns the list to store.
"""

from __future__ import annotations

import sqlite3
from typing import Optional, Sequence

from fleetwatch.core.domain.enums import Severity
from fleetwatch.core.domain.models import NotificationRecord


def _row_to_record(row: sqlite3.Row) -> NotificationRecord:
    return NotificationRecord(
        id=row["id"],
        message=row["message"],
        severity=Severity(row["severity"]),
        is_read=bool(row["is_read"]),
        created_at=row["created_at"],
        link_target=row["link_target"],
        stable_key=row["stable_key"],
    )


class NotificationRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    def load_all(self, unread_only: bool = False) -> list[NotificationRecord]:
        sql = """
            SELECT id, stable_key, message, severity, is_read, created_at, link_target
            FROM notification
        """
        if unread_only:
            sql += " WHERE is_read = 0"
        sql += " ORDER BY position ASC"
        return [_row_to_record(row) for row in self._conn.execute(sql).fetchall()]

    def get(self, notification_id: str) -> Optional[NotificationRecord]:
        row = self._conn.execute(
            """
            SELECT id, stable_key, message, severity, is_read, created_at, link_target
            FROM notification
            WHERE id = ?
            """,
            (notification_id,),
        ).fetchone()
        if row is None:
            return None
        return _row_to_record(row)

    def replace_all(self, records: Sequence[NotificationRecord]) -> None:
        self._conn.execute("DELETE FROM notification")
        self._conn.executemany(
            """
            INSERT INTO notification (
                id,
                stable_key,
                message,
                severity,
                is_read,
                created_at,
                link_target,
                position
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    record.id,
                    record.stable_key,
                    record.message,
                    record.severity.value,
                    int(record.is_read),
                    record.created_at,
                    record.link_target,
                    position,
                )
                for position, record in enumerate(records)
            ],
        )

    def mark_read(self, notification_id: str, is_read: bool = True) -> bool:
        cursor = self._conn.execute(
            "UPDATE notification SET is_read = ? WHERE id = ?",
            (int(is_read), notification_id),
        )
        return cursor.rowcount > 0
