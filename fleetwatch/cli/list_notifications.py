"""List stored notifications, or acknowledge one.

Purpose:
  - Show the bounded notification list in display order.
  - Mark a notification read so its condition may alert again.
Example:
  - PYTHONPATH=. python3 fleetwatch/cli/list_notifications.py --db fleetwatch.db --unread
  - PYTHONPATH=. python3 fleetwatch/cli/list_notifications.py --db fleetwatch.db --ack <id>
"""

from __future__ import annotations

import argparse
from typing import Optional

from fleetwatch.app_api.factories import build_fleetwatch_app
from fleetwatch.infra.sqlite.db import get_connection, get_readonly_connection
from fleetwatch.infra.sqlite.repos.notification_repo import NotificationRepo


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List or acknowledge fleetwatch notifications")
    parser.add_argument("--db", required=True, help="SQLite database path")
    parser.add_argument("--unread", action="store_true", help="Only unread notifications")
    parser.add_argument("--ack", metavar="ID", help="Mark the notification with this id as read")
    return parser.parse_args(argv)


def acknowledge(db_path: str, notification_id: str) -> bool:
    conn = get_connection(db_path)
    try:
        return build_fleetwatch_app(conn).acknowledge(notification_id)
    finally:
        conn.close()


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    if args.ack:
        found = acknowledge(args.db, args.ack)
        print(f"ACK {args.ack} {'OK' if found else 'NOT_FOUND'}")
        if not found:
            raise SystemExit(1)
        return

    try:
        conn = get_readonly_connection(args.db)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    try:
        records = NotificationRepo(conn).load_all(unread_only=args.unread)
    finally:
        conn.close()

    for record in records:
        marker = " " if record.is_read else "*"
        print(f"{marker} {record.created_at} {record.severity.value:<7} {record.id} {record.message}")
    print(f"COUNT={len(records)}")
    print(f"UNREAD={sum(1 for r in records if not r.is_read)}")


if __name__ == "__main__":
    main()
