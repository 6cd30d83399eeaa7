"""At-most-one-unread-alert-per-condition emission.

Responsibilities:
  - Decide whether a candidate becomes a new NotificationRecord.
  - Suppress only while an unread record with the same stable key exists.
Must not:
  - Mutate or remove existing records; read/unread toggling belongs to the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..calendar.normalizer import ensure_utc
from ..domain.models import AlertCandidate, NotificationRecord


def has_unread(stable_key: str, current: Iterable[NotificationRecord]) -> bool:
    for record in current:
        if record.key == stable_key and not record.is_read:
            return True
    return False


def format_created_at(now: datetime) -> str:
    return ensure_utc(now).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def occurrence_id(stable_key: str, created_at: str, current: Iterable[NotificationRecord]) -> str:
    """Id for a new occurrence; a re-alert at the same instant gets a "#n" suffix."""
    taken = {record.id for record in current}
    record_id = f"{stable_key}@{created_at}"
    n = 1
    while record_id in taken:
        record_id = f"{stable_key}@{created_at}#{n}"
        n += 1
    return record_id


def emit(
    candidate: AlertCandidate, current: Iterable[NotificationRecord], now: datetime
) -> Optional[NotificationRecord]:
    key = candidate.stable_key
    records = list(current)
    if has_unread(key, records):
        return None
    created_at = format_created_at(now)
    return NotificationRecord(
        id=occurrence_id(key, created_at, records),
        message=candidate.message,
        severity=candidate.severity,
        is_read=False,
        created_at=created_at,
        link_target=candidate.link_target,
        stable_key=key,
    )


def emit_all(
    candidates: Iterable[AlertCandidate],
    current: Sequence[NotificationRecord],
    now: datetime,
) -> tuple[list[NotificationRecord], list[NotificationRecord]]:
    """Return (records with new ones in front, newly emitted records)."""
    records = list(current)
    emitted: list[NotificationRecord] = []
    for candidate in candidates:
        record = emit(candidate, records, now)
        if record is None:
            continue
        records.insert(0, record)
        emitted.append(record)
    return records, emitted
