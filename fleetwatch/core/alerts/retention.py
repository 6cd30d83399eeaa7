"""Retention bound for the stored notification set.

Responsibilities:
  - Keep the max_size most recent records by created_at.
  - Preserve the relative order of surviving records.

Invariants:
  - Ties on created_at keep the earlier list position (new records sit in front).
  - Records whose created_at cannot be parsed are treated as oldest.
  - Read state never affects survival.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from ..calendar.normalizer import parse_or_none
from ..domain.models import NotificationRecord

DEFAULT_MAX_SIZE = 50

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_instant(record: NotificationRecord) -> datetime:
    parsed = parse_or_none(record.created_at)
    if parsed is None:
        return _OLDEST
    return parsed.instant


def bound(records: Sequence[NotificationRecord], max_size: int = DEFAULT_MAX_SIZE) -> list[NotificationRecord]:
    if max_size < 0:
        raise ValueError("max_size must be >= 0")
    if len(records) <= max_size:
        return list(records)
    ranked = sorted(
        range(len(records)),
        key=lambda i: (_created_instant(records[i]), -i),
        reverse=True,
    )
    keep = set(ranked[:max_size])
    return [record for i, record in enumerate(records) if i in keep]
