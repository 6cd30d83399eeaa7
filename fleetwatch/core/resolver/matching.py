"""Ordered topic-match strategies for locating historical records.

Responsibilities:
  - Match history records to a topic by exact code, known alias, then label substring.
  - Pick the most recent record (lexicographic-max date string) within a strategy.
Must not:
  - Merge records across strategies; the first strategy with a usable date wins.
Key definitions:
  - MATCH_STRATEGIES, match_history.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from fleetwatch.core.calendar.normalizer import parse_or_none
from fleetwatch.core.domain.enums import SourceTag
from fleetwatch.core.domain.models import HistoricalRecord, ResolvedReference, TopicQuery

Matcher = Callable[[TopicQuery, HistoricalRecord], bool]

EXCLUDED_STATUSES = {"cancelled", "canceled"}


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def match_exact_code(query: TopicQuery, record: HistoricalRecord) -> bool:
    return bool(record.topic_code) and record.topic_code.strip() == query.code


def match_alias(query: TopicQuery, record: HistoricalRecord) -> bool:
    code = _norm(record.topic_code)
    if not code:
        return False
    aliases = {_norm(a) for a in query.aliases}
    aliases.add(_norm(query.code))
    return code in aliases


def match_label_substring(query: TopicQuery, record: HistoricalRecord) -> bool:
    label = _norm(record.topic_label)
    if not label:
        return False
    for keyword in query.label_keywords:
        needle = _norm(keyword)
        if needle and needle in label:
            return True
    return False


MATCH_STRATEGIES: list[tuple[SourceTag, Matcher]] = [
    (SourceTag.HISTORY_CODE, match_exact_code),
    (SourceTag.HISTORY_ALIAS, match_alias),
    (SourceTag.HISTORY_LABEL, match_label_substring),
]


def is_completed(record: HistoricalRecord) -> bool:
    if not (record.actual_date or "").strip():
        return False
    return _norm(record.status) not in EXCLUDED_STATUSES


def latest_parseable(
    records: Iterable[HistoricalRecord], source: SourceTag
) -> Optional[ResolvedReference]:
    ordered = sorted(records, key=lambda r: (r.actual_date or "").strip(), reverse=True)
    for record in ordered:
        raw = (record.actual_date or "").strip()
        parsed = parse_or_none(raw)
        if parsed is not None:
            return ResolvedReference(date=parsed, source=source, raw=raw, record=record)
    return None


def match_history(
    query: TopicQuery,
    history: Iterable[HistoricalRecord],
    strategies: Optional[list[tuple[SourceTag, Matcher]]] = None,
) -> Optional[ResolvedReference]:
    completed = [r for r in history if is_completed(r)]
    for source, matcher in strategies or MATCH_STRATEGIES:
        hits = [r for r in completed if matcher(query, r)]
        if not hits:
            continue
        resolved = latest_parseable(hits, source)
        if resolved is not None:
            return resolved
    return None
