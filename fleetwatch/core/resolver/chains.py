"""Reference-date chains per obligation type.

Responsibilities:
  - Walk a fixed, ordered list of date sources and return the first parseable date.
  - Return None when no source yields a date; that outcome drives its own state.
Must not:
  - Average, merge or otherwise combine sources.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from fleetwatch.core.calendar.normalizer import parse_or_none
from fleetwatch.core.domain.enums import ObligationType, SourceTag
from fleetwatch.core.domain.models import ResolvedReference, TrackedObligation
from .matching import latest_parseable, match_history

DateSource = Callable[[TrackedObligation], Optional[ResolvedReference]]


def explicit_field(tag: SourceTag) -> DateSource:
    def _source(obligation: TrackedObligation) -> Optional[ResolvedReference]:
        raw = obligation.date_fields.get(tag)
        if raw is None:
            return None
        parsed = parse_or_none(raw)
        if parsed is None:
            return None
        return ResolvedReference(date=parsed, source=tag, raw=parsed.raw)

    return _source


def topic_history(obligation: TrackedObligation) -> Optional[ResolvedReference]:
    if obligation.topic is None or not obligation.history:
        return None
    return match_history(obligation.topic, obligation.history)


def service_history(obligation: TrackedObligation) -> Optional[ResolvedReference]:
    if not obligation.history:
        return None
    return latest_parseable(obligation.history, SourceTag.SERVICE_HISTORY)


REFERENCE_CHAINS: Dict[ObligationType, List[DateSource]] = {
    ObligationType.TRAINING_COMPLIANCE: [
        explicit_field(SourceTag.TRAINING_DATE),
        explicit_field(SourceTag.TRAINING_END),
        explicit_field(SourceTag.TRAINING_START),
        topic_history,
    ],
    ObligationType.MAINTENANCE_DUE: [
        explicit_field(SourceTag.LAST_SERVICE),
        service_history,
    ],
    ObligationType.REPAIR_DURATION: [
        explicit_field(SourceTag.REPAIR_START),
        explicit_field(SourceTag.REPAIR_APPROVAL),
        explicit_field(SourceTag.REPAIR_CREATED),
    ],
    ObligationType.DOCUMENT_EXPIRY: [
        explicit_field(SourceTag.EXPIRY),
    ],
    ObligationType.STOCK_REORDER: [],
}


def first_match(
    sources: Iterable[DateSource], obligation: TrackedObligation
) -> Optional[ResolvedReference]:
    for source in sources:
        resolved = source(obligation)
        if resolved is not None:
            return resolved
    return None


def resolve(obligation: TrackedObligation) -> Optional[ResolvedReference]:
    return first_match(REFERENCE_CHAINS.get(obligation.obligation_type, []), obligation)
