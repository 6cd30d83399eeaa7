"""Training-compliance classifier (defensive-driving certification).

Responsibilities:
  - Map (reference date, refresh rule, eligibility) to one ComplianceState.
  - Recorded training -> refresh clock; no record -> onboarding clock or never_trained.
Must not:
  - Raise on missing optional fields; trainer and scores only enrich detail.
Key definitions:
  - classify_training.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.calendar.normalizer import add_interval, days_until, parse_or_none
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, ResolvedReference, TrackedObligation
from fleetwatch.core.resolver.chains import resolve
from .rules_common import classify_window


def _detail(obligation: TrackedObligation, reference: Optional[ResolvedReference]) -> dict[str, object]:
    detail: dict[str, object] = {}
    record = reference.record if reference is not None else None
    trainer = record.trainer if record is not None and record.trainer else obligation.context.get("trainer")
    if trainer:
        detail["trainer"] = trainer
    for key in ("pre_test", "post_test"):
        value = getattr(record, key) if record is not None else None
        if value is None:
            value = obligation.measures.get(key)
        if value is not None:
            detail[key] = value
    if reference is not None:
        detail["source"] = reference.source.value
        if reference.date.is_buddhist_era:
            detail["original_year"] = reference.date.original_year
    return detail


def classify_training(
    obligation: TrackedObligation, now: datetime, config: EngineConfig
) -> ComplianceResult:
    reference = resolve(obligation)
    detail = _detail(obligation, reference)

    if reference is not None:
        refresh = obligation.recurrence or config.training_refresh
        due = add_interval(reference.date.instant, refresh)
        as_of_days = days_until(due, now)
        state = classify_window(
            as_of_days,
            config.training_near_days,
            ComplianceState.REFRESH_OVERDUE,
            ComplianceState.REFRESH_NEAR,
            ComplianceState.COMPLETED,
        )
        return ComplianceResult(
            state=state, as_of_days=as_of_days, reference=reference, due_date=due, detail=detail
        )

    onboarding = obligation.onboarding or config.training_onboarding
    hire = parse_or_none(obligation.eligibility.hire_date)

    if not obligation.eligibility.is_new_entrant:
        # Standing violation: count from the day training should have happened.
        if hire is None:
            return ComplianceResult(state=ComplianceState.NEVER_TRAINED, as_of_days=0, detail=detail)
        nominal_due = add_interval(hire.instant, onboarding)
        as_of_days = min(0, days_until(nominal_due, now))
        return ComplianceResult(
            state=ComplianceState.NEVER_TRAINED,
            as_of_days=as_of_days,
            due_date=nominal_due,
            detail=detail,
        )

    start = hire.instant if hire is not None else now
    due = add_interval(start, onboarding)
    as_of_days = days_until(due, now)
    if hire is None:
        detail["hire_date_unknown"] = True
    state = classify_window(
        as_of_days,
        config.training_near_days,
        ComplianceState.OVERDUE,
        ComplianceState.NEAR_DUE,
        ComplianceState.PENDING,
    )
    return ComplianceResult(state=state, as_of_days=as_of_days, due_date=due, detail=detail)
