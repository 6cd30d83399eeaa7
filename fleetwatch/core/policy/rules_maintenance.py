"""Preventive-maintenance due classifier.

Responsibilities:
  - Classify a plan by its date clock (last service + frequency) and mileage clock.
  - The more urgent of the two clocks wins.
Key definitions:
  - classify_maintenance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.calendar.normalizer import LATEST_INSTANT, add_interval, days_until
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, TrackedObligation
from fleetwatch.core.resolver.chains import resolve
from .rules_common import classify_window, most_urgent


def _km_remaining(obligation: TrackedObligation) -> Optional[float]:
    next_km = obligation.measures.get("next_service_mileage")
    current_km = obligation.measures.get("current_mileage")
    if next_km is None or current_km is None or current_km <= 0:
        return None
    return next_km - current_km


def classify_maintenance(
    obligation: TrackedObligation, now: datetime, config: EngineConfig
) -> ComplianceResult:
    reference = resolve(obligation)
    if reference is None:
        return ComplianceResult(state=ComplianceState.NEVER_TRAINED, as_of_days=0)

    # A plan without a usable frequency is due on its last service date.
    if obligation.recurrence is not None and obligation.recurrence.interval > 0:
        due = add_interval(reference.date.instant, obligation.recurrence)
    else:
        due = reference.date.instant
    as_of_days = days_until(due, now)
    state = classify_window(
        as_of_days,
        config.maintenance_near_days,
        ComplianceState.OVERDUE,
        ComplianceState.NEAR_DUE,
        ComplianceState.COMPLETED,
    )

    detail: dict[str, object] = {"source": reference.source.value}
    if due == LATEST_INSTANT:
        detail["due_date_out_of_range"] = True
    km_remaining = _km_remaining(obligation)
    if km_remaining is not None:
        detail["km_remaining"] = km_remaining
        if km_remaining < 0:
            km_state = ComplianceState.OVERDUE
        elif km_remaining <= config.maintenance_near_km:
            km_state = ComplianceState.NEAR_DUE
        else:
            km_state = ComplianceState.COMPLETED
        if km_state != state:
            detail["driven_by"] = "mileage" if most_urgent(state, km_state) == km_state else "date"
        state = most_urgent(state, km_state)

    return ComplianceResult(
        state=state, as_of_days=as_of_days, reference=reference, due_date=due, detail=detail
    )
