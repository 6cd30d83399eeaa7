from __future__ import annotations

from datetime import datetime, timedelta

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.calendar.normalizer import add_interval, days_until, ensure_utc
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, RecurrenceRule, TrackedObligation
from fleetwatch.core.resolver.chains import resolve


def classify_repair(
    obligation: TrackedObligation, now: datetime, config: EngineConfig
) -> ComplianceResult:
    reference = resolve(obligation)
    if reference is None:
        return ComplianceResult(state=ComplianceState.PENDING, as_of_days=0)

    start = reference.date.instant
    due = add_interval(start, RecurrenceRule(config.repair_delay_days, "days"))
    elapsed = ensure_utc(now) - start
    # Fractional elapsed time decides the state; as_of_days is the rounded display value.
    overdue = elapsed > timedelta(days=config.repair_delay_days)
    return ComplianceResult(
        state=ComplianceState.OVERDUE if overdue else ComplianceState.PENDING,
        as_of_days=days_until(due, now),
        reference=reference,
        due_date=due,
        detail={
            "elapsed_days": max(0, -days_until(start, now)),
            "source": reference.source.value,
        },
    )
