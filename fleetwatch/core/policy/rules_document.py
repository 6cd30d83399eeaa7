"""Expiry classifier for insurance, compulsory motor insurance, part warranties, cargo policies and licences.

Responsibilities:
  - Classify an expiry date against the configured near window.
  - An expiry value that exists but cannot be parsed is never_trained (unknown coverage).
"""

from __future__ import annotations

from datetime import datetime

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.calendar.normalizer import days_until
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, TrackedObligation
from fleetwatch.core.resolver.chains import resolve
from .rules_common import classify_window


def classify_document(
    obligation: TrackedObligation, now: datetime, config: EngineConfig
) -> ComplianceResult:
    reference = resolve(obligation)
    if reference is None:
        return ComplianceResult(state=ComplianceState.NEVER_TRAINED, as_of_days=0)

    expiry = reference.date.instant
    as_of_days = days_until(expiry, now)
    state = classify_window(
        as_of_days,
        config.document_near_days,
        ComplianceState.OVERDUE,
        ComplianceState.NEAR_DUE,
        ComplianceState.COMPLETED,
    )
    return ComplianceResult(state=state, as_of_days=as_of_days, reference=reference, due_date=expiry)
