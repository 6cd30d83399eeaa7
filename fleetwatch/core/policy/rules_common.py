from __future__ import annotations

from datetime import datetime
from typing import Callable

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, TrackedObligation

Classifier = Callable[[TrackedObligation, datetime, EngineConfig], ComplianceResult]

# Higher is more urgent; used when two independent clocks disagree.
URGENCY: dict[ComplianceState, int] = {
    ComplianceState.WAIVED: 0,
    ComplianceState.COMPLETED: 1,
    ComplianceState.PENDING: 1,
    ComplianceState.REFRESH_NEAR: 2,
    ComplianceState.NEAR_DUE: 2,
    ComplianceState.REFRESH_OVERDUE: 3,
    ComplianceState.OVERDUE: 3,
    ComplianceState.NEVER_TRAINED: 4,
}


def classify_window(
    as_of_days: int,
    near_days: int,
    overdue_state: ComplianceState,
    near_state: ComplianceState,
    ok_state: ComplianceState,
) -> ComplianceState:
    if as_of_days < 0:
        return overdue_state
    if as_of_days <= near_days:
        return near_state
    return ok_state


def most_urgent(*states: ComplianceState) -> ComplianceState:
    return max(states, key=lambda s: URGENCY[s])
