from __future__ import annotations

from datetime import datetime

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.domain.enums import ComplianceState
from fleetwatch.core.domain.models import ComplianceResult, TrackedObligation


def classify_stock(
    obligation: TrackedObligation, now: datetime, config: EngineConfig
) -> ComplianceResult:
    # Missing counts are read as zero so an incomplete item surfaces instead of hiding.
    quantity = obligation.measures.get("quantity") or 0.0
    min_stock = obligation.measures.get("min_stock") or 0.0
    if quantity <= 0:
        state = ComplianceState.OVERDUE
    elif quantity <= min_stock:
        state = ComplianceState.NEAR_DUE
    else:
        state = ComplianceState.COMPLETED
    return ComplianceResult(
        state=state,
        as_of_days=0,
        detail={"quantity": quantity, "min_stock": min_stock},
    )
