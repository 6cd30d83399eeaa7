"""Compliance evaluation for a single tracked obligation.

Responsibilities:
  - Apply the waiver check, then dispatch to the obligation type's classifier.
  - Compare with the previous state and emit a Transition when it changed.

Inputs/Outputs:
  - Inputs: TrackedObligation, explicit "now", EngineConfig, optional previous state.
  - Outputs: EvaluationResult with exactly one ComplianceState.

Invariants:
  - Never raises for incomplete data; waived is terminal.
  - Deterministic for a given (obligation, now, config).
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from fleetwatch.config.engine_config import EngineConfig
from ..domain.enums import ComplianceState, ObligationType
from ..domain.models import ComplianceResult, TrackedObligation, Transition
from ..domain.transition_graph import is_progression
from ..policy.rules_common import Classifier
from ..policy.rules_document import classify_document
from ..policy.rules_maintenance import classify_maintenance
from ..policy.rules_repair import classify_repair
from ..policy.rules_stock import classify_stock
from ..policy.rules_training import classify_training
from .result import EvaluationResult

CLASSIFIERS: dict[ObligationType, Classifier] = {
    ObligationType.TRAINING_COMPLIANCE: classify_training,
    ObligationType.MAINTENANCE_DUE: classify_maintenance,
    ObligationType.REPAIR_DURATION: classify_repair,
    ObligationType.STOCK_REORDER: classify_stock,
    ObligationType.DOCUMENT_EXPIRY: classify_document,
}


def classify(obligation: TrackedObligation, now: datetime, config: EngineConfig) -> ComplianceResult:
    if obligation.eligibility.waived:
        return ComplianceResult(state=ComplianceState.WAIVED, as_of_days=0)
    return CLASSIFIERS[obligation.obligation_type](obligation, now, config)


def evaluate_obligation(
    obligation: TrackedObligation,
    now: datetime,
    config: EngineConfig,
    prev_state: Optional[ComplianceState] = None,
    debug: Callable[[str], None] | None = None,
) -> EvaluationResult:
    result = classify(obligation, now, config)

    transition: Transition | None = None
    if prev_state is not None and prev_state != result.state:
        transition = Transition(
            obligation_type=obligation.obligation_type,
            entity_id=obligation.entity_id,
            from_state=prev_state,
            to_state=result.state,
            is_progression=is_progression(prev_state, result.state),
        )
        if debug is not None:
            debug(
                "TRANSITION "
                f"type={obligation.obligation_type.value} entity={obligation.entity_id} "
                f"from={prev_state.value} to={result.state.value} "
                f"progression={int(transition.is_progression)} as_of_days={result.as_of_days}"
            )

    return EvaluationResult(
        obligation=obligation,
        result=result,
        prev_state=prev_state,
        transition=transition,
    )
