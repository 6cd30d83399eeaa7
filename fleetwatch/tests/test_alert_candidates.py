"""Tests for alert candidate construction."""

from __future__ import annotations

from datetime import datetime, timezone

from fleetwatch.config.engine_config import load_engine_config
from fleetwatch.core.alerts.candidates import build_candidate
from fleetwatch.core.domain.enums import ComplianceState, ConditionKind, ObligationType, Severity
from fleetwatch.core.domain.models import ComplianceResult, TrackedObligation
from fleetwatch.core.engine.result import EvaluationResult

CONFIG = load_engine_config("default")


def mk_evaluation(
    obligation_type: ObligationType,
    state: ComplianceState,
    as_of_days: int = 0,
    context: dict | None = None,
    detail: dict | None = None,
    entity_id: str = "e1",
) -> EvaluationResult:
    obligation = TrackedObligation(
        entity_id=entity_id,
        obligation_type=obligation_type,
        context=context or {},
    )
    result = ComplianceResult(state=state, as_of_days=as_of_days, detail=detail or {})
    return EvaluationResult(obligation=obligation, result=result, prev_state=None, transition=None)


def test_out_of_stock_is_danger_and_names_item_code() -> None:
    evaluation = mk_evaluation(
        ObligationType.STOCK_REORDER,
        ComplianceState.OVERDUE,
        context={"code": "OIL-15W40", "name": "Engine oil"},
        entity_id="s1",
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.severity == Severity.DANGER
    assert candidate.condition == ConditionKind.OUT_OF_STOCK
    assert "OIL-15W40" in candidate.message
    assert candidate.stable_key == "AUTO-STOCK-s1-out"
    assert candidate.link_target == "stock"


def test_low_stock_reports_quantity() -> None:
    evaluation = mk_evaluation(
        ObligationType.STOCK_REORDER,
        ComplianceState.NEAR_DUE,
        context={"code": "FLT-01", "name": "Fuel filter", "unit": "pcs"},
        detail={"quantity": 2.0, "min_stock": 5.0},
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.severity == Severity.WARNING
    assert "has 2 pcs left" in candidate.message


def test_repair_delay_is_info() -> None:
    evaluation = mk_evaluation(
        ObligationType.REPAIR_DURATION,
        ComplianceState.OVERDUE,
        as_of_days=-3,
        context={"plate": "70-1234", "repair_order_no": "RO-0042"},
        detail={"elapsed_days": 5},
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.severity == Severity.INFO
    assert "RO-0042" in candidate.message
    assert candidate.link_target == "list"


def test_training_overdue_message_caps_days() -> None:
    evaluation = mk_evaluation(
        ObligationType.TRAINING_COMPLIANCE,
        ComplianceState.REFRESH_OVERDUE,
        as_of_days=-1500,
        context={"name": "Somchai"},
        entity_id="d1",
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.severity == Severity.DANGER
    assert "999+" in candidate.message
    assert candidate.stable_key == "AUTO-TRAINING-d1-refresh-overdue"


def test_maintenance_mileage_message_uses_km() -> None:
    evaluation = mk_evaluation(
        ObligationType.MAINTENANCE_DUE,
        ComplianceState.NEAR_DUE,
        as_of_days=40,
        context={"plate": "70-1234", "plan_name": "Oil change"},
        detail={"km_remaining": 800.0, "driven_by": "mileage"},
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.condition == ConditionKind.UPCOMING
    assert "800 km" in candidate.message


def test_non_alerting_states_yield_no_candidate() -> None:
    for obligation_type in ObligationType:
        for state in (ComplianceState.COMPLETED, ComplianceState.PENDING, ComplianceState.WAIVED):
            assert build_candidate(mk_evaluation(obligation_type, state), CONFIG) is None


def test_document_expired_names_plate_and_document() -> None:
    evaluation = mk_evaluation(
        ObligationType.DOCUMENT_EXPIRY,
        ComplianceState.OVERDUE,
        as_of_days=-4,
        context={"subject": "70-1234", "document": "Insurance"},
        entity_id="v1:insurance",
    )

    candidate = build_candidate(evaluation, CONFIG)

    assert candidate is not None
    assert candidate.message == "Insurance expired: 70-1234 4 days ago"
    assert candidate.stable_key == "AUTO-DOC-v1:insurance-expired"
