"""Alert candidates derived from compliance classifications.

Responsibilities:
  - Map (obligation type, state) to a condition kind and severity per domain.
  - Render a message that names the entity (item code, plate, driver name).
Must not:
  - Look at existing notifications; deduplication happens downstream.
Key definitions:
  - ALERT_RULES, LINK_TARGETS, build_candidate.
"""

from __future__ import annotations

from typing import Callable, Optional

from fleetwatch.config.engine_config import EngineConfig
from ..calendar.normalizer import display_days
from ..domain.enums import ComplianceState, ConditionKind, ObligationType, Severity
from ..domain.models import AlertCandidate, ComplianceResult, TrackedObligation
from ..engine.result import EvaluationResult

ALERT_RULES: dict[ObligationType, dict[ComplianceState, tuple[ConditionKind, Severity]]] = {
    ObligationType.STOCK_REORDER: {
        ComplianceState.OVERDUE: (ConditionKind.OUT_OF_STOCK, Severity.DANGER),
        ComplianceState.NEAR_DUE: (ConditionKind.LOW_STOCK, Severity.WARNING),
    },
    ObligationType.MAINTENANCE_DUE: {
        ComplianceState.OVERDUE: (ConditionKind.OVERDUE, Severity.DANGER),
        ComplianceState.NEAR_DUE: (ConditionKind.UPCOMING, Severity.WARNING),
        ComplianceState.NEVER_TRAINED: (ConditionKind.NEVER_PERFORMED, Severity.DANGER),
    },
    ObligationType.REPAIR_DURATION: {
        ComplianceState.OVERDUE: (ConditionKind.DELAYED, Severity.INFO),
    },
    ObligationType.TRAINING_COMPLIANCE: {
        ComplianceState.REFRESH_OVERDUE: (ConditionKind.REFRESH_OVERDUE, Severity.DANGER),
        ComplianceState.REFRESH_NEAR: (ConditionKind.REFRESH_NEAR, Severity.WARNING),
        ComplianceState.OVERDUE: (ConditionKind.ONBOARDING_OVERDUE, Severity.DANGER),
        ComplianceState.NEAR_DUE: (ConditionKind.ONBOARDING_NEAR, Severity.WARNING),
        ComplianceState.NEVER_TRAINED: (ConditionKind.NEVER_PERFORMED, Severity.DANGER),
    },
    ObligationType.DOCUMENT_EXPIRY: {
        ComplianceState.OVERDUE: (ConditionKind.EXPIRED, Severity.DANGER),
        ComplianceState.NEAR_DUE: (ConditionKind.EXPIRING, Severity.WARNING),
        ComplianceState.NEVER_TRAINED: (ConditionKind.NEVER_PERFORMED, Severity.DANGER),
    },
}

LINK_TARGETS: dict[ObligationType, str] = {
    ObligationType.STOCK_REORDER: "stock",
    ObligationType.MAINTENANCE_DUE: "preventive-maintenance",
    ObligationType.REPAIR_DURATION: "list",
    ObligationType.TRAINING_COMPLIANCE: "driver-management",
    ObligationType.DOCUMENT_EXPIRY: "warranty-insurance",
}

MessageBuilder = Callable[[TrackedObligation, ComplianceResult, ConditionKind, int], str]


def _fmt_number(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _stock_message(obligation: TrackedObligation, result: ComplianceResult, kind: ConditionKind, cap: int) -> str:
    name = obligation.context.get("name", obligation.entity_id)
    code = obligation.context.get("code", "")
    if kind == ConditionKind.OUT_OF_STOCK:
        return f"Out of stock: {name} ({code})"
    quantity = _fmt_number(result.detail.get("quantity", 0))
    unit = obligation.context.get("unit", "")
    return f"Low stock: {name} ({code}) has {quantity} {unit} left".rstrip()


def _maintenance_message(obligation: TrackedObligation, result: ComplianceResult, kind: ConditionKind, cap: int) -> str:
    plate = obligation.context.get("plate", "")
    plan = obligation.context.get("plan_name", obligation.entity_id)
    days = display_days(result.as_of_days, cap)
    km_remaining = result.detail.get("km_remaining")
    by_mileage = result.detail.get("driven_by") == "mileage" and km_remaining is not None
    if kind == ConditionKind.NEVER_PERFORMED:
        return f"PM has no service record: {plate} ({plan})"
    if kind == ConditionKind.OVERDUE:
        if by_mileage:
            return f"PM overdue: {plate} ({plan}) by {_fmt_number(abs(km_remaining))} km"
        return f"PM overdue: {plate} ({plan}) by {days} days"
    if by_mileage:
        return f"PM due soon: {plate} ({plan}) in {_fmt_number(km_remaining)} km"
    return f"PM due soon: {plate} ({plan}) in {days} days"


def _repair_message(obligation: TrackedObligation, result: ComplianceResult, kind: ConditionKind, cap: int) -> str:
    plate = obligation.context.get("plate", "")
    order_no = obligation.context.get("repair_order_no", obligation.entity_id)
    elapsed = result.detail.get("elapsed_days", 0)
    return f"Repair running long: {plate} ({order_no}) in progress for {elapsed} days"


def _training_message(obligation: TrackedObligation, result: ComplianceResult, kind: ConditionKind, cap: int) -> str:
    name = obligation.context.get("name", obligation.entity_id)
    days = display_days(result.as_of_days, cap)
    if kind == ConditionKind.REFRESH_OVERDUE:
        return f"Defensive driving refresh overdue: {name} by {days} days"
    if kind == ConditionKind.REFRESH_NEAR:
        return f"Defensive driving refresh due: {name} in {days} days"
    if kind == ConditionKind.ONBOARDING_OVERDUE:
        return f"New-hire defensive driving overdue: {name} by {days} days"
    if kind == ConditionKind.ONBOARDING_NEAR:
        return f"New-hire defensive driving due: {name} in {days} days"
    if result.as_of_days < 0:
        return f"No defensive driving record: {name} ({days} days past deadline)"
    return f"No defensive driving record: {name}"


def _document_message(obligation: TrackedObligation, result: ComplianceResult, kind: ConditionKind, cap: int) -> str:
    subject = obligation.context.get("subject", obligation.entity_id)
    label = obligation.context.get("document", "Document")
    days = display_days(result.as_of_days, cap)
    if kind == ConditionKind.NEVER_PERFORMED:
        return f"{label} expiry date unreadable: {subject}"
    if kind == ConditionKind.EXPIRED:
        return f"{label} expired: {subject} {days} days ago"
    return f"{label} expiring: {subject} in {days} days"


MESSAGE_BUILDERS: dict[ObligationType, MessageBuilder] = {
    ObligationType.STOCK_REORDER: _stock_message,
    ObligationType.MAINTENANCE_DUE: _maintenance_message,
    ObligationType.REPAIR_DURATION: _repair_message,
    ObligationType.TRAINING_COMPLIANCE: _training_message,
    ObligationType.DOCUMENT_EXPIRY: _document_message,
}


def build_candidate(evaluation: EvaluationResult, config: EngineConfig) -> Optional[AlertCandidate]:
    obligation = evaluation.obligation
    rule = ALERT_RULES[obligation.obligation_type].get(evaluation.state)
    if rule is None:
        return None
    kind, severity = rule
    message = MESSAGE_BUILDERS[obligation.obligation_type](
        obligation, evaluation.result, kind, config.display_cap
    )
    return AlertCandidate(
        obligation_type=obligation.obligation_type,
        entity_id=obligation.entity_id,
        condition=kind,
        severity=severity,
        message=message,
        link_target=obligation.context.get("link_target", LINK_TARGETS[obligation.obligation_type]),
    )
