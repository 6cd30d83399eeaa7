"""Evaluation pass over one fleet snapshot.

Responsibilities:
  - Build tracked obligations from snapshot records (one per entity and obligation type).
  - Classify every obligation, derive alert candidates, deduplicate and bound.

Inputs/Outputs:
  - Inputs: Snapshot, current notification list, explicit "now", EngineConfig.
  - Outputs: PassResult; the input notification list is returned untouched when nothing changed.

Invariants:
  - Pure with respect to (snapshot, notifications, now, config); no module-level mutable state.
  - One malformed record degrades only its own obligation.
Key definitions:
  - build_obligations, evaluate_pass, evaluate, run_pass.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional, Sequence

from fleetwatch.config.engine_config import EngineConfig
from ..alerts.candidates import build_candidate
from ..alerts.dedup import emit_all
from ..alerts.retention import bound
from ..calendar.normalizer import ensure_utc, parse_or_none
from ..domain.enums import ComplianceState, ObligationType, SourceTag
from ..domain.models import (
    AlertCandidate,
    Eligibility,
    HistoricalRecord,
    NotificationRecord,
    RecurrenceRule,
    TrackedObligation,
)
from ..domain.snapshot import (
    CargoPolicyRecord,
    DriverRecord,
    MaintenancePlanRecord,
    PartWarrantyRecord,
    RepairRecord,
    Snapshot,
    StockRecord,
    VehicleRecord,
)
from .evaluator import evaluate_obligation
from .result import EvaluationResult, PassResult

StateKey = tuple[ObligationType, str]
DebugFn = Callable[[str], None]

_UNIT_ALIASES = {
    "day": "days",
    "days": "days",
    "week": "weeks",
    "weeks": "weeks",
    "month": "months",
    "months": "months",
    "year": "years",
    "years": "years",
}

DOCUMENT_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("insurance_expiry_date", "insurance", "Insurance"),
    ("act_expiry_date", "act", "Compulsory insurance (ACT)"),
)


def _norm_status(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _in_statuses(value: Optional[str], statuses: Iterable[str]) -> bool:
    return _norm_status(value) in {_norm_status(s) for s in statuses}


def normalize_plate(plate: Optional[str]) -> str:
    return "".join((plate or "").split())


def resolve_current_mileage(
    plate: Optional[str],
    repairs: Sequence[RepairRecord],
    vehicles: Sequence[VehicleRecord],
) -> Optional[float]:
    """Latest repair mileage for the plate, else the vehicle's own odometer."""
    key = normalize_plate(plate)
    if not key:
        return None
    with_mileage = [
        r for r in repairs
        if normalize_plate(r.license_plate) == key and r.current_mileage is not None and r.current_mileage > 0
    ]
    if with_mileage:
        latest = max(with_mileage, key=lambda r: (r.created_at or ""))
        return latest.current_mileage
    for vehicle in vehicles:
        if normalize_plate(vehicle.license_plate) == key and vehicle.current_mileage is not None:
            return vehicle.current_mileage
    return None


def recurrence_from_plan(plan: MaintenancePlanRecord) -> Optional[RecurrenceRule]:
    if plan.frequency_value is None or plan.frequency_value <= 0:
        return None
    # Unrecognised units fall back to months, the plan editor's default.
    unit = _UNIT_ALIASES.get(_norm_status(plan.frequency_unit), "months")
    return RecurrenceRule(int(plan.frequency_value), unit)  # type: ignore[arg-type]


def is_new_entrant(driver: DriverRecord, now: datetime, config: EngineConfig) -> bool:
    if driver.is_new_entrant is not None:
        return driver.is_new_entrant
    hire = parse_or_none(driver.hire_date)
    if hire is None:
        return False
    tenure_days = math.floor((ensure_utc(now) - hire.instant).total_seconds() / 86_400)
    return tenure_days <= config.training_onboarding_days


def _stock_obligation(item: StockRecord) -> TrackedObligation:
    return TrackedObligation(
        entity_id=item.id,
        obligation_type=ObligationType.STOCK_REORDER,
        eligibility=Eligibility(waived=item.is_fungible_used_item),
        measures={"quantity": item.quantity, "min_stock": item.min_stock},
        context={"name": item.name, "code": item.code, "unit": item.unit or ""},
    )


def _maintenance_obligation(plan: MaintenancePlanRecord, snapshot: Snapshot) -> TrackedObligation:
    history = tuple(
        HistoricalRecord(topic_code=None, topic_label=None, actual_date=s.service_date)
        for s in snapshot.service_history
        if s.plan_id == plan.id
    )
    next_service_mileage: Optional[float] = None
    if plan.last_service_mileage is not None and plan.mileage_frequency:
        next_service_mileage = plan.last_service_mileage + plan.mileage_frequency
    return TrackedObligation(
        entity_id=plan.id,
        obligation_type=ObligationType.MAINTENANCE_DUE,
        recurrence=recurrence_from_plan(plan),
        date_fields={SourceTag.LAST_SERVICE: plan.last_service_date},
        history=history,
        measures={
            "next_service_mileage": next_service_mileage,
            "current_mileage": resolve_current_mileage(
                plan.vehicle_license_plate, snapshot.repairs, snapshot.vehicles
            ),
        },
        context={"plate": plan.vehicle_license_plate, "plan_name": plan.plan_name},
    )


def _repair_obligation(repair: RepairRecord, config: EngineConfig) -> TrackedObligation:
    return TrackedObligation(
        entity_id=repair.id,
        obligation_type=ObligationType.REPAIR_DURATION,
        eligibility=Eligibility(
            waived=not _in_statuses(repair.status, config.repair_in_progress_statuses)
        ),
        date_fields={
            SourceTag.REPAIR_START: repair.repair_start_date,
            SourceTag.REPAIR_APPROVAL: repair.approval_date,
            SourceTag.REPAIR_CREATED: repair.created_at,
        },
        context={"plate": repair.license_plate, "repair_order_no": repair.repair_order_no},
    )


def _training_obligation(
    driver: DriverRecord, snapshot: Snapshot, now: datetime, config: EngineConfig
) -> TrackedObligation:
    history = tuple(
        HistoricalRecord(
            topic_code=r.topic_code,
            topic_label=r.topic_label,
            actual_date=r.actual_date,
            status=r.status,
            trainer=r.trainer,
            pre_test=r.pre_test,
            post_test=r.post_test,
        )
        for r in snapshot.training_records
        if r.driver_id == driver.id
    )
    context = {"name": driver.name}
    if driver.trainer:
        context["trainer"] = driver.trainer
    return TrackedObligation(
        entity_id=driver.id,
        obligation_type=ObligationType.TRAINING_COMPLIANCE,
        eligibility=Eligibility(
            waived=_in_statuses(driver.status, config.driver_waived_statuses),
            is_new_entrant=is_new_entrant(driver, now, config),
            hire_date=driver.hire_date,
        ),
        recurrence=config.training_refresh,
        onboarding=config.training_onboarding,
        date_fields={
            SourceTag.TRAINING_DATE: driver.training_date,
            SourceTag.TRAINING_END: driver.training_end_date,
            SourceTag.TRAINING_START: driver.training_start_date,
        },
        history=history,
        topic=config.training_topic,
        measures={"pre_test": driver.pre_test, "post_test": driver.post_test},
        context=context,
    )


def _document_obligation(
    entity_id: str,
    raw: Optional[str],
    label: str,
    subject: str,
    waived: bool,
    link_target: Optional[str] = None,
) -> Optional[TrackedObligation]:
    # No expiry on file means nothing to track.
    if not (raw or "").strip():
        return None
    context = {"document": label, "subject": subject}
    if link_target is not None:
        context["link_target"] = link_target
    return TrackedObligation(
        entity_id=entity_id,
        obligation_type=ObligationType.DOCUMENT_EXPIRY,
        eligibility=Eligibility(waived=waived),
        date_fields={SourceTag.EXPIRY: raw},
        context=context,
    )


def _inactive(status: Optional[str], active_statuses: Iterable[str]) -> bool:
    # A record without a status is treated as active.
    return status is not None and not _in_statuses(status, active_statuses)


def _vehicle_documents(vehicle: VehicleRecord, config: EngineConfig) -> list[Optional[TrackedObligation]]:
    inactive = _inactive(vehicle.status, config.vehicle_active_statuses)
    return [
        _document_obligation(
            f"{vehicle.id}:{suffix}", getattr(vehicle, field_name), label, vehicle.license_plate, inactive
        )
        for field_name, suffix, label in DOCUMENT_FIELDS
    ]


def _warranty_document(warranty: PartWarrantyRecord) -> Optional[TrackedObligation]:
    subject = warranty.part_name
    if warranty.vehicle_license_plate:
        subject = f"{subject} ({warranty.vehicle_license_plate})"
    return _document_obligation(
        f"{warranty.id}:warranty",
        warranty.warranty_expiry,
        "Part warranty",
        subject,
        waived=warranty.is_active is not True,
    )


def _cargo_document(policy: CargoPolicyRecord, config: EngineConfig) -> Optional[TrackedObligation]:
    return _document_obligation(
        f"{policy.id}:cargo",
        policy.expiry_date,
        "Cargo insurance",
        f"policy {policy.policy_number}",
        waived=_inactive(policy.status, config.cargo_active_statuses),
    )


def _licence_document(driver: DriverRecord, config: EngineConfig) -> Optional[TrackedObligation]:
    return _document_obligation(
        f"{driver.id}:licence",
        driver.license_expiry,
        "Driving licence",
        driver.name,
        waived=_in_statuses(driver.status, config.driver_waived_statuses),
        link_target="driver-management",
    )


def _document_obligations(snapshot: Snapshot, config: EngineConfig) -> list[TrackedObligation]:
    candidates: list[Optional[TrackedObligation]] = []
    for vehicle in snapshot.vehicles:
        candidates.extend(_vehicle_documents(vehicle, config))
    candidates.extend(_warranty_document(w) for w in snapshot.part_warranties)
    candidates.extend(_cargo_document(p, config) for p in snapshot.cargo_policies)
    candidates.extend(_licence_document(d, config) for d in snapshot.drivers)
    return [o for o in candidates if o is not None]


def build_obligations(snapshot: Snapshot, now: datetime, config: EngineConfig) -> list[TrackedObligation]:
    obligations: list[TrackedObligation] = []
    obligations.extend(_stock_obligation(item) for item in snapshot.stock)
    obligations.extend(_maintenance_obligation(plan, snapshot) for plan in snapshot.maintenance_plans)
    obligations.extend(_repair_obligation(repair, config) for repair in snapshot.repairs)
    obligations.extend(
        _training_obligation(driver, snapshot, now, config) for driver in snapshot.drivers
    )
    obligations.extend(_document_obligations(snapshot, config))
    return obligations


def evaluate_pass(
    snapshot: Snapshot,
    now: datetime,
    config: EngineConfig,
    prev_states: Optional[Mapping[StateKey, ComplianceState]] = None,
    debug: Optional[DebugFn] = None,
) -> list[EvaluationResult]:
    now = ensure_utc(now)
    prev_states = prev_states or {}
    evaluations: list[EvaluationResult] = []
    for obligation in build_obligations(snapshot, now, config):
        prev = prev_states.get((obligation.obligation_type, obligation.entity_id))
        evaluations.append(evaluate_obligation(obligation, now, config, prev_state=prev, debug=debug))
    return evaluations


def candidates_for(evaluations: Iterable[EvaluationResult], config: EngineConfig) -> list[AlertCandidate]:
    candidates: list[AlertCandidate] = []
    for evaluation in evaluations:
        candidate = build_candidate(evaluation, config)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def evaluate(snapshot: Snapshot, now: datetime, config: EngineConfig) -> list[AlertCandidate]:
    return candidates_for(evaluate_pass(snapshot, now, config), config)


def run_pass(
    snapshot: Snapshot,
    notifications: list[NotificationRecord],
    now: datetime,
    config: EngineConfig,
    prev_states: Optional[Mapping[StateKey, ComplianceState]] = None,
    debug: Optional[DebugFn] = None,
) -> PassResult:
    now = ensure_utc(now)
    evaluations = evaluate_pass(snapshot, now, config, prev_states=prev_states, debug=debug)
    candidates = candidates_for(evaluations, config)
    merged, emitted = emit_all(candidates, notifications, now)
    if debug is not None:
        for record in emitted:
            debug(f"EMIT key={record.key} severity={record.severity.value}")
    bounded = bound(merged, config.retention_max)
    if debug is not None and len(bounded) != len(merged):
        debug(f"RETENTION dropped={len(merged) - len(bounded)} kept={len(bounded)}")

    changed = bool(emitted) or len(bounded) != len(notifications)
    return PassResult(
        notifications=bounded if changed else notifications,
        emitted=emitted,
        candidates=candidates,
        evaluations=evaluations,
        changed=changed,
    )
