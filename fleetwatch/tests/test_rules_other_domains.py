"""Tests for maintenance, repair, stock and document classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fleetwatch.config.engine_config import load_engine_config
from fleetwatch.core.domain.enums import ComplianceState, ObligationType, SourceTag
from fleetwatch.core.domain.models import HistoricalRecord, RecurrenceRule, TrackedObligation
from fleetwatch.core.policy.rules_document import classify_document
from fleetwatch.core.policy.rules_maintenance import classify_maintenance
from fleetwatch.core.policy.rules_repair import classify_repair
from fleetwatch.core.policy.rules_stock import classify_stock

NOW = datetime(2025, 1, 10, tzinfo=timezone.utc)
CONFIG = load_engine_config("default")


def _day(offset_days: int) -> str:
    return (NOW + timedelta(days=offset_days)).date().isoformat()


def mk_plan(
    last_service: str | None,
    recurrence: RecurrenceRule | None = RecurrenceRule(3, "months"),
    next_km: float | None = None,
    current_km: float | None = None,
    history: tuple = (),
) -> TrackedObligation:
    return TrackedObligation(
        entity_id="p1",
        obligation_type=ObligationType.MAINTENANCE_DUE,
        recurrence=recurrence,
        date_fields={SourceTag.LAST_SERVICE: last_service},
        history=history,
        measures={"next_service_mileage": next_km, "current_mileage": current_km},
    )


def mk_repair(start: str | None = None, approval: str | None = None, created: str | None = None) -> TrackedObligation:
    return TrackedObligation(
        entity_id="r1",
        obligation_type=ObligationType.REPAIR_DURATION,
        date_fields={
            SourceTag.REPAIR_START: start,
            SourceTag.REPAIR_APPROVAL: approval,
            SourceTag.REPAIR_CREATED: created,
        },
    )


def mk_stock(quantity: float | None, min_stock: float | None) -> TrackedObligation:
    return TrackedObligation(
        entity_id="s1",
        obligation_type=ObligationType.STOCK_REORDER,
        measures={"quantity": quantity, "min_stock": min_stock},
    )


def mk_document(expiry: str | None) -> TrackedObligation:
    return TrackedObligation(
        entity_id="v1:insurance",
        obligation_type=ObligationType.DOCUMENT_EXPIRY,
        date_fields={SourceTag.EXPIRY: expiry},
    )


def test_maintenance_date_clock() -> None:
    assert classify_maintenance(mk_plan("2024-10-15"), NOW, CONFIG).state == ComplianceState.NEAR_DUE
    assert classify_maintenance(mk_plan("2024-10-01"), NOW, CONFIG).state == ComplianceState.OVERDUE
    ok = classify_maintenance(mk_plan("2024-12-01"), NOW, CONFIG)
    assert ok.state == ComplianceState.COMPLETED
    assert ok.as_of_days == 50


def test_maintenance_mileage_clock_can_drive_state() -> None:
    near = classify_maintenance(mk_plan("2024-12-01", next_km=110000, current_km=109000), NOW, CONFIG)
    over = classify_maintenance(mk_plan("2024-12-01", next_km=110000, current_km=111000), NOW, CONFIG)

    assert near.state == ComplianceState.NEAR_DUE
    assert near.detail["driven_by"] == "mileage"
    assert near.detail["km_remaining"] == 1000
    assert over.state == ComplianceState.OVERDUE


def test_maintenance_zero_odometer_is_ignored() -> None:
    result = classify_maintenance(mk_plan("2024-12-01", next_km=110000, current_km=0), NOW, CONFIG)

    assert result.state == ComplianceState.COMPLETED
    assert "km_remaining" not in result.detail


def test_maintenance_without_reference_is_never_performed() -> None:
    result = classify_maintenance(mk_plan(None), NOW, CONFIG)

    assert result.state == ComplianceState.NEVER_TRAINED


def test_maintenance_falls_back_to_service_history() -> None:
    history = (
        HistoricalRecord(topic_code=None, topic_label=None, actual_date="2024-11-20"),
        HistoricalRecord(topic_code=None, topic_label=None, actual_date="2024-12-20"),
    )

    result = classify_maintenance(mk_plan(None, history=history), NOW, CONFIG)

    assert result.reference is not None
    assert result.reference.source == SourceTag.SERVICE_HISTORY
    assert result.reference.raw == "2024-12-20"
    assert result.state == ComplianceState.COMPLETED


def test_maintenance_without_frequency_is_due_on_last_service() -> None:
    result = classify_maintenance(mk_plan(_day(-5), recurrence=None), NOW, CONFIG)

    assert result.state == ComplianceState.OVERDUE
    assert result.as_of_days == -5


def test_repair_running_past_two_days_is_overdue() -> None:
    result = classify_repair(mk_repair(start=_day(-3)), NOW, CONFIG)

    assert result.state == ComplianceState.OVERDUE
    assert result.as_of_days == -1
    assert result.detail["elapsed_days"] == 3


def test_repair_past_two_and_a_half_days_is_overdue() -> None:
    start = (NOW - timedelta(days=2, hours=12)).isoformat()

    result = classify_repair(mk_repair(start=start), NOW, CONFIG)

    assert result.state == ComplianceState.OVERDUE
    assert result.as_of_days == 0
    assert result.detail["elapsed_days"] == 2


def test_repair_exactly_at_delay_is_still_pending() -> None:
    assert classify_repair(mk_repair(start=_day(-2)), NOW, CONFIG).state == ComplianceState.PENDING


def test_repair_within_two_days_is_pending() -> None:
    assert classify_repair(mk_repair(start=_day(-1)), NOW, CONFIG).state == ComplianceState.PENDING


def test_repair_chain_uses_approval_then_created() -> None:
    by_approval = classify_repair(mk_repair(approval=_day(-4), created=_day(-1)), NOW, CONFIG)
    by_created = classify_repair(mk_repair(created=_day(-4)), NOW, CONFIG)

    assert by_approval.detail["source"] == SourceTag.REPAIR_APPROVAL.value
    assert by_created.detail["source"] == SourceTag.REPAIR_CREATED.value
    assert classify_repair(mk_repair(), NOW, CONFIG).state == ComplianceState.PENDING


def test_stock_thresholds() -> None:
    assert classify_stock(mk_stock(0, 5), NOW, CONFIG).state == ComplianceState.OVERDUE
    assert classify_stock(mk_stock(-2, 5), NOW, CONFIG).state == ComplianceState.OVERDUE
    assert classify_stock(mk_stock(5, 5), NOW, CONFIG).state == ComplianceState.NEAR_DUE
    assert classify_stock(mk_stock(10, 5), NOW, CONFIG).state == ComplianceState.COMPLETED
    assert classify_stock(mk_stock(None, None), NOW, CONFIG).state == ComplianceState.OVERDUE
    assert classify_stock(mk_stock(3, None), NOW, CONFIG).state == ComplianceState.COMPLETED


def test_document_expiry_windows() -> None:
    expired = classify_document(mk_document(_day(-1)), NOW, CONFIG)
    expiring = classify_document(mk_document(_day(20)), NOW, CONFIG)
    valid = classify_document(mk_document(_day(60)), NOW, CONFIG)

    assert expired.state == ComplianceState.OVERDUE
    assert expired.as_of_days == -1
    assert expiring.state == ComplianceState.NEAR_DUE
    assert valid.state == ComplianceState.COMPLETED


def test_document_unparseable_expiry_is_never_trained() -> None:
    assert classify_document(mk_document("someday"), NOW, CONFIG).state == ComplianceState.NEVER_TRAINED


def test_document_buddhist_era_expiry() -> None:
    result = classify_document(mk_document("2568-01-20"), NOW, CONFIG)

    assert result.state == ComplianceState.NEAR_DUE
    assert result.as_of_days == 10
