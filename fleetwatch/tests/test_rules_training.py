"""Tests for training-compliance classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fleetwatch.config.engine_config import load_engine_config
from fleetwatch.core.domain.enums import ComplianceState, ObligationType, SourceTag
from fleetwatch.core.domain.models import Eligibility, RecurrenceRule, TrackedObligation
from fleetwatch.core.engine.evaluator import classify
from fleetwatch.core.policy.rules_training import classify_training

NOW = datetime(2025, 1, 10, tzinfo=timezone.utc)
CONFIG = load_engine_config("default")


def _day(offset_days: int) -> str:
    return (NOW + timedelta(days=offset_days)).date().isoformat()


def mk_training(
    training_date: str | None = None,
    hire_date: str | None = None,
    is_new_entrant: bool = False,
    waived: bool = False,
    recurrence: RecurrenceRule | None = None,
    onboarding: RecurrenceRule | None = RecurrenceRule(120, "days"),
) -> TrackedObligation:
    return TrackedObligation(
        entity_id="d1",
        obligation_type=ObligationType.TRAINING_COMPLIANCE,
        eligibility=Eligibility(waived=waived, is_new_entrant=is_new_entrant, hire_date=hire_date),
        recurrence=recurrence,
        onboarding=onboarding,
        date_fields={SourceTag.TRAINING_DATE: training_date},
        topic=CONFIG.training_topic,
    )


def test_new_entrant_hired_130_days_ago_is_overdue_by_10() -> None:
    result = classify_training(mk_training(hire_date=_day(-130), is_new_entrant=True), NOW, CONFIG)

    assert result.state == ComplianceState.OVERDUE
    assert result.as_of_days == -10
    assert result.magnitude == 10


def test_record_370_days_old_with_365_day_recurrence_is_refresh_overdue() -> None:
    obligation = mk_training(training_date=_day(-370), recurrence=RecurrenceRule(365, "days"))

    result = classify_training(obligation, NOW, CONFIG)

    assert result.state == ComplianceState.REFRESH_OVERDUE
    assert result.magnitude == 5
    assert result.detail["source"] == SourceTag.TRAINING_DATE.value


def test_refresh_near_and_completed_windows() -> None:
    rule = RecurrenceRule(365, "days")

    near = classify_training(mk_training(training_date=_day(-350), recurrence=rule), NOW, CONFIG)
    done = classify_training(mk_training(training_date=_day(-100), recurrence=rule), NOW, CONFIG)
    edge = classify_training(mk_training(training_date=_day(-365), recurrence=rule), NOW, CONFIG)

    assert near.state == ComplianceState.REFRESH_NEAR
    assert near.as_of_days == 15
    assert done.state == ComplianceState.COMPLETED
    assert done.as_of_days == 265
    assert edge.state == ComplianceState.REFRESH_NEAR
    assert edge.as_of_days == 0


def test_default_refresh_is_one_year() -> None:
    result = classify_training(mk_training(training_date="2024-01-01"), NOW, CONFIG)

    assert result.due_date == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert result.state == ComplianceState.REFRESH_OVERDUE
    assert result.as_of_days == -9


def test_buddhist_era_training_date_keeps_original_year() -> None:
    result = classify_training(mk_training(training_date="2567-03-15"), NOW, CONFIG)

    assert result.reference is not None
    assert result.reference.date.instant == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert result.detail["original_year"] == "2567"
    assert result.state == ComplianceState.COMPLETED


def test_never_trained_counts_from_onboarding_deadline() -> None:
    result = classify_training(mk_training(hire_date=_day(-400)), NOW, CONFIG)

    assert result.state == ComplianceState.NEVER_TRAINED
    assert result.as_of_days == -280


def test_never_trained_without_hire_date_is_zero() -> None:
    result = classify_training(mk_training(), NOW, CONFIG)

    assert result.state == ComplianceState.NEVER_TRAINED
    assert result.as_of_days == 0


def test_new_entrant_without_hire_date_counts_from_now() -> None:
    result = classify_training(mk_training(is_new_entrant=True), NOW, CONFIG)

    assert result.state == ComplianceState.PENDING
    assert result.as_of_days == 120
    assert result.detail["hire_date_unknown"] is True


def test_new_entrant_near_due() -> None:
    result = classify_training(mk_training(hire_date=_day(-100), is_new_entrant=True), NOW, CONFIG)

    assert result.state == ComplianceState.NEAR_DUE
    assert result.as_of_days == 20


def test_waived_is_terminal() -> None:
    result = classify(mk_training(training_date=_day(-900), waived=True), NOW, CONFIG)

    assert result.state == ComplianceState.WAIVED


def test_every_combination_yields_exactly_one_state() -> None:
    for training_date in (None, "", "garbage", _day(-900), _day(-10), "2567-03-15"):
        for hire_date in (None, "bad", _day(-30), _day(-500)):
            for new_entrant in (True, False):
                for waived in (True, False):
                    obligation = mk_training(training_date, hire_date, new_entrant, waived)
                    result = classify(obligation, NOW, CONFIG)
                    assert isinstance(result.state, ComplianceState)
                    assert isinstance(result.as_of_days, int)


def test_optional_scores_and_trainer_enrich_detail() -> None:
    obligation = TrackedObligation(
        entity_id="d2",
        obligation_type=ObligationType.TRAINING_COMPLIANCE,
        date_fields={SourceTag.TRAINING_END: _day(-20)},
        measures={"pre_test": 60.0, "post_test": 90.0},
        context={"trainer": "Somchai"},
    )

    result = classify_training(obligation, NOW, CONFIG)

    assert result.detail["trainer"] == "Somchai"
    assert result.detail["pre_test"] == 60.0
    assert result.detail["post_test"] == 90.0
