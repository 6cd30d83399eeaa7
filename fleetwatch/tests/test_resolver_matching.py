"""Tests for reference-date resolution and topic matching."""

from __future__ import annotations

from fleetwatch.core.domain.enums import ObligationType, SourceTag
from fleetwatch.core.domain.models import HistoricalRecord, TopicQuery, TrackedObligation
from fleetwatch.core.resolver.chains import resolve
from fleetwatch.core.resolver.matching import match_history

TOPIC = TopicQuery(
    code="defensive",
    aliases=frozenset({"defensive_refresh", "DDC"}),
    label_keywords=("defensive",),
)


def mk_record(code: str | None, date: str | None, label: str | None = None, status: str | None = None) -> HistoricalRecord:
    return HistoricalRecord(topic_code=code, topic_label=label, actual_date=date, status=status)


def mk_training(date_fields: dict | None = None, history: tuple = ()) -> TrackedObligation:
    return TrackedObligation(
        entity_id="d1",
        obligation_type=ObligationType.TRAINING_COMPLIANCE,
        date_fields=date_fields or {},
        history=history,
        topic=TOPIC,
    )


def test_explicit_training_date_wins_over_history() -> None:
    obligation = mk_training(
        {SourceTag.TRAINING_DATE: "2024-01-01", SourceTag.TRAINING_END: "2024-06-01"},
        (mk_record("defensive", "2024-09-01"),),
    )

    resolved = resolve(obligation)

    assert resolved is not None
    assert resolved.source == SourceTag.TRAINING_DATE
    assert resolved.raw == "2024-01-01"


def test_unparseable_field_falls_through_chain() -> None:
    obligation = mk_training(
        {SourceTag.TRAINING_DATE: "soon", SourceTag.TRAINING_END: "", SourceTag.TRAINING_START: "2024-02-02"}
    )

    resolved = resolve(obligation)

    assert resolved is not None
    assert resolved.source == SourceTag.TRAINING_START


def test_history_used_when_no_explicit_field() -> None:
    resolved = resolve(mk_training(history=(mk_record("defensive", "2024-05-05"),)))

    assert resolved is not None
    assert resolved.source == SourceTag.HISTORY_CODE
    assert resolved.record is not None


def test_exact_code_beats_newer_alias_match() -> None:
    history = (
        mk_record("defensive", "2023-01-01"),
        mk_record("defensive_refresh", "2024-12-01"),
    )

    resolved = match_history(TOPIC, history)

    assert resolved is not None
    assert resolved.source == SourceTag.HISTORY_CODE
    assert resolved.raw == "2023-01-01"


def test_alias_match_is_case_insensitive() -> None:
    resolved = match_history(TOPIC, (mk_record("ddc", "2024-04-01"),))

    assert resolved is not None
    assert resolved.source == SourceTag.HISTORY_ALIAS


def test_label_substring_match() -> None:
    resolved = match_history(TOPIC, (mk_record("misc", "2024-04-01", label="Annual DEFENSIVE driving course"),))

    assert resolved is not None
    assert resolved.source == SourceTag.HISTORY_LABEL


def test_latest_date_string_wins_within_strategy() -> None:
    history = (
        mk_record("defensive", "2024-01-05"),
        mk_record("defensive", "2024-06-01"),
        mk_record("defensive", "2023-12-31"),
    )

    resolved = match_history(TOPIC, history)

    assert resolved is not None
    assert resolved.raw == "2024-06-01"


def test_unparseable_latest_falls_back_to_next_record() -> None:
    history = (
        mk_record("defensive", "2024-99-99"),
        mk_record("defensive", "2024-06-01"),
    )

    resolved = match_history(TOPIC, history)

    assert resolved is not None
    assert resolved.raw == "2024-06-01"


def test_records_without_date_or_cancelled_are_ignored() -> None:
    history = (
        mk_record("defensive", None),
        mk_record("defensive", "2024-08-01", status="cancelled"),
    )

    assert match_history(TOPIC, history) is None
    assert resolve(mk_training(history=history)) is None


def test_stock_chain_is_empty() -> None:
    obligation = TrackedObligation(entity_id="s1", obligation_type=ObligationType.STOCK_REORDER)

    assert resolve(obligation) is None
