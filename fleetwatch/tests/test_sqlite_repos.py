"""Tests for notification, compliance state and run repositories."""

from __future__ import annotations

import json
import sqlite3

from fleetwatch.core.domain.enums import ComplianceState, ObligationType, Severity
from fleetwatch.core.domain.models import ComplianceResult, NotificationRecord, TrackedObligation, Transition
from fleetwatch.core.engine.result import EvaluationResult
from fleetwatch.infra.sqlite.migrator import apply_migrations
from fleetwatch.infra.sqlite.repos.compliance_state_repo import ComplianceStateRepo
from fleetwatch.infra.sqlite.repos.eval_run_repo import EvalRunRepo
from fleetwatch.infra.sqlite.repos.notification_repo import NotificationRepo


def mk_conn() -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:")
    apply_migrations(conn)
    return conn


def mk_notification(idx: int, is_read: bool = False, stable_key: str | None = None) -> NotificationRecord:
    return NotificationRecord(
        id=f"n{idx}",
        message=f"message {idx}",
        severity=Severity.WARNING,
        is_read=is_read,
        created_at=f"2025-01-{idx + 1:02d}T00:00:00.000Z",
        link_target="stock",
        stable_key=stable_key,
    )


def test_migrations_are_idempotent() -> None:
    conn = mk_conn()
    apply_migrations(conn)

    tables = {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    }
    assert {"notification", "compliance_state", "compliance_transition", "eval_run"} <= tables


def test_notifications_round_trip_in_list_order() -> None:
    conn = mk_conn()
    repo = NotificationRepo(conn)
    records = [mk_notification(3, stable_key="AUTO-STOCK-s1-out"), mk_notification(1, is_read=True), mk_notification(2)]

    repo.replace_all(records)

    assert repo.load_all() == records
    assert [r.id for r in repo.load_all(unread_only=True)] == ["n3", "n2"]


def test_replace_all_drops_previous_rows() -> None:
    conn = mk_conn()
    repo = NotificationRepo(conn)
    repo.replace_all([mk_notification(1), mk_notification(2)])

    repo.replace_all([mk_notification(5)])

    assert [r.id for r in repo.load_all()] == ["n5"]


def test_mark_read() -> None:
    conn = mk_conn()
    repo = NotificationRepo(conn)
    repo.replace_all([mk_notification(1)])

    assert repo.mark_read("n1") is True
    assert repo.mark_read("missing") is False
    stored = repo.get("n1")
    assert stored is not None
    assert stored.is_read is True


def test_compliance_state_upsert_and_latest() -> None:
    conn = mk_conn()
    repo = ComplianceStateRepo(conn)
    obligation = TrackedObligation(entity_id="d1", obligation_type=ObligationType.TRAINING_COMPLIANCE)

    for state, days in ((ComplianceState.PENDING, 40), (ComplianceState.NEAR_DUE, 12)):
        evaluation = EvaluationResult(
            obligation=obligation,
            result=ComplianceResult(state=state, as_of_days=days, detail={"source": "TRAINING_DATE"}),
            prev_state=None,
            transition=None,
        )
        repo.upsert_state(evaluation, run_id="run-1", updated_at="2025-01-10T00:00:00+00:00")

    assert repo.load_latest() == {(ObligationType.TRAINING_COMPLIANCE, "d1"): ComplianceState.NEAR_DUE}
    stored = repo.get_state(ObligationType.TRAINING_COMPLIANCE, "d1")
    assert stored is not None
    state, as_of_days, detail_json = stored
    assert state == ComplianceState.NEAR_DUE
    assert as_of_days == 12
    assert json.loads(detail_json) == {"source": "TRAINING_DATE"}


def test_transitions_logged_per_run() -> None:
    conn = mk_conn()
    repo = ComplianceStateRepo(conn)
    transition = Transition(
        obligation_type=ObligationType.STOCK_REORDER,
        entity_id="s1",
        from_state=ComplianceState.COMPLETED,
        to_state=ComplianceState.OVERDUE,
        is_progression=True,
    )

    repo.insert_transition(transition, run_id="run-1", created_at="2025-01-10T00:00:00+00:00")

    assert repo.list_transitions("run-1") == [transition]
    assert repo.list_transitions("run-2") == []
    assert repo.list_transitions() == [transition]


def test_eval_run_insert_and_latest() -> None:
    conn = mk_conn()
    repo = EvalRunRepo(conn)
    assert repo.latest_run() is None

    repo.insert_run("run-1", "2025-01-10T00:00:00+00:00", "2025-01-10T00:00:00+00:00", "dev", "default", 4, 1, 1)
    repo.insert_run("run-2", "2025-01-11T00:00:00+00:00", "2025-01-11T00:00:00+00:00", "dev", "default", 4, 0, 1)

    latest = repo.latest_run()
    assert latest is not None
    assert latest["run_id"] == "run-2"
    assert latest["emitted_count"] == 0
