"""SQLite repository for compliance_state and compliance_transition persistence.

Responsibilities:
  - Keep the latest classification per (obligation_type, entity_id).
  - Append transitions observed by a run.
Must not:
  - Classify; persistence only.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Optional

from fleetwatch.core.domain.enums import ComplianceState, ObligationType
from fleetwatch.core.domain.models import Transition
from fleetwatch.core.engine.result import EvaluationResult


class ComplianceStateRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    def load_latest(self) -> dict[tuple[ObligationType, str], ComplianceState]:
        rows = self._conn.execute(
            "SELECT obligation_type, entity_id, state FROM compliance_state"
        ).fetchall()
        return {
            (ObligationType(row["obligation_type"]), row["entity_id"]): ComplianceState(row["state"])
            for row in rows
        }

    def get_state(
        self, obligation_type: ObligationType, entity_id: str
    ) -> Optional[tuple[ComplianceState, int, Optional[str]]]:
        row = self._conn.execute(
            """
            SELECT state, as_of_days, detail_json
            FROM compliance_state
            WHERE obligation_type = ? AND entity_id = ?
            """,
            (obligation_type.value, entity_id),
        ).fetchone()
        if row is None:
            return None
        return ComplianceState(row["state"]), row["as_of_days"], row["detail_json"]

    def upsert_state(self, evaluation: EvaluationResult, run_id: str, updated_at: str) -> None:
        obligation = evaluation.obligation
        result = evaluation.result
        detail_json = json.dumps(
            dict(result.detail),
            separators=(",", ":"),
            ensure_ascii=False,
            sort_keys=True,
            default=str,
        )
        due_date = result.due_date.isoformat() if result.due_date is not None else None
        self._conn.execute(
            """
            INSERT INTO compliance_state (
                obligation_type,
                entity_id,
                state,
                as_of_days,
                due_date,
                detail_json,
                run_id,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(obligation_type, entity_id) DO UPDATE SET
                state=excluded.state,
                as_of_days=excluded.as_of_days,
                due_date=excluded.due_date,
                detail_json=excluded.detail_json,
                run_id=excluded.run_id,
                updated_at=excluded.updated_at
            """,
            (
                obligation.obligation_type.value,
                obligation.entity_id,
                result.state.value,
                result.as_of_days,
                due_date,
                detail_json,
                run_id,
                updated_at,
            ),
        )

    def insert_transition(self, transition: Transition, run_id: str, created_at: str) -> None:
        self._conn.execute(
            """
            INSERT INTO compliance_transition (
                run_id,
                obligation_type,
                entity_id,
                from_state,
                to_state,
                is_progression,
                created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(run_id, obligation_type, entity_id) DO UPDATE SET
                from_state=excluded.from_state,
                to_state=excluded.to_state,
                is_progression=excluded.is_progression,
                created_at=excluded.created_at
            """,
            (
                run_id,
                transition.obligation_type.value,
                transition.entity_id,
                transition.from_state.value,
                transition.to_state.value,
                int(transition.is_progression),
                created_at,
            ),
        )

    def list_transitions(self, run_id: Optional[str] = None) -> list[Transition]:
        if run_id is None:
            rows = self._conn.execute(
                """
                SELECT obligation_type, entity_id, from_state, to_state, is_progression
                FROM compliance_transition
                ORDER BY created_at, obligation_type, entity_id
                """
            ).fetchall()
        else:
            rows = self._conn.execute(
                """
                SELECT obligation_type, entity_id, from_state, to_state, is_progression
                FROM compliance_transition
                WHERE run_id = ?
                ORDER BY obligation_type, entity_id
                """,
                (run_id,),
            ).fetchall()
        return [
            Transition(
                obligation_type=ObligationType(row["obligation_type"]),
                entity_id=row["entity_id"],
                from_state=ComplianceState(row["from_state"]),
                to_state=ComplianceState(row["to_state"]),
                is_progression=bool(row["is_progression"]),
            )
            for row in rows
        ]
