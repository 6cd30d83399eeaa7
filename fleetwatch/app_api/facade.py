from __future__ import annotations

import datetime
import sqlite3
import uuid
from collections import Counter
from typing import Callable, Optional

from fleetwatch.config.engine_config import EngineConfig
from fleetwatch.core.calendar.normalizer import ensure_utc
from fleetwatch.core.domain.snapshot import Snapshot
from fleetwatch.core.engine.orchestrator import run_pass
from fleetwatch.infra.sqlite.repos.compliance_state_repo import ComplianceStateRepo
from fleetwatch.infra.sqlite.repos.eval_run_repo import EvalRunRepo
from fleetwatch.infra.sqlite.repos.notification_repo import NotificationRepo
from .dto import PassSummary
from .ports import PrevStateProvider


class FleetwatchApplication:
    def __init__(
        self,
        conn: sqlite3.Connection,
        config: EngineConfig,
        prev_state_provider: PrevStateProvider,
        engine_version: str,
        debug: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._conn = conn
        self._config = config
        self._prev_state_provider = prev_state_provider
        self._engine_version = engine_version
        self._debug = debug
        self._run_repo = EvalRunRepo(conn)
        self._state_repo = ComplianceStateRepo(conn)
        self._notification_repo = NotificationRepo(conn)

    def run_pass(
        self,
        snapshot: Snapshot,
        now: datetime.datetime,
        dry_run: bool = False,
    ) -> PassSummary:
        run_id = str(uuid.uuid4())
        now = ensure_utc(now)
        created_at = datetime.datetime.now(datetime.timezone.utc).isoformat()

        # Single writer: the read-evaluate-write cycle holds the write lock throughout.
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            current = self._notification_repo.load_all()
            prev_states = self._prev_state_provider.get_prev_states()
            result = run_pass(
                snapshot,
                current,
                now,
                self._config,
                prev_states=prev_states,
                debug=self._debug,
            )

            if result.changed:
                self._notification_repo.replace_all(result.notifications)
            for evaluation in result.evaluations:
                self._state_repo.upsert_state(evaluation, run_id, now.isoformat())
            for transition in result.transitions:
                self._state_repo.insert_transition(transition, run_id, now.isoformat())
            self._run_repo.insert_run(
                run_id=run_id,
                created_at=created_at,
                as_of=now.isoformat(),
                engine_version=self._engine_version,
                profile=self._config.profile,
                obligation_count=len(result.evaluations),
                emitted_count=len(result.emitted),
                notification_count=len(result.notifications),
            )

            if dry_run:
                self._conn.rollback()
            else:
                self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

        state_counts = Counter(e.state.value for e in result.evaluations)
        return PassSummary(
            run_id=run_id,
            as_of=now.isoformat(),
            obligation_count=len(result.evaluations),
            candidate_count=len(result.candidates),
            emitted=list(result.emitted),
            transitions=result.transitions,
            notification_count=len(result.notifications),
            changed=result.changed,
            state_counts=dict(sorted(state_counts.items())),
        )

    def acknowledge(self, notification_id: str) -> bool:
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            record = self._notification_repo.get(notification_id)
            # Acknowledging an already-read record is a no-op.
            if record is not None and not record.is_read:
                self._notification_repo.mark_read(notification_id)
            self._conn.commit()
            return record is not None
        except Exception:
            self._conn.rollback()
            raise
