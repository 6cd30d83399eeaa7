"""SQLite-backed provider for previous compliance states.

Responsibilities:
  - Fetch the last persisted state per (obligation_type, entity_id).
Must not:
  - Classify or emit alerts.
"""

from __future__ import annotations

import sqlite3
from typing import Mapping

from fleetwatch.app_api.ports import PrevStateProvider
from fleetwatch.core.domain.enums import ComplianceState, ObligationType
from fleetwatch.infra.sqlite.repos.compliance_state_repo import ComplianceStateRepo


class SQLitePrevStateProvider(PrevStateProvider):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._repo = ComplianceStateRepo(conn)

    def get_prev_states(self) -> Mapping[tuple[ObligationType, str], ComplianceState]:
        return self._repo.load_latest()
