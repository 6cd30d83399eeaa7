"""Port definitions for app-level dependencies.

Responsibilities:
  - Define interface contracts for snapshot ingestion and previous-state lookup.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Mapping, Protocol

from fleetwatch.core.domain.enums import ComplianceState, ObligationType
from fleetwatch.core.domain.snapshot import Snapshot


class SnapshotProvider(Protocol):
    def get_snapshot(self) -> Snapshot:
        ...


class PrevStateProvider(Protocol):
    def get_prev_states(self) -> Mapping[tuple[ObligationType, str], ComplianceState]:
        ...
