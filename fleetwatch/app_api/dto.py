"""DTO definitions for app-level data exchange.

Responsibilities:
  - Define stable, typed structures for app outputs.
Must not:
  - Implement business logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fleetwatch.core.domain.models import NotificationRecord, Transition


@dataclass(frozen=True)
class PassSummary:
    run_id: str
    as_of: str
    obligation_count: int
    candidate_count: int
    emitted: list[NotificationRecord] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    notification_count: int = 0
    changed: bool = False
    state_counts: dict[str, int] = field(default_factory=dict)
