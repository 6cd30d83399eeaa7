"""Evaluation result payload for a single obligation.

Responsibilities:
  - Capture the classification and, when a previous state is known, the transition.
  - Bundle one pass worth of evaluations, candidates and notifications.

Inputs/Outputs:
  - Inputs: produced by evaluator.evaluate_obligation.
  - Outputs: immutable dataclass consumed by the orchestrator and app layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.enums import ComplianceState
from ..domain.models import (
    AlertCandidate,
    ComplianceResult,
    NotificationRecord,
    TrackedObligation,
    Transition,
)


@dataclass(frozen=True)
class EvaluationResult:
    obligation: TrackedObligation
    result: ComplianceResult
    prev_state: Optional[ComplianceState]
    transition: Optional[Transition]

    @property
    def state(self) -> ComplianceState:
        return self.result.state


@dataclass(frozen=True)
class PassResult:
    """Outcome of one evaluation pass over a snapshot and the stored notifications."""
    notifications: list[NotificationRecord]
    emitted: list[NotificationRecord]
    candidates: list[AlertCandidate]
    evaluations: list[EvaluationResult]
    changed: bool

    @property
    def transitions(self) -> list[Transition]:
        return [e.transition for e in self.evaluations if e.transition is not None]
