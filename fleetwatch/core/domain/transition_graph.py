"""Time-driven state progressions for the compliance state machine.

Responsibilities:
  - Define which state changes can happen purely because time advanced.
  - Any other change implies new facts (a new record, a changed quantity).

Invariants:
  - Progressions only move toward "more urgent"; nothing here moves backwards.
"""

from __future__ import annotations

from .enums import ComplianceState

ALLOWED_PROGRESSIONS: dict[ComplianceState, set[ComplianceState]] = {
    ComplianceState.PENDING: {
        ComplianceState.PENDING,
        ComplianceState.NEAR_DUE,
        ComplianceState.OVERDUE,
    },
    ComplianceState.NEAR_DUE: {ComplianceState.NEAR_DUE, ComplianceState.OVERDUE},
    ComplianceState.OVERDUE: {ComplianceState.OVERDUE},
    ComplianceState.COMPLETED: {
        ComplianceState.COMPLETED,
        ComplianceState.REFRESH_NEAR,
        ComplianceState.REFRESH_OVERDUE,
        ComplianceState.NEAR_DUE,
        ComplianceState.OVERDUE,
    },
    ComplianceState.REFRESH_NEAR: {ComplianceState.REFRESH_NEAR, ComplianceState.REFRESH_OVERDUE},
    ComplianceState.REFRESH_OVERDUE: {ComplianceState.REFRESH_OVERDUE},
    ComplianceState.NEVER_TRAINED: {ComplianceState.NEVER_TRAINED},
    ComplianceState.WAIVED: {ComplianceState.WAIVED},
}


def is_progression(prev_state: ComplianceState, next_state: ComplianceState) -> bool:
    return next_state in ALLOWED_PROGRESSIONS[prev_state]
