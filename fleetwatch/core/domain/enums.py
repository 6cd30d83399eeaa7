"""Domain enums for compliance classification and alerting.

Responsibilities:
  - Define ComplianceState, ObligationType and ConditionKind identifiers persisted in storage.
  - Provide stable per-state metadata used by reports and audits.

Invariants:
  - Enum values must remain stable for persistence and stable alert keys.
  - STATE_METADATA must cover every ComplianceState exactly once.
"""

from __future__ import annotations

from enum import Enum


class ComplianceState(Enum):
    COMPLETED = "completed"
    REFRESH_NEAR = "refresh_near"
    REFRESH_OVERDUE = "refresh_overdue"
    NEAR_DUE = "near_due"
    OVERDUE = "overdue"
    NEVER_TRAINED = "never_trained"
    PENDING = "pending"
    WAIVED = "waived"


class ObligationType(Enum):
    TRAINING_COMPLIANCE = "TRAINING_COMPLIANCE"
    MAINTENANCE_DUE = "MAINTENANCE_DUE"
    STOCK_REORDER = "STOCK_REORDER"
    REPAIR_DURATION = "REPAIR_DURATION"
    DOCUMENT_EXPIRY = "DOCUMENT_EXPIRY"


class SourceTag(Enum):
    TRAINING_DATE = "TRAINING_DATE"
    TRAINING_END = "TRAINING_END"
    TRAINING_START = "TRAINING_START"
    HISTORY_CODE = "HISTORY_CODE"
    HISTORY_ALIAS = "HISTORY_ALIAS"
    HISTORY_LABEL = "HISTORY_LABEL"
    LAST_SERVICE = "LAST_SERVICE"
    SERVICE_HISTORY = "SERVICE_HISTORY"
    REPAIR_START = "REPAIR_START"
    REPAIR_APPROVAL = "REPAIR_APPROVAL"
    REPAIR_CREATED = "REPAIR_CREATED"
    EXPIRY = "EXPIRY"


class Severity(Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


# Value is embedded in stable alert keys; never rename.
class ConditionKind(Enum):
    OUT_OF_STOCK = "out"
    LOW_STOCK = "low"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NEVER_PERFORMED = "never"
    DELAYED = "delayed"
    REFRESH_OVERDUE = "refresh-overdue"
    REFRESH_NEAR = "refresh-near"
    ONBOARDING_OVERDUE = "onboarding-overdue"
    ONBOARDING_NEAR = "onboarding-near"
    EXPIRED = "expired"
    EXPIRING = "expiring"


KEY_PREFIX: dict[ObligationType, str] = {
    ObligationType.TRAINING_COMPLIANCE: "TRAINING",
    ObligationType.MAINTENANCE_DUE: "PM",
    ObligationType.STOCK_REORDER: "STOCK",
    ObligationType.REPAIR_DURATION: "REPAIR",
    ObligationType.DOCUMENT_EXPIRY: "DOC",
}


STATE_METADATA: dict[ComplianceState, dict[str, object]] = {
    ComplianceState.COMPLETED: {
        "needs_attention": False,
        "message": "Obligation is satisfied and not yet close to its next due date.",
    },
    ComplianceState.REFRESH_NEAR: {
        "needs_attention": True,
        "message": "Recurring obligation is due for refresh soon.",
    },
    ComplianceState.REFRESH_OVERDUE: {
        "needs_attention": True,
        "message": "Recurring obligation has passed its refresh date.",
    },
    ComplianceState.NEAR_DUE: {
        "needs_attention": True,
        "message": "First-time obligation is approaching its deadline.",
    },
    ComplianceState.OVERDUE: {
        "needs_attention": True,
        "message": "Obligation has passed its deadline.",
    },
    ComplianceState.NEVER_TRAINED: {
        "needs_attention": True,
        "message": "No usable record exists for a long-standing entity.",
    },
    ComplianceState.PENDING: {
        "needs_attention": False,
        "message": "Obligation is open but its deadline is still far away.",
    },
    ComplianceState.WAIVED: {
        "needs_attention": False,
        "message": "Entity is exempt from this obligation.",
    },
}


def needs_attention(state: ComplianceState) -> bool:
    return bool(STATE_METADATA[state]["needs_attention"])


_missing = [s for s in ComplianceState if s not in STATE_METADATA]
if _missing:
    raise RuntimeError(f"Missing STATE_METADATA for: {[m.value for m in _missing]}")

_missing_prefix = [t for t in ObligationType if t not in KEY_PREFIX]
if _missing_prefix:
    raise RuntimeError(f"Missing KEY_PREFIX for: {[m.value for m in _missing_prefix]}")
