"""Domain models for obligations, classifications and notifications.

Responsibilities:
  - Define immutable data carriers consumed and produced by the engine.

Inputs/Outputs:
  - TrackedObligation is built per pass from a snapshot and never persisted.
  - NotificationRecord is persisted by the caller; the engine only creates new ones.

Invariants:
  - Models must be deterministic containers with no behavior beyond derived keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Mapping, Optional

from .enums import ComplianceState, ConditionKind, KEY_PREFIX, ObligationType, Severity, SourceTag

IntervalUnit = Literal["days", "weeks", "months", "years"]


@dataclass(frozen=True)
class NormalizedDate:
    instant: datetime
    original_year: str
    is_buddhist_era: bool
    raw: str


@dataclass(frozen=True)
class RecurrenceRule:
    interval: int
    unit: IntervalUnit = "days"


@dataclass(frozen=True)
class Eligibility:
    waived: bool = False
    is_new_entrant: bool = False
    hire_date: Optional[str] = None


@dataclass(frozen=True)
class HistoricalRecord:
    """One completed (or planned) occurrence of an obligation in history."""
    topic_code: Optional[str]
    topic_label: Optional[str]
    actual_date: Optional[str]
    status: Optional[str] = None
    trainer: Optional[str] = None
    pre_test: Optional[float] = None
    post_test: Optional[float] = None


@dataclass(frozen=True)
class TopicQuery:
    code: str
    aliases: frozenset[str] = frozenset()
    label_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class TrackedObligation:
    entity_id: str
    obligation_type: ObligationType
    eligibility: Eligibility = field(default_factory=Eligibility)
    recurrence: Optional[RecurrenceRule] = None
    onboarding: Optional[RecurrenceRule] = None
    date_fields: Mapping[SourceTag, Optional[str]] = field(default_factory=dict)
    history: tuple[HistoricalRecord, ...] = ()
    topic: Optional[TopicQuery] = None
    measures: Mapping[str, Optional[float]] = field(default_factory=dict)
    context: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedReference:
    date: NormalizedDate
    source: SourceTag
    raw: str
    record: Optional[HistoricalRecord] = None


@dataclass(frozen=True)
class ComplianceResult:
    state: ComplianceState
    as_of_days: int
    reference: Optional[ResolvedReference] = None
    due_date: Optional[datetime] = None
    detail: Mapping[str, object] = field(default_factory=dict)

    @property
    def magnitude(self) -> int:
        return abs(self.as_of_days)


@dataclass(frozen=True)
class Transition:
    obligation_type: ObligationType
    entity_id: str
    from_state: ComplianceState
    to_state: ComplianceState
    is_progression: bool


def stable_key(obligation_type: ObligationType, entity_id: str, condition: ConditionKind) -> str:
    return f"AUTO-{KEY_PREFIX[obligation_type]}-{entity_id}-{condition.value}"


@dataclass(frozen=True)
class AlertCandidate:
    obligation_type: ObligationType
    entity_id: str
    condition: ConditionKind
    severity: Severity
    message: str
    link_target: Optional[str] = None

    @property
    def stable_key(self) -> str:
        return stable_key(self.obligation_type, self.entity_id, self.condition)


@dataclass(frozen=True)
class NotificationRecord:
    id: str
    message: str
    severity: Severity
    is_read: bool
    created_at: str
    link_target: Optional[str] = None
    stable_key: Optional[str] = None

    @property
    def key(self) -> str:
        # Records written before stable keys existed used the key as their id.
        return self.stable_key or self.id
