from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fleetwatch.core.domain.models import RecurrenceRule, TopicQuery

_UNITS = ("days", "weeks", "months", "years")


@dataclass(frozen=True)
class EngineConfig:
    profile: str
    retention_max: int
    display_cap: int
    training_refresh_interval: int
    training_refresh_unit: str
    training_onboarding_days: int
    training_near_days: int
    training_topic_code: str
    training_topic_aliases: tuple[str, ...]
    training_topic_label_keywords: tuple[str, ...]
    maintenance_near_days: int
    maintenance_near_km: float
    repair_delay_days: int
    repair_in_progress_statuses: tuple[str, ...]
    document_near_days: int
    driver_waived_statuses: tuple[str, ...]
    vehicle_active_statuses: tuple[str, ...]
    cargo_active_statuses: tuple[str, ...]

    @property
    def training_refresh(self) -> RecurrenceRule:
        return RecurrenceRule(self.training_refresh_interval, self.training_refresh_unit)  # type: ignore[arg-type]

    @property
    def training_onboarding(self) -> RecurrenceRule:
        return RecurrenceRule(self.training_onboarding_days, "days")

    @property
    def training_topic(self) -> TopicQuery:
        return TopicQuery(
            code=self.training_topic_code,
            aliases=frozenset(self.training_topic_aliases),
            label_keywords=self.training_topic_label_keywords,
        )


def _profiles_dir() -> Path:
    return Path(__file__).resolve().parent / "profiles"


def _require(payload: dict[str, Any], key: str, expected_type: type) -> Any:
    if key not in payload:
        raise ValueError(f"Missing required field '{key}' in engine config")
    value = payload[key]
    if expected_type is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be float")
        return float(value)
    if expected_type is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be int")
        return value
    if expected_type is tuple:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"Field '{key}' must be a list of strings")
        return tuple(value)
    if not isinstance(value, expected_type):
        raise ValueError(f"Field '{key}' must be {expected_type.__name__}")
    return value


def _require_non_negative(payload: dict[str, Any], key: str) -> int:
    value = _require(payload, key, int)
    if value < 0:
        raise ValueError(f"Field '{key}' must be >= 0")
    return value


def parse_engine_config(payload: Any, profile: str) -> EngineConfig:
    if not isinstance(payload, dict):
        raise ValueError("Engine config must be a JSON object")

    retention_max = _require(payload, "retention_max", int)
    if retention_max < 1:
        raise ValueError("Field 'retention_max' must be >= 1")

    refresh_unit = _require(payload, "training_refresh_unit", str)
    if refresh_unit not in _UNITS:
        raise ValueError(f"Field 'training_refresh_unit' must be one of {_UNITS}")

    return EngineConfig(
        profile=profile,
        retention_max=retention_max,
        display_cap=_require_non_negative(payload, "display_cap"),
        training_refresh_interval=_require_non_negative(payload, "training_refresh_interval"),
        training_refresh_unit=refresh_unit,
        training_onboarding_days=_require_non_negative(payload, "training_onboarding_days"),
        training_near_days=_require_non_negative(payload, "training_near_days"),
        training_topic_code=_require(payload, "training_topic_code", str),
        training_topic_aliases=_require(payload, "training_topic_aliases", tuple),
        training_topic_label_keywords=_require(payload, "training_topic_label_keywords", tuple),
        maintenance_near_days=_require_non_negative(payload, "maintenance_near_days"),
        maintenance_near_km=_require(payload, "maintenance_near_km", float),
        repair_delay_days=_require_non_negative(payload, "repair_delay_days"),
        repair_in_progress_statuses=_require(payload, "repair_in_progress_statuses", tuple),
        document_near_days=_require_non_negative(payload, "document_near_days"),
        driver_waived_statuses=_require(payload, "driver_waived_statuses", tuple),
        vehicle_active_statuses=_require(payload, "vehicle_active_statuses", tuple),
        cargo_active_statuses=_require(payload, "cargo_active_statuses", tuple),
    )


def load_engine_config_file(path: str | Path) -> EngineConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ValueError(f"Engine config not found: {config_path}")
    payload = json.loads(config_path.read_text(encoding="utf-8"))
    return parse_engine_config(payload, profile=config_path.stem)


def load_engine_config(profile: str = "default") -> EngineConfig:
    config_path = _profiles_dir() / f"{profile}.json"
    if not config_path.exists():
        raise ValueError(f"Unknown engine config profile: {profile}")
    return load_engine_config_file(config_path)
