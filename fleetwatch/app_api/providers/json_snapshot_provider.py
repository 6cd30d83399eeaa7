"""Snapshot provider for realtime-database style JSON exports.

Responsibilities:
  - Accept each collection as either a list or an id-keyed object.
  - Flatten training plans grouped by year ("training/plans/<year>").
  - Skip rows without an identifier; count them in `skipped`.
Must not:
  - Evaluate compliance; ingestion only.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TypeVar

from fleetwatch.app_api.ports import SnapshotProvider
from fleetwatch.core.domain.snapshot import Snapshot
from .record_mapping import (
    cargo_policy_from_row,
    driver_from_row,
    maintenance_plan_from_row,
    part_warranty_from_row,
    repair_from_row,
    service_from_row,
    stock_from_row,
    training_from_row,
    vehicle_from_row,
)

T = TypeVar("T")

COLLECTION_KEYS: dict[str, tuple[str, ...]] = {
    "vehicles": ("vehicles",),
    "drivers": ("drivers",),
    "stock": ("stock", "stockItems"),
    "maintenance_plans": ("maintenancePlans", "maintenance_plans"),
    "repairs": ("repairs",),
    "service_history": ("pmHistory", "pm_history", "serviceHistory", "service_history"),
    "training_records": ("trainingPlans", "training_plans"),
    "training_topics": ("trainingTopics", "training_topics"),
    "part_warranties": ("partWarranties", "part_warranties"),
    "cargo_policies": ("cargoPolicies", "cargo_policies"),
}


def read_array(value: Any, name: str) -> list[dict[str, Any]]:
    """Normalize a list or an id-keyed object into a list of row dicts."""
    if value is None:
        return []
    if isinstance(value, list):
        return [row for row in value if isinstance(row, dict)]
    if isinstance(value, dict):
        rows: list[dict[str, Any]] = []
        for key, row in value.items():
            if not isinstance(row, dict):
                continue
            if "id" not in row:
                row = {**row, "id": str(key)}
            rows.append(row)
        return rows
    raise ValueError(f"Collection '{name}' must be a list or an object")


def _is_year_grouped(value: Any) -> bool:
    if not isinstance(value, dict) or not value:
        return False
    for key, group in value.items():
        if not (isinstance(key, str) and len(key) == 4 and key.isdigit()):
            return False
        if isinstance(group, list):
            continue
        if isinstance(group, dict) and all(isinstance(v, dict) for v in group.values()):
            continue
        return False
    return True


def read_grouped(value: Any, name: str) -> list[dict[str, Any]]:
    if _is_year_grouped(value):
        rows: list[dict[str, Any]] = []
        for year in sorted(value):
            rows.extend(read_array(value[year], name))
        return rows
    return read_array(value, name)


class JsonSnapshotProvider(SnapshotProvider):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self.skipped = 0

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            raise ValueError(f"Snapshot not found: {self._path}")
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Snapshot is not valid JSON: {self._path}") from exc
        if not isinstance(payload, dict):
            raise ValueError("Snapshot must be a JSON object")
        return payload

    def _collection(self, payload: dict[str, Any], name: str) -> Any:
        for key in COLLECTION_KEYS[name]:
            if key in payload:
                return payload[key]
        if name in ("training_records", "training_topics"):
            training = payload.get("training")
            if isinstance(training, dict):
                return training.get("plans" if name == "training_records" else "topics")
        return None

    def _map(self, rows: Iterable[dict[str, Any]], mapper: Callable[[dict[str, Any]], Optional[T]]) -> tuple[T, ...]:
        records: list[T] = []
        for row in rows:
            record = mapper(row)
            if record is None:
                self.skipped += 1
                continue
            records.append(record)
        return tuple(records)

    def get_snapshot(self) -> Snapshot:
        payload = self._load()
        self.skipped = 0

        def rows(name: str) -> list[dict[str, Any]]:
            value = self._collection(payload, name)
            if name in ("training_records", "training_topics"):
                return read_grouped(value, name)
            return read_array(value, name)

        topic_names: dict[str, str] = {}
        for topic in rows("training_topics"):
            topic_id = topic.get("id")
            topic_name = topic.get("name")
            if isinstance(topic_id, str) and isinstance(topic_name, str):
                topic_names[topic_id] = topic_name

        return Snapshot(
            vehicles=self._map(rows("vehicles"), vehicle_from_row),
            drivers=self._map(rows("drivers"), driver_from_row),
            stock=self._map(rows("stock"), stock_from_row),
            maintenance_plans=self._map(rows("maintenance_plans"), maintenance_plan_from_row),
            repairs=self._map(rows("repairs"), repair_from_row),
            training_records=self._map(
                rows("training_records"), lambda row: training_from_row(row, topic_names)
            ),
            service_history=self._map(rows("service_history"), service_from_row),
            part_warranties=self._map(rows("part_warranties"), part_warranty_from_row),
            cargo_policies=self._map(rows("cargo_policies"), cargo_policy_from_row),
        )
