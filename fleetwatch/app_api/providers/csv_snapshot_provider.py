"""Snapshot provider for a directory of CSV exports, read with pandas.

Responsibilities:
  - Read one CSV per collection; a missing file is an empty collection.
  - Keep every cell as text so dates and codes reach the mappers untouched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import pandas as pd

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

CSV_FILES: dict[str, str] = {
    "vehicles": "vehicles.csv",
    "drivers": "drivers.csv",
    "stock": "stock.csv",
    "maintenance_plans": "maintenance_plans.csv",
    "repairs": "repairs.csv",
    "training_records": "training_records.csv",
    "service_history": "service_history.csv",
    "part_warranties": "part_warranties.csv",
    "cargo_policies": "cargo_policies.csv",
}


class CsvSnapshotProvider(SnapshotProvider):
    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self.skipped = 0

    def _read_rows(self, name: str) -> list[dict[str, Any]]:
        path = self._directory / CSV_FILES[name]
        if not path.exists():
            return []
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
        except pd.errors.EmptyDataError:
            return []
        except pd.errors.ParserError as exc:
            raise ValueError(f"Malformed CSV export: {path}") from exc
        df.columns = [str(c).strip() for c in df.columns]
        return df.to_dict(orient="records")

    def _map(self, name: str, mapper: Callable[[dict[str, Any]], Optional[T]]) -> tuple[T, ...]:
        records: list[T] = []
        for row in self._read_rows(name):
            record = mapper(row)
            if record is None:
                self.skipped += 1
                continue
            records.append(record)
        return tuple(records)

    def get_snapshot(self) -> Snapshot:
        if not self._directory.is_dir():
            raise ValueError(f"Snapshot directory not found: {self._directory}")
        self.skipped = 0
        return Snapshot(
            vehicles=self._map("vehicles", vehicle_from_row),
            drivers=self._map("drivers", driver_from_row),
            stock=self._map("stock", stock_from_row),
            maintenance_plans=self._map("maintenance_plans", maintenance_plan_from_row),
            repairs=self._map("repairs", repair_from_row),
            training_records=self._map("training_records", training_from_row),
            service_history=self._map("service_history", service_from_row),
            part_warranties=self._map("part_warranties", part_warranty_from_row),
            cargo_policies=self._map("cargo_policies", cargo_policy_from_row),
        )
