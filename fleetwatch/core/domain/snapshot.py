"""Inbound snapshot records consumed by the evaluation orchestrator.

Responsibilities:
  - Give the engine one typed, ordered representation of each collection.
Must not:
  - Know about storage shapes; providers convert exports into these records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VehicleRecord:
    id: str
    license_plate: str
    status: Optional[str] = None
    insurance_expiry_date: Optional[str] = None
    act_expiry_date: Optional[str] = None
    current_mileage: Optional[float] = None


@dataclass(frozen=True)
class DriverRecord:
    id: str
    name: str
    employee_id: Optional[str] = None
    status: Optional[str] = None
    hire_date: Optional[str] = None
    is_new_entrant: Optional[bool] = None
    training_date: Optional[str] = None
    training_end_date: Optional[str] = None
    training_start_date: Optional[str] = None
    trainer: Optional[str] = None
    pre_test: Optional[float] = None
    post_test: Optional[float] = None
    license_expiry: Optional[str] = None


@dataclass(frozen=True)
class StockRecord:
    id: str
    code: str
    name: str
    quantity: Optional[float] = None
    min_stock: Optional[float] = None
    unit: Optional[str] = None
    is_fungible_used_item: bool = False


@dataclass(frozen=True)
class MaintenancePlanRecord:
    id: str
    vehicle_license_plate: str
    plan_name: str
    last_service_date: Optional[str] = None
    frequency_value: Optional[int] = None
    frequency_unit: Optional[str] = None
    last_service_mileage: Optional[float] = None
    mileage_frequency: Optional[float] = None


@dataclass(frozen=True)
class RepairRecord:
    id: str
    repair_order_no: str
    license_plate: str
    status: Optional[str] = None
    repair_start_date: Optional[str] = None
    approval_date: Optional[str] = None
    created_at: Optional[str] = None
    current_mileage: Optional[float] = None


@dataclass(frozen=True)
class TrainingRecord:
    driver_id: str
    topic_code: Optional[str] = None
    topic_label: Optional[str] = None
    actual_date: Optional[str] = None
    status: Optional[str] = None
    trainer: Optional[str] = None
    pre_test: Optional[float] = None
    post_test: Optional[float] = None


@dataclass(frozen=True)
class ServiceRecord:
    plan_id: str
    vehicle_license_plate: Optional[str] = None
    service_date: Optional[str] = None
    mileage: Optional[float] = None


@dataclass(frozen=True)
class PartWarrantyRecord:
    id: str
    part_name: str
    vehicle_license_plate: Optional[str] = None
    supplier: Optional[str] = None
    warranty_expiry: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class CargoPolicyRecord:
    id: str
    policy_number: str
    insurer: Optional[str] = None
    status: Optional[str] = None
    expiry_date: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of all collections for one evaluation pass."""
    vehicles: tuple[VehicleRecord, ...] = ()
    drivers: tuple[DriverRecord, ...] = ()
    stock: tuple[StockRecord, ...] = ()
    maintenance_plans: tuple[MaintenancePlanRecord, ...] = ()
    repairs: tuple[RepairRecord, ...] = ()
    training_records: tuple[TrainingRecord, ...] = ()
    service_history: tuple[ServiceRecord, ...] = ()
    part_warranties: tuple[PartWarrantyRecord, ...] = ()
    cargo_policies: tuple[CargoPolicyRecord, ...] = ()
