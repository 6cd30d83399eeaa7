"""Map raw export rows (camelCase JSON or snake_case CSV) to snapshot records.

Responsibilities:
  - Read each field under its known spellings; empty strings become None.
  - Coerce numbers and flags leniently; a malformed field becomes None.
Must not:
  - Parse dates; raw date strings go to the engine unchanged.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from fleetwatch.core.domain.snapshot import (
    CargoPolicyRecord,
    DriverRecord,
    MaintenancePlanRecord,
    PartWarrantyRecord,
    RepairRecord,
    ServiceRecord,
    StockRecord,
    TrainingRecord,
    VehicleRecord,
)

_TRUE = {"true", "1", "yes", "y"}
_FALSE = {"false", "0", "no", "n"}


def _raw(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


def text(row: Mapping[str, Any], *keys: str) -> Optional[str]:
    value = _raw(row, *keys)
    if value is None or isinstance(value, (dict, list)):
        return None
    result = str(value).strip()
    return result or None


def number(row: Mapping[str, Any], *keys: str) -> Optional[float]:
    value = _raw(row, *keys)
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        value = str(value).replace(",", "").strip()
        if not value:
            return None
    try:
        result = float(value)
    except (ValueError, OverflowError):
        return None
    # NaN and infinities are malformed, not values.
    return result if math.isfinite(result) else None


def flag(row: Mapping[str, Any], *keys: str) -> Optional[bool]:
    value = _raw(row, *keys)
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None


def _nested(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = row.get(key)
    return value if isinstance(value, dict) else {}


def vehicle_from_row(row: Mapping[str, Any]) -> Optional[VehicleRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    return VehicleRecord(
        id=record_id,
        license_plate=text(row, "licensePlate", "license_plate") or "",
        status=text(row, "status"),
        insurance_expiry_date=text(row, "insuranceExpiryDate", "insurance_expiry_date"),
        act_expiry_date=text(row, "actExpiryDate", "act_expiry_date"),
        current_mileage=number(row, "currentMileage", "current_mileage", "mileage"),
    )


def driver_from_row(row: Mapping[str, Any]) -> Optional[DriverRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    # Training fields live under "defensiveDriving" in JSON exports and flat in CSV.
    training = _nested(row, "defensiveDriving")
    merged: dict[str, Any] = {**row, **training}
    return DriverRecord(
        id=record_id,
        name=text(row, "name") or record_id,
        employee_id=text(row, "employeeId", "employee_id"),
        status=text(row, "status"),
        hire_date=text(row, "hireDate", "hire_date"),
        is_new_entrant=flag(row, "isNewEntrant", "is_new_entrant"),
        training_date=text(merged, "trainingDate", "training_date"),
        training_end_date=text(merged, "endDate", "trainingEndDate", "training_end_date"),
        training_start_date=text(merged, "startDate", "trainingStartDate", "training_start_date"),
        trainer=text(merged, "trainer"),
        pre_test=number(merged, "preTest", "pre_test"),
        post_test=number(merged, "postTest", "post_test"),
        license_expiry=text(row, "licenseExpiry", "license_expiry"),
    )


def stock_from_row(row: Mapping[str, Any]) -> Optional[StockRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    return StockRecord(
        id=record_id,
        code=text(row, "code") or "",
        name=text(row, "name") or record_id,
        quantity=number(row, "quantity"),
        min_stock=number(row, "minStock", "min_stock"),
        unit=text(row, "unit"),
        is_fungible_used_item=bool(flag(row, "isFungibleUsedItem", "is_fungible_used_item")),
    )


def maintenance_plan_from_row(row: Mapping[str, Any]) -> Optional[MaintenancePlanRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    frequency = number(row, "frequencyValue", "frequency_value")
    return MaintenancePlanRecord(
        id=record_id,
        vehicle_license_plate=text(row, "vehicleLicensePlate", "vehicle_license_plate") or "",
        plan_name=text(row, "planName", "plan_name") or record_id,
        last_service_date=text(row, "lastServiceDate", "last_service_date"),
        frequency_value=int(frequency) if frequency is not None else None,
        frequency_unit=text(row, "frequencyUnit", "frequency_unit"),
        last_service_mileage=number(row, "lastServiceMileage", "last_service_mileage"),
        mileage_frequency=number(row, "mileageFrequency", "mileage_frequency"),
    )


def repair_from_row(row: Mapping[str, Any]) -> Optional[RepairRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    return RepairRecord(
        id=record_id,
        repair_order_no=text(row, "repairOrderNo", "repair_order_no") or record_id,
        license_plate=text(row, "licensePlate", "license_plate") or "",
        status=text(row, "status"),
        repair_start_date=text(row, "repairStartDate", "repair_start_date"),
        approval_date=text(row, "approvalDate", "approval_date"),
        created_at=text(row, "createdAt", "created_at"),
        current_mileage=number(row, "currentMileage", "current_mileage"),
    )


def training_from_row(
    row: Mapping[str, Any], topic_names: Optional[Mapping[str, str]] = None
) -> Optional[TrainingRecord]:
    driver_id = text(row, "driverId", "driver_id")
    if driver_id is None:
        return None
    label = text(row, "topicName", "topicLabel", "topic_label")
    topic_id = text(row, "topicId", "topic_id")
    if label is None and topic_id is not None and topic_names:
        label = topic_names.get(topic_id)
    return TrainingRecord(
        driver_id=driver_id,
        topic_code=text(row, "topicCode", "topic_code"),
        topic_label=label,
        actual_date=text(row, "actualDate", "actual_date"),
        status=text(row, "status"),
        trainer=text(row, "trainer"),
        pre_test=number(row, "preTest", "pre_test"),
        post_test=number(row, "postTest", "post_test"),
    )


def service_from_row(row: Mapping[str, Any]) -> Optional[ServiceRecord]:
    plan_id = text(row, "maintenancePlanId", "maintenance_plan_id", "plan_id")
    if plan_id is None:
        return None
    return ServiceRecord(
        plan_id=plan_id,
        vehicle_license_plate=text(row, "vehicleLicensePlate", "vehicle_license_plate"),
        service_date=text(row, "serviceDate", "service_date"),
        mileage=number(row, "mileage"),
    )


def part_warranty_from_row(row: Mapping[str, Any]) -> Optional[PartWarrantyRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    return PartWarrantyRecord(
        id=record_id,
        part_name=text(row, "partName", "part_name") or record_id,
        vehicle_license_plate=text(row, "vehicleLicensePlate", "vehicle_license_plate"),
        supplier=text(row, "supplier"),
        warranty_expiry=text(row, "warrantyExpiry", "warranty_expiry"),
        is_active=flag(row, "isActive", "is_active"),
    )


def cargo_policy_from_row(row: Mapping[str, Any]) -> Optional[CargoPolicyRecord]:
    record_id = text(row, "id")
    if record_id is None:
        return None
    return CargoPolicyRecord(
        id=record_id,
        policy_number=text(row, "policyNumber", "policy_number") or record_id,
        insurer=text(row, "insurer"),
        status=text(row, "status"),
        expiry_date=text(row, "expiryDate", "expiry_date"),
    )
