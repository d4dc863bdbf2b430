"""Inventory listing helpers: filtering, sorting and dashboard statistics."""
from __future__ import annotations
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from pid_tracker.models.device import Device, DEVICE_STATUSES, DEVICE_TYPES
from pid_tracker.services.pid_service import derive_expected_pid, is_pid_mismatch

SORT_FIELDS = ("asset_id", "serial_number", "pid_number", "officer", "status")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def asset_id_number(asset_id: Optional[str]) -> int:
    """TB-12 -> 12; anything without trailing digits sorts as 0."""
    if not asset_id:
        return 0
    m = _TRAILING_DIGITS.search(asset_id)
    return int(m.group(1)) if m else 0


def _sort_value(device: Device, sort_by: str):
    if sort_by == "asset_id":
        return asset_id_number(device.asset_id)
    return getattr(device, sort_by, "") or ""


def filter_devices(
    devices: Sequence[Device],
    search: Optional[str] = None,
    status: Optional[str] = None,
    show_retired: bool = False,
    sort_by: str = "asset_id",
    sort_order: str = "asc",
) -> List[Device]:
    result = list(devices)
    if not show_retired:
        result = [d for d in result if d.status != "Retired" and not d.to_be_retired]
    if search:
        q = search.upper()
        result = [
            d for d in result
            if q in d.serial_number
            or q in d.pid_number
            or (d.asset_id and q in d.asset_id)
            or (d.ori_number and q in d.ori_number)
            or (d.officer and q in d.officer)
        ]
    if status and status != "All":
        result = [d for d in result if d.status == status]

    if sort_by not in SORT_FIELDS:
        sort_by = "asset_id"
    # empty values (and asset number 0) always go last, whatever the direction
    filled = [d for d in result if _sort_value(d, sort_by)]
    empty = [d for d in result if not _sort_value(d, sort_by)]
    filled.sort(key=lambda d: _sort_value(d, sort_by), reverse=(sort_order == "desc"))
    return filled + empty


def device_row(device: Device) -> Dict[str, Any]:
    """Device dict plus the derived PID columns shown in the table."""
    row = device.model_dump()
    row["expected_pid"] = derive_expected_pid(device.serial_number)
    row["pid_mismatch"] = is_pid_mismatch(device.serial_number, device.pid_number)
    return row


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def inventory_stats(devices: Sequence[Device], today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    total = len(devices)
    by_status = {s: sum(1 for d in devices if d.status == s) for s in DEVICE_STATUSES}
    by_type = {t: sum(1 for d in devices if d.device_type == t) for t in DEVICE_TYPES}

    cutoff = today - timedelta(days=30)
    recently_assigned = 0
    for d in devices:
        if not d.assignment_date:
            continue
        assigned_on = _parse_date(d.assignment_date)
        if assigned_on and assigned_on >= cutoff:
            recently_assigned += 1

    return {
        "total": total,
        "by_status": by_status,
        "by_type": by_type,
        "to_be_retired": sum(1 for d in devices if d.to_be_retired),
        "pid_mismatches": sum(1 for d in devices if is_pid_mismatch(d.serial_number, d.pid_number)),
        "without_serial": sum(1 for d in devices if not d.serial_number.strip()),
        "without_pid": sum(1 for d in devices if not d.pid_number.strip()),
        "without_asset_id": sum(1 for d in devices if not d.asset_id.strip()),
        "recently_assigned": recently_assigned,
        "assignment_rate": int(by_status["Assigned"] * 100 / total + 0.5) if total else 0,  # half-up
    }

__all__ = ["filter_devices", "device_row", "inventory_stats", "asset_id_number", "SORT_FIELDS"]
