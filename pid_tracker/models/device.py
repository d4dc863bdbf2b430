"""Pydantic models for inventory device records."""
from pydantic import BaseModel
from typing import Optional, Literal

DeviceType = Literal["Toughbook", "Laptop", "Desktop", "Other"]
DeviceStatus = Literal["Assigned", "Unassigned", "Retired", "Unknown"]

DEVICE_TYPES = ["Toughbook", "Laptop", "Desktop", "Other"]
DEVICE_STATUSES = ["Assigned", "Unassigned", "Retired", "Unknown"]

class DeviceCreate(BaseModel):
    serial_number: str = ""
    pid_number: str = ""
    asset_id: str = ""
    device_type: DeviceType = "Toughbook"
    ori_number: Optional[str] = None
    status: DeviceStatus = "Unassigned"
    to_be_retired: bool = False
    officer: str = ""
    assignment_date: str = ""  # YYYY-MM-DD or empty
    notes: str = ""

class Device(DeviceCreate):
    id: str
    updated_at: Optional[str] = None  # ISO8601, set by the store

__all__ = ["Device", "DeviceCreate", "DeviceType", "DeviceStatus", "DEVICE_TYPES", "DEVICE_STATUSES"]
