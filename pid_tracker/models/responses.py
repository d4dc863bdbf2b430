"""Pydantic response models for API endpoints."""
from pydantic import BaseModel
from typing import Optional, List, Any, Dict

from pid_tracker.models.device import Device

class DeviceRow(Device):
    expected_pid: str = ""
    pid_mismatch: bool = False

class DevicesResponse(BaseModel):
    devices: List[DeviceRow]
    total: int
    filtered: int

class ExpectedPidResponse(BaseModel):
    serial_number: str
    expected_pid: str
    pid_number: Optional[str] = None
    mismatch: bool = False

class CompareResponse(BaseModel):
    parsed: List[str]
    found: List[str]
    missing: List[str]
    found_devices: List[Device]
    collisions: List[str] = []
    summary: Dict[str, int]

class AddMissingResponse(BaseModel):
    comparison: CompareResponse
    bulk_create: Any
    overall_success: bool

class BulkOriResponse(BaseModel):
    updated: int
    ori_number: str

class DraftOut(BaseModel):
    subject: str
    body: str
    warning: str = ""
    recipient: str = ""
    filename: Optional[str] = None
    relay: Any | None = None

class DocumentsResponse(BaseModel):
    kind: str
    drafts: List[DraftOut]
    missing_ids: List[str] = []

__all__ = [
    "DeviceRow", "DevicesResponse", "ExpectedPidResponse", "CompareResponse",
    "AddMissingResponse", "BulkOriResponse", "DraftOut", "DocumentsResponse",
]
