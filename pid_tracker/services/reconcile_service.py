"""PID list reconciliation against the device inventory.

An operator pastes a block of PIDs (one per line, or separated by commas /
semicolons). The list is normalized and split into PIDs already tracked
(`found`) and PIDs with no inventory record (`missing`). The missing set can
be exported or turned into placeholder records for bulk creation.

Everything here is pure: callers recompute on every change of either input
(pasted text or inventory snapshot) and simply redraw.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pid_tracker.models.device import DeviceCreate
from pid_tracker.services.normalization import normalize

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\n,;]+")

PLACEHOLDER_ASSET_ID = "UNKNOWN"
PLACEHOLDER_DEVICE_TYPE = "Toughbook"
PLACEHOLDER_STATUS = "Unknown"


@dataclass
class ReconciliationResult:
    parsed: List[str] = field(default_factory=list)
    found: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    found_devices: List[Any] = field(default_factory=list)
    # normalized PIDs carried by more than one device in the snapshot
    collisions: List[str] = field(default_factory=list)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.parsed),
            "found": len(self.found),
            "missing": len(self.missing),
            "collisions": len(self.collisions),
        }


def _device_pid(device: Any) -> Optional[str]:
    if isinstance(device, dict):
        return device.get("pid_number")
    return getattr(device, "pid_number", None)


def parse_pid_list(raw_text: Optional[str]) -> List[str]:
    """Split pasted text into normalized PIDs, keeping order and duplicates."""
    if not raw_text or not raw_text.strip():
        return []
    tokens = (normalize(t) for t in _SEPARATORS.split(raw_text))
    return [t for t in tokens if t]


def build_pid_index(inventory: Iterable[Any]) -> tuple[Dict[str, Any], List[str]]:
    """Map normalized PID -> device. Later devices overwrite earlier ones."""
    index: Dict[str, Any] = {}
    collisions: List[str] = []
    seen_collisions: set = set()
    for device in inventory:
        pid = _device_pid(device)
        if not pid or not pid.strip():
            continue
        key = normalize(pid)
        if key in index and key not in seen_collisions:
            seen_collisions.add(key)
            collisions.append(key)
        index[key] = device
    return index, collisions


def reconcile(parsed: Sequence[str], inventory: Iterable[Any]) -> ReconciliationResult:
    result = ReconciliationResult(parsed=list(parsed))
    if not parsed:
        return result
    index, collisions = build_pid_index(inventory)
    if collisions:
        logger.warning("PID reconciliation: %d PID(s) shared by several devices: %s", len(collisions), collisions[:10])
    result.collisions = collisions
    for pid in parsed:
        device = index.get(pid)
        if device is not None:
            result.found.append(pid)
            result.found_devices.append(device)
        else:
            result.missing.append(pid)
    return result


def build_placeholder_records(missing: Sequence[str]) -> List[DeviceCreate]:
    """One placeholder payload per missing PID, same order, duplicates kept."""
    return [
        DeviceCreate(
            serial_number="",
            pid_number=pid,
            asset_id=PLACEHOLDER_ASSET_ID,
            device_type=PLACEHOLDER_DEVICE_TYPE,
            status=PLACEHOLDER_STATUS,
            to_be_retired=False,
            officer="",
            assignment_date="",
            notes="",
        )
        for pid in missing
    ]


def export_pid_list(pids: Sequence[str]) -> str:
    return "\n".join(pids)


def export_filename(kind: str, today: Optional[date] = None) -> str:
    """e.g. missing_pids_2024-07-31.txt"""
    today = today or date.today()
    return f"{kind}_pids_{today.isoformat()}.txt"

__all__ = [
    "ReconciliationResult", "parse_pid_list", "build_pid_index", "reconcile",
    "build_placeholder_records", "export_pid_list", "export_filename",
    "PLACEHOLDER_ASSET_ID", "PLACEHOLDER_DEVICE_TYPE", "PLACEHOLDER_STATUS",
]
