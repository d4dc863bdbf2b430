"""SQLite device store.

Local stand-in for the managed document store: a mapping from record id to
Device with add / update / batch-create / batch-update. Serial and PID
uniqueness is checked on single add/update; bulk create writes payloads as
given, chunked into one transaction per batch.
"""
from __future__ import annotations
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pid_tracker.config import CONFIG as _APP_CONFIG
from pid_tracker.models.device import Device, DeviceCreate
from pid_tracker.services.normalization import clean_identifier, normalize

logger = logging.getLogger(__name__)

COLUMNS = [
    "id", "serial_number", "pid_number", "asset_id", "device_type", "ori_number",
    "status", "to_be_retired", "officer", "assignment_date", "notes", "updated_at",
]


class InventoryStoreError(Exception):
    pass

class DuplicateDeviceError(InventoryStoreError):
    def __init__(self, field: str, value: str, editing: bool = False):
        self.field = field
        self.value = value
        label = "serial number" if field == "serial_number" else "PID number"
        prefix = "Another device" if editing else "Device"
        super().__init__(f'{prefix} with {label} "{value}" already exists')

class DeviceNotFoundError(InventoryStoreError):
    def __init__(self, device_id: str):
        self.device_id = device_id
        super().__init__(f"Device {device_id} not found")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InventoryStore:
    def __init__(self, db_path: Optional[str] = None, chunk_size: Optional[int] = None):
        cfg = _APP_CONFIG.store
        self.db_path = db_path or cfg.db_path
        self.chunk_size = max(1, int(chunk_size or cfg.bulk_chunk_size))

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def ensure_db(self):
        conn = self._connect()
        c = conn.cursor()
        c.execute('''CREATE TABLE IF NOT EXISTS devices (
            id TEXT PRIMARY KEY,
            serial_number TEXT,
            pid_number TEXT,
            asset_id TEXT,
            device_type TEXT,
            ori_number TEXT,
            status TEXT,
            to_be_retired INTEGER,
            officer TEXT,
            assignment_date TEXT,
            notes TEXT,
            updated_at TEXT,
            seq INTEGER
        )''')
        conn.commit()
        conn.close()

    @staticmethod
    def _row_to_device(row: sqlite3.Row) -> Device:
        data = {k: row[k] for k in COLUMNS}
        data["to_be_retired"] = bool(data.get("to_be_retired"))
        for k in ("serial_number", "pid_number", "asset_id", "officer", "assignment_date", "notes"):
            data[k] = data.get(k) or ""
        return Device(**data)

    @staticmethod
    def _row_values(device_id: str, payload: DeviceCreate, updated_at: str) -> List[Any]:
        d = payload.model_dump()
        return [
            device_id, d["serial_number"], d["pid_number"], d["asset_id"], d["device_type"],
            d.get("ori_number"), d["status"], 1 if d["to_be_retired"] else 0, d["officer"],
            d["assignment_date"], d["notes"], updated_at,
        ]

    def list_devices(self) -> List[Device]:
        """Snapshot of the inventory in insertion order."""
        conn = self._connect()
        try:
            rows = conn.execute("SELECT * FROM devices ORDER BY seq, rowid").fetchall()
        finally:
            conn.close()
        return [self._row_to_device(r) for r in rows]

    def get_device(self, device_id: str) -> Device:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM devices WHERE id = ?", (device_id,)).fetchone()
        finally:
            conn.close()
        if row is None:
            raise DeviceNotFoundError(device_id)
        return self._row_to_device(row)

    def _check_duplicates(self, payload: DeviceCreate, exclude_id: Optional[str] = None):
        editing = exclude_id is not None
        existing = [d for d in self.list_devices() if d.id != exclude_id]
        for field_name in ("serial_number", "pid_number"):
            wanted = clean_identifier(getattr(payload, field_name))
            if not wanted:
                continue
            for dev in existing:
                if clean_identifier(getattr(dev, field_name)) == wanted:
                    raise DuplicateDeviceError(field_name, wanted, editing=editing)

    def _next_seq(self, conn: sqlite3.Connection) -> int:
        row = conn.execute("SELECT COALESCE(MAX(seq), 0) FROM devices").fetchone()
        return int(row[0]) + 1

    def add_device(self, payload: DeviceCreate) -> Device:
        self._check_duplicates(payload)
        device_id = uuid.uuid4().hex
        conn = self._connect()
        try:
            values = self._row_values(device_id, payload, _now_iso()) + [self._next_seq(conn)]
            conn.execute(
                f"INSERT INTO devices ({', '.join(COLUMNS)}, seq) VALUES ({', '.join('?' * (len(COLUMNS) + 1))})",
                values,
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Device added: id=%s", device_id)
        return self.get_device(device_id)

    def update_device(self, device_id: str, payload: DeviceCreate) -> Device:
        self.get_device(device_id)
        self._check_duplicates(payload, exclude_id=device_id)
        values = self._row_values(device_id, payload, _now_iso())
        assignments = ", ".join(f"{c} = ?" for c in COLUMNS[1:])
        conn = self._connect()
        try:
            conn.execute(f"UPDATE devices SET {assignments} WHERE id = ?", values[1:] + [device_id])
            conn.commit()
        finally:
            conn.close()
        logger.info("Device updated: id=%s", device_id)
        return self.get_device(device_id)

    def delete_device(self, device_id: str) -> None:
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM devices WHERE id = ?", (device_id,))
            conn.commit()
            deleted = cur.rowcount
        finally:
            conn.close()
        if not deleted:
            raise DeviceNotFoundError(device_id)

    def bulk_create(self, payloads: Sequence[DeviceCreate], chunk_size: Optional[int] = None) -> Dict[str, Any]:
        """Insert payloads in chunks, one transaction per chunk.

        A failing chunk is rolled back and reported; remaining chunks still
        run, so the result may be a partial success.
        """
        size = max(1, int(chunk_size or self.chunk_size))
        report: Dict[str, Any] = {
            "success": False,
            "requested": len(payloads),
            "created": 0,
            "chunks": 0,
            "failed_chunks": [],
            "errors": [],
            "ids": [],
        }
        if not payloads:
            report["errors"].append("no_devices")
            return report
        conn = self._connect()
        try:
            seq = self._next_seq(conn)
            for start in range(0, len(payloads), size):
                chunk = payloads[start:start + size]
                report["chunks"] += 1
                chunk_ids = []
                try:
                    with conn:
                        for payload in chunk:
                            device_id = uuid.uuid4().hex
                            conn.execute(
                                f"INSERT INTO devices ({', '.join(COLUMNS)}, seq) VALUES ({', '.join('?' * (len(COLUMNS) + 1))})",
                                self._row_values(device_id, payload, _now_iso()) + [seq],
                            )
                            seq += 1
                            chunk_ids.append(device_id)
                except sqlite3.Error as e:
                    logger.error("Bulk create chunk starting at %d failed: %s", start, e)
                    report["failed_chunks"].append({"start": start, "size": len(chunk)})
                    report["errors"].append(str(e))
                    continue
                report["created"] += len(chunk_ids)
                report["ids"].extend(chunk_ids)
        finally:
            conn.close()
        report["success"] = not report["failed_chunks"]
        logger.info("Bulk create: %d/%d device(s) in %d chunk(s)", report["created"], report["requested"], report["chunks"])
        return report

    def bulk_update_ori(self, device_ids: Iterable[str], ori_number: Optional[str]) -> int:
        ids = [i for i in device_ids if i]
        if not ids:
            return 0
        sanitized = normalize(ori_number)
        now = _now_iso()
        conn = self._connect()
        try:
            with conn:
                count = 0
                for device_id in ids:
                    cur = conn.execute(
                        "UPDATE devices SET ori_number = ?, updated_at = ? WHERE id = ?",
                        (sanitized, now, device_id),
                    )
                    count += cur.rowcount
        finally:
            conn.close()
        logger.info("Bulk ORI update: %d device(s) set to %r", count, sanitized)
        return count


inventory_store = InventoryStore()

__all__ = [
    "InventoryStore", "InventoryStoreError", "DuplicateDeviceError", "DeviceNotFoundError",
    "inventory_store", "COLUMNS",
]
