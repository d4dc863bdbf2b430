"""Device inventory router.

Import the store and service modules (not individual symbols) so tests can
monkeypatch `inventory_store.inventory_store` and have it reflected here.
"""
from __future__ import annotations
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Query

import pid_tracker.storage.inventory_store as store_mod
from pid_tracker.models.device import Device, DeviceCreate
from pid_tracker.models.requests import BulkOriRequest
from pid_tracker.models.responses import DevicesResponse, ExpectedPidResponse, BulkOriResponse
from pid_tracker.services import inventory_service
from pid_tracker.services.normalization import normalize, validate_device_data
from pid_tracker.services.pid_service import derive_expected_pid, is_pid_mismatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["devices"])

UPPERCASE_FIELDS = ("serial_number", "pid_number", "asset_id", "ori_number", "officer")


def _prepare_payload(payload: DeviceCreate) -> DeviceCreate:
    """Upper-case identifier fields and reject invalid data with 422."""
    data = payload.model_dump()
    for key in UPPERCASE_FIELDS:
        if data.get(key):
            data[key] = data[key].strip().upper()
    valid, errors = validate_device_data(data)
    if not valid:
        raise HTTPException(status_code=422, detail={"errors": errors})
    return DeviceCreate(**data)


def _store_error(e: store_mod.InventoryStoreError) -> HTTPException:
    if isinstance(e, store_mod.DeviceNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, store_mod.DuplicateDeviceError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.get("/devices", response_model=DevicesResponse)
def list_devices(
    search: Optional[str] = None,
    status: Optional[str] = Query(default="All"),
    show_retired: bool = False,
    sort_by: str = Query(default="asset_id"),
    sort_order: str = Query(default="asc", pattern="^(asc|desc)$"),
):
    devices = store_mod.inventory_store.list_devices()
    rows = inventory_service.filter_devices(
        devices, search=search, status=status, show_retired=show_retired,
        sort_by=sort_by, sort_order=sort_order,
    )
    return {
        "devices": [inventory_service.device_row(d) for d in rows],
        "total": len(devices),
        "filtered": len(rows),
    }

@router.get("/devices/stats")
def device_stats():
    return inventory_service.inventory_stats(store_mod.inventory_store.list_devices())

@router.post("/devices", response_model=Device, status_code=201)
def create_device(payload: DeviceCreate):
    data = _prepare_payload(payload)
    try:
        return store_mod.inventory_store.add_device(data)
    except store_mod.InventoryStoreError as e:
        logger.warning("Create device rejected: %s", e)
        raise _store_error(e)

@router.post("/devices/bulk_ori", response_model=BulkOriResponse)
def bulk_update_ori(payload: BulkOriRequest):
    if not payload.device_ids:
        raise HTTPException(status_code=400, detail="Please select at least one device")
    updated = store_mod.inventory_store.bulk_update_ori(payload.device_ids, payload.ori_number)
    return {"updated": updated, "ori_number": normalize(payload.ori_number)}

@router.get("/devices/{device_id}", response_model=Device)
def get_device(device_id: str):
    try:
        return store_mod.inventory_store.get_device(device_id)
    except store_mod.InventoryStoreError as e:
        raise _store_error(e)

@router.put("/devices/{device_id}", response_model=Device)
def update_device(device_id: str, payload: DeviceCreate):
    data = _prepare_payload(payload)
    try:
        return store_mod.inventory_store.update_device(device_id, data)
    except store_mod.InventoryStoreError as e:
        logger.warning("Update device %s rejected: %s", device_id, e)
        raise _store_error(e)

@router.delete("/devices/{device_id}", status_code=204)
def delete_device(device_id: str):
    try:
        store_mod.inventory_store.delete_device(device_id)
    except store_mod.InventoryStoreError as e:
        raise _store_error(e)

@router.get("/pid/expected", response_model=ExpectedPidResponse)
def expected_pid(serial_number: str = "", pid_number: Optional[str] = None):
    """Live preview while editing: derived PID for a serial, plus mismatch if a PID is given."""
    serial = serial_number.strip().upper()
    pid = pid_number.strip().upper() if pid_number else None
    return {
        "serial_number": serial,
        "expected_pid": derive_expected_pid(serial),
        "pid_number": pid,
        "mismatch": is_pid_mismatch(serial, pid),
    }
