"""PID comparison router.

Each request recomputes the partition from the posted text and the current
inventory snapshot; nothing is kept between calls.
"""
from __future__ import annotations
import logging
from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

import pid_tracker.storage.inventory_store as store_mod
import pid_tracker.services.reconcile_service as reconcile_service
from pid_tracker.models.requests import CompareRequest, ExportRequest
from pid_tracker.models.responses import CompareResponse, AddMissingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pid", tags=["pid-comparison"])


def _compare(text: str) -> reconcile_service.ReconciliationResult:
    parsed = reconcile_service.parse_pid_list(text)
    return reconcile_service.reconcile(parsed, store_mod.inventory_store.list_devices())


def _as_response(result: reconcile_service.ReconciliationResult) -> dict:
    return {
        "parsed": result.parsed,
        "found": result.found,
        "missing": result.missing,
        # plain dicts: this also ends up in HTTPException details
        "found_devices": [d.model_dump() if hasattr(d, "model_dump") else d for d in result.found_devices],
        "collisions": result.collisions,
        "summary": result.summary,
    }


@router.post("/compare", response_model=CompareResponse)
def compare(payload: CompareRequest):
    return _as_response(_compare(payload.text))

@router.post("/compare/export")
def export(payload: ExportRequest):
    result = _compare(payload.text)
    pids = result.found if payload.which == "found" else result.missing
    if not pids:
        raise HTTPException(status_code=404, detail=f"No {payload.which} PIDs to export")
    filename = reconcile_service.export_filename(payload.which)
    return PlainTextResponse(
        reconcile_service.export_pid_list(pids),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/compare/add_missing", response_model=AddMissingResponse)
def add_missing(payload: CompareRequest):
    """Create placeholder devices for every missing PID.

    The partition is returned whatever happens to the bulk create so the
    operator can retry without pasting the list again.
    """
    result = _compare(payload.text)
    comparison = _as_response(result)
    if not result.missing:
        raise HTTPException(status_code=400, detail={"message": "No missing PIDs to add", "comparison": comparison})
    placeholders = reconcile_service.build_placeholder_records(result.missing)
    try:
        report = store_mod.inventory_store.bulk_create(placeholders)
    except Exception as e:
        logger.error("Bulk create of %d placeholder(s) failed: %s", len(placeholders), e)
        raise HTTPException(
            status_code=502,
            detail={"message": f"Failed to add devices: {e}", "comparison": comparison},
        )
    if report.get("created", 0) == 0:
        raise HTTPException(
            status_code=502,
            detail={"message": "Failed to add devices", "bulk_create": report, "comparison": comparison},
        )
    return {
        "comparison": comparison,
        "bulk_create": report,
        "overall_success": bool(report.get("success")),
    }
