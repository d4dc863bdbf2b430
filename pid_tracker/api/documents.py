"""Document (email / memo) generation router."""
from __future__ import annotations
import logging
from typing import List, Literal
from fastapi import APIRouter, HTTPException

import pid_tracker.storage.inventory_store as store_mod
import pid_tracker.services.document_service as document_service
import pid_tracker.services.mail_relay_service as mail_relay_service
from pid_tracker.models.requests import DocumentRequest
from pid_tracker.models.responses import DocumentsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])

DocumentKind = Literal["registration", "deactivation", "officer"]


def _build_drafts(kind: str, devices) -> List[document_service.EmailDraft]:
    single = len(devices) == 1
    if kind == "registration":
        return [document_service.registration_email(devices[0]) if single else document_service.bulk_registration_email(devices)]
    if kind == "deactivation":
        return [document_service.deactivation_memo(devices[0]) if single else document_service.bulk_deactivation_memo(devices)]
    if single:
        return [document_service.officer_email(devices[0])]
    return document_service.bulk_officer_emails(devices)


@router.post("/{kind}", response_model=DocumentsResponse)
def generate_documents(kind: DocumentKind, payload: DocumentRequest):
    if not payload.device_ids:
        raise HTTPException(status_code=400, detail="Please select at least one device")
    devices = []
    missing_ids = []
    for device_id in payload.device_ids:
        try:
            devices.append(store_mod.inventory_store.get_device(device_id))
        except store_mod.DeviceNotFoundError:
            missing_ids.append(device_id)
    if not devices:
        raise HTTPException(status_code=404, detail="No valid devices selected")

    try:
        drafts = _build_drafts(kind, devices)
    except document_service.DocumentError as e:
        logger.info("Document '%s' not generated: %s", kind, e)
        raise HTTPException(status_code=422, detail=str(e))

    out = []
    for draft in drafts:
        item = draft.to_dict()
        if payload.send:
            ok, msg, dbg = mail_relay_service.post_draft_to_webhook(draft)
            item["relay"] = {"success": ok, "message": msg, "debug": dbg}
        out.append(item)
    return {"kind": kind, "drafts": out, "missing_ids": missing_ids}
