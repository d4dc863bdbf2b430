"""Pydantic request models for API endpoints."""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal

class CompareRequest(BaseModel):
    text: str = ""  # pasted PID list: newlines, commas or semicolons

class ExportRequest(CompareRequest):
    which: Literal["found", "missing"] = "missing"

class BulkOriRequest(BaseModel):
    device_ids: List[str] = Field(default_factory=list)
    ori_number: Optional[str] = None  # empty clears the ORI

class DocumentRequest(BaseModel):
    device_ids: List[str] = Field(default_factory=list)
    send: bool = False  # relay through the mail webhook instead of only returning the draft

__all__ = ["CompareRequest", "ExportRequest", "BulkOriRequest", "DocumentRequest"]
