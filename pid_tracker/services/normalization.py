"""Identifier normalization and device payload validation.

`normalize` is the one rule used on both sides of a PID comparison (pasted
tokens and inventory PIDs); keep them on the same function.
"""
from __future__ import annotations
import re
from typing import Any, List, Mapping, Optional, Tuple

_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")
_IDENTIFIER_FORMAT = re.compile(r"^[A-Z0-9_-]{3,50}$", re.IGNORECASE)
MAX_NOTES_LENGTH = 1000


def normalize(token: Optional[str]) -> str:
    if not token:
        return ""
    return _DISALLOWED.sub("", token.strip()).upper()


def clean_identifier(value: Optional[str]) -> str:
    """Upper-case + trim, the form used for duplicate checks in the store."""
    return (value or "").strip().upper()


def validate_device_data(data: Mapping[str, Any]) -> Tuple[bool, List[str]]:
    errors: List[str] = []
    serial = (data.get("serial_number") or "").strip()
    pid = (data.get("pid_number") or "").strip()

    if not serial and not pid:
        errors.append("Either Serial Number or PID Number is required")
    if serial and not _IDENTIFIER_FORMAT.match(serial):
        errors.append("Serial number contains invalid characters")
    if pid and not _IDENTIFIER_FORMAT.match(pid):
        errors.append("PID number contains invalid characters")
    notes = data.get("notes") or ""
    if len(notes) > MAX_NOTES_LENGTH:
        errors.append(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
    return (not errors), errors

__all__ = ["normalize", "clean_identifier", "validate_device_data", "MAX_NOTES_LENGTH"]
