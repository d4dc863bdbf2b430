"""PID derivation rule.

A device's PID is registered with the records authority as the fixed network
domain code followed by the serial number minus its 4-character vendor/batch
prefix, e.g. serial 3ITTA13927 -> PID Z100A13927.
"""
from __future__ import annotations
from typing import Optional

PID_DOMAIN_PREFIX = "Z100"
SERIAL_VENDOR_PREFIX_LEN = 4
MIN_SERIAL_LENGTH = 5


def derive_expected_pid(serial_number: Optional[str]) -> str:
    """Return the PID expected for `serial_number`, or "" when it is too short to derive."""
    if not serial_number or len(serial_number) < MIN_SERIAL_LENGTH:
        return ""
    return PID_DOMAIN_PREFIX + serial_number[SERIAL_VENDOR_PREFIX_LEN:]


def is_pid_mismatch(serial_number: Optional[str], pid_number: Optional[str]) -> bool:
    """True when both values are present and the stored PID differs from the derived one.

    Comparison is exact; both fields are stored upper-case by convention.
    """
    if not serial_number or not pid_number:
        return False
    return derive_expected_pid(serial_number) != pid_number

__all__ = [
    "PID_DOMAIN_PREFIX", "SERIAL_VENDOR_PREFIX_LEN", "MIN_SERIAL_LENGTH",
    "derive_expected_pid", "is_pid_mismatch",
]
