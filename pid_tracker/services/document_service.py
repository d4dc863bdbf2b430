"""Email / memo templates for the PID workflows.

Three fixed documents:
  - PID registration request to the records authority (single or bulk)
  - PID deactivation memo (single or bulk); the caller renders it to PDF
  - assignment notice to the officer holding the device (single or bulk)

Agency details (addresses, ORIs, signer) come from AgencyConfig so that the
templates themselves stay fixed.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from pid_tracker.config import CONFIG as _APP_CONFIG, AgencyConfig
from pid_tracker.models.device import Device
from pid_tracker.services.pid_service import PID_DOMAIN_PREFIX, derive_expected_pid

_RANK_PREFIX = re.compile(r"^(SGT|OFF|CPT|LT|CHIEF|DET)\.?\s*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


class DocumentError(ValueError):
    pass


@dataclass
class EmailDraft:
    subject: str
    body: str
    warning: str = ""
    recipient: str = ""
    filename: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def format_long_date(d: Optional[date] = None) -> str:
    """July 31, 2024"""
    d = d or date.today()
    return f"{d:%B} {d.day}, {d.year}"


def guess_officer_email(officer: Optional[str], domain: Optional[str] = None) -> str:
    """'SGT. JOHN SMITH' -> 'john.smith@<domain>'; '' when no officer is set."""
    if not officer or not officer.strip():
        return ""
    domain = domain or _APP_CONFIG.agency.email_domain
    name = _RANK_PREFIX.sub("", officer.strip()).strip()
    name = _WHITESPACE.sub(".", name).lower()
    return f"{name}@{domain}"


def _require_identifiers(device: Device):
    if not device.serial_number or not device.pid_number:
        raise DocumentError("Device information is incomplete")


def _require_devices(devices: Sequence[Device]):
    if not devices:
        raise DocumentError("No devices selected")


def _letter_head(agency: AgencyConfig, today: date) -> str:
    return (
        f"{format_long_date(today)}\n\n"
        f"{agency.authority_recipients}\n"
        f"{agency.authority_name}\n"
        f"{agency.authority_street}\n"
        f"{agency.authority_city}\n\n"
    )


def _signature(agency: AgencyConfig) -> str:
    return (
        f"If you should have any questions or concerns pertaining to this request, please contact me at {agency.phone}.\n\n"
        f"Sincerely,\n\n"
        f"{agency.signer_name}\n"
        f"{agency.signer_rank}\n"
        f"{agency.department_name}\n"
        f"{agency.department_address}\n"
        f"Office {agency.phone} / Fax {agency.fax}"
    )


# ---------------- Registration ----------------

def registration_email(device: Device, today: Optional[date] = None, agency: Optional[AgencyConfig] = None) -> EmailDraft:
    _require_identifiers(device)
    agency = agency or _APP_CONFIG.agency
    today = today or date.today()
    expected = derive_expected_pid(device.serial_number)
    body = (
        _letter_head(agency, today)
        + "Subject: Request PID registration\n\n"
        + "To Whom It May Concern,\n\n"
        + "Could you please register the below PID for Cap Win connection. It will be utilized by authorized personnel.\n\n"
        + f"Agency ORI: {agency.agency_ori}\n"
        + f"Server: {agency.server_name}\n"
        + f"Domain: {PID_DOMAIN_PREFIX}\n"
        + f"Serial Number: {device.serial_number}\n"
        + f"MDT ORI: {agency.mdt_ori}\n\n"
        + f'Note: PID Format: The PID is derived from the serial number by replacing the first 4 characters with the Domain "{PID_DOMAIN_PREFIX}" followed by the remaining serial numbers. (e.g., {device.serial_number} becomes {expected})\n\n'
        + _signature(agency)
    )
    subject = f"New Device PID Registration: {device.pid_number} / {device.serial_number}"
    return EmailDraft(subject=subject, body=body)


def bulk_registration_email(devices: Sequence[Device], today: Optional[date] = None, agency: Optional[AgencyConfig] = None) -> EmailDraft:
    _require_devices(devices)
    agency = agency or _APP_CONFIG.agency
    today = today or date.today()
    lines = [
        f"{i}. Server: {agency.server_name} | Domain: {PID_DOMAIN_PREFIX} | Serial Number: {d.serial_number} | MDT ORI: {agency.mdt_ori}\n"
        for i, d in enumerate(devices, start=1)
    ]
    example_serial = next((d.serial_number for d in devices if derive_expected_pid(d.serial_number)), "3ITTA14787")
    body = (
        _letter_head(agency, today)
        + "Subject: Request PID registration\n\n"
        + "To Whom It May Concern,\n\n"
        + "Could you please register the below PIDs for Cap Win connection. They will be utilized by authorized personnel.\n\n"
        + f"Agency ORI: {agency.agency_ori}\n\n"
        + "".join(lines) + "\n"
        + f'Note: PID Format: Each PID is derived from the serial number by replacing the first 4 characters with the Domain "{PID_DOMAIN_PREFIX}" followed by the remaining serial numbers. For example, serial number {example_serial} becomes {derive_expected_pid(example_serial)}.\n\n'
        + _signature(agency)
    )
    return EmailDraft(subject="Bulk Device PID Registration Request", body=body)


# ---------------- Deactivation ----------------

def deactivation_memo(device: Device, today: Optional[date] = None, agency: Optional[AgencyConfig] = None) -> EmailDraft:
    _require_identifiers(device)
    agency = agency or _APP_CONFIG.agency
    today = today or date.today()
    body = (
        _letter_head(agency, today)
        + "Subject: Request PID deactivation\n\n"
        + "To Whom It May Concern,\n\n"
        + "Could you please deactivate the below PID for Cap Win connection.\n\n"
        + f"Agency ORI: {agency.agency_ori}\n"
        + f"Server: {agency.server_name}\n"
        + f"Serial Number: {device.serial_number}\n"
        + f"PID: {device.pid_number}\n"
        + f"MDT ORI: {agency.mdt_ori}\n\n"
        + _signature(agency)
    )
    return EmailDraft(
        subject=f"PID Deactivation Request: {device.pid_number} / {device.serial_number}",
        body=body,
        filename=f"pid_deactivation_{device.pid_number}_{device.serial_number}.pdf",
    )


def bulk_deactivation_memo(devices: Sequence[Device], today: Optional[date] = None, agency: Optional[AgencyConfig] = None) -> EmailDraft:
    _require_devices(devices)
    agency = agency or _APP_CONFIG.agency
    today = today or date.today()
    lines = [
        f"{i}. Server: {agency.server_name} | Serial Number: {d.serial_number} | PID: {d.pid_number} | MDT ORI: {agency.mdt_ori}\n"
        for i, d in enumerate(devices, start=1)
    ]
    body = (
        _letter_head(agency, today)
        + "Subject: Request PID deactivation\n\n"
        + "To Whom It May Concern,\n\n"
        + "Could you please deactivate the below PIDs for Cap Win connection.\n\n"
        + f"Agency ORI: {agency.agency_ori}\n\n"
        + "".join(lines) + "\n"
        + _signature(agency)
    )
    return EmailDraft(
        subject="Bulk PID Deactivation Request",
        body=body,
        filename=f"bulk_pid_deactivation_{len(devices)}_devices.pdf",
    )


# ---------------- Officer notices ----------------

def officer_email(device: Device, agency: Optional[AgencyConfig] = None) -> EmailDraft:
    _require_identifiers(device)
    agency = agency or _APP_CONFIG.agency
    device_type = device.device_type or "Toughbook"
    last4 = device.serial_number[-4:]
    warning = ""
    if device.status != "Assigned":
        warning = "WARNING: This device is currently NOT marked as 'Assigned'."
    body = (
        (warning + "\n\n" if warning else "")
        + f"Your new {device_type} has been provisioned. Your system PID is: {device.pid_number}.\n"
        + "Please ensure the CAPWIN software launches correctly using this ID.\n"
        + f"If you encounter any issues, please contact the IT help desk at {agency.phone}."
    )
    return EmailDraft(
        subject=f"{device_type} Assignment Notification: Unit {last4}",
        body=body,
        warning=warning,
        recipient=guess_officer_email(device.officer, agency.email_domain),
    )


def group_by_officer_email(devices: Sequence[Device], domain: Optional[str] = None) -> Dict[str, List[Device]]:
    """Assigned devices with an officer, grouped by guessed address (first-seen order)."""
    groups: Dict[str, List[Device]] = {}
    for d in devices:
        if d.status != "Assigned" or not d.officer:
            continue
        groups.setdefault(guess_officer_email(d.officer, domain), []).append(d)
    return groups


def bulk_officer_emails(devices: Sequence[Device], agency: Optional[AgencyConfig] = None) -> List[EmailDraft]:
    """One notice per officer covering all of their selected devices."""
    _require_devices(devices)
    agency = agency or _APP_CONFIG.agency
    groups = group_by_officer_email(devices, agency.email_domain)
    if not groups:
        raise DocumentError("No assigned devices selected. Please select devices that are assigned to officers.")
    assigned_total = sum(len(v) for v in groups.values())
    warning = ""
    if assigned_total != len(devices):
        warning = f"Note: Only {assigned_total} of {len(devices)} selected devices are assigned to officers."
    drafts = []
    for recipient, officer_devices in groups.items():
        device_type = officer_devices[0].device_type or "Toughbook"
        lines = [
            f"{i}. Unit {d.serial_number[-4:]} - PID: {d.pid_number}\n"
            for i, d in enumerate(officer_devices, start=1)
        ]
        body = (
            f"Your new {device_type}(s) have been provisioned. Details below:\n\n"
            + "".join(lines) + "\n"
            + "Please ensure the CAPWIN software launches correctly using these IDs.\n"
            + f"If you encounter any issues, please contact the IT help desk at {agency.phone}."
        )
        drafts.append(EmailDraft(
            subject=f"Bulk {device_type} Assignment Notification",
            body=body,
            warning=warning,
            recipient=recipient,
        ))
    return drafts

__all__ = [
    "DocumentError", "EmailDraft", "format_long_date", "guess_officer_email",
    "registration_email", "bulk_registration_email", "deactivation_memo",
    "bulk_deactivation_memo", "officer_email", "group_by_officer_email", "bulk_officer_emails",
]
