"""Centralized configuration loader.

Read environment variables (optionally from a local .env) and expose a
frozen Config object. Modules import `CONFIG` instead of calling os.getenv
directly so tests can build their own config with `load_config()`.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class StoreConfig:
    db_path: str
    bulk_chunk_size: int

@dataclass(frozen=True)
class AgencyConfig:
    authority_recipients: str
    authority_name: str
    authority_street: str
    authority_city: str
    agency_ori: str
    mdt_ori: str
    server_name: str
    signer_name: str
    signer_rank: str
    department_name: str
    department_address: str
    phone: str
    fax: str
    email_domain: str

@dataclass(frozen=True)
class MailRelayConfig:
    enabled: bool
    webhook_url: str | None
    timeout_s: int

@dataclass(frozen=True)
class AppConfig:
    store: StoreConfig
    agency: AgencyConfig
    mail_relay: MailRelayConfig


def _bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val not in ("0", "false", "False")

def load_config() -> AppConfig:
    store = StoreConfig(
        db_path=os.getenv("PID_TRACKER_DB_PATH", "device_inventory.db"),
        # managed stores cap a write batch at 500 operations
        bulk_chunk_size=max(1, int(os.getenv("PID_TRACKER_BULK_CHUNK_SIZE", "450") or 450)),
    )
    agency = AgencyConfig(
        authority_recipients=os.getenv("AGENCY_AUTHORITY_RECIPIENTS", "CSO Dean Rohan, CSO Diana Riley"),
        authority_name=os.getenv("AGENCY_AUTHORITY_NAME", "Maryland State Police"),
        authority_street=os.getenv("AGENCY_AUTHORITY_STREET", "1201 Reisterstown Road"),
        authority_city=os.getenv("AGENCY_AUTHORITY_CITY", "Pikesville, MD 21208"),
        agency_ori=os.getenv("AGENCY_ORI", "MD0170500"),
        mdt_ori=os.getenv("AGENCY_MDT_ORI", "MD0170501"),
        server_name=os.getenv("AGENCY_SERVER_NAME", "CAPWIN1"),
        signer_name=os.getenv("AGENCY_SIGNER_NAME", "Orhan Biler"),
        signer_rank=os.getenv("AGENCY_SIGNER_RANK", "Sergeant"),
        department_name=os.getenv("AGENCY_DEPARTMENT_NAME", "Cheverly Police Department"),
        department_address=os.getenv("AGENCY_DEPARTMENT_ADDRESS", "6401 Forest Road |Cheverly, MD 20785"),
        phone=os.getenv("AGENCY_PHONE", "301-341-1055"),
        fax=os.getenv("AGENCY_FAX", "301-341-0176"),
        email_domain=(os.getenv("AGENCY_EMAIL_DOMAIN", "cpd.md.gov").strip().lower()),
    )
    relay = MailRelayConfig(
        enabled=_bool(os.getenv("MAIL_RELAY_ENABLED", "1"), True),
        webhook_url=os.getenv("MAIL_RELAY_WEBHOOK_URL"),
        timeout_s=int(os.getenv("MAIL_RELAY_TIMEOUT_S", "30") or 30),
    )
    return AppConfig(store=store, agency=agency, mail_relay=relay)

CONFIG = load_config()
