"""Outbound mail relay.

Posts a generated email draft to a webhook (e.g. a Power Automate flow that
sends it from the department mailbox). Without a webhook the caller falls
back to handing the draft to the user's mail client.
"""
from __future__ import annotations
import logging
import time
from typing import Tuple
import requests
from pid_tracker.config import CONFIG as _APP_CONFIG
from pid_tracker.services.document_service import EmailDraft

logger = logging.getLogger(__name__)

MAIL_RELAY_WEBHOOK_URL = _APP_CONFIG.mail_relay.webhook_url
MAIL_RELAY_ENABLED = bool(_APP_CONFIG.mail_relay.enabled)
TRANSIENT_CODES = {429, 502, 503, 504}
MAX_ATTEMPTS = 3


def post_draft_to_webhook(draft: EmailDraft, timeout: int | None = None) -> Tuple[bool, str, dict]:
    timeout = timeout or _APP_CONFIG.mail_relay.timeout_s
    debug_payload = {
        "subject": draft.subject,
        "recipient": draft.recipient,
        "has_warning": bool(draft.warning),
        "body_chars": len(draft.body),
        "attempts": 0,
    }
    if not MAIL_RELAY_ENABLED:
        return False, "Mail relay disabled", {**debug_payload, "early_exit": True, "reason": "disabled"}
    if not MAIL_RELAY_WEBHOOK_URL:
        return False, "Webhook URL missing", {**debug_payload, "early_exit": True, "reason": "missing_webhook"}

    payload = {
        "to": draft.recipient or "",
        "subject": draft.subject,
        "body": draft.body,
        "warning": draft.warning or "",
        "attachment_name": draft.filename or "",
    }
    last_err = None
    attempt = 0
    while attempt < MAX_ATTEMPTS:
        attempt += 1
        debug_payload["attempts"] = attempt
        try:
            resp = requests.post(MAIL_RELAY_WEBHOOK_URL, json=payload, timeout=timeout)
            if resp.status_code in TRANSIENT_CODES:
                last_err = f"HTTP {resp.status_code}"
            elif not resp.ok:
                # not retryable
                logger.error("[Mail relay] rejected %s: %s", resp.status_code, resp.text[:300])
                return False, f"HTTP {resp.status_code}", debug_payload
            else:
                logger.info("[Mail relay] sent '%s'", draft.subject)
                return True, "Sent to mail relay", debug_payload
        except requests.RequestException as e:
            last_err = str(e)
        if attempt < MAX_ATTEMPTS:
            time.sleep(2 ** (attempt - 1))
    logger.error("[Mail relay] failed after %d attempts: %s", attempt, last_err)
    return False, (f"Failed after retries: {last_err}" if last_err else "Failed after retries"), debug_payload

__all__ = ["post_draft_to_webhook"]
