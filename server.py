"""
server.py: FastAPI entrypoint for the PID Tracker device inventory.

- Structured logging (`logging` module); configured here only when run directly.
- CORS configurable through environment variables.
- Routers mounted with a diagnostic log so a broken router does not take the
  whole app down.
"""

import os
import sqlite3
import time
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse
from dotenv import load_dotenv

import pid_tracker.storage.inventory_store as store_mod

logger = logging.getLogger(__name__)

# --------------------- Config ---------------------
load_dotenv()

_raw_origins = os.getenv("CORS_ALLOWED_ORIGINS", "*")
if _raw_origins.strip() == "*":
    CORS_ALLOWED_ORIGINS = ["*"]
else:
    CORS_ALLOWED_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

CORS_ALLOW_CREDENTIALS = os.getenv("CORS_ALLOW_CREDENTIALS", "1") not in ("0", "false", "False")

# --------------------- Store ---------------------
try:
    store_mod.inventory_store.ensure_db()
except sqlite3.Error as e:
    # the app still starts; device routes will report the store error
    logger.error("Could not initialise device store at %s: %s", store_mod.inventory_store.db_path, e)

# --------------------- App ---------------------
app = FastAPI(title="PID Tracker")

# Track router mount diagnostics
ROUTER_MOUNT_LOG = []

def _attempt_mount(label: str, fn):
    try:
        fn()
        ROUTER_MOUNT_LOG.append({"router": label, "status": "mounted"})
        logger.info("Router '%s' mounted successfully.", label)
    except Exception as e:
        ROUTER_MOUNT_LOG.append({"router": label, "status": "error", "error": str(e)})
        logger.error("Failed to mount router '%s': %s", label, e)

def _mount_all():
    """Mount API routers once. Imports are deferred so a failure is logged per router."""
    def _m_devices():
        from pid_tracker.api.devices import router as _r
        app.include_router(_r)

    def _m_comparison():
        from pid_tracker.api.comparison import router as _r
        app.include_router(_r)

    def _m_documents():
        from pid_tracker.api.documents import router as _r
        app.include_router(_r)

    _attempt_mount("devices", _m_devices)
    _attempt_mount("comparison", _m_comparison)
    _attempt_mount("documents", _m_documents)

_mount_all()

# --------------------- Root & Health ---------------------

@app.get("/", response_class=HTMLResponse)
def read_index():
    return HTMLResponse(
        """<!doctype html><meta charset="utf-8">
<title>PID Tracker</title>
<body style="font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;
             padding:24px;color:#1f2937;background:#f5f7fa;">
<h1>PID Tracker</h1>
<p>Device inventory API. Docs at <a href="/docs">/docs</a>.</p>
</body>"""
    )

@app.get("/healthz")
def _healthz():
    try:
        device_count = len(store_mod.inventory_store.list_devices())
        store_ok = True
    except sqlite3.Error as e:
        logger.warning("Health check: store unavailable: %s", e)
        device_count = None
        store_ok = False
    return {"ok": store_ok, "ts": int(time.time()), "devices": device_count}

# --------------------- Middleware Configuration ---------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Compress JSON responses (inventory lists can be large)
app.add_middleware(GZipMiddleware, minimum_size=500)

# --------------------- Main ---------------------
if __name__ == "__main__":
    # uvicorn configures its own loggers when started as `uvicorn server:app`
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run("server:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
