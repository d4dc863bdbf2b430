"""Application entrypoint.

Re-exports the FastAPI app built in `server.py` so either works:
  uvicorn pid_tracker.main:app --reload
  python server.py
"""
from fastapi import FastAPI
from server import app as _server_app  # routers are mounted there

app: FastAPI = _server_app

__all__ = ["app"]
