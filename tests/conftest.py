# Ensure tests can import the application package regardless of CWD
import os
import sys
import tempfile

import pytest

# Repo root is one directory up from the tests folder
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

# Keep the import-time store out of the working directory
os.environ.setdefault("PID_TRACKER_DB_PATH", os.path.join(tempfile.mkdtemp(prefix="pid_tracker_"), "import.db"))


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Fresh SQLite store swapped in for the module-level one."""
    import pid_tracker.storage.inventory_store as store_mod

    s = store_mod.InventoryStore(db_path=str(tmp_path / "devices.db"), chunk_size=450)
    s.ensure_db()
    monkeypatch.setattr(store_mod, "inventory_store", s)
    return s
