from fastapi.testclient import TestClient

from pid_tracker.main import app

client = TestClient(app)


def _create(**fields):
    return client.post("/api/devices", json=fields)


def test_create_uppercases_and_lists_with_derived_columns(store):
    r = _create(serial_number="3itta13927", pid_number="z100a13927", asset_id="tb-1", officer="sgt. biler", status="Assigned")
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["serial_number"] == "3ITTA13927"
    assert created["officer"] == "SGT. BILER"

    _create(serial_number="4GTTA99999", pid_number="OLD_PID_123", asset_id="TB-2")
    data = client.get("/api/devices").json()
    assert data["total"] == 2
    rows = {row["asset_id"]: row for row in data["devices"]}
    assert rows["TB-1"]["expected_pid"] == "Z100A13927"
    assert rows["TB-1"]["pid_mismatch"] is False
    assert rows["TB-2"]["pid_mismatch"] is True


def test_create_validation_error(store):
    r = _create(serial_number="", pid_number="")
    assert r.status_code == 422
    assert "Either Serial Number or PID Number is required" in r.json()["detail"]["errors"]


def test_create_duplicate_conflict(store):
    assert _create(pid_number="Z100A13927").status_code == 201
    r = _create(pid_number="z100a13927")
    assert r.status_code == 409
    assert "already exists" in r.json()["detail"]


def test_update_and_missing_device(store):
    dev_id = _create(serial_number="3ITTA13927", pid_number="Z100A13927").json()["id"]
    r = client.put(f"/api/devices/{dev_id}", json={"serial_number": "3ITTA13927", "pid_number": "Z100A13927", "status": "Retired"})
    assert r.status_code == 200
    assert r.json()["status"] == "Retired"
    assert client.get("/api/devices/does-not-exist").status_code == 404
    # retired devices are hidden unless asked for
    assert client.get("/api/devices").json()["filtered"] == 0
    assert client.get("/api/devices", params={"show_retired": True}).json()["filtered"] == 1


def test_delete_device(store):
    dev_id = _create(pid_number="Z100A1").json()["id"]
    assert client.delete(f"/api/devices/{dev_id}").status_code == 204
    assert client.delete(f"/api/devices/{dev_id}").status_code == 404


def test_list_sorted_by_asset_number(store):
    for asset in ["TB-10", "TB-2", "", "TB-1"]:
        _create(pid_number=f"Z100X{asset or 'NONE'}".replace("-", ""), asset_id=asset)
    assets = [row["asset_id"] for row in client.get("/api/devices").json()["devices"]]
    assert assets == ["TB-1", "TB-2", "TB-10", ""]
    assets_desc = [row["asset_id"] for row in client.get("/api/devices", params={"sort_order": "desc"}).json()["devices"]]
    assert assets_desc == ["TB-10", "TB-2", "TB-1", ""]


def test_search_is_uppercased(store):
    _create(serial_number="3ITTA13927", pid_number="Z100A13927", officer="SGT. BILER")
    _create(serial_number="4GTTA99999", pid_number="Z100A99999")
    data = client.get("/api/devices", params={"search": "biler"}).json()
    assert [row["pid_number"] for row in data["devices"]] == ["Z100A13927"]


def test_stats(store):
    _create(serial_number="3ITTA13927", pid_number="Z100A13927", status="Assigned")
    _create(serial_number="4GTTA99999", pid_number="OLD_PID_123", status="Unassigned")
    _create(pid_number="Z100B12345", status="Unknown")
    stats = client.get("/api/devices/stats").json()
    assert stats["total"] == 3
    assert stats["by_status"]["Assigned"] == 1
    assert stats["pid_mismatches"] == 1
    assert stats["without_serial"] == 1
    assert stats["assignment_rate"] == 33


def test_bulk_ori(store):
    ids = [_create(pid_number=f"Z100A{i}").json()["id"] for i in range(2)]
    r = client.post("/api/devices/bulk_ori", json={"device_ids": ids, "ori_number": "md0170501"})
    assert r.status_code == 200
    assert r.json() == {"updated": 2, "ori_number": "MD0170501"}
    assert client.post("/api/devices/bulk_ori", json={"device_ids": []}).status_code == 400


def test_expected_pid_preview():
    r = client.get("/api/pid/expected", params={"serial_number": "3itta13927", "pid_number": "old_pid_123"})
    assert r.status_code == 200
    assert r.json() == {
        "serial_number": "3ITTA13927",
        "expected_pid": "Z100A13927",
        "pid_number": "OLD_PID_123",
        "mismatch": True,
    }
    assert client.get("/api/pid/expected", params={"serial_number": "AB"}).json()["expected_pid"] == ""
