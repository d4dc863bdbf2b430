from fastapi.testclient import TestClient

from pid_tracker.main import app
from pid_tracker.models.device import DeviceCreate

client = TestClient(app)


def _seed(store):
    a = store.add_device(DeviceCreate(serial_number="3ITTA13927", pid_number="Z100A13927", status="Assigned", officer="SGT. BILER"))
    b = store.add_device(DeviceCreate(serial_number="3ITTA14787", pid_number="Z100A14787", status="Unassigned"))
    return a, b


def test_single_registration(store):
    a, _ = _seed(store)
    r = client.post("/api/documents/registration", json={"device_ids": [a.id]})
    assert r.status_code == 200, r.text
    drafts = r.json()["drafts"]
    assert len(drafts) == 1
    assert drafts[0]["subject"] == "New Device PID Registration: Z100A13927 / 3ITTA13927"
    assert drafts[0]["relay"] is None


def test_bulk_deactivation_reports_unknown_ids(store):
    a, b = _seed(store)
    r = client.post("/api/documents/deactivation", json={"device_ids": [a.id, b.id, "gone"]})
    assert r.status_code == 200
    data = r.json()
    assert data["missing_ids"] == ["gone"]
    assert data["drafts"][0]["filename"] == "bulk_pid_deactivation_2_devices.pdf"


def test_officer_notice_without_assigned_devices(store):
    _, b = _seed(store)
    other = store.add_device(DeviceCreate(serial_number="3ITTA15555", pid_number="Z100A15555", status="Unknown"))
    r = client.post("/api/documents/officer", json={"device_ids": [b.id, other.id]})
    assert r.status_code == 422


def test_unknown_kind_and_empty_selection(store):
    assert client.post("/api/documents/memo", json={"device_ids": ["x"]}).status_code == 422
    assert client.post("/api/documents/registration", json={"device_ids": []}).status_code == 400
    assert client.post("/api/documents/registration", json={"device_ids": ["nope"]}).status_code == 404


def test_send_relays_each_draft(store, monkeypatch):
    a, _ = _seed(store)
    sent = []

    def fake_relay(draft, timeout=None):
        sent.append(draft)
        return True, "Sent (mock)", {"mock": True}

    monkeypatch.setattr("pid_tracker.services.mail_relay_service.post_draft_to_webhook", fake_relay)
    r = client.post("/api/documents/officer", json={"device_ids": [a.id], "send": True})
    assert r.status_code == 200
    draft = r.json()["drafts"][0]
    assert draft["recipient"] == "biler@cpd.md.gov"
    assert draft["relay"]["success"] is True
    assert [d.subject for d in sent] == ["Toughbook Assignment Notification: Unit 3927"]
