from datetime import date

from pid_tracker.models.device import Device
from pid_tracker.services.reconcile_service import (
    parse_pid_list,
    reconcile,
    build_placeholder_records,
    export_pid_list,
    export_filename,
    build_pid_index,
)


def _device(id, pid, serial=""):
    return Device(id=id, serial_number=serial, pid_number=pid, asset_id=f"TB-{id}")


def test_parse_mixed_separators_and_case():
    raw = "Z100A13927\nZ100B12345, Z100C67890;; z100d11111"
    assert parse_pid_list(raw) == ["Z100A13927", "Z100B12345", "Z100C67890", "Z100D11111"]


def test_parse_empty_and_whitespace():
    assert parse_pid_list("") == []
    assert parse_pid_list("   \n\t ") == []
    assert parse_pid_list(None) == []


def test_parse_keeps_duplicates_and_order():
    assert parse_pid_list("b\na\nb") == ["B", "A", "B"]


def test_parse_drops_tokens_that_normalize_to_empty():
    assert parse_pid_list("Z100A1,  ,;#!\n\nZ100A2") == ["Z100A1", "Z100A2"]


def test_reconcile_partitions_in_order():
    dev = _device("1", "Z100A13927", "3ITTA13927")
    result = reconcile(["Z100A13927", "Z100B12345"], [dev])
    assert result.found == ["Z100A13927"]
    assert result.missing == ["Z100B12345"]
    assert result.found_devices == [dev]
    assert result.summary == {"total": 2, "found": 1, "missing": 1, "collisions": 0}


def test_reconcile_empty_input():
    result = reconcile([], [_device("1", "Z100A13927")])
    assert result.found == [] and result.missing == [] and result.found_devices == []


def test_reconcile_normalizes_inventory_side():
    dev = _device("1", " z100a13927 ")
    result = reconcile(parse_pid_list("Z100A13927"), [dev])
    assert result.found == ["Z100A13927"]


def test_reconcile_ignores_devices_without_pid():
    devices = [_device("1", ""), _device("2", "   ")]
    result = reconcile(["Z100A13927"], devices)
    assert result.missing == ["Z100A13927"]


def test_reconcile_counts_hold_with_duplicates():
    devices = [_device("1", "A1"), _device("2", "B2")]
    parsed = ["A1", "C3", "A1", "B2", "C3"]
    result = reconcile(parsed, devices)
    assert len(result.found) + len(result.missing) == len(parsed)
    assert len(result.found_devices) == len(result.found)
    for pid, dev in zip(result.found, result.found_devices):
        assert dev.pid_number == pid
    assert result.missing == ["C3", "C3"]


def test_reconcile_duplicate_pid_last_write_wins_and_is_reported():
    first = _device("1", "Z100A13927")
    second = _device("2", "z100a13927")
    result = reconcile(["Z100A13927"], [first, second])
    assert result.found_devices == [second]
    assert result.collisions == ["Z100A13927"]


def test_reconcile_accepts_plain_dicts():
    dev = {"id": "x", "pid_number": "Z100A13927"}
    result = reconcile(["Z100A13927"], [dev])
    assert result.found_devices == [dev]


def test_placeholder_records():
    records = build_placeholder_records(["Z100B12345", "Z100B12345"])
    assert len(records) == 2
    rec = records[0]
    assert rec.pid_number == "Z100B12345"
    assert rec.serial_number == ""
    assert rec.asset_id == "UNKNOWN"
    assert rec.status == "Unknown"
    assert rec.device_type == "Toughbook"
    assert rec.to_be_retired is False
    assert rec.officer == "" and rec.notes == "" and rec.assignment_date == ""


def test_placeholder_records_follow_missing_order():
    missing = ["C", "A", "B"]
    assert [r.pid_number for r in build_placeholder_records(missing)] == missing


def test_export_helpers():
    assert export_pid_list(["A", "B"]) == "A\nB"
    assert export_filename("missing", date(2024, 7, 31)) == "missing_pids_2024-07-31.txt"


def test_build_pid_index_reports_each_collision_once_in_first_seen_order():
    devices = [_device(str(i), pid) for i, pid in enumerate(["B2", "A1", "B2", "A1", "b2", "C3", "A1"])]
    index, collisions = build_pid_index(devices)
    assert collisions == ["B2", "A1"]
    assert index["B2"].id == "4"
    assert index["A1"].id == "6"
