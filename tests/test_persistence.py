from __future__ import annotations

import json
import sqlite3

import pytest

from core.config import STORAGE_KEY
from core.database import DatabaseConnection, get_meta
from core.exceptions import InvariantError
from services.hospital_store import HospitalDataStore


def test_new_store_is_seeded(store, db_path):
    assert len(store.patients) == 2
    assert len(store.beds) == 6
    assert len(store.appointments) == 2
    assert len(store.orders) == 2
    assert len(store.medications) == 1
    assert len(store.staff) == 2
    assert len(store.alerts) == 2
    assert len(store.bills) == 1

    conn = DatabaseConnection.get_connection(db_path)
    try:
        assert get_meta(conn, STORAGE_KEY) is not None
        assert conn.execute("SELECT COUNT(*) FROM beds").fetchone()[0] == 6
    finally:
        conn.close()


def test_reopening_reproduces_the_state(store, db_path):
    patient_id = store.add_patient({"name": "Kim Park", "age": 51, "allergies": ["Iodine"]})
    store.assign_bed("B004", patient_id)
    store.update_patient_vitals(patient_id, {"heart_rate": 88, "blood_pressure": "125/85",
                                             "temperature": 37.1, "oxygen_sat": 97,
                                             "timestamp": "2024-01-16T07:00:00"})
    store.discharge_patient("P002")
    store.administer_medication("M001", "Nurse X", notes="Morning dose")
    store.delete_order("O002")
    store.add_alert({"type": "warning", "title": "Low stock", "message": "Saline below par"})
    expected = store.snapshot()
    store.close()

    with HospitalDataStore(db_path) as reopened:
        assert reopened.snapshot() == expected


def test_emptied_store_is_not_reseeded(empty_store, tmp_path):
    assert empty_store.patients == []
    empty_store.close()

    with HospitalDataStore(tmp_path / "empty.db") as reopened:
        assert reopened.patients == []
        assert reopened.beds == []


def test_json_round_trip(store, empty_store):
    store.assign_bed("B002", "P002")
    text = store.dump_json()
    assert set(json.loads(text)) == {"patients", "beds", "appointments", "orders",
                                     "medications", "staff", "alerts", "bills"}

    empty_store.load_json(text)

    assert empty_store.snapshot() == store.snapshot()
    assert [a.id for a in empty_store.alerts] == ["AL001", "AL002"]


def test_loaded_snapshot_persists(empty_store, store, tmp_path):
    empty_store.load_snapshot(store.snapshot())
    empty_store.close()

    with HospitalDataStore(tmp_path / "empty.db") as reopened:
        assert reopened.snapshot() == store.snapshot()


def test_inconsistent_snapshot_is_rejected(store, empty_store):
    snapshot = store.snapshot()
    snapshot["beds"][1]["status"] = "occupied"  # B002 with no patient

    with pytest.raises(InvariantError):
        empty_store.load_snapshot(snapshot)
    assert empty_store.beds == []


def test_failed_write_leaves_memory_unchanged(store):
    before = store.snapshot()
    store.close()

    with pytest.raises(sqlite3.Error):
        store.add_staff({"name": "Too Late"})
    with pytest.raises(sqlite3.Error):
        store.assign_bed("B002", "P001")

    assert store.snapshot() == before


def test_snapshot_with_discharged_occupant_is_rejected(store, empty_store):
    snapshot = store.snapshot()
    snapshot["patients"][0]["status"] = "discharged"  # P001 still holds B001

    with pytest.raises(InvariantError):
        empty_store.load_snapshot(snapshot)
    assert empty_store.patients == []
