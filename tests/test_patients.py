from __future__ import annotations

from core.models import VitalsReading
from services.hospital_store import HospitalDataStore, check_invariants


NEW_PATIENT = {
    "name": "Alice Brown",
    "age": 60,
    "gender": "Female",
    "condition": "Fair",
    "bed_number": "ICU-02",
    "admission_date": "2024-01-16",
    "doctor": "Dr. Sarah Johnson",
    "diagnosis": "Pneumonia",
    "allergies": ["Sulfa"],
    "contact_info": {"phone": "+1-555-0199", "email": "alice@email.com", "emergency_contact": "Tom Brown"},
}


def test_add_patient_appends_with_fresh_id(store, assert_consistent):
    patient_id = store.add_patient(NEW_PATIENT)

    assert patient_id.startswith("P")
    patients = store.patients
    assert len(patients) == 3
    added = patients[-1]
    assert added.id == patient_id
    assert added.name == "Alice Brown"
    assert added.contact_info.emergency_contact == "Tom Brown"
    assert added.status == "active"
    # only assign_bed sets the bed number
    assert added.bed_number == ""
    assert_consistent(store)


def test_update_patient_merges_fields(store):
    assert store.update_patient("P002", condition="Good", diagnosis="Recovering") is True

    patient = store.get_patient("P002")
    assert patient.condition == "Good"
    assert patient.diagnosis == "Recovering"
    assert patient.name == "Jane Smith"


def test_update_patient_cannot_touch_bed_number(store, assert_consistent):
    assert store.update_patient("P001", bed_number="GA-104", name="John Q. Doe") is True

    patient = store.get_patient("P001")
    assert patient.name == "John Q. Doe"
    assert patient.bed_number == "ICU-01"
    assert_consistent(store)


def test_update_unknown_patient_is_a_noop(store):
    before = store.snapshot()

    assert store.update_patient("P999", name="Nobody") is False
    assert store.snapshot() == before


def test_delete_patient_frees_their_bed(store, assert_consistent):
    assert store.delete_patient("P001") is True

    assert store.get_patient("P001") is None
    bed = store.get_bed("B001")
    assert bed.status == "available"
    assert bed.patient_id is None
    assert bed.assigned_date is None
    assert_consistent(store)


def test_delete_patient_keeps_weak_references(store):
    store.delete_patient("P001")

    assert [o.id for o in store.orders_for_patient("P001")] == ["O001"]
    assert [b.id for b in store.bills_for_patient("P001")] == ["B001"]


def test_discharge_patient_sends_bed_to_cleaning(store, assert_consistent):
    assert store.discharge_patient("P001") is True

    patient = store.get_patient("P001")
    assert patient is not None
    assert patient.status == "discharged"
    assert patient.bed_number == ""
    bed = store.get_bed("B001")
    assert bed.status == "cleaning"
    assert bed.patient_id is None
    assert [p.id for p in store.active_patients()] == ["P002"]
    assert_consistent(store)


def test_discharge_unknown_patient_returns_false(store):
    assert store.discharge_patient("missing") is False
    assert store.get_bed("B001").status == "occupied"


def test_vitals_history_keeps_previous_reading(empty_store):
    patient_id = empty_store.add_patient({"name": "Vic Tall"})
    v1 = VitalsReading(heart_rate=80, blood_pressure="120/80", temperature=36.9, oxygen_sat=98,
                       timestamp="2024-01-16T08:00:00")
    v2 = VitalsReading(heart_rate=95, blood_pressure="130/85", temperature=37.5, oxygen_sat=96,
                       timestamp="2024-01-16T12:00:00")

    assert empty_store.update_patient_vitals(patient_id, v1) is True
    assert empty_store.get_patient(patient_id).vitals_history == []

    empty_store.update_patient_vitals(patient_id, v2)

    patient = empty_store.get_patient(patient_id)
    assert patient.vitals == v2
    assert patient.vitals_history[0] == v1
    assert len(patient.vitals_history) == 1
    assert patient.last_updated != ""


def test_vitals_accept_plain_dicts(store):
    store.update_patient_vitals("P002", {"heart_rate": 70, "blood_pressure": "118/76",
                                         "temperature": 36.6, "oxygen_sat": 99,
                                         "timestamp": "2024-01-16T09:00:00"})

    patient = store.get_patient("P002")
    assert patient.vitals.heart_rate == 70
    # seeded current reading moved to the front of the history
    assert patient.vitals_history[0].heart_rate == 75
    assert len(patient.vitals_history) == 2


def test_update_patient_cannot_overwrite_vitals(store):
    store.update_patient("P001", vitals={"heart_rate": 1}, vitals_history=[])

    patient = store.get_patient("P001")
    assert patient.vitals.heart_rate == 120
    assert len(patient.vitals_history) == 2


def test_update_patient_to_discharged_frees_the_bed(store, assert_consistent):
    assert store.update_patient("P001", status="discharged", condition="Stable") is True

    patient = store.get_patient("P001")
    assert patient.status == "discharged"
    assert patient.condition == "Stable"
    assert patient.bed_number == ""
    bed = store.get_bed("B001")
    assert bed.status == "cleaning"
    assert bed.patient_id is None

    analytics = store.get_analytics()
    assert analytics.total_patients == 1
    assert analytics.occupied_beds == 1
    assert_consistent(store)


def test_update_patient_to_discharged_is_persisted(store, db_path):
    store.update_patient("P002", status="discharged")
    store.close()

    with HospitalDataStore(db_path) as reopened:
        assert reopened.get_patient("P002").status == "discharged"
        assert reopened.get_bed("B003").status == "cleaning"
        assert check_invariants(reopened.state()) == []
