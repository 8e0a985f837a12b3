from __future__ import annotations

from datetime import date

import pytest

from core.exceptions import InvariantError


def test_assign_then_release_restores_available_bed(store, assert_consistent):
    patient_id = store.add_patient({"name": "Walk In", "condition": "Good"})

    assert store.assign_bed("B002", patient_id) is True
    bed = store.get_bed("B002")
    assert bed.status == "occupied"
    assert bed.patient_id == patient_id
    assert bed.assigned_date == date.today().isoformat()
    assert store.get_patient(patient_id).bed_number == "ICU-02"

    assert store.release_bed("B002") is True
    bed = store.get_bed("B002")
    assert bed.status == "available"
    assert bed.patient_id is None
    assert bed.assigned_date is None
    assert store.get_patient(patient_id).bed_number == ""
    assert_consistent(store)


def test_assign_ignores_previous_bed_status(store):
    patient_id = store.add_patient({"name": "Walk In"})

    # B006 is under maintenance; callers decide which beds to offer
    assert store.assign_bed("B006", patient_id) is True
    assert store.get_bed("B006").status == "occupied"


def test_assign_moves_patient_out_of_previous_bed(store, assert_consistent):
    store.assign_bed("B002", "P001")

    old = store.get_bed("B001")
    assert old.status == "available"
    assert old.patient_id is None
    assert store.find_bed_for_patient("P001").id == "B002"
    assert_consistent(store)


def test_assign_over_occupant_clears_their_bed_number(store, assert_consistent):
    store.assign_bed("B003", "P001")

    assert store.get_bed("B003").patient_id == "P001"
    assert store.get_patient("P001").bed_number == "GA-101"
    assert store.get_patient("P002").bed_number == ""
    assert store.find_bed_for_patient("P002") is None
    assert_consistent(store)


@pytest.mark.parametrize("bed_id, patient_id", [("B999", "P001"), ("B002", "P999")])
def test_assign_with_unknown_ids_changes_nothing(store, bed_id, patient_id):
    before = store.snapshot()

    assert store.assign_bed(bed_id, patient_id) is False
    assert store.snapshot() == before


def test_transfer_patient(store, assert_consistent):
    assert store.transfer_patient("P001", "B004") is True

    assert store.get_bed("B001").status == "available"
    new_bed = store.get_bed("B004")
    assert new_bed.status == "occupied"
    assert new_bed.patient_id == "P001"
    assert store.get_patient("P001").bed_number == "GA-102"
    assert_consistent(store)


def test_transfer_without_current_bed_is_a_plain_assign(store, assert_consistent):
    store.discharge_patient("P002")

    store.transfer_patient("P002", "B002")

    assert store.get_bed("B002").patient_id == "P002"
    assert store.get_patient("P002").status == "active"
    # B003 went to cleaning on discharge and stays there
    assert store.get_bed("B003").status == "cleaning"
    assert_consistent(store)


def test_update_bed_status_on_empty_bed(store):
    assert store.update_bed_status("B002", "maintenance") is True
    assert store.get_bed("B002").status == "maintenance"


def test_update_bed_status_releases_occupant(store, assert_consistent):
    store.update_bed_status("B001", "maintenance")

    bed = store.get_bed("B001")
    assert bed.status == "maintenance"
    assert bed.patient_id is None
    assert store.get_patient("P001").bed_number == ""
    assert_consistent(store)


def test_update_bed_status_refuses_occupied_without_patient(store):
    with pytest.raises(InvariantError):
        store.update_bed_status("B002", "occupied")
    assert store.get_bed("B002").status == "available"


def test_release_unknown_bed_returns_false(store):
    assert store.release_bed("nope") is False
    assert store.update_bed_status("nope", "cleaning") is False


def test_invariant_holds_across_operation_sequence(store, assert_consistent):
    p3 = store.add_patient({"name": "Third"})
    p4 = store.add_patient({"name": "Fourth"})

    steps = [
        lambda: store.assign_bed("B002", p3),
        lambda: store.assign_bed("B004", p4),
        lambda: store.transfer_patient(p3, "B005"),
        lambda: store.discharge_patient("P001"),
        lambda: store.assign_bed("B001", p4),
        lambda: store.release_bed("B003"),
        lambda: store.delete_patient(p4),
        lambda: store.update_bed_status("B005", "cleaning"),
        lambda: store.assign_bed("B002", "P002"),
    ]
    for step in steps:
        step()
        assert_consistent(store)
        for bed in store.beds:
            assert (bed.status == "occupied") == (bed.patient_id is not None)


def test_bed_status_counts_and_available_beds(store):
    assert store.bed_status_counts() == {"available": 2, "occupied": 2, "maintenance": 1, "cleaning": 1}
    assert [b.id for b in store.available_beds()] == ["B002", "B004"]
    assert [b.id for b in store.available_beds(ward="ICU")] == ["B002"]
