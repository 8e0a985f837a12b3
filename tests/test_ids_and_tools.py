from __future__ import annotations

from core.config import validate_config
from services.hospital_store import HospitalDataStore, generate_id
from tools.debug_db import main


def test_generate_id_has_prefix_and_never_repeats():
    ids = {generate_id("AL") for _ in range(500)}

    assert len(ids) == 500
    assert all(i.startswith("AL") for i in ids)


def test_new_ids_do_not_collide_with_existing_records(store):
    new_ids = {store.add_staff({"name": f"Temp {n}"}) for n in range(20)}

    assert len(new_ids) == 20
    assert new_ids.isdisjoint({"S001", "S002"})


def test_default_config_is_valid():
    ok, message = validate_config()
    assert ok, message


def test_debug_tool_prints_collections(store, db_path, capsys):
    store.discharge_patient("P002")
    store.close()

    assert main([str(db_path)]) == 0

    out = capsys.readouterr().out
    assert "PATIENTS" in out
    assert "P002: Jane Smith (32, Female) [discharged]" in out
    assert "B003: GA-101 (General A, floor 1) cleaning" in out
    assert "Beds and patients are consistent" in out


def test_debug_tool_reports_missing_database(tmp_path, capsys):
    assert main([str(tmp_path / "nowhere.db")]) == 1
    assert "Database not found" in capsys.readouterr().out


def test_debug_tool_does_not_seed_a_blank_database(tmp_path, capsys):
    blank = tmp_path / "blank.db"
    blank.touch()

    assert main([str(blank)]) == 0
    assert "John Doe" not in capsys.readouterr().out

    with HospitalDataStore(blank) as reopened:
        assert reopened.patients == []
        assert reopened.beds == []
