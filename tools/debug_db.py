#!/usr/bin/env python3
"""
Database debugging utility for the hospital data store
Run: python3 tools/debug_db.py [path/to/hospital_data.db]
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from services.hospital_store import HospitalDataStore, check_invariants


def print_section(title):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def view_all_data(store: HospitalDataStore):
    """Print every collection of the store"""
    state = store.state()

    print_section("PATIENTS")
    for p in state.patients:
        print(f"  {p.id}: {p.name} ({p.age}, {p.gender}) [{p.status}]")
        print(f"    Condition: {p.condition}, Bed: {p.bed_number or '-'}, Doctor: {p.doctor}")
        if p.vitals:
            print(f"    Vitals: HR {p.vitals.heart_rate}, BP {p.vitals.blood_pressure}, "
                  f"T {p.vitals.temperature}, SpO2 {p.vitals.oxygen_sat} "
                  f"({len(p.vitals_history)} earlier readings)")
        print()

    print_section("BEDS")
    for b in state.beds:
        occupant = f" -> {b.patient_id} since {b.assigned_date}" if b.patient_id else ""
        print(f"  {b.id}: {b.number} ({b.ward}, floor {b.floor}) {b.status}{occupant}")

    print_section("APPOINTMENTS")
    for a in state.appointments:
        print(f"  {a.id}: {a.date} {a.time} {a.patient_name} with {a.doctor} ({a.type}, {a.status})")

    print_section("ORDERS")
    for o in state.orders:
        print(f"  {o.id}: {o.test} for {o.patient_name} [{o.type}, {o.priority}, {o.status}]")

    print_section("MEDICATIONS")
    for m in state.medications:
        print(f"  {m.id}: {m.medication} {m.dosage} {m.frequency} for {m.patient_name} "
              f"[{m.status}, {len(m.administration_log)} doses logged]")

    print_section("STAFF")
    for s in state.staff:
        print(f"  {s.id}: {s.name} - {s.role}, {s.department}, {s.shift} shift [{s.status}]")

    print_section("ALERTS (newest first)")
    for a in state.alerts:
        read = " " if a.is_read else "*"
        print(f"  {read} {a.id} [{a.type}/{a.priority}] {a.title}: {a.message}")

    print_section("BILLS")
    for b in state.bills:
        print(f"  {b.id}: {b.patient_name} {b.amount:,.2f} due {b.due_date} [{b.status}]")

    print_section("INVARIANTS")
    problems = check_invariants(state)
    if problems:
        for problem in problems:
            print(f"  ✗ {problem}")
    else:
        print("  ✓ Beds and patients are consistent")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    db_path = Path(argv[0]) if argv else DB_PATH
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        return 1
    with HospitalDataStore(db_path, seed=False) as store:
        view_all_data(store)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
