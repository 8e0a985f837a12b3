# hospital_store.py
# The hospital data store: owns every entity collection and the bed/patient invariants
import copy
import json
import logging
import random
import string
import time
from dataclasses import dataclass, field, fields, is_dataclass, asdict, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from core.config import STORAGE_KEY, STRICT_IDS, RetentionPolicy
from core.database import (
    DatabaseConnection, init_database, get_meta, set_meta,
    load_all, insert_record, update_record, delete_records, replace_all,
)
from core.exceptions import InvariantError, NotFoundError
from core.models import (
    ENTITY_TYPES, HospitalState, Patient, Bed, Appointment, Order, Medication,
    AdministrationEntry, Staff, Alert, Bill, VitalsReading,
)
from core.seed import generate_sample_data
from services.analytics import HospitalAnalytics, compute_analytics, bed_status_counts

logger = logging.getLogger(__name__)

EntityData = Union[Mapping[str, Any], Any]

ID_PREFIXES = {
    "patients": "P",
    "beds": "B",
    "appointments": "A",
    "orders": "O",
    "medications": "M",
    "staff": "S",
    "alerts": "AL",
    "bills": "B",
}

# Patient fields only the bed and vitals operations may write
PATIENT_MANAGED_FIELDS = frozenset({"bed_number", "vitals", "vitals_history"})

_ID_ALPHABET = string.digits + string.ascii_lowercase
_issued_ids: Set[str] = set()


def generate_id(prefix: str, taken: Iterable[str] = ()) -> str:
    """Prefix + millisecond timestamp + 9 random base-36 chars, never reissued in this process"""
    taken = set(taken)
    while True:
        suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
        new_id = f"{prefix}{int(time.time() * 1000)}{suffix}"
        if new_id not in _issued_ids and new_id not in taken:
            _issued_ids.add(new_id)
            return new_id


def check_invariants(state: HospitalState) -> List[str]:
    """Return a description of every bed/patient inconsistency in state (empty when consistent)"""
    problems = []
    patients = {p.id: p for p in state.patients}
    beds_by_patient: Dict[str, List[Bed]] = {}

    for bed in state.beds:
        if (bed.status == "occupied") != (bed.patient_id is not None):
            problems.append(f"bed {bed.id} has status {bed.status!r} and patient {bed.patient_id!r}")
        if bed.patient_id is None:
            continue
        beds_by_patient.setdefault(bed.patient_id, []).append(bed)
        patient = patients.get(bed.patient_id)
        if patient is None:
            problems.append(f"bed {bed.id} references unknown patient {bed.patient_id!r}")
        elif patient.bed_number != bed.number:
            problems.append(
                f"patient {patient.id} has bed number {patient.bed_number!r}, bed {bed.id} is {bed.number!r}"
            )
        if patient is not None and patient.status == "discharged":
            problems.append(f"bed {bed.id} is held by discharged patient {patient.id}")

    for patient_id, beds in beds_by_patient.items():
        if len(beds) > 1:
            problems.append(f"patient {patient_id} is referenced by beds {[b.id for b in beds]}")

    for patient in state.patients:
        if patient.bed_number and patient.id not in beds_by_patient:
            problems.append(f"patient {patient.id} has bed number {patient.bed_number!r} but no bed")
    return problems


def _as_dict(data: EntityData) -> Dict[str, Any]:
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    return dict(data)


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class _Writes:
    """Row writes gathered by one operation, applied in a single transaction"""
    inserts: List[Tuple[str, Any, bool]] = field(default_factory=list)
    updates: List[Tuple[str, Any]] = field(default_factory=list)
    deletes: List[Tuple[str, str]] = field(default_factory=list)

    def insert(self, table: str, entity: Any, prepend: bool = False) -> None:
        self.inserts.append((table, entity, prepend))

    def update(self, table: str, entity: Any) -> None:
        self.updates.append((table, entity))

    def delete(self, table: str, record_id: str) -> None:
        self.deletes.append((table, record_id))


class HospitalDataStore:
    """
    Single owner of the patients, beds, appointments, orders, medications,
    staff, alerts and bills collections.

    Every mutation computes the new collections, writes the affected rows in
    one SQLite transaction and only then swaps the in-memory state, so a
    failed write leaves both storage and memory as they were. Read accessors
    hand out deep copies; the bed/patient relationship can only change
    through the bed and patient operations below.

    Mutations on an unknown id return False (or raise NotFoundError when the
    store is strict).
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        retention: Optional[RetentionPolicy] = None,
        strict: Optional[bool] = None,
        seed: bool = True,
    ):
        self.retention = retention or RetentionPolicy.from_env()
        self.strict = STRICT_IDS if strict is None else strict
        self._conn = DatabaseConnection.get_connection(db_path)
        init_database(self._conn)
        self._version = 0
        self._analytics_cache: Optional[Tuple[int, date, HospitalAnalytics]] = None

        if get_meta(self._conn, STORAGE_KEY) is None:
            state = generate_sample_data() if seed else HospitalState()
            with self._conn:
                replace_all(self._conn, state.to_dict())
                set_meta(self._conn, STORAGE_KEY, _now())
            logger.info("Initialized store with %s",
                        "sample data" if seed else "empty collections")
        else:
            state = HospitalState.from_dict(load_all(self._conn))
            for problem in check_invariants(state):
                logger.warning("Loaded store is inconsistent: %s", problem)
        self._state = state

    # ========================================
    # Lifecycle
    # ========================================

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "HospitalDataStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def version(self) -> int:
        """Bumped by every successful mutation"""
        return self._version

    def _commit(self, state: HospitalState, writes: _Writes) -> None:
        with self._conn:
            for table, record_id in writes.deletes:
                delete_records(self._conn, table, [record_id])
            for table, entity, prepend in writes.inserts:
                insert_record(self._conn, table, entity.to_dict(), prepend=prepend)
            for table, entity in writes.updates:
                update_record(self._conn, table, entity.to_dict())
            set_meta(self._conn, STORAGE_KEY, _now())
        self._state = state
        self._version += 1

    def _missing(self, collection: str, record_id: str) -> bool:
        if self.strict:
            raise NotFoundError(collection, record_id)
        logger.warning("%s: ignoring operation on unknown id %s", collection, record_id)
        return False

    @staticmethod
    def _index(items: List[Any], record_id: str) -> Optional[int]:
        for i, item in enumerate(items):
            if item.id == record_id:
                return i
        return None

    # ========================================
    # Read Accessors
    # ========================================

    @property
    def patients(self) -> List[Patient]:
        return copy.deepcopy(self._state.patients)

    @property
    def beds(self) -> List[Bed]:
        return copy.deepcopy(self._state.beds)

    @property
    def appointments(self) -> List[Appointment]:
        return copy.deepcopy(self._state.appointments)

    @property
    def orders(self) -> List[Order]:
        return copy.deepcopy(self._state.orders)

    @property
    def medications(self) -> List[Medication]:
        return copy.deepcopy(self._state.medications)

    @property
    def staff(self) -> List[Staff]:
        return copy.deepcopy(self._state.staff)

    @property
    def alerts(self) -> List[Alert]:
        return copy.deepcopy(self._state.alerts)

    @property
    def bills(self) -> List[Bill]:
        return copy.deepcopy(self._state.bills)

    def state(self) -> HospitalState:
        return copy.deepcopy(self._state)

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        idx = self._index(self._state.patients, patient_id)
        return copy.deepcopy(self._state.patients[idx]) if idx is not None else None

    def get_bed(self, bed_id: str) -> Optional[Bed]:
        idx = self._index(self._state.beds, bed_id)
        return copy.deepcopy(self._state.beds[idx]) if idx is not None else None

    def find_bed_for_patient(self, patient_id: str) -> Optional[Bed]:
        for bed in self._state.beds:
            if bed.patient_id == patient_id:
                return copy.deepcopy(bed)
        return None

    def available_beds(self, ward: Optional[str] = None) -> List[Bed]:
        return [copy.deepcopy(b) for b in self._state.beds
                if b.status == "available" and (ward is None or b.ward == ward)]

    def active_patients(self) -> List[Patient]:
        return [copy.deepcopy(p) for p in self._state.patients if p.status == "active"]

    def critical_patients(self) -> List[Patient]:
        return [p for p in self.active_patients() if p.condition == "Critical"]

    def unread_alerts(self) -> List[Alert]:
        return [copy.deepcopy(a) for a in self._state.alerts if not a.is_read]

    def orders_for_patient(self, patient_id: str) -> List[Order]:
        return [copy.deepcopy(o) for o in self._state.orders if o.patient_id == patient_id]

    def medications_for_patient(self, patient_id: str) -> List[Medication]:
        return [copy.deepcopy(m) for m in self._state.medications if m.patient_id == patient_id]

    def bills_for_patient(self, patient_id: str) -> List[Bill]:
        return [copy.deepcopy(b) for b in self._state.bills if b.patient_id == patient_id]

    def bed_status_counts(self) -> Dict[str, int]:
        return bed_status_counts(self._state)

    # ========================================
    # Generic Collection Operations
    # ========================================

    def _add(self, collection: str, data: EntityData, **overrides) -> str:
        items = list(getattr(self._state, collection))
        new_id = generate_id(ID_PREFIXES[collection], (item.id for item in items))
        record = _as_dict(data)
        record.update(overrides)
        record["id"] = new_id
        entity = ENTITY_TYPES[collection].from_dict(record)

        writes = _Writes()
        if collection == "alerts":
            items.insert(0, entity)
            writes.insert(collection, entity, prepend=True)
            kept = RetentionPolicy.cap(items, self.retention.alerts)
            for evicted in items[len(kept):]:
                writes.delete(collection, evicted.id)
            items = kept
        else:
            items.append(entity)
            writes.insert(collection, entity)

        self._commit(replace(self._state, **{collection: items}), writes)
        logger.debug("%s: added %s", collection, new_id)
        return new_id

    @staticmethod
    def _merged(collection: str, entity: Any, updates: Mapping[str, Any],
                managed: Iterable[str] = ()) -> Any:
        entity_type = ENTITY_TYPES[collection]
        valid_fields = {f.name for f in fields(entity_type)} - {"id"} - set(managed)
        dropped = sorted(set(updates) - valid_fields)
        if dropped:
            logger.warning("%s: not updating fields %s of %s", collection, dropped, entity.id)

        merged = entity.to_dict()
        merged.update({k: v for k, v in updates.items() if k in valid_fields})
        return entity_type.from_dict(merged)

    def _update(self, collection: str, record_id: str, updates: Dict[str, Any],
                managed: Iterable[str] = ()) -> bool:
        items = list(getattr(self._state, collection))
        idx = self._index(items, record_id)
        if idx is None:
            return self._missing(collection, record_id)

        items[idx] = self._merged(collection, items[idx], updates, managed)

        writes = _Writes()
        writes.update(collection, items[idx])
        self._commit(replace(self._state, **{collection: items}), writes)
        logger.debug("%s: updated %s", collection, record_id)
        return True

    def _delete(self, collection: str, record_id: str) -> bool:
        items = getattr(self._state, collection)
        if self._index(items, record_id) is None:
            return self._missing(collection, record_id)

        writes = _Writes()
        writes.delete(collection, record_id)
        remaining = [item for item in items if item.id != record_id]
        self._commit(replace(self._state, **{collection: remaining}), writes)
        logger.debug("%s: deleted %s", collection, record_id)
        return True

    # ========================================
    # Patient Operations
    # ========================================

    def add_patient(self, data: EntityData) -> str:
        """Create a patient; the bed number is set by assign_bed, not here"""
        return self._add("patients", data, bed_number="")

    def update_patient(self, patient_id: str, **updates) -> bool:
        """Merge fields into the patient; status="discharged" frees its bed as discharge_patient does"""
        if updates.get("status") != "discharged":
            return self._update("patients", patient_id, updates, managed=PATIENT_MANAGED_FIELDS)

        patients = list(self._state.patients)
        idx = self._index(patients, patient_id)
        if idx is None:
            return self._missing("patients", patient_id)

        writes = _Writes()
        merged = self._merged("patients", patients[idx], updates, PATIENT_MANAGED_FIELDS)
        patients[idx] = replace(merged, bed_number="")
        writes.update("patients", patients[idx])
        beds = self._vacate_beds_of(patient_id, "cleaning", writes)
        self._commit(replace(self._state, patients=patients, beds=beds), writes)
        logger.debug("patients: updated and discharged %s", patient_id)
        return True

    def delete_patient(self, patient_id: str) -> bool:
        """Remove the patient and make any bed it occupied available"""
        patients = self._state.patients
        if self._index(patients, patient_id) is None:
            return self._missing("patients", patient_id)

        writes = _Writes()
        writes.delete("patients", patient_id)
        beds = self._vacate_beds_of(patient_id, "available", writes)
        state = replace(
            self._state,
            patients=[p for p in patients if p.id != patient_id],
            beds=beds,
        )
        self._commit(state, writes)
        logger.debug("patients: deleted %s", patient_id)
        return True

    def discharge_patient(self, patient_id: str) -> bool:
        """Mark the patient discharged (record kept); its bed goes to cleaning"""
        patients = list(self._state.patients)
        idx = self._index(patients, patient_id)
        if idx is None:
            return self._missing("patients", patient_id)

        writes = _Writes()
        patients[idx] = replace(patients[idx], status="discharged", bed_number="")
        writes.update("patients", patients[idx])
        beds = self._vacate_beds_of(patient_id, "cleaning", writes)
        self._commit(replace(self._state, patients=patients, beds=beds), writes)
        logger.debug("patients: discharged %s", patient_id)
        return True

    def update_patient_vitals(self, patient_id: str, vitals: EntityData) -> bool:
        """Make vitals the current reading; the previous one moves to the front of the history"""
        patients = list(self._state.patients)
        idx = self._index(patients, patient_id)
        if idx is None:
            return self._missing("patients", patient_id)

        patient = patients[idx]
        reading = vitals if isinstance(vitals, VitalsReading) else VitalsReading.from_dict(_as_dict(vitals))
        history = list(patient.vitals_history)
        if patient.vitals is not None:
            history.insert(0, patient.vitals)
        patients[idx] = replace(
            patient,
            vitals=copy.deepcopy(reading),
            vitals_history=RetentionPolicy.cap(history, self.retention.vitals_history),
            last_updated=_now(),
        )

        writes = _Writes()
        writes.update("patients", patients[idx])
        self._commit(replace(self._state, patients=patients), writes)
        logger.debug("patients: recorded vitals for %s", patient_id)
        return True

    # ========================================
    # Bed Operations
    # ========================================

    def _vacate_beds_of(self, patient_id: str, status: str, writes: _Writes) -> List[Bed]:
        beds = list(self._state.beds)
        for i, bed in enumerate(beds):
            if bed.patient_id == patient_id:
                beds[i] = replace(bed, status=status, patient_id=None, assigned_date=None)
                writes.update("beds", beds[i])
        return beds

    @staticmethod
    def _clear_bed_number(patients: List[Patient], patient_id: Optional[str], writes: _Writes) -> None:
        if patient_id is None:
            return
        for i, patient in enumerate(patients):
            if patient.id == patient_id:
                patients[i] = replace(patient, bed_number="")
                writes.update("patients", patients[i])

    def assign_bed(self, bed_id: str, patient_id: str) -> bool:
        """
        Put the patient in the bed (status occupied, assigned today).

        Any other bed still holding the patient is released, and a patient
        already in the target bed loses its bed number. The target bed's
        previous status is not checked. A discharged patient is readmitted
        (status active), since an occupied bed always holds an active patient.

        This is the only way to occupy a bed; update_bed_status refuses
        "occupied" on an empty bed.
        """
        bed_idx = self._index(self._state.beds, bed_id)
        if bed_idx is None:
            return self._missing("beds", bed_id)
        patient_idx = self._index(self._state.patients, patient_id)
        if patient_idx is None:
            return self._missing("patients", patient_id)

        writes = _Writes()
        beds = list(self._state.beds)
        patients = list(self._state.patients)

        for i, bed in enumerate(beds):
            if bed.patient_id == patient_id and bed.id != bed_id:
                beds[i] = replace(bed, status="available", patient_id=None, assigned_date=None)
                writes.update("beds", beds[i])

        target = beds[bed_idx]
        if target.patient_id != patient_id:
            self._clear_bed_number(patients, target.patient_id, writes)
        beds[bed_idx] = replace(
            target,
            status="occupied",
            patient_id=patient_id,
            assigned_date=date.today().isoformat(),
        )
        writes.update("beds", beds[bed_idx])

        patient = patients[patient_idx]
        if patient.status == "discharged":
            logger.info("patients: readmitting %s into %s", patient_id, bed_id)
        patients[patient_idx] = replace(patient, bed_number=target.number, status="active")
        writes.update("patients", patients[patient_idx])

        self._commit(replace(self._state, beds=beds, patients=patients), writes)
        logger.debug("beds: assigned %s to %s", bed_id, patient_id)
        return True

    def release_bed(self, bed_id: str) -> bool:
        """Empty the bed (status available); its occupant, if any, loses the bed number"""
        beds = list(self._state.beds)
        idx = self._index(beds, bed_id)
        if idx is None:
            return self._missing("beds", bed_id)

        writes = _Writes()
        patients = list(self._state.patients)
        self._clear_bed_number(patients, beds[idx].patient_id, writes)
        beds[idx] = replace(beds[idx], status="available", patient_id=None, assigned_date=None)
        writes.update("beds", beds[idx])

        self._commit(replace(self._state, beds=beds, patients=patients), writes)
        logger.debug("beds: released %s", bed_id)
        return True

    def transfer_patient(self, patient_id: str, new_bed_id: str) -> bool:
        """Release whichever bed holds the patient and assign the new one (a plain assign if none)"""
        current = self.find_bed_for_patient(patient_id)
        logger.debug("beds: transferring %s from %s to %s",
                     patient_id, current.id if current else None, new_bed_id)
        return self.assign_bed(new_bed_id, patient_id)

    def update_bed_status(self, bed_id: str, status: str) -> bool:
        """
        Override a bed's status.

        A non-occupied status on an occupied bed releases its patient. Unlike a
        plain override, marking an empty bed occupied raises InvariantError
        (an occupied bed always holds a patient); use assign_bed instead.
        """
        beds = list(self._state.beds)
        idx = self._index(beds, bed_id)
        if idx is None:
            return self._missing("beds", bed_id)

        bed = beds[idx]
        if status == "occupied" and bed.patient_id is None:
            raise InvariantError(f"bed {bed_id} has no patient; use assign_bed to occupy it")

        writes = _Writes()
        patients = list(self._state.patients)
        if status != "occupied" and bed.patient_id is not None:
            self._clear_bed_number(patients, bed.patient_id, writes)
            bed = replace(bed, patient_id=None, assigned_date=None)
        beds[idx] = replace(bed, status=status)
        writes.update("beds", beds[idx])

        self._commit(replace(self._state, beds=beds, patients=patients), writes)
        logger.debug("beds: %s set to %s", bed_id, status)
        return True

    # ========================================
    # Appointment Operations
    # ========================================

    def add_appointment(self, data: EntityData) -> str:
        return self._add("appointments", data)

    def update_appointment(self, appointment_id: str, **updates) -> bool:
        return self._update("appointments", appointment_id, updates)

    def delete_appointment(self, appointment_id: str) -> bool:
        return self._delete("appointments", appointment_id)

    # ========================================
    # Order Operations
    # ========================================

    def add_order(self, data: EntityData) -> str:
        return self._add("orders", data)

    def update_order(self, order_id: str, **updates) -> bool:
        return self._update("orders", order_id, updates)

    def delete_order(self, order_id: str) -> bool:
        return self._delete("orders", order_id)

    # ========================================
    # Medication Operations
    # ========================================

    def add_medication(self, data: EntityData) -> str:
        return self._add("medications", data)

    def update_medication(self, medication_id: str, **updates) -> bool:
        return self._update("medications", medication_id, updates)

    def delete_medication(self, medication_id: str) -> bool:
        return self._delete("medications", medication_id)

    def administer_medication(self, medication_id: str, administered_by: str,
                              notes: Optional[str] = None) -> bool:
        """Log an administration (newest first); the medication's status is left alone"""
        medications = list(self._state.medications)
        idx = self._index(medications, medication_id)
        if idx is None:
            return self._missing("medications", medication_id)

        entry = AdministrationEntry(timestamp=_now(), administered_by=administered_by, notes=notes)
        log = [entry] + list(medications[idx].administration_log)
        medications[idx] = replace(
            medications[idx],
            administration_log=RetentionPolicy.cap(log, self.retention.administration_log),
        )

        writes = _Writes()
        writes.update("medications", medications[idx])
        self._commit(replace(self._state, medications=medications), writes)
        logger.debug("medications: %s administered by %s", medication_id, administered_by)
        return True

    # ========================================
    # Staff Operations
    # ========================================

    def add_staff(self, data: EntityData) -> str:
        return self._add("staff", data)

    def update_staff(self, staff_id: str, **updates) -> bool:
        return self._update("staff", staff_id, updates)

    def delete_staff(self, staff_id: str) -> bool:
        return self._delete("staff", staff_id)

    # ========================================
    # Alert Operations
    # ========================================

    def add_alert(self, data: EntityData) -> str:
        """Add an alert at the front of the list; the oldest beyond the retention cap are dropped"""
        return self._add("alerts", data)

    def mark_alert_as_read(self, alert_id: str) -> bool:
        return self._update("alerts", alert_id, {"is_read": True})

    def mark_all_alerts_as_read(self) -> int:
        """Returns how many alerts changed"""
        writes = _Writes()
        alerts = []
        for alert in self._state.alerts:
            if not alert.is_read:
                alert = replace(alert, is_read=True)
                writes.update("alerts", alert)
            alerts.append(alert)
        if writes.updates:
            self._commit(replace(self._state, alerts=alerts), writes)
        return len(writes.updates)

    def delete_alert(self, alert_id: str) -> bool:
        return self._delete("alerts", alert_id)

    # ========================================
    # Bill Operations
    # ========================================

    def add_bill(self, data: EntityData) -> str:
        return self._add("bills", data)

    def update_bill(self, bill_id: str, **updates) -> bool:
        return self._update("bills", bill_id, updates)

    def delete_bill(self, bill_id: str) -> bool:
        return self._delete("bills", bill_id)

    # ========================================
    # Analytics
    # ========================================

    def get_analytics(self, today: Optional[date] = None) -> HospitalAnalytics:
        """Dashboard figures, recomputed only after a mutation or a change of date"""
        if isinstance(today, datetime):
            today = today.date()
        today = today or date.today()
        cached = self._analytics_cache
        if cached is None or cached[0] != self._version or cached[1] != today:
            cached = (self._version, today, compute_analytics(self._state, today))
            self._analytics_cache = cached
        return copy.deepcopy(cached[2])

    # ========================================
    # Snapshots
    # ========================================

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """The whole state as plain dicts, one list per collection"""
        return self._state.to_dict()

    def dump_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.snapshot(), ensure_ascii=False, indent=indent)

    def load_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        """Replace every collection with the contents of a snapshot"""
        state = HospitalState.from_dict(dict(snapshot))
        problems = check_invariants(state)
        if problems:
            raise InvariantError("; ".join(problems))
        with self._conn:
            replace_all(self._conn, state.to_dict())
            set_meta(self._conn, STORAGE_KEY, _now())
        self._state = state
        self._version += 1
        logger.info("Loaded snapshot: %s",
                    ", ".join(f"{len(v)} {k}" for k, v in state.to_dict().items()))

    def load_json(self, text: str) -> None:
        self.load_snapshot(json.loads(text))
