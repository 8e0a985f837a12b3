# models.py
# Data models for the hospital operations store
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

PATIENT_CONDITIONS = ("Critical", "Stable", "Good", "Fair")
PATIENT_STATUSES = ("active", "discharged")
BED_STATUSES = ("occupied", "available", "maintenance", "cleaning")
APPOINTMENT_STATUSES = ("confirmed", "pending", "cancelled", "completed")
ORDER_TYPES = ("Lab", "Imaging", "Pharmacy")
ORDER_STATUSES = ("pending", "in-progress", "completed", "cancelled")
ORDER_PRIORITIES = ("routine", "urgent", "stat")
MEDICATION_STATUSES = ("active", "completed", "discontinued")
STAFF_STATUSES = ("active", "on-leave", "off-duty")
ALERT_TYPES = ("critical", "warning", "info")
ALERT_PRIORITIES = ("high", "medium", "low")
BILL_STATUSES = ("pending", "paid", "overdue")


@dataclass
class VitalsReading:
    heart_rate: int = 0
    blood_pressure: str = ""  # systolic/diastolic, e.g. 120/80
    temperature: float = 0.0  # Celsius
    oxygen_sat: int = 0
    timestamp: str = ""  # ISO 8601

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "VitalsReading":
        return VitalsReading(
            heart_rate=d.get("heart_rate", 0),
            blood_pressure=d.get("blood_pressure", ""),
            temperature=d.get("temperature", 0.0),
            oxygen_sat=d.get("oxygen_sat", 0),
            timestamp=d.get("timestamp", ""),
        )


@dataclass
class ContactInfo:
    phone: str = ""
    email: str = ""
    emergency_contact: str = ""

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ContactInfo":
        return ContactInfo(
            phone=d.get("phone", ""),
            email=d.get("email", ""),
            emergency_contact=d.get("emergency_contact", ""),
        )


@dataclass
class Patient:
    id: str
    name: str = ""
    age: int = 0
    gender: str = ""
    condition: str = "Stable"  # Critical, Stable, Good, Fair
    bed_number: str = ""
    admission_date: str = ""
    doctor: str = ""
    diagnosis: str = ""
    allergies: List[str] = field(default_factory=list)
    vitals: Optional[VitalsReading] = None
    vitals_history: List[VitalsReading] = field(default_factory=list)  # newest first
    last_updated: str = ""
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    status: str = "active"  # active, discharged

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Patient":
        vitals = d.get("vitals")
        return Patient(
            id=d.get("id", ""),
            name=d.get("name", ""),
            age=d.get("age", 0),
            gender=d.get("gender", ""),
            condition=d.get("condition", "Stable"),
            bed_number=d.get("bed_number", ""),
            admission_date=d.get("admission_date", ""),
            doctor=d.get("doctor", ""),
            diagnosis=d.get("diagnosis", ""),
            allergies=list(d.get("allergies") or []),
            vitals=_coerce(VitalsReading, vitals) if vitals else None,
            vitals_history=[_coerce(VitalsReading, v) for v in d.get("vitals_history") or []],
            last_updated=d.get("last_updated", ""),
            contact_info=_coerce(ContactInfo, d.get("contact_info") or {}),
            status=d.get("status", "active"),
        )


@dataclass
class Bed:
    id: str
    number: str = ""
    ward: str = ""
    floor: int = 1
    status: str = "available"  # occupied, available, maintenance, cleaning
    patient_id: Optional[str] = None
    assigned_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Bed":
        return Bed(
            id=d.get("id", ""),
            number=d.get("number", ""),
            ward=d.get("ward", ""),
            floor=d.get("floor", 1),
            status=d.get("status", "available"),
            patient_id=d.get("patient_id"),
            assigned_date=d.get("assigned_date"),
        )


@dataclass
class Appointment:
    id: str
    patient_id: str = ""
    patient_name: str = ""
    doctor: str = ""
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # HH:MM
    type: str = ""
    status: str = "pending"  # confirmed, pending, cancelled, completed
    phone: str = ""
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Appointment":
        return Appointment(
            id=d.get("id", ""),
            patient_id=d.get("patient_id", ""),
            patient_name=d.get("patient_name", ""),
            doctor=d.get("doctor", ""),
            date=d.get("date", ""),
            time=d.get("time", ""),
            type=d.get("type", ""),
            status=d.get("status", "pending"),
            phone=d.get("phone", ""),
            notes=d.get("notes"),
        )


@dataclass
class Order:
    id: str
    patient_id: str = ""
    patient_name: str = ""
    type: str = "Lab"  # Lab, Imaging, Pharmacy
    test: str = ""
    doctor: str = ""
    status: str = "pending"  # pending, in-progress, completed, cancelled
    ordered: str = ""
    priority: str = "routine"  # routine, urgent, stat
    result: Optional[str] = None
    completed_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Order":
        return Order(
            id=d.get("id", ""),
            patient_id=d.get("patient_id", ""),
            patient_name=d.get("patient_name", ""),
            type=d.get("type", "Lab"),
            test=d.get("test", ""),
            doctor=d.get("doctor", ""),
            status=d.get("status", "pending"),
            ordered=d.get("ordered", ""),
            priority=d.get("priority", "routine"),
            result=d.get("result"),
            completed_date=d.get("completed_date"),
        )


@dataclass
class AdministrationEntry:
    timestamp: str
    administered_by: str
    notes: Optional[str] = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AdministrationEntry":
        return AdministrationEntry(
            timestamp=d.get("timestamp", ""),
            administered_by=d.get("administered_by", ""),
            notes=d.get("notes"),
        )


@dataclass
class Medication:
    id: str
    patient_id: str = ""
    patient_name: str = ""
    medication: str = ""
    dosage: str = ""
    frequency: str = ""
    doctor: str = ""
    start_date: str = ""
    end_date: Optional[str] = None
    status: str = "active"  # active, completed, discontinued
    administration_log: List[AdministrationEntry] = field(default_factory=list)  # newest first

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Medication":
        return Medication(
            id=d.get("id", ""),
            patient_id=d.get("patient_id", ""),
            patient_name=d.get("patient_name", ""),
            medication=d.get("medication", ""),
            dosage=d.get("dosage", ""),
            frequency=d.get("frequency", ""),
            doctor=d.get("doctor", ""),
            start_date=d.get("start_date", ""),
            end_date=d.get("end_date"),
            status=d.get("status", "active"),
            administration_log=[
                _coerce(AdministrationEntry, e) for e in d.get("administration_log") or []
            ],
        )


@dataclass
class Staff:
    id: str
    name: str = ""
    role: str = ""
    department: str = ""
    shift: str = ""
    phone: str = ""
    email: str = ""
    status: str = "active"  # active, on-leave, off-duty

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Staff":
        return Staff(
            id=d.get("id", ""),
            name=d.get("name", ""),
            role=d.get("role", ""),
            department=d.get("department", ""),
            shift=d.get("shift", ""),
            phone=d.get("phone", ""),
            email=d.get("email", ""),
            status=d.get("status", "active"),
        )


@dataclass
class Alert:
    id: str
    type: str = "info"  # critical, warning, info
    title: str = ""
    message: str = ""
    timestamp: str = ""
    is_read: bool = False
    patient_id: Optional[str] = None
    priority: str = "low"  # high, medium, low

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Alert":
        return Alert(
            id=d.get("id", ""),
            type=d.get("type", "info"),
            title=d.get("title", ""),
            message=d.get("message", ""),
            timestamp=d.get("timestamp", ""),
            is_read=bool(d.get("is_read", False)),
            patient_id=d.get("patient_id"),
            priority=d.get("priority", "low"),
        )


@dataclass
class BillItem:
    description: str
    amount: float

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "BillItem":
        return BillItem(description=d.get("description", ""), amount=d.get("amount", 0))


@dataclass
class Bill:
    id: str
    patient_id: str = ""
    patient_name: str = ""
    amount: float = 0
    status: str = "pending"  # pending, paid, overdue
    due_date: str = ""
    items: List[BillItem] = field(default_factory=list)
    insurance_claim_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Bill":
        return Bill(
            id=d.get("id", ""),
            patient_id=d.get("patient_id", ""),
            patient_name=d.get("patient_name", ""),
            amount=d.get("amount", 0),
            status=d.get("status", "pending"),
            due_date=d.get("due_date", ""),
            items=[_coerce(BillItem, item) for item in d.get("items") or []],
            insurance_claim_id=d.get("insurance_claim_id"),
        )


# Collection name -> entity type, in persistence order
ENTITY_TYPES = {
    "patients": Patient,
    "beds": Bed,
    "appointments": Appointment,
    "orders": Order,
    "medications": Medication,
    "staff": Staff,
    "alerts": Alert,
    "bills": Bill,
}


@dataclass
class HospitalState:
    """The whole store: one list per entity collection."""
    patients: List[Patient] = field(default_factory=list)
    beds: List[Bed] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    medications: List[Medication] = field(default_factory=list)
    staff: List[Staff] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)  # newest first
    bills: List[Bill] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HospitalState":
        return HospitalState(**{
            name: [entity_type.from_dict(item) for item in d.get(name) or []]
            for name, entity_type in ENTITY_TYPES.items()
        })


def _coerce(cls, value):
    """Accept either an instance of cls or its dict form."""
    if isinstance(value, cls):
        return value
    return cls.from_dict(value)
