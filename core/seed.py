# seed.py
# Sample dataset used the first time a store is opened
from datetime import datetime, timedelta
from typing import Optional

from .models import (
    Patient, VitalsReading, ContactInfo, Bed, Appointment, Order, Medication,
    AdministrationEntry, Staff, Alert, Bill, BillItem, HospitalState,
)


def generate_sample_data(now: Optional[datetime] = None) -> HospitalState:
    """Two patients, six beds (two occupied) and one or two of everything else"""
    now = now or datetime.now()

    def ago(**kwargs) -> str:
        return (now - timedelta(**kwargs)).isoformat()

    patients = [
        Patient(
            id="P001",
            name="John Doe",
            age=45,
            gender="Male",
            condition="Critical",
            bed_number="ICU-01",
            admission_date="2024-01-15",
            doctor="Dr. Sarah Johnson",
            diagnosis="Acute Myocardial Infarction",
            allergies=["Penicillin", "Latex"],
            vitals=VitalsReading(heart_rate=120, blood_pressure="140/90", temperature=37.2,
                                 oxygen_sat=92, timestamp=now.isoformat()),
            vitals_history=[
                VitalsReading(heart_rate=118, blood_pressure="138/88", temperature=37.0,
                              oxygen_sat=94, timestamp=ago(hours=1)),
                VitalsReading(heart_rate=115, blood_pressure="135/85", temperature=36.8,
                              oxygen_sat=96, timestamp=ago(hours=2)),
            ],
            last_updated=ago(hours=2),
            contact_info=ContactInfo(phone="+1 (555) 123-4567", email="john.doe@email.com",
                                     emergency_contact="Jane Doe - Wife"),
        ),
        Patient(
            id="P002",
            name="Jane Smith",
            age=32,
            gender="Female",
            condition="Stable",
            bed_number="GA-101",
            admission_date="2024-01-14",
            doctor="Dr. Michael Chen",
            diagnosis="Appendectomy Post-Op",
            allergies=["Codeine"],
            vitals=VitalsReading(heart_rate=75, blood_pressure="120/80", temperature=36.8,
                                 oxygen_sat=98, timestamp=now.isoformat()),
            vitals_history=[
                VitalsReading(heart_rate=78, blood_pressure="122/82", temperature=37.0,
                              oxygen_sat=97, timestamp=ago(hours=1)),
            ],
            last_updated=ago(minutes=30),
            contact_info=ContactInfo(phone="+1 (555) 987-6543", email="jane.smith@email.com",
                                     emergency_contact="Bob Smith - Husband"),
        ),
    ]

    beds = [
        Bed(id="B001", number="ICU-01", ward="ICU", floor=2, status="occupied",
            patient_id="P001", assigned_date="2024-01-15"),
        Bed(id="B002", number="ICU-02", ward="ICU", floor=2, status="available"),
        Bed(id="B003", number="GA-101", ward="General A", floor=1, status="occupied",
            patient_id="P002", assigned_date="2024-01-14"),
        Bed(id="B004", number="GA-102", ward="General A", floor=1, status="available"),
        Bed(id="B005", number="GA-103", ward="General A", floor=1, status="cleaning"),
        Bed(id="B006", number="GA-104", ward="General A", floor=1, status="maintenance"),
    ]

    appointments = [
        Appointment(id="A001", patient_id="P001", patient_name="John Doe", doctor="Dr. Wilson",
                    date="2024-01-15", time="09:00", type="Consultation", status="confirmed",
                    phone="+1-555-0123"),
        Appointment(id="A002", patient_id="P002", patient_name="Jane Smith", doctor="Dr. Brown",
                    date="2024-01-15", time="10:30", type="Follow-up", status="pending",
                    phone="+1-555-0124"),
    ]

    orders = [
        Order(id="O001", patient_id="P001", patient_name="John Doe", type="Lab",
              test="Complete Blood Count", doctor="Dr. Wilson", status="pending",
              ordered="2024-01-15 09:30", priority="routine"),
        Order(id="O002", patient_id="P002", patient_name="Jane Smith", type="Imaging",
              test="Chest X-Ray", doctor="Dr. Brown", status="completed",
              ordered="2024-01-15 08:15", priority="urgent",
              result="Normal chest findings", completed_date="2024-01-15 10:30"),
    ]

    medications = [
        Medication(id="M001", patient_id="P001", patient_name="John Doe", medication="Aspirin",
                   dosage="81mg", frequency="Daily", doctor="Dr. Wilson", start_date="2024-01-15",
                   status="active",
                   administration_log=[
                       AdministrationEntry(timestamp=now.isoformat(), administered_by="Nurse Johnson"),
                   ]),
    ]

    staff = [
        Staff(id="S001", name="Dr. Sarah Johnson", role="Doctor", department="Cardiology",
              shift="Day", phone="+1-555-1001", email="sarah.johnson@hospital.com", status="active"),
        Staff(id="S002", name="Nurse Mary Wilson", role="Nurse", department="ICU",
              shift="Night", phone="+1-555-1002", email="mary.wilson@hospital.com", status="active"),
    ]

    alerts = [
        Alert(id="AL001", type="critical", title="Critical Patient Alert",
              message="Patient John Doe (ICU-01) showing irregular heart rhythm",
              timestamp=now.isoformat(), is_read=False, patient_id="P001", priority="high"),
        Alert(id="AL002", type="warning", title="Bed Shortage Warning",
              message="ICU occupancy at 90% - consider discharge planning",
              timestamp=ago(minutes=30), is_read=False, priority="medium"),
    ]

    bills = [
        Bill(id="B001", patient_id="P001", patient_name="John Doe", amount=15000, status="pending",
             due_date="2024-02-15",
             items=[
                 BillItem(description="ICU Room Charges", amount=8000),
                 BillItem(description="Diagnostic Tests", amount=3500),
                 BillItem(description="Medications", amount=2000),
                 BillItem(description="Doctor Consultation", amount=1500),
             ]),
    ]

    return HospitalState(
        patients=patients,
        beds=beds,
        appointments=appointments,
        orders=orders,
        medications=medications,
        staff=staff,
        alerts=alerts,
        bills=bills,
    )
