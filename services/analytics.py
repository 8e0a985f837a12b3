# analytics.py
# Derived, read-only figures for the dashboard
from dataclasses import dataclass, asdict, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from core.models import HospitalState


@dataclass
class HospitalAnalytics:
    total_patients: int = 0  # active only
    total_beds: int = 0
    occupied_beds: int = 0
    occupancy_rate: float = 0.0  # percent
    condition_counts: Dict[str, int] = field(default_factory=dict)
    today_appointments: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    active_staff: int = 0
    total_revenue: float = 0  # gross, not net of payments
    pending_payments: int = 0
    unread_alerts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_analytics(state: HospitalState, today: Optional[date] = None) -> HospitalAnalytics:
    """
    Project the analytics figures out of a state snapshot.

    Pure: the same state and date always give the same result.
    today defaults to the local calendar date and is matched against
    appointment dates in YYYY-MM-DD form; a datetime counts as its date.
    """
    if isinstance(today, datetime):
        today = today.date()
    today_str = (today or date.today()).isoformat()

    active_patients = [p for p in state.patients if p.status == "active"]
    total_beds = len(state.beds)
    occupied_beds = sum(1 for b in state.beds if b.status == "occupied")
    occupancy_rate = (occupied_beds / total_beds) * 100 if total_beds > 0 else 0.0

    condition_counts: Dict[str, int] = {}
    for patient in active_patients:
        condition_counts[patient.condition] = condition_counts.get(patient.condition, 0) + 1

    return HospitalAnalytics(
        total_patients=len(active_patients),
        total_beds=total_beds,
        occupied_beds=occupied_beds,
        occupancy_rate=occupancy_rate,
        condition_counts=condition_counts,
        today_appointments=sum(1 for a in state.appointments if a.date == today_str),
        pending_orders=sum(1 for o in state.orders if o.status == "pending"),
        completed_orders=sum(1 for o in state.orders if o.status == "completed"),
        active_staff=sum(1 for s in state.staff if s.status == "active"),
        total_revenue=sum(b.amount for b in state.bills),
        pending_payments=sum(1 for b in state.bills if b.status == "pending"),
        unread_alerts=sum(1 for a in state.alerts if not a.is_read),
    )


def bed_status_counts(state: HospitalState) -> Dict[str, int]:
    """Beds per status, every status present even at zero"""
    counts = {status: 0 for status in ("available", "occupied", "maintenance", "cleaning")}
    for bed in state.beds:
        counts[bed.status] = counts.get(bed.status, 0) + 1
    return counts
