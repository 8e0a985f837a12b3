# reports.py
# Shift handover report built from the store's current state
import json
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.models import HospitalState, Order


@dataclass
class HandoverReport:
    timestamp: str
    total_patients: int
    critical_patients: int
    pending_orders: int
    notes: str = ""
    critical_updates: List[str] = field(default_factory=list)
    pending_order_lines: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @property
    def filename(self) -> str:
        return f"handover-report-{self.timestamp[:10]}"


def _order_line(order: Order) -> str:
    return f"{order.patient_name}: {order.test} ({order.type}, {order.priority})"


def build_handover_report(state: HospitalState, notes: str = "",
                          now: Optional[datetime] = None) -> HandoverReport:
    """Summarize active and critical patients and pending orders for the incoming shift"""
    active = [p for p in state.patients if p.status == "active"]
    critical = [p for p in active if p.condition == "Critical"]
    pending = [o for o in state.orders if o.status == "pending"]

    return HandoverReport(
        timestamp=(now or datetime.now()).isoformat(),
        total_patients=len(active),
        critical_patients=len(critical),
        pending_orders=len(pending),
        notes=notes,
        critical_updates=[
            f"{p.name} ({p.bed_number or 'no bed'}): {p.diagnosis} - Critical condition"
            for p in critical
        ],
        pending_order_lines=[_order_line(o) for o in pending],
    )
