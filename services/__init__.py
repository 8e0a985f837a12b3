# services/__init__.py
# Re-export the store and the services built on it

from .hospital_store import HospitalDataStore, generate_id, check_invariants
from .analytics import HospitalAnalytics, compute_analytics, bed_status_counts
from .reports import HandoverReport, build_handover_report
from .pdf_generator import HandoverReportPDFGenerator

__all__ = [
    # Store
    'HospitalDataStore', 'generate_id', 'check_invariants',
    # Analytics
    'HospitalAnalytics', 'compute_analytics', 'bed_status_counts',
    # Reports
    'HandoverReport', 'build_handover_report',
    'HandoverReportPDFGenerator',
]
