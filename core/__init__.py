# core/__init__.py
# Re-export models, configuration and persistence helpers

from .models import (
    Patient, VitalsReading, ContactInfo, Bed, Appointment, Order, Medication,
    AdministrationEntry, Staff, Alert, Bill, BillItem, HospitalState,
)
from .config import DB_PATH, STORAGE_KEY, RetentionPolicy, validate_config
from .database import init_database, DatabaseConnection
from .exceptions import HospitalDataError, NotFoundError, InvariantError

__all__ = [
    # Models
    'Patient', 'VitalsReading', 'ContactInfo', 'Bed', 'Appointment', 'Order',
    'Medication', 'AdministrationEntry', 'Staff', 'Alert', 'Bill', 'BillItem',
    'HospitalState',
    # Config
    'DB_PATH', 'STORAGE_KEY', 'RetentionPolicy', 'validate_config',
    # Database
    'init_database', 'DatabaseConnection',
    # Errors
    'HospitalDataError', 'NotFoundError', 'InvariantError',
]
