# exceptions.py
# Errors raised by the hospital data store


class HospitalDataError(Exception):
    """Base class for store errors"""


class NotFoundError(HospitalDataError, LookupError):
    """A mutation referenced an id that is not in its collection (strict mode only)"""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection}: no record with id {record_id!r}")


class InvariantError(HospitalDataError, ValueError):
    """A mutation would leave the bed/patient relationship inconsistent"""
