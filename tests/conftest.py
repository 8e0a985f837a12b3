from __future__ import annotations

from pathlib import Path

import pytest

from core.config import RetentionPolicy
from services.hospital_store import HospitalDataStore, check_invariants


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "hospital.db"


@pytest.fixture
def store(db_path: Path):
    """A store seeded with the sample dataset"""
    s = HospitalDataStore(db_path, retention=RetentionPolicy(), strict=False)
    yield s
    s.close()


@pytest.fixture
def empty_store(tmp_path: Path):
    s = HospitalDataStore(tmp_path / "empty.db", retention=RetentionPolicy(), strict=False, seed=False)
    yield s
    s.close()


@pytest.fixture
def assert_consistent():
    def check(store: HospitalDataStore) -> None:
        problems = check_invariants(store.state())
        assert problems == [], problems
    return check
