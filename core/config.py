# config.py
# Configuration and environment variable loading

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, TypeVar
from dotenv import load_dotenv

# Load environment variables from .env file (for local development)
load_dotenv()

T = TypeVar("T")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


# Storage Configuration
DB_PATH = Path(os.getenv("HOSPITAL_DB_PATH", Path(__file__).parent.parent / "hospital_data.db"))
STORAGE_KEY = "hospitalData"  # marks a store that has been initialized

# Retention limits (0 disables the cap)
VITALS_HISTORY_LIMIT = _env_int("VITALS_HISTORY_LIMIT", 50)
ALERT_LIMIT = _env_int("ALERT_LIMIT", 200)
ADMINISTRATION_LOG_LIMIT = _env_int("ADMINISTRATION_LOG_LIMIT", 100)

# Raise NotFoundError instead of ignoring mutations on unknown ids
STRICT_IDS = _env_bool("STRICT_IDS")

# PDF Export Configuration
HOSPITAL_NAME = os.getenv("HOSPITAL_NAME", "Medical Center")
PDF_HEADER_COLOR = os.getenv("PDF_HEADER_COLOR", "#003366")  # Professional blue


@dataclass
class RetentionPolicy:
    """How many entries the append-only histories keep, newest first"""
    vitals_history: int = 50
    alerts: int = 200
    administration_log: int = 100

    @classmethod
    def from_env(cls) -> "RetentionPolicy":
        return cls(
            vitals_history=VITALS_HISTORY_LIMIT,
            alerts=ALERT_LIMIT,
            administration_log=ADMINISTRATION_LOG_LIMIT,
        )

    @staticmethod
    def cap(entries: List[T], limit: int) -> List[T]:
        if limit <= 0:
            return entries
        return entries[:limit]


# Validate that configuration values are usable
def validate_config():
    """Check that the configured limits and paths make sense"""
    for name, value in (
        ("VITALS_HISTORY_LIMIT", VITALS_HISTORY_LIMIT),
        ("ALERT_LIMIT", ALERT_LIMIT),
        ("ADMINISTRATION_LOG_LIMIT", ADMINISTRATION_LOG_LIMIT),
    ):
        if value < 0:
            return False, f"{name} must be 0 or a positive integer"
    if str(DB_PATH) != ":memory:" and not Path(DB_PATH).parent.exists():
        return False, f"Directory for HOSPITAL_DB_PATH does not exist: {Path(DB_PATH).parent}"
    return True, "Configuration valid"
