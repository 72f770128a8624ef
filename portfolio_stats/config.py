"""
Application configuration management.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field


def _default_data_dir() -> Path:
    env_dir = os.getenv("DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return Path("./data")


@dataclass
class AppConfig:
    """Application configuration with environment overrides."""

    # Paths
    data_dir: Path = field(default_factory=_default_data_dir)

    # Cache settings
    cache_ttl_seconds: int = field(default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "3600")))

    # Dashboard defaults
    at_risk_lookahead_days: int = field(default_factory=lambda: int(os.getenv("AT_RISK_LOOKAHEAD_DAYS", "30")))

    @property
    def processed_dir(self) -> Path:
        return self.data_dir / "processed"

    @property
    def exports_dir(self) -> Path:
        return self.data_dir / "exports"


# Global config instance
config = AppConfig()


# Snapshot table file names
TABLE_FILES = {
    "projects": "projects",
    "tasks": "tasks",
    "task_logs": "task_logs",
}

# Required columns (hard fail if missing)
REQUIRED_COLUMNS = {
    "projects": [
        "id",
        "name",
        "start_date",
        "end_date",
    ],
    "tasks": [
        "id",
        "project_id",
        "expected_start_date",
        "expected_end_date",
    ],
    "task_logs": [
        "id",
        "task_id",
        "date",
        "progress",
    ],
}

# Optional columns (soft warn if missing)
OPTIONAL_COLUMNS = {
    "projects": [
        "name_localized",
        "total_cost",
        "delay_reasons",
    ],
    "tasks": [
        "actual_end_date",
        "done_ratio",
        "weight",
        "cost",
        "many_days_to_complete",
        "stage_name",
        "implementor_department",
    ],
    "task_logs": [
        "notes",
    ],
}

NUMERIC_COLUMNS = [
    "total_cost", "done_ratio", "weight", "cost", "many_days_to_complete", "progress",
]

DATE_COLUMNS = [
    "start_date", "end_date", "expected_start_date", "expected_end_date",
    "actual_end_date", "date",
]

# Formatting constants
FORMAT_CURRENCY = "{:,.0f}"
FORMAT_CURRENCY_DECIMAL = "{:,.2f}"
FORMAT_PERCENT = "{:.1f}%"
FORMAT_COUNT = "{:,}"
FORMAT_DATE = "%Y-%m-%d"
