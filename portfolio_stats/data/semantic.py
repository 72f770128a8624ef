"""
Semantic layer: normalization primitives, task lookup, and snapshot frames.

CRITICAL: All progress, weight and date handling must go through these helpers
so every KPI applies the same unit rules.

The scalar primitives are the reference definitions. Per-record loops (risk,
budget) call them directly; the frame-based calculators use the vectorised
``_series`` versions, which tests pin to the scalar results.
"""
import calendar
from datetime import date, datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from portfolio_stats.data.models import Project, Task


# =============================================================================
# SCALAR PRIMITIVES
# =============================================================================

def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and np.isnan(value))


def as_date(value) -> Optional[date]:
    """Reduce a date, datetime or Timestamp to a calendar date."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return None
    return ts.date()


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]."""
    if value < 0:
        return 0.0
    if value > 1:
        return 1.0
    return float(value)


def normalize_progress(value: Optional[float]) -> float:
    """
    Normalize an ambiguous-unit progress value to a fraction in [0, 1].

    Anything above 1 is read as a percentage; non-positive values floor to 0.
    """
    if _is_missing(value):
        return 0.0
    if value > 1:
        return clamp_unit(value / 100.0)
    return clamp_unit(max(value, 0.0))


def done_ratio_value(task: Task) -> float:
    """Raw done ratio with absent or NaN as 0."""
    if _is_missing(task.done_ratio):
        return 0.0
    return float(task.done_ratio)


def remaining_days_value(task: Task) -> int:
    """Estimated work-days with absent or NaN as 0."""
    if _is_missing(task.many_days_to_complete):
        return 0
    return int(task.many_days_to_complete)


def safe_weight(weight: Optional[float]) -> float:
    """Weight when present and positive, else 0."""
    if _is_missing(weight) or weight <= 0:
        return 0.0
    return float(weight)


def quarter_of(value) -> int:
    """Calendar quarter (1..4) of a date."""
    return (as_date(value).month - 1) // 3 + 1


def quarter_range(year: int, quarter: int) -> Tuple[date, date]:
    """First and last day of a calendar quarter."""
    start_month = (quarter - 1) * 3 + 1
    end_month = quarter * 3
    end_day = calendar.monthrange(year, end_month)[1]
    return date(year, start_month, 1), date(year, end_month, end_day)


def quarter_key(year: int, quarter: int) -> str:
    return f"{year}-Q{quarter}"


def sum_logs_in_range(task: Task, start: date, end: date) -> float:
    """
    Sum of normalized log increments dated within [start, end], clamped to 1.
    """
    if not task.task_logs:
        return 0.0
    total = 0.0
    for log in task.task_logs:
        log_date = as_date(log.date)
        if log_date is not None and start <= log_date <= end:
            total += normalize_progress(log.progress)
    return clamp_unit(total)


# =============================================================================
# VECTORISED PRIMITIVES
# =============================================================================
# Same rules as the scalar versions, applied column-wise.

def normalize_progress_series(values: pd.Series) -> pd.Series:
    values = pd.to_numeric(values, errors="coerce").fillna(0.0).astype(float)
    normalized = np.where(values > 1, values / 100.0, values.clip(lower=0.0))
    return pd.Series(normalized, index=values.index).clip(lower=0.0, upper=1.0)


def safe_weight_series(values: pd.Series) -> pd.Series:
    values = pd.to_numeric(values, errors="coerce").fillna(0.0).astype(float)
    return values.where(values > 0, 0.0)


# =============================================================================
# TASK LOOKUP
# =============================================================================

def build_tasks_lookup(tasks: Iterable[Task]) -> Mapping[int, Tuple[Task, ...]]:
    """
    Group a flat task list by project id.

    Built once per aggregation call and returned read-only.
    """
    grouped: Dict[int, List[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.project_id, []).append(task)
    return MappingProxyType({pid: tuple(items) for pid, items in grouped.items()})


def tasks_for_project(project: Project,
                      lookup: Mapping[int, Sequence[Task]]) -> Tuple[Task, ...]:
    """Embedded tasks when the project carries any, otherwise the flat lookup."""
    if project.tasks:
        return tuple(project.tasks)
    return tuple(lookup.get(project.id, ()))


# =============================================================================
# SNAPSHOT FRAMES
# =============================================================================

TASK_FRAME_COLUMNS = [
    "task_key",
    "task_id",
    "project_id",
    "weight",
    "done_ratio",
    "cost",
    "many_days_to_complete",
    "expected_end_date",
    "stage_name",
    "implementor_department",
]

LOG_FRAME_COLUMNS = ["task_key", "date", "progress"]


def snapshot_frames(projects: Sequence[Project],
                    lookup: Mapping[int, Sequence[Task]]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Flatten the in-scope tasks and their logs into two DataFrames.

    ``task_key`` is positional so logs always join back to the task that owns
    them, even when upstream ids repeat. ``weight`` is already safe-weighted,
    ``done_ratio`` has absent values as 0, and log ``progress`` is normalized.
    """
    task_rows = []
    log_rows = []

    for project in projects:
        for task in tasks_for_project(project, lookup):
            key = len(task_rows)
            task_rows.append({
                "task_key": key,
                "task_id": task.id,
                "project_id": project.id,
                "weight": task.weight,
                "done_ratio": task.done_ratio,
                "cost": task.cost,
                "many_days_to_complete": remaining_days_value(task),
                "expected_end_date": as_date(task.expected_end_date),
                "stage_name": task.stage_name,
                "implementor_department": task.implementor_department,
            })
            for log in task.task_logs or []:
                log_rows.append({
                    "task_key": key,
                    "date": as_date(log.date),
                    "progress": log.progress,
                })

    tasks_df = pd.DataFrame(task_rows, columns=TASK_FRAME_COLUMNS)
    tasks_df["weight"] = safe_weight_series(tasks_df["weight"])
    tasks_df["done_ratio"] = pd.to_numeric(tasks_df["done_ratio"], errors="coerce").fillna(0.0).astype(float)
    tasks_df["cost"] = pd.to_numeric(tasks_df["cost"], errors="coerce").fillna(0.0).astype(float)
    tasks_df["many_days_to_complete"] = pd.to_numeric(
        tasks_df["many_days_to_complete"], errors="coerce"
    ).fillna(0).astype(int)
    tasks_df["expected_end_date"] = pd.to_datetime(tasks_df["expected_end_date"], errors="coerce")

    logs_df = pd.DataFrame(log_rows, columns=LOG_FRAME_COLUMNS)
    logs_df["date"] = pd.to_datetime(logs_df["date"], errors="coerce")
    logs_df = logs_df[logs_df["date"].notna()].copy()
    logs_df["progress"] = normalize_progress_series(logs_df["progress"])

    return tasks_df, logs_df


def window_progress_by_task(logs_df: pd.DataFrame, start: date, end: date) -> pd.Series:
    """
    Clamped sum of normalized log progress per ``task_key`` within [start, end].

    Frame equivalent of ``sum_logs_in_range``.
    """
    in_window = logs_df[logs_df["date"].between(pd.Timestamp(start), pd.Timestamp(end))]
    if len(in_window) == 0:
        return pd.Series(dtype=float)
    return in_window.groupby("task_key")["progress"].sum().clip(upper=1.0)
