"""
Targeted vs actual progress metrics.

Targeted progress for a period is the weight of tasks planned to finish in it
(``expected_end_date``). Actual progress is weight × clamped log progress
recorded in it. Portfolio figures average per-project sums over every project
in scope, so they stay on a 0-100 per-project scale as the portfolio grows.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import (
    normalize_progress_series,
    quarter_key,
    quarter_range,
    snapshot_frames,
    window_progress_by_task,
)

logger = logging.getLogger(__name__)

QUARTERS = (1, 2, 3, 4)


@dataclass
class ProjectProgressDetail:
    """One project / year / quarter drill-down row."""
    project_id: int
    project_name: str
    year: int
    quarter: str
    annual_target_progress: float
    quarter_target_progress: float
    actual_progress: float
    delay_reasons: Optional[str] = None


@dataclass
class ProgressAggregation:
    targeted_by_year: Dict[int, float] = field(default_factory=dict)
    actual_by_year: Dict[int, float] = field(default_factory=dict)
    targeted_by_quarter: Dict[str, float] = field(default_factory=dict)
    actual_by_quarter: Dict[str, float] = field(default_factory=dict)
    project_details: List[ProjectProgressDetail] = field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================

def reporting_years(tasks_df: pd.DataFrame, logs_df: pd.DataFrame) -> List[int]:
    """Union of planned end years and log years, ascending."""
    years = set(tasks_df["expected_end_date"].dropna().dt.year.astype(int))
    years |= set(logs_df["date"].dropna().dt.year.astype(int))
    return sorted(years)


def targeted_by_project(tasks_df: pd.DataFrame, start: date, end: date) -> pd.Series:
    """Sum of safe weights per project for tasks planned to end within [start, end]."""
    in_window = tasks_df[tasks_df["expected_end_date"].between(pd.Timestamp(start), pd.Timestamp(end))]
    return in_window.groupby("project_id")["weight"].sum()


def actual_by_project(tasks_df: pd.DataFrame, logs_df: pd.DataFrame,
                      start: date, end: date) -> pd.Series:
    """Sum of weight × clamped window log progress per project, over all tasks."""
    per_task = window_progress_by_task(logs_df, start, end)
    weighted = tasks_df["weight"] * tasks_df["task_key"].map(per_task).fillna(0.0)
    return weighted.groupby(tasks_df["project_id"]).sum()


def portfolio_average(per_project: pd.Series, project_count: int) -> float:
    """
    Average over all projects in scope; projects absent from ``per_project``
    count as 0.
    """
    if project_count == 0:
        return 0.0
    return float(per_project.sum()) / project_count


# =============================================================================
# PORTFOLIO ROLLUPS
# =============================================================================

def _portfolio_rollups(result: ProgressAggregation,
                       tasks_df: pd.DataFrame,
                       logs_df: pd.DataFrame,
                       project_count: int) -> None:
    for year in reporting_years(tasks_df, logs_df):
        year_start, year_end = date(year, 1, 1), date(year, 12, 31)
        result.targeted_by_year[year] = portfolio_average(
            targeted_by_project(tasks_df, year_start, year_end), project_count
        )
        result.actual_by_year[year] = portfolio_average(
            actual_by_project(tasks_df, logs_df, year_start, year_end), project_count
        )

        for quarter in QUARTERS:
            q_start, q_end = quarter_range(year, quarter)
            targeted = portfolio_average(targeted_by_project(tasks_df, q_start, q_end), project_count)
            actual = portfolio_average(actual_by_project(tasks_df, logs_df, q_start, q_end), project_count)

            # Sparse: quarters with nothing planned and nothing achieved are omitted
            if targeted > 0 or actual > 0:
                key = quarter_key(year, quarter)
                result.targeted_by_quarter[key] = targeted
                result.actual_by_quarter[key] = actual


# =============================================================================
# PROJECT DRILL-DOWN
# =============================================================================

def project_progress_details(project: Project,
                             tasks_df: pd.DataFrame,
                             logs_df: pd.DataFrame) -> List[ProjectProgressDetail]:
    """
    Per-quarter target vs actual rows for a single project.

    Quarter actual prefers logged progress; it falls back to weight × done ratio
    over the quarter's planned tasks only when no progress was logged in the
    window.
    """
    project_tasks = tasks_df[tasks_df["project_id"] == project.id]
    if len(project_tasks) == 0:
        return []

    project_logs = logs_df[logs_df["task_key"].isin(project_tasks["task_key"])]
    end_dates = project_tasks["expected_end_date"]
    fallback = project_tasks["weight"] * normalize_progress_series(project_tasks["done_ratio"])

    rows = []
    for year in reporting_years(project_tasks, project_logs):
        in_year = end_dates.dt.year == year
        annual_target = float(project_tasks.loc[in_year, "weight"].sum())

        for quarter in QUARTERS:
            in_quarter = in_year & (end_dates.dt.quarter == quarter)
            q_start, q_end = quarter_range(year, quarter)

            quarter_target = float(project_tasks.loc[in_quarter, "weight"].sum())
            actual_logs = float(actual_by_project(project_tasks, project_logs, q_start, q_end).sum())
            actual_fallback = float(fallback[in_quarter].sum())
            quarter_actual = actual_logs if actual_logs > 0 else actual_fallback

            if quarter_target > 0 or quarter_actual > 0:
                rows.append(ProjectProgressDetail(
                    project_id=project.id,
                    project_name=project.display_name,
                    year=year,
                    quarter=f"Q{quarter}",
                    annual_target_progress=annual_target,
                    quarter_target_progress=quarter_target,
                    actual_progress=quarter_actual,
                    delay_reasons=project.delay_reasons,
                ))
    return rows


# =============================================================================
# ENTRY POINT
# =============================================================================

def compute_progress(projects: Sequence[Project],
                     lookup: Mapping[int, Sequence[Task]],
                     frames: Optional[Tuple[pd.DataFrame, pd.DataFrame]] = None) -> ProgressAggregation:
    """
    Targeted vs actual progress by year and quarter, plus drill-down rows.
    """
    tasks_df, logs_df = frames if frames is not None else snapshot_frames(projects, lookup)
    result = ProgressAggregation()

    _portfolio_rollups(result, tasks_df, logs_df, project_count=len({p.id for p in projects}))

    for project in projects:
        result.project_details.extend(project_progress_details(project, tasks_df, logs_df))

    logger.debug(
        "Progress computed: %d years, %d quarters, %d detail rows",
        len(result.targeted_by_year), len(result.targeted_by_quarter), len(result.project_details),
    )
    return result
