"""
Single-project KPIs for the project details view.

Percentages are 0..100; stage completion values are fractions 0..1.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Sequence

import pandas as pd

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import (
    as_date,
    build_tasks_lookup,
    normalize_progress_series,
    safe_weight_series,
    tasks_for_project,
)


@dataclass
class ProjectKpis:
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    not_started_tasks: int = 0
    overdue_tasks: int = 0
    completion_percentage: float = 0.0
    average_task_completion: float = 0.0
    tasks_by_department: Dict[str, int] = field(default_factory=dict)
    stage_task_counts: Dict[str, int] = field(default_factory=dict)
    stage_completion_by_weight: Dict[str, float] = field(default_factory=dict)
    total_project_days: int = 0
    days_remaining: int = 0
    project_progress_percentage: float = 0.0

    @property
    def task_status_chart_data(self) -> str:
        return f"{self.completed_tasks}/{self.total_tasks}"

    @property
    def elapsed_days(self) -> int:
        return self.total_project_days - self.days_remaining


def _task_table(tasks: Sequence[Task]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "done_ratio": t.done_ratio,
                "weight": t.weight,
                "expected_end_date": as_date(t.expected_end_date),
                "stage_name": t.stage_name,
                "implementor_department": t.implementor_department,
            }
            for t in tasks
        ],
        columns=["done_ratio", "weight", "expected_end_date", "stage_name", "implementor_department"],
    )
    df["done_ratio"] = pd.to_numeric(df["done_ratio"], errors="coerce")
    df["weight"] = safe_weight_series(df["weight"])
    df["expected_end_date"] = pd.to_datetime(df["expected_end_date"], errors="coerce")
    return df


def _label_counts(labels: pd.Series) -> Dict[str, int]:
    """Counts per trimmed, non-blank label."""
    cleaned = labels.dropna().astype(str).str.strip()
    cleaned = cleaned[cleaned != ""]
    return {str(k): int(v) for k, v in cleaned.value_counts(sort=False).items()}


def stage_completion_by_weight(df: pd.DataFrame) -> Dict[str, float]:
    """
    Σ(weight × done) / Σ weight per stage, clamped to [0, 1].

    Stages whose weights sum to 0 report 0.
    """
    staged = df.assign(stage=df["stage_name"].astype("string").str.strip())
    staged = staged[staged["stage"].notna() & (staged["stage"] != "")]
    if len(staged) == 0:
        return {}

    staged = staged.assign(weighted_done=staged["weight"] * normalize_progress_series(staged["done_ratio"]))
    grouped = staged.groupby("stage", sort=False).agg(
        weight_total=("weight", "sum"),
        weighted_done=("weighted_done", "sum"),
    )

    result = {}
    for stage, row in grouped.iterrows():
        relative = row["weighted_done"] / row["weight_total"] if row["weight_total"] > 0 else 0.0
        result[str(stage)] = float(min(max(relative, 0.0), 1.0))
    return result


def compute_project_kpis(project: Project,
                         tasks: Optional[Sequence[Task]] = None,
                         today: Optional[date] = None) -> ProjectKpis:
    """
    KPIs for one project.

    ``tasks`` is the flat task list to fall back on when the project has no
    embedded tasks.
    """
    today = as_date(today) if today is not None else date.today()
    project_tasks = tasks_for_project(project, build_tasks_lookup(tasks or []))
    df = _task_table(project_tasks)
    done = df["done_ratio"].fillna(0.0)

    kpis = ProjectKpis()
    kpis.total_tasks = len(df)
    kpis.completed_tasks = int((done >= 1.0).sum())
    kpis.in_progress_tasks = int(((done > 0) & (done < 1.0)).sum())
    kpis.not_started_tasks = int((done == 0).sum())
    kpis.overdue_tasks = int(((df["expected_end_date"] < pd.Timestamp(today)) & (done < 1.0)).sum())

    if kpis.total_tasks > 0:
        kpis.completion_percentage = round(kpis.completed_tasks / kpis.total_tasks * 100, 2)
        kpis.average_task_completion = round(float(normalize_progress_series(done).mean()) * 100, 2)

    kpis.tasks_by_department = _label_counts(df["implementor_department"])
    kpis.stage_task_counts = _label_counts(df["stage_name"])
    kpis.stage_completion_by_weight = stage_completion_by_weight(df)

    start = as_date(project.start_date)
    end = as_date(project.end_date)
    kpis.total_project_days = (end - start).days
    kpis.days_remaining = (end - today).days
    if kpis.total_project_days > 0:
        pct = kpis.elapsed_days / kpis.total_project_days * 100
        kpis.project_progress_percentage = round(min(max(pct, 0.0), 100.0), 2)

    return kpis
