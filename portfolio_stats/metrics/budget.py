"""
Budget exposure metrics pack.

Per-project remaining budget (fully done projects excluded) and committed
budget per end year.
"""
import logging
from typing import Dict, Mapping, Sequence, Tuple

import pandas as pd

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import as_date, done_ratio_value, tasks_for_project

logger = logging.getLogger(__name__)


def _project_frame(projects: Sequence[Project]) -> pd.DataFrame:
    rows = [
        {
            "project_id": p.id,
            "end_year": as_date(p.end_date).year,
            "total_cost": p.total_cost,
        }
        for p in projects
    ]
    df = pd.DataFrame(rows, columns=["project_id", "end_year", "total_cost"])
    df["total_cost"] = pd.to_numeric(df["total_cost"], errors="coerce")
    return df


def is_fully_done(tasks: Sequence[Task]) -> bool:
    """True when there is at least one task and every task is complete."""
    return len(tasks) > 0 and all(done_ratio_value(t) >= 1.0 for t in tasks)


def projects_count_by_year(projects: Sequence[Project]) -> Dict[int, int]:
    """Number of projects per end year."""
    df = _project_frame(projects)
    if len(df) == 0:
        return {}
    counts = df.groupby("end_year")["project_id"].count()
    return {int(year): int(n) for year, n in counts.items()}


def budgets_except_fully_done(projects: Sequence[Project],
                              lookup: Mapping[int, Sequence[Task]]) -> Tuple[Dict[int, float], Dict[int, str]]:
    """
    Remaining budget exposure per project, skipping fully done projects.

    Budget is the project total cost when set, otherwise the sum of task costs.
    Negative budgets floor to 0.

    Returns (budgets by project id, display names by project id).
    """
    budgets: Dict[int, float] = {}
    names: Dict[int, str] = {}

    for project in projects:
        tasks = tasks_for_project(project, lookup)
        if is_fully_done(tasks):
            continue

        if project.total_cost is not None and not pd.isna(project.total_cost):
            budget = float(project.total_cost)
        else:
            budget = float(sum(t.cost for t in tasks if t.cost is not None and not pd.isna(t.cost)))

        budgets[project.id] = max(budget, 0.0)
        names[project.id] = project.display_name

    logger.debug("Budget exposure computed for %d of %d projects", len(budgets), len(projects))
    return budgets, names


def budgets_by_year(projects: Sequence[Project]) -> Dict[int, float]:
    """
    Committed project-level budget per end year.

    Only ``total_cost`` counts; task costs are ignored here.
    """
    df = _project_frame(projects)
    if len(df) == 0:
        return {}
    df["total_cost"] = df["total_cost"].fillna(0.0).clip(lower=0.0)
    totals = df.groupby("end_year")["total_cost"].sum()
    return {int(year): float(total) for year, total in totals.items()}
