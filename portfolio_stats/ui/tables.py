"""
Display tables built from dashboard results.
"""
from dataclasses import asdict
from typing import Dict, List, Mapping

import pandas as pd

from portfolio_stats.metrics.progress import ProjectProgressDetail
from portfolio_stats.metrics.risk import ProjectRiskInfo

COLUMN_LABELS = {
    "project_id": "ID",
    "name": "Project",
    "project_name": "Project",
    "end_date": "End Date",
    "incomplete_tasks_count": "Incomplete Tasks",
    "delay_reasons": "Delay Reasons",
    "risk_status": "Status",
    "year": "Year",
    "quarter": "Quarter",
    "period": "Period",
    "annual_target_progress": "Annual Target %",
    "quarter_target_progress": "Quarter Target %",
    "actual_progress": "Actual %",
    "targeted": "Targeted %",
    "actual": "Actual %",
    "variance_pp": "Variance",
    "budget": "Budget",
    "projects": "Projects",
}


def risk_table(risk: List[ProjectRiskInfo]) -> pd.DataFrame:
    """Overdue / at-risk list as a DataFrame, preserving engine order."""
    columns = ["project_id", "name", "end_date", "incomplete_tasks_count", "delay_reasons", "risk_status"]
    if not risk:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame([asdict(r) for r in risk])
    df["risk_status"] = df["is_overdue"].map({True: "Overdue", False: "At Risk"})
    return df[columns]


def progress_detail_table(details: List[ProjectProgressDetail]) -> pd.DataFrame:
    """Per project / year / quarter drill-down rows."""
    columns = [
        "project_id", "project_name", "year", "quarter",
        "annual_target_progress", "quarter_target_progress", "actual_progress", "delay_reasons",
    ]
    if not details:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([asdict(d) for d in details])[columns]


def progress_comparison(targeted: Mapping, actual: Mapping) -> pd.DataFrame:
    """
    Targeted vs actual by period (year or quarter key), sorted by period.

    variance_pp = actual - targeted, in percentage points.
    """
    periods = sorted(set(targeted) | set(actual), key=str)
    df = pd.DataFrame({
        "period": [str(p) for p in periods],
        "targeted": [float(targeted.get(p, 0.0)) for p in periods],
        "actual": [float(actual.get(p, 0.0)) for p in periods],
    })
    df["variance_pp"] = df["actual"] - df["targeted"]
    return df


def budget_table(budgets: Dict[int, float], names: Dict[int, str]) -> pd.DataFrame:
    """Budget exposure per project, largest first."""
    df = pd.DataFrame(
        [{"project_id": pid, "name": names.get(pid, str(pid)), "budget": amount}
         for pid, amount in budgets.items()],
        columns=["project_id", "name", "budget"],
    )
    return df.sort_values("budget", ascending=False, kind="mergesort").reset_index(drop=True)


def year_table(values: Dict[int, float], value_col: str) -> pd.DataFrame:
    """Year-keyed map as a two-column frame."""
    return pd.DataFrame(
        [{"year": year, value_col: value} for year, value in sorted(values.items())],
        columns=["year", value_col],
    )
