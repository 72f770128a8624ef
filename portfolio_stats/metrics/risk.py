"""
Delivery risk metrics pack.

Single source of truth for: overdue and at-risk project identification.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Mapping, Optional, Sequence

import pandas as pd

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import (
    as_date,
    done_ratio_value,
    remaining_days_value,
    tasks_for_project,
)

logger = logging.getLogger(__name__)


@dataclass
class ProjectRiskInfo:
    project_id: int
    name: str
    end_date: object
    incomplete_tasks_count: int
    delay_reasons: Optional[str] = None
    is_overdue: bool = False
    is_at_risk: bool = False


def assess_project_risk(project: Project, tasks: Sequence[Task], today: date) -> dict:
    """
    Risk flags for one project.

    Overdue: past end date with incomplete tasks.
    At risk: not overdue, but the incomplete tasks' estimated work-days exceed
    the project's planned duration.
    """
    incomplete = [t for t in tasks if done_ratio_value(t) < 1.0]
    incomplete_count = len(incomplete)
    remaining_days = sum(remaining_days_value(t) for t in incomplete)

    start = as_date(project.start_date)
    end = as_date(project.end_date)
    duration_days = max(0, (end - start).days)

    is_overdue = today > end and incomplete_count > 0
    is_at_risk = (not is_overdue) and incomplete_count > 0 and remaining_days > duration_days

    return {
        "incomplete_tasks_count": incomplete_count,
        "remaining_required_days": remaining_days,
        "project_duration_days": duration_days,
        "is_overdue": is_overdue,
        "is_at_risk": is_at_risk,
    }


def overdue_or_at_risk_projects(projects: Sequence[Project],
                                lookup: Mapping[int, Sequence[Task]],
                                today: datetime) -> List[ProjectRiskInfo]:
    """
    Projects flagged overdue or at risk.

    Overdue projects first, then by nearest end date.
    """
    today_date = as_date(today)
    today_ts = pd.Timestamp(today_date)

    rows = []
    for project in projects:
        risk = assess_project_risk(project, tasks_for_project(project, lookup), today_date)
        if not (risk["is_overdue"] or risk["is_at_risk"]):
            continue
        rows.append({
            "project": project,
            "end_ts": pd.Timestamp(project.end_date),
            **risk,
        })

    if not rows:
        return []

    flagged = pd.DataFrame(rows)
    flagged["ends_before_today"] = flagged["end_ts"] < today_ts
    flagged = flagged.sort_values(["ends_before_today", "end_ts"], ascending=[False, True])

    result = [
        ProjectRiskInfo(
            project_id=row.project.id,
            name=row.project.display_name,
            end_date=row.project.end_date,
            incomplete_tasks_count=int(row.incomplete_tasks_count),
            delay_reasons=row.project.delay_reasons,
            is_overdue=bool(row.is_overdue),
            is_at_risk=bool(row.is_at_risk),
        )
        for row in flagged.itertuples(index=False)
    ]

    logger.debug(
        "Risk analysis flagged %d projects (%d overdue)",
        len(result), sum(1 for r in result if r.is_overdue),
    )
    return result
