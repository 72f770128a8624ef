"""
Portfolio dashboard: composes status, budget, risk and progress metrics.

Pure orchestration over one snapshot; no I/O and no extra logic.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.schema import require_collection
from portfolio_stats.data.semantic import build_tasks_lookup, snapshot_frames
from portfolio_stats.metrics.budget import (
    budgets_by_year,
    budgets_except_fully_done,
    projects_count_by_year,
)
from portfolio_stats.metrics.progress import ProjectProgressDetail, compute_progress
from portfolio_stats.metrics.risk import ProjectRiskInfo, overdue_or_at_risk_projects
from portfolio_stats.metrics.status import StatusSummary, compute_status_summary

logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    """Aggregate portfolio KPIs for one snapshot."""
    status: StatusSummary = field(default_factory=StatusSummary)
    projects_count_by_year: Dict[int, int] = field(default_factory=dict)
    budgets_except_fully_done: Dict[int, float] = field(default_factory=dict)
    project_names: Dict[int, str] = field(default_factory=dict)
    budgets_by_year: Dict[int, float] = field(default_factory=dict)
    overdue_or_at_risk: List[ProjectRiskInfo] = field(default_factory=list)
    targeted_progress_by_year: Dict[int, float] = field(default_factory=dict)
    actual_progress_by_year: Dict[int, float] = field(default_factory=dict)
    targeted_progress_by_quarter: Dict[str, float] = field(default_factory=dict)
    actual_progress_by_quarter: Dict[str, float] = field(default_factory=dict)
    project_progress_details: List[ProjectProgressDetail] = field(default_factory=list)

    @property
    def in_progress_projects(self) -> int:
        return self.status.in_progress

    @property
    def not_started_projects(self) -> int:
        return self.status.not_started

    @property
    def done_projects(self) -> int:
        return self.status.done

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready plain structure (ISO dates, string keys)."""
        return _jsonable(asdict(self))


def _jsonable(value):
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def calculate_dashboard(projects: Optional[Iterable[Project]],
                        tasks: Optional[Iterable[Task]],
                        now: Optional[datetime] = None) -> DashboardStats:
    """
    Compute every dashboard KPI for a snapshot.

    Args:
        projects: Projects in scope, optionally with embedded tasks
        tasks: Flat list of all tasks; used for projects without embedded tasks
        now: Reference time; defaults to today at midnight

    Raises:
        SnapshotValidationError: if ``projects`` or ``tasks`` is None
    """
    projects = list(require_collection(projects, "projects"))
    tasks = list(require_collection(tasks, "tasks"))

    if now is None:
        now = datetime.combine(date.today(), datetime.min.time())

    lookup = build_tasks_lookup(tasks)
    frames = snapshot_frames(projects, lookup)

    status = compute_status_summary(projects, lookup, frames=frames)
    budgets, names = budgets_except_fully_done(projects, lookup)
    risk = overdue_or_at_risk_projects(projects, lookup, now)
    progress = compute_progress(projects, lookup, frames=frames)

    logger.debug("Dashboard computed for %d projects and %d flat tasks", len(projects), len(tasks))

    return DashboardStats(
        status=status,
        projects_count_by_year=projects_count_by_year(projects),
        budgets_except_fully_done=budgets,
        project_names=names,
        budgets_by_year=budgets_by_year(projects),
        overdue_or_at_risk=risk,
        targeted_progress_by_year=progress.targeted_by_year,
        actual_progress_by_year=progress.actual_by_year,
        targeted_progress_by_quarter=progress.targeted_by_quarter,
        actual_progress_by_quarter=progress.actual_by_quarter,
        project_progress_details=progress.project_details,
    )
