"""
Project status metrics: Done / Not Started / In Progress distribution.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import snapshot_frames

logger = logging.getLogger(__name__)

STATUS_DONE = "done"
STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"


@dataclass
class ProjectRef:
    project_id: int
    name: str


@dataclass
class StatusSummary:
    """Status counts plus the projects behind each count."""
    in_progress: int = 0
    not_started: int = 0
    done: int = 0
    in_progress_projects: List[ProjectRef] = field(default_factory=list)
    not_started_projects: List[ProjectRef] = field(default_factory=list)
    done_projects: List[ProjectRef] = field(default_factory=list)


def classify_task_states(tasks_df: pd.DataFrame) -> pd.Series:
    """
    Classify each project present in ``tasks_df`` from its tasks' done ratios.

    Returns Series indexed by project_id with one of the STATUS_* values.
    Projects without tasks do not appear.
    """
    if len(tasks_df) == 0:
        return pd.Series(dtype=object)

    flags = tasks_df.groupby("project_id", sort=False)["done_ratio"].agg(
        all_done=lambda s: bool((s >= 1.0).all()),
        none_started=lambda s: bool((s == 0).all()),
    )

    # allDone takes precedence over noneStarted
    status = pd.Series(STATUS_IN_PROGRESS, index=flags.index, dtype=object)
    status[flags["none_started"].astype(bool)] = STATUS_NOT_STARTED
    status[flags["all_done"].astype(bool)] = STATUS_DONE
    return status


def compute_status_summary(projects: Sequence[Project],
                           lookup: Mapping[int, Sequence[Task]],
                           frames: Optional[Tuple[pd.DataFrame, pd.DataFrame]] = None) -> StatusSummary:
    """
    Bucket every project that has at least one task into exactly one status.
    """
    tasks_df, _ = frames if frames is not None else snapshot_frames(projects, lookup)
    status_by_project = classify_task_states(tasks_df)

    summary = StatusSummary()
    for project in projects:
        if project.id not in status_by_project.index:
            continue
        ref = ProjectRef(project_id=project.id, name=project.display_name)
        status = status_by_project[project.id]
        if status == STATUS_DONE:
            summary.done += 1
            summary.done_projects.append(ref)
        elif status == STATUS_NOT_STARTED:
            summary.not_started += 1
            summary.not_started_projects.append(ref)
        else:
            summary.in_progress += 1
            summary.in_progress_projects.append(ref)

    logger.debug(
        "Status summary: done=%d not_started=%d in_progress=%d",
        summary.done, summary.not_started, summary.in_progress,
    )
    return summary
