"""Project, task and task log snapshot records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union

DateLike = Union[date, datetime]


@dataclass
class TaskLog:
    """A dated, incremental progress entry for a task.

    ``progress`` may arrive as a fraction (0..1) or a percentage (0..100).
    """

    id: int
    task_id: int
    date: DateLike
    progress: Optional[float]
    notes: Optional[str] = None


@dataclass
class Task:
    """A weighted unit of work inside a project."""

    id: int
    project_id: int
    expected_start_date: DateLike
    expected_end_date: DateLike
    actual_end_date: Optional[DateLike] = None
    done_ratio: Optional[float] = None
    weight: Optional[float] = None
    cost: Optional[float] = None
    many_days_to_complete: int = 0
    stage_name: Optional[str] = None
    implementor_department: Optional[str] = None
    task_logs: List[TaskLog] = field(default_factory=list)


@dataclass
class Project:
    """A project in the portfolio together with its (optional) embedded tasks."""

    id: int
    name: str
    start_date: DateLike
    end_date: DateLike
    name_localized: Optional[str] = None
    total_cost: Optional[float] = None
    delay_reasons: Optional[str] = None
    tasks: List[Task] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Localized name when present, otherwise the base name."""
        if self.name_localized and self.name_localized.strip():
            return self.name_localized
        return self.name
