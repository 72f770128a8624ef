"""
Build engine snapshot records from project, task and task log tables.
"""
from typing import List, Optional, Tuple

import pandas as pd

from portfolio_stats.data.models import Project, Task, TaskLog
from portfolio_stats.data.schema import ensure_column_types, validate_schema


def _value(row: pd.Series, col: str, default=None):
    """Column value with missing columns and nulls mapped to ``default``."""
    if col not in row.index:
        return default
    value = row[col]
    if value is None or (not isinstance(value, (list, dict)) and pd.isna(value)):
        return default
    return value


def _text(row: pd.Series, col: str) -> Optional[str]:
    value = _value(row, col)
    return str(value) if value is not None else None


def _number(row: pd.Series, col: str) -> Optional[float]:
    value = _value(row, col)
    return float(value) if value is not None else None


def build_snapshot(projects_df: pd.DataFrame,
                   tasks_df: pd.DataFrame,
                   logs_df: Optional[pd.DataFrame] = None,
                   embed_tasks: bool = True) -> Tuple[List[Project], List[Task]]:
    """
    Convert snapshot tables into Project and Task records.

    Logs are attached to their task. When ``embed_tasks`` is set, tasks are
    also attached to their project; the flat task list is always returned.

    Raises:
        SchemaValidationError: if a table is missing required columns
    """
    validate_schema(projects_df, "projects", strict=True)
    validate_schema(tasks_df, "tasks", strict=True)
    projects_df = ensure_column_types(projects_df)
    tasks_df = ensure_column_types(tasks_df)

    logs_by_task = {}
    if logs_df is not None and len(logs_df) > 0:
        validate_schema(logs_df, "task_logs", strict=True)
        logs_df = ensure_column_types(logs_df)
        for _, row in logs_df.iterrows():
            log = TaskLog(
                id=int(row["id"]),
                task_id=int(row["task_id"]),
                date=_value(row, "date"),
                progress=_number(row, "progress"),
                notes=_text(row, "notes"),
            )
            logs_by_task.setdefault(log.task_id, []).append(log)

    tasks: List[Task] = []
    for _, row in tasks_df.iterrows():
        task_id = int(row["id"])
        tasks.append(Task(
            id=task_id,
            project_id=int(row["project_id"]),
            expected_start_date=_value(row, "expected_start_date"),
            expected_end_date=_value(row, "expected_end_date"),
            actual_end_date=_value(row, "actual_end_date"),
            done_ratio=_number(row, "done_ratio"),
            weight=_number(row, "weight"),
            cost=_number(row, "cost"),
            many_days_to_complete=int(_value(row, "many_days_to_complete", 0)),
            stage_name=_text(row, "stage_name"),
            implementor_department=_text(row, "implementor_department"),
            task_logs=logs_by_task.get(task_id, []),
        ))

    tasks_by_project = {}
    for task in tasks:
        tasks_by_project.setdefault(task.project_id, []).append(task)

    projects: List[Project] = []
    for _, row in projects_df.iterrows():
        project_id = int(row["id"])
        projects.append(Project(
            id=project_id,
            name=str(row["name"]),
            name_localized=_text(row, "name_localized"),
            start_date=_value(row, "start_date"),
            end_date=_value(row, "end_date"),
            total_cost=_number(row, "total_cost"),
            delay_reasons=_text(row, "delay_reasons"),
            tasks=list(tasks_by_project.get(project_id, [])) if embed_tasks else [],
        ))

    return projects, tasks
