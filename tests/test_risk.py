"""
Tests for overdue / at-risk detection.
"""
import sys
from datetime import date, datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.data.models import Project, Task
from portfolio_stats.data.semantic import build_tasks_lookup
from portfolio_stats.metrics.dashboard import calculate_dashboard
from portfolio_stats.metrics.risk import assess_project_risk, overdue_or_at_risk_projects


def _project(project_id, start, end, tasks):
    return Project(id=project_id, name=f"Project {project_id}", start_date=start, end_date=end,
                   delay_reasons=f"reason {project_id}", tasks=tasks)


def _task(project_id, done_ratio, days=0, task_id=1):
    return Task(id=task_id, project_id=project_id,
                expected_start_date=date(2025, 1, 1), expected_end_date=date(2025, 1, 31),
                done_ratio=done_ratio, many_days_to_complete=days)


NOW = datetime(2025, 6, 15)


class TestOverdue:
    """Tests for overdue detection."""

    def test_past_end_with_incomplete_task(self):
        """Ended yesterday with a half-done task: overdue."""
        project = _project(2, date(2025, 1, 1), date(2025, 6, 14), [_task(2, 0.5)])
        result = overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW)

        assert len(result) == 1
        assert result[0].is_overdue is True
        assert result[0].is_at_risk is False
        assert result[0].incomplete_tasks_count == 1
        assert result[0].delay_reasons == "reason 2"

    def test_end_date_today_is_not_overdue(self):
        project = _project(1, date(2025, 1, 1), date(2025, 6, 15), [_task(1, 0.5)])
        assert overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW) == []

    def test_complete_project_not_flagged(self):
        project = _project(1, date(2025, 1, 1), date(2025, 3, 1), [_task(1, 1.0, days=500)])
        assert overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW) == []

    def test_absent_done_ratio_counts_as_incomplete(self):
        project = _project(1, date(2025, 1, 1), date(2025, 3, 1), [_task(1, None)])
        result = overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW)
        assert result[0].is_overdue is True

    def test_project_without_tasks_not_flagged(self):
        project = _project(1, date(2025, 1, 1), date(2025, 3, 1), [])
        assert overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW) == []


class TestAtRisk:
    """Tests for at-risk detection."""

    def test_remaining_days_exceed_duration(self):
        """A 9-day project with 30 days of open work is at risk."""
        project = _project(3, date(2025, 1, 1), date(2025, 1, 10), [_task(3, 0.0, days=30)])
        result = overdue_or_at_risk_projects([project], build_tasks_lookup([]), datetime(2024, 12, 1))

        assert len(result) == 1
        assert result[0].is_at_risk is True
        assert result[0].is_overdue is False

    def test_completed_tasks_do_not_count(self):
        tasks = [_task(1, 1.0, days=100, task_id=1), _task(1, 0.2, days=5, task_id=2)]
        project = _project(1, date(2025, 6, 1), date(2025, 6, 30), tasks)
        assert overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW) == []

    def test_overdue_and_at_risk_are_exclusive(self):
        project = _project(1, date(2025, 1, 1), date(2025, 1, 10), [_task(1, 0.0, days=300)])
        risk = assess_project_risk(project, project.tasks, NOW.date())
        assert risk["is_overdue"] is True
        assert risk["is_at_risk"] is False

    def test_inverted_dates_have_zero_duration(self):
        project = _project(1, date(2025, 8, 1), date(2025, 7, 1), [_task(1, 0.0, days=1)])
        risk = assess_project_risk(project, project.tasks, NOW.date())
        assert risk["project_duration_days"] == 0
        assert risk["is_at_risk"] is True


class TestOrdering:
    """Tests for overdue-first, nearest-deadline ordering."""

    def test_overdue_first_then_end_date(self):
        projects = [
            _project(10, date(2025, 6, 1), date(2025, 7, 30), [_task(10, 0.0, days=100)]),  # at risk
            _project(11, date(2025, 1, 1), date(2025, 5, 1), [_task(11, 0.3)]),            # overdue
            _project(12, date(2025, 6, 1), date(2025, 6, 20), [_task(12, 0.0, days=30)]),   # at risk
            _project(13, date(2025, 1, 1), date(2025, 3, 1), [_task(13, 0.9)]),            # overdue
            _project(14, date(2025, 1, 1), date(2025, 12, 31), [_task(14, 0.5, days=3)]),   # fine
        ]
        result = overdue_or_at_risk_projects(projects, build_tasks_lookup([]), NOW)

        assert [r.project_id for r in result] == [13, 11, 12, 10]
        assert [r.is_overdue for r in result] == [True, True, False, False]

    def test_flat_task_lookup(self):
        project = _project(1, date(2025, 1, 1), date(2025, 3, 1), [])
        lookup = build_tasks_lookup([_task(1, 0.1), _task(1, 0.2, task_id=2)])
        result = overdue_or_at_risk_projects([project], lookup, NOW)
        assert result[0].incomplete_tasks_count == 2


class TestMissingValues:
    """NaN done ratios and work-day estimates count as absent."""

    def test_nan_done_ratio_is_incomplete(self):
        project = _project(1, date(2025, 1, 1), date(2025, 5, 1), [_task(1, float("nan"))])
        result = overdue_or_at_risk_projects([project], build_tasks_lookup([]), NOW)

        assert len(result) == 1
        assert result[0].is_overdue is True
        assert result[0].incomplete_tasks_count == 1

    def test_nan_done_ratio_agrees_with_status(self):
        """A project counted as Not Started is also flagged once past its end date."""
        project = _project(1, date(2025, 1, 1), date(2025, 5, 1), [_task(1, float("nan"))])
        stats = calculate_dashboard([project], [], now=NOW)

        assert stats.not_started_projects == 1
        assert [r.project_id for r in stats.overdue_or_at_risk] == [1]

    def test_nan_remaining_days_count_as_zero(self):
        project = _project(1, date(2025, 7, 1), date(2025, 7, 10), [_task(1, 0.0, days=float("nan"))])
        risk = assess_project_risk(project, project.tasks, NOW.date())
        assert risk["remaining_required_days"] == 0
        assert risk["is_at_risk"] is False
