"""
Tests for normalization primitives and snapshot frames.
"""
import pytest
import pandas as pd
import numpy as np
import sys
from datetime import date, datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.data.models import Project, Task, TaskLog
from portfolio_stats.data.semantic import (
    as_date,
    build_tasks_lookup,
    clamp_unit,
    done_ratio_value,
    normalize_progress,
    normalize_progress_series,
    quarter_key,
    quarter_of,
    quarter_range,
    remaining_days_value,
    safe_weight,
    safe_weight_series,
    snapshot_frames,
    sum_logs_in_range,
    tasks_for_project,
    window_progress_by_task,
)


def _task(task_id=1, project_id=1, logs=None, **kwargs):
    return Task(
        id=task_id,
        project_id=project_id,
        expected_start_date=kwargs.pop("expected_start_date", date(2025, 1, 1)),
        expected_end_date=kwargs.pop("expected_end_date", date(2025, 3, 31)),
        task_logs=logs or [],
        **kwargs,
    )


def _log(log_date, progress, task_id=1):
    return TaskLog(id=0, task_id=task_id, date=log_date, progress=progress)


class TestNormalizeProgress:
    """Tests for the ambiguous-unit progress rule."""

    def test_percentage_is_scaled(self):
        assert normalize_progress(50) == 0.5

    def test_fraction_passes_through(self):
        assert normalize_progress(0.5) == 0.5

    def test_negative_floors_to_zero(self):
        assert normalize_progress(-10) == 0.0

    def test_over_hundred_clamps(self):
        assert normalize_progress(150) == 1.0

    def test_missing_is_zero(self):
        assert normalize_progress(None) == 0.0
        assert normalize_progress(float("nan")) == 0.0

    def test_always_in_unit_interval(self):
        for value in np.linspace(-500, 500, 101):
            assert 0.0 <= normalize_progress(value) <= 1.0

    def test_series_matches_scalar(self):
        values = pd.Series([50, 0.5, -10, 150, None, 1, 0])
        expected = [normalize_progress(v) for v in [50, 0.5, -10, 150, None, 1, 0]]
        assert normalize_progress_series(values).tolist() == expected


class TestClampAndWeight:
    """Tests for clamp and safe weight helpers."""

    def test_clamp_unit(self):
        assert clamp_unit(-0.2) == 0.0
        assert clamp_unit(0.3) == 0.3
        assert clamp_unit(1.3) == 1.0

    def test_safe_weight(self):
        assert safe_weight(40) == 40.0
        assert safe_weight(None) == 0.0
        assert safe_weight(-5) == 0.0
        assert safe_weight(0) == 0.0

    def test_safe_weight_series(self):
        result = safe_weight_series(pd.Series([40, None, -5, 0]))
        assert result.tolist() == [40.0, 0.0, 0.0, 0.0]

    def test_safe_weight_series_matches_scalar(self):
        values = [40, None, float("nan"), -5, 0, 12.5]
        assert safe_weight_series(pd.Series(values)).tolist() == [safe_weight(v) for v in values]

    def test_done_ratio_value(self):
        assert done_ratio_value(_task(done_ratio=0.4)) == 0.4
        assert done_ratio_value(_task(done_ratio=None)) == 0.0
        assert done_ratio_value(_task(done_ratio=float("nan"))) == 0.0

    def test_remaining_days_value(self):
        assert remaining_days_value(_task(many_days_to_complete=7)) == 7
        assert remaining_days_value(_task(many_days_to_complete=None)) == 0
        assert remaining_days_value(_task(many_days_to_complete=float("nan"))) == 0


class TestQuarters:
    """Tests for quarter helpers."""

    def test_quarter_of(self):
        assert quarter_of(date(2025, 1, 1)) == 1
        assert quarter_of(date(2025, 3, 31)) == 1
        assert quarter_of(date(2025, 4, 1)) == 2
        assert quarter_of(datetime(2025, 12, 31, 23, 0)) == 4

    def test_quarter_range_leap_year(self):
        assert quarter_range(2024, 1) == (date(2024, 1, 1), date(2024, 3, 31))
        assert quarter_range(2024, 2) == (date(2024, 4, 1), date(2024, 6, 30))
        assert quarter_range(2024, 4) == (date(2024, 10, 1), date(2024, 12, 31))

    def test_quarter_key(self):
        assert quarter_key(2025, 3) == "2025-Q3"

    def test_as_date(self):
        assert as_date(pd.Timestamp("2025-02-03 10:00")) == date(2025, 2, 3)
        assert as_date(datetime(2025, 2, 3, 10)) == date(2025, 2, 3)
        assert as_date(date(2025, 2, 3)) == date(2025, 2, 3)
        assert as_date(None) is None
        assert as_date(pd.NaT) is None


class TestSumLogsInRange:
    """Tests for windowed log summation."""

    def test_sum_is_clamped(self):
        """60% + 70% must not report 130%."""
        task = _task(logs=[_log(date(2025, 1, 1), 60), _log(date(2025, 1, 2), 70)])
        assert sum_logs_in_range(task, date(2025, 1, 1), date(2025, 1, 31)) == 1.0

    def test_window_is_inclusive(self):
        task = _task(logs=[_log(date(2025, 1, 1), 10), _log(date(2025, 3, 31), 20), _log(date(2025, 4, 1), 30)])
        assert sum_logs_in_range(task, date(2025, 1, 1), date(2025, 3, 31)) == pytest.approx(0.3)

    def test_no_logs(self):
        assert sum_logs_in_range(_task(), date(2025, 1, 1), date(2025, 12, 31)) == 0.0

    def test_mixed_units(self):
        task = _task(logs=[_log(date(2025, 5, 1), 0.25), _log(date(2025, 5, 2), 25)])
        assert sum_logs_in_range(task, date(2025, 5, 1), date(2025, 5, 31)) == pytest.approx(0.5)

    def test_frame_version_matches_scalar(self):
        task = _task(logs=[_log(date(2025, 1, 1), 60), _log(date(2025, 2, 1), 70), _log(date(2025, 5, 1), 10)])
        project = Project(id=1, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), tasks=[task])
        _, logs_df = snapshot_frames([project], build_tasks_lookup([]))
        start, end = date(2025, 1, 1), date(2025, 3, 31)
        assert window_progress_by_task(logs_df, start, end)[0] == pytest.approx(sum_logs_in_range(task, start, end))


class TestTaskLookup:
    """Tests for project -> tasks resolution."""

    def test_groups_by_project(self):
        lookup = build_tasks_lookup([_task(1, 10), _task(2, 10), _task(3, 20)])
        assert [t.id for t in lookup[10]] == [1, 2]
        assert [t.id for t in lookup[20]] == [3]

    def test_lookup_is_read_only(self):
        lookup = build_tasks_lookup([_task(1, 10)])
        with pytest.raises(TypeError):
            lookup[99] = ()

    def test_embedded_tasks_win(self):
        embedded = _task(1, 10)
        project = Project(id=10, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31),
                          tasks=[embedded])
        lookup = build_tasks_lookup([_task(2, 10), _task(3, 10)])
        assert tasks_for_project(project, lookup) == (embedded,)

    def test_falls_back_to_lookup(self):
        project = Project(id=10, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31))
        lookup = build_tasks_lookup([_task(2, 10)])
        assert [t.id for t in tasks_for_project(project, lookup)] == [2]

    def test_unknown_project_has_no_tasks(self):
        project = Project(id=99, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31))
        assert tasks_for_project(project, build_tasks_lookup([])) == ()


class TestSnapshotFrames:
    """Tests for flattening the snapshot into frames."""

    def test_logs_join_by_position_not_id(self):
        """Two tasks sharing an id keep their own logs."""
        t1 = _task(7, 1, weight=50, logs=[_log(date(2025, 1, 5), 40)])
        t2 = _task(7, 1, weight=-3, logs=[_log(date(2025, 1, 6), 0.1)])
        project = Project(id=1, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31),
                          tasks=[t1, t2])

        tasks_df, logs_df = snapshot_frames([project], build_tasks_lookup([]))

        assert tasks_df["task_key"].tolist() == [0, 1]
        assert tasks_df["weight"].tolist() == [50.0, 0.0]
        per_task = window_progress_by_task(logs_df, date(2025, 1, 1), date(2025, 1, 31))
        assert per_task[0] == pytest.approx(0.4)
        assert per_task[1] == pytest.approx(0.1)

    def test_empty_snapshot(self):
        tasks_df, logs_df = snapshot_frames([], build_tasks_lookup([]))
        assert len(tasks_df) == 0
        assert len(logs_df) == 0
        assert len(window_progress_by_task(logs_df, date(2025, 1, 1), date(2025, 12, 31))) == 0

    def test_absent_done_ratio_is_zero(self):
        project = Project(id=1, name="P", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31),
                          tasks=[_task(1, 1)])
        tasks_df, _ = snapshot_frames([project], build_tasks_lookup([]))
        assert tasks_df["done_ratio"].tolist() == [0.0]
