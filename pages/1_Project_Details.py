"""
Project Details Page

Single-project KPIs: task status, stage completion, departments, timeline.
"""
import streamlit as st
import pandas as pd
from datetime import date
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.data.loader import load_projects, load_tasks, load_task_logs
from portfolio_stats.data.schema import SchemaValidationError
from portfolio_stats.data.snapshot import build_snapshot
from portfolio_stats.metrics.project_kpis import compute_project_kpis
from portfolio_stats.ui.charts import horizontal_bar
from portfolio_stats.ui.formatting import fmt_count, fmt_date, fmt_fraction, fmt_percent


st.set_page_config(page_title="Project Details", page_icon="🗂", layout="wide")


def main():
    st.title("Project Details")

    try:
        projects, tasks = build_snapshot(load_projects(), load_tasks(), load_task_logs())
    except SchemaValidationError as e:
        st.error(f"Error loading data: {e}")
        return

    if not projects:
        st.info("No projects in snapshot.")
        return

    options = {f"{p.display_name} (#{p.id})": p for p in projects}
    project = options[st.selectbox("Project", list(options.keys()))]
    kpis = compute_project_kpis(project, tasks, today=date.today())

    st.caption(f"{fmt_date(project.start_date)} → {fmt_date(project.end_date)}")

    c1, c2, c3, c4, c5 = st.columns(5)
    with c1:
        st.metric("Tasks", fmt_count(kpis.total_tasks))
    with c2:
        st.metric("Completed", kpis.task_status_chart_data)
    with c3:
        st.metric("In Progress", fmt_count(kpis.in_progress_tasks))
    with c4:
        st.metric("Not Started", fmt_count(kpis.not_started_tasks))
    with c5:
        st.metric("Overdue", fmt_count(kpis.overdue_tasks))

    m1, m2, m3 = st.columns(3)
    with m1:
        st.metric("Completion", fmt_percent(kpis.completion_percentage))
    with m2:
        st.metric("Avg task completion", fmt_percent(kpis.average_task_completion))
    with m3:
        st.metric("Timeline elapsed", fmt_percent(kpis.project_progress_percentage),
                  delta=f"{kpis.days_remaining} days remaining", delta_color="off")

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("#### Stage completion (weighted)")
        if kpis.stage_completion_by_weight:
            stages = pd.DataFrame([
                {
                    "Stage": stage,
                    "Tasks": kpis.stage_task_counts.get(stage, 0),
                    "Completion": fmt_fraction(value),
                }
                for stage, value in kpis.stage_completion_by_weight.items()
            ])
            st.dataframe(stages, use_container_width=True)
        else:
            st.info("No stages recorded.")
    with col2:
        st.markdown("#### Tasks by department")
        if kpis.tasks_by_department:
            dept = pd.DataFrame(
                [{"department": k, "tasks": v} for k, v in kpis.tasks_by_department.items()]
            )
            st.plotly_chart(horizontal_bar(dept, x="tasks", y="department"), use_container_width=True)
        else:
            st.info("No departments recorded.")

    if project.delay_reasons:
        st.warning(f"Delay reasons: {project.delay_reasons}")


main()
