"""
Project Portfolio Statistics

Main entry point for Streamlit app.
"""
import pandas as pd
import streamlit as st
from pathlib import Path
from datetime import date, datetime, timedelta

# Page config must be first Streamlit command
st.set_page_config(
    page_title="Portfolio Statistics",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Add package root to path
import sys
sys.path.insert(0, str(Path(__file__).parent))

from portfolio_stats.config import config
from portfolio_stats.data.loader import load_projects, load_tasks, load_task_logs, get_data_status
from portfolio_stats.data.schema import SchemaValidationError
from portfolio_stats.data.snapshot import build_snapshot
from portfolio_stats.exports import export_dashboard_json, export_tables_excel
from portfolio_stats.metrics.dashboard import calculate_dashboard
from portfolio_stats.ui.charts import horizontal_bar, progress_comparison_chart, status_donut
from portfolio_stats.ui.formatting import fmt_count, fmt_currency, format_metric_df
from portfolio_stats.ui.tables import (
    COLUMN_LABELS,
    budget_table,
    progress_comparison,
    progress_detail_table,
    risk_table,
    year_table,
)


def main():
    """Main app entry point."""

    st.title("Project Portfolio Statistics")
    st.caption("Status → Budget → Risk → Targeted vs Actual Progress")

    status = get_data_status()
    if not any(info["parquet_exists"] or info["csv_exists"] for info in status["processed"].values()):
        st.error("No data found!")
        st.markdown(f"""
        ### Setup Required

        Please place your snapshot files in: `{config.processed_dir}`

        Required files:
        - `projects.parquet` (or .csv)
        - `tasks.parquet` (or .csv)

        Optional files:
        - `task_logs.parquet` (or .csv)

        Run `python scripts/validate_inputs.py` to check them.
        """)
        return

    with st.spinner("Loading data..."):
        try:
            projects, tasks = build_snapshot(load_projects(), load_tasks(), load_task_logs())
        except SchemaValidationError as e:
            st.error(f"Error loading data: {e}")
            return

    reference_date = st.sidebar.date_input("Reference date", value=date.today())
    now = datetime.combine(reference_date, datetime.min.time())
    stats = calculate_dashboard(projects, tasks, now=now)

    # Status
    st.markdown("### Project Status")
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("Projects", fmt_count(len(projects)))
    with c2:
        st.metric("Done", fmt_count(stats.done_projects))
    with c3:
        st.metric("In Progress", fmt_count(stats.in_progress_projects))
    with c4:
        st.metric("Not Started", fmt_count(stats.not_started_projects))

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(status_donut(stats.status), use_container_width=True)
    with col2:
        bucket = st.selectbox("Show projects", ["Done", "In Progress", "Not Started"])
        refs = {
            "Done": stats.status.done_projects,
            "In Progress": stats.status.in_progress_projects,
            "Not Started": stats.status.not_started_projects,
        }[bucket]
        st.dataframe([{"ID": r.project_id, "Project": r.name} for r in refs], use_container_width=True)

    # Budget
    st.markdown("---")
    st.markdown("### Budget Exposure")
    budgets = budget_table(stats.budgets_except_fully_done, stats.project_names)
    total_exposure = budgets["budget"].sum() if len(budgets) > 0 else 0
    st.metric("Open budget (excluding fully done)", fmt_currency(total_exposure))

    col1, col2 = st.columns(2)
    with col1:
        if len(budgets) > 0:
            st.plotly_chart(horizontal_bar(budgets.head(15), x="budget", y="name",
                                           title="Largest open budgets"), use_container_width=True)
        else:
            st.info("No open budgets.")
    with col2:
        by_year = year_table(stats.budgets_by_year, "budget").merge(
            year_table(stats.projects_count_by_year, "projects"), on="year", how="outer"
        )
        st.dataframe(format_metric_df(by_year).rename(columns=COLUMN_LABELS), use_container_width=True)

    # Risk
    st.markdown("---")
    st.markdown("### Overdue & At-Risk Projects")
    risk = risk_table(stats.overdue_or_at_risk)
    if len(risk) == 0:
        st.success("No overdue or at-risk projects.")
    else:
        due_soon_cutoff = now + timedelta(days=config.at_risk_lookahead_days)
        due_soon = sum(1 for r in stats.overdue_or_at_risk
                       if not r.is_overdue and pd.Timestamp(r.end_date) <= pd.Timestamp(due_soon_cutoff))
        st.caption(f"{due_soon} at-risk projects end within {config.at_risk_lookahead_days} days")
        st.dataframe(format_metric_df(risk).rename(columns=COLUMN_LABELS), use_container_width=True)

    # Progress
    st.markdown("---")
    st.markdown("### Targeted vs Actual Progress")
    period = st.radio("Period", ["Year", "Quarter"], horizontal=True)
    if period == "Year":
        comparison = progress_comparison(stats.targeted_progress_by_year, stats.actual_progress_by_year)
    else:
        comparison = progress_comparison(stats.targeted_progress_by_quarter, stats.actual_progress_by_quarter)

    if len(comparison) > 0:
        st.plotly_chart(progress_comparison_chart(comparison), use_container_width=True)
    else:
        st.info("No progress data.")

    details = progress_detail_table(stats.project_progress_details)
    with st.expander("Project drill-down"):
        st.dataframe(format_metric_df(details).rename(columns=COLUMN_LABELS), use_container_width=True)

    # Export
    st.markdown("---")
    json_bytes, json_name = export_dashboard_json(stats)
    excel_bytes, excel_name = export_tables_excel({
        "budgets": budgets,
        "risk": risk,
        "progress_details": details,
        "progress": comparison,
    })
    e1, e2 = st.columns(2)
    with e1:
        st.download_button("Download JSON", json_bytes, file_name=json_name, mime="application/json")
    with e2:
        st.download_button("Download Excel", excel_bytes, file_name=excel_name)


if __name__ == "__main__":
    main()
