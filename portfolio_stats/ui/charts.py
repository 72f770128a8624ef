"""
Standard chart wrappers using Plotly.
"""
import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import List

from portfolio_stats.metrics.status import StatusSummary


# =============================================================================
# CHART THEME
# =============================================================================

CHART_COLORS = {
    "primary": "#1f77b4",
    "secondary": "#ff7f0e",
    "success": "#28a745",
    "warning": "#ffc107",
    "danger": "#dc3545",
    "neutral": "#6c757d",
    "light": "#f8f9fa",
}

CHART_TEMPLATE = "plotly_white"

DEFAULT_LAYOUT = {
    "template": CHART_TEMPLATE,
    "font": {"family": "Arial, sans-serif", "size": 12},
    "margin": {"l": 50, "r": 30, "t": 40, "b": 50},
    "hoverlabel": {"bgcolor": "white"},
}


def apply_layout(fig: go.Figure, **kwargs) -> go.Figure:
    """Apply standard layout to figure."""
    layout = {**DEFAULT_LAYOUT, **kwargs}
    fig.update_layout(**layout)
    return fig


# =============================================================================
# KPI CHARTS
# =============================================================================

def status_donut(status: StatusSummary, title: str = "Project Status") -> go.Figure:
    """Donut of Done / In Progress / Not Started counts."""
    fig = go.Figure(go.Pie(
        labels=["Done", "In Progress", "Not Started"],
        values=[status.done, status.in_progress, status.not_started],
        hole=0.55,
        marker={"colors": [CHART_COLORS["success"], CHART_COLORS["primary"], CHART_COLORS["neutral"]]},
        sort=False,
    ))
    return apply_layout(fig, title=title, height=320)


# =============================================================================
# BAR CHARTS
# =============================================================================

def horizontal_bar(df: pd.DataFrame, x: str, y: str,
                   title: str = "") -> go.Figure:
    """
    Create horizontal bar chart.
    """
    fig = px.bar(df, x=x, y=y, orientation="h", title=title)
    fig.update_layout(yaxis={"categoryorder": "total ascending"})
    return apply_layout(fig)


def grouped_bar(df: pd.DataFrame, x: str, y: List[str],
                title: str = "", barmode: str = "group") -> go.Figure:
    """
    Create grouped or stacked bar chart.
    """
    fig = go.Figure()

    colors = list(CHART_COLORS.values())

    for i, col in enumerate(y):
        fig.add_trace(go.Bar(
            name=col,
            x=df[x],
            y=df[col],
            marker_color=colors[i % len(colors)],
        ))

    fig.update_layout(barmode=barmode, title=title)

    return apply_layout(fig)


def progress_comparison_chart(df: pd.DataFrame, title: str = "Targeted vs Actual Progress") -> go.Figure:
    """
    Targeted vs actual grouped bars from a ``progress_comparison`` frame.
    """
    chart_df = df.rename(columns={"targeted": "Targeted", "actual": "Actual"})
    fig = grouped_bar(chart_df, x="period", y=["Targeted", "Actual"], title=title)
    fig.update_yaxes(title_text="% (portfolio average)")
    return fig
