"""
Consistent number and display formatting.
"""
import pandas as pd
from datetime import date, datetime
from typing import Union

from portfolio_stats.config import FORMAT_DATE


# =============================================================================
# NUMBER FORMATTERS
# =============================================================================

def fmt_currency(value: Union[float, int, None], decimals: int = 0) -> str:
    """Format as amount: 1,234 or 1,234.56"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:,.{decimals}f}"


def fmt_percent(value: Union[float, int, None], decimals: int = 1) -> str:
    """Format percentage: 12.3%"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:,.{decimals}f}%"


def fmt_fraction(value: Union[float, int, None], decimals: int = 1) -> str:
    """Format a 0..1 fraction as a percentage: 0.123 -> 12.3%"""
    if value is None or pd.isna(value):
        return "—"
    return fmt_percent(value * 100, decimals)


def fmt_count(value: Union[float, int, None]) -> str:
    """Format count: 1,234"""
    if value is None or pd.isna(value):
        return "—"
    return f"{int(value):,}"


def fmt_date(value: Union[date, datetime, None]) -> str:
    """Format date: 2025-03-31"""
    if value is None or pd.isna(value):
        return "—"
    return value.strftime(FORMAT_DATE)


def fmt_variance(value: Union[float, int, None]) -> str:
    """Format a percentage-point variance with +/- sign."""
    if value is None or pd.isna(value):
        return "—"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:,.1f}pp"


# =============================================================================
# DATAFRAME FORMATTERS
# =============================================================================

CURRENCY_COLS = ["budget", "total_budget"]
PERCENT_COLS = [
    "targeted", "actual",
    "annual_target_progress", "quarter_target_progress", "actual_progress",
]
COUNT_COLS = ["incomplete_tasks_count", "projects"]
DATE_COLS = ["end_date"]


def format_metric_df(df: pd.DataFrame) -> pd.DataFrame:
    """
    Format a metrics dataframe for display.

    Applies appropriate formatting to known column types.
    """
    df = df.copy()

    for col in df.columns:
        if col in CURRENCY_COLS:
            df[col] = df[col].apply(fmt_currency)
        elif col == "variance_pp":
            df[col] = df[col].apply(fmt_variance)
        elif col in PERCENT_COLS:
            df[col] = df[col].apply(fmt_percent)
        elif col in COUNT_COLS:
            df[col] = df[col].apply(fmt_count)
        elif col in DATE_COLS:
            df[col] = df[col].apply(fmt_date)

    return df
