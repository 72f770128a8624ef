"""
Export utilities for tables and dashboard snapshots.
"""
import json
from datetime import datetime
from io import BytesIO
from typing import Dict, Optional

import pandas as pd

from portfolio_stats.metrics.dashboard import DashboardStats


def export_dataframe_csv(df: pd.DataFrame, filename: Optional[str] = None) -> tuple:
    """
    Export dataframe to CSV bytes.

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("export", "csv")

    csv_bytes = df.to_csv(index=False).encode("utf-8")

    return csv_bytes, filename


def export_tables_excel(tables: Dict[str, pd.DataFrame], filename: Optional[str] = None) -> tuple:
    """
    Export several dataframes to one Excel workbook, one sheet per table.
    Empty tables are skipped.

    Returns: (excel_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("portfolio_stats", "xlsx")

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        written = 0
        for sheet_name, df in tables.items():
            if df is not None and len(df) > 0:
                df.to_excel(writer, sheet_name=sheet_name[:31], index=False)
                written += 1
        if written == 0:
            pd.DataFrame().to_excel(writer, sheet_name="empty", index=False)

    return buffer.getvalue(), filename


def export_dashboard_json(stats: DashboardStats, filename: Optional[str] = None) -> tuple:
    """
    Export the full dashboard aggregate to JSON.

    Returns: (json_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("dashboard", "json")

    json_bytes = json.dumps(stats.to_dict(), indent=2, default=str).encode("utf-8")

    return json_bytes, filename


def format_export_filename(base_name: str, extension: str = "csv",
                           include_timestamp: bool = True) -> str:
    """Generate formatted export filename."""
    if include_timestamp:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return f"{base_name}_{timestamp}.{extension}"
    return f"{base_name}.{extension}"
