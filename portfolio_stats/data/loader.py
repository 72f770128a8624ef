"""
Data loading utilities with Streamlit caching.
"""
import pandas as pd
import streamlit as st
from pathlib import Path
from typing import Optional, Dict, Any

from portfolio_stats.config import config, TABLE_FILES, DATE_COLUMNS


def _load_file(filepath: Path) -> Optional[pd.DataFrame]:
    """Load a single file (parquet or csv)."""
    parquet_path = filepath.with_suffix(".parquet")
    csv_path = filepath.with_suffix(".csv")

    if parquet_path.exists():
        return pd.read_parquet(parquet_path)
    elif csv_path.exists():
        return pd.read_csv(csv_path)
    return None


def _parse_dates(df: pd.DataFrame) -> pd.DataFrame:
    for col in DATE_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], errors="coerce")
    return df


def load_table(table_name: str, data_dir: Optional[Path] = None) -> Optional[pd.DataFrame]:
    """Load one snapshot table by key, or None when the file is absent."""
    processed_dir = (Path(data_dir) / "processed") if data_dir else config.processed_dir
    df = _load_file(processed_dir / TABLE_FILES[table_name])
    if df is None:
        return None
    return _parse_dates(df)


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_projects() -> pd.DataFrame:
    """Load the projects table."""
    df = load_table("projects")
    if df is None:
        st.error(f"Could not find projects in {config.processed_dir}")
        st.stop()
    return df


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_tasks() -> pd.DataFrame:
    """Load the tasks table."""
    df = load_table("tasks")
    if df is None:
        st.error(f"Could not find tasks in {config.processed_dir}")
        st.stop()
    return df


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_task_logs() -> pd.DataFrame:
    """Load the task log table; empty when absent."""
    df = load_table("task_logs")
    if df is None:
        return pd.DataFrame()
    return df


def get_data_status(data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Get status of all snapshot files."""
    processed_dir = (Path(data_dir) / "processed") if data_dir else config.processed_dir
    status = {"processed": {}}

    for key, filename in TABLE_FILES.items():
        parquet_path = processed_dir / f"{filename}.parquet"
        csv_path = processed_dir / f"{filename}.csv"
        status["processed"][key] = {
            "parquet_exists": parquet_path.exists(),
            "csv_exists": csv_path.exists(),
        }

    return status
