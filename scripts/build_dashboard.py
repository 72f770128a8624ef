#!/usr/bin/env python
"""
Compute the portfolio dashboard from snapshot files and write it as JSON.

Usage:
    python scripts/build_dashboard.py
    python scripts/build_dashboard.py --data-dir /path/to/data --now 2025-06-30
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.config import AppConfig, config
from portfolio_stats.data.loader import load_table
from portfolio_stats.data.snapshot import build_snapshot
from portfolio_stats.exports import export_dashboard_json
from portfolio_stats.metrics.dashboard import calculate_dashboard


def main():
    parser = argparse.ArgumentParser(description="Build portfolio dashboard JSON")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Override data directory"
    )
    parser.add_argument(
        "--now",
        type=str,
        default=None,
        help="Reference date (YYYY-MM-DD); defaults to today"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file (default: <data-dir>/exports/dashboard.json)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    run_config = AppConfig(data_dir=Path(args.data_dir)) if args.data_dir else config
    data_dir = run_config.data_dir
    output = Path(args.output) if args.output else run_config.exports_dir / "dashboard.json"

    print("Building dashboard...")
    print(f"  Source: {run_config.processed_dir}")
    print(f"  Output: {output}")
    print()

    projects_df = load_table("projects", data_dir)
    tasks_df = load_table("tasks", data_dir)
    logs_df = load_table("task_logs", data_dir)

    if projects_df is None or tasks_df is None:
        print(f"ERROR: Could not load projects and tasks from {run_config.processed_dir}")
        print("Please ensure the files exist as .parquet or .csv")
        sys.exit(1)

    try:
        now = datetime.strptime(args.now, "%Y-%m-%d") if args.now else None
        projects, tasks = build_snapshot(projects_df, tasks_df, logs_df)
        stats = calculate_dashboard(projects, tasks, now=now)
        json_bytes, _ = export_dashboard_json(stats)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(json_bytes)
    except Exception as e:
        print(f"ERROR building dashboard: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    print(f"Loaded {len(projects):,} projects and {len(tasks):,} tasks")
    print()
    print("Summary:")
    print(f"  Done: {stats.done_projects}  In progress: {stats.in_progress_projects}  "
          f"Not started: {stats.not_started_projects}")
    print(f"  Overdue / at risk: {len(stats.overdue_or_at_risk)}")
    print(f"  Progress detail rows: {len(stats.project_progress_details)}")
    print()
    print("✓ Dashboard written")


if __name__ == "__main__":
    main()
