#!/usr/bin/env python
"""
Validate project, task and task log snapshot files.

Checks required columns and reports data-quality issues the dashboard will
absorb silently (orphan tasks/logs, inverted project dates).

Usage:
    python scripts/validate_inputs.py
    python scripts/validate_inputs.py --data-dir /path/to/data
"""
import argparse
import sys
from pathlib import Path

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.config import config, TABLE_FILES
from portfolio_stats.data.loader import load_table
from portfolio_stats.data.schema import validate_schema

REQUIRED_TABLES = ["projects", "tasks"]


def quality_warnings(tables: dict) -> list:
    """Referential and date-range issues across the loaded tables."""
    warnings = []
    projects = tables.get("projects")
    tasks = tables.get("tasks")
    logs = tables.get("task_logs")

    if projects is not None and {"start_date", "end_date"} <= set(projects.columns):
        inverted = projects[projects["end_date"] <= projects["start_date"]]
        if len(inverted) > 0:
            warnings.append(f"{len(inverted)} projects have end_date <= start_date")

    if projects is not None and tasks is not None and "project_id" in tasks.columns:
        orphans = ~tasks["project_id"].isin(projects["id"])
        if orphans.any():
            warnings.append(f"{int(orphans.sum())} tasks reference unknown projects")

    if tasks is not None and logs is not None and "task_id" in logs.columns:
        orphans = ~logs["task_id"].isin(tasks["id"])
        if orphans.any():
            warnings.append(f"{int(orphans.sum())} task logs reference unknown tasks")

    return warnings


def main():
    parser = argparse.ArgumentParser(description="Validate snapshot input files")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Override data directory"
    )

    args = parser.parse_args()
    data_dir = Path(args.data_dir) if args.data_dir else config.data_dir

    print("=" * 60)
    print("Snapshot Input Validation")
    print("=" * 60)
    print(f"Source directory: {data_dir / 'processed'}")
    print()

    all_valid = True
    tables = {}

    for table_key, filename in TABLE_FILES.items():
        print(f"Validating: {table_key}")
        print("-" * 40)

        try:
            df = load_table(table_key, data_dir)
        except Exception as e:
            print(f"  ✗ Failed to load {filename}: {e}")
            all_valid = False
            print()
            continue

        if df is None:
            print(f"  ✗ Not found: {filename}")
            if table_key in REQUIRED_TABLES:
                all_valid = False
                print("    (REQUIRED)")
            else:
                print("    (optional)")
            print()
            continue

        tables[table_key] = df
        result = validate_schema(df, table_key, strict=False)
        print(f"  ✓ Found: {filename} ({result['total_rows']:,} rows, {result['total_columns']} columns)")

        if result["is_valid"]:
            print("  ✓ Schema valid")
        else:
            print("  ✗ Schema invalid")
            print(f"    Missing required: {result['missing_required']}")
            all_valid = False

        if result["missing_optional"]:
            print(f"  ⚠ Missing optional: {result['missing_optional']}")
        print()

    for warning in quality_warnings(tables):
        print(f"⚠ {warning}")

    print("=" * 60)
    if all_valid:
        print("✓ All validations passed")
        sys.exit(0)
    else:
        print("✗ Validation failed - see errors above")
        sys.exit(1)


if __name__ == "__main__":
    main()
