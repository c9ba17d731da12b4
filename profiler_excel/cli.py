#!/usr/bin/env python3
"""
cli.py

Command-line interface for turning profiler trees into spreadsheet reports.

Usage:
  # Write a workbook (".xlsx" is added when the name has no extension):
  profiler-to-excel export profile.json report

  # Export one trace from a span database:
  profiler-to-excel export telemetry.db report.xlsx --trace YOUR_TRACE_ID

  # Preview in the terminal, or list traces:
  profiler-to-excel show profile.json
  profiler-to-excel traces telemetry.db
"""
import sqlite3
from datetime import datetime

import click
from rich import print

from profiler_excel.exporters import excel
from profiler_excel.exporters import view_table
from profiler_excel.flatten import flatten
from profiler_excel.log import setup_logging
from profiler_excel.profile_data import ProfileDataError, list_traces, load_profile

SOURCE = click.Path(exists=True, dir_okay=False)
trace_option = click.option("--trace", "-t", "trace_id", default=None, help="Trace ID to read from a span database")


def _fail(message: str):
    click.echo(message, err=True)
    raise SystemExit(1)


def _load_rows(source: str, trace_id: str):
    try:
        return flatten(load_profile(source, trace_id))
    except (ProfileDataError, OSError) as e:
        _fail(f"Failed to read {source}: {e}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose):
    """
    Flatten profiler trees into spreadsheet reports.
    """
    setup_logging(verbose)


@main.command()
@click.argument("source", type=SOURCE)
@click.argument("filename")
@trace_option
@click.option("--sheet", default=excel.DEFAULT_SHEET_NAME, show_default=True, help="Worksheet name")
@click.option("--preview", is_flag=True, help="Also print the rows in the terminal")
def export(source, filename, trace_id, sheet, preview):
    """Flatten SOURCE and write it to FILENAME."""
    rows = _load_rows(source, trace_id)
    try:
        written = excel.write_report(rows, filename, sheet_name=sheet)
    except (OSError, ValueError) as e:
        _fail(f"Failed to write {filename}: {e}")
    if preview:
        print(view_table.build_table(rows, title=source))
    click.echo(f"Wrote {len(rows)} rows to {written}")


@main.command()
@click.argument("source", type=SOURCE)
@trace_option
def show(source, trace_id):
    """Print the flattened rows of SOURCE as a table."""
    rows = _load_rows(source, trace_id)
    print(view_table.build_table(rows, title=source))


@main.command()
@click.argument("db", type=SOURCE)
def traces(db):
    """List traces stored in a span database."""
    try:
        rows = list_traces(db)
    except sqlite3.DatabaseError as e:
        _fail(f"Failed to read {db}: {e}")
    if not rows:
        _fail("No traces found in the selected database.")
    click.echo("TRACE_ID\tSPANS\tFIRST_TIMESTAMP")
    for trace_id, count, first_us in rows:
        # microseconds since epoch
        ts = datetime.fromtimestamp(first_us / 1_000_000).isoformat()
        click.echo(f"{trace_id}\t{count}\t{ts}")


if __name__ == "__main__":
    main()
