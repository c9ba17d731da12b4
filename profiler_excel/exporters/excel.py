"""
excel.py

Write flattened profile rows to a spreadsheet, header first:

  Name | Total Time (s) | Self Time (s) | Number of Calls

Files ending in ``.csv`` are written as CSV; anything else becomes an Excel
workbook. A filename without an extension gets ``.xlsx`` appended.
"""

import logging
import os
from typing import Iterable

import pandas as pd
from openpyxl import Workbook

from profiler_excel.flatten import FlattenedRow, flatten
from profiler_excel.profile_data import ProfileNode

logger = logging.getLogger(__name__)

HEADER = ["Name", "Total Time (s)", "Self Time (s)", "Number of Calls"]
DEFAULT_EXTENSION = ".xlsx"
DEFAULT_SHEET_NAME = "Profile"
MAX_SHEET_NAME = 31


def ensure_extension(filename: str) -> str:
    """Append the default spreadsheet extension when ``filename`` has none."""
    if not os.path.splitext(filename)[1]:
        return filename + DEFAULT_EXTENSION
    return filename


def check_sheet_name(sheet_name: str) -> None:
    """Raise ValueError for a worksheet title Excel would refuse."""
    if not sheet_name or len(sheet_name) > MAX_SHEET_NAME:
        raise ValueError(f"Sheet name must be 1-{MAX_SHEET_NAME} characters, got {sheet_name!r}")
    # openpyxl validates the allowed characters
    Workbook().create_sheet(sheet_name)


def rows_to_frame(rows: Iterable[FlattenedRow]) -> pd.DataFrame:
    return pd.DataFrame([tuple(row) for row in rows], columns=HEADER)


def write_report(
    rows: Iterable[FlattenedRow], filename: str, sheet_name: str = DEFAULT_SHEET_NAME
) -> str:
    """
    Persist ``rows`` under ``filename`` and return the name actually written.
    I/O errors propagate unchanged; a bad sheet name or an extension
    openpyxl cannot write raises ValueError.
    """
    filename = ensure_extension(filename)
    df = rows_to_frame(rows)
    if os.path.splitext(filename)[1].lower() == ".csv":
        df.to_csv(filename, index=False)
    else:
        check_sheet_name(sheet_name)
        with pd.ExcelWriter(filename, engine="openpyxl") as w:
            df.to_excel(w, sheet_name=sheet_name, index=False)
    logger.debug("Wrote %d rows to %s", len(df), filename)
    return filename


def export_profile(root: ProfileNode, filename: str, sheet_name: str = DEFAULT_SHEET_NAME) -> str:
    """Flatten ``root`` and write it to ``filename``."""
    return write_report(flatten(root), filename, sheet_name=sheet_name)
