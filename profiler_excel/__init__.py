"""
Flatten profiler trees into spreadsheet reports.
"""

from profiler_excel.flatten import FlattenedRow, InvalidNode, display_name, flatten, flatten_columns
from profiler_excel.profile_data import ProfileDataError, ProfileNode, load_profile

__all__ = [
    "FlattenedRow",
    "InvalidNode",
    "ProfileDataError",
    "ProfileNode",
    "display_name",
    "flatten",
    "flatten_columns",
    "load_profile",
]
