"""
profile_data.py

Profile tree model and the sources that build it:

- JSON exports of a profiler session (optionally wrapped in ``rootUINode``)
- SQLite span databases (``otel_spans`` table) written by CLI telemetry

Every loader validates nodes as they enter, so the flattener only ever sees
well-formed ``ProfileNode`` trees.
"""

import json
import logging
import math
import os
import sqlite3
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


class ProfileDataError(ValueError):
    """Raised when a profile source cannot be turned into a node tree."""


class InvalidNode(ProfileDataError):
    """Raised for a node with an empty path."""


@dataclass
class ProfileNode:
    path: Sequence[str]
    total_time: float = 0.0
    self_time: float = 0.0
    number_of_calls: int = 0
    children: List["ProfileNode"] = field(default_factory=list)

    def __post_init__(self):
        # a bare string is one segment, not a sequence of characters
        if isinstance(self.path, str):
            self.path = [self.path] if self.path else []

    def is_leaf(self) -> bool:
        return not self.children


def _number(raw: dict, key: str, kind, where: str):
    if key not in raw:
        raise ProfileDataError(f"{where}: missing {key!r}")
    value = raw[key]
    # bool is an int subclass but never a valid metric
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProfileDataError(f"{where}: {key!r} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ProfileDataError(f"{where}: {key!r} must be finite, got {value!r}")
    if value < 0:
        raise ProfileDataError(f"{where}: {key!r} must be non-negative, got {value!r}")
    if kind is int and value != int(value):
        raise ProfileDataError(f"{where}: {key!r} must be a whole number, got {value!r}")
    return kind(value)


def _path(raw: dict, where: str) -> List[str]:
    if "path" not in raw:
        raise ProfileDataError(f"{where}: missing 'path'")
    path = raw["path"]
    if isinstance(path, str):
        path = [path] if path else []
    if not isinstance(path, (list, tuple)):
        raise ProfileDataError(f"{where}: 'path' must be a string or list, got {path!r}")
    if not path:
        raise InvalidNode(f"{where}: empty path")
    for segment in path:
        if not isinstance(segment, str):
            raise ProfileDataError(f"{where}: path segments must be strings, got {segment!r}")
    return list(path)


def node_from_dict(raw: dict, where: str = "root") -> ProfileNode:
    """
    Build a ProfileNode tree from nested dicts using the profiler's field names
    (``path``, ``totalTime``, ``selfTime``, ``numberOfCalls``, ``children``).
    """
    if not isinstance(raw, dict):
        raise ProfileDataError(f"{where}: expected an object, got {type(raw).__name__}")
    node = ProfileNode(
        path=_path(raw, where),
        total_time=_number(raw, "totalTime", float, where),
        self_time=_number(raw, "selfTime", float, where),
        number_of_calls=_number(raw, "numberOfCalls", int, where),
    )
    if node.self_time > node.total_time:
        logger.warning(
            "%s: self time %.6f exceeds total time %.6f", where, node.self_time, node.total_time
        )

    children = raw.get("children")
    # A lone child may be exported as an object rather than a one-item list
    if isinstance(children, dict):
        children = [children]
    if children is None:
        children = []
    if not isinstance(children, list):
        raise ProfileDataError(f"{where}: 'children' must be a list, got {children!r}")
    node.children = [
        node_from_dict(child, f"{where}.children[{idx}]") for idx, child in enumerate(children)
    ]
    return node


def load_json(json_path: str) -> ProfileNode:
    """Load a profile tree from a JSON export."""
    with open(json_path, "r", encoding="utf-8") as f:
        try:
            doc = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProfileDataError(f"{json_path}: not valid JSON ({exc})") from exc
    if isinstance(doc, dict) and "rootUINode" in doc:
        doc = doc["rootUINode"]
    return node_from_dict(doc)


def _connect(db_path: str) -> sqlite3.Connection:
    # sqlite3.connect would silently create a missing file
    if not os.path.isfile(db_path):
        raise FileNotFoundError(f"No such span database: {db_path}")
    return sqlite3.connect(db_path)


def list_traces(db_path: str):
    """Return (trace_id, span_count, first_start_us) for every trace, oldest first."""
    conn = _connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute("""
            SELECT
              trace_id,
              COUNT(*)           AS span_count,
              MIN(start_time)    AS first_start_us
            FROM otel_spans
            GROUP BY trace_id
            ORDER BY first_start_us
        """)
        return cur.fetchall()
    finally:
        conn.close()


def load_spans(db_path: str, trace_id: str):
    conn = _connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT span_id, parent_span_id, name, start_time, end_time
              FROM otel_spans
             WHERE trace_id = ?
          ORDER BY start_time
        """,
            (trace_id,),
        )
        return cur.fetchall()
    finally:
        conn.close()


def _span_tree(rows, trace_id: str) -> ProfileNode:
    spans = {}
    for span_id, parent_id, name, start_us, end_us in rows:
        spans[span_id] = {
            "parent": parent_id,
            "name": name,
            "duration": max(end_us - start_us, 0) / 1_000_000,
            "children": [],
        }
    roots = []
    # rows arrive ordered by start time, so children keep that order
    for span_id, parent_id, *_ in rows:
        parent = spans.get(parent_id)
        if parent is None:
            roots.append(span_id)
        else:
            parent["children"].append(span_id)

    def build(span_id: str, prefix: str) -> ProfileNode:
        info = spans[span_id]
        if not info["name"]:
            raise InvalidNode(f"span {span_id}: empty name")
        full = f"{prefix}/{info['name']}" if prefix else info["name"]
        children = [build(child_id, full) for child_id in info["children"]]
        child_time = sum(child.total_time for child in children)
        return ProfileNode(
            path=[full],
            total_time=info["duration"],
            self_time=max(info["duration"] - child_time, 0.0),
            number_of_calls=1,
            children=children,
        )

    if len(roots) == 1:
        return build(roots[0], "")
    children = [build(span_id, trace_id) for span_id in roots]
    total = sum(child.total_time for child in children)
    return ProfileNode(
        path=[trace_id], total_time=total, self_time=0.0, number_of_calls=1, children=children
    )


def load_sqlite(db_path: str, trace_id: Optional[str] = None) -> ProfileNode:
    """
    Build a profile tree from one trace of an ``otel_spans`` database.
    ``trace_id`` may be omitted only when the database holds a single trace.
    """
    try:
        if trace_id is None:
            traces = list_traces(db_path)
            if len(traces) != 1:
                raise ProfileDataError(
                    f"{db_path}: {len(traces)} traces found, choose one with a trace id"
                )
            trace_id = traces[0][0]
        rows = load_spans(db_path, trace_id)
    except sqlite3.DatabaseError as exc:
        raise ProfileDataError(f"{db_path}: cannot read spans ({exc})") from exc
    if not rows:
        raise ProfileDataError(f"{db_path}: no spans found for trace {trace_id!r}")
    logger.debug("Loaded %d spans for trace %s", len(rows), trace_id)
    return _span_tree(rows, trace_id)


def load_profile(source: str, trace_id: Optional[str] = None) -> ProfileNode:
    """Load a profile tree from ``source``, picking the reader by file suffix."""
    suffix = os.path.splitext(source)[1].lower()
    logger.debug("Loading profile data from %s", source)
    if suffix in JSON_SUFFIXES:
        return load_json(source)
    if suffix in SQLITE_SUFFIXES:
        return load_sqlite(source, trace_id)
    raise ProfileDataError(f"{source}: unsupported profile source {suffix or '(no extension)'}")
