"""Shared fixtures: profile trees, JSON exports and span databases."""

import json
import sqlite3

import pytest

from profiler_excel.profile_data import ProfileNode

SPAN_SCHEMA = """
CREATE TABLE IF NOT EXISTS otel_spans (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  trace_id TEXT NOT NULL,
  span_id TEXT NOT NULL,
  parent_span_id TEXT,
  name TEXT NOT NULL,
  start_time INTEGER NOT NULL,
  end_time INTEGER NOT NULL,
  attributes TEXT NOT NULL,
  status_code INTEGER NOT NULL,
  events TEXT NOT NULL
);
"""


@pytest.fixture
def model_tree():
    """Top model with one plain block and one nested model containing a block."""
    return ProfileNode(
        path=["Top"],
        total_time=10.0,
        self_time=2.0,
        number_of_calls=1,
        children=[
            ProfileNode(path=["Top/Gain"], total_time=3.0, self_time=3.0, number_of_calls=100),
            ProfileNode(
                path=["Top/Ref", "SubA"],
                total_time=5.0,
                self_time=1.0,
                number_of_calls=1,
                children=[
                    ProfileNode(
                        path=["Top/Ref", "SubA/Sum"],
                        total_time=4.0,
                        self_time=4.0,
                        number_of_calls=100,
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def model_doc():
    return {
        "rootUINode": {
            "path": ["Top"],
            "totalTime": 10.0,
            "selfTime": 2.0,
            "numberOfCalls": 1,
            "children": [
                {"path": ["Top/Gain"], "totalTime": 3.0, "selfTime": 3.0, "numberOfCalls": 100, "children": []},
                {
                    "path": ["Top/Ref", "SubA"],
                    "totalTime": 5.0,
                    "selfTime": 1.0,
                    "numberOfCalls": 1,
                    "children": {
                        "path": ["Top/Ref", "SubA/Sum"],
                        "totalTime": 4.0,
                        "selfTime": 4.0,
                        "numberOfCalls": 100,
                    },
                },
            ],
        }
    }


@pytest.fixture
def model_json(tmp_path, model_doc):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(model_doc), encoding="utf-8")
    return str(path)


@pytest.fixture
def span_db(tmp_path):
    """Return a helper that writes (trace_id, span_id, parent, name, start_us, end_us) rows."""

    def make(spans, name="telemetry.db"):
        db_path = tmp_path / name
        conn = sqlite3.connect(db_path)
        conn.execute(SPAN_SCHEMA)
        conn.executemany(
            """
            INSERT INTO otel_spans
              (trace_id, span_id, parent_span_id, name,
               start_time, end_time, attributes, status_code, events)
            VALUES (?, ?, ?, ?, ?, ?, '{}', 0, '[]')
            """,
            spans,
        )
        conn.commit()
        conn.close()
        return str(db_path)

    return make
