"""Pytest configuration for ticketsuite tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import json
import os
import sys
import time
from pathlib import Path
from typing import Any

import pytest

_TEST_START_TIMES: dict[str, float] = {}
_TEST_DURATIONS: list[tuple[str, float]] = []

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocesses (`python -m ticketsuite`) need the in-repo package too.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

_ENV_VARS = (
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "JIRA_PAT",
    "JIRA_USERNAME",
    "JIRA_PASSWORD",
    "JIRA_TIMEOUT",
    "JIRA_USER_AGENT",
)


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    """Each test gets a logger bound to its own (possibly captured) stdout."""
    from ticketsuite import logging as ts_logging

    monkeypatch.setattr(ts_logging, "_GLOBAL", None)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every JIRA_* variable so tests see a blank environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def issue_payload() -> dict[str, Any]:
    """A realistic issue as returned by the server."""
    return {
        "id": "10042",
        "key": "PROJ-42",
        "self": "https://example.atlassian.net/rest/api/3/issue/10042",
        "fields": {
            "summary": "Login page crashes",
            "description": {
                "type": "doc",
                "version": 1,
                "content": [
                    {
                        "type": "paragraph",
                        "content": [{"type": "text", "text": "Steps to reproduce"}],
                    }
                ],
            },
            "issuetype": {"id": "1", "name": "Bug", "subtask": False},
            "project": {"id": "100", "key": "PROJ", "name": "Project"},
            "status": {
                "id": "3",
                "name": "In Progress",
                "statusCategory": {"id": 4, "key": "indeterminate", "name": "In Progress"},
            },
            "priority": {"id": "2", "name": "High"},
            "assignee": {"accountId": "abc-123", "displayName": "Sam Doe", "active": True},
            "reporter": None,
            "resolution": None,
            "parent": {"id": "10001", "key": "PROJ-1"},
            "fixVersions": [{"id": "200", "name": "1.0", "released": False}],
            "versions": [],
            "created": "2024-01-01T10:30:00.000+0000",
            "updated": "2024-01-02T08:00:00.000+0000",
            "duedate": "2025-10-30",
            "labels": ["backend", "urgent"],
            "components": [{"id": "300", "name": "auth"}],
            "customfield_10001": "Sprint 1",
            "customfield_10002": 42.5,
            "customfield_10003": {"value": "Gold"},
        },
    }


@pytest.fixture
def issue_json(issue_payload: dict[str, Any]) -> str:
    return json.dumps(issue_payload)


# --- Timing utilities to help identify slow tests ---


def pytest_runtest_setup(item):  # type: ignore
    _TEST_START_TIMES[item.nodeid] = time.perf_counter()


def pytest_runtest_teardown(item):  # type: ignore
    start = _TEST_START_TIMES.pop(item.nodeid, None)
    if start is not None:
        _TEST_DURATIONS.append((item.nodeid, time.perf_counter() - start))


def pytest_sessionfinish(session, exitstatus):  # type: ignore
    if not _TEST_DURATIONS:
        return
    slow = sorted(_TEST_DURATIONS, key=lambda x: x[1], reverse=True)[:10]
    print("\n=== Slowest Tests (top 10) ===")
    for nodeid, secs in slow:
        print(f"{secs:0.3f}s  {nodeid}")
