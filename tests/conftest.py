"""Shared fixtures: every engine test runs against both store backends."""

import os
import tempfile

# Keep log files out of the user's home while testing
os.environ.setdefault("TASKBOARD_LOG_DIR", tempfile.mkdtemp(prefix="taskboard-logs-"))

import pytest

from taskboard.engine import TaskEngine
from taskboard.store import MemoryStore, YAMLStore

OWNER = "alice"
MEMBER = "bob"
OUTSIDER = "mallory"


@pytest.fixture(params=["memory", "yaml"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return YAMLStore(tmp_path / "board.yml")


@pytest.fixture
def engine(store):
    return TaskEngine(store)


@pytest.fixture
def project(engine):
    created = engine.create_project(OWNER, "Website")
    engine.add_member(OWNER, created.id, MEMBER)
    return created


@pytest.fixture
def column(engine):
    """Return a column as [(title, order), ...] in display order."""
    def _column(project_id, status, user=OWNER):
        return [(t.title, t.order) for t in engine.board(user, project_id)[status]]
    return _column
