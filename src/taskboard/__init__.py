"""
Taskboard - Kanban boards with densely ordered columns.

Every (project, status) column keeps its tasks ordered 0..n-1; creating,
moving and deleting tasks shifts the neighbours so the ordering stays
gap-free.
"""

from .version import VERSION, APP_SCHEMA_VERSION
from .models import (
    TaskStatus,
    TaskPriority,
    Task,
    Project,
    Board,
    MoveRequest,
)
from .engine import TaskEngine
from .store import TaskStore, MemoryStore, YAMLStore, BoardCore

__version__ = VERSION

__all__ = [
    "VERSION",
    "APP_SCHEMA_VERSION",
    "TaskStatus",
    "TaskPriority",
    "Task",
    "Project",
    "Board",
    "MoveRequest",
    "TaskEngine",
    "TaskStore",
    "MemoryStore",
    "YAMLStore",
    "BoardCore",
]
