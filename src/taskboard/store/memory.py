from typing import List, Optional

from taskboard.logs import get_logger
from taskboard.models import Board, Project, Task, TaskStatus
from taskboard.recovery import NotFoundError
from .base import TaskStore

log = get_logger("store.memory")

class MemoryStore(TaskStore):
    """Keeps a Board in memory; transactions restore a snapshot on failure."""

    def __init__(self, board: Optional[Board] = None):
        super().__init__()
        self._board = board if board is not None else Board()
        self._snapshot: Optional[Board] = None
        self._dirty = False

    @property
    def board(self) -> Board:
        return self._board

    def _begin(self):
        self._snapshot = self.board.model_copy(deep=True)
        self._dirty = False

    def _commit(self):
        self._snapshot = None

    def _rollback(self):
        if self._snapshot is not None:
            log.debug("Rolling back in-memory board")
            self._board = self._snapshot
        self._snapshot = None
        self._dirty = False

    def projects(self) -> List[Project]:
        return [p.model_copy(deep=True) for p in self.board.projects.values()]

    def get_project(self, project_id: str) -> Optional[Project]:
        project = self.board.projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    def save_project(self, project: Project) -> None:
        self.board.projects[project.id] = project.model_copy(deep=True)
        self._dirty = True

    def get_task(self, task_id: str) -> Optional[Task]:
        task = self.board.tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    def insert_task(self, task: Task) -> None:
        if task.id in self.board.tasks:
            raise ValueError(f"Task {task.id} already exists")
        self.board.tasks[task.id] = task.model_copy(deep=True)
        self._dirty = True

    def save_task(self, task: Task) -> None:
        if task.id not in self.board.tasks:
            raise NotFoundError(f"Task {task.id} not found")
        self.board.tasks[task.id] = task.model_copy(deep=True)
        self._dirty = True

    def remove_task(self, task_id: str) -> bool:
        removed = self.board.tasks.pop(task_id, None) is not None
        self._dirty = self._dirty or removed
        return removed

    def project_tasks(self, project_id: str) -> List[Task]:
        tasks = self.board.project_tasks(project_id)
        tasks.sort(key=lambda t: (t.status.position, t.order, t.created_at, t.id))
        return [t.model_copy(deep=True) for t in tasks]

    def column(self, project_id: str, status: TaskStatus) -> List[Task]:
        return [t.model_copy(deep=True) for t in self.board.column(project_id, status)]

    def shift(self, project_id: str, status: TaskStatus, delta: int,
              lower: Optional[int] = None, upper: Optional[int] = None) -> int:
        touched = 0
        for task in self.board.tasks.values():
            if task.project != project_id or task.status != status:
                continue
            if lower is not None and task.order < lower:
                continue
            if upper is not None and task.order > upper:
                continue
            task.order += delta
            touched += 1
        if touched:
            self._dirty = True
        return touched
