import abc
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from taskboard.models import Project, Task, TaskStatus

class TaskStore(abc.ABC):
    """
    An abstract document store for projects and tasks.

    Concrete stores provide per-record CRUD plus ``shift``, the bulk
    "update many matching a filter" primitive the ordering engine relies on.
    Records handed out are detached copies; changes only reach the store
    through ``save_*``/``insert_task``/``shift``.

    Mutations made inside ``transaction()`` are applied all-or-nothing: if
    the block raises, the store is left as it was on entry.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator['TaskStore']:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._begin()
            self._depth += 1
            try:
                yield self
            except Exception:
                if outermost:
                    self._rollback()
                raise
            else:
                if outermost:
                    self._commit()
            finally:
                self._depth -= 1

    def _begin(self):
        pass

    def _commit(self):
        pass

    def _rollback(self):
        pass

    @abc.abstractmethod
    def projects(self) -> List[Project]:
        raise NotImplementedError

    @abc.abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        raise NotImplementedError

    @abc.abstractmethod
    def save_project(self, project: Project) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abc.abstractmethod
    def insert_task(self, task: Task) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def save_task(self, task: Task) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def remove_task(self, task_id: str) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def project_tasks(self, project_id: str) -> List[Task]:
        """All tasks of a project sorted by column, then order."""
        raise NotImplementedError

    @abc.abstractmethod
    def column(self, project_id: str, status: TaskStatus) -> List[Task]:
        """Tasks of one column sorted by order."""
        raise NotImplementedError

    def count(self, project_id: str, status: TaskStatus) -> int:
        return len(self.column(project_id, status))

    @abc.abstractmethod
    def shift(self, project_id: str, status: TaskStatus, delta: int,
              lower: Optional[int] = None, upper: Optional[int] = None) -> int:
        """
        Add ``delta`` to the order of every task in one column whose order
        lies in ``[lower, upper]`` (inclusive, either bound may be open).

        Returns:
            The number of tasks updated.
        """
        raise NotImplementedError
