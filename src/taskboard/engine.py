"""
TaskEngine - the operations a board offers on top of a TaskStore.

Create, Move and Delete keep every (project, status) column densely ordered
0..n-1. Each operation checks that the caller is the project's owner or a
member, takes the project's lock and runs inside one store transaction, so
operations on the same project are serialized in-process and a failure
leaves no partial shift behind.
"""
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .logs import get_logger
from .models import (
    ColumnIssue,
    MoveRequest,
    Project,
    ProjectSummary,
    Task,
    TaskDraft,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)
from .ordering import Placement, append_position, apply_plan, is_dense, plan_delete, plan_move, renumber
from .recovery import AuthorizationError, NotFoundError, TaskValidationError
from .store.base import TaskStore

log = get_logger("engine")

M = TypeVar('M', bound=BaseModel)

def _validated(model_type: Type[M], **data) -> M:
    """Build a request model, turning pydantic errors into TaskValidationError."""
    try:
        return model_type(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in e.errors()
        )
        raise TaskValidationError(problems) from e

class TaskEngine:

    def __init__(self, store: TaskStore):
        self.store = store
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # -------------------- locking / access --------------------
    def _project_lock(self, project_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = self._locks[project_id] = threading.RLock()
            return lock

    @contextmanager
    def _serialized(self, project_id: str) -> Iterator[TaskStore]:
        with self._project_lock(project_id):
            with self.store.transaction() as store:
                yield store

    def _project(self, project_id: str, user: str, action: str) -> Project:
        project = self.store.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        if not project.has_access(user):
            log.warning(f"User {user} denied: {action} in project {project_id}")
            raise AuthorizationError(f"Not authorized to {action} in project {project_id}")
        return project

    def _task(self, task_id: str, user: str, action: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        self._project(task.project, user, action)
        return task

    def _project_of(self, task_id: str) -> str:
        with self.store.transaction():
            task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task.project

    # -------------------- projects (bootstrap) --------------------
    def create_project(self, user: str, name: str, description: Optional[str] = None) -> Project:
        project = _validated(Project, name=name, description=description, owner=user)
        with self._serialized(project.id) as store:
            store.save_project(project)
        log.info(f"Created project {project.id} ({project.name}) for {user}")
        return project

    def add_member(self, user: str, project_id: str, member: str) -> Project:
        with self._serialized(project_id) as store:
            project = self._project(project_id, user, "invite members")
            if project.owner != user:
                raise AuthorizationError("Only the project owner can add members")
            if member not in project.members:
                project.members.append(member)
                store.save_project(project)
                log.info(f"Added {member} to project {project_id}")
            return project

    def projects(self, user: str) -> List[Project]:
        with self.store.transaction() as store:
            return [p for p in store.projects() if p.has_access(user)]

    def resolve_project_id(self, user: str, ref: str) -> str:
        """Accept a project id, a unique id prefix or an exact project name."""
        projects = self.projects(user)
        matches = [p.id for p in projects if p.id == ref]
        if not matches:
            matches = [p.id for p in projects if p.id.startswith(ref) or p.name == ref]
        return self._single(matches, "project", ref)

    def resolve_task_id(self, user: str, ref: str) -> str:
        """Accept a task id or a unique id prefix among the user's projects."""
        with self.store.transaction() as store:
            if store.get_task(ref) is not None:
                return ref
            matches = [t.id for p in store.projects() if p.has_access(user)
                       for t in store.project_tasks(p.id) if t.id.startswith(ref)]
        return self._single(matches, "task", ref)

    @staticmethod
    def _single(matches: List[str], kind: str, ref: str) -> str:
        if not matches:
            raise NotFoundError(f"No {kind} matches {ref!r}")
        if len(matches) > 1:
            raise TaskValidationError(f"{kind.capitalize()} reference {ref!r} is ambiguous ({len(matches)} matches)")
        return matches[0]

    # -------------------- ordering operations --------------------
    def create_task(self, user: str, project_id: str, title: str, **fields: Any) -> Task:
        """
        Create a task at the end of its column.

        The new task's order is the column's current length; no other task
        is touched.
        """
        draft = _validated(TaskDraft, title=title, **fields)
        with self._serialized(project_id) as store:
            self._project(project_id, user, "create tasks")
            order = append_position(store.count(project_id, draft.status))
            task = Task(project=project_id, created_by=user, order=order, **draft.model_dump())
            store.insert_task(task)
        log.info(f"Created task {task.id} in {project_id}/{task.status.value} at {order}")
        return task

    def move_task(self, user: str, task_id: str, status: Any, order: Any) -> Task:
        """
        Move a task to ``order`` within column ``status``.

        Out-of-range orders are clamped to the destination column. Returns
        the task as stored after the move.
        """
        request = _validated(MoveRequest, status=status, order=order)
        project_id = self._project_of(task_id)

        with self._serialized(project_id) as store:
            task = self._task(task_id, user, "move tasks")
            plan = plan_move(task.status, task.order, request.status, request.order,
                             store.count(project_id, request.status))
            if plan.is_noop:
                log.debug(f"Move of {task_id} to {request.status.value}#{task.order} is a no-op")
                return task

            for shift in plan.shifts:
                touched = store.shift(project_id, shift.status, shift.delta, shift.lower, shift.upper)
                log.debug(f"Shifted {touched} task(s) in {project_id}/{shift.status.value} "
                          f"[{shift.lower}, {shift.upper}] by {shift.delta:+d}")

            task.status = plan.target_status
            task.order = plan.target_order
            task.updated_at = datetime.now()
            store.save_task(task)
            moved = store.get_task(task_id)

        log.info(f"Moved task {task_id} from {plan.source_status.value}#{plan.source_order} "
                 f"to {plan.target_status.value}#{plan.target_order}")
        return moved

    def preview_move(self, user: str, task_id: str, status: Any, order: Any) -> Dict[str, Placement]:
        """Placements a move would change, without writing anything."""
        request = _validated(MoveRequest, status=status, order=order)
        with self.store.transaction() as store:
            task = self._task(task_id, user, "move tasks")
            placements = {t.id: (t.status, t.order) for t in store.project_tasks(task.project)}
            plan = plan_move(task.status, task.order, request.status, request.order,
                             store.count(task.project, request.status))
        return apply_plan(placements, task_id, plan)

    def delete_task(self, user: str, task_id: str) -> Task:
        """Remove a task and close the gap it leaves in its column."""
        project_id = self._project_of(task_id)
        with self._serialized(project_id) as store:
            task = self._task(task_id, user, "delete tasks")
            store.remove_task(task_id)
            shift = plan_delete(task.status, task.order)
            touched = store.shift(project_id, shift.status, shift.delta, shift.lower, shift.upper)
        log.info(f"Deleted task {task_id} from {project_id}/{task.status.value}#{task.order}; "
                 f"{touched} task(s) moved up")
        return task

    # -------------------- other task operations --------------------
    def update_task(self, user: str, task_id: str, **fields: Any) -> Task:
        """
        Update a task's fields.

        A status change is carried out as a move to the end of the new column
        so both columns stay dense.
        """
        update = _validated(TaskUpdate, **fields)
        changes = update.model_dump(include=update.model_fields_set)
        for required in ('title', 'priority', 'status'):
            if required in changes and changes[required] is None:
                del changes[required]
        project_id = self._project_of(task_id)

        with self._serialized(project_id) as store:
            task = self._task(task_id, user, "update tasks")
            new_status = changes.pop('status', None)
            if new_status is not None and new_status != task.status:
                task = self.move_task(user, task_id, new_status, store.count(project_id, new_status))

            if changes:
                for name, value in changes.items():
                    setattr(task, name, value)
                task.updated_at = datetime.now()
                store.save_task(task)
            task = store.get_task(task_id)
        log.info(f"Updated task {task_id}: {sorted(update.model_fields_set)}")
        return task

    def get_task(self, user: str, task_id: str) -> Task:
        with self.store.transaction():
            return self._task(task_id, user, "view tasks")

    def list_tasks(self, user: str, project_id: str) -> List[Task]:
        with self.store.transaction() as store:
            self._project(project_id, user, "view tasks")
            return store.project_tasks(project_id)

    def board(self, user: str, project_id: str) -> Dict[TaskStatus, List[Task]]:
        """Every column of a project, each sorted by order."""
        with self.store.transaction() as store:
            self._project(project_id, user, "view tasks")
            return {status: store.column(project_id, status) for status in TaskStatus.columns()}

    def summarize(self, user: str, project_id: str) -> ProjectSummary:
        tasks = self.list_tasks(user, project_id)
        breakdown = {status.value: 0 for status in TaskStatus.columns()}
        for task in tasks:
            breakdown[task.status.value] += 1
        overdue = sum(1 for t in tasks if t.is_overdue)
        high_pending = sum(1 for t in tasks if t.priority == TaskPriority.HIGH and t.status != TaskStatus.DONE)

        if not tasks:
            return ProjectSummary(
                project=project_id,
                summary="No tasks found in this project.",
                total=0,
                breakdown=breakdown,
                overdue=0,
                high_priority_pending=0,
                highlights=["Project is empty. Start by adding some tasks!"],
            )

        highlights = []
        if overdue:
            highlights.append(f"{overdue} task(s) overdue")
        if high_pending:
            highlights.append(f"{high_pending} high priority task(s) still open")
        if breakdown[TaskStatus.DONE.value] == len(tasks):
            highlights.append("All tasks are done")

        return ProjectSummary(
            project=project_id,
            summary=(f"Your project has {len(tasks)} tasks. {breakdown['done']} completed, "
                     f"{breakdown['in-progress']} in progress, and {breakdown['todo']} to do."),
            total=len(tasks),
            breakdown=breakdown,
            overdue=overdue,
            high_priority_pending=high_pending,
            highlights=highlights,
        )

    # -------------------- integrity --------------------
    def check(self, user: str, project_id: Optional[str] = None) -> List[ColumnIssue]:
        """Columns violating the dense ordering, for one or all accessible projects."""
        with self.store.transaction() as store:
            if project_id is not None:
                self._project(project_id, user, "view tasks")
                project_ids = [project_id]
            else:
                project_ids = [p.id for p in store.projects() if p.has_access(user)]

            issues: List[ColumnIssue] = []
            for pid in project_ids:
                issues.extend(self._column_issues(store, pid))
        for issue in issues:
            log.warning(f"Ordering issue: {issue}")
        return issues

    def _column_issues(self, store: TaskStore, project_id: str) -> List[ColumnIssue]:
        issues = []
        for status in TaskStatus.columns():
            orders = sorted(t.order for t in store.column(project_id, status))
            if not is_dense(orders):
                issues.append(ColumnIssue(project=project_id, status=status, orders=orders))
        return issues

    def repair(self, user: str, project_id: str) -> int:
        """
        Renumber every column of a project to 0..n-1, keeping relative order.

        Returns:
            The number of tasks whose order changed.
        """
        changed = 0
        with self._serialized(project_id) as store:
            self._project(project_id, user, "repair tasks")
            for status in TaskStatus.columns():
                column = store.column(project_id, status)
                new_orders = renumber([t.id for t in column])
                for task in column:
                    if task.order != new_orders[task.id]:
                        task.order = new_orders[task.id]
                        store.save_task(task)
                        changed += 1
        if changed:
            log.info(f"Repaired {changed} task order(s) in project {project_id}")
        return changed
