from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict
import uuid

from .version import APP_SCHEMA_VERSION

class TaskStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def columns(cls) -> List['TaskStatus']:
        """Columns in board display order."""
        return list(cls)

    @property
    def position(self) -> int:
        return TaskStatus.columns().index(self)

class TaskPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

def new_id() -> str:
    return uuid.uuid4().hex

def _strip(v):
    return v.strip() if isinstance(v, str) else v

class Task(BaseModel):
    """A single card on a project board.

    `order` is only meaningful relative to the other tasks sharing the same
    (`project`, `status`) pair.
    """

    id: str = Field(default_factory=new_id, description="Unique identifier of the task")
    project: str = Field(description="Identifier of the owning project")
    title: str = Field(min_length=2, max_length=200, description="Short title of the task")
    description: Optional[str] = Field(default=None, max_length=1000, description="Longer description")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Board column the task sits in")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority of the task")
    due_date: Optional[datetime] = Field(default=None, description="When the task is due")
    assigned_to: Optional[str] = Field(default=None, description="User the task is assigned to")
    created_by: str = Field(description="User who created the task")
    order: int = Field(default=0, ge=0, description="Zero-based position within the column")
    created_at: datetime = Field(default_factory=datetime.now, description="When the task was created")
    updated_at: datetime = Field(default_factory=datetime.now, description="When the task was last changed")

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @property
    def is_overdue(self) -> bool:
        if self.due_date is None or self.status == TaskStatus.DONE:
            return False
        now = datetime.now(self.due_date.tzinfo) if self.due_date.tzinfo else datetime.now()
        return self.due_date < now

    def __str__(self) -> str:
        return f"{self.title} [{self.status.value}#{self.order}]"

class Project(BaseModel):
    """A project and the users allowed to work on its board."""

    id: str = Field(default_factory=new_id, description="Unique identifier of the project")
    name: str = Field(min_length=2, max_length=100, description="Name of the project")
    description: Optional[str] = Field(default=None, max_length=500, description="What the project is about")
    owner: str = Field(description="User who owns the project")
    members: List[str] = Field(default_factory=list, description="Users with access to the project")
    created_at: datetime = Field(default_factory=datetime.now, description="When the project was created")

    @field_validator('name', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @model_validator(mode='after')
    def owner_is_member(self):
        if self.owner not in self.members:
            self.members.insert(0, self.owner)
        return self

    def has_access(self, user: str) -> bool:
        return user == self.owner or user in self.members

class TaskDraft(BaseModel):
    """Fields accepted when creating a task."""

    title: str = Field(min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

class TaskUpdate(BaseModel):
    """Partial update of a task; fields left unset are not touched."""

    title: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

class MoveRequest(BaseModel):
    """Drag-and-drop target: destination column and position."""

    status: TaskStatus = Field(description="Destination column")
    order: int = Field(ge=0, strict=True, description="Destination position within the column")

class Board(BaseModel):
    """The persisted document: every project and task known to a store."""

    schema_version: str = Field(default=APP_SCHEMA_VERSION, description="Schema version the board was written with")
    projects: Dict[str, Project] = Field(
        default_factory=dict,
        description="Projects keyed by id"
    )
    tasks: Dict[str, Task] = Field(
        default_factory=dict,
        description="Tasks keyed by id"
    )

    def project_tasks(self, project_id: str) -> List[Task]:
        return [t for t in self.tasks.values() if t.project == project_id]

    def column(self, project_id: str, status: TaskStatus) -> List[Task]:
        """Tasks of one column sorted by order."""
        tasks = [t for t in self.tasks.values() if t.project == project_id and t.status == status]
        return sorted(tasks, key=lambda t: (t.order, t.created_at, t.id))

class ProjectSummary(BaseModel):
    """Deterministic statistics about a project's board."""

    project: str
    summary: str
    total: int
    breakdown: Dict[str, int]
    overdue: int
    high_priority_pending: int
    highlights: List[str] = Field(default_factory=list)

class ColumnIssue(BaseModel):
    """A column whose orders are not exactly 0..n-1."""

    project: str
    status: TaskStatus
    orders: List[int]

    def __str__(self) -> str:
        return f"{self.project}/{self.status.value}: orders {self.orders} are not 0..{len(self.orders) - 1}"
