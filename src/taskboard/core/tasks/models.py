"""
Task data models for taskboard.

Defines the core Task model and related enums that represent tasks as the
persistence collaborator returns them. Field names are snake_case in Python
and accept the camelCase (and document-store ``_id``) spellings used on the
wire, so payloads can be validated directly with ``Task.model_validate``.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """Task status values.

    Declaration order is the board order and the stage ordinal used
    when sorting by status.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"

    @property
    def ordinal(self) -> int:
        """Stage ordinal (todo=0 ... done=3)."""
        return _STATUS_ORDER.index(self)


class TaskPriority(str, Enum):
    """Task priority levels, lowest to highest severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def ordinal(self) -> int:
        """Severity ordinal (low=0 ... urgent=3)."""
        return _PRIORITY_ORDER.index(self)


_STATUS_ORDER = list(TaskStatus)
_PRIORITY_ORDER = list(TaskPriority)


def ensure_aware(value: datetime | None) -> datetime | None:
    # Naive timestamps are treated as UTC so comparisons never mix kinds.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UserRef(BaseModel):
    """
    Embedded user summary carried by a task's ``assignee`` field.

    Depending on the endpoint the identifier arrives as ``_id`` (raw
    document) or ``id`` (transformed response); ``effective_id`` prefers
    ``_id`` and falls back to ``id``.
    """

    id: str | None = Field(default=None, description="Transformed user id")
    mongo_id: str | None = Field(default=None, alias="_id", description="Raw document id")
    name: str = Field(default="", description="Display name")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def effective_id(self) -> str | None:
        return self.mongo_id or self.id or None


class Task(BaseModel):
    """
    A task on the board.

    ``status`` keeps unknown values as raw strings instead of rejecting the
    record, so a single malformed row cannot fail a whole fetch; the
    grouping engine reports such rows as anomalies.

    Example:
        >>> task = Task.model_validate({
        ...     "_id": "t1",
        ...     "title": "Write release notes",
        ...     "status": "in-progress",
        ...     "priority": "high",
        ...     "assignee": {"_id": "u1", "name": "Sam"},
        ... })
        >>> task.status
        <TaskStatus.IN_PROGRESS: 'in-progress'>
        >>> task.effective_assignee_id
        'u1'
    """

    id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("id", "_id"),
        description="Unique task identifier",
    )
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field(default="", description="Task description (may be empty)")
    status: TaskStatus | str = Field(
        default=TaskStatus.TODO,
        union_mode="left_to_right",
        description="Workflow status; unknown values are preserved verbatim",
    )
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority level")
    due_date: datetime | None = Field(default=None, alias="dueDate")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    assignee: UserRef | str | None = Field(
        default=None, description="Assigned user, as an id or an embedded summary"
    )
    project_id: str | None = Field(default=None, alias="projectId")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    # Local-only: set while an optimistic status transition is in flight
    pending: bool = Field(default=False, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: str | None) -> str:
        """Documents may store a null description."""
        return v or ""

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str]:
        return list(v) if v else []

    @field_validator("due_date", "created_at", "updated_at", mode="after")
    @classmethod
    def validate_timezone(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)

    @property
    def effective_assignee_id(self) -> str | None:
        """
        Identifier of the assignee regardless of representation.

        Returns:
            ``_id`` (then ``id``) of an embedded summary, the bare id string,
            or None when unassigned
        """
        if self.assignee is None:
            return None
        if isinstance(self.assignee, UserRef):
            return self.assignee.effective_id
        return self.assignee or None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def is_overdue(self, now: datetime) -> bool:
        """Check if the task is past its due date and not done."""
        return not self.is_done and self.due_date is not None and self.due_date < now

    def with_status(self, status: TaskStatus, *, pending: bool = False) -> "Task":
        """
        Return a copy with a new status.

        ``updated_at`` never moves backwards: it is bumped to now, or kept
        if the stored value is already later (e.g. server clock ahead).
        """
        updated_at = max(self.updated_at, utcnow())
        return self.model_copy(
            update={"status": status, "pending": pending, "updated_at": updated_at}
        )


class Subtask(BaseModel):
    """A suggested subtask produced by the decomposition collaborator."""

    title: str = Field(..., min_length=1)
    description: str = Field(default="")

    @classmethod
    def coerce(cls, value: "Subtask | str | dict[str, str]") -> "Subtask":
        """Accept plain strings, dicts or models."""
        if isinstance(value, Subtask):
            return value
        if isinstance(value, str):
            return cls(title=value)
        return cls.model_validate(value)


class Notification(BaseModel):
    """A user notification returned by the notification source."""

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    title: str
    message: str = ""
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class TaskStats(BaseModel):
    """
    Aggregate statistics over the current task view.

    Derived on demand; never stored alongside tasks.
    """

    total: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)
    overdue: int = Field(default=0, ge=0)
    completion_rate: int = Field(default=0, ge=0, le=100, description="Percent, rounded")

    model_config = ConfigDict(frozen=True)


class MyTaskStats(BaseModel):
    """Statistics restricted to tasks assigned to the current user."""

    total: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)
