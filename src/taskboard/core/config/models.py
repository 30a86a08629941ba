"""
Configuration data models for taskboard.

These models define the structure of .taskboard.json and
~/.config/taskboard/config.json files, with validation and type safety via
Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field

from taskboard.core.tasks.sorting import SortKey, SortOrder


class ApiConfig(BaseModel):
    """
    Task API connection settings.

    Used by the HTTP persistence client; the engine itself never reads them.
    """

    base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the task API"
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )
    token: str | None = Field(
        default=None,
        description="Bearer token sent with every request"
    )


class RetryConfig(BaseModel):
    """
    Retry behavior for transient API failures.

    Delays grow as base_delay * multiplier ** attempt, with optional jitter.
    """

    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum number of retry attempts"
    )
    base_delay: float = Field(
        default=1.0,
        gt=0.0,
        description="Initial delay in seconds before first retry"
    )
    multiplier: float = Field(
        default=2.0,
        ge=1.0,
        description="Exponential backoff multiplier"
    )
    jitter: bool = Field(
        default=True,
        description="Add random variance to delays"
    )
    jitter_ratio: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Random variance ratio for jitter (0.2 = ±20%)"
    )


class BoardConfig(BaseModel):
    """Board defaults: initial sort and drag activation threshold."""

    default_sort_by: SortKey = Field(
        default=SortKey.CREATED_AT,
        description="Initial sort key"
    )
    default_sort_order: SortOrder = Field(
        default=SortOrder.DESC,
        description="Initial sort direction"
    )
    drag_activation_distance: float = Field(
        default=3.0,
        ge=0.0,
        description="Pointer travel (px) before a drag starts"
    )


class NotificationsConfig(BaseModel):
    """Notification polling settings."""

    enabled: bool = Field(
        default=True,
        description="Poll for unread notifications"
    )
    poll_interval_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds between polls"
    )


class TaskboardConfig(BaseModel):
    """
    Top-level taskboard configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TaskboardConfig(
        ...     api=ApiConfig(base_url="https://tasks.example.com/api"),
        ...     current_user_id="u1",
        ... )
        >>> config.notifications.poll_interval_seconds
        30.0
    """
    api: ApiConfig = Field(
        default_factory=ApiConfig,
        description="Task API connection"
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Retry behavior for API calls"
    )
    board: BoardConfig = Field(
        default_factory=BoardConfig,
        description="Board defaults"
    )
    notifications: NotificationsConfig = Field(
        default_factory=NotificationsConfig,
        description="Notification polling"
    )
    current_user_id: str | None = Field(
        default=None,
        description="Signed-in user id used for 'my tasks' statistics"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,  # Validate on field assignment
    )
