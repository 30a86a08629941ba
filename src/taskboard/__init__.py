"""
Taskboard - Kanban task collection engine

Client-side engine that holds the working set of tasks, filters and sorts
it, derives statistics, and mediates drag-and-drop status transitions.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from taskboard.core.config.models import TaskboardConfig
from taskboard.core.tasks.models import Task, TaskPriority, TaskStatus

__all__ = ["TaskboardConfig", "Task", "TaskStatus", "TaskPriority", "__version__"]
