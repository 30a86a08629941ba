"""
External collaborator interfaces and adapters.

Protocols the engine depends on, the HTTP implementation of the task API,
and the best-effort subtask suggester.
"""

from .http import HttpTaskClient
from .protocols import AuthProvider, Directory, NotificationSource, StaticAuth, TaskPersistence
from .subtasks import SUBTASK_ERROR_MESSAGE, SubtaskSuggester, SubtaskSuggestion

__all__ = [
    "TaskPersistence",
    "AuthProvider",
    "Directory",
    "NotificationSource",
    "StaticAuth",
    "HttpTaskClient",
    "SubtaskSuggester",
    "SubtaskSuggestion",
    "SUBTASK_ERROR_MESSAGE",
]
