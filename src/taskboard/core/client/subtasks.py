"""
Best-effort AI subtask suggestions.

The decomposition collaborator may fail for any reason (network, model
errors, malformed output). Suggestions degrade to an empty list plus a
user-visible message; ``suggest`` never raises.
"""

import logging

from pydantic import BaseModel, Field

from taskboard.core.client.protocols import TaskPersistence
from taskboard.core.exceptions import SubtaskGenerationFailure
from taskboard.core.tasks.models import Subtask

logger = logging.getLogger(__name__)

SUBTASK_ERROR_MESSAGE = "Failed to generate subtasks. Please try again."


class SubtaskSuggestion(BaseModel):
    """Outcome of a suggestion request."""

    subtasks: list[Subtask] = Field(default_factory=list)
    error: str | None = Field(default=None, description="User-visible failure message")

    @property
    def ok(self) -> bool:
        return self.error is None


class SubtaskSuggester:
    """Wraps ``generate_subtasks`` with a loading flag and failure degradation."""

    def __init__(self, persistence: TaskPersistence) -> None:
        self._persistence = persistence
        self.loading = False
        self.last_error: str | None = None
        self.last_failure: SubtaskGenerationFailure | None = None

    async def _generate(self, title: str, description: str) -> list[Subtask]:
        try:
            raw = await self._persistence.generate_subtasks(title, description)
            return [Subtask.coerce(item) for item in raw]
        except SubtaskGenerationFailure:
            raise
        except Exception as e:
            raise SubtaskGenerationFailure(
                f"Subtask generation failed: {e}", title=title
            ) from e

    async def suggest(self, title: str, description: str = "") -> SubtaskSuggestion:
        """
        Request subtasks for a task.

        Args:
            title: Task title
            description: Task description

        Returns:
            Suggested subtasks, or an empty list with ``error`` set
        """
        self.loading = True
        self.last_error = None
        self.last_failure = None
        try:
            subtasks = await self._generate(title, description)
        except SubtaskGenerationFailure as e:
            logger.warning(f"Subtask generation failed for '{title}': {e}")
            self.last_error = SUBTASK_ERROR_MESSAGE
            self.last_failure = e
            return SubtaskSuggestion(error=SUBTASK_ERROR_MESSAGE)
        finally:
            self.loading = False

        logger.debug(f"Generated {len(subtasks)} subtasks for '{title}'")
        return SubtaskSuggestion(subtasks=subtasks)
