"""
Kanban board engine: column grouping and drag-and-drop status transitions.

Status changes are applied optimistically. Each request is tracked as an
explicit Transition record that moves through:

    pending -> committed     (collaborator acknowledged the update)
            -> rolled_back   (collaborator failed; prior status restored)
            -> superseded    (a fresh set_tasks, init or teardown happened while
                              in flight; the fresher state wins and nothing
                              is written)

A cancelled request is rolled back like a failed one before the
cancellation propagates.

At most one transition per task may be pending. A second request for the
same task is rejected with ConflictingTransition before any network call.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from taskboard.core.board.columns import GroupingAnomaly, group_with_anomalies
from taskboard.core.client.protocols import TaskPersistence
from taskboard.core.exceptions import (
    ConflictingTransition,
    TaskboardError,
    TaskNotFoundError,
    TransitionFailure,
)
from taskboard.core.store import TaskCollectionStore
from taskboard.core.tasks.models import Task, TaskStatus, utcnow

logger = logging.getLogger(__name__)


def _label(status: TaskStatus | str) -> str:
    return status.value if isinstance(status, TaskStatus) else status


class TransitionState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    SUPERSEDED = "superseded"


@dataclass
class Transition:
    """
    One optimistic status change and its lifecycle.

    Attributes:
        task_id: Task being moved
        from_status: Status before the optimistic update
        to_status: Requested status
        generation: Store generation when the request started
        epoch: Store session epoch when the request started
        state: Current lifecycle state
        error: Failure reason once rolled back
    """

    task_id: str
    from_status: TaskStatus | str
    to_status: TaskStatus
    generation: int
    epoch: int = 0
    state: TransitionState = TransitionState.PENDING
    error: str | None = None
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.state == TransitionState.PENDING

    def _finish(self, state: TransitionState) -> None:
        if not self.is_pending:
            raise RuntimeError(
                f"Transition for {self.task_id} already finished as {self.state.value}"
            )
        self.state = state
        self.finished_at = utcnow()

    def commit(self) -> None:
        self._finish(TransitionState.COMMITTED)

    def roll_back(self, reason: str) -> None:
        self.error = reason
        self._finish(TransitionState.ROLLED_BACK)

    def supersede(self) -> None:
        self._finish(TransitionState.SUPERSEDED)


@dataclass(frozen=True)
class DropOutcome:
    """Result of a drag-and-drop release, safe to hand to rendering code."""

    accepted: bool
    task: Task | None = None
    error: str | None = None
    transition: Transition | None = None


class KanbanBoardEngine:
    """
    Groups the store's current view into columns and applies status moves.

    Args:
        store: Collection store that owns the tasks
        persistence: Collaborator that persists status updates
        history_size: Number of finished transitions kept for inspection
    """

    def __init__(
        self,
        store: TaskCollectionStore,
        persistence: TaskPersistence,
        history_size: int = 50,
    ) -> None:
        self._store = store
        self._persistence = persistence
        self._pending: dict[str, Transition] = {}
        self.history: deque[Transition] = deque(maxlen=history_size)
        self.anomalies: list[GroupingAnomaly] = []

    def columns(self) -> dict[TaskStatus, list[Task]]:
        """
        Current view grouped by status, in board order.

        Tasks with unknown statuses are left out and recorded in
        ``anomalies`` for the latest grouping.
        """
        result = group_with_anomalies(self._store.current_view())
        self.anomalies = result.anomalies
        return result.columns

    def is_pending(self, task_id: str) -> bool:
        return task_id in self._pending

    def pending_transition(self, task_id: str) -> Transition | None:
        return self._pending.get(task_id)

    async def request_status_change(self, task_id: str, new_status: TaskStatus | str) -> Task:
        """
        Move a task to a new status with an optimistic local update.

        Args:
            task_id: Task to move
            new_status: Target status

        Returns:
            The task as acknowledged by the collaborator (or the current task
            when the status is unchanged or fresher data superseded the move)

        Raises:
            ValueError: If ``new_status`` is not a known status
            ConflictingTransition: If a transition for ``task_id`` is pending
            TaskNotFoundError: If the store has no such task
            TransitionFailure: If the collaborator rejected the update
        """
        target = TaskStatus(new_status)

        in_flight = self._pending.get(task_id)
        if in_flight is not None:
            raise ConflictingTransition(task_id, in_flight.to_status.value)

        task = self._store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        if task.status == target:
            return task

        transition = Transition(
            task_id=task_id,
            from_status=task.status,
            to_status=target,
            generation=self._store.generation,
            epoch=self._store.epoch,
        )
        self._pending[task_id] = transition
        self._store.set_task_status(task_id, target, pending=True)
        logger.debug(f"Moving task {task_id}: {_label(task.status)} -> {target.value} (pending)")

        try:
            acknowledged = await self._persistence.update_task_status(task_id, target)
        except asyncio.CancelledError as e:
            self._finish_failed(transition, e)
            raise
        except Exception as e:
            self._finish_failed(transition, e)
            raise TransitionFailure(
                task_id, _label(transition.from_status), target.value, str(e)
            ) from e
        finally:
            self._pending.pop(task_id, None)
            self.history.append(transition)

        return self._finish_committed(transition, acknowledged)

    def _superseded(self, transition: Transition) -> bool:
        return (
            self._store.epoch != transition.epoch
            or self._store.generation != transition.generation
        )

    def _finish_committed(self, transition: Transition, acknowledged: Task | None) -> Task:
        current = self._store.get_task(transition.task_id)
        if self._superseded(transition):
            transition.supersede()
            logger.debug(f"Transition for {transition.task_id} superseded by fresher data")
            return current or acknowledged  # type: ignore[return-value]

        transition.commit()
        if acknowledged is not None:
            acknowledged = acknowledged.model_copy(update={"pending": False})
        if current is not None:
            # Collaborator may acknowledge without a body; keep the local version
            acknowledged = acknowledged or current.with_status(transition.to_status)
            self._store.replace_task(acknowledged)
        logger.info(
            f"Task {transition.task_id} moved to {transition.to_status.value}"
        )
        return acknowledged

    def _finish_failed(self, transition: Transition, error: BaseException) -> None:
        reason = str(error) or type(error).__name__
        if self._superseded(transition):
            transition.supersede()
            logger.warning(
                f"Transition for {transition.task_id} failed after fresher data landed: {reason}"
            )
            return

        transition.roll_back(reason)
        current = self._store.get_task(transition.task_id)
        if current is not None:
            self._store.replace_task(
                current.with_status(transition.from_status, pending=False)  # type: ignore[arg-type]
            )
        logger.warning(
            f"Rolled back task {transition.task_id} to {_label(transition.from_status)}: {reason}"
        )

    async def handle_drop(self, task_id: str, target_status: TaskStatus | str) -> DropOutcome:
        """
        Drag-end entry point for the board.

        Drops onto the task's current column are ignored. Every failure is
        turned into a rejected DropOutcome; nothing is raised to the caller.
        """
        task = self._store.get_task(task_id)
        if task is not None and task.status == target_status:
            return DropOutcome(accepted=False, task=task)

        try:
            updated = await self.request_status_change(task_id, target_status)
        except (TaskboardError, ValueError) as e:
            logger.debug(f"Drop of {task_id} onto {_label(target_status)} rejected: {e}")
            return DropOutcome(
                accepted=False,
                task=self._store.get_task(task_id),
                error=str(e),
                transition=self._last_transition(task_id),
            )

        return DropOutcome(
            accepted=True, task=updated, transition=self._last_transition(task_id)
        )

    def _last_transition(self, task_id: str) -> Transition | None:
        for transition in reversed(self.history):
            if transition.task_id == task_id:
                return transition
        return None
