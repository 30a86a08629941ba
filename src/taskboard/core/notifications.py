"""
Background polling of unread notifications.

The poller runs as its own asyncio task, independent of the task store. A
failed poll is logged and the loop keeps going; only ``stop()`` (or
cancellation of the owning task) ends it.

Example:
    >>> poller = NotificationPoller(client, interval_seconds=30)
    >>> poller.start()
    >>> ...
    >>> await poller.stop()
    >>> poller.unread
"""

import asyncio
import logging
from collections.abc import Callable

from taskboard.core.client.protocols import NotificationSource
from taskboard.core.tasks.models import Notification

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[list[Notification]], None]


class NotificationPoller:
    """
    Periodically fetches unread notifications from a source.

    Attributes:
        interval_seconds: Delay between polls
        unread: Latest unread list (empty until the first successful poll)
        last_error: Error from the most recent failed poll, if any
    """

    def __init__(
        self,
        source: NotificationSource,
        interval_seconds: float = 30.0,
        on_notifications: NotificationCallback | None = None,
    ) -> None:
        """
        Initialize a poller.

        Args:
            source: Collaborator providing ``fetch_unread``
            interval_seconds: Delay between polls (must be > 0)
            on_notifications: Called with the unread list after each
                successful poll

        Raises:
            ValueError: If interval_seconds <= 0
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")

        self.interval_seconds = interval_seconds
        self._source = source
        self._on_notifications = on_notifications
        self._task: asyncio.Task[None] | None = None
        self.unread: list[Notification] = []
        self.last_error: Exception | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def unread_count(self) -> int:
        return len(self.unread)

    async def poll_once(self) -> bool:
        """
        Fetch unread notifications once.

        Returns:
            True if the fetch succeeded
        """
        try:
            notifications = await self._source.fetch_unread()
        except Exception as e:
            self.last_error = e
            logger.warning(f"Notification poll failed: {e}")
            return False

        self.last_error = None
        self.unread = list(notifications)
        logger.debug(f"{len(self.unread)} unread notifications")
        if self._on_notifications is not None:
            try:
                self._on_notifications(self.unread)
            except Exception:
                logger.exception("Notification callback failed")
        return True

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Start polling on the running event loop (no-op if already running)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="taskboard-notification-poller")
        logger.debug(f"Notification poller started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Notification poller stopped")
