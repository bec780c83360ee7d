"""Periodic unread-notification polling."""

import asyncio
import logging
from typing import Any, Callable, Optional

from .api_clients.base import BaseIdentityProvider, BaseNotificationClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0


class NotificationPoller:
    """Cancelable interval task that keeps the unread notification count fresh.

    Ticks where no user is signed in are skipped rather than treated as
    errors. The task must be stopped on teardown.
    """

    def __init__(
        self,
        client: BaseNotificationClient,
        identity: BaseIdentityProvider,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_count: Optional[Callable[[int], Any]] = None,
    ):
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.client = client
        self.identity = identity
        self.interval = interval
        self.on_count = on_count
        self.unread_count: Optional[int] = None
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> Optional[int]:
        """Fetch the unread count once.

        Returns:
            The unread count, or None if no user is signed in.
        """
        user_id = self.identity.current_user_id()
        if user_id is None:
            logger.debug("No signed-in user, skipping notification poll")
            return None

        count = await self.client.get_unread_count(user_id)
        self.unread_count = count
        if self.on_count is not None:
            self.on_count(count)
        return count

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Error updating notification count: {e}")
            await asyncio.sleep(self.interval)

    def start(self) -> "asyncio.Task[None]":
        """Start polling on the running event loop; polls immediately."""
        if self._task is not None and not self._task.done():
            logger.warning("Notification poller is already running")
            return self._task

        logger.info(f"Starting notification poller (every {self.interval}s)")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            logger.warning("Notification poller is not running")
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Notification poller stopped")
