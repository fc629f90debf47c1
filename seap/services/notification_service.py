"""
Notification dispatcher.
Outbound email is handed to a bounded in-process queue drained by one background
worker, so a campaign decision never waits on (or fails because of) delivery.
Delivery is attempted once; failures are logged and dropped.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

from seap.config import settings
from seap.services.email_service import EmailService, get_email_service

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    description: str
    send: Callable[[EmailService], Awaitable[bool]]


class NotificationDispatcher:
    def __init__(self, email_service: Optional[EmailService] = None, maxsize: int = settings.NOTIFICATION_QUEUE_SIZE):
        self._email_service = email_service
        self.maxsize = maxsize
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def email_service(self) -> EmailService:
        return self._email_service or get_email_service()

    def start(self) -> None:
        """Start the worker on the running loop (idempotent)."""
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    async def join(self) -> None:
        """Wait until everything queued or in flight has been attempted."""
        if self._queue is not None:
            await self._queue.join()
        if self._inflight:
            await asyncio.gather(*list(self._inflight))

    def enqueue(self, notification: Notification) -> bool:
        """Hand off without blocking. Returns False when the queue is full."""
        self.start()
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            logger.warning(f"Notification queue full, dropping: {notification.description}")
            return False
        return True

    async def send_with_wait(self, notification: Notification, wait_seconds: float) -> Optional[bool]:
        """
        Start delivery in the background and wait briefly for an immediate outcome.
        Returns the delivery result if it finished within `wait_seconds`, else None.
        """
        task = asyncio.create_task(self._deliver(notification))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

        done, _ = await asyncio.wait({task}, timeout=wait_seconds)
        if task in done:
            return task.result()
        return None

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._deliver(notification)
            finally:
                self._queue.task_done()

    async def _deliver(self, notification: Notification) -> bool:
        try:
            sent = await notification.send(self.email_service)
        except Exception:
            logger.exception(f"Notification failed: {notification.description}")
            return False

        if sent:
            logger.info(f"Notification sent: {notification.description}")
        else:
            logger.error(f"Notification not delivered: {notification.description}")
        return sent

    # -------------------------------------------------------------------------
    # Campaign notifications
    # -------------------------------------------------------------------------

    def notify_campaign_decision(
        self,
        to: str,
        campaign_title: str,
        status: str,
        comment: Optional[str],
        simulation_link: Optional[str]
    ) -> bool:
        async def send(email_service: EmailService) -> bool:
            return await email_service.send_campaign_decision_email(
                to, campaign_title, status, comment, simulation_link
            )

        return self.enqueue(Notification(f"campaign {status} email to {to}", send))

    async def share_campaign(
        self,
        to: str,
        campaign_title: str,
        simulation_link: str,
        wait_seconds: float = settings.SHARE_EMAIL_WAIT_SECONDS
    ) -> Optional[bool]:
        async def send(email_service: EmailService) -> bool:
            return await email_service.send_campaign_share_email(to, campaign_title, simulation_link)

        return await self.send_with_wait(Notification(f"campaign share email to {to}", send), wait_seconds)


# =============================================================================
# DISPATCHER SINGLETON
# =============================================================================

_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher


def set_notification_dispatcher(dispatcher: Optional[NotificationDispatcher]) -> None:
    """Set custom dispatcher (for testing)."""
    global _dispatcher
    _dispatcher = dispatcher
