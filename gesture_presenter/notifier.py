"""
HTTP Notifier for the presenter endpoint.

Handles:
- Async HTTP client lifecycle
- Message queue for decoupled sending (frame loop never waits on the network)
- Failure callback so the client can ask for a new pairing code
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from .message import GestureMessage

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://gesture-presenter-bc9d819e6d43.herokuapp.com/send_gesture"


@dataclass
class NotifierStats:
    """Statistics about outgoing notifications."""
    messages_sent: int = 0
    messages_failed: int = 0
    last_send_time: Optional[float] = None
    last_error: Optional[str] = None


class GestureNotifier:
    """
    Async gesture notifier.

    Features:
    - JSON POST per queued message
    - Non-blocking sending via bounded queue
    - No retries: a failed send is logged and reported through on_failure
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT,
        timeout: float = 5.0,
        queue_size: int = 16,
        on_failure: Optional[Callable[[], Awaitable[None]]] = None,
        on_success: Optional[Callable[[GestureMessage], Awaitable[None]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize notifier.

        Args:
            endpoint_url: URL receiving the gesture POSTs
            timeout: Per-request timeout in seconds
            queue_size: Maximum number of pending messages
            on_failure: Callback when a send fails
            on_success: Callback when a send succeeds
            transport: Optional httpx transport (used by tests)
        """
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.on_failure = on_failure
        self.on_success = on_success
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._running = False
        self._send_queue: asyncio.Queue[Optional[GestureMessage]] = asyncio.Queue(maxsize=queue_size)
        self._send_task: Optional[asyncio.Task] = None

        self.stats = NotifierStats()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Open the HTTP client and start the sender task."""
        if self._running:
            return

        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        self._running = True
        self._send_task = asyncio.create_task(self._send_loop())

        logger.info(f"Gesture notifier started, posting to {self.endpoint_url}")

    async def stop(self) -> None:
        """Stop the sender task and close the HTTP client."""
        if not self._running:
            return

        logger.info("Gesture notifier stopping...")
        self._running = False

        # Signal send loop to exit
        try:
            self._send_queue.put_nowait(None)
        except asyncio.QueueFull:
            pass

        if self._send_task:
            self._send_task.cancel()
            try:
                await self._send_task
            except asyncio.CancelledError:
                pass
            self._send_task = None

        if self._client:
            await self._client.aclose()
            self._client = None

        logger.info("Gesture notifier stopped")

    def notify(self, message: GestureMessage) -> bool:
        """
        Queue a message for sending.

        Non-blocking. Returns False if the notifier is stopped or the queue is full.
        """
        if not self._running:
            self.stats.messages_failed += 1
            return False

        try:
            self._send_queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            self.stats.messages_failed += 1
            logger.warning("Send queue full, dropping gesture")
            return False

    async def send(self, message: GestureMessage) -> bool:
        """
        POST one message now.

        Returns:
            True if the endpoint accepted it
        """
        if self._client is None:
            raise RuntimeError("Notifier not started")

        try:
            response = await self._client.post(self.endpoint_url, json=message.to_payload())
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.stats.messages_failed += 1
            self.stats.last_error = str(e)
            logger.error(f"Error sending gesture: {e}")
            if self.on_failure:
                await self.on_failure()
            return False

        self.stats.messages_sent += 1
        self.stats.last_send_time = time.time()
        self.stats.last_error = None
        logger.info(f"Gesture sent successfully: {response.text}")
        if self.on_success:
            await self.on_success(message)
        return True

    async def _send_loop(self) -> None:
        """Process outgoing message queue."""
        while self._running:
            try:
                message = await self._send_queue.get()

                # None is shutdown signal
                if message is None:
                    break

                await self.send(message)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Send loop error: {e}")

    def get_stats(self) -> dict:
        """Get notifier statistics."""
        return {
            "running": self._running,
            "messages_sent": self.stats.messages_sent,
            "messages_failed": self.stats.messages_failed,
            "last_send_time": self.stats.last_send_time,
            "last_error": self.stats.last_error,
            "queue_size": self._send_queue.qsize(),
        }
