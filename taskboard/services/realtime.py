"""Realtime fan-out hub.

Connected board clients subscribe to a channel per project. After every task
mutation the full task list of that project is pushed to the channel; clients
that are not connected at that moment miss the update and re-fetch on
reconnect.

Usage:
    hub = RealtimeHub()
    hub.subscribe(RealtimeHub.project_channel(project_id), websocket)
    await hub.broadcast(RealtimeHub.project_channel(project_id), {"event": "tasks", ...})
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set, Union

from starlette.websockets import WebSocketDisconnect

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    async def send_json(self, data: Any) -> None: ...


ConnectHandler = Callable[[Subscriber], Union[None, Awaitable[None]]]

# Errors a send raises once the peer has gone away
_SEND_ERRORS = (WebSocketDisconnect, RuntimeError, ConnectionError)


class RealtimeHub:
    MAX_SUBSCRIBERS_PER_CHANNEL = 200
    SEND_TIMEOUT_SECONDS = 5.0

    def __init__(self, send_timeout: float = SEND_TIMEOUT_SECONDS) -> None:
        self.send_timeout = send_timeout
        self._channels: Dict[str, Set[Subscriber]] = {}
        self._connect_handlers: List[ConnectHandler] = []
        self._open = False

    # Lifecycle

    def initialize(self) -> None:
        self._open = True
        logger.info("Realtime hub initialized")

    async def destroy(self) -> None:
        await self.disconnect_all()
        self._open = False
        logger.info("Realtime hub closed")

    def health_check(self) -> bool:
        return self._open

    @property
    def is_open(self) -> bool:
        return self._open

    # Connections

    @staticmethod
    def project_channel(project_id: str) -> str:
        return f"project:{project_id}"

    def on_client_connected(self, handler: ConnectHandler) -> ConnectHandler:
        """Register a callback run for every accepted connection."""
        self._connect_handlers.append(handler)
        return handler

    async def client_connected(self, subscriber: Subscriber) -> None:
        for handler in self._connect_handlers:
            result = handler(subscriber)
            if inspect.isawaitable(result):
                await result

    def subscribe(self, channel: str, subscriber: Subscriber) -> bool:
        """Add ``subscriber`` to ``channel``; False when the channel is full."""
        subscribers = self._channels.setdefault(channel, set())
        if subscriber in subscribers:
            return True
        if len(subscribers) >= self.MAX_SUBSCRIBERS_PER_CHANNEL:
            logger.warning("Channel %s at capacity (%d), refusing subscriber", channel, len(subscribers))
            return False
        subscribers.add(subscriber)
        return True

    def unsubscribe(self, channel: str, subscriber: Subscriber) -> None:
        subscribers = self._channels.get(channel)
        if not subscribers:
            return
        subscribers.discard(subscriber)
        if not subscribers:
            self._channels.pop(channel, None)

    def disconnect(self, subscriber: Subscriber) -> None:
        """Drop a subscriber from every channel it joined."""
        for channel in list(self._channels):
            self.unsubscribe(channel, subscriber)

    def subscriber_count(self, channel: Optional[str] = None) -> int:
        if channel is not None:
            return len(self._channels.get(channel, ()))
        return len({subscriber for subscribers in self._channels.values() for subscriber in subscribers})

    # Delivery

    async def broadcast(self, channel: str, payload: Any) -> int:
        """Send ``payload`` to every subscriber of ``channel`` concurrently.

        A subscriber that is gone, or does not take the message within
        ``send_timeout`` seconds, is dropped from every channel.

        Returns:
            Number of subscribers that received it.
        """
        if not self._open:
            logger.debug("Realtime hub closed, dropping broadcast to %s", channel)
            return 0

        subscribers = list(self._channels.get(channel, ()))
        delivered = await asyncio.gather(*(self._send(channel, subscriber, payload) for subscriber in subscribers))

        for subscriber, ok in zip(subscribers, delivered):
            if not ok:
                self.disconnect(subscriber)
        return sum(delivered)

    async def _send(self, channel: str, subscriber: Subscriber, payload: Any) -> bool:
        try:
            await asyncio.wait_for(subscriber.send_json(payload), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("Dropping stalled subscriber on %s after %ss", channel, self.send_timeout)
        except _SEND_ERRORS as exc:
            logger.info("Dropping disconnected subscriber on %s: %s", channel, exc)
        return False

    async def disconnect_all(self) -> None:
        subscribers = {subscriber for group in self._channels.values() for subscriber in group}
        self._channels.clear()
        for subscriber in subscribers:
            close = getattr(subscriber, "close", None)
            if close is None:
                continue
            try:
                await close(code=1001)
            except _SEND_ERRORS as exc:
                logger.debug("Subscriber already gone on shutdown: %s", exc)
