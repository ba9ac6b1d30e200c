"""Best-effort realtime broadcasting.

Notifications and NDA status updates are pushed to subscribers through a
Socket.IO message queue. The emitter is write-only: it publishes to Redis and
whichever Socket.IO servers are attached to the same queue deliver the event to
clients joined to the room named after the channel.

Delivery is fire-and-forget. ``safe_trigger`` never raises and never waits on
network I/O; failures are logged as warnings and dropped.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Protocol, Set, Union
from urllib.parse import urlparse

import socketio

from app.core.config import Settings

logger = logging.getLogger(__name__)


class PubSubClient(Protocol):
    async def emit(self, event: str, data: Any, namespace: Optional[str] = None, room: Optional[str] = None, **kwargs) -> None:
        ...


class RealtimeConfigError(RuntimeError):
    pass


SUPPORTED_URL_SCHEMES = {"redis", "rediss", "unix", "valkey", "valkeys"}


class DeliveryLogAdapter(logging.LoggerAdapter):
    """Logger handed to the pub/sub manager.

    The manager catches its own publish errors, retries once and returns
    normally, so its error records are the only failure signal. They are
    reported here as delivery warnings under this module's logger.
    """

    def process(self, msg, kwargs):
        detail = (kwargs.get("extra") or {}).get("redis_exception")
        if detail:
            msg = f"{msg} ({detail})"
        return f"[Realtime] {msg}", kwargs

    def log(self, level, msg, *args, **kwargs):
        if level >= logging.ERROR:
            level = logging.WARNING
            msg = f"Event delivery failed: {msg}"
        super().log(level, msg, *args, **kwargs)


def create_pubsub_client(settings: Settings) -> PubSubClient:
    url = settings.REALTIME_REDIS_URL
    if not url:
        raise RealtimeConfigError("REALTIME_REDIS_URL is not set")
    scheme = urlparse(url).scheme.split("+", 1)[0].lower()
    if scheme not in SUPPORTED_URL_SCHEMES:
        raise RealtimeConfigError(f"Unsupported REALTIME_REDIS_URL scheme: '{scheme}'")
    return socketio.AsyncRedisManager(
        url,
        channel=settings.REALTIME_CHANNEL_PREFIX,
        write_only=True,
        logger=DeliveryLogAdapter(logger, {}),
    )


class RealtimeBroadcaster:
    """Owns the pub/sub client for the lifetime of the process.

    Build it once at startup with ``from_settings``; if the client cannot be
    constructed the broadcaster stays disabled and every trigger is a no-op.
    """

    def __init__(self, client: Optional[PubSubClient] = None):
        self._client = client
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RealtimeBroadcaster":
        try:
            client = create_pubsub_client(settings)
        except Exception as e:
            logger.warning(f"[Realtime] Pub/sub client unavailable, realtime delivery disabled: {e}")
            return cls(client=None)
        return cls(client=client)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def safe_trigger(self, channels: Union[str, Iterable[str]], event: str, data: Dict[str, Any]) -> None:
        if self._client is None:
            return

        channel_list = [channels] if isinstance(channels, str) else list(channels)
        try:
            loop = asyncio.get_running_loop()
            task = loop.create_task(self._deliver(channel_list, event, data))
        except RuntimeError:
            logger.warning(f"[Realtime] No running event loop, dropped '{event}' for {channel_list}")
            return
        except Exception as e:
            logger.warning(f"[Realtime] Could not schedule '{event}': {e}")
            return

        self._pending.add(task)
        task.add_done_callback(self._on_delivered)

    async def _deliver(self, channels: list, event: str, data: Dict[str, Any]) -> None:
        for channel in channels:
            await self._client.emit(event, data, namespace="/", room=channel)

    def _on_delivered(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"[Realtime] Event delivery failed: {exc}")

    async def drain(self) -> None:
        """Wait for in-flight deliveries. Used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        self._client = None
