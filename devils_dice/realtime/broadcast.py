"""
Devil's Dice - Supabase Broadcast Subscriber

Forwards engine events to Supabase Realtime broadcast channels so remote
clients can follow a table. Public events go to `table:<id>`; events that
expose hidden faces go to the owner's `table:<id>:player:<pid>` channel only,
opened as a private channel so Realtime authorization gates who can join.

Uses a background thread with an asyncio event loop because the Realtime
channel API is async while the engine is synchronous.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from supabase import Client

from devils_dice.config.settings import Settings, get_settings
from devils_dice.realtime.bus import EventBus
from devils_dice.realtime.client import get_supabase_client
from devils_dice.realtime.events import EventPayload

logger = logging.getLogger(__name__)


class SupabaseBroadcaster:
    """Event bus subscriber that publishes to Supabase Realtime.

    Channels are created lazily, one per topic, and reused. Send failures
    are logged; they never propagate into the engine.
    """

    def __init__(self, client: Client, table_id: str, *, timeout: float = 10.0) -> None:
        self._client = client
        self._table_id = table_id
        self._timeout = timeout
        self._channels: dict[str, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def topic_for(self, payload: EventPayload) -> str:
        """Channel name an event is published on."""
        if payload.private_to is not None:
            return f"table:{self._table_id}:player:{payload.private_to}"
        return f"table:{self._table_id}"

    def __call__(self, payload: EventPayload) -> None:
        topic = self.topic_for(payload)
        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(self._send_async(topic, payload), loop)
        try:
            future.result(timeout=self._timeout)
        except Exception:
            logger.exception("Broadcast of %s to %s failed", payload.event.name, topic)

    def attach(self, bus: EventBus) -> Callable[[], None]:
        """Subscribe to a bus. Returns the unsubscribe function."""
        return bus.subscribe(self)

    @property
    def active_topics(self) -> list[str]:
        return list(self._channels.keys())

    def shutdown(self) -> None:
        """Remove all channels and stop the background event loop."""
        if self._channels and self._loop and self._loop.is_running():
            channels = list(self._channels.values())
            future = asyncio.run_coroutine_threadsafe(
                self._remove_channels_async(channels), self._loop
            )
            try:
                future.result(timeout=self._timeout)
            except Exception:
                logger.exception("Error removing broadcast channels for %s", self._table_id)
        self._channels.clear()

        if self._loop and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._loop = None
        self._thread = None

    # -- Internals -------------------------------------------------------

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        """Start the background event loop if not running."""
        with self._lock:
            if self._loop is None or not self._loop.is_running():
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_loop,
                    args=(self._loop,),
                    daemon=True,
                    name=f"broadcast-{self._table_id[:8]}",
                )
                self._thread.start()
            return self._loop

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    @staticmethod
    def channel_params(payload: EventPayload) -> dict[str, Any] | None:
        """Channel options for a payload's topic.

        Player topics are opened as private channels so that Realtime
        authorization policies decide who may join them.
        """
        if payload.is_private:
            return {"config": {"private": True}}
        return None

    async def _send_async(self, topic: str, payload: EventPayload) -> None:
        channel = self._channels.get(topic)
        if channel is None:
            params = self.channel_params(payload)
            if params is None:
                channel = self._client.realtime.channel(topic)
            else:
                channel = self._client.realtime.channel(topic, params=params)
            await channel.subscribe()
            self._channels[topic] = channel
            logger.debug("Opened broadcast channel %s", topic)
        await channel.send_broadcast(payload.event.name, payload.to_message())

    async def _remove_channels_async(self, channels: list[Any]) -> None:
        for channel in channels:
            try:
                await channel.unsubscribe()
                await self._client.realtime.remove_channel(channel)
            except Exception:
                logger.exception("Error removing channel")


def attach_broadcaster(
    bus: EventBus,
    table_id: str,
    settings: Settings | None = None,
) -> SupabaseBroadcaster | None:
    """Wire a broadcaster onto a table's bus when settings enable it.

    Returns:
        The attached broadcaster, or None when broadcasting is disabled
        or Supabase is not configured.
    """
    settings = settings or get_settings()
    if not settings.broadcast_events:
        return None
    if not settings.has_supabase:
        logger.warning("broadcast_events is on but Supabase is not configured")
        return None

    broadcaster = SupabaseBroadcaster(get_supabase_client(), table_id)
    broadcaster.attach(bus)
    logger.info("Broadcasting table %s over Supabase Realtime", table_id)
    return broadcaster
