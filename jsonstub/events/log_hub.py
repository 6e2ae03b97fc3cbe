"""Module log_hub: live request log with bounded history and lossy fan-out."""
#
# PURPOSE:
# The dashboard's log panel.
# 1. Keeps the most recent N lines for the initial page render (snapshot).
# 2. Broadcasts every new line to all open /events streams (subscribe).
# 3. Never blocks the publisher: a subscriber whose queue is full loses
#    lines and is told how many on its next read (SubscriberLagged).
#
# One LogHub is built at startup and handed to the app state; nothing looks
# it up through a module global.
#

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from typing import TYPE_CHECKING, AsyncIterator, Deque, List, Optional

if TYPE_CHECKING:
    from jsonstub.data.config_store import ConfigStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 200
DEFAULT_SUBSCRIBER_BUFFER = 256


class SubscriberLagged(Exception):
    """Raised to a subscriber that fell behind; `missed` lines were dropped."""

    def __init__(self, missed: int):
        super().__init__(f"subscriber lagged, {missed} line(s) dropped")
        self.missed = missed


class LogSubscription:
    """
    One live feed. Created by LogHub.subscribe() inside a running loop.

    Lines are delivered in publish order. When the buffer overflows the
    newest lines are dropped and counted; the next get() raises
    SubscriberLagged once, then delivery resumes with what is queued.
    """

    def __init__(self, hub: "LogHub", loop: asyncio.AbstractEventLoop, buffer: int):
        self._hub = hub
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=buffer)
        self._missed = 0
        # Lines handed to call_soon_threadsafe but not yet offered
        self._scheduled = 0
        self._scheduled_lock = threading.Lock()
        self.closed = False

    def _offer(self, line: str) -> None:
        # Runs on the subscriber's loop
        try:
            self._queue.put_nowait(line)
        except asyncio.QueueFull:
            self._missed += 1

    def _offer_scheduled(self, line: str) -> None:
        with self._scheduled_lock:
            self._scheduled -= 1
        self._offer(line)

    def _deliver(self, line: str) -> bool:
        """
        Hand a line to this subscriber from any thread. False if the loop is gone.

        A direct offer is only made on the subscriber's own loop with nothing
        still scheduled, so lines never overtake ones from other threads.
        """
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        with self._scheduled_lock:
            direct = running is self._loop and self._scheduled == 0
            if not direct:
                self._scheduled += 1

        if direct:
            self._offer(line)
            return True
        try:
            self._loop.call_soon_threadsafe(self._offer_scheduled, line)
        except RuntimeError:
            with self._scheduled_lock:
                self._scheduled -= 1
            return False
        return True

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> str:
        if self._missed:
            missed, self._missed = self._missed, 0
            raise SubscriberLagged(missed)
        return await self._queue.get()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._hub._unsubscribe(self)

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        # Lag is skipped here; callers that care use get() directly
        try:
            while not self.closed:
                try:
                    yield await self.get()
                except SubscriberLagged as e:
                    logger.debug(f"[LogHub] {e}")
        finally:
            self.close()

    async def __aenter__(self) -> "LogSubscription":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()


class LogHub:
    """
    Process-wide broadcaster of human-readable request log lines.

    Guarantees:
    1. snapshot() holds at most `history_size` lines, oldest first.
    2. A subscriber sees every line published after it subscribed, unless it
       lags; history is never replayed into a live feed.
    3. publish() does not wait on any subscriber.
    """

    def __init__(
        self,
        config_store: Optional["ConfigStore"] = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
        subscriber_buffer: int = DEFAULT_SUBSCRIBER_BUFFER,
    ):
        self._config_store = config_store
        self._history: Deque[str] = deque(maxlen=history_size)
        self._lock = threading.Lock()
        self._subscriber_buffer = subscriber_buffer
        self._subscribers: List[LogSubscription] = []
        self._subscribers_lock = threading.Lock()

    def publish(self, line: str) -> None:
        # Append and fan-out under one lock: feeds follow snapshot() order.
        # _deliver never blocks.
        with self._lock:
            self._history.append(line)
            with self._subscribers_lock:
                subscribers = list(self._subscribers)
            dead = [sub for sub in subscribers if not sub._deliver(line)]

        for sub in dead:
            # Loop closed underneath us; the tab is gone
            sub.close()

    def subscribe(self) -> LogSubscription:
        loop = asyncio.get_running_loop()
        sub = LogSubscription(self, loop, self._subscriber_buffer)
        with self._subscribers_lock:
            self._subscribers.append(sub)
        logger.debug(f"[LogHub] Subscriber added ({len(self._subscribers)} active)")
        return sub

    def _unsubscribe(self, sub: LogSubscription) -> None:
        with self._subscribers_lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    def snapshot(self) -> List[str]:
        with self._lock:
            return list(self._history)

    def should_log(self, path: str) -> bool:
        """Toggle on and `path` not matched by an ignore pattern."""
        if self._config_store is None:
            return True
        return self._config_store.should_log(path)

    def clear(self) -> None:
        """Clear the history window. Useful for testing."""
        with self._lock:
            self._history.clear()

    def stats(self) -> dict:
        with self._lock:
            stored = len(self._history)
        with self._subscribers_lock:
            active = len(self._subscribers)
        return {
            "lines_stored": stored,
            "history_size": self._history.maxlen,
            "active_subscribers": active,
            "subscriber_buffer": self._subscriber_buffer,
        }
