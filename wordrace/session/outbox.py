"""
Outbox - a connection's bounded outbound frame queue.

Producers (the broadcast dispatcher, under the game lock) only ever call
the non-blocking `offer`, from any thread. The connection's writer task
is the single consumer and is the only code that touches the socket.

Closing stops new frames; frames already queued are still handed to the
consumer, which then sees the end of the stream.
"""

from __future__ import annotations
from collections import deque
import asyncio
import threading

from ..config import WORDRACE_OUTBOX_SIZE
from ..game.exceptions import DeliveryError


class Outbox:
    """
    Usage:
        outbox = Outbox()
        outbox.offer('{"type": "Welcome", ...}')

        async for frame in outbox:
            await websocket.send_text(frame)
    """

    def __init__(self, maxsize: int = WORDRACE_OUTBOX_SIZE):
        self.maxsize = maxsize
        self._frames: deque[str] = deque()
        self._lock = threading.Lock()
        self._closed = False
        self._waiter: asyncio.Future | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._frames)

    def offer(self, frame: str) -> None:
        """
        Queue a frame without waiting.

        Raises:
            DeliveryError: the outbox is closed or already holds maxsize frames
        """
        with self._lock:
            if self._closed:
                raise DeliveryError("outbox closed")
            if len(self._frames) >= self.maxsize:
                raise DeliveryError(f"outbox full ({self.maxsize} frames pending)")
            self._frames.append(frame)
        self._wake()

    def close(self) -> None:
        """Stop accepting frames and let the consumer finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._wake()

    async def get(self) -> str | None:
        """Next frame, or None once the outbox is closed and drained."""
        while True:
            with self._lock:
                if self._frames:
                    return self._frames.popleft()
                if self._closed:
                    return None
                self._loop = asyncio.get_running_loop()
                self._waiter = waiter = self._loop.create_future()
            await waiter

    def __aiter__(self) -> Outbox:
        return self

    async def __anext__(self) -> str:
        frame = await self.get()
        if frame is None:
            raise StopAsyncIteration
        return frame

    def _wake(self) -> None:
        with self._lock:
            waiter, loop = self._waiter, self._loop
            self._waiter = None
        # Nobody waiting, or the consumer's loop is already gone.
        if waiter is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(_release, waiter)


def _release(waiter: asyncio.Future) -> None:
    if not waiter.done():
        waiter.set_result(None)
