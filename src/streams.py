import asyncio
from typing import Any

from diski.exceptions import StreamClosedError

_CLOSED = object()


class Stream:
    """Unbounded FIFO fed synchronously from signal handlers or UI callbacks.

    Producers call push() from the loop thread; the single consumer either
    awaits get() or polls ready()/get_nowait(). close() appends an end
    marker, after which every read raises StreamClosedError. Wakers are
    asyncio.Events set on every push/close so one consumer can wait on
    several streams at once.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._wakers: list[asyncio.Event] = []

    def __repr__(self) -> str:
        return f"<Stream {self.name!r} pending={self._queue.qsize()} closed={self.closed}>"

    def add_waker(self, event: asyncio.Event) -> None:
        self._wakers.append(event)

    def push(self, item: Any) -> None:
        if self.closed:
            return
        self._queue.put_nowait(item)
        self._wake()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(_CLOSED)
        self._wake()

    def ready(self) -> bool:
        return not self._queue.empty()

    def get_nowait(self) -> Any:
        return self._unwrap(self._queue.get_nowait())

    async def get(self) -> Any:
        return self._unwrap(await self._queue.get())

    def _unwrap(self, item: Any) -> Any:
        if item is _CLOSED:
            # keep the marker so later reads fail the same way
            self._queue.put_nowait(_CLOSED)
            raise StreamClosedError(f"{self.name or 'signal'} stream closed")
        return item

    def _wake(self) -> None:
        for event in self._wakers:
            event.set()
