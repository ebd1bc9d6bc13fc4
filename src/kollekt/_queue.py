"""Bounded FIFO queues that evict their oldest items on overflow."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterator, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic

from kollekt._collections import varargs
from kollekt._errors import EmptyQueueError
from kollekt._types import T

logger = logging.getLogger(__name__)

MAX_QUEUE_SIZE = 32_768
DEFAULT_QUEUE_LIMIT = 100


def _clamp_limit(limit: Any, fallback: int) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = fallback
    return min(max(1, value), MAX_QUEUE_SIZE)


@dataclass(frozen=True)
class EvictionResult(Generic[T]):
    """
    Outcome of an operation that can change a queue's size or capacity.

    Attributes:
        exceeded_bounds: True if the operation pushed the queue past its limit
        evicted: The items removed to restore the limit, oldest first
        size: Number of items after the operation
        limit: Capacity after the operation
        next: The item ``take`` would return next (None when empty)
    """

    exceeded_bounds: bool
    evicted: tuple[T, ...]
    size: int
    limit: int
    next: T | None = None


class BoundedQueue(Generic[T]):
    """
    A first-in first-out queue holding at most ``limit`` items.

    Adding an item to a full queue evicts the oldest item and reports it.
    The limit is clamped to ``[1, MAX_QUEUE_SIZE]`` and is never smaller
    than the number of initial items.

    Example:
        q = BoundedQueue(2, ["a", "b"])
        result = q.enqueue("c")
        result.evicted   # ("a",)
        q.take()         # "b"
    """

    def __init__(self, limit: int = DEFAULT_QUEUE_LIMIT, items: Iterable[T] = ()):
        initial = list(items.values) if isinstance(items, BoundedQueue) else list(items)
        self._limit = _clamp_limit(max(_clamp_limit(limit, 1), len(initial)), len(initial))
        self._items: deque[T] = deque(initial)
        while len(self._items) > self._limit:
            self._items.popleft()

    @classmethod
    def create(cls, limit: int = DEFAULT_QUEUE_LIMIT, *items: Any) -> BoundedQueue[Any]:
        """
        Create a queue from variadic items.

        Example:
            BoundedQueue.create(3, 1, 2)    # holds 1, 2
            BoundedQueue.create(3, [1, 2])  # same
        """
        return cls(limit, varargs(*items))

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def values(self) -> list[T]:
        """A copy of the queued items, oldest first."""
        return list(self._items)

    @property
    def state(self) -> EvictionResult[T]:
        return EvictionResult(
            exceeded_bounds=self.size > self._limit,
            evicted=(),
            size=self.size,
            limit=self._limit,
            next=self.peek(),
        )

    def enqueue(self, item: T) -> EvictionResult[T]:
        """
        Add ``item`` at the back, evicting the front item if the queue overflows.

        None is ignored.
        """
        evicted: tuple[T, ...] = ()
        if item is not None:
            self._items.append(item)
            if len(self._items) > self._limit:
                evicted = (self._items.popleft(),)
                logger.debug("Queue at limit %d evicted %r", self._limit, evicted[0])
        return EvictionResult(
            exceeded_bounds=bool(evicted),
            evicted=evicted,
            size=self.size,
            limit=self._limit,
            next=self.peek(),
        )

    def push(self, item: T) -> int:
        """Enqueue ``item`` and return the new size."""
        return self.enqueue(item).size

    def take(self) -> T:
        """
        Remove and return the front item.

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if not self._items:
            raise EmptyQueueError()
        return self._items.popleft()

    def dequeue(self) -> T:
        return self.take()

    def pop(self) -> T:
        """
        Remove and return the back item.

        Raises:
            EmptyQueueError: If the queue is empty
        """
        if not self._items:
            raise EmptyQueueError()
        return self._items.pop()

    def peek(self) -> T | None:
        return self._items[0] if self._items else None

    def flush(self) -> list[T]:
        """Remove every item and return them, oldest first."""
        items = list(self._items)
        self._items.clear()
        return items

    def clear(self) -> None:
        self._items.clear()

    def is_empty(self) -> bool:
        return not self._items

    def can_take(self) -> bool:
        return bool(self._items)

    def is_queued(self, item: Any) -> bool:
        return item in self._items

    def shrink(self, new_limit: int, evict_from_back: bool = False) -> EvictionResult[T]:
        """
        Change the limit to ``new_limit`` and evict until the queue fits.

        Items are evicted from the front unless ``evict_from_back`` is True.
        A larger ``new_limit`` raises the limit like ``extend``.
        """
        limit = _clamp_limit(new_limit, self.size)
        exceeded = self.size > limit
        evicted = []
        while len(self._items) > limit:
            evicted.append(self._items.pop() if evict_from_back else self._items.popleft())
        self._limit = limit
        if evicted:
            logger.debug("Shrinking queue to %d evicted %d items", limit, len(evicted))
        return EvictionResult(
            exceeded_bounds=exceeded,
            evicted=tuple(evicted),
            size=self.size,
            limit=self._limit,
            next=self.peek(),
        )

    def extend(self, new_limit: int, *items: Any) -> EvictionResult[T]:
        """
        Raise the limit to at least ``new_limit`` and enqueue ``items``.

        The limit never decreases. Evictions caused by the new items are
        accumulated in the result.
        """
        self._limit = max(_clamp_limit(new_limit, self.size), self._limit)
        evicted: list[T] = []
        for item in varargs(*items):
            evicted.extend(self.enqueue(item).evicted)
        return EvictionResult(
            exceeded_bounds=bool(evicted),
            evicted=tuple(evicted),
            size=self.size,
            limit=self._limit,
            next=self.peek(),
        )

    def drain(self) -> Iterator[T]:
        """Yield and remove items from the front until the queue is empty."""
        while self._items:
            yield self._items.popleft()

    def __iter__(self) -> Iterator[T]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: Any) -> bool:
        return self.is_queued(item)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(limit={self._limit}, items={self.values!r})"


class AsyncBoundedQueue(Generic[T]):
    """
    Async interface to a BoundedQueue.

    Every method completes without suspending. Unlike the synchronous
    queue, taking from an empty queue logs a warning and returns None.

    Example:
        q = AsyncBoundedQueue(10, [1, 2])
        await q.enqueue(3)
        async for item in q:
            ...  # 1, 2, 3; the queue is drained
    """

    def __init__(self, limit: int = DEFAULT_QUEUE_LIMIT, items: Iterable[T] = ()):
        if isinstance(items, AsyncBoundedQueue):
            items = items.values
        self._queue: BoundedQueue[T] = BoundedQueue(limit, items)

    @classmethod
    def create(cls, limit: int = DEFAULT_QUEUE_LIMIT, *items: Any) -> AsyncBoundedQueue[Any]:
        return cls(limit, varargs(*items))

    @property
    def limit(self) -> int:
        return self._queue.limit

    @property
    def size(self) -> int:
        return self._queue.size

    @property
    def values(self) -> list[T]:
        return self._queue.values

    @property
    def state(self) -> EvictionResult[T]:
        return self._queue.state

    async def get_limit(self) -> int:
        return self._queue.limit

    async def get_size(self) -> int:
        return self._queue.size

    async def get_state(self) -> EvictionResult[T]:
        return self._queue.state

    async def enqueue(self, item: T) -> EvictionResult[T]:
        return self._queue.enqueue(item)

    async def push(self, item: T) -> int:
        return self._queue.push(item)

    async def take(self) -> T | None:
        try:
            return self._queue.take()
        except EmptyQueueError as e:
            logger.warning("Attempted to take from an empty queue: %s", e)
            return None

    async def dequeue(self) -> T | None:
        return await self.take()

    async def pop(self) -> T | None:
        try:
            return self._queue.pop()
        except EmptyQueueError as e:
            logger.warning("Attempted to pop from an empty queue: %s", e)
            return None

    async def peek(self) -> T | None:
        return self._queue.peek()

    async def flush(self) -> list[T]:
        return self._queue.flush()

    async def clear(self) -> None:
        self._queue.clear()

    async def is_empty(self) -> bool:
        return self._queue.is_empty()

    async def can_take(self) -> bool:
        return self._queue.can_take()

    async def is_queued(self, item: Any) -> bool:
        return self._queue.is_queued(item)

    async def shrink(self, new_limit: int, evict_from_back: bool = False) -> EvictionResult[T]:
        return self._queue.shrink(new_limit, evict_from_back)

    async def extend(self, new_limit: int, *items: Any) -> EvictionResult[T]:
        return self._queue.extend(new_limit, *items)

    async def _drain(self) -> AsyncIterator[T]:
        for item in self._queue.drain():
            yield item

    def __aiter__(self) -> AsyncIterator[T]:
        return self._drain()

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, item: Any) -> bool:
        return item in self._queue

    def __repr__(self) -> str:
        return f"{type(self).__name__}(limit={self.limit}, items={self.values!r})"


def enqueue(values: list[Any], item: Any, limit: int = DEFAULT_QUEUE_LIMIT) -> list[Any]:
    """
    Append ``item`` to ``values`` in place, dropping items from the front
    so that at most ``limit`` remain. Returns ``values``.

    Example:
        log = ["a", "b"]
        enqueue(log, "c", limit=2)  # ["b", "c"]
    """
    bound = _clamp_limit(limit, max(1, len(values)))
    values.append(item)
    while len(values) > bound:
        del values[0]
    return values
