"""Per-document serialization of embedding runs."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class DocumentLockRegistry:
    """Hands out one asyncio.Lock per document id.

    The diff step and the write step of an embedding run are not atomic, so
    two runs on the same document must not interleave. Locks are dropped once
    no caller holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, document_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(document_id, asyncio.Lock())
        self._holders[document_id] = self._holders.get(document_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[document_id] -= 1
            if self._holders[document_id] == 0:
                del self._holders[document_id]
                del self._locks[document_id]

    def __len__(self) -> int:
        return len(self._locks)
