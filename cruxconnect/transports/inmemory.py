"""In-memory transport for testing."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import AsyncIterator, DefaultDict, Dict, List, Optional, Tuple

from .base import BaseTransport


class InMemoryTransport(BaseTransport[Tuple[str, str]]):
    """Simple in-process queues for unit tests and single-process setups.

    Each topic is a FIFO queue; concurrent subscribers on one topic compete
    for messages. ``published`` keeps every payload ever published, per
    topic, so tests can assert on what reached the medium; it is never
    trimmed, so use this transport for tests and short-lived processes only.
    """

    def __init__(self) -> None:
        self._queues: Dict[str, asyncio.Queue] = {}
        self.published: DefaultDict[str, List[str]] = defaultdict(list)

    def _queue(self, topic: str) -> asyncio.Queue:
        if topic not in self._queues:
            self._queues[topic] = asyncio.Queue()
        return self._queues[topic]

    async def publish(self, topic: str, data: str) -> None:
        """Publish data to the in-memory queue."""
        self.published[topic].append(data)
        await self._queue(topic).put((topic, data))

    async def subscribe(
        self, topic: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[Tuple[str, str], str]]:
        """Subscribe to messages from topic.

        Args:
            topic: The topic to subscribe to
            lifespan: Maximum time in seconds to keep connection open. If None, runs indefinitely.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + lifespan if lifespan else None
        queue = self._queue(topic)

        while True:
            timeout = None
            if deadline is not None:
                timeout = deadline - loop.time()
                if timeout <= 0:
                    break
            try:
                raw_message = await asyncio.wait_for(queue.get(), timeout)
            except asyncio.TimeoutError:
                break
            yield raw_message, raw_message[1]

    async def ack(self, raw_message: Tuple[str, str]) -> None:
        """No-op acknowledgment for in-memory transport."""
        pass
