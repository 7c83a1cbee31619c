"""Redis transport for cross-process messaging."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Tuple

import redis.asyncio as redis

from .base import BaseTransport

logger = logging.getLogger(__name__)

KEY_PREFIX = "cruxconnect"


class RedisTransport(BaseTransport[str]):
    """Redis-based transport; every topic is a Redis list used as a queue."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self._redis: Optional[Any] = None

    @staticmethod
    def queue_name(topic: str) -> str:
        return f"{KEY_PREFIX}:{topic}"

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        # Test connection
        await self._redis.ping()
        logger.info(f"Connected to redis at {self.host}:{self.port}/{self.db}")

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def publish(self, topic: str, data: str) -> None:
        """Push data onto the topic's list."""
        if not self._redis:
            await self.connect()
        await self._redis.lpush(self.queue_name(topic), data)

    async def subscribe(
        self, topic: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[str, str]]:
        """Pop messages from the topic's list in FIFO order."""
        if not self._redis:
            await self.connect()

        queue_name = self.queue_name(topic)
        loop = asyncio.get_running_loop()
        start_time = loop.time() if lifespan else None

        while True:
            if lifespan and start_time:
                elapsed = loop.time() - start_time
                if elapsed >= lifespan:
                    break

            # Blocking pop with timeout
            result = await self._redis.brpop(queue_name, timeout=1)

            if result:
                _, data = result
                yield data, data

    async def ack(self, raw_message: str) -> None:
        """No-op acknowledgment for Redis transport (message already consumed)."""
        pass
