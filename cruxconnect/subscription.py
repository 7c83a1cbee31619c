"""Single-slot listener driving delivery callbacks from a transport topic."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Tuple

from .errors import CruxConnectError

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]
SourceFactory = Callable[[Optional[float]], AsyncIterator[Tuple[Any, str]]]


async def invoke(callback: Callback, *args: Any) -> None:
    """Call ``callback`` and await its result when it is a coroutine."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Subscription:
    """Holds the one active ``(on_message, on_error)`` pair of a listener.

    Installing a new pair replaces the previous one; the background task
    consuming the topic is started once and keeps running until its
    lifespan ends or :meth:`close` is called. ``handle`` turns serialized
    data into the positional arguments for ``on_message`` or raises; every
    failure is routed to ``on_error`` and never escapes the task.
    """

    def __init__(
        self,
        label: str,
        source: SourceFactory,
        ack: Callable[[Any], Awaitable[None]],
        handle: Callable[[str], Awaitable[Tuple[Any, ...]]],
    ) -> None:
        self.label = label
        self._source = source
        self._ack = ack
        self._handle = handle
        self._on_message: Optional[Callback] = None
        self._on_error: Optional[Callback] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def replace(
        self, on_message: Callback, on_error: Callback, lifespan: Optional[float] = None
    ) -> None:
        """Install a callback pair, starting the listener task if needed.

        Must be called from within a running event loop.
        """
        self._on_message = on_message
        self._on_error = on_error
        if not self.active:
            self._task = asyncio.get_running_loop().create_task(self._run(lifespan))

    async def wait(self) -> None:
        """Wait until the listener task finishes (lifespan elapsed or closed)."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        """Stop the listener task."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        await self.wait()
        self._task = None

    async def _run(self, lifespan: Optional[float]) -> None:
        logger.info(f"{self.label}: listener started")
        try:
            async for raw_message, data in self._source(lifespan):
                await self._deliver(data)
                await self._ack(raw_message)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"{self.label}: transport failure ended listener: {exc}")
            await self._report(exc)
        finally:
            logger.info(f"{self.label}: listener stopped")

    async def _deliver(self, data: str) -> None:
        try:
            args = await self._handle(data)
            await invoke(self._on_message, *args)
        except CruxConnectError as exc:
            logger.warning(f"{self.label}: rejected inbound message: {type(exc).__name__}: {exc}")
            await self._report(exc)
        except Exception as exc:
            logger.exception(f"{self.label}: failed to process inbound message")
            await self._report(exc)

    async def _report(self, error: BaseException) -> None:
        try:
            await invoke(self._on_error, error)
        except Exception:
            logger.exception(f"{self.label}: error callback failed")
