"""Trailing-edge debounce batching of trigger events per subject."""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, List, Optional, Set, Union

from loguru import logger

from vigil.schemas import TriggerEvent

OnBatchReady = Callable[[str, List[TriggerEvent]], Union[None, Awaitable[None]]]


class DebounceBatcher:
    """Group trigger events for the same key until the key goes quiet.

    Every new event for a key restarts that key's single timer, so a key that
    keeps firing is not flushed until events stop arriving for a full window.

    The batcher is owned by the event loop: ``add_to_batch``, timer expiry and
    ``flush_all`` all run on the loop thread and never interleave. Callers in
    worker threads must hand events over with ``loop.call_soon_threadsafe``.
    """

    def __init__(self):
        self._queues: Dict[str, List[TriggerEvent]] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._deliveries: Set[asyncio.Task] = set()

    def add_to_batch(
        self,
        key: str,
        event: TriggerEvent,
        window_minutes: float,
        on_ready: OnBatchReady,
    ) -> None:
        """Queue ``event`` under ``key`` and restart the key's timer."""
        loop = asyncio.get_running_loop()

        self._queues.setdefault(key, []).append(event)

        existing = self._timers.pop(key, None)
        if existing is not None:
            existing.cancel()

        self._timers[key] = loop.call_later(window_minutes * 60, self._expire, key, on_ready)
        logger.debug(f"Batch {key}: {len(self._queues[key])} pending, window {window_minutes:g}m")

    def flush_all(self, on_ready: OnBatchReady) -> None:
        """Cancel every timer and deliver every non-empty queue now."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

        queues, self._queues = self._queues, {}
        for key, events in queues.items():
            if events:
                self._invoke(on_ready, key, events)

        if queues:
            logger.info(f"Flushed {len(queues)} pending batches")

    async def drain(self) -> None:
        """Wait for asynchronous deliveries started by the batcher."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    def pending_keys(self) -> List[str]:
        return list(self._queues)

    def pending_count(self, key: str) -> int:
        return len(self._queues.get(key, []))

    def has_timer(self, key: str) -> bool:
        return key in self._timers

    def deadline(self, key: str) -> Optional[float]:
        """Loop time at which the key's batch is due, ``None`` without a timer."""
        timer = self._timers.get(key)
        return timer.when() if timer is not None else None

    def __len__(self) -> int:
        return len(self._queues)

    # --- internals ---

    def _expire(self, key: str, on_ready: OnBatchReady) -> None:
        self._timers.pop(key, None)
        events = self._queues.pop(key, [])
        if events:
            self._invoke(on_ready, key, events)

    def _invoke(self, on_ready: OnBatchReady, key: str, events: List[TriggerEvent]) -> None:
        try:
            result = on_ready(key, events)
        except Exception:
            logger.exception(f"Batch callback failed for {key}")
            return

        if inspect.isawaitable(result):
            task = asyncio.get_running_loop().create_task(self._await_delivery(key, result))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

    async def _await_delivery(self, key: str, pending: Awaitable[None]) -> None:
        try:
            await pending
        except Exception:
            logger.exception(f"Batch delivery failed for {key}")
