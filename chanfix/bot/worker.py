"""Single worker that serializes IRC events into the command engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..constants import EVENT_QUEUE_MAXSIZE, PENDING_SWEEP_INTERVAL, WORKER_STOP_TIMEOUT
from ..errors.handling import log_error
from ..irc.events import RawLine
from ..logs.logger import logger
from .engine import CommandEngine, EngineEvent, PendingSweep


class EventWorker:
    """Feeds queued events to a ``CommandEngine`` one at a time.

    The IRC reader calls ``submit`` and never waits: while the worker is busy
    awaiting a WHOIS reply the reader still has to deliver that reply, so a
    full queue drops the event instead of blocking.

    Attributes:
        engine: Engine receiving every event.
        queue: Bounded FIFO of pending events.
        sweep_interval: Seconds between ``PendingSweep`` events.
        dropped: Number of events discarded because the queue was full.
    """

    def __init__(
        self,
        engine: CommandEngine,
        maxsize: int = EVENT_QUEUE_MAXSIZE,
        sweep_interval: float = PENDING_SWEEP_INTERVAL,
    ) -> None:
        self.engine = engine
        self.queue: asyncio.Queue[EngineEvent] = asyncio.Queue(maxsize=maxsize)
        self.sweep_interval = sweep_interval
        self.dropped = 0
        self.running = False
        self._task: asyncio.Task[Any] | None = None
        self._sweep_task: asyncio.Task[Any] | None = None

    def submit(self, event: EngineEvent) -> bool:
        if isinstance(event, RawLine):
            # Diagnostic only; queuing it would crowd out commands while a
            # fix waits on WHOIS replies
            self.engine.handle_raw_line(event.text)
            return True
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.log_event(
                "worker",
                "queue_full",
                level=logging.WARNING,
                event_type=type(event).__name__,
                dropped=self.dropped,
            )
            return False
        return True

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._task = asyncio.create_task(self._run())
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.log_event("worker", "started", level=logging.DEBUG)

    async def _run(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                await self.process(event)
            finally:
                self.queue.task_done()

    async def process(self, event: EngineEvent) -> None:
        """Handle one event, logging anything the engine raises."""
        try:
            await self.engine.handle_event(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            log_error(
                "Event handling failed", e, {"event_type": type(event).__name__}
            )

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.submit(PendingSweep())

    async def stop(self, timeout: float = WORKER_STOP_TIMEOUT) -> None:
        """Let queued events drain for up to ``timeout`` then cancel the tasks."""
        if not self.running:
            return
        self.running = False
        if self._sweep_task is not None:
            self._sweep_task.cancel()
        try:
            await asyncio.wait_for(self.queue.join(), timeout=timeout)
        except TimeoutError:
            logger.log_event(
                "worker",
                "drain_timeout",
                level=logging.WARNING,
                remaining=self.queue.qsize(),
            )
        tasks = [t for t in (self._task, self._sweep_task) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._sweep_task = None
        logger.log_event("worker", "stopped", level=logging.DEBUG)
