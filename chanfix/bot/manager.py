"""ChanFixManager: wires the IRC client, worker and store and runs them."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..config.model import BotConfig
from ..constants import MANAGER_LOOP_SLEEP_SECONDS, RECONNECT_DELAY
from ..enrollment.pending import PendingEnrollments
from ..enrollment.repository import EnrollmentRepository
from ..enrollment.store import EnrollmentStore
from ..errors.handling import log_error
from ..errors.internal import PersistenceError
from ..irc.client import AsyncIRCClient
from ..logs.logger import logger
from .engine import CommandEngine
from .signal_handler import SignalHandler
from .worker import EventWorker

QUIT_REASON = "Server is exiting."


class ChanFixManager:  # pylint: disable=too-many-instance-attributes
    """Owns every long-lived component of the service.

    Attributes:
        config: Validated bot configuration.
        store: Enrollment records, loaded by ``start``.
        pending: Enrollments waiting for their join to sync.
        client: IRC connection.
        engine: Command engine bound to ``client``.
        worker: Serializes client events into ``engine``.
        signals: Shutdown flag set by SIGINT/SIGTERM.
        connection_task: Task running the connect/listen/reconnect loop.
    """

    def __init__(
        self,
        config: BotConfig,
        client: AsyncIRCClient | None = None,
        store: EnrollmentStore | None = None,
    ) -> None:
        self.config = config
        if store is None:
            store = EnrollmentStore(EnrollmentRepository(config.enrollment_file))
        self.store = store
        self.pending = PendingEnrollments(config.pending_timeout)
        if client is None:
            client = AsyncIRCClient(
                config.server,
                config.port,
                config.nick,
                config.realname,
                tls=config.tls,
                oper_name=config.oper_name,
                oper_pass=config.oper_pass,
                promote_command=config.promote_command,
            )
        self.client = client
        self.engine = CommandEngine(
            self.client, self.store, self.pending, match_host=config.match_host
        )
        self.worker = EventWorker(self.engine)
        self.signals = SignalHandler()
        self.connection_task: asyncio.Task[Any] | None = None
        self.running = False

    @property
    def shutdown_initiated(self) -> bool:
        return self.signals.shutdown_initiated

    def stop(self) -> None:
        self.signals.stop()

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        self.signals.setup_signal_handlers()

    async def start(self) -> None:
        """Load enrollments, start the worker and the connection loop.

        Raises:
            ParsingError: If the enrollment file cannot be read.
        """
        count = self.store.load()
        logger.log_event("manager", "enrollments_loaded", channels=count)
        self.client.set_event_handler(self.worker.submit)
        self.worker.start()
        self.running = True
        self.connection_task = asyncio.create_task(self._connection_loop())

    async def _connection_loop(self) -> None:
        while self.running and not self.shutdown_initiated:
            connected = await self.client.connect()
            if connected:
                await self.client.listen()
            if not self.running or self.shutdown_initiated:
                break
            logger.log_event(
                "manager",
                "reconnect_scheduled",
                level=logging.WARNING,
                server=self.config.server,
                delay=RECONNECT_DELAY,
            )
            await asyncio.sleep(RECONNECT_DELAY)

    async def run_main_loop(self) -> None:
        """Poll the shutdown flag until shutdown is requested."""
        while self.running:
            await asyncio.sleep(MANAGER_LOOP_SLEEP_SECONDS)
            if self.shutdown_initiated:
                logger.log_event("manager", "shutdown_requested", level=logging.WARNING)
                break
            if self.connection_task is not None and self.connection_task.done():
                logger.log_event(
                    "manager", "connection_loop_ended", level=logging.ERROR
                )
                break

    async def shutdown(self) -> None:
        """Quit IRC, drain the worker and save the enrollments."""
        self.running = False
        await self.client.quit(QUIT_REASON)
        if self.connection_task is not None:
            self.connection_task.cancel()
            await asyncio.gather(self.connection_task, return_exceptions=True)
            self.connection_task = None
        await self.worker.stop()
        try:
            await self.store.save_async()
        except PersistenceError as e:
            log_error("Saving enrollments on shutdown failed", e)
        logger.log_event("manager", "stopped", channels=len(self.store))


async def run_bot(config: BotConfig) -> None:
    """Run the service until a signal asks it to stop.

    Raises:
        ParsingError: If the enrollment file cannot be read at startup.
    """
    manager = ChanFixManager(config)
    manager.setup_signal_handlers()
    await manager.start()
    try:
        await manager.run_main_loop()
    finally:
        await manager.shutdown()
