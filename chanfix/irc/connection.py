"""Connection establishment and registration for the IRC client."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..constants import (
    CONNECT_MAX_ATTEMPTS,
    IRC_CONNECT_TIMEOUT,
    IRC_READ_CHUNK_SIZE,
    IRC_REGISTRATION_TIMEOUT,
)
from ..errors.handling import handle_retryable_error
from ..errors.internal import InternalError, NetworkError
from ..logs.logger import logger
from .models import ConnectionState

if TYPE_CHECKING:  # pragma: no cover
    from .client import AsyncIRCClient


class IRCConnectionController:
    """Opens the socket, registers, and retries with backoff via tenacity."""

    def __init__(self, host: AsyncIRCClient) -> None:
        self.host = host

    async def connect_with_retry(self, max_attempts: int = CONNECT_MAX_ATTEMPTS) -> bool:
        async def attempt(attempt_number: int) -> tuple[bool | None, bool]:
            logger.log_event(
                "irc",
                "connect_attempt",
                nick=self.host.nick,
                server=self.host.server,
                port=self.host.port,
                attempt=attempt_number,
            )
            await self.connect_once()
            return True, False

        try:
            return await handle_retryable_error(
                attempt, f"IRC connect to {self.host.server}", max_attempts
            )
        except InternalError as e:
            logger.log_event(
                "irc",
                "connect_gave_up",
                level=logging.ERROR,
                server=self.host.server,
                error=str(e),
            )
            return False

    async def connect_once(self) -> None:
        host = self.host
        host.nick = host.wanted_nick
        host._set_state(ConnectionState.CONNECTING)  # pylint: disable=protected-access
        try:
            host.reader, host.writer = await asyncio.wait_for(
                asyncio.open_connection(
                    host.server, host.port, ssl=True if host.tls else None
                ),
                timeout=IRC_CONNECT_TIMEOUT,
            )
        except TimeoutError as e:
            await host.disconnect()
            raise NetworkError(
                f"Timed out connecting to {host.server}:{host.port}",
                data={"timeout": IRC_CONNECT_TIMEOUT},
            ) from e
        except OSError as e:
            await host.disconnect()
            raise NetworkError(
                f"Could not connect to {host.server}:{host.port}: {e}"
            ) from e

        host.touch()
        logger.log_event(
            "irc", "connection_established", nick=host.nick, server=host.server
        )
        host._set_state(ConnectionState.REGISTERING)  # pylint: disable=protected-access
        await host.send_raw(f"NICK {host.nick}")
        await host.send_raw(f"USER {host.nick} 0 * :{host.realname}")
        if not await self._wait_for_registration():
            await host.disconnect()
            raise NetworkError(f"Registration with {host.server} failed")
        host.running = True
        host._set_state(ConnectionState.READY)  # pylint: disable=protected-access
        logger.log_event("irc", "connect_success", nick=host.nick, server=host.server)

    async def _wait_for_registration(self) -> bool:
        start_time = time.time()
        while time.time() - start_time < IRC_REGISTRATION_TIMEOUT:
            if self.host.registered:
                return True
            reader = self.host.reader
            if reader is None:
                return False
            try:
                data = await asyncio.wait_for(
                    reader.read(IRC_READ_CHUNK_SIZE), timeout=0.5
                )
            except TimeoutError:
                continue
            except OSError as e:
                logger.log_event(
                    "irc",
                    "registration_error",
                    level=logging.ERROR,
                    nick=self.host.nick,
                    error=str(e),
                )
                return False
            if not data:
                logger.log_event(
                    "irc",
                    "connection_lost",
                    level=logging.ERROR,
                    nick=self.host.nick,
                )
                return False
            self.host.message_buffer = await self.host.dispatcher.process_incoming_data(
                self.host.message_buffer, data.decode("utf-8", errors="replace")
            )
        logger.log_event(
            "irc",
            "registration_timeout",
            level=logging.ERROR,
            nick=self.host.nick,
            timeout=IRC_REGISTRATION_TIMEOUT,
        )
        return self.host.registered
