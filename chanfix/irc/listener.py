"""Read loop for an established IRC connection."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..constants import IRC_READ_CHUNK_SIZE
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .client import AsyncIRCClient


class IRCListener:
    def __init__(self, client: AsyncIRCClient):
        self.client = client

    async def listen(self) -> None:
        """Read and dispatch lines until the connection drops or is stopped."""
        client = self.client
        logger.log_event("irc", "listen_start", level=logging.DEBUG, nick=client.nick)
        while client.running and client.reader is not None:
            try:
                data = await asyncio.wait_for(
                    client.reader.read(IRC_READ_CHUNK_SIZE), timeout=1.0
                )
            except TimeoutError:
                if not await client.heartbeat.tick():
                    break
                continue
            except (ConnectionResetError, OSError) as e:
                logger.log_event(
                    "irc",
                    "read_error",
                    level=logging.ERROR,
                    nick=client.nick,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                break
            if not data:
                logger.log_event(
                    "irc", "connection_lost", level=logging.ERROR, nick=client.nick
                )
                break
            client.message_buffer = await client.dispatcher.process_incoming_data(
                client.message_buffer, data.decode("utf-8", errors="replace")
            )
        if client.reader is not None:
            await client.disconnect()
