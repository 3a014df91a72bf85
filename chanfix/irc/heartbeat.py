"""Heartbeat & periodic connection health checks."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..constants import HEARTBEAT_INTERVAL, SERVER_ACTIVITY_TIMEOUT
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .client import AsyncIRCClient


class IRCHeartbeat:
    def __init__(self, client: AsyncIRCClient):
        self.client = client
        self.server_activity_timeout = SERVER_ACTIVITY_TIMEOUT
        self.heartbeat_interval = HEARTBEAT_INTERVAL

    def needs_ping(self) -> bool:
        """Idle long enough that the server should be probed."""
        now = time.time()
        idle = now - self.client.last_server_activity
        since_ping = now - self.client.last_ping_sent
        return idle > self.heartbeat_interval and since_ping > self.heartbeat_interval

    def is_connection_stale(self) -> bool:
        time_since_activity = time.time() - self.client.last_server_activity
        if time_since_activity > self.server_activity_timeout:
            logger.log_event(
                "irc",
                "no_server_activity",
                level=logging.WARNING,
                nick=self.client.nick,
                timeout=self.server_activity_timeout,
            )
            return True
        return False

    async def tick(self) -> bool:
        """Run one idle check; returns False once the link is considered dead."""
        if self.is_connection_stale():
            return False
        if self.needs_ping():
            self.client.last_ping_sent = time.time()
            await self.client.send_raw(f"PING :{self.client.server}")
        return True
