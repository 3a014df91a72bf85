"""Async IRC client implementing the capabilities the command engine needs."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from ..constants import WHOIS_TIMEOUT
from ..logs.logger import logger
from .casemap import irc_equals, irc_lower
from .connection import IRCConnectionController
from .dispatcher import IRCDispatcher
from .events import IRCEvent
from .heartbeat import IRCHeartbeat
from .listener import IRCListener
from .models import ChannelState, ConnectionState, UserIdentity


@dataclass
class WhoisRequest:
    futures: list[asyncio.Future[UserIdentity | None]] = field(default_factory=list)
    identity: UserIdentity | None = None


class AsyncIRCClient:  # pylint: disable=too-many-instance-attributes
    def __init__(
        self,
        server: str,
        port: int = 6667,
        nick: str = "ChanFix",
        realname: str = "Channel op repair services",
        *,
        tls: bool = False,
        oper_name: str | None = None,
        oper_pass: str | None = None,
        promote_command: str = "SAMODE",
    ):
        self.server = server
        self.port = port
        self.tls = tls
        self.nick = nick
        self.wanted_nick = nick
        self.realname = realname
        self.oper_name = oper_name
        self.oper_pass = oper_pass
        self.promote_command = promote_command
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.running = False
        self.registered = False
        self.is_oper = False
        self.state = ConnectionState.DISCONNECTED
        self.channels: dict[str, ChannelState] = {}
        self.whois_requests: dict[str, WhoisRequest] = {}
        self.last_server_activity = 0.0
        self.last_ping_sent = 0.0
        self.message_buffer = ""
        self.event_handler: Callable[[IRCEvent], None] | None = None
        self.connection_controller = IRCConnectionController(self)
        self.dispatcher = IRCDispatcher(self)
        self.heartbeat = IRCHeartbeat(self)
        self.listener = IRCListener(self)

    def _set_state(self, new_state: ConnectionState):
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                nick=self.nick,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    def set_event_handler(self, handler: Callable[[IRCEvent], None]) -> None:
        self.event_handler = handler

    def emit(self, event: IRCEvent) -> None:
        if self.event_handler is None:
            logger.log_event(
                "irc",
                "no_event_handler",
                level=logging.WARNING,
                nick=self.nick,
                event=type(event).__name__,
            )
            return
        self.event_handler(event)

    def is_self(self, nick: str | None) -> bool:
        return bool(nick) and irc_equals(nick, self.nick)  # type: ignore[arg-type]

    # Connection lifecycle -------------------------------------------------

    async def connect(self) -> bool:
        return await self.connection_controller.connect_with_retry()

    async def listen(self) -> None:
        await self.listener.listen()

    async def _send_line(self, message: str) -> None:
        if self.writer:
            line = f"{message}\r\n"
            self.writer.write(line.encode("utf-8"))
            await self.writer.drain()

    async def send_raw(self, message: str) -> None:
        # CR/LF inside a parameter would smuggle an extra command
        await self._send_line(message.replace("\r", " ").replace("\n", " "))

    async def quit(self, reason: str) -> None:
        if self.writer:
            try:
                await self.send_raw(f"QUIT :{reason}")
            except OSError as e:
                logger.log_event(
                    "irc", "quit_failed", level=logging.WARNING, error=str(e)
                )
        await self.disconnect()

    async def disconnect(self) -> None:
        self.running = False
        self.registered = False
        self.is_oper = False
        if self.writer:
            try:
                self.writer.close()
                await self.writer.wait_closed()
            except OSError as e:
                logger.log_event(
                    "irc",
                    "close_error",
                    level=logging.DEBUG,
                    nick=self.nick,
                    error=str(e),
                )
            finally:
                self.writer = None
        self.reader = None
        self.channels.clear()
        self._fail_whois_requests()
        self.message_buffer = ""
        self._set_state(ConnectionState.DISCONNECTED)
        logger.log_event("irc", "disconnected", level=logging.WARNING, nick=self.nick)

    def _fail_whois_requests(self) -> None:
        for request in self.whois_requests.values():
            for fut in request.futures:
                if not fut.done():
                    fut.set_result(None)
        self.whois_requests.clear()

    # Capabilities consumed by the command engine --------------------------

    async def join(self, channel: str) -> None:
        logger.log_event("irc", "join_start", nick=self.nick, channel=channel)
        await self.send_raw(f"JOIN {channel}")

    async def leave(self, channel: str, reason: str) -> None:
        logger.log_event(
            "irc", "part", nick=self.nick, channel=channel, reason=reason
        )
        await self.send_raw(f"PART {channel} :{reason}")

    async def notice(self, target: str, text: str) -> None:
        await self.send_raw(f"NOTICE {target} :{text}")

    async def promote(self, channel: str, nick: str) -> None:
        logger.log_event(
            "irc", "promote", nick=nick, channel=channel, command=self.promote_command
        )
        await self.send_raw(f"{self.promote_command} {channel} +o {nick}")

    async def get_live_user(self, nick: str) -> UserIdentity | None:
        key = irc_lower(nick)
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[UserIdentity | None] = loop.create_future()
        request = self.whois_requests.get(key)
        first = request is None
        if request is None:
            request = self.whois_requests[key] = WhoisRequest()
        request.futures.append(fut)
        if first:
            await self.send_raw(f"WHOIS {nick}")
        try:
            return await asyncio.wait_for(fut, timeout=WHOIS_TIMEOUT)
        except TimeoutError:
            logger.log_event(
                "irc", "whois_timeout", level=logging.WARNING, nick=nick
            )
            current = self.whois_requests.get(key)
            if current is request:
                self.whois_requests.pop(key, None)
            return None

    def get_channel(self, channel: str) -> ChannelState | None:
        return self.channels.get(irc_lower(channel))

    def get_channel_operators(self, channel: str) -> list[UserIdentity]:
        state = self.get_channel(channel)
        return state.operators() if state else []

    def is_operator(self, channel: str, nick: str) -> bool:
        state = self.get_channel(channel)
        member = state.get(nick) if state else None
        return bool(member and member.is_op)

    def is_network_operator(self, channel: str, nick: str) -> bool:
        state = self.get_channel(channel)
        member = state.get(nick) if state else None
        return bool(member and member.is_network_operator)

    # Health ----------------------------------------------------------------

    def touch(self) -> None:
        self.last_server_activity = time.time()

    def is_healthy(self) -> bool:
        return self.registered and not self.heartbeat.is_connection_stale()
