"""Line dispatch: keeps membership state current and raises engine events."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..logs.logger import logger
from .casemap import irc_lower
from .events import ChannelSynced, JoinFailed, PrivateCommand, RawLine
from .models import ChannelMember, ChannelState, UserIdentity
from .parser import IRCMessage, build_privmsg, parse_irc_message, parse_prefix

if TYPE_CHECKING:  # pragma: no cover
    from .client import AsyncIRCClient

# WHO flag characters that carry channel-operator rank
OP_PREFIXES = frozenset("~&@")
# Channel modes that always take a parameter; 'l' only when being set
_PARAM_MODES = frozenset("ovhaqbeIk")


class IRCDispatcher:
    def __init__(self, client: AsyncIRCClient):
        self.client = client

    async def process_incoming_data(self, buffer: str, new_data: str) -> str:
        buffer += new_data
        self.client.last_server_activity = time.time()
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            line = line.rstrip("\r")
            if line.strip():
                await self._handle_irc_message(line)
        return buffer

    async def _handle_irc_message(self, raw_message: str) -> None:  # noqa: C901
        self.client.emit(RawLine(raw_message))

        parsed = parse_irc_message(raw_message)
        command = parsed.command
        if not command:
            return
        if command == "PING":
            await self.client.send_raw(f"PONG :{parsed.param(0)}")
            return
        handler = getattr(self, f"_on_{command.lower()}", None)
        if handler is not None:
            await handler(parsed)

    # Registration ----------------------------------------------------------

    async def _on_001(self, parsed: IRCMessage) -> None:
        client = self.client
        client.registered = True
        client.nick = parsed.param(0, client.nick)
        logger.log_event("irc", "registered", nick=client.nick)
        if client.oper_name and client.oper_pass:
            await client.send_raw(f"OPER {client.oper_name} {client.oper_pass}")
        else:
            logger.log_event("irc", "oper_skipped", level=logging.WARNING)

    async def _on_433(self, parsed: IRCMessage) -> None:
        # ERR_NICKNAMEINUSE only matters before registration
        if self.client.registered:
            return
        self.client.nick = f"{self.client.nick}_"
        logger.log_event(
            "irc", "nick_in_use", level=logging.WARNING, nick=self.client.nick
        )
        await self.client.send_raw(f"NICK {self.client.nick}")

    async def _on_381(self, parsed: IRCMessage) -> None:
        self.client.is_oper = True
        logger.log_event("irc", "oper_success", nick=self.client.nick)

    async def _on_464(self, parsed: IRCMessage) -> None:
        logger.log_event(
            "irc",
            "oper_failed",
            level=logging.ERROR,
            nick=self.client.nick,
            reason=parsed.param(-1),
        )

    _on_491 = _on_464

    # Membership tracking -------------------------------------------------

    async def _on_join(self, parsed: IRCMessage) -> None:
        channel = parsed.param(0)
        who = parse_prefix(parsed.prefix)
        if not channel or who is None:
            return
        if self.client.is_self(who.nick):
            self.client.channels[irc_lower(channel)] = ChannelState(name=channel)
            logger.log_event(
                "irc", "joined", nick=self.client.nick, channel=channel
            )
            await self.client.send_raw(f"WHO {channel}")
            return
        state = self.client.get_channel(channel)
        if state is not None:
            state.upsert(ChannelMember(identity=who))

    async def _on_part(self, parsed: IRCMessage) -> None:
        self._drop_member(parsed.param(0), parsed.nick)

    async def _on_kick(self, parsed: IRCMessage) -> None:
        self._drop_member(parsed.param(0), parsed.param(1))

    def _drop_member(self, channel: str, nick: str | None) -> None:
        if not channel or not nick:
            return
        if self.client.is_self(nick):
            self.client.channels.pop(irc_lower(channel), None)
            logger.log_event("irc", "left", nick=nick, channel=channel)
            return
        state = self.client.get_channel(channel)
        if state is not None:
            state.remove(nick)

    async def _on_quit(self, parsed: IRCMessage) -> None:
        nick = parsed.nick
        if not nick:
            return
        for state in self.client.channels.values():
            state.remove(nick)

    async def _on_nick(self, parsed: IRCMessage) -> None:
        old, new = parsed.nick, parsed.param(0)
        if not old or not new:
            return
        if self.client.is_self(old):
            self.client.nick = new
        for state in self.client.channels.values():
            state.rename(old, new)

    async def _on_mode(self, parsed: IRCMessage) -> None:
        state = self.client.get_channel(parsed.param(0))
        if state is None or len(parsed.params) < 2:
            return
        adding = True
        args = list(parsed.params[2:])
        for char in parsed.params[1]:
            if char in "+-":
                adding = char == "+"
                continue
            takes_arg = char in _PARAM_MODES or (char == "l" and adding)
            arg = args.pop(0) if takes_arg and args else None
            if char == "o" and arg:
                member = state.get(arg)
                if member is not None:
                    member.is_op = adding

    async def _on_352(self, parsed: IRCMessage) -> None:
        # RPL_WHOREPLY: <me> <channel> <ident> <host> <server> <nick> <flags> :<hops> <realname>
        if len(parsed.params) < 7:
            return
        channel, ident, host = parsed.params[1:4]
        nick, flags = parsed.params[5], parsed.params[6]
        state = self.client.get_channel(channel)
        if state is None:
            return
        state.upsert(
            ChannelMember(
                identity=UserIdentity(nick=nick, ident=ident, host=host),
                is_op=any(flag in OP_PREFIXES for flag in flags),
                is_network_operator="*" in flags,
            )
        )

    async def _on_315(self, parsed: IRCMessage) -> None:
        # RPL_ENDOFWHO
        state = self.client.get_channel(parsed.param(1))
        if state is None or state.synced:
            return
        state.synced = True
        logger.log_event(
            "irc",
            "channel_synced",
            nick=self.client.nick,
            channel=state.name,
            members=len(state.members),
        )
        self.client.emit(ChannelSynced(state.name))

    async def _on_403(self, parsed: IRCMessage) -> None:
        # ERR_NOSUCHCHANNEL and the other JOIN refusals: <me> <channel> :<reason>
        channel = parsed.param(1)
        if not channel:
            return
        reason = parsed.param(2, "Cannot join channel")
        logger.log_event(
            "irc",
            "join_failed",
            level=logging.WARNING,
            nick=self.client.nick,
            channel=channel,
            numeric=parsed.command,
            reason=reason,
        )
        self.client.emit(JoinFailed(channel=channel, reason=reason))

    _on_405 = _on_403  # ERR_TOOMANYCHANNELS
    _on_471 = _on_403  # ERR_CHANNELISFULL
    _on_473 = _on_403  # ERR_INVITEONLYCHAN
    _on_474 = _on_403  # ERR_BANNEDFROMCHAN
    _on_475 = _on_403  # ERR_BADCHANNELKEY
    _on_476 = _on_403  # ERR_BADCHANMASK
    _on_477 = _on_403  # ERR_NEEDREGGEDNICK

    # WHOIS ---------------------------------------------------------------

    async def _on_311(self, parsed: IRCMessage) -> None:
        # RPL_WHOISUSER: <me> <nick> <ident> <host> * :<realname>
        if len(parsed.params) < 4:
            return
        nick, ident, host = parsed.params[1:4]
        request = self.client.whois_requests.get(irc_lower(nick))
        if request is not None:
            request.identity = UserIdentity(nick=nick, ident=ident, host=host)

    async def _on_318(self, parsed: IRCMessage) -> None:
        # RPL_ENDOFWHOIS
        self._resolve_whois(parsed.param(1))

    async def _on_401(self, parsed: IRCMessage) -> None:
        # ERR_NOSUCHNICK
        self._resolve_whois(parsed.param(1))

    def _resolve_whois(self, nick: str) -> None:
        request = self.client.whois_requests.pop(irc_lower(nick), None)
        if request is None:
            return
        for fut in request.futures:
            if not fut.done():
                fut.set_result(request.identity)

    # Commands ------------------------------------------------------------

    async def _on_privmsg(self, parsed: IRCMessage) -> None:
        priv = build_privmsg(parsed)
        if priv is None or not self.client.is_self(priv.target):
            return
        if priv.message.startswith("\x01"):
            # CTCP is not a command
            return
        logger.log_event(
            "irc",
            "private_message",
            level=logging.DEBUG,
            nick=priv.sender,
            text=priv.message,
        )
        self.client.emit(PrivateCommand(sender=priv.sender, text=priv.message))
