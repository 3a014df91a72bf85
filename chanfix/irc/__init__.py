"""IRC subsystem package.

Contains connection, parsing, dispatch, heartbeat and listener modules for the
asyncio IRC client, plus the ``IRCLayer`` protocol the command engine codes
against.
"""

from .casemap import irc_equals, irc_lower  # noqa: F401
from .client import AsyncIRCClient  # noqa: F401
from .events import ChannelSynced, IRCEvent, JoinFailed, PrivateCommand, RawLine  # noqa: F401
from .models import ChannelMember, ChannelState, ConnectionState, UserIdentity  # noqa: F401
from .parser import IRCMessage, PrivMsg, build_privmsg, parse_irc_message, parse_prefix  # noqa: F401
from .protocols import IRCLayer  # noqa: F401

__all__ = [
    "AsyncIRCClient",
    "ChannelMember",
    "ChannelState",
    "ChannelSynced",
    "ConnectionState",
    "IRCEvent",
    "IRCLayer",
    "IRCMessage",
    "JoinFailed",
    "PrivMsg",
    "PrivateCommand",
    "RawLine",
    "UserIdentity",
    "build_privmsg",
    "irc_equals",
    "irc_lower",
    "parse_irc_message",
    "parse_prefix",
]
