"""Events the IRC layer hands to the command engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PrivateCommand:
    """A PRIVMSG addressed to the bot itself."""

    sender: str
    text: str


@dataclass(frozen=True, slots=True)
class ChannelSynced:
    """Membership of a channel the bot joined is fully known."""

    channel: str


@dataclass(frozen=True, slots=True)
class RawLine:
    text: str


@dataclass(frozen=True, slots=True)
class JoinFailed:
    """The server refused to let the bot join a channel."""

    channel: str
    reason: str


IRCEvent = PrivateCommand | ChannelSynced | JoinFailed | RawLine
