"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .casemap import irc_lower


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    REGISTERING = auto()
    READY = auto()


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """A user's nick!ident@host as seen on the network."""

    nick: str
    ident: str
    host: str

    @property
    def hostmask(self) -> str:
        return f"{self.nick}!{self.ident}@{self.host}"


@dataclass(slots=True)
class ChannelMember:
    identity: UserIdentity
    is_op: bool = False
    is_network_operator: bool = False


@dataclass(slots=True)
class ChannelState:
    """Membership of one joined channel, keyed by folded nick.

    ``synced`` flips once the WHO listing for the channel has ended.
    """

    name: str
    members: dict[str, ChannelMember] = field(default_factory=dict)
    synced: bool = False

    def get(self, nick: str) -> ChannelMember | None:
        return self.members.get(irc_lower(nick))

    def upsert(self, member: ChannelMember) -> None:
        self.members[irc_lower(member.identity.nick)] = member

    def remove(self, nick: str) -> None:
        self.members.pop(irc_lower(nick), None)

    def rename(self, old: str, new: str) -> None:
        member = self.members.pop(irc_lower(old), None)
        if member is None:
            return
        ident = member.identity
        member.identity = UserIdentity(new, ident.ident, ident.host)
        self.members[irc_lower(new)] = member

    def operators(self) -> list[UserIdentity]:
        return [m.identity for m in self.members.values() if m.is_op]
