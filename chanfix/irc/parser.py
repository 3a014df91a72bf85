"""IRC message parsing utilities."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import UserIdentity


@dataclass
class IRCMessage:
    raw: str
    prefix: str | None
    command: str | None
    params: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def nick(self) -> str | None:
        """Nickname part of the prefix, if the prefix is a user."""
        if not self.prefix:
            return None
        return self.prefix.split("!", 1)[0]

    def param(self, index: int, default: str = "") -> str:
        if -len(self.params) <= index < len(self.params):
            return self.params[index]
        return default


def parse_irc_message(raw_line: str) -> IRCMessage:
    tags: dict[str, str] = {}
    prefix: str | None = None
    command: str | None = None
    trailing: str | None = None

    original = raw_line

    if raw_line.startswith("@"):
        if " " not in raw_line:
            return IRCMessage(raw=original, prefix=None, command=None)
        tags_part, raw_line = raw_line.split(" ", 1)
        tags = _parse_tags(tags_part[1:])

    if raw_line.startswith(":"):
        # Malformed lines may omit the space after the prefix
        remainder = raw_line[1:]
        if " " in remainder:
            prefix, raw_line = remainder.split(" ", 1)
        else:
            prefix = remainder
            raw_line = ""

    if raw_line.startswith(":"):
        raw_line, trailing = "", raw_line[1:]
    elif " :" in raw_line:
        raw_line, trailing = raw_line.split(" :", 1)

    parts = raw_line.split()
    params: list[str] = []
    if parts:
        command = parts[0].upper()
        params = parts[1:]
    if trailing is not None:
        params.append(trailing)

    return IRCMessage(
        raw=original, prefix=prefix, command=command, params=params, tags=tags
    )


def _parse_tags(raw_tags: str) -> dict[str, str]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if "=" in tag:
            k, v = tag.split("=", 1)
        else:
            k, v = tag, ""
        tags[k] = v
    return tags


def parse_prefix(prefix: str | None) -> UserIdentity | None:
    """Split a ``nick!ident@host`` prefix; server prefixes yield None."""
    if not prefix or "!" not in prefix or "@" not in prefix:
        return None
    nick, rest = prefix.split("!", 1)
    ident, host = rest.split("@", 1)
    if not nick:
        return None
    return UserIdentity(nick=nick, ident=ident, host=host)


@dataclass
class PrivMsg:
    sender: str
    target: str
    message: str
    tags: dict[str, str]


def build_privmsg(parsed: IRCMessage) -> PrivMsg | None:
    if parsed.command != "PRIVMSG":
        return None
    if len(parsed.params) < 2:
        return None
    target, message = parsed.params[0], parsed.params[1]
    sender = parsed.nick or "?"
    return PrivMsg(sender=sender, target=target, message=message, tags=parsed.tags)
