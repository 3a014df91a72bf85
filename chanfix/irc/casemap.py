"""RFC1459 case mapping for nicknames and channel names."""

from __future__ import annotations

_RFC1459_TABLE = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ[]\\~",
    "abcdefghijklmnopqrstuvwxyz{}|^",
)


def irc_lower(name: str) -> str:
    """Fold ``name`` the way RFC1459 servers compare nicks and channels.

    ``[]\\~`` are the upper-case forms of ``{}|^``.
    """
    return name.translate(_RFC1459_TABLE)


def irc_equals(a: str, b: str) -> bool:
    return irc_lower(a) == irc_lower(b)
