"""Protocol definition for the IRC capabilities the command engine uses.

The engine depends only on this interface so it can run against the asyncio
client in production and against an in-memory fake in tests.
"""

from __future__ import annotations

from typing import Protocol

from .models import UserIdentity


class IRCLayer(Protocol):
    """Capabilities the command engine consumes from the IRC connection."""

    async def join(self, channel: str) -> None:
        """Request to join ``channel``; sync is reported later as an event."""
        ...

    async def leave(self, channel: str, reason: str) -> None:
        """Part ``channel`` with ``reason``."""
        ...

    async def notice(self, target: str, text: str) -> None:
        """Send a private notice."""
        ...

    async def promote(self, channel: str, nick: str) -> None:
        """Grant channel operator status. Fire-and-forget."""
        ...

    async def get_live_user(self, nick: str) -> UserIdentity | None:
        """Look up the current session for ``nick``; None if not online."""
        ...

    def get_channel_operators(self, channel: str) -> list[UserIdentity]:
        """Current operators of a joined channel, in listing order."""
        ...

    def is_operator(self, channel: str, nick: str) -> bool:
        """Whether ``nick`` holds channel operator status in ``channel``."""
        ...

    def is_network_operator(self, channel: str, nick: str) -> bool:
        """Whether ``nick``, as a member of ``channel``, is an IRC operator."""
        ...
