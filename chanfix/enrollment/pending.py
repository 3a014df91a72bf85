"""Enrollments waiting for their channel join to synchronize."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from ..errors.commands import EnrollmentAlreadyPending, NoPendingEnrollment
from ..irc.casemap import irc_lower


@dataclass(frozen=True, slots=True)
class PendingEnrollment:
    channel: str
    requester: str
    created_at: float


class PendingEnrollments:
    """At most one pending enrollment per channel.

    A second request for a channel that is already pending is rejected; the
    first requester keeps the slot until the join syncs or the entry expires.
    """

    def __init__(
        self, timeout: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.timeout = timeout
        self._clock = clock
        self._entries: dict[str, PendingEnrollment] = {}

    def add(self, channel: str, requester: str) -> PendingEnrollment:
        key = irc_lower(channel)
        existing = self._entries.get(key)
        if existing is not None:
            raise EnrollmentAlreadyPending(existing.channel, existing.requester)
        entry = PendingEnrollment(
            channel=channel, requester=requester, created_at=self._clock()
        )
        self._entries[key] = entry
        return entry

    def get(self, channel: str) -> PendingEnrollment | None:
        return self._entries.get(irc_lower(channel))

    def pop(self, channel: str) -> PendingEnrollment:
        """Remove and return the entry for ``channel``.

        Raises:
            NoPendingEnrollment: If nothing is pending for the channel.
        """
        entry = self._entries.pop(irc_lower(channel), None)
        if entry is None:
            raise NoPendingEnrollment(channel)
        return entry

    def pop_expired(self) -> list[PendingEnrollment]:
        """Remove and return entries older than the timeout, oldest first."""
        cutoff = self._clock() - self.timeout
        expired = [e for e in self._entries.values() if e.created_at <= cutoff]
        for entry in expired:
            self._entries.pop(irc_lower(entry.channel), None)
        return sorted(expired, key=lambda e: e.created_at)

    def __contains__(self, channel: object) -> bool:
        return isinstance(channel, str) and irc_lower(channel) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
