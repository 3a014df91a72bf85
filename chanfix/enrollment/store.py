"""Enrollment store: channel → operators captured at enrollment."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ..errors.commands import ChannelUnenrolled
from ..irc.casemap import irc_lower
from .models import EnrolledUser
from .repository import EnrollmentRepository


class EnrollmentStore:
    """In-memory enrollment records with optional file persistence.

    Channel keys are folded with the IRC case mapping so lookups agree with
    the IRC layer. ``get`` distinguishes an unenrolled channel (``None``) from
    one enrolled with no operators (empty tuple).
    """

    def __init__(self, repository: EnrollmentRepository | None = None) -> None:
        self.repository = repository
        self._records: dict[str, tuple[EnrolledUser, ...]] = {}
        self._save_lock = asyncio.Lock()

    def load(self) -> int:
        """Replace the in-memory records with the persisted ones.

        Returns:
            Number of enrolled channels loaded.

        Raises:
            ParsingError: If the enrollment file cannot be read.
        """
        if self.repository is None:
            return 0
        records: dict[str, tuple[EnrolledUser, ...]] = {}
        for channel, users in self.repository.load().items():
            key = irc_lower(channel)
            if key in records:
                logging.warning(f"⚠️ Duplicate enrollment for {channel}; keeping the last one")
            records[key] = tuple(users)
        self._records = records
        logging.info(f"📂 Loaded enrollments channels={len(records)}")
        return len(records)

    def get(self, channel: str) -> tuple[EnrolledUser, ...] | None:
        return self._records.get(irc_lower(channel))

    def require(self, channel: str) -> tuple[EnrolledUser, ...]:
        users = self.get(channel)
        if users is None:
            raise ChannelUnenrolled(channel)
        return users

    def is_enrolled(self, channel: str) -> bool:
        return irc_lower(channel) in self._records

    def replace(
        self, channel: str, users: Iterable[EnrolledUser]
    ) -> tuple[EnrolledUser, ...]:
        """Overwrite the record for ``channel`` with ``users`` in order."""
        record = tuple(users)
        self._records[irc_lower(channel)] = record
        return record

    def channels(self) -> list[str]:
        return list(self._records)

    def snapshot(self) -> dict[str, tuple[EnrolledUser, ...]]:
        return dict(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, channel: object) -> bool:
        return isinstance(channel, str) and self.is_enrolled(channel)

    def save(self) -> bool:
        """Persist all records; True if the file was rewritten."""
        if self.repository is None:
            return False
        return self.repository.save(self.snapshot())

    async def save_async(self) -> bool:
        """Run ``save`` in the default executor, one write at a time."""
        if self.repository is None:
            return False
        snapshot = self.snapshot()
        repository = self.repository
        loop = asyncio.get_running_loop()
        async with self._save_lock:
            return await loop.run_in_executor(None, repository.save, snapshot)
