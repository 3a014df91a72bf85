"""Command engine: enroll, fix, status and help, plus enrollment finalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors.commands import (
    ChannelUnenrolled,
    CommandError,
    IdentityMismatch,
    NoPendingEnrollment,
)
from ..errors.handling import log_error
from ..errors.internal import PersistenceError
from ..enrollment.models import EnrolledUser
from ..enrollment.pending import PendingEnrollments
from ..enrollment.store import EnrollmentStore
from ..irc.events import ChannelSynced, IRCEvent, JoinFailed, PrivateCommand, RawLine
from ..irc.models import UserIdentity
from ..irc.protocols import IRCLayer
from ..logs.logger import logger
from .commands import HELP_LINES, Command, ParsedCommand, parse_command

ENROLLED_REASON = "Channel enrolled into ChanFix."
NOT_OP_REASON = "Channel couldn't be enrolled into ChanFix. ({requester} wasn't op)"
UNEXPECTED_SYNC_REASON = "Channel was not being enrolled."
TIMED_OUT_REASON = "Enrollment timed out."
UNENROLLED_NOTICE = "The channel is unenrolled."
NO_OPS_NOTICE = "No ops were enrolled for this channel."


@dataclass(frozen=True, slots=True)
class PendingSweep:
    """Periodic tick asking the engine to expire stale enrollments."""


EngineEvent = IRCEvent | PendingSweep


class CommandEngine:
    """Interprets private commands and finalizes enrollments.

    Every method here must run on the single event worker; the store and the
    pending map are not locked.

    Attributes:
        irc: IRC capabilities used to join, part, notice, query and promote.
        store: Enrollment records.
        pending: Enrollments waiting for their join to sync.
        match_host: Also require the live host to equal the enrolled host
            when fixing. Off by default, which makes the check ident-only.
    """

    def __init__(
        self,
        irc: IRCLayer,
        store: EnrollmentStore,
        pending: PendingEnrollments,
        *,
        match_host: bool = False,
    ) -> None:
        self.irc = irc
        self.store = store
        self.pending = pending
        self.match_host = match_host

    async def handle_event(self, event: EngineEvent) -> None:
        if isinstance(event, PrivateCommand):
            await self.handle_private_command(event.sender, event.text)
        elif isinstance(event, ChannelSynced):
            await self.handle_channel_synced(event.channel)
        elif isinstance(event, JoinFailed):
            await self.handle_join_failed(event.channel, event.reason)
        elif isinstance(event, RawLine):
            self.handle_raw_line(event.text)
        elif isinstance(event, PendingSweep):
            await self.expire_pending()

    # Private commands ------------------------------------------------------

    async def handle_private_command(self, sender: str, text: str) -> None:
        try:
            parsed = parse_command(text)
            logger.log_event(
                "command",
                "received",
                nick=sender,
                command=parsed.command.value,
                argument=parsed.argument,
            )
            if parsed.command is Command.ENROLL:
                await self._enroll(sender, parsed)
            elif parsed.command is Command.FIX:
                await self._fix(sender, parsed)
            elif parsed.command is Command.STATUS:
                await self._status(sender, parsed)
            else:
                await self._help(sender)
        except CommandError as e:
            logger.log_event(
                "command",
                "rejected",
                nick=sender,
                error_type=type(e).__name__,
                reason=e.notice,
            )
            await self.irc.notice(sender, e.notice)

    async def _enroll(self, sender: str, parsed: ParsedCommand) -> None:
        channel = parsed.require_channel()
        self.pending.add(channel, sender)
        logger.log_event("enroll", "requested", nick=sender, channel=channel)
        try:
            await self.irc.join(channel)
        except OSError:
            # Without a join there will never be a sync to clear the entry
            self.pending.pop(channel)
            raise

    async def _fix(self, sender: str, parsed: ParsedCommand) -> int:
        channel = parsed.require_channel()
        try:
            users = self.store.require(channel)
        except ChannelUnenrolled:
            logger.log_event(
                "fix", "unenrolled", level=logging.DEBUG, nick=sender, channel=channel
            )
            return 0

        logger.log_event(
            "fix", "start", nick=sender, channel=channel, enrolled=len(users)
        )
        promoted = 0
        for user in users:
            live = await self.irc.get_live_user(user.nick)
            if live is None:
                logger.log_event(
                    "fix", "user_absent", level=logging.DEBUG, nick=user.nick, channel=channel
                )
                continue
            try:
                self.verify_identity(user, live)
            except IdentityMismatch as e:
                logger.log_event(
                    "fix",
                    "identity_mismatch",
                    level=logging.DEBUG,
                    nick=user.nick,
                    channel=channel,
                    **e.data,
                )
                continue
            await self.irc.promote(channel, live.nick)
            promoted += 1
        logger.log_event(
            "fix", "done", nick=sender, channel=channel, promoted=promoted
        )
        return promoted

    def verify_identity(self, enrolled: EnrolledUser, live: UserIdentity) -> None:
        """Raise ``IdentityMismatch`` unless ``live`` matches ``enrolled``.

        The ident must match exactly. The host is compared only when
        ``match_host`` is set.
        """
        expected = f"{enrolled.ident}@{enrolled.host}"
        actual = f"{live.ident}@{live.host}"
        if live.ident != enrolled.ident:
            raise IdentityMismatch(enrolled.nick, expected, actual)
        if self.match_host and live.host.lower() != enrolled.host.lower():
            raise IdentityMismatch(enrolled.nick, expected, actual)

    async def _status(self, sender: str, parsed: ParsedCommand) -> None:
        channel = parsed.require_channel()
        users = self.store.get(channel)
        if users is None:
            await self.irc.notice(sender, UNENROLLED_NOTICE)
            return
        if not users:
            await self.irc.notice(sender, NO_OPS_NOTICE)
            return
        for user in users:
            await self.irc.notice(sender, f"{channel} op: {user.hostmask}")

    async def _help(self, sender: str) -> None:
        for line in HELP_LINES:
            await self.irc.notice(sender, line)

    # Join synchronization --------------------------------------------------

    async def handle_channel_synced(self, channel: str) -> None:
        try:
            entry = self.pending.pop(channel)
        except NoPendingEnrollment:
            logger.log_event(
                "enroll", "no_pending", level=logging.WARNING, channel=channel
            )
            await self.irc.leave(channel, UNEXPECTED_SYNC_REASON)
            return

        requester = entry.requester
        if self.irc.is_operator(channel, requester) or self.irc.is_network_operator(
            channel, requester
        ):
            users = self.store.replace(
                channel,
                (
                    EnrolledUser.from_identity(op)
                    for op in self.irc.get_channel_operators(channel)
                ),
            )
            logger.log_event(
                "enroll", "success", nick=requester, channel=channel, ops=len(users)
            )
            await self._persist()
            await self.irc.leave(channel, ENROLLED_REASON)
            await self.irc.notice(
                requester, f"Enrolled {entry.channel} with {len(users)} op(s)."
            )
        else:
            logger.log_event(
                "enroll", "requester_not_op", nick=requester, channel=channel
            )
            await self.irc.leave(channel, NOT_OP_REASON.format(requester=requester))
            await self.irc.notice(
                requester,
                f"Could not enroll {entry.channel}: you are not an operator there.",
            )

    async def handle_join_failed(self, channel: str, reason: str) -> None:
        """Tell the requester why the join for their enrollment was refused."""
        try:
            entry = self.pending.pop(channel)
        except NoPendingEnrollment:
            # Refusal for a join we did not make for an enrollment
            return
        logger.log_event(
            "enroll",
            "join_failed",
            level=logging.WARNING,
            nick=entry.requester,
            channel=channel,
            reason=reason,
        )
        await self.irc.notice(
            entry.requester, f"Could not enroll {entry.channel}: {reason}"
        )

    async def _persist(self) -> None:
        try:
            await self.store.save_async()
        except PersistenceError as e:
            # The record stays in memory and is written again on shutdown
            log_error("Saving enrollments failed", e)

    # Maintenance -----------------------------------------------------------

    async def expire_pending(self) -> int:
        expired = self.pending.pop_expired()
        for entry in expired:
            logger.log_event(
                "enroll",
                "timed_out",
                level=logging.WARNING,
                nick=entry.requester,
                channel=entry.channel,
                timeout=self.pending.timeout,
            )
            await self.irc.leave(entry.channel, TIMED_OUT_REASON)
            await self.irc.notice(
                entry.requester, f"Enrollment of {entry.channel} timed out."
            )
        return len(expired)

    def handle_raw_line(self, text: str) -> None:
        logger.log_event("irc", "raw", level=logging.DEBUG, raw=text)
