"""Command and enrollment error conditions.

``CommandError`` subclasses end a command and are reported to the requester
as a private notice (``notice`` attribute). The remaining classes describe
internal conditions that are logged or skipped, never shown to users.
"""

from __future__ import annotations

from .internal import InternalError


class CommandError(InternalError):
    """Base class for errors reported back to the command sender."""

    notice: str = "Command failed."

    def __init__(self, notice: str | None = None, **data: object) -> None:
        text = notice or self.notice
        super().__init__(text, data=data)
        self.notice = text


class MissingArgument(CommandError):
    """The command needs a channel name and none was given."""

    notice = "No channel given."


class InvalidChannel(CommandError):
    """The argument is not a single channel name."""

    notice = "Invalid channel name."


class UnrecognizedCommand(CommandError):
    """The first token is not a known command."""

    notice = "Unrecognized command. (tried help?)"


class EnrollmentAlreadyPending(CommandError):
    """An enrollment for the channel is still waiting for its join to sync."""

    def __init__(self, channel: str, requester: str) -> None:
        super().__init__(
            f"An enrollment of {channel} requested by {requester} is already in progress.",
            channel=channel,
            requester=requester,
        )


class NoPendingEnrollment(InternalError):
    """A channel synced without an enrollment having been requested for it."""

    def __init__(self, channel: str) -> None:
        super().__init__(
            f"No pending enrollment for {channel}", data={"channel": channel}
        )
        self.channel = channel


class ChannelUnenrolled(InternalError):
    """The channel has no enrollment record."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"{channel} is not enrolled", data={"channel": channel})
        self.channel = channel


class IdentityMismatch(InternalError):
    """A live user does not match the identity captured at enrollment."""

    def __init__(self, nick: str, expected: str, actual: str) -> None:
        super().__init__(
            f"{nick} does not match enrolled identity",
            data={"expected": expected, "actual": actual},
        )
        self.nick = nick


__all__ = [
    "ChannelUnenrolled",
    "CommandError",
    "EnrollmentAlreadyPending",
    "IdentityMismatch",
    "InvalidChannel",
    "MissingArgument",
    "NoPendingEnrollment",
    "UnrecognizedCommand",
]
