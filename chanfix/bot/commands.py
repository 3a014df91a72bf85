"""Parsing of private command lines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors.commands import InvalidChannel, MissingArgument, UnrecognizedCommand


class Command(Enum):
    ENROLL = "enroll"
    FIX = "fix"
    STATUS = "status"
    HELP = "help"


# Commands whose single argument is a channel name
CHANNEL_COMMANDS = frozenset({Command.ENROLL, Command.FIX, Command.STATUS})

CHANNEL_PREFIXES = "#&+!"
# Not allowed inside an RFC1459 channel name
FORBIDDEN_CHANNEL_CHARS = frozenset(", \x07")

HELP_LINES = (
    "ChanFix allows channel operators to easily restore their rights without IRC operator intervention.",
    "Recognized commands:",
    "enroll #channel: Enrolls a channel for use in ChanFix.",
    "fix #channel: Restores op status to everyone enrolled.",
    "status #channel: Lists the operators of a channel, or describes the state if there are none.",
)


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    command: Command
    argument: str = ""

    def require_channel(self) -> str:
        """Return the channel argument.

        Raises:
            MissingArgument: If no argument was given.
            InvalidChannel: If the argument is not a single channel name.
        """
        channel = self.argument.strip()
        if not channel:
            raise MissingArgument(command=self.command.value)
        if not is_channel_name(channel):
            raise InvalidChannel(command=self.command.value, channel=channel)
        return channel


def is_channel_name(name: str) -> bool:
    return (
        len(name) > 1
        and name[0] in CHANNEL_PREFIXES
        and not any(ch in FORBIDDEN_CHANNEL_CHARS for ch in name)
    )


def parse_command(text: str) -> ParsedCommand:
    """Split a private message into a command and its argument.

    The first whitespace-delimited token selects the command
    (case-insensitive); the second, if any, is the argument. A missing
    argument is an empty string.

    Raises:
        UnrecognizedCommand: If the first token is not a known command.
    """
    tokens = text.split()
    name = tokens[0].lower() if tokens else ""
    argument = tokens[1] if len(tokens) > 1 else ""
    try:
        command = Command(name)
    except ValueError:
        raise UnrecognizedCommand(command=name) from None
    return ParsedCommand(command=command, argument=argument)
