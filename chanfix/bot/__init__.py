"""Command handling, event serialization and process lifecycle."""

from .commands import Command, ParsedCommand, parse_command
from .engine import CommandEngine, PendingSweep
from .manager import ChanFixManager, run_bot
from .signal_handler import SignalHandler
from .worker import EventWorker

__all__ = [
    "ChanFixManager",
    "Command",
    "CommandEngine",
    "EventWorker",
    "ParsedCommand",
    "PendingSweep",
    "SignalHandler",
    "parse_command",
    "run_bot",
]
