"""Error hierarchy and error handling helpers."""

from .commands import (
    ChannelUnenrolled,
    CommandError,
    EnrollmentAlreadyPending,
    IdentityMismatch,
    InvalidChannel,
    MissingArgument,
    NoPendingEnrollment,
    UnrecognizedCommand,
)
from .internal import InternalError, NetworkError, ParsingError, PersistenceError

__all__ = [
    "ChannelUnenrolled",
    "CommandError",
    "EnrollmentAlreadyPending",
    "IdentityMismatch",
    "InternalError",
    "InvalidChannel",
    "MissingArgument",
    "NetworkError",
    "NoPendingEnrollment",
    "ParsingError",
    "PersistenceError",
    "UnrecognizedCommand",
]
