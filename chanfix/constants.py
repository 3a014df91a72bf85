"""
Runtime tunables for the ChanFix bot

This module contains the timing and sizing constants used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# IRC connection constants
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 15.0
)  # Seconds to wait for the TCP/TLS connection
IRC_READ_CHUNK_SIZE = _get_env_int(
    "IRC_READ_CHUNK_SIZE", 4096
)  # Bytes read from the socket per iteration
IRC_REGISTRATION_TIMEOUT = _get_env_float(
    "IRC_REGISTRATION_TIMEOUT", 60.0
)  # Seconds to wait for RPL_WELCOME after NICK/USER
WHOIS_TIMEOUT = _get_env_float(
    "WHOIS_TIMEOUT", 5.0
)  # Seconds to wait for a WHOIS reply before treating the user as absent
SERVER_ACTIVITY_TIMEOUT = _get_env_int(
    "SERVER_ACTIVITY_TIMEOUT", 300
)  # Seconds without any server line before the link is considered dead
HEARTBEAT_INTERVAL = _get_env_int(
    "HEARTBEAT_INTERVAL", 90
)  # Seconds between client-initiated PINGs while idle

# Retry/backoff constants (connection establishment only)
CONNECT_MAX_ATTEMPTS = _get_env_int(
    "CONNECT_MAX_ATTEMPTS", 6
)  # Connection attempts before giving up
RETRY_BACKOFF_MULTIPLIER = _get_env_int(
    "RETRY_BACKOFF_MULTIPLIER", 1
)  # Exponential backoff multiplier
RETRY_MAX_BACKOFF_SECONDS = _get_env_int(
    "RETRY_MAX_BACKOFF_SECONDS", 60
)  # Maximum backoff time in seconds
RECONNECT_DELAY = _get_env_float(
    "RECONNECT_DELAY", 5.0
)  # Pause before reconnecting after the link drops

# Event processing constants
EVENT_QUEUE_MAXSIZE = _get_env_int(
    "EVENT_QUEUE_MAXSIZE", 1000
)  # Bound on queued IRC events awaiting the worker
PENDING_SWEEP_INTERVAL = _get_env_float(
    "PENDING_SWEEP_INTERVAL", 5.0
)  # Seconds between pending-enrollment expiry sweeps
DEFAULT_PENDING_TIMEOUT = _get_env_float(
    "DEFAULT_PENDING_TIMEOUT", 60.0
)  # Default seconds an enrollment may wait for its join to sync

# Persistence constants
ENROLLMENT_BACKUPS_KEPT = _get_env_int(
    "ENROLLMENT_BACKUPS_KEPT", 3
)  # Rotating backups kept next to the enrollment file

# Manager constants
MANAGER_LOOP_SLEEP_SECONDS = _get_env_float(
    "MANAGER_LOOP_SLEEP_SECONDS", 1.0
)  # Manager loop sleep
WORKER_STOP_TIMEOUT = _get_env_float(
    "WORKER_STOP_TIMEOUT", 5.0
)  # Seconds to let the worker drain on shutdown
