import os
from dataclasses import dataclass, field

import pytest

# Keep timing constants small; they are read when chanfix.constants is imported
os.environ.setdefault("WHOIS_TIMEOUT", "0.2")
os.environ.setdefault("RECONNECT_DELAY", "0")
os.environ.setdefault("PENDING_SWEEP_INTERVAL", "0.05")
os.environ.setdefault("WORKER_STOP_TIMEOUT", "0.5")
os.environ.setdefault("RETRY_BACKOFF_MULTIPLIER", "0")
os.environ.setdefault("MANAGER_LOOP_SLEEP_SECONDS", "0.01")

from chanfix.bot.engine import CommandEngine  # noqa: E402
from chanfix.enrollment.models import EnrolledUser  # noqa: E402
from chanfix.enrollment.pending import PendingEnrollments  # noqa: E402
from chanfix.enrollment.repository import EnrollmentRepository  # noqa: E402
from chanfix.enrollment.store import EnrollmentStore  # noqa: E402
from chanfix.irc.casemap import irc_lower  # noqa: E402
from chanfix.irc.models import UserIdentity  # noqa: E402


@dataclass
class FakeIRC:
    """In-memory stand-in for the IRC layer that records every call."""

    live_users: dict[str, UserIdentity] = field(default_factory=dict)
    channel_ops: dict[str, list[UserIdentity]] = field(default_factory=dict)
    network_operators: set[tuple[str, str]] = field(default_factory=set)
    joins: list[str] = field(default_factory=list)
    leaves: list[tuple[str, str]] = field(default_factory=list)
    notices: list[tuple[str, str]] = field(default_factory=list)
    promotions: list[tuple[str, str]] = field(default_factory=list)
    whois_lookups: list[str] = field(default_factory=list)

    async def join(self, channel: str) -> None:
        self.joins.append(channel)

    async def leave(self, channel: str, reason: str) -> None:
        self.leaves.append((channel, reason))

    async def notice(self, target: str, text: str) -> None:
        self.notices.append((target, text))

    async def promote(self, channel: str, nick: str) -> None:
        self.promotions.append((channel, nick))

    async def get_live_user(self, nick: str) -> UserIdentity | None:
        self.whois_lookups.append(nick)
        return self.live_users.get(irc_lower(nick))

    def get_channel_operators(self, channel: str) -> list[UserIdentity]:
        return list(self.channel_ops.get(irc_lower(channel), []))

    def is_operator(self, channel: str, nick: str) -> bool:
        return any(
            irc_lower(op.nick) == irc_lower(nick)
            for op in self.channel_ops.get(irc_lower(channel), [])
        )

    def is_network_operator(self, channel: str, nick: str) -> bool:
        return (irc_lower(channel), irc_lower(nick)) in self.network_operators

    # Test helpers
    def set_online(self, nick: str, ident: str, host: str) -> UserIdentity:
        identity = UserIdentity(nick, ident, host)
        self.live_users[irc_lower(nick)] = identity
        return identity

    def set_ops(self, channel: str, *ops: UserIdentity) -> None:
        self.channel_ops[irc_lower(channel)] = list(ops)

    def notices_to(self, nick: str) -> list[str]:
        return [text for target, text in self.notices if target == nick]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_irc() -> FakeIRC:
    return FakeIRC()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path) -> EnrollmentStore:
    return EnrollmentStore(EnrollmentRepository(tmp_path / "enrollments.json"))


@pytest.fixture
def pending(clock) -> PendingEnrollments:
    return PendingEnrollments(timeout=60.0, clock=clock)


@pytest.fixture
def engine(fake_irc, store, pending) -> CommandEngine:
    return CommandEngine(fake_irc, store, pending)


@pytest.fixture
def alice() -> EnrolledUser:
    return EnrolledUser("alice", "al", "host.a")


@pytest.fixture
def bob() -> EnrolledUser:
    return EnrolledUser("bob", "bo", "host.b")
