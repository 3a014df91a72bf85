import pytest

from chanfix.bot.commands import HELP_LINES, parse_command
from chanfix.bot.engine import CommandEngine
from chanfix.enrollment.models import EnrolledUser


async def test_help_lists_every_line(engine, fake_irc):
    await engine.handle_private_command("alice", "help")
    assert fake_irc.notices_to("alice") == list(HELP_LINES)


async def test_unknown_command_notice(engine, fake_irc):
    await engine.handle_private_command("alice", "dance #chan")
    assert fake_irc.notices == [("alice", "Unrecognized command. (tried help?)")]


async def test_channel_commands_need_argument(engine, fake_irc, pending):
    for text in ("enroll", "fix", "status   "):
        await engine.handle_private_command("alice", text)
    assert fake_irc.notices_to("alice") == ["No channel given."] * 3
    assert fake_irc.joins == []
    assert len(pending) == 0


@pytest.mark.parametrize("argument", ["0", "#a,#b", "chan"])
async def test_enroll_rejects_invalid_channel(engine, fake_irc, pending, argument):
    await engine.handle_private_command("alice", f"enroll {argument}")
    assert fake_irc.notices == [("alice", "Invalid channel name.")]
    assert fake_irc.joins == []
    assert len(pending) == 0


async def test_fix_rejects_channel_list(engine, fake_irc, store, alice):
    store.replace("#a", [alice])
    fake_irc.set_online("alice", "al", "host.a")
    await engine.handle_private_command("anyone", "fix #a,#b")
    assert fake_irc.notices == [("anyone", "Invalid channel name.")]
    assert fake_irc.promotions == []
    assert fake_irc.whois_lookups == []


async def test_enroll_joins_and_records_pending(engine, fake_irc, pending):
    await engine.handle_private_command("alice", "enroll #Chan")
    assert fake_irc.joins == ["#Chan"]
    assert pending.get("#chan").requester == "alice"
    assert fake_irc.notices == []


async def test_second_enroll_rejected_while_pending(engine, fake_irc, pending):
    await engine.handle_private_command("alice", "enroll #chan")
    await engine.handle_private_command("bob", "enroll #CHAN")
    assert fake_irc.joins == ["#chan"]
    assert pending.get("#chan").requester == "alice"
    assert fake_irc.notices_to("bob") == [
        "An enrollment of #chan requested by alice is already in progress."
    ]


async def test_enroll_join_failure_clears_pending(engine, fake_irc, pending):
    async def broken_join(channel):
        raise ConnectionResetError("gone")

    fake_irc.join = broken_join
    with pytest.raises(ConnectionResetError):
        await engine.handle_private_command("alice", "enroll #chan")
    assert "#chan" not in pending


async def test_status_unenrolled(engine, fake_irc):
    await engine.handle_private_command("alice", "status #chan")
    assert fake_irc.notices == [("alice", "The channel is unenrolled.")]


async def test_status_enrolled_without_ops(engine, fake_irc, store):
    store.replace("#chan", [])
    await engine.handle_private_command("alice", "status #chan")
    assert fake_irc.notices == [("alice", "No ops were enrolled for this channel.")]


async def test_status_lists_ops_with_channel_as_typed(engine, fake_irc, store, alice, bob):
    store.replace("#chan", [alice, bob])
    await engine.handle_private_command("carol", "status #CHAN")
    assert fake_irc.notices_to("carol") == [
        "#CHAN op: alice!al@host.a",
        "#CHAN op: bob!bo@host.b",
    ]


async def test_fix_unenrolled_is_silent(engine, fake_irc):
    await engine.handle_private_command("alice", "fix #chan")
    assert fake_irc.notices == []
    assert fake_irc.promotions == []
    assert fake_irc.whois_lookups == []


async def test_fix_promotes_matching_users(engine, fake_irc, store, alice, bob):
    store.replace("#chan", [alice, bob])
    fake_irc.set_online("alice", "al", "host.a")
    fake_irc.set_online("bob", "bo", "host.b")
    await engine.handle_private_command("anyone", "fix #chan")
    assert fake_irc.promotions == [("#chan", "alice"), ("#chan", "bob")]
    assert fake_irc.notices == []


async def test_fix_skips_absent_and_mismatched(engine, fake_irc, store, alice, bob):
    carol = EnrolledUser("carol", "ca", "host.c")
    store.replace("#chan", [alice, bob, carol])
    fake_irc.set_online("alice", "impostor", "host.a")
    fake_irc.set_online("carol", "ca", "elsewhere")
    await engine.handle_private_command("anyone", "fix #chan")
    # ident-only matching by default: carol's host change is accepted
    assert fake_irc.promotions == [("#chan", "carol")]
    assert fake_irc.whois_lookups == ["alice", "bob", "carol"]


async def test_fix_with_host_matching(fake_irc, store, pending, alice, bob):
    engine = CommandEngine(fake_irc, store, pending, match_host=True)
    store.replace("#chan", [alice, bob])
    fake_irc.set_online("alice", "al", "HOST.A")
    fake_irc.set_online("bob", "bo", "other.host")
    promoted = await engine._fix("anyone", parse_command("fix #chan"))
    assert promoted == 1
    assert fake_irc.promotions == [("#chan", "alice")]


async def test_fix_uses_live_nick_case(engine, fake_irc, store, alice):
    store.replace("#chan", [alice])
    fake_irc.set_online("Alice", "al", "host.a")
    await engine.handle_private_command("x", "fix #chan")
    assert fake_irc.promotions == [("#chan", "Alice")]
