from chanfix.irc.casemap import irc_equals, irc_lower
from chanfix.irc.parser import build_privmsg, parse_irc_message, parse_prefix


def test_parse_full_line():
    msg = parse_irc_message(":nick!id@host PRIVMSG ChanFix :fix #chan")
    assert msg.prefix == "nick!id@host"
    assert msg.command == "PRIVMSG"
    assert msg.params == ["ChanFix", "fix #chan"]
    assert msg.nick == "nick"


def test_parse_numeric_and_tags():
    msg = parse_irc_message("@time=now;flag :srv 352 me #c id h srv n H@ :0 real")
    assert msg.tags == {"time": "now", "flag": ""}
    assert msg.command == "352"
    assert msg.params[1:7] == ["#c", "id", "h", "srv", "n", "H@"]


def test_parse_lowercase_command_and_no_prefix():
    msg = parse_irc_message("ping :irc.example.net")
    assert msg.command == "PING"
    assert msg.param(0) == "irc.example.net"
    assert msg.param(5, "x") == "x"


def test_parse_degenerate_lines():
    assert parse_irc_message("@onlytags").command is None
    assert parse_irc_message(":prefixonly").command is None


def test_parse_prefix():
    ident = parse_prefix("n!i@h.example")
    assert ident is not None and ident.hostmask == "n!i@h.example"
    assert parse_prefix("irc.example.net") is None
    assert parse_prefix(None) is None


def test_build_privmsg_requires_target_and_text():
    assert build_privmsg(parse_irc_message(":a!b@c PRIVMSG ChanFix")) is None
    assert build_privmsg(parse_irc_message(":a!b@c NOTICE x :y")) is None
    priv = build_privmsg(parse_irc_message(":a!b@c PRIVMSG ChanFix :help"))
    assert priv is not None and (priv.sender, priv.target, priv.message) == (
        "a",
        "ChanFix",
        "help",
    )


def test_rfc1459_casemap():
    assert irc_lower("#Chan[One]\\~") == "#chan{one}|^"
    assert irc_equals("Nick[a]", "nick{A}")
    assert not irc_equals("nick", "nick_")
