import json

import pytest
from pydantic import ValidationError

from chanfix.config import (
    BotConfig,
    ConfigError,
    ConfigLoader,
    config_dir,
    config_path,
    default_enrollment_path,
)


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def test_defaults():
    config = BotConfig.from_dict({"server": " irc.example.net "})
    assert config.server == "irc.example.net"
    assert config.port == 6667
    assert config.nick == "ChanFix"
    assert config.pending_timeout == 60.0
    assert config.match_host is False
    assert config.promote_command == "SAMODE"
    assert "oper_name" not in config.to_dict()


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"server": ""},
        {"server": "irc", "port": 0},
        {"server": "irc", "nick": "bad nick"},
        {"server": "irc", "oper_name": "only-name"},
        {"server": "irc", "pending_timeout": 0},
    ],
)
def test_invalid_configs(data):
    with pytest.raises(ValidationError):
        BotConfig.from_dict(data)


def test_template_is_valid():
    assert BotConfig.from_dict(BotConfig.template()).server == "irc.example.net"


def test_config_dir_resolution(monkeypatch, tmp_path):
    monkeypatch.delenv("CHANFIX_CONFIG_DIR", raising=False)
    monkeypatch.delenv("CHANFIX_CONF_FILE", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert config_dir() == tmp_path / "xdg" / "chanfix"
    monkeypatch.setenv("CHANFIX_CONFIG_DIR", str(tmp_path / "explicit"))
    assert config_path() == tmp_path / "explicit" / "config.json"
    assert default_enrollment_path() == tmp_path / "explicit" / "enrollments.json"
    monkeypatch.setenv("CHANFIX_CONF_FILE", str(tmp_path / "other.json"))
    assert config_path() == tmp_path / "other.json"


def test_load_fills_default_enrollment_file(monkeypatch, tmp_path):
    monkeypatch.setenv("CHANFIX_CONFIG_DIR", str(tmp_path))
    path = tmp_path / "config.json"
    _write(path, {"server": "irc.example.net", "match_host": True})
    config = ConfigLoader(path).load()
    assert config.match_host is True
    assert config.enrollment_file == str(tmp_path / "enrollments.json")


def test_load_keeps_explicit_enrollment_file(tmp_path):
    path = tmp_path / "config.json"
    _write(path, {"server": "irc", "enrollment_file": "/data/e.json"})
    assert ConfigLoader(path).load().enrollment_file == "/data/e.json"


@pytest.mark.parametrize("content", ["{not json", "[]", '{"port": 1}'])
def test_load_invalid_raises_config_error(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigLoader(path).load()


def test_get_configuration_missing_writes_template(tmp_path, caplog):
    path = tmp_path / "sub" / "config.json"
    with pytest.raises(SystemExit) as exc:
        ConfigLoader(path).get_configuration()
    assert exc.value.code == 1
    assert json.loads(path.read_text(encoding="utf-8")) == BotConfig.template()
    assert "template written" in caplog.text


def test_get_configuration_invalid_exits(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        ConfigLoader(path).get_configuration()
    assert exc.value.code == 1


def test_get_configuration_ok(tmp_path):
    path = tmp_path / "config.json"
    _write(path, {"server": "irc", "enrollment_file": str(tmp_path / "e.json")})
    assert ConfigLoader(path).get_configuration().server == "irc"
