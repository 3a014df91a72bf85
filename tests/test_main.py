import json

import pytest

from chanfix import main as main_module
from chanfix.config import ConfigLoader


def _write_config(tmp_path, **extra):
    path = tmp_path / "config.json"
    data = {"server": "irc.test", "enrollment_file": str(tmp_path / "e.json")}
    data.update(extra)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_health_check_passes(tmp_path):
    path = _write_config(tmp_path)
    assert main_module.health_check(ConfigLoader(path)) is True


def test_health_check_missing_config(tmp_path):
    assert main_module.health_check(ConfigLoader(tmp_path / "none.json")) is False
    assert not (tmp_path / "none.json").exists()


def test_health_check_corrupt_enrollments(tmp_path):
    path = _write_config(tmp_path)
    (tmp_path / "e.json").write_text("[]", encoding="utf-8")
    assert main_module.health_check(ConfigLoader(path)) is False


def test_run_health_check_flag(monkeypatch):
    monkeypatch.setattr(main_module, "health_check", lambda: True)
    with pytest.raises(SystemExit) as exc:
        main_module.run(["--health-check"])
    assert exc.value.code == 0
    monkeypatch.setattr(main_module, "health_check", lambda: False)
    with pytest.raises(SystemExit) as exc:
        main_module.run(["--health-check"])
    assert exc.value.code == 1


def test_run_exits_1_on_unreadable_enrollments(monkeypatch, tmp_path):
    path = _write_config(tmp_path)
    (tmp_path / "e.json").write_text("{bad", encoding="utf-8")
    monkeypatch.setenv("CHANFIX_CONF_FILE", str(path))
    monkeypatch.setattr(
        "chanfix.bot.manager.SignalHandler.setup_signal_handlers", lambda self: None
    )
    with pytest.raises(SystemExit) as exc:
        main_module.run([])
    assert exc.value.code == 1
