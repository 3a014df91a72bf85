"""
Tests for the structured event logger
"""

import ast
import logging
import string
from pathlib import Path

from chanfix.logs import BotLogger, logger
from chanfix.logs.event_catalog import EVENT_TEMPLATES, reload_event_templates

PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "chanfix"


def test_template_rendered_with_prefix(monkeypatch, caplog):
    monkeypatch.delenv("DEBUG", raising=False)
    caplog.set_level(logging.INFO, logger="chanfix")
    logger.log_event("enroll", "success", nick="alice", channel="#chan", ops=2)
    assert "[alice@#chan" in caplog.text
    assert "Enrolled with 2 operator(s)" in caplog.text


def test_debug_mode_includes_event_name_and_context(monkeypatch, caplog):
    monkeypatch.setenv("DEBUG", "true")
    caplog.set_level(logging.INFO, logger="chanfix")
    logger.log_event("fix", "done", nick="bob", channel="#c", promoted=3)
    assert "fix_done" in caplog.text
    assert "promoted=3" in caplog.text


def test_unknown_event_derives_text(monkeypatch, caplog):
    monkeypatch.setenv("DEBUG", "1")
    caplog.set_level(logging.INFO, logger="chanfix")
    logger.log_event("made_up", "thing_happened")
    assert "made up: thing happened" in caplog.text
    assert "derived=True" in caplog.text


def test_missing_placeholder_falls_back_to_template(caplog):
    caplog.set_level(logging.INFO, logger="chanfix")
    logger.log_event("fix", "done", nick="bob")
    assert "promoted {promoted}" in caplog.text


def test_explicit_human_text(caplog):
    caplog.set_level(logging.WARNING, logger="chanfix")
    logger.log_event("x", "y", level=logging.WARNING, human="custom words")
    assert "custom words" in caplog.text


def test_level_and_named_logger():
    custom = BotLogger("chanfix.test")
    custom.set_level(logging.ERROR)
    assert custom.logger.name == "chanfix.test"
    assert custom.logger.level == logging.ERROR


def test_file_handler(tmp_path):
    path = tmp_path / "bot.log"
    custom = BotLogger("chanfix.file", log_file=str(path))
    custom.set_level(logging.INFO)
    custom.log_event("manager", "probe", level=logging.WARNING, human="written to file")
    for handler in custom.logger.handlers:
        handler.flush()
    assert "written to file" in path.read_text(encoding="utf-8")


def _logged_events() -> set[tuple[str, str]]:
    events: set[tuple[str, str]] = set()
    for path in PACKAGE_ROOT.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if not (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "log_event"
            ):
                continue
            if len(node.args) >= 2 and all(
                isinstance(a, ast.Constant) and isinstance(a.value, str)
                for a in node.args[:2]
            ):
                events.add((node.args[0].value, node.args[1].value))
    return events


def test_every_logged_event_has_a_template():
    reload_event_templates()
    missing = sorted(_logged_events() - set(EVENT_TEMPLATES))
    assert missing == []


def test_every_template_renders_with_dummy_values():
    failures = []
    for key, template in EVENT_TEMPLATES.items():
        fields = {
            name
            for _, name, _, _ in string.Formatter().parse(template)
            if name
        }
        try:
            template.format(**dict.fromkeys(fields, "x"))
        except (KeyError, IndexError, ValueError) as e:
            failures.append((key, str(e)))
    assert failures == []
