import logging

from pythonjsonlogger import jsonlogger

from record_browser.logging_config import configure_logging


def test_json_is_the_default(monkeypatch):
    monkeypatch.delenv("RECORD_BROWSER_LOG_FORMAT", raising=False)
    configure_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)


def test_plain_format_and_level_from_env(monkeypatch):
    monkeypatch.setenv("RECORD_BROWSER_LOG_FORMAT", "plain")
    monkeypatch.setenv("RECORD_BROWSER_LOG_LEVEL", "debug")
    configure_logging()

    root = logging.getLogger()
    assert not isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert root.level == logging.DEBUG
    assert logging.getLogger("werkzeug").level == logging.WARNING


def test_explicit_arguments_win(monkeypatch):
    monkeypatch.setenv("RECORD_BROWSER_LOG_FORMAT", "plain")
    configure_logging(level=logging.WARNING, force_format="json")

    root = logging.getLogger()
    assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert root.level == logging.WARNING
