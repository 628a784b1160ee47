# ruff: noqa: S101
import logging

from reqatlas.logging_setup import (
    _handler_uses_path,
    _resolve_log_path,
    configure_console_logging,
    configure_logging,
)


def test_resolve_log_path_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    resolved = _resolve_log_path()
    assert resolved == tmp_path / "reqatlas.log"


def test_handler_uses_path(tmp_path):
    target = tmp_path / "log.txt"
    handler = logging.FileHandler(target)
    try:
        assert _handler_uses_path(handler, target)
    finally:
        handler.close()


def test_configure_logging_disabled_returns_none():
    assert configure_logging(False) is None


def test_configure_logging_creates_handler(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    initial = list(root.handlers)
    try:
        path = configure_logging(True)
        assert path == tmp_path / "reqatlas.log"
        configure_logging(True, log_path=path)
        file_handlers = [h for h in root.handlers if _handler_uses_path(h, path)]
        assert len(file_handlers) == 1
    finally:
        for h in root.handlers[len(initial) :]:
            root.removeHandler(h)
            h.close()


def test_configure_console_logging_is_idempotent():
    package_logger = logging.getLogger("reqatlas")
    first = configure_console_logging()
    try:
        assert configure_console_logging() is first
        assert package_logger.handlers.count(first) == 1
    finally:
        package_logger.removeHandler(first)
