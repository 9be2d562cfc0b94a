import logging

from rich.logging import RichHandler

from evidex.core.log import configure_logging


def _evidex_handlers() -> list[logging.Handler]:
    return [handler for handler in logging.getLogger().handlers if getattr(handler, "_evidex", False)]


def _remove_evidex_handlers() -> None:
    root = logging.getLogger()
    for handler in _evidex_handlers():
        root.removeHandler(handler)
        handler.close()


def test_configure_logging_is_idempotent() -> None:
    _remove_evidex_handlers()
    try:
        configure_logging("debug")
        configure_logging("warning")
        handlers = _evidex_handlers()
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert logging.getLogger().level == logging.WARNING
    finally:
        _remove_evidex_handlers()


def test_configure_logging_to_file(tmp_path) -> None:
    _remove_evidex_handlers()
    log_path = tmp_path / "viewer.log"
    try:
        configure_logging("INFO", log_path=log_path)
        logging.getLogger("evidex.test").info("Loaded doc.pdf (3 pages)")
        for handler in _evidex_handlers():
            handler.flush()
        assert "evidex.test: Loaded doc.pdf (3 pages)" in log_path.read_text(encoding="utf-8")
    finally:
        _remove_evidex_handlers()
