"""Unit tests for logging utilities: console filter, formatter and setup."""
from __future__ import annotations

import logging
import logging.handlers

import pytest

from dendro_overlap.logging_utils import ColoredFormatter, Colors, ConsoleFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg="message",
        args=(),
        exc_info=None,
    )


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
@pytest.mark.parametrize("level", [logging.WARNING, logging.ERROR, logging.CRITICAL])
def test_console_filter_allows_warnings_from_anywhere(level):
    assert ConsoleFilter().filter(_record("some.library", level)) is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, allowed",
    [
        ("dendro_overlap.data.loader", True),
        ("dendro_overlap.api.routes.dendrogram", True),
        ("dendro_overlap.matrix.parsing", False),
        ("httpx", False),
    ],
)
def test_console_filter_info_by_logger(name, allowed):
    assert ConsoleFilter().filter(_record(name, logging.INFO)) is allowed


@pytest.mark.unit
def test_console_filter_blocks_debug():
    assert ConsoleFilter().filter(_record("dendro_overlap.data.loader", logging.DEBUG)) is False


@pytest.mark.unit
def test_colored_formatter_wraps_line():
    formatted = ColoredFormatter("%(message)s").format(_record("x", logging.ERROR))
    assert formatted == Colors.RED + "message" + Colors.RESET


@pytest.mark.unit
def test_setup_logging_handlers(tmp_path, restore_root_logger):
    setup_logging(log_dir=tmp_path)
    root = logging.getLogger()

    file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    console_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(file_handlers) == 1
    assert len(console_handlers) == 1
    assert (tmp_path / "dendro.log").exists()
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.unit
def test_setup_logging_quiet(tmp_path, restore_root_logger):
    setup_logging(quiet=True, log_dir=tmp_path)
    root = logging.getLogger()
    assert not any(type(h) is logging.StreamHandler for h in root.handlers)
