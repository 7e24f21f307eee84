import logging

from roomchat.config import LOGGER_NAME
from roomchat.logger import get_logger, log_exception, root_logger


def test_module_loggers_are_children_of_the_app_logger():
    logger = get_logger("rooms")

    assert logger.name == f"{LOGGER_NAME}.rooms"
    assert logger.parent is root_logger()


def test_root_logger_is_configured_once():
    first = root_logger()
    second = root_logger()

    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False


def test_log_exception_records_traceback(caplog):
    root = root_logger()
    root.propagate = True
    try:
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            try:
                raise ValueError("boom")
            except ValueError:
                log_exception("relay", "save failed")
    finally:
        root.propagate = False

    record = caplog.records[-1]
    assert record.name == f"{LOGGER_NAME}.relay"
    assert record.exc_info[0] is ValueError
