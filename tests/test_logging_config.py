import logging

from weather_aggregator.logging_config import LOG_FORMAT, configure_logging


def test_configure_logging_installs_single_root_handler():
    configure_logging()
    configure_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.handlers[0].formatter._fmt == LOG_FORMAT


def test_third_party_loggers_do_not_propagate():
    configure_logging(logging.DEBUG)

    uvicorn_logger = logging.getLogger("uvicorn.error")
    assert uvicorn_logger.propagate is False
    assert len(uvicorn_logger.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING
