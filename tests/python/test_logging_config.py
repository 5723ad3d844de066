import logging

from shoal.logging_config import configure_logging


def test_explicit_level_wins(monkeypatch):
    monkeypatch.setenv("SHOAL_LOG_LEVEL", "ERROR")
    logger = configure_logging(level="debug", extra_loggers=["shoal.test.extra"])
    try:
        assert logger.name == "shoal"
        assert logger.level == logging.DEBUG
        assert logging.getLogger("shoal.test.extra").level == logging.DEBUG
    finally:
        logger.setLevel(logging.NOTSET)


def test_env_level_used_when_not_given(monkeypatch):
    monkeypatch.setenv("SHOAL_LOG_LEVEL", "warning")
    logger = configure_logging(include_uvicorn=True)
    try:
        assert logger.level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
    finally:
        logger.setLevel(logging.NOTSET)
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logging.getLogger(name).setLevel(logging.NOTSET)
