import asyncio
import logging

import pytest

from audio_audit.logger import log_function, setup_logging


def test_sync_function_is_logged(caplog) -> None:
    @log_function(logger_name="audit.test", log_args=True, log_result=True)
    def add(a, b):
        return a + b

    with caplog.at_level(logging.INFO, logger="audit.test"):
        assert add(1, b=2) == 3

    assert "Calling add with args: 1, b=2" in caplog.text
    assert "Completed add" in caplog.text
    assert "with result: 3" in caplog.text


def test_coroutine_function_is_awaited_and_logged(caplog) -> None:
    @log_function(logger_name="audit.test")
    async def fetch():
        await asyncio.sleep(0)
        return "ok"

    with caplog.at_level(logging.INFO, logger="audit.test"):
        assert asyncio.run(fetch()) == "ok"

    assert "Calling fetch" in caplog.text
    assert "Completed fetch in" in caplog.text


def test_exceptions_are_logged_and_reraised(caplog) -> None:
    @log_function(logger_name="audit.test")
    async def explode():
        raise ValueError("bad input")

    with caplog.at_level(logging.INFO, logger="audit.test"):
        with pytest.raises(ValueError):
            asyncio.run(explode())

    assert "Exception in explode" in caplog.text
    assert "ValueError: bad input" in caplog.text


def test_setup_logging_writes_to_file(tmp_path) -> None:
    log_file = tmp_path / "logs" / "audit.log"
    logger = setup_logging("audit", log_file=str(log_file))

    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert "hello" in log_file.read_text()
    assert setup_logging("audit", log_file=str(log_file)) is logger
    assert len(logger.handlers) == 1
