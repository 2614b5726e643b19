from collections.abc import Generator

import pytest

from kafkahealth.logutil import logger


@pytest.fixture(autouse=True)
def reset_logger_handlers() -> Generator[None, None, None]:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
