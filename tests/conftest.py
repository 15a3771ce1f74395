from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _logger_sender_default() -> None:
    logger.configure(extra={"sender": "-"})
