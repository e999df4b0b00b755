import logging

import pytest

from reposcout.core.config import Settings
from reposcout.utils.logging import setup_logging


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        github_token="test-token",
        openai_api_key="test-key",
        deepseek_api_key=None,
    )


@pytest.fixture
def app_logs(caplog):
    """caplog wired to the ``reposcout`` logger, which does not propagate to root."""
    setup_logging()
    logger = logging.getLogger("reposcout")
    logger.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)
