"""Shared pytest fixtures for options analytics tests."""

import sys
from pathlib import Path

import pytest
from loguru import logger

# Add project root and src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))

# Import all fixtures for global availability
from tests.fixtures.market_fixtures import *
from tests.fixtures.strategy_fixtures import *
from tests.fixtures.trade_fixtures import *


@pytest.fixture
def log_messages():
    """
    Capture loguru messages emitted during a test.

    Returns:
        list[str]: Formatted messages, appended as they are logged

    Example:
        def test_rejection_is_logged(log_messages):
            validate_multi_leg_strategy(expired_strategy)
            assert any("rejected" in m for m in log_messages)
    """
    messages = []
    handler_id = logger.add(messages.append, format="{level} {message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)
