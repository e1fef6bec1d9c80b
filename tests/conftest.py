"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Callable
from unittest.mock import AsyncMock, Mock

import cdp
import pytest

from agversion.page import Page


@pytest.fixture
def mock_process() -> Mock:
    """Create a mock subprocess."""
    proc = Mock()
    proc.pid = 12345
    proc.returncode = None
    proc.wait = AsyncMock(return_value=0)
    proc.terminate = Mock()
    proc.kill = Mock()
    return proc


@pytest.fixture
def mock_reader() -> AsyncMock:
    """Create a mock StreamReader whose pipe is already closed."""
    reader = AsyncMock()
    reader.readuntil = AsyncMock(
        side_effect=asyncio.IncompleteReadError(b"", None)
    )
    return reader


@pytest.fixture
def mock_writer() -> Mock:
    """Create a mock writer."""
    writer = Mock()
    writer.write = Mock()
    writer.drain = AsyncMock()
    writer.close = Mock()
    return writer


@pytest.fixture
def mock_browser() -> Mock:
    """Create a mock Browser."""
    browser = Mock()
    browser.send = AsyncMock()
    browser.pages = {}
    return browser


@pytest.fixture
def page(mock_browser: Mock) -> Page:
    """Create an attached Page on the mock browser."""
    target_id = cdp.target.TargetID("target-123")
    page = Page(mock_browser, target_id, cdp.target.SessionID("session-456"))
    mock_browser.pages[str(target_id)] = page
    return page


@pytest.fixture
def lifecycle_event() -> Callable[..., cdp.page.LifecycleEvent]:
    """Build Page.lifecycleEvent objects as Chrome would send them."""

    def make(
        name: str = "networkIdle", loader_id: str = "loader-1"
    ) -> cdp.page.LifecycleEvent:
        return cdp.page.LifecycleEvent.from_json(
            {
                "frameId": "frame-1",
                "loaderId": loader_id,
                "name": name,
                "timestamp": 1.0,
            }
        )

    return make
