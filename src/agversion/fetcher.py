"""Read the current Antigravity version from its download page."""

from __future__ import annotations

import asyncio

from .browser import Browser
from .config import Config
from .errors import OperationFailed, ScrapeError, VersionNotFound
from .extract import SNAPSHOT_SCRIPT, PageSnapshot, extract_version
from .logger import SUCCESS, logger
from .page import Page


async def read_snapshot(page: Page) -> PageSnapshot:
    """Evaluate ``SNAPSHOT_SCRIPT`` in the page and wrap the result."""
    return PageSnapshot.from_json(await page.eval(SNAPSHOT_SCRIPT))


async def fetch_version(config: Config | None = None) -> str:
    """Launch Chrome, load the download page and extract the version.

    The browser is closed on every path out of this function.

    Args:
        config: Lookup configuration. Defaults to ``Config.from_env()``.

    Returns:
        str: The version string, e.g. ``1.11.2-6128``.

    Raises:
        VersionNotFound: If no extraction strategy matched.
        OperationFailed: If navigation, evaluation or a CDP command
            failed.
        OSError: If Chrome could not be started.
    """
    config = config or Config.from_env()

    logger.info("Launching browser...")
    async with Browser(config) as browser:
        try:
            page = await browser.new_page()

            logger.info("Navigating to Antigravity download page...")
            await page.navigate(
                config.url,
                timeout=config.navigation_timeout,
                wait_until="networkIdle",
            )

            logger.info("Waiting for page to render...")
            await asyncio.sleep(config.settle_delay)

            snapshot = await read_snapshot(page)
        except ScrapeError:
            raise
        except (RuntimeError, ConnectionError) as exc:
            raise OperationFailed(str(exc)) from exc

    version = extract_version(snapshot)
    if version is None:
        raise VersionNotFound(config.url)

    logger.log(SUCCESS, "Found version: %s", version)
    return version


__all__ = ["fetch_version", "read_snapshot"]
