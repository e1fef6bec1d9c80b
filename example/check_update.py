"""Example: compare the installed Antigravity with the latest release.

Demonstrates using agversion as a library from an update checker:
- Building a Config from the environment
- Fetching the published version
- Handling the not-found and failure cases
"""

import asyncio
import os
import sys

from agversion import Config, fetch_version
from agversion.errors import ScrapeError


async def main() -> int:
    """Main."""
    installed = os.environ.get("ANTIGRAVITY_INSTALLED_VERSION", "")
    try:
        latest = await fetch_version(Config.from_env())
    except ScrapeError as exc:
        print(f"Could not check for updates: {exc}", file=sys.stderr)
        return 1
    if latest == installed:
        print(f"Antigravity {installed} is up to date")
    else:
        print(f"Update available: {installed or 'none'} -> {latest}")
    return 0


sys.exit(asyncio.run(main()))
