"""Command-line entry point.

Prints only the version on stdout so callers can capture it directly;
everything else goes to stderr through the logger. Exits 0 on success
and 1 on any failure.
"""

from __future__ import annotations

import asyncio
import sys

from .config import Config
from .errors import OperationFailed, VersionNotFound
from .fetcher import fetch_version
from .logger import logger


def main() -> int:
    try:
        version = asyncio.run(fetch_version(Config.from_env()))
    except VersionNotFound:
        logger.error("Could not extract version from page")
        return 1
    except OperationFailed as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.critical("%s", exc)
        logger.debug("Unhandled error", exc_info=True)
        return 1

    print(version)
    return 0


if __name__ == "__main__":
    sys.exit(main())
