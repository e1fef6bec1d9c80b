"""Public API for agversion.

Exports:
    Browser, Page, Config, PageSnapshot, extract_version, fetch_version,
    errors, logger
"""

from __future__ import annotations

import importlib.metadata

from . import errors
from .browser import Browser
from .config import Config
from .extract import PageSnapshot, extract_version
from .fetcher import fetch_version
from .logger import logger
from .page import Page

__all__: list[str] = [
    "Browser",
    "Page",
    "Config",
    "PageSnapshot",
    "extract_version",
    "fetch_version",
    "errors",
    "logger",
]
__version__: str = importlib.metadata.version("agversion")
