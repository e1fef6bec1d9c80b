"""Version extraction from a rendered download page.

The page is read once into a ``PageSnapshot`` by ``SNAPSHOT_SCRIPT``;
the strategies below then run in order over that snapshot and the first
match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from .logger import logger

VERSION_PATTERN: str = r"\d{1,3}\.\d{1,3}\.\d{1,3}-\d+"
DOWNLOAD_PATH: str = "antigravity/stable/"

LINK_RE = re.compile(re.escape(DOWNLOAD_PATH) + f"({VERSION_PATTERN})", re.ASCII)
TEXT_RE = re.compile(rf"\b({VERSION_PATTERN})\b", re.ASCII)
META_RE = re.compile(f"({VERSION_PATTERN})", re.ASCII)

SNAPSHOT_SCRIPT: str = """
(() => ({
  hrefs: Array.from(document.querySelectorAll('a[href*="%s"]'))
    .map((a) => a.getAttribute('href') || ''),
  text: document.body ? document.body.innerText : '',
  metaContents: Array.from(document.querySelectorAll('meta'))
    .map((m) => m.getAttribute('content') || ''),
}))()
""" % DOWNLOAD_PATH


@dataclass(frozen=True)
class PageSnapshot:
    """The parts of a rendered page the strategies look at.

    Attributes:
        hrefs: ``href`` values of anchors pointing at stable downloads.
        text: Rendered text of the document body.
        meta_contents: ``content`` values of every meta tag.
    """

    hrefs: list[str] = field(default_factory=list)
    text: str = ""
    meta_contents: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> PageSnapshot:
        """Build a snapshot from the value ``SNAPSHOT_SCRIPT`` returns."""
        data = data or {}
        return cls(
            hrefs=[str(h) for h in data.get("hrefs") or []],
            text=str(data.get("text") or ""),
            meta_contents=[str(c) for c in data.get("metaContents") or []],
        )


def from_download_links(snapshot: PageSnapshot) -> str | None:
    """Version embedded in a ``.../antigravity/stable/<version>/...`` link."""
    for href in snapshot.hrefs:
        match = LINK_RE.search(href)
        if match:
            return match.group(1)
    return None


def from_body_text(snapshot: PageSnapshot) -> str | None:
    """First standalone version token in the page text."""
    match = TEXT_RE.search(snapshot.text)
    return match.group(1) if match else None


def from_meta_tags(snapshot: PageSnapshot) -> str | None:
    """Version mentioned in any meta tag content."""
    for content in snapshot.meta_contents:
        match = META_RE.search(content)
        if match:
            return match.group(1)
    return None


Strategy = Callable[[PageSnapshot], str | None]

STRATEGIES: tuple[Strategy, ...] = (
    from_download_links,
    from_body_text,
    from_meta_tags,
)


def extract_version(
    snapshot: PageSnapshot,
    strategies: tuple[Strategy, ...] = STRATEGIES,
) -> str | None:
    """Run the strategies in order and return the first version found.

    Returns:
        str | None: The version, or None when no strategy matched.
    """
    for strategy in strategies:
        version = strategy(snapshot)
        if version:
            logger.debug("Version %s found by %s", version, strategy.__name__)
            return version
    return None


__all__ = [
    "PageSnapshot",
    "STRATEGIES",
    "SNAPSHOT_SCRIPT",
    "VERSION_PATTERN",
    "extract_version",
    "from_download_links",
    "from_body_text",
    "from_meta_tags",
]
