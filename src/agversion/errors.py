"""Exceptions raised while fetching the Antigravity version."""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for all agversion errors."""


class VersionNotFound(ScrapeError):
    """The page loaded but no extraction strategy matched."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Could not extract version from {url}")
        self.url = url


class OperationFailed(ScrapeError):
    """Navigation, evaluation or a CDP command failed."""


class NavigationError(OperationFailed):
    """Chrome reported an error while loading the page."""

    def __init__(self, url: str, error_text: str) -> None:
        super().__init__(f"{error_text} at {url}")
        self.url = url
        self.error_text = error_text


class NavigationTimeout(OperationFailed):
    """The page did not reach the expected lifecycle state in time."""

    def __init__(self, url: str, timeout: float, wait_until: str) -> None:
        super().__init__(
            f"Navigation timeout of {timeout * 1000:.0f} ms exceeded "
            f"waiting for {wait_until} on {url}"
        )
        self.url = url
        self.timeout = timeout
        self.wait_until = wait_until


class EvaluationError(OperationFailed):
    """A script evaluated in the page threw an exception."""


__all__ = [
    "ScrapeError",
    "VersionNotFound",
    "OperationFailed",
    "NavigationError",
    "NavigationTimeout",
    "EvaluationError",
]
