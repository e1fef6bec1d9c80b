"""Configuration model for launching Chrome and reading the download page."""

from __future__ import annotations

import os
import pathlib
import shlex
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Mapping

from .logger import logger

DOWNLOAD_URL: str = "https://antigravity.google/download/linux"
DEFAULT_CHROME_PATH: str = "/run/current-system/sw/bin/google-chrome-stable"
CHROME_PATH_VARS: tuple[str, ...] = ("CHROME_BIN", "CHROME_PATH")
NAVIGATION_TIMEOUT: float = 30.0
SETTLE_DELAY: float = 3.0


def resolve_chrome_path(
    environ: Mapping[str, str] | None = None,
) -> str:
    """Resolve the Chrome executable from the environment.

    ``CHROME_BIN`` wins over ``CHROME_PATH``. Unset or empty variables
    fall through to the next source, ending at ``DEFAULT_CHROME_PATH``.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        str: Path to the Chrome executable.
    """
    if environ is None:
        environ = os.environ
    for var in CHROME_PATH_VARS:
        value = environ.get(var)
        if value:
            logger.debug("Chrome executable from %s: %s", var, value)
            return value
    return DEFAULT_CHROME_PATH


@dataclass
class Config:
    """Configuration for one version lookup.

    Attributes:
        chrome_path: Path to Chrome/Chromium executable.
        url: Download page to read the version from.
        navigation_timeout: Seconds allowed for navigation to reach
            network idle.
        settle_delay: Seconds to wait after network idle so client-side
            rendering can finish.
        user_data_dir: Path to user data directory. If None, a
            temporary directory is created and removed on cleanup.
        headless: Whether to run in headless mode.
        extra_args: Additional command-line arguments to pass.
        switches: Dictionary of Chrome switches to enable.
        env: Environment variables to set for the browser process.
    """

    chrome_path: str = DEFAULT_CHROME_PATH
    url: str = DOWNLOAD_URL
    navigation_timeout: float = NAVIGATION_TIMEOUT
    settle_delay: float = SETTLE_DELAY
    user_data_dir: str | None = None
    headless: bool = True
    extra_args: list[str] = field(default_factory=list)
    switches: dict[str, str | None] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    _temp_dir: str | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
    ) -> Config:
        """Build a Config from environment variables.

        Reads ``CHROME_BIN``/``CHROME_PATH`` for the executable and
        ``AGVERSION_CHROME_ARGS`` for extra Chrome arguments (shell
        quoting rules apply).

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Config: The resolved configuration.
        """
        if environ is None:
            environ = os.environ
        extra_args = shlex.split(environ.get("AGVERSION_CHROME_ARGS", ""))
        return cls(
            chrome_path=resolve_chrome_path(environ),
            extra_args=extra_args,
        )

    def ensure_user_data_dir(
        self,
    ) -> str:
        """Ensure user data directory exists and return its path.

        If user_data_dir is not set, creates a fresh temporary directory
        that ``cleanup_user_data_dir`` later removes.

        Returns:
            str: Path to the user data directory.
        """
        data_dir: str | None = self.user_data_dir
        if not data_dir:
            data_dir = tempfile.mkdtemp(prefix="agversion-profile-")
            self.user_data_dir = data_dir
            self._temp_dir = data_dir
        pathlib.Path(data_dir).mkdir(parents=True, exist_ok=True)
        logger.debug("Using user_data_dir: %s", data_dir)
        return data_dir

    def cleanup_user_data_dir(
        self,
    ) -> None:
        """Remove the temporary user data directory, if one was created."""
        if self._temp_dir is None:
            return
        shutil.rmtree(self._temp_dir, ignore_errors=True)
        logger.debug("Removed user_data_dir: %s", self._temp_dir)
        if self.user_data_dir == self._temp_dir:
            self.user_data_dir = None
        self._temp_dir = None

    def build_argv(
        self,
    ) -> list[str]:
        """Build command-line arguments for Chrome launch.

        Returns:
            list[str]: Complete list of command-line arguments.
        """
        argv: list[str] = []
        if self.headless and "--headless=new" not in self.extra_args:
            argv.append("--headless=new")

        argv.append("--remote-debugging-pipe")
        argv.append(f"--user-data-dir={self.ensure_user_data_dir()}")
        argv.extend(
            [
                "--no-sandbox",
                "--no-first-run",
                "--no-default-browser-check",
                "--disable-dev-shm-usage",
                "--use-gl=angle",
                "--use-angle=swiftshader",
                "--disable-gpu",
            ]
        )

        for k, v in self.switches.items():
            argv.append(f"--{k}" if v is None else f"--{k}={v}")

        argv.extend(self.extra_args)
        argv.append("about:blank")
        logger.debug("Built Chrome argv: %s", argv)
        return argv

    def build_env(
        self,
    ) -> dict[str, str]:
        """Build environment variables for Chrome process.

        Returns:
            dict[str, str]: os.environ merged with ``env`` overrides.
        """
        env: dict[str, str] = dict(os.environ)
        env.update(self.env)
        return env


__all__ = [
    "Config",
    "resolve_chrome_path",
    "DOWNLOAD_URL",
    "DEFAULT_CHROME_PATH",
    "NAVIGATION_TIMEOUT",
    "SETTLE_DELAY",
]
