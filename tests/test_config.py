"""Tests for Config and Chrome path resolution."""

import os
from pathlib import Path

from agversion.config import (
    DEFAULT_CHROME_PATH,
    DOWNLOAD_URL,
    Config,
    resolve_chrome_path,
)


class TestResolveChromePath:
    """Test suite for resolve_chrome_path."""

    def test_chrome_bin_wins(self) -> None:
        """Test CHROME_BIN takes precedence over CHROME_PATH."""
        env = {"CHROME_BIN": "/opt/chrome", "CHROME_PATH": "/usr/bin/chrome"}

        assert resolve_chrome_path(env) == "/opt/chrome"

    def test_chrome_path_fallback(self) -> None:
        """Test CHROME_PATH is used when CHROME_BIN is unset."""
        assert resolve_chrome_path({"CHROME_PATH": "/usr/bin/chrome"}) == (
            "/usr/bin/chrome"
        )

    def test_empty_values_fall_through(self) -> None:
        """Test empty variables are treated as unset."""
        env = {"CHROME_BIN": "", "CHROME_PATH": "/usr/bin/chrome"}

        assert resolve_chrome_path(env) == "/usr/bin/chrome"

    def test_default_path(self) -> None:
        """Test the hard-coded default when nothing is set."""
        assert resolve_chrome_path({}) == DEFAULT_CHROME_PATH
        assert DEFAULT_CHROME_PATH == (
            "/run/current-system/sw/bin/google-chrome-stable"
        )

    def test_reads_os_environ_by_default(self, monkeypatch) -> None:
        """Test os.environ is consulted when no mapping is passed."""
        monkeypatch.setenv("CHROME_BIN", "/from/env/chrome")

        assert resolve_chrome_path() == "/from/env/chrome"


class TestConfig:
    """Test suite for Config class."""

    def test_default_config(self) -> None:
        """Test Config with default values."""
        config = Config()

        assert config.chrome_path == DEFAULT_CHROME_PATH
        assert config.url == DOWNLOAD_URL
        assert config.navigation_timeout == 30.0
        assert config.settle_delay == 3.0
        assert config.user_data_dir is None
        assert config.headless is True
        assert config.extra_args == []
        assert config.env == {}

    def test_from_env(self) -> None:
        """Test from_env resolves the executable and extra args."""
        config = Config.from_env(
            {
                "CHROME_PATH": "/usr/bin/chromium",
                "AGVERSION_CHROME_ARGS": "--lang=en-US '--window-size=800,600'",
            }
        )

        assert config.chrome_path == "/usr/bin/chromium"
        assert config.extra_args == ["--lang=en-US", "--window-size=800,600"]
        assert config.url == DOWNLOAD_URL

    def test_from_env_without_extra_args(self) -> None:
        """Test from_env leaves extra_args empty by default."""
        config = Config.from_env({})

        assert config.extra_args == []
        assert config.chrome_path == DEFAULT_CHROME_PATH

    def test_ensure_user_data_dir_creates_temp(self) -> None:
        """Test a temporary profile is created and later removed."""
        config = Config()

        data_dir = config.ensure_user_data_dir()

        assert "agversion-profile-" in data_dir
        assert config.user_data_dir == data_dir
        assert Path(data_dir).is_dir()

        config.cleanup_user_data_dir()

        assert not Path(data_dir).exists()
        assert config.user_data_dir is None

    def test_cleanup_keeps_user_supplied_dir(self, tmp_path: Path) -> None:
        """Test cleanup never removes a directory the caller provided."""
        test_dir = tmp_path / "profile"
        config = Config(user_data_dir=str(test_dir))

        assert config.ensure_user_data_dir() == str(test_dir)
        config.cleanup_user_data_dir()

        assert test_dir.is_dir()
        assert config.user_data_dir == str(test_dir)

    def test_build_argv_headless(self, tmp_path: Path) -> None:
        """Test build_argv includes headless mode and the CDP pipe."""
        config = Config(user_data_dir=str(tmp_path))

        argv = config.build_argv()

        assert "--headless=new" in argv
        assert "--remote-debugging-pipe" in argv
        assert "--no-sandbox" in argv
        assert f"--user-data-dir={tmp_path}" in argv
        assert argv[-1] == "about:blank"

    def test_build_argv_not_headless(self, tmp_path: Path) -> None:
        """Test build_argv without headless mode."""
        config = Config(user_data_dir=str(tmp_path), headless=False)

        argv = config.build_argv()

        assert "--headless=new" not in argv
        assert "--remote-debugging-pipe" in argv

    def test_build_argv_switches_and_extra_args(self, tmp_path: Path) -> None:
        """Test switches and extra args are appended before the URL."""
        config = Config(
            user_data_dir=str(tmp_path),
            switches={"lang": "en-US", "mute-audio": None},
            extra_args=["--proxy-server=direct://"],
        )

        argv = config.build_argv()

        assert "--lang=en-US" in argv
        assert "--mute-audio" in argv
        assert argv[-2] == "--proxy-server=direct://"

    def test_build_env(self) -> None:
        """Test build_env merges environment variables."""
        config = Config(env={"CUSTOM_VAR": "value"})

        env = config.build_env()

        assert env["CUSTOM_VAR"] == "value"
        assert {k: v for k, v in env.items() if k != "CUSTOM_VAR"} == {
            k: v for k, v in os.environ.items() if k != "CUSTOM_VAR"
        }
