"""Tests for the `slim-mcp proxy` command wiring."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from slim_mcp.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def run_proxy():
    """Replace the proxy loop; the config it was called with is on call_args."""
    mock = AsyncMock(return_value=0)
    with patch("slim_mcp.proxy.server.run_proxy", mock):
        with patch("slim_mcp.cli.proxy.configure_logging", return_value=None) as configure:
            mock.configure_logging = configure
            yield mock


def invoked_config(mock):
    (config,), _ = mock.call_args
    return config


class TestProxyCommand:
    """Option handling for the proxy command."""

    def test_defaults(self, runner, run_proxy):
        result = runner.invoke(main, ["proxy"])
        assert result.exit_code == 0, result.output
        config = invoked_config(run_proxy)
        assert config.upstream_command == ["npx", "@playwright/mcp"]
        assert config.summarization.enabled is True

    def test_extra_args_appended(self, runner, run_proxy):
        result = runner.invoke(main, ["proxy", "--", "--headless", "--browser", "chromium"])
        assert result.exit_code == 0, result.output
        assert invoked_config(run_proxy).upstream_command == [
            "npx",
            "@playwright/mcp",
            "--headless",
            "--browser",
            "chromium",
        ]

    def test_custom_upstream(self, runner, run_proxy):
        result = runner.invoke(
            main, ["proxy", "--upstream", "node ./server.js --port 0", "--", "--verbose"]
        )
        assert result.exit_code == 0, result.output
        assert invoked_config(run_proxy).upstream_command == [
            "node",
            "./server.js",
            "--port",
            "0",
            "--verbose",
        ]

    def test_empty_upstream_rejected(self, runner, run_proxy):
        result = runner.invoke(main, ["proxy", "--upstream", "  "])
        assert result.exit_code == 2
        assert not run_proxy.called

    def test_summarizer_options(self, runner, run_proxy):
        result = runner.invoke(
            main,
            [
                "proxy",
                "--backend",
                "claude-cli",
                "--model",
                "sonnet",
                "--timeout",
                "5",
                "--min-chars",
                "1000",
                "--on-failure",
                "passthrough",
            ],
        )
        assert result.exit_code == 0, result.output
        config = invoked_config(run_proxy)
        assert config.summarizer.backend == "claude-cli"
        assert config.summarizer.model == "sonnet"
        assert config.summarizer.timeout_seconds == 5.0
        assert config.summarization.min_snapshot_chars == 1000
        assert config.summarization.on_failure == "passthrough"

    def test_logging_options(self, runner, run_proxy, tmp_path):
        result = runner.invoke(
            main,
            [
                "proxy",
                "--log-dir",
                str(tmp_path),
                "--log-level",
                "debug",
                "--call-log",
                "--no-summarize",
            ],
        )
        assert result.exit_code == 0, result.output
        config = invoked_config(run_proxy)
        assert config.log_dir == Path(tmp_path)
        assert config.log_level == "DEBUG"
        assert config.call_log is True
        assert config.summarization.enabled is False
        run_proxy.configure_logging.assert_called_once_with("DEBUG", Path(tmp_path))

    def test_no_log_file(self, runner, run_proxy):
        result = runner.invoke(main, ["proxy", "--no-log-file"])
        assert result.exit_code == 0, result.output
        assert invoked_config(run_proxy).log_dir is None

    def test_environment_config(self, runner, run_proxy):
        result = runner.invoke(
            main, ["proxy"], env={"SLIM_MCP_ON_FAILURE": "passthrough", "SLIM_MCP_MODEL": "opus"}
        )
        assert result.exit_code == 0, result.output
        config = invoked_config(run_proxy)
        assert config.summarization.on_failure == "passthrough"
        assert config.summarizer.model == "opus"

    def test_invalid_environment(self, runner, run_proxy):
        result = runner.invoke(main, ["proxy"], env={"SLIM_MCP_ON_FAILURE": "ignore"})
        assert result.exit_code == 1
        assert "Invalid on_failure" in result.output
        assert not run_proxy.called

    def test_upstream_exit_code_propagated(self, runner, run_proxy):
        run_proxy.return_value = 3
        result = runner.invoke(main, ["proxy"])
        assert result.exit_code == 3

    def test_spawn_failure(self, runner, run_proxy):
        run_proxy.side_effect = FileNotFoundError("npx")
        result = runner.invoke(main, ["proxy"])
        assert result.exit_code == 1
        assert "Could not start upstream server" in result.output
