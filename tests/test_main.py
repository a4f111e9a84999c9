"""Tests for CLI argument handling in main.py."""
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from airclip.config import ServerConfig
from airclip.main import main


class TestCLIArguments:
    """Tests for command-line argument validation."""

    def test_help_exits_with_code_0(self):
        """Test that --help exits cleanly with code 0."""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--local-only" in result.output
        assert "--logdir" in result.output

    def test_invalid_listen_address_exits_with_code_2(self):
        """Test that a non-IP --listen value gives a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, ["--listen", "my-host"])
        assert result.exit_code == 2
        assert "not a valid IP address" in result.output

    def test_port_out_of_range_exits_with_code_2(self):
        """Test that --port outside 1..65535 gives a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, ["--port", "70000"])
        assert result.exit_code == 2


class TestConfiguration:
    """Tests for building ServerConfig from options and environment."""

    def test_defaults(self, tmp_path):
        """Test default options produce the default configuration."""
        runner = CliRunner()
        with patch("airclip.main.configure_logging", return_value="x.log"), \
            patch("airclip.main._run", return_value=0) as mock_run:
            result = runner.invoke(main, [])

        assert result.exit_code == 0
        config = mock_run.call_args[0][0]
        assert config == ServerConfig()

    def test_options_are_passed_through(self, tmp_path):
        """Test every option lands in the immutable configuration."""
        runner = CliRunner()
        args = [
            "--listen", "192.168.1.5",
            "--port", "8080",
            "--token", "",
            "--no-local-only",
            "--no-cors",
            "--logdir", str(tmp_path),
        ]
        with patch("airclip.main.configure_logging", return_value="x.log") as mock_logging, \
            patch("airclip.main._run", return_value=0) as mock_run:
            result = runner.invoke(main, args)

        assert result.exit_code == 0
        assert mock_run.call_args[0][0] == ServerConfig(
            listen="192.168.1.5",
            port=8080,
            token="",
            local_only=False,
            cors=False,
            log_dir=str(tmp_path),
        )
        mock_logging.assert_called_once_with(str(tmp_path), False)

    def test_environment_variables(self):
        """Test AIRCLIP_* variables configure the server."""
        runner = CliRunner()
        env = {"AIRCLIP_PORT": "9999", "AIRCLIP_TOKEN": "s3cret", "AIRCLIP_CORS": "false"}
        with patch("airclip.main.configure_logging", return_value="x.log"), \
            patch("airclip.main._run", return_value=0) as mock_run:
            result = runner.invoke(main, [], env=env)

        assert result.exit_code == 0
        config = mock_run.call_args[0][0]
        assert config.port == 9999
        assert config.token == "s3cret"
        assert config.cors is False

    def test_run_exit_code_is_propagated(self):
        """Test the lifecycle exit code becomes the process exit code."""
        runner = CliRunner()
        with patch("airclip.main.configure_logging", return_value="x.log"), \
            patch("airclip.main._run", return_value=1):
            result = runner.invoke(main, [])
        assert result.exit_code == 1

    def test_log_file_failure_exits_with_code_1(self):
        """Test an unwritable log directory exits with code 1."""
        runner = CliRunner()
        with patch("airclip.main.configure_logging", side_effect=OSError("denied")), \
            patch("airclip.main._run") as mock_run:
            result = runner.invoke(main, [])
        assert result.exit_code == 1
        assert "Failed to open log file" in result.output
        mock_run.assert_not_called()


def test_run_logs_banner_and_starts_lifecycle(caplog):
    """Test _run logs the startup banner and runs the lifecycle."""
    import logging

    from airclip.main import _run

    config = ServerConfig(local_only=False)
    with patch("airclip.local_addresses.log_local_addresses") as mock_addresses, \
        patch("airclip.display.probe_display") as mock_probe, \
        patch("airclip.lifecycle.run_lifecycle", new_callable=MagicMock) as mock_lifecycle, \
        patch("asyncio.run", return_value=0) as mock_asyncio_run, \
        caplog.at_level(logging.INFO):
        code = _run(config, "/tmp/notification-server_x.log")

    assert code == 0
    assert "log file: /tmp/notification-server_x.log" in caplog.text
    assert "local-only protection disabled" in caplog.text
    mock_addresses.assert_called_once_with(9123)
    mock_probe.assert_called_once()
    mock_lifecycle.assert_called_once()
    mock_asyncio_run.assert_called_once_with(mock_lifecycle.return_value)
