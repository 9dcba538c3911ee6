import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

import requests
from click.testing import CliRunner

from main import cli


def make_response(status_code, data):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = data
    resp.text = str(data)
    return resp


class TestRunCommand:
    def test_prints_result(self, tmp_path):
        script = tmp_path / "script.py"
        script.write_text("return 1 + 1")

        with patch("requests.post", return_value=make_response(200, {"result": 2})) as post:
            result = CliRunner().invoke(cli, ["run", str(script), "--server", "http://runner:8080/"])

        assert result.exit_code == 0
        assert "2" in result.output
        post.assert_called_once_with(
            "http://runner:8080/execute-script",
            json={"script": "return 1 + 1"},
            timeout=None,
        )

    def test_reads_stdin(self):
        with patch("requests.post", return_value=make_response(200, {"result": None})) as post:
            result = CliRunner().invoke(cli, ["run", "-"], input="return")

        assert result.exit_code == 0
        assert post.call_args.kwargs["json"] == {"script": "return"}

    def test_error_exits_nonzero(self, tmp_path):
        script = tmp_path / "script.py"
        script.write_text("raise Exception('boom')")
        response = make_response(500, {"error": "Script execution failed: boom"})

        with patch("requests.post", return_value=response):
            result = CliRunner().invoke(cli, ["run", str(script)])

        assert result.exit_code == 1
        assert "Script execution failed: boom" in result.output

    def test_server_not_running(self, tmp_path):
        script = tmp_path / "script.py"
        script.write_text("return 1")

        with patch("requests.post", side_effect=requests.ConnectionError()):
            result = CliRunner().invoke(cli, ["run", str(script)])

        assert result.exit_code == 1
        assert "Server not reachable" in result.output


    def test_request_timeout(self, tmp_path):
        script = tmp_path / "script.py"
        script.write_text("return 1")

        with patch("requests.post", side_effect=requests.ReadTimeout()):
            result = CliRunner().invoke(cli, ["run", str(script), "--timeout", "2"])

        assert result.exit_code == 1
        assert "No response" in result.output

    def test_rejects_non_positive_timeout(self, tmp_path):
        script = tmp_path / "script.py"
        script.write_text("return 1")

        with patch("requests.post") as post:
            result = CliRunner().invoke(cli, ["run", str(script), "--timeout", "0"])

        assert result.exit_code == 2
        post.assert_not_called()


class TestHealthCommand:
    def test_prints_table(self):
        data = {"status": "ok", "mode": "cdp", "cdp_endpoint": "http://localhost:9222", "script_timeout": None}
        with patch("requests.get", return_value=make_response(200, data)):
            result = CliRunner().invoke(cli, ["health"])

        assert result.exit_code == 0
        assert "cdp" in result.output
        assert "http://localhost:9222" in result.output

    def test_non_json_response(self):
        response = make_response(502, None)
        response.json.side_effect = ValueError("Expecting value")
        response.text = "Bad Gateway"
        with patch("requests.get", return_value=response):
            result = CliRunner().invoke(cli, ["health"])

        assert result.exit_code == 1
        assert "Bad Gateway" in result.output

    def test_server_not_running(self):
        with patch("requests.get", side_effect=requests.ConnectionError()):
            result = CliRunner().invoke(cli, ["health"])

        assert result.exit_code == 1
        assert "Server not running" in result.output


class TestStartCommand:
    def test_applies_options(self):
        with patch("script_runner.server.run_server") as run_server, \
                patch("script_runner.logging_config.setup_logging"):
            result = CliRunner().invoke(
                cli,
                ["start", "--port", "9001", "--local", "--timeout", "15"],
                env={"USE_LOCAL_PLAYWRIGHT": None, "PORT": None},
            )

        assert result.exit_code == 0, result.output
        config = run_server.call_args.args[0]
        assert config.port == 9001
        assert config.use_local_playwright is True
        assert config.script_timeout == 15.0
        assert "Local Launch" in result.output

    def test_bad_environment(self):
        with patch("script_runner.server.run_server") as run_server, \
                patch("script_runner.logging_config.setup_logging"):
            result = CliRunner().invoke(cli, ["start"], env={"PORT": "not-a-port"})

        assert result.exit_code == 2
        assert "Configuration error" in result.output
        run_server.assert_not_called()

    def test_rejects_negative_timeout(self):
        with patch("script_runner.server.run_server") as run_server, \
                patch("script_runner.logging_config.setup_logging"):
            result = CliRunner().invoke(cli, ["start", "--timeout", "-1"])

        assert result.exit_code == 2
        run_server.assert_not_called()

    def test_zero_timeout_means_unbounded(self):
        with patch("script_runner.server.run_server") as run_server, \
                patch("script_runner.logging_config.setup_logging"):
            result = CliRunner().invoke(cli, ["start", "--timeout", "0"], env={"SCRIPT_TIMEOUT_SECONDS": None})

        assert result.exit_code == 0, result.output
        assert run_server.call_args.args[0].script_timeout is None

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_rejects_out_of_range_port(self, port):
        with patch("script_runner.server.run_server") as run_server, \
                patch("script_runner.logging_config.setup_logging"):
            result = CliRunner().invoke(cli, ["start", "--port", port])

        assert result.exit_code == 2
        run_server.assert_not_called()
