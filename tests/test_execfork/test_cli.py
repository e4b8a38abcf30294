import sys

import httpx
import respx
from typer.testing import CliRunner

from execfork.cli import EXIT_PROBE_MISMATCH, EXIT_PROBE_TRANSPORT, EXIT_START_FAILED, app

runner = CliRunner()

URL = "http://localhost:9201/"


@respx.mock
def test_ping_passes():
    respx.get(URL).mock(return_value=httpx.Response(200, text="PING\n"))

    result = runner.invoke(app, ["ping"])

    assert result.exit_code == 0


@respx.mock
def test_ping_mismatch():
    respx.get(URL).mock(return_value=httpx.Response(200, text="PONG\n"))

    result = runner.invoke(app, ["ping", "--url", URL])

    assert result.exit_code == EXIT_PROBE_MISMATCH


def test_ping_unreachable(free_port):
    result = runner.invoke(app, ["ping", "--url", f"http://127.0.0.1:{free_port}/", "--connect-timeout-ms", "500"])

    assert result.exit_code == EXIT_PROBE_TRANSPORT


def test_free_port():
    result = runner.invoke(app, ["free-port"])

    assert result.exit_code == 0
    assert 1024 <= int(result.stdout.strip()) <= 65535


def test_run_and_probe(free_port, ping_server_script):
    result = runner.invoke(app, [
        "run", "--name", "start_cli_ping", "--wait-for-port", str(free_port),
        "--probe", "--probe-url", f"http://127.0.0.1:{free_port}/",
        "--", sys.executable, ping_server_script, str(free_port),
    ])

    assert result.exit_code == 0


def test_run_and_probe_mismatch(free_port, ping_server_script):
    result = runner.invoke(app, [
        "run", "--name", "start_cli_pong", "--wait-for-port", str(free_port),
        "--probe", "--probe-url", f"http://127.0.0.1:{free_port}/",
        "--", sys.executable, ping_server_script, str(free_port), "PONG",
    ])

    assert result.exit_code == EXIT_PROBE_MISMATCH


def test_run_start_failure(free_port):
    result = runner.invoke(app, [
        "run", "--name", "start_cli_dying", "--wait-for-port", str(free_port), "--timeout-sec", "5",
        "--", sys.executable, "-c", "pass",
    ])

    assert result.exit_code == EXIT_START_FAILED


def test_run_missing_executable():
    result = runner.invoke(app, ["run", "--name", "start_cli_missing", "--", "/nonexistent/executable"])

    assert result.exit_code == EXIT_START_FAILED


def test_config_prints_sections():
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "probe:" in result.output
    assert "connect-timeout-ms" in result.output
