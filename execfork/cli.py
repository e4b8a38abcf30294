from typing import Optional

import typer
from rich.markup import escape

from execfork_common.const import (
    FORK_FORCE_KILL, FORK_KILL_DESCENDANTS, FORK_TIMEOUT_SEC,
    PROBE_CONNECT_TIMEOUT_MS, PROBE_EXPECTED_BODY, PROBE_READ_TIMEOUT_MS, PROBE_URL,
    print_configs,
)
from execfork_common.utils import print_error
from .errors import ExecForkError, ProbeMismatchError, ProbeTransportError
from .fork import ExecFork
from .port import find_open_port
from .probe import PingProbe

EXIT_PROBE_MISMATCH = 1
EXIT_PROBE_TRANSPORT = 2
EXIT_START_FAILED = 3

app = typer.Typer(help="Run processes in the background and probe them", no_args_is_help=True)


def _run_probe(probe: PingProbe) -> None:
    try:
        probe.check()
    except ProbeMismatchError as ex:
        print_error(escape(str(ex)))
        raise typer.Exit(code=EXIT_PROBE_MISMATCH) from ex
    except ProbeTransportError as ex:
        print_error(escape(str(ex)))
        raise typer.Exit(code=EXIT_PROBE_TRANSPORT) from ex


@app.command()
def ping(
    url: str = typer.Option(PROBE_URL, help="URL to send the GET request to"),
    connect_timeout_ms: int = typer.Option(PROBE_CONNECT_TIMEOUT_MS, min=1, help="Connect timeout"),
    read_timeout_ms: int = typer.Option(PROBE_READ_TIMEOUT_MS, min=1, help="Socket read timeout"),
    expected: str = typer.Option(PROBE_EXPECTED_BODY, help="Expected response body, whitespace trimmed"),
) -> None:
    """Check that URL answers with the expected body."""
    _run_probe(PingProbe(
        url=url, connect_timeout_ms=connect_timeout_ms, read_timeout_ms=read_timeout_ms, expected=expected,
    ))


@app.command(context_settings={"allow_interspersed_args": False})
def run(
    command: list[str] = typer.Argument(..., help="Command to run, put it after `--`"),
    name: str = typer.Option("start", help="Fork name, used in logs"),
    working_dir: Optional[str] = typer.Option(None, help="Working directory of the process"),
    wait_for_port: Optional[int] = typer.Option(None, help="Wait until this local port is open"),
    wait_for_output: Optional[str] = typer.Option(None, help="Wait until stdout contains this text"),
    wait_for_error: Optional[str] = typer.Option(None, help="Wait until stderr contains this text"),
    stdout: Optional[str] = typer.Option(None, help="File to write stdout to"),
    stderr: Optional[str] = typer.Option(None, help="File to write stderr to"),
    timeout_sec: float = typer.Option(FORK_TIMEOUT_SEC, min=0, help="Limit of each wait"),
    force_kill: bool = typer.Option(FORK_FORCE_KILL, help="Kill instead of terminating"),
    kill_descendants: bool = typer.Option(FORK_KILL_DESCENDANTS, help="Stop child processes too"),
    probe: bool = typer.Option(False, help="Probe the process once it is ready"),
    probe_url: str = typer.Option(PROBE_URL, help="URL to probe"),
) -> None:
    """Start COMMAND, wait until it is ready, optionally probe it, then stop it."""
    fork = ExecFork(
        name=name,
        executable=command[0],
        args=command[1:],
        working_dir=working_dir,
        standard_output=stdout,
        error_output=stderr,
        wait_for_port=wait_for_port,
        wait_for_output=wait_for_output,
        wait_for_error=wait_for_error,
        timeout_sec=timeout_sec,
        force_kill=force_kill,
        kill_descendants=kill_descendants,
    )

    try:
        fork.start()
    except (ExecForkError, OSError) as ex:
        print_error(f"Failed to start `{escape(name)}`: {escape(str(ex))}")
        raise typer.Exit(code=EXIT_START_FAILED) from ex

    try:
        if probe:
            _run_probe(PingProbe(url=probe_url))
    finally:
        fork.join.run()


@app.command("free-port")
def free_port() -> None:
    """Print a local port that is free to listen on."""
    typer.echo(find_open_port())


@app.command("config")
def show_config() -> None:
    """Print the configuration in effect, overrides included."""
    print_configs()
