import socket
import time
from typing import Protocol

from execfork_common.const import FORK_PORT_POLL_INTERVAL_SEC
from .errors import ExecForkError

_LOOPBACK = "127.0.0.1"


class PollableProcess(Protocol):
    def poll(self) -> int | None:
        ...


def find_open_port() -> int:
    """
    Find a random port that is available to listen on.

    The port is released before returning, so another process may take it in the meantime.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((_LOOPBACK, 0))
        return sock.getsockname()[1]


def is_port_open(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.connect((_LOOPBACK, port))
        except ConnectionRefusedError:
            return False

        return True


def wait_for_port_open(
    port: int, timeout_sec: float, process: PollableProcess, *,
    poll_interval_sec: float = FORK_PORT_POLL_INTERVAL_SEC,
) -> None:
    """
    Wait until ``port`` accepts connections locally, polling every ``poll_interval_sec``.

    :raises ExecForkError: ``process`` exited before the port opened, or ``timeout_sec`` elapsed,
        whichever happens first
    """
    wait_until = time.monotonic() + timeout_sec

    while time.monotonic() < wait_until:
        time.sleep(poll_interval_sec)

        if process.poll() is not None:
            raise ExecForkError(f"Process died before port {port} was opened.")

        if is_port_open(port):
            return

    raise ExecForkError(f"Timed out waiting for port {port} to be opened.")
