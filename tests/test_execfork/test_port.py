import socket
import threading
import time

import pytest

from execfork import ExecForkError, find_open_port, is_port_open, wait_for_port_open


class StubProcess:
    def __init__(self, alive: bool = True):
        self.alive = alive

    def poll(self) -> int | None:
        return None if self.alive else 0


def test_find_open_port():
    port = find_open_port()

    assert 1024 <= port <= 65535
    assert not is_port_open(port)


def test_is_port_open_with_listener():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)

        assert is_port_open(sock.getsockname()[1])


def test_wait_for_port_open_timeout(free_port):
    start_sec = time.monotonic()

    with pytest.raises(ExecForkError) as ex_info:
        wait_for_port_open(free_port, 1, StubProcess())

    assert str(ex_info.value) == f"Timed out waiting for port {free_port} to be opened."
    assert time.monotonic() - start_sec < 5


def test_wait_for_port_open_process_died(free_port):
    start_sec = time.monotonic()

    with pytest.raises(ExecForkError) as ex_info:
        wait_for_port_open(free_port, 60, StubProcess(alive=False))

    assert str(ex_info.value) == f"Process died before port {free_port} was opened."
    assert time.monotonic() - start_sec < 2


def test_wait_for_port_open_successfully(free_port):
    accepted = threading.Event()

    def serve():
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("127.0.0.1", free_port))
            sock.listen(1)
            conn, _ = sock.accept()
            conn.close()
            accepted.set()

    threading.Thread(target=serve, daemon=True).start()

    wait_for_port_open(free_port, 60, StubProcess())

    assert accepted.wait(1)
