import os.path
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Iterator

import pytest

from execfork import ExecForkRegistry, find_open_port

PATH_FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


@pytest.fixture
def free_port() -> int:
    return find_open_port()


@pytest.fixture
def ping_server_script() -> str:
    return os.path.join(PATH_FIXTURES, "ping_server.py")


@pytest.fixture
def registry() -> ExecForkRegistry:
    return ExecForkRegistry()


@pytest.fixture
def http_server() -> Iterator[Callable[[str], str]]:
    """Starts in-process HTTP servers answering every GET with the given body. Returns the server URL."""
    servers: list[ThreadingHTTPServer] = []

    def start(body: str) -> str:
        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                payload = body.encode("utf-8")

                self.send_response(200)
                self.send_header("Content-Type", "text/plain")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, format, *args):
                pass

        server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        servers.append(server)
        threading.Thread(target=server.serve_forever, daemon=True).start()

        return f"http://127.0.0.1:{server.server_address[1]}/"

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def silent_listener() -> Iterator[int]:
    """Port of a socket accepting connections (via the backlog) that never answers."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(8)

        yield sock.getsockname()[1]
