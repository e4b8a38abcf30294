import threading
from collections import deque
from typing import BinaryIO, Protocol

from rich.markup import escape

from execfork_common.utils import print_debug, print_log
from .errors import ExecForkError


class ByteSink(Protocol):
    def write(self, data: bytes) -> int:
        ...

    def flush(self) -> None:
        ...

    def close(self) -> None:
        ...


def safe_read(stream: BinaryIO) -> bytes:
    """Read a single byte, treating a stream closed under the reader as end of stream."""
    try:
        return stream.read(1)
    except ValueError:
        if stream.closed:
            return b""

        raise


class LogLineWriter:
    """Byte sink sending each complete line to the console log, tagged with ``identifier``."""

    def __init__(self, identifier: str, *, encoding: str = "utf-8"):
        self.identifier = identifier
        self.encoding = encoding

        self._buffer = bytearray()
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            self._buffer.extend(data)

            while (idx := self._buffer.find(b"\n")) >= 0:
                line = bytes(self._buffer[:idx])
                del self._buffer[:idx + 1]
                self._emit(line)

        return len(data)

    def flush(self) -> None:
        # Lines are only emitted once complete
        pass

    def close(self) -> None:
        with self._lock:
            if self._buffer:
                self._emit(bytes(self._buffer))
                self._buffer.clear()

    def _emit(self, line: bytes):
        text = line.decode(self.encoding, errors="replace").rstrip("\r")
        print_log(escape(text), identifier=self.identifier)


class StreamPipe:
    """
    Copies ``stream`` to ``output`` on a background thread.

    Call ``wait_for_pattern()`` to block until ``pattern`` is seen in the copied bytes.
    ``stream`` and ``output`` are closed once ``stream`` reaches its end.
    """

    def __init__(
        self, stream: BinaryIO, output: ByteSink, pattern: str | None = None, *,
        option_name: str = "wait_for_output",
    ):
        self.stream = stream
        self.output = output
        self.pattern = pattern
        self.option_name = option_name

        self._pattern_bytes: bytes = pattern.encode("utf-8") if pattern else b""
        self._pattern_found = threading.Event()
        if not self._pattern_bytes:
            self._pattern_found.set()

        self._window: deque[int] = deque(maxlen=len(self._pattern_bytes) or None)
        self._thread = threading.Thread(target=self._copy, daemon=True)
        self._thread.start()

    def _copy(self):
        try:
            while byte := safe_read(self.stream):
                self.output.write(byte)
                self.output.flush()

                if not self._pattern_found.is_set():
                    self._check_pattern(byte[0])
        finally:
            self.close()

    def _check_pattern(self, byte: int):
        self._window.append(byte)

        if len(self._window) < len(self._pattern_bytes):
            return

        if bytes(self._window) == self._pattern_bytes:
            print_debug(f"Pattern `{escape(self.pattern)}` found")
            self._pattern_found.set()

    @property
    def pattern_found(self) -> bool:
        return self._pattern_found.is_set()

    def wait_for_pattern(self, timeout_sec: float | None = None) -> None:
        """Block until the pattern has been seen, for at most ``timeout_sec`` if given."""
        if not self._pattern_found.wait(timeout_sec):
            raise ExecForkError(f"The `{self.option_name}` pattern did not appear before timeout was reached.")

    def join(self, timeout_sec: float | None = None) -> None:
        self._thread.join(timeout_sec)

    def close(self):
        self.output.close()
        self.stream.close()
