import time
from dataclasses import dataclass

import httpx
from rich.markup import escape

from execfork_common.const import PROBE_CONNECT_TIMEOUT_MS, PROBE_EXPECTED_BODY, PROBE_READ_TIMEOUT_MS, PROBE_URL
from execfork_common.utils import print_log, print_warning
from .errors import ProbeMismatchError, ProbeTransportError


@dataclass(kw_only=True, frozen=True)
class ProbeResult:
    url: str
    status_code: int
    body: str
    elapsed_sec: float


@dataclass(kw_only=True)
class PingProbe:
    """
    Checks that a bare ``GET url`` answers with ``expected`` as its body, ignoring surrounding whitespace.

    One attempt is made. Failing to get a response raises ``ProbeTransportError``,
    getting another body raises ``ProbeMismatchError``.
    """
    url: str = PROBE_URL
    connect_timeout_ms: int = PROBE_CONNECT_TIMEOUT_MS
    read_timeout_ms: int = PROBE_READ_TIMEOUT_MS
    expected: str = PROBE_EXPECTED_BODY

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_timeout_ms / 1000, connect=self.connect_timeout_ms / 1000)

    def fetch(self) -> ProbeResult:
        start_sec = time.perf_counter()

        try:
            # Proxy settings from the environment must not reroute a local probe
            with httpx.Client(timeout=self.timeout, trust_env=False) as client:
                response = client.get(self.url)
        except httpx.TransportError as ex:
            raise ProbeTransportError(f"Request to {self.url} failed: {ex!r}") from ex

        return ProbeResult(
            url=self.url,
            status_code=response.status_code,
            body=response.text,
            elapsed_sec=time.perf_counter() - start_sec,
        )

    def check(self) -> ProbeResult:
        result = self.fetch()
        actual = result.body.strip()

        if actual != self.expected:
            print_warning(
                f"Probe of [blue]{escape(self.url)}[/] got {escape(repr(actual))} "
                f"instead of {escape(repr(self.expected))} (HTTP {result.status_code})"
            )
            raise ProbeMismatchError(url=self.url, expected=self.expected, actual=actual)

        print_log(
            f"Probe of [blue]{escape(self.url)}[/] passed in {result.elapsed_sec * 1000:.0f} ms "
            f"(HTTP {result.status_code})"
        )

        return result


def check_ping(
    url: str = PROBE_URL, *,
    connect_timeout_ms: int = PROBE_CONNECT_TIMEOUT_MS,
    read_timeout_ms: int = PROBE_READ_TIMEOUT_MS,
    expected: str = PROBE_EXPECTED_BODY,
) -> ProbeResult:
    probe = PingProbe(
        url=url, connect_timeout_ms=connect_timeout_ms, read_timeout_ms=read_timeout_ms, expected=expected,
    )

    return probe.check()
