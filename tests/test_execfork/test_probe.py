import time

import httpx
import pytest
import respx

from execfork import PingProbe, ProbeMismatchError, ProbeTransportError, check_ping

URL = "http://localhost:9201/"


@pytest.mark.parametrize("body", ["PING", "PING\n", "  PING  ", "\r\n\tPING\r\n"])
def test_probe_passes(http_server, body):
    url = http_server(body)

    result = check_ping(url)

    assert result.body == body
    assert result.status_code == 200
    assert result.url == url


def test_probe_defaults():
    probe = PingProbe()

    assert probe.url == URL
    assert probe.expected == "PING"
    assert probe.timeout.connect == 1.0
    assert probe.timeout.read == 1.0


@pytest.mark.parametrize("body", ["ping", "PONG", "", "PING PING"])
@respx.mock
def test_probe_mismatch(body):
    respx.get(URL).mock(return_value=httpx.Response(200, text=body))

    with pytest.raises(ProbeMismatchError) as ex_info:
        check_ping(URL)

    assert isinstance(ex_info.value, AssertionError)
    assert ex_info.value.expected == "PING"
    assert ex_info.value.actual == body.strip()
    assert repr("PING") in str(ex_info.value)


@respx.mock
def test_probe_sends_bare_get():
    route = respx.get(URL).mock(return_value=httpx.Response(200, text="PING\n"))

    check_ping(URL)

    request = route.calls.last.request
    assert request.method == "GET"
    assert request.content == b""
    assert request.url.query == b""


@respx.mock
def test_probe_outcome_ignores_status():
    respx.get(URL).mock(return_value=httpx.Response(503, text="PING"))

    assert check_ping(URL).status_code == 503


@respx.mock
def test_probe_custom_expected_body():
    respx.get("http://localhost:8000/health").mock(return_value=httpx.Response(200, text="OK\n"))

    check_ping("http://localhost:8000/health", expected="OK")


def test_probe_unreachable(free_port):
    start_sec = time.monotonic()

    with pytest.raises(ProbeTransportError) as ex_info:
        check_ping(f"http://127.0.0.1:{free_port}/")

    assert isinstance(ex_info.value.__cause__, httpx.ConnectError)
    assert time.monotonic() - start_sec < 2


def test_probe_unresponsive(silent_listener):
    start_sec = time.monotonic()

    with pytest.raises(ProbeTransportError) as ex_info:
        check_ping(f"http://127.0.0.1:{silent_listener}/", read_timeout_ms=300)

    assert isinstance(ex_info.value.__cause__, httpx.ReadTimeout)
    assert time.monotonic() - start_sec < 2


def test_probe_transport_error_is_not_assertion(free_port):
    with pytest.raises(ProbeTransportError) as ex_info:
        check_ping(f"http://127.0.0.1:{free_port}/")

    assert not isinstance(ex_info.value, AssertionError)
