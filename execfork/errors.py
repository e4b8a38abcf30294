class ExecForkError(Exception):
    pass


class ProbeTransportError(ExecForkError):
    """The probe request did not complete: connection refused, DNS failure or a timeout."""


class ProbeMismatchError(AssertionError):
    def __init__(self, *, url: str, expected: str, actual: str):
        super().__init__(f"Unexpected response from {url}: expected {expected!r}, got {actual!r}")

        self.url = url
        self.expected = expected
        self.actual = actual
