"""
Pytest helpers keeping a fork running for the duration of a fixture scope.

Example, in ``conftest.py``::

    ping_server = fork_fixture(
        lambda: PythonExecFork(name="start_ping_server", script="server.py", wait_for_port=9201),
        scope="module",
    )

The fixture takes the name it is assigned to, unless ``name`` is given.
"""
from typing import Callable, Iterator, Literal, TypeAlias

import pytest

from .fork import ExecForkBase

FixtureScope: TypeAlias = Literal["session", "package", "module", "class", "function"]


def fork_fixture(
    factory: Callable[[], ExecForkBase], *,
    scope: FixtureScope = "session",
    name: str | None = None,
):
    @pytest.fixture(scope=scope, name=name)
    def _fork_fixture() -> Iterator[ExecForkBase]:
        fork = factory()
        fork.start()

        try:
            yield fork
        finally:
            fork.stop()

    return _fork_fixture
