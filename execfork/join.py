import re
from typing import TYPE_CHECKING

from execfork_common.utils import print_log

if TYPE_CHECKING:
    from .fork import ExecForkBase
    from .registry import ExecForkRegistry

# Checked in order, first match wins
_NAME_REPLACEMENTS: dict[str, str] = {
    "start": "stop",
    "Start": "Stop",
    "START": "STOP",

    "run": "stop",
    "Run": "Stop",
    "RUN": "STOP",

    "exec": "stop",
    "Exec": "Stop",
    "EXEC": "STOP",
}


def _has_word(name: str, word: str) -> bool:
    return name.startswith(word) or name.endswith(word)


def _replace_word(name: str, word: str, replacement: str) -> str:
    start_replaced = re.sub(f"^{re.escape(word)}", replacement, name)
    return re.sub(f"{re.escape(word)}$", replacement, start_replaced)


def create_name_for(fork_name: str) -> str:
    """
    Create a human-readable name for the join of the fork named ``fork_name``.

    ``startFoo`` -> ``stopFoo``, ``run_job`` -> ``stop_job``, ``execPoodleDaemon`` -> ``stopPoodleDaemon``,
    anything else gets ``_stop`` appended.
    """
    for word, replacement in _NAME_REPLACEMENTS.items():
        if _has_word(fork_name, word):
            return _replace_word(fork_name, word, replacement)

    return f"{fork_name}_stop"


class ExecJoin:
    """Stops its fork when run. Created by ``ExecForkRegistry.add()``."""

    def __init__(self, fork: "ExecForkBase", registry: "ExecForkRegistry | None" = None):
        self.fork = fork
        self.registry = registry
        self.name = create_name_for(fork.name)

    def run(self) -> None:
        print_log(f"Stopping `{type(self.fork).__name__}` fork `{self.fork.name}`.", identifier=self.name)
        self.fork.stop()

    def __repr__(self):
        return f"ExecJoin(name={self.name!r}, fork={self.fork.name!r})"
