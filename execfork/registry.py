import atexit
import threading
from typing import TYPE_CHECKING

from rich.markup import escape

from execfork_common.utils import print_debug, print_error
from .errors import ExecForkError
from .join import ExecJoin

if TYPE_CHECKING:
    from .fork import ExecForkBase


class ExecForkRegistry:
    """
    Pairs forks with their joins, and stops all of them when the interpreter exits.

    A join name can only be taken by one live fork at a time. A fork that is not running
    gives its name up to the next fork registered under it.
    """

    def __init__(self):
        self._joins: dict[str, ExecJoin] = {}
        self._lock: threading.Lock = threading.Lock()
        self._exit_hook_registered: bool = False

    @property
    def forks(self) -> list["ExecForkBase"]:
        with self._lock:
            return [join.fork for join in self._joins.values()]

    def add(self, fork: "ExecForkBase") -> ExecJoin:
        with self._lock:
            if fork.join is not None and fork.join.registry is not self:
                raise ExecForkError(f"`{fork.name}` is already joined by `{fork.join.name}` of another registry")

            if fork.join is not None and self._joins.get(fork.join.name) is fork.join:
                return fork.join

            join = ExecJoin(fork, self)

            if (existing := self._joins.get(join.name)) and existing.fork.is_alive:
                raise ExecForkError(
                    f"Join `{join.name}` of `{fork.name}` is taken by the running fork `{existing.fork.name}`"
                )

            fork.join = join
            self._joins[join.name] = join

            if not self._exit_hook_registered:
                atexit.register(self.stop_all)
                self._exit_hook_registered = True

        print_debug(f"Registered `{fork.name}` with join `{join.name}`")

        return join

    def join_for(self, name: str) -> ExecJoin:
        with self._lock:
            return self._joins[name]

    def stop_all(self) -> None:
        with self._lock:
            joins = list(self._joins.values())

        for join in joins:
            try:
                join.fork.stop()
            except Exception as ex:
                print_error(
                    f"Error stopping {type(join.fork).__name__} fork `{join.fork.name}`: {escape(repr(ex))}",
                    identifier=join.name,
                )


default_registry = ExecForkRegistry()
