import atexit
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import psutil
from rich.markup import escape

from execfork_common.const import FORK_FORCE_KILL, FORK_KILL_DESCENDANTS, FORK_STOP_WAIT_SEC, FORK_TIMEOUT_SEC
from execfork_common.utils import ExecTimer, print_log, print_warning
from ..errors import ExecForkError
from ..pipe import ByteSink, LogLineWriter, StreamPipe
from ..port import wait_for_port_open
from ..registry import default_registry

if TYPE_CHECKING:
    from ..join import ExecJoin


@dataclass(kw_only=True, eq=False)
class ExecForkBase(ABC):
    """
    Launches an executable as a background process, optionally waiting until it prints a pattern
    or opens a local port.

    The process is stopped by ``stop()``, by the paired ``ExecJoin``, or when the interpreter exits.
    """
    name: str
    args: list[Any] = field(default_factory=list)
    working_dir: str | None = None
    environment: dict[str, Any] = field(default_factory=dict)

    # Output is logged line by line if not given
    standard_output: str | None = None
    # Stderr is merged into stdout if not given
    error_output: str | None = None

    wait_for_port: int | None = None
    wait_for_output: str | None = None
    wait_for_error: str | None = None
    # Applies to each wait separately
    timeout_sec: float = FORK_TIMEOUT_SEC

    force_kill: bool = FORK_FORCE_KILL
    kill_descendants: bool = FORK_KILL_DESCENDANTS

    process: subprocess.Popen | None = field(default=None, init=False, repr=False)
    join: "ExecJoin | None" = field(default=None, init=False, repr=False)

    _pipes: list[StreamPipe] = field(default_factory=list, init=False, repr=False)
    _exit_hook_registered: bool = field(default=False, init=False, repr=False)

    @abstractmethod
    def get_process_args(self) -> list[str]:
        raise NotImplementedError()

    def get_process_env(self) -> dict[str, str]:
        environment = os.environ.copy()
        environment.update({key: str(value) for key, value in self.environment.items()})

        return environment

    @property
    def is_alive(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self) -> subprocess.Popen:
        if self.process is not None:
            raise ExecForkError(f"{type(self).__name__} `{self.name}` has already been started")

        if self.wait_for_error and not self.error_output:
            raise ExecForkError(
                f"{type(self).__name__} `{self.name}` sets `wait_for_error` without `error_output`. "
                f"Stderr is merged into stdout in that case, use `wait_for_output` instead."
            )

        if self.join is None:
            default_registry.add(self)

        process_args = self.get_process_args()
        process_env = self.get_process_env()
        working_dir = self.working_dir or os.getcwd()
        os.makedirs(working_dir, exist_ok=True)

        print_log(f"Running process: `{escape(shlex.join(process_args))}`.", identifier=self.name)

        with ExecTimer(f"Start {self.name}"):
            self.process = subprocess.Popen(
                process_args,
                cwd=working_dir,
                env=process_env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if self.error_output else subprocess.STDOUT,
            )

            try:
                self._install_pipes_and_wait(self.process)

                if self.wait_for_port is not None:
                    wait_for_port_open(self.wait_for_port, self.timeout_sec, self.process)
            except BaseException:
                self.stop()
                raise

        if not self._exit_hook_registered:
            atexit.register(self.stop)
            self._exit_hook_registered = True

        return self.process

    def _install_pipes_and_wait(self, process: subprocess.Popen):
        out_pipe = StreamPipe(process.stdout, self._output_sink(self.standard_output), self.wait_for_output)
        self._pipes.append(out_pipe)

        if self.error_output:
            err_pipe = StreamPipe(
                process.stderr, self._output_sink(self.error_output), self.wait_for_error,
                option_name="wait_for_error",
            )
            self._pipes.append(err_pipe)
            err_pipe.wait_for_pattern(self.timeout_sec)

        out_pipe.wait_for_pattern(self.timeout_sec)

    def _output_sink(self, path: str | None) -> ByteSink:
        if not path:
            return LogLineWriter(self.name)

        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        return open(path, "wb")

    def stop(self) -> None:
        """Stop the process this fork has spawned. Does nothing if it was never started."""
        process = self.process
        if process is None:
            return

        try:
            if self.kill_descendants:
                self._stop_descendants(process)
        except Exception as ex:
            print_warning(f"Failed to stop descendants: {escape(repr(ex))}", identifier=self.name)

        self._stop_root_process(process)

        for pipe in self._pipes:
            pipe.join(FORK_STOP_WAIT_SEC)

        if self._exit_hook_registered:
            atexit.unregister(self.stop)
            self._exit_hook_registered = False

    def _stop_root_process(self, process: subprocess.Popen):
        if process.poll() is None and not self.force_kill:
            process.terminate()

            try:
                process.wait(FORK_STOP_WAIT_SEC)
            except subprocess.TimeoutExpired:
                print_warning(f"Process did not terminate in {FORK_STOP_WAIT_SEC} s, killing it", identifier=self.name)

        if process.poll() is None:
            process.kill()
            process.wait(FORK_STOP_WAIT_SEC)

    def _stop_descendants(self, process: subprocess.Popen):
        if process.poll() is not None:
            return

        children = psutil.Process(process.pid).children(recursive=True)

        for child in children:
            try:
                if self.force_kill:
                    child.kill()
                else:
                    child.terminate()
            except psutil.NoSuchProcess:
                continue

        _, alive = psutil.wait_procs(children, timeout=FORK_STOP_WAIT_SEC)

        for child in alive:
            child.kill()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
