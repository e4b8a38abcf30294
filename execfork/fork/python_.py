import os
import os.path
import sys
from dataclasses import dataclass, field

from ..errors import ExecForkError
from ._base import ExecForkBase

# Windows: https://learn.microsoft.com/en-us/windows/win32/api/processthreadsapi/nf-processthreadsapi-createprocessa
# Others: `MAX_ARG_STRLEN`, see https://man7.org/linux/man-pages/man2/execve.2.html
MAX_COMMAND_LINE_LENGTH: int = 32767 if os.name == "nt" else 131072


@dataclass(kw_only=True, eq=False)
class PythonExecFork(ExecForkBase):
    """
    Runs a Python module (``python -m``) or script in a separate interpreter.

    Output is unbuffered unless ``PYTHONUNBUFFERED`` is set in ``environment``,
    so ``wait_for_output`` sees lines as soon as they are printed.
    """
    module: str | None = None
    script: str | None = None

    interpreter: str = field(default_factory=lambda: sys.executable)
    interpreter_args: list[str] = field(default_factory=list)
    # Prepended to `PYTHONPATH` of the process
    python_path: list[str] = field(default_factory=list)

    def __post_init__(self):
        if (self.module is None) == (self.script is None):
            raise ExecForkError(f"Exactly one of `module` or `script` must be given for `{self.name}`")

    def get_process_args(self) -> list[str]:
        process_args = [self.interpreter, *self.interpreter_args]

        if self.module is not None:
            process_args.extend(["-m", self.module])
        else:
            process_args.append(self.script)

        process_args.extend(map(str, self.args))

        if len(" ".join(process_args)) > MAX_COMMAND_LINE_LENGTH:
            raise ExecForkError(
                f"Command line of `{self.name}` exceeds {MAX_COMMAND_LINE_LENGTH} characters"
            )

        return process_args

    def get_process_env(self) -> dict[str, str]:
        environment = super().get_process_env()
        environment.setdefault("PYTHONUNBUFFERED", "1")

        if self.python_path:
            entries = [os.path.abspath(entry) for entry in self.python_path]
            if existing := environment.get("PYTHONPATH"):
                entries.append(existing)

            environment["PYTHONPATH"] = os.pathsep.join(entries)

        return environment
