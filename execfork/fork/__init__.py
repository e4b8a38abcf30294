from ._base import ExecForkBase
from .exec_ import ExecFork
from .python_ import MAX_COMMAND_LINE_LENGTH, PythonExecFork
