from .errors import ExecForkError, ProbeMismatchError, ProbeTransportError
from .fork import ExecFork, ExecForkBase, PythonExecFork
from .join import ExecJoin, create_name_for
from .pipe import LogLineWriter, StreamPipe
from .port import find_open_port, is_port_open, wait_for_port_open
from .probe import PingProbe, ProbeResult, check_ping
from .registry import ExecForkRegistry, default_registry
