from .log import print_debug, print_error, print_log, print_warning
from .timer import ExecTimer
