from .main import print_debug, print_error, print_log, print_warning
from .types import LogData, LogLevels
