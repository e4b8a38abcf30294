import threading
import time
from datetime import datetime

from rich.console import Console, Text
from rich.markup import escape

from execfork_common.const import LOG_SUPPRESS_WARNINGS, rich_console, rich_console_error
from execfork_common.env import APP_NAME, DEVELOPMENT_MODE
from .logger import log_message_via_logger
from .types import LogData, LogLevels


def _print_console(
    console: Console, level: LogLevels, message: str, *,
    timestamp_color: str, identifier: str | None,
):
    epoch_ms = int(time.time() * 1000)
    log_data: LogData = {
        "application": APP_NAME,
        "level": level,
        "timestamp": epoch_ms,
        "threadId": threading.get_ident(),
        "message": Text.from_markup(message).plain,
    }

    if identifier:
        log_data["identifier"] = identifier

    log_message_via_logger(level, log_data)

    if level == "DEBUG" and not DEVELOPMENT_MODE:
        return

    timestamp = datetime.fromtimestamp(epoch_ms / 1000).isoformat(timespec="milliseconds")
    message = f"{level:>8} [{timestamp_color}]{timestamp}[/] " \
              f"\\[{log_data['threadId']:>6}]: {f'[magenta]{escape(identifier)}[/] ' if identifier else ''}{message}"

    if DEVELOPMENT_MODE:
        message = f"[bold yellow]-DEV-[/] {message}"

    console.print(message, soft_wrap=True)  # Disable soft wrapping


def print_log(message: str, *, identifier: str | None = None):
    _print_console(rich_console, "INFO", message, timestamp_color="green", identifier=identifier)


def print_warning(message: str, *, force: bool = False, identifier: str | None = None):
    if LOG_SUPPRESS_WARNINGS and not force:
        return

    _print_console(rich_console, "WARNING", f"[yellow]{message}[/]", timestamp_color="yellow", identifier=identifier)


def print_debug(message: str, *, identifier: str | None = None):
    _print_console(rich_console, "DEBUG", f"[grey50]{message}[/]", timestamp_color="grey50", identifier=identifier)


def print_error(message: str, *, identifier: str | None = None):
    _print_console(rich_console_error, "ERROR", message, timestamp_color="red", identifier=identifier)
