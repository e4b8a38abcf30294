import logging

import yaml
from rich.console import Console

from .config import get_config

rich_console = Console()
rich_console_error = Console(stderr=True, style="bold red")

py_logger = logging.getLogger("ExecFork")

config = get_config()


def print_configs():
    # Print current config
    rich_console.print("[cyan]--- Config content ---[/]")
    rich_console.print(yaml.dump(config, default_flow_style=False))


# region Log

_CONFIG_LOG = config["log"]

LOG_SUPPRESS_WARNINGS: bool = _CONFIG_LOG["suppress-warnings"]
LOG_TO_DIR: str | None = _CONFIG_LOG.get("output-directory")

# endregion

# region Fork

_CONFIG_FORK = config["fork"]

FORK_TIMEOUT_SEC: float = _CONFIG_FORK["timeout-sec"]
FORK_PORT_POLL_INTERVAL_SEC: float = _CONFIG_FORK["port-poll-interval-ms"] / 1000
FORK_STOP_WAIT_SEC: float = _CONFIG_FORK["stop-wait-sec"]
FORK_KILL_DESCENDANTS: bool = _CONFIG_FORK["kill-descendants"]
FORK_FORCE_KILL: bool = _CONFIG_FORK["force-kill"]

# endregion

# region Probe

_CONFIG_PROBE = config["probe"]

PROBE_URL: str = _CONFIG_PROBE["url"]
PROBE_CONNECT_TIMEOUT_MS: int = _CONFIG_PROBE["connect-timeout-ms"]
PROBE_READ_TIMEOUT_MS: int = _CONFIG_PROBE["read-timeout-ms"]
PROBE_EXPECTED_BODY: str = _CONFIG_PROBE["expected-body"]

# endregion
