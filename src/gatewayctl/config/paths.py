"""Centralized path management for gatewayctl.

State (config, logs, write-gate marker) is stored under a single base directory.
The base directory can be overridden with the GATEWAYCTL_HOME environment variable.

Launch agent plists live where launchd expects them:
~/Library/LaunchAgents/<label>.plist
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "GATEWAYCTL_HOME"

WRITE_GATE_MARKER = "disable-launchagent"


@lru_cache(maxsize=1)
def get_gatewayctl_home() -> Path:
    """Get the base directory for all gatewayctl data.

    Resolution order:
    1. GATEWAYCTL_HOME environment variable (if set)
    2. Platform default (~/.gatewayctl)

    Returns:
        Path to the gatewayctl home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".gatewayctl"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_gatewayctl_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the logs directory path."""
    return get_gatewayctl_home() / "logs"


def get_gateway_log_path() -> Path:
    """Get the log file the launch agent redirects stdout/stderr into."""
    return get_logs_path() / "gateway.log"


def get_write_gate_path() -> Path:
    """Get the sentinel file that blocks launch agent installation."""
    return get_gatewayctl_home() / WRITE_GATE_MARKER


def get_launch_agents_dir() -> Path:
    """Get the per-user LaunchAgents directory."""
    return Path.home() / "Library" / "LaunchAgents"


def get_plist_path(label: str) -> Path:
    """Get the plist path for a launchd label."""
    return get_launch_agents_dir() / f"{label}.plist"

