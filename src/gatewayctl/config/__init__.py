"""Configuration module."""

from gatewayctl.config.loader import load_config, load_config_dict, parse_config
from gatewayctl.config.models import (
    ConfigError,
    GatewayctlConfig,
    LaunchdConfig,
)
from gatewayctl.config.paths import (
    get_config_path,
    get_gateway_log_path,
    get_gatewayctl_home,
    get_plist_path,
    get_write_gate_path,
)

__all__ = [
    "ConfigError",
    "GatewayctlConfig",
    "LaunchdConfig",
    "get_config_path",
    "get_gateway_log_path",
    "get_gatewayctl_home",
    "get_plist_path",
    "get_write_gate_path",
    "load_config",
    "load_config_dict",
    "parse_config",
]
