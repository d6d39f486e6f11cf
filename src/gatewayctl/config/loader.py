"""Configuration loading from TOML files."""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gatewayctl.config.models import ConfigError, GatewayctlConfig
from gatewayctl.config.paths import get_config_path

logger = logging.getLogger(__name__)


def load_config_dict(path: Path | None = None) -> dict[str, Any]:
    """Load the raw config mapping from TOML.

    Args:
        path: Explicit path to config file. If None, uses the default location.

    Returns:
        Parsed TOML as a nested dict. Empty if the default file doesn't exist.

    Raises:
        FileNotFoundError: If an explicit path doesn't exist.
        ConfigError: If the file is not valid UTF-8 TOML.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_path = get_config_path()
        if not config_path.exists():
            logger.debug(f"No config file at {config_path}, using defaults")
            return {}

    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e


def parse_config(raw_config: dict[str, Any]) -> GatewayctlConfig:
    """Validate a raw config mapping.

    Raises:
        ConfigError: If the mapping fails validation.
    """
    try:
        return GatewayctlConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Path | None = None) -> GatewayctlConfig:
    """Load and validate configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, uses the default location.

    Returns:
        Validated GatewayctlConfig instance.
    """
    return parse_config(load_config_dict(path))
