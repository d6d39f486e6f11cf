"""Configuration models using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field


class ConfigError(Exception):
    """Configuration error."""

    pass


class LaunchdConfig(BaseModel):
    """Configuration for the gateway launch agent."""

    model_config = ConfigDict(extra="ignore")

    label: str = "com.gatewayctl.gateway"
    legacy_label: str = "com.gatewayctl.agent"
    executable: str = "gateway"
    daemon_subcommand: str = "gateway-daemon"
    launchctl_timeout: float = Field(default=30.0, gt=0)


class GatewayctlConfig(BaseModel):
    """Root configuration model.

    Only [launchd] is validated here. The [gateway] section (bind, mode and
    auth secrets) is read leniently by ConfigResolver.
    """

    model_config = ConfigDict(extra="ignore")

    launchd: LaunchdConfig = Field(default_factory=LaunchdConfig)
