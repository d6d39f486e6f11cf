"""Desired gateway configuration from environment variables and config.toml.

Environment variables take precedence over the config file:

    GATEWAY_BIND      -> [gateway] bind
    GATEWAY_TOKEN     -> [gateway.auth] token
    GATEWAY_PASSWORD  -> [gateway.auth] password

The token and password variables are also the names written into the launch
agent's environment, which is where the daemon reads them from.
"""

import os
from collections.abc import Mapping
from typing import Any

from gatewayctl.launchd.types import BindMode, DesiredConfig

BIND_ENV_VAR = "GATEWAY_BIND"
TOKEN_ENV_VAR = "GATEWAY_TOKEN"
PASSWORD_ENV_VAR = "GATEWAY_PASSWORD"


def _get_nested(config: Mapping[str, Any], *keys: str) -> Any:
    """Get a nested value by keys, returning None if any key is missing."""
    value: Any = config
    for key in keys:
        if not isinstance(value, Mapping) or value.get(key) is None:
            return None
        value = value[key]
    return value


def _clean(raw: object) -> str | None:
    """Trim a string value, treating non-strings and blanks as absent."""
    if not isinstance(raw, str):
        return None
    trimmed = raw.strip()
    return trimmed or None


class ConfigResolver:
    """Resolve bind mode and gateway credentials.

    Pure with respect to its inputs: the environment and config mappings are
    captured at construction and never written to.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
        remote: bool = False,
    ):
        """Initialize the resolver.

        Args:
            config: Raw config mapping (as loaded from config.toml).
            environ: Environment variables, defaults to os.environ.
            remote: Whether the gateway connection mode is remote.
        """
        self._config = config or {}
        self._environ = os.environ if environ is None else environ
        self._remote = remote

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> "ConfigResolver":
        """Build a resolver, reading the connection mode from [gateway] mode."""
        mode = _clean(_get_nested(config, "gateway", "mode"))
        remote = mode is not None and mode.lower() == "remote"
        return cls(config=config, environ=environ, remote=remote)

    def resolve_bind(self) -> BindMode | None:
        # Remote mode suppresses local bind detection entirely
        if self._remote:
            return None

        if (bind := BindMode.parse(self._environ.get(BIND_ENV_VAR))) is not None:
            return bind

        return BindMode.parse(_get_nested(self._config, "gateway", "bind"))

    def resolve_token(self) -> str | None:
        return self._resolve_secret(TOKEN_ENV_VAR, "token")

    def resolve_password(self) -> str | None:
        return self._resolve_secret(PASSWORD_ENV_VAR, "password")

    def _resolve_secret(self, env_var: str, key: str) -> str | None:
        if (value := _clean(self._environ.get(env_var))) is not None:
            return value
        return _clean(_get_nested(self._config, "gateway", "auth", key))

    def desired_config(self, port: int) -> DesiredConfig:
        """Assemble the desired configuration for a port.

        An unresolved bind mode defaults to loopback.
        """
        return DesiredConfig(
            port=port,
            bind=self.resolve_bind() or BindMode.LOOPBACK,
            token=self.resolve_token(),
            password=self.resolve_password(),
        )
