"""CLI command modules."""

from gatewayctl.cli.commands import service

__all__ = ["service"]
