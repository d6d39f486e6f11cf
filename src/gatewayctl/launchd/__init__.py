"""Gateway launch agent management for macOS launchd.

Example:
    from gatewayctl.launchd import ServiceManager

    manager = ServiceManager()
    success, message = await manager.enable(8787)
    status = await manager.status()
"""

from gatewayctl.launchd.agent import GatewayLaunchAgent, create_launch_agent
from gatewayctl.launchd.command import (
    CommandResolver,
    GatewayctlError,
    InstalledBinary,
    ProgramArgumentsError,
    ProjectEntrypoint,
    ProjectExecutable,
)
from gatewayctl.launchd.gate import WriteGate
from gatewayctl.launchd.launchctl import Launchctl, ServiceController
from gatewayctl.launchd.manager import ServiceManager
from gatewayctl.launchd.resolver import ConfigResolver
from gatewayctl.launchd.types import (
    AgentStatus,
    BindMode,
    CommandResult,
    DesiredConfig,
    InstalledConfig,
    ServiceDescriptor,
)

__all__ = [
    "AgentStatus",
    "BindMode",
    "CommandResolver",
    "CommandResult",
    "ConfigResolver",
    "DesiredConfig",
    "GatewayLaunchAgent",
    "GatewayctlError",
    "InstalledBinary",
    "InstalledConfig",
    "Launchctl",
    "ProgramArgumentsError",
    "ProjectEntrypoint",
    "ProjectExecutable",
    "ServiceController",
    "ServiceDescriptor",
    "ServiceManager",
    "WriteGate",
    "create_launch_agent",
]
