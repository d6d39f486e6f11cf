"""High-level launch agent management interface."""

import asyncio

from gatewayctl.launchd.agent import GatewayLaunchAgent, create_launch_agent
from gatewayctl.launchd.types import AgentStatus


class ServiceManager:
    """Serialized access to a GatewayLaunchAgent.

    The agent touches a label and plist that are shared across the whole user
    session, so only one operation runs at a time per manager. Other callers
    wait for it to finish.

    Example:
        manager = ServiceManager()
        success, message = await manager.enable(8787)
        status = await manager.status()
    """

    def __init__(self, agent: GatewayLaunchAgent | None = None):
        """Initialize the service manager.

        Args:
            agent: Launch agent to drive, or None to build the default one.
        """
        self._agent = agent or create_launch_agent()
        self._lock = asyncio.Lock()

    @property
    def label(self) -> str:
        return self._agent.label

    async def enable(self, port: int) -> tuple[bool, str]:
        """Install and load the gateway launch agent.

        Returns:
            Tuple of (success, message).
        """
        async with self._lock:
            error = await self._agent.enable(port)
        if error is not None:
            return False, error
        return True, f"Gateway launch agent enabled on port {port}"

    async def disable(self) -> tuple[bool, str]:
        """Unload and remove the gateway launch agent.

        Returns:
            Tuple of (success, message). Never fails.
        """
        async with self._lock:
            await self._agent.disable()
        return True, "Gateway launch agent disabled"

    async def kickstart(self, force: bool = True) -> tuple[bool, str]:
        """Restart the gateway job.

        Returns:
            Tuple of (success, message).
        """
        async with self._lock:
            await self._agent.kickstart(force=force)
        return True, "Restart requested"

    async def status(self) -> AgentStatus:
        async with self._lock:
            return await self._agent.status()
