"""Thin async wrapper around launchctl.

Every call returns a CommandResult. Nothing here raises for a failed
subcommand: deciding what a non-zero status means is up to the caller.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol

from gatewayctl.launchd.types import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Shell conventions for "timed out" and "command not found"
TIMEOUT_STATUS = 124
NOT_FOUND_STATUS = 127


class ServiceController(Protocol):
    """The launchd operations the reconciliation engine relies on."""

    async def print(self, label: str) -> CommandResult: ...

    async def bootout(self, label: str) -> CommandResult: ...

    async def bootstrap(self, plist_path: Path) -> CommandResult: ...

    async def enable(self, label: str) -> CommandResult: ...

    async def disable(self, label: str) -> CommandResult: ...

    async def kickstart(self, label: str, kill: bool = False) -> CommandResult: ...


class Launchctl:
    """Runs launchctl against the current user's GUI domain.

    Uses the modern bootstrap/bootout interface (macOS 10.10+), addressing
    services as gui/<uid>/<label>.
    """

    def __init__(
        self,
        binary: str = "launchctl",
        uid: int | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._binary = binary
        self._uid = os.getuid() if uid is None else uid
        self._timeout = timeout

    @property
    def domain(self) -> str:
        """The per-user launchd domain target."""
        return f"gui/{self._uid}"

    def service_target(self, label: str) -> str:
        return f"{self.domain}/{label}"

    async def run(self, *args: str) -> CommandResult:
        """Run launchctl with args, merging stdout and stderr."""
        logger.debug(f"launchctl {' '.join(args)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except (FileNotFoundError, PermissionError) as e:
            return CommandResult(status=NOT_FOUND_STATUS, output=str(e))

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), self._timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning(f"launchctl {args[0]} timed out after {self._timeout}s")
            return CommandResult(
                status=TIMEOUT_STATUS,
                output=f"launchctl {args[0]} timed out after {self._timeout}s",
            )

        output = stdout.decode(errors="replace") if stdout else ""
        return CommandResult(status=proc.returncode or 0, output=output)

    async def print(self, label: str) -> CommandResult:
        return await self.run("print", self.service_target(label))

    async def bootout(self, label: str) -> CommandResult:
        return await self.run("bootout", self.service_target(label))

    async def bootstrap(self, plist_path: Path) -> CommandResult:
        return await self.run("bootstrap", self.domain, str(plist_path))

    async def enable(self, label: str) -> CommandResult:
        return await self.run("enable", self.service_target(label))

    async def disable(self, label: str) -> CommandResult:
        return await self.run("disable", self.service_target(label))

    async def kickstart(self, label: str, kill: bool = False) -> CommandResult:
        if kill:
            return await self.run("kickstart", "-k", self.service_target(label))
        return await self.run("kickstart", self.service_target(label))
