"""Reconcile the gateway launch agent with the desired configuration.

enable() converges the installed plist and the loaded launchd job toward the
configuration derived from the environment and config.toml. When the job is
already loaded with exactly that configuration it is left running and only
kickstarted: a bootout/bootstrap cycle would kill a healthy gateway and any
client attached to it.

Calls are not serialized here. Two concurrent enable() calls against the same
label can interleave their bootout/bootstrap sequences; use ServiceManager,
which allows one operation in flight at a time.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from gatewayctl.config.loader import load_config_dict, parse_config
from gatewayctl.config.models import ConfigError
from gatewayctl.config.paths import get_gateway_log_path, get_plist_path
from gatewayctl.launchd.command import (
    CommandResolver,
    ProgramArgumentsError,
    default_strategies,
    preferred_search_paths,
)
from gatewayctl.launchd.gate import WriteGate
from gatewayctl.launchd.launchctl import Launchctl, ServiceController
from gatewayctl.launchd.plist import (
    build_descriptor,
    read_installed_config,
    render_plist,
    write_plist,
)
from gatewayctl.launchd.resolver import ConfigResolver
from gatewayctl.launchd.steps import BestEffort, Step
from gatewayctl.launchd.types import AgentStatus

logger = logging.getLogger(__name__)

BOOTSTRAP_FAILED_MESSAGE = "Failed to bootstrap gateway launchd job"


class GatewayLaunchAgent:
    """Installs, loads and removes the gateway launch agent."""

    def __init__(
        self,
        controller: ServiceController,
        resolver_factory: Callable[[], ConfigResolver],
        command_resolver: CommandResolver,
        gate: WriteGate,
        label: str,
        plist_path: Path,
        log_path: Path,
        working_directory: Path,
        search_path: str,
        legacy_label: str | None = None,
        legacy_plist_path: Path | None = None,
    ):
        """Initialize the launch agent.

        Args:
            controller: launchctl wrapper (or a fake).
            resolver_factory: Builds a fresh ConfigResolver per reconciliation.
            command_resolver: Locates the gateway daemon command line.
            gate: Write-gate marker check.
            label: launchd label of the gateway job.
            plist_path: Where the job's plist is installed.
            log_path: Target for the job's stdout and stderr.
            working_directory: Working directory for the daemon.
            search_path: PATH value exported to the daemon.
            legacy_label: Deprecated label cleaned up on enable.
            legacy_plist_path: Plist path of the deprecated label.
        """
        self._controller = controller
        self._resolver_factory = resolver_factory
        self._command_resolver = command_resolver
        self._gate = gate
        self.label = label
        self.plist_path = plist_path
        self.log_path = log_path
        self.working_directory = working_directory
        self.search_path = search_path
        self.legacy_label = legacy_label
        self.legacy_plist_path = legacy_plist_path

    async def is_loaded(self) -> bool:
        """Whether the plist is installed and launchd knows the job."""
        if not self.plist_path.exists():
            return False
        result = await self._controller.print(self.label)
        return result.ok

    async def enable(self, port: int) -> str | None:
        """Install and load the gateway job for a port.

        Returns:
            None on success, otherwise a diagnostic message.
        """
        if self._gate.is_write_disabled():
            logger.info(
                "launchd_enable_skipped",
                extra={"reason": "write gate marker present"},
            )
            return None

        steps = BestEffort()
        try:
            return await self._reconcile(port, steps)
        finally:
            steps.log_summary("enable")

    async def _reconcile(self, port: int, steps: BestEffort) -> str | None:
        await self._remove_legacy(steps)

        desired = self._resolver_factory().desired_config(port)
        try:
            program_arguments = self._command_resolver.resolve(port, desired.bind)
        except ProgramArgumentsError as e:
            logger.error(f"launchd enable failed: {e}")
            return str(e)

        loaded = await self.is_loaded()
        if loaded:
            installed = read_installed_config(self.plist_path)
            if installed is not None and installed.matches(desired):
                logger.info(
                    "launchd job already loaded with desired config; skipping bootout"
                )
                await steps.command(Step.ENABLE, self._controller.enable(self.label))
                await steps.command(
                    Step.KICKSTART, self._controller.kickstart(self.label)
                )
                return None

        logger.info(f"launchd enable requested port={port} bind={desired.bind}")
        descriptor = build_descriptor(
            label=self.label,
            program_arguments=program_arguments,
            working_directory=self.working_directory,
            search_path=self.search_path,
            log_path=self.log_path,
            token=desired.token,
            password=desired.password,
        )
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            steps.record(Step.WRITE_PLIST, f"log directory: {e}")
        steps.check(
            Step.WRITE_PLIST,
            write_plist(self.plist_path, render_plist(descriptor)),
            str(self.plist_path),
        )

        await steps.command(Step.ENABLE, self._controller.enable(self.label))
        if loaded:
            await steps.command(Step.BOOTOUT, self._controller.bootout(self.label))

        bootstrap = await self._controller.bootstrap(self.plist_path)
        if not bootstrap.ok:
            message = bootstrap.output.strip()
            logger.error(f"launchd bootstrap failed: {message}")
            return message or BOOTSTRAP_FAILED_MESSAGE

        await steps.command(Step.ENABLE, self._controller.enable(self.label))
        return None

    async def disable(self) -> None:
        """Unload the gateway job and remove its plist.

        Always succeeds; an agent that is already gone is a fine end state.
        Not subject to the write gate.
        """
        logger.info("launchd disable requested")
        steps = BestEffort()
        await steps.command(Step.BOOTOUT, self._controller.bootout(self.label))
        await steps.command(Step.DISABLE, self._controller.disable(self.label))
        steps.remove(Step.PLIST_REMOVE, self.plist_path)
        steps.log_summary("disable")

    async def kickstart(self, force: bool = True) -> None:
        """Ask launchd to restart the job. Fire and forget."""
        await BestEffort().command(
            Step.KICKSTART, self._controller.kickstart(self.label, kill=force)
        )

    async def status(self) -> AgentStatus:
        return AgentStatus(
            label=self.label,
            plist_path=self.plist_path,
            loaded=await self.is_loaded(),
            write_disabled=self._gate.is_write_disabled(),
            installed=read_installed_config(self.plist_path),
        )

    async def _remove_legacy(self, steps: BestEffort) -> None:
        if self.legacy_label:
            await steps.command(
                Step.LEGACY_BOOTOUT, self._controller.bootout(self.legacy_label)
            )
        if self.legacy_plist_path is not None:
            steps.remove(Step.LEGACY_PLIST_REMOVE, self.legacy_plist_path)


def _load_raw_config(config_path: Path | None) -> dict:
    try:
        return load_config_dict(config_path)
    except (ConfigError, OSError) as e:
        logger.warning(f"Ignoring unreadable config: {e}")
        return {}


def create_launch_agent(
    config_path: Path | None = None,
    controller: ServiceController | None = None,
) -> GatewayLaunchAgent:
    """Build a GatewayLaunchAgent wired to the real system.

    The config file is re-read for every reconciliation so that edits made
    while a long-lived process holds the agent are picked up.

    Raises:
        ConfigError: If the [launchd] section is invalid.
    """
    config = parse_config(_load_raw_config(config_path))
    launchd = config.launchd
    search_paths = preferred_search_paths()

    def resolver_factory() -> ConfigResolver:
        return ConfigResolver.from_config(_load_raw_config(config_path))

    return GatewayLaunchAgent(
        controller=controller or Launchctl(timeout=launchd.launchctl_timeout),
        resolver_factory=resolver_factory,
        command_resolver=CommandResolver(
            default_strategies(
                search_paths,
                executable=launchd.executable,
                subcommand=launchd.daemon_subcommand,
            )
        ),
        gate=WriteGate(),
        label=launchd.label,
        plist_path=get_plist_path(launchd.label),
        log_path=get_gateway_log_path(),
        working_directory=Path.home(),
        search_path=":".join(search_paths),
        legacy_label=launchd.legacy_label,
        legacy_plist_path=get_plist_path(launchd.legacy_label),
    )
