"""Resolve the command line launchd should run for the gateway daemon.

Resolution is an ordered list of strategies. The first one that produces an
argument vector wins:

- ProjectExecutable: a locally built binary in a development checkout
- ProjectEntrypoint: the checkout's entrypoint run through its runtime
- InstalledBinary: the gateway CLI installed somewhere on the search path

Development strategies are only used when GATEWAYCTL_PROJECT_ROOT is set.
"""

import logging
import os
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from gatewayctl.launchd.types import BindMode

logger = logging.getLogger(__name__)

PROJECT_ROOT_ENV_VAR = "GATEWAYCTL_PROJECT_ROOT"

DEFAULT_EXECUTABLE = "gateway"
DEFAULT_DAEMON_SUBCOMMAND = "gateway-daemon"


class GatewayctlError(Exception):
    """Base error for gatewayctl operations."""


class ProgramArgumentsError(GatewayctlError):
    """No strategy could produce a gateway command line."""


def preferred_search_paths(environ: Mapping[str, str] | None = None) -> list[str]:
    """Directories to search for the gateway CLI, in priority order.

    User and Homebrew locations come first because launchd agents start with
    a minimal PATH. The caller's PATH is appended, then system directories.
    Duplicates are dropped, keeping the first occurrence.
    """
    env = os.environ if environ is None else environ
    home = Path.home()
    candidates = [
        str(home / ".local" / "bin"),
        str(home / "bin"),
        "/opt/homebrew/bin",
        "/usr/local/bin",
        *env.get("PATH", "").split(os.pathsep),
        "/usr/bin",
        "/bin",
        "/usr/sbin",
        "/sbin",
    ]

    paths: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in paths:
            paths.append(candidate)
    return paths


def daemon_arguments(subcommand: str, port: int, bind: BindMode) -> list[str]:
    """Arguments passed to the gateway binary after its path."""
    return [subcommand, "--port", str(port), "--bind", str(bind)]


class CommandStrategy(Protocol):
    """One way of locating the gateway daemon command."""

    name: str

    def resolve(self, port: int, bind: BindMode) -> list[str] | None: ...


class ProjectExecutable:
    """A binary built inside a development checkout (<root>/bin/<executable>)."""

    name = "project-executable"

    def __init__(
        self,
        project_root: Path,
        executable: str = DEFAULT_EXECUTABLE,
        subcommand: str = DEFAULT_DAEMON_SUBCOMMAND,
    ):
        self.project_root = project_root
        self.executable = executable
        self.subcommand = subcommand

    def resolve(self, port: int, bind: BindMode) -> list[str] | None:
        candidate = self.project_root / "bin" / self.executable
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return [str(candidate), *daemon_arguments(self.subcommand, port, bind)]
        return None


class ProjectEntrypoint:
    """A checkout's script entrypoint run through an interpreter on the search path."""

    name = "project-entrypoint"

    def __init__(
        self,
        project_root: Path,
        search_paths: Sequence[str],
        entrypoint: str = "dist/index.js",
        runtime: str = "node",
        subcommand: str = DEFAULT_DAEMON_SUBCOMMAND,
    ):
        self.project_root = project_root
        self.search_paths = list(search_paths)
        self.entrypoint = entrypoint
        self.runtime = runtime
        self.subcommand = subcommand

    def resolve(self, port: int, bind: BindMode) -> list[str] | None:
        entry = self.project_root / self.entrypoint
        if not entry.is_file():
            return None
        runtime = shutil.which(self.runtime, path=os.pathsep.join(self.search_paths))
        if runtime is None:
            logger.debug(f"Found {entry} but no {self.runtime} runtime on search path")
            return None
        return [runtime, str(entry), *daemon_arguments(self.subcommand, port, bind)]


class InstalledBinary:
    """The gateway CLI installed on the search path."""

    name = "installed-binary"

    def __init__(
        self,
        search_paths: Sequence[str],
        executable: str = DEFAULT_EXECUTABLE,
        subcommand: str = DEFAULT_DAEMON_SUBCOMMAND,
    ):
        self.search_paths = list(search_paths)
        self.executable = executable
        self.subcommand = subcommand

    def resolve(self, port: int, bind: BindMode) -> list[str] | None:
        found = shutil.which(self.executable, path=os.pathsep.join(self.search_paths))
        if found is None:
            return None
        return [found, *daemon_arguments(self.subcommand, port, bind)]


class CommandResolver:
    """Try command strategies in order."""

    def __init__(self, strategies: Sequence[CommandStrategy]):
        self.strategies = list(strategies)

    def resolve(self, port: int, bind: BindMode) -> list[str]:
        """Resolve the daemon command line.

        Raises:
            ProgramArgumentsError: If no strategy finds the gateway.
        """
        for strategy in self.strategies:
            if (args := strategy.resolve(port, bind)) is not None:
                logger.debug(f"Resolved gateway command via {strategy.name}")
                return args
        raise ProgramArgumentsError("gateway CLI not found in PATH; install the CLI.")


def default_strategies(
    search_paths: Sequence[str],
    executable: str = DEFAULT_EXECUTABLE,
    subcommand: str = DEFAULT_DAEMON_SUBCOMMAND,
    project_root: Path | None = None,
) -> list[CommandStrategy]:
    """Build the default strategy chain.

    Args:
        search_paths: Directories to search for binaries and runtimes.
        executable: Name of the gateway CLI.
        subcommand: Subcommand that runs the daemon.
        project_root: Development checkout. Defaults to GATEWAYCTL_PROJECT_ROOT.
    """
    if project_root is None and (env_root := os.environ.get(PROJECT_ROOT_ENV_VAR)):
        project_root = Path(env_root).expanduser()

    installed = InstalledBinary(search_paths, executable, subcommand)
    if project_root is None:
        return [installed]

    return [
        ProjectExecutable(project_root, executable, subcommand),
        ProjectEntrypoint(project_root, search_paths, subcommand=subcommand),
        installed,
    ]
