"""Types shared by the launch agent reconciliation code."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class BindMode(StrEnum):
    """Network exposure mode the gateway daemon listens on."""

    LOOPBACK = "loopback"
    TAILNET = "tailnet"
    LAN = "lan"
    AUTO = "auto"

    @classmethod
    def parse(cls, raw: object) -> "BindMode | None":
        """Normalize a raw value into a BindMode.

        Trims whitespace and lowercases. Anything that isn't one of the
        supported modes (including non-strings) is treated as absent.
        """
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class DesiredConfig:
    """Configuration the launch agent should be running with."""

    port: int
    bind: BindMode
    token: str | None = None
    password: str | None = None


@dataclass(frozen=True)
class InstalledConfig:
    """Configuration recovered from the installed plist.

    A None field means it couldn't be determined, not that it is empty.
    """

    port: int | None = None
    bind: BindMode | None = None
    token: str | None = None
    password: str | None = None

    def matches(self, desired: DesiredConfig) -> bool:
        """Check whether the installed agent already runs the desired config.

        A missing bind argument means the daemon falls back to loopback.
        """
        if self.port != desired.port:
            return False
        if (self.bind or BindMode.LOOPBACK) != desired.bind:
            return False
        if self.token != desired.token:
            return False
        if self.password != desired.password:
            return False
        return True


@dataclass(frozen=True)
class ServiceDescriptor:
    """A launch agent definition, the unit launchd installs from disk."""

    label: str
    program_arguments: list[str]
    working_directory: Path
    environment: dict[str, str]
    stdout_path: Path
    stderr_path: Path
    run_at_load: bool = field(default=True, init=False)
    keep_alive: bool = field(default=True, init=False)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single launchctl invocation."""

    status: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.status == 0


@dataclass
class AgentStatus:
    """Snapshot of the launch agent for display."""

    label: str
    plist_path: Path
    loaded: bool
    write_disabled: bool
    installed: InstalledConfig | None = None
