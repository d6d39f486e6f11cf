"""Shared test fixtures and fakes."""

from pathlib import Path

import pytest

from gatewayctl.config.paths import ENV_VAR, get_gatewayctl_home
from gatewayctl.launchd.agent import GatewayLaunchAgent
from gatewayctl.launchd.command import CommandResolver
from gatewayctl.launchd.gate import WriteGate
from gatewayctl.launchd.resolver import ConfigResolver
from gatewayctl.launchd.types import BindMode, CommandResult

LABEL = "com.example.gateway"
LEGACY_LABEL = "com.example.legacy"
GATEWAY_BIN = "/usr/local/bin/gateway"


# =============================================================================
# Fakes
# =============================================================================


class FakeLaunchctl:
    """In-memory launchctl that tracks which labels are loaded.

    Every call is appended to `calls` as a tuple, e.g. ("bootout", label).
    """

    def __init__(self, loaded: set[str] | None = None):
        self.loaded: set[str] = set(loaded or ())
        self.enabled: set[str] = set()
        self.calls: list[tuple] = []
        self.bootstrap_result = CommandResult(status=0)
        self.enable_result = CommandResult(status=0)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def print(self, label: str) -> CommandResult:
        self.calls.append(("print", label))
        if label in self.loaded:
            return CommandResult(status=0, output=f"{label} = {{ state = running }}")
        return CommandResult(status=113, output=f"Could not find service {label}")

    async def bootout(self, label: str) -> CommandResult:
        self.calls.append(("bootout", label))
        if label in self.loaded:
            self.loaded.discard(label)
            return CommandResult(status=0)
        return CommandResult(status=3, output="No such process")

    async def bootstrap(self, plist_path: Path) -> CommandResult:
        self.calls.append(("bootstrap", plist_path))
        if self.bootstrap_result.ok:
            self.loaded.add(plist_path.stem)
        return self.bootstrap_result

    async def enable(self, label: str) -> CommandResult:
        self.calls.append(("enable", label))
        if self.enable_result.ok:
            self.enabled.add(label)
        return self.enable_result

    async def disable(self, label: str) -> CommandResult:
        self.calls.append(("disable", label))
        self.enabled.discard(label)
        return CommandResult(status=0)

    async def kickstart(self, label: str, kill: bool = False) -> CommandResult:
        self.calls.append(("kickstart", label, kill))
        return CommandResult(status=0)


class StaticCommand:
    """Command strategy that returns a fixed binary, or nothing."""

    name = "static"

    def __init__(self, binary: str | None = GATEWAY_BIN):
        self.binary = binary

    def resolve(self, port: int, bind: BindMode) -> list[str] | None:
        if self.binary is None:
            return None
        return [self.binary, "gateway-daemon", "--port", str(port), "--bind", bind]


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def gatewayctl_home(tmp_path: Path, monkeypatch) -> Path:
    """Point GATEWAYCTL_HOME at a temporary directory."""
    home = tmp_path / "gatewayctl-home"
    monkeypatch.setenv(ENV_VAR, str(home))
    get_gatewayctl_home.cache_clear()
    yield home
    get_gatewayctl_home.cache_clear()


@pytest.fixture
def launch_agents_dir(tmp_path: Path) -> Path:
    path = tmp_path / "LaunchAgents"
    path.mkdir()
    return path


# =============================================================================
# Launch Agent Fixtures
# =============================================================================


@pytest.fixture
def fake_launchctl() -> FakeLaunchctl:
    return FakeLaunchctl()


@pytest.fixture
def gateway_env() -> dict[str, str]:
    """Environment seen by the resolver. Tests mutate it in place."""
    return {}


@pytest.fixture
def gateway_config() -> dict:
    """Raw config mapping seen by the resolver. Tests mutate it in place."""
    return {}


@pytest.fixture
def make_agent(
    tmp_path: Path,
    launch_agents_dir: Path,
    fake_launchctl: FakeLaunchctl,
    gateway_env: dict[str, str],
    gateway_config: dict,
):
    """Factory for a GatewayLaunchAgent wired to fakes and temp paths."""

    def factory(binary: str | None = GATEWAY_BIN) -> GatewayLaunchAgent:
        return GatewayLaunchAgent(
            controller=fake_launchctl,
            resolver_factory=lambda: ConfigResolver.from_config(
                gateway_config, environ=gateway_env
            ),
            command_resolver=CommandResolver([StaticCommand(binary)]),
            gate=WriteGate(tmp_path / "disable-launchagent"),
            label=LABEL,
            plist_path=launch_agents_dir / f"{LABEL}.plist",
            log_path=tmp_path / "logs" / "gateway.log",
            working_directory=tmp_path,
            search_path="/usr/local/bin:/usr/bin:/bin",
            legacy_label=LEGACY_LABEL,
            legacy_plist_path=launch_agents_dir / f"{LEGACY_LABEL}.plist",
        )

    return factory


@pytest.fixture
def agent(make_agent) -> GatewayLaunchAgent:
    return make_agent()


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
