"""Launch agent plist rendering and parsing.

Rendering is done by hand so the key order is stable and every free-text
value goes through escape_plist_value(). Reading goes through plistlib.
"""

import logging
import os
import plistlib
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from xml.parsers.expat import ExpatError

from gatewayctl.launchd.resolver import PASSWORD_ENV_VAR, TOKEN_ENV_VAR
from gatewayctl.launchd.types import BindMode, InstalledConfig, ServiceDescriptor

logger = logging.getLogger(__name__)

# Order matters: "&" first, or the entities below would be escaped again
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

_PLIST_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
"""


def escape_plist_value(raw: str) -> str:
    """Escape XML-reserved characters in a plist string value."""
    escaped = raw
    for char, entity in _ESCAPES:
        escaped = escaped.replace(char, entity)
    return escaped


def build_descriptor(
    label: str,
    program_arguments: list[str],
    working_directory: Path,
    search_path: str,
    log_path: Path,
    token: str | None = None,
    password: str | None = None,
) -> ServiceDescriptor:
    """Assemble a launch agent descriptor.

    PATH is always the first environment entry; credentials follow only when
    present. Stdout and stderr share one log file.
    """
    environment = {"PATH": search_path}
    if token is not None:
        environment[TOKEN_ENV_VAR] = token
    if password is not None:
        environment[PASSWORD_ENV_VAR] = password

    return ServiceDescriptor(
        label=label,
        program_arguments=list(program_arguments),
        working_directory=working_directory,
        environment=environment,
        stdout_path=log_path,
        stderr_path=log_path,
    )


def _string(value: str | Path, indent: str) -> str:
    return f"{indent}<string>{escape_plist_value(str(value))}</string>"


def _key(name: str, indent: str) -> str:
    return f"{indent}<key>{escape_plist_value(name)}</key>"


def _bool(value: bool, indent: str) -> str:
    return f"{indent}<{'true' if value else 'false'}/>"


def render_plist(descriptor: ServiceDescriptor) -> str:
    """Render a descriptor as launchd plist XML.

    Keys are emitted in a fixed order: Label, ProgramArguments,
    WorkingDirectory, RunAtLoad, KeepAlive, EnvironmentVariables,
    StandardOutPath, StandardErrorPath.
    """
    lines = ["<dict>"]
    lines.append(_key("Label", "  "))
    lines.append(_string(descriptor.label, "  "))

    lines.append(_key("ProgramArguments", "  "))
    lines.append("  <array>")
    lines.extend(_string(arg, "    ") for arg in descriptor.program_arguments)
    lines.append("  </array>")

    lines.append(_key("WorkingDirectory", "  "))
    lines.append(_string(descriptor.working_directory, "  "))
    lines.append(_key("RunAtLoad", "  "))
    lines.append(_bool(descriptor.run_at_load, "  "))
    lines.append(_key("KeepAlive", "  "))
    lines.append(_bool(descriptor.keep_alive, "  "))

    lines.append(_key("EnvironmentVariables", "  "))
    lines.append("  <dict>")
    for name, value in descriptor.environment.items():
        lines.append(_key(name, "    "))
        lines.append(_string(value, "    "))
    lines.append("  </dict>")

    lines.append(_key("StandardOutPath", "  "))
    lines.append(_string(descriptor.stdout_path, "  "))
    lines.append(_key("StandardErrorPath", "  "))
    lines.append(_string(descriptor.stderr_path, "  "))
    lines.append("</dict>")

    return _PLIST_HEADER + "\n".join(lines) + "\n</plist>\n"


def write_plist(path: Path, content: str) -> bool:
    """Write plist content atomically via tempfile + fsync + replace.

    Returns:
        True if written. Failures are logged, not raised.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            Path(tmp).replace(path)
        except BaseException:
            try:
                Path(tmp).unlink()
            except OSError:
                pass
            raise
    except OSError as e:
        logger.error(
            "launchd_plist_write_failed",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        return False
    logger.debug(f"Wrote launch agent plist to {path}")
    return True


@dataclass
class PlistSnapshot:
    """The plist fields needed to compare against a desired config."""

    label: str | None = None
    program_arguments: list[str] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)


def read_plist_snapshot(path: Path) -> PlistSnapshot | None:
    """Parse an installed plist.

    Returns:
        PlistSnapshot if the file exists and parses, None otherwise.
    """
    if not path.exists():
        return None
    try:
        with path.open("rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ExpatError, ValueError) as e:
        logger.warning(
            "launchd_plist_unreadable",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        return None
    if not isinstance(data, dict):
        return None

    label = data.get("Label")
    args = data.get("ProgramArguments")
    env = data.get("EnvironmentVariables")
    return PlistSnapshot(
        label=label if isinstance(label, str) else None,
        program_arguments=[a for a in args if isinstance(a, str)]
        if isinstance(args, list)
        else [],
        environment={
            k: v for k, v in env.items() if isinstance(k, str) and isinstance(v, str)
        }
        if isinstance(env, dict)
        else {},
    )


def _flag_value(args: list[str], flag: str) -> str | None:
    """Find the value of --flag VALUE or --flag=VALUE in an argument list."""
    prefix = f"{flag}="
    for i, arg in enumerate(args):
        if arg == flag:
            return args[i + 1] if i + 1 < len(args) else None
        if arg.startswith(prefix):
            return arg[len(prefix) :]
    return None


def _parse_port(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def installed_config_from_snapshot(snapshot: PlistSnapshot) -> InstalledConfig:
    """Extract the installed gateway configuration from a plist snapshot.

    Fields that can't be recovered are left as None, never defaulted.
    """
    args = snapshot.program_arguments
    token = snapshot.environment.get(TOKEN_ENV_VAR, "").strip()
    password = snapshot.environment.get(PASSWORD_ENV_VAR, "").strip()
    return InstalledConfig(
        port=_parse_port(_flag_value(args, "--port")),
        bind=BindMode.parse(_flag_value(args, "--bind")),
        token=token or None,
        password=password or None,
    )


def read_installed_config(path: Path) -> InstalledConfig | None:
    """Read the installed configuration from the plist at path.

    Returns:
        InstalledConfig, or None if there's no readable plist.
    """
    snapshot = read_plist_snapshot(path)
    if snapshot is None:
        return None
    return installed_config_from_snapshot(snapshot)
