"""Sentinel file that stops gatewayctl from installing the launch agent.

Useful when the gateway is managed some other way (a dev loop, a test run):
`touch ~/.gatewayctl/disable-launchagent` and enable becomes a no-op.
Disabling is never blocked.
"""

from pathlib import Path

from gatewayctl.config.paths import get_write_gate_path


class WriteGate:
    """Checks for the launch agent write-gate marker."""

    def __init__(self, marker_path: Path | None = None):
        self.marker_path = marker_path or get_write_gate_path()

    def is_write_disabled(self) -> bool:
        return self.marker_path.exists()
