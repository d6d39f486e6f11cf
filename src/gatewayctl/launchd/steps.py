"""Fatal vs best-effort classification for launch agent steps.

Only two steps can fail an operation: resolving the gateway command and
bootstrapping the new plist. Everything else is housekeeping whose failure is
logged (or ignored outright) without changing the reported outcome.
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from pathlib import Path

from gatewayctl.launchd.types import CommandResult

logger = logging.getLogger(__name__)


class Step(StrEnum):
    LEGACY_BOOTOUT = "legacy_bootout"
    LEGACY_PLIST_REMOVE = "legacy_plist_remove"
    RESOLVE_COMMAND = "resolve_command"
    WRITE_PLIST = "write_plist"
    ENABLE = "enable"
    BOOTOUT = "bootout"
    BOOTSTRAP = "bootstrap"
    KICKSTART = "kickstart"
    DISABLE = "disable"
    PLIST_REMOVE = "plist_remove"


class Policy(Enum):
    FATAL = "fatal"
    WARN = "warn"
    IGNORE = "ignore"


STEP_POLICY: dict[Step, Policy] = {
    Step.LEGACY_BOOTOUT: Policy.IGNORE,
    Step.LEGACY_PLIST_REMOVE: Policy.IGNORE,
    Step.RESOLVE_COMMAND: Policy.FATAL,
    Step.WRITE_PLIST: Policy.WARN,
    Step.ENABLE: Policy.WARN,
    Step.BOOTOUT: Policy.IGNORE,
    Step.BOOTSTRAP: Policy.FATAL,
    Step.KICKSTART: Policy.IGNORE,
    Step.DISABLE: Policy.WARN,
    Step.PLIST_REMOVE: Policy.IGNORE,
}


@dataclass
class StepFailure:
    step: Step
    detail: str


@dataclass
class BestEffort:
    """Runs non-fatal steps, logging and collecting their failures."""

    failures: list[StepFailure] = field(default_factory=list)

    def record(self, step: Step, detail: str) -> None:
        policy = STEP_POLICY[step]
        if policy is Policy.FATAL:
            raise ValueError(f"{step} is fatal and can't be run best-effort")

        self.failures.append(StepFailure(step=step, detail=detail))
        message = f"launchd {step} failed"
        if detail:
            message = f"{message}: {detail}"
        if policy is Policy.WARN:
            logger.warning(message)
        else:
            logger.debug(message)

    async def command(
        self, step: Step, call: Awaitable[CommandResult]
    ) -> CommandResult:
        """Await a launchctl call, recording a non-zero status."""
        result = await call
        if not result.ok:
            self.record(step, result.output.strip())
        return result

    def remove(self, step: Step, path: Path) -> None:
        """Delete a file, recording anything but "already gone"."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self.record(step, str(e))

    def check(self, step: Step, ok: bool, detail: str = "") -> None:
        if not ok:
            self.record(step, detail)

    def log_summary(self, operation: str) -> None:
        """Log which steps of an operation failed, if any."""
        if not self.failures:
            return
        failed = ", ".join(str(f.step) for f in self.failures)
        logger.debug(
            f"launchd {operation} finished with {len(self.failures)} "
            f"non-fatal failure(s): {failed}"
        )
