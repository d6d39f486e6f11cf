"""Tests for best-effort step handling."""

import logging
from pathlib import Path

import pytest

from gatewayctl.launchd.steps import STEP_POLICY, BestEffort, Policy, Step
from gatewayctl.launchd.types import CommandResult


async def result(status: int, output: str = "") -> CommandResult:
    return CommandResult(status=status, output=output)


class TestStepPolicy:
    """The fatal/non-fatal table."""

    def test_every_step_classified(self):
        assert set(STEP_POLICY) == set(Step)

    def test_only_resolution_and_bootstrap_are_fatal(self):
        fatal = {step for step, policy in STEP_POLICY.items() if policy is Policy.FATAL}
        assert fatal == {Step.RESOLVE_COMMAND, Step.BOOTSTRAP}


class TestBestEffort:
    """Tests for the BestEffort helper."""

    @pytest.mark.asyncio
    async def test_success_records_nothing(self):
        steps = BestEffort()

        outcome = await steps.command(Step.ENABLE, result(0))

        assert outcome.ok
        assert steps.failures == []

    @pytest.mark.asyncio
    async def test_warn_step_logs_warning(self, caplog):
        steps = BestEffort()

        with caplog.at_level(logging.DEBUG, logger="gatewayctl.launchd.steps"):
            await steps.command(Step.ENABLE, result(1, " denied \n"))

        assert steps.failures[0].step == Step.ENABLE
        assert steps.failures[0].detail == "denied"
        assert any(
            r.levelno == logging.WARNING and "enable failed: denied" in r.getMessage()
            for r in caplog.records
        )

    @pytest.mark.asyncio
    async def test_ignore_step_logs_debug(self, caplog):
        steps = BestEffort()

        with caplog.at_level(logging.DEBUG, logger="gatewayctl.launchd.steps"):
            await steps.command(Step.BOOTOUT, result(3, "No such process"))

        assert len(steps.failures) == 1
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_fatal_step_rejected(self):
        with pytest.raises(ValueError, match="fatal"):
            BestEffort().record(Step.BOOTSTRAP, "nope")

    def test_remove_missing_file(self, tmp_path: Path):
        steps = BestEffort()

        steps.remove(Step.PLIST_REMOVE, tmp_path / "missing.plist")

        assert steps.failures == []

    def test_remove_failure_recorded(self, tmp_path: Path):
        directory = tmp_path / "dir.plist"
        directory.mkdir()
        steps = BestEffort()

        steps.remove(Step.PLIST_REMOVE, directory)

        assert steps.failures[0].step == Step.PLIST_REMOVE
        assert directory.exists()

    def test_check(self):
        steps = BestEffort()

        steps.check(Step.WRITE_PLIST, True)
        steps.check(Step.WRITE_PLIST, False, "/x.plist")

        assert [f.detail for f in steps.failures] == ["/x.plist"]

    def test_log_summary(self, caplog):
        steps = BestEffort()
        steps.check(Step.WRITE_PLIST, False)
        steps.record(Step.BOOTOUT, "No such process")

        with caplog.at_level(logging.DEBUG, logger="gatewayctl.launchd.steps"):
            steps.log_summary("enable")

        assert (
            "launchd enable finished with 2 non-fatal failure(s): write_plist, bootout"
            in caplog.messages
        )

    def test_log_summary_silent_without_failures(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="gatewayctl.launchd.steps"):
            BestEffort().log_summary("disable")

        assert caplog.records == []
