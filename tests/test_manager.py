"""Tests for the ServiceManager wrapper."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from gatewayctl.launchd.agent import GatewayLaunchAgent
from gatewayctl.launchd.manager import ServiceManager
from gatewayctl.launchd.types import AgentStatus
from tests.conftest import LABEL


@pytest.fixture
def mock_agent():
    agent = MagicMock(spec=GatewayLaunchAgent)
    agent.label = LABEL
    agent.enable = AsyncMock(return_value=None)
    agent.disable = AsyncMock(return_value=None)
    agent.kickstart = AsyncMock(return_value=None)
    return agent


@pytest.fixture
def manager(mock_agent):
    return ServiceManager(agent=mock_agent)


class TestServiceManager:
    """Result translation."""

    @pytest.mark.asyncio
    async def test_enable_success(self, manager, mock_agent):
        success, message = await manager.enable(8787)

        assert success is True
        assert "8787" in message
        mock_agent.enable.assert_awaited_once_with(8787)

    @pytest.mark.asyncio
    async def test_enable_failure(self, manager, mock_agent):
        mock_agent.enable.return_value = "gateway CLI not found in PATH"

        success, message = await manager.enable(8787)

        assert success is False
        assert message == "gateway CLI not found in PATH"

    @pytest.mark.asyncio
    async def test_disable_always_succeeds(self, manager, mock_agent):
        success, _ = await manager.disable()

        assert success is True
        mock_agent.disable.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_kickstart(self, manager, mock_agent):
        success, _ = await manager.kickstart(force=False)

        assert success is True
        mock_agent.kickstart.assert_awaited_once_with(force=False)

    @pytest.mark.asyncio
    async def test_status(self, manager, mock_agent, tmp_path):
        expected = AgentStatus(
            label=LABEL,
            plist_path=tmp_path / "x.plist",
            loaded=True,
            write_disabled=False,
        )
        mock_agent.status = AsyncMock(return_value=expected)

        assert await manager.status() is expected

    def test_label(self, manager):
        assert manager.label == LABEL


class TestSingleFlight:
    """Concurrent callers are serialized."""

    @pytest.mark.asyncio
    async def test_enable_calls_do_not_overlap(self, manager, mock_agent):
        active = 0
        max_active = 0
        order: list[str] = []

        async def slow_enable(port: int):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            order.append(f"start {port}")
            await asyncio.sleep(0.01)
            order.append(f"end {port}")
            active -= 1
            return None

        mock_agent.enable.side_effect = slow_enable

        await asyncio.gather(manager.enable(1), manager.enable(2), manager.disable())

        assert max_active == 1
        assert order == ["start 1", "end 1", "start 2", "end 2"]

    @pytest.mark.asyncio
    async def test_end_to_end_with_fake_launchctl(self, agent, fake_launchctl):
        manager = ServiceManager(agent=agent)

        results = await asyncio.gather(manager.enable(8787), manager.enable(8787))

        assert all(success for success, _ in results)
        # The second call sees the first one's job and leaves it alone
        assert fake_launchctl.names().count("bootstrap") == 1
