"""Tests for the MCP tool surface and entry point."""

from unittest.mock import AsyncMock, patch

import pytest
from mcp.server.fastmcp import FastMCP

from uniswap_mcp import __version__
from uniswap_mcp import main as main_module
from uniswap_mcp.config import Settings
from uniswap_mcp.errors import ChainError, ErrorKind
from uniswap_mcp.server import (
    SERVER_NAME,
    build_server,
    get_eth_balance,
    register,
    swap_eth_for_usdc,
)
from uniswap_mcp.services.balance import BalanceService
from uniswap_mcp.swap.orchestrator import SwapOrchestrator

from conftest import ANVIL_PRIVATE_KEY, RECIPIENT


class TestBalanceTool:

    @pytest.mark.asyncio
    async def test_success_text(self, fake_client):
        fake_client.eth_balance = 10_000 * 10**18

        text = await get_eth_balance(BalanceService(fake_client), RECIPIENT)

        assert text == f"Balance for {RECIPIENT}: 10000 ETH"

    @pytest.mark.asyncio
    async def test_unreachable_endpoint_text(self, fake_client):
        fake_client.balance_error = ChainError(ErrorKind.TRANSPORT, "Connection refused")

        text = await get_eth_balance(BalanceService(fake_client), RECIPIENT)

        assert text == (
            f"Failed to retrieve balance for address: {RECIPIENT}. Error: Connection refused"
        )

    @pytest.mark.asyncio
    async def test_service_crash_still_returns_text(self):
        service = AsyncMock()
        service.get_eth_balance.side_effect = RuntimeError("unexpected")

        text = await get_eth_balance(service, "0xabc")

        assert text == "Failed to retrieve balance for address: 0xabc. Error: unexpected"


class TestSwapTool:

    @pytest.mark.asyncio
    async def test_success_text(self, fake_client):
        fake_client.usdc_balance = 250_123_456

        text = await swap_eth_for_usdc(SwapOrchestrator(fake_client), RECIPIENT, "1.0")

        swap_hash = fake_client.writes[2]["tx_hash"]
        assert text == (
            f"Successfully swapped 1.0 ETH for 250.123456 USDC. Transaction hash: {swap_hash}"
        )

    @pytest.mark.asyncio
    async def test_failure_text(self, fake_client):
        fake_client.submit_errors["approve"] = ChainError(
            ErrorKind.REVERT, "execution reverted"
        )

        text = await swap_eth_for_usdc(SwapOrchestrator(fake_client), RECIPIENT, "1.0")

        assert text == "Failed to swap ETH for USDC. Error: execution reverted"

    @pytest.mark.asyncio
    async def test_invalid_amount_text(self, fake_client):
        text = await swap_eth_for_usdc(SwapOrchestrator(fake_client), RECIPIENT, "-3")

        assert text.startswith("Failed to swap ETH for USDC. Error: Amount must be positive")

    @pytest.mark.asyncio
    async def test_orchestrator_crash_still_returns_text(self):
        orchestrator = AsyncMock()
        orchestrator.swap_eth_for_usdc.side_effect = RuntimeError("unexpected")

        text = await swap_eth_for_usdc(orchestrator, RECIPIENT, "1")

        assert text == "Failed to swap ETH for USDC. Error: unexpected"


class TestRegistration:

    @pytest.mark.asyncio
    async def test_tools_registered(self, fake_client):
        mcp = FastMCP("test")
        register(mcp, BalanceService(fake_client), SwapOrchestrator(fake_client))

        tools = {tool.name: tool for tool in await mcp.list_tools()}

        assert set(tools) == {"get_eth_balance", "swap_eth_for_usdc"}
        assert set(tools["get_eth_balance"].inputSchema["properties"]) == {"address"}
        # One consistently named amount field
        assert set(tools["swap_eth_for_usdc"].inputSchema["properties"]) == {
            "recipient",
            "amount_in",
        }

    def test_build_server(self, fake_client):
        mcp = build_server(Settings(_env_file=None), fake_client)

        assert isinstance(mcp, FastMCP)
        assert mcp.name == SERVER_NAME

    def test_build_server_advertises_package_version(self, fake_client):
        mcp = build_server(Settings(_env_file=None), fake_client)

        options = mcp._mcp_server.create_initialization_options()

        assert options.server_name == SERVER_NAME
        assert options.server_version == __version__ == "0.0.1"


class TestEntryPoint:

    def test_create_server_without_signer(self):
        mcp = main_module.create_server(
            Settings(_env_file=None, private_key=None, wallet_seed_phrase=None)
        )
        assert mcp.name == SERVER_NAME

    def test_create_server_with_private_key(self):
        mcp = main_module.create_server(Settings(_env_file=None, private_key=ANVIL_PRIVATE_KEY))
        assert mcp.name == SERVER_NAME

    def test_unknown_transport_rejected(self):
        with pytest.raises(ValueError):
            main_module.create_server(Settings(_env_file=None, transport="carrier-pigeon"))

    def test_fatal_startup_error_exits_nonzero(self, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", "not-a-key")

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1

    def test_main_runs_stdio_transport(self):
        with patch.object(FastMCP, "run_stdio_async", new_callable=AsyncMock) as run_stdio:
            main_module.main()

        run_stdio.assert_awaited_once()
