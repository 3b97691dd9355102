"""Tests for wallet chain switching."""

from types import SimpleNamespace

import pytest
from conftest import DummyProvider, unknown_chain_error

from mvm_bridge.evm.network import NetworkSwitchController
from mvm_bridge.exceptions import ProviderError
from mvm_bridge.types import Network


@pytest.mark.asyncio
async def test_switch_to_mvm(config):
    provider = DummyProvider()
    await NetworkSwitchController(config).ensure_network(provider, Network.MVM)

    assert provider.requests == [("wallet_switchEthereumChain", [{"chainId": "0x120c7"}])]


@pytest.mark.asyncio
async def test_switch_to_mainnet(config):
    provider = DummyProvider()
    await NetworkSwitchController(config).ensure_network(provider, Network.MAINNET)

    assert provider.requests == [("wallet_switchEthereumChain", [{"chainId": "0x1"}])]


@pytest.mark.asyncio
async def test_unknown_chain_registers_once(config):
    provider = DummyProvider(switch_error=unknown_chain_error())
    await NetworkSwitchController(config).ensure_network(provider, Network.MVM)

    methods = [method for method, _ in provider.requests]
    assert methods == ["wallet_switchEthereumChain", "wallet_addEthereumChain"]

    (params,) = provider.requests[1][1]
    assert params["chainId"] == "0x120c7"
    assert params["rpcUrls"] == [config.mvm_rpc_url]
    assert params["nativeCurrency"]["decimals"] == 18


@pytest.mark.asyncio
async def test_other_switch_error_is_fatal(config):
    provider = DummyProvider(switch_error=ProviderError("User rejected", code=4001))

    with pytest.raises(ProviderError) as excinfo:
        await NetworkSwitchController(config).ensure_network(provider, Network.MVM)

    assert excinfo.value.code == 4001
    assert [method for method, _ in provider.requests] == ["wallet_switchEthereumChain"]


@pytest.mark.asyncio
async def test_generic_exception_is_wrapped(config):
    provider = DummyProvider(switch_error=RuntimeError("boom"))

    with pytest.raises(ProviderError) as excinfo:
        await NetworkSwitchController(config).ensure_network(provider, Network.MAINNET)

    assert excinfo.value.code is None
    assert isinstance(excinfo.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_add_chain_rejection_is_fatal(config):
    provider = DummyProvider(
        switch_error=unknown_chain_error(),
        add_error=ProviderError("User rejected", code=4001),
    )

    with pytest.raises(ProviderError) as excinfo:
        await NetworkSwitchController(config).ensure_network(provider, Network.MVM)

    assert excinfo.value.method == "wallet_addEthereumChain"


@pytest.mark.asyncio
async def test_provider_without_request(config):
    with pytest.raises(ProviderError):
        await NetworkSwitchController(config).ensure_network(SimpleNamespace(), Network.MVM)


@pytest.mark.asyncio
async def test_unknown_chain_without_params(config):
    provider = DummyProvider(switch_error=unknown_chain_error())
    controller = NetworkSwitchController(config, network_params={})

    with pytest.raises(ProviderError):
        await controller.ensure_network(provider, Network.MVM)

    assert [method for method, _ in provider.requests] == ["wallet_switchEthereumChain"]
