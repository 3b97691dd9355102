"""Tests for the bridge client facade and chain reads."""

import asyncio
from types import SimpleNamespace

import pytest
from conftest import SENDER, TOKEN_ADDRESS, USER_CONTRACT, DummyProvider

from mvm_bridge.client import MVMBridgeClient
from mvm_bridge.evm.connections import Web3Connections
from mvm_bridge.exceptions import NetworkError, ValidationError
from mvm_bridge.types import DepositMode, Network


class FakeReadCall:
    def __init__(self, result):
        self._result = result

    async def call(self):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeReadProvider:
    def __init__(self):
        self.disconnected = False

    async def disconnect(self):
        self.disconnected = True


class FakeReadWeb3:
    def __init__(self, *, connected=True, balance=0, token_balance=0, decimals=6):
        self.provider = FakeReadProvider()
        self._connected = connected
        self.requested = []

        async def get_balance(address):
            self.requested.append(address)
            if isinstance(balance, Exception):
                raise balance
            return balance

        def contract(address, abi):
            return SimpleNamespace(
                address=address,
                functions=SimpleNamespace(
                    decimals=lambda: FakeReadCall(decimals),
                    balanceOf=lambda owner: FakeReadCall(token_balance),
                ),
            )

        self.eth = SimpleNamespace(get_balance=get_balance, contract=contract)

    async def is_connected(self):
        return self._connected


def _connections(config, monkeypatch, web3):
    connections = Web3Connections(config)
    monkeypatch.setattr(connections, "_build_web3", lambda rpc_url: web3)
    return connections


@pytest.mark.asyncio
async def test_connect_and_disconnect(config, monkeypatch):
    web3 = FakeReadWeb3()
    connections = _connections(config, monkeypatch, web3)

    await connections.connect()
    assert connections.is_connected()

    await connections.disconnect()
    assert not connections.is_connected()
    assert web3.provider.disconnected


@pytest.mark.asyncio
async def test_connect_fails_when_rpc_is_down(config, monkeypatch):
    connections = _connections(config, monkeypatch, FakeReadWeb3(connected=False))

    with pytest.raises(NetworkError):
        await connections.connect()
    assert not connections.is_connected()


@pytest.mark.asyncio
async def test_native_balance_is_formatted(config, monkeypatch):
    web3 = FakeReadWeb3(balance=1_250_000_000_000_000_000)
    connections = _connections(config, monkeypatch, web3)

    assert await connections.get_balance(SENDER, Network.MAINNET) == "1.25"


@pytest.mark.asyncio
async def test_token_balance_uses_contract_decimals(config, monkeypatch):
    connections = _connections(config, monkeypatch, FakeReadWeb3(token_balance=5_500_000))

    assert await connections.get_erc20_balance(SENDER, TOKEN_ADDRESS, Network.MVM) == "5.5"


@pytest.mark.asyncio
async def test_balance_errors_are_wrapped(config, monkeypatch):
    connections = _connections(config, monkeypatch, FakeReadWeb3(balance=RuntimeError("rpc")))

    with pytest.raises(NetworkError):
        await connections.get_balance(SENDER, Network.MVM)


@pytest.mark.asyncio
async def test_invalid_account(config, monkeypatch):
    connections = _connections(config, monkeypatch, FakeReadWeb3())

    with pytest.raises(ValidationError):
        await connections.get_balance("not-an-address", Network.MAINNET)


@pytest.mark.asyncio
async def test_client_routes_operations_through_one_provider(config, eth_asset, btc_asset):
    provider = DummyProvider()
    client = MVMBridgeClient(provider, config)

    response = await client.deposit(eth_asset, "1")
    await client.switch_network(Network.MVM)

    assert response.operation == "deposit"
    assert [params[0]["chainId"] for _, params in provider.requests] == ["0x1", "0x120c7"]
    assert client.deposit_mode(eth_asset) is DepositMode.WALLET
    assert client.deposit_mode(btc_asset) is DepositMode.QRCODE
    assert client.config is config


@pytest.mark.asyncio
async def test_client_login_and_disconnect(config, user):
    client = MVMBridgeClient(DummyProvider(), config)

    client.login(user)
    assert client.ledger.user == user
    client.logout()
    assert client.ledger.user is None

    await client.disconnect()
    assert not client.is_connected()


@pytest.mark.asyncio
async def test_switch_network_waits_for_running_withdrawal(config, eth_asset):
    provider = DummyProvider()
    client = MVMBridgeClient(provider, config)

    await asyncio.gather(
        client.withdraw(eth_asset, USER_CONTRACT, "1", "0xdestination", "", "0.001"),
        client.switch_network(Network.MAINNET),
    )

    assert provider.events == [
        ("switch", "0x120c7"),
        ("tx", "release"),
        ("tx", "release"),
        ("switch", "0x1"),
    ]
