"""Tests for the private-key wallet provider."""

import pytest
from eth_account import Account

from mvm_bridge.evm.wallet import LocalWalletProvider, WalletProvider
from mvm_bridge.exceptions import ProviderError, ValidationError

PRIVATE_KEY = "0x" + "11" * 32
RPC_URLS = {1: "https://mainnet.test", 73927: "https://mvm.test"}


@pytest.fixture
def wallet():
    return LocalWalletProvider(PRIVATE_KEY, RPC_URLS)


def test_satisfies_wallet_protocol(wallet):
    assert isinstance(wallet, WalletProvider)
    assert wallet.address == Account.from_key(PRIVATE_KEY).address
    assert wallet.chain_id == 1


@pytest.mark.asyncio
async def test_switch_known_chain(wallet):
    await wallet.request("wallet_switchEthereumChain", [{"chainId": "0x120c7"}])

    assert wallet.chain_id == 73927
    assert await wallet.request("eth_chainId") == "0x120c7"


@pytest.mark.asyncio
async def test_switch_unknown_chain_reports_4902():
    wallet = LocalWalletProvider(PRIVATE_KEY, {1: "https://mainnet.test"})

    with pytest.raises(ProviderError) as excinfo:
        await wallet.request("wallet_switchEthereumChain", [{"chainId": "0x120c7"}])

    assert excinfo.value.code == 4902
    assert wallet.chain_id == 1


@pytest.mark.asyncio
async def test_add_chain_registers_and_activates():
    wallet = LocalWalletProvider(PRIVATE_KEY, {1: "https://mainnet.test"})

    await wallet.request(
        "wallet_addEthereumChain",
        [{"chainId": "0x120c7", "chainName": "MVM", "rpcUrls": ["https://mvm.test"]}],
    )

    assert wallet.chain_id == 73927
    await wallet.request("wallet_switchEthereumChain", [{"chainId": "0x1"}])
    assert wallet.chain_id == 1


@pytest.mark.asyncio
async def test_add_chain_requires_rpc_urls(wallet):
    with pytest.raises(ProviderError) as excinfo:
        await wallet.request("wallet_addEthereumChain", [{"chainId": "0x5"}])
    assert excinfo.value.code == -32602


@pytest.mark.asyncio
async def test_malformed_params(wallet):
    with pytest.raises(ProviderError) as excinfo:
        await wallet.request("wallet_switchEthereumChain", [])
    assert excinfo.value.code == -32602


@pytest.mark.asyncio
async def test_accounts_and_unsupported_methods(wallet):
    assert await wallet.request("eth_accounts") == [wallet.address]

    with pytest.raises(ProviderError) as excinfo:
        await wallet.request("eth_sign", ["0x00"])
    assert excinfo.value.code == 4200


def test_signer_is_cached_per_chain(wallet):
    signer = wallet.get_signer()

    assert wallet.get_signer() is signer
    assert signer.eth.default_account == wallet.address


def test_requires_rpc_urls():
    with pytest.raises(ValidationError):
        LocalWalletProvider(PRIVATE_KEY, {})


def test_initial_chain_must_be_known():
    with pytest.raises(ValidationError):
        LocalWalletProvider(PRIVATE_KEY, RPC_URLS, chain_id=5)
