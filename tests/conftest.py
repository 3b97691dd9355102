from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest
from hexbytes import HexBytes

from mvm_bridge.constants import ETH_ASSET_ID
from mvm_bridge.evm.config import BridgeClientConfig
from mvm_bridge.exceptions import ProviderError
from mvm_bridge.types import ActionResponse, Asset, CodeResponse, RegisteredUser

SENDER = "0x" + "aa" * 20
USER_CONTRACT = "0x" + "bb" * 20
DEPOSIT_ADDRESS = "0x" + "cc" * 20
TOKEN_ADDRESS = "0x" + "dd" * 20
MVM_TOKEN_ADDRESS = "0x" + "ee" * 20
USDT_ASSET_ID = "4d8c508b-91c5-375b-92b0-ee702ed2dac5"
BTC_ASSET_ID = "c6d0c728-2624-429b-8e0d-d9d19b6592fa"


class ChainLedger:
    """Shared record of every call a fake signer makes."""

    def __init__(self, events: list[tuple[str, Any]] | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.events = events if events is not None else []

    def record(self, **entry: Any) -> HexBytes:
        self.calls.append(entry)
        self.events.append(("tx", entry.get("fn_name", entry["kind"])))
        return HexBytes(bytes([len(self.calls)]) * 32)


class DummyCall:
    def __init__(self, contract: DummyContract, fn_name: str, args: tuple[Any, ...]) -> None:
        self._contract = contract
        self.fn_name = fn_name
        self.args = args

    async def transact(self, params: dict[str, Any]) -> HexBytes:
        await asyncio.sleep(0)
        return self._contract.ledger.record(
            kind="transact",
            address=self._contract.address,
            fn_name=self.fn_name,
            args=self.args,
            params=params,
        )

    async def call(self) -> Any:
        if self.fn_name == "decimals":
            return self._contract.decimals
        raise AssertionError(f"unexpected call {self.fn_name}")


class DummyContract:
    def __init__(self, ledger: ChainLedger, address: str, abi: Any, decimals: int) -> None:
        self.ledger = ledger
        self.address = address
        self.abi = abi
        self.decimals = decimals
        self.functions = SimpleNamespace(
            **{
                entry["name"]: self._bind(entry["name"])
                for entry in abi
                if entry.get("type") == "function"
            }
        )

    def _bind(self, name: str) -> Any:
        return lambda *args: DummyCall(self, name, args)


class DummyEth:
    def __init__(self, ledger: ChainLedger, decimals: int) -> None:
        self._ledger = ledger
        self._decimals = decimals
        self.default_account = SENDER

    def contract(self, address: str, abi: Any) -> DummyContract:
        return DummyContract(self._ledger, address, abi, self._decimals)

    async def send_transaction(self, params: dict[str, Any]) -> HexBytes:
        await asyncio.sleep(0)
        return self._ledger.record(kind="send", params=params)


class DummyProvider:
    """Wallet provider double recording requests and signer calls."""

    def __init__(
        self,
        *,
        switch_error: Exception | None = None,
        add_error: Exception | None = None,
        decimals: int = 6,
    ) -> None:
        self.requests: list[tuple[str, Any]] = []
        self.events: list[tuple[str, Any]] = []
        self.ledger = ChainLedger(self.events)
        self._switch_error = switch_error
        self._add_error = add_error
        self.signer = SimpleNamespace(eth=DummyEth(self.ledger, decimals))
        self.signer_requests = 0

    async def request(self, method: str, params: Any = None) -> Any:
        self.requests.append((method, params))
        if method == "wallet_switchEthereumChain":
            self.events.append(("switch", params[0]["chainId"]))
        await asyncio.sleep(0)
        if method == "wallet_switchEthereumChain" and self._switch_error is not None:
            raise self._switch_error
        if method == "wallet_addEthereumChain" and self._add_error is not None:
            raise self._add_error
        if method == "eth_accounts":
            return [SENDER]
        return None

    def get_signer(self) -> Any:
        self.signer_requests += 1
        return self.signer


class DummyApi:
    def __init__(self, code: CodeResponse | None = None) -> None:
        self.actions: list[tuple[str, str, str, RegisteredUser]] = []
        self.codes: list[str] = []
        self._code = code or CodeResponse(
            receivers=("a753e0eb-3010-4c4a-a7b2-a7bda4063f62",), threshold=1, memo="c3dhcA"
        )

    def create_action(
        self, action: str, amount: str, asset_id: str, user: RegisteredUser
    ) -> ActionResponse:
        self.actions.append((action, amount, asset_id, user))
        return ActionResponse(code="code-123", follow_id="follow-1")

    def fetch_code(self, code: str) -> CodeResponse:
        self.codes.append(code)
        return self._code


@pytest.fixture
def config() -> BridgeClientConfig:
    return BridgeClientConfig()


@pytest.fixture
def eth_asset() -> Asset:
    return Asset(
        asset_id=ETH_ASSET_ID,
        chain_id=ETH_ASSET_ID,
        destination=DEPOSIT_ADDRESS,
        symbol="ETH",
        balance="2",
        price_usd="3",
    )


@pytest.fixture
def erc20_asset() -> Asset:
    return Asset(
        asset_id=USDT_ASSET_ID,
        chain_id=ETH_ASSET_ID,
        asset_key=TOKEN_ADDRESS,
        destination=DEPOSIT_ADDRESS,
        contract=MVM_TOKEN_ADDRESS,
        symbol="USDT",
    )


@pytest.fixture
def btc_asset() -> Asset:
    return Asset(asset_id=BTC_ASSET_ID, chain_id=BTC_ASSET_ID, symbol="BTC")


@pytest.fixture
def user() -> RegisteredUser:
    return RegisteredUser(
        user_id="e9e5b807-fa8b-455a-8dfa-b189d28310ff",
        contract=USER_CONTRACT,
        access_token="token",
    )


def unknown_chain_error() -> ProviderError:
    return ProviderError("Unrecognized chain ID", code=4902)
