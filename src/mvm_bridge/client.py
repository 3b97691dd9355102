"""MVM bridge client wiring the wallet, chain reads, ledger store and builder."""

from __future__ import annotations

import asyncio
import logging

import requests

from .api import BridgeApiClient
from .base import BridgeProtocolBase
from .classifier import select_deposit_mode
from .evm.builder import BridgeTransactionBuilder
from .evm.config import BridgeClientConfig
from .evm.connections import Web3Connections
from .evm.network import NetworkSwitchController
from .evm.wallet import WalletProvider
from .exceptions import NetworkError, ValidationError
from .store.ledger import LedgerStore
from .types import Asset, DepositMode, Network, RegisteredUser, Response, SwapOrder

logger = logging.getLogger(__name__)


class MVMBridgeClient(BridgeProtocolBase):
    """Move value between Ethereum mainnet and the Mixin Virtual Machine.

    One instance is created at application start and shared by reference;
    it owns the ledger store, the chain read connections and the transaction
    builder bound to ``provider``.
    """

    def __init__(
        self,
        provider: WalletProvider,
        config: BridgeClientConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config or BridgeClientConfig()
        self._provider = provider
        self._api = BridgeApiClient(self._config.api, session)
        self._connections = Web3Connections(self._config)
        self._switcher = NetworkSwitchController(self._config)
        self._builder = BridgeTransactionBuilder(
            provider, self._config, self._api, switcher=self._switcher
        )
        self.ledger = LedgerStore(
            self._api,
            poll_interval=self._config.poll_interval,
            evict_failed_fees=self._config.evict_failed_fees,
            fee_ttl=self._config.fee_ttl,
        )

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        try:
            await self._connections.connect()
        except (ValidationError, NetworkError):
            await self.disconnect()
            raise
        except Exception as exc:  # pragma: no cover - defensive
            await self.disconnect()
            raise NetworkError(
                "Failed to initialize bridge RPC connections",
                endpoint=self._config.mvm_rpc_url,
                details={"error": str(exc)},
            ) from exc

    async def disconnect(self) -> None:
        self.ledger.stop()
        await self._connections.disconnect()
        await asyncio.to_thread(self._api.close)

    def is_connected(self) -> bool:
        return self._connections.is_connected()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def login(self, user: RegisteredUser) -> None:
        self.ledger.set_user(user)

    def logout(self) -> None:
        self.ledger.set_user(None)

    # ------------------------------------------------------------------
    # Bridge actions
    # ------------------------------------------------------------------
    async def deposit(self, asset: Asset, amount: str) -> Response:
        return await self._builder.deposit(asset, amount)

    async def withdraw(
        self,
        asset: Asset,
        user_contract: str,
        amount: str,
        destination: str,
        tag: str = "",
        fee: str = "0",
    ) -> Response:
        return await self._builder.withdraw(asset, user_contract, amount, destination, tag, fee)

    async def swap_asset(
        self,
        user: RegisteredUser,
        order: SwapOrder,
        input_asset: Asset,
        min_received: str,
    ) -> Response:
        return await self._builder.swap(user, order, input_asset, min_received)

    async def switch_network(self, network: Network) -> None:
        await self._builder.switch_network(network)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_balance(self, account: str, network: Network) -> str:
        return await self._connections.get_balance(account, network)

    async def get_erc20_balance(self, account: str, contract_address: str, network: Network) -> str:
        return await self._connections.get_erc20_balance(account, contract_address, network)

    async def get_withdrawal_fee(self, asset: Asset, destination: str) -> str:
        return await self.ledger.withdrawal_fee(asset.asset_id, asset.chain_id, destination)

    def deposit_mode(self, asset: Asset) -> DepositMode:
        return select_deposit_mode(asset, self._config.source_native_asset_id)

    @property
    def config(self) -> BridgeClientConfig:
        return self._config
