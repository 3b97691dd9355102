"""Configuration containers for the MVM bridge client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..constants import (
    BRIDGE_ADDRESS,
    DEFAULT_POLL_INTERVAL,
    ETH_ASSET_ID,
    MAINNET_CHAIN_ID,
    MAINNET_RPC_URL,
    MIXIN_API_URL,
    MVM_CHAIN_ID,
    MVM_EXPLORER_URL,
    MVM_RPC_URL,
    REGISTRY_PID,
    STORAGE_ADDRESS,
    SWAP_API_URL,
    WITHDRAWAL_BOT,
)
from ..types import Network
from ..utils import to_hex

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_BRIDGE_GAS_PRICE = 10_000_000
DEFAULT_BRIDGE_GAS_LIMIT = 350_000
DEFAULT_DEPOSIT_GAS_LIMIT = 300_000


@dataclass(frozen=True)
class NetworkParams:
    """EIP-3085 parameters passed to ``wallet_addEthereumChain``."""

    chain_id: int
    chain_name: str
    rpc_urls: tuple[str, ...]
    currency_name: str = "Ether"
    currency_symbol: str = "ETH"
    currency_decimals: int = 18
    block_explorer_urls: tuple[str, ...] = field(default_factory=tuple)

    def as_request_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "chainId": to_hex(self.chain_id),
            "chainName": self.chain_name,
            "nativeCurrency": {
                "name": self.currency_name,
                "symbol": self.currency_symbol,
                "decimals": self.currency_decimals,
            },
            "rpcUrls": list(self.rpc_urls),
        }
        if self.block_explorer_urls:
            params["blockExplorerUrls"] = list(self.block_explorer_urls)
        return params


@dataclass(frozen=True)
class GasConfig:
    """Fixed gas settings applied to bridge and deposit calls."""

    bridge_gas_price: int = DEFAULT_BRIDGE_GAS_PRICE
    bridge_gas_limit: int = DEFAULT_BRIDGE_GAS_LIMIT
    deposit_gas_limit: int = DEFAULT_DEPOSIT_GAS_LIMIT


@dataclass(frozen=True)
class ApiConfig:
    """Endpoints of the external read API."""

    mixin_api_url: str = MIXIN_API_URL
    swap_api_url: str = SWAP_API_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class BridgeClientConfig:
    """Aggregated configuration used to construct the bridge client."""

    mainnet_rpc_url: str = MAINNET_RPC_URL
    mvm_rpc_url: str = MVM_RPC_URL
    mainnet_chain_id: int = MAINNET_CHAIN_ID
    mvm_chain_id: int = MVM_CHAIN_ID
    bridge_address: str = BRIDGE_ADDRESS
    storage_address: str = STORAGE_ADDRESS
    registry_pid: str = REGISTRY_PID
    withdrawal_bot: str = WITHDRAWAL_BOT
    source_native_asset_id: str = ETH_ASSET_ID
    settlement_native_asset_id: str = ETH_ASSET_ID
    wait_for_receipt: bool = False
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    evict_failed_fees: bool = False
    fee_ttl: float | None = None
    gas: GasConfig = GasConfig()
    api: ApiConfig = ApiConfig()

    def chain_id_for(self, network: Network) -> int:
        return self.mainnet_chain_id if network == Network.MAINNET else self.mvm_chain_id

    def rpc_url_for(self, network: Network) -> str:
        return self.mainnet_rpc_url if network == Network.MAINNET else self.mvm_rpc_url

    def network_params(self) -> Mapping[str, NetworkParams]:
        """Return add-chain parameters keyed by hex chain id."""

        mainnet = NetworkParams(
            chain_id=self.mainnet_chain_id,
            chain_name="Ethereum Mainnet",
            rpc_urls=(self.mainnet_rpc_url,),
            block_explorer_urls=("https://etherscan.io/",),
        )
        mvm = NetworkParams(
            chain_id=self.mvm_chain_id,
            chain_name="Mixin Virtual Machine",
            rpc_urls=(self.mvm_rpc_url,),
            block_explorer_urls=(MVM_EXPLORER_URL,),
        )
        return {to_hex(params.chain_id): params for params in (mainnet, mvm)}

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, prefix: str = "MVM_BRIDGE_"
    ) -> BridgeClientConfig:
        """Build a configuration from ``MVM_BRIDGE_*`` environment variables."""

        env = os.environ if environ is None else environ

        def lookup(name: str) -> str | None:
            value = env.get(prefix + name)
            return value if value else None

        config = cls()
        overrides: dict[str, Any] = {}
        for name, caster in (
            ("MAINNET_RPC_URL", str),
            ("MVM_RPC_URL", str),
            ("BRIDGE_ADDRESS", str),
            ("STORAGE_ADDRESS", str),
            ("REGISTRY_PID", str),
            ("WITHDRAWAL_BOT", str),
            ("RECEIPT_TIMEOUT", float),
            ("POLL_INTERVAL", float),
            ("FEE_TTL", float),
        ):
            raw = lookup(name)
            if raw is not None:
                overrides[name.lower()] = caster(raw)

        raw_wait = lookup("WAIT_FOR_RECEIPT")
        if raw_wait is not None:
            overrides["wait_for_receipt"] = raw_wait.lower() in ("1", "true", "yes")

        raw_evict = lookup("EVICT_FAILED_FEES")
        if raw_evict is not None:
            overrides["evict_failed_fees"] = raw_evict.lower() in ("1", "true", "yes")

        api_overrides: dict[str, Any] = {}
        for name in ("MIXIN_API_URL", "SWAP_API_URL"):
            raw = lookup(name)
            if raw is not None:
                api_overrides[name.lower()] = raw.rstrip("/")
        raw_timeout = lookup("REQUEST_TIMEOUT")
        if raw_timeout is not None:
            api_overrides["request_timeout"] = float(raw_timeout)
        if api_overrides:
            overrides["api"] = replace(config.api, **api_overrides)

        return replace(config, **overrides)
