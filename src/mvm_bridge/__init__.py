"""MVM Bridge - deposit, withdraw and swap between Ethereum and the Mixin Virtual Machine.

This library wraps the MVM bridge contract behind an async client: it
classifies assets, encodes bridge extra payloads, keeps the wallet on the
right chain and maintains a live view of balances and fee quotes.
"""

from .base import BridgeProtocolBase
from .classifier import classify_asset, select_deposit_mode
from .client import MVMBridgeClient
from .evm.builder import BridgeTransactionBuilder
from .evm.config import ApiConfig, BridgeClientConfig, GasConfig, NetworkParams
from .evm.network import NetworkSwitchController
from .evm.wallet import LocalWalletProvider, WalletProvider
from .exceptions import (
    BridgeError,
    NetworkError,
    ProviderError,
    TransferError,
    UnsupportedAssetError,
    ValidationError,
)
from .extra import encode_code_extra, encode_withdrawal_extra
from .store import KeyedAsyncCache, LedgerStore, PollingContainer
from .types import (
    Address,
    Asset,
    AssetShape,
    CodeResponse,
    DepositMode,
    ExchangeRate,
    Network,
    Pair,
    RegisteredUser,
    Response,
    SwapOrder,
)
from .utils import format_units, parse_units, round_amount

__version__ = "0.1.0"

__all__ = [
    # Clients
    "BridgeProtocolBase",
    "MVMBridgeClient",
    "BridgeTransactionBuilder",
    "NetworkSwitchController",
    "LocalWalletProvider",
    "WalletProvider",
    # Configuration
    "ApiConfig",
    "BridgeClientConfig",
    "GasConfig",
    "NetworkParams",
    # Types and enums
    "Address",
    "Asset",
    "AssetShape",
    "CodeResponse",
    "DepositMode",
    "ExchangeRate",
    "Network",
    "Pair",
    "RegisteredUser",
    "Response",
    "SwapOrder",
    # Store
    "KeyedAsyncCache",
    "LedgerStore",
    "PollingContainer",
    # Exceptions
    "BridgeError",
    "NetworkError",
    "ProviderError",
    "TransferError",
    "UnsupportedAssetError",
    "ValidationError",
    # Functions
    "classify_asset",
    "select_deposit_mode",
    "encode_withdrawal_extra",
    "encode_code_extra",
    "format_units",
    "parse_units",
    "round_amount",
]
