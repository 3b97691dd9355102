"""EVM side of the bridge client: wallet, chain switching and transactions."""

from .config import ApiConfig, BridgeClientConfig, GasConfig, NetworkParams
from .network import NetworkSwitchController
from .wallet import LocalWalletProvider, WalletProvider

__all__ = [
    "ApiConfig",
    "BridgeClientConfig",
    "GasConfig",
    "LocalWalletProvider",
    "NetworkParams",
    "NetworkSwitchController",
    "WalletProvider",
]
