"""Read-only chain connections for mainnet and MVM."""

from __future__ import annotations

import logging

from web3 import AsyncHTTPProvider, AsyncWeb3

from ..constants import NATIVE_DECIMALS
from ..exceptions import NetworkError, ValidationError
from ..types import Network
from ..utils import format_units
from .abi import ERC20_ABI
from .config import BridgeClientConfig

logger = logging.getLogger(__name__)


class Web3Connections:
    """Manage one read provider per network."""

    def __init__(self, config: BridgeClientConfig):
        self.config = config
        self._web3: dict[Network, AsyncWeb3] = {}
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        """Open both read providers and check that they answer."""

        for network in Network:
            rpc_url = self.config.rpc_url_for(network)
            web3 = self._build_web3(rpc_url)
            if not await web3.is_connected():
                raise NetworkError(f"Unable to connect to {network.value} RPC", endpoint=rpc_url)
            self._web3[network] = web3
            logger.info("Connected to %s RPC at %s", network.value, rpc_url)

        self._connected = True

    async def disconnect(self) -> None:
        providers = list(self._web3.values())
        self._web3.clear()
        self._connected = False
        for web3 in providers:
            await web3.provider.disconnect()

    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def web3_for(self, network: Network) -> AsyncWeb3:
        web3 = self._web3.get(network)
        if web3 is None:
            web3 = self._build_web3(self.config.rpc_url_for(network))
            self._web3[network] = web3
        return web3

    # ------------------------------------------------------------------
    # Balance reads
    # ------------------------------------------------------------------
    async def get_balance(
        self, account: str, network: Network, decimals: int = NATIVE_DECIMALS
    ) -> str:
        """Native balance of ``account`` as a decimal string."""

        web3 = self.web3_for(network)
        address = self._checksum(account, "account")
        try:
            balance = await web3.eth.get_balance(address)
        except Exception as exc:
            raise NetworkError(
                "Failed to read native balance",
                endpoint=self.config.rpc_url_for(network),
                details={"account": address, "error": str(exc)},
            ) from exc
        return format_units(balance, decimals)

    async def get_erc20_balance(self, account: str, contract_address: str, network: Network) -> str:
        """Token balance of ``account`` as a decimal string."""

        web3 = self.web3_for(network)
        address = self._checksum(account, "account")
        token = web3.eth.contract(
            address=self._checksum(contract_address, "contract_address"), abi=ERC20_ABI
        )
        try:
            decimals = await token.functions.decimals().call()
            balance = await token.functions.balanceOf(address).call()
        except Exception as exc:
            raise NetworkError(
                "Failed to read token balance",
                endpoint=self.config.rpc_url_for(network),
                details={"account": address, "contract": contract_address, "error": str(exc)},
            ) from exc
        return format_units(balance, decimals)

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3(self, rpc_url: str) -> AsyncWeb3:
        return AsyncWeb3(AsyncHTTPProvider(rpc_url))

    @staticmethod
    def _checksum(address: str, field: str) -> str:
        try:
            return AsyncWeb3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid {field}", field=field, value=address) from exc
