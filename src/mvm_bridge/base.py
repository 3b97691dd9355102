"""Bridge protocol base interface."""

from abc import ABC, abstractmethod

from .types import Asset, Network, RegisteredUser, Response, SwapOrder


class BridgeProtocolBase(ABC):
    """Mainnet <-> MVM bridge interface."""

    @abstractmethod
    async def deposit(self, asset: Asset, amount: str) -> Response:
        pass

    @abstractmethod
    async def withdraw(
        self,
        asset: Asset,
        user_contract: str,
        amount: str,
        destination: str,
        tag: str = "",
        fee: str = "0",
    ) -> Response:
        pass

    @abstractmethod
    async def swap_asset(
        self,
        user: RegisteredUser,
        order: SwapOrder,
        input_asset: Asset,
        min_received: str,
    ) -> Response:
        pass

    @abstractmethod
    async def get_balance(self, account: str, network: Network) -> str:
        pass

    @abstractmethod
    async def get_erc20_balance(self, account: str, contract_address: str, network: Network) -> str:
        pass

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        pass
