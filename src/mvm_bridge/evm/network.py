"""Point the wallet provider at the chain an operation needs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..constants import UNRECOGNIZED_CHAIN_ERROR, WalletMethod
from ..exceptions import ProviderError
from ..types import Network
from ..utils import to_hex
from .config import BridgeClientConfig, NetworkParams

logger = logging.getLogger(__name__)


class NetworkSwitchController:
    """Switch the wallet's active chain, registering it first if unknown."""

    def __init__(
        self,
        config: BridgeClientConfig,
        network_params: Mapping[str, NetworkParams] | None = None,
    ) -> None:
        self._config = config
        self._network_params = (
            dict(network_params) if network_params is not None else config.network_params()
        )

    async def ensure_network(self, provider: Any, network: Network) -> None:
        """Make ``network`` the provider's active chain.

        A 4902 response to the switch triggers a single add-chain request,
        which also activates the chain; the switch is not re-issued. Any other
        failure aborts the calling operation.
        """
        request = getattr(provider, "request", None)
        if not callable(request):
            raise ProviderError("Wallet provider must expose a request method")

        chain_hex = to_hex(self._config.chain_id_for(network))
        logger.debug("Switching wallet to %s (%s)", network.value, chain_hex)

        try:
            await request(WalletMethod.SWITCH_CHAIN.value, [{"chainId": chain_hex}])
        except Exception as exc:
            if getattr(exc, "code", None) != UNRECOGNIZED_CHAIN_ERROR:
                raise ProviderError(
                    f"Wallet rejected switch to {network.value}",
                    code=getattr(exc, "code", None),
                    method=WalletMethod.SWITCH_CHAIN.value,
                    details={"chain_id": chain_hex, "error": str(exc)},
                ) from exc
            await self._add_chain(request, network, chain_hex)
            return

        logger.info("Wallet active on %s (%s)", network.value, chain_hex)

    async def _add_chain(self, request: Any, network: Network, chain_hex: str) -> None:
        params = self._network_params.get(chain_hex)
        if params is None:
            raise ProviderError(
                f"No chain parameters configured for {chain_hex}",
                code=UNRECOGNIZED_CHAIN_ERROR,
                method=WalletMethod.ADD_CHAIN.value,
            )

        logger.info("Chain %s unknown to wallet; requesting registration", chain_hex)
        try:
            await request(WalletMethod.ADD_CHAIN.value, [params.as_request_params()])
        except Exception as exc:
            raise ProviderError(
                f"Wallet rejected registration of {network.value}",
                code=getattr(exc, "code", None),
                method=WalletMethod.ADD_CHAIN.value,
                details={"chain_id": chain_hex, "error": str(exc)},
            ) from exc

        logger.info("Wallet active on %s (%s) after registration", network.value, chain_hex)
