"""Wallet providers used to sign and send bridge transactions.

A wallet provider is anything exposing an EIP-1193 style ``request`` coroutine
plus a ``get_signer`` accessor returning an ``AsyncWeb3`` bound to the active
chain and the wallet's account. :class:`LocalWalletProvider` implements that
surface on top of a private key so the client can run without a browser
wallet.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, cast, runtime_checkable

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..constants import UNRECOGNIZED_CHAIN_ERROR, WalletMethod
from ..exceptions import ProviderError, ValidationError
from ..utils import to_hex

logger = logging.getLogger(__name__)

INVALID_PARAMS_ERROR = -32602
UNSUPPORTED_METHOD_ERROR = 4200


@runtime_checkable
class WalletProvider(Protocol):
    """Injected wallet: chain management requests plus a transaction signer."""

    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any: ...

    def get_signer(self) -> AsyncWeb3: ...


class LocalWalletProvider:
    """Private-key wallet that behaves like an injected browser wallet."""

    def __init__(
        self,
        private_key: str,
        rpc_urls: Mapping[int, str],
        *,
        chain_id: int | None = None,
    ) -> None:
        try:
            account = cast(LocalAccount, Account.from_key(private_key))  # type: ignore[arg-type]
        except Exception as exc:  # pragma: no cover - defensive
            raise ValidationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc

        if not rpc_urls:
            raise ValidationError("At least one chain RPC url is required", field="rpc_urls")

        self._account = account
        self._rpc_urls: dict[int, str] = dict(rpc_urls)
        self._chain_id = chain_id if chain_id is not None else next(iter(self._rpc_urls))
        if self._chain_id not in self._rpc_urls:
            raise ValidationError("Initial chain has no RPC url", field="chain_id", value=chain_id)
        self._signers: dict[int, AsyncWeb3] = {}

    # ------------------------------------------------------------------
    # EIP-1193 surface
    # ------------------------------------------------------------------
    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        if method == WalletMethod.SWITCH_CHAIN:
            chain_id = self._chain_id_param(method, params)
            if chain_id not in self._rpc_urls:
                raise ProviderError(
                    f"Unrecognized chain ID {to_hex(chain_id)}",
                    code=UNRECOGNIZED_CHAIN_ERROR,
                    method=method,
                )
            self._chain_id = chain_id
            logger.debug("Wallet switched to chain %s", chain_id)
            return None

        if method == WalletMethod.ADD_CHAIN:
            chain_id = self._chain_id_param(method, params)
            entry = cast(Mapping[str, Any], params[0])  # type: ignore[index]
            rpc_urls = entry.get("rpcUrls") or []
            if not rpc_urls:
                raise ProviderError(
                    "wallet_addEthereumChain requires rpcUrls",
                    code=INVALID_PARAMS_ERROR,
                    method=method,
                )
            self._rpc_urls[chain_id] = str(rpc_urls[0])
            self._signers.pop(chain_id, None)
            self._chain_id = chain_id
            logger.info("Wallet registered chain %s (%s)", chain_id, entry.get("chainName"))
            return None

        if method == WalletMethod.CHAIN_ID:
            return to_hex(self._chain_id)

        if method == WalletMethod.ACCOUNTS:
            return [self._account.address]

        raise ProviderError(
            f"Unsupported wallet method {method}", code=UNSUPPORTED_METHOD_ERROR, method=method
        )

    def get_signer(self) -> AsyncWeb3:
        signer = self._signers.get(self._chain_id)
        if signer is None:
            signer = AsyncWeb3(AsyncHTTPProvider(self._rpc_urls[self._chain_id]))
            signer.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(self._account))  # type: ignore[arg-type]
            signer.eth.default_account = self._account.address
            self._signers[self._chain_id] = signer
        return signer

    async def disconnect(self) -> None:
        signers = list(self._signers.values())
        self._signers.clear()
        for signer in signers:
            await signer.provider.disconnect()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def _chain_id_param(self, method: str, params: Sequence[Any] | None) -> int:
        try:
            raw = params[0]["chainId"]  # type: ignore[index]
            return int(raw, 16) if isinstance(raw, str) else int(raw)
        except (TypeError, KeyError, IndexError, ValueError) as exc:
            raise ProviderError(
                f"{method} requires a chainId parameter",
                code=INVALID_PARAMS_ERROR,
                method=method,
                details={"params": params},
            ) from exc
