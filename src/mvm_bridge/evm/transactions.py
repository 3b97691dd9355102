"""Transaction dispatch helpers for the bridge client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from web3 import AsyncWeb3

from ..exceptions import TransferError
from ..utils import serialise_receipt

logger = logging.getLogger(__name__)


class TransactionDispatcher:
    """Encapsulate transaction submission and receipt handling."""

    def __init__(self, *, wait_for_receipt: bool, receipt_timeout: float) -> None:
        self._wait_for_receipt = wait_for_receipt
        self._receipt_timeout = receipt_timeout

    async def send(
        self,
        web3: AsyncWeb3,
        contract_function: Any,
        tx_params: Mapping[str, Any],
        *,
        action: str,
        context: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Submit a contract call through the signer."""

        logger.info("Dispatching %s via %s", action, getattr(contract_function, "fn_name", "call"))
        try:
            tx_hash = await contract_function.transact(dict(tx_params))
        except Exception as exc:
            raise TransferError(
                f"Failed to submit transaction for {action}",
                transfer_type=action,
                amount=tx_params.get("value"),
                details={"context": dict(context), "error": str(exc)},
            ) from exc
        return await self._finalise(web3, tx_hash, action, context)

    async def send_value(
        self,
        web3: AsyncWeb3,
        tx_params: Mapping[str, Any],
        *,
        action: str,
        context: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Submit a plain value transfer through the signer."""

        logger.info("Dispatching %s as value transfer to %s", action, tx_params.get("to"))
        try:
            tx_hash = await web3.eth.send_transaction(dict(tx_params))  # type: ignore[arg-type]
        except Exception as exc:
            raise TransferError(
                f"Failed to submit transaction for {action}",
                transfer_type=action,
                amount=tx_params.get("value"),
                details={"context": dict(context), "error": str(exc)},
            ) from exc
        return await self._finalise(web3, tx_hash, action, context)

    async def _finalise(
        self, web3: AsyncWeb3, tx_hash: Any, action: str, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        tx_hex = tx_hash.to_0x_hex()
        logger.info("Transaction sent for action=%s hash=%s", action, tx_hex)

        serialised_receipt = None
        block_number = None
        if self._wait_for_receipt:
            receipt = await web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
            if receipt:
                block_number = receipt.get("blockNumber")
                logger.info(
                    "Transaction confirmed for action=%s hash=%s block=%s",
                    action,
                    tx_hex,
                    block_number,
                )
                serialised_receipt = serialise_receipt(receipt)
                if receipt.get("status", 1) == 0:
                    raise TransferError(
                        f"Transaction reverted for {action}",
                        transfer_type=action,
                        details={"tx_hash": tx_hex, "context": dict(context)},
                    )

        return {
            "tx_hash": tx_hex,
            "action": action,
            "context": dict(context),
            "receipt": serialised_receipt,
            "block_number": block_number,
        }
