"""Deposit, withdraw and swap call sequences against the MVM bridge."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3

from ..api import BridgeApiClient
from ..classifier import classify_asset
from ..constants import NATIVE_DECIMALS, SWAP_ACTION_OPCODE, WalletMethod
from ..exceptions import NetworkError, UnsupportedAssetError, ValidationError
from ..extra import encode_code_extra, encode_withdrawal_extra
from ..types import Asset, AssetShape, Network, RegisteredUser, Response, SwapOrder
from ..utils import derive_trace_id, generate_trace_id, parse_units, round_amount
from .abi import BRIDGE_ABI, ERC20_ABI, MVM_ERC20_ABI
from .config import BridgeClientConfig
from .network import NetworkSwitchController
from .transactions import TransactionDispatcher
from .wallet import WalletProvider

logger = logging.getLogger(__name__)


class BridgeTransactionBuilder:
    """Build and submit bridge transactions through an injected wallet.

    Operations on one builder are serialised: a second call waits until the
    first has switched chains and submitted all of its legs.
    """

    def __init__(
        self,
        provider: WalletProvider,
        config: BridgeClientConfig,
        api: BridgeApiClient,
        *,
        switcher: NetworkSwitchController | None = None,
        dispatcher: TransactionDispatcher | None = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self._api = api
        self._switcher = switcher or NetworkSwitchController(config)
        self._dispatcher = dispatcher or TransactionDispatcher(
            wait_for_receipt=config.wait_for_receipt,
            receipt_timeout=config.receipt_timeout,
        )
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------
    async def deposit(self, asset: Asset, amount: str) -> Response:
        """Send ``amount`` of ``asset`` from mainnet to its bridge deposit address."""

        shape = self._classify(asset, Network.MAINNET, "deposit")
        destination = self._checksum(asset.destination, "destination")

        async with self._lock:
            await self._switcher.ensure_network(self._provider, Network.MAINNET)
            signer = self._provider.get_signer()

            if shape == AssetShape.SOURCE_NATIVE:
                value = parse_units(amount, NATIVE_DECIMALS)
                sender = await self._sender_address(signer)
                result = await self._dispatcher.send_value(
                    signer,
                    {
                        "from": sender,
                        "to": destination,
                        "value": value,
                        "chainId": self._config.mainnet_chain_id,
                    },
                    action="deposit",
                    context={"asset_id": asset.asset_id},
                )
            elif shape == AssetShape.SOURCE_TOKEN:
                token = signer.eth.contract(
                    address=self._checksum(asset.asset_key, "asset_key"), abi=ERC20_ABI
                )
                decimals = await self._token_decimals(token, asset)
                value = parse_units(amount, decimals)
                result = await self._dispatcher.send(
                    signer,
                    token.functions.transfer(destination, value),
                    {"gas": self._config.gas.deposit_gas_limit},
                    action="deposit",
                    context={"asset_id": asset.asset_id, "decimals": decimals},
                )
            else:  # pragma: no cover - classify_asset only yields mainnet shapes here
                raise UnsupportedAssetError(asset.asset_id, asset.chain_id, "deposit")

        return Response(
            success=True,
            operation="deposit",
            network=Network.MAINNET,
            shape=shape,
            transaction_hashes=[result["tx_hash"]],
            amount=value,
            raw_response=[result],
        )

    async def withdraw(
        self,
        asset: Asset,
        user_contract: str,
        amount: str,
        destination: str,
        tag: str = "",
        fee: str = "0",
    ) -> Response:
        """Release ``amount`` of ``asset`` to ``destination`` and pay ``fee`` in ETH.

        Issues two sequential bridge calls: the asset leg, then the fee leg.
        """

        shape = self._classify(asset, Network.MVM, "withdraw")
        receiver = self._checksum(user_contract, "user_contract")
        fee_value = parse_units(round_amount(fee, field="fee"), NATIVE_DECIMALS, "fee")
        rounded_amount = round_amount(amount)

        trace_id = generate_trace_id()
        asset_extra = self._withdrawal_extra(destination, tag, trace_id)
        fee_extra = self._withdrawal_extra(destination, tag, derive_trace_id(trace_id, "fee"))
        context = {"asset_id": asset.asset_id, "trace_id": trace_id}

        async with self._lock:
            await self._switcher.ensure_network(self._provider, Network.MVM)
            signer = self._provider.get_signer()
            bridge = self._bridge_contract(signer)

            logger.debug("Stage withdraw [%s]: submit asset leg (shape=%s)", trace_id, shape.name)
            if shape == AssetShape.SETTLEMENT_NATIVE:
                value = parse_units(rounded_amount, NATIVE_DECIMALS)
                asset_leg = await self._dispatcher.send(
                    signer,
                    bridge.functions.release(receiver, HexBytes(asset_extra)),
                    self._bridge_tx_params(value),
                    action="withdraw_asset",
                    context=context,
                )
            elif shape == AssetShape.SETTLEMENT_TOKEN:
                value, asset_leg = await self._transfer_with_extra(
                    signer, asset, receiver, rounded_amount, asset_extra, "withdraw_asset", context
                )
            else:  # pragma: no cover - classify_asset only yields MVM shapes here
                raise UnsupportedAssetError(asset.asset_id, asset.chain_id, "withdraw")

            logger.debug("Stage withdraw [%s]: submit fee leg", trace_id)
            fee_leg = await self._dispatcher.send(
                signer,
                bridge.functions.release(receiver, HexBytes(fee_extra)),
                self._bridge_tx_params(fee_value),
                action="withdraw_fee",
                context=context,
            )

        logger.debug("Stage withdraw [%s]: complete", trace_id)
        return Response(
            success=True,
            operation="withdraw",
            network=Network.MVM,
            shape=shape,
            trace_id=trace_id,
            transaction_hashes=[asset_leg["tx_hash"], fee_leg["tx_hash"]],
            amount=value,
            fee=fee_value,
            raw_response=[asset_leg, fee_leg],
        )

    async def swap(
        self,
        user: RegisteredUser,
        order: SwapOrder,
        input_asset: Asset,
        min_received: str,
    ) -> Response:
        """Pay ``order.funds`` of ``input_asset`` into a swap action."""

        shape = self._classify(input_asset, Network.MVM, "swap")
        receiver = self._checksum(user.contract, "contract")
        rounded_funds = round_amount(order.funds, field="funds")

        trace_id = generate_trace_id()
        action = ",".join(
            str(part)
            for part in (
                SWAP_ACTION_OPCODE,
                user.user_id,
                trace_id,
                order.fill_asset_id,
                order.routes,
                min_received,
            )
        )
        context = {"asset_id": input_asset.asset_id, "trace_id": trace_id}

        async with self._lock:
            logger.debug("Stage swap [%s]: create action", trace_id)
            action_resp = await asyncio.to_thread(
                self._api.create_action, action, order.funds, order.pay_asset_id, user
            )
            logger.debug(
                "Stage swap [%s]: resolve code %s (follow_id=%s)",
                trace_id,
                action_resp.code,
                action_resp.follow_id,
            )
            code = await asyncio.to_thread(self._api.fetch_code, action_resp.code)
            extra = encode_code_extra(
                code,
                registry_pid=self._config.registry_pid,
                storage_address=self._config.storage_address,
            )

            await self._switcher.ensure_network(self._provider, Network.MVM)
            signer = self._provider.get_signer()

            logger.debug("Stage swap [%s]: submit payment (shape=%s)", trace_id, shape.name)
            if shape == AssetShape.SETTLEMENT_NATIVE:
                value = parse_units(rounded_funds, NATIVE_DECIMALS, "funds")
                result = await self._dispatcher.send(
                    signer,
                    self._bridge_contract(signer).functions.release(receiver, HexBytes(extra)),
                    self._bridge_tx_params(value),
                    action="swap",
                    context=context,
                )
            elif shape == AssetShape.SETTLEMENT_TOKEN:
                value, result = await self._transfer_with_extra(
                    signer, input_asset, receiver, rounded_funds, extra, "swap", context
                )
            else:  # pragma: no cover - classify_asset only yields MVM shapes here
                raise UnsupportedAssetError(input_asset.asset_id, input_asset.chain_id, "swap")

        return Response(
            success=True,
            operation="swap",
            network=Network.MVM,
            shape=shape,
            trace_id=trace_id,
            transaction_hashes=[result["tx_hash"]],
            amount=value,
            raw_response=[result],
        )

    async def switch_network(self, network: Network) -> None:
        """Point the wallet at ``network`` once no operation holds it."""
        async with self._lock:
            await self._switcher.ensure_network(self._provider, network)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _classify(self, asset: Asset, network: Network, operation: str) -> AssetShape:
        return classify_asset(
            asset,
            network,
            source_native_asset_id=self._config.source_native_asset_id,
            settlement_native_asset_id=self._config.settlement_native_asset_id,
            operation=operation,
        )

    def _withdrawal_extra(self, destination: str, tag: str, trace_id: str) -> str:
        return encode_withdrawal_extra(
            destination,
            tag,
            trace_id,
            withdrawal_bot=self._config.withdrawal_bot,
            registry_pid=self._config.registry_pid,
            storage_address=self._config.storage_address,
        )

    def _bridge_contract(self, signer: AsyncWeb3) -> Any:
        return signer.eth.contract(
            address=self._checksum(self._config.bridge_address, "bridge_address"),
            abi=BRIDGE_ABI,
        )

    def _bridge_tx_params(self, value: int | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "gasPrice": self._config.gas.bridge_gas_price,
            "gas": self._config.gas.bridge_gas_limit,
        }
        if value is not None:
            params["value"] = value
        return params

    async def _transfer_with_extra(
        self,
        signer: AsyncWeb3,
        asset: Asset,
        receiver: str,
        amount: str,
        extra: str,
        action: str,
        context: dict[str, Any],
    ) -> tuple[int, dict[str, Any]]:
        token = signer.eth.contract(
            address=self._checksum(asset.contract or "", "contract"), abi=MVM_ERC20_ABI
        )
        decimals = await self._token_decimals(token, asset)
        value = parse_units(amount, decimals)
        result = await self._dispatcher.send(
            signer,
            token.functions.transferWithExtra(receiver, value, HexBytes(extra)),
            self._bridge_tx_params(),
            action=action,
            context={**context, "decimals": decimals},
        )
        return value, result

    async def _token_decimals(self, token: Any, asset: Asset) -> int:
        try:
            return int(await token.functions.decimals().call())
        except Exception as exc:
            raise NetworkError(
                "Failed to read token decimals",
                endpoint=str(getattr(token, "address", "")),
                details={"asset_id": asset.asset_id, "error": str(exc)},
            ) from exc

    async def _sender_address(self, signer: AsyncWeb3) -> str:
        default = signer.eth.default_account
        if isinstance(default, str) and default:
            return Web3.to_checksum_address(default)
        accounts = await self._provider.request(WalletMethod.ACCOUNTS.value)
        if not accounts:
            raise ValidationError("Wallet exposes no accounts", field="accounts")
        return Web3.to_checksum_address(accounts[0])

    @staticmethod
    def _checksum(address: str, field: str) -> str:
        try:
            return Web3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid {field}", field=field, value=address) from exc
