"""Asset shape classification.

Every deposit, withdrawal and swap starts by deciding which of four call
sequences applies to the asset being moved. The decision depends only on the
asset's identifiers and on the native asset id of the chain where the transfer
happens:

* on mainnet, ETH itself is sent as plain value and Ethereum-origin tokens are
  sent with ``ERC20.transfer``;
* on MVM, ETH is released through the bridge contract with value attached and
  Ethereum-origin tokens that have an MVM contract use ``transferWithExtra``.
"""

from __future__ import annotations

from .constants import ETH_ASSET_ID
from .exceptions import UnsupportedAssetError
from .types import Asset, AssetShape, DepositMode, Network


def classify_asset(
    asset: Asset,
    network: Network,
    *,
    source_native_asset_id: str = ETH_ASSET_ID,
    settlement_native_asset_id: str = ETH_ASSET_ID,
    operation: str | None = None,
) -> AssetShape:
    """Return the shape of ``asset`` for a transfer on ``network``.

    Raises:
        UnsupportedAssetError: If the asset matches none of the shapes.
    """
    if network == Network.MAINNET:
        if asset.asset_id == source_native_asset_id:
            return AssetShape.SOURCE_NATIVE
        if asset.chain_id == source_native_asset_id:
            return AssetShape.SOURCE_TOKEN
    elif network == Network.MVM:
        if asset.asset_id == settlement_native_asset_id:
            return AssetShape.SETTLEMENT_NATIVE
        if asset.chain_id == settlement_native_asset_id and asset.contract:
            return AssetShape.SETTLEMENT_TOKEN

    raise UnsupportedAssetError(asset.asset_id, asset.chain_id, operation)


def select_deposit_mode(asset: Asset, native_asset_id: str = ETH_ASSET_ID) -> DepositMode:
    """Pick the default deposit flow for an asset.

    Assets living on the source chain can be paid straight from the wallet;
    anything else is deposited by sending to the displayed address.
    """
    if asset.asset_id == native_asset_id or asset.chain_id == native_asset_id:
        return DepositMode.WALLET
    return DepositMode.QRCODE
