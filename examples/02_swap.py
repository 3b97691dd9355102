"""Example: Swap ETH held in the MVM user contract for another asset."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from mvm_bridge import (
    BridgeClientConfig,
    LocalWalletProvider,
    MVMBridgeClient,
    RegisteredUser,
    SwapOrder,
)
from mvm_bridge.constants import ETH_ASSET_ID

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("swap")


async def main() -> None:
    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")

    user = RegisteredUser(
        user_id=os.environ["MIXIN_USER_ID"],
        contract=os.environ["MVM_USER_CONTRACT"],
        access_token=os.environ["MIXIN_ACCESS_TOKEN"],
    )
    fill_asset_id = os.environ["SWAP_FILL_ASSET_ID"]
    routes = os.environ["SWAP_ROUTES"]
    funds = os.getenv("SWAP_FUNDS", "0.001")
    min_received = os.getenv("SWAP_MIN_RECEIVED", "0")

    config = BridgeClientConfig.from_env()
    wallet = LocalWalletProvider(
        private_key,
        {config.mvm_chain_id: config.mvm_rpc_url, config.mainnet_chain_id: config.mainnet_rpc_url},
    )
    client = MVMBridgeClient(wallet, config)
    await client.connect()

    try:
        client.login(user)
        await client.ledger.update_assets()
        eth = client.ledger.get_asset(ETH_ASSET_ID)
        if eth is None:
            logger.error("ETH not found in the user's assets")
            return

        order = SwapOrder(
            pay_asset_id=ETH_ASSET_ID,
            fill_asset_id=fill_asset_id,
            funds=funds,
            routes=routes,
        )
        logger.info("Swapping %s ETH for %s (min %s)", funds, fill_asset_id, min_received)
        response = await client.swap_asset(user, order, eth, min_received)
        logger.info("Swap %s submitted: %s", response.trace_id, response.transaction_hash)
    finally:
        await client.disconnect()
        await wallet.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
