"""Example: Follow asset balances and portfolio totals while they poll."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from mvm_bridge import BridgeClientConfig, LocalWalletProvider, MVMBridgeClient, RegisteredUser

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("watch_ledger")


async def main() -> None:
    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")

    config = BridgeClientConfig.from_env()
    wallet = LocalWalletProvider(private_key, {config.mvm_chain_id: config.mvm_rpc_url})
    client = MVMBridgeClient(wallet, config)

    client.login(
        RegisteredUser(
            user_id=os.environ["MIXIN_USER_ID"],
            contract=os.environ["MVM_USER_CONTRACT"],
            access_token=os.environ["MIXIN_ACCESS_TOKEN"],
        )
    )

    def on_assets(assets):
        for asset in assets:
            logger.info("%-8s balance=%s", asset.symbol, asset.balance)

    def on_total(total):
        logger.info("Total balance: %s USD", total if total is not None else "-")

    stop_assets = client.ledger.assets.subscribe(on_assets)
    stop_total = client.ledger.total_balance_usd.subscribe(on_total)

    try:
        await client.ledger.update_assets()
        await asyncio.sleep(float(os.getenv("WATCH_SECONDS", "60")))
    finally:
        stop_total()
        stop_assets()
        await client.disconnect()
        await wallet.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
