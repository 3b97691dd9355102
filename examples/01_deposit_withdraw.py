"""Example: Deposit ETH from mainnet and withdraw it back out of MVM."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from mvm_bridge import (
    BridgeClientConfig,
    LocalWalletProvider,
    MVMBridgeClient,
    Network,
    RegisteredUser,
)
from mvm_bridge.constants import ETH_ASSET_ID

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("deposit_withdraw")


async def main() -> None:
    """Deposit a small amount of ETH, then withdraw it to an external address."""
    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")

    user_id = os.getenv("MIXIN_USER_ID")
    user_contract = os.getenv("MVM_USER_CONTRACT")
    access_token = os.getenv("MIXIN_ACCESS_TOKEN")
    destination = os.getenv("WITHDRAW_DESTINATION")
    if not user_id or not user_contract or not access_token or not destination:
        raise ValueError(
            "MIXIN_USER_ID, MVM_USER_CONTRACT, MIXIN_ACCESS_TOKEN and "
            "WITHDRAW_DESTINATION must be set"
        )

    config = BridgeClientConfig.from_env()
    wallet = LocalWalletProvider(
        private_key,
        {config.mainnet_chain_id: config.mainnet_rpc_url, config.mvm_chain_id: config.mvm_rpc_url},
    )
    client = MVMBridgeClient(wallet, config)

    logger.info("Connecting to mainnet and MVM")
    await client.connect()

    try:
        client.login(
            RegisteredUser(user_id=user_id, contract=user_contract, access_token=access_token)
        )
        await client.ledger.update_assets()
        eth = client.ledger.get_asset(ETH_ASSET_ID)
        if eth is None:
            logger.error("ETH not found in the user's assets")
            return

        balance = await client.get_balance(wallet.address, Network.MAINNET)
        logger.info("Mainnet balance: %s ETH", balance)

        deposit_amount = os.getenv("DEPOSIT_AMOUNT", "0.001")
        logger.info("Depositing %s ETH to %s", deposit_amount, eth.destination)
        deposit_response = await client.deposit(eth, deposit_amount)
        logger.info("Deposit sent: %s", deposit_response.transaction_hash)

        fee = await client.get_withdrawal_fee(eth, destination)
        logger.info("Withdrawal fee: %s ETH", fee)

        withdraw_amount = os.getenv("WITHDRAW_AMOUNT", "0.001")
        logger.info("Withdrawing %s ETH to %s", withdraw_amount, destination)
        withdraw_response = await client.withdraw(
            eth, user_contract, withdraw_amount, destination, "", fee
        )
        logger.info(
            "Withdrawal %s submitted: asset leg %s, fee leg %s",
            withdraw_response.trace_id,
            *withdraw_response.transaction_hashes,
        )

    finally:
        await client.disconnect()
        await wallet.disconnect()
        logger.info("Disconnected")


if __name__ == "__main__":
    asyncio.run(main())
