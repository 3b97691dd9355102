"""Well-known identifiers for Ethereum mainnet and the Mixin Virtual Machine."""

from enum import Enum

# Asset id of ETH on the Mixin network. ETH is the native asset of both the
# source chain (Ethereum) and the settlement chain (MVM), and it doubles as
# the chain id of every Ethereum-origin asset.
ETH_ASSET_ID = "43d61dcd-e413-450d-80b8-101d5e903357"

MAINNET_CHAIN_ID = 1
MVM_CHAIN_ID = 73927

MAINNET_RPC_URL = "https://cloudflare-eth.com"
MVM_RPC_URL = "https://geth.mvm.dev"
MVM_EXPLORER_URL = "https://scan.mvm.dev/"

BRIDGE_ADDRESS = "0x0915EaE769D68128EEd9711A0bc4097831BE57F3"
STORAGE_ADDRESS = "0xef241988D19892fE4efF4935256087F4fdc5ecAa"

# Registry process id, hex without dashes
REGISTRY_PID = "bd67087276ce3263b9333aa337e212a4"

# Mixin user that executes withdrawals on behalf of the bridge
WITHDRAWAL_BOT = "084a1d43-4b38-3a3b-a9f0-a4d4cc4e6fb5"

MIXIN_API_URL = "https://api.mixin.one"
SWAP_API_URL = "https://api.4swap.org/api"

NATIVE_DECIMALS = 18
AMOUNT_PRECISION = 8

# EIP-1193 / EIP-3085 error code for "unrecognized chain id"
UNRECOGNIZED_CHAIN_ERROR = 4902

SWAP_ACTION_OPCODE = 3

DEFAULT_POLL_INTERVAL = 15.0


class WalletMethod(str, Enum):
    """Wallet provider RPC methods used by the client."""

    SWITCH_CHAIN = "wallet_switchEthereumChain"
    ADD_CHAIN = "wallet_addEthereumChain"
    CHAIN_ID = "eth_chainId"
    ACCOUNTS = "eth_accounts"
