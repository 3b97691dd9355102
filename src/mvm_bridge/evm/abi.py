"""Contract ABIs used by the bridge client."""

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

MVM_ERC20_ABI = ERC20_ABI + [
    {
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "extra", "type": "bytes"},
        ],
        "name": "transferWithExtra",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

BRIDGE_ABI = [
    {
        "inputs": [
            {"name": "receiver", "type": "address"},
            {"name": "input", "type": "bytes"},
        ],
        "name": "release",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
]
