"""Static configuration: default arguments and minimal ABIs for the calldata scripts.

This module keeps addresses, defaults, and ABIs centralized so the encoding
script can focus on wiring arguments through the encoder.
"""

from __future__ import annotations

ENV_AMOUNT = "CALLDATA_AMOUNT"
ENV_DECIMALS = "CALLDATA_DECIMALS"
ENV_WALLETS = "CALLDATA_WALLETS"
ENV_OWNER = "CALLDATA_OWNER"
ENV_IMPLEMENTATION = "CALLDATA_IMPLEMENTATION"
ENV_ADMIN = "CALLDATA_ADMIN"

# 2B SGCC per token wallet
DEFAULT_MINT_AMOUNT = "2000000000"
DEFAULT_DECIMALS = 18
MAX_DECIMALS = 77

TOKEN_WALLETS = (
    "0x4E9Ff90564C9D6B89d63197A0034c09A50e53190",
    "0x08D8B7852a03e775BE9C0D2137A59E417A4B3e5B",
    "0x062f6869e5FC2f56f52a817eAd98c1d6576412F4",
)

# Placeholders until the deployment addresses are known.
OWNER_ADDRESS = "0x0000000000000000000000000000000000000001"
IMPLEMENTATION_ADDRESS = "0x0000000000000000000000000000000000000002"
ADMIN_ADDRESS = "0x0000000000000000000000000000000000000003"

MINT_ABI = (
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "mint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
)

INITIALIZE_ABI = (
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address[3]", "name": "tokenWallets", "type": "address[3]"},
        ],
        "name": "initialize",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
)

# Transparent upgradeable proxy: (logic, initialOwner, data)
PROXY_CONSTRUCTOR_ABI = (
    {
        "inputs": [
            {"internalType": "address", "name": "_logic", "type": "address"},
            {"internalType": "address", "name": "initialOwner", "type": "address"},
            {"internalType": "bytes", "name": "_data", "type": "bytes"},
        ],
        "stateMutability": "payable",
        "type": "constructor",
    },
)
