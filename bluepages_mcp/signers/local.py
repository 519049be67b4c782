"""
Location: bluepages_mcp/signers/local.py

Summary:
    In-process signer backed by an Ethereum private key. Derives the wallet
    address once and signs EIP-712 typed data with eth-account.

Usage:
    Built by auth.resolve_auth() when PRIVATE_KEY is configured, then used
    by X402Payer to sign TransferWithAuthorization messages.

Example:
    from bluepages_mcp.signers import LocalSigner

    signer = LocalSigner("0x4c0883a6...")
    print(signer.address)
"""

from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data


# Payments settle as USDC on Base mainnet
BASE_CHAIN_ID = 8453
BASE_RPC_URL = "https://mainnet.base.org"


class LocalSigner:
    """
    Signer that keeps the private key in process memory.

    The key comes from the PRIVATE_KEY environment variable and lives for
    the whole process. The address is derived once, at construction.

    Attributes:
        address: Checksummed wallet address derived from the key
        chain_id: Chain the signer is bound to
        rpc_url: RPC endpoint for that chain
    """

    def __init__(
        self,
        private_key: str,
        chain_id: int = BASE_CHAIN_ID,
        rpc_url: str = BASE_RPC_URL,
    ):
        """
        Initialize the signer.

        Args:
            private_key: Hex-encoded secp256k1 private key (with or without 0x)
            chain_id: EVM chain id (default Base mainnet)
            rpc_url: RPC endpoint for the chain

        Raises:
            ValueError: If the key cannot be parsed
        """
        self._account = Account.from_key(private_key)
        self.address: str = self._account.address
        self.chain_id = chain_id
        self.rpc_url = rpc_url

    async def sign_typed_data(self, typed_data: dict[str, Any]) -> str:
        """
        Sign a full EIP-712 typed-data document.

        Args:
            typed_data: Dict with types, primaryType, domain and message

        Returns:
            0x-prefixed hex signature
        """
        signable = encode_typed_data(full_message=typed_data)
        signed = self._account.sign_message(signable)
        signature = signed.signature.hex()
        if not signature.startswith("0x"):
            signature = "0x" + signature
        return signature

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address!r}, chain_id={self.chain_id})"
