"""
Location: bluepages_mcp/signers/__init__.py

Summary:
    Signers package for bluepages-mcp. Provides the key-holding signer used
    to authorize x402 payments.

Usage:
    from bluepages_mcp.signers import LocalSigner
"""

from .local import LocalSigner, BASE_CHAIN_ID, BASE_RPC_URL

__all__ = ["LocalSigner", "BASE_CHAIN_ID", "BASE_RPC_URL"]
