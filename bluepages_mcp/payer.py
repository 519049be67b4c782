"""
Location: bluepages_mcp/payer.py

Summary:
    Defines the Signer protocol and the X402Payer, which turns a 402
    payment requirement into a signed EIP-3009 TransferWithAuthorization
    encoded for the X-PAYMENT header.

Usage:
    Used by client.py when a request in x402 mode comes back with 402.
    Each call builds a brand new authorization (fresh nonce, fresh
    validity window); nothing is cached.

Example:
    from bluepages_mcp.payer import X402Payer

    payer = X402Payer(signer)
    header = await payer.build_payment_header(requirement)
"""

import secrets
import time
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .errors import ConfigurationError, PaymentError
from .signers import BASE_CHAIN_ID
from .transport_x402 import encode_payment_header
from .types import (
    PaymentAccept,
    PaymentAuthorization,
    PaymentPayload,
    PaymentRequirement,
    SignedPayment,
)


# USDC EIP-712 domain on Base
USDC_DOMAIN_NAME = "USD Coin"
USDC_DOMAIN_VERSION = "2"

# Tolerance for clock skew between us and the facilitator
VALID_AFTER_SKEW_SECONDS = 600

TRANSFER_WITH_AUTHORIZATION_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "TransferWithAuthorization": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for signing x402 authorizations.

    Implementations include LocalSigner (private key from the environment).
    """

    address: str

    async def sign_typed_data(self, typed_data: dict[str, Any]) -> str:
        """
        Sign a full EIP-712 typed-data document.

        Args:
            typed_data: Dict with types, primaryType, domain and message

        Returns:
            0x-prefixed hex signature
        """
        ...


def build_typed_data(
    authorization: PaymentAuthorization,
    verifying_contract: str,
    chain_id: int = BASE_CHAIN_ID,
) -> dict[str, Any]:
    """
    Build the EIP-712 document for a TransferWithAuthorization.

    Args:
        authorization: The authorization to sign
        verifying_contract: Token contract address (accept.asset)
        chain_id: EVM chain id

    Returns:
        Full typed-data dict accepted by eth-account
    """
    return {
        "types": TRANSFER_WITH_AUTHORIZATION_TYPES,
        "primaryType": "TransferWithAuthorization",
        "domain": {
            "name": USDC_DOMAIN_NAME,
            "version": USDC_DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": verifying_contract,
        },
        "message": {
            "from": authorization.from_,
            "to": authorization.to,
            "value": int(authorization.value),
            "validAfter": int(authorization.valid_after),
            "validBefore": int(authorization.valid_before),
            "nonce": authorization.nonce,
        },
    }


class X402Payer:
    """
    Builds signed x402 payment headers.

    Attributes:
        signer: Signer holding the payer's key
        chain_id: Chain id used in the EIP-712 domain
    """

    def __init__(
        self,
        signer: Optional[Signer],
        chain_id: int = BASE_CHAIN_ID,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the payer.

        Args:
            signer: Signer for the payer wallet
            chain_id: EVM chain id (default Base mainnet)
            clock: Source of the current UNIX time

        Raises:
            ConfigurationError: If no signer is given
        """
        if signer is None:
            raise ConfigurationError(
                "PRIVATE_KEY environment variable required for x402 payments"
            )
        self.signer = signer
        self.chain_id = chain_id
        self._clock = clock

    def build_authorization(self, accept: PaymentAccept) -> PaymentAuthorization:
        """
        Create a fresh, unsigned authorization for one payment option.

        Args:
            accept: The selected payment option

        Returns:
            PaymentAuthorization with a new random nonce
        """
        now = int(self._clock())
        return PaymentAuthorization(
            from_=self.signer.address,
            to=accept.pay_to,
            value=str(accept.max_amount_required),
            valid_after=str(now - VALID_AFTER_SKEW_SECONDS),
            valid_before=str(now + accept.max_timeout_seconds),
            nonce="0x" + secrets.token_bytes(32).hex(),
        )

    async def build_payment(self, requirement: PaymentRequirement) -> PaymentPayload:
        """
        Sign an authorization for the first offered payment option.

        Args:
            requirement: Parsed 402 payment requirement

        Returns:
            PaymentPayload ready to be encoded

        Raises:
            PaymentError: If no option is offered or signing fails
        """
        if not requirement.accepts:
            raise PaymentError("Payment required but server offered no payment options")

        accept = requirement.accepts[0]
        authorization = self.build_authorization(accept)
        typed_data = build_typed_data(authorization, accept.asset, self.chain_id)

        try:
            signature = await self.signer.sign_typed_data(typed_data)
        except Exception as e:
            raise PaymentError(f"Failed to sign payment authorization: {e}") from e

        return PaymentPayload(
            x402_version=requirement.x402_version,
            scheme=accept.scheme,
            network=accept.network,
            payload=SignedPayment(signature=signature, authorization=authorization),
        )

    async def build_payment_header(self, requirement: PaymentRequirement) -> str:
        """
        Sign and encode a payment for the X-PAYMENT header.

        Args:
            requirement: Parsed 402 payment requirement

        Returns:
            base64-encoded JSON payment payload
        """
        payment = await self.build_payment(requirement)
        return encode_payment_header(payment)
