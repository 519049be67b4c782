"""
Tests for bluepages_mcp.payer module.

Tests x402 authorization construction, EIP-712 signing and the
single-use nonce guarantee.
"""

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from bluepages_mcp.errors import ConfigurationError, PaymentError
from bluepages_mcp.payer import (
    VALID_AFTER_SKEW_SECONDS,
    X402Payer,
    build_typed_data,
)
from bluepages_mcp.transport_x402 import parse_payment_requirement

from conftest import TEST_ADDRESS, USDC_BASE, decode_payment_header


FIXED_NOW = 1_700_000_000


class FailingSigner:
    """Signer whose key is unusable."""

    address = TEST_ADDRESS

    async def sign_typed_data(self, typed_data):
        raise RuntimeError("hardware wallet disconnected")


class TestX402PayerInit:
    """Tests for X402Payer initialization."""

    def test_requires_signer(self):
        """Test that a payer cannot exist without a signing key."""
        with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
            X402Payer(None)

    def test_default_chain_is_base(self, signer):
        """Test that payments default to Base mainnet."""
        assert X402Payer(signer).chain_id == 8453


class TestBuildAuthorization:
    """Tests for X402Payer.build_authorization()."""

    @pytest.fixture
    def payer(self, signer):
        return X402Payer(signer, clock=lambda: FIXED_NOW)

    def test_fields(self, payer, sample_requirement):
        """Test that the authorization is built from the first option."""
        accept = parse_payment_requirement(sample_requirement).accepts[0]
        authorization = payer.build_authorization(accept)

        assert authorization.from_ == TEST_ADDRESS
        assert authorization.to == "0x1111111111111111111111111111111111111111"
        assert authorization.value == "1000"
        assert authorization.valid_after == str(FIXED_NOW - VALID_AFTER_SKEW_SECONDS)
        assert authorization.valid_before == str(FIXED_NOW + 300)

    def test_nonce_is_32_bytes(self, payer, sample_requirement):
        """Test that the nonce is 32 random bytes, hex encoded."""
        accept = parse_payment_requirement(sample_requirement).accepts[0]
        nonce = payer.build_authorization(accept).nonce
        assert nonce.startswith("0x")
        assert len(bytes.fromhex(nonce[2:])) == 32

    def test_nonce_is_fresh_every_time(self, payer, sample_requirement):
        """Test that two authorizations never share a nonce."""
        accept = parse_payment_requirement(sample_requirement).accepts[0]
        nonces = {payer.build_authorization(accept).nonce for _ in range(20)}
        assert len(nonces) == 20


class TestBuildPayment:
    """Tests for X402Payer.build_payment() and build_payment_header()."""

    async def test_signature_recovers_to_wallet(self, signer, sample_requirement):
        """Test that the EIP-712 signature was made by the payer wallet."""
        payer = X402Payer(signer)
        payment = await payer.build_payment(parse_payment_requirement(sample_requirement))

        typed_data = build_typed_data(payment.payload.authorization, USDC_BASE, 8453)
        recovered = Account.recover_message(
            encode_typed_data(full_message=typed_data),
            signature=payment.payload.signature,
        )
        assert recovered == TEST_ADDRESS

    async def test_payload_copies_requirement(self, signer, sample_requirement):
        """Test that version, scheme and network come from the requirement."""
        payer = X402Payer(signer)
        payment = await payer.build_payment(parse_payment_requirement(sample_requirement))

        assert payment.x402_version == 1
        assert payment.scheme == "exact"
        assert payment.network == "base"

    async def test_header_round_trip(self, signer, sample_requirement):
        """Test that the header decodes back into the signed payload."""
        payer = X402Payer(signer)
        header = await payer.build_payment_header(parse_payment_requirement(sample_requirement))

        decoded = decode_payment_header(header)
        assert decoded.payload.authorization.from_ == TEST_ADDRESS
        assert decoded.payload.signature.startswith("0x")

    async def test_signing_failure(self, sample_requirement):
        """Test that signer errors surface as PaymentError."""
        payer = X402Payer(FailingSigner())
        with pytest.raises(PaymentError, match="hardware wallet disconnected"):
            await payer.build_payment(parse_payment_requirement(sample_requirement))


class TestBuildTypedData:
    """Tests for build_typed_data()."""

    async def test_domain(self, signer, sample_requirement):
        """Test the USDC EIP-712 domain."""
        payer = X402Payer(signer)
        accept = parse_payment_requirement(sample_requirement).accepts[0]
        typed_data = build_typed_data(payer.build_authorization(accept), accept.asset)

        assert typed_data["primaryType"] == "TransferWithAuthorization"
        assert typed_data["domain"] == {
            "name": "USD Coin",
            "version": "2",
            "chainId": 8453,
            "verifyingContract": USDC_BASE,
        }

    async def test_numeric_fields_are_ints(self, signer, sample_requirement):
        """Test that amounts and timestamps are encoded as uint256."""
        payer = X402Payer(signer)
        accept = parse_payment_requirement(sample_requirement).accepts[0]
        message = build_typed_data(payer.build_authorization(accept), accept.asset)["message"]

        assert message["value"] == 1000
        assert isinstance(message["validAfter"], int)
        assert isinstance(message["validBefore"], int)
