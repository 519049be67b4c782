"""
Location: bluepages_mcp/types.py

Summary:
    Pydantic models for bluepages-mcp. Defines the x402 payment structures
    (PaymentAccept, PaymentRequirement, PaymentAuthorization, PaymentPayload),
    the normalized batch records, batch progress events and the credit
    package catalog.

Usage:
    These models are imported by transport_x402.py, payer.py, stream.py,
    formatting.py and tools.py. Amounts on the x402 wire are decimal strings
    to prevent precision loss with 256-bit token values.

Example:
    from bluepages_mcp.types import PaymentRequirement

    requirement = PaymentRequirement.model_validate(response.json())
    accept = requirement.accepts[0]
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class AuthMode(str, Enum):
    """Active authentication scheme, chosen once at startup."""
    API_KEY = "api-key"
    PAYMENT = "x402"
    NONE = "none"


class LookupKind(str, Enum):
    """What a batch item identifies: a wallet address or a Twitter handle."""
    ADDRESS = "address"
    HANDLE = "handle"


class EndpointKind(str, Enum):
    """Which batch endpoint a batch runs against."""
    CHECK = "check"
    DATA = "data"


class PaymentAccept(BaseModel):
    """
    A single payment option offered by a 402 response.

    Attributes:
        scheme: Payment scheme (e.g., "exact")
        network: Network name (e.g., "base")
        max_amount_required: Amount in token base units, as string
        pay_to: Recipient address
        asset: Token contract address, used as the EIP-712 verifying contract
        max_timeout_seconds: Validity window for the authorization
        resource: Optional resource URL the payment unlocks
        description: Optional human-readable description
        extra: Optional scheme-specific data
    """
    scheme: str
    network: str
    max_amount_required: str = Field(alias="maxAmountRequired")
    pay_to: str = Field(alias="payTo")
    asset: str
    max_timeout_seconds: int = Field(60, alias="maxTimeoutSeconds")
    resource: Optional[str] = None
    description: Optional[str] = None
    extra: Optional[dict] = None

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class PaymentRequirement(BaseModel):
    """
    Machine-readable payment terms parsed from a 402 response body.

    Attributes:
        x402_version: Protocol version echoed back in the payment header
        accepts: Offered payment options; only the first one is used
        error: Optional server message explaining why payment is required
    """
    x402_version: int = Field(1, alias="x402Version")
    accepts: list[PaymentAccept] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = {"populate_by_name": True}


class PaymentAuthorization(BaseModel):
    """
    EIP-3009 TransferWithAuthorization message.

    Numeric fields are carried as decimal strings, matching the x402 wire
    format. Each instance is signed once and never reused.
    """
    from_: str = Field(alias="from")
    to: str
    value: str
    valid_after: str = Field(alias="validAfter")
    valid_before: str = Field(alias="validBefore")
    nonce: str

    model_config = {"populate_by_name": True}


class SignedPayment(BaseModel):
    """Signature plus the authorization it covers."""
    signature: str
    authorization: PaymentAuthorization


class PaymentPayload(BaseModel):
    """
    Decoded content of the X-PAYMENT header.

    Attributes:
        x402_version: Version copied from the PaymentRequirement
        scheme: Scheme of the selected PaymentAccept
        network: Network of the selected PaymentAccept
        payload: Signature and authorization
    """
    x402_version: int = Field(alias="x402Version")
    scheme: str
    network: str
    payload: SignedPayment

    model_config = {"populate_by_name": True}


class CheckRecord(BaseModel):
    """Normalized entry from /batch/check."""
    kind: Literal["check"] = "check"
    id: str
    found: bool
    twitter: Optional[bool] = None
    farcaster: Optional[bool] = None


class DataRecord(BaseModel):
    """Normalized entry from /batch/data."""
    kind: Literal["data"] = "data"
    id: str
    found: bool
    twitter: Optional[str] = None
    address: Optional[str] = None
    display_name: Optional[str] = None
    source: Optional[str] = None
    alternate_count: int = 0


BatchRecord = Union[CheckRecord, DataRecord]


class BatchProgress(BaseModel):
    """
    Chunk-level progress, emitted before each chunk request.

    Attributes:
        current: Number of items covered once this chunk completes
        total: Total number of items in the batch
        percentage: current/total as a rounded percentage
        batch_number: 1-based index of this chunk
        total_batches: Number of chunks in the batch
    """
    type: Literal["progress"] = "progress"
    message: str
    current: int
    total: int
    percentage: int
    batch_number: int
    total_batches: int


class BatchItemFound(BaseModel):
    """Per-item event, emitted for every found entry of a chunk."""
    type: Literal["result"] = "result"
    message: str
    item: BatchRecord = Field(discriminator="kind")


BatchEvent = Union[BatchProgress, BatchItemFound]


class CreditPackage(BaseModel):
    """
    A purchasable credit bundle.

    Attributes:
        name: Package identifier sent as the ?package= query value
        credits: Credits granted
        price_usd: Nominal price in US dollars
        price_usdc: Price in USDC base units (6 decimals), as string
    """
    name: str
    credits: int
    price_usd: int
    price_usdc: str
