"""
Location: bluepages_mcp/transport_x402.py

Summary:
    x402 wire format transport layer. Detects 402 Payment Required
    responses, parses their payment terms, and encodes/applies the
    X-PAYMENT header for the retry. Also reads the credit balance hint
    that API-key responses carry.

Usage:
    Used by client.py around every upstream call, and by payer.py to
    encode the signed payment.

Example:
    from bluepages_mcp.transport_x402 import is_payment_required, parse_payment_requirement

    if is_payment_required(response):
        requirement = parse_payment_requirement(response.json())
"""

import base64
import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import PaymentError
from .types import PaymentPayload, PaymentRequirement

logger = logging.getLogger(__name__)


# Bluepages header names
X402_HEADERS = {
    "PAYMENT": "X-PAYMENT",
    "API_KEY": "X-API-KEY",
    "CREDITS_REMAINING": "X-Credits-Remaining",
}


def is_payment_required(response: httpx.Response) -> bool:
    """
    Check if response is an x402 402 Payment Required.

    Args:
        response: The httpx response to check

    Returns:
        True if the status code is 402
    """
    return response.status_code == 402


def parse_payment_requirement(data: Any) -> PaymentRequirement:
    """
    Parse a 402 response body into a PaymentRequirement.

    Args:
        data: Decoded JSON body of the 402 response

    Returns:
        PaymentRequirement with at least one accepted option

    Raises:
        PaymentError: If the body is not a valid requirement or offers
                      no payment options
    """
    if not isinstance(data, dict):
        raise PaymentError("Invalid payment requirement: expected a JSON object")

    try:
        requirement = PaymentRequirement.model_validate(data)
    except PydanticValidationError as e:
        raise PaymentError(f"Invalid payment requirement: {e}") from e

    if not requirement.accepts:
        raise PaymentError("Payment required but server offered no payment options")

    return requirement


def encode_payment_header(payment: PaymentPayload) -> str:
    """
    Serialize a payment payload as base64-encoded JSON.

    Args:
        payment: Signed payment payload

    Returns:
        ASCII header value for X-PAYMENT
    """
    raw = json.dumps(payment.model_dump(by_alias=True), separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def apply_payment_headers(headers: dict, payment_header: str) -> dict:
    """
    Add the x402 payment header to a request.

    Args:
        headers: Existing headers dict to extend
        payment_header: Encoded X-PAYMENT value

    Returns:
        New headers dict with the payment header added
    """
    headers = dict(headers)
    headers[X402_HEADERS["PAYMENT"]] = payment_header
    return headers


def parse_credits_header(response: httpx.Response) -> Optional[int]:
    """
    Read the remaining-credits hint from response headers.

    Args:
        response: A successful API-key response

    Returns:
        Remaining credits, or None when the header is absent or malformed
    """
    value = response.headers.get(X402_HEADERS["CREDITS_REMAINING"])
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug("Ignoring malformed %s header: %r", X402_HEADERS["CREDITS_REMAINING"], value)
        return None
