"""
Location: bluepages_mcp/client.py

Summary:
    BluepagesClient, the authenticated request executor. Sends every
    upstream call with the active credential: the X-API-KEY header in
    API-key mode, or a pay-on-402 retry in x402 mode.

Usage:
    Created once by server.py and shared by the tool dispatcher and the
    batch driver. The typed helpers (check_address, batch_data, ...) map
    one-to-one onto Bluepages endpoints.

Example:
    from bluepages_mcp.client import BluepagesClient

    async with BluepagesClient("https://bluepages.fyi", auth, tracker) as client:
        result = await client.check_address("0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045")
"""

import logging
from typing import Any, Optional

import httpx

from .auth import AuthContext
from .credits import CreditTracker
from .errors import ConfigurationError, UpstreamError
from .payer import X402Payer
from .transport_x402 import (
    X402_HEADERS,
    apply_payment_headers,
    is_payment_required,
    parse_credits_header,
    parse_payment_requirement,
)
from .types import AuthMode, EndpointKind, LookupKind

logger = logging.getLogger(__name__)


def normalize_handle(handle: str) -> str:
    """Prefix a Twitter handle with @ if it does not have one."""
    handle = handle.strip()
    return handle if handle.startswith("@") else f"@{handle}"


def _error_message(response: httpx.Response, default: str) -> str:
    """Extract the server's error text, falling back to the status text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase or f"{default}: {response.status_code}"


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Invalid JSON in response: {e}", status_code=response.status_code
        ) from e


class BluepagesClient:
    """
    Bluepages API client with automatic authentication.

    In x402 mode a 402 response is answered by signing a payment
    authorization and retrying exactly once. Transport failures are
    never retried.

    Attributes:
        base_url: Base URL for API requests
        auth: Active credential
        credit_tracker: Receives the remaining-credits hint (API-key mode)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthContext,
        credit_tracker: Optional[CreditTracker] = None,
        timeout: float = 120.0,
        payer: Optional[X402Payer] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL for API requests (trailing slash removed)
            auth: AuthContext from resolve_auth()
            credit_tracker: Optional CreditTracker fed from response headers
            timeout: Request timeout in seconds (default 120)
            payer: Optional X402Payer (built from auth.signer by default)
        """
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.credit_tracker = credit_tracker
        self.timeout = timeout

        self._payer = payer
        if self._payer is None and auth.signer is not None:
            self._payer = X402Payer(auth.signer)

        self._http = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._http.aclose()

    async def __aenter__(self) -> "BluepagesClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def _base_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth.mode is AuthMode.API_KEY and self.auth.api_key:
            headers[X402_HEADERS["API_KEY"]] = self.auth.api_key
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        body: Optional[dict],
        headers: dict[str, str],
    ) -> httpx.Response:
        try:
            return await self._http.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Request to {url} failed: {e}") from e

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict] = None,
        require_payment: bool = False,
    ) -> Any:
        """
        Make one logical request with the active credential.

        Args:
            endpoint: API path (appended to base_url)
            method: HTTP method (default GET)
            params: Optional query parameters
            body: Optional JSON body
            require_payment: Fail unless the first response is a 402
                             (used for credit purchases)

        Returns:
            Parsed JSON response

        Raises:
            ConfigurationError: No credentials, or 402 without a signer
            UpstreamError: Non-success response or transport failure
            PaymentError: Payment authorization could not be built
        """
        if not self.auth.configured:
            raise ConfigurationError(
                "Bluepages is not configured. Set BLUEPAGES_API_KEY or PRIVATE_KEY."
            )

        url = f"{self.base_url}{endpoint}"
        headers = self._base_headers()

        response = await self._send(method, url, params, body, headers)

        if is_payment_required(response) and self.auth.mode is AuthMode.PAYMENT:
            return await self._retry_with_payment(method, url, params, body, headers, response)

        if require_payment:
            message = f"Unexpected response: {response.status_code}"
            if response.status_code >= 400:
                message = _error_message(response, "Unexpected response")
            raise UpstreamError(message, status_code=response.status_code)

        if response.status_code >= 400:
            raise UpstreamError(
                _error_message(response, "Request failed"),
                status_code=response.status_code,
            )

        result = _json_body(response)

        if self.auth.mode is AuthMode.API_KEY and self.credit_tracker is not None:
            await self.credit_tracker.observe(parse_credits_header(response))

        return result

    async def _retry_with_payment(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        body: Optional[dict],
        headers: dict[str, str],
        response: httpx.Response,
    ) -> Any:
        """
        Pay for a 402 response and retry the request once.

        Args:
            method: HTTP method
            url: Full URL
            params: Query parameters
            body: Request body
            headers: Base headers
            response: The 402 response carrying the payment requirement

        Returns:
            Parsed JSON response of the paid retry
        """
        if self._payer is None:
            raise ConfigurationError(
                "Payment required but no PRIVATE_KEY or BLUEPAGES_API_KEY configured"
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        requirement = parse_payment_requirement(data)
        payment_header = await self._payer.build_payment_header(requirement)

        logger.debug("Paying for %s %s via x402", method, url)
        paid_headers = apply_payment_headers(headers, payment_header)
        retry = await self._send(method, url, params, body, paid_headers)

        if retry.status_code >= 400:
            raise UpstreamError(
                _error_message(retry, "Payment failed"),
                status_code=retry.status_code,
            )
        return _json_body(retry)

    # -- endpoint helpers -----------------------------------------------------

    async def check_address(self, address: str) -> dict[str, Any]:
        """GET /check?address=: does the address exist in the database."""
        return await self.request("/check", params={"address": address})

    async def check_twitter(self, handle: str) -> dict[str, Any]:
        """GET /check?identity=: does the handle exist in the database."""
        return await self.request("/check", params={"identity": normalize_handle(handle)})

    async def get_data_for_address(self, address: str) -> dict[str, Any]:
        """GET /data?address=: identities linked to an address."""
        return await self.request("/data", params={"address": address})

    async def get_data_for_twitter(self, handle: str) -> dict[str, Any]:
        """GET /data?identity=: addresses linked to a handle."""
        return await self.request("/data", params={"identity": normalize_handle(handle)})

    async def batch(
        self,
        endpoint_kind: EndpointKind,
        addresses: Optional[list[str]] = None,
        twitters: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """
        POST /batch/check or /batch/data.

        Args:
            endpoint_kind: CHECK or DATA
            addresses: Addresses to look up
            twitters: Handles to look up (@ added where missing)

        Returns:
            Raw response with results keyed by address/handle
        """
        body: dict[str, list[str]] = {}
        if addresses:
            body["addresses"] = list(addresses)
        if twitters:
            body["twitters"] = [normalize_handle(t) for t in twitters]
        return await self.request(f"/batch/{endpoint_kind.value}", method="POST", body=body)

    async def batch_check(
        self,
        addresses: Optional[list[str]] = None,
        twitters: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        return await self.batch(EndpointKind.CHECK, addresses, twitters)

    async def batch_data(
        self,
        addresses: Optional[list[str]] = None,
        twitters: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        return await self.batch(EndpointKind.DATA, addresses, twitters)

    async def batch_chunk(
        self,
        kind: LookupKind,
        endpoint_kind: EndpointKind,
        items: list[str],
    ) -> dict[str, Any]:
        """Send one batch chunk keyed by lookup kind."""
        if kind is LookupKind.ADDRESS:
            return await self.batch(endpoint_kind, addresses=items)
        return await self.batch(endpoint_kind, twitters=items)

    async def get_account(self) -> dict[str, Any]:
        """GET /api/me: remaining credits and points (API-key mode)."""
        return await self.request("/api/me")

    async def purchase_credits(self, package: str, address: str) -> dict[str, Any]:
        """
        POST /api/credits/purchase: buy a credit package with x402.

        Args:
            package: Package name (starter, pro, enterprise)
            address: Wallet address that receives the credits

        Returns:
            Response with creditsAdded, newCredits and transactionHash
        """
        return await self.request(
            "/api/credits/purchase",
            method="POST",
            params={"package": package},
            body={"address": address},
            require_payment=True,
        )
