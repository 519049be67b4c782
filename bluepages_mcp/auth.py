"""
Location: bluepages_mcp/auth.py

Summary:
    Authentication mode selection. Decides once, at startup, whether the
    process talks to Bluepages with an API key, with x402 payments, or not
    at all.

Usage:
    server.py calls resolve_auth(settings) and shares the resulting
    AuthContext with the client, the credit tracker and the tool dispatcher.

Example:
    from bluepages_mcp.auth import resolve_auth
    from bluepages_mcp.config import get_settings

    auth = resolve_auth(get_settings())
    if auth.mode is AuthMode.PAYMENT:
        print(auth.signer.address)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .errors import ConfigurationError
from .signers import LocalSigner
from .types import AuthMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """
    The single active credential for the process.

    Attributes:
        mode: Which authentication scheme is active
        api_key: Opaque API key (API_KEY mode only)
        signer: Signer derived from the private key (PAYMENT mode only)
    """
    mode: AuthMode
    api_key: Optional[str] = None
    signer: Optional[LocalSigner] = None

    @property
    def configured(self) -> bool:
        return self.mode is not AuthMode.NONE

    def require(self, mode: AuthMode, operation: str) -> None:
        """
        Assert that a credential-gated operation runs in the right mode.

        Raises:
            ConfigurationError: If the active mode differs
        """
        if self.mode is not mode:
            if mode is AuthMode.API_KEY:
                raise ConfigurationError(
                    f"{operation} only available with API key authentication"
                )
            raise ConfigurationError(
                f"{operation} requires PRIVATE_KEY for x402 payments"
            )


def resolve_auth(settings: Settings) -> AuthContext:
    """
    Pick the authentication mode from the configured credentials.

    The API key wins when both credentials are set. When only a private key
    is set, the wallet is derived here, once.

    Args:
        settings: Loaded Settings

    Returns:
        AuthContext for the process

    Raises:
        ConfigurationError: If PRIVATE_KEY is set but is not a valid key
    """
    api_key = (settings.bluepages_api_key or "").strip()
    private_key = (settings.private_key or "").strip()

    if api_key:
        if private_key:
            logger.info("Both BLUEPAGES_API_KEY and PRIVATE_KEY set; using API key")
        return AuthContext(mode=AuthMode.API_KEY, api_key=api_key)

    if private_key:
        try:
            signer = LocalSigner(private_key)
        except Exception as e:
            raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {e}") from e
        return AuthContext(mode=AuthMode.PAYMENT, signer=signer)

    return AuthContext(mode=AuthMode.NONE)
