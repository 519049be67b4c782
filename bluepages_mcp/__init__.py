"""
Location: bluepages_mcp/__init__.py

Summary:
    Main package initialization for bluepages-mcp. Exports the public
    classes and functions for convenient importing.

Usage:
    from bluepages_mcp import BluepagesClient, resolve_auth, get_settings

    # Or import specific modules
    from bluepages_mcp.signers import LocalSigner
    from bluepages_mcp.stream import run_batch

Version: 0.1.0
"""

__version__ = "0.1.0"

from .auth import AuthContext, resolve_auth
from .client import BluepagesClient, normalize_handle
from .config import Settings, get_settings
from .credits import CREDIT_PACKAGES, CreditTracker, get_credit_package
from .errors import (
    BluepagesError,
    ConfigurationError,
    PaymentError,
    UpstreamError,
    ValidationError,
)
from .payer import Signer, X402Payer
from .stream import BATCH_SIZE, normalize_batch_results, run_batch
from .transport_x402 import X402_HEADERS, is_payment_required, parse_payment_requirement
from .types import (
    AuthMode,
    BatchItemFound,
    BatchProgress,
    CheckRecord,
    CreditPackage,
    DataRecord,
    EndpointKind,
    LookupKind,
    PaymentPayload,
    PaymentRequirement,
)

__all__ = [
    # Configuration and auth
    "Settings",
    "get_settings",
    "AuthContext",
    "resolve_auth",
    # Main client
    "BluepagesClient",
    "normalize_handle",
    # Types
    "AuthMode",
    "LookupKind",
    "EndpointKind",
    "PaymentRequirement",
    "PaymentPayload",
    "CheckRecord",
    "DataRecord",
    "BatchProgress",
    "BatchItemFound",
    "CreditPackage",
    # Payment
    "Signer",
    "X402Payer",
    "X402_HEADERS",
    "is_payment_required",
    "parse_payment_requirement",
    # Credits
    "CreditTracker",
    "CREDIT_PACKAGES",
    "get_credit_package",
    # Batch streaming
    "BATCH_SIZE",
    "run_batch",
    "normalize_batch_results",
    # Exceptions
    "BluepagesError",
    "ConfigurationError",
    "UpstreamError",
    "PaymentError",
    "ValidationError",
]
