"""
Location: bluepages_mcp/errors.py

Summary:
    Exception hierarchy for bluepages-mcp. Every failure that can reach
    the tool boundary is a BluepagesError subclass, so the dispatcher can
    render it as a single user-visible error line.

Usage:
    Raised by auth.py, payer.py, client.py, credits.py and stream.py.
    Caught by tools.py, which converts them into error tool results.
"""

from typing import Optional


class BluepagesError(Exception):
    """Base exception for all bluepages-mcp failures."""
    pass


class ConfigurationError(BluepagesError):
    """
    Exception raised when credentials are missing or an operation is
    invoked in the wrong authentication mode.

    Always raised before any network I/O is attempted.
    """
    pass


class UpstreamError(BluepagesError):
    """
    Exception raised for a non-success response from the Bluepages API.

    Attributes:
        status_code: HTTP status of the failing response, or None for
                     transport-level failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PaymentError(BluepagesError):
    """Exception raised when an x402 payment authorization cannot be built."""
    pass


class ValidationError(BluepagesError):
    """Exception raised for malformed caller input, before any network call."""
    pass
