"""
Location: bluepages_mcp/credits.py

Summary:
    Credit balance tracking and low-credit alerts. Remembers the last
    server-reported balance and notifies the host once each time the
    balance falls through the low or critical threshold.

Usage:
    One CreditTracker is owned by the server state and shared with the
    client (which feeds it the X-Credits-Remaining header) and the tool
    dispatcher (check_credits, set_credit_alert).

Example:
    from bluepages_mcp.credits import CreditTracker

    tracker = CreditTracker(notifier, enabled=True)
    await tracker.observe(1500)   # first value: stored, no alert
    await tracker.observe(900)    # crosses 1000: warning
"""

import logging
from typing import Optional

from .errors import ValidationError
from .notifications import Notifier, NullNotifier
from .types import CreditPackage

logger = logging.getLogger(__name__)


DEFAULT_ALERT_THRESHOLD = 1000
CRITICAL_CREDIT_THRESHOLD = 100

CREDITS_PURCHASE_URL = "bluepages.fyi/api-keys.html"

CREDIT_PACKAGES: dict[str, CreditPackage] = {
    "starter": CreditPackage(name="starter", credits=5_000, price_usd=5, price_usdc="5000000"),
    "pro": CreditPackage(name="pro", credits=50_000, price_usd=45, price_usdc="45000000"),
    "enterprise": CreditPackage(
        name="enterprise", credits=1_000_000, price_usd=600, price_usdc="600000000"
    ),
}


def get_credit_package(name: str) -> CreditPackage:
    """
    Look up a credit package by name.

    Raises:
        ValidationError: If the package does not exist
    """
    package = CREDIT_PACKAGES.get(name)
    if package is None:
        raise ValidationError(f"Invalid package: {name}")
    return package


class CreditTracker:
    """
    Tracks the remaining credit balance across calls.

    Balances are never computed locally; they only come from the server.
    The tracker is only enabled in API-key mode, since x402 users have no
    credit balance.

    Attributes:
        enabled: Whether observations are recorded at all
        threshold: Current low-credit alert threshold
        last_known_credits: Last observed balance, None until the first one
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        enabled: bool = True,
        threshold: int = DEFAULT_ALERT_THRESHOLD,
    ):
        self.notifier = notifier or NullNotifier()
        self.enabled = enabled
        self.threshold = threshold
        self.last_known_credits: Optional[int] = None

    async def observe(self, credits: Optional[int]) -> None:
        """
        Record a server-reported balance and alert on a downward crossing.

        At most one alert is sent per observation; the critical alert wins
        when both thresholds are crossed at once. Nothing is sent when the
        previous balance is unknown.

        Args:
            credits: Remaining credits, or None when the server did not say
        """
        if not self.enabled or credits is None:
            return

        previous = self.last_known_credits
        self.last_known_credits = credits

        if previous is None:
            return

        if credits <= CRITICAL_CREDIT_THRESHOLD < previous:
            await self.notifier.notify(
                "error",
                f"⚠️ CRITICAL: Only {credits:,} Bluepages credits remaining! "
                f"Purchase more at {CREDITS_PURCHASE_URL}",
                {"credits": credits, "threshold": CRITICAL_CREDIT_THRESHOLD},
            )
        elif credits <= self.threshold < previous:
            await self.notifier.notify(
                "warning",
                f"⚠️ Low credits: {credits:,} remaining. Consider purchasing more.",
                {"credits": credits, "threshold": self.threshold},
            )

    def set_threshold(self, value: int) -> int:
        """
        Change the low-credit alert threshold.

        Takes effect from the next observation; past balances are not
        re-evaluated.

        Args:
            value: New threshold, in credits

        Returns:
            The stored threshold

        Raises:
            ValidationError: If value is negative
        """
        if value < 0:
            raise ValidationError("threshold must be >= 0")
        self.threshold = int(value)
        logger.info("Credit alert threshold set to %d", self.threshold)
        return self.threshold

    def status(self, credits: int) -> str:
        """
        Classify a balance against the thresholds.

        Returns:
            "critical", "low" or "ok"
        """
        if credits <= CRITICAL_CREDIT_THRESHOLD:
            return "critical"
        if credits <= self.threshold:
            return "low"
        return "ok"
