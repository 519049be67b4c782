"""
Tests for bluepages_mcp.credits module.

Tests credit tracking, one-shot threshold-crossing alerts and the
credit package catalog.
"""

import pytest

from bluepages_mcp.credits import (
    CREDIT_PACKAGES,
    CRITICAL_CREDIT_THRESHOLD,
    DEFAULT_ALERT_THRESHOLD,
    CreditTracker,
    get_credit_package,
)
from bluepages_mcp.errors import ValidationError


class TestCreditTrackerObserve:
    """Tests for CreditTracker.observe()."""

    @pytest.fixture
    def tracker(self, notifier):
        return CreditTracker(notifier)

    async def test_first_observation_never_alerts(self, tracker, notifier):
        """Test that an unknown previous balance suppresses alerts."""
        await tracker.observe(50)
        assert tracker.last_known_credits == 50
        assert notifier.messages == []

    async def test_alert_sequence(self, tracker, notifier):
        """Test 1500 -> 900 -> 900 -> 50: one warning, then one critical."""
        await tracker.observe(1500)
        assert notifier.messages == []

        await tracker.observe(900)
        assert notifier.levels() == ["warning"]
        assert notifier.messages[0][2] == {"credits": 900, "threshold": 1000}

        await tracker.observe(900)
        assert notifier.levels() == ["warning"]

        await tracker.observe(50)
        assert notifier.levels() == ["warning", "error"]
        assert notifier.messages[1][2] == {"credits": 50, "threshold": CRITICAL_CREDIT_THRESHOLD}
        assert "CRITICAL" in notifier.messages[1][1]

    async def test_both_thresholds_at_once_sends_critical_only(self, tracker, notifier):
        """Test that one observation sends at most one alert."""
        await tracker.observe(5000)
        await tracker.observe(10)
        assert notifier.levels() == ["error"]

    async def test_exact_threshold_counts_as_crossed(self, tracker, notifier):
        """Test that landing on the threshold is a crossing."""
        await tracker.observe(1001)
        await tracker.observe(1000)
        assert notifier.levels() == ["warning"]

    async def test_refires_after_recovery(self, tracker, notifier):
        """Test that a top-up re-arms the alert."""
        await tracker.observe(1500)
        await tracker.observe(900)
        await tracker.observe(6000)
        await tracker.observe(800)
        assert notifier.levels() == ["warning", "warning"]

    async def test_upward_movement_is_silent(self, tracker, notifier):
        """Test that balance increases never alert."""
        await tracker.observe(50)
        await tracker.observe(900)
        await tracker.observe(5000)
        assert notifier.messages == []

    async def test_none_is_ignored(self, tracker, notifier):
        """Test that a missing hint does not reset the balance."""
        await tracker.observe(1500)
        await tracker.observe(None)
        assert tracker.last_known_credits == 1500
        await tracker.observe(900)
        assert notifier.levels() == ["warning"]

    async def test_disabled_tracker_records_nothing(self, notifier):
        """Test that a disabled tracker (x402 mode) is inert."""
        tracker = CreditTracker(notifier, enabled=False)
        await tracker.observe(1500)
        await tracker.observe(10)
        assert tracker.last_known_credits is None
        assert notifier.messages == []

    async def test_without_notifier(self):
        """Test that the tracker works without a notifier."""
        tracker = CreditTracker()
        await tracker.observe(1500)
        await tracker.observe(10)
        assert tracker.last_known_credits == 10


class TestCreditTrackerThreshold:
    """Tests for CreditTracker.set_threshold() and status()."""

    def test_default_threshold(self):
        assert CreditTracker().threshold == DEFAULT_ALERT_THRESHOLD == 1000

    async def test_custom_threshold_used_for_alerts(self, notifier):
        """Test that the low alert uses the current threshold."""
        tracker = CreditTracker(notifier)
        tracker.set_threshold(5000)
        await tracker.observe(6000)
        await tracker.observe(4000)
        assert notifier.levels() == ["warning"]
        assert notifier.messages[0][2]["threshold"] == 5000

    async def test_threshold_change_does_not_reevaluate(self, notifier):
        """Test that raising the threshold above the balance is silent."""
        tracker = CreditTracker(notifier)
        await tracker.observe(3000)
        tracker.set_threshold(5000)
        assert notifier.messages == []
        await tracker.observe(3000)
        assert notifier.messages == []

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            CreditTracker().set_threshold(-1)

    def test_zero_threshold_allowed(self):
        assert CreditTracker().set_threshold(0) == 0

    def test_status(self):
        """Test balance classification."""
        tracker = CreditTracker()
        assert tracker.status(100) == "critical"
        assert tracker.status(101) == "low"
        assert tracker.status(1000) == "low"
        assert tracker.status(1001) == "ok"


class TestCreditPackages:
    """Tests for the credit package catalog."""

    def test_packages(self):
        assert list(CREDIT_PACKAGES) == ["starter", "pro", "enterprise"]
        assert get_credit_package("pro").credits == 50_000
        assert get_credit_package("enterprise").price_usdc == "600000000"

    def test_unknown_package(self):
        with pytest.raises(ValidationError, match="Invalid package: gold"):
            get_credit_package("gold")
