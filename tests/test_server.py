"""
Tests for bluepages_mcp.server module.

Tests application wiring, the registered MCP handlers, resource reading
and startup seeding of the credit tracker.
"""

from unittest.mock import patch

import httpx
import pytest

from mcp.types import (
    CallToolRequest,
    CallToolRequestParams,
    SetLevelRequest,
    SetLevelRequestParams,
)

from bluepages_mcp.config import Settings
from bluepages_mcp.server import BluepagesApp
from bluepages_mcp.types import AuthMode

from conftest import TEST_PRIVATE_KEY, make_response


def make_app(**kwargs) -> BluepagesApp:
    values = {
        "bluepages_api_key": None,
        "private_key": None,
        "bluepages_api_url": "https://bluepages.test/",
    }
    values.update(kwargs)
    return BluepagesApp(Settings(_env_file=None, **values))


class TestBluepagesAppInit:
    """Tests for BluepagesApp wiring."""

    def test_api_key_mode_enables_tracker(self):
        app = make_app(bluepages_api_key="bp_1")
        assert app.auth.mode is AuthMode.API_KEY
        assert app.credit_tracker.enabled is True
        assert app.client.credit_tracker is app.credit_tracker
        assert app.tools.credit_tracker is app.credit_tracker

    def test_payment_mode_disables_tracker(self):
        app = make_app(private_key=TEST_PRIVATE_KEY)
        assert app.auth.mode is AuthMode.PAYMENT
        assert app.credit_tracker.enabled is False

    def test_api_url(self):
        assert make_app(bluepages_api_key="bp_1").api_url == "https://bluepages.test"

    def test_timeout_from_settings(self):
        app = make_app(bluepages_api_key="bp_1", bluepages_timeout=5)
        assert app.client.timeout == 5


class TestReadResource:
    """Tests for BluepagesApp.read_resource()."""

    async def test_info(self):
        text = await make_app(bluepages_api_key="bp_1").read_resource("bluepages://info")
        assert "Authentication Mode: API Key" in text

    async def test_pricing(self):
        text = await make_app().read_resource("bluepages://pricing")
        assert text.startswith("Bluepages API Pricing")

    async def test_status_fetches_account(self):
        app = make_app(bluepages_api_key="bp_1")
        with patch.object(app.client._http, "request") as mock_request:
            mock_request.return_value = make_response(200, {"credits": 12000, "points": 40})
            text = await app.read_resource("bluepages://status")

        assert "Credits: 12,000" in text
        assert text.endswith("✓ Credits OK")

    async def test_status_renders_upstream_error(self):
        """Test that a failed balance fetch is shown, not raised."""
        app = make_app(bluepages_api_key="bp_1")
        with patch.object(app.client._http, "request") as mock_request:
            mock_request.return_value = make_response(401, {"error": "Invalid API key"})
            text = await app.read_resource("bluepages://status")

        assert "Error fetching credits - Invalid API key" in text

    async def test_status_unconfigured_makes_no_request(self):
        app = make_app()
        with patch.object(app.client._http, "request") as mock_request:
            text = await app.read_resource("bluepages://status")
            mock_request.assert_not_called()
        assert "Not configured" in text

    async def test_unknown_resource(self):
        with pytest.raises(ValueError, match="Unknown resource"):
            await make_app().read_resource("bluepages://secrets")


class TestStartup:
    """Tests for BluepagesApp.startup()."""

    async def test_seeds_credit_balance(self, notifier):
        app = make_app(bluepages_api_key="bp_1")
        app.credit_tracker.notifier = notifier
        with patch.object(app.client._http, "request") as mock_request:
            mock_request.return_value = make_response(200, {"credits": 50, "points": 0})
            await app.startup()

        assert app.credit_tracker.last_known_credits == 50
        assert notifier.messages == []

    async def test_startup_survives_upstream_failure(self):
        app = make_app(bluepages_api_key="bp_1")
        with patch.object(app.client._http, "request") as mock_request:
            mock_request.side_effect = httpx.ConnectError("offline")
            await app.startup()

        assert app.credit_tracker.last_known_credits is None

    async def test_unconfigured_startup_makes_no_request(self):
        app = make_app()
        with patch.object(app.client._http, "request") as mock_request:
            await app.startup()
            mock_request.assert_not_called()


def call_tool_request(name: str, arguments: dict) -> CallToolRequest:
    return CallToolRequest(
        method="tools/call",
        params=CallToolRequestParams(name=name, arguments=arguments),
    )


class TestRegisteredHandlers:
    """Tests for the handlers registered on the low-level MCP server."""

    def test_advertises_logging_capability(self):
        capabilities = make_app().server.create_initialization_options().capabilities
        assert capabilities.logging is not None
        assert capabilities.tools is not None

    async def test_set_logging_level(self):
        app = make_app(bluepages_api_key="bp_1")
        handler = app.server.request_handlers[SetLevelRequest]

        await handler(
            SetLevelRequest(method="logging/setLevel", params=SetLevelRequestParams(level="warning"))
        )

        assert app.notifier.min_level == "warning"

    async def test_unconfigured_call_with_bad_arguments(self):
        """Test that invalid arguments still get the setup instructions."""
        app = make_app()
        handler = app.server.request_handlers[CallToolRequest]

        with patch.object(app.client._http, "request") as mock_request:
            result = await handler(call_tool_request("check_address", {"address": "nope"}))
            mock_request.assert_not_called()

        assert result.root.isError is True
        assert result.root.content[0].text.startswith("Error: Bluepages is not configured")

    async def test_missing_argument_reaches_error_boundary(self):
        """Test that schema violations are reported as a single error result."""
        app = make_app(bluepages_api_key="bp_1")
        handler = app.server.request_handlers[CallToolRequest]

        with patch.object(app.client._http, "request") as mock_request:
            result = await handler(call_tool_request("check_address", {}))
            mock_request.assert_not_called()

        assert result.root.isError is True
        assert result.root.content[0].text == (
            "Error: 'address' is required and must be a non-empty string"
        )

    async def test_call_tool_success(self):
        app = make_app(bluepages_api_key="bp_1")
        handler = app.server.request_handlers[CallToolRequest]

        with patch.object(app.client._http, "request") as mock_request:
            mock_request.return_value = make_response(200, {"exists": False})
            result = await handler(call_tool_request("check_address", {"address": "0xabc"}))

        assert result.root.isError is False
        assert result.root.content[0].text == "✗ Address 0xabc not found in database"
