"""
Location: bluepages_mcp/server.py

Summary:
    MCP server wiring. Builds the process state (settings, credential,
    credit tracker, client, tool dispatcher), registers the list/call
    handlers on a low-level mcp Server and serves it over stdio.

Usage:
    Installed as the `bluepages-mcp` console script and runnable as
    `python -m bluepages_mcp`. Hosts launch it as a stdio subprocess with
    BLUEPAGES_API_KEY or PRIVATE_KEY in the environment.

Example:
    from bluepages_mcp.server import BluepagesApp
    from bluepages_mcp.config import Settings

    app = BluepagesApp(Settings(bluepages_api_key="bp_..."))
    text = await app.read_resource("bluepages://status")
"""

import asyncio
import logging
import sys
from typing import Any, Optional

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, GetPromptResult, LoggingLevel, Prompt, Resource, Tool

from . import __version__
from .auth import AuthContext, resolve_auth
from .catalog import (
    PROMPTS,
    RESOURCE_INFO,
    RESOURCE_PRICING,
    RESOURCE_STATUS,
    RESOURCES,
    get_prompt,
    list_tools,
)
from .client import BluepagesClient
from .config import Settings, get_settings
from .credits import CreditTracker
from .errors import BluepagesError
from .formatting import PRICING_TEXT, SETUP_INSTRUCTIONS, auth_mode_label, info_text, status_text
from .notifications import SessionNotifier
from .tools import ToolDispatcher
from .types import AuthMode

logger = logging.getLogger(__name__)

SERVER_NAME = "bluepages"


def configure_logging(level: str = "INFO") -> None:
    """
    Send all log output to stderr.

    stdout carries the MCP protocol stream and must stay clean.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


class BluepagesApp:
    """
    Process-wide server state.

    Attributes:
        settings: Loaded Settings
        auth: Active credential, fixed for the process lifetime
        server: Low-level MCP server with the handlers registered
        notifier: Session-bound notification channel
        credit_tracker: Credit balance tracker (enabled in API-key mode)
        client: Bluepages API client
        tools: Tool dispatcher
    """

    def __init__(
        self,
        settings: Settings,
        auth: Optional[AuthContext] = None,
        client: Optional[BluepagesClient] = None,
    ):
        self.settings = settings
        self.auth = auth or resolve_auth(settings)
        self.server: Server = Server(SERVER_NAME, version=__version__)
        self.notifier = SessionNotifier(self.server)
        self.credit_tracker = CreditTracker(
            self.notifier, enabled=self.auth.mode is AuthMode.API_KEY
        )
        self.client = client or BluepagesClient(
            settings.bluepages_api_url,
            self.auth,
            self.credit_tracker,
            timeout=settings.bluepages_timeout,
        )
        self.tools = ToolDispatcher(self.client, self.auth, self.credit_tracker, self.notifier)
        self._register_handlers()

    @property
    def api_url(self) -> str:
        return self.client.base_url

    def _register_handlers(self) -> None:
        server = self.server

        @server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            return list_tools(self.auth)

        # Arguments are checked by the dispatcher so that every failure,
        # including a malformed call without credentials, gets the same
        # error result.
        @server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: Optional[dict[str, Any]]) -> CallToolResult:
            return await self.tools.call(name, arguments)

        @server.list_resources()
        async def handle_list_resources() -> list[Resource]:
            return list(RESOURCES)

        @server.read_resource()
        async def handle_read_resource(uri: Any) -> list[ReadResourceContents]:
            text = await self.read_resource(str(uri))
            return [ReadResourceContents(content=text, mime_type="text/plain")]

        @server.list_prompts()
        async def handle_list_prompts() -> list[Prompt]:
            return list(PROMPTS)

        @server.get_prompt()
        async def handle_get_prompt(
            name: str, arguments: Optional[dict[str, str]]
        ) -> GetPromptResult:
            return get_prompt(name, arguments)

        @server.set_logging_level()
        async def handle_set_logging_level(level: LoggingLevel) -> None:
            self.notifier.set_level(level)
            logger.info("Host notification level set to %s", level)

    async def read_resource(self, uri: str) -> str:
        """
        Render a resource as text.

        Upstream failures while building bluepages://status are rendered
        into the text instead of being raised.

        Raises:
            ValueError: If the resource does not exist
        """
        if uri == RESOURCE_INFO:
            return info_text(self.auth, self.api_url)

        if uri == RESOURCE_PRICING:
            return PRICING_TEXT

        if uri == RESOURCE_STATUS:
            if self.auth.mode is not AuthMode.API_KEY:
                return status_text(self.auth)
            try:
                account = await self.client.get_account()
            except BluepagesError as e:
                return status_text(self.auth, threshold=self.credit_tracker.threshold, error=str(e))
            return status_text(self.auth, account, self.credit_tracker.threshold)

        raise ValueError(f"Unknown resource: {uri}")

    async def startup(self) -> None:
        """Log the startup banner and seed the credit tracker."""
        logger.info("Bluepages MCP server v%s running on stdio", __version__)
        logger.info("API URL: %s", self.api_url)

        if self.auth.mode is AuthMode.NONE:
            logger.warning("Not configured. %s", SETUP_INSTRUCTIONS)
            return

        logger.info("Authentication: %s", auth_mode_label(self.auth.mode))
        if self.auth.signer is not None:
            logger.info("Wallet: %s", self.auth.signer.address)

        if self.auth.mode is AuthMode.API_KEY:
            try:
                account = await self.client.get_account()
            except BluepagesError as e:
                logger.warning("Could not fetch initial credits: %s", e)
                return
            credits = int(account.get("credits") or 0)
            await self.credit_tracker.observe(credits)
            logger.info("Credits: %d", credits)

    async def run_stdio(self) -> None:
        """Serve MCP over stdin/stdout until the host disconnects."""
        await self.startup()
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.client.close()


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.bluepages_log_level)
    app = BluepagesApp(settings)
    await app.run_stdio()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except BluepagesError as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)
