"""
Location: bluepages_mcp/tools.py

Summary:
    Tool dispatcher. Maps each MCP tool name onto a handler that calls the
    Bluepages client (or the batch driver), formats the answer, and wraps
    everything in one error boundary: any failure becomes a single
    "Error: <message>" text result flagged as an error.

Usage:
    server.py builds one ToolDispatcher and forwards every call_tool
    request to ToolDispatcher.call().

Example:
    dispatcher = ToolDispatcher(client, auth, tracker, notifier)
    result = await dispatcher.call("check_address", {"address": "0x..."})
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from mcp.types import CallToolResult, TextContent

from .auth import AuthContext
from .client import BluepagesClient, normalize_handle
from .credits import CreditTracker, get_credit_package
from .errors import BluepagesError, ConfigurationError, ValidationError
from .formatting import (
    NOT_CONFIGURED_MESSAGE,
    format_batch_check,
    format_batch_data,
    format_check,
    format_credits,
    format_lookup_result,
    format_purchase,
    format_streaming_check,
    format_streaming_data,
    format_threshold_set,
)
from .notifications import Notifier, NullNotifier
from .stream import normalize_batch_results, run_batch
from .types import (
    AuthMode,
    BatchEvent,
    BatchItemFound,
    BatchProgress,
    DataRecord,
    EndpointKind,
    LookupKind,
)

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def error_result(message: str) -> CallToolResult:
    return text_result(f"Error: {message}", is_error=True)


def _require_str(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{key}' is required and must be a non-empty string")
    return value.strip()


def _str_list(arguments: dict[str, Any], key: str) -> list[str]:
    value = arguments.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{key}' must be an array of strings")
    return [v.strip() for v in value if v.strip()]


class ToolDispatcher:
    """
    Routes tool calls to their handlers behind a uniform error boundary.

    Attributes:
        client: Authenticated Bluepages client
        auth: Active credential
        credit_tracker: Shared credit balance tracker
        notifier: Host notification channel
    """

    def __init__(
        self,
        client: BluepagesClient,
        auth: AuthContext,
        credit_tracker: CreditTracker,
        notifier: Optional[Notifier] = None,
    ):
        self.client = client
        self.auth = auth
        self.credit_tracker = credit_tracker
        self.notifier = notifier or NullNotifier()
        self._handlers: dict[str, ToolHandler] = {
            "check_address": self._check_address,
            "check_twitter": self._check_twitter,
            "get_data_for_address": self._get_data_for_address,
            "get_data_for_twitter": self._get_data_for_twitter,
            "batch_check": self._batch_check,
            "batch_get_data": self._batch_get_data,
            "batch_check_streaming": self._batch_check_streaming,
            "batch_get_data_streaming": self._batch_get_data_streaming,
            "check_credits": self._check_credits,
            "set_credit_alert": self._set_credit_alert,
            "purchase_credits": self._purchase_credits,
        }

    async def call(self, name: str, arguments: Optional[dict[str, Any]]) -> CallToolResult:
        """
        Run one tool call.

        Never raises: every failure is turned into an error result.

        Args:
            name: Tool name
            arguments: Tool arguments (may be None)

        Returns:
            CallToolResult with a single text item
        """
        try:
            if not self.auth.configured:
                raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

            handler = self._handlers.get(name)
            if handler is None:
                raise ValidationError(f"Unknown tool: {name}")
            if arguments is not None and not isinstance(arguments, dict):
                raise ValidationError("Invalid arguments. Expected an object.")

            return text_result(await handler(arguments or {}))
        except BluepagesError as e:
            logger.info("Tool %s failed: %s", name, e)
            return error_result(str(e))
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return error_result(str(e) or type(e).__name__)

    # -- single lookups -------------------------------------------------------

    async def _check_address(self, arguments: dict[str, Any]) -> str:
        address = _require_str(arguments, "address")
        result = await self.client.check_address(address)
        return format_check(result, f"Address {address}")

    async def _check_twitter(self, arguments: dict[str, Any]) -> str:
        handle = normalize_handle(_require_str(arguments, "twitter"))
        result = await self.client.check_twitter(handle)
        return format_check(result, handle)

    async def _get_data_for_address(self, arguments: dict[str, Any]) -> str:
        address = _require_str(arguments, "address")
        result = await self.client.get_data_for_address(address)
        return format_lookup_result(result, address)

    async def _get_data_for_twitter(self, arguments: dict[str, Any]) -> str:
        handle = normalize_handle(_require_str(arguments, "twitter"))
        result = await self.client.get_data_for_twitter(handle)
        return format_lookup_result(result, handle)

    # -- single-request batches ----------------------------------------------

    def _batch_inputs(self, arguments: dict[str, Any]) -> tuple[list[str], list[str]]:
        addresses = _str_list(arguments, "addresses")
        twitters = [normalize_handle(t) for t in _str_list(arguments, "twitters")]
        if not addresses and not twitters:
            raise ValidationError("At least one address or twitter handle required")
        return addresses, twitters

    async def _batch_check(self, arguments: dict[str, Any]) -> str:
        addresses, twitters = self._batch_inputs(arguments)
        result = await self.client.batch_check(addresses, twitters)
        records = (
            normalize_batch_results(result, LookupKind.ADDRESS, EndpointKind.CHECK)
            + normalize_batch_results(result, LookupKind.HANDLE, EndpointKind.CHECK)
        )
        return format_batch_check(records, len(addresses) + len(twitters))

    async def _batch_get_data(self, arguments: dict[str, Any]) -> str:
        addresses, twitters = self._batch_inputs(arguments)
        result = await self.client.batch_data(addresses, twitters)
        return format_batch_data(
            normalize_batch_results(result, LookupKind.ADDRESS, EndpointKind.DATA),
            normalize_batch_results(result, LookupKind.HANDLE, EndpointKind.DATA),
        )

    # -- streaming batches ---------------------------------------------------

    async def _report(self, event: BatchEvent) -> None:
        await self.notifier.notify("info", event.message, event.model_dump())
        if isinstance(event, BatchProgress):
            await self.notifier.progress(event.current, event.total, event.message)

    async def _batch_check_streaming(self, arguments: dict[str, Any]) -> str:
        addresses = _str_list(arguments, "addresses")
        if not addresses:
            raise ValidationError("At least one address required")

        await self.notifier.notify(
            "info",
            f"Starting batch check of {len(addresses)} addresses...",
            {"total": len(addresses)},
        )

        records = await run_batch(
            self.client, addresses, LookupKind.ADDRESS, EndpointKind.CHECK, self._report
        )

        found = sum(1 for r in records if r.found)
        await self.notifier.notify(
            "info",
            f"✓ Batch check complete: {found} found, {len(records) - found} not found",
            {"found": found, "notFound": len(records) - found, "total": len(records)},
        )
        return format_streaming_check(records)

    async def _batch_get_data_streaming(self, arguments: dict[str, Any]) -> str:
        addresses = _str_list(arguments, "addresses")
        if not addresses:
            raise ValidationError("At least one address required")

        await self.notifier.notify(
            "info",
            f"Starting data retrieval for {len(addresses)} addresses...",
            {"total": len(addresses)},
        )

        found_items: list[DataRecord] = []

        async def on_progress(event: BatchEvent) -> None:
            if isinstance(event, BatchItemFound) and isinstance(event.item, DataRecord):
                found_items.append(event.item)
            await self._report(event)

        await run_batch(
            self.client, addresses, LookupKind.ADDRESS, EndpointKind.DATA, on_progress
        )

        await self.notifier.notify(
            "info",
            f"✓ Data retrieval complete: found data for {len(found_items)} addresses",
            {"found": len(found_items), "total": len(addresses)},
        )
        return format_streaming_data(found_items, len(addresses))

    # -- credit management ---------------------------------------------------

    async def _check_credits(self, arguments: dict[str, Any]) -> str:
        self.auth.require(AuthMode.API_KEY, "check_credits")

        account = await self.client.get_account()
        credits = int(account.get("credits") or 0)
        await self.credit_tracker.observe(credits)

        return format_credits(
            credits,
            int(account.get("points") or 0),
            self.credit_tracker.threshold,
            self.credit_tracker.status(credits),
        )

    async def _set_credit_alert(self, arguments: dict[str, Any]) -> str:
        self.auth.require(AuthMode.API_KEY, "set_credit_alert")

        value = arguments.get("threshold")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("'threshold' is required and must be a number")
        threshold = self.credit_tracker.set_threshold(int(value))

        await self.notifier.notify(
            "info",
            f"Credit alert threshold set to {threshold:,} credits",
            {"threshold": threshold},
        )
        return format_threshold_set(threshold)

    async def _purchase_credits(self, arguments: dict[str, Any]) -> str:
        self.auth.require(AuthMode.PAYMENT, "purchase_credits")

        package = get_credit_package(_require_str(arguments, "package"))
        wallet_address = self.auth.signer.address

        await self.notifier.notify(
            "info",
            f"Purchasing {package.credits:,} credits (${package.price_usd})...",
            {"package": package.name},
        )

        result = await self.client.purchase_credits(package.name, wallet_address)

        added = result.get("creditsAdded")
        await self.notifier.notify(
            "info",
            f"✓ Purchased {added if isinstance(added, int) else package.credits:,} credits!",
            {"credits": result.get("newCredits"), "txHash": result.get("transactionHash")},
        )
        return format_purchase(result, package, wallet_address)
