"""
Location: bluepages_mcp/catalog.py

Summary:
    Static MCP catalog: tool declarations with their input schemas, the
    three text resources and the three guided prompts. Credential-gated
    tools are only listed when their authentication mode is active.

Usage:
    server.py returns list_tools(auth), RESOURCES and PROMPTS from its
    list handlers, and get_prompt() from its prompt handler.
"""

from typing import Optional

from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)

from .auth import AuthContext
from .credits import CREDIT_PACKAGES
from .types import AuthMode


ADDRESS_PATTERN = "^0x[a-fA-F0-9]{40}$"

_ADDRESS_LIST_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
}

LOOKUP_TOOLS = [
    Tool(
        name="check_address",
        description=(
            "Check if an Ethereum address exists in the Bluepages database. Returns whether "
            "data is available. Fast and cheap - use this first before fetching full data. "
            "Cost: 1 credit ($0.001 USD)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "Ethereum address to check (0x format, 42 characters)",
                    "pattern": ADDRESS_PATTERN,
                },
            },
            "required": ["address"],
        },
    ),
    Tool(
        name="check_twitter",
        description=(
            "Check if a Twitter/X handle exists in the Bluepages database. Returns whether "
            "data is available. Cost: 1 credit ($0.001 USD)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "twitter": {
                    "type": "string",
                    "description": "Twitter/X handle (with or without @)",
                },
            },
            "required": ["twitter"],
        },
    ),
    Tool(
        name="get_data_for_address",
        description=(
            "Get Twitter/Farcaster for a SINGLE address. For MULTIPLE addresses, use "
            "batch_get_data instead (faster and cheaper). Cost: 50 credits when data found, "
            "free if not found."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "Ethereum address (0x format, 42 characters)",
                    "pattern": ADDRESS_PATTERN,
                },
            },
            "required": ["address"],
        },
    ),
    Tool(
        name="get_data_for_twitter",
        description=(
            "Get Ethereum addresses for a SINGLE Twitter handle. For MULTIPLE handles, use "
            "batch_get_data instead (faster and cheaper). Cost: 50 credits when data found, "
            "free if not found."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "twitter": {
                    "type": "string",
                    "description": "Twitter/X handle (with or without @)",
                },
            },
            "required": ["twitter"],
        },
    ),
    Tool(
        name="batch_check",
        description=(
            "Check multiple addresses and/or Twitter handles at once (up to 50 total). More "
            "efficient than individual checks. Cost: 40 credits ($0.04 USD) per batch."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "addresses": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": "Array of Ethereum addresses to check (max 50 total with twitters)",
                },
                "twitters": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": "Array of Twitter handles to check (max 50 total with addresses)",
                },
            },
        },
    ),
    Tool(
        name="batch_get_data",
        description=(
            "RECOMMENDED for multiple addresses. Get full data for up to 50 addresses/Twitter "
            "handles at once. Much cheaper than individual get_data calls. First use "
            "batch_check to find which have data, then call this. Cost: API key users pay 40 "
            "credits per item found; x402 users pay $2.00 flat per batch."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "addresses": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": "Array of Ethereum addresses to get data for",
                },
                "twitters": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": "Array of Twitter handles to get data for",
                },
            },
        },
    ),
    Tool(
        name="batch_check_streaming",
        description=(
            "Check a large list of addresses with streaming progress updates. Use this for "
            "lists larger than 50 items. Sends progress notifications as batches complete. "
            "Cost: 40 credits per batch of 50."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "addresses": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": (
                        "Array of Ethereum addresses to check "
                        "(any size, processed in batches of 50)"
                    ),
                },
            },
            "required": ["addresses"],
        },
    ),
    Tool(
        name="batch_get_data_streaming",
        description=(
            "Get data for a large list of addresses with streaming progress updates. Use this "
            "for lists larger than 50 items. Sends notifications as results are found. Cost: "
            "API key users pay 40 credits per item found; x402 users pay $2.00 per batch of 50."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "addresses": {
                    **_ADDRESS_LIST_SCHEMA,
                    "description": (
                        "Array of Ethereum addresses to get data for "
                        "(any size, processed in batches of 50)"
                    ),
                },
            },
            "required": ["addresses"],
        },
    ),
]

API_KEY_TOOLS = [
    Tool(
        name="check_credits",
        description=(
            "Check your remaining API credits and points. Only available when using API key "
            "authentication."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="set_credit_alert",
        description=(
            "Set a custom threshold for low credit warnings. You'll receive a notification "
            "when credits drop below this level."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "threshold": {
                    "type": "number",
                    "description": "Credit threshold for warnings (default: 1000)",
                    "minimum": 0,
                },
            },
            "required": ["threshold"],
        },
    ),
]

PAYMENT_TOOLS = [
    Tool(
        name="purchase_credits",
        description=(
            "Purchase API credits using x402 payment (USDC on Base). Packages: starter "
            "(5,000 credits, $5), pro (50,000 credits, $45), enterprise (1,000,000 credits, "
            "$600). Returns an API key if you don't have one."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "package": {
                    "type": "string",
                    "enum": list(CREDIT_PACKAGES),
                    "description": "Credit package to purchase",
                },
            },
            "required": ["package"],
        },
    ),
]


def list_tools(auth: AuthContext) -> list[Tool]:
    """
    Tools visible for the active authentication mode.

    Args:
        auth: Active credential

    Returns:
        Lookup tools, plus credit tools (API key) or purchase tools (x402)
    """
    tools = list(LOOKUP_TOOLS)
    if auth.mode is AuthMode.API_KEY:
        tools.extend(API_KEY_TOOLS)
    if auth.mode is AuthMode.PAYMENT:
        tools.extend(PAYMENT_TOOLS)
    return tools


RESOURCE_INFO = "bluepages://info"
RESOURCE_PRICING = "bluepages://pricing"
RESOURCE_STATUS = "bluepages://status"

RESOURCES = [
    Resource(
        uri=RESOURCE_INFO,
        name="Bluepages API Information",
        description="Information about the Bluepages API, authentication, and pricing",
        mimeType="text/plain",
    ),
    Resource(
        uri=RESOURCE_PRICING,
        name="Pricing Information",
        description="Credit costs for each endpoint",
        mimeType="text/plain",
    ),
    Resource(
        uri=RESOURCE_STATUS,
        name="Current Session Status",
        description="Your current credits, points, and session information",
        mimeType="text/plain",
    ),
]


PROMPTS = [
    Prompt(
        name="analyze_addresses",
        description="Analyze a list of Ethereum addresses to find their Twitter/social identities",
        arguments=[
            PromptArgument(
                name="addresses",
                description="Comma-separated list of Ethereum addresses",
                required=True,
            ),
        ],
    ),
    Prompt(
        name="find_crypto_twitter",
        description="Find the Ethereum address for a Twitter/X crypto personality",
        arguments=[
            PromptArgument(
                name="twitter_handle",
                description="Twitter/X handle to look up",
                required=True,
            ),
        ],
    ),
    Prompt(
        name="analyze_large_list",
        description="Analyze a large list of addresses (100+) with streaming progress updates",
        arguments=[
            PromptArgument(
                name="addresses",
                description="Comma-separated list of Ethereum addresses (any size)",
                required=True,
            ),
        ],
    ),
]


def _prompt(description: str, text: str) -> GetPromptResult:
    return GetPromptResult(
        description=description,
        messages=[
            PromptMessage(role="user", content=TextContent(type="text", text=text)),
        ],
    )


def get_prompt(name: str, arguments: Optional[dict[str, str]] = None) -> GetPromptResult:
    """
    Render a guided prompt.

    Args:
        name: Prompt name
        arguments: Prompt arguments

    Returns:
        GetPromptResult with a single user message

    Raises:
        ValueError: If the prompt does not exist
    """
    args = arguments or {}

    if name == "analyze_addresses":
        return _prompt(
            "Analyze Ethereum addresses for social identities",
            "Please analyze these Ethereum addresses and find any associated Twitter/social "
            "identities:\n\n"
            f"{args.get('addresses') or 'No addresses provided'}\n\n"
            "For each address:\n"
            "1. First use batch_check to efficiently check which addresses have data\n"
            "2. Then use batch_get_data only for addresses that were found\n"
            "3. Summarize the findings in a clear format",
        )

    if name == "find_crypto_twitter":
        return _prompt(
            "Find crypto address for Twitter personality",
            "Please find the Ethereum address associated with the Twitter/X handle: "
            f"{args.get('twitter_handle') or 'unknown'}\n\n"
            "1. First use check_twitter to verify the handle exists in the database\n"
            "2. If found, use get_data_for_twitter to get the full details\n"
            "3. Report any associated addresses, display name, and Farcaster username",
        )

    if name == "analyze_large_list":
        return _prompt(
            "Analyze large list of addresses with streaming",
            "Please analyze this large list of Ethereum addresses with streaming progress:\n\n"
            f"{args.get('addresses') or 'No addresses provided'}\n\n"
            "Since this is a large list:\n"
            "1. Use batch_check_streaming to check all addresses with progress updates\n"
            "2. Then use batch_get_data_streaming for found addresses\n"
            "3. Watch for progress notifications as batches complete\n"
            "4. Summarize all findings when complete",
        )

    raise ValueError(f"Unknown prompt: {name}")
