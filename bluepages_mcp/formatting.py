"""
Location: bluepages_mcp/formatting.py

Summary:
    Human-readable rendering of Bluepages responses and server state for
    tool results and resources.

Usage:
    Called by tools.py after each successful upstream call, and by the
    resource handlers for bluepages://info, pricing and status.
"""

import json
from typing import Any, Optional, Sequence

from .auth import AuthContext
from .credits import CRITICAL_CREDIT_THRESHOLD
from .types import AuthMode, BatchRecord, CheckRecord, CreditPackage, DataRecord


_KNOWN_IDENTITY_TYPES = ("twitter", "farcaster", "email")

SETUP_INSTRUCTIONS = (
    "Set one of these environment variables and restart:\n\n"
    "Option 1 (recommended): BLUEPAGES_API_KEY\n"
    "  Get a key at https://bluepages.fyi/api-keys.html\n"
    "  20% cheaper, 2x rate limits\n\n"
    "Option 2: PRIVATE_KEY\n"
    "  Ethereum private key for x402 payments (USDC on Base)\n"
    "  No API key needed, pay per request"
)

NOT_CONFIGURED_MESSAGE = f"Bluepages is not configured. {SETUP_INSTRUCTIONS}"


def auth_mode_label(mode: AuthMode) -> str:
    return {
        AuthMode.API_KEY: "API Key",
        AuthMode.PAYMENT: "x402 Payments (USDC on Base)",
        AuthMode.NONE: "Not configured",
    }[mode]


def format_check(result: dict[str, Any], label: str) -> str:
    """Render a /check response for an address or handle."""
    if result.get("exists"):
        types = ", ".join(result.get("types") or []) or "unknown"
        return f"✓ {label} found in database (types: {types})"
    return f"✗ {label} not found in database"


def _format_search_results(result: dict[str, Any], query: str) -> str:
    output = [f'Found {result.get("totalMatches", 0)} match(es) for "{query}":\n']
    for match in result["results"]:
        output.append(f"Address: {match.get('address')}")
        output.append(f"  Match: {match.get('matchType')} = {match.get('matchedValue')}")
        for identity in match.get("identities") or []:
            output.append(f"  {identity.get('type')}: {identity.get('value')} ({identity.get('source')})")
        cluster = match.get("cluster")
        if cluster:
            output.append(f"  Cluster: {cluster.get('id')} ({cluster.get('totalAddresses')} addresses)")
        output.append("")
    return "\n".join(output)


def format_lookup_result(result: dict[str, Any], query: str) -> str:
    """
    Render a /data response.

    Handles both the single-address shape (identities, cluster, sources)
    and the search shape (results, totalMatches).

    Args:
        result: Decoded /data response
        query: Address or handle that was looked up

    Returns:
        Multi-line text
    """
    if result.get("found") is False:
        return f"No data found for {query}"

    if isinstance(result.get("results"), list):
        return _format_search_results(result, query)

    output: list[str] = []
    if result.get("address"):
        output.append(f"Address: {result['address']}")

    identities = result.get("identities") or []
    by_type = {}
    for identity in identities:
        by_type.setdefault(identity.get("type"), identity)
    for identity_type in _KNOWN_IDENTITY_TYPES:
        identity = by_type.get(identity_type)
        if identity:
            output.append(
                f"{identity_type.capitalize()}: {identity.get('value')} ({identity.get('source')})"
            )
    for identity in identities:
        if identity.get("type") not in _KNOWN_IDENTITY_TYPES:
            output.append(f"{identity.get('type')}: {identity.get('value')} ({identity.get('source')})")

    cluster = result.get("cluster")
    if cluster:
        truncated = " (truncated)" if cluster.get("truncated") else ""
        output.append("")
        output.append(f"Cluster: {cluster.get('id')}")
        output.append(f"  Source: {cluster.get('source')}")
        output.append(f"  Addresses: {cluster.get('totalAddresses')}{truncated}")
        if cluster.get("transitive"):
            output.append("  Transitive: yes")
        members = cluster.get("addresses") or []
        if members:
            more = "..." if len(members) > 5 else ""
            output.append(f"  Members: {', '.join(members[:5])}{more}")

    sources = result.get("sources") or []
    if sources:
        output.append(f"\nSources: {', '.join(sources)}")

    return "\n".join(output) or json.dumps(result, indent=2)


def format_batch_check(records: Sequence[CheckRecord], total: int) -> str:
    """Render /batch/check records with a found/total summary."""
    found = sum(1 for r in records if r.found)
    details = []
    for record in records:
        if record.found:
            status = f"✓ found (twitter: {record.twitter}, farcaster: {record.farcaster})"
        else:
            status = "✗ not found"
        details.append(f"{record.id}: {status}")
    return f"Batch check complete: {found}/{total} items found in database\n\n" + "\n".join(details)


def format_batch_data(
    address_records: Sequence[DataRecord],
    handle_records: Sequence[DataRecord],
) -> str:
    """Render /batch/data records; only found entries are listed."""
    lines = ["Batch data retrieval complete:\n"]
    for record in address_records:
        if not record.found:
            continue
        lines.append(record.id)
        if record.twitter:
            lines.append(f"  Twitter: {record.twitter} ({record.source or 'unknown'})")
        if record.display_name:
            lines.append(f"  Display Name: {record.display_name}")
        if record.alternate_count > 0:
            lines.append(f"  Alternates: {record.alternate_count} other sources")
        lines.append("")
    for record in handle_records:
        if not record.found:
            continue
        lines.append(f"{record.id} → {record.address}")
        if record.display_name:
            lines.append(f"  Display Name: {record.display_name}")
        lines.append("")
    return "\n".join(lines)


def format_streaming_check(records: Sequence[BatchRecord]) -> str:
    found = [r for r in records if r.found]
    listing = "\n".join(f"  ✓ {r.id}" for r in found) or "  (none)"
    return (
        "Batch check complete!\n\n"
        f"Found: {len(found)}\n"
        f"Not found: {len(records) - len(found)}\n\n"
        f"Found addresses:\n{listing}"
    )


def format_streaming_data(found_items: Sequence[DataRecord], total: int) -> str:
    output = f"Data retrieval complete!\n\nFound: {len(found_items)}/{total}\n\n"
    if found_items:
        output += "Results:\n"
        for item in found_items:
            output += f"\n{item.id}\n"
            if item.twitter:
                output += f"  Twitter: {item.twitter}"
                if item.source:
                    output += f" ({item.source})"
                output += "\n"
            if item.display_name:
                output += f"  Display Name: {item.display_name}\n"
            if item.alternate_count > 0:
                output += f"  Alternates: {item.alternate_count} other sources\n"
    return output


def _status_suffix(status: str) -> str:
    if status == "critical":
        return " ⚠️ CRITICAL - purchase more credits!"
    if status == "low":
        return " ⚠️ Running low"
    return ""


def format_credits(credits: int, points: int, threshold: int, status: str) -> str:
    return (
        f"Credits remaining: {credits:,}{_status_suffix(status)}\n"
        f"Points earned: {points:,}\n\n"
        f"Alert threshold: {threshold:,} credits"
    )


def format_threshold_set(threshold: int) -> str:
    return (
        f"✓ Credit alert threshold set to {threshold:,} credits.\n"
        "You'll receive a warning when your balance drops below this level."
    )


def format_purchase(result: dict[str, Any], package: CreditPackage, wallet_address: str) -> str:
    added = result.get("creditsAdded")
    added = added if isinstance(added, int) else package.credits
    new_credits = result.get("newCredits")
    new_balance = f"{new_credits:,}" if isinstance(new_credits, int) else "unknown"
    return (
        f"✓ Successfully purchased {added:,} credits!\n\n"
        f"New balance: {new_balance} credits\n"
        f"Transaction: {result.get('transactionHash') or 'confirmed'}\n\n"
        "You can now switch to API key authentication for 20% cheaper requests.\n"
        f"Your wallet address: {wallet_address}"
    )


def info_text(auth: AuthContext, api_url: str) -> str:
    """Text of the bluepages://info resource."""
    banner = ""
    if auth.mode is AuthMode.NONE:
        banner = (
            "⚠️  NOT CONFIGURED: All tool calls will fail until credentials are set.\n\n"
            f"{SETUP_INSTRUCTIONS}\n\n{'─' * 60}\n"
        )

    mode_lines = []
    if auth.mode is AuthMode.API_KEY:
        mode_lines.append("Use check_credits tool to see remaining balance")
    if auth.mode is AuthMode.PAYMENT and auth.signer is not None:
        mode_lines.append(f"Wallet: {auth.signer.address}")

    return (
        f"{banner}Bluepages API - Crypto Address ↔ Twitter/X Lookup Service\n\n"
        "Bluepages maintains a database of over 800,000 verified connections between\n"
        "Ethereum addresses and Twitter/X handles, along with Farcaster usernames and\n"
        "display names.\n\n"
        f"Authentication Mode: {auth_mode_label(auth.mode)}\n"
        + "".join(f"{line}\n" for line in mode_lines)
        + "\nUsage Tips:\n"
        "1. Use check_address or check_twitter first (cheap) to see if data exists\n"
        "2. Only call get_data_* when check returns found=true\n"
        "3. Use batch_* endpoints for multiple lookups (more efficient)\n"
        "4. Use batch_*_streaming for large lists (100+ items) to see progress\n"
        "5. The /data endpoints don't charge if no data is found\n\n"
        "Features:\n"
        "- Streaming: batch_check_streaming and batch_get_data_streaming for large lists\n"
        "- Notifications: Low credit warnings when balance drops below threshold\n"
        "- Credit alerts: Use set_credit_alert to customize warning threshold\n\n"
        f"API URL: {api_url}"
    )


PRICING_TEXT = """Bluepages API Pricing

Payment Methods:
1. API Key (credits) - 1 credit = $0.001 USD
2. x402 (USDC on Base) - Pay per request

Single Operations:
- check_address / check_twitter: 1 credit ($0.001)
- get_data_for_address / get_data_for_twitter: 50 credits ($0.05) - only if found

Batch Operations (up to 50 items per batch):
- batch_check: 40 credits ($0.04) per batch
- batch_get_data:
  * API Key: 40 credits per item with data found
  * x402: $2.00 flat per batch (regardless of items)

Streaming Operations (same pricing, for large lists):
- batch_check_streaming: 40 credits ($0.04) per batch of 50
- batch_get_data_streaming: Same as batch_get_data

Credit Packages:
- 5,000 credits: $5 (Starter)
- 50,000 credits: $45 (Pro - 10% discount)
- 1,000,000 credits: $600 (Enterprise - 40% discount)

Cost Optimization Tips:
1. Use batch_check first to find which addresses have data ($0.04 per 50)
2. Collect all found addresses, then call batch_get_data in full batches
3. This two-phase approach saves 90%+ vs calling batch_get_data per batch

Notes:
- get_data doesn't charge if no data is found
- Credits never expire
- You earn 1 point for every credit spent (shown on leaderboard)"""


def status_text(
    auth: AuthContext,
    account: Optional[dict[str, Any]] = None,
    threshold: int = 0,
    error: Optional[str] = None,
) -> str:
    """
    Text of the bluepages://status resource.

    Args:
        auth: Active credential
        account: /api/me response (API-key mode)
        threshold: Current alert threshold
        error: Error text if /api/me failed
    """
    if auth.mode is AuthMode.API_KEY:
        if error is not None:
            return (
                "Current Session Status\n\n"
                "Authentication: API Key\n"
                f"Status: Error fetching credits - {error}"
            )
        account = account or {}
        credits = account.get("credits") or 0
        points = account.get("points") or 0
        if credits <= CRITICAL_CREDIT_THRESHOLD:
            health = "⚠️ CRITICAL: Credits very low!"
        elif credits <= threshold:
            health = "⚠️ Credits running low"
        else:
            health = "✓ Credits OK"
        return (
            "Current Session Status\n\n"
            "Authentication: API Key\n"
            f"Credits: {credits:,}\n"
            f"Points: {points:,}\n"
            f"Alert Threshold: {threshold:,} credits\n\n"
            f"{health}"
        )

    if auth.mode is AuthMode.PAYMENT and auth.signer is not None:
        return (
            "Current Session Status\n\n"
            "Authentication: x402 Payments\n"
            f"Wallet: {auth.signer.address}\n"
            "Mode: Pay-per-request with USDC on Base\n\n"
            "Note: Check your wallet balance for available funds."
        )

    return (
        "Current Session Status\n\n"
        "Authentication: Not configured\n\n"
        "Set BLUEPAGES_API_KEY or PRIVATE_KEY environment variable to enable API access."
    )
