"""
Location: bluepages_mcp/stream.py

Summary:
    Batch streaming driver. Splits an arbitrarily long list of addresses or
    handles into chunks of 50, sends one batch request per chunk in order,
    normalizes the keyed results and reports progress along the way.

Usage:
    Used by the batch_*_streaming tools. normalize_batch_results() is also
    usable on its own to turn a raw /batch/check or /batch/data response
    into typed records.

Example:
    from bluepages_mcp.stream import run_batch
    from bluepages_mcp.types import EndpointKind, LookupKind

    async def on_progress(event):
        print(event.message)

    records = await run_batch(client, addresses, LookupKind.ADDRESS,
                              EndpointKind.CHECK, on_progress)
"""

from typing import Any, Awaitable, Callable, Iterator, Optional, Sequence

from .errors import ValidationError
from .types import (
    BatchEvent,
    BatchItemFound,
    BatchProgress,
    BatchRecord,
    CheckRecord,
    DataRecord,
    EndpointKind,
    LookupKind,
)


BATCH_SIZE = 50

# Response mapping key for each lookup kind
RESULT_KEYS = {
    LookupKind.ADDRESS: "addresses",
    LookupKind.HANDLE: "twitters",
}

PLURALS = {
    LookupKind.ADDRESS: "addresses",
    LookupKind.HANDLE: "handles",
}

ProgressCallback = Callable[[BatchEvent], Awaitable[None]]


def chunk_items(items: Sequence[str], size: int = BATCH_SIZE) -> Iterator[list[str]]:
    """
    Split items into contiguous chunks; the last one may be shorter.

    Args:
        items: Items to split
        size: Chunk size

    Yields:
        Lists of at most `size` items, in input order
    """
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def percentage(current: int, total: int) -> int:
    """current/total as a percentage, rounded half up."""
    return (current * 200 + total) // (2 * total)


def _normalize_entry(item_id: str, info: Any, endpoint_kind: EndpointKind) -> BatchRecord:
    info = info if isinstance(info, dict) else {}

    if endpoint_kind is EndpointKind.CHECK:
        return CheckRecord(
            id=item_id,
            found=bool(info.get("exists")),
            twitter=info.get("twitter"),
            farcaster=info.get("farcaster"),
        )

    primary = info.get("primary") or {}
    metadata = primary.get("metadata") or {}
    return DataRecord(
        id=item_id,
        found=bool(info.get("found")),
        twitter=primary.get("twitter") or None,
        address=primary.get("address") or None,
        display_name=metadata.get("displayName") or None,
        source=metadata.get("source") or None,
        alternate_count=len(info.get("alternates") or []),
    )


def normalize_batch_results(
    raw: Any,
    kind: LookupKind,
    endpoint_kind: EndpointKind,
) -> list[BatchRecord]:
    """
    Convert a raw batch response into typed records.

    /batch/check reports presence as "exists"; /batch/data reports it as
    "found" with a nested primary identity. The endpoint kind decides which
    shape is decoded. Records follow the response mapping's order.

    Args:
        raw: Decoded JSON response of a batch endpoint
        kind: Whether the batch was keyed by address or by handle
        endpoint_kind: CHECK or DATA

    Returns:
        One record per entry of the response mapping
    """
    results = raw.get("results") if isinstance(raw, dict) else None
    entries = (results or {}).get(RESULT_KEYS[kind]) or {}
    return [_normalize_entry(item_id, info, endpoint_kind) for item_id, info in entries.items()]


def _found_message(record: BatchRecord) -> str:
    if isinstance(record, DataRecord):
        return f"✓ Found: {record.id} → {record.twitter or 'no twitter'}"
    return f"✓ Found: {record.id} (twitter: {record.twitter}, farcaster: {record.farcaster})"


async def run_batch(
    client: Any,
    items: Sequence[str],
    kind: LookupKind,
    endpoint_kind: EndpointKind,
    on_progress: Optional[ProgressCallback] = None,
) -> list[BatchRecord]:
    """
    Run a batch lookup in sequential chunks with progress reporting.

    For each chunk a BatchProgress event is emitted before the request,
    then a BatchItemFound event for every found entry of the response.
    Chunks are never sent concurrently. Any failure aborts the whole batch
    and propagates; records from earlier chunks are discarded.

    Args:
        client: BluepagesClient (anything with batch_chunk())
        items: Addresses or handles, any length
        kind: LookupKind of the items
        endpoint_kind: CHECK or DATA
        on_progress: Optional async callback receiving BatchEvent objects

    Returns:
        All records, in chunk order then response mapping order

    Raises:
        ValidationError: If items is empty
    """
    if not items:
        raise ValidationError(f"At least one {kind.value} required")

    total = len(items)
    total_batches = (total + BATCH_SIZE - 1) // BATCH_SIZE
    records: list[BatchRecord] = []
    current = 0

    for batch_number, chunk in enumerate(chunk_items(items), start=1):
        current += len(chunk)

        if on_progress is not None:
            await on_progress(BatchProgress(
                message=(
                    f"Processing batch {batch_number}/{total_batches} "
                    f"({len(chunk)} {PLURALS[kind]})..."
                ),
                current=current,
                total=total,
                percentage=percentage(current, total),
                batch_number=batch_number,
                total_batches=total_batches,
            ))

        raw = await client.batch_chunk(kind, endpoint_kind, chunk)
        chunk_records = normalize_batch_results(raw, kind, endpoint_kind)

        for record in chunk_records:
            if record.found and on_progress is not None:
                await on_progress(BatchItemFound(message=_found_message(record), item=record))

        records.extend(chunk_records)

    return records
