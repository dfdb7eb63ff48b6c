"""
OCR extraction listing.

Bill and bank extractions live in separate collections; the sidebar shows
them as one list, newest first.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Literal, TypedDict

from flaskbase.db.rows import OcrExtractionRow

if TYPE_CHECKING:
    from flaskbase.client import FlaskbaseClient

logger = logging.getLogger(__name__)

OcrKind = Literal["bill", "bank"]

OCR_COLLECTIONS: dict[OcrKind, str] = {
    "bill": "ocr_bill_extractions",
    "bank": "ocr_bank_extractions",
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class OcrItem(TypedDict):
    id: str
    type: OcrKind
    filename: str | None
    created_at: str
    approved: bool
    file_url: str | None


def _parse_iso(iso_str: str | None) -> datetime:
    """Parse an ISO timestamp; unparseable values sort last."""
    if not iso_str:
        return _EPOCH
    try:
        if iso_str.endswith("Z"):
            iso_str = iso_str[:-1] + "+00:00"
        parsed = datetime.fromisoformat(iso_str)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def _fetch_kind(client: "FlaskbaseClient", kind: OcrKind, limit: int) -> list[OcrItem]:
    result = await (
        client.from_(OCR_COLLECTIONS[kind])
        .select("id, filename, created_at, approved, file_url")
        .order("created_at", ascending=False)
        .limit(limit)
    )
    if result.error is not None:
        logger.warning(f"Failed to load {kind} extractions: {result.error}")
        return []

    return [_to_item(row, kind) for row in result.data or []]


def _to_item(row: OcrExtractionRow, kind: OcrKind) -> OcrItem:
    return {
        "id": row["id"],
        "type": kind,
        "filename": row.get("filename"),
        "created_at": row.get("created_at", ""),
        "approved": bool(row.get("approved")),
        "file_url": row.get("file_url"),
    }


async def list_recent_ocr_items(client: "FlaskbaseClient", limit: int = 50) -> list[OcrItem]:
    """
    Merge the newest bill and bank extractions into one list.

    Args:
        client: Connected client
        limit: Max items per collection and in the merged list

    Returns:
        Items newest first, at most `limit` long
    """
    bills, banks = await asyncio.gather(
        _fetch_kind(client, "bill", limit),
        _fetch_kind(client, "bank", limit),
    )
    combined = sorted(bills + banks, key=lambda item: _parse_iso(item["created_at"]), reverse=True)
    return combined[:limit]
