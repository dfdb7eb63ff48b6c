"""
Row and insert shapes of the collections served by the Flask API.

The API injects id/user_id/timestamps on insert, so insert payloads only
carry what the app actually sets.
"""

from typing import Any, Literal, NotRequired, TypedDict

ISODate = str  # e.g. "2025-08-17T10:20:30.000Z"
Role = Literal["user", "assistant"]


class ChatRow(TypedDict):
    id: str
    user_id: str
    title: str
    created_at: ISODate
    updated_at: ISODate


class MessageRow(TypedDict):
    id: str
    chat_id: str
    user_id: str
    role: Role
    content: Any  # {text, version, meta}
    created_at: ISODate


class OcrExtractionRow(TypedDict):
    """Shared shape of ocr_bill_extractions and ocr_bank_extractions."""

    id: str
    user_id: str
    filename: str | None
    file_url: str | None
    data: Any
    approved: bool
    created_at: ISODate
    updated_at: ISODate


class ChatInsert(TypedDict):
    title: NotRequired[str]
    user_id: NotRequired[str]


class MessageInsert(TypedDict):
    chat_id: str
    role: Role
    content: Any
    user_id: NotRequired[str]


COLLECTIONS = (
    "chats",
    "messages",
    "notifications",
    "help_requests",
    "profiles",
    "plans",
    "user_credits",
    "ocr_bill_extractions",
    "ocr_bank_extractions",
)
