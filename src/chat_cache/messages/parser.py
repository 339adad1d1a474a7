"""Parse raw backend message rows into cached message records."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

import dateutil.parser as parser
from bs4 import BeautifulSoup

from chat_cache.exceptions import MessageParseError
from chat_cache.messages.models import Attachment, CachedMessage

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "whatsapp"

# message_type values written by staff rather than the contact
_OUTGOING_MESSAGE_TYPES = {"manager"}


def parse_message_row(
    row: dict,
    conversation_id: str | None = None,
) -> CachedMessage | None:
    """Normalize one backend row; returns None for rows that cannot be cached."""
    try:
        return parse_message_row_strict(row, conversation_id)
    except MessageParseError as e:
        logger.debug("Skipping message row: %s", e)
        return None


def parse_message_row_strict(
    row: dict,
    conversation_id: str | None = None,
) -> CachedMessage:
    """Normalize one backend row, raising MessageParseError on invalid input.

    This is the single validation boundary between the backend's loosely
    typed message rows (``chat_messages`` with ``message_text``,
    ``messenger_type``, ``file_url`` ...) and the cache.
    """
    if not isinstance(row, dict):
        raise MessageParseError(f"Expected a dict row, got {type(row).__name__}")

    message_id = str(row.get("id") or "").strip()
    if not message_id:
        raise MessageParseError("Message row has no id")

    owner = str(row.get("client_id") or conversation_id or "").strip()
    if not owner:
        raise MessageParseError(f"Message {message_id} has no conversation id")

    raw_text = row.get("message_text")
    if raw_text is None:
        raw_text = row.get("text")

    file_url = _str_field(row, "file_url").strip()
    attachment = None
    if file_url:
        attachment = Attachment(
            url=file_url,
            name=_str_field(row, "file_name"),
            type=_str_field(row, "file_type"),
        )

    return CachedMessage(
        id=message_id,
        conversation_id=owner,
        text=_clean_text(raw_text),
        created_at=to_epoch_ms(row.get("created_at")),
        is_outgoing=_is_outgoing(row),
        channel=(_str_field(row, "messenger_type").strip() or DEFAULT_CHANNEL).lower(),
        attachment=attachment,
    )


def _str_field(row: dict, name: str) -> str:
    """Optional string column; None becomes "", other types are rejected."""
    value = row.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MessageParseError(f"Invalid {name}: {value!r}")
    return value


def to_epoch_ms(value) -> int:
    """Convert an ISO-8601 string, datetime or epoch-ms number to epoch ms.

    Naive timestamps are taken as UTC, which is how the backend stores them.
    """
    if value is None or value == "":
        raise MessageParseError("Missing created_at")
    if isinstance(value, bool):
        raise MessageParseError(f"Invalid created_at: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise MessageParseError(f"Invalid created_at: {value!r}")
        return int(value)
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = parser.parse(str(value))
        except (ValueError, OverflowError) as e:
            raise MessageParseError(f"Invalid created_at: {value!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _is_outgoing(row: dict) -> bool:
    if "is_outgoing" in row and row["is_outgoing"] is not None:
        return bool(row["is_outgoing"])
    return _str_field(row, "message_type") in _OUTGOING_MESSAGE_TYPES


def _clean_text(raw_text) -> str:
    if raw_text is None:
        return ""
    text = str(raw_text)
    # Email threads arrive as HTML bodies
    if text.strip().startswith("<"):
        soup = BeautifulSoup(text, "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        return soup.get_text(separator="\n", strip=True)
    return text
