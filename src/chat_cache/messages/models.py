"""Data models for cached chat messages."""

from __future__ import annotations

from dataclasses import dataclass, field

from chat_cache.messages.media import detect_media_type


@dataclass(frozen=True)
class Attachment:
    """A file attached to a chat message."""

    url: str
    name: str = ""
    type: str = ""  # MIME type as reported by the backend, may be empty

    @property
    def media_type(self) -> str:
        return detect_media_type(self.url, self.type)

    def to_dict(self) -> dict:
        return {"url": self.url, "name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict) -> Attachment:
        return cls(
            url=data["url"],
            name=data.get("name") or "",
            type=data.get("type") or "",
        )


@dataclass(frozen=True)
class CachedMessage:
    """A trimmed projection of a chat message, as stored in the cache."""

    id: str
    conversation_id: str
    text: str
    created_at: int  # ms since epoch
    is_outgoing: bool
    channel: str  # "whatsapp" | "telegram" | "max" | "email" | ...
    attachment: Attachment | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "text": self.text,
            "createdAt": self.created_at,
            "isOutgoing": self.is_outgoing,
            "channel": self.channel,
            "attachment": self.attachment.to_dict() if self.attachment else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CachedMessage:
        attachment = data.get("attachment")
        return cls(
            id=data["id"],
            conversation_id=data["conversationId"],
            text=data.get("text") or "",
            created_at=int(data["createdAt"]),
            is_outgoing=bool(data.get("isOutgoing")),
            channel=data.get("channel") or "whatsapp",
            attachment=Attachment.from_dict(attachment) if attachment else None,
        )


@dataclass
class CacheEntry:
    """Stored snapshot of recent messages for one conversation."""

    version: str
    timestamp: int  # ms since epoch, time of the write
    messages: list[CachedMessage] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "messages": [m.to_dict() for m in self.messages],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CacheEntry:
        return cls(
            version=data["version"],
            timestamp=int(data["timestamp"]),
            messages=[CachedMessage.from_dict(m) for m in data.get("messages") or []],
        )


@dataclass
class ClientAccess:
    """One row of the LRU index."""

    id: str
    last_access: int  # ms since epoch


@dataclass
class CacheMetadata:
    """Persisted LRU index, most-recently-accessed first."""

    version: str
    last_cleanup: int = 0
    clients: list[ClientAccess] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "lastCleanup": self.last_cleanup,
            "clients": [{"id": c.id, "lastAccess": c.last_access} for c in self.clients],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CacheMetadata:
        return cls(
            version=data["version"],
            last_cleanup=int(data.get("lastCleanup") or 0),
            clients=[
                ClientAccess(id=str(c["id"]), last_access=int(c["lastAccess"]))
                for c in data.get("clients") or []
            ],
        )
