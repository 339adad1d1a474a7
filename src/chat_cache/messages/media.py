"""Classify attachment URLs into coarse media types."""

from __future__ import annotations

from urllib.parse import urlparse

MEDIA_TYPES = ("image", "video", "audio", "document", "unknown")

_IMAGE_EXTS = {"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg", "ico"}
_VIDEO_EXTS = {"mp4", "webm", "mov", "avi", "mkv", "3gp"}
_AUDIO_EXTS = {"mp3", "wav", "ogg", "opus", "m4a", "aac", "flac"}
_DOCUMENT_EXTS = {"pdf", "doc", "docx", "xls", "xlsx"}


def detect_media_type(url: str, mime_type: str | None = None) -> str:
    """Detect media type from the MIME type, falling back to the URL extension."""
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    if "pdf" in mime or "document" in mime:
        return "document"

    ext = _extension(url)
    if not ext:
        return "unknown"
    if ext in _IMAGE_EXTS:
        return "image"
    if ext in _VIDEO_EXTS:
        return "video"
    if ext in _AUDIO_EXTS:
        return "audio"
    if ext in _DOCUMENT_EXTS:
        return "document"
    return "unknown"


def _extension(url: str) -> str:
    path = urlparse(url or "").path
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()
