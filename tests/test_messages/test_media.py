"""Tests for attachment media type detection."""

from chat_cache.messages import detect_media_type


def test_mime_type_wins():
    assert detect_media_type("https://x/file.bin", "image/png") == "image"
    assert detect_media_type("https://x/file.bin", "video/mp4") == "video"
    assert detect_media_type("https://x/file.bin", "audio/ogg") == "audio"
    assert detect_media_type("https://x/file.bin", "application/pdf") == "document"


def test_extension_fallback():
    assert detect_media_type("https://x/voice.opus") == "audio"
    assert detect_media_type("https://x/clip.MOV?token=1") == "video"
    assert detect_media_type("https://x/report.docx") == "document"


def test_unknown():
    assert detect_media_type("https://x/archive.zip") == "unknown"
    assert detect_media_type("https://x/no-extension") == "unknown"
    assert detect_media_type("") == "unknown"
