"""Rules for accepting uploaded audio and naming it in storage."""

import re
from datetime import datetime

ALLOWED_AUDIO_TYPES = frozenset({"audio/mpeg", "audio/mp3", "audio/wav", "audio/ogg"})
MAX_AUDIO_BYTES = 100 * 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


def sanitize_filename(filename: str) -> str:
    """Replaces anything outside ``[a-zA-Z0-9._-]`` and lowercases the name."""
    safe = _UNSAFE_CHARS.sub("_", filename)
    safe = _REPEATED_UNDERSCORES.sub("_", safe)
    return safe.lower() or "audio"


def unique_audio_name(filename: str, now: datetime) -> str:
    """Prefixes the sanitized name with the upload time in epoch milliseconds."""
    timestamp = int(now.timestamp() * 1000)
    return f"{timestamp}_{sanitize_filename(filename)}"
