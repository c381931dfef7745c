"""Filename helpers for stored uploads."""
from __future__ import annotations
import re
import uuid

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")

# Readable suffix kept after the random id; 32 hex + "_" + 128 stays well under
# the 255-byte file name limit of common filesystems.
MAX_SUFFIX_CHARS = 128
MAX_EXTENSION_CHARS = 16


def sanitize_filename(name: str) -> str:
    """Replace anything outside [A-Za-z0-9._-] so the name cannot carry a path."""
    return _UNSAFE.sub("_", name) or "upload"


def shorten_filename(safe_name: str, limit: int = MAX_SUFFIX_CHARS) -> str:
    """Trim the stem so the name fits *limit*, keeping a short extension."""
    if len(safe_name) <= limit:
        return safe_name
    stem, dot, ext = safe_name.rpartition(".")
    if not dot or not stem or len(ext) > MAX_EXTENSION_CHARS:
        return safe_name[:limit]
    return f"{stem[:limit - len(ext) - 1]}.{ext}"


def storage_key(original_filename: str) -> str:
    """Random, collision-resistant key; the original name is only a readable suffix."""
    return f"{uuid.uuid4().hex}_{shorten_filename(sanitize_filename(original_filename))}"
