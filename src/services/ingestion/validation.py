"""Content validation for text about to be embedded."""

from __future__ import annotations

from typing import Any

# Upper bound on trimmed chunk length accepted for embedding.
MAX_CONTENT_CHARS = 8192


def is_valid_content(content: Any, max_chars: int = MAX_CONTENT_CHARS) -> bool:
    """Return ``True`` iff *content* is a string whose trimmed length is in ``[1, max_chars]``.

    Non-string values (``None``, numbers, bytes) are never valid.
    """
    if not isinstance(content, str):
        return False
    return 1 <= len(content.strip()) <= max_chars
