"""URL-safe slug helpers."""

from __future__ import annotations

import uuid

from slugify import slugify


def generate(text: str) -> str:
    """Create a URL-safe slug from ``text``."""
    return slugify(text)


def with_fallback(text: str) -> str:
    """Slug of ``text`` with a short random suffix for uniqueness."""
    return f"{slugify(text)}-{str(uuid.uuid4())[:8]}"