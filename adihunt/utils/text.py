"""Text helpers for article slugs and excerpts."""

import re
import unicodedata

from ..services.scoring import strip_markup


def slugify(title: str) -> str:
    """Lowercase ASCII slug with hyphens between words."""
    normalized = unicodedata.normalize("NFKD", title or "").encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower())
    return slug.strip("-")


def make_excerpt(content: str, max_length: int = 160) -> str:
    """Plain-text opening of the content, cut at a word boundary."""
    text = " ".join(strip_markup(content).split())
    if len(text) <= max_length:
        return text
    cut = text[:max_length].rsplit(" ", 1)[0]
    return f"{cut}..."
