"""Slug generation for document identifiers and heading anchors"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    return re.sub(r'[\W_]+', '-', text.lower()).strip('-')


class SlugRegistry:
    """Hands out slugs unique within one scope, suffixing collisions with -2, -3, ..."""

    def __init__(self, fallback: str = "section"):
        self.fallback = fallback
        self._taken: set[str] = set()

    def claim(self, text: str) -> str:
        base = slugify(text) or self.fallback
        slug, n = base, 2
        while slug in self._taken:
            slug = f"{base}-{n}"
            n += 1
        self._taken.add(slug)
        return slug
