"""Unit tests for core/utils/slug.py"""

import pytest

from postpub.core.utils.slug import SlugRegistry, slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-ch-rs"),
    ("Café au lait", "café-au-lait"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """Runs of non-alphanumerics collapse to one hyphen; ends are trimmed."""
    assert slugify(text) == expected


def test_registry_suffixes_collisions():
    registry = SlugRegistry()
    assert [registry.claim("Intro") for _ in range(3)] == ["intro", "intro-2", "intro-3"]


def test_registry_fallback_for_empty_slug():
    registry = SlugRegistry()
    assert registry.claim("!!!") == "section"
    assert registry.claim("") == "section-2"
