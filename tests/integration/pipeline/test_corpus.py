"""Integration tests for the split -> front matter -> blocks -> inline pipeline.

Each test runs the pipeline against the canonical file below and asserts
stable expected values. Read this file top-to-bottom as a reference for
what each stage produces with default settings.

Canonical file (posts/canonical.md), two documents
--------------------------------------------------
    title = Pipeline Test
    date = January 15th, 2026
    tags = [python, notes]
    ---
    Intro with *emphasis* and a dagger†.

    ### Heading

    Some text.

    ```python
    [not a link](nope)
    ```

    ### Heading

    A *bold with no close

    † The footnote.
    <!-- split -->
    # Second Post
    ## Sat, March 2nd, 2024
    ###### misc

    > Quoted line.

Document 0 blocks (KeyValue front matter):
    [paragraph]  plain, italic emphasis, plain, footnote ref, plain
    [heading h3] anchor "heading"
    [paragraph]  "Some text."
    [code]       python, "[not a link](nope)\\n", closed
    [heading h3] anchor "heading-2"
    [paragraph]  single plain span "A *bold with no close"
    [footnote]   "†" -> "The footnote."

Document 1 blocks (HeadingStyle front matter):
    [blockquote] [paragraph "Quoted line."]
"""

import datetime

import pytest

from postpub.core.models import (
    Blockquote, CodeFence, Convention, Emphasis, FootnoteMarker, FootnoteRef, Heading, Paragraph,
    PlainText,
)
from postpub.core.parse import make_raw_file, parse_raw_file
from postpub.core.pipeline import run_parse
from postpub.core.split import SENTINEL, join_segments, split_file


CANONICAL = """\
title = Pipeline Test
date = January 15th, 2026
tags = [python, notes]
---
Intro with *emphasis* and a dagger†.

### Heading

Some text.

```python
[not a link](nope)
```

### Heading

A *bold with no close

† The footnote.
<!-- split -->
# Second Post
## Sat, March 2nd, 2024
###### misc

> Quoted line.
"""


@pytest.fixture(name="docs")
def docs_fixture():
    return parse_raw_file(make_raw_file("posts/canonical.md", CANONICAL))


# --- split ---

def test_split_two_documents():
    """The sentinel yields exactly two (header, body) segments."""
    segments = split_file(CANONICAL)
    assert len(segments) == 2
    assert segments[0].header.startswith("title = Pipeline Test")
    assert segments[1].header.strip().startswith("# Second Post")


def test_split_round_trip():
    """Rejoining the segments on the sentinel reproduces the file exactly."""
    assert join_segments(split_file(CANONICAL)) == CANONICAL
    assert SENTINEL in CANONICAL


# --- front matter ---

def test_key_value_metadata(docs):
    meta = docs[0].metadata
    assert meta.title == "Pipeline Test"
    assert meta.date == datetime.date(2026, 1, 15)
    assert meta.tags == ["python", "notes"]
    assert meta.convention is Convention.key_value


def test_heading_style_metadata(docs):
    meta = docs[1].metadata
    assert meta.title == "Second Post"
    assert meta.date == datetime.date(2024, 3, 2)
    assert meta.tags == ["misc"]
    assert meta.convention is Convention.heading_style


def test_slugs(docs):
    assert [d.slug for d in docs] == ["canonical-pipeline-test", "canonical-second-post"]
    assert [d.segment for d in docs] == [0, 1]


# --- blocks ---

def test_block_layout(docs):
    assert [type(b) for b in docs[0].blocks] == [
        Paragraph, Heading, Paragraph, CodeFence, Heading, Paragraph, FootnoteMarker,
    ]
    assert [type(b) for b in docs[1].blocks] == [Blockquote]


def test_repeated_headings_get_unique_anchors(docs):
    assert docs[0].anchors == ["heading", "heading-2"]


def test_code_fence_is_verbatim(docs):
    """Fence content is not inline-resolved."""
    fence = docs[0].blocks[3]
    assert fence.language == "python"
    assert fence.content == "[not a link](nope)\n"
    assert fence.closed


def test_blockquote_content(docs):
    inner = docs[1].blocks[0].blocks
    assert inner == [Paragraph(spans=[PlainText(text="Quoted line.")])]


# --- inline ---

def test_intro_spans(docs):
    spans = docs[0].blocks[0].spans
    assert [type(s) for s in spans] == [PlainText, Emphasis, PlainText, FootnoteRef, PlainText]
    assert spans[1].children == [PlainText(text="emphasis")]
    assert spans[3].symbol == "†"


def test_unterminated_emphasis_is_literal(docs):
    assert docs[0].blocks[5].spans == [PlainText(text="A *bold with no close")]


def test_footnote_mapping(docs):
    assert docs[0].footnotes == {"†": "The footnote."}
    assert docs[1].footnotes == {}


# --- determinism ---

def test_parse_is_deterministic():
    first = run_parse({"posts/canonical.md": CANONICAL})
    second = run_parse({"posts/canonical.md": CANONICAL})
    assert first == second
    assert [d.hash for d in first[0].documents] == [d.hash for d in second[0].documents]
