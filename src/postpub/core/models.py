"""Immutable data models for split segments, metadata, blocks, and inline spans"""

import datetime
import hashlib
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Convention(str, Enum):
    """Restrict front matter to the two supported header conventions"""
    key_value = "key_value"
    heading_style = "heading_style"


class EmphasisKind(str, Enum):
    bold = "bold"
    italic = "italic"
    strike = "strike"


# --- inline spans ---

class PlainText(_Frozen):
    type: Literal["text"] = "text"
    text: str


class Emphasis(_Frozen):
    type: Literal["emphasis"] = "emphasis"
    kind: EmphasisKind
    children: list["InlineSpan"]


class InlineCode(_Frozen):
    """Backtick-delimited code; its text is never resolved further."""
    type: Literal["code"] = "code"
    text: str


class Link(_Frozen):
    type: Literal["link"] = "link"
    children: list["InlineSpan"]
    target: str
    title: Optional[str] = None


class Image(_Frozen):
    type: Literal["image"] = "image"
    alt: str
    src: str
    title: Optional[str] = None


class RawTag(_Frozen):
    """Raw markup embedded mid-sentence, passed through verbatim."""
    type: Literal["raw"] = "raw"
    text: str


class FootnoteRef(_Frozen):
    """Inline reference to the footnote marker with the same symbol."""
    type: Literal["footnote_ref"] = "footnote_ref"
    symbol: str


InlineSpan = Annotated[
    Union[PlainText, Emphasis, InlineCode, Link, Image, RawTag, FootnoteRef],
    Field(discriminator="type"),
]

Emphasis.model_rebuild()
Link.model_rebuild()


# --- blocks ---

class Heading(_Frozen):
    type: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=6)
    text: str                       # source text after the '#' marker
    anchor: str                     # unique within the owning Document
    spans: list[InlineSpan]


class Paragraph(_Frozen):
    type: Literal["paragraph"] = "paragraph"
    spans: list[InlineSpan]


class ListItem(_Frozen):
    spans: list[InlineSpan]
    depth: int = 0                  # indentation level of the marker


class ListBlock(_Frozen):
    type: Literal["list"] = "list"
    ordered: bool
    items: list[ListItem]


class CodeFence(_Frozen):
    """Verbatim lines between fence delimiters; content keeps source line endings."""
    type: Literal["code"] = "code"
    language: Optional[str] = None
    content: str
    closed: bool = True

    @property
    def lines(self) -> list[str]:
        return self.content.splitlines(keepends=True)


class Blockquote(_Frozen):
    type: Literal["blockquote"] = "blockquote"
    blocks: list["Block"]


class RawPassthrough(_Frozen):
    type: Literal["raw"] = "raw"
    content: str


class FootnoteMarker(_Frozen):
    type: Literal["footnote"] = "footnote"
    symbol: str
    text: str
    spans: list[InlineSpan]


class ThematicBreak(_Frozen):
    type: Literal["rule"] = "rule"


Block = Annotated[
    Union[Heading, Paragraph, ListBlock, CodeFence, Blockquote, RawPassthrough, FootnoteMarker, ThematicBreak],
    Field(discriminator="type"),
]

Blockquote.model_rebuild()


# --- documents ---

class RawFile(_Frozen):
    """Full text of one content file plus its path-derived slug."""
    path: str
    text: str
    slug: str


class Segment(_Frozen):
    """One sentinel-delimited part of a RawFile; header + body == original segment text."""
    index: int
    header: str
    body: str

    @property
    def text(self) -> str:
        return self.header + self.body

    @property
    def hash(self) -> str:
        """Hex SHA-256 of the segment text; the rebuild cache compares on it."""
        return hashlib.sha256(self.text.encode("utf-8")).hexdigest()


class Metadata(_Frozen):
    title: str = Field(min_length=1)
    date: datetime.date
    tags: list[str] = []
    convention: Convention
    extra: dict[str, str] = {}

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return list(dict.fromkeys(t for t in tags if t))


class Document(_Frozen):
    slug: str
    source_path: str
    segment: int = 0
    hash: str                       # sha256 of the segment text
    metadata: Metadata
    blocks: list[Block]
    footnotes: dict[str, str] = {}  # marker symbol -> footnote text

    @property
    def anchors(self) -> list[str]:
        """Heading anchors in source order, including headings nested in blockquotes."""
        return list(_iter_anchors(self.blocks))


def _iter_anchors(blocks):
    for block in blocks:
        if isinstance(block, Heading):
            yield block.anchor
        elif isinstance(block, Blockquote):
            yield from _iter_anchors(block.blocks)


class DocumentError(_Frozen):
    """A fatal error for one document, reported without aborting the rest."""
    path: str
    segment: Optional[int] = None
    kind: str
    message: str


class FileResult(_Frozen):
    path: str
    documents: list[Document] = []
    errors: list[DocumentError] = []

    @property
    def ok(self) -> bool:
        return not self.errors
