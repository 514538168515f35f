"""File discovery, raw file loading, and segment-to-Document parsing"""

from pathlib import Path
from typing import Iterable, Optional

from postpub.core.blocks import assemble_blocks, iter_blocks
from postpub.core.errors import PostpubError
from postpub.core.frontmatter import parse_frontmatter
from postpub.core.inline import InlineResolver
from postpub.core.models import Block, Document, FootnoteMarker, RawFile, Segment
from postpub.core.split import SENTINEL, check_segment, split_file
from postpub.core.tokenize import LineClassifier, footnote_symbols
from postpub.core.utils.slug import SlugRegistry, slugify


CONTENT_EXTENSIONS = {'.md', '.markdown', '.txt', '.html'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted content files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in CONTENT_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in CONTENT_EXTENSIONS)


def make_raw_file(path: str, text: str) -> RawFile:
    return RawFile(path=path, text=text, slug=slugify(Path(path).stem) or "post")


def read_sources(path: Path) -> dict[str, str]:
    """Map each discovered file (relative to path when it is a directory) to its text."""
    root = path if path.is_dir() else path.parent
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding='utf-8')
        for p in discover_files(path)
    }


def collect_footnotes(blocks: Iterable[Block]) -> dict[str, str]:
    """Map footnote symbol -> text; the first marker for a symbol wins."""
    footnotes: dict[str, str] = {}
    for block in iter_blocks(blocks):
        if isinstance(block, FootnoteMarker):
            footnotes.setdefault(block.symbol, block.text)
    return footnotes


def parse_segment(
    segment: Segment,
    source_path: str = "",
    slug: Optional[str] = None,
    strict_fences: bool = False,
    ) -> Document:
    """Parse one segment into a Document. Pure: equal input gives an equal Document."""
    check_segment(segment)
    metadata = parse_frontmatter(segment.header)
    lines = list(LineClassifier(segment.body))
    resolver = InlineResolver(footnote_symbols(lines))
    blocks = assemble_blocks(lines, resolver, strict_fences=strict_fences)
    return Document(
        slug=slug or slugify(metadata.title) or "post",
        source_path=source_path,
        segment=segment.index,
        hash=segment.hash,
        metadata=metadata,
        blocks=blocks,
        footnotes=collect_footnotes(blocks),
    )


def assign_slugs(raw: RawFile, documents: list[Document], multi: bool) -> list[Document]:
    """File slug for a single-document file; '<file>-<title>' slugs, unique per file, otherwise."""
    if not multi:
        return [doc.model_copy(update={"slug": raw.slug}) for doc in documents]
    registry = SlugRegistry(fallback=raw.slug)
    return [
        doc.model_copy(update={"slug": registry.claim(f"{raw.slug}-{doc.metadata.title}")})
        for doc in documents
    ]


def parse_raw_file(raw: RawFile, sentinel: str = SENTINEL, strict_fences: bool = False) -> list[Document]:
    """Parse every document in a file, failing on the first error (with path and segment)."""
    try:
        segments = split_file(raw.text, sentinel)
    except PostpubError as e:
        raise e.with_location(raw.path, None)

    documents = []
    for segment in segments:
        try:
            documents.append(parse_segment(segment, raw.path, strict_fences=strict_fences))
        except PostpubError as e:
            raise e.with_location(raw.path, segment.index)
    return assign_slugs(raw, documents, multi=len(segments) > 1)
