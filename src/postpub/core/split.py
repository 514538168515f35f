"""Sentinel splitting of a raw file into (header, body) segments"""

from typing import Iterable, Iterator

from postpub.core.errors import MalformedDocument
from postpub.core.frontmatter import header_extent
from postpub.core.models import Segment


SENTINEL = "<!-- split -->"


def iter_segments(text: str, sentinel: str = SENTINEL) -> Iterator[Segment]:
    """Yield one Segment per sentinel-delimited chunk without validating headers.

    The cut is a raw-text pre-pass: a sentinel inside a code fence still splits.
    """
    if not sentinel:
        raise ValueError("Sentinel must be a non-empty string")
    for index, chunk in enumerate(text.split(sentinel)):
        cut = header_extent(chunk)
        yield Segment(index=index, header=chunk[:cut], body=chunk[cut:])


def split_file(text: str, sentinel: str = SENTINEL) -> list[Segment]:
    """Split text into segments; raises MalformedDocument on an empty header."""
    segments = list(iter_segments(text, sentinel))
    for segment in segments:
        check_segment(segment)
    return segments


def check_segment(segment: Segment) -> Segment:
    if not segment.header.strip():
        raise MalformedDocument("Split produced an empty header segment", segment=segment.index)
    return segment


def join_segments(segments: Iterable[Segment], sentinel: str = SENTINEL) -> str:
    """Inverse of split_file: rejoin segment texts on the sentinel."""
    return sentinel.join(s.text for s in segments)
