"""Front matter detection and parsing for the KeyValue and HeadingStyle conventions.

Two header conventions exist in the corpus:

    title = Some Post               # Some Post
    date = 2019-03-04               ## March 4th, 2019
    tags = python, notes            ###### python, notes
    ---

Detection is decided by the first non-blank line of the header. The same scan
also measures how far the header extends, which the splitter uses to cut a
segment into (header, body).
"""

import datetime
import re
from typing import Optional

from postpub.core.errors import InvalidDate, UnrecognizedFrontMatter
from postpub.core.models import Convention, Metadata


KEY_VALUE_RE = re.compile(r'^\s*([A-Za-z_][\w-]*)\s*=\s*(.*?)\s*$')
TITLE_RE = re.compile(r'^#(?!#)\s*(.*?)\s*$')
DATE_RE = re.compile(r'^##(?!#)\s*(.*?)\s*$')
TAGS_RE = re.compile(r'^######(?!#)\s*(.*?)\s*$')
TERMINATOR = "---"

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d %B, %Y",
    "%B, %d %Y",
)

_ORDINAL_RE = re.compile(r'(\d+)(st|nd|rd|th)\b', re.IGNORECASE)
_WEEKDAY_RE = re.compile(r'^(mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?,?\s+', re.IGNORECASE)
_ISO_DATETIME_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})[T ]\d')


def _scan(lines: list[str]) -> tuple[Optional[Convention], int]:
    """Return (convention, header line count) for a list of lines.

    When no convention matches, the header is the leading paragraph.
    """
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start == len(lines):
        return None, len(lines)

    first = lines[start]
    if KEY_VALUE_RE.match(first):
        for i in range(start + 1, len(lines)):
            line = lines[i]
            if line.strip() == TERMINATOR:
                return Convention.key_value, i + 1
            if line.strip() and not KEY_VALUE_RE.match(line):
                break
    elif TITLE_RE.match(first) and TITLE_RE.match(first).group(1):
        i = _next_filled(lines, start + 1)
        if i is not None and DATE_RE.match(lines[i]):
            end = i + 1
            j = _next_filled(lines, end)
            if j is not None and TAGS_RE.match(lines[j]):
                end = j + 1
            return Convention.heading_style, end

    end = start
    while end < len(lines) and lines[end].strip():
        end += 1
    return None, end


def _next_filled(lines: list[str], i: int) -> Optional[int]:
    while i < len(lines):
        if lines[i].strip():
            return i
        i += 1
    return None


def header_extent(text: str) -> int:
    """Return the character offset where the header of a segment ends."""
    lines = text.splitlines(keepends=True)
    _, count = _scan(lines)
    return sum(len(line) for line in lines[:count])


def detect_convention(header: str) -> Optional[Convention]:
    """Return the convention the header follows, or None if neither matches."""
    convention, _ = _scan(header.splitlines(keepends=True))
    return convention


def parse_date(text: str, formats: tuple[str, ...] = DATE_FORMATS) -> datetime.date:
    """Parse a human-readable date permissively; raises InvalidDate."""
    cleaned = _unquote(text.strip())
    iso = _ISO_DATETIME_RE.match(cleaned)
    if iso:
        cleaned = iso.group(1)
    cleaned = _WEEKDAY_RE.sub('', cleaned)
    cleaned = _ORDINAL_RE.sub(r'\1', cleaned)
    cleaned = re.sub(r'(?<=[A-Za-z])\.', '', cleaned)
    cleaned = re.sub(r'\bsept\b', 'Sep', cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    for fmt in formats:
        try:
            return datetime.datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise InvalidDate(f"Unparsable date: {text.strip()!r}")


def parse_tags(text: str) -> list[str]:
    """Split a comma-separated tag line, tolerating [brackets] and quotes."""
    text = text.strip()
    if text.startswith('[') and text.endswith(']'):
        text = text[1:-1]
    return [_unquote(t.strip()) for t in text.split(',') if t.strip()]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


def _parse_key_value(lines: list[str]) -> Metadata:
    fields: dict[str, str] = {}
    for line in lines:
        if line.strip() == TERMINATOR:
            break
        m = KEY_VALUE_RE.match(line)
        if m:
            fields[m.group(1).lower()] = _unquote(m.group(2))

    title = fields.pop('title', '').strip()
    date = fields.pop('date', '').strip()
    if not title:
        raise UnrecognizedFrontMatter("KeyValue header has no title")
    if not date:
        raise UnrecognizedFrontMatter("KeyValue header has no date")
    return Metadata(
        title=title,
        date=parse_date(date),
        tags=parse_tags(fields.pop('tags', '')),
        convention=Convention.key_value,
        extra=fields,
    )


def _parse_heading_style(lines: list[str]) -> Metadata:
    filled = [line for line in lines if line.strip()]
    title = TITLE_RE.match(filled[0]).group(1)
    date = DATE_RE.match(filled[1]).group(1)
    tags = []
    if len(filled) > 2:
        tags = parse_tags(TAGS_RE.match(filled[2]).group(1))
    return Metadata(
        title=title,
        date=parse_date(date),
        tags=tags,
        convention=Convention.heading_style,
    )


def parse_frontmatter(header: str) -> Metadata:
    """Parse a header segment into Metadata.

    KeyValue is tried first, then HeadingStyle. Raises UnrecognizedFrontMatter
    if neither applies and InvalidDate if the date cannot be parsed.
    """
    lines = header.splitlines()
    convention, count = _scan(lines)
    if convention is Convention.key_value:
        return _parse_key_value(lines[:count])
    if convention is Convention.heading_style:
        return _parse_heading_style(lines[:count])
    preview = next((line.strip() for line in lines if line.strip()), '')
    raise UnrecognizedFrontMatter(f"No recognised front matter near {preview[:60]!r}")
