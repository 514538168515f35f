"""Line classification of a document body"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


FENCE_RE = re.compile(r'^(\s{0,3})(`{3,}|~{3,})\s*([^`\s]*)[^`]*$')
HEADING_RE = re.compile(r'^(#{1,6})(?!#)\s*(.*?)(?:\s+#+)?\s*$')
RULE_RE = re.compile(r'^\s{0,3}([-*_])(?:\s*\1){2,}\s*$')
LIST_RE = re.compile(r'^(\s*)([*+-]|\d{1,9}[.)])\s+(.*?)\s*$')
QUOTE_RE = re.compile(r'^\s{0,3}>\s?(.*?)\s*$')
FOOTNOTE_RE = re.compile(r'^\s*([†‡]+)\s*(.*?)\s*$')

FOOTNOTE_GLYPHS = "†‡"

# Raw tags whose content may span lines; the tokenizer stays in raw mode until they close.
GROUP_TAGS = ("blockquote", "div", "figure", "table", "script", "iframe", "pre", "ul", "ol", "details")
_OPEN_TAG_RE = re.compile(r'<(%s)\b(?![^>]*/>)' % '|'.join(GROUP_TAGS), re.IGNORECASE)
_CLOSE_TAG_RE = re.compile(r'</(%s)\s*>' % '|'.join(GROUP_TAGS), re.IGNORECASE)

# A line opening with one of these is a raw block; other tags stay inline in paragraphs.
BLOCK_TAGS = GROUP_TAGS + (
    "p", "section", "article", "aside", "nav", "header", "footer", "main", "hr", "br",
    "h1", "h2", "h3", "h4", "h5", "h6", "style", "video", "audio", "picture", "svg",
    "center", "dl", "form", "fieldset", "img", "embed", "object", "noscript",
)
_BLOCK_TAG_RE = re.compile(r'</?(%s)(?=[\s/>]|$)' % '|'.join(BLOCK_TAGS), re.IGNORECASE)
_ANY_TAG_RE = re.compile(r'<!--.*?-->|</?[A-Za-z][\w:-]*(?:\s[^<>]*)?/?>')


class LineKind(str, Enum):
    blank = "blank"
    fence_open = "fence_open"
    fence_close = "fence_close"
    code = "code"
    heading = "heading"
    rule = "rule"
    list_item = "list_item"
    raw = "raw"
    quote = "quote"
    footnote = "footnote"
    paragraph = "paragraph"


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    raw: str                        # source line including its line ending
    text: str = ""                  # content with the kind's marker removed
    lineno: int = 0
    indent: int = 0
    level: int = 0                  # heading level
    ordered: bool = False           # list item numbering
    marker: str = ""                # fence run or footnote symbol
    language: Optional[str] = None  # fence info string


def _indent(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(' '))


def _tag_balance(line: str) -> int:
    return len(_OPEN_TAG_RE.findall(line)) - len(_CLOSE_TAG_RE.findall(line))


def _is_raw_line(stripped: str) -> bool:
    """A comment, a block-level tag, or a line made only of tags."""
    if stripped.startswith('<!--') or _BLOCK_TAG_RE.match(stripped):
        return True
    return bool(_ANY_TAG_RE.match(stripped)) and not _ANY_TAG_RE.sub('', stripped).strip()


class LineClassifier:
    """Restartable, lazy sequence of ClassifiedLines for a body.

    Precedence per line: open fence content, heading, list item, raw tag,
    footnote marker, paragraph. Fence delimiters, thematic breaks and
    '>' quote lines are recognised alongside.
    """

    def __init__(self, body: str):
        self.body = body

    def __iter__(self) -> Iterator[ClassifiedLine]:
        return self._scan()

    def _scan(self) -> Iterator[ClassifiedLine]:
        fence: Optional[str] = None
        raw_depth = 0
        in_comment = False

        for lineno, raw in enumerate(self.body.splitlines(keepends=True), start=1):
            line = raw.rstrip('\r\n')
            stripped = line.strip()

            if fence is not None:
                m = FENCE_RE.match(line)
                if m and not m.group(3) and m.group(2)[0] == fence[0] and len(m.group(2)) >= len(fence):
                    fence = None
                    yield ClassifiedLine(LineKind.fence_close, raw, lineno=lineno, marker=m.group(2))
                else:
                    yield ClassifiedLine(LineKind.code, raw, line, lineno=lineno)
                continue

            if raw_depth > 0 or in_comment:
                raw_depth = max(raw_depth + _tag_balance(line), 0)
                if in_comment and '-->' in line:
                    in_comment = False
                yield ClassifiedLine(LineKind.raw, raw, line, lineno=lineno)
                continue

            if not stripped:
                yield ClassifiedLine(LineKind.blank, raw, lineno=lineno)
                continue

            m = FENCE_RE.match(line)
            if m:
                fence = m.group(2)
                yield ClassifiedLine(
                    LineKind.fence_open, raw, lineno=lineno, indent=len(m.group(1)),
                    marker=fence, language=m.group(3) or None,
                )
                continue

            m = HEADING_RE.match(line)
            if m:
                yield ClassifiedLine(
                    LineKind.heading, raw, m.group(2) or "", lineno=lineno, level=len(m.group(1)),
                )
                continue

            if RULE_RE.match(line):
                yield ClassifiedLine(LineKind.rule, raw, lineno=lineno)
                continue

            m = LIST_RE.match(line)
            if m:
                yield ClassifiedLine(
                    LineKind.list_item, raw, m.group(3), lineno=lineno,
                    indent=_indent(m.group(1)), ordered=m.group(2)[0].isdigit(),
                )
                continue

            if stripped.startswith('<') and _is_raw_line(stripped):
                raw_depth = max(_tag_balance(line), 0)
                in_comment = '<!--' in line and '-->' not in line[line.index('<!--'):]
                yield ClassifiedLine(LineKind.raw, raw, line, lineno=lineno)
                continue

            m = QUOTE_RE.match(line)
            if m:
                yield ClassifiedLine(LineKind.quote, raw, m.group(1), lineno=lineno)
                continue

            m = FOOTNOTE_RE.match(line)
            if m:
                yield ClassifiedLine(LineKind.footnote, raw, m.group(2), lineno=lineno, marker=m.group(1))
                continue

            yield ClassifiedLine(LineKind.paragraph, raw, stripped, lineno=lineno, indent=_indent(line))


def footnote_symbols(lines) -> set[str]:
    """Collect the symbols of all footnote marker lines (including ones inside quotes)."""
    symbols = set()
    for line in lines:
        if line.kind is LineKind.footnote:
            symbols.add(line.marker)
        elif line.kind is LineKind.quote:
            m = FOOTNOTE_RE.match(line.text)
            if m:
                symbols.add(m.group(1))
    return symbols
