"""Classified-line to Block assembly, preserving source order"""

from typing import Iterable, Optional

from postpub.core.errors import UnterminatedCodeFence
from postpub.core.inline import InlineResolver, plain_text
from postpub.core.models import (
    Block, Blockquote, CodeFence, FootnoteMarker, Heading, ListBlock, ListItem,
    Paragraph, RawPassthrough, ThematicBreak,
)
from postpub.core.tokenize import ClassifiedLine, LineClassifier, LineKind
from postpub.core.utils.slug import SlugRegistry


class BlockAssembler:
    """Folds ClassifiedLines into Blocks.

    Heading anchors are claimed from a registry shared with nested blockquotes,
    so they stay unique across the whole document.
    """

    def __init__(
        self,
        resolver: Optional[InlineResolver] = None,
        anchors: Optional[SlugRegistry] = None,
        strict_fences: bool = False,
        ):
        self.resolver = resolver or InlineResolver()
        self.anchors = anchors or SlugRegistry()
        self.strict_fences = strict_fences

    def assemble(self, lines: Iterable[ClassifiedLine]) -> list[Block]:
        lines = list(lines)
        blocks: list[Block] = []
        i = 0
        while i < len(lines):
            kind = lines[i].kind
            if kind is LineKind.blank:
                i += 1
                continue
            if kind is LineKind.fence_open:
                block, i = self._fence(lines, i)
            elif kind is LineKind.heading:
                block, i = self._heading(lines[i]), i + 1
            elif kind is LineKind.rule:
                block, i = ThematicBreak(), i + 1
            elif kind is LineKind.list_item:
                block, i = self._list(lines, i)
            elif kind is LineKind.raw:
                block, i = self._raw(lines, i)
            elif kind is LineKind.quote:
                block, i = self._quote(lines, i)
            elif kind is LineKind.footnote:
                block, i = self._footnote(lines, i)
            else:
                block, i = self._paragraph(lines, i)
            blocks.append(block)
        return blocks

    def _take(self, lines: list[ClassifiedLine], i: int, kind: LineKind) -> tuple[list[ClassifiedLine], int]:
        """Return the run of lines of one kind starting at i, and the index after it."""
        j = i
        while j < len(lines) and lines[j].kind is kind:
            j += 1
        return lines[i:j], j

    def _fence(self, lines: list[ClassifiedLine], i: int) -> tuple[CodeFence, int]:
        opening = lines[i]
        body, j = self._take(lines, i + 1, LineKind.code)
        closed = j < len(lines) and lines[j].kind is LineKind.fence_close
        if not closed and self.strict_fences:
            raise UnterminatedCodeFence(f"Code fence opened at line {opening.lineno} is never closed")
        block = CodeFence(
            language=opening.language,
            content=''.join(line.raw for line in body),
            closed=closed,
        )
        return block, j + 1 if closed else j

    def _heading(self, line: ClassifiedLine) -> Heading:
        spans = self.resolver.resolve(line.text)
        return Heading(
            level=line.level,
            text=line.text,
            anchor=self.anchors.claim(plain_text(spans)),
            spans=spans,
        )

    def _paragraph(self, lines: list[ClassifiedLine], i: int) -> tuple[Paragraph, int]:
        run, j = self._take(lines, i, lines[i].kind)
        text = '\n'.join(line.text for line in run)
        return Paragraph(spans=self.resolver.resolve(text)), j

    def _list(self, lines: list[ClassifiedLine], i: int) -> tuple[ListBlock, int]:
        ordered = lines[i].ordered
        entries: list[tuple[int, list[str]]] = []
        j = i
        while j < len(lines):
            line = lines[j]
            if line.kind is LineKind.list_item and line.ordered == ordered:
                entries.append((line.indent, [line.text]))
            elif line.kind is LineKind.paragraph and line.indent > 0 and entries:
                entries[-1][1].append(line.text)
            else:
                break
            j += 1

        items = []
        stack: list[int] = []
        for indent, texts in entries:
            while stack and stack[-1] > indent:
                stack.pop()
            if not stack or stack[-1] < indent:
                stack.append(indent)
            items.append(ListItem(spans=self.resolver.resolve('\n'.join(texts)), depth=len(stack) - 1))
        return ListBlock(ordered=ordered, items=items), j

    def _raw(self, lines: list[ClassifiedLine], i: int) -> tuple[RawPassthrough, int]:
        run, j = self._take(lines, i, LineKind.raw)
        return RawPassthrough(content=''.join(line.raw for line in run)), j

    def _quote(self, lines: list[ClassifiedLine], i: int) -> tuple[Blockquote, int]:
        run, j = self._take(lines, i, LineKind.quote)
        inner = '\n'.join(line.text for line in run) + '\n'
        nested = BlockAssembler(self.resolver, self.anchors, self.strict_fences)
        return Blockquote(blocks=nested.assemble(LineClassifier(inner))), j

    def _footnote(self, lines: list[ClassifiedLine], i: int) -> tuple[FootnoteMarker, int]:
        marker = lines[i]
        continuation, j = self._take(lines, i + 1, LineKind.paragraph)
        text = '\n'.join([marker.text] + [line.text for line in continuation])
        return FootnoteMarker(symbol=marker.marker, text=text, spans=self.resolver.resolve(text)), j


def assemble_blocks(
    lines: Iterable[ClassifiedLine],
    resolver: Optional[InlineResolver] = None,
    strict_fences: bool = False,
    ) -> list[Block]:
    """Assemble a document's classified lines into Blocks with unique heading anchors."""
    return BlockAssembler(resolver, SlugRegistry(), strict_fences).assemble(lines)


def iter_blocks(blocks: Iterable[Block]):
    """Depth-first walk over blocks, descending into blockquotes."""
    for block in blocks:
        yield block
        if isinstance(block, Blockquote):
            yield from iter_blocks(block.blocks)
