"""Inline markup resolution on top of markdown-it inline tokens.

Block text is tokenized with markdown-it's inline parser (emphasis, strike,
links, images, code, autolinks, raw tags, escapes) and the token stream is
folded into InlineSpans. Dagger footnote references are an extra inline rule.
Unterminated markup comes back as literal text and never raises.
"""

from typing import Iterable

from markdown_it import MarkdownIt
from markdown_it.rules_inline import StateInline
from markdown_it.token import Token

from postpub.core.models import (
    Emphasis, EmphasisKind, FootnoteRef, Image, InlineCode, InlineSpan, Link, PlainText, RawTag,
)
from postpub.core.tokenize import FOOTNOTE_GLYPHS


# markdown-it's text terminators plus the footnote glyphs
_TEXT_STOPS = frozenset("\n!#$%&*+-:<=>@[\\]^_`{}~" + FOOTNOTE_GLYPHS)

_KIND_BY_OPEN = {
    "em_open": EmphasisKind.italic,
    "strong_open": EmphasisKind.bold,
    "s_open": EmphasisKind.strike,
}


def _text(state: StateInline, silent: bool) -> bool:
    pos = state.pos
    while pos < state.posMax and state.src[pos] not in _TEXT_STOPS:
        pos += 1
    if pos == state.pos:
        return False
    if not silent:
        state.pending += state.src[state.pos:pos]
    state.pos = pos
    return True


def _footnote_ref(state: StateInline, silent: bool) -> bool:
    """A glyph run naming a known footnote becomes a footnote_ref token; other runs stay text."""
    start = end = state.pos
    while end < state.posMax and state.src[end] in FOOTNOTE_GLYPHS:
        end += 1
    if end == start:
        return False
    symbol = state.src[start:end]
    if not silent:
        if symbol in state.env.get("footnotes", ()):
            token = state.push("footnote_ref", "", 0)
            token.content = symbol
        else:
            state.pending += symbol
    state.pos = end
    return True


def make_parser(preset: str = "gfm-like") -> MarkdownIt:
    md = MarkdownIt(preset, options_update={"linkify": False})
    md.inline.ruler.at("text", _text)
    md.inline.ruler.after("text", "footnote_ref", _footnote_ref)
    return md


def _leaf(tok: Token) -> list[InlineSpan]:
    if tok.type in ("text", "text_special"):
        return [PlainText(text=tok.content)] if tok.content else []
    if tok.type in ("softbreak", "hardbreak"):
        return [PlainText(text="\n")]
    if tok.type == "code_inline":
        return [InlineCode(text=tok.content)]
    if tok.type == "html_inline":
        return [RawTag(text=tok.content)]
    if tok.type == "image":
        return [Image(
            alt=plain_text(_fold(tok.children or [])),
            src=tok.attrGet("src") or "",
            title=tok.attrGet("title"),
        )]
    if tok.type == "footnote_ref":
        return [FootnoteRef(symbol=tok.content)]
    return [PlainText(text=tok.content)] if tok.content else []


def _container(open_tok: Token, children: list[InlineSpan]) -> list[InlineSpan]:
    if open_tok.type in _KIND_BY_OPEN:
        return [Emphasis(kind=_KIND_BY_OPEN[open_tok.type], children=children)]
    if open_tok.type == "link_open":
        return [Link(children=children, target=open_tok.attrGet("href") or "", title=open_tok.attrGet("title"))]
    return children


def _coalesce(spans: list[InlineSpan]) -> list[InlineSpan]:
    merged: list[InlineSpan] = []
    for span in spans:
        if isinstance(span, PlainText) and merged and isinstance(merged[-1], PlainText):
            merged[-1] = PlainText(text=merged[-1].text + span.text)
        else:
            merged.append(span)
    return merged


def _fold(tokens: Iterable[Token]) -> list[InlineSpan]:
    """Fold a flat inline token stream (open/close pairs) into nested spans."""
    stack: list[tuple[Token | None, list[InlineSpan]]] = [(None, [])]
    for tok in tokens:
        if tok.nesting == 1:
            stack.append((tok, []))
        elif tok.nesting == -1 and len(stack) > 1:
            open_tok, children = stack.pop()
            stack[-1][1].extend(_container(open_tok, _coalesce(children)))
        else:
            stack[-1][1].extend(_leaf(tok))
    while len(stack) > 1:
        _, children = stack.pop()
        stack[-1][1].extend(children)
    return _coalesce(stack[0][1])


class InlineResolver:
    """Resolves block text into InlineSpans; footnote symbols become FootnoteRefs."""

    def __init__(self, footnotes: Iterable[str] = (), md: MarkdownIt | None = None):
        self.footnotes = frozenset(footnotes)
        self.md = md or _MD

    def resolve(self, text: str) -> list[InlineSpan]:
        if not text:
            return []
        tokens = self.md.parseInline(text, {"footnotes": self.footnotes})
        return _fold(tokens[0].children or []) if tokens else []


_MD = make_parser()


def resolve_inline(text: str, footnotes: Iterable[str] = ()) -> list[InlineSpan]:
    """Resolve text into spans. Never raises on malformed markup."""
    return InlineResolver(footnotes).resolve(text)


def plain_text(spans: Iterable[InlineSpan]) -> str:
    """Flatten spans to their visible text (raw tags and footnote refs drop out)."""
    parts = []
    for span in spans:
        if isinstance(span, (PlainText, InlineCode)):
            parts.append(span.text)
        elif isinstance(span, (Emphasis, Link)):
            parts.append(plain_text(span.children))
        elif isinstance(span, Image):
            parts.append(span.alt)
    return ''.join(parts)
