"""Unit tests for core/tokenize.py"""

import pytest

from postpub.core.tokenize import LineClassifier, LineKind, footnote_symbols


def _kinds(body: str) -> list[LineKind]:
    return [line.kind for line in LineClassifier(body)]


@pytest.mark.parametrize("line,kind", [
    ("# Title", LineKind.heading),
    ("###### Six", LineKind.heading),
    ("####### Seven", LineKind.paragraph),
    ("#NoSpace", LineKind.heading),
    ("* bullet", LineKind.list_item),
    ("- dash", LineKind.list_item),
    ("   - indented", LineKind.list_item),
    ("1. first", LineKind.list_item),
    ("*emphasis* opens a line", LineKind.paragraph),
    ("<div>raw</div>", LineKind.raw),
    ("<img src=\"a.png\"/>", LineKind.raw),
    ("<!-- note -->", LineKind.raw),
    ('<a href="x">Link</a> is **great**.', LineKind.paragraph),
    ("<https://example.com>", LineKind.paragraph),
    ("§ 230 of the act", LineKind.paragraph),
    ("¶ New paragraph mark", LineKind.paragraph),
    ("> quoted", LineKind.quote),
    ("† A citation.", LineKind.footnote),
    ("---", LineKind.rule),
    ("* * *", LineKind.rule),
    ("Plain prose.", LineKind.paragraph),
    ("", LineKind.blank),
    ("```python", LineKind.fence_open),
])
def test_single_line_kinds(line, kind):
    """Each line kind is recognised by its leading marker."""
    assert _kinds(line + "\n")[0] == kind


def test_heading_level_and_text():
    line = next(iter(LineClassifier("### Hello there ##\n")))
    assert line.level == 3
    assert line.text == "Hello there"


def test_list_item_fields():
    lines = list(LineClassifier("- a\n  2) b\n"))
    assert (lines[0].ordered, lines[0].indent, lines[0].text) == (False, 0, "a")
    assert (lines[1].ordered, lines[1].indent, lines[1].text) == (True, 2, "b")


def test_fence_content_is_code():
    """Inside an open fence every line is code until the matching close."""
    body = "```js\n# not a heading\n- not a list\n```\nafter\n"
    lines = list(LineClassifier(body))
    assert [l.kind for l in lines] == [
        LineKind.fence_open, LineKind.code, LineKind.code, LineKind.fence_close, LineKind.paragraph,
    ]
    assert lines[0].language == "js"


def test_shorter_or_other_fence_does_not_close():
    body = "````\n```\n~~~\n````\n"
    assert _kinds(body) == [LineKind.fence_open, LineKind.code, LineKind.code, LineKind.fence_close]


def test_unclosed_fence_runs_to_end():
    assert _kinds("```\na\n\nb\n") == [LineKind.fence_open, LineKind.code, LineKind.code, LineKind.code]


def test_blockquote_tag_group_stays_raw():
    """Lines inside a multi-line <blockquote> group are raw, blank lines included."""
    body = (
        '<blockquote class="twitter-tweet">\n'
        "<p>Hello *world*</p>\n"
        "\n"
        "- not a list\n"
        "</blockquote>\n"
        "After.\n"
    )
    assert _kinds(body) == [LineKind.raw] * 5 + [LineKind.paragraph]


def test_multiline_comment_stays_raw():
    assert _kinds("<!-- a\n# b\n-->\ntext\n") == [LineKind.raw] * 3 + [LineKind.paragraph]


def test_classifier_is_restartable():
    """Iterating twice yields the same classification."""
    classifier = LineClassifier("# A\n\ntext\n")
    assert list(classifier) == list(classifier)


def test_footnote_symbols():
    lines = LineClassifier("Text†‡.\n\n† One.\n‡ Two.\n> †† Three.\n")
    assert footnote_symbols(lines) == {"†", "‡", "††"}


def test_heading_without_space_matches_front_matter_title():
    line = next(iter(LineClassifier("#Title\n")))
    assert (line.kind, line.level, line.text) == (LineKind.heading, 1, "Title")


@pytest.mark.parametrize("tag", ['<div class="spacer"/>', '<iframe src="https://x.y/embed" />'])
def test_self_closing_group_tag_does_not_open_raw_group(tag):
    """A self-closing group tag is one raw line; the lines after it classify normally."""
    body = tag + "\n\n## Next\n\nSome *text*.\n"
    assert _kinds(body) == [
        LineKind.raw, LineKind.blank, LineKind.heading, LineKind.blank, LineKind.paragraph,
    ]
