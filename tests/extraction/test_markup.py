"""
Turn Markup Extraction Tests
"""

import pytest

from reconstitute.extraction.dom import parse_html
from reconstitute.extraction.markup import (
    basename,
    extract_attachments,
    looks_like_filename,
    parse_turn_order,
    parse_turns,
)


PAGE = """
<html><body>
<main>
  <article data-turn-id="t-1" data-turn="1">
    <div data-message-author-role="user" data-message-id="m-1">
      <div class="whitespace-pre-wrap">How do I read a CSV?</div>
      <a href="/files/data.csv?sig=abc" download="data.csv">data.csv</a>
    </div>
  </article>
  <article data-turn-id="t-2" data-turn="2">
    <div data-message-author-role="assistant" data-message-id="m-2">
      <div class="markdown prose">
        <p>Use <code>csv.reader</code>:</p>
        <pre><code>import csv
rows = list(csv.reader(f))</code></pre>
      </div>
    </div>
    <div data-message-author-role="tool">
      <img src="https://cdn.example.com/out/chart.png" alt="Image">
    </div>
  </article>
  <article data-turn-id="">
    <div data-message-author-role="user">dropped: empty turn id</div>
  </article>
  <article data-turn-id="t-3">
    <div data-message-author-role="user"><script>ignored()</script>   </div>
    <div>no role here</div>
  </article>
</main>
</body></html>
"""


class TestParseTurns:

    def test_extracts_usable_messages_in_document_order(self):
        records = parse_turns(PAGE)
        assert [(r.group_id, r.role) for r in records] == [
            ("t-1", "user"),
            ("t-2", "assistant"),
            ("t-2", "tool"),
        ]

    def test_reads_identity_and_order(self):
        records = parse_turns(PAGE)
        assert records[0].identity == "m-1"
        assert records[0].group_order == 1
        assert records[2].identity is None
        assert records[2].group_order == 2

    def test_plain_text_and_rich_content(self):
        user, assistant, _ = parse_turns(PAGE)
        assert user.plain_text.startswith("How do I read a CSV?")
        assert "<code>csv.reader</code>" in assistant.rich_content
        assert "rows = list(csv.reader(f))" in assistant.plain_text
        assert user.rich_content == ""

    def test_attachments(self):
        user, assistant, tool = parse_turns(PAGE)
        assert user.attachments == ("data.csv",)
        assert assistant.attachments == ()
        assert tool.attachments == ("chart.png",)

    def test_empty_page(self):
        assert parse_turns("") == []
        assert parse_turns("<div>nothing structured</div>") == []


class TestAttachments:

    def _node(self, html):
        return parse_html(f"<div>{html}</div>").find(lambda el: el.tag == 'div')

    def test_titles_and_aria_labels(self):
        node = self._node('<span title="notes.md">x</span><button aria-label="Remove file">y</button>')
        assert extract_attachments(node) == ("notes.md",)

    def test_data_uri_images_are_ignored(self):
        node = self._node('<img src="data:image/png;base64,AAAA">')
        assert extract_attachments(node) == ()

    def test_duplicates_and_generic_labels_removed(self):
        node = self._node(
            '<a href="https://x.test/report.pdf">report.pdf</a>'
            '<span title="report.pdf"></span><img src="/img/file" alt="file">'
        )
        assert extract_attachments(node) == ("report.pdf",)


@pytest.mark.parametrize("value,expected", [
    ("report.pdf", True),
    ("archive.tar.gz", True),
    ("https://example.com/a/b/photo.jpeg?x=1", True),
    ("https://example.com/page", False),
    ("no extension", False),
    ("a.", False),
    ("", False),
    (None, False),
    ("x" * 200 + ".txt", False),
])
def test_looks_like_filename(value, expected):
    assert looks_like_filename(value) is expected


def test_basename_strips_query_and_fragment():
    assert basename("https://example.com/a/b.png?x=1#top") == "b.png"
    assert basename("") == ""


@pytest.mark.parametrize("raw,expected", [
    ("3", 3),
    (" 12 ", 12),
    ("4.0", 4),
    ("4.5", None),
    ("nan", None),
    ("", None),
    (None, None),
    ("turn", None),
])
def test_parse_turn_order(raw, expected):
    assert parse_turn_order(raw) == expected


def test_inner_text_keeps_block_structure():
    node = parse_html("<div><p>one</p><p>two<br>three</p></div>").find(lambda el: el.tag == 'div')
    assert node.inner_text() == "one\n\ntwo\nthree"
