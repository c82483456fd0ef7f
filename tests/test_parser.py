"""Tests for the block parser."""

import pytest

from marktoc import parse
from marktoc.config import ParseConfig
from marktoc.errors import ParseError
from marktoc.nodes import (
    BlockQuote,
    CodeBlock,
    Heading,
    HtmlBlock,
    List,
    ListItem,
    Paragraph,
    Text,
    ThematicBreak,
)
from marktoc.parser import MAX_NESTING, Parser


def _text_of(node) -> str:  # type: ignore[no-untyped-def]
    return "".join(child.content for child in node.children if isinstance(child, Text))


class TestHeadings:
    def test_atx_levels(self) -> None:
        doc = parse("# One\n## Two\n###### Six")
        assert [h.level for h in doc.children] == [1, 2, 6]  # type: ignore[attr-defined]

    def test_atx_closing_sequence(self) -> None:
        heading = parse("## Title ##").children[0]
        assert isinstance(heading, Heading)
        assert _text_of(heading) == "Title"

    def test_seven_hashes_is_paragraph(self) -> None:
        assert isinstance(parse("####### no").children[0], Paragraph)

    def test_hash_without_space_is_paragraph(self) -> None:
        assert isinstance(parse("#hashtag").children[0], Paragraph)

    def test_empty_heading(self) -> None:
        heading = parse("#").children[0]
        assert isinstance(heading, Heading)
        assert heading.children == ()

    def test_explicit_id(self) -> None:
        heading = parse("## Install {#setup}").children[0]
        assert isinstance(heading, Heading)
        assert heading.explicit_id == "setup"
        assert _text_of(heading) == "Install"

    def test_explicit_id_disabled(self) -> None:
        heading = parse("## Install {#setup}", config=ParseConfig(heading_ids=False)).children[0]
        assert isinstance(heading, Heading)
        assert heading.explicit_id is None
        assert _text_of(heading) == "Install {#setup}"

    def test_setext_headings(self) -> None:
        doc = parse("Title\n=====\n\nSub\n---")
        first, second = doc.children
        assert isinstance(first, Heading) and first.level == 1 and first.style == "setext"
        assert isinstance(second, Heading) and second.level == 2

    def test_heading_id_starts_unset(self) -> None:
        heading = parse("# Title").children[0]
        assert isinstance(heading, Heading)
        assert heading.heading_id is None


class TestTitleBlock:
    def test_title_block(self) -> None:
        doc = parse("% My Title\n% Author\n\n# Intro")
        title, intro = doc.children
        assert isinstance(title, Heading)
        assert title.is_title_block
        assert title.level == 1
        assert _text_of(title) == "My Title Author"
        assert isinstance(intro, Heading) and not intro.is_title_block

    def test_title_block_only_at_start(self) -> None:
        doc = parse("text\n\n% not a title")
        assert all(not isinstance(block, Heading) for block in doc.children)

    def test_title_block_disabled(self) -> None:
        doc = parse("% Title", config=ParseConfig(title_block=False))
        assert isinstance(doc.children[0], Paragraph)

    def test_title_block_after_toc_marker(self) -> None:
        doc = parse("[TOC]\n% Title\n# Intro")
        assert isinstance(doc.children[0], Heading)
        assert doc.children[0].is_title_block


class TestBlocks:
    def test_paragraphs(self) -> None:
        doc = parse("one\ntwo\n\nthree")
        assert len(doc.children) == 2
        assert all(isinstance(block, Paragraph) for block in doc.children)

    def test_thematic_break(self) -> None:
        doc = parse("a\n\n***\n\nb")
        assert isinstance(doc.children[1], ThematicBreak)

    def test_fenced_code(self) -> None:
        block = parse("```python\nprint(1)\n```").children[0]
        assert isinstance(block, CodeBlock)
        assert block.code == "print(1)\n"
        assert block.language == "python"
        assert block.fenced

    def test_unclosed_fence_runs_to_end(self) -> None:
        block = parse("~~~\nline\nmore").children[0]
        assert isinstance(block, CodeBlock)
        assert block.code == "line\nmore\n"

    def test_fenced_code_keeps_markdown_literal(self) -> None:
        block = parse("```\n# not a heading\n```").children[0]
        assert isinstance(block, CodeBlock)
        assert block.code == "# not a heading\n"

    def test_indented_code(self) -> None:
        block = parse("    code\n      more\n").children[0]
        assert isinstance(block, CodeBlock)
        assert block.code == "code\n  more\n"
        assert not block.fenced

    def test_blockquote(self) -> None:
        quote = parse("> # Quoted\n> text").children[0]
        assert isinstance(quote, BlockQuote)
        assert isinstance(quote.children[0], Heading)
        assert isinstance(quote.children[1], Paragraph)

    def test_blockquote_lazy_continuation(self) -> None:
        quote = parse("> first\nsecond").children[0]
        assert isinstance(quote, BlockQuote)
        assert len(quote.children) == 1

    def test_html_block(self) -> None:
        block = parse('<div class="note">\nhi\n</div>').children[0]
        assert isinstance(block, HtmlBlock)
        assert block.html == '<div class="note">\nhi\n</div>'


class TestLists:
    def test_bullet_list(self) -> None:
        lst = parse("- a\n- b\n- c").children[0]
        assert isinstance(lst, List)
        assert not lst.ordered
        assert lst.tight
        assert len(lst.children) == 3
        assert all(isinstance(item, ListItem) for item in lst.children)

    def test_ordered_list_start(self) -> None:
        lst = parse("3. a\n4. b").children[0]
        assert isinstance(lst, List)
        assert lst.ordered
        assert lst.start == 3

    def test_loose_list(self) -> None:
        lst = parse("- a\n\n- b").children[0]
        assert isinstance(lst, List)
        assert not lst.tight
        assert len(lst.children) == 2

    def test_nested_list(self) -> None:
        lst = parse("- a\n  - b\n  - c\n- d").children[0]
        assert isinstance(lst, List)
        assert len(lst.children) == 2
        first = lst.children[0]
        assert isinstance(first, ListItem)
        assert isinstance(first.children[1], List)
        assert lst.tight

    def test_changing_bullet_starts_new_list(self) -> None:
        doc = parse("- a\n* b")
        assert len(doc.children) == 2

    def test_heading_inside_list_item(self) -> None:
        lst = parse("- # Item heading").children[0]
        assert isinstance(lst, List)
        item = lst.children[0]
        assert isinstance(item, ListItem)
        assert isinstance(item.children[0], Heading)

    def test_list_interrupts_paragraph(self) -> None:
        doc = parse("para\n- item")
        assert isinstance(doc.children[0], Paragraph)
        assert isinstance(doc.children[1], List)


class TestLocations:
    def test_line_numbers(self) -> None:
        doc = parse("# A\n\ntext\n\n## B", source_file="doc.md")
        assert [block.location.lineno for block in doc.children] == [1, 3, 5]
        assert doc.children[0].location.source_file == "doc.md"

    def test_nested_line_numbers(self) -> None:
        doc = parse("intro\n\n> one\n> # two")
        quote = doc.children[1]
        assert isinstance(quote, BlockQuote)
        assert quote.children[1].location.lineno == 4


class TestNestingLimit:
    def test_too_deep(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Parser("text", depth=MAX_NESTING + 1).parse()
        assert "nesting" in str(exc_info.value)

    def test_deep_blockquotes_fail_fast(self) -> None:
        with pytest.raises(ParseError):
            parse(">" * (MAX_NESTING + 5) + " deep")
