"""Tests for utility modules."""

import logging

from marktoc.location import SourceLocation
from marktoc.stringbuilder import StringBuilder
from marktoc.utils import escape_html, expand_tabs, get_logger, slugify


class TestSlugify:
    """Test slugify function."""

    def test_basic_slugify(self) -> None:
        assert slugify("Hello World") == "hello-world"
        assert slugify("Getting Started!") == "getting-started"

    def test_html_entities(self) -> None:
        assert slugify("Test &amp; Code") == "test-code"

    def test_unicode(self) -> None:
        assert slugify("Café Menu") == "café-menu"

    def test_custom_separator(self) -> None:
        assert slugify("Hello World", separator="_") == "hello_world"

    def test_empty_string(self) -> None:
        assert slugify("") == ""
        assert slugify("!!!") == ""


class TestEscapeHtml:
    def test_basic_escape(self) -> None:
        assert escape_html("<a & b>") == "&lt;a &amp; b&gt;"

    def test_quotes(self) -> None:
        assert escape_html('say "hi"') == "say &quot;hi&quot;"
        assert escape_html("it's") == "it's"

    def test_empty(self) -> None:
        assert escape_html("") == ""


class TestExpandTabs:
    def test_leading_tab(self) -> None:
        assert expand_tabs("\tcode") == "    code"

    def test_no_tab_is_unchanged(self) -> None:
        line = "plain"
        assert expand_tabs(line) is line


class TestStringBuilder:
    def test_append_chain(self) -> None:
        sb = StringBuilder()
        sb.append("a").append("b").append("c")
        assert sb.build() == "abc"

    def test_empty_appends_are_skipped(self) -> None:
        sb = StringBuilder()
        sb.append("")
        assert not sb
        assert len(sb) == 0

    def test_length_counts_characters(self) -> None:
        sb = StringBuilder()
        sb.append("<li>").append("é")
        assert len(sb) == 5

    def test_append_is_the_only_writer(self) -> None:
        assert not hasattr(StringBuilder, "write")


class TestLogger:
    def test_get_logger(self) -> None:
        logger = get_logger("toc")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "marktoc.toc"

    def test_module_name_is_not_prefixed_twice(self) -> None:
        assert get_logger("marktoc.toc").name == "marktoc.toc"

    def test_name_starting_with_package_but_not_submodule(self) -> None:
        assert get_logger("marktocx").name == "marktoc.marktocx"

    def test_exact_package_name(self) -> None:
        assert get_logger("marktoc").name == "marktoc"


class TestSourceLocation:
    def test_str(self) -> None:
        assert str(SourceLocation(lineno=3, col_offset=1, source_file="a.md")) == "a.md:3:1"

    def test_through(self) -> None:
        loc = SourceLocation(lineno=2, col_offset=1).through(5)
        assert loc.lineno == 2
        assert loc.end_lineno == 5
