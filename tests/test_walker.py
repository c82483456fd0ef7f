"""Tests for the enter/exit tree walk and its control signals."""

import pytest

from marktoc.location import SourceLocation
from marktoc.nodes import Document, Emphasis, Heading, Node, Paragraph, Text, ThematicBreak
from marktoc.walker import WalkStatus, walk

LOC = SourceLocation(lineno=1, col_offset=1)


def _text(content: str) -> Text:
    return Text(location=LOC, content=content)


def _para(*inlines: Node) -> Paragraph:
    return Paragraph(location=LOC, children=inlines)


def _doc(*blocks: Node) -> Document:
    return Document(location=LOC, children=blocks)


def _label(node: Node) -> str:
    if isinstance(node, Text):
        return node.content
    return type(node).__name__


class Recorder:
    """Visitor that records events and returns scripted signals."""

    def __init__(self, signals: dict[tuple[str, bool], WalkStatus] | None = None) -> None:
        self.events: list[tuple[str, bool]] = []
        self.signals = signals or {}

    def __call__(self, node: Node, entering: bool) -> WalkStatus:
        event = (_label(node), entering)
        self.events.append(event)
        return self.signals.get(event, WalkStatus.GO_TO_NEXT)


@pytest.fixture
def doc() -> Document:
    return _doc(
        Heading(location=LOC, level=1, children=(_text("title"),)),
        _para(_text("a"), Emphasis(location=LOC, children=(_text("b"),))),
        ThematicBreak(location=LOC),
    )


class TestWalkOrder:
    def test_leaf_visited_once(self) -> None:
        recorder = Recorder()
        walk(_text("solo"), recorder)
        assert recorder.events == [("solo", True)]

    def test_empty_container_visited_twice(self) -> None:
        recorder = Recorder()
        walk(_doc(), recorder)
        assert recorder.events == [("Document", True), ("Document", False)]

    def test_pre_and_post_order(self, doc: Document) -> None:
        recorder = Recorder()
        status = walk(doc, recorder)

        assert status is WalkStatus.GO_TO_NEXT
        assert recorder.events == [
            ("Document", True),
            ("Heading", True),
            ("title", True),
            ("Heading", False),
            ("Paragraph", True),
            ("a", True),
            ("Emphasis", True),
            ("b", True),
            ("Emphasis", False),
            ("Paragraph", False),
            ("ThematicBreak", True),
            ("Document", False),
        ]


class TestSkipChildren:
    def test_skips_subtree_and_exit_call(self, doc: Document) -> None:
        recorder = Recorder({("Paragraph", True): WalkStatus.SKIP_CHILDREN})
        walk(doc, recorder)

        assert ("a", True) not in recorder.events
        assert ("Paragraph", False) not in recorder.events
        assert recorder.events[-2:] == [("ThematicBreak", True), ("Document", False)]

    def test_on_leaf_has_no_effect(self, doc: Document) -> None:
        recorder = Recorder({("a", True): WalkStatus.SKIP_CHILDREN})
        walk(doc, recorder)

        assert ("Emphasis", True) in recorder.events
        assert len(recorder.events) == 12

    def test_on_exit_call_is_ignored(self, doc: Document) -> None:
        recorder = Recorder({("Heading", False): WalkStatus.SKIP_CHILDREN})
        walk(doc, recorder)
        assert len(recorder.events) == 12


class TestTerminate:
    def test_third_call_terminates(self, doc: Document) -> None:
        calls = 0

        def visitor(node: Node, entering: bool) -> WalkStatus:
            nonlocal calls
            calls += 1
            return WalkStatus.TERMINATE if calls == 3 else WalkStatus.GO_TO_NEXT

        status = walk(doc, visitor)

        assert status is WalkStatus.TERMINATE
        assert calls == 3

    def test_no_exit_calls_for_open_ancestors(self, doc: Document) -> None:
        recorder = Recorder({("b", True): WalkStatus.TERMINATE})
        walk(doc, recorder)

        assert recorder.events[-1] == ("b", True)
        assert ("Emphasis", False) not in recorder.events
        assert ("Document", False) not in recorder.events

    def test_terminate_on_exit_call(self, doc: Document) -> None:
        recorder = Recorder({("Heading", False): WalkStatus.TERMINATE})
        assert walk(doc, recorder) is WalkStatus.TERMINATE
        assert recorder.events[-1] == ("Heading", False)

    def test_terminate_on_first_call(self, doc: Document) -> None:
        recorder = Recorder({("Document", True): WalkStatus.TERMINATE})
        walk(doc, recorder)
        assert recorder.events == [("Document", True)]


class TestVisitorErrors:
    def test_exceptions_propagate(self, doc: Document) -> None:
        def visitor(node: Node, entering: bool) -> WalkStatus:
            if isinstance(node, Emphasis):
                raise ValueError("boom")
            return WalkStatus.GO_TO_NEXT

        with pytest.raises(ValueError, match="boom"):
            walk(doc, visitor)


class TestDeepTrees:
    """Depth is limited by memory, not by the interpreter's recursion limit."""

    DEPTH = 5000

    def _chain(self) -> Node:
        node: Node = _text("leaf")
        for _ in range(self.DEPTH):
            node = Emphasis(location=LOC, children=(node,))
        return node

    def test_deep_chain_event_count(self) -> None:
        recorder = Recorder()
        status = walk(self._chain(), recorder)

        assert status is WalkStatus.GO_TO_NEXT
        assert len(recorder.events) == 2 * self.DEPTH + 1
        assert recorder.events[self.DEPTH] == ("leaf", True)
        assert recorder.events[-1] == ("Emphasis", False)

    def test_terminate_at_bottom_of_deep_chain(self) -> None:
        recorder = Recorder({("leaf", True): WalkStatus.TERMINATE})
        assert walk(self._chain(), recorder) is WalkStatus.TERMINATE
        assert len(recorder.events) == self.DEPTH + 1

    def test_skip_children_deep_in_chain(self) -> None:
        seen = 0

        def visitor(node: Node, entering: bool) -> WalkStatus:
            nonlocal seen
            seen += 1
            if entering and seen == self.DEPTH // 2:
                return WalkStatus.SKIP_CHILDREN
            return WalkStatus.GO_TO_NEXT

        walk(self._chain(), visitor)
        # Enter calls down to the skipped node, then exits for its ancestors only.
        assert seen == self.DEPTH // 2 + (self.DEPTH // 2 - 1)
