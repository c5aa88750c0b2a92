"""
Tests for treebus.host.memory: selectors, tree adapter and the
bubbling occurrence source.
"""

import pytest

from treebus.host.memory import (
    Element,
    MemoryEventSource,
    MemoryTree,
    SelectorSyntaxError,
    Text,
    compile_selector,
)


def labels(calls):
    return [label for label, _, _ in calls]


# ── Selectors ────────────────────────────────────────────────

class TestSelectors:
    @pytest.fixture
    def tree(self):
        return MemoryTree()

    @pytest.mark.parametrize(
        "selector, expected",
        [
            ("li", True),
            ("LI", True),
            ("*", True),
            (".item", True),
            (".item.last", False),
            ("li.item[data-id]", True),
            ("[data-id=1]", True),
            ("[data-id='1']", True),
            ('[data-id="2"]', False),
            ("#root", False),
            ("span, li", True),
            ("ul, span", False),
        ],
    )
    def test_matches_first_item(self, tree, doc, selector, expected):
        assert tree.matches(doc.first, selector) is expected

    def test_id_selector(self, tree, doc):
        assert tree.matches(doc.root, "div#root")

    def test_text_never_matches(self, tree, doc):
        assert not tree.matches(doc.text, "*")
        assert not tree.is_matchable(doc.text)

    @pytest.mark.parametrize("selector", ["", "   ", "li >", "ul li", "li,", ".item span", "[x"])
    def test_syntax_errors(self, selector):
        with pytest.raises(SelectorSyntaxError) as exc_info:
            compile_selector(selector)
        assert exc_info.value.selector == selector

    def test_tag_must_come_first(self):
        with pytest.raises(SelectorSyntaxError, match="tag name must come first"):
            compile_selector("[x]li")

    def test_combinators_rejected(self):
        with pytest.raises(SelectorSyntaxError, match="unexpected ' '"):
            compile_selector(".item li")


# ── Tree ─────────────────────────────────────────────────────

class TestTree:
    def test_navigation(self, doc):
        tree = MemoryTree()
        assert tree.parent(doc.span) is doc.first
        assert tree.parent(doc.root) is None
        assert tree.children(doc.ul) == [doc.first, doc.last]

    def test_append_moves_node(self, doc):
        doc.root.append(doc.last)
        assert doc.last.parent is doc.root
        assert doc.last not in doc.ul.children

    def test_text_has_no_children(self):
        with pytest.raises(TypeError):
            Text("x").append(Text("y"))

    def test_clone_is_detached_and_deep(self, doc):
        copy = MemoryTree().clone(doc.ul)
        assert copy is not doc.ul
        assert copy.parent is None
        assert [c.attrs["data-id"] for c in copy.children] == ["1", "2"]
        assert copy.children[0].children[0].children[0].value == "hello"


# ── Occurrence source ────────────────────────────────────────

class TestMemoryEventSource:
    def test_fire_bubbles_through_subscribed_nodes(
        self, host, engine, doc, recorder, calls
    ):
        engine.on(doc.first, "click", recorder("li"))
        engine.on(doc.root, "click", recorder("root"))
        engine.on(doc.root, "click", recorder("label"), selector=".label")

        assert host.fire(doc.text, "click", {"x": 1}) is True
        assert labels(calls) == ["li", "label", "root"]

    def test_stop_ends_bubbling(self, host, engine, doc, recorder, calls):
        engine.on(doc.first, "click", recorder("li", result=False))
        engine.on(doc.root, "click", recorder("root"))
        assert host.fire(doc.span, "click") is False
        assert labels(calls) == ["li"]

    def test_prevent_default_without_stop(self, host, engine, doc, recorder, calls):
        def preventer(event, node, data):
            event.prevent_default()

        engine.on(doc.first, "click", preventer)
        engine.on(doc.root, "click", recorder("root"))
        assert host.fire(doc.span, "click") is False
        assert labels(calls) == ["root"]

    def test_unsubscribed_nodes_are_skipped(self, host, engine, doc, recorder, calls):
        handler = recorder("li")
        engine.on(doc.first, "click", handler)
        engine.off(doc.first, "click", handler)
        host.fire(doc.span, "click")
        assert calls == []

    def test_payload_reaches_handlers(self, host, engine, doc):
        seen = []
        engine.on(doc.root, "keydown", lambda e, n, d: seen.append(e.payload))
        host.fire(doc.span, "keydown", "Enter")
        assert seen == ["Enter"]

    def test_clear_history_keeps_subscriptions(self, host, engine, doc, recorder):
        engine.on(doc.root, "click", recorder("a"))
        assert host.source.history

        host.source.clear_history()
        assert host.source.history == []
        assert host.source.is_subscribed(doc.root, "click")

        engine.off(doc.root)
        assert host.source.history == [("unsubscribe", doc.root, "click")]

    def test_unconnected_source(self, doc):
        with pytest.raises(RuntimeError, match="not connected"):
            MemoryEventSource().fire(doc.span, "click")

    def test_element_repr(self, doc):
        assert repr(doc.root) == "<div#root>"
        assert repr(doc.last) == "<li.item.last>"
        assert repr(Element("P")) == "<p>"
