"""
Tests for treebus.events.records and treebus.events.bucket.
"""

import pytest

from treebus.events.bucket import SelectorBucket
from treebus.events.errors import InvalidEventTypesError, InvalidHandlerError
from treebus.events.records import (
    NON_DELEGATED,
    Binding,
    HandlerRecord,
    resolve_callback,
    return_false,
    selector_key,
    split_event_types,
)


def handler_a(event, node, data):
    pass


def handler_b(event, node, data):
    pass


# ── Records & helpers ────────────────────────────────────────

class TestHandlerRecord:
    def test_frozen(self):
        record = HandlerRecord(handler_a, data=1)
        with pytest.raises(AttributeError):
            record.once = True

    def test_identity_is_callback_only(self):
        record = HandlerRecord(handler_a, data={"x": 1}, once=True)
        assert record.same_handler(handler_a)
        assert not record.same_handler(handler_b)

    def test_lookalike_records_are_distinct(self):
        assert HandlerRecord(handler_a) != HandlerRecord(handler_a)


class TestHelpers:
    def test_split_skips_repeated_spaces(self):
        assert split_event_types("click  keydown ") == ["click", "keydown"]

    def test_split_rejects_non_string(self):
        with pytest.raises(InvalidEventTypesError) as exc_info:
            split_event_types(["click"])
        assert exc_info.value.event_types == ["click"]

    def test_non_string_selector_is_non_delegated(self):
        assert selector_key(None) == NON_DELEGATED
        assert selector_key(42) == NON_DELEGATED
        assert selector_key(".item") == ".item"

    def test_false_shorthand(self):
        assert resolve_callback(False) is return_false
        assert return_false("anything", "at", "all") is False

    def test_non_callable_rejected(self):
        with pytest.raises(InvalidHandlerError, match="callable or False"):
            resolve_callback("not a function")

    def test_binding_defaults(self):
        binding = Binding("click keyup")
        assert binding.key == NON_DELEGATED
        assert binding.type_names() == ["click", "keyup"]
        assert binding.once is False


# ── SelectorBucket ───────────────────────────────────────────

class TestSelectorBucket:
    def test_insertion_order_preserved(self):
        bucket = SelectorBucket()
        first, second = HandlerRecord(handler_a), HandlerRecord(handler_b)
        bucket.add(".item", first)
        bucket.add(".item", second)
        assert bucket.snapshot(".item") == [first, second]

    def test_snapshot_is_a_copy(self):
        bucket = SelectorBucket()
        bucket.add("", HandlerRecord(handler_a))
        snapshot = bucket.snapshot("")
        snapshot.clear()
        assert len(bucket) == 1

    def test_delegated_selectors_exclude_reserved_key(self):
        bucket = SelectorBucket()
        bucket.add("", HandlerRecord(handler_a))
        bucket.add(".item", HandlerRecord(handler_a))
        bucket.add("ul", HandlerRecord(handler_a))
        assert bucket.delegated_selectors() == [".item", "ul"]
        assert bucket.selectors() == ["", ".item", "ul"]

    def test_remove_by_callback_drops_empty_key(self):
        bucket = SelectorBucket()
        bucket.add(".item", HandlerRecord(handler_a))
        bucket.add(".item", HandlerRecord(handler_a, data=2))
        assert bucket.remove(".item", handler_a) == 2
        assert ".item" not in bucket.selectors()
        assert not bucket

    def test_remove_keeps_other_handlers(self):
        bucket = SelectorBucket()
        keep = HandlerRecord(handler_b)
        bucket.add(".item", HandlerRecord(handler_a))
        bucket.add(".item", keep)
        bucket.remove(".item", handler_a)
        assert bucket.snapshot(".item") == [keep]

    def test_remove_without_callback_clears_key(self):
        bucket = SelectorBucket()
        bucket.add(".item", HandlerRecord(handler_a))
        bucket.add(".item", HandlerRecord(handler_b))
        assert bucket.remove(".item") == 2
        assert bucket.selectors() == []

    def test_remove_unknown_is_noop(self):
        bucket = SelectorBucket()
        assert bucket.remove(".missing", handler_a) == 0

    def test_discard_exact_record_among_duplicates(self):
        bucket = SelectorBucket()
        first, second = HandlerRecord(handler_a), HandlerRecord(handler_a)
        bucket.add("", first)
        bucket.add("", second)
        assert bucket.discard("", second)
        assert bucket.snapshot("") == [first]
        assert not bucket.discard("", second)
