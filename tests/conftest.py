"""
Shared fixtures: a small in-memory document and a wired host.

    div#root
      ul.list
        li.item[data-id=1]
          span.label
            "hello"
        li.item.last[data-id=2]
"""

from types import SimpleNamespace

import pytest

from treebus.host.memory import Element, MemoryHost, Text


@pytest.fixture
def host():
    return MemoryHost()


@pytest.fixture
def engine(host):
    return host.engine


@pytest.fixture
def doc():
    text = Text("hello")
    span = Element("span", classes=["label"], children=[text])
    first = Element("li", classes=["item"], attrs={"data-id": "1"}, children=[span])
    last = Element("li", classes=["item", "last"], attrs={"data-id": "2"})
    ul = Element("ul", classes=["list"], children=[first, last])
    root = Element("div", id="root", children=[ul])
    return SimpleNamespace(
        root=root, ul=ul, first=first, last=last, span=span, text=text
    )


@pytest.fixture
def calls():
    """List collecting (label, node, data) from recording handlers."""
    return []


@pytest.fixture
def recorder(calls):
    """Factory for handlers that append to `calls` and return `result`."""

    def make(label, result=None):
        def handler(event, node, data):
            calls.append((label, node, data))
            return result

        handler.__qualname__ = f"recorder.{label}"
        return handler

    return make
