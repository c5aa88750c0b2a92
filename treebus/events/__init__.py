"""
TreeBus Events - Public API
=============================
Handlers are attached to nodes, optionally delegated to matching
descendants, and dispatched along a synthetic bubble path.
"""

from treebus.events.bucket import SelectorBucket
from treebus.events.dispatcher import Dispatcher
from treebus.events.engine import EventEngine
from treebus.events.errors import (
    EventBusError,
    InvalidEventTypesError,
    InvalidHandlerError,
)
from treebus.events.path import BubblePathBuilder
from treebus.events.propagation import (
    Occurrence,
    Propagation,
    PropagationControl,
)
from treebus.events.records import (
    NON_DELEGATED,
    Binding,
    HandlerRecord,
    return_false,
)
from treebus.events.registry import HandlerRegistry, RegistryTable

__all__ = [
    "EventEngine",
    "Dispatcher",
    "BubblePathBuilder",
    "HandlerRegistry",
    "RegistryTable",
    "SelectorBucket",
    "HandlerRecord",
    "Binding",
    "NON_DELEGATED",
    "return_false",
    "Occurrence",
    "Propagation",
    "PropagationControl",
    "EventBusError",
    "InvalidEventTypesError",
    "InvalidHandlerError",
]
