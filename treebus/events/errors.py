"""
TreeBus Events - Errors
=========================
Error types for the attach/detach/dispatch layer.

Only configuration mistakes made at attach time are raised here.
Callback and selector-matching errors are never wrapped: they
propagate to whoever triggered the dispatch.
"""

from typing import Any


class EventBusError(Exception):
    """Base error for TreeBus event operations."""
    pass


class InvalidEventTypesError(EventBusError):
    """Event types argument is not a string or names no event type."""

    def __init__(self, event_types: Any):
        self.event_types = event_types
        super().__init__(
            f"Event types must be a space-separated string naming at "
            f"least one event type, got {event_types!r}."
        )


class InvalidHandlerError(EventBusError):
    """Handler is neither callable nor the False shorthand."""

    def __init__(self, handler: Any):
        self.handler = handler
        super().__init__(
            f"Handler must be callable or False, got {type(handler).__name__}."
        )
