"""
TreeBus Events - Propagation Control
======================================
Per-dispatch cancellation state and the context object handed to
every callback.

A PropagationControl is created at the start of a dispatch cycle
and dropped at its end. Nested dispatches get their own.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Propagation(Enum):
    """Explicit callback result. Returning None means CONTINUE."""
    CONTINUE = "CONTINUE"
    STOP = "STOP"  # stop propagation and prevent the default action


class PropagationControl:
    """Mutable stop/prevent flags for one dispatch cycle."""

    __slots__ = ("stopped", "default_prevented")

    def __init__(self) -> None:
        self.stopped = False
        self.default_prevented = False

    def stop(self) -> None:
        self.stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True

    def cancel(self) -> None:
        """What a ``False`` return means: stop and prevent default."""
        self.stopped = True
        self.default_prevented = True

    def __repr__(self) -> str:
        return (
            f"PropagationControl(stopped={self.stopped}, "
            f"default_prevented={self.default_prevented})"
        )


def requests_stop(result: Any) -> bool:
    """Only the literal False or Propagation.STOP cancel a cycle."""
    return result is False or result is Propagation.STOP


class Occurrence:
    """
    Context passed as the first argument to every callback.

    payload is the value given to dispatch, untouched.
    current_node and data change as the dispatcher moves from
    record to record; control is shared for the whole cycle.
    """

    def __init__(
        self,
        payload: Any,
        event_type: str,
        target: Any,
        bound_node: Any,
        control: Optional[PropagationControl] = None,
    ) -> None:
        self.payload = payload
        self.type = event_type
        self.target = target
        self.bound_node = bound_node
        self.control = control if control is not None else PropagationControl()
        self.current_node: Any = None
        self.data: Any = None

    @property
    def propagation_stopped(self) -> bool:
        return self.control.stopped

    @property
    def default_prevented(self) -> bool:
        return self.control.default_prevented

    def stop_propagation(self) -> None:
        self.control.stop()

    def prevent_default(self) -> None:
        self.control.prevent_default()

    def __repr__(self) -> str:
        return (
            f"Occurrence(type={self.type!r}, target={self.target!r}, "
            f"current_node={self.current_node!r})"
        )
