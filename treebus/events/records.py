"""
TreeBus Events - Handler Records
==================================
Immutable records describing registered callbacks, and the
per-call binding struct used to attach them.

Identity rules:
- Two records are "the same handler" for detach iff their
  callbacks compare equal. data and once are not part of identity.
- Once-removal targets one exact record object, so duplicates
  sharing a callback survive it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from treebus.events.errors import InvalidEventTypesError, InvalidHandlerError

# Reserved selector key for handlers bound directly to a node.
NON_DELEGATED = ""


def return_false(*args: Any) -> bool:
    """Canonical handler substituted for the ``False`` shorthand."""
    return False


def resolve_callback(callback: Any) -> Callable:
    """Map the ``False`` shorthand to return_false and validate the rest."""
    if callback is False:
        return return_false
    if not callable(callback):
        raise InvalidHandlerError(callback)
    return callback


def split_event_types(event_types: Any) -> List[str]:
    """
    Split a space-separated event type list.

    Empty tokens (repeated spaces) are skipped.
    Raises InvalidEventTypesError for non-strings.
    """
    if not isinstance(event_types, str):
        raise InvalidEventTypesError(event_types)
    return [name for name in event_types.split(" ") if name]


def selector_key(selector: Any) -> str:
    """Non-string selectors mean "not delegated"."""
    return selector if isinstance(selector, str) else NON_DELEGATED


def prepare_attach(
    binding: "Binding", callback: Any, reject_empty: bool = True
) -> Optional[Tuple[Callable, List[str]]]:
    """
    Validate one attach call.

    Returns (resolved callback, event type names), or None when the
    binding names no type and reject_empty is off.
    """
    callback = resolve_callback(callback)
    names = binding.type_names()
    if not names:
        if reject_empty:
            raise InvalidEventTypesError(binding.event_types)
        return None
    return callback, names


# ══════════════════════════════════════════════════════════════
# HANDLER RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class HandlerRecord:
    """
    One registered callback.

    eq=False keeps object identity as equality so that a single
    record can be found and discarded among look-alike duplicates.
    """

    callback: Callable
    data: Any = None
    once: bool = False

    def same_handler(self, callback: Callable) -> bool:
        return self.callback == callback


# ══════════════════════════════════════════════════════════════
# BINDING (one attach call)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Binding:
    """Everything an attach call needs besides the callback itself."""

    event_types: str
    selector: Optional[str] = None
    data: Any = None
    once: bool = False

    @property
    def key(self) -> str:
        return selector_key(self.selector)

    def type_names(self) -> List[str]:
        return split_event_types(self.event_types)
