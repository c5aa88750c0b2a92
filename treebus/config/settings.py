"""
TreeBus Config - Engine Settings
==================================
Runtime switches for the event engine.

Settings are frozen once built. They come from code, or from
TREEBUS_* environment variables via EngineSettings.from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "TREEBUS_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(
        f"{name} must be one of {sorted(_TRUE | _FALSE)}, got {raw!r}."
    )


@dataclass(frozen=True)
class EngineSettings:
    """
    Engine configuration.

    logger_name:              logger used by registry and dispatcher
    trace_dispatch:           log every callback invocation at DEBUG
    reject_empty_event_types: raise when an attach names no event type
                              (otherwise the attach is a no-op)
    """

    logger_name: str = "treebus.events"
    trace_dispatch: bool = False
    reject_empty_event_types: bool = True

    def __post_init__(self) -> None:
        if not self.logger_name or not isinstance(self.logger_name, str):
            raise ValueError(
                f"logger_name must be a non-empty string, got {self.logger_name!r}."
            )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "EngineSettings":
        """Build settings from TREEBUS_* variables, defaults elsewhere."""
        env = os.environ if environ is None else environ
        defaults = cls()

        trace = env.get(f"{ENV_PREFIX}TRACE_DISPATCH")
        reject = env.get(f"{ENV_PREFIX}REJECT_EMPTY_EVENT_TYPES")

        return cls(
            logger_name=env.get(f"{ENV_PREFIX}LOGGER_NAME", defaults.logger_name),
            trace_dispatch=(
                _parse_bool(f"{ENV_PREFIX}TRACE_DISPATCH", trace)
                if trace is not None
                else defaults.trace_dispatch
            ),
            reject_empty_event_types=(
                _parse_bool(f"{ENV_PREFIX}REJECT_EMPTY_EVENT_TYPES", reject)
                if reject is not None
                else defaults.reject_empty_event_types
            ),
        )
