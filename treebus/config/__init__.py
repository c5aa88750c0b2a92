"""
TreeBus Config - Public API
=============================
"""

from treebus.config.settings import ENV_PREFIX, EngineSettings

__all__ = [
    "ENV_PREFIX",
    "EngineSettings",
]
