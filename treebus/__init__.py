"""
TreeBus
=========
Hierarchical event delegation and dispatch for tree-shaped hosts.
"""

from treebus.config.settings import EngineSettings
from treebus.events.engine import EventEngine
from treebus.events.propagation import Occurrence, Propagation

__version__ = "0.1.0"

__all__ = [
    "EngineSettings",
    "EventEngine",
    "Occurrence",
    "Propagation",
]
