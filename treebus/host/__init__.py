"""
TreeBus Host - Public API
===========================
Collaborator contracts. The in-memory reference host lives in
treebus.host.memory and is imported explicitly.
"""

from treebus.host.contracts import (
    NullOccurrenceSource,
    OccurrenceSource,
    TreeAdapter,
)

__all__ = [
    "TreeAdapter",
    "OccurrenceSource",
    "NullOccurrenceSource",
]
