"""
POA Core module for PoaWeaver.

This module provides the partial-order alignment graph:
- Node / edge arenas and the correspondence type
- Incremental sequence insertion and alignment merge
- Topological ordering with cycle detection (plain and rigorous)
- Heaviest-bundle consensus traversal with branch completion
- Multiple sequence alignment assembly
"""

from .data_structures import (
    Alignment,
    GraphCorruptionError,
    InvalidInputError,
    POAEdge,
    POAError,
    POANode,
    resolve_weights,
    weights_from_quality,
)
from .alignment_engine import AlignmentEngine
from .heaviest_bundle import HeaviestBundle
from .msa_builder import MsaBuilder
from .poa_graph import POAGraph, create_graph
from .topology import (
    is_topologically_sorted,
    rigorous_topological_sort,
    topological_sort,
)

__all__ = [
    # Graph
    "POAGraph",
    "create_graph",
    # Data structures
    "POANode",
    "POAEdge",
    "Alignment",
    "AlignmentEngine",
    # Algorithms
    "HeaviestBundle",
    "MsaBuilder",
    "topological_sort",
    "rigorous_topological_sort",
    "is_topologically_sorted",
    # Weights
    "resolve_weights",
    "weights_from_quality",
    # Errors
    "POAError",
    "InvalidInputError",
    "GraphCorruptionError",
]
