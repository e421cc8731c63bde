#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Partial-order alignment data structures.

Nodes and edges live in arenas owned by the graph and refer to each other by
integer id only. This module also holds the correspondence type consumed by
alignment merge, the weight conventions, and the error hierarchy.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Set, Union

logger = logging.getLogger(__name__)

PHRED_OFFSET = 33

# Uniform weight, PHRED quality string, or explicit per-position weights
WeightsLike = Union[float, int, str, Sequence[float]]


# ============================================================================
# Part 1: Errors
# ============================================================================

class POAError(Exception):
    """Base class for partial-order alignment errors."""
    pass


class InvalidInputError(POAError, ValueError):
    """Raised when input is rejected before the graph is touched."""
    pass


class GraphCorruptionError(POAError):
    """Raised when the graph is no longer a DAG. Discard the graph."""
    pass


# ============================================================================
# Part 2: Graph Elements
# ============================================================================

@dataclass
class POANode:
    """
    One base occurrence in the graph.

    A primary node (variant=False) represents an alignment column; variant
    nodes are alternative bases competing at the column of the nodes listed in
    aligned_ids.
    """
    id: int
    letter: str
    variant: bool = False
    in_edges: List[int] = field(default_factory=list)   # Edge ids, insertion order
    out_edges: List[int] = field(default_factory=list)
    aligned_ids: Set[int] = field(default_factory=set)

    @property
    def in_degree(self) -> int:
        return len(self.in_edges)

    @property
    def out_degree(self) -> int:
        return len(self.out_edges)

    def add_aligned_id(self, node_id: int):
        self.aligned_ids.add(node_id)


@dataclass
class POAEdge:
    """
    Directed edge between two nodes, shared by every sequence traversing it.

    Each traversal contributes a label (sequence index) and a weight; the
    consensus traversal only looks at total_weight.
    """
    id: int
    begin_id: int
    end_id: int
    sequence_labels: List[int] = field(default_factory=list)
    sequence_weights: List[float] = field(default_factory=list)
    total_weight: float = 0.0

    def add_sequence(self, label: int, weight: float):
        """Record one more sequence traversing this edge."""
        self.sequence_labels.append(label)
        self.sequence_weights.append(weight)
        self.total_weight += weight

    def has_label(self, label: int) -> bool:
        return label in self.sequence_labels


# ============================================================================
# Part 3: Alignment Correspondence
# ============================================================================

@dataclass
class Alignment:
    """
    Column-by-column correspondence between a new sequence and the graph.

    node_ids[i] is the graph node aligned at column i (None = insertion
    relative to the graph), seq_ids[i] the aligned position in the new
    sequence (None = deletion relative to the sequence). An empty alignment
    means no overlap was found.
    """
    node_ids: List[Optional[int]] = field(default_factory=list)
    seq_ids: List[Optional[int]] = field(default_factory=list)

    def __post_init__(self):
        self.node_ids = list(self.node_ids)
        self.seq_ids = list(self.seq_ids)
        if len(self.node_ids) != len(self.seq_ids):
            raise InvalidInputError(
                f"Correspondence arrays differ in length: "
                f"{len(self.node_ids)} node ids vs {len(self.seq_ids)} sequence ids"
            )

    def __len__(self) -> int:
        return len(self.seq_ids)

    @property
    def is_empty(self) -> bool:
        return len(self.seq_ids) == 0

    @property
    def aligned_positions(self) -> List[int]:
        """Sequence positions covered by the alignment, in column order."""
        return [s for s in self.seq_ids if s is not None]

    def to_dict(self) -> dict:
        return {'node_ids': list(self.node_ids), 'seq_ids': list(self.seq_ids)}

    def validate(
        self,
        sequence_length: int,
        num_nodes: int,
        node_columns: Optional[Mapping[int, int]] = None,
    ):
        """
        Check the correspondence against a sequence and a graph.

        Args:
            sequence_length: Length of the sequence being merged
            num_nodes: Number of nodes currently in the graph
            node_columns: Node id -> id of the alignment column it belongs to;
                when given, two sequence positions may not land in one column

        Raises:
            InvalidInputError: If any id is out of range, the sequence
                positions are not strictly increasing, or two positions share
                a graph column
        """
        if self.is_empty:
            return

        if num_nodes == 0 and any(n is not None for n in self.node_ids):
            raise InvalidInputError("Correspondence references nodes of an empty graph")

        previous = -1
        seen_columns = {}
        for column, (node_id, seq_id) in enumerate(zip(self.node_ids, self.seq_ids)):
            if node_id is not None and not 0 <= node_id < num_nodes:
                raise InvalidInputError(
                    f"Column {column}: node id {node_id} not in graph "
                    f"(0..{num_nodes - 1})"
                )
            if seq_id is None:
                continue
            if not 0 <= seq_id < sequence_length:
                raise InvalidInputError(
                    f"Column {column}: sequence position {seq_id} outside "
                    f"sequence of length {sequence_length}"
                )
            if seq_id <= previous:
                raise InvalidInputError(
                    f"Column {column}: sequence positions must be strictly "
                    f"increasing ({previous} -> {seq_id})"
                )
            previous = seq_id

            if node_id is None or node_columns is None:
                continue
            graph_column = node_columns[node_id]
            if graph_column in seen_columns:
                raise InvalidInputError(
                    f"Column {column}: node {node_id} shares an alignment column with "
                    f"the node of column {seen_columns[graph_column]}"
                )
            seen_columns[graph_column] = column


# ============================================================================
# Part 4: Weight Conventions
# ============================================================================

def weights_from_quality(quality: str, offset: int = PHRED_OFFSET) -> List[float]:
    """
    Convert a PHRED quality string into per-position weights.

    Example:
        >>> weights_from_quality("!+5")
        [0.0, 10.0, 20.0]
    """
    return [float(ord(q) - offset) for q in quality]


def resolve_weights(
    sequence: str,
    weights: WeightsLike,
    quality_offset: int = PHRED_OFFSET,
) -> List[float]:
    """
    Normalise any supported weight form to one float per position.

    Args:
        sequence: Sequence the weights belong to
        weights: Uniform weight, PHRED quality string, or explicit list
        quality_offset: ASCII offset for quality strings

    Returns:
        List of len(sequence) weights

    Raises:
        InvalidInputError: On an empty sequence, a length mismatch, or a
            negative / non-finite weight
    """
    if not sequence:
        raise InvalidInputError("Sequence is empty")

    if isinstance(weights, bool):
        raise InvalidInputError("Weights must be a number, quality string or list")
    if isinstance(weights, (int, float)):
        resolved = [float(weights)] * len(sequence)
    elif isinstance(weights, str):
        resolved = weights_from_quality(weights, quality_offset)
    else:
        try:
            resolved = [float(w) for w in weights]
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Invalid weights: {e}") from e

    if len(resolved) != len(sequence):
        raise InvalidInputError(
            f"Sequence length {len(sequence)} != weights length {len(resolved)}"
        )
    for i, w in enumerate(resolved):
        if not math.isfinite(w) or w < 0:
            raise InvalidInputError(f"Position {i}: invalid weight {w}")

    return resolved


__all__ = [
    "POAError",
    "InvalidInputError",
    "GraphCorruptionError",
    "POANode",
    "POAEdge",
    "Alignment",
    "WeightsLike",
    "PHRED_OFFSET",
    "weights_from_quality",
    "resolve_weights",
]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
