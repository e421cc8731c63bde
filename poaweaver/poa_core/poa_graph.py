#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Partial-order alignment graph: incremental construction, ordering, and
consensus / MSA extraction.

The graph exclusively owns two arenas (nodes and edges). Node ids and edge
ids are indices into those arenas and are never reused; nothing is deleted.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from .alignment_engine import AlignmentEngine
from .data_structures import (
    PHRED_OFFSET,
    Alignment,
    GraphCorruptionError,
    InvalidInputError,
    POAEdge,
    POANode,
    WeightsLike,
    resolve_weights,
)
from .heaviest_bundle import HeaviestBundle
from .msa_builder import MsaBuilder
from .topology import (
    column_groups,
    is_topologically_sorted,
    rigorous_topological_sort,
    topological_sort,
)

logger = logging.getLogger(__name__)

AlignmentLike = Union[Alignment, Tuple[Sequence[Optional[int]], Sequence[Optional[int]]]]


class POAGraph:
    """
    Partial-order alignment graph.

    Usage
    -----
    >>> graph = create_graph("ACGT", 1.0)
    >>> start = graph.add_alignment(Alignment([0, 1, 2, 3], [0, 1, 2, 3]), "ACCT", 1.0)
    >>> graph.multiple_sequence_alignment()
    ['ACGT', 'ACCT']
    """

    def __init__(self, quality_offset: int = PHRED_OFFSET):
        """
        Args:
            quality_offset: ASCII offset used when weights are given as a
                quality string.
        """
        self.quality_offset = quality_offset

        self.nodes: List[POANode] = []
        self.edges: List[POAEdge] = []
        self.num_sequences = 0
        self.alphabet: Set[str] = set()
        self.sequence_start_ids: List[int] = []

        self._sorted_ids: List[int] = []
        self.is_sorted = False
        self.consensus_ids: List[int] = []

    @classmethod
    def from_sequence(
        cls,
        sequence: str,
        weights: WeightsLike = 1.0,
        quality_offset: int = PHRED_OFFSET,
    ) -> "POAGraph":
        """Create a graph holding a single sequence."""
        graph = cls(quality_offset=quality_offset)
        graph.add_alignment(Alignment(), sequence, weights)
        return graph

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    @property
    def sorted_ids(self) -> List[int]:
        """Cached topological order, recomputed if the graph changed."""
        self.topological_sort()
        return list(self._sorted_ids)

    # -----------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------

    def add_node(self, letter: str, variant: bool = False) -> int:
        """Append a node and return its id."""
        node_id = len(self.nodes)
        self.nodes.append(POANode(id=node_id, letter=letter, variant=variant))
        self._invalidate()
        return node_id

    def add_edge(self, begin_id: int, end_id: int, weight: float):
        """
        Add a traversal of begin -> end for the current sequence.

        An existing begin -> end edge is reused so that every ordered node
        pair has at most one edge.

        Raises:
            InvalidInputError: If either node does not exist
            GraphCorruptionError: If begin and end are the same node
        """
        if not (0 <= begin_id < self.num_nodes and 0 <= end_id < self.num_nodes):
            raise InvalidInputError(
                f"Edge {begin_id} -> {end_id} references a missing node "
                f"(graph has {self.num_nodes} nodes)"
            )
        if begin_id == end_id:
            logger.error(f"Refusing self-loop on node {begin_id}")
            raise GraphCorruptionError(f"Self-loop on node {begin_id}")

        for edge_id in self.nodes[begin_id].out_edges:
            edge = self.edges[edge_id]
            if edge.end_id == end_id:
                edge.add_sequence(self.num_sequences, weight)
                return

        edge = POAEdge(id=len(self.edges), begin_id=begin_id, end_id=end_id)
        edge.add_sequence(self.num_sequences, weight)
        self.edges.append(edge)
        self.nodes[begin_id].out_edges.append(edge.id)
        self.nodes[end_id].in_edges.append(edge.id)
        self._invalidate()

    def add_sequence(
        self,
        sequence: str,
        weights: Sequence[float],
        begin: int,
        end: int,
    ) -> Optional[int]:
        """
        Chain new nodes for sequence[begin:end].

        Each edge carries the sum of the weights of the two letters it joins.

        Returns:
            Id of the first new node, or None for an empty range
        """
        if begin == end:
            return None
        if not (0 <= begin < end <= len(sequence)):
            raise InvalidInputError(
                f"Invalid range [{begin}, {end}) for sequence of length {len(sequence)}"
            )
        if len(weights) != len(sequence):
            raise InvalidInputError(
                f"Sequence length {len(sequence)} != weights length {len(weights)}"
            )

        first_node_id = self.add_node(sequence[begin])
        for i in range(begin + 1, end):
            node_id = self.add_node(sequence[i])
            self.add_edge(node_id - 1, node_id, weights[i - 1] + weights[i])

        return first_node_id

    def add_alignment(
        self,
        alignment: AlignmentLike,
        sequence: str,
        weights: WeightsLike = 1.0,
    ) -> int:
        """
        Fold a new sequence into the graph using a precomputed alignment.

        Args:
            alignment: Correspondence between graph nodes and sequence
                positions, or an empty alignment for no overlap
            sequence: The new sequence
            weights: Uniform weight, PHRED quality string, or per-position list

        Returns:
            Id of the node where the new sequence starts

        Raises:
            InvalidInputError: If the input is rejected (graph unchanged)
            GraphCorruptionError: If the merged alignment created a cycle
        """
        alignment = _coerce_alignment(alignment)
        weights = resolve_weights(sequence, weights, self.quality_offset)
        alignment.validate(len(sequence), self.num_nodes, column_groups(self.nodes))

        self.alphabet.update(sequence)
        valid_seq_ids = alignment.aligned_positions

        if not valid_seq_ids:
            # No overlap: disjoint chain
            start_node_id = self.add_sequence(sequence, weights, 0, len(sequence))
            return self._finish_sequence(start_node_id)

        first, last = valid_seq_ids[0], valid_seq_ids[-1]

        num_nodes_before = self.num_nodes
        start_node_id = self.add_sequence(sequence, weights, 0, first)
        head_node_id = None if num_nodes_before == self.num_nodes else self.num_nodes - 1

        tail_node_id = self.add_sequence(sequence, weights, last + 1, len(sequence))

        prev_weight = weights[first - 1] if head_node_id is not None else 0.0

        for node_id, seq_id in zip(alignment.node_ids, alignment.seq_ids):
            if seq_id is None:
                continue

            new_node_id = self._resolve_node(node_id, sequence[seq_id])

            if start_node_id is None:
                start_node_id = new_node_id

            if head_node_id is not None:
                self.add_edge(head_node_id, new_node_id, prev_weight + weights[seq_id])

            head_node_id = new_node_id
            prev_weight = weights[seq_id]

        if tail_node_id is not None:
            self.add_edge(head_node_id, tail_node_id, prev_weight + weights[last + 1])

        return self._finish_sequence(start_node_id)

    def add_read(
        self,
        sequence: str,
        weights: WeightsLike,
        engine: AlignmentEngine,
    ) -> int:
        """Align *sequence* with *engine* and merge the result."""
        if self.num_nodes == 0:
            alignment = Alignment()
        else:
            alignment = engine.align(sequence, self)
        return self.add_alignment(alignment, sequence, weights)

    def _resolve_node(self, node_id: Optional[int], letter: str) -> int:
        """Pick or create the node a sequence letter lands on."""
        if node_id is None:
            return self.add_node(letter)

        node = self.nodes[node_id]
        if node.letter == letter:
            return node_id

        for aid in sorted(node.aligned_ids):
            if self.nodes[aid].letter == letter:
                return aid

        new_node_id = self.add_node(letter, variant=True)
        new_node = self.nodes[new_node_id]
        for aid in node.aligned_ids:
            new_node.add_aligned_id(aid)
            self.nodes[aid].add_aligned_id(new_node_id)
        new_node.add_aligned_id(node_id)
        node.add_aligned_id(new_node_id)

        logger.debug(
            f"Node {new_node_id} ({letter}) aligned to node {node_id} ({node.letter})"
        )
        return new_node_id

    def _finish_sequence(self, start_node_id: int) -> int:
        self.num_sequences += 1
        self.sequence_start_ids.append(start_node_id)
        self._invalidate()
        self.topological_sort()
        return start_node_id

    def _invalidate(self):
        self.is_sorted = False

    # -----------------------------------------------------------------
    # Ordering
    # -----------------------------------------------------------------

    def topological_sort(self):
        """Recompute the cached order if the graph changed since the last sort."""
        if self.is_sorted:
            return

        order = topological_sort(self.nodes, self.edges)
        if not is_topologically_sorted(self.nodes, self.edges, order):
            logger.error("Topological order failed its self-check")
            raise GraphCorruptionError("Topological order violates an edge")

        self._sorted_ids = order
        self.is_sorted = True

    def rigorous_order(self) -> List[int]:
        """Topological order with every alignment column contiguous."""
        order = rigorous_topological_sort(self.nodes, self.edges, self.sorted_ids)
        if not is_topologically_sorted(self.nodes, self.edges, order):
            logger.error("Rigorous topological order failed its self-check")
            raise GraphCorruptionError("Alignment columns cannot be ordered")
        return order

    # -----------------------------------------------------------------
    # Extraction
    # -----------------------------------------------------------------

    def traverse_heaviest_bundle(self) -> List[int]:
        """Compute and cache the consensus path as node ids."""
        self.consensus_ids = HeaviestBundle(self).traverse()
        return list(self.consensus_ids)

    def consensus(self) -> str:
        """Letters of the heaviest-bundle path."""
        return ''.join(self.nodes[node_id].letter for node_id in self.traverse_heaviest_bundle())

    def multiple_sequence_alignment(
        self,
        include_consensus: bool = False,
        gap_char: str = '-',
    ) -> List[str]:
        """One gapped row per sequence, optionally followed by the consensus."""
        return MsaBuilder(self, gap_char=gap_char).build(include_consensus)

    def stats(self) -> Dict[str, Any]:
        """Summary counts for reporting."""
        return {
            'nodes': self.num_nodes,
            'edges': self.num_edges,
            'sequences': self.num_sequences,
            'variant_nodes': sum(1 for node in self.nodes if node.variant),
            'sources': sum(1 for node in self.nodes if node.in_degree == 0),
            'sinks': sum(1 for node in self.nodes if node.out_degree == 0),
            'alphabet': ''.join(sorted(self.alphabet)),
        }

    def to_dot(self) -> str:
        """Graphviz description of the graph, for debugging only."""
        lines = [f"digraph {self.num_sequences} {{", "    graph [rankdir=LR]"]
        for node in self.nodes:
            lines.append(f'    {node.id} [label = "{node.id}|{node.letter}"]')
            for edge_id in node.out_edges:
                edge = self.edges[edge_id]
                lines.append(
                    f'    {node.id} -> {edge.end_id} [label = "{edge.total_weight:.3f}"]'
                )
            for aid in sorted(node.aligned_ids):
                if aid > node.id:
                    lines.append(f"    {node.id} -> {aid} [style = dotted, arrowhead = none]")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return (f"POAGraph(nodes={self.num_nodes}, edges={self.num_edges}, "
                f"sequences={self.num_sequences})")


def _coerce_alignment(alignment: AlignmentLike) -> Alignment:
    if isinstance(alignment, Alignment):
        return alignment
    if alignment is None:
        return Alignment()
    try:
        node_ids, seq_ids = alignment
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Malformed correspondence: {e}") from e
    return Alignment(node_ids, seq_ids)


def create_graph(
    sequence: str,
    weights: WeightsLike = 1.0,
    quality_offset: int = PHRED_OFFSET,
) -> POAGraph:
    """
    Create a graph from its first sequence.

    Args:
        sequence: First sequence
        weights: Uniform weight, PHRED quality string, or per-position list
        quality_offset: ASCII offset for quality strings

    Returns:
        Sorted POAGraph holding one sequence
    """
    return POAGraph.from_sequence(sequence, weights, quality_offset=quality_offset)


__all__ = [
    "POAGraph",
    "create_graph",
]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
