#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Multiple sequence alignment assembly from a POA graph.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import List, Optional, Sequence

from .data_structures import GraphCorruptionError, InvalidInputError

logger = logging.getLogger(__name__)


class MsaBuilder:
    """
    Lay out every stored sequence of a POAGraph on shared alignment columns.

    Each primary node opens a column and its aligned variants share it, so the
    alignment has exactly one column per primary node.
    """

    def __init__(self, graph, gap_char: str = '-'):
        if len(gap_char) != 1:
            raise InvalidInputError(f"Gap character must be a single character, got {gap_char!r}")
        if gap_char in graph.alphabet:
            raise InvalidInputError(f"Gap character {gap_char!r} occurs in the aligned sequences")
        self.graph = graph
        self.gap_char = gap_char

    def column_ids(self) -> List[int]:
        """
        Column index of every node, indexed by node id.

        Returns:
            List of length num_nodes
        """
        graph = self.graph
        columns: List[Optional[int]] = [None] * graph.num_nodes

        counter = 0
        for node_id in graph.rigorous_order():
            node = graph.nodes[node_id]
            if node.variant:
                continue
            columns[node_id] = counter
            for aid in node.aligned_ids:
                columns[aid] = counter
            counter += 1

        # Variants with no primary in their column get a column of their own
        for node_id, column in enumerate(columns):
            if column is None:
                logger.warning(f"Variant node {node_id} has no primary node, opening a new column")
                columns[node_id] = counter
                counter += 1

        return columns

    def sequence_path(self, sequence_index: int) -> List[int]:
        """Node ids visited by one stored sequence, in order."""
        graph = self.graph
        path = []
        node_id = graph.sequence_start_ids[sequence_index]

        while node_id is not None:
            path.append(node_id)
            if len(path) > graph.num_nodes:
                raise GraphCorruptionError(
                    f"Path of sequence {sequence_index} revisits a node"
                )
            next_id = None
            for edge_id in graph.nodes[node_id].out_edges:
                edge = graph.edges[edge_id]
                if edge.has_label(sequence_index):
                    next_id = edge.end_id
                    break
            node_id = next_id

        return path

    def build(self, include_consensus: bool = False) -> List[str]:
        """
        Build the gapped rows.

        Args:
            include_consensus: Append the heaviest-bundle path as a last row

        Returns:
            One row per stored sequence in insertion order (plus consensus),
            all of the same length
        """
        graph = self.graph
        if graph.num_nodes == 0:
            return []

        columns = self.column_ids()
        width = max(columns) + 1

        msa = []
        for i in range(graph.num_sequences):
            msa.append(self._render(self.sequence_path(i), columns, width))

        if include_consensus:
            msa.append(self._render(graph.traverse_heaviest_bundle(), columns, width))

        logger.debug(f"Built MSA of {len(msa)} rows x {width} columns")
        return msa

    def _render(self, path: Sequence[int], columns: Sequence[int], width: int) -> str:
        row = [self.gap_char] * width
        for node_id in path:
            row[columns[node_id]] = self.graph.nodes[node_id].letter
        return ''.join(row)

    def check_msa(self, msa: Sequence[str], sequences: Sequence[str]):
        """
        Check that removing gaps from each row gives back its sequence.

        Args:
            msa: Rows as returned by build() (a trailing consensus row is ignored)
            sequences: Input sequences in insertion order

        Raises:
            GraphCorruptionError: If a row does not reproduce its sequence
        """
        if len(msa) < len(sequences):
            raise GraphCorruptionError(
                f"MSA has {len(msa)} rows for {len(sequences)} sequences"
            )
        for i, sequence in enumerate(sequences):
            ungapped = msa[i].replace(self.gap_char, '')
            if len(ungapped) != len(sequence):
                raise GraphCorruptionError(
                    f"Row {i}: length {len(ungapped)} differs from sequence length {len(sequence)}"
                )
            if ungapped != sequence:
                raise GraphCorruptionError(f"Row {i}: content differs from its sequence")


__all__ = ["MsaBuilder"]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
