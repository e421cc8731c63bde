#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Heaviest-bundle consensus traversal.

Longest weighted path over the graph in topological order. Edge weights
already double-count node support, so the path score alone reflects the total
support of the consensus. When the best scoring node is not a sink, branch
completion discards the losing branches at the bifurcation and rescores the
remainder of the order until a sink is reached.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import List

import numpy as np

from .data_structures import GraphCorruptionError

logger = logging.getLogger(__name__)

# Score of a node that may no longer be used as a predecessor
INVALID_SCORE = -1.0
NO_PREDECESSOR = -1


class HeaviestBundle:
    """
    Consensus path extraction for one POAGraph.

    Score and predecessor buffers belong to a single traverse() call.
    """

    def __init__(self, graph):
        self.graph = graph

    def traverse(self) -> List[int]:
        """
        Compute the heaviest path.

        Returns:
            Node ids of the consensus in sequence order (empty for an empty
            graph)
        """
        graph = self.graph
        if graph.num_nodes == 0:
            return []

        order = graph.sorted_ids
        nodes = graph.nodes

        scores = np.zeros(graph.num_nodes, dtype=np.float64)
        predecessors = np.full(graph.num_nodes, NO_PREDECESSOR, dtype=np.int64)

        max_score_id = 0
        for node_id in order:
            self._choose_predecessor(node_id, scores, predecessors, skip_invalid=False)
            if scores[max_score_id] < scores[node_id]:
                max_score_id = node_id

        if nodes[max_score_id].out_edges:
            rank = np.empty(graph.num_nodes, dtype=np.int64)
            rank[order] = np.arange(len(order))

            rounds = 0
            while nodes[max_score_id].out_edges:
                max_score_id = self._branch_completion(
                    order, scores, predecessors, int(rank[max_score_id])
                )
                rounds += 1
            logger.debug(f"Branch completion reached sink {max_score_id} after {rounds} rounds")

        # Traceback
        consensus = []
        node_id = max_score_id
        while predecessors[node_id] != NO_PREDECESSOR:
            consensus.append(int(node_id))
            node_id = int(predecessors[node_id])
        consensus.append(int(node_id))
        consensus.reverse()

        logger.debug(f"Consensus path of {len(consensus)} nodes, score {scores[max_score_id]:.3f}")
        return consensus

    def _choose_predecessor(self, node_id, scores, predecessors, skip_invalid):
        """
        Pick the heaviest incoming edge of *node_id* and accumulate its score.

        Ties on edge weight go to the candidate whose own score is at least
        that of the predecessor chosen so far.
        """
        graph = self.graph
        for edge_id in graph.nodes[node_id].in_edges:
            edge = graph.edges[edge_id]
            begin_id = edge.begin_id
            if skip_invalid and scores[begin_id] == INVALID_SCORE:
                continue

            current = predecessors[node_id]
            if (scores[node_id] < edge.total_weight or
                    (scores[node_id] == edge.total_weight and
                     (current == NO_PREDECESSOR or scores[current] <= scores[begin_id]))):
                scores[node_id] = edge.total_weight
                predecessors[node_id] = begin_id

        if predecessors[node_id] != NO_PREDECESSOR:
            scores[node_id] += scores[predecessors[node_id]]

    def _branch_completion(self, order, scores, predecessors, rank) -> int:
        """
        Rescore everything after *rank* with the sibling branches removed.

        Returns:
            Best scoring node id strictly after *rank*
        """
        graph = self.graph
        node_id = order[rank]
        for edge_id in graph.nodes[node_id].out_edges:
            successor = graph.nodes[graph.edges[edge_id].end_id]
            for sibling_edge_id in successor.in_edges:
                begin_id = graph.edges[sibling_edge_id].begin_id
                if begin_id != node_id:
                    scores[begin_id] = INVALID_SCORE

        max_score = INVALID_SCORE
        max_score_id = None
        for i in range(rank + 1, len(order)):
            current_id = order[i]
            scores[current_id] = INVALID_SCORE
            predecessors[current_id] = NO_PREDECESSOR

            self._choose_predecessor(current_id, scores, predecessors, skip_invalid=True)

            if max_score < scores[current_id]:
                max_score = scores[current_id]
                max_score_id = current_id

        if max_score_id is None:
            logger.error(f"Branch completion found no reachable node after rank {rank}")
            raise GraphCorruptionError(f"No node reachable after rank {rank}")

        return max_score_id


__all__ = ["HeaviestBundle", "INVALID_SCORE"]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
