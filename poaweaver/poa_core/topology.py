#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Topological ordering of partial-order alignment graphs.

Both orderings walk incoming edges with an explicit stack, so a node is only
emitted after all of its predecessors and long reads cannot exhaust the
interpreter call stack. Marks follow the usual three colours:

    0 - unvisited, 1 - in progress, 2 - done

Reaching an in-progress node means the graph has a cycle, which is reported
as GraphCorruptionError.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from typing import Dict, List, Sequence

from .data_structures import GraphCorruptionError, POAEdge, POANode

logger = logging.getLogger(__name__)

UNVISITED = 0
IN_PROGRESS = 1
DONE = 2


# ============================================================================
# Plain ordering
# ============================================================================

def topological_sort(nodes: Sequence[POANode], edges: Sequence[POAEdge]) -> List[int]:
    """
    Order node ids so that every edge source precedes its target.

    Every node is used as a DFS root in id order to cover disconnected
    components.

    Raises:
        GraphCorruptionError: If the graph contains a cycle
    """
    marks = [UNVISITED] * len(nodes)
    order: List[int] = []

    def predecessors(node_id: int) -> List[int]:
        return [edges[e].begin_id for e in nodes[node_id].in_edges]

    for root in range(len(nodes)):
        if marks[root] == UNVISITED:
            _visit(root, predecessors, marks, order, lambda node_id: [node_id])

    logger.debug(f"Topologically sorted {len(order)} nodes")
    return order


# ============================================================================
# Rigorous ordering (alignment columns kept contiguous)
# ============================================================================

def column_groups(nodes: Sequence[POANode]) -> Dict[int, int]:
    """
    Map every node id to the primary node of its alignment column.

    A variant whose aligned set holds no primary node leads its own group.
    """
    leader: Dict[int, int] = {}
    for node in nodes:
        if not node.variant:
            leader[node.id] = node.id
            continue
        primaries = [aid for aid in node.aligned_ids if not nodes[aid].variant]
        leader[node.id] = min(primaries) if primaries else node.id
    return leader


def rigorous_topological_sort(
    nodes: Sequence[POANode],
    edges: Sequence[POAEdge],
    sorted_ids: Sequence[int],
) -> List[int]:
    """
    Order node ids so that each alignment column is contiguous.

    Every primary node is emitted immediately followed by its aligned
    variants (in id order). A column is scheduled only once every predecessor
    of every one of its members has been emitted. Roots are taken from the
    plain order *sorted_ids*.

    Raises:
        GraphCorruptionError: If the columns cannot be ordered
    """
    leader = column_groups(nodes)

    members: Dict[int, List[int]] = {}
    for node in nodes:
        members.setdefault(leader[node.id], []).append(node.id)
    for group_id, group in members.items():
        group.sort(key=lambda node_id: (node_id != group_id, node_id))

    def predecessors(group_id: int) -> List[int]:
        preds = []
        for member in members[group_id]:
            for edge_id in nodes[member].in_edges:
                pred_group = leader[edges[edge_id].begin_id]
                if pred_group != group_id:
                    preds.append(pred_group)
        return preds

    marks = {group_id: UNVISITED for group_id in members}
    order: List[int] = []
    for node_id in sorted_ids:
        group_id = leader[node_id]
        if marks[group_id] == UNVISITED:
            _visit(group_id, predecessors, marks, order, members.__getitem__)

    logger.debug(f"Rigorously sorted {len(order)} nodes in {len(members)} columns")
    return order


# ============================================================================
# Shared DFS and checks
# ============================================================================

def _visit(root, predecessors, marks, order, emit):
    """
    Depth-first visit of *root* over incoming edges.

    Args:
        root: Vertex to start from (must be unvisited)
        predecessors: Callable returning the predecessor vertices of a vertex
        marks: Mutable vertex -> colour mapping
        order: Output list, extended with emit(vertex) when a vertex is done
        emit: Callable returning the node ids a finished vertex contributes
    """
    marks[root] = IN_PROGRESS
    stack = [(root, predecessors(root), 0)]

    while stack:
        vertex, preds, i = stack[-1]
        if i < len(preds):
            stack[-1] = (vertex, preds, i + 1)
            pred = preds[i]
            if marks[pred] == IN_PROGRESS:
                logger.error(f"Cycle detected: {pred} reached again while in progress")
                raise GraphCorruptionError(
                    f"Graph is not a DAG: cycle through node {pred}"
                )
            if marks[pred] == UNVISITED:
                marks[pred] = IN_PROGRESS
                stack.append((pred, predecessors(pred), 0))
        else:
            stack.pop()
            marks[vertex] = DONE
            order.extend(emit(vertex))


def is_topologically_sorted(
    nodes: Sequence[POANode],
    edges: Sequence[POAEdge],
    order: Sequence[int],
) -> bool:
    """Check that *order* holds every node once and respects every edge."""
    if len(order) != len(nodes):
        return False

    visited = set()
    for node_id in order:
        if node_id in visited:
            return False
        for edge_id in nodes[node_id].in_edges:
            if edges[edge_id].begin_id not in visited:
                return False
        visited.add(node_id)

    return True


__all__ = [
    "topological_sort",
    "rigorous_topological_sort",
    "column_groups",
    "is_topologically_sorted",
]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
