#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Boundary for sequence-to-graph alignment engines.

PoaWeaver does not compute alignments itself. An engine receives the new
sequence and the current (sorted) graph and returns the correspondence that
POAGraph.add_alignment merges.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from abc import ABC, abstractmethod

from .data_structures import Alignment


class AlignmentEngine(ABC):
    """Computes the correspondence between a sequence and a POA graph."""

    @abstractmethod
    def align(self, sequence: str, graph) -> Alignment:
        """
        Align *sequence* against *graph*.

        Returns:
            Alignment with node_ids into graph.nodes and seq_ids into
            *sequence*; an empty Alignment when there is no overlap
        """
        raise NotImplementedError


__all__ = ["AlignmentEngine"]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
