#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Tests for heaviest-bundle consensus.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from poaweaver.poa_core import Alignment, HeaviestBundle, POAGraph, create_graph


FULL = Alignment([0, 1, 2, 3], [0, 1, 2, 3])


def _assert_connected_path(graph, path):
    pairs = {(edge.begin_id, edge.end_id) for edge in graph.edges}
    for begin_id, end_id in zip(path, path[1:]):
        assert (begin_id, end_id) in pairs


class TestConsensus:
    """Test consensus selection."""

    def test_single_sequence(self, single_graph):
        assert single_graph.consensus() == "ACGT"
        assert single_graph.consensus_ids == [0, 1, 2, 3]

    def test_empty_graph(self):
        graph = POAGraph()
        assert HeaviestBundle(graph).traverse() == []
        assert graph.consensus() == ""

    def test_majority_wins(self):
        """The base with more support is chosen."""
        graph = create_graph("ACGT")
        graph.add_alignment(FULL, "ACCT")
        graph.add_alignment(FULL, "ACGT")

        assert graph.consensus() == "ACGT"

    def test_majority_variant_wins(self):
        graph = create_graph("ACGT")
        graph.add_alignment(FULL, "ACCT")
        graph.add_alignment(FULL, "ACCT")

        assert graph.consensus() == "ACCT"

    def test_equal_support_tie_break(self, snp_graph):
        """On equal edge weight the predecessor with the higher score wins, later edges on ties."""
        assert snp_graph.consensus() == "ACCT"

    def test_weights_decide(self):
        """A single high-quality read outweighs two low-quality ones."""
        graph = create_graph("ACGT", 1.0)
        graph.add_alignment(FULL, "ACGT", 1.0)
        graph.add_alignment(FULL, "ACCT", 5.0)

        assert graph.consensus() == "ACCT"

    def test_deletion_loses_to_support(self):
        graph = create_graph("ACGT")
        graph.add_alignment(Alignment([0, 1, 2, 3], [0, None, None, 1]), "AT")

        assert graph.consensus() == "ACGT"

    def test_disjoint_components(self):
        """With equal scores the first maximum found is kept."""
        graph = create_graph("ACGT")
        graph.add_alignment(Alignment(), "TTGA")

        assert graph.consensus() == "ACGT"

    def test_path_follows_edges(self):
        graph = create_graph("ACGTAC")
        graph.add_alignment(Alignment([0, 1, 2, 3, 4, 5], [0, 1, 2, 3, 4, 5]), "ACCTAC")
        graph.add_alignment(Alignment([0, 1, None, 2, 3], [0, 1, 2, 3, 4]), "ACAGT")

        path = graph.traverse_heaviest_bundle()

        assert len(path) == len(set(path))
        _assert_connected_path(graph, path)
        assert graph.nodes[path[-1]].out_edges == []

    def test_long_sequence(self):
        sequence = "ACGT" * 2000
        graph = create_graph(sequence)
        assert graph.consensus() == sequence


class TestBranchCompletion:
    """Test recovery when the best scoring node is not a sink."""

    def _heavy_stub_graph(self):
        # G-G-G-G-T carries most support but only a weak edge into T,
        # while a light read enters T through a heavy edge.
        graph = create_graph("GGGGT", [10.0, 10.0, 10.0, 10.0, 0.0])
        graph.add_alignment(Alignment([None, 4], [0, 1]), "CT", 30.0)
        return graph

    def test_best_node_extended_to_sink(self):
        graph = self._heavy_stub_graph()

        assert graph.sorted_ids == [0, 1, 2, 3, 5, 4]
        assert graph.consensus() == "GGGGT"

    def test_consensus_ends_at_sink(self):
        graph = self._heavy_stub_graph()
        path = graph.traverse_heaviest_bundle()

        assert path == [0, 1, 2, 3, 4]
        assert graph.nodes[path[-1]].out_edges == []
        _assert_connected_path(graph, path)

    def test_traverse_is_repeatable(self):
        """Scores live in the traversal, not in the graph."""
        graph = self._heavy_stub_graph()

        assert graph.traverse_heaviest_bundle() == graph.traverse_heaviest_bundle()

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
