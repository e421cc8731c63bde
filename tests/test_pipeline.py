#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Tests for the consensus pipeline.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging

import pytest

from poaweaver.config import load_config
from poaweaver.io import SeqRead
from poaweaver.poa_core import Alignment, GraphCorruptionError, InvalidInputError
from poaweaver.utils import ConsensusPipeline, ConsensusResult


FULL = Alignment([0, 1, 2, 3], [0, 1, 2, 3])


@pytest.fixture
def reads():
    return [
        SeqRead(id="r1", sequence="ACGT"),
        SeqRead(id="r2", sequence="ACCT"),
        SeqRead(id="r3", sequence="ACCT"),
    ]


class TestBuildGraph:
    """Test graph construction from reads."""

    def test_reads_merged_in_order(self, reads):
        graph = ConsensusPipeline().build_graph(reads, {"r2": FULL, "r3": FULL})

        assert graph.num_sequences == 3
        assert graph.num_nodes == 5

    def test_missing_alignment_is_disjoint(self, reads):
        graph = ConsensusPipeline().build_graph(reads[:2])

        assert graph.num_nodes == 8
        assert graph.sequence_start_ids == [0, 4]

    def test_quality_weights_used(self):
        reads = [SeqRead(id="r1", sequence="AC", quality="II")]
        graph = ConsensusPipeline().build_graph(reads)

        assert graph.edges[0].total_weight == 80.0

    def test_quality_weights_disabled(self):
        config = load_config()
        config['weights']['use_quality'] = False
        config['weights']['default_weight'] = 2.0
        reads = [SeqRead(id="r1", sequence="AC", quality="II")]

        graph = ConsensusPipeline(config).build_graph(reads)

        assert graph.edges[0].total_weight == 4.0

    def test_failure_names_read(self, reads, caplog):
        bad = {"r2": Alignment([0, 9], [0, 1])}

        with caplog.at_level(logging.ERROR):
            with pytest.raises(InvalidInputError):
                ConsensusPipeline().build_graph(reads, bad)

        assert "r2" in caplog.text

    def test_unused_alignments_warned(self, reads, caplog):
        with caplog.at_level(logging.WARNING):
            ConsensusPipeline().build_graph(reads, {"r9": FULL})

        assert "no matching read" in caplog.text


class TestRun:
    """Test full runs."""

    def test_result(self, reads):
        result = ConsensusPipeline().run(reads, {"r2": FULL, "r3": FULL})

        assert isinstance(result, ConsensusResult)
        assert result.consensus == "ACCT"
        assert result.msa == ["ACGT", "ACCT", "ACCT"]
        assert result.read_ids == ["r1", "r2", "r3"]
        assert result.msa_width == 4
        assert result.stats['variant_nodes'] == 1

    def test_include_consensus_override(self, reads):
        result = ConsensusPipeline().run(reads, {"r2": FULL, "r3": FULL},
                                         include_consensus=True)

        assert result.msa[-1] == "ACCT"
        assert len(result.msa) == 4

    def test_include_consensus_from_config(self, reads):
        config = load_config()
        config['msa']['include_consensus'] = True

        result = ConsensusPipeline(config).run(reads, {"r2": FULL})

        assert len(result.msa) == 4

    def test_gap_char_from_config(self, reads):
        config = load_config()
        config['msa']['gap_char'] = '.'

        result = ConsensusPipeline(config).run(reads[:2])

        assert result.msa == ["ACGT....", "....ACCT"]

    def test_cycle_reported(self, reads):
        reads = [SeqRead(id="r1", sequence="ACGT"), SeqRead(id="r2", sequence="TA")]

        with pytest.raises(GraphCorruptionError):
            ConsensusPipeline().run(reads, {"r2": Alignment([3, 0], [0, 1])})

    def test_to_dict_and_summary(self, reads):
        result = ConsensusPipeline().run(reads, {"r2": FULL, "r3": FULL})

        data = result.to_dict()
        assert data['consensus'] == "ACCT"
        assert data['stats']['nodes'] == 5
        assert set(data['timing']) == {'build_sec', 'extract_sec'}
        assert "Reads: 3" in result.summary()
        assert "MSA: 3 rows x 4 columns" in result.summary()

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
