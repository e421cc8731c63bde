#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from poaweaver.poa_core import Alignment, create_graph


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="poaweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def single_graph():
    """Graph holding only ACGT (nodes 0-3)."""
    return create_graph("ACGT", 1.0)


@pytest.fixture
def snp_graph():
    """ACGT plus ACCT: node 4 is a C variant aligned to G (node 2)."""
    graph = create_graph("ACGT", 1.0)
    graph.add_alignment(Alignment([0, 1, 2, 3], [0, 1, 2, 3]), "ACCT", 1.0)
    return graph


@pytest.fixture
def simple_fasta():
    """Two reads as FASTA text."""
    return ">r1\nACGT\n>r2\nACCT\n"


@pytest.fixture
def simple_fastq():
    """Two reads as FASTQ text."""
    return """@r1
ACGT
+
IIII
@r2
ACCT
+
IIII
"""


@pytest.fixture
def snp_alignments():
    """JSON-lines correspondences placing r2 over r1's nodes."""
    return '{"read_id": "r2", "node_ids": [0, 1, 2, 3], "seq_ids": [0, 1, 2, 3]}\n'

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
