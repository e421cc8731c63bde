"""
PoaWeaver consensus pipeline.

Builds one POA graph from an ordered set of reads and their precomputed
correspondences, then extracts the consensus and the multiple sequence
alignment:
- Graph construction: reads are merged in order; the node ids in a read's
  correspondence refer to the graph as it stands after all previous reads
- Extraction: heaviest-bundle consensus, MSA rows, optional MSA self-check
"""

from typing import Optional, Dict, Any, List
import logging
import time
from dataclasses import dataclass, field

from ..config.schema import load_config
from ..io.io_core_module import SeqRead
from ..poa_core import Alignment, MsaBuilder, POAGraph


logger = logging.getLogger(__name__)


# ============================================================================
# Data Structures
# ============================================================================

@dataclass
class ConsensusResult:
    """
    Result of a consensus run.

    Attributes:
        consensus: Heaviest-bundle consensus sequence
        msa: Gapped rows in read order (plus consensus row if requested)
        read_ids: Read ids in graph insertion order
        stats: Graph statistics
        graph: The built graph
    """
    consensus: str
    msa: List[str]
    read_ids: List[str]
    stats: Dict[str, Any] = field(default_factory=dict)
    build_time_sec: float = 0.0
    extract_time_sec: float = 0.0
    graph: Optional[POAGraph] = None

    @property
    def msa_width(self) -> int:
        return len(self.msa[0]) if self.msa else 0

    def summary(self) -> str:
        """Return human-readable summary."""
        return (
            f"Consensus Summary:\n"
            f"  Reads: {len(self.read_ids):,}\n"
            f"  Graph: {self.stats.get('nodes', 0):,} nodes, {self.stats.get('edges', 0):,} edges, "
            f"{self.stats.get('variant_nodes', 0):,} variant nodes\n"
            f"  Consensus: {len(self.consensus):,} bp\n"
            f"  MSA: {len(self.msa):,} rows x {self.msa_width:,} columns\n"
            f"  Time: {self.build_time_sec:.2f}s build, {self.extract_time_sec:.2f}s extract"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            'consensus': self.consensus,
            'msa': list(self.msa),
            'read_ids': list(self.read_ids),
            'stats': dict(self.stats),
            'timing': {
                'build_sec': self.build_time_sec,
                'extract_sec': self.extract_time_sec,
            },
        }


# ============================================================================
# Pipeline
# ============================================================================

class ConsensusPipeline:
    """
    Read set -> POA graph -> consensus + MSA.

    Usage
    -----
    >>> pipeline = ConsensusPipeline()
    >>> result = pipeline.run(reads, alignments)
    >>> print(result.summary())
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: Configuration dictionary (defaults when None)
        """
        self.config = config if config is not None else load_config()

        weights = self.config['weights']
        self.default_weight = weights['default_weight']
        self.use_quality = weights['use_quality']
        self.quality_offset = weights['quality_offset']

        msa = self.config['msa']
        self.gap_char = msa['gap_char']
        self.include_consensus = msa['include_consensus']
        self.check = msa['check']

    def build_graph(
        self,
        reads: List[SeqRead],
        alignments: Optional[Dict[str, Alignment]] = None,
    ) -> POAGraph:
        """
        Merge *reads* into a new graph in order.

        Args:
            reads: Reads in insertion order
            alignments: Read id -> correspondence; missing reads are merged
                without overlap

        Returns:
            Sorted POAGraph
        """
        alignments = alignments or {}
        graph = POAGraph(quality_offset=self.quality_offset)

        for i, read in enumerate(reads):
            alignment = alignments.get(read.id, Alignment())
            weights = read.get_weights(
                default_weight=self.default_weight,
                use_quality=self.use_quality,
                quality_offset=self.quality_offset,
            )
            try:
                graph.add_alignment(alignment, read.sequence, weights)
            except Exception as e:
                logger.error(f"Failed to merge read {read.id} ({i + 1}/{len(reads)}): {e}")
                raise
            logger.debug(f"Merged read {read.id}: {len(alignment)} aligned columns, "
                         f"graph now {graph.num_nodes} nodes")

        unused = set(alignments) - {read.id for read in reads}
        if unused:
            logger.warning(f"{len(unused)} alignments have no matching read")

        return graph

    def run(
        self,
        reads: List[SeqRead],
        alignments: Optional[Dict[str, Alignment]] = None,
        include_consensus: Optional[bool] = None,
    ) -> ConsensusResult:
        """
        Build the graph and extract consensus and MSA.

        Args:
            reads: Reads in insertion order
            alignments: Read id -> correspondence
            include_consensus: Override msa.include_consensus

        Returns:
            ConsensusResult
        """
        if include_consensus is None:
            include_consensus = self.include_consensus

        logger.info("=" * 60)
        logger.info(f"Building POA graph from {len(reads)} reads")
        logger.info("=" * 60)

        start = time.time()
        graph = self.build_graph(reads, alignments)
        build_time = time.time() - start

        start = time.time()
        consensus = graph.consensus()
        builder = MsaBuilder(graph, gap_char=self.gap_char)
        msa = builder.build(include_consensus=include_consensus)
        if self.check:
            builder.check_msa(msa, [read.sequence for read in reads])
        extract_time = time.time() - start

        result = ConsensusResult(
            consensus=consensus,
            msa=msa,
            read_ids=[read.id for read in reads],
            stats=graph.stats(),
            build_time_sec=build_time,
            extract_time_sec=extract_time,
            graph=graph,
        )

        for line in result.summary().splitlines():
            logger.info(line)

        return result


__all__ = ["ConsensusPipeline", "ConsensusResult"]
