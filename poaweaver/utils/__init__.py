"""
Utilities module for PoaWeaver.

This module provides pipeline orchestration:
- Consensus pipeline (reads + correspondences -> graph -> consensus / MSA)
"""

from .pipeline import ConsensusPipeline, ConsensusResult

__all__ = [
    "ConsensusPipeline",
    "ConsensusResult",
]
