#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Core I/O module for PoaWeaver.

Consolidated module containing:
- Read data structure (SeqRead)
- FASTA / FASTQ reading and FASTA writing
- Correspondence (alignment) files produced by an external aligner

Correspondence files are JSON lines, one object per read:

    {"read_id": "read2", "node_ids": [0, 1, null, 3], "seq_ids": [0, 1, 2, 3]}

null marks a gap on that side. Reads without an entry are merged as having
no overlap with the graph.
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Union

from Bio import SeqIO

from ..poa_core.data_structures import Alignment, InvalidInputError, weights_from_quality

logger = logging.getLogger(__name__)

FASTQ_SUFFIXES = ('.fq', '.fastq')
FASTA_SUFFIXES = ('.fa', '.fasta', '.fna', '.fas')


# =============================================================================
# SECTION 2: READ DATA STRUCTURE
# =============================================================================

@dataclass
class SeqRead:
    """
    Sequencing read.

    Attributes:
        id: Read identifier
        sequence: Sequence (uppercased)
        quality: Quality string (Phred+33 encoding), None for FASTA input
        metadata: Additional metadata
    """
    id: str
    sequence: str
    quality: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.sequence = self.sequence.upper()
        if self.quality is not None and len(self.quality) != len(self.sequence):
            raise ValueError(
                f"Read {self.id}: quality length {len(self.quality)} != "
                f"sequence length {len(self.sequence)}"
            )

    @property
    def length(self) -> int:
        return len(self.sequence)

    def get_weights(self, default_weight: float = 1.0, use_quality: bool = True,
                    quality_offset: int = 33) -> List[float]:
        """
        Per-base weights for graph insertion.

        Args:
            default_weight: Uniform weight when quality is absent or unused
            use_quality: Derive weights from the quality string if present
            quality_offset: ASCII offset of the quality encoding

        Returns:
            One weight per base
        """
        if use_quality and self.quality:
            return weights_from_quality(self.quality, quality_offset)
        return [float(default_weight)] * self.length

    def to_fasta_string(self) -> str:
        return f">{self.id}\n{self.sequence}\n"

    def __len__(self) -> int:
        return self.length


# =============================================================================
# SECTION 3: FILE UTILITIES
# =============================================================================

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """Check if file is gzip compressed (by suffix)."""
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt')
        else:
            return gzip.open(filepath, 'wt')
    else:
        return open(filepath, mode)


def detect_format(filepath: Union[str, Path]) -> str:
    """Return 'fastq' or 'fasta' from the file suffix (ignoring .gz)."""
    filepath = Path(filepath)
    suffixes = [s.lower() for s in filepath.suffixes if s.lower() not in ('.gz', '.gzip')]
    suffix = suffixes[-1] if suffixes else ''

    if suffix in FASTQ_SUFFIXES:
        return 'fastq'
    if suffix in FASTA_SUFFIXES:
        return 'fasta'
    raise ValueError(f"Cannot determine sequence format of {filepath}")


# =============================================================================
# SECTION 4: SEQUENCE FILE I/O
# =============================================================================

def read_fastq(filepath: Union[str, Path], min_length: int = 0) -> Iterator[SeqRead]:
    """
    Read FASTQ file and yield SeqRead objects.

    Args:
        filepath: Path to FASTQ file (can be gzipped)
        min_length: Minimum read length filter

    Yields:
        SeqRead objects with Phred+33 quality strings
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"FASTQ file not found: {filepath}")

    with open_file(filepath, 'r') as handle:
        for record in SeqIO.parse(handle, "fastq"):
            sequence = str(record.seq)
            if len(sequence) < min_length:
                continue

            quality = "".join(chr(q + 33) for q in record.letter_annotations.get("phred_quality", []))

            yield SeqRead(
                id=record.id,
                sequence=sequence,
                quality=quality if quality else None,
                metadata={'description': record.description},
            )


def read_fasta(filepath: Union[str, Path], min_length: int = 0) -> Iterator[SeqRead]:
    """
    Read FASTA file and yield SeqRead objects.

    Args:
        filepath: Path to FASTA file (can be gzipped)
        min_length: Minimum sequence length filter

    Yields:
        SeqRead objects (without quality scores)
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"FASTA file not found: {filepath}")

    with open_file(filepath, 'r') as handle:
        for record in SeqIO.parse(handle, "fasta"):
            sequence = str(record.seq)
            if len(sequence) < min_length:
                continue

            yield SeqRead(
                id=record.id,
                sequence=sequence,
                quality=None,  # FASTA has no quality scores
                metadata={'description': record.description},
            )


def read_sequences(filepath: Union[str, Path], min_length: int = 0) -> List[SeqRead]:
    """Read a FASTA or FASTQ file, chosen by suffix."""
    if detect_format(filepath) == 'fastq':
        reads = list(read_fastq(filepath, min_length=min_length))
    else:
        reads = list(read_fasta(filepath, min_length=min_length))

    logger.info(f"Loaded {len(reads)} reads from {filepath}")
    return reads


def write_fasta(
    reads: Iterable[SeqRead],
    filepath: Union[str, Path],
    line_width: int = 80,
) -> int:
    """
    Write SeqRead objects to FASTA file.

    Args:
        reads: Iterable of SeqRead objects
        filepath: Output FASTA file path (.gz compresses)
        line_width: Number of bases per line (0 = no wrapping)

    Returns:
        Number of sequences written
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open_file(filepath, 'w') as handle:
        for read in reads:
            handle.write(f">{read.id}\n")

            if line_width > 0:
                for i in range(0, len(read.sequence), line_width):
                    handle.write(read.sequence[i:i + line_width] + '\n')
            else:
                handle.write(read.sequence + '\n')

            count += 1

    logger.debug(f"Wrote {count} sequences to {filepath}")
    return count


# =============================================================================
# SECTION 5: CORRESPONDENCE FILE I/O
# =============================================================================

def read_alignments(filepath: Union[str, Path]) -> Dict[str, Alignment]:
    """
    Load per-read correspondences from a JSON-lines file.

    Args:
        filepath: Path to JSON-lines file (can be gzipped)

    Returns:
        Mapping read id -> Alignment

    Raises:
        InvalidInputError: On malformed lines or duplicate read ids
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Alignment file not found: {filepath}")

    alignments: Dict[str, Alignment] = {}
    with open_file(filepath, 'r') as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            try:
                entry = json.loads(line)
                read_id = str(entry['read_id'])
                alignment = Alignment(entry.get('node_ids', []), entry.get('seq_ids', []))
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                raise InvalidInputError(f"{filepath}:{line_number}: malformed entry ({e})") from e
            except InvalidInputError as e:
                raise InvalidInputError(f"{filepath}:{line_number}: {e}") from e

            if read_id in alignments:
                raise InvalidInputError(f"{filepath}:{line_number}: duplicate read id {read_id}")
            alignments[read_id] = alignment

    logger.info(f"Loaded {len(alignments)} alignments from {filepath}")
    return alignments


def write_alignments(alignments: Dict[str, Alignment], filepath: Union[str, Path]) -> int:
    """Write per-read correspondences as JSON lines. Returns the entry count."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open_file(filepath, 'w') as handle:
        for read_id, alignment in alignments.items():
            handle.write(json.dumps({'read_id': read_id, **alignment.to_dict()}) + '\n')

    return len(alignments)


__all__ = [
    "SeqRead",
    "is_gzipped",
    "open_file",
    "detect_format",
    "read_fastq",
    "read_fasta",
    "read_sequences",
    "write_fasta",
    "read_alignments",
    "write_alignments",
]
