"""
I/O module for PoaWeaver.

Reading and writing sequences (FASTA/FASTQ) and the per-read correspondence
files produced by an external aligner.
"""

from .io_core_module import (
    SeqRead,
    detect_format,
    read_alignments,
    read_fasta,
    read_fastq,
    read_sequences,
    write_alignments,
    write_fasta,
)

__all__ = [
    "SeqRead",
    "detect_format",
    "read_fasta",
    "read_fastq",
    "read_sequences",
    "write_fasta",
    "read_alignments",
    "write_alignments",
]
