#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Tests for CLI command interface.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from poaweaver.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Commands reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_inputs(reads_text, alignments_text=None, reads_name="reads.fasta"):
    Path(reads_name).write_text(reads_text)
    if alignments_text is not None:
        Path("aln.jsonl").write_text(alignments_text)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        """Test that --help runs without error."""
        result = runner.invoke(main, ['--help'])

        assert result.exit_code == 0
        assert 'PoaWeaver' in result.output

    def test_cli_version(self, runner):
        """Test that --version displays version."""
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    @pytest.mark.parametrize("command", ['consensus', 'dot', 'config'])
    def test_subcommand_help(self, runner, command):
        result = runner.invoke(main, [command, '--help'])
        assert result.exit_code == 0


class TestConfigCommands:
    """Test configuration management commands."""

    def test_config_init(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ['config', 'init', '-o', 'test.yaml', '-t', 'ont'])

            assert result.exit_code == 0
            assert Path('test.yaml').exists()

    def test_config_validate(self, runner):
        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'test.yaml'])
            result = runner.invoke(main, ['config', 'validate', 'test.yaml'])

            assert result.exit_code == 0
            assert 'valid' in result.output

    def test_config_validate_invalid(self, runner):
        with runner.isolated_filesystem():
            Path('bad.yaml').write_text("msa:\n  gap_char: '--'\n")
            result = runner.invoke(main, ['config', 'validate', 'bad.yaml'])

            assert result.exit_code == 1

    def test_config_show(self, runner):
        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'test.yaml'])
            result = runner.invoke(main, ['config', 'show', 'test.yaml'])

            assert result.exit_code == 0
            assert 'Gap character: -' in result.output


class TestConsensusCommand:
    """Test the consensus command end to end."""

    def test_consensus_outputs(self, runner, simple_fasta, snp_alignments):
        with runner.isolated_filesystem():
            _write_inputs(simple_fasta, snp_alignments)

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fasta', '-a', 'aln.jsonl',
                '-o', 'cons.fasta', '--msa', 'msa.fasta', '--dot', 'graph.dot',
                '--report', 'report.json',
            ])

            assert result.exit_code == 0, result.output
            assert Path('cons.fasta').read_text() == ">consensus\nACCT\n"
            assert Path('msa.fasta').read_text() == ">r1\nACGT\n>r2\nACCT\n"
            assert Path('graph.dot').read_text().startswith("digraph 2 {")

            report = json.loads(Path('report.json').read_text())
            assert report['stats']['nodes'] == 5

    def test_consensus_from_fastq(self, runner, simple_fastq, snp_alignments):
        with runner.isolated_filesystem():
            _write_inputs(simple_fastq, snp_alignments, reads_name="reads.fastq")

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fastq', '-a', 'aln.jsonl',
                '-o', 'cons.fasta', '--msa', 'msa.fasta', '--include-consensus',
            ])

            assert result.exit_code == 0, result.output
            assert Path('msa.fasta').read_text() == ">r1\nACGT\n>r2\nACCT\n>consensus\nACCT\n"

    def test_consensus_without_alignments(self, runner, simple_fasta):
        with runner.isolated_filesystem():
            _write_inputs(simple_fasta)

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fasta', '-o', 'cons.fasta', '--msa', 'msa.fasta',
            ])

            assert result.exit_code == 0, result.output
            assert Path('msa.fasta').read_text() == ">r1\nACGT----\n>r2\n----ACCT\n"

    def test_consensus_with_config(self, runner, simple_fasta, snp_alignments):
        with runner.isolated_filesystem():
            _write_inputs(simple_fasta, snp_alignments)
            Path('config.yaml').write_text("output:\n  consensus_id: cns\n  line_width: 2\n")

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fasta', '-a', 'aln.jsonl',
                '-o', 'cons.fasta', '-c', 'config.yaml',
            ])

            assert result.exit_code == 0, result.output
            assert Path('cons.fasta').read_text() == ">cns\nAC\nCT\n"

    def test_consensus_cycle_fails(self, runner):
        with runner.isolated_filesystem():
            _write_inputs(">r1\nACGT\n>r2\nTA\n",
                          '{"read_id": "r2", "node_ids": [3, 0], "seq_ids": [0, 1]}\n')

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fasta', '-a', 'aln.jsonl', '-o', 'cons.fasta',
            ])

            assert result.exit_code == 1
            assert 'Consensus failed' in result.output
            assert not Path('cons.fasta').exists()

    def test_consensus_bad_alignment_fails(self, runner, simple_fasta):
        with runner.isolated_filesystem():
            _write_inputs(simple_fasta, '{"read_id": "r2", "node_ids": [0, 99], "seq_ids": [0, 1]}\n')

            result = runner.invoke(main, [
                'consensus', '-r', 'reads.fasta', '-a', 'aln.jsonl', '-o', 'cons.fasta',
            ])

            assert result.exit_code == 1

    def test_consensus_missing_reads(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ['consensus', '-r', 'missing.fasta', '-o', 'cons.fasta'])

            assert result.exit_code != 0


class TestDotCommand:
    """Test the dot command."""

    def test_dot_output(self, runner, simple_fasta, snp_alignments):
        with runner.isolated_filesystem():
            _write_inputs(simple_fasta, snp_alignments)

            result = runner.invoke(main, [
                'dot', '-r', 'reads.fasta', '-a', 'aln.jsonl', '-o', 'graph.dot',
            ])

            assert result.exit_code == 0, result.output
            dot = Path('graph.dot').read_text()
            assert '2 -> 4 [style = dotted, arrowhead = none]' in dot
            assert '5 nodes, 5 edges' in result.output

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
