#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for PoaWeaver.

This module provides the main CLI entry point and all subcommands for
building partial-order alignment graphs and extracting consensus sequences
and multiple sequence alignments.
"""

import json
import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import TEMPLATES, load_config, save_config_template, validate_config
from .io.io_core_module import SeqRead, read_alignments, read_sequences, write_fasta
from .poa_core import POAError
from .utils.pipeline import ConsensusPipeline


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    PoaWeaver: Partial-Order Alignment Consensus Engine

    Builds a partial-order alignment graph from reads and precomputed
    read-to-graph correspondences, and derives a consensus sequence and a
    multiple sequence alignment from it.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


def _setup_logging(ctx, config):
    """Configure root logging from CLI flags and the logging config section."""
    if ctx.obj.get('VERBOSE'):
        level = logging.DEBUG
    elif ctx.obj.get('QUIET'):
        level = logging.ERROR
    else:
        level = getattr(logging, str(config['logging']['level']).upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if config['logging'].get('log_file'):
        handlers.append(logging.FileHandler(config['logging']['log_file']))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _load_checked_config(config_file):
    config = load_config(Path(config_file) if config_file else None)
    errors = validate_config(config)
    if errors:
        for error in errors:
            click.echo(f"✗ {error}", err=True)
        sys.exit(1)
    return config


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='poaweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(TEMPLATES),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
    except (OSError, ValueError) as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nWeights:")
    if config['weights']['use_quality']:
        click.echo(f"  Source: FASTQ quality (offset {config['weights']['quality_offset']})")
    else:
        click.echo(f"  Source: uniform ({config['weights']['default_weight']})")

    click.echo("\nMSA:")
    click.echo(f"  Gap character: {config['msa']['gap_char']}")
    click.echo(f"  Consensus row: {config['msa']['include_consensus']}")
    click.echo(f"  Self-check: {config['msa']['check']}")

    click.echo("\nLogging:")
    click.echo(f"  Level: {config['logging']['level']}")


# ============================================================================
# Consensus Commands
# ============================================================================

@main.command()
@click.option('--reads', '-r', required=True, type=click.Path(exists=True),
              help='Input reads in insertion order (FASTA/FASTQ, optionally gzipped)')
@click.option('--alignments', '-a', type=click.Path(exists=True),
              help='Per-read correspondences (JSON lines) from an external aligner')
@click.option('--output', '-o', required=True, type=click.Path(),
              help='Output consensus file (FASTA)')
@click.option('--msa', 'msa_output', type=click.Path(),
              help='Also write the multiple sequence alignment (FASTA)')
@click.option('--dot', 'dot_output', type=click.Path(),
              help='Also write the graph in Graphviz dot format')
@click.option('--report', type=click.Path(),
              help='Also write a JSON run report')
@click.option('--include-consensus/--no-include-consensus', default=None,
              help='Append the consensus row to the MSA')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.pass_context
def consensus(ctx, reads, alignments, output, msa_output, dot_output, report,
              include_consensus, config_file):
    """
    Build a POA graph and write its consensus sequence.

    Reads are merged in file order. The node ids of each read's
    correspondence refer to the graph after all previous reads were merged;
    reads without a correspondence are added without overlap.
    """
    config = _load_checked_config(config_file)
    _setup_logging(ctx, config)

    try:
        read_list = read_sequences(reads)
        if not read_list:
            click.echo(f"✗ No reads found in {reads}", err=True)
            sys.exit(1)
        alignment_map = read_alignments(alignments) if alignments else {}

        result = ConsensusPipeline(config).run(
            read_list, alignment_map, include_consensus=include_consensus
        )
    except (POAError, ValueError, OSError) as e:
        click.echo(f"✗ Consensus failed: {e}", err=True)
        sys.exit(1)

    line_width = config['output']['line_width']
    consensus_id = config['output']['consensus_id']
    write_fasta([SeqRead(id=consensus_id, sequence=result.consensus)], output,
                line_width=line_width)
    click.echo(f"✓ Consensus ({len(result.consensus)} bp) written to {output}")

    if msa_output:
        ids = list(result.read_ids)
        if len(result.msa) > len(ids):
            ids.append(consensus_id)
        rows = [SeqRead(id=row_id, sequence=row) for row_id, row in zip(ids, result.msa)]
        write_fasta(rows, msa_output, line_width=0)
        click.echo(f"✓ MSA ({len(rows)} x {result.msa_width}) written to {msa_output}")

    if dot_output or config['output']['write_dot']:
        dot_path = Path(dot_output) if dot_output else Path(output).with_suffix('.dot')
        dot_path.write_text(result.graph.to_dot())
        click.echo(f"✓ Graph written to {dot_path}")

    if report:
        with open(report, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        click.echo(f"✓ Report written to {report}")


@main.command()
@click.option('--reads', '-r', required=True, type=click.Path(exists=True),
              help='Input reads in insertion order (FASTA/FASTQ, optionally gzipped)')
@click.option('--alignments', '-a', type=click.Path(exists=True),
              help='Per-read correspondences (JSON lines) from an external aligner')
@click.option('--output', '-o', required=True, type=click.Path(),
              help='Output graph file (dot)')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.pass_context
def dot(ctx, reads, alignments, output, config_file):
    """Build a POA graph and write it in Graphviz dot format."""
    config = _load_checked_config(config_file)
    _setup_logging(ctx, config)

    try:
        read_list = read_sequences(reads)
        alignment_map = read_alignments(alignments) if alignments else {}
        graph = ConsensusPipeline(config).build_graph(read_list, alignment_map)
    except (POAError, ValueError, OSError) as e:
        click.echo(f"✗ Graph construction failed: {e}", err=True)
        sys.exit(1)

    Path(output).write_text(graph.to_dot())
    click.echo(f"✓ Graph ({graph.num_nodes} nodes, {graph.num_edges} edges) written to {output}")


if __name__ == '__main__':
    sys.exit(main())
