"""
PoaWeaver v0.1.0

Configuration schema for PoaWeaver.

Defines all available configuration parameters with defaults and validation.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Per-position weights
    # ========================================================================
    'weights': {
        'default_weight': 1.0,  # Uniform weight when no quality is used
        'use_quality': True,  # Use FASTQ qualities when present
        'quality_offset': 33,  # PHRED+33
    },

    # ========================================================================
    # Multiple sequence alignment
    # ========================================================================
    'msa': {
        'gap_char': '-',
        'include_consensus': False,  # Append consensus row to MSA output
        'check': True,  # Verify every row reproduces its read
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'line_width': 80,  # FASTA line width (0 = single line)
        'write_dot': False,
        'consensus_id': 'consensus',
    },

    # ========================================================================
    # Logging
    # ========================================================================
    'logging': {
        'level': 'INFO',
        'log_file': None,
    },
}

TEMPLATES = ['default', 'ont', 'hifi']

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file, merged over the defaults.

    Args:
        config_path: Path to YAML config file (None = defaults only)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)

        if user_config:
            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'ont', 'hifi')
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template: {template}")

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'ont':
        # Nanopore qualities are poorly calibrated; weigh every base equally
        config['weights']['use_quality'] = False
        config['weights']['default_weight'] = 1.0

    elif template == 'hifi':
        config['weights']['use_quality'] = True
        config['msa']['include_consensus'] = True

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    weights = config.get('weights', {})
    default_weight = weights.get('default_weight', 1.0)
    if not isinstance(default_weight, (int, float)) or isinstance(default_weight, bool) \
            or default_weight < 0:
        errors.append(f"weights.default_weight must be a non-negative number, got {default_weight!r}")
    quality_offset = weights.get('quality_offset', 33)
    if quality_offset not in (33, 64):
        errors.append(f"weights.quality_offset must be 33 or 64, got {quality_offset!r}")

    gap_char = config.get('msa', {}).get('gap_char', '-')
    if not isinstance(gap_char, str) or len(gap_char) != 1:
        errors.append(f"msa.gap_char must be a single character, got {gap_char!r}")
    elif gap_char.isalpha():
        errors.append(f"msa.gap_char must not be a sequence letter, got {gap_char!r}")

    line_width = config.get('output', {}).get('line_width', 80)
    if not isinstance(line_width, int) or line_width < 0:
        errors.append(f"output.line_width must be a non-negative integer, got {line_width!r}")

    level = str(config.get('logging', {}).get('level', 'INFO')).upper()
    if level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid logging level: {level}")

    return errors

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
