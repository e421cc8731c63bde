#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Tests for configuration loading, templates and validation.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
import yaml

from poaweaver.config import (
    DEFAULT_CONFIG,
    load_config,
    save_config_template,
    validate_config,
)


class TestLoadConfig:
    """Test loading and merging."""

    def test_defaults(self):
        config = load_config()

        assert config == DEFAULT_CONFIG
        assert validate_config(config) == []

    def test_defaults_are_copied(self):
        config = load_config()
        config['msa']['gap_char'] = '.'

        assert DEFAULT_CONFIG['msa']['gap_char'] == '-'

    def test_partial_override(self, temp_output_dir):
        """Keys missing from the file keep their defaults."""
        path = temp_output_dir / "config.yaml"
        path.write_text(yaml.dump({'msa': {'gap_char': '.'}}))

        config = load_config(path)

        assert config['msa']['gap_char'] == '.'
        assert config['msa']['check'] is True
        assert config['weights'] == DEFAULT_CONFIG['weights']

    def test_empty_file(self, temp_output_dir):
        path = temp_output_dir / "empty.yaml"
        path.write_text("")

        assert load_config(path) == DEFAULT_CONFIG

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            load_config(temp_output_dir / "missing.yaml")


class TestTemplates:
    """Test template generation."""

    @pytest.mark.parametrize("template", ['default', 'ont', 'hifi'])
    def test_templates_are_valid(self, temp_output_dir, template):
        path = temp_output_dir / f"{template}.yaml"
        save_config_template(path, template=template)

        config = load_config(path)
        assert validate_config(config) == []

    def test_ont_template_ignores_quality(self, temp_output_dir):
        path = temp_output_dir / "ont.yaml"
        save_config_template(path, template='ont')

        assert load_config(path)['weights']['use_quality'] is False

    def test_hifi_template_includes_consensus(self, temp_output_dir):
        path = temp_output_dir / "hifi.yaml"
        save_config_template(path, template='hifi')

        assert load_config(path)['msa']['include_consensus'] is True

    def test_unknown_template(self, temp_output_dir):
        with pytest.raises(ValueError):
            save_config_template(temp_output_dir / "x.yaml", template='illumina')


class TestValidateConfig:
    """Test validation messages."""

    @pytest.mark.parametrize("section, key, value, fragment", [
        ('weights', 'default_weight', -1.0, 'default_weight'),
        ('weights', 'default_weight', 'heavy', 'default_weight'),
        ('weights', 'quality_offset', 50, 'quality_offset'),
        ('msa', 'gap_char', '--', 'gap_char'),
        ('msa', 'gap_char', 'N', 'sequence letter'),
        ('output', 'line_width', -5, 'line_width'),
        ('logging', 'level', 'LOUD', 'logging level'),
    ])
    def test_invalid_values(self, section, key, value, fragment):
        config = load_config()
        config[section][key] = value

        errors = validate_config(config)

        assert len(errors) == 1
        assert fragment in errors[0]

    def test_lowercase_level_accepted(self):
        config = load_config()
        config['logging']['level'] = 'debug'

        assert validate_config(config) == []

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
