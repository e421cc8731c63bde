#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PoaWeaver v0.1.0

Package initialization and version metadata.

Author: PoaWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .version import __version__
from .poa_core import (
    Alignment,
    GraphCorruptionError,
    InvalidInputError,
    POAError,
    POAGraph,
    create_graph,
)

__all__ = [
    "__version__",
    "POAGraph",
    "create_graph",
    "Alignment",
    "POAError",
    "InvalidInputError",
    "GraphCorruptionError",
]

# PoaWeaver v0.1.0
# Any usage is subject to this software's license.
