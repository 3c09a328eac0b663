"""
Pattern fill plugin system for filling shapes with tessellated patterns.

This package provides a plugin-based architecture for pattern fills used by
plotting frameworks: a boundary polygon goes in, a set of clipped polygons
with a resolved stroke comes out, ready for any vector graphics backend.

Usage:
    from patternfill import create_default_registry, PatternParameters

    # Build a registry holding the built-in patterns
    registry = create_default_registry()

    # Get a plugin instance
    plugin = registry.get_plugin("hex")

    # Generate the fill
    square = [(0, 0), (1, 0), (1, 1), (0, 1)]
    params = PatternParameters(spacing=0.1, angle=30, density=0.2)
    drawable = plugin.generate(params, square, aspect_ratio=1.0)
"""

from .base import (
    ContourCollection,
    PatternParameters,
    PatternPlugin,
    PatternStrategy,
    StrokedPolygonSet,
)
from .exceptions import ConfigurationError, InvalidGeometryError, PatternFillError
from .pipeline import clip, finalize, normalize, npc_to_mm, npc_to_points, run_pipeline, tessellate
from .plugins import HexPatternPlugin, StripePatternPlugin
from .registry import PatternRegistry, create_default_registry
from .workers import fill_shapes

__version__ = "1.0.0"

__all__ = [
    'ContourCollection',
    'PatternParameters',
    'PatternPlugin',
    'PatternStrategy',
    'StrokedPolygonSet',
    'PatternFillError',
    'ConfigurationError',
    'InvalidGeometryError',
    'normalize',
    'tessellate',
    'clip',
    'finalize',
    'run_pipeline',
    'npc_to_points',
    'npc_to_mm',
    'HexPatternPlugin',
    'StripePatternPlugin',
    'PatternRegistry',
    'create_default_registry',
    'fill_shapes',
]
