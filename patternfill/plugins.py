"""
Built-in pattern plugins.

This module contains the hexagon and stripe pattern implementations.
"""

import logging
from abc import abstractmethod
from functools import partial
from typing import List, Optional, Tuple

import numpy as np

from .base import PatternParameters, PatternPlugin, StrokedPolygonSet, check_spacing
from .constants import GRID_MARGIN_CELLS, LEGEND_BOUNDARY, MAX_CELLS
from .exceptions import ConfigurationError
from .pipeline import UnitConverter, run_pipeline, tessellate
from .utils import as_rings, get_bounding_box

logger = logging.getLogger(__name__)


class TessellatedPatternPlugin(PatternPlugin):
    """
    Pattern built by clipping a grid of cells to the boundary.

    Subclasses provide the cell grid through ``tessellator``; normalizing,
    clipping and stroke sizing are shared.
    """

    def __init__(self, to_render_units: Optional[UnitConverter] = None):
        """
        Args:
            to_render_units: Converts a normalized length to the renderer's
                             units for the stroke width, identity by default
        """
        super().__init__()
        self.to_render_units = to_render_units

    @abstractmethod
    def tessellator(self, parameters: PatternParameters):
        """Return the grid builder used for these parameters."""
        pass

    def generate(
        self,
        parameters: PatternParameters,
        boundary,
        aspect_ratio: float,
        is_legend: bool = False
    ) -> Optional[StrokedPolygonSet]:
        """
        Generate the clipped cell pattern for one boundary.

        Args:
            parameters: Pattern parameters
            boundary: Ring or list of rings (exterior first, then holes); may
                      be None for a legend key, which then fills the unit square
            aspect_ratio: Ratio between the y and x units of the target frame
            is_legend: Whether the call renders a legend key preview

        Returns:
            StrokedPolygonSet, or None when no cell overlaps the boundary

        Raises:
            ConfigurationError: If spacing, density or aspect ratio are invalid
            InvalidGeometryError: If the boundary cannot be clipped
        """
        self.validate_parameters(parameters, aspect_ratio)

        if is_legend:
            logger.debug("%s: generating legend key", self.name)
            if boundary is None:
                boundary = LEGEND_BOUNDARY

        contours, linewidth = run_pipeline(
            boundary,
            aspect_ratio,
            parameters.angle,
            parameters.spacing,
            parameters.density,
            to_render_units=self.to_render_units,
            tessellator=self.tessellator(parameters),
        )

        drawable = self.build_drawable(contours, linewidth, parameters)
        if drawable is None:
            logger.debug("%s: nothing to draw", self.name)
        return drawable


class HexPatternPlugin(TessellatedPatternPlugin):
    """
    Hexagonal tiling pattern.

    Covers the boundary with pointy-topped hexagons whose centers are
    ``spacing`` apart, clipped to the boundary and outlined with a stroke
    proportional to the spacing.
    """

    def __init__(self, to_render_units: Optional[UnitConverter] = None):
        super().__init__(to_render_units)
        self._name = "Hex"
        self._description = "Hexagonal tiling clipped to the boundary"
        self._version = "1.0.0"

    def tessellator(self, parameters: PatternParameters):
        return tessellate


def stripe_bands(
    boundary,
    spacing: float,
    origin: Optional[Tuple[float, float]] = None,
    width: float = 0.5
) -> np.ndarray:
    """
    Cover a boundary's bounding box with horizontal bands.

    Band centerlines are ``spacing`` apart, anchored at ``origin``.

    Args:
        boundary: Ring or list of rings to cover
        spacing: Distance between band centerlines
        origin: Anchor point, defaults to the bounding box minimum
        width: Band width as a fraction of spacing

    Returns:
        (m, 4, 2) array of counter-clockwise rectangles
    """
    spacing = check_spacing(spacing)
    rings = as_rings(boundary)
    if not rings:
        return np.zeros((0, 4, 2), dtype=float)

    min_x, min_y, max_x, max_y = get_bounding_box(rings)
    if origin is None:
        origin = (min_x, min_y)

    first = int(np.floor((min_y - origin[1]) / spacing)) - GRID_MARGIN_CELLS
    last = int(np.ceil((max_y - origin[1]) / spacing)) + GRID_MARGIN_CELLS
    if last - first + 1 > MAX_CELLS:
        raise ConfigurationError(
            f"spacing {spacing:g} needs {last - first + 1} stripes, more than the limit of {MAX_CELLS}"
        )

    half = 0.5 * width * spacing
    left = min_x - spacing
    right = max_x + spacing

    bands: List[List[Tuple[float, float]]] = []
    for k in range(first, last + 1):
        y = origin[1] + k * spacing
        bands.append([(left, y - half), (right, y - half), (right, y + half), (left, y + half)])

    return np.array(bands, dtype=float).reshape(-1, 4, 2)


class StripePatternPlugin(TessellatedPatternPlugin):
    """
    Parallel stripe pattern.

    One band per ``spacing``; the band width is half the spacing scaled by
    the density (capped at 1), so the pattern thins out as density drops.
    """

    def __init__(self, to_render_units: Optional[UnitConverter] = None):
        super().__init__(to_render_units)
        self._name = "Stripe"
        self._description = "Parallel bands clipped to the boundary"
        self._version = "1.0.0"

    def tessellator(self, parameters: PatternParameters):
        width = 0.5 * min(parameters.density, 1.0)
        return partial(stripe_bands, width=width)
