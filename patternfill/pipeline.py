"""
Geometric pipeline shared by the tessellating patterns.

The fill runs in four stages:

    normalize  -> rescale y by the aspect ratio and rotate by the angle
    tessellate -> cover the normalized boundary with a hexagon lattice
    clip       -> intersect every cell with the boundary
    finalize   -> undo the rotation and scaling, size the stroke

Every stage is a pure function returning new arrays. An empty clip result
ends the pipeline early with nothing to draw.
"""

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.prepared import prep

from .base import ContourCollection, check_aspect_ratio, check_density, check_spacing
from .constants import AREA_EPSILON, GRID_MARGIN_CELLS, MAX_CELLS
from .exceptions import ConfigurationError, InvalidGeometryError
from .utils import (
    as_rings,
    bounding_diagonal,
    create_polygon_from_rings,
    get_bounding_box,
    iter_polygons,
    polygon_centroid,
    polygon_rings,
    rotate_points,
    scale_y,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Tessellator = Callable[[List[np.ndarray], float, Optional[Point]], np.ndarray]
UnitConverter = Callable[[float], float]

SQRT3 = math.sqrt(3.0)


def normalize(
    boundary,
    aspect_ratio: float,
    angle: float,
    center: Optional[Point] = None
) -> Tuple[List[np.ndarray], Point]:
    """
    Move a boundary into the isotropic, rotated frame the lattice is built in.

    The y coordinate is divided by the aspect ratio, then the rings are
    rotated by ``angle`` degrees about ``center``. When no center is given
    the centroid of the y-scaled boundary is used.

    Args:
        boundary: Ring of (x, y) points, or list of rings (exterior first)
        aspect_ratio: Ratio between the y and x units of the target frame
        angle: Boundary rotation in degrees, counter-clockwise. The lattice
               is built axis-aligned in this frame, so the drawn pattern
               ends up turned clockwise by the same angle
        center: Optional rotation center in the y-scaled frame

    Returns:
        Tuple of (normalized rings, rotation center). The center must be
        handed to finalize so the inverse rotation uses the same point.
    """
    aspect_ratio = check_aspect_ratio(aspect_ratio)
    rings = [scale_y(ring, 1.0 / aspect_ratio) for ring in as_rings(boundary)]

    if center is None:
        center = polygon_centroid(rings)

    return [rotate_points(ring, center, angle) for ring in rings], center


def _lattice_range(low: float, high: float, origin: float, step: float) -> Tuple[int, int]:
    first = math.floor((low - origin) / step) - GRID_MARGIN_CELLS
    last = math.ceil((high - origin) / step) + GRID_MARGIN_CELLS
    return first, last


def tessellate(boundary, spacing: float, origin: Optional[Point] = None) -> np.ndarray:
    """
    Cover a boundary's bounding box with pointy-topped hexagons.

    Centers sit on a triangular lattice anchored at ``origin``: neighbours in
    a row are ``spacing`` apart, rows are ``spacing * sqrt(3) / 2`` apart and
    every odd row is shifted by half a cell. The lattice reaches at least one
    cell beyond the bounding box on every side.

    Args:
        boundary: Ring or list of rings to cover
        spacing: Center-to-center distance between neighbouring hexagons
        origin: Lattice anchor point, defaults to the bounding box minimum

    Returns:
        (m, 6, 2) array of counter-clockwise hexagon rings

    Raises:
        ConfigurationError: If spacing is not positive or the lattice would
                            exceed MAX_CELLS cells
    """
    spacing = check_spacing(spacing)
    rings = as_rings(boundary)
    if not rings:
        return np.zeros((0, 6, 2), dtype=float)

    min_x, min_y, max_x, max_y = get_bounding_box(rings)
    if origin is None:
        origin = (min_x, min_y)

    radius = spacing / SQRT3
    row_height = 1.5 * radius

    row_first, row_last = _lattice_range(min_y, max_y, origin[1], row_height)
    col_first, col_last = _lattice_range(min_x, max_x, origin[0], spacing)
    # Odd rows are shifted right, so one more column on the left keeps them covered
    col_first -= 1

    n_cells = (row_last - row_first + 1) * (col_last - col_first + 1)
    if n_cells > MAX_CELLS:
        raise ConfigurationError(
            f"spacing {spacing:g} needs {n_cells} hexagons, more than the limit of {MAX_CELLS}"
        )

    rows = np.arange(row_first, row_last + 1)
    cols = np.arange(col_first, col_last + 1)
    col_grid, row_grid = np.meshgrid(cols, rows)
    centers_x = origin[0] + (col_grid + 0.5 * (row_grid % 2)) * spacing
    centers_y = origin[1] + row_grid * row_height
    centers = np.column_stack([centers_x.ravel(), centers_y.ravel()])

    # Vertices at 30, 90, ..., 330 degrees: a point on top, flat sides left and right
    theta = np.radians(30.0 + 60.0 * np.arange(6))
    corners = radius * np.column_stack([np.cos(theta), np.sin(theta)])

    return centers[:, None, :] + corners[None, :, :]


def clip(hex_grid: Sequence[np.ndarray], boundary) -> ContourCollection:
    """
    Intersect every cell of a grid with a boundary.

    Cells entirely inside the boundary are kept as they are, cells outside
    are dropped and cells crossing the boundary contribute their clipped
    parts. Every resulting ring gets the next sequential id.

    Args:
        hex_grid: Cell rings, e.g. the output of tessellate
        boundary: Ring or list of rings (exterior first, then holes)

    Returns:
        ContourCollection of open rings, empty when nothing overlaps

    Raises:
        InvalidGeometryError: If the boundary is invalid or the geometry
                              engine fails on it
    """
    polygon = create_polygon_from_rings(as_rings(boundary))
    if polygon is None:
        return ContourCollection.empty()

    prepared = prep(polygon)
    polygons: List[List[np.ndarray]] = []

    for cell in hex_grid:
        cell = np.asarray(cell, dtype=float)
        cell_polygon = Polygon(cell)
        if cell_polygon.area <= AREA_EPSILON:
            continue

        if prepared.contains(cell_polygon):
            polygons.append([cell.copy()])
            continue

        if not prepared.intersects(cell_polygon):
            continue

        try:
            intersection = polygon.intersection(cell_polygon)
        except GEOSException as e:
            raise InvalidGeometryError(f"Failed to clip cell against boundary: {e}") from e

        for part in iter_polygons(intersection):
            if part.area > AREA_EPSILON:
                polygons.append(polygon_rings(part))

    return ContourCollection.from_polygons(polygons)


def identity_units(value: float) -> float:
    return value


def npc_to_points(panel_size_pt: float) -> UnitConverter:
    """
    Converter from normalized panel units to points.

    Args:
        panel_size_pt: Size of one normalized unit in points, usually the
                       smaller panel dimension

    Returns:
        Function mapping a normalized length to points
    """
    def convert(value: float) -> float:
        return value * panel_size_pt
    return convert


def npc_to_mm(panel_size_mm: float) -> UnitConverter:
    """Converter from normalized panel units to millimetres."""
    def convert(value: float) -> float:
        return value * panel_size_mm
    return convert


def finalize(
    contours: ContourCollection,
    aspect_ratio: float,
    angle: float,
    spacing: float,
    density: float,
    center: Point,
    to_render_units: Optional[UnitConverter] = None
) -> Tuple[ContourCollection, float]:
    """
    Return clipped contours to the target frame and size their stroke.

    The contours are rotated by ``-angle`` about ``center`` (the point
    normalize used) and their y coordinate multiplied by the aspect ratio.

    Args:
        contours: Clipped contours in the normalized frame
        aspect_ratio: Ratio between the y and x units of the target frame
        angle: Rotation used by normalize, in degrees
        spacing: Lattice spacing in normalized units
        density: Stroke width as a fraction of the converted spacing
        center: Rotation center returned by normalize
        to_render_units: Converts a normalized length into the renderer's
                         units, identity by default

    Returns:
        Tuple of (contours in the target frame, stroke width)
    """
    aspect_ratio = check_aspect_ratio(aspect_ratio)
    spacing = check_spacing(spacing)
    density = check_density(density)
    convert = to_render_units or identity_units

    stroke_width = density * float(convert(spacing))

    final = contours.map_coords(
        lambda coords: scale_y(rotate_points(coords, center, -angle), aspect_ratio)
    )
    return final, stroke_width


def run_pipeline(
    boundary,
    aspect_ratio: float,
    angle: float,
    spacing: float,
    density: float,
    to_render_units: Optional[UnitConverter] = None,
    tessellator: Tessellator = tessellate
) -> Tuple[ContourCollection, float]:
    """
    Run normalize, tessellate, clip and finalize on one boundary.

    Configuration is checked before any geometry work is done.

    Args:
        boundary: Ring or list of rings in the target frame
        aspect_ratio: Ratio between the y and x units of the target frame
        angle: Pattern rotation in degrees
        spacing: Lattice spacing in normalized units
        density: Stroke width as a fraction of the converted spacing
        to_render_units: Optional unit converter for the stroke width
        tessellator: Function building the cell grid, hexagons by default

    Returns:
        Tuple of (contours, stroke width). The contours are empty when no
        cell overlaps the boundary or the spacing exceeds the diagonal of
        the y-scaled boundary's bounding box, whatever the angle.
    """
    check_aspect_ratio(aspect_ratio)
    check_spacing(spacing)
    check_density(density)

    normalized, center = normalize(boundary, aspect_ratio, angle)
    if not normalized:
        logger.debug("Degenerate boundary, nothing to fill")
        return finalize(ContourCollection.empty(), aspect_ratio, angle, spacing, density,
                        center, to_render_units)

    # A single cell would swallow the whole shape. Measured before rotation,
    # since the rotated bounding box grows with the angle
    extent = bounding_diagonal([scale_y(ring, 1.0 / aspect_ratio) for ring in as_rings(boundary)])
    if spacing > extent:
        logger.debug("Spacing %g exceeds the boundary extent, nothing to fill", spacing)
        return finalize(ContourCollection.empty(), aspect_ratio, angle, spacing, density,
                        center, to_render_units)

    grid = tessellator(normalized, spacing, center)
    logger.debug("Tessellated boundary with %d cells at spacing %g", len(grid), spacing)

    clipped = clip(grid, normalized)
    if clipped.is_empty:
        logger.debug("No cell overlaps the boundary")
    else:
        logger.debug("Clipped to %d contours", clipped.n_contours)

    return finalize(clipped, aspect_ratio, angle, spacing, density, center, to_render_units)
