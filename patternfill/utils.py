"""
Utility functions for pattern fill geometry.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.validation import explain_validity

from .constants import AREA_EPSILON, COORD_EPSILON
from .exceptions import InvalidGeometryError


def as_ring(points) -> np.ndarray:
    """
    Convert a sequence of (x, y) points into an open (n, 2) ring.

    A duplicate closing vertex is dropped.

    Args:
        points: Sequence of (x, y) points or an (n, 2) array

    Returns:
        New (n, 2) float array
    """
    ring = np.array(points, dtype=float).reshape(-1, 2)
    if len(ring) > 1 and np.allclose(ring[0], ring[-1], atol=COORD_EPSILON, rtol=0.0):
        ring = ring[:-1]
    return ring


def as_rings(boundary) -> List[np.ndarray]:
    """
    Normalize a boundary into a list of open rings.

    Args:
        boundary: A single ring of (x, y) points, or a list of rings where
                  the first ring is the exterior and the rest are holes

    Returns:
        List of (n, 2) arrays; rings with fewer than 3 vertices are dropped
        (a degenerate exterior drops the whole boundary)
    """
    if boundary is None or len(boundary) == 0:
        return []

    if np.ndim(boundary[0]) == 1:
        candidates = [as_ring(boundary)]
    else:
        candidates = [as_ring(ring) for ring in boundary]

    if len(candidates[0]) < 3:
        return []

    return [ring for ring in candidates if len(ring) >= 3]


def get_bounding_box(rings: Sequence[np.ndarray]) -> Tuple[float, float, float, float]:
    """
    Calculate the bounding box of a set of rings.

    Args:
        rings: List of (n, 2) rings

    Returns:
        Tuple of (min_x, min_y, max_x, max_y)
    """
    if not rings:
        return (0.0, 0.0, 0.0, 0.0)

    points = np.concatenate([np.asarray(ring, dtype=float) for ring in rings])
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)

    return (float(min_x), float(min_y), float(max_x), float(max_y))


def bounding_diagonal(rings: Sequence[np.ndarray]) -> float:
    """Length of the bounding box diagonal of a set of rings."""
    min_x, min_y, max_x, max_y = get_bounding_box(rings)
    return float(np.hypot(max_x - min_x, max_y - min_y))


def ring_signed_area(ring: np.ndarray) -> float:
    """Shoelace area, positive for counter-clockwise rings."""
    x = ring[:, 0]
    y = ring[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_area(rings: Sequence[np.ndarray]) -> float:
    """Area of the exterior ring minus the area of the holes."""
    if not rings:
        return 0.0
    area = abs(ring_signed_area(rings[0]))
    for hole in rings[1:]:
        area -= abs(ring_signed_area(hole))
    return area


def polygon_centroid(rings: Sequence[np.ndarray]) -> Tuple[float, float]:
    """
    Area centroid of a polygon given as rings (exterior first, then holes).

    Falls back to the mean of all vertices when the polygon has no area.
    """
    if not rings:
        return (0.0, 0.0)

    total_area = 0.0
    moment_x = 0.0
    moment_y = 0.0

    for index, ring in enumerate(rings):
        x = ring[:, 0]
        y = ring[:, 1]
        x_next = np.roll(x, -1)
        y_next = np.roll(y, -1)
        cross = x * y_next - x_next * y
        signed = 0.5 * float(cross.sum())
        if abs(signed) <= AREA_EPSILON:
            continue

        # Exterior counts positive, holes negative, whatever their winding
        sign = 1.0 if index == 0 else -1.0
        orientation = 1.0 if signed > 0 else -1.0
        weight = sign * orientation
        total_area += sign * abs(signed)
        moment_x += weight * float(((x + x_next) * cross).sum()) / 6.0
        moment_y += weight * float(((y + y_next) * cross).sum()) / 6.0

    if abs(total_area) <= AREA_EPSILON:
        points = np.concatenate(rings)
        mean = points.mean(axis=0)
        return (float(mean[0]), float(mean[1]))

    return (moment_x / total_area, moment_y / total_area)


def rotate_points(
    points: np.ndarray,
    center: Tuple[float, float],
    angle_degrees: float
) -> np.ndarray:
    """
    Rotate points around a center point.

    Args:
        points: (n, 2) array of points, or a single (x, y) point
        center: Center of rotation (x, y)
        angle_degrees: Rotation angle in degrees (counter-clockwise)

    Returns:
        New array of rotated points with the input's shape
    """
    points = np.asarray(points, dtype=float)
    angle_rad = np.radians(angle_degrees)
    cos_a = np.cos(angle_rad)
    sin_a = np.sin(angle_rad)

    # Translate to origin
    dx = points[..., 0] - center[0]
    dy = points[..., 1] - center[1]

    rotated = np.empty_like(points)
    rotated[..., 0] = dx * cos_a - dy * sin_a + center[0]
    rotated[..., 1] = dx * sin_a + dy * cos_a + center[1]
    return rotated


def scale_y(points: np.ndarray, factor: float) -> np.ndarray:
    """Return a copy of the points with the y coordinate multiplied by factor."""
    scaled = np.array(points, dtype=float)
    scaled[..., 1] *= factor
    return scaled


def create_polygon_from_rings(rings: Sequence[np.ndarray]) -> Optional[Polygon]:
    """
    Create a Shapely Polygon from rings.

    Args:
        rings: List of rings. First is the exterior, rest are holes.

    Returns:
        Shapely Polygon, or None if the rings enclose no area

    Raises:
        InvalidGeometryError: If the rings describe an invalid polygon,
                              e.g. a self-intersecting exterior
    """
    if not rings or len(rings[0]) < 3:
        return None

    polygon = Polygon(rings[0], [hole for hole in rings[1:] if len(hole) >= 3])

    # Collinear or coincident points; a symmetric bowtie also has zero signed
    # area but a hull with area, and must fail the validity check below
    if polygon.is_empty or polygon.convex_hull.area <= AREA_EPSILON:
        return None

    if not polygon.is_valid:
        raise InvalidGeometryError(f"Invalid boundary polygon: {explain_validity(polygon)}")

    if polygon.area <= AREA_EPSILON:
        return None

    return polygon


def iter_polygons(geometry: BaseGeometry) -> Iterator[Polygon]:
    """
    Yield the areal parts of a geometry.

    Points and lines produced where shapes merely touch are skipped.
    """
    if geometry.is_empty:
        return

    if geometry.geom_type == 'Polygon':
        yield geometry
    elif geometry.geom_type in ('MultiPolygon', 'GeometryCollection'):
        for part in geometry.geoms:
            yield from iter_polygons(part)


def polygon_rings(polygon: Polygon) -> List[np.ndarray]:
    """
    Open rings of a polygon, exterior counter-clockwise and holes clockwise.
    """
    polygon = orient(polygon, sign=1.0)
    rings = [as_ring(polygon.exterior.coords)]
    rings.extend(as_ring(interior.coords) for interior in polygon.interiors)
    return rings
