"""
Integration utilities for callers holding loose rings and many drawables.

Host frameworks often hand over a bag of rings (islands and their holes
mixed together). This module groups them into boundaries the plugins
accept, and summarizes the generated drawables.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from shapely.geometry import Point, Polygon

from .base import StrokedPolygonSet
from .utils import as_ring, polygon_area, ring_signed_area


def group_rings_into_islands(rings: Sequence) -> List[List[np.ndarray]]:
    """
    Group rings into separate islands, identifying which rings are holes.

    Rings are visited from the largest to the smallest area. A ring lying
    inside an island's exterior becomes a hole of that island, unless it
    also lies inside one of the island's holes, in which case it starts a
    new island.

    Args:
        rings: Closed or open rings of (x, y) points

    Returns:
        List of boundaries, each [exterior, hole1, hole2, ...]
    """
    candidates = [as_ring(ring) for ring in rings]
    candidates = [ring for ring in candidates if len(ring) >= 3]
    candidates.sort(key=lambda ring: abs(ring_signed_area(ring)), reverse=True)

    islands: List[List[np.ndarray]] = []
    shapes: List[List[Polygon]] = []

    for ring in candidates:
        probe = Point(ring[0])
        owner = None
        for index, island_shapes in enumerate(shapes):
            exterior, holes = island_shapes[0], island_shapes[1:]
            if exterior.contains(probe) and not any(hole.contains(probe) for hole in holes):
                owner = index
                break

        if owner is None:
            islands.append([ring])
            shapes.append([Polygon(ring)])
        else:
            islands[owner].append(ring)
            shapes[owner].append(Polygon(ring))

    return islands


def get_fill_statistics(drawables: Sequence[Optional[StrokedPolygonSet]]) -> Dict[str, Any]:
    """
    Calculate statistics about generated pattern fills.

    Args:
        drawables: Results of pattern generation, None for empty fills

    Returns:
        Dictionary with statistics
    """
    total_contours = 0
    total_polygons = 0
    total_vertices = 0
    total_area = 0.0
    empty_fills = 0

    for drawable in drawables:
        if drawable is None:
            empty_fills += 1
            continue

        total_contours += drawable.contours.n_contours
        total_vertices += len(drawable.contours)
        for rings in drawable.contours.polygons():
            total_polygons += 1
            total_area += polygon_area(rings)

    stats = {
        'total_fills': len(drawables),
        'empty_fills': empty_fills,
        'total_contours': total_contours,
        'total_polygons': total_polygons,
        'total_vertices': total_vertices,
        'total_area': total_area,
        'avg_polygon_area': total_area / total_polygons if total_polygons else 0.0
    }

    return stats
