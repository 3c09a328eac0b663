"""
Adapters handing drawables to vector graphics backends.

Nothing here draws; the functions only translate a StrokedPolygonSet into
the path objects of matplotlib and SVG.
"""

from typing import Dict, Optional

import numpy as np
from matplotlib.patches import PathPatch
from matplotlib.path import Path

from .base import StrokedPolygonSet
from .constants import LINETYPE_DASHES


def to_matplotlib_path(drawable: Optional[StrokedPolygonSet]) -> Path:
    """
    Build a compound matplotlib Path with one closed subpath per ring.

    Args:
        drawable: Drawable to convert, None gives an empty path

    Returns:
        matplotlib.path.Path
    """
    if drawable is None or drawable.contours.is_empty:
        return Path(np.zeros((0, 2)))

    vertices = []
    codes = []
    for _, ring in drawable.contours.contours():
        vertices.append(ring)
        vertices.append(ring[:1])
        ring_codes = np.full(len(ring) + 1, Path.LINETO, dtype=Path.code_type)
        ring_codes[0] = Path.MOVETO
        ring_codes[-1] = Path.CLOSEPOLY
        codes.append(ring_codes)

    return Path(np.concatenate(vertices), np.concatenate(codes))


def matplotlib_linestyle(linetype: str):
    """Map a line type name to a matplotlib linestyle."""
    dashes = LINETYPE_DASHES.get(linetype)
    if dashes is None:
        return "solid"
    return (0, dashes)


def to_path_patch(drawable: StrokedPolygonSet, **kwargs) -> PathPatch:
    """
    Build a matplotlib PathPatch styled from the drawable.

    Keyword arguments override the derived style.
    """
    style = {
        "facecolor": drawable.fill,
        "edgecolor": drawable.colour,
        "alpha": drawable.alpha,
        "linewidth": drawable.linewidth,
        "linestyle": matplotlib_linestyle(drawable.linetype),
    }
    style.update(kwargs)
    return PathPatch(to_matplotlib_path(drawable), **style)


def to_svg_path_data(drawable: Optional[StrokedPolygonSet], precision: int = 6) -> str:
    """
    Build the ``d`` attribute of an SVG path element.

    Each ring becomes ``M x y L x y ... Z``.
    """
    if drawable is None:
        return ""

    commands = []
    for _, ring in drawable.contours.contours():
        points = [f"{x:.{precision}g} {y:.{precision}g}" for x, y in ring]
        commands.append("M " + " L ".join(points) + " Z")
    return " ".join(commands)


def svg_attributes(drawable: StrokedPolygonSet) -> Dict[str, str]:
    """Presentation attributes for an SVG path element."""
    attributes = {
        "fill": drawable.fill,
        "fill-opacity": f"{drawable.alpha:g}",
        "fill-rule": "evenodd",
        "stroke": drawable.colour,
        "stroke-opacity": f"{drawable.alpha:g}",
        "stroke-width": f"{drawable.linewidth:g}",
    }
    dashes = LINETYPE_DASHES.get(drawable.linetype)
    if dashes is not None:
        attributes["stroke-dasharray"] = ",".join(f"{d * drawable.linewidth:g}" for d in dashes)
    return attributes
