"""
Library constants and default configuration values.
"""

# Pattern defaults (spacing in normalized panel units, angle in degrees)
DEFAULT_SPACING = 0.05
DEFAULT_ANGLE = 30.0
DEFAULT_DENSITY = 0.2  # Stroke width as a fraction of the converted spacing
DEFAULT_FILL = "#cccccc"
DEFAULT_COLOUR = "#333333"
DEFAULT_ALPHA = 1.0
DEFAULT_LINETYPE = "solid"

# Aspect ratio of a square panel
DEFAULT_ASPECT_RATIO = 1.0

# Legend keys without a boundary of their own fill the unit square
LEGEND_BOUNDARY = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))

# Tessellation limits
MAX_CELLS = 250_000  # Refuse lattices larger than this
GRID_MARGIN_CELLS = 1  # Extra hexagons beyond the bounding box on every side

# Numerical tolerances
AREA_EPSILON = 1e-12  # Rings at or below this area are treated as degenerate
COORD_EPSILON = 1e-9

# Unit conversion
POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4

# Line types understood by the render adapters (SVG dash arrays in stroke widths)
LINETYPE_DASHES = {
    "solid": None,
    "dashed": (4.0, 4.0),
    "dotted": (1.0, 3.0),
    "dotdash": (1.0, 3.0, 4.0, 3.0),
    "longdash": (7.0, 3.0),
    "twodash": (2.0, 2.0, 6.0, 2.0),
}
