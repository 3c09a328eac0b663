"""
Tests for the normalize / tessellate / clip / finalize pipeline.

Run with: python -m pytest patternfill/test_pipeline.py
"""

import math

import numpy as np
import pytest
from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from patternfill.base import ContourCollection
from patternfill.constants import MAX_CELLS
from patternfill.exceptions import ConfigurationError, InvalidGeometryError
from patternfill.pipeline import (
    clip,
    finalize,
    normalize,
    npc_to_mm,
    npc_to_points,
    run_pipeline,
    tessellate,
)
from patternfill.utils import rotate_points

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def regular_polygon(n, radius, center=(0.5, 0.5)):
    theta = 2 * np.pi * np.arange(n) / n
    return np.column_stack([center[0] + radius * np.cos(theta), center[1] + radius * np.sin(theta)])


def shapes(contours):
    """Shapely polygons of a contour collection, one per path id."""
    return [Polygon(rings[0], rings[1:]) for rings in contours.polygons()]


def full_hex_area(spacing):
    return math.sqrt(3) / 2 * spacing ** 2


def test_round_trip_identity():
    """Normalize then finalize with angle 0 and aspect 1 returns the input."""
    rings, center = normalize(UNIT_SQUARE, 1.0, 0.0)
    collection = ContourCollection.from_polygons([rings])

    final, _ = finalize(collection, 1.0, 0.0, 0.5, 1.0, center)

    assert np.allclose(rings[0], UNIT_SQUARE), "Identity normalize should not move vertices"
    assert np.allclose(final.coords, UNIT_SQUARE), "Identity round trip should not move vertices"


def test_round_trip_rotated_and_scaled():
    """Finalize undoes normalize for any angle and aspect ratio."""
    boundary = regular_polygon(5, 0.3)
    rings, center = normalize(boundary, 2.5, 37.0)
    collection = ContourCollection.from_polygons([rings])

    final, _ = finalize(collection, 2.5, 37.0, 0.1, 1.0, center)

    assert np.allclose(final.coords, boundary, atol=1e-12)


def test_normalize_is_pure():
    """Normalize returns new arrays and leaves its input untouched."""
    boundary = np.array(UNIT_SQUARE)
    original = boundary.copy()

    rings, _ = normalize(boundary, 2.0, 45.0)

    assert np.array_equal(boundary, original)
    assert rings[0] is not boundary


def test_normalize_scales_then_rotates_about_centroid():
    rings, center = normalize(UNIT_SQUARE, 2.0, 90.0)

    assert center == pytest.approx((0.5, 0.25))
    # (0, 0) -> (0, 0) scaled -> rotated 90 degrees about (0.5, 0.25)
    assert np.allclose(rings[0][0], (0.75, -0.25))


def test_tessellate_hexagon_shape():
    """Hexagons are pointy-topped with flat sides spacing apart."""
    spacing = 0.5
    grid = tessellate(UNIT_SQUARE, spacing)

    assert grid.ndim == 3 and grid.shape[1:] == (6, 2)

    hexagon = grid[0]
    center = hexagon.mean(axis=0)
    top = hexagon[np.argmax(hexagon[:, 1])]
    assert top[0] == pytest.approx(center[0]), "Top vertex should be a point"
    assert np.ptp(hexagon[:, 0]) == pytest.approx(spacing), "Width should equal spacing"
    assert np.ptp(hexagon[:, 1]) == pytest.approx(2 * spacing / math.sqrt(3))
    assert Polygon(hexagon).area == pytest.approx(full_hex_area(spacing))


def test_tessellate_lattice_spacing():
    """Neighbouring centers are spacing apart along both lattice axes."""
    spacing = 0.25
    grid = tessellate(UNIT_SQUARE, spacing)
    centers = grid.mean(axis=1)

    distances = np.linalg.norm(centers[:, None, :] - centers[None, :, :], axis=-1)
    np.fill_diagonal(distances, np.inf)
    nearest = distances.min(axis=1)

    assert np.allclose(nearest, spacing)
    # Six neighbours for a cell in the middle of the lattice
    middle = np.argmin(np.linalg.norm(centers - (0.5, 0.5), axis=1))
    assert np.sum(np.isclose(distances[middle], spacing)) == 6


def test_tessellate_covers_extended_bounding_box():
    spacing = 0.5
    grid = tessellate(UNIT_SQUARE, spacing)
    union = unary_union([Polygon(cell) for cell in grid])

    extended = box(-spacing, -spacing, 1 + spacing, 1 + spacing)
    assert union.buffer(1e-9).contains(extended)


def test_tessellate_is_disjoint():
    grid = tessellate(UNIT_SQUARE, 0.3)
    cells = [Polygon(cell) for cell in grid]
    union = unary_union(cells)

    assert union.area == pytest.approx(sum(cell.area for cell in cells), rel=1e-9)


def test_tessellate_anchored_at_origin():
    grid = tessellate(UNIT_SQUARE, 0.2, origin=(0.37, 0.61))
    centers = grid.mean(axis=1)

    assert np.min(np.linalg.norm(centers - (0.37, 0.61), axis=1)) < 1e-12


@pytest.mark.parametrize("spacing", [0, -0.5, float("nan"), float("inf")])
def test_tessellate_rejects_bad_spacing(spacing):
    with pytest.raises(ConfigurationError):
        tessellate(UNIT_SQUARE, spacing)


def test_tessellate_rejects_huge_lattice():
    with pytest.raises(ConfigurationError, match=str(MAX_CELLS)):
        tessellate(UNIT_SQUARE, 1e-4)


def test_tessellate_degenerate_boundary():
    assert tessellate([(0.5, 0.5)], 0.1).shape == (0, 6, 2)


def test_clip_passes_inside_cells_unchanged():
    grid = tessellate(UNIT_SQUARE, 0.25, origin=(0.5, 0.5))
    contours = clip(grid, UNIT_SQUARE)

    inside = [cell for cell in grid if Polygon(UNIT_SQUARE).contains(Polygon(cell))]
    rings = [ring for _, ring in contours.contours()]

    assert inside, "Some cells should lie inside the square"
    for cell in inside:
        assert any(ring.shape == cell.shape and np.array_equal(ring, cell) for ring in rings)


def test_clip_ids_and_open_rings():
    contours = clip(tessellate(UNIT_SQUARE, 0.3), UNIT_SQUARE)

    ring_ids = [ring_id for ring_id, _ in contours.contours()]
    assert ring_ids == list(range(contours.n_contours)), "Ids should be sequential from 0"

    # Each id occupies one contiguous block
    changes = np.count_nonzero(np.diff(contours.ids)) + 1
    assert changes == contours.n_contours

    for _, ring in contours.contours():
        assert len(ring) >= 3
        assert not np.allclose(ring[0], ring[-1]), "Rings should be stored open"


def test_clip_invalid_boundary():
    bowtie = [(0, 0), (2, 2), (2, 0), (0, 1)]
    with pytest.raises(InvalidGeometryError):
        clip(tessellate(bowtie, 0.5), bowtie)


def test_clip_zero_area_boundary():
    line = [(0, 0), (1, 1), (2, 2)]
    assert clip(tessellate(UNIT_SQUARE, 0.5), line).is_empty


def test_clip_far_away_grid():
    grid = tessellate([(10, 10), (11, 10), (11, 11)], 0.2)
    assert clip(grid, UNIT_SQUARE).is_empty


def test_square_scenario():
    """Unit square at spacing 0.5: full and partial hexagons cover the square."""
    contours, _ = run_pipeline(UNIT_SQUARE, 1.0, 0.0, 0.5, 1.0)
    polygons = shapes(contours)

    full = [p for p in polygons if len(p.exterior.coords) == 7
            and p.area == pytest.approx(full_hex_area(0.5))]
    assert len(full) >= 1, "At least one hexagon should fit inside"
    assert len(polygons) > len(full), "Boundary hexagons should be clipped"
    assert sum(p.area for p in polygons) == pytest.approx(1.0, rel=1e-9)

    assert contours.coords.min() >= -1e-9
    assert contours.coords.max() <= 1 + 1e-9


@pytest.mark.parametrize("aspect_ratio,angle,spacing", [
    (1.0, 0.0, 0.13),
    (1.7, 17.0, 0.13),
    (0.6, -75.0, 0.08),
    (1.0, 30.0, 0.31),
])
def test_coverage_of_convex_boundary(aspect_ratio, angle, spacing):
    boundary = regular_polygon(7, 0.45)
    contours, _ = run_pipeline(boundary, aspect_ratio, angle, spacing, 1.0)

    total = sum(p.area for p in shapes(contours))
    assert total == pytest.approx(Polygon(boundary).area, rel=1e-7)


def test_disjoint_output():
    contours, _ = run_pipeline(regular_polygon(9, 0.45), 1.3, 20.0, 0.2, 1.0)
    polygons = shapes(contours)

    for i, first in enumerate(polygons):
        for second in polygons[i + 1:]:
            assert first.intersection(second).area < 1e-10


def test_concave_boundary_splits_cells():
    """Concave boundaries are covered exactly, one path per clipped part."""
    u_shape = [(0, 0), (1, 0), (1, 1), (0.55, 1), (0.55, 0.3), (0.45, 0.3), (0.45, 1), (0, 1)]
    contours, _ = run_pipeline(u_shape, 1.0, 0.0, 0.4, 1.0)
    polygons = shapes(contours)

    assert sum(p.area for p in polygons) == pytest.approx(Polygon(u_shape).area, rel=1e-9)
    assert contours.n_paths == contours.n_contours
    assert contours.n_contours == len(polygons)


def test_boundary_with_hole():
    outer = UNIT_SQUARE
    hole = [(0.4, 0.4), (0.6, 0.4), (0.6, 0.6), (0.4, 0.6)]
    contours, _ = run_pipeline([outer, hole], 1.0, 0.0, 0.5, 1.0)

    polygons = list(contours.polygons())
    assert any(len(rings) == 2 for rings in polygons), "The center cell should keep the hole"
    assert sum(p.area for p in shapes(contours)) == pytest.approx(1 - 0.04, rel=1e-9)


def test_angle_rotates_pattern_rigidly():
    """On a 12-gon, the angle 30 fill is the angle 0 fill rotated by 30 degrees."""
    boundary = regular_polygon(12, 0.4)
    center = (0.5, 0.5)

    straight, _ = run_pipeline(boundary, 1.0, 0.0, 0.2, 1.0)
    turned, _ = run_pipeline(boundary, 1.0, 30.0, 0.2, 1.0)

    expected = shapes(straight.map_coords(lambda coords: rotate_points(coords, center, 30.0)))
    actual = shapes(turned)

    expected = [p for p in expected if p.area > 1e-8]
    actual = [p for p in actual if p.area > 1e-8]
    assert len(expected) == len(actual)
    for polygon in expected:
        assert any(polygon.symmetric_difference(other).area < 1e-8 for other in actual)


def test_angle_interior_cells_on_rotated_lattice():
    """Interior cells of an angled fill sit on the rotated straight lattice."""
    spacing = 0.2
    turned, _ = run_pipeline(UNIT_SQUARE, 1.0, 30.0, spacing, 1.0)
    lattice = tessellate(UNIT_SQUARE, spacing, origin=(0.5, 0.5)).mean(axis=1)

    full = [ring for _, ring in turned.contours()
            if len(ring) == 6 and Polygon(ring).area == pytest.approx(full_hex_area(spacing))]
    assert full, "Some hexagons should fit inside"

    for ring in full:
        center = rotate_points(ring.mean(axis=0), (0.5, 0.5), 30.0)
        assert np.min(np.linalg.norm(lattice - center, axis=1)) < 1e-9


def test_aspect_ratio_stretches_cells():
    spacing = 0.2
    contours, _ = run_pipeline(UNIT_SQUARE, 2.0, 0.0, spacing, 1.0)

    full = [ring for _, ring in contours.contours()
            if len(ring) == 6 and Polygon(ring).area == pytest.approx(2 * full_hex_area(spacing))]
    assert full, "Some hexagons should fit inside"

    ring = full[0]
    assert np.ptp(ring[:, 0]) == pytest.approx(spacing)
    assert np.ptp(ring[:, 1]) == pytest.approx(4 * spacing / math.sqrt(3))


def test_stroke_width_monotonic_in_density():
    empty = ContourCollection.empty()
    widths = [finalize(empty, 1.0, 0.0, 0.1, density, (0, 0))[1]
              for density in (0.0, 0.1, 0.5, 1.0, 2.0)]

    assert all(a < b for a, b in zip(widths, widths[1:]))


def test_stroke_width_proportional_to_spacing():
    empty = ContourCollection.empty()
    _, narrow = finalize(empty, 1.0, 0.0, 0.1, 0.3, (0, 0))
    _, wide = finalize(empty, 1.0, 0.0, 0.2, 0.3, (0, 0))

    assert wide == pytest.approx(2 * narrow)


def test_stroke_width_unit_conversion():
    empty = ContourCollection.empty()
    _, points = finalize(empty, 1.0, 0.0, 0.1, 0.5, (0, 0), to_render_units=npc_to_points(144.0))
    _, mm = finalize(empty, 1.0, 0.0, 0.1, 0.5, (0, 0), to_render_units=npc_to_mm(50.8))

    assert points == pytest.approx(7.2)
    assert mm == pytest.approx(2.54)


def test_finalize_rejects_negative_density():
    with pytest.raises(ConfigurationError):
        finalize(ContourCollection.empty(), 1.0, 0.0, 0.1, -1.0, (0, 0))


def test_single_point_boundary_is_empty():
    contours, width = run_pipeline([(0.5, 0.5)], 1.0, 0.0, 0.1, 1.0)

    assert contours.is_empty
    assert width == pytest.approx(0.1)


def test_spacing_larger_than_diagonal_is_empty():
    contours, _ = run_pipeline(UNIT_SQUARE, 1.0, 0.0, 2.0, 1.0)
    assert contours.is_empty


@pytest.mark.parametrize("angle", [0.0, 30.0, 45.0])
def test_spacing_larger_than_diagonal_is_empty_at_any_angle(angle):
    # Between the square's diagonal and the diagonal of its 45 degree bounding box
    contours, _ = run_pipeline(UNIT_SQUARE, 1.0, angle, 1.5, 1.0)
    assert contours.is_empty


def test_symmetric_bowtie_is_invalid():
    # Signed area is zero, yet the ring crosses itself
    bowtie = [(0, 0), (1, 1), (1, 0), (0, 1)]

    with pytest.raises(InvalidGeometryError):
        clip(tessellate(bowtie, 0.2), bowtie)
    with pytest.raises(InvalidGeometryError):
        run_pipeline(bowtie, 1.0, 0.0, 0.2, 1.0)


@pytest.mark.parametrize("kwargs", [
    dict(aspect_ratio=0.0),
    dict(aspect_ratio=-1.0),
    dict(spacing=0.0),
    dict(density=-0.1),
])
def test_run_pipeline_rejects_bad_configuration(kwargs):
    args = dict(boundary=UNIT_SQUARE, aspect_ratio=1.0, angle=0.0, spacing=0.1, density=1.0)
    args.update(kwargs)
    with pytest.raises(ConfigurationError):
        run_pipeline(**args)
