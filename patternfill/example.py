#!/usr/bin/env python3
"""
Example script demonstrating the pattern fill plugin system.

This script shows how to:
1. Fill a panel-sized square with the built-in hex pattern
2. Compare pattern angles
3. Fill a non-square panel through the aspect ratio
4. Fill a shape with a hole and several shapes at once
5. Inspect the registry
"""

import logging

import matplotlib.pyplot as plt
import numpy as np

from patternfill import PatternParameters, create_default_registry, fill_shapes, npc_to_points
from patternfill.integration import get_fill_statistics, group_rings_into_islands
from patternfill.logging_config import setup_logging
from patternfill.render import to_path_patch

registry = create_default_registry()


def show_drawables(ax, drawables, boundaries, title: str):
    """Add drawables and their boundary outlines to an axis."""
    for drawable in drawables:
        if drawable is not None:
            ax.add_patch(to_path_patch(drawable))

    for boundary in boundaries:
        ring = np.vstack([boundary, boundary[:1]])
        ax.plot(ring[:, 0], ring[:, 1], color="black", linewidth=1.0)

    ax.set_xlim(-0.05, 1.05)
    ax.set_ylim(-0.05, 1.05)
    ax.set_aspect('equal')
    ax.set_title(title)


def regular_polygon(n: int, radius: float, center=(0.5, 0.5)) -> np.ndarray:
    theta = np.linspace(0, 2 * np.pi, n, endpoint=False)
    return np.column_stack([center[0] + radius * np.cos(theta), center[1] + radius * np.sin(theta)])


def example_1_basic_square():
    """Example 1: Unit square with hexagons."""
    print("=" * 60)
    print("Example 1: Unit Square with Hex Fill")
    print("=" * 60)

    square = np.array([(0, 0), (1, 0), (1, 1), (0, 1)], dtype=float)

    # Stroke widths in points for a 300pt wide panel
    plugin = registry.get_plugin("hex", to_render_units=npc_to_points(300.0))
    params = PatternParameters(spacing=0.1, angle=0, density=0.05, fill="#9ecae1")

    drawable = plugin.generate(params, square, aspect_ratio=1.0)
    print(f"Generated {drawable.contours.n_contours} contours, linewidth {drawable.linewidth:.2f}pt")

    fig, ax = plt.subplots(figsize=(6, 6))
    show_drawables(ax, [drawable], [square], "Example 1: Hex fill")
    plt.tight_layout()
    plt.show()


def example_2_angles():
    """Example 2: The same circle filled at several angles."""
    print("\n" + "=" * 60)
    print("Example 2: Pattern Angles")
    print("=" * 60)

    circle = regular_polygon(64, 0.45)
    plugin = registry.get_plugin("hex", to_render_units=npc_to_points(200.0))

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for ax, angle in zip(axes, (0, 15, 30)):
        params = PatternParameters(spacing=0.12, angle=angle, density=0.05)
        drawable = plugin.generate(params, circle, aspect_ratio=1.0)
        print(f"Angle {angle}: {drawable.contours.n_contours} contours")
        show_drawables(ax, [drawable], [circle], f"angle = {angle}")

    plt.tight_layout()
    plt.show()


def example_3_aspect_ratio():
    """Example 3: A panel twice as wide as it is tall."""
    print("\n" + "=" * 60)
    print("Example 3: Aspect Ratio")
    print("=" * 60)

    square = np.array([(0, 0), (1, 0), (1, 1), (0, 1)], dtype=float)
    plugin = registry.get_plugin("hex")
    params = PatternParameters(spacing=0.1, angle=0, density=0.5)

    # One normalized y unit is drawn half as long as one x unit
    drawable = plugin.generate(params, square, aspect_ratio=2.0)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.add_patch(to_path_patch(drawable))
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect(0.5)
    ax.set_title("Example 3: aspect ratio 2, hexagons stay regular on screen")
    plt.tight_layout()
    plt.show()


def example_4_holes_and_batches():
    """Example 4: Rings grouped into islands, filled in one batch."""
    print("\n" + "=" * 60)
    print("Example 4: Holes and Batches")
    print("=" * 60)

    outer = regular_polygon(6, 0.45)
    hole = regular_polygon(6, 0.2)
    island = regular_polygon(32, 0.08)

    boundaries = group_rings_into_islands([hole, outer, island])
    print(f"Grouped 3 rings into {len(boundaries)} boundaries")

    plugin = registry.get_plugin("stripe")
    params = PatternParameters(spacing=0.05, angle=45, density=0.8, fill="#fdae6b")

    def report(current, total, message):
        print(f"  {message}")

    drawables = fill_shapes(plugin, params, boundaries, progress_callback=report)

    stats = get_fill_statistics(drawables)
    print(f"Statistics: {stats}")

    fig, ax = plt.subplots(figsize=(6, 6))
    rings = [ring for boundary in boundaries for ring in boundary]
    show_drawables(ax, drawables, rings, "Example 4: Stripes with a hole")
    plt.tight_layout()
    plt.show()


def example_5_registry_management():
    """Example 5: Registry management operations."""
    print("\n" + "=" * 60)
    print("Example 5: Registry Management")
    print("=" * 60)

    print(f"Registered patterns: {registry.list_strategies()}")
    print(f"Total plugins: {len(registry)}")
    print(f"hex registered: {'hex' in registry}")
    print(f"dots registered: {'dots' in registry}")

    plugin = registry.get_plugin("hex")
    if plugin:
        print(f"\nhex plugin info:")
        print(f"  Name: {plugin.name}")
        print(f"  Description: {plugin.description}")
        print(f"  Version: {plugin.version}")


def main():
    """Run all examples."""
    setup_logging(logging.INFO)

    example_1_basic_square()
    example_2_angles()
    example_3_aspect_ratio()
    example_4_holes_and_batches()
    example_5_registry_management()

    print("\n" + "=" * 60)
    print("All examples completed!")
    print("=" * 60)


if __name__ == '__main__':
    main()
