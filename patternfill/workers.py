"""
Batch filling of many shapes on a worker pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from .base import PatternParameters, PatternPlugin, StrokedPolygonSet
from .constants import DEFAULT_ASPECT_RATIO

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def fill_shapes(
    plugin: PatternPlugin,
    parameters: PatternParameters,
    boundaries: Sequence,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    is_legend: bool = False,
    max_workers: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> List[Optional[StrokedPolygonSet]]:
    """
    Fill every boundary with the same pattern, one pipeline per boundary.

    The pipelines share no state, so they run independently on a thread
    pool. Parameters are validated once before any work is submitted.

    Args:
        plugin: Pattern plugin instance
        parameters: Pattern parameters shared by all shapes
        boundaries: Boundaries to fill
        aspect_ratio: Ratio between the y and x units of the target frame
        is_legend: Whether the shapes are legend key previews
        max_workers: Pool size, executor default when None
        progress_callback: Optional callback(current, total, message)

    Returns:
        One drawable (or None) per boundary, in input order

    Raises:
        ConfigurationError: If the parameters are invalid
        InvalidGeometryError: If any boundary cannot be clipped; remaining
                              shapes are abandoned
    """
    plugin.validate_parameters(parameters, aspect_ratio)

    total = len(boundaries)
    results: List[Optional[StrokedPolygonSet]] = [None] * total
    if total == 0:
        return results

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(plugin.generate, parameters, boundary, aspect_ratio, is_legend): index
            for index, boundary in enumerate(boundaries)
        }

        try:
            for done, future in enumerate(as_completed(futures), start=1):
                results[futures[future]] = future.result()
                if progress_callback:
                    progress_callback(done, total, f"Filled shape {done}/{total}")
        except Exception:
            for future in futures:
                future.cancel()
            raise

    logger.debug("Filled %d shapes with %s", total, plugin.name)
    return results
