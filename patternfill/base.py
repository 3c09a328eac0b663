"""
Base classes and interfaces for the pattern fill plugin system.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .constants import (
    DEFAULT_ALPHA,
    DEFAULT_ANGLE,
    DEFAULT_COLOUR,
    DEFAULT_DENSITY,
    DEFAULT_FILL,
    DEFAULT_LINETYPE,
    DEFAULT_SPACING,
)
from .exceptions import ConfigurationError


class PatternStrategy(Enum):
    """Enumeration of the built-in pattern keys."""
    HEX = "hex"
    STRIPE = "stripe"


@dataclass(frozen=True)
class PatternParameters:
    """
    Styling parameters for one pattern fill invocation.

    Attributes:
        spacing: Grid cell size in normalized units, must be positive
        angle: Pattern rotation in degrees, clockwise in a y-up frame
               (stripes at 45 run down to the right)
        density: Stroke width as a fraction of the converted spacing
        fill: Fill colour of the pattern cells
        alpha: Opacity 0-1
        linetype: Stroke line style ("solid", "dashed", ...)
        colour: Stroke colour of the cell outlines
        custom_params: Plugin specific extras, read-only
    """
    spacing: float = DEFAULT_SPACING
    angle: float = DEFAULT_ANGLE
    density: float = DEFAULT_DENSITY
    fill: str = DEFAULT_FILL
    alpha: float = DEFAULT_ALPHA
    linetype: str = DEFAULT_LINETYPE
    colour: str = DEFAULT_COLOUR

    custom_params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        check_spacing(self.spacing)
        check_density(self.density)
        if not math.isfinite(self.angle):
            raise ConfigurationError(f"angle must be finite, got {self.angle!r}")
        if not 0 <= self.alpha <= 1:
            raise ConfigurationError(f"alpha must be within [0, 1], got {self.alpha!r}")
        object.__setattr__(self, "custom_params", MappingProxyType(dict(self.custom_params)))

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "PatternParameters":
        """
        Build parameters from a plain mapping.

        Keys may carry a ``pattern_`` prefix. Keys that are not parameter
        fields are collected into ``custom_params``.
        """
        known = {name for name in cls.__dataclass_fields__ if name != "custom_params"}
        kwargs: Dict[str, Any] = {}
        custom: Dict[str, Any] = dict(values.get("custom_params", {}))

        for key, value in values.items():
            if key == "custom_params":
                continue
            name = key[len("pattern_"):] if key.startswith("pattern_") else key
            if name == "color":
                name = "colour"
            if name in known:
                kwargs[name] = value
            else:
                custom[key] = value

        return cls(custom_params=custom, **kwargs)

    def with_changes(self, **changes: Any) -> "PatternParameters":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def check_spacing(spacing: float) -> float:
    """Raise ConfigurationError unless spacing is a positive finite number."""
    if not (isinstance(spacing, (int, float, np.floating, np.integer))
            and math.isfinite(spacing) and spacing > 0):
        raise ConfigurationError(f"spacing must be a positive number, got {spacing!r}")
    return float(spacing)


def check_density(density: float) -> float:
    """Raise ConfigurationError unless density is a non-negative finite number."""
    if not (isinstance(density, (int, float, np.floating, np.integer))
            and math.isfinite(density) and density >= 0):
        raise ConfigurationError(f"density must be a non-negative number, got {density!r}")
    return float(density)


def check_aspect_ratio(aspect_ratio: float) -> float:
    """Raise ConfigurationError unless aspect_ratio is a positive finite number."""
    if not (isinstance(aspect_ratio, (int, float, np.floating, np.integer))
            and math.isfinite(aspect_ratio) and aspect_ratio > 0):
        raise ConfigurationError(f"aspect_ratio must be a positive number, got {aspect_ratio!r}")
    return float(aspect_ratio)


@dataclass(frozen=True, eq=False)
class ContourCollection:
    """
    Flat vertex buffer holding one or more rings.

    Vertices sharing an id form one ring, in winding order, stored open
    (the closing edge is implicit). Rings sharing a path id belong to the
    same polygon: the first ring of a path is its exterior, the others are
    holes.

    Attributes:
        coords: (N, 2) vertex coordinates
        ids: (N,) ring id of every vertex
        path_ids: (N,) polygon id of every vertex
    """
    coords: np.ndarray
    ids: np.ndarray
    path_ids: np.ndarray

    @classmethod
    def empty(cls) -> "ContourCollection":
        return cls(
            coords=np.zeros((0, 2), dtype=float),
            ids=np.zeros((0,), dtype=int),
            path_ids=np.zeros((0,), dtype=int),
        )

    @classmethod
    def from_polygons(cls, polygons: Sequence[Sequence[np.ndarray]]) -> "ContourCollection":
        """
        Flatten polygons into a collection.

        Args:
            polygons: One entry per polygon, each a list of open rings
                      (exterior first, then holes)

        Returns:
            ContourCollection with sequential 0-based ring and path ids
        """
        coords: List[np.ndarray] = []
        ids: List[np.ndarray] = []
        path_ids: List[np.ndarray] = []
        ring_id = 0

        for path_id, rings in enumerate(polygons):
            for ring in rings:
                ring = np.asarray(ring, dtype=float)
                coords.append(ring)
                ids.append(np.full(len(ring), ring_id, dtype=int))
                path_ids.append(np.full(len(ring), path_id, dtype=int))
                ring_id += 1

        if not coords:
            return cls.empty()

        return cls(
            coords=np.concatenate(coords),
            ids=np.concatenate(ids),
            path_ids=np.concatenate(path_ids),
        )

    def __len__(self) -> int:
        return len(self.coords)

    @property
    def is_empty(self) -> bool:
        return len(self.coords) == 0

    @property
    def n_contours(self) -> int:
        """Number of distinct rings."""
        return len(np.unique(self.ids))

    @property
    def n_paths(self) -> int:
        """Number of distinct polygons."""
        return len(np.unique(self.path_ids))

    def contours(self) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield (ring id, (n, 2) coords) pairs in buffer order."""
        for ring_id, _ in _first_occurrences(self.ids):
            yield ring_id, self.coords[self.ids == ring_id]

    def polygons(self) -> Iterator[List[np.ndarray]]:
        """Yield each polygon as a list of rings, exterior first."""
        for path_id, _ in _first_occurrences(self.path_ids):
            mask = self.path_ids == path_id
            ring_ids = self.ids[mask]
            coords = self.coords[mask]
            yield [coords[ring_ids == ring_id] for ring_id, _ in _first_occurrences(ring_ids)]

    def map_coords(self, func) -> "ContourCollection":
        """Return a new collection with ``func`` applied to the coordinate array."""
        return ContourCollection(
            coords=np.asarray(func(self.coords.copy()), dtype=float),
            ids=self.ids.copy(),
            path_ids=self.path_ids.copy(),
        )


def _first_occurrences(values: np.ndarray) -> List[Tuple[int, int]]:
    """Unique values ordered by their first index in ``values``."""
    unique, index = np.unique(values, return_index=True)
    order = np.argsort(index)
    return [(int(unique[i]), int(index[i])) for i in order]


@dataclass(frozen=True, eq=False)
class StrokedPolygonSet:
    """
    Renderer-agnostic drawable: a set of polygons with a resolved stroke.

    Attributes:
        contours: Vertex buffer with ring and polygon ids
        linewidth: Stroke width in the renderer's units
        fill: Fill colour
        colour: Stroke colour
        alpha: Opacity 0-1
        linetype: Stroke line style
    """
    contours: ContourCollection
    linewidth: float
    fill: str = DEFAULT_FILL
    colour: str = DEFAULT_COLOUR
    alpha: float = DEFAULT_ALPHA
    linetype: str = DEFAULT_LINETYPE

    @property
    def x(self) -> np.ndarray:
        return self.contours.coords[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.contours.coords[:, 1]

    @property
    def id(self) -> np.ndarray:
        return self.contours.ids

    @property
    def path_id(self) -> np.ndarray:
        return self.contours.path_ids


class PatternPlugin(ABC):
    """
    Abstract base class for pattern plugins.

    All patterns must inherit from this class and implement the
    generate method.
    """

    def __init__(self):
        """Initialize the pattern plugin."""
        self._name = self.__class__.__name__
        self._description = ""
        self._version = "1.0.0"

    @property
    def name(self) -> str:
        """Get the plugin name."""
        return self._name

    @property
    def description(self) -> str:
        """Get the plugin description."""
        return self._description

    @property
    def version(self) -> str:
        """Get the plugin version."""
        return self._version

    @abstractmethod
    def generate(
        self,
        parameters: PatternParameters,
        boundary,
        aspect_ratio: float,
        is_legend: bool = False
    ) -> Optional[StrokedPolygonSet]:
        """
        Generate the pattern geometry for one boundary.

        Args:
            parameters: Pattern parameters
            boundary: Boundary ring as (x, y) points, or a list of rings where
                      the first is the exterior and the rest are holes
            aspect_ratio: Non-uniform scaling between the y and x axes of the
                          target frame
            is_legend: Whether the call renders a legend key preview

        Returns:
            The drawable, or None when nothing fits inside the boundary
        """
        pass

    def validate_parameters(self, parameters: PatternParameters, aspect_ratio: float) -> None:
        """
        Validate parameters for this pattern.

        Raises:
            ConfigurationError: If the parameters cannot produce a pattern
        """
        check_spacing(parameters.spacing)
        check_density(parameters.density)
        check_aspect_ratio(aspect_ratio)

    def build_drawable(
        self,
        contours: ContourCollection,
        linewidth: float,
        parameters: PatternParameters
    ) -> Optional[StrokedPolygonSet]:
        """Wrap finalized contours in a drawable, None when there is nothing to draw."""
        if contours.is_empty:
            return None

        return StrokedPolygonSet(
            contours=contours,
            linewidth=linewidth,
            fill=parameters.fill,
            colour=parameters.colour,
            alpha=parameters.alpha,
            linetype=parameters.linetype,
        )
