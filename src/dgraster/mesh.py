"""Module defining the ElementMesh class for tree-refined square/cube meshes.

This module provides:
  - A flat, index-parallel container of element centers and refinement levels.
  - Element size, bounding box, and domain-normalized coordinate helpers.
  - Slicing of 3D meshes (with their data) to 2D cross-sections.
  - Element outline polygons for mesh overlays.

No parent/child relation is stored: an element's size follows from its level.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple, Union
from numpy.typing import NDArray

import numpy as np

from .config import BOUNDS_RTOL
from .raster import calc_vertices
from .slicing import unstructured_3d_to_2d

_LOGGER = logging.getLogger(__name__)


class ElementMesh:
    """Leaf elements of an adaptively refined square (2D) or cube (3D) mesh.

    Args:
        coordinates (NDArray[Any]): Element centers, shape (n_elements, ndim).
        levels (Sequence[int]): Refinement level per element.
        length_level_0 (float): Edge length of the root (level 0) element.
        center_level_0 (Optional[Sequence[float]]): Center of the root
            element. Defaults to the origin.
        validate (bool): Check shapes and that every element lies inside the
            root element.

    Attributes:
        coordinates (NDArray[Any]): Element centers, shape (n_elements, ndim).
        levels (NDArray[Any]): Integer levels, shape (n_elements,).
        length_level_0 (float): Root element edge length.
        center_level_0 (NDArray[Any]): Root element center, shape (ndim,).
    """

    coordinates: NDArray[Any]
    levels: NDArray[Any]
    length_level_0: float
    center_level_0: NDArray[Any]

    def __init__(
        self,
        coordinates: Union[NDArray[Any], Sequence[Sequence[float]]],
        levels: Union[NDArray[Any], Sequence[int]],
        length_level_0: float,
        center_level_0: Optional[Union[NDArray[Any], Sequence[float]]] = None,
        validate: bool = True,
    ) -> None:
        self.coordinates = np.asarray(coordinates, dtype=float)
        self.levels = np.asarray(levels, dtype=int)
        self.length_level_0 = float(length_level_0)
        if center_level_0 is None:
            center_level_0 = np.zeros(self.coordinates.shape[-1])
        self.center_level_0 = np.asarray(center_level_0, dtype=float)

        if validate:
            self.validate()

        _LOGGER.debug(
            "ElementMesh initialized with %d elements in %dD (max level %s)",
            self.n_elements,
            self.ndim,
            self.max_level if self.n_elements else None,
        )

    def __repr__(self) -> str:
        return (
            f"ElementMesh(ndim={self.ndim}, n_elements={self.n_elements}, "
            f"length_level_0={self.length_level_0}, "
            f"center_level_0={self.center_level_0.tolist()})"
        )

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return int(self.coordinates.shape[1])

    @property
    def n_elements(self) -> int:
        """Number of leaf elements."""
        return int(self.levels.shape[0])

    @property
    def max_level(self) -> int:
        """Finest refinement level present."""
        return int(self.levels.max())

    def element_lengths(self) -> NDArray[Any]:
        """Return the edge length of every element, shape (n_elements,)."""
        return self.length_level_0 / 2.0**self.levels

    def bounds(self) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Return lower and upper element corners, each (n_elements, ndim)."""
        half = (self.element_lengths() / 2)[:, None]
        return self.coordinates - half, self.coordinates + half

    def domain_bounds(self) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Return lower and upper corners of the root element."""
        half = self.length_level_0 / 2
        return self.center_level_0 - half, self.center_level_0 + half

    def validate(self) -> None:
        """Check shapes and that every element lies inside the root element.

        Raises:
            ValueError: If any check fails.
        """
        if self.coordinates.ndim != 2 or self.coordinates.shape[1] not in (2, 3):
            raise ValueError(
                "coordinates must have shape (n_elements, 2) or (n_elements, 3), "
                f"got {self.coordinates.shape}"
            )
        if self.levels.shape != (self.coordinates.shape[0],):
            raise ValueError(
                f"levels must have shape ({self.coordinates.shape[0]},), "
                f"got {self.levels.shape}"
            )
        if self.center_level_0.shape != (self.ndim,):
            raise ValueError(
                f"center_level_0 must have {self.ndim} components, "
                f"got shape {self.center_level_0.shape}"
            )
        if not self.length_level_0 > 0:
            raise ValueError(
                f"length_level_0 must be positive, got {self.length_level_0}"
            )
        if np.any(self.levels < 0):
            raise ValueError(
                f"levels must be non-negative, got minimum {int(self.levels.min())}"
            )

        lower, upper = self.bounds()
        domain_lower, domain_upper = self.domain_bounds()
        tol = BOUNDS_RTOL * self.length_level_0
        outside = np.any(lower < domain_lower - tol, axis=1) | np.any(
            upper > domain_upper + tol, axis=1
        )
        if np.any(outside):
            bad = np.flatnonzero(outside)
            _LOGGER.error("%d element(s) extend beyond the root element", bad.size)
            raise ValueError(
                f"elements {bad[:10].tolist()} extend beyond the domain "
                f"[{domain_lower.tolist()}, {domain_upper.tolist()}]"
            )

    def normalized_coordinates(self) -> NDArray[Any]:
        """Return element centers mapped to [-1, 1] over the root element."""
        return (self.coordinates - self.center_level_0) / (self.length_level_0 / 2)

    def slice(
        self,
        unstructured_data: NDArray[Any],
        slice_axis: str,
        slice_axis_intersect: float,
    ) -> Tuple[NDArray[Any], ElementMesh]:
        """Cut a 3D mesh and its data with an axis-aligned plane.

        Args:
            unstructured_data (NDArray[Any]): Nodal data of shape
                (n_nodes, n_nodes, n_nodes, n_elements, n_variables).
            slice_axis (str): One of 'x', 'y', 'z'.
            slice_axis_intersect (float): Plane position along `slice_axis`.

        Returns:
            Tuple[NDArray[Any], ElementMesh]: The 2D data and the 2D mesh of
            the retained elements.

        Raises:
            ValueError: If the mesh is not 3D or the slice is invalid.
        """
        if self.ndim != 3:
            raise ValueError(f"only 3D meshes can be sliced, mesh is {self.ndim}D")

        data_2d, coordinates, levels, center = unstructured_3d_to_2d(
            unstructured_data,
            self.coordinates,
            self.levels,
            self.length_level_0,
            self.center_level_0,
            slice_axis,
            slice_axis_intersect,
        )
        mesh_2d = ElementMesh(
            coordinates.reshape(-1, 2),
            levels,
            self.length_level_0,
            center,
            validate=False,
        )
        return data_2d, mesh_2d

    def vertices(self) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Return closed element outlines, see `calc_vertices`."""
        return calc_vertices(self.coordinates, self.levels, self.length_level_0)
