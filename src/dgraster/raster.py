"""Raster post-processing and element outline geometry.

Provides:
  - cell2node: periodic averaging of cell-centered rasters to grid nodes.
  - calc_vertices: closed outlines of 2D elements for mesh overlays.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

_LOGGER = logging.getLogger(__name__)


def cell2node(cell_centered_data: NDArray[Any]) -> NDArray[Any]:
    """Convert cell-centered raster values to node-centered values.

    The raster is treated as periodic in both directions: a ghost layer wrapped
    from the opposite edges (corners included) is added, and every node gets
    the mean of its four neighboring cells.

    Args:
        cell_centered_data (NDArray[Any]): Raster of shape (nx, ny, n_variables).

    Returns:
        NDArray[Any]: Node values of shape (nx + 1, ny + 1, n_variables).

    Raises:
        ValueError: If the input is not a 3D array.
    """
    cells = np.asarray(cell_centered_data, dtype=float)
    if cells.ndim != 3:
        raise ValueError(
            f"cell-centered data must have shape (nx, ny, n_variables), got {cells.shape}"
        )

    tmp = np.pad(cells, ((1, 1), (1, 1), (0, 0)), mode="wrap")
    node_centered = (
        tmp[:-1, :-1] + tmp[1:, :-1] + tmp[:-1, 1:] + tmp[1:, 1:]
    ) / 4

    _LOGGER.debug("cell2node: %s -> %s", cells.shape, node_centered.shape)
    return node_centered


def calc_vertices(
    coordinates: NDArray[Any],
    levels: Union[NDArray[Any], Sequence[int]],
    length_level_0: float,
) -> Tuple[NDArray[Any], NDArray[Any]]:
    """Return closed outlines of square 2D elements.

    Corners run lower-left, lower-right, upper-right, upper-left and back to
    lower-left.

    Args:
        coordinates (NDArray[Any]): Element centers, shape (n_elements, 2).
        levels: Refinement level per element.
        length_level_0 (float): Edge length of the root element.

    Returns:
        Tuple[NDArray[Any], NDArray[Any]]: x and y corner coordinates, each of
        shape (n_elements, 5).

    Raises:
        ValueError: If the coordinates are not two-dimensional.
    """
    coordinates = np.asarray(coordinates, dtype=float)
    levels = np.asarray(levels, dtype=int)
    if coordinates.ndim != 2 or coordinates.shape[1] != 2:
        raise ValueError(
            f"Algorithm currently only works in 2D, got coordinates of shape "
            f"{coordinates.shape}"
        )
    if levels.shape != (coordinates.shape[0],):
        raise ValueError(
            f"levels must have shape ({coordinates.shape[0]},), got {levels.shape}"
        )

    half = (float(length_level_0) / 2.0**levels / 2)[:, None]
    sign_x = np.array([-1.0, 1.0, 1.0, -1.0, -1.0])
    sign_y = np.array([-1.0, -1.0, 1.0, 1.0, -1.0])

    x = coordinates[:, 0:1] + sign_x * half
    y = coordinates[:, 1:2] + sign_y * half
    return x, y
