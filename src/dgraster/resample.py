"""Module for resampling 2D DG element data onto a uniform raster.

Each element contributes a square block of raster cells whose size depends on
its refinement level (``nvisnodes_per_level``). The element's polynomial is
evaluated at the centers of those cells and the block is written at the
element's position in the raster.

Coordinates passed to this module are normalized to [-1, 1] over the whole
domain (see `ElementMesh.normalized_coordinates`).
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .basis import VandermondeCache, gauss_lobatto_nodes_weights
from .interpolate import interpolate_nodes

_LOGGER = logging.getLogger(__name__)


def cell_centers(n_cells: int) -> NDArray[Any]:
    """Return the centers of `n_cells` uniform cells spanning [-1, 1]."""
    dx = 2.0 / n_cells
    return np.linspace(-1 + dx / 2, 1 - dx / 2, n_cells)


def plan_resolution(
    levels: Union[NDArray[Any], Sequence[int]],
    n_nodes: int,
    nvisnodes: Optional[int] = None,
    max_supported_level: int = 11,
) -> Tuple[int, List[int]]:
    """Choose the raster resolution and per-level block sizes for a mesh.

    The finest elements get ``min(2**(max_supported_level - max_level),
    nvisnodes)`` cells per axis, and every coarser level doubles that count,
    so that the blocks of all levels tile the raster.

    Args:
        levels: Refinement level per element.
        n_nodes (int): Number of DG nodes per axis in the input data.
        nvisnodes (Optional[int]): Requested cells per axis for the finest
            elements. None means ``2 * n_nodes``; 0 means ``n_nodes``.
        max_supported_level (int): Highest level that may be rasterized.

    Returns:
        Tuple[int, List[int]]: The resolution and ``nvisnodes_per_level``.

    Raises:
        ValueError: If the mesh is finer than `max_supported_level`, if no
            levels are given, or if `nvisnodes` is negative.
    """
    levels = np.asarray(levels, dtype=int)
    if levels.size == 0:
        raise ValueError("cannot plan a raster for a mesh without elements")
    max_level = int(levels.max())
    if max_level > max_supported_level:
        raise ValueError(
            f"Maximum refinement level in data {max_level} is higher than "
            f"maximum supported level {max_supported_level}"
        )

    if nvisnodes is None:
        max_nvisnodes = 2 * n_nodes
    elif nvisnodes == 0:
        max_nvisnodes = n_nodes
    elif nvisnodes > 0:
        max_nvisnodes = int(nvisnodes)
    else:
        raise ValueError(f"nvisnodes must be None or >= 0, got {nvisnodes}")

    max_available = 2 ** (max_supported_level - max_level)
    nvisnodes_at_max_level = min(max_available, max_nvisnodes)
    resolution = nvisnodes_at_max_level * 2**max_level
    nvisnodes_per_level = [
        2 ** (max_level - level) * nvisnodes_at_max_level
        for level in range(max_level + 1)
    ]

    _LOGGER.debug(
        "Planned resolution %d with nvisnodes_per_level=%s (max level %d)",
        resolution,
        nvisnodes_per_level,
        max_level,
    )
    return resolution, nvisnodes_per_level


def validate_nvisnodes_per_level(
    levels: Union[NDArray[Any], Sequence[int]],
    resolution: int,
    nvisnodes_per_level: Sequence[int],
) -> None:
    """Check that the per-level block sizes tile a raster of `resolution`.

    A level-``l`` element spans ``1 / 2**l`` of the domain per axis, so its
    block must be exactly ``resolution / 2**l`` cells wide.

    Raises:
        ValueError: If a present level has no entry or an inconsistent entry.
    """
    present = np.unique(np.asarray(levels, dtype=int))
    if present.size and present[0] < 0:
        raise ValueError(f"levels must be non-negative, got {int(present[0])}")
    for level in present.tolist():
        if level >= len(nvisnodes_per_level):
            raise ValueError(
                f"level {level} present in data but nvisnodes_per_level only "
                f"covers levels 0..{len(nvisnodes_per_level) - 1}"
            )
        n_out = int(nvisnodes_per_level[level])
        if n_out < 1 or n_out * 2**level != resolution:
            raise ValueError(
                f"nvisnodes_per_level[{level}] = {n_out} does not tile a raster of "
                f"resolution {resolution}: expected {resolution / 2**level:g}"
            )


def coordinate2index(
    coordinates: Union[NDArray[Any], Sequence[Sequence[float]]], resolution: int
) -> NDArray[Any]:
    """Map normalized, cell-centered coordinates to 0-based raster indices.

    A coordinate belongs to the first cell whose center is not more than half
    a cell width below it, i.e. to the nearest cell. Points left of or below
    the raster map to negative indices instead of being clamped to 0, so
    callers can detect blocks that leave the raster.

    Args:
        coordinates: Normalized points of shape (n, 2), nominally in [-1, 1].
        resolution (int): Number of raster cells per axis.

    Returns:
        NDArray[Any]: Integer indices of shape (n, 2).
    """
    coordinates = np.atleast_2d(np.asarray(coordinates, dtype=float))
    dx = 2.0 / resolution
    mesh_coordinates = cell_centers(resolution)
    indices = np.searchsorted(mesh_coordinates, coordinates - dx / 2, side="left")
    # searchsorted bottoms out at 0
    outside = coordinates < -1
    if np.any(outside):
        below = np.ceil((coordinates + 1) / dx - 1).astype(int)
        indices = np.where(outside, below, indices)
    return indices


def element2index(
    normalized_coordinates: NDArray[Any],
    levels: Union[NDArray[Any], Sequence[int]],
    resolution: int,
    nvisnodes_per_level: Sequence[int],
) -> NDArray[Any]:
    """Return the lower-left raster index of each element's block.

    Returns:
        NDArray[Any]: Integer indices of shape (n_elements, 2).
    """
    levels = np.asarray(levels, dtype=int)
    nvisnodes = np.asarray(nvisnodes_per_level, dtype=int)[levels]
    dx = 2.0 / resolution
    lower_left = (
        np.asarray(normalized_coordinates, dtype=float)
        - ((nvisnodes - 1) / 2 * dx)[:, None]
    )
    return coordinate2index(lower_left, resolution)


def unstructured2structured(
    unstructured_data: NDArray[Any],
    normalized_coordinates: NDArray[Any],
    levels: Union[NDArray[Any], Sequence[int]],
    resolution: int,
    nvisnodes_per_level: Sequence[int],
) -> NDArray[Any]:
    """Interpolate unstructured 2D DG data to a cell-centered uniform raster.

    Args:
        unstructured_data (NDArray[Any]): Nodal data of shape
            (n_nodes, n_nodes, n_elements, n_variables).
        normalized_coordinates (NDArray[Any]): Element centers normalized to
            [-1, 1], shape (n_elements, 2).
        levels: Refinement level per element.
        resolution (int): Raster cells per axis.
        nvisnodes_per_level (Sequence[int]): Block size per refinement level.

    Returns:
        NDArray[Any]: Raster of shape (resolution, resolution, n_variables).

    Raises:
        ValueError: On inconsistent shapes or block sizes.
        IndexError: If an element block falls outside the raster.
    """
    unstructured_data = np.asarray(unstructured_data, dtype=float)
    normalized_coordinates = np.asarray(normalized_coordinates, dtype=float)
    levels = np.asarray(levels, dtype=int)
    resolution = int(resolution)

    if unstructured_data.ndim != 4:
        raise ValueError(
            "2D unstructured data must have shape "
            f"(n_nodes, n_nodes, n_elements, n_variables), got {unstructured_data.shape}"
        )
    n_nodes, _, n_elements, n_variables = unstructured_data.shape
    if normalized_coordinates.shape != (n_elements, 2):
        raise ValueError(
            f"normalized coordinates must have shape ({n_elements}, 2), "
            f"got {normalized_coordinates.shape}"
        )
    if levels.shape != (n_elements,):
        raise ValueError(
            f"levels must have shape ({n_elements},), got {levels.shape}"
        )
    if resolution < 1:
        raise ValueError(f"resolution must be positive, got {resolution}")
    validate_nvisnodes_per_level(levels, resolution, nvisnodes_per_level)

    nodes_in, _ = gauss_lobatto_nodes_weights(n_nodes)

    # One matrix per level present, to cell-centered output nodes
    vandermondes = VandermondeCache()
    vandermonde_per_level = {
        level: vandermondes.get(nodes_in, cell_centers(int(nvisnodes_per_level[level])))
        for level in np.unique(levels).tolist()
    }

    lower_left_index = element2index(
        normalized_coordinates, levels, resolution, nvisnodes_per_level
    )

    structured = np.empty((resolution, resolution, n_variables), dtype=float)
    covered = np.zeros((resolution, resolution), dtype=int)

    for element_id in range(n_elements):
        level = int(levels[element_id])
        n_nodes_out = int(nvisnodes_per_level[level])
        first = lower_left_index[element_id]
        last = first + n_nodes_out
        if np.any(first < 0) or np.any(last > resolution):
            _LOGGER.error(
                "Element %d block [%s, %s) outside raster of resolution %d",
                element_id,
                first.tolist(),
                last.tolist(),
                resolution,
            )
            raise IndexError(
                f"element {element_id} maps to raster block "
                f"[{first[0]}:{last[0]}, {first[1]}:{last[1]}] outside "
                f"resolution {resolution}; check nvisnodes_per_level and coordinates"
            )

        element_data = np.moveaxis(unstructured_data[:, :, element_id, :], -1, 0)
        block = interpolate_nodes(
            element_data, vandermonde_per_level[level], n_variables
        )
        structured[first[0] : last[0], first[1] : last[1], :] = np.moveaxis(
            block, 0, -1
        )
        covered[first[0] : last[0], first[1] : last[1]] += 1

    n_uncovered = int(np.count_nonzero(covered == 0))
    n_overlap = int(np.count_nonzero(covered > 1))
    if n_uncovered or n_overlap:
        _LOGGER.warning(
            "Element blocks do not tile the raster: %d cells unwritten, %d cells "
            "written more than once",
            n_uncovered,
            n_overlap,
        )
        structured[covered == 0] = np.nan

    _LOGGER.info(
        "Resampled %d elements with %d variables to a %dx%d raster",
        n_elements,
        n_variables,
        resolution,
        resolution,
    )
    return structured
