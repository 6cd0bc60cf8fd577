"""Module for reducing 3D DG element data to an axis-aligned 2D cross-section.

The slice keeps every element whose extent along the slice axis contains the
slice plane and interpolates each element's nodal data along that axis to the
plane. Retained elements keep their order; the result is again an unstructured
element field, one spatial dimension lower.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .basis import VandermondeCache, gauss_lobatto_nodes_weights
from .config import BOUNDS_RTOL
from .interpolate import interpolate_nodes

_LOGGER = logging.getLogger(__name__)

SLICE_AXES: Dict[str, int] = {"x": 0, "y": 1, "z": 2}


def slice_axis_dimension(slice_axis: str) -> int:
    """Return the array axis for a slice axis name.

    Raises:
        ValueError: If `slice_axis` is not one of 'x', 'y', 'z'.
    """
    try:
        return SLICE_AXES[slice_axis]
    except (KeyError, TypeError):
        raise ValueError(
            f"illegal dimension {slice_axis!r}, supported dimensions are "
            f"{list(SLICE_AXES)}"
        ) from None


def _check_slice_inputs(
    unstructured_data: NDArray[Any],
    coordinates: NDArray[Any],
    levels: NDArray[Any],
    center_level_0: NDArray[Any],
) -> None:
    if unstructured_data.ndim != 5:
        raise ValueError(
            "3D unstructured data must have shape "
            "(n_nodes, n_nodes, n_nodes, n_elements, n_variables), "
            f"got {unstructured_data.shape}"
        )
    n_nodes = unstructured_data.shape[0]
    if unstructured_data.shape[1:3] != (n_nodes, n_nodes):
        raise ValueError(
            f"node axes must have equal length, got {unstructured_data.shape[:3]}"
        )
    n_elements = unstructured_data.shape[3]
    if coordinates.shape != (n_elements, 3):
        raise ValueError(
            f"coordinates must have shape ({n_elements}, 3), got {coordinates.shape}"
        )
    if levels.shape != (n_elements,):
        raise ValueError(
            f"levels must have shape ({n_elements},), got {levels.shape}"
        )
    if center_level_0.shape != (3,):
        raise ValueError(
            f"center_level_0 must have 3 components, got shape {center_level_0.shape}"
        )


def unstructured_3d_to_2d(
    unstructured_data: NDArray[Any],
    coordinates: NDArray[Any],
    levels: Union[NDArray[Any], Sequence[int]],
    length_level_0: float,
    center_level_0: Union[NDArray[Any], Sequence[float]],
    slice_axis: str,
    slice_axis_intersect: float,
) -> Tuple[NDArray[Any], NDArray[Any], NDArray[Any], NDArray[Any]]:
    """Slice 3D unstructured element data with an axis-aligned plane.

    An element is kept if ``low <= slice_axis_intersect < high`` along the
    slice axis. When the plane lies on the upper (or lower) domain boundary,
    the elements touching that boundary are kept as well, so the outermost
    layer is not lost. Boundary matches use the tolerance of
    `ElementMesh.validate`.

    Args:
        unstructured_data (NDArray[Any]): Nodal data of shape
            (n_nodes, n_nodes, n_nodes, n_elements, n_variables).
        coordinates (NDArray[Any]): Element centers, shape (n_elements, 3).
        levels: Refinement level per element, shape (n_elements,).
        length_level_0 (float): Edge length of the level-0 (root) element.
        center_level_0: Center of the root element, 3 components.
        slice_axis (str): Normal of the slice plane, one of 'x', 'y', 'z'.
        slice_axis_intersect (float): Coordinate of the plane along `slice_axis`.

    Returns:
        Tuple[NDArray[Any], NDArray[Any], NDArray[Any], NDArray[Any]]:
            - 2D data of shape (n_nodes, n_nodes, n_retained, n_variables)
            - element centers in the plane, shape (n_retained, 2)
            - retained levels, shape (n_retained,)
            - root center with the slice axis removed, shape (2,)

    Raises:
        ValueError: On an unknown axis, a plane outside the domain, or
            inconsistent input shapes.
    """
    axis = slice_axis_dimension(slice_axis)
    other_axes = [d for d in range(3) if d != axis]

    unstructured_data = np.asarray(unstructured_data, dtype=float)
    coordinates = np.asarray(coordinates, dtype=float)
    levels = np.asarray(levels, dtype=int)
    center_level_0 = np.asarray(center_level_0, dtype=float)
    length_level_0 = float(length_level_0)
    _check_slice_inputs(unstructured_data, coordinates, levels, center_level_0)

    lower_limit = center_level_0[axis] - length_level_0 / 2
    upper_limit = center_level_0[axis] + length_level_0 / 2
    if not (lower_limit <= slice_axis_intersect <= upper_limit):
        _LOGGER.error(
            "Slice plane %s=%g outside of domain [%g, %g]",
            slice_axis,
            slice_axis_intersect,
            lower_limit,
            upper_limit,
        )
        raise ValueError(
            f"slice_axis_intersect {slice_axis_intersect} outside of domain "
            f"[{lower_limit}, {upper_limit}] along {slice_axis!r}"
        )

    n_nodes = unstructured_data.shape[0]
    n_variables = unstructured_data.shape[4]
    nodes_in, _ = gauss_lobatto_nodes_weights(n_nodes)

    element_length = length_level_0 / 2.0 ** levels
    low = coordinates[:, axis] - element_length / 2
    high = coordinates[:, axis] + element_length / 2

    # Elements touching a domain face the plane lies on are kept, within the
    # same tolerance ElementMesh.validate accepts for element bounds
    tol = BOUNDS_RTOL * length_level_0
    inside = (low <= slice_axis_intersect) & (high > slice_axis_intersect)
    if np.isclose(slice_axis_intersect, upper_limit, rtol=0.0, atol=tol):
        inside |= np.isclose(high, upper_limit, rtol=0.0, atol=tol)
    if np.isclose(slice_axis_intersect, lower_limit, rtol=0.0, atol=tol):
        inside |= np.isclose(low, lower_limit, rtol=0.0, atol=tol)
    retained = np.flatnonzero(inside)

    new_data = np.empty(
        (n_nodes, n_nodes, retained.size, n_variables), dtype=float
    )
    vandermondes = VandermondeCache()

    for new_id, element_id in enumerate(retained):
        normalized_intersect = (
            (slice_axis_intersect - low[element_id]) / element_length[element_id] * 2
            - 1
        )
        vandermonde = vandermondes.get(nodes_in, [normalized_intersect])

        # Every line along the slice axis is one "variable" of a 1D interpolation
        lines = np.moveaxis(unstructured_data[..., element_id, :], axis, 0)
        lines = lines.reshape(n_nodes, -1).T
        value = interpolate_nodes(lines, vandermonde, lines.shape[0])
        new_data[:, :, new_id, :] = value[:, 0].reshape(n_nodes, n_nodes, n_variables)

    new_coordinates = coordinates[retained][:, other_axes]
    new_levels = levels[retained]
    new_center = center_level_0[other_axes]

    if retained.size == 0:
        _LOGGER.warning(
            "Slice plane %s=%g intersects no elements", slice_axis, slice_axis_intersect
        )
    _LOGGER.info(
        "Sliced %d of %d elements at %s=%g (%d distinct interpolation rows)",
        retained.size,
        levels.size,
        slice_axis,
        slice_axis_intersect,
        len(vandermondes),
    )

    return new_data, new_coordinates, new_levels, new_center


# Historical name of the slicer.
unstructured_2d_to_3d = unstructured_3d_to_2d
