"""Tensor-product interpolation of nodal element data."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

_LOGGER = logging.getLogger(__name__)


def interpolate_nodes(
    data: NDArray[Any], vandermonde: NDArray[Any], n_variables: int
) -> NDArray[Any]:
    """Apply a 1D interpolation matrix along every node axis of `data`.

    Args:
        data (NDArray[Any]): Nodal values of shape (n_variables, n_in) or
            (n_variables, n_in, n_in).
        vandermonde (NDArray[Any]): Interpolation matrix of shape (n_out, n_in).
        n_variables (int): Number of field variables in `data`.

    Returns:
        NDArray[Any]: Values of shape (n_variables, n_out) or
        (n_variables, n_out, n_out), matching the rank of `data`.

    Raises:
        ValueError: If the shapes of `data` and `vandermonde` are inconsistent.
    """
    data = np.asarray(data, dtype=float)
    vandermonde = np.asarray(vandermonde, dtype=float)

    if vandermonde.ndim != 2:
        raise ValueError(
            f"interpolation matrix must be 2D, got shape {vandermonde.shape}"
        )
    if data.shape[0] != n_variables:
        raise ValueError(
            f"data has {data.shape[0]} variables along axis 0, expected {n_variables}"
        )
    n_in = vandermonde.shape[1]
    if any(size != n_in for size in data.shape[1:]):
        raise ValueError(
            f"data node axes {data.shape[1:]} do not match interpolation matrix "
            f"with {n_in} input nodes"
        )

    if data.ndim == 2:
        return np.einsum("ia,va->vi", vandermonde, data)
    if data.ndim == 3:
        return np.einsum("ia,jb,vab->vij", vandermonde, vandermonde, data)

    raise ValueError(
        f"data must have shape (n_variables, n) or (n_variables, n, n), got {data.shape}"
    )
