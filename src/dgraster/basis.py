"""Module providing 1D nodal bases for DG element data.

This module computes Legendre-Gauss-Lobatto collocation nodes and quadrature
weights, and builds barycentric interpolation (Vandermonde) matrices mapping
nodal values from one 1D node set to another.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from scipy.special import eval_legendre, roots_jacobi

_LOGGER = logging.getLogger(__name__)

# Decimals kept when turning node coordinates into cache keys.
_KEY_DECIMALS = 12


def gauss_lobatto_nodes_weights(n: int) -> Tuple[NDArray[Any], NDArray[Any]]:
    """Compute Legendre-Gauss-Lobatto nodes and weights on [-1, 1].

    The interior nodes are the roots of P'_{n-1}, which coincide with the
    Gauss-Jacobi nodes for alpha = beta = 1. The rule integrates polynomials
    up to degree 2n - 3 exactly.

    Args:
        n (int): Number of nodes, including both endpoints.

    Returns:
        Tuple[NDArray[Any], NDArray[Any]]: Ascending nodes and matching weights,
        each of shape (n,).

    Raises:
        ValueError: If `n` < 2.
    """
    n = int(n)
    if n < 2:
        raise ValueError(f"Gauss-Lobatto rule needs at least 2 nodes, got {n}")

    nodes = np.empty(n, dtype=float)
    nodes[0] = -1.0
    nodes[-1] = 1.0
    if n > 2:
        interior, _ = roots_jacobi(n - 2, 1.0, 1.0)
        nodes[1:-1] = np.sort(interior)
        # Enforce exact symmetry about zero
        nodes = 0.5 * (nodes - nodes[::-1])

    weights = 2.0 / (n * (n - 1) * eval_legendre(n - 1, nodes) ** 2)

    _LOGGER.debug("Gauss-Lobatto rule with %d nodes: %s", n, nodes.tolist())
    return nodes, weights


def barycentric_weights(nodes: Union[NDArray[Any], Sequence[float]]) -> NDArray[Any]:
    """Return barycentric weights 1 / prod_{k != j} (x_j - x_k).

    Raises:
        ValueError: If the nodes are not pairwise distinct.
    """
    x = np.asarray(nodes, dtype=float).ravel()
    diff = x[:, None] - x[None, :]
    np.fill_diagonal(diff, 1.0)
    if np.any(diff == 0.0):
        raise ValueError(
            f"interpolation nodes must be distinct, got {x.tolist()}"
        )
    return 1.0 / np.prod(diff, axis=1)


def polynomial_interpolation_matrix(
    nodes_in: Union[NDArray[Any], Sequence[float]],
    nodes_out: Union[NDArray[Any], Sequence[float]],
) -> NDArray[Any]:
    """Build the matrix interpolating nodal values from `nodes_in` to `nodes_out`.

    For nodal values `f_in` at `nodes_in`, ``V @ f_in`` evaluates the unique
    polynomial of degree ``len(nodes_in) - 1`` through them at `nodes_out`.
    The second barycentric form is used; output points that coincide with an
    input node get an exact unit row.

    Args:
        nodes_in: Input node coordinates, shape (n_in,).
        nodes_out: Output point coordinates, shape (n_out,).

    Returns:
        NDArray[Any]: Interpolation matrix of shape (n_out, n_in).

    Raises:
        ValueError: If `nodes_in` contains duplicates.
    """
    x_in = np.asarray(nodes_in, dtype=float).ravel()
    x_out = np.asarray(nodes_out, dtype=float).ravel()
    wbary = barycentric_weights(x_in)

    diff = x_out[:, None] - x_in[None, :]
    scale = max(1.0, float(np.max(np.abs(x_in))))
    hit = np.isclose(diff, 0.0, rtol=0.0, atol=1e-14 * scale)

    vandermonde = np.zeros((x_out.size, x_in.size), dtype=float)
    exact_rows = np.any(hit, axis=1)
    if np.any(exact_rows):
        first_hit = np.argmax(hit[exact_rows], axis=1)
        vandermonde[np.flatnonzero(exact_rows), first_hit] = 1.0

    rows = ~exact_rows
    if np.any(rows):
        terms = wbary[None, :] / diff[rows]
        vandermonde[rows] = terms / np.sum(terms, axis=1, keepdims=True)

    return vandermonde


class VandermondeCache:
    """Call-scoped memo of interpolation matrices.

    Keys are node tuples rounded to a fixed number of decimals so that
    coordinates differing only by floating-point noise share an entry. An
    instance is meant to live for a single slicing or resampling pass.
    """

    def __init__(self) -> None:
        self._matrices: Dict[Hashable, NDArray[Any]] = {}
        self.hits = 0

    def __len__(self) -> int:
        return len(self._matrices)

    @staticmethod
    def key(nodes_in: NDArray[Any], nodes_out: NDArray[Any]) -> Hashable:
        """Return the quantized cache key for a node pair."""
        return (
            tuple(np.round(np.asarray(nodes_in, dtype=float), _KEY_DECIMALS).tolist()),
            tuple(np.round(np.asarray(nodes_out, dtype=float), _KEY_DECIMALS).tolist()),
        )

    def get(
        self,
        nodes_in: Union[NDArray[Any], Sequence[float]],
        nodes_out: Union[NDArray[Any], Sequence[float]],
    ) -> NDArray[Any]:
        """Return the interpolation matrix for a node pair, building it on a miss."""
        k = self.key(np.ravel(nodes_in), np.ravel(nodes_out))
        matrix = self._matrices.get(k)
        if matrix is None:
            matrix = polynomial_interpolation_matrix(nodes_in, nodes_out)
            self._matrices[k] = matrix
        else:
            self.hits += 1
        return matrix
