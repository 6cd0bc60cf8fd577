from __future__ import annotations

import itertools

import numpy as np
import pytest

from dgraster import ElementMesh, gauss_lobatto_nodes_weights


def _nodal_data(mesh, n_nodes, funcs):
    """Sample functions of the physical coordinates at every element's GL nodes."""
    nodes, _ = gauss_lobatto_nodes_weights(n_nodes)
    lengths = mesh.element_lengths()
    shape = (n_nodes,) * mesh.ndim + (mesh.n_elements, len(funcs))
    data = np.empty(shape)
    for e in range(mesh.n_elements):
        axes = [mesh.coordinates[e, d] + nodes * lengths[e] / 2 for d in range(mesh.ndim)]
        grids = np.meshgrid(*axes, indexing="ij")
        for v, f in enumerate(funcs):
            data[..., e, v] = f(*grids)
    return data


@pytest.fixture
def nodal_data():
    """Callable building unstructured data: nodal_data(mesh, n_nodes, funcs)."""
    return _nodal_data


@pytest.fixture
def quadrant_mesh():
    """
    Four level-1 elements covering [-1, 1]^2, ordered:
        e0 (-0.5, -0.5), e1 (0.5, -0.5), e2 (-0.5, 0.5), e3 (0.5, 0.5)
    """
    coordinates = np.array([[-0.5, -0.5], [0.5, -0.5], [-0.5, 0.5], [0.5, 0.5]])
    return ElementMesh(coordinates, [1, 1, 1, 1], 2.0, [0.0, 0.0])


@pytest.fixture
def mixed_level_mesh():
    """
    Three level-1 elements plus four level-2 elements refining the
    upper-right quadrant of [-1, 1]^2.
    """
    coordinates = np.array(
        [
            [-0.5, -0.5],  # level 1
            [0.5, -0.5],  # level 1
            [-0.5, 0.5],  # level 1
            [0.25, 0.25],  # level 2
            [0.75, 0.25],  # level 2
            [0.25, 0.75],  # level 2
            [0.75, 0.75],  # level 2
        ]
    )
    return ElementMesh(coordinates, [1, 1, 1, 2, 2, 2, 2], 2.0, [0.0, 0.0])


@pytest.fixture
def uniform_mesh_2d():
    """Sixteen level-2 elements on [-1, 1]^2, x index varying fastest."""
    centers = [-0.75, -0.25, 0.25, 0.75]
    coordinates = np.array([[x, y] for y in centers for x in centers])
    return ElementMesh(coordinates, np.full(16, 2), 2.0, [0.0, 0.0])


@pytest.fixture
def octant_mesh():
    """Eight level-1 elements covering [-1, 1]^3."""
    coordinates = np.array(
        [[x, y, z] for z, y, x in itertools.product([-0.5, 0.5], repeat=3)]
    )
    return ElementMesh(coordinates, np.ones(8, dtype=int), 2.0, [0.0, 0.0, 0.0])
