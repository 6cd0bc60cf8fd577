"""Slice a synthetic 3D DG field and write the raster and mesh outlines.

Run with ``python examples/slice_and_rasterize.py``; the VTU files can be
opened in ParaView.
"""

import itertools
import logging

import numpy as np

import dgraster as dgr


def build_mesh() -> dgr.ElementMesh:
    # Level-1 octants, with the upper-right-front one refined to level 2
    coarse = [
        c for c in itertools.product([-0.5, 0.5], repeat=3) if c != (0.5, 0.5, 0.5)
    ]
    fine = [
        tuple(0.5 + np.array(c)) for c in itertools.product([-0.25, 0.25], repeat=3)
    ]
    coordinates = np.array(coarse + fine)
    levels = [1] * len(coarse) + [2] * len(fine)
    return dgr.ElementMesh(coordinates, levels, 2.0, [0.0, 0.0, 0.0])


def sample(mesh: dgr.ElementMesh, n_nodes: int) -> np.ndarray:
    nodes, _ = dgr.gauss_lobatto_nodes_weights(n_nodes)
    lengths = mesh.element_lengths()
    data = np.empty((n_nodes,) * 3 + (mesh.n_elements, 1))
    for e in range(mesh.n_elements):
        axes = [mesh.coordinates[e, d] + nodes * lengths[e] / 2 for d in range(3)]
        x, y, z = np.meshgrid(*axes, indexing="ij")
        data[..., e, 0] = np.sin(np.pi * x) * np.cos(np.pi * y) + z
    return data


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    mesh = build_mesh()
    data = sample(mesh, n_nodes=5)

    params = dgr.ConversionParameters()
    params.slice_axis = "z"
    params.slice_axis_intersect = 0.6
    params.grid_lines = True

    result = dgr.convert(data, mesh, params)
    dgr.write_raster("slice.vtu", result, ["rho"])
    dgr.write_element_outlines("slice_mesh.vtu", result.mesh)
