"""Module for exporting rasters and element outlines with meshio.

The raster is written as a quad mesh spanning the physical domain, so any
VTK-capable viewer can render it; the format follows from the file extension
(e.g. ``.vtu``, ``.vtk``, ``.xdmf``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import meshio
import numpy as np
from numpy.typing import NDArray

from .convert import RasterResult
from .mesh import ElementMesh

_LOGGER = logging.getLogger(__name__)


def _variable_names(names: Optional[Sequence[str]], n_variables: int) -> List[str]:
    if names is None:
        return [f"variable_{v}" for v in range(n_variables)]
    names = list(names)
    if len(names) != n_variables:
        raise ValueError(
            f"got {len(names)} variable names for {n_variables} variables"
        )
    return names


def raster_to_meshio(
    result: RasterResult, variable_names: Optional[Sequence[str]] = None
) -> meshio.Mesh:
    """Build a meshio quad mesh carrying the raster values.

    Cell-centered rasters become cell data, node-centered rasters point data.
    Points and cells are ordered with the x index varying slowest.
    """
    names = _variable_names(variable_names, result.n_variables)
    resolution = result.resolution
    xmin, xmax, ymin, ymax = result.extent()

    x = np.linspace(xmin, xmax, resolution + 1)
    y = np.linspace(ymin, ymax, resolution + 1)
    xx, yy = np.meshgrid(x, y, indexing="ij")
    points = np.column_stack([xx.ravel(), yy.ravel(), np.zeros(xx.size)])

    n_points = resolution + 1
    i, j = np.meshgrid(np.arange(resolution), np.arange(resolution), indexing="ij")
    p00 = (i * n_points + j).ravel()
    quads = np.column_stack([p00, p00 + n_points, p00 + n_points + 1, p00 + 1])

    mesh = meshio.Mesh(points=points, cells=[("quad", quads)])
    if result.node_centered:
        mesh.point_data = {
            name: result.data[:, :, v].ravel() for v, name in enumerate(names)
        }
    else:
        mesh.cell_data = {
            name: [result.data[:, :, v].ravel()] for v, name in enumerate(names)
        }
    return mesh


def write_raster(
    filename: Union[str, Path],
    result: RasterResult,
    variable_names: Optional[Sequence[str]] = None,
) -> None:
    """Write a raster to a mesh file.

    Args:
        filename: Output path; the extension selects the format.
        result (RasterResult): Raster returned by `convert`.
        variable_names: One name per variable; defaults to ``variable_<v>``.

    Raises:
        ValueError: If the number of names does not match the variables.
    """
    mesh = raster_to_meshio(result, variable_names)
    _LOGGER.info(
        "Saving %dx%d raster with %d variable(s) to %s",
        result.resolution,
        result.resolution,
        result.n_variables,
        filename,
    )
    mesh.write(filename)


def outlines_to_meshio(mesh: ElementMesh) -> meshio.Mesh:
    """Build a meshio line mesh of the element outlines of a 2D mesh."""
    x, y = mesh.vertices()
    corners: NDArray[Any] = np.stack([x[:, :4], y[:, :4]], axis=-1).reshape(-1, 2)
    points = np.column_stack([corners, np.zeros(corners.shape[0])])

    first = 4 * np.arange(mesh.n_elements)[:, None]
    edges = np.array([[0, 1], [1, 2], [2, 3], [3, 0]])
    lines = (first[:, None, :] + edges[None, :, :]).reshape(-1, 2)

    return meshio.Mesh(
        points=points,
        cells=[("line", lines)],
        cell_data={"level": [np.repeat(mesh.levels, 4)]},
    )


def write_element_outlines(filename: Union[str, Path], mesh: ElementMesh) -> None:
    """Write the element outlines of a 2D mesh as line cells.

    Raises:
        ValueError: If the mesh is not 2D.
    """
    outlines = outlines_to_meshio(mesh)
    _LOGGER.info("Saving outlines of %d elements to %s", mesh.n_elements, filename)
    outlines.write(filename)
