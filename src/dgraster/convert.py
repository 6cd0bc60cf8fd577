"""Top-level conversion of DG element data to a uniform raster.

The pipeline slices 3D data to a 2D cross-section, plans the raster
resolution from the refinement levels, resamples every element onto the
raster, and optionally averages the result to grid nodes.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .mesh import ElementMesh
from .parameters import ConversionParameters
from .raster import cell2node
from .resample import plan_resolution, unstructured2structured

_LOGGER = logging.getLogger(__name__)


@dataclass
class RasterResult:
    """Raster produced by `convert` together with its geometry.

    Attributes:
        data: Raster values, (resolution, resolution, n_variables) for
            cell-centered output or one more point per axis for node-centered
            output.
        resolution: Raster cells per axis.
        nvisnodes_per_level: Block size per refinement level used.
        mesh: The 2D mesh that was rasterized.
        node_centered: Whether `data` holds node-centered values.
        vertices: Element outlines (x, y), each (n_elements, 5), if requested.
    """

    data: NDArray[Any]
    resolution: int
    nvisnodes_per_level: List[int]
    mesh: ElementMesh
    node_centered: bool = False
    vertices: Optional[Tuple[NDArray[Any], NDArray[Any]]] = None

    @property
    def n_variables(self) -> int:
        """Number of field variables stored in the raster."""
        return int(self.data.shape[-1])

    def extent(self) -> Tuple[float, float, float, float]:
        """Return (xmin, xmax, ymin, ymax) of the rasterized domain."""
        lower, upper = self.mesh.domain_bounds()
        return float(lower[0]), float(upper[0]), float(lower[1]), float(upper[1])


def convert(
    unstructured_data: NDArray[Any],
    mesh: ElementMesh,
    parameters: Optional[ConversionParameters] = None,
) -> RasterResult:
    """Convert 2D or 3D unstructured DG data to a uniform raster.

    Args:
        unstructured_data (NDArray[Any]): Nodal data of shape
            (n_nodes, n_nodes[, n_nodes], n_elements, n_variables).
        mesh (ElementMesh): Mesh matching the data's element axis.
        parameters (Optional[ConversionParameters]): Conversion settings;
            defaults are used if None.

    Returns:
        RasterResult: The raster and the geometry it was built from.

    Raises:
        ValueError: If data and mesh are inconsistent or the conversion
            settings are invalid.
        IndexError: If an element block falls outside the raster.
    """
    if parameters is None:
        parameters = ConversionParameters()

    data = np.asarray(unstructured_data, dtype=float)
    if data.ndim != mesh.ndim + 2:
        raise ValueError(
            f"data of shape {data.shape} does not match a {mesh.ndim}D mesh; "
            f"expected {mesh.ndim} node axes, an element axis and a variable axis"
        )
    if data.shape[-2] != mesh.n_elements:
        raise ValueError(
            f"data has {data.shape[-2]} elements but the mesh has {mesh.n_elements}"
        )

    if mesh.ndim == 3:
        _LOGGER.info(
            "Slicing 3D data at %s=%g",
            parameters.slice_axis,
            parameters.slice_axis_intersect,
        )
        data, mesh = mesh.slice(
            data, parameters.slice_axis, parameters.slice_axis_intersect
        )

    n_nodes = data.shape[0]
    resolution, nvisnodes_per_level = plan_resolution(
        mesh.levels,
        n_nodes,
        nvisnodes=parameters.nvisnodes,
        max_supported_level=parameters.max_supported_level,
    )

    raster = unstructured2structured(
        data,
        mesh.normalized_coordinates(),
        mesh.levels,
        resolution,
        nvisnodes_per_level,
    )
    if parameters.cell2node:
        raster = cell2node(raster)

    vertices = mesh.vertices() if parameters.grid_lines else None

    _LOGGER.info(
        "Converted %d elements to a %dx%d raster (%s-centered)",
        mesh.n_elements,
        resolution,
        resolution,
        "node" if parameters.cell2node else "cell",
    )
    return RasterResult(
        data=raster,
        resolution=resolution,
        nvisnodes_per_level=nvisnodes_per_level,
        mesh=mesh,
        node_centered=bool(parameters.cell2node),
        vertices=vertices,
    )
