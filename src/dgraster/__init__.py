"""The dgraster package converts discontinuous-Galerkin output to uniform rasters.

This package offers:
  - Gauss-Lobatto bases and barycentric interpolation matrices.
  - Axis-aligned slicing of 3D element data to 2D cross-sections.
  - Resampling of adaptively refined 2D element data onto a uniform raster.
  - Raster post-processing and export for rendering.

Submodules:
  - basis: Gauss-Lobatto nodes/weights and interpolation matrices.
  - interpolate: Tensor-product interpolation of nodal data.
  - slicing: Plane slicer for 3D element data.
  - resample: Structured resampler and resolution planning.
  - raster: Cell-to-node averaging and element outlines.
  - mesh: ElementMesh container.
  - parameters: ConversionParameters settings.
  - convert: Top-level conversion pipeline.
  - export: meshio writers for rasters and outlines.

Classes:
  ConversionParameters, ElementMesh, RasterResult, VandermondeCache
"""

from .config import (
    config,
    configure,
    use,
    set_log_level,
)

from dgraster.basis import (
    VandermondeCache,
    barycentric_weights,
    gauss_lobatto_nodes_weights,
    polynomial_interpolation_matrix,
)
from dgraster.interpolate import interpolate_nodes
from dgraster.slicing import unstructured_2d_to_3d, unstructured_3d_to_2d
from dgraster.resample import (
    coordinate2index,
    element2index,
    plan_resolution,
    unstructured2structured,
    validate_nvisnodes_per_level,
)
from dgraster.raster import calc_vertices, cell2node
from dgraster.mesh import ElementMesh
from dgraster.parameters import ConversionParameters
from dgraster.convert import RasterResult, convert
from dgraster.export import write_element_outlines, write_raster

__all__ = [
    # Core classes
    "ConversionParameters",
    "ElementMesh",
    "RasterResult",
    "VandermondeCache",
    # Numerical core
    "gauss_lobatto_nodes_weights",
    "barycentric_weights",
    "polynomial_interpolation_matrix",
    "interpolate_nodes",
    "unstructured_3d_to_2d",
    "unstructured_2d_to_3d",
    "unstructured2structured",
    "element2index",
    "coordinate2index",
    "plan_resolution",
    "validate_nvisnodes_per_level",
    "cell2node",
    "calc_vertices",
    # Pipeline and export
    "convert",
    "write_raster",
    "write_element_outlines",
    # Configuration
    "config",
    "configure",
    "use",
    "set_log_level",
]
