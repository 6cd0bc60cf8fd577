"""Module defining the ConversionParameters class for raster conversion.

This module provides the ConversionParameters class, which holds all settings
for converting DG element data to a uniform raster.
"""

from typing import Optional

from .config import config


class ConversionParameters:
    """Holds settings for converting DG element data to a raster.

    Attributes:
        nvisnodes (Optional[int]): Raster cells per axis for the finest
            elements. None uses twice the number of DG nodes, 0 uses the
            number of DG nodes.
        max_supported_level (int): Highest refinement level accepted. Caps the
            resolution at ``2**max_supported_level`` cells per axis.
        slice_axis (str): Normal of the slice plane for 3D data ('x', 'y', 'z').
        slice_axis_intersect (float): Position of the slice plane along
            `slice_axis`.
        cell2node (bool): Average the cell-centered raster to grid nodes.
        grid_lines (bool): Also return element outlines of the 2D mesh.

    Notes:
        - `max_supported_level` and `cell2node` default to the package
          configuration at construction time.
        - The slice settings are ignored for 2D data.
    """

    def __init__(self) -> None:
        self.nvisnodes: Optional[int] = None
        self.max_supported_level: int = config.max_supported_level

        ###########################################
        # Slicing of 3D data
        ###########################################
        self.slice_axis = "z"
        self.slice_axis_intersect = 0.0

        # Output options
        self.cell2node: bool = config.cell2node
        self.grid_lines = False
