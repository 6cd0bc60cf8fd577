"""Unit tests for resampling 2D element data onto a uniform raster."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from dgraster.resample import (
    cell_centers,
    coordinate2index,
    element2index,
    plan_resolution,
    unstructured2structured,
    validate_nvisnodes_per_level,
)


def _constant_per_element(mesh, n_nodes, values):
    data = np.empty((n_nodes, n_nodes, mesh.n_elements, 1))
    data[..., 0] = np.asarray(values, dtype=float)
    return data


def test_cell_centers():
    assert_allclose(cell_centers(4), [-0.75, -0.25, 0.25, 0.75])
    assert_allclose(cell_centers(1), [0.0])


def test_coordinate2index_nearest_cell():
    coords = np.array([[-0.75, 0.75], [-1.0, 0.74], [0.25, -0.24], [-0.5, 0.0]])
    indices = coordinate2index(coords, 4)
    # Points on a cell face belong to the lower cell
    assert_array_equal(indices, [[0, 3], [0, 3], [2, 1], [0, 1]])


def test_coordinate2index_below_raster_is_negative():
    indices = coordinate2index([[-1.5, 0.0], [-1.25, -1.0]], 4)
    # Cell -1 is centered at -1.25; -1.5 lies on the face below it
    assert_array_equal(indices, [[-2, 1], [-1, 0]])


def test_element2index_centers_blocks(quadrant_mesh, mixed_level_mesh):
    indices = element2index(quadrant_mesh.normalized_coordinates(), [1, 1, 1, 1], 4, [4, 2])
    assert_array_equal(indices, [[0, 0], [2, 0], [0, 2], [2, 2]])

    indices = element2index(
        mixed_level_mesh.normalized_coordinates(), mixed_level_mesh.levels, 4, [4, 2, 1]
    )
    assert_array_equal(
        indices, [[0, 0], [2, 0], [0, 2], [2, 2], [3, 2], [2, 3], [3, 3]]
    )


def test_quadrant_constants_fill_their_blocks(quadrant_mesh):
    data = _constant_per_element(quadrant_mesh, 3, [1.0, 2.0, 3.0, 4.0])

    raster = unstructured2structured(
        data, quadrant_mesh.normalized_coordinates(), quadrant_mesh.levels, 4, [4, 2]
    )

    expected = np.array(
        [
            [1.0, 1.0, 3.0, 3.0],
            [1.0, 1.0, 3.0, 3.0],
            [2.0, 2.0, 4.0, 4.0],
            [2.0, 2.0, 4.0, 4.0],
        ]
    )
    assert raster.shape == (4, 4, 1)
    assert_allclose(raster[:, :, 0], expected, atol=1e-14)


def test_mixed_levels_fill_their_blocks(mixed_level_mesh):
    data = _constant_per_element(mixed_level_mesh, 4, [1, 2, 3, 5, 6, 7, 8])

    raster = unstructured2structured(
        data,
        mixed_level_mesh.normalized_coordinates(),
        mixed_level_mesh.levels,
        4,
        [4, 2, 1],
    )

    expected = np.array(
        [
            [1.0, 1.0, 3.0, 3.0],
            [1.0, 1.0, 3.0, 3.0],
            [2.0, 2.0, 5.0, 7.0],
            [2.0, 2.0, 6.0, 8.0],
        ]
    )
    assert_allclose(raster[:, :, 0], expected, atol=1e-14)


def test_uniform_mesh_tiles_raster_exactly(uniform_mesh_2d):
    ids = np.arange(uniform_mesh_2d.n_elements, dtype=float)
    data = _constant_per_element(uniform_mesh_2d, 2, ids)

    raster = unstructured2structured(
        data, uniform_mesh_2d.normalized_coordinates(), uniform_mesh_2d.levels, 8, [8, 4, 2]
    )

    assert not np.any(np.isnan(raster))
    labels = np.rint(raster[:, :, 0]).astype(int)
    counts = np.bincount(labels.ravel(), minlength=16)
    assert_array_equal(counts, np.full(16, 4))
    # Element 1 is the second element along x in the bottom row
    assert_array_equal(labels[2:4, 0:2], np.full((2, 2), 1))


def test_linear_field_is_sampled_at_cell_centers(uniform_mesh_2d, nodal_data):
    data = nodal_data(
        uniform_mesh_2d, 3, [lambda x, y: x + 2 * y, lambda x, y: x * y]
    )

    raster = unstructured2structured(
        data, uniform_mesh_2d.normalized_coordinates(), uniform_mesh_2d.levels, 16, [16, 8, 4]
    )

    xc = cell_centers(16)
    xx, yy = np.meshgrid(xc, xc, indexing="ij")
    assert raster.shape == (16, 16, 2)
    assert_allclose(raster[:, :, 0], xx + 2 * yy, atol=1e-13)
    assert_allclose(raster[:, :, 1], xx * yy, atol=1e-13)


def test_inconsistent_nvisnodes_raise(quadrant_mesh):
    data = _constant_per_element(quadrant_mesh, 2, [0, 0, 0, 0])
    coords = quadrant_mesh.normalized_coordinates()
    with pytest.raises(ValueError, match="does not tile"):
        unstructured2structured(data, coords, quadrant_mesh.levels, 4, [4, 3])
    with pytest.raises(ValueError, match="only covers"):
        unstructured2structured(data, coords, quadrant_mesh.levels, 4, [4])


def test_block_outside_raster_raises_index_error(quadrant_mesh):
    data = _constant_per_element(quadrant_mesh, 2, [0, 0, 0, 0])
    coords = quadrant_mesh.normalized_coordinates().copy()
    coords[3] = [1.25, 0.5]
    with pytest.raises(IndexError, match="outside"):
        unstructured2structured(data, coords, quadrant_mesh.levels, 4, [4, 2])


def test_block_below_raster_raises_index_error(quadrant_mesh):
    data = _constant_per_element(quadrant_mesh, 2, [1, 2, 3, 4])
    coords = quadrant_mesh.normalized_coordinates().copy()
    coords[0] = [-1.25, -0.5]
    with pytest.raises(IndexError, match="outside"):
        unstructured2structured(data, coords, quadrant_mesh.levels, 4, [4, 2])


def test_shape_mismatch_raises(quadrant_mesh):
    data = _constant_per_element(quadrant_mesh, 2, [0, 0, 0, 0])
    with pytest.raises(ValueError):
        unstructured2structured(
            data, np.zeros((3, 2)), quadrant_mesh.levels, 4, [4, 2]
        )
    with pytest.raises(ValueError):
        unstructured2structured(
            data[..., 0], quadrant_mesh.normalized_coordinates(), quadrant_mesh.levels, 4, [4, 2]
        )


def test_validate_nvisnodes_per_level():
    validate_nvisnodes_per_level([0, 1, 2], 8, [8, 4, 2])
    validate_nvisnodes_per_level([2], 8, [99, 99, 2])
    with pytest.raises(ValueError):
        validate_nvisnodes_per_level([1], 8, [8, 2])
    with pytest.raises(ValueError):
        validate_nvisnodes_per_level([-1], 8, [8])


def test_plan_resolution_defaults():
    resolution, per_level = plan_resolution([0, 1, 2], n_nodes=4)
    assert resolution == 32
    assert per_level == [32, 16, 8]


def test_plan_resolution_nvisnodes_options():
    assert plan_resolution([1, 2], n_nodes=4, nvisnodes=0) == (16, [16, 8, 4])
    assert plan_resolution([1], n_nodes=4, nvisnodes=3) == (6, [6, 3])


def test_plan_resolution_capped_by_supported_level():
    assert plan_resolution([2], n_nodes=4, max_supported_level=3) == (8, [8, 4, 2])
    with pytest.raises(ValueError, match="maximum supported level"):
        plan_resolution([4], n_nodes=4, max_supported_level=3)


def test_plan_resolution_invalid_inputs():
    with pytest.raises(ValueError):
        plan_resolution([], n_nodes=4)
    with pytest.raises(ValueError):
        plan_resolution([1], n_nodes=4, nvisnodes=-2)
