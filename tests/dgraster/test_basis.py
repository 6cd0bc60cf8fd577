"""Unit tests for Gauss-Lobatto nodes and barycentric interpolation matrices."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from dgraster.basis import (
    VandermondeCache,
    barycentric_weights,
    gauss_lobatto_nodes_weights,
    polynomial_interpolation_matrix,
)


def test_two_nodes_are_endpoints():
    nodes, weights = gauss_lobatto_nodes_weights(2)
    assert_allclose(nodes, [-1.0, 1.0])
    assert_allclose(weights, [1.0, 1.0])


def test_known_three_and_five_node_rules():
    nodes, weights = gauss_lobatto_nodes_weights(3)
    assert_allclose(nodes, [-1.0, 0.0, 1.0], atol=1e-15)
    assert_allclose(weights, [1 / 3, 4 / 3, 1 / 3])

    nodes, weights = gauss_lobatto_nodes_weights(5)
    a = np.sqrt(3 / 7)
    assert_allclose(nodes, [-1.0, -a, 0.0, a, 1.0], atol=1e-14)
    assert_allclose(weights, [0.1, 49 / 90, 32 / 45, 49 / 90, 0.1])


@pytest.mark.parametrize("n", range(2, 16))
def test_nodes_symmetric_sorted_with_endpoints(n):
    nodes, _ = gauss_lobatto_nodes_weights(n)
    assert nodes.shape == (n,)
    assert nodes[0] == -1.0
    assert nodes[-1] == 1.0
    assert np.all(np.diff(nodes) > 0)
    assert_allclose(nodes, -nodes[::-1], atol=1e-15)


@pytest.mark.parametrize("n", [2, 3, 4, 6, 9])
def test_quadrature_exact_up_to_degree_2n_minus_3(n):
    nodes, weights = gauss_lobatto_nodes_weights(n)
    for k in range(2 * n - 2):
        exact = (1 - (-1) ** (k + 1)) / (k + 1)
        assert_allclose(np.sum(weights * nodes**k), exact, atol=1e-13)


@pytest.mark.parametrize("n", [1, 0, -3])
def test_too_few_nodes_raises(n):
    with pytest.raises(ValueError):
        gauss_lobatto_nodes_weights(n)


@pytest.mark.parametrize("n_in", [2, 4, 8, 16, 24])
def test_interpolation_reproduces_polynomials(n_in):
    rng = np.random.default_rng(42)
    coeffs = rng.normal(size=n_in)
    nodes_in, _ = gauss_lobatto_nodes_weights(n_in)
    nodes_out = np.linspace(-1, 1, 37)

    vandermonde = polynomial_interpolation_matrix(nodes_in, nodes_out)

    assert vandermonde.shape == (37, n_in)
    f_in = np.polynomial.legendre.legval(nodes_in, coeffs)
    f_out = np.polynomial.legendre.legval(nodes_out, coeffs)
    assert_allclose(vandermonde @ f_in, f_out, atol=1e-10)


def test_interpolation_rows_sum_to_one_and_hit_nodes_exactly():
    nodes_in, _ = gauss_lobatto_nodes_weights(5)
    nodes_out = np.array([-1.0, -0.3, nodes_in[1], 0.9, 1.0])

    vandermonde = polynomial_interpolation_matrix(nodes_in, nodes_out)

    assert_allclose(vandermonde.sum(axis=1), 1.0)
    assert_allclose(vandermonde[0], np.eye(5)[0])
    assert_allclose(vandermonde[2], np.eye(5)[1])
    assert_allclose(vandermonde[4], np.eye(5)[4])


def test_duplicate_nodes_raise():
    with pytest.raises(ValueError, match="distinct"):
        barycentric_weights([-1.0, 0.0, 0.0, 1.0])
    with pytest.raises(ValueError):
        polynomial_interpolation_matrix([0.0, 0.0], [0.5])


def test_vandermonde_cache_reuses_matrices():
    nodes_in, _ = gauss_lobatto_nodes_weights(4)
    cache = VandermondeCache()

    a = cache.get(nodes_in, [0.25])
    b = cache.get(nodes_in, [0.25 + 1e-15])
    c = cache.get(nodes_in, [-0.25])

    assert a is b
    assert c is not a
    assert len(cache) == 2
    assert cache.hits == 1


def test_vandermonde_caches_are_independent():
    nodes_in, _ = gauss_lobatto_nodes_weights(3)
    first, second = VandermondeCache(), VandermondeCache()
    first.get(nodes_in, [0.0])
    assert len(first) == 1
    assert len(second) == 0
