import numpy
import pytest
from dgfct.discretization import StructuredMesh, DGFunctionSpace, assemble_convection
from dgfct.limiter import SolutionBounds, build_neighbor_map
from dgfct.problems import constant_velocity
from dgfct.utils import ConfigurationError


def mk_space_and_K(num_cells, order, periodic=True):
    dim = len(num_cells)
    mesh = StructuredMesh([0.0] * dim, [1.0] * dim, num_cells, periodic)
    V = DGFunctionSpace(mesh, order)
    K = assemble_convection(V, lambda x: constant_velocity(x, [1.0] * dim))
    return V, K


def test_full_stencil_1d():
    V, K = mk_space_and_K([4], 1)
    x = numpy.array([0, 0, 1, 1, 0, 0, 0, 0], dtype=float)
    bounds = SolutionBounds(V, K, 'Full')
    x_min, x_max = bounds.compute(x)
    assert x_min.tolist() == [0] * 8
    assert x_max.tolist() == [0, 1, 1, 1, 1, 0, 0, 0]
    assert bounds.x_min is x_min


def test_bounds_contain_value():
    V, K = mk_space_and_K([3, 3], 2)
    x = numpy.random.RandomState(3).uniform(-1, 1, V.dim())
    for stencil in ('Full', 'Local', 'LocalAndDiag'):
        bounds = SolutionBounds(V, K, stencil)
        bounds.compute(x)
        assert (bounds.x_min <= x).all()
        assert (x <= bounds.x_max).all()


def test_local_stencil_1d():
    V, K = mk_space_and_K([4], 2)
    nmap = build_neighbor_map(V, K, 'Local')
    assert len(nmap) == V.dim()
    # Left dof of element 1 is at the same place as the right dof of element 0
    assert nmap.neighbors(3).tolist() == [1, 2, 3, 4]
    # Interior dof only sees its own element
    assert nmap.neighbors(4).tolist() == [3, 4, 5]
    # Periodic wrap around
    assert nmap.neighbors(0).tolist() == [0, 1, 10, 11]


def test_local_and_diag_stencil_2d():
    V, K = mk_space_and_K([2, 2], 2, periodic=False)
    local = build_neighbor_map(V, K, 'Local')
    diag = build_neighbor_map(V, K, 'LocalAndDiag')

    # The centre dof of element 0
    assert local.neighbors(4).tolist() == [1, 3, 4, 5, 7]
    assert diag.neighbors(4).tolist() == list(range(9))

    # The corner dof of element 0 at (0.5, 0.5) shares its location with a
    # dof in each of the three other elements, also the diagonal one
    corner = local.neighbors(8).tolist()
    for dof in (5, 7, 8, 9 + 6, 18 + 2, 27 + 0):
        assert dof in corner
    assert 27 + 1 in corner
    assert 27 + 4 not in corner


def test_neighbor_map_is_read_only():
    V, K = mk_space_and_K([3], 2)
    nmap = build_neighbor_map(V, K, 'Local')
    with pytest.raises(ValueError):
        nmap.indices[0] = 3
    with pytest.raises(ValueError):
        nmap.indptr[0] = 3


def test_unknown_stencil():
    V, K = mk_space_and_K([3], 2)
    with pytest.raises(ConfigurationError):
        SolutionBounds(V, K, 'Wide')


def test_degree_zero_needs_full_stencil():
    V, K = mk_space_and_K([3], 0)
    SolutionBounds(V, K, 'Full')
    with pytest.raises(ConfigurationError):
        SolutionBounds(V, K, 'Local')


def test_full_stencil_with_replacement_operator():
    V, K = mk_space_and_K([4], 1)
    x = numpy.arange(8, dtype=float)
    bounds = SolutionBounds(V, K, 'Full')
    K2 = K.copy()
    K2.data[:] = 0.0
    x_min, x_max = bounds.compute(x, K2)
    assert x_min.tolist() == bounds.compute(x)[0].tolist()


def test_stencil_members_within_bounds():
    V, K = mk_space_and_K([3, 2], 2)
    x = numpy.random.RandomState(8).uniform(-1, 1, V.dim())
    for stencil in ('Full', 'Local', 'LocalAndDiag'):
        bounds = SolutionBounds(V, K, stencil)
        bounds.compute(x)
        if stencil == 'Full':
            indptr, indices = K.indptr, K.indices
        else:
            indptr, indices = bounds.neighbor_map.indptr, bounds.neighbor_map.indices
        for i in range(V.dim()):
            members = x[indices[indptr[i]:indptr[i + 1]]]
            assert bounds.x_min[i] <= members.min()
            assert members.max() <= bounds.x_max[i]
            assert bounds.x_min[i] == members.min()
