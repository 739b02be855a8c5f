import numpy
import pytest
from dgfct.discretization import StructuredMesh, DGFunctionSpace, TensorProductElement, \
    get_quadrature_rule, assemble_mass, assemble_convection, assemble_inflow
from dgfct.problems import constant_velocity
from dgfct.utils import ConfigurationError, build_symmetry_map


def mk_space(num_cells, order, periodic=True, basis='Positive'):
    dim = len(num_cells)
    mesh = StructuredMesh([0.0] * dim, [1.0] * dim, num_cells, periodic)
    return DGFunctionSpace(mesh, order, basis)


@pytest.mark.parametrize('dim', [1, 2, 3])
def test_quadrature(dim):
    rule = get_quadrature_rule(dim, 5)
    assert len(rule) == 3 ** dim
    assert abs(rule.weights.sum() - 1.0) < 1e-14

    # x^5 y^4 ... is integrated exactly
    f = numpy.prod(rule.points ** numpy.arange(5, 5 - dim, -1), axis=1)
    exact = numpy.prod(1.0 / numpy.arange(6, 6 - dim, -1))
    assert abs(rule.weights.dot(f) - exact) < 1e-14


@pytest.mark.parametrize('basis', ['Positive', 'Lagrange'])
@pytest.mark.parametrize('dim,order', [(1, 0), (1, 3), (2, 2), (3, 1)])
def test_partition_of_unity(basis, dim, order):
    el = TensorProductElement(dim, order, basis)
    pts = get_quadrature_rule(dim, 4).points
    phi = el.shape(pts)
    dphi = el.dshape(pts)
    assert phi.shape == (len(pts), (order + 1) ** dim)
    assert dphi.shape == (len(pts), (order + 1) ** dim, dim)
    assert abs(phi.sum(axis=1) - 1).max() < 1e-13
    assert abs(dphi.sum(axis=1)).max() < 1e-12


def test_bernstein_is_positive():
    el = TensorProductElement(2, 3, 'Positive')
    phi = el.shape(numpy.random.RandomState(1).uniform(0, 1, (50, 2)))
    assert phi.min() >= 0


def test_lagrange_is_nodal():
    el = TensorProductElement(2, 2, 'Lagrange')
    phi = el.shape(el.nodes)
    assert abs(phi - numpy.eye(9)).max() < 1e-13


def test_face_dofs():
    el = TensorProductElement(2, 2)
    assert el.face_dofs.tolist() == [[0, 3, 6], [2, 5, 8], [0, 1, 2], [6, 7, 8]]
    for f in range(el.num_faces):
        pts = el.face_points(f, get_quadrature_rule(1, 2).points)
        # Only the face dofs are nonzero on the face
        phi = el.shape(pts)
        others = numpy.setdiff1d(numpy.arange(9), el.face_dofs[f])
        assert abs(phi[:, others]).max() < 1e-14


def test_unknown_basis():
    with pytest.raises(ConfigurationError):
        TensorProductElement(1, 2, 'Legendre')


def test_mesh_faces():
    mesh = StructuredMesh([0, 0], [1, 2], [3, 2], [True, False])
    assert mesh.num_elements == 6
    # 6 periodic x faces, 3 interior y faces and 2 * 3 boundary faces
    assert len(mesh.faces) == 15
    assert mesh.neighbor(0, 0) == 2
    assert mesh.neighbor(2, 1) == 0
    assert mesh.neighbor(0, 2) == -1
    assert mesh.neighbor(0, 3) == 3
    assert mesh.has_interior_face()

    # Distance across the periodic x boundary
    assert abs(mesh.distance([0.05, 0.5], [0.95, 0.5]) - 0.1) < 1e-14
    assert abs(mesh.distance([0.5, 0.05], [0.5, 1.95]) - 1.9) < 1e-14


def test_single_element_mesh_has_no_interior_face():
    mesh = StructuredMesh([0, 0], [1, 1], [1, 1], False)
    assert not mesh.has_interior_face()
    assert all(f.elem2 == -1 for f in mesh.faces)


def test_bad_mesh():
    with pytest.raises(ConfigurationError):
        StructuredMesh([0, 0], [1], [2, 2])
    with pytest.raises(ConfigurationError):
        StructuredMesh([0], [1], [0])
    with pytest.raises(ConfigurationError):
        StructuredMesh([1], [0], [2])


def test_subcell_index():
    mesh = StructuredMesh([0, 0], [1, 1], [2, 2])
    refined = mesh.refined(3)
    # Subcell 4 is the centre subcell of the element
    for k in range(mesh.num_elements):
        r = mesh.subcell_index(k, 4, 3)
        centre = refined.transform(r, [[0.5, 0.5]])
        assert abs(centre - mesh.transform(k, [[0.5, 0.5]])).max() < 1e-14


@pytest.mark.parametrize('dim,order', [(1, 2), (2, 1), (3, 1)])
def test_mass_matrix(dim, order):
    V = mk_space([2] * dim, order)
    M = assemble_mass(V)
    assert M.shape == (V.dim(), V.dim())
    assert abs(M.sum() - 1.0) < 1e-13
    assert abs(M - M.T).max() < 1e-15


@pytest.mark.parametrize('basis', ['Positive', 'Lagrange'])
def test_convection_matrix_periodic(basis):
    V = mk_space([3, 2], 2, basis=basis)
    velocity = lambda x: constant_velocity(x, [1.0, -0.5])
    K = assemble_convection(V, velocity)

    # Constant states are steady and the scheme is conservative
    assert abs(numpy.asarray(K.sum(axis=1))).max() < 1e-13
    assert abs(numpy.asarray(K.sum(axis=0))).max() < 1e-13

    # The nonzero graph is symmetric
    smap = build_symmetry_map(K)
    assert len(smap) == K.nnz


def test_convection_matrix_without_faces():
    V = mk_space([3], 2)
    velocity = lambda x: constant_velocity(x, [1.0])
    K = assemble_convection(V, velocity, include_faces=False)
    # Block diagonal
    coo = K.tocoo()
    assert (coo.row // 3 == coo.col // 3).all()


def test_inflow_vector():
    V = mk_space([4], 1, periodic=False)
    velocity = lambda x: constant_velocity(x, [2.0])
    b = assemble_inflow(V, velocity, lambda x: numpy.full(len(x), 3.0))
    # Only the left dof of the first element sees the inflow
    expected = numpy.zeros(V.dim())
    expected[0] = 6.0
    assert abs(b - expected).max() < 1e-14


def test_projection():
    V = mk_space([2, 2], 2, basis='Lagrange')
    u = V.project(lambda x: x[:, 0] ** 2 + x[:, 1])
    coords = V.tabulate_dof_coordinates()
    assert abs(u - (coords[:, 0] ** 2 + coords[:, 1])).max() < 1e-12


def test_interpolation():
    V = mk_space([3], 2)
    coords = V.tabulate_dof_coordinates()
    u = V.interpolate(lambda x: numpy.where(x[:, 0] > 0.4, 1.0, 0.0))
    assert u.tolist() == [0, 0, 0, 0, 1, 1, 1, 1, 1]
    assert abs(coords[:, 0] - [0, 1 / 6, 1 / 3, 1 / 3, 0.5, 2 / 3, 2 / 3, 5 / 6, 1]).max() < 1e-14
