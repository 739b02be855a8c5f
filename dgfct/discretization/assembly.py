"""
Assembly of the DG upwind weak form of the advection equation

    M du/dt = K u + b

on structured meshes. The face terms use the upwind flux, with
vn = min(0, v.n) on the inflow side of each face. The nonzero graph of K
is structurally symmetric: a face block is always stored in both
directions, also where the upwind weight makes one of them zero
"""
import numpy
import scipy.sparse
from dgfct.utils import timeit
from .quadrature import get_quadrature_rule


def element_quadrature_order(space, extra=2):
    return 2 * space.order + extra


class _Triplets(object):
    def __init__(self):
        self.rows = []
        self.cols = []
        self.vals = []

    def add_block(self, dofs_i, dofs_j, block):
        self.rows.append(numpy.repeat(dofs_i, len(dofs_j)))
        self.cols.append(numpy.tile(dofs_j, len(dofs_i)))
        self.vals.append(numpy.asarray(block, dtype=float).ravel())

    def tocsr(self, n):
        if not self.rows:
            return scipy.sparse.csr_matrix((n, n))
        rows = numpy.concatenate(self.rows)
        cols = numpy.concatenate(self.cols)
        vals = numpy.concatenate(self.vals)
        A = scipy.sparse.coo_matrix((vals, (rows, cols)), shape=(n, n)).tocsr()
        A.sort_indices()
        return A


@timeit
def assemble_mass(space):
    """
    The consistent (block diagonal) DG mass matrix
    """
    mesh, el = space.mesh, space.element
    rule = get_quadrature_rule(mesh.dim, element_quadrature_order(space))
    phi = el.shape(rule.points)
    Mref = phi.T.dot(rule.weights[:, None] * phi)

    trip = _Triplets()
    for k in range(mesh.num_elements):
        dofs = space.cell_dofs(k)
        trip.add_block(dofs, dofs, mesh.det_jacobian(k) * Mref)
    return trip.tocsr(space.dim())


def element_convection_block(mesh, velocity, k, rule, phi, dphi):
    """
    The element matrix -int (v.grad phi_j) phi_i dx for element k
    """
    x = mesh.transform(k, rule.points)
    v = velocity(x)
    Jinv = numpy.linalg.inv(mesh.jacobian(k))
    grad = numpy.einsum('qja,ab->qjb', dphi, Jinv)
    vgrad = numpy.einsum('qjb,qb->qj', grad, v)
    wphi = phi * (rule.weights * mesh.det_jacobian(k))[:, None]
    return -wphi.T.dot(vgrad)


@timeit
def assemble_convection(space, velocity, include_faces=True):
    """
    The convection matrix K with element terms and, optionally, the
    upwind face terms. Without face terms this is the element-only
    convection (fluctuation) matrix
    """
    mesh, el = space.mesh, space.element
    rule = get_quadrature_rule(mesh.dim, element_quadrature_order(space))
    phi = el.shape(rule.points)
    dphi = el.dshape(rule.points)

    trip = _Triplets()
    for k in range(mesh.num_elements):
        dofs = space.cell_dofs(k)
        trip.add_block(dofs, dofs, element_convection_block(mesh, velocity, k, rule, phi, dphi))

    if include_faces:
        for fd in iter_face_data(space, velocity):
            if fd.dofs2 is None:
                trip.add_block(fd.dofs1, fd.dofs1, fd.wphi1(fd.inflow1).T.dot(fd.phi1))
                continue
            # Both directions are stored so the graph of K is symmetric
            sides = [(fd.dofs1, fd.phi1, fd.dofs2, fd.phi2, fd.inflow1),
                     (fd.dofs2, fd.phi2, fd.dofs1, fd.phi1, fd.inflow2)]
            for dofs_a, phi_a, dofs_b, phi_b, inflow_a in sides:
                wphi = phi_a * (fd.wJ * inflow_a)[:, None]
                trip.add_block(dofs_a, dofs_a, wphi.T.dot(phi_a))
                trip.add_block(dofs_a, dofs_b, -wphi.T.dot(phi_b))

    return trip.tocsr(space.dim())


@timeit
def assemble_inflow(space, velocity, inflow):
    """
    The inflow vector b_i = -int vn g phi_i ds on the non-periodic
    domain boundary
    """
    b = numpy.zeros(space.dim())
    for fd in iter_face_data(space, velocity, boundary_only=True):
        g = inflow(fd.x)
        b[fd.dofs1] -= fd.wphi1(fd.inflow1).T.dot(g)
    return b


class FaceData(object):
    def __init__(self, face, x, wJ, vn, dofs1, phi1, dofs2=None, phi2=None):
        """
        Quadrature data on one face, seen from the low side element. The
        basis values are restricted to the face dofs of each element
        """
        self.face = face
        self.x = x
        self.wJ = wJ
        self.vn = vn
        self.inflow1 = numpy.minimum(0.0, vn)
        self.inflow2 = numpy.minimum(0.0, -vn)
        self.dofs1 = dofs1
        self.phi1 = phi1
        self.dofs2 = dofs2
        self.phi2 = phi2

    def wphi1(self, weight):
        return self.phi1 * (self.wJ * weight)[:, None]


def face_quadrature_rule(space):
    return get_quadrature_rule(space.mesh.dim - 1, element_quadrature_order(space))


def iter_face_data(space, velocity, boundary_only=False):
    mesh, el = space.mesh, space.element
    rule = face_quadrature_rule(space)
    for face in mesh.faces:
        if boundary_only and face.elem2 >= 0:
            continue
        pts1 = el.face_points(face.face1, rule.points)
        x = mesh.transform(face.elem1, pts1)
        vn = velocity(x).dot(el.face_normal(face.face1))
        wJ = rule.weights * mesh.face_measure(face.face1)
        fd1 = el.face_dofs[face.face1]
        dofs1 = space.cell_dofs(face.elem1)[fd1]
        phi1 = el.shape(pts1)[:, fd1]
        if face.elem2 < 0:
            yield FaceData(face, x, wJ, vn, dofs1, phi1)
        else:
            pts2 = el.face_points(face.face2, rule.points)
            fd2 = el.face_dofs[face.face2]
            dofs2 = space.cell_dofs(face.elem2)[fd2]
            phi2 = el.shape(pts2)[:, fd2]
            yield FaceData(face, x, wJ, vn, dofs1, phi1, dofs2, phi2)
