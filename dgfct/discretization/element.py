from math import comb
import numpy
from numpy.polynomial import Polynomial
from dgfct.utils import verify_key


BASIS_TYPES = ('Positive', 'Lagrange')


def bernstein_polynomials(order):
    """
    The Bernstein polynomials of the given order on [0, 1]
    """
    x = Polynomial([0.0, 1.0])
    return [comb(order, i) * x ** i * (1 - x) ** (order - i) for i in range(order + 1)]


def lagrange_polynomials(order):
    """
    The Lagrange polynomials for equispaced nodes on [0, 1]
    """
    if order == 0:
        return [Polynomial([1.0])]
    nodes = numpy.linspace(0, 1, order + 1)
    polys = []
    for i, xi in enumerate(nodes):
        others = numpy.delete(nodes, i)
        polys.append(Polynomial.fromroots(others) / numpy.prod(xi - others))
    return polys


class TensorProductElement(object):
    def __init__(self, dim, order, basis='Positive'):
        """
        A discontinuous tensor product element on the reference cell
        [0, 1]^dim with (order + 1)^dim dofs in lexicographic order,
        x running fastest

        The faces are numbered 2*a (coordinate a is 0) and 2*a + 1
        (coordinate a is 1) for each axis a. The face dofs of opposite
        faces are listed in the same tangential order, so the j-th dof
        on face f of one element matches the j-th dof on face f ^ 1 of
        the neighbour across that face
        """
        verify_key('basis type', basis, BASIS_TYPES, 'TensorProductElement')
        self.dim = dim
        self.order = order
        self.basis_type = basis
        self.num_dofs = (order + 1) ** dim
        self.num_faces = 2 * dim

        if basis == 'Positive':
            self._basis_1d = bernstein_polynomials(order)
        else:
            self._basis_1d = lagrange_polynomials(order)
        self._dbasis_1d = [b.deriv() for b in self._basis_1d]

        # Multi index of each dof, x fastest
        dofs = numpy.arange(self.num_dofs)
        index = [(dofs // (order + 1) ** a) % (order + 1) for a in range(dim)]
        self.multi_index = numpy.array(index, dtype=int).T.reshape(self.num_dofs, dim)

        if order == 0:
            self.nodes = numpy.full((1, dim), 0.5)
        else:
            self.nodes = self.multi_index / float(order)

        # Face 2a is the low side and face 2a + 1 the high side of axis a
        face_dofs = [numpy.nonzero(self.multi_index[:, f // 2] == (order if f % 2 else 0))[0]
                     for f in range(self.num_faces)]
        self.face_dofs = numpy.array(face_dofs, dtype=int).reshape(self.num_faces, -1)
        self.num_face_dofs = self.face_dofs.shape[1] if self.num_faces else 0

    def _tabulate_1d(self, polys, coords):
        return numpy.array([p(coords) for p in polys]).T

    def shape(self, points):
        """
        Values of all basis functions at the given reference points,
        returns an array with shape (num_points, num_dofs)
        """
        points = numpy.asarray(points, dtype=float).reshape(-1, self.dim)
        mi = self.multi_index
        vals = numpy.ones((len(points), self.num_dofs))
        for a in range(self.dim):
            vals *= self._tabulate_1d(self._basis_1d, points[:, a])[:, mi[:, a]]
        return vals

    def dshape(self, points):
        """
        Reference gradients of all basis functions at the given reference
        points, returns an array with shape (num_points, num_dofs, dim)
        """
        points = numpy.asarray(points, dtype=float).reshape(-1, self.dim)
        mi = self.multi_index
        vals1d = [self._tabulate_1d(self._basis_1d, points[:, a])[:, mi[:, a]] for a in range(self.dim)]
        dvals1d = [self._tabulate_1d(self._dbasis_1d, points[:, a])[:, mi[:, a]] for a in range(self.dim)]

        grads = numpy.ones((len(points), self.num_dofs, self.dim))
        for a in range(self.dim):
            for b in range(self.dim):
                grads[:, :, a] *= dvals1d[b] if a == b else vals1d[b]
        return grads

    def face_points(self, face, points):
        """
        Map points on the reference face, shape (num_points, dim - 1),
        to reference coordinates of this element on the given face
        """
        axis, high = divmod(face, 2)
        points = numpy.asarray(points, dtype=float)
        fixed = numpy.full((len(points), 1), float(high))
        return numpy.hstack([points[:, :axis], fixed, points[:, axis:]])

    def face_normal(self, face):
        """
        The outward unit normal of the given face. Affine tensor product
        cells keep the reference normal direction
        """
        axis, high = divmod(face, 2)
        n = numpy.zeros(self.dim)
        n[axis] = 1.0 if high else -1.0
        return n

    def __repr__(self):
        return '<TensorProductElement dim=%d order=%d basis=%s>' % (self.dim, self.order,
                                                                    self.basis_type)
