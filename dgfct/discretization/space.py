import numpy
from .element import TensorProductElement
from .quadrature import get_quadrature_rule


class DGFunctionSpace(object):
    def __init__(self, mesh, order, basis='Positive'):
        """
        Discontinuous Galerkin space on a structured mesh. Element k
        owns the contiguous global dofs k*nd ... k*nd + nd - 1
        """
        self.mesh = mesh
        self.element = TensorProductElement(mesh.dim, order, basis)
        self.order = order
        self.num_dofs_per_element = self.element.num_dofs
        self.num_elements = mesh.num_elements

    def dim(self):
        "Total number of dofs"
        return self.num_elements * self.num_dofs_per_element

    def cell_dofs(self, k):
        nd = self.num_dofs_per_element
        return numpy.arange(k * nd, (k + 1) * nd)

    def tabulate_dof_coordinates(self):
        """
        Physical coordinates of the nodes of all dofs, shape (ndofs, dim)
        """
        coords = numpy.zeros((self.dim(), self.mesh.dim))
        for k in range(self.num_elements):
            coords[self.cell_dofs(k)] = self.mesh.transform(k, self.element.nodes)
        return coords

    def interpolate(self, func):
        """
        Set each coefficient to the value of func(points) -> values at
        the node of the dof. For the Bernstein basis this is the positive
        projection, the result stays within the range of func
        """
        return numpy.asarray(func(self.tabulate_dof_coordinates()), dtype=float)

    def project(self, func, quadrature_order=None):
        """
        L2 projection of func(points) -> values onto the space, computed
        element by element
        """
        if quadrature_order is None:
            quadrature_order = 2 * self.order + 4
        rule = get_quadrature_rule(self.mesh.dim, quadrature_order)
        phi = self.element.shape(rule.points)
        Mref = phi.T.dot(rule.weights[:, None] * phi)
        Minv = numpy.linalg.inv(Mref)

        u = numpy.zeros(self.dim())
        for k in range(self.num_elements):
            vals = func(self.mesh.transform(k, rule.points))
            u[self.cell_dofs(k)] = Minv.dot(phi.T.dot(rule.weights * vals))
        return u

    def __repr__(self):
        return '<DGFunctionSpace %r %r>' % (self.mesh, self.element)
