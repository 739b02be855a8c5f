import numpy
from dgfct.utils import timeit
from dgfct.discretization import TensorProductElement, get_quadrature_rule, element_quadrature_order
from dgfct.discretization.assembly import element_convection_block


def subcell_dofs_table(order, dim):
    """
    Element local dof of each subcell dof, shape (order^dim, 2^dim). The
    subcells and the Q1 dofs of each subcell are both numbered
    lexicographically with x fastest
    """
    p = order
    m = numpy.arange(p ** dim)[:, None]
    j = numpy.arange(2 ** dim)[None, :]
    table = numpy.zeros((p ** dim, 2 ** dim), dtype=int)
    for a in range(dim):
        node = (m // p ** a) % p + (j // 2 ** a) % 2
        table += node * (p + 1) ** a
    return table


class SubcellTables(object):
    @timeit
    def __init__(self, space, velocity):
        """
        Decomposition of each element in order^dim subcells with a Q1
        basis on each subcell, and the subcell fluctuations

            fluct[k, m, j] = -int_{S_m} v.grad psi_j dx

        computed on the uniformly refined mesh
        """
        mesh, el = space.mesh, space.element
        p, dim = el.order, mesh.dim
        self.num_subcells = p ** dim
        self.dofs_per_subcell = 2 ** dim
        self.subcell_dofs = subcell_dofs_table(p, dim)

        refined = mesh.refined(p)
        q1 = TensorProductElement(dim, 1, 'Positive')
        rule = get_quadrature_rule(dim, element_quadrature_order(space))
        phi = q1.shape(rule.points)
        dphi = q1.dshape(rule.points)

        # A constant test function sums the rows of the Q1 element matrix
        self.fluct = numpy.zeros((mesh.num_elements, self.num_subcells, self.dofs_per_subcell))
        for k in range(mesh.num_elements):
            for m in range(self.num_subcells):
                r = mesh.subcell_index(k, m, p)
                block = element_convection_block(refined, velocity, r, rule, phi, dphi)
                self.fluct[k, m] = block.sum(axis=0)
