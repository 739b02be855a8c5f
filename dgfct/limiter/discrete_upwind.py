import numpy
from dgfct.utils import build_symmetry_map, timeit
from . import register_low_order_scheme, LowOrderScheme


def compute_discrete_upwinding_matrix(K, smap=None):
    """
    The artificial diffusion operator D with the nonzero pattern of K:
    d_ij = d_ji = max(0, -k_ij, -k_ji) off the diagonal and zero row sums.
    K + D then has non-negative off diagonal entries and the row sums of K
    """
    if smap is None:
        smap = build_symmetry_map(K)
    nrow = K.shape[0]
    rows = numpy.repeat(numpy.arange(nrow), numpy.diff(K.indptr))
    offdiag = K.indices != rows

    D = K.copy()
    D.data = numpy.where(offdiag, numpy.maximum(0.0, numpy.maximum(-K.data, -K.data[smap])), 0.0)
    rowsums = numpy.bincount(rows, weights=D.data, minlength=nrow)
    diag = numpy.nonzero(~offdiag)[0]
    D.data[diag] = -rowsums[rows[diag]]
    return D


@register_low_order_scheme('DiscreteUpwind')
class DiscreteUpwind(LowOrderScheme):
    description = 'Algebraic upwinding, K + D with D from the symmetric part of K'

    @timeit
    def precompute(self):
        builder = self.builder
        if builder.flux_lumping:
            # The face terms are added by flux lumping
            base = builder.element_convection_matrix()
            self.boundary_flux = builder.boundary_flux_tensors()
        else:
            base = builder.K
            self.boundary_flux = None

        self.smap = build_symmetry_map(base)
        self.D = compute_discrete_upwinding_matrix(base, self.smap)
        self.KpD = base.copy()
        self.KpD.data = base.data + self.D.data

    @timeit
    def evaluate(self, x, b, bounds=None):
        y = self.KpD.dot(x) + b
        if self.boundary_flux is not None:
            alpha = numpy.zeros(self.builder.space.num_dofs_per_element)
            for k in range(self.builder.space.num_elements):
                self.boundary_flux.lump_flux_terms(k, x, y, alpha)
        return y / self.builder.lumped_mass
